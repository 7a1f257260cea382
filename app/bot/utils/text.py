# app/bot/utils/text.py
"""Тексты сообщений витринного бота (HTML разметка)."""

from html import escape
from typing import Iterable

from app.cart import Cart
from app.catalog import get_item, items_by_category
from app.models import Category, Language
from app.wizard import Notice, NoticeLevel, OrderWizard

NOTICE_ICONS = {
    NoticeLevel.SUCCESS: "✅",
    NoticeLevel.WARNING: "⚠️",
    NoticeLevel.ERROR: "❌",
}

CATEGORY_TITLES = {
    Category.CAKES: "🎂 Cakes",
    Category.PASTRIES: "🥐 Pastries",
    Category.CATERING: "🍽 Catering",
    Category.ICECREAM: "🍨 Ice cream",
}


def escape_html(text: str) -> str:
    return escape(text, quote=False)


def truncate(text: str, limit: int = 50) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def notice_text(notice: Notice) -> str:
    return f"{NOTICE_ICONS[notice.level]} {notice.text}"


def notices_text(notices: Iterable[Notice]) -> str:
    return "\n".join(notice_text(n) for n in notices)


def menu_text(lang: Language = Language.EN) -> str:
    lines = ["<b>📋 Our menu</b>"]
    for category in Category:
        items = items_by_category(category)
        if not items:
            continue
        lines.append("")
        lines.append(f"<b>{CATEGORY_TITLES[category]}</b>")
        for item in items:
            lines.append(
                f"• {escape_html(item.localized_name(lang))} - ${item.price:g}\n"
                f"  <i>{escape_html(item.localized_description(lang))}</i>"
            )
    return "\n".join(lines)


def cart_text(cart: Cart, lang: Language = Language.EN) -> str:
    if cart.is_empty:
        return "Your cart is empty."
    lines = []
    for line in cart.lines:
        item = get_item(line.item_id)
        name = item.localized_name(lang) if item else line.item_id
        lines.append(f"• {escape_html(name)} × {line.quantity}")
    lines.append(f"\n🛒 Items: {cart.total_quantity()}")
    lines.append(f"<b>Total: ${cart.total():g}</b>")
    return "\n".join(lines)


def items_step_text(wizard: OrderWizard) -> str:
    return (
        "<b>Step 1/5 · Choose your treats</b>\n\n"
        f"{cart_text(wizard.cart)}"
    )


def payment_step_text(wizard: OrderWizard, instructions: str) -> str:
    return (
        "<b>Step 3/5 · Payment</b>\n\n"
        f"{escape_html(instructions)}\n\n"
        f"<b>Amount: ${wizard.cart.total():g}</b>"
    )


def proof_step_text(wizard: OrderWizard) -> str:
    text = "<b>Step 4/5 · Payment proof</b>\n\n"
    if wizard.proof:
        size_mb = wizard.proof.size / 1024 / 1024
        text += f"📎 File selected: {escape_html(truncate(wizard.proof.filename, 40))} ({size_mb:.2f} MB)"
    elif wizard.proof_required:
        text += "Send a photo of your payment screenshot."
    else:
        text += "Send a photo of your payment screenshot, or finish without it."
    return text


def confirmation_text(phone: str) -> str:
    return (
        "<b>🎉 Thank you!</b>\n\n"
        "Munira has received your order and will contact you shortly "
        f"at {escape_html(phone)}"
    )
