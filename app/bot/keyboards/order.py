# app/bot/keyboards/order.py
"""
Клавиатуры мастера заказа.

Все кнопки inline, callback_data в формате "<группа>:<действие>[:<id>]".
"""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from app.cart import Cart
from app.catalog import MENU_ITEMS
from app.models import Language


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🛒 Order now", callback_data="wizard:start")],
        [InlineKeyboardButton(text="📋 Menu", callback_data="menu:show")],
    ])


def items_keyboard(cart: Cart, lang: Language = Language.EN) -> InlineKeyboardMarkup:
    """
    Шаг 1: по строке на позицию меню.

    [ Chocolate Fudge Cake $20 ]
    [ − ] [ 2 ] [ + ]
    """
    rows = []
    for item in MENU_ITEMS:
        rows.append([
            InlineKeyboardButton(
                text=f"{item.localized_name(lang)} · ${item.price:g}",
                callback_data=f"cart:inc:{item.id}",
            )
        ])
        rows.append([
            InlineKeyboardButton(text="−", callback_data=f"cart:dec:{item.id}"),
            InlineKeyboardButton(text=str(cart.quantity_of(item.id)), callback_data="cart:noop"),
            InlineKeyboardButton(text="+", callback_data=f"cart:inc:{item.id}"),
        ])

    rows.append([
        InlineKeyboardButton(text="✖️ Cancel", callback_data="wizard:close"),
        InlineKeyboardButton(text="Next ➡️", callback_data="wizard:next"),
    ])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def navigation_keyboard(next_text: str = "Next ➡️") -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="⬅️ Back", callback_data="wizard:back"),
        InlineKeyboardButton(text=next_text, callback_data="wizard:next"),
    ]])


def back_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="⬅️ Back", callback_data="wizard:back"),
    ]])


def proof_keyboard(has_proof: bool, proof_required: bool) -> InlineKeyboardMarkup:
    """Шаг 4: отправка, удаление файла, пропуск (если скриншот не обязателен)."""
    rows = []
    if has_proof:
        rows.append([InlineKeyboardButton(text="🗑 Remove file", callback_data="proof:remove")])
    elif not proof_required:
        rows.append([InlineKeyboardButton(text="⏭ Send without screenshot", callback_data="wizard:submit")])

    rows.append([
        InlineKeyboardButton(text="⬅️ Back", callback_data="wizard:back"),
        InlineKeyboardButton(text="✅ Finish order", callback_data="wizard:submit"),
    ])
    return InlineKeyboardMarkup(inline_keyboard=rows)
