# app/gateway/formatting.py
"""
Тексты сообщений для чата оператора.

Все поля берутся из заказа "как есть" (это dict, пришедший от клиента),
поэтому любое поле может отсутствовать - вместо него подставляется заглушка.
"""

import re
from datetime import datetime
from typing import Any, Mapping, Optional

NOT_PROVIDED = "Not provided"
DEFAULT_ITEM = "Item"
USER_AGENT_LIMIT = 200

# Зарезервированные символы MarkdownV2
MARKDOWN_RESERVED = "_*[]()~`>#+-=|{}.!"
# Плюс сам обратный слэш: в MarkdownV2 он тоже должен быть экранирован
_MARKDOWN_RE = re.compile("([" + re.escape("\\" + MARKDOWN_RESERVED) + "])")


def escape_markdown(text: str) -> str:
    """Каждый зарезервированный символ получает ровно один обратный слэш."""
    return _MARKDOWN_RE.sub(r"\\\1", text)


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any, default: str = NOT_PROVIDED) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def format_amount(value: Any) -> str:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return "0"
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


def _quantity(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def format_order_time(order: Mapping[str, Any], now: Optional[datetime] = None) -> str:
    raw = order.get("timestamp")
    if isinstance(raw, str) and raw.strip():
        try:
            return datetime.fromisoformat(raw.strip().replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            return raw.strip()
    return (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def format_order_message(order: Mapping[str, Any], markdown: bool = True, now: Optional[datetime] = None) -> str:
    customer = _mapping(order.get("customer"))
    items = order.get("items")
    if not isinstance(items, list):
        items = []

    lines = [
        "🎂 NEW ORDER RECEIVED! 🎂",
        "",
        "CUSTOMER DETAILS:",
        f"👤 Name: {_text(customer.get('name'))}",
        f"📞 Phone: {_text(customer.get('phone'))}",
        f"📍 Address: {_text(customer.get('address'))}",
        f"📅 Delivery Date: {_text(customer.get('deliveryDate'))}",
        "",
        "ORDER ITEMS:",
    ]

    if not items:
        lines.append(NOT_PROVIDED)
    for index, raw_item in enumerate(items, start=1):
        item = _mapping(raw_item)
        lines.append(f"{index}. {_text(item.get('id'), DEFAULT_ITEM)} (Qty: {_quantity(item.get('quantity'))})")

    lines += [
        "",
        f"💰 Total Amount: ${format_amount(order.get('total'))}",
        f"💳 Payment Method: {_text(order.get('paymentMethod'))}",
        f"⏰ Order Time: {format_order_time(order, now)}",
    ]

    text = "\n".join(lines)
    return escape_markdown(text) if markdown else text


def format_fallback_message(order: Mapping[str, Any]) -> str:
    """Минимальный текст без разметки - если основное сообщение не ушло."""
    customer = _mapping(order.get("customer"))
    return (
        "🎂 NEW ORDER (simplified)\n\n"
        f"Name: {_text(customer.get('name'))}\n"
        f"Phone: {_text(customer.get('phone'))}\n"
        f"Total: ${format_amount(order.get('total'))}"
    )


def format_photo_caption(order: Optional[Mapping[str, Any]]) -> str:
    order = _mapping(order)
    customer = _mapping(order.get("customer"))
    total = format_amount(order["total"]) if order.get("total") is not None else "N/A"
    return (
        f"💰 Payment Screenshot for order from {_text(customer.get('name'), 'Customer')}\n"
        f"Total: ${total}"
    )


def format_parse_failure_alert(user_agent: Optional[str], content_type: Optional[str], now: Optional[datetime] = None) -> str:
    ua = _text(user_agent, "unknown")[:USER_AGENT_LIMIT]
    return (
        "⚠️ ORDER ATTEMPT FAILED TO PARSE\n\n"
        "Someone tried to place an order but the data could not be read.\n"
        f"Content-Type: {_text(content_type, 'unknown')}\n"
        f"User-Agent: {ua}\n"
        f"Time: {(now or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')}"
    )
