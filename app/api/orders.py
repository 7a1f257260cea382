# app/api/orders.py
"""
🌐 API ЗАКАЗОВ

- POST /api/order     - заказ без скриншота (строгий: 400 / 500 при ошибках)
- POST /api/upload    - заказ + скриншот в любой кодировке (всегда 200 success)
- POST /api/telegram  - переслать один заказ текстом
- GET  /api/menu      - каталог
"""

from typing import Any, Mapping, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import structlog

from app.catalog import items_by_category
from app.gateway import NotificationGateway
from app.gateway.service import NOT_CONFIGURED, SUCCESS_MESSAGE
from app.models import Category

logger = structlog.get_logger()
router = APIRouter(tags=["orders"])


def get_gateway(request: Request) -> NotificationGateway:
    """Шлюз создаётся один раз в create_app и живёт в app.state."""
    return request.app.state.gateway


def error_response(status_code: int, error: str) -> JSONResponse:
    """Ошибка строгих эндпоинтов: {"error": "..."} с нужным HTTP кодом."""
    return JSONResponse(status_code=status_code, content={"error": error})


def validate_order(order: Any) -> Optional[str]:
    """Проверка для /api/order. Возвращает текст ошибки или None."""
    if not isinstance(order, Mapping):
        return "Invalid order data"

    items = order.get("items")
    if not isinstance(items, list) or not items:
        return "No items in order"

    customer = order.get("customer")
    if not isinstance(customer, Mapping):
        return "Name and phone are required"
    name = customer.get("name")
    phone = customer.get("phone")
    if not (isinstance(name, str) and name.strip()) or not (isinstance(phone, str) and phone.strip()):
        return "Name and phone are required"
    return None


async def read_json(request: Request) -> Any:
    """Тело как JSON или None, если это не JSON."""
    try:
        return await request.json()
    except ValueError as e:
        logger.warning("invalid_json_body", path=request.url.path, error=str(e))
        return None


# ==========================================
# POST /api/order
# ==========================================

@router.post("/order")
async def create_order(request: Request, gateway: NotificationGateway = Depends(get_gateway)):
    """
    Заказ без скриншота.

    Пример тела:
        {
            "items": [{"id": "cake1", "quantity": 2}],
            "customer": {"name": "Ada", "phone": "0911111111", "deliveryDate": "2099-01-01"},
            "paymentMethod": "bank_transfer",
            "total": 40,
            "timestamp": "2026-10-19T09:30:00Z"
        }

    Ответы:
    - 200 {"success": true, "message": ..., "orderId": "123"}
    - 400 {"error": "No items in order"} / {"error": "Name and phone are required"}
    - 500 {"error": "Failed to send to Telegram: ..."}
    """
    order = await read_json(request)
    logger.info("order_api_received", order=order)

    problem = validate_order(order)
    if problem:
        logger.warning("order_validation_failed", reason=problem)
        return error_response(400, problem)

    if not gateway.configured:
        return {"success": True, "message": "Order received", "orderId": None, "warning": NOT_CONFIGURED}

    result = await gateway.relay_order(order)
    if not result.ok:
        return error_response(500, f"Failed to send to Telegram: {result.error}")

    return {"success": True, "message": SUCCESS_MESSAGE, "orderId": str(result.message_id)}


# ==========================================
# POST /api/upload
# ==========================================

@router.post("/upload")
async def upload_order(request: Request, gateway: NotificationGateway = Depends(get_gateway)):
    """
    Заказ со скриншотом: JSON {orderData, screenshot: dataURL},
    multipart (orderData строкой + файл screenshot) или что угодно,
    где в тексте есть "orderData": {...}.

    Всегда 200 {"success": true, ...}, подробности в orderSent /
    fallbackSent / imageSent / warning.
    """
    return await gateway.handle_upload(request)


# ==========================================
# POST /api/telegram
# ==========================================

@router.post("/telegram")
async def relay_to_telegram(request: Request, gateway: NotificationGateway = Depends(get_gateway)):
    """
    Переслать один заказ текстом.

    Пример тела: {"order": {...тот же формат что и /api/order...}}
    """
    payload = await read_json(request)
    order = payload.get("order") if isinstance(payload, Mapping) else None
    if not isinstance(order, Mapping):
        return error_response(400, "Missing order")

    if not gateway.configured:
        return {"success": True, "message": "Order received", "messageId": None, "warning": NOT_CONFIGURED}

    result = await gateway.relay_order(order)
    if not result.ok:
        return error_response(500, result.error or "Failed to process Telegram request")

    return {
        "success": True,
        "message": "Order sent to Telegram successfully",
        "messageId": result.message_id,
    }


# ==========================================
# GET /api/menu
# ==========================================

@router.get("/menu")
async def list_menu(category: str = "all"):
    """Каталог: /api/menu или /api/menu?category=cakes."""
    if category != "all" and category not in {c.value for c in Category}:
        return error_response(400, f"Unknown category: {category}")
    return [item.model_dump(mode="json") for item in items_by_category(category)]
