# app/api/__init__.py
"""
🌐 API ROUTES (маршруты FastAPI)

Сюда приходят заказы с сайта и из витринного бота.
"""

from app.api.app import create_app
from app.api.orders import router as orders_router

__all__ = ["create_app", "orders_router"]
