"""
🤖 BOT HANDLERS (обработчики команд)

Порядок важен: сначала общие команды (/cancel должен ловиться в любом
состоянии), потом мастер заказа, в самом конце - ловушка.
"""

from aiogram import Router

from .common import fallback_router
from .common import router as common_router
from .order import router as order_router


def build_router() -> Router:
    main_router = Router()
    main_router.include_router(common_router)
    main_router.include_router(order_router)
    main_router.include_router(fallback_router)
    return main_router


__all__ = ["build_router"]
