# app/bot/middlewares/logging.py
"""
Middleware для логирования всех событий витринного бота.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message
import structlog

logger = structlog.get_logger()


class LoggingMiddleware(BaseMiddleware):
    """Логирует сообщение или нажатие кнопки, затем передаёт обработчику."""

    async def __call__(
        self,
        handler: Callable[[Message | CallbackQuery, dict[str, Any]], Awaitable[Any]],
        event: Message | CallbackQuery,
        data: dict[str, Any]
    ) -> Any:
        if isinstance(event, Message):
            logger.info(
                "message_received",
                user_id=event.from_user.id if event.from_user else None,
                username=event.from_user.username if event.from_user else None,
                text=event.text[:50] if event.text else "[media]",
                has_photo=bool(event.photo),
            )
        elif isinstance(event, CallbackQuery):
            logger.info(
                "callback_received",
                user_id=event.from_user.id,
                callback_data=event.data
            )

        return await handler(event, data)
