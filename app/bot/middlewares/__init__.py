# app/bot/middlewares/__init__.py
"""
🔄 MIDDLEWARE (перехватчики)

Срабатывают для КАЖДОГО сообщения и нажатия кнопки.
"""

from .logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
