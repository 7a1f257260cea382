"""Шлюз уведомлений: разбор запроса, форматирование, пересылка в Telegram."""

from .relay import RelayResult, TelegramRelay
from .service import NotificationGateway

__all__ = [
    "NotificationGateway",
    "RelayResult",
    "TelegramRelay",
]
