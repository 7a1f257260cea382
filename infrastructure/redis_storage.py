# infrastructure/redis_storage.py
"""
🔴 REDIS STORAGE

Redis хранит состояния пользователей (FSM) витринного бота.
Мастер заказа (корзина, данные клиента) живёт в FSM data,
поэтому без Redis он теряется при перезагрузке бота.

Если REDIS_URL не задан - используем MemoryStorage (локальная разработка).
"""

from typing import Optional

from aiogram.fsm.storage.base import BaseStorage
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage
from redis.asyncio.client import Redis

from infrastructure.logger import logger


def build_storage(redis_url: Optional[str]) -> BaseStorage:
    """Redis если он настроен, иначе память."""

    if not redis_url:
        logger.warning("redis_not_configured", message="⚠️ REDIS_URL пуст, используем MemoryStorage")
        return MemoryStorage()

    redis = Redis.from_url(redis_url)
    logger.info("redis_storage_ready", redis_url=redis_url.split("@")[-1])
    return RedisStorage(redis=redis)


async def check_redis_connection(storage: BaseStorage) -> bool:
    """
    Проверяет что Redis живой и отвечает.
    Для MemoryStorage всегда True.
    """

    if not isinstance(storage, RedisStorage):
        return True

    try:
        await storage.redis.ping()
        return True
    except Exception as e:
        logger.error("redis_connection_error", error=str(e))
        return False


__all__ = [
    "build_storage",
    "check_redis_connection",
]
