# infrastructure/__init__.py
"""Инфраструктура приложения."""

from .logger import logger, setup_logging
from .redis_storage import build_storage, check_redis_connection

__all__ = [
    "logger",
    "setup_logging",
    "build_storage",
    "check_redis_connection",
]
