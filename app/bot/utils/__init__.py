# app/bot/utils/__init__.py
"""Инициализация утилит."""

from .text import escape_html, notices_text, truncate

__all__ = [
    "escape_html",
    "notices_text",
    "truncate",
]
