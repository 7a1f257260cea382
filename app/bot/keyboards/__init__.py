"""Инициализация клавиатур."""

from .order import (
    back_keyboard,
    items_keyboard,
    main_menu_keyboard,
    navigation_keyboard,
    proof_keyboard,
)

__all__ = [
    "back_keyboard",
    "items_keyboard",
    "main_menu_keyboard",
    "navigation_keyboard",
    "proof_keyboard",
]
