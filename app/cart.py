# app/cart.py
"""
🛒 КОРЗИНА

Корзина = упорядоченный список строк (item_id, quantity).
Строка с нулевым количеством не хранится - она удаляется.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import structlog

from app.catalog import price_of
from app.models import MenuItem, OrderItem

logger = structlog.get_logger()


@dataclass
class CartLine:
    item_id: str
    quantity: int


class Cart:
    """Корзина в памяти. Сумма считается по ценам каталога."""

    def __init__(
        self,
        lines: Iterable[CartLine] = (),
        price_lookup: Callable[[str], Optional[float]] = price_of,
    ):
        self._lines: List[CartLine] = []
        self._price_lookup = price_lookup
        for line in lines:
            if line.quantity <= 0:
                continue
            existing = self._find(line.item_id)
            if existing:
                existing.quantity += line.quantity
            else:
                self._lines.append(CartLine(line.item_id, line.quantity))

    @property
    def lines(self) -> List[CartLine]:
        return [CartLine(line.item_id, line.quantity) for line in self._lines]

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def _find(self, item_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.item_id == item_id:
                return line
        return None

    def quantity_of(self, item_id: str) -> int:
        """0 если позиции нет в корзине."""
        line = self._find(item_id)
        return line.quantity if line else 0

    def add_or_increment(self, item: MenuItem) -> None:
        """Кнопка "в корзину" на карточке меню."""
        line = self._find(item.id)
        if line:
            line.quantity += 1
        else:
            self._lines.append(CartLine(item.id, 1))

    def update_quantity(self, item_id: str, delta: int) -> None:
        """
        Кнопки +/- в мастере заказа.

        - если получилось <= 0, строка удаляется
        - если строки не было и delta > 0, появляется строка с количеством 1
        """
        line = self._find(item_id)
        if line is None:
            if delta > 0:
                self._lines.append(CartLine(item_id, 1))
            return

        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            self._lines.remove(line)
        else:
            line.quantity = new_quantity

    def unknown_items(self) -> List[str]:
        """Id, которых нет в каталоге (в сумму они идут по нулевой цене)."""
        return [line.item_id for line in self._lines if self._price_lookup(line.item_id) is None]

    def total(self) -> float:
        """Сумма qty * цена по каталогу."""
        total = 0.0
        for line in self._lines:
            price = self._price_lookup(line.item_id)
            if price is None:
                # Неизвестная позиция считается по нулевой цене
                logger.warning("cart_unknown_item", item_id=line.item_id, quantity=line.quantity)
                continue
            total += price * line.quantity
        return total

    def total_quantity(self) -> int:
        """Сколько штук всего (счётчик на кнопке корзины)."""
        return sum(line.quantity for line in self._lines)

    def clear(self) -> None:
        self._lines.clear()

    def to_order_items(self) -> List[OrderItem]:
        """Строки корзины в формате заказа для шлюза."""
        return [OrderItem(id=line.item_id, quantity=line.quantity) for line in self._lines]

    def to_list(self) -> List[dict]:
        """Для хранения в FSM data."""
        return [{"itemId": line.item_id, "qty": line.quantity} for line in self._lines]

    @classmethod
    def from_list(cls, raw: Iterable[dict]) -> "Cart":
        return cls(CartLine(str(entry["itemId"]), int(entry["qty"])) for entry in raw)

    def __len__(self) -> int:
        return len(self._lines)
