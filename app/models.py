# app/models.py
"""
📊 МОДЕЛИ ДАННЫХ (Pydantic)

Здесь нет таблиц БД: заказ живёт только пока идёт одна отправка.
- MenuItem (позиция каталога)
- OrderItem / CustomerInfo / OrderPayload (то что уходит в шлюз)
- PaymentProof (скриншот оплаты)
"""

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum as PyEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

PAYMENT_METHOD = "bank_transfer"

# Один лимит на весь проект (мастер и шлюз)
MAX_PROOF_SIZE = 5 * 1024 * 1024


# ==========================================
# ENUMS
# ==========================================

class Language(str, PyEnum):
    EN = "en"
    AM = "am"
    AR = "ar"


class Category(str, PyEnum):
    CAKES = "cakes"
    PASTRIES = "pastries"
    CATERING = "catering"
    ICECREAM = "icecream"


# ==========================================
# MENU ITEM (позиция каталога)
# ==========================================

class MenuItem(BaseModel):
    """Позиция меню. Создаётся при импорте и больше не меняется."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: Dict[Language, str]
    description: Dict[Language, str]
    price: float = Field(..., ge=0)
    category: Category
    image: str

    def localized_name(self, lang: Language = Language.EN) -> str:
        return self.name.get(lang) or self.name[Language.EN]

    def localized_description(self, lang: Language = Language.EN) -> str:
        return self.description.get(lang) or self.description[Language.EN]


# ==========================================
# ORDER (то что отправляем в шлюз)
# ==========================================

class OrderItem(BaseModel):
    id: str
    quantity: int = Field(..., gt=0)


class CustomerInfo(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    delivery_date: Optional[date] = Field(None, alias="deliveryDate")

    model_config = ConfigDict(populate_by_name=True)


class OrderPayload(BaseModel):
    """
    Заказ в том виде, в каком его ждёт шлюз.

    Сериализуется с camelCase ключами (deliveryDate, paymentMethod),
    как их отправлял сайт.
    """

    model_config = ConfigDict(populate_by_name=True)

    items: List[OrderItem]
    customer: CustomerInfo
    payment_method: str = Field(PAYMENT_METHOD, alias="paymentMethod")
    total: float = 0
    timestamp: str

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ==========================================
# PAYMENT PROOF (скриншот оплаты)
# ==========================================

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


class ProofDecodeError(ValueError):
    """Data URL не удалось разобрать."""


@dataclass(frozen=True)
class PaymentProof:
    """Картинка с подтверждением оплаты."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return (self.content_type or "").startswith("image/")

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"

    @classmethod
    def from_data_url(cls, data_url: str, filename: str = "screenshot") -> "PaymentProof":
        match = _DATA_URL_RE.match(data_url.strip())
        if not match:
            raise ProofDecodeError("not a base64 data URL")
        try:
            data = base64.b64decode(match.group("data"), validate=False)
        except (binascii.Error, ValueError) as e:
            raise ProofDecodeError(str(e)) from e
        content_type = match.group("mime") or "application/octet-stream"
        return cls(filename=filename, content_type=content_type, data=data)
