# app/wizard.py
"""
🧙 МАСТЕР ЗАКАЗА

Линейный мастер из пяти шагов:
    1. Выбор позиций
    2. Данные клиента
    3. Реквизиты для оплаты
    4. Скриншот оплаты
    5. Подтверждение

Назад можно только на один шаг (со 2-4), вперёд только через validate_step().
Ошибки валидации не бросают исключений: мастер кладёт Notice в очередь
и остаётся на текущем шаге. UI (бот) сам забирает уведомления через drain_notices().
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum as PyEnum
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog
from pydantic import ValidationError

from app.cart import Cart
from app.client.environment import ClientEnvironment
from app.models import (
    MAX_PROOF_SIZE,
    PAYMENT_METHOD,
    CustomerInfo,
    OrderPayload,
    PaymentProof,
    ProofDecodeError,
)

logger = structlog.get_logger()

# Минимум 10 символов из цифр, пробелов и + - ( )
PHONE_PATTERN = re.compile(r"^[0-9\s()+\-]{10,}$")

NOTICE_TTL = 4.0


class WizardStep(IntEnum):
    ITEMS = 1
    CUSTOMER_INFO = 2
    PAYMENT_INSTRUCTIONS = 3
    PROOF_UPLOAD = 4
    CONFIRMATION = 5


class NoticeLevel(str, PyEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """Всплывающее уведомление, само исчезает через ttl секунд."""

    level: NoticeLevel
    text: str
    ttl: float = NOTICE_TTL


class OrderWizard:
    """
    Состояние одного оформления заказа.

    Пример:
        wizard = OrderWizard(cart)
        wizard.next_step()                 # 1 -> 2 если корзина не пуста
        wizard.set_customer(name="Ada", phone="0911111111")
        wizard.set_delivery_date("2099-01-01")
        wizard.next_step()                 # 2 -> 3
    """

    def __init__(
        self,
        cart: Optional[Cart] = None,
        environment: ClientEnvironment = ClientEnvironment.BROWSER,
        max_proof_bytes: int = MAX_PROOF_SIZE,
        today: Callable[[], date] = date.today,
    ):
        self.cart = cart if cart is not None else Cart()
        self.environment = environment
        self.max_proof_bytes = max_proof_bytes
        self._today = today

        self.step = WizardStep.ITEMS
        self.customer = CustomerInfo()
        self.proof: Optional[PaymentProof] = None
        self.notices: List[Notice] = []

    # ==========================================
    # УВЕДОМЛЕНИЯ
    # ==========================================

    def notify(self, text: str, level: NoticeLevel = NoticeLevel.ERROR) -> None:
        self.notices.append(Notice(level=level, text=text))

    def drain_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # ==========================================
    # ДАННЫЕ КЛИЕНТА
    # ==========================================

    def set_customer(self, **fields: Any) -> bool:
        """
        Обновляет только переданные поля (name, phone, address, delivery_date).

        Поля проходят валидацию CustomerInfo: дата строкой "2099-01-01"
        становится date, ключ deliveryDate тоже принимается.
        При ошибке клиент не меняется, в очередь кладётся Notice.
        """
        data = self.customer.model_dump(by_alias=True)
        for key, value in fields.items():
            info = CustomerInfo.model_fields.get(key)
            data[info.alias if info and info.alias else key] = value

        try:
            self.customer = CustomerInfo.model_validate(data)
        except ValidationError as e:
            logger.warning("wizard_customer_invalid", fields=sorted(fields), errors=e.error_count())
            self.notify("Please check your details", NoticeLevel.ERROR)
            return False
        return True

    def set_delivery_date(self, value: str) -> bool:
        try:
            parsed = date.fromisoformat(value.strip())
        except ValueError:
            self.notify("Please enter the date as YYYY-MM-DD", NoticeLevel.ERROR)
            return False
        return self.set_customer(delivery_date=parsed)

    def customer_problem(self) -> Optional[Tuple[str, str]]:
        """Первое невалидное поле клиента: (имя поля, текст ошибки) или None."""
        customer = self.customer
        if not customer.name.strip():
            return "name", "Please enter your name"
        if not customer.phone.strip():
            return "phone", "Please enter your phone number"
        if not PHONE_PATTERN.match(customer.phone.strip()):
            return "phone", "Please enter a valid phone number"
        if customer.delivery_date is None:
            return "delivery_date", "Please select a delivery date"
        if customer.delivery_date < self._today():
            return "delivery_date", "Delivery date cannot be in the past"
        return None

    @property
    def proof_required(self) -> bool:
        # Во встроенном браузере Telegram загрузка файла часто не работает
        return self.environment != ClientEnvironment.IN_APP

    # ==========================================
    # ВАЛИДАЦИЯ ШАГОВ
    # ==========================================

    def validate_step(self, step: Optional[WizardStep] = None) -> bool:
        step = WizardStep(step if step is not None else self.step)

        if step == WizardStep.ITEMS:
            if self.cart.is_empty:
                self.notify("Please select at least one item", NoticeLevel.WARNING)
                return False
            return True

        if step == WizardStep.CUSTOMER_INFO:
            problem = self.customer_problem()
            if problem:
                self.notify(problem[1], NoticeLevel.WARNING)
                return False
            return True

        if step == WizardStep.PROOF_UPLOAD:
            if self.proof is None and self.proof_required:
                self.notify("Please upload payment screenshot", NoticeLevel.WARNING)
                return False
            return True

        return True

    # ==========================================
    # ПЕРЕХОДЫ
    # ==========================================

    def next_step(self) -> bool:
        # С шага 4 дальше только через submit()
        if self.step >= WizardStep.PROOF_UPLOAD:
            return False
        if not self.validate_step(self.step):
            return False
        self.step = WizardStep(self.step + 1)
        return True

    def back_step(self) -> bool:
        if WizardStep.CUSTOMER_INFO <= self.step <= WizardStep.PROOF_UPLOAD:
            self.step = WizardStep(self.step - 1)
            return True
        return False

    def close(self) -> None:
        """Закрыть окно заказа = забыть всё."""
        self.cart.clear()
        self.customer = CustomerInfo()
        self.proof = None
        self.notices = []
        self.step = WizardStep.ITEMS

    # ==========================================
    # СКРИНШОТ ОПЛАТЫ
    # ==========================================

    def proof_problem(self, content_type: Optional[str], size: int) -> Optional[str]:
        """Проверка по метаданным, до скачивания файла."""
        if not (content_type or "").startswith("image/"):
            return "Please select an image file (JPEG, PNG, etc.)"
        if size > self.max_proof_bytes:
            return f"File size must be less than {self.max_proof_bytes // (1024 * 1024)}MB"
        return None

    def select_proof(self, proof: PaymentProof) -> bool:
        problem = self.proof_problem(proof.content_type, proof.size)
        if problem:
            self.notify(problem, NoticeLevel.ERROR)
            return False

        self.proof = proof
        self.notify("File selected successfully!", NoticeLevel.SUCCESS)
        return True

    def remove_proof(self) -> None:
        self.proof = None

    # ==========================================
    # ОТПРАВКА
    # ==========================================

    def build_order(self, now: Optional[datetime] = None) -> OrderPayload:
        now = now or datetime.now(timezone.utc)
        return OrderPayload(
            items=self.cart.to_order_items(),
            customer=self.customer,
            payment_method=PAYMENT_METHOD,
            total=self.cart.total(),
            timestamp=now.isoformat(),
        )

    async def submit(self, client) -> bool:
        """
        Отправляет заказ и в любом случае переходит на шаг 5.

        Возвращает False только если не прошла валидация шага 4
        (тогда отправки не было).
        """

        if self.step != WizardStep.PROOF_UPLOAD or not self.validate_step(WizardStep.PROOF_UPLOAD):
            return False

        order = self.build_order()
        logger.info("order_submitting", items=len(order.items), total=order.total, has_proof=self.proof is not None)

        try:
            outcome = await client.submit(order, self.proof, self.environment)
            warning = outcome.warning
        except Exception as e:
            logger.error("order_submit_error", error=str(e), error_type=type(e).__name__)
            warning = str(e) or type(e).__name__

        if warning:
            self.notify(warning, NoticeLevel.WARNING)
        else:
            self.notify("Order submitted successfully! Munira will contact you soon.", NoticeLevel.SUCCESS)

        self.step = WizardStep.CONFIRMATION
        return True

    # ==========================================
    # СОХРАНЕНИЕ В FSM
    # ==========================================

    def to_state(self) -> Dict[str, Any]:
        return {
            "step": int(self.step),
            "environment": self.environment.value,
            "cart": self.cart.to_list(),
            "customer": self.customer.model_dump(mode="json", by_alias=True),
            "proof": self.proof.to_data_url() if self.proof else None,
            "proofName": self.proof.filename if self.proof else None,
        }

    @classmethod
    def from_state(cls, data: Dict[str, Any], **kwargs: Any) -> "OrderWizard":
        kwargs.setdefault("environment", ClientEnvironment(data.get("environment", ClientEnvironment.BROWSER.value)))
        wizard = cls(cart=Cart.from_list(data.get("cart") or []), **kwargs)
        wizard.step = WizardStep(data.get("step", WizardStep.ITEMS))
        wizard.customer = CustomerInfo.model_validate(data.get("customer") or {})

        if data.get("proof"):
            try:
                wizard.proof = PaymentProof.from_data_url(data["proof"], filename=data.get("proofName") or "screenshot")
            except ProofDecodeError as e:
                logger.warning("wizard_proof_restore_failed", error=str(e))
        return wizard
