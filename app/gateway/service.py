# app/gateway/service.py
"""
🔔 ШЛЮЗ УВЕДОМЛЕНИЙ

Принимает заказ в любой кодировке, форматирует его и пересылает
в чат оператора. Правило для /api/upload: клиент ВСЕГДА получает
{"success": true, ...}. Что пошло не так - видно в диагностических
полях ответа (orderSent, fallbackSent, imageSent, warning) и в логах.

Порядок вызовов Telegram (последовательно, без повторов):
1. Текст заказа (если не ушёл - один упрощённый текст без разметки)
2. Скриншот оплаты (пробуем даже если текст не ушёл)
"""

from typing import Any, Dict, Mapping, Optional

import structlog
from starlette.requests import Request

from app.gateway.formatting import (
    format_fallback_message,
    format_order_message,
    format_parse_failure_alert,
    format_photo_caption,
)
from app.gateway.parsers import RecoveredRequest, recover_request
from app.gateway.relay import RelayResult, TelegramRelay
from app.models import MAX_PROOF_SIZE, PaymentProof
from config.settings import RelayConfig

logger = structlog.get_logger()

NOT_CONFIGURED = "Telegram not configured"
SUCCESS_MESSAGE = "Order submitted successfully!"


class NotificationGateway:
    """
    Пример:
        gateway = NotificationGateway(RelayConfig.from_settings(config))
        envelope = await gateway.handle_upload(request)
    """

    def __init__(
        self,
        relay_config: RelayConfig,
        relay: Optional[TelegramRelay] = None,
        max_proof_bytes: int = MAX_PROOF_SIZE,
    ):
        self.relay_config = relay_config
        self.max_proof_bytes = max_proof_bytes

        if relay is None and relay_config.is_configured:
            relay = TelegramRelay(relay_config)
        self.relay = relay

        if self.relay is None:
            logger.warning(
                "telegram_not_configured",
                message="⚠️ TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID не заданы, заказы будут только в логах",
            )

    @property
    def configured(self) -> bool:
        return self.relay is not None

    # ==========================================
    # ОТДЕЛЬНЫЕ ОТПРАВКИ
    # ==========================================

    async def relay_order(self, order: Mapping[str, Any]) -> RelayResult:
        """Одно отформатированное сообщение с заказом."""
        if not self.configured:
            return RelayResult.failed(NOT_CONFIGURED)
        text = format_order_message(order, markdown=self.relay_config.markdown)
        return await self.relay.send_text(text, parse_mode=self.relay_config.parse_mode)

    async def relay_fallback(self, order: Mapping[str, Any]) -> RelayResult:
        if not self.configured:
            return RelayResult.failed(NOT_CONFIGURED)
        return await self.relay.send_text(format_fallback_message(order), parse_mode=None)

    def check_proof(self, proof: PaymentProof) -> Optional[str]:
        if not proof.is_image:
            return "Only images allowed"
        if proof.size > self.max_proof_bytes:
            return f"File too large (max {self.max_proof_bytes // (1024 * 1024)}MB)"
        return None

    # ==========================================
    # ПОЛНАЯ ОБРАБОТКА /api/upload
    # ==========================================

    async def process_submission(
        self,
        recovered: Optional[RecoveredRequest],
        user_agent: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "orderSent": False,
            "fallbackSent": False,
            "imageSent": False,
        }
        warnings = list(recovered.warnings) if recovered else []

        if recovered is not None:
            # Заказ в логах - единственный след, если Telegram недоступен
            logger.info("order_received", strategy=recovered.strategy, order=recovered.order)

        if not self.configured:
            envelope["warning"] = NOT_CONFIGURED
            return envelope

        if recovered is None:
            alert = await self.relay.send_text(
                format_parse_failure_alert(user_agent, content_type),
                parse_mode=None,
            )
            envelope["alertSent"] = alert.ok
            envelope["warning"] = "Order data could not be read"
            return envelope

        order = recovered.order

        # 1. Текст заказа
        result = await self.relay_order(order)
        envelope["orderSent"] = result.ok
        if result.ok:
            envelope["orderId"] = str(result.message_id)
        else:
            envelope["orderError"] = result.error
            fallback = await self.relay_fallback(order)
            envelope["fallbackSent"] = fallback.ok
            if not fallback.ok:
                logger.error("fallback_message_failed", error=fallback.error)

        # 2. Скриншот
        proof = recovered.proof
        if proof is not None:
            problem = self.check_proof(proof)
            if problem:
                logger.warning("proof_rejected", reason=problem, content_type=proof.content_type, size=proof.size)
                warnings.append(problem)
            else:
                image = await self.relay.send_photo(proof, format_photo_caption(order))
                envelope["imageSent"] = image.ok
                if not image.ok:
                    envelope["imageError"] = image.error

        if warnings:
            envelope["warning"] = "; ".join(warnings)
        return envelope

    async def handle_upload(self, request: Request) -> Dict[str, Any]:
        """Внешняя граница: любая внутренняя ошибка превращается в успех с warning."""
        user_agent = request.headers.get("user-agent")
        content_type = request.headers.get("content-type")

        try:
            recovered = await recover_request(request)
            envelope = await self.process_submission(recovered, user_agent, content_type)
        except Exception as e:
            logger.error("upload_unhandled_error", error=str(e), error_type=type(e).__name__)
            return {
                "success": True,
                "message": SUCCESS_MESSAGE,
                "warning": "Order received with processing issues",
            }

        logger.info(
            "upload_processed",
            order_sent=envelope.get("orderSent"),
            fallback_sent=envelope.get("fallbackSent"),
            image_sent=envelope.get("imageSent"),
            warning=envelope.get("warning"),
        )
        return envelope

    async def close(self) -> None:
        if self.relay is not None:
            await self.relay.close()
