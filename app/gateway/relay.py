# app/gateway/relay.py
"""
Отправка в Telegram (чат оператора) через aiogram Bot.

Каждый вызов - ровно одна попытка. Наружу исключения не летят:
результат всегда RelayResult (ok / message_id / error).
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog
from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BufferedInputFile

from app.models import PaymentProof
from config.settings import RelayConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class RelayResult:
    ok: bool
    message_id: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "RelayResult":
        return cls(ok=False, error=error)


class TelegramRelay:
    """Обёртка над Bot, которая знает куда слать (chat id из RelayConfig)."""

    def __init__(self, relay_config: RelayConfig, bot: Optional[Bot] = None):
        self.relay_config = relay_config
        self.bot = bot or Bot(token=relay_config.bot_token)

    async def send_text(self, text: str, parse_mode: Optional[str] = None) -> RelayResult:
        try:
            message = await self.bot.send_message(
                chat_id=self.relay_config.chat_id,
                text=text,
                parse_mode=parse_mode,
            )
        except (TelegramAPIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("telegram_message_failed", error=str(e), error_type=type(e).__name__, parse_mode=parse_mode)
            return RelayResult.failed(str(e) or type(e).__name__)

        logger.info("telegram_message_sent", message_id=message.message_id)
        return RelayResult(ok=True, message_id=message.message_id)

    async def send_photo(self, proof: PaymentProof, caption: str) -> RelayResult:
        try:
            message = await self.bot.send_photo(
                chat_id=self.relay_config.chat_id,
                photo=BufferedInputFile(proof.data, filename=proof.filename),
                caption=caption,
                parse_mode=None,
            )
        except (TelegramAPIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("telegram_photo_failed", error=str(e), error_type=type(e).__name__, size=proof.size)
            return RelayResult.failed(str(e) or type(e).__name__)

        logger.info("telegram_photo_sent", message_id=message.message_id, size=proof.size)
        return RelayResult(ok=True, message_id=message.message_id)

    async def close(self) -> None:
        await self.bot.session.close()
