# app/gateway/parsers.py
"""
Разбор входящего запроса на /api/upload.

Клиенты шлют заказ по-разному (JSON, multipart, иногда вообще без
правильного Content-Type), поэтому разбор сделан цепочкой стратегий:
каждая возвращает RecoveredRequest или None, используется первая удачная.

    JsonBodyParser -> MultipartBodyParser -> RawBodyParser
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import structlog
from starlette.datastructures import UploadFile
from starlette.requests import Request

from app.models import PaymentProof, ProofDecodeError

logger = structlog.get_logger()

_ORDER_DATA_RE = re.compile(r'"orderData"\s*:\s*(?=\{)')
_SCREENSHOT_RE = re.compile(r'"screenshot"\s*:\s*"(data:[^"]+)"')


@dataclass
class ParseContext:
    request: Request
    body: bytes
    content_type: str


@dataclass
class RecoveredRequest:
    order: Dict[str, Any]
    proof: Optional[PaymentProof] = None
    strategy: str = ""
    warnings: List[str] = field(default_factory=list)


def coerce_order(value: Any) -> Optional[Dict[str, Any]]:
    """orderData может прийти объектом или JSON-строкой."""
    if isinstance(value, dict):
        return value
    if isinstance(value, (str, bytes)):
        try:
            decoded = json.loads(value)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def decode_screenshot(value: Any, warnings: List[str]) -> Optional[PaymentProof]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return PaymentProof.from_data_url(value)
    except ProofDecodeError as e:
        logger.warning("screenshot_decode_failed", error=str(e))
        warnings.append("Screenshot could not be decoded")
        return None


class BodyParser:
    name = "base"

    async def parse(self, context: ParseContext) -> Optional[RecoveredRequest]:
        raise NotImplementedError


class JsonBodyParser(BodyParser):
    name = "json"

    async def parse(self, context: ParseContext) -> Optional[RecoveredRequest]:
        if "json" not in context.content_type:
            return None
        try:
            payload = json.loads(context.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("json_body_invalid", error=str(e))
            return None
        if not isinstance(payload, dict):
            return None

        order = coerce_order(payload.get("orderData"))
        if order is None and ("items" in payload or "customer" in payload):
            # Заказ прислали без обёртки orderData
            order = payload
        if order is None:
            return None

        warnings: List[str] = []
        proof = decode_screenshot(payload.get("screenshot"), warnings)
        return RecoveredRequest(order=order, proof=proof, strategy=self.name, warnings=warnings)


class MultipartBodyParser(BodyParser):
    name = "multipart"

    async def parse(self, context: ParseContext) -> Optional[RecoveredRequest]:
        if "multipart/form-data" not in context.content_type:
            return None
        try:
            form = await context.request.form()
        except Exception as e:
            logger.warning("multipart_body_invalid", error=str(e), error_type=type(e).__name__)
            return None

        order = coerce_order(form.get("orderData"))
        if order is None:
            return None

        proof = None
        screenshot = form.get("screenshot")
        if isinstance(screenshot, UploadFile):
            data = await screenshot.read()
            proof = PaymentProof(
                filename=screenshot.filename or "screenshot",
                content_type=screenshot.content_type or "",
                data=data,
            )
        return RecoveredRequest(order=order, proof=proof, strategy=self.name)


class RawBodyParser(BodyParser):
    """Последний шанс: ищем "orderData": {...} прямо в тексте тела."""

    name = "raw"

    async def parse(self, context: ParseContext) -> Optional[RecoveredRequest]:
        text = context.body.decode("utf-8", errors="replace")
        decoder = json.JSONDecoder()

        for match in _ORDER_DATA_RE.finditer(text):
            try:
                order, _ = decoder.raw_decode(text, match.end())
            except json.JSONDecodeError:
                continue
            if not isinstance(order, dict):
                continue

            warnings: List[str] = []
            proof = None
            screenshot = _SCREENSHOT_RE.search(text)
            if screenshot:
                proof = decode_screenshot(screenshot.group(1), warnings)
            return RecoveredRequest(order=order, proof=proof, strategy=self.name, warnings=warnings)

        return None


DEFAULT_PARSERS: Sequence[BodyParser] = (
    JsonBodyParser(),
    MultipartBodyParser(),
    RawBodyParser(),
)


async def recover_request(
    request: Request,
    parsers: Sequence[BodyParser] = DEFAULT_PARSERS,
) -> Optional[RecoveredRequest]:
    body = await request.body()
    context = ParseContext(
        request=request,
        body=body,
        content_type=(request.headers.get("content-type") or "").lower(),
    )

    for parser in parsers:
        recovered = await parser.parse(context)
        if recovered is not None:
            logger.info("order_data_recovered", strategy=parser.name, has_proof=recovered.proof is not None)
            return recovered

    logger.warning("order_data_not_recovered", content_type=context.content_type, body_size=len(body))
    return None
