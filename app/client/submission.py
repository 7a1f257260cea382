# app/client/submission.py
"""
📤 ОТПРАВКА ЗАКАЗА В ШЛЮЗ

Один заказ = ровно один POST на /api/upload.

Кодировка выбирается так:
- есть скриншот и клиент во встроенном браузере -> JSON {orderData, screenshot: dataURL}
- есть скриншот -> multipart/form-data (screenshot + orderData строкой)
- нет скриншота -> JSON {orderData}

Ошибки сети и кривые ответы НЕ бросаются наружу: они превращаются
в SubmissionOutcome.warning, а мастер всё равно показывает подтверждение.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
import structlog

from app.client.environment import ClientEnvironment
from app.models import OrderPayload, PaymentProof

logger = structlog.get_logger()

UPLOAD_PATH = "/api/upload"


class Encoding:
    JSON = "json"
    JSON_BASE64 = "json_base64"
    MULTIPART = "multipart"


@dataclass
class PreparedRequest:
    url: str
    encoding: str
    json_body: Optional[Dict[str, Any]] = None
    form: Optional[aiohttp.FormData] = None

    def request_kwargs(self) -> Dict[str, Any]:
        if self.form is not None:
            return {"data": self.form}
        return {"json": self.json_body}


@dataclass
class SubmissionOutcome:
    status: Optional[int] = None
    body: Dict[str, Any] = field(default_factory=dict)
    warning: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.warning is None


class SubmissionClient:
    """
    Клиент шлюза.

    Пример:
        client = SubmissionClient("http://127.0.0.1:5000")
        outcome = await client.submit(order, proof, ClientEnvironment.IN_APP)
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._session = session
        self.user_agent = user_agent

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}{UPLOAD_PATH}"

    def prepare(
        self,
        order: OrderPayload,
        proof: Optional[PaymentProof] = None,
        environment: ClientEnvironment = ClientEnvironment.BROWSER,
    ) -> PreparedRequest:
        order_data = order.to_wire()

        if proof is not None and environment == ClientEnvironment.IN_APP:
            return PreparedRequest(
                url=self.upload_url,
                encoding=Encoding.JSON_BASE64,
                json_body={"orderData": order_data, "screenshot": proof.to_data_url()},
            )

        if proof is not None:
            form = aiohttp.FormData()
            form.add_field(
                "screenshot",
                proof.data,
                filename=proof.filename,
                content_type=proof.content_type,
            )
            form.add_field("orderData", json.dumps(order_data))
            return PreparedRequest(url=self.upload_url, encoding=Encoding.MULTIPART, form=form)

        return PreparedRequest(
            url=self.upload_url,
            encoding=Encoding.JSON,
            json_body={"orderData": order_data},
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    async def submit(
        self,
        order: OrderPayload,
        proof: Optional[PaymentProof] = None,
        environment: ClientEnvironment = ClientEnvironment.BROWSER,
    ) -> SubmissionOutcome:
        prepared = self.prepare(order, proof, environment)
        logger.info("submission_sending", url=prepared.url, encoding=prepared.encoding)

        if self._session is not None:
            return await self._send(self._session, prepared)

        async with aiohttp.ClientSession() as session:
            return await self._send(session, prepared)

    async def _send(self, session: aiohttp.ClientSession, prepared: PreparedRequest) -> SubmissionOutcome:
        try:
            async with session.post(prepared.url, headers=self._headers(), **prepared.request_kwargs()) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, json.JSONDecodeError, ValueError):
                    body = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("submission_network_error", error=str(e), error_type=type(e).__name__)
            return SubmissionOutcome(
                warning="Network issue detected. Munira will still receive your order if it reached us.",
            )

        if not isinstance(body, dict):
            logger.warning("submission_bad_response", status=status)
            return SubmissionOutcome(status=status, warning=f"Server error: {status}")

        if body.get("error"):
            logger.warning("submission_error_reported", status=status, error=body["error"])
            return SubmissionOutcome(status=status, body=body, warning=str(body["error"]))

        if status >= 400:
            return SubmissionOutcome(status=status, body=body, warning=f"Server error: {status}")

        logger.info("submission_done", status=status, success=body.get("success"))
        return SubmissionOutcome(status=status, body=body)
