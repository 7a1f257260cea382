# tests/test_submission.py
import json

import aiohttp
import pytest

from app.client import (
    ClientEnvironment,
    Encoding,
    SubmissionClient,
    detect_client_environment,
)
from app.models import CustomerInfo, OrderItem, OrderPayload


class StubResponse:
    def __init__(self, status=200, body=None, error=None):
        self.status = status
        self._body = body
        self._error = error

    async def json(self, content_type=None):
        if self._error is not None:
            raise self._error
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def payload() -> OrderPayload:
    return OrderPayload(
        items=[OrderItem(id="cake1", quantity=1)],
        customer=CustomerInfo(name="Ada", phone="0911111111", delivery_date="2099-01-01"),
        total=20,
        timestamp="2026-10-19T10:00:00+00:00",
    )


def test_wire_format_uses_camel_case(payload):
    wire = payload.to_wire()
    assert wire["paymentMethod"] == "bank_transfer"
    assert wire["customer"]["deliveryDate"] == "2099-01-01"
    assert wire["items"] == [{"id": "cake1", "quantity": 1}]


def test_prepare_without_proof_is_plain_json(payload):
    prepared = SubmissionClient("http://gw/").prepare(payload)

    assert prepared.url == "http://gw/api/upload"
    assert prepared.encoding == Encoding.JSON
    assert prepared.json_body == {"orderData": payload.to_wire()}
    assert prepared.request_kwargs() == {"json": prepared.json_body}


def test_prepare_in_app_embeds_screenshot_as_data_url(payload, png_proof):
    prepared = SubmissionClient("http://gw").prepare(payload, png_proof, ClientEnvironment.IN_APP)

    assert prepared.encoding == Encoding.JSON_BASE64
    assert prepared.form is None
    assert prepared.json_body["screenshot"].startswith("data:image/png;base64,")
    assert prepared.json_body["orderData"]["total"] == 20


def test_prepare_browser_with_proof_is_multipart(payload, png_proof):
    prepared = SubmissionClient("http://gw").prepare(payload, png_proof, ClientEnvironment.BROWSER)

    assert prepared.encoding == Encoding.MULTIPART
    assert prepared.json_body is None
    assert isinstance(prepared.form, aiohttp.FormData)
    assert "data" in prepared.request_kwargs()


async def test_submit_success(payload):
    session = StubSession(StubResponse(200, {"success": True, "orderSent": True}))
    client = SubmissionClient("http://gw", session=session, user_agent="TestAgent Telegram")

    outcome = await client.submit(payload)

    assert outcome.delivered
    assert outcome.body["orderSent"] is True
    url, kwargs = session.calls[0]
    assert url == "http://gw/api/upload"
    assert kwargs["headers"]["User-Agent"] == "TestAgent Telegram"
    assert kwargs["json"] == {"orderData": payload.to_wire()}


async def test_submit_reports_error_field(payload):
    session = StubSession(StubResponse(400, {"error": "No items in order"}))
    outcome = await SubmissionClient("http://gw", session=session).submit(payload)
    assert outcome.warning == "No items in order"


async def test_submit_non_json_response(payload):
    error = json.JSONDecodeError("Expecting value", "<html>", 0)
    session = StubSession(StubResponse(502, error=error))
    outcome = await SubmissionClient("http://gw", session=session).submit(payload)

    assert outcome.status == 502
    assert outcome.warning == "Server error: 502"


async def test_submit_network_error(payload):
    session = StubSession(error=aiohttp.ClientConnectionError("refused"))
    outcome = await SubmissionClient("http://gw", session=session).submit(payload)

    assert not outcome.delivered
    assert "Network issue" in outcome.warning


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        ("Mozilla/5.0 (Linux; Android 13) Telegram-Android/10.2", ClientEnvironment.IN_APP),
        ("mozilla/5.0 telegram", ClientEnvironment.IN_APP),
        ("Mozilla/5.0 (Windows NT 10.0) Chrome/120", ClientEnvironment.BROWSER),
        (None, ClientEnvironment.BROWSER),
    ],
)
def test_detect_client_environment(user_agent, expected):
    assert detect_client_environment(user_agent) == expected


def test_detect_client_environment_custom_markers():
    assert detect_client_environment("Instagram 300.0", ["Instagram"]) == ClientEnvironment.IN_APP
