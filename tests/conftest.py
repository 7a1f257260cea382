# tests/conftest.py
"""Общие фикстуры: настройки без .env, поддельный relay вместо Telegram."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.models import PaymentProof
from tests.factories import PNG_BYTES, FakeRelay, make_order, make_settings


@pytest.fixture
def order() -> dict:
    return make_order()


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def api(relay):
    app = create_app(make_settings(), relay=relay)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def unconfigured_api():
    app = create_app(make_settings(telegram_bot_token="", telegram_chat_id=""))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def png_proof() -> PaymentProof:
    return PaymentProof(filename="proof.png", content_type="image/png", data=PNG_BYTES)


@pytest.fixture
def today() -> date:
    return date(2026, 10, 19)
