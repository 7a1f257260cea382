# tests/test_upload.py
"""POST /api/upload: любой запрос заканчивается {"success": true}."""

import base64
import json

from fastapi.testclient import TestClient

from app.api import create_app
from app.gateway.relay import RelayResult
from tests.factories import PNG_BYTES, FakeRelay, make_settings

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


def test_json_without_screenshot(api, relay, order):
    response = api.post("/api/upload", json={"orderData": order})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is True
    assert body["orderId"] == "101"
    assert body["imageSent"] is False
    assert "warning" not in body
    assert relay.photos == []


def test_json_with_base64_screenshot(api, relay, order):
    response = api.post("/api/upload", json={"orderData": order, "screenshot": PNG_DATA_URL})

    body = response.json()
    assert body["orderSent"] is True
    assert body["imageSent"] is True

    proof, caption = relay.photos[0]
    assert proof.data == PNG_BYTES
    assert proof.content_type == "image/png"
    assert caption == "💰 Payment Screenshot for order from Ada Lovelace\nTotal: $43"


def test_json_with_order_as_string(api, relay, order):
    response = api.post("/api/upload", json={"orderData": json.dumps(order)})
    assert response.json()["orderSent"] is True


def test_multipart_upload(api, relay, order):
    response = api.post(
        "/api/upload",
        data={"orderData": json.dumps(order)},
        files={"screenshot": ("proof.png", PNG_BYTES, "image/png")},
    )

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is True
    assert body["imageSent"] is True
    assert relay.photos[0][0].filename == "proof.png"


def test_multipart_non_image_is_skipped_with_warning(api, relay, order):
    response = api.post(
        "/api/upload",
        data={"orderData": json.dumps(order)},
        files={"screenshot": ("notes.txt", b"hello", "text/plain")},
    )

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is True
    assert body["imageSent"] is False
    assert body["warning"] == "Only images allowed"
    assert relay.photos == []


def test_oversize_screenshot_is_skipped_with_warning(order):
    relay = FakeRelay()
    with TestClient(create_app(make_settings(max_proof_size_mb=1), relay=relay)) as client:
        response = client.post(
            "/api/upload",
            data={"orderData": json.dumps(order)},
            files={"screenshot": ("big.png", b"\x00" * (1024 * 1024 + 1), "image/png")},
        )

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is True
    assert body["imageSent"] is False
    assert body["warning"] == "File too large (max 1MB)"
    assert relay.photos == []


def test_raw_body_with_wrong_content_type(api, relay, order):
    raw = 'garbage before {"orderData": ' + json.dumps(order) + ', "screenshot": "' + PNG_DATA_URL + '"} trailing'
    response = api.post("/api/upload", content=raw.encode(), headers={"content-type": "text/plain"})

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is True
    assert body["imageSent"] is True
    assert "Ada Lovelace" in relay.texts[0][0]


def test_unreadable_body_sends_alert(api, relay):
    response = api.post(
        "/api/upload",
        content=b"hello there",
        headers={"content-type": "text/plain", "user-agent": "U" * 500},
    )

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is False
    assert body["alertSent"] is True
    assert body["warning"] == "Order data could not be read"

    [(alert, parse_mode)] = relay.texts
    assert parse_mode is None
    assert "FAILED TO PARSE" in alert
    assert "U" * 201 not in alert


def test_primary_failure_sends_plain_fallback(order):
    relay = FakeRelay(text_results=[
        RelayResult.failed("Bad Request: can't parse entities"),
        RelayResult(ok=True, message_id=7),
    ])
    with TestClient(create_app(make_settings(), relay=relay)) as client:
        response = client.post("/api/upload", json={"orderData": order, "screenshot": PNG_DATA_URL})

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is False
    assert body["orderError"] == "Bad Request: can't parse entities"
    assert body["fallbackSent"] is True
    # Скриншот пробуем даже если основной текст не ушёл
    assert body["imageSent"] is True

    fallback, parse_mode = relay.texts[1]
    assert parse_mode is None
    assert "Phone: 0911 111 111" in fallback


def test_everything_fails_still_success(order):
    relay = FakeRelay(
        text_results=[RelayResult.failed("down"), RelayResult.failed("down")],
        photo_result=RelayResult.failed("down"),
    )
    with TestClient(create_app(make_settings(), relay=relay)) as client:
        response = client.post("/api/upload", json={"orderData": order, "screenshot": PNG_DATA_URL})

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["orderSent"] is False
    assert body["fallbackSent"] is False
    assert body["imageSent"] is False
    assert body["imageError"] == "down"


def test_unexpected_error_still_success(order):
    relay = FakeRelay(raise_on_text=RuntimeError("boom"))
    with TestClient(create_app(make_settings(), relay=relay)) as client:
        response = client.post("/api/upload", json={"orderData": order})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Order submitted successfully!",
        "warning": "Order received with processing issues",
    }


def test_unconfigured_upload(unconfigured_api, order):
    response = unconfigured_api.post("/api/upload", json={"orderData": order})

    body = response.json()
    assert body["success"] is True
    assert body["orderSent"] is False
    assert body["warning"] == "Telegram not configured"


def test_broken_screenshot_is_reported(api, relay, order):
    response = api.post("/api/upload", json={"orderData": order, "screenshot": "not-a-data-url"})

    body = response.json()
    assert body["orderSent"] is True
    assert body["imageSent"] is False
    assert body["warning"] == "Screenshot could not be decoded"
