# tests/test_bot_handlers.py
"""Обработчики мастера заказа: вызываем корутины напрямую с AsyncMock объектами."""

from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage
import pytest

from app.bot.handlers.order import (
    OrderStates,
    go_back,
    load_wizard,
    new_wizard,
    receive_delivery_date,
    receive_proof_document,
    save_wizard,
    submit_order,
    unexpected_input,
)
from app.client import SubmissionOutcome
from app.wizard import WizardStep
from tests.factories import PNG_BYTES

USER = SimpleNamespace(id=10, username="ada", language_code="en")


class StubSubmissionClient:
    def __init__(self, outcome: SubmissionOutcome):
        self.outcome = outcome
        self.calls = []

    async def submit(self, order, proof, environment):
        self.calls.append((order, proof, environment))
        return self.outcome


def make_message(text=None, **fields):
    message = AsyncMock()
    message.text = text
    message.from_user = USER
    for key, value in fields.items():
        setattr(message, key, value)
    return message


def make_query(data):
    query = AsyncMock()
    query.data = data
    query.from_user = USER
    query.message = AsyncMock()
    return query


def answered_texts(mock) -> list:
    return [call.args[0] for call in mock.answer.await_args_list if call.args]


@pytest.fixture
def state() -> FSMContext:
    return FSMContext(storage=MemoryStorage(), key=StorageKey(bot_id=1, chat_id=10, user_id=10))


async def prepare(state, fsm_state, step, **customer):
    wizard = new_wizard()
    wizard.cart.update_quantity("cake1", 1)
    wizard.step = step
    if customer:
        wizard.set_customer(**customer)
    await save_wizard(state, wizard)
    await state.set_state(fsm_state)
    return wizard


async def test_past_delivery_date_keeps_asking(state):
    await prepare(state, OrderStates.delivery_date, WizardStep.CUSTOMER_INFO, name="Ada", phone="0911111111")
    message = make_message((date.today() - timedelta(days=1)).isoformat())

    await receive_delivery_date(message, state)

    assert await state.get_state() == OrderStates.delivery_date.state
    assert "Delivery date cannot be in the past" in answered_texts(message)[0]
    assert (await load_wizard(state)).step == WizardStep.CUSTOMER_INFO


async def test_badly_formatted_date(state):
    await prepare(state, OrderStates.delivery_date, WizardStep.CUSTOMER_INFO, name="Ada", phone="0911111111")
    message = make_message("tomorrow")

    await receive_delivery_date(message, state)

    assert await state.get_state() == OrderStates.delivery_date.state
    assert "YYYY-MM-DD" in answered_texts(message)[0]


async def test_valid_delivery_date_moves_to_payment(state):
    await prepare(state, OrderStates.delivery_date, WizardStep.CUSTOMER_INFO, name="Ada", phone="0911111111")
    message = make_message((date.today() + timedelta(days=3)).isoformat())

    await receive_delivery_date(message, state)

    assert await state.get_state() == OrderStates.payment.state
    assert "Step 3/5" in answered_texts(message)[0]
    assert (await load_wizard(state)).step == WizardStep.PAYMENT_INSTRUCTIONS


async def test_submit_with_warning_still_confirms_and_clears_state(state):
    await prepare(
        state,
        OrderStates.proof,
        WizardStep.PROOF_UPLOAD,
        name="Ada",
        phone="0911111111",
        delivery_date=date.today() + timedelta(days=1),
    )
    client = StubSubmissionClient(SubmissionOutcome(status=500, warning="Server error: 500"))
    query = make_query("wizard:submit")

    await submit_order(query, state, client)

    assert len(client.calls) == 1
    texts = answered_texts(query.message)
    assert "Server error: 500" in texts[0]
    assert "Thank you" in texts[1]
    assert await state.get_state() is None
    assert await state.get_data() == {}


async def test_submit_confirmation_send_failure_still_clears_state(state):
    await prepare(
        state,
        OrderStates.proof,
        WizardStep.PROOF_UPLOAD,
        name="Ada",
        phone="0911111111",
        delivery_date=date.today() + timedelta(days=1),
    )
    query = make_query("wizard:submit")
    query.message.answer.side_effect = TelegramBadRequest(method=MagicMock(), message="Bad Request: chat not found")

    await submit_order(query, state, StubSubmissionClient(SubmissionOutcome(status=200, body={"success": True})))

    assert await state.get_state() is None


async def test_submit_ignored_outside_proof_step(state):
    await prepare(state, OrderStates.proof, WizardStep.ITEMS)
    client = StubSubmissionClient(SubmissionOutcome(status=200))
    query = make_query("wizard:submit")

    await submit_order(query, state, client)

    assert client.calls == []
    assert await state.get_state() == OrderStates.proof.state


@pytest.mark.parametrize(
    "fsm_state, step, expected_state, expected_text",
    [
        (OrderStates.proof, WizardStep.PROOF_UPLOAD, OrderStates.payment, "Step 3/5"),
        (OrderStates.payment, WizardStep.PAYMENT_INSTRUCTIONS, OrderStates.name, "What is your name?"),
        (OrderStates.phone, WizardStep.CUSTOMER_INFO, OrderStates.items, "Step 1/5"),
    ],
)
async def test_back_maps_wizard_step_to_fsm_state(state, fsm_state, step, expected_state, expected_text):
    await prepare(state, fsm_state, step)
    query = make_query("wizard:back")

    await go_back(query, state)

    assert await state.get_state() == expected_state.state
    assert expected_text in answered_texts(query.message)[0]


async def test_back_from_first_step_does_nothing(state):
    await prepare(state, OrderStates.items, WizardStep.ITEMS)
    query = make_query("wizard:back")

    await go_back(query, state)

    assert await state.get_state() == OrderStates.items.state
    query.message.answer.assert_not_awaited()


async def test_unexpected_input_asks_for_text():
    message = make_message()
    await unexpected_input(message)
    assert answered_texts(message) == ["⚠️ Please reply with text."]


async def test_oversize_document_is_rejected_before_download(state):
    await prepare(state, OrderStates.proof, WizardStep.PROOF_UPLOAD)
    document = SimpleNamespace(file_id="f1", file_name="big.png", mime_type="image/png", file_size=25 * 1024 * 1024)
    message = make_message(document=document)
    bot = AsyncMock()

    await receive_proof_document(message, state, bot)

    bot.download.assert_not_awaited()
    assert "File size must be less than 5MB" in answered_texts(message)[0]
    assert (await load_wizard(state)).proof is None


async def test_non_image_document_is_rejected_before_download(state):
    await prepare(state, OrderStates.proof, WizardStep.PROOF_UPLOAD)
    document = SimpleNamespace(file_id="f1", file_name="r.pdf", mime_type="application/pdf", file_size=1000)
    message = make_message(document=document)
    bot = AsyncMock()

    await receive_proof_document(message, state, bot)

    bot.download.assert_not_awaited()
    assert "image file" in answered_texts(message)[0]


async def test_download_error_is_reported(state):
    await prepare(state, OrderStates.proof, WizardStep.PROOF_UPLOAD)
    document = SimpleNamespace(file_id="f1", file_name="p.png", mime_type="image/png", file_size=None)
    message = make_message(document=document)
    bot = AsyncMock()
    bot.download.side_effect = TelegramBadRequest(method=MagicMock(), message="Bad Request: file is too big")

    await receive_proof_document(message, state, bot)

    assert "Could not download" in answered_texts(message)[0]
    assert (await load_wizard(state)).proof is None


async def test_image_document_is_stored(state):
    await prepare(state, OrderStates.proof, WizardStep.PROOF_UPLOAD)
    document = SimpleNamespace(file_id="f1", file_name="p.png", mime_type="image/png", file_size=len(PNG_BYTES))
    message = make_message(document=document)
    bot = AsyncMock()
    bot.download.return_value = SimpleNamespace(read=lambda: PNG_BYTES)

    await receive_proof_document(message, state, bot)

    bot.download.assert_awaited_once_with("f1")
    proof = (await load_wizard(state)).proof
    assert proof.data == PNG_BYTES
    assert proof.filename == "p.png"
    assert "File selected successfully!" in answered_texts(message)[0]
