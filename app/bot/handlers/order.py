# app/bot/handlers/order.py
"""
Мастер заказа в Telegram.

Шаги мастера (app/wizard.py) разложены по FSM состояниям aiogram:
    items -> name / phone / address / delivery_date -> payment -> proof

Сам мастер хранится в FSM data (ключ "wizard"), поэтому переживает
перезапуск бота если storage = Redis.
"""

from typing import Optional

from aiogram import Bot, F, Router, types
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import InlineKeyboardMarkup
import structlog

from app.bot.keyboards.order import (
    back_keyboard,
    items_keyboard,
    navigation_keyboard,
    proof_keyboard,
)
from app.bot.utils.text import (
    confirmation_text,
    items_step_text,
    notices_text,
    payment_step_text,
    proof_step_text,
)
from app.catalog import get_item
from app.client import SubmissionClient, detect_client_environment
from app.models import Language, PaymentProof
from app.wizard import NoticeLevel, OrderWizard, WizardStep
from config.settings import config

logger = structlog.get_logger()

router = Router()

BOT_USER_AGENT = "MunirasDelightsBot/1.0 (Telegram)"


# ==========================================
# 📝 STATE MACHINE
# ==========================================

class OrderStates(StatesGroup):
    items = State()
    name = State()
    phone = State()
    address = State()
    delivery_date = State()
    payment = State()
    proof = State()


CUSTOMER_STATES = (OrderStates.name, OrderStates.phone, OrderStates.address, OrderStates.delivery_date)


# ==========================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# ==========================================

def language_of(user: Optional[types.User]) -> Language:
    code = (user.language_code or "") if user else ""
    try:
        return Language(code[:2])
    except ValueError:
        return Language.EN


def new_wizard() -> OrderWizard:
    return OrderWizard(
        environment=detect_client_environment(BOT_USER_AGENT, config.in_app_markers),
        max_proof_bytes=config.max_proof_bytes,
    )


async def load_wizard(state: FSMContext) -> OrderWizard:
    data = await state.get_data()
    raw = data.get("wizard")
    if not raw:
        return new_wizard()
    return OrderWizard.from_state(raw, max_proof_bytes=config.max_proof_bytes)


async def save_wizard(state: FSMContext, wizard: OrderWizard) -> None:
    await state.update_data(wizard=wizard.to_state())


async def safe_edit(message: types.Message, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None) -> None:
    """edit_text, которому всё равно что текст не изменился."""
    try:
        await message.edit_text(text, reply_markup=reply_markup, parse_mode="HTML")
    except TelegramBadRequest as e:
        if "message is not modified" not in str(e):
            raise


async def answer_notices(query: types.CallbackQuery, wizard: OrderWizard) -> None:
    """Уведомления мастера показываем как всплывашку на кнопке."""
    text = notices_text(wizard.drain_notices())
    await query.answer(text or None)


async def ask_customer_field(message: types.Message, field_state: State) -> None:
    prompts = {
        OrderStates.name: "<b>Step 2/5 · Your details</b>\n\nWhat is your name?",
        OrderStates.phone: "📞 Your phone number (at least 10 digits):",
        OrderStates.address: "📍 Delivery address (send <code>-</code> to skip):",
        OrderStates.delivery_date: "📅 Delivery date in <code>YYYY-MM-DD</code> format:",
    }
    await message.answer(prompts[field_state], reply_markup=back_keyboard(), parse_mode="HTML")


# ==========================================
# ШАГ 1: ВЫБОР ПОЗИЦИЙ
# ==========================================

async def start_wizard(message: types.Message, state: FSMContext, user: types.User) -> None:
    wizard = new_wizard()
    await state.set_state(OrderStates.items)
    await save_wizard(state, wizard)

    await message.answer(
        items_step_text(wizard),
        reply_markup=items_keyboard(wizard.cart, language_of(user)),
        parse_mode="HTML",
    )
    logger.info("wizard_started", user_id=user.id, environment=wizard.environment.value)


@router.message(Command("order"))
async def cmd_order(message: types.Message, state: FSMContext):
    """/order - начать новый заказ (старый мастер забывается)."""
    await start_wizard(message, state, message.from_user)


@router.callback_query(F.data == "wizard:start")
async def start_from_button(query: types.CallbackQuery, state: FSMContext):
    await query.answer()
    await start_wizard(query.message, state, query.from_user)


@router.callback_query(OrderStates.items, F.data.startswith("cart:"))
async def change_quantity(query: types.CallbackQuery, state: FSMContext):
    """Кнопки +/− на шаге 1: callback_data = "cart:inc:cake1" / "cart:dec:cake1"."""
    _, action, *rest = query.data.split(":")
    if action == "noop" or not rest:
        await query.answer()
        return

    item_id = rest[0]
    wizard = await load_wizard(state)

    if action == "inc":
        item = get_item(item_id)
        if item is None:
            await query.answer("❌ Unknown item")
            return
        wizard.cart.add_or_increment(item)
    elif action == "dec":
        wizard.cart.update_quantity(item_id, -1)

    await save_wizard(state, wizard)
    await safe_edit(
        query.message,
        items_step_text(wizard),
        reply_markup=items_keyboard(wizard.cart, language_of(query.from_user)),
    )
    await query.answer()


@router.callback_query(OrderStates.items, F.data == "wizard:next")
async def items_next(query: types.CallbackQuery, state: FSMContext):
    wizard = await load_wizard(state)
    if not wizard.next_step():
        await answer_notices(query, wizard)
        return

    await save_wizard(state, wizard)
    await state.set_state(OrderStates.name)
    await query.answer()
    await ask_customer_field(query.message, OrderStates.name)


# ==========================================
# ШАГ 2: ДАННЫЕ КЛИЕНТА
# ==========================================

@router.message(OrderStates.name, F.text)
async def receive_name(message: types.Message, state: FSMContext):
    wizard = await load_wizard(state)
    wizard.set_customer(name=message.text.strip())

    problem = wizard.customer_problem()
    if problem and problem[0] == "name":
        await message.answer(f"⚠️ {problem[1]}")
        return

    await save_wizard(state, wizard)
    await state.set_state(OrderStates.phone)
    await ask_customer_field(message, OrderStates.phone)


@router.message(OrderStates.phone, F.text | F.contact)
async def receive_phone(message: types.Message, state: FSMContext):
    phone = message.contact.phone_number if message.contact else message.text.strip()

    wizard = await load_wizard(state)
    wizard.set_customer(phone=phone)

    problem = wizard.customer_problem()
    if problem and problem[0] == "phone":
        await message.answer(f"⚠️ {problem[1]}")
        return

    await save_wizard(state, wizard)
    await state.set_state(OrderStates.address)
    await ask_customer_field(message, OrderStates.address)


@router.message(OrderStates.address, F.text)
async def receive_address(message: types.Message, state: FSMContext):
    address = message.text.strip()
    wizard = await load_wizard(state)
    wizard.set_customer(address="" if address == "-" else address)

    await save_wizard(state, wizard)
    await state.set_state(OrderStates.delivery_date)
    await ask_customer_field(message, OrderStates.delivery_date)


@router.message(OrderStates.delivery_date, F.text)
async def receive_delivery_date(message: types.Message, state: FSMContext):
    """Последнее поле шага 2: дата проверяется вместе со всеми данными клиента."""
    wizard = await load_wizard(state)

    if not wizard.set_delivery_date(message.text) or not wizard.next_step():
        await message.answer(notices_text(wizard.drain_notices()))
        return

    await save_wizard(state, wizard)
    await state.set_state(OrderStates.payment)
    await message.answer(
        payment_step_text(wizard, config.bank_instructions),
        reply_markup=navigation_keyboard(),
        parse_mode="HTML",
    )


# ==========================================
# ШАГ 3: РЕКВИЗИТЫ
# ==========================================

@router.callback_query(OrderStates.payment, F.data == "wizard:next")
async def payment_next(query: types.CallbackQuery, state: FSMContext):
    wizard = await load_wizard(state)
    if not wizard.next_step():
        await answer_notices(query, wizard)
        return

    await save_wizard(state, wizard)
    await state.set_state(OrderStates.proof)
    await query.answer()
    await query.message.answer(
        proof_step_text(wizard),
        reply_markup=proof_keyboard(has_proof=False, proof_required=wizard.proof_required),
        parse_mode="HTML",
    )


# ==========================================
# ШАГ 4: СКРИНШОТ ОПЛАТЫ
# ==========================================

async def _show_proof_step(message: types.Message, wizard: OrderWizard) -> None:
    notices = notices_text(wizard.drain_notices())
    if notices:
        await message.answer(notices)
    await message.answer(
        proof_step_text(wizard),
        reply_markup=proof_keyboard(has_proof=wizard.proof is not None, proof_required=wizard.proof_required),
        parse_mode="HTML",
    )


async def _download_proof(
    message: types.Message,
    state: FSMContext,
    bot: Bot,
    file_id: str,
    filename: str,
    content_type: str,
    size: Optional[int],
) -> None:
    """
    Скачивает скриншот из Telegram и отдаёт его мастеру.

    Тип и размер проверяются ДО скачивания: Bot API не отдаёт файлы
    больше 20MB, а файл больше лимита мастер всё равно отклонит.
    """
    wizard = await load_wizard(state)

    problem = wizard.proof_problem(content_type, size or 0)
    if problem:
        wizard.notify(problem, NoticeLevel.ERROR)
        await _show_proof_step(message, wizard)
        return

    try:
        data = await bot.download(file_id)
    except TelegramAPIError as e:
        logger.error("proof_download_error", error=str(e), user_id=message.from_user.id, size=size)
        await message.answer("❌ Could not download the file. Please send the screenshot again.")
        return

    wizard.select_proof(PaymentProof(filename=filename, content_type=content_type, data=data.read()))
    await save_wizard(state, wizard)
    await _show_proof_step(message, wizard)


@router.message(OrderStates.proof, F.photo)
async def receive_proof_photo(message: types.Message, state: FSMContext, bot: Bot):
    photo = message.photo[-1]  # самый большой размер
    await _download_proof(
        message,
        state,
        bot,
        file_id=photo.file_id,
        filename=f"payment_{photo.file_unique_id}.jpg",
        content_type="image/jpeg",
        size=photo.file_size,
    )


@router.message(OrderStates.proof, F.document)
async def receive_proof_document(message: types.Message, state: FSMContext, bot: Bot):
    """Скриншот прислали файлом (без сжатия)."""
    document = message.document
    await _download_proof(
        message,
        state,
        bot,
        file_id=document.file_id,
        filename=document.file_name or "screenshot",
        content_type=document.mime_type or "",
        size=document.file_size,
    )


@router.callback_query(OrderStates.proof, F.data == "proof:remove")
async def remove_proof(query: types.CallbackQuery, state: FSMContext):
    wizard = await load_wizard(state)
    wizard.remove_proof()
    await save_wizard(state, wizard)

    await safe_edit(
        query.message,
        proof_step_text(wizard),
        reply_markup=proof_keyboard(has_proof=False, proof_required=wizard.proof_required),
    )
    await query.answer("🗑 File removed")


@router.callback_query(OrderStates.proof, F.data == "wizard:submit")
async def submit_order(query: types.CallbackQuery, state: FSMContext, submission_client: SubmissionClient):
    """
    Шаг 4 -> 5. Подтверждение показывается при любом исходе отправки,
    предупреждение (если было) приходит отдельным сообщением.
    """
    wizard = await load_wizard(state)

    if not await wizard.submit(submission_client):
        await answer_notices(query, wizard)
        return

    logger.info(
        "wizard_completed",
        user_id=query.from_user.id,
        step=int(wizard.step),
        total=wizard.cart.total(),
    )

    try:
        await query.answer()
        notices = notices_text(wizard.drain_notices())
        if notices:
            await query.message.answer(notices)
        await query.message.answer(confirmation_text(wizard.customer.phone), parse_mode="HTML")

    except TelegramAPIError as e:
        logger.error("wizard_confirmation_error", error=str(e), user_id=query.from_user.id)

    finally:
        # Шаг 5 -> закрыть: всё забываем
        wizard.close()
        await state.clear()


# ==========================================
# НАЗАД / ОТМЕНА
# ==========================================

@router.callback_query(F.data == "wizard:back")
async def go_back(query: types.CallbackQuery, state: FSMContext):
    """Назад на один шаг мастера, FSM состояние выставляется по шагу."""
    current = await state.get_state()
    wizard = await load_wizard(state)

    if not wizard.back_step():
        await query.answer()
        return
    await save_wizard(state, wizard)
    await query.answer()

    if wizard.step == WizardStep.ITEMS:
        await state.set_state(OrderStates.items)
        await query.message.answer(
            items_step_text(wizard),
            reply_markup=items_keyboard(wizard.cart, language_of(query.from_user)),
            parse_mode="HTML",
        )
    elif wizard.step == WizardStep.CUSTOMER_INFO:
        await state.set_state(OrderStates.name)
        await ask_customer_field(query.message, OrderStates.name)
    elif wizard.step == WizardStep.PAYMENT_INSTRUCTIONS:
        await state.set_state(OrderStates.payment)
        await query.message.answer(
            payment_step_text(wizard, config.bank_instructions),
            reply_markup=navigation_keyboard(),
            parse_mode="HTML",
        )

    logger.info("wizard_back", user_id=query.from_user.id, from_state=current, step=int(wizard.step))


@router.callback_query(F.data == "wizard:close")
async def close_wizard(query: types.CallbackQuery, state: FSMContext):
    await state.clear()
    await query.answer()
    await safe_edit(query.message, "Order cancelled. Send /order to start again.")


@router.message(StateFilter(*CUSTOMER_STATES))
async def unexpected_input(message: types.Message):
    await message.answer("⚠️ Please reply with text.")
