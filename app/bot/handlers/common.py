# app/bot/handlers/common.py
"""
Обработчики которые работают для всех пользователей.

Здесь:
- /start, /help, /menu
- /cancel (должен срабатывать в любом состоянии мастера)
- Fallback сообщения (отдельный роутер, подключается последним)
"""

from aiogram import F, Router, types
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
import structlog

from app.bot.keyboards.order import main_menu_keyboard
from app.bot.utils.text import menu_text
from app.bot.handlers.order import language_of

logger = structlog.get_logger()

router = Router()
fallback_router = Router()


# ==========================================
# КОМАНДА: /start
# ==========================================

@router.message(CommandStart())
async def cmd_start(message: types.Message, state: FSMContext):
    await state.clear()
    await message.answer(
        "👋 <b>Welcome to Munira's Delights!</b>\n\n"
        "Homemade cakes, pastries and ice cream.\n"
        "Browse the menu or place an order right here 🎂",
        reply_markup=main_menu_keyboard(),
        parse_mode="HTML",
    )
    logger.info("client_start", user_id=message.from_user.id)


# ==========================================
# КОМАНДА: /help
# ==========================================

@router.message(Command("help"))
async def cmd_help(message: types.Message):
    await message.answer(
        "🤖 Commands:\n\n"
        "/menu - Our menu\n"
        "/order - Place an order\n"
        "/cancel - Cancel the current order\n"
        "/help - This help"
    )


# ==========================================
# МЕНЮ
# ==========================================

@router.message(Command("menu"))
async def cmd_menu(message: types.Message):
    await message.answer(
        menu_text(language_of(message.from_user)),
        reply_markup=main_menu_keyboard(),
        parse_mode="HTML",
    )


@router.callback_query(F.data == "menu:show")
async def show_menu(query: types.CallbackQuery):
    await query.answer()
    await query.message.answer(
        menu_text(language_of(query.from_user)),
        reply_markup=main_menu_keyboard(),
        parse_mode="HTML",
    )


# ==========================================
# ОТМЕНА
# ==========================================

@router.message(Command("cancel"))
async def cmd_cancel(message: types.Message, state: FSMContext):
    current = await state.get_state()
    await state.clear()
    await message.answer("Order cancelled. Send /order to start again.")
    logger.info("wizard_cancelled", user_id=message.from_user.id, state=current)


# ==========================================
# FALLBACK (ловушка для неизвестных команд)
# ==========================================

@fallback_router.message()
async def unknown_message(message: types.Message):
    await message.answer(
        "🤔 I didn't get that.\n\n"
        "Send /order to place an order or /help for the list of commands."
    )
    logger.warning("unknown_message", user_id=message.from_user.id, text=(message.text or "")[:50])
