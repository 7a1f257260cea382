# main.py
"""
🚀 ГЛАВНЫЙ ФАЙЛ ЗАПУСКА

Запускает в одном процессе:
- FastAPI шлюз заказов (/api/order, /api/upload, /api/telegram, /api/menu)
- Витринного бота (мастер заказа в Telegram), если задан STOREFRONT_BOT_TOKEN
"""

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
import structlog
import uvicorn

from app.api import create_app
from app.bot.handlers import build_router
from app.bot.handlers.order import BOT_USER_AGENT
from app.bot.middlewares import LoggingMiddleware
from app.client import SubmissionClient
from config.settings import config
from infrastructure.logger import setup_logging
from infrastructure.redis_storage import build_storage, check_redis_connection

logger = structlog.get_logger()


# ==========================================
# 🤖 ВИТРИННЫЙ БОТ
# ==========================================

def create_dispatcher() -> Dispatcher:
    storage = build_storage(config.redis_url)
    dp = Dispatcher(storage=storage)

    dp.message.middleware(LoggingMiddleware())
    dp.callback_query.middleware(LoggingMiddleware())

    dp.include_router(build_router())

    # Доступно в обработчиках как параметр submission_client
    dp["submission_client"] = SubmissionClient(config.submission_url, user_agent=BOT_USER_AGENT)
    return dp


async def run_bot():
    bot = Bot(
        token=config.storefront_bot_token,
        default=DefaultBotProperties(parse_mode="HTML")
    )
    dp = create_dispatcher()

    if not await check_redis_connection(dp.storage):
        logger.warning("redis_unavailable", message="⚠️ Redis не отвечает, состояния мастера могут теряться")

    try:
        me = await bot.get_me()
        logger.info("polling_started", message="👂 Бот начинает слушать сообщения...", bot_username=f"@{me.username}")
        await dp.start_polling(bot)

    except asyncio.CancelledError:
        logger.info("polling_cancelled", message="⛔ Polling отменён")
        raise

    except Exception as e:
        logger.error("bot_polling_error", error=str(e), error_type=type(e).__name__)
        raise

    finally:
        await dp.storage.close()
        await bot.session.close()
        logger.info("bot_session_closed", message="✅ Сессия бота закрыта")


# ==========================================
# 🌐 API
# ==========================================

async def run_api():
    server = uvicorn.Server(uvicorn.Config(
        create_app(config),
        host=config.api_host,
        port=config.api_port,
        log_level="debug" if config.debug else "info",
        access_log=True,
    ))
    logger.info("fastapi_starting", message=f"🌐 FastAPI запускается на {config.api_host}:{config.api_port}")
    await server.serve()


# ==========================================
# 🚀 ГЛАВНАЯ ФУНКЦИЯ ЗАПУСКА
# ==========================================

async def main():
    setup_logging(config.debug)
    logger.info("application_start", message="🟢 Приложение стартует", environment=config.environment)

    services = [run_api()]
    if config.storefront_bot_token:
        services.append(run_bot())
    else:
        logger.warning("storefront_bot_disabled", message="⚠️ STOREFRONT_BOT_TOKEN не задан, работает только API")

    # Если один упадёт, упадут оба
    await asyncio.gather(*services)


if __name__ == "__main__":
    try:
        asyncio.run(main())

    except KeyboardInterrupt:
        logger.info("app_interrupted", message="⛔ Приложение остановлено пользователем (Ctrl+C)")

    finally:
        logger.info("app_final_shutdown", message="👋 Приложение полностью выключено")
