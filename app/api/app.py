# app/api/app.py
"""
FastAPI приложение шлюза заказов.

create_app() собирает RelayConfig из настроек ОДИН раз и отдаёт
его в NotificationGateway. Для тестов можно подсунуть свой relay.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from app.api.orders import router as orders_router
from app.gateway import NotificationGateway
from config.settings import RelayConfig, Settings, config

logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None, relay=None) -> FastAPI:
    settings = settings or config
    relay_config = RelayConfig.from_settings(settings)
    gateway = NotificationGateway(
        relay_config,
        relay=relay,
        max_proof_bytes=settings.max_proof_bytes,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("api_startup", telegram_configured=gateway.configured, parse_mode=relay_config.parse_mode)
        try:
            yield
        finally:
            logger.info("api_shutdown")
            await gateway.close()

    app = FastAPI(
        title="Munira's Delights API",
        description="Заказы с сайта и из бота -> чат оператора в Telegram",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.gateway = gateway
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Проверка что сервис живой (Docker / мониторинг)."""
        return {
            "status": "ok",
            "service": "muniras_delights",
            "telegram_configured": gateway.configured,
        }

    app.include_router(orders_router, prefix="/api")
    return app
