# config/settings.py
"""
Settings файл - здесь живут все настройки приложения.

Логика: когда приложение запускается, оно читает .env файл
и создает объект 'config' со всеми необходимыми значениями.

Секреты Telegram (токен и chat id) отсюда НЕ читаются напрямую
в обработчиках: из них один раз собирается RelayConfig и передаётся
в NotificationGateway при создании приложения.
"""

from dataclasses import dataclass
from typing import Annotated, Any, List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Основной класс настроек.

    BaseSettings = специальный класс Pydantic который:
    1. Автоматически читает .env файл
    2. Валидирует типы (API_PORT должен быть int и т.д.)
    """

    # ==========================================
    # TELEGRAM (куда уходят заказы)
    # ==========================================
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    # MarkdownV2 или пустая строка (простой текст без экранирования)
    telegram_parse_mode: str = "MarkdownV2"

    # ==========================================
    # STOREFRONT BOT (витрина в Telegram)
    # ==========================================
    storefront_bot_token: str = ""

    # ==========================================
    # REDIS (FSM состояния бота)
    # ==========================================
    redis_url: str = ""

    # ==========================================
    # API
    # ==========================================
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    gateway_url: str = ""

    # ==========================================
    # ЗАКАЗ
    # ==========================================
    max_proof_size_mb: int = 5
    # Через запятую: IN_APP_MARKERS=Telegram,Instagram
    in_app_markers: Annotated[List[str], NoDecode] = ["Telegram"]
    bank_instructions: str = (
        "Please transfer the total to Commercial Bank of Ethiopia, "
        "account 1000123456789 (Munira's Delights), "
        "then upload a screenshot of the payment."
    )

    # ==========================================
    # ENVIRONMENT
    # ==========================================
    environment: Literal["development", "production"] = "development"
    debug: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator("in_app_markers", mode="before")
    @classmethod
    def split_markers(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [marker.strip() for marker in value.split(",") if marker.strip()]
        return value

    @property
    def max_proof_bytes(self) -> int:
        return self.max_proof_size_mb * 1024 * 1024

    @property
    def submission_url(self) -> str:
        """Куда бот отправляет готовые заказы."""
        return self.gateway_url or f"http://127.0.0.1:{self.api_port}"


@dataclass(frozen=True)
class RelayConfig:
    """
    Всё что нужно шлюзу чтобы писать в чат оператора.

    Собирается один раз при старте. Если токена или chat id нет,
    шлюз работает в режиме "успех с предупреждением".
    """

    bot_token: str
    chat_id: str
    parse_mode: Optional[str] = "MarkdownV2"

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @property
    def markdown(self) -> bool:
        return bool(self.parse_mode)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayConfig":
        return cls(
            bot_token=settings.telegram_bot_token.strip(),
            chat_id=settings.telegram_chat_id.strip(),
            parse_mode=settings.telegram_parse_mode or None,
        )


config = Settings()
