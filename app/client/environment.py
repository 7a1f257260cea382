# app/client/environment.py
"""
Определяем откуда пришёл клиент по User-Agent.

Встроенный браузер Telegram плохо работает с multipart загрузкой файлов,
поэтому для него картинка уходит как base64 внутри JSON.
"""

from enum import Enum as PyEnum
from typing import Iterable, Optional

DEFAULT_IN_APP_MARKERS = ("Telegram",)


class ClientEnvironment(str, PyEnum):
    BROWSER = "browser"
    IN_APP = "in_app"


def detect_client_environment(
    user_agent: Optional[str],
    markers: Iterable[str] = DEFAULT_IN_APP_MARKERS,
) -> ClientEnvironment:
    ua = (user_agent or "").lower()
    if any(marker.lower() in ua for marker in markers if marker):
        return ClientEnvironment.IN_APP
    return ClientEnvironment.BROWSER
