"""Клиентская сторона: определение окружения и отправка заказа в шлюз."""

from .environment import ClientEnvironment, detect_client_environment
from .submission import Encoding, PreparedRequest, SubmissionClient, SubmissionOutcome

__all__ = [
    "ClientEnvironment",
    "detect_client_environment",
    "Encoding",
    "PreparedRequest",
    "SubmissionClient",
    "SubmissionOutcome",
]
