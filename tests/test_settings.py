# tests/test_settings.py
from config.settings import RelayConfig, Settings


def test_in_app_markers_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("IN_APP_MARKERS", "Telegram, Instagram")
    settings = Settings(_env_file=None)
    assert settings.in_app_markers == ["Telegram", "Instagram"]


def test_in_app_markers_single_value(monkeypatch):
    monkeypatch.setenv("IN_APP_MARKERS", "Telegram")
    assert Settings(_env_file=None).in_app_markers == ["Telegram"]


def test_in_app_markers_default(monkeypatch):
    monkeypatch.delenv("IN_APP_MARKERS", raising=False)
    assert Settings(_env_file=None).in_app_markers == ["Telegram"]


def test_relay_config_from_settings():
    settings = Settings(_env_file=None, telegram_bot_token=" 1:abc ", telegram_chat_id="42", telegram_parse_mode="")
    relay_config = RelayConfig.from_settings(settings)

    assert relay_config.bot_token == "1:abc"
    assert relay_config.is_configured
    assert relay_config.parse_mode is None
    assert not relay_config.markdown


def test_relay_config_missing_chat_id():
    settings = Settings(_env_file=None, telegram_bot_token="1:abc", telegram_chat_id="")
    assert not RelayConfig.from_settings(settings).is_configured
