"""
Test conftest — isolate Slack credentials and config discovery so that
tests are not affected by real tokens in the developer's or CI
environment.
"""
import pytest

_ENV_VARS = [
    "SLACK_APP_LEVEL_TOKEN",
    "SLACK_USER_OAUTH_TOKEN",
    "SOCKETBOT_CONFIG",
]


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Remove Slack env vars for every test so Settings() behaves as if no
    tokens are present unless the test explicitly provides them.
    Also disables .env file loading so local developer .env files don't
    leak real credentials into tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    import socketbot.config.settings as settings_module
    from pydantic_settings import SettingsConfigDict
    patched_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )
    monkeypatch.setattr(settings_module.Settings, "model_config", patched_config)
    monkeypatch.setattr(settings_module, "_singleton", None)
