from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("LOG_LEVEL", "STORE_PATH", "DEFAULT_GRADE", "QUESTION_SEED", "DEBUG",
                 "MAX_GENERATION_ATTEMPTS", "TOKEN_POLL_INTERVAL_SEC"):
        monkeypatch.delenv(f"MATH_PRACTICE_{name}", raising=False)


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.store_path is None
    assert settings.default_grade == "3"
    assert settings.max_generation_attempts == 10
    assert settings.token_poll_interval_sec == 30


def test_prefixed_environment_variables(monkeypatch) -> None:
    monkeypatch.setenv("MATH_PRACTICE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("MATH_PRACTICE_STORE_PATH", "/tmp/progress.json")
    monkeypatch.setenv("MATH_PRACTICE_QUESTION_SEED", "42")
    monkeypatch.setenv("MATH_PRACTICE_DEBUG", "true")
    monkeypatch.setenv("MATH_PRACTICE_DEFAULT_GRADE", "")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    settings = Settings(_env_file=None)
    assert settings.log_level == "DEBUG"
    assert settings.store_path == Path("/tmp/progress.json")
    assert settings.question_seed == 42
    assert settings.debug is True
    assert settings.default_grade == "3"


def test_env_file(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("MATH_PRACTICE_TOKEN_POLL_INTERVAL_SEC=12\n", encoding="utf-8")
    assert Settings(_env_file=env_file).token_poll_interval_sec == 12


def test_invalid_values_are_rejected(monkeypatch) -> None:
    monkeypatch.setenv("MATH_PRACTICE_MAX_GENERATION_ATTEMPTS", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_settings_are_cached() -> None:
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
