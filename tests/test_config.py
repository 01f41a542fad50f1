"""Tests for environment-driven configuration."""
import os

import pytest
from environs import EnvError

from messagely.config import load_config
from messagely.core.exceptions import ConfigurationError

ENV_KEYS = [
    "SECRET_KEY", "JWT_ALGORITHM", "TOKEN_TTL_MINUTES", "BCRYPT_WORK_FACTOR",
    "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD", "DB_PATH", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    # read_env writes into os.environ
    for key in ENV_KEYS:
        os.environ.pop(key, None)


def _write_env(tmp_path, text: str) -> str:
    path = tmp_path / "messagely.env"
    path.write_text(text)
    return str(path)


def test_defaults(tmp_path):
    config = load_config(_write_env(tmp_path, "SECRET_KEY=s3cret\n"))

    assert config.jwt.secret_key == "s3cret"
    assert config.jwt.algorithm == "HS256"
    assert config.jwt.ttl_minutes == 1440
    assert config.security.bcrypt_rounds == 12
    assert config.db.url == "sqlite+aiosqlite:///data/messagely.db"
    assert config.log_level == "INFO"


def test_postgres_and_overrides(tmp_path):
    config = load_config(_write_env(tmp_path, "\n".join([
        "SECRET_KEY=s3cret",
        "TOKEN_TTL_MINUTES=15",
        "BCRYPT_WORK_FACTOR=10",
        "DB_HOST=db.internal",
        "DB_PORT=5432",
        "DB_NAME=messagely",
        "DB_USER=app",
        "DB_PASSWORD=pw",
        "LOG_LEVEL=debug",
    ])))

    assert config.jwt.ttl_minutes == 15
    assert config.security.bcrypt_rounds == 10
    assert config.db.url == "postgresql+asyncpg://app:pw@db.internal:5432/messagely"
    assert config.log_level == "DEBUG"


def test_secret_key_required(tmp_path):
    with pytest.raises(EnvError):
        load_config(_write_env(tmp_path, "TOKEN_TTL_MINUTES=15\n"))


@pytest.mark.parametrize("rounds", ["3", "32"])
def test_bcrypt_rounds_bounded(tmp_path, rounds):
    with pytest.raises(ConfigurationError):
        load_config(_write_env(tmp_path, f"SECRET_KEY=s3cret\nBCRYPT_WORK_FACTOR={rounds}\n"))
