import pytest

from forecast_portal.config import ConfigurationMissing, Settings

ENV_NAMES = (
    "DATABASE_URL",
    "DB_HOST",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
    "DB_PORT",
    "DB_DRIVER",
    "FACTORY_ADDRESS",
    "CHAIN_ID",
    "AGENT_ID",
    "SENTRY_DSN",
    "SENTRY_ENVIRONMENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://portal@localhost/portal")
    monkeypatch.setenv("FACTORY_ADDRESS", "0xabc")
    monkeypatch.setenv("CHAIN_ID", "11155111")
    monkeypatch.setenv("AGENT_ID", "agent-007")

    settings = Settings.from_env()
    assert settings.database_url == "postgresql://portal@localhost/portal"
    assert settings.require_factory() == ("0xabc", 11155111)
    assert settings.agent_id == "agent-007"
    assert settings.sentry_dsn is None


def test_database_parts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_USER", "portal")
    monkeypatch.setenv("DB_PASSWORD", "p@ss/word")
    monkeypatch.setenv("DB_NAME", "forecast")

    settings = Settings.from_env()
    assert (
        settings.database_url
        == "postgresql://portal:p%40ss/word@db.internal:5432/forecast"
    )

    monkeypatch.setenv("DB_DRIVER", "mysql")
    monkeypatch.setenv("DB_PORT", "3306")
    assert Settings.from_env().database_url.startswith("mysql://portal:")
    assert Settings.from_env().database_url.endswith("@db.internal:3306/forecast")


def test_database_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_HOST", "db.internal")
    with pytest.raises(ConfigurationMissing) as e:
        Settings.from_env()
    assert "DB_USER" in str(e.value)
    assert "DB_HOST" not in e.value.names


def test_factory_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///portal.db")
    monkeypatch.setenv("CHAIN_ID", "")

    settings = Settings.from_env()
    assert settings.chain_id is None
    with pytest.raises(ConfigurationMissing) as e:
        settings.require_factory()
    assert e.value.names == ("FACTORY_ADDRESS", "CHAIN_ID")
    assert str(e.value) == "FACTORY_ADDRESS, CHAIN_ID not set."
