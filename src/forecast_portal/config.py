import os
from typing import Self
from urllib.parse import quote

from pydantic import BaseModel


class ConfigurationMissing(Exception):
    def __init__(self, *names: str):
        super().__init__(f"{', '.join(names)} not set.")
        self.names = names


class Settings(BaseModel):
    database_url: str
    factory_address: str | None = None
    chain_id: int | None = None
    agent_id: str | None = None
    sentry_dsn: str | None = None
    sentry_environment: str | None = None

    @classmethod
    def from_env(cls) -> Self:
        """
        Reads settings from the environment. Missing database settings raise
        ConfigurationMissing; the app can't start without a database.
        """
        chain_id = os.environ.get("CHAIN_ID")
        return cls(
            database_url=_database_url(),
            factory_address=os.environ.get("FACTORY_ADDRESS") or None,
            chain_id=int(chain_id) if chain_id else None,
            agent_id=os.environ.get("AGENT_ID") or None,
            sentry_dsn=os.environ.get("SENTRY_DSN"),
            sentry_environment=os.environ.get("SENTRY_ENVIRONMENT"),
        )

    def require_factory(self) -> tuple[str, int]:
        missing = []
        if self.factory_address is None:
            missing.append("FACTORY_ADDRESS")
        if self.chain_id is None:
            missing.append("CHAIN_ID")
        if missing:
            raise ConfigurationMissing(*missing)
        assert self.factory_address is not None and self.chain_id is not None
        return self.factory_address, self.chain_id


def _database_url() -> str:
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    parts = {
        name: os.environ.get(name)
        for name in ("DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME")
    }
    missing = [name for name, value in parts.items() if not value]
    if missing:
        raise ConfigurationMissing("DATABASE_URL", *missing)

    driver = os.environ.get("DB_DRIVER", "postgresql")
    port = os.environ.get("DB_PORT", "5432")
    return (
        f"{driver}://{quote(parts['DB_USER'] or '')}:{quote(parts['DB_PASSWORD'] or '')}"
        f"@{parts['DB_HOST']}:{port}/{parts['DB_NAME']}"
    )
