"""
Persistence gateway.

`Storage` owns the connection pool and is handed to the repos explicitly.
Every driver exception leaving it is a `StorageError`, so callers never need
to know which database driver is behind the url.
"""
import asyncio
import logging
import sqlite3
from collections import namedtuple
from typing import Any, Literal, Self

from databases import Database
from databases.interfaces import Record
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql import ClauseElement
from sqlalchemy.sql.dml import Delete, Insert, Update

from .tables import agent_deployed_games

logger = logging.getLogger(__name__)

ExecuteResult = namedtuple("ExecuteResult", ["rowcount", "ids"])

IntegrityKind = Literal["unique", "foreign_key", "not_null", "other"]

# SQLSTATE codes, postgres drivers expose them as `sqlstate` or `pgcode`.
_SQLSTATE_KINDS: dict[str, IntegrityKind] = {
    "23505": "unique",
    "23503": "foreign_key",
    "23502": "not_null",
}

# MySQL / MariaDB error numbers.
_MYSQL_KINDS: dict[int, IntegrityKind] = {
    1062: "unique",
    1216: "foreign_key",
    1452: "foreign_key",
    1048: "not_null",
}

# Prefixes of sqlite3.IntegrityError messages.
_SQLITE_KINDS: dict[str, IntegrityKind] = {
    "UNIQUE constraint failed": "unique",
    "FOREIGN KEY constraint failed": "foreign_key",
    "NOT NULL constraint failed": "not_null",
}


class StorageError(Exception):
    pass


class StorageUnavailable(StorageError):
    """Connection, credential or query failure."""


class IntegrityViolation(StorageError):
    def __init__(self, kind: IntegrityKind, message: str):
        super().__init__(message)
        self.kind = kind


def classify(error: Exception) -> StorageError:
    """Maps a driver exception onto the StorageError hierarchy."""
    if isinstance(error, StorageError):
        return error
    message = str(error) or error.__class__.__name__

    sqlstate = getattr(error, "sqlstate", None) or getattr(error, "pgcode", None)
    if isinstance(sqlstate, str) and sqlstate.startswith("23"):
        return IntegrityViolation(_SQLSTATE_KINDS.get(sqlstate, "other"), message)

    if isinstance(error, sqlite3.IntegrityError):
        for prefix, kind in _SQLITE_KINDS.items():
            if message.startswith(prefix):
                return IntegrityViolation(kind, message)
        return IntegrityViolation("other", message)

    if error.__class__.__name__ == "IntegrityError" and error.args:
        code = error.args[0]
        if isinstance(code, int):
            return IntegrityViolation(_MYSQL_KINDS.get(code, "other"), message)

    return StorageUnavailable(message)


class Storage:
    def __init__(self, database_url: str, **options: Any):
        self.database = Database(database_url, **options)
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def connect(self) -> None:
        if self.database.is_connected:
            return
        try:
            await self.database.connect()
        except Exception as e:
            logger.critical("Could not connect to the database: %s", e)
            raise classify(e) from e
        logger.info("Database connection pool created.")

    async def disconnect(self) -> None:
        if self.database.is_connected:
            logger.info("Closing database connection pool.")
            await self.database.disconnect()
        self._schema_ready = False

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    async def ensure_schema(self) -> None:
        """
        Creates agent_deployed_games if it's missing. The parent
        deployed_contracts table has to exist already.
        """
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            await self.connect()
            try:
                await self.database.execute(
                    query=CreateTable(agent_deployed_games, if_not_exists=True)
                )
            except Exception as e:
                logger.error(
                    "Error creating the agent_deployed_games table: %s", e
                )
                raise classify(e) from e
            logger.info('Table "agent_deployed_games" ensured.')
            self._schema_ready = True

    async def execute(self, query: Insert | Update | Delete) -> ExecuteResult:
        """
        Runs a mutating statement and reports how many rows it touched.
        The primary key is added as a RETURNING clause so the count works the
        same way on every backend.
        """
        await self.ensure_schema()
        primary_key = list(query.table.primary_key.columns)  # type: ignore[attr-defined]
        try:
            rows = await self.database.fetch_all(
                query=query.returning(*primary_key)
            )
        except Exception as e:
            raise classify(e) from e
        ids = [row[primary_key[0].name] for row in rows]
        return ExecuteResult(rowcount=len(rows), ids=ids)

    async def fetch_all(self, query: ClauseElement) -> list[Record]:
        await self.ensure_schema()
        try:
            return await self.database.fetch_all(query=query)
        except Exception as e:
            raise classify(e) from e

    async def fetch_one(self, query: ClauseElement) -> Record | None:
        await self.ensure_schema()
        try:
            return await self.database.fetch_one(query=query)
        except Exception as e:
            raise classify(e) from e
