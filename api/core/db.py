"""
Async database access (raw SQL) using asyncpg.

`Connector` owns the connection pool. The app creates it once on startup
(see `api/main.py`) and hands it to request handlers as a dependency;
`get_instance()` returns the same process-wide object for code that runs
outside a request, like the maintenance CLI.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every path that acquires a connection releases it before returning or
raising.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import schema
from .errors import DBConnectionError, QueryError, SetupError
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

PoolFactory = Callable[..., Awaitable[Any]]

# Errors asyncpg raises while opening or handing out connections.
_CONNECT_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
)

_QUERY_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
)

# Malformed demo rows handed to insert_default_data.
_SETUP_INPUT_ERRORS = (KeyError, TypeError)


def _sanitize_database_url(url: str) -> str:
    # TLS is configured by DB_SSL_MODE, not by the URL.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


async def _init_connection(conn: asyncpg.Connection) -> None:
    # NUMERIC comes back as float so responses serialize as JSON numbers.
    await conn.set_type_codec(
        "numeric",
        encoder=str,
        decoder=float,
        schema="pg_catalog",
        format="text",
    )


def _record_to_dict(record: Any) -> dict[str, Any]:
    return dict(record)


@dataclass(frozen=True)
class PoolStats:
    size: int
    idle: int

    @property
    def in_use(self) -> int:
        return self.size - self.idle

    def as_dict(self) -> dict[str, int]:
        return {"size": self.size, "idle": self.idle, "in_use": self.in_use}


@dataclass(frozen=True)
class SetupResult:
    operation: str
    ok: bool
    rows: int = 0
    error: SetupError | None = None


class Connector:
    def __init__(self, settings: Settings, *, pool_factory: PoolFactory | None = None) -> None:
        self.settings = settings
        self._pool_factory = pool_factory or asyncpg.create_pool
        self._pool: Any = None
        self._pool_lock = asyncio.Lock()

    # ----------------
    # POOL
    # ----------------

    async def init_pool(self) -> None:
        await self.pool()

    async def pool(self) -> Any:
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            # Another task may have built it while we waited on the lock.
            if self._pool is None:
                self._pool = await self._create_pool()
        return self._pool

    async def _create_pool(self) -> Any:
        url = self.settings.database_url
        if not url:
            raise DBConnectionError("DATABASE_URL is not set.")

        try:
            created = await self._pool_factory(
                dsn=_sanitize_database_url(url),
                min_size=self.settings.pool_min_size,
                max_size=self.settings.pool_max_size,
                command_timeout=self.settings.command_timeout,
                ssl=self.settings.ssl_mode,
                init=_init_connection,
            )
        except _CONNECT_ERRORS as exc:
            logger.error("db_pool_failed error=%s", exc)
            raise DBConnectionError(f"Could not create connection pool: {exc}") from exc

        logger.info(
            "db_pool_ready min_size=%s max_size=%s ssl_mode=%s",
            self.settings.pool_min_size,
            self.settings.pool_max_size,
            self.settings.ssl_mode,
        )
        return created

    async def close(self) -> None:
        async with self._pool_lock:
            if self._pool is None:
                return None
            await self._pool.close()
            self._pool = None
        logger.info("db_pool_closed")

    def stats(self) -> PoolStats:
        if self._pool is None:
            return PoolStats(size=0, idle=0)
        return PoolStats(size=self._pool.get_size(), idle=self._pool.get_idle_size())

    # ----------------
    # LIBRARY WRAPPERS
    # ----------------

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow one pooled connection for the duration of the `async with` block.
        """
        pool = await self.pool()
        try:
            conn = await pool.acquire(timeout=self.settings.acquire_timeout)
        except _CONNECT_ERRORS as exc:
            raise DBConnectionError(f"Could not acquire a database connection: {exc}") from exc

        try:
            yield conn
        finally:
            await pool.release(conn)

    async def query(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a statement and return all rows as a list of dicts.
        """
        async with self.connect() as conn:
            try:
                rows = await conn.fetch(sql, *args)
            except _QUERY_ERRORS as exc:
                raise QueryError(str(exc), sqlstate=getattr(exc, "sqlstate", None)) from exc
        return [_record_to_dict(r) for r in rows]

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        rows = await self.query(sql, *args)
        return rows[0] if rows else None

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return its status tag.
        """
        async with self.connect() as conn:
            try:
                return await conn.execute(sql, *args)
            except _QUERY_ERRORS as exc:
                raise QueryError(str(exc), sqlstate=getattr(exc, "sqlstate", None)) from exc

    # ----------------
    # DATABASE CONTENT
    # ----------------

    async def _run_setup(
        self,
        operation: str,
        work: Callable[[asyncpg.Connection], Awaitable[int]],
    ) -> SetupResult:
        """
        Setup and maintenance never raise; failures are logged and reported.
        """
        logger.info("db_setup_start operation=%s", operation)
        try:
            async with self.connect() as conn:
                rows = await work(conn)
        except (DBConnectionError, *_QUERY_ERRORS, *_SETUP_INPUT_ERRORS) as exc:
            error = SetupError(operation, str(exc))
            logger.exception("db_setup_failed operation=%s", operation)
            return SetupResult(operation=operation, ok=False, error=error)

        logger.info("db_setup_done operation=%s rows=%s", operation, rows)
        return SetupResult(operation=operation, ok=True, rows=rows)

    async def create_tables(self) -> SetupResult:
        async def work(conn: asyncpg.Connection) -> int:
            await conn.execute(schema.CREATE_ITEMS_TABLE)
            await conn.execute(schema.ADD_ITEMS_TAGS_COLUMN)
            await conn.execute(schema.WIDEN_ITEMS_AMOUNT_COLUMN)
            return 0

        return await self._run_setup("create_tables", work)

    async def create_tables_orders(self) -> SetupResult:
        async def work(conn: asyncpg.Connection) -> int:
            await conn.execute(schema.CREATE_ORDERS_TABLE)
            return 0

        return await self._run_setup("create_tables_orders", work)

    async def insert_default_data(
        self,
        items: tuple[dict[str, Any], ...] | list[dict[str, Any]] = schema.DEFAULT_ITEMS,
    ) -> SetupResult:
        async def work(conn: asyncpg.Connection) -> int:
            records = schema.default_item_args(items)
            if not records:
                return 0
            async with conn.transaction():
                await conn.executemany(schema.INSERT_DEFAULT_ITEM, records)
            return len(records)

        return await self._run_setup("insert_default_data", work)

    async def clear_default_data(self) -> SetupResult:
        async def work(conn: asyncpg.Connection) -> int:
            status = await conn.execute(schema.CLEAR_ITEMS)
            # Status tag looks like "DELETE 3".
            tail = str(status or "").rsplit(" ", 1)[-1]
            return int(tail) if tail.isdigit() else 0

        return await self._run_setup("clear_default_data", work)


_instance: Connector | None = None
_instance_lock = threading.Lock()


def get_instance() -> Connector:
    """
    Return the process-wide connector, building it on first use.
    """
    global _instance
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                _instance = Connector(load_settings())
    return _instance
