"""
ORM facade: statement builders + executor + row marshaling.

Examples:
    >>> async with await Orm.connect(OrmSettings(database_url="postgresql://localhost/app")) as orm:
    ...     await orm.auto_migrate(User, Post)
    ...     user = await orm.create(User(name="ada"))
    ...     users = await orm.find_all(User, QueryFilter(where="name = $1", args=["ada"]))
"""

from __future__ import annotations

from typing import Any, TypeVar

from tagorm.database import close_pool, create_pool
from tagorm.dialect import Dialect, PostgreSQLDialect, get_dialect
from tagorm.dml import delete_statement, insert_statement, select_statement, update_statement
from tagorm.errors import InvalidDriverError, MissingDSNError
from tagorm.executor import PoolExecutor
from tagorm.logging import get_logger
from tagorm.marshal import hydrate, instantiate
from tagorm.migration import MigrationResult, auto_migrate
from tagorm.protocols import Executor
from tagorm.query import QueryFilter, require_filter
from tagorm.settings import OrmSettings, get_settings

logger = get_logger(__name__)

T = TypeVar("T")

EXECUTABLE_DRIVERS = ("postgres", "postgresql")


def check_settings(settings: OrmSettings) -> None:
    """Reject settings the ORM cannot connect with.

    Raises:
        InvalidDriverError: empty driver, or a driver other than PostgreSQL.
        MissingDSNError: no database URL.
    """
    if not settings.driver:
        raise InvalidDriverError(settings.driver)
    if settings.driver not in EXECUTABLE_DRIVERS:
        raise InvalidDriverError(
            settings.driver,
            f"unsupported driver: {settings.driver}. Only postgres is supported at the moment",
        )
    if not settings.database_url:
        raise MissingDSNError()


class Orm:
    """Database operations over tagged dataclass models.

    Construct directly around any :class:`Executor`, or call
    :meth:`connect` to open an asyncpg pool from settings.
    """

    def __init__(self, executor: Executor, dialect: Dialect | None = None, *, pool: Any = None):
        self.executor = executor
        self.dialect = dialect or PostgreSQLDialect()
        self._pool = pool

    @classmethod
    async def connect(cls, settings: OrmSettings | None = None) -> Orm:
        settings = settings or get_settings()
        check_settings(settings)
        pool = await create_pool(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            command_timeout=settings.command_timeout,
            ssl=settings.ssl,
        )
        executor = PoolExecutor(pool, echo=settings.echo_statements)
        return cls(executor, get_dialect(settings.driver), pool=pool)

    async def close(self) -> None:
        """Close the pool opened by :meth:`connect`; no-op otherwise."""
        if self._pool is not None:
            await close_pool(self._pool)
            self._pool = None

    async def __aenter__(self) -> Orm:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ── Reads ────────────────────────────────────────────────────

    async def find_all(self, model: type[T], query_filter: QueryFilter | None = None) -> list[T]:
        """Every row of ``model``'s table matching the optional filter."""
        statement = select_statement(model, query_filter, self.dialect)
        rows = await self.executor.fetch(statement.text, statement.values)
        return [instantiate(model, row) for row in rows]

    async def find(self, model: Any, query_filter: QueryFilter | None) -> Any:
        """First row matching ``query_filter``.

        ``model`` may be a class (a new instance is returned) or an instance
        (filled in place and returned).  Returns ``None`` when nothing matches.
        """
        require_filter(query_filter)
        statement = select_statement(model, query_filter, self.dialect)
        row = await self.executor.fetchrow(statement.text, statement.values)
        if row is None:
            return None
        if isinstance(model, type):
            return instantiate(model, row)
        return hydrate(model, row)

    # ── Writes ───────────────────────────────────────────────────

    async def create(self, instance: T) -> T:
        """Insert ``instance``; the returned row (id, defaults) is copied back onto it."""
        statement = insert_statement(instance, self.dialect)
        if not self.dialect.supports_returning:
            await self.executor.execute(statement.text, statement.values)
            return instance
        row = await self.executor.fetchrow(statement.text, statement.values)
        if row is not None:
            hydrate(instance, row)
        return instance

    async def update(self, instance: T, query_filter: QueryFilter | None) -> T:
        """Write every non-key column of ``instance`` to the rows matching the filter."""
        statement = update_statement(instance, query_filter, self.dialect)
        if not self.dialect.supports_returning:
            await self.executor.execute(statement.text, statement.values)
            return instance
        row = await self.executor.fetchrow(statement.text, statement.values)
        if row is not None:
            hydrate(instance, row)
        return instance

    async def delete(self, model: Any, query_filter: QueryFilter | None) -> str:
        """Delete the rows matching the filter; returns the driver status (``DELETE n``)."""
        statement = delete_statement(model, query_filter, self.dialect)
        return await self.executor.execute(statement.text, statement.values)

    # ── Schema ───────────────────────────────────────────────────

    async def auto_migrate(self, *models: Any) -> MigrationResult:
        result = await auto_migrate(self.executor, *models, dialect=self.dialect)
        logger.info(
            "migration_finished",
            created=result.created,
            failed=list(result.failed),
            constraints=result.constraints_applied,
        )
        return result


__all__ = ["Orm", "check_settings", "EXECUTABLE_DRIVERS"]
