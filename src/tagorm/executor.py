"""asyncpg-backed :class:`~tagorm.protocols.Executor`."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import asyncpg

from tagorm.errors import ExecutionError
from tagorm.logging import get_logger
from tagorm.protocols import Record

logger = get_logger(__name__)

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError)


class PoolExecutor:
    """Runs statements on connections acquired from an asyncpg pool.

    Every statement and its arguments are logged (event ``statement``)
    before execution when ``echo`` is on.  Driver failures are re-raised as
    :class:`ExecutionError` with the driver exception as ``cause``.
    """

    def __init__(self, pool: asyncpg.Pool, *, echo: bool = True):
        self.pool = pool
        self.echo = echo

    def _echo(self, sql: str, values: Sequence[Any]) -> None:
        if self.echo:
            logger.info("statement", sql=sql, args=list(values))

    async def execute(self, sql: str, values: Sequence[Any] = ()) -> str:
        self._echo(sql, values)
        try:
            async with self.pool.acquire() as conn:
                return await conn.execute(sql, *values)
        except _DRIVER_ERRORS as e:
            raise ExecutionError(str(e), statement=sql, cause=e) from e

    async def fetch(self, sql: str, values: Sequence[Any] = ()) -> list[Record]:
        self._echo(sql, values)
        try:
            async with self.pool.acquire() as conn:
                return list(await conn.fetch(sql, *values))
        except _DRIVER_ERRORS as e:
            raise ExecutionError(str(e), statement=sql, cause=e) from e

    async def fetchrow(self, sql: str, values: Sequence[Any] = ()) -> Record | None:
        self._echo(sql, values)
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(sql, *values)
        except _DRIVER_ERRORS as e:
            raise ExecutionError(str(e), statement=sql, cause=e) from e


__all__ = ["PoolExecutor"]
