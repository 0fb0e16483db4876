"""
Protocol definitions for the execution boundary.

Everything above this line (descriptors, table models, statement builders)
is pure; everything below it talks to a database.  The ORM facade and the
migrator depend only on :class:`Executor`, so tests can hand them an
``AsyncMock`` and production code a :class:`~tagorm.executor.PoolExecutor`.

Architecture:
    ::

        protocols.py
        ├── Executor    - execute / fetch / fetchrow over (sql, values)
        └── Record      - mapping-like result row (asyncpg.Record, dict)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

Record = Mapping[str, Any]


@runtime_checkable
class Executor(Protocol):
    """
    Async statement executor.

    Implementations acquire a connection per call and release it before
    returning.  Failures surface as :class:`~tagorm.errors.ExecutionError`.

    Examples:
        >>> async def count_users(executor: Executor) -> int:
        ...     row = await executor.fetchrow("SELECT count(*) AS n FROM users ", [])
        ...     return row["n"]
    """

    async def execute(self, sql: str, values: Sequence[Any] = ()) -> str:
        """Run a statement, returning the driver's status text."""
        ...

    async def fetch(self, sql: str, values: Sequence[Any] = ()) -> list[Record]:
        """Run a query and return every row."""
        ...

    async def fetchrow(self, sql: str, values: Sequence[Any] = ()) -> Record | None:
        """Run a query and return the first row, or ``None``."""
        ...


__all__ = ["Executor", "Record"]
