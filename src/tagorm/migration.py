"""
Auto-migration: create every table, then the foreign keys between them.

This is not a schema-evolution tool.  Tables are created with
``CREATE TABLE IF NOT EXISTS`` and never altered beyond adding foreign-key
constraints.

Flow:
    ::

        auto_migrate(executor, Post, User)
          │
          ├── MigrationSession.add(model)      build + render every table
          │     └── ForeignKeyRegistry          FKs keyed by child table
          │
          ├── for each table, in registration order
          │     └── CREATE TABLE IF NOT EXISTS  failure → logged, next table
          │
          └── for each created table
                └── ALTER TABLE ... ADD CONSTRAINT
                        "already exists"        → recorded, continue
                        any other failure       → ExecutionError, abort

Tables are not ordered by dependency; every parent exists by the time its
constraints run, whatever order the models were given in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tagorm.dialect import Dialect, PostgreSQLDialect
from tagorm.errors import ExecutionError
from tagorm.logging import LogContext, get_logger
from tagorm.protocols import Executor
from tagorm.table import ForeignKey, ForeignKeyRegistry, TableModel

logger = get_logger(__name__)

ALREADY_EXISTS = "already exists"


@dataclass
class MigrationResult:
    """Outcome of one :func:`auto_migrate` call."""

    created: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    constraints_applied: list[str] = field(default_factory=list)
    constraints_existing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class MigrationSession:
    """Tables and foreign keys gathered for one migration run."""

    def __init__(self, dialect: Dialect | None = None):
        self.dialect = dialect or PostgreSQLDialect()
        self.registry = ForeignKeyRegistry()
        self.tables: dict[str, TableModel] = {}

    def add(self, obj: Any) -> TableModel:
        """Build and render ``obj``'s table, registering its foreign keys.

        A later model with the same table name replaces the earlier one.
        """
        table = TableModel.build(obj)
        table.create_statement(self.dialect, self.registry)
        self.tables[table.table_name] = table
        return table

    def create_statements(self) -> list[str]:
        return [table.create_statement(self.dialect) for table in self.tables.values()]

    def foreign_keys_for(self, table_name: str) -> list[ForeignKey]:
        return self.registry.for_table(table_name)

    def statements(self) -> list[str]:
        """Every statement a migration would run, in execution order."""
        result = self.create_statements()
        for name in self.tables:
            result.extend(fk.to_sql() for fk in self.foreign_keys_for(name))
        return result


async def auto_migrate(
    executor: Executor,
    *models: Any,
    dialect: Dialect | None = None,
) -> MigrationResult:
    """Create every model's table and foreign keys.

    Raises:
        SchemaError: a model cannot be turned into a table (nothing is run).
        ExecutionError: a foreign-key statement failed for a reason other
            than the constraint already existing.
    """
    session = MigrationSession(dialect)
    for obj in models:
        session.add(obj)

    result = MigrationResult()

    for name, table in session.tables.items():
        with LogContext(table=name):
            try:
                await executor.execute(table.create_statement(session.dialect), [])
            except ExecutionError as e:
                logger.error("table_create_failed", error=e.message)
                result.failed[name] = e.message
                continue

            result.created.append(name)
            logger.info("table_created")

    for name in result.created:
        with LogContext(table=name):
            for fk in session.foreign_keys_for(name):
                try:
                    await executor.execute(fk.to_sql(), [])
                except ExecutionError as e:
                    if ALREADY_EXISTS not in str(e):
                        raise
                    logger.info("constraint_exists", constraint=fk.constraint_name)
                    result.constraints_existing.append(fk.constraint_name)
                    continue
                result.constraints_applied.append(fk.constraint_name)

    return result


__all__ = ["MigrationResult", "MigrationSession", "auto_migrate", "ALREADY_EXISTS"]
