"""tagorm -- SQL schemas and statements derived from tagged dataclasses.

Architecture::

    Layer 1 -- Model metadata
        tags.py            Tag grammar (``primaryKey;unique;check:age > 0``) + column()
        naming.py          snake_case, pluralized table names, __tablename__
        descriptor.py      @model, describe(), SQL type inference
        datatypes.py       Date and JSON value types with db/json hooks

    Layer 2 -- Relational model and SQL text
        table.py           Field, TableModel, ForeignKey, ForeignKeyRegistry
        ddl.py             CREATE TABLE / ALTER TABLE, Unrendered -> Rendered
        dml.py             INSERT / UPDATE / DELETE / SELECT
        query.py           QueryFilter, WHERE merge, placeholder renumbering
        dialect.py         PostgreSQL (full), MySQL / SQLite (partial)

    Layer 3 -- Execution
        protocols.py       Executor protocol
        executor.py        asyncpg PoolExecutor with statement echo
        database.py        asyncpg pool lifecycle
        marshal.py         rows -> model instances
        migration.py       auto_migrate, MigrationResult
        orm.py             Orm facade

    Ambient
        errors.py          OrmError hierarchy
        settings.py        pydantic-settings OrmSettings (TAGORM_*)
        logging.py         structlog configuration
        cli.py             typer CLI (``tagorm schema`` / ``tagorm migrate``)

Example::

    from tagorm import model, column, schema

    @model
    class User:
        id: int = column("primaryKey;autoIncrement", default=0)
        name: str = column("not null", default="")

    print(schema(User))
"""

__version__ = "0.1.0"

from tagorm.datatypes import JSON, Date
from tagorm.ddl import Rendered, Unrendered, schema
from tagorm.descriptor import describe, model
from tagorm.dialect import Dialect, MySQLDialect, PostgreSQLDialect, SQLiteDialect, get_dialect
from tagorm.dml import columns, delete_statement, insert_statement, select_statement, update_statement
from tagorm.errors import (
    ConfigError,
    DatabaseError,
    DuplicateConstraintError,
    ExecutionError,
    InvalidDriverError,
    InvalidForeignKeyError,
    MissingDSNError,
    MissingFilterError,
    MultiplePrimaryKeysError,
    NotAStructError,
    OrmError,
    QueryError,
    SchemaError,
    TypeResolutionError,
)
from tagorm.migration import MigrationResult, MigrationSession, auto_migrate
from tagorm.orm import Orm
from tagorm.query import QueryFilter, Statement
from tagorm.settings import OrmSettings, get_settings
from tagorm.table import Field, ForeignKey, ForeignKeyRegistry, TableModel
from tagorm.tags import column

__all__ = [
    "__version__",
    # model metadata
    "model",
    "column",
    "describe",
    "Date",
    "JSON",
    # relational model / SQL
    "Field",
    "ForeignKey",
    "ForeignKeyRegistry",
    "TableModel",
    "Unrendered",
    "Rendered",
    "schema",
    "columns",
    "insert_statement",
    "update_statement",
    "delete_statement",
    "select_statement",
    "QueryFilter",
    "Statement",
    "Dialect",
    "PostgreSQLDialect",
    "MySQLDialect",
    "SQLiteDialect",
    "get_dialect",
    # execution
    "Orm",
    "OrmSettings",
    "get_settings",
    "MigrationResult",
    "MigrationSession",
    "auto_migrate",
    # errors
    "OrmError",
    "SchemaError",
    "NotAStructError",
    "TypeResolutionError",
    "MultiplePrimaryKeysError",
    "InvalidForeignKeyError",
    "DuplicateConstraintError",
    "QueryError",
    "MissingFilterError",
    "DatabaseError",
    "ExecutionError",
    "ConfigError",
    "InvalidDriverError",
    "MissingDSNError",
]
