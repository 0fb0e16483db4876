"""Tests for ``tagorm.cli`` - command smoke tests via CliRunner.

The migrate command runs against an executor double; no database is needed.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
import typer
from typer.testing import CliRunner

from tagorm import __version__
from tagorm.cli import app, load_model
from tagorm.errors import ExecutionError
from tagorm.orm import Orm
from tests._support.models import Item

runner = CliRunner()

MODELS = "tests._support.models"


class TestLoadModel:
    def test_resolves_class(self):
        assert load_model(f"{MODELS}:Item") is Item

    @pytest.mark.parametrize("ref", ["Item", f"{MODELS}:", ":Item", "no.such.module:Item", f"{MODELS}:Nope"])
    def test_bad_reference(self, ref):
        with pytest.raises(typer.BadParameter):
            load_model(ref)


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"tagorm {__version__}" in result.output


class TestSchemaCommand:
    def test_prints_create_statement(self):
        result = runner.invoke(app, ["schema", f"{MODELS}:Item"])
        assert result.exit_code == 0
        assert result.output == (
            "CREATE TABLE IF NOT EXISTS items (\n"
            "  id SERIAL,\n"
            "  name VARCHAR(255) not null,\n"
            "  PRIMARY KEY (id)\n"
            ");\n"
        )

    def test_prints_foreign_keys_after_child_table(self):
        result = runner.invoke(app, ["schema", f"{MODELS}:Post", f"{MODELS}:User"])
        assert result.exit_code == 0
        blocks = result.output.strip().split("\n\n")
        assert blocks[0].startswith("CREATE TABLE IF NOT EXISTS posts")
        assert blocks[1].startswith("ALTER TABLE posts ADD CONSTRAINT users_posts_fkey")
        assert blocks[2].startswith("CREATE TABLE IF NOT EXISTS users")

    def test_dialect_option(self):
        result = runner.invoke(app, ["schema", f"{MODELS}:Item", "--dialect", "mysql"])
        assert result.exit_code == 0
        assert "id INTEGER AUTO_INCREMENT" in result.output

    def test_unknown_dialect(self):
        result = runner.invoke(app, ["schema", f"{MODELS}:Item", "--dialect", "oracle"])
        assert result.exit_code == 2

    def test_not_a_model(self):
        result = runner.invoke(app, ["schema", f"{MODELS}:USER_DDL"])
        assert result.exit_code == 1
        assert "is not a struct" in result.output

    def test_bad_reference(self):
        result = runner.invoke(app, ["schema", "nowhere"])
        assert result.exit_code == 2


class TestMigrateCommand:
    @pytest.fixture(autouse=True)
    def quiet_logging(self):
        with patch("tagorm.cli.configure_logging"):
            yield

    def test_success(self, executor):
        orm = Orm(executor)
        with patch("tagorm.orm.Orm.connect", new_callable=AsyncMock, return_value=orm) as connect:
            result = runner.invoke(
                app, ["migrate", f"{MODELS}:Item", "--database-url", "postgresql://localhost/app", "-q"]
            )

        assert result.exit_code == 0, result.output
        assert "items" in result.output
        assert "created" in result.output
        settings = connect.await_args.args[0]
        assert settings.database_url == "postgresql://localhost/app"
        assert settings.echo_statements is False

    def test_failed_table_exits_non_zero(self, executor):
        executor.execute.side_effect = ExecutionError("permission denied")
        with patch("tagorm.orm.Orm.connect", new_callable=AsyncMock, return_value=Orm(executor)):
            result = runner.invoke(app, ["migrate", f"{MODELS}:Item", "--database-url", "postgresql://x/y"])

        assert result.exit_code == 1
        assert "permission denied" in result.output

    def test_missing_database_url(self):
        with patch("tagorm.orm.create_pool", new_callable=AsyncMock) as create:
            result = runner.invoke(app, ["migrate", f"{MODELS}:Item"])

        assert result.exit_code == 1
        assert "dataSourceName is empty" in result.output
        create.assert_not_awaited()
