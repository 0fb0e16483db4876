"""Tests for ``tagorm.migration`` - auto-migration against an executor double."""

from __future__ import annotations

import pytest

from tagorm import column, model
from tagorm.errors import ExecutionError, MultiplePrimaryKeysError
from tagorm.migration import MigrationResult, MigrationSession, auto_migrate
from tests._support.models import Item, Post, User

POSTS_FK = (
    "ALTER TABLE posts ADD CONSTRAINT users_posts_fkey FOREIGN KEY (user_id) "
    "REFERENCES users (id) ON DELETE CASCADE ON UPDATE CASCADE"
)


@model
class Broken:
    a: int = column("primaryKey", default=0)
    b: int = column("primaryKey", default=0)


def _executed(executor) -> list[str]:
    return [call.args[0] for call in executor.execute.await_args_list]


def _fail_on(prefix: str, message: str):
    async def side_effect(sql, values=()):
        if sql.startswith(prefix):
            raise ExecutionError(message, statement=sql)
        return "OK"

    return side_effect


class TestMigrationSession:
    def test_statements_in_execution_order(self):
        session = MigrationSession()
        session.add(Post)
        session.add(User)
        statements = session.statements()
        assert statements[0].startswith("CREATE TABLE IF NOT EXISTS posts (")
        assert statements[1].startswith("CREATE TABLE IF NOT EXISTS users (")
        assert statements[2] == POSTS_FK
        assert len(statements) == 3

    def test_foreign_keys_registered_at_add_time(self):
        session = MigrationSession()
        session.add(User)
        assert [fk.constraint_name for fk in session.foreign_keys_for("posts")] == ["users_posts_fkey"]
        assert len(session.registry) == 2

    def test_same_table_twice(self):
        session = MigrationSession()
        session.add(Item)
        session.add(Item())
        assert list(session.tables) == ["items"]
        assert len(session.create_statements()) == 1


class TestAutoMigrate:
    @pytest.mark.asyncio
    async def test_creates_tables_then_constraints(self, executor):
        result = await auto_migrate(executor, Post, User)

        executed = _executed(executor)
        assert executed[0].startswith("CREATE TABLE IF NOT EXISTS posts (")
        assert executed[1].startswith("CREATE TABLE IF NOT EXISTS users (")
        assert executed[2] == POSTS_FK
        assert result == MigrationResult(
            created=["posts", "users"],
            constraints_applied=["users_posts_fkey"],
        )
        assert result.ok

    @pytest.mark.asyncio
    @pytest.mark.parametrize("models", [(Post, User), (User, Post)])
    async def test_parent_exists_before_its_constraint(self, executor, models):
        await auto_migrate(executor, *models)

        executed = _executed(executor)
        users_created = next(
            i for i, sql in enumerate(executed) if sql.startswith("CREATE TABLE IF NOT EXISTS users")
        )
        assert executed.index(POSTS_FK) > users_created

    @pytest.mark.asyncio
    async def test_constraints_for_unmigrated_tables_are_skipped(self, executor):
        await auto_migrate(executor, User)
        assert len(_executed(executor)) == 1

    @pytest.mark.asyncio
    async def test_failed_create_is_recorded_and_migration_continues(self, executor):
        executor.execute.side_effect = _fail_on("CREATE TABLE IF NOT EXISTS posts", "permission denied")

        result = await auto_migrate(executor, Post, User)

        assert result.failed == {"posts": "permission denied"}
        assert result.created == ["users"]
        assert POSTS_FK not in _executed(executor)
        assert not result.ok

    @pytest.mark.asyncio
    async def test_existing_constraint_is_tolerated(self, executor):
        executor.execute.side_effect = _fail_on(
            "ALTER TABLE", 'constraint "users_posts_fkey" for relation "posts" already exists'
        )

        result = await auto_migrate(executor, Post, User)

        assert result.constraints_existing == ["users_posts_fkey"]
        assert result.constraints_applied == []
        assert result.created == ["posts", "users"]

    @pytest.mark.asyncio
    async def test_other_constraint_failures_abort(self, executor):
        executor.execute.side_effect = _fail_on("ALTER TABLE", "permission denied for table posts")

        with pytest.raises(ExecutionError, match="permission denied"):
            await auto_migrate(executor, Post, User)

        assert _executed(executor)[-1] == POSTS_FK

    @pytest.mark.asyncio
    async def test_schema_errors_run_nothing(self, executor):
        with pytest.raises(MultiplePrimaryKeysError):
            await auto_migrate(executor, Item, Broken)
        executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_statements_carry_no_values(self, executor):
        await auto_migrate(executor, Item)
        assert executor.execute.await_args.args[1] == []
