"""SQLite 适配器单元测试

测试内容：
1. 读 / RETURNING / 普通写三条执行路径
2. tags 往返保持顺序
3. 迁移可重复执行（schema 不变）
4. 引擎错误包装为 StorageError
5. DATABASE_URL 解析
"""

import pytest
from clawcontrol.core.exceptions import StorageError, TagDecodeError
from clawcontrol.core.store import SCHEMA_SQL, SqliteAdapter, init_db
from clawcontrol.core.store.adapter import is_sqlite_url, sqlite_path_from_url


async def _schema_snapshot(adapter: SqliteAdapter) -> list[tuple]:
    result = await adapter.execute(
        "SELECT type, name, sql FROM sqlite_master WHERE name NOT LIKE 'sqlite_%' ORDER BY name"
    )
    return [(row["type"], row["name"], row["sql"]) for row in result.rows]


class TestExecutePaths:
    async def test_returning_insert_yields_row(self, sqlite_adapter: SqliteAdapter):
        result = await sqlite_adapter.execute(
            "INSERT INTO tasks (title, tags) VALUES ($1, $2) RETURNING *",
            ["Write docs", ["docs", "writing"]],
        )
        assert result.affected_count == 1
        row = result.rows[0]
        assert row["title"] == "Write docs"
        assert row["status"] == "backlog"
        assert row["tags"] == ["docs", "writing"]
        assert row["created_at"] is not None

    async def test_plain_write_reports_affected_count(self, sqlite_adapter: SqliteAdapter):
        for title in ("a", "b", "c"):
            await sqlite_adapter.execute("INSERT INTO tasks (title) VALUES ($1)", [title])
        result = await sqlite_adapter.execute(
            "UPDATE tasks SET status = $1 WHERE title <> $2", ["todo", "c"]
        )
        assert result.rows == []
        assert result.affected_count == 2

    async def test_plain_insert_reports_last_insert_id(self, sqlite_adapter: SqliteAdapter):
        result = await sqlite_adapter.execute("INSERT INTO tasks (title) VALUES ($1)", ["x"])
        assert result.affected_count == 1
        assert result.last_insert_id is not None

    async def test_read_returns_rows(self, sqlite_adapter: SqliteAdapter):
        await sqlite_adapter.execute("INSERT INTO tasks (title) VALUES ($1)", ["x"])
        result = await sqlite_adapter.execute("SELECT id, title FROM tasks")
        assert [row["title"] for row in result.rows] == ["x"]
        assert result.affected_count == 0

    async def test_default_tags_decode_to_empty_list(self, sqlite_adapter: SqliteAdapter):
        result = await sqlite_adapter.execute(
            "INSERT INTO tasks (title) VALUES ($1) RETURNING *", ["no tags"]
        )
        assert result.rows[0]["tags"] == []

    async def test_now_has_millisecond_precision(self, sqlite_adapter: SqliteAdapter):
        result = await sqlite_adapter.execute(
            "INSERT INTO tasks (title) VALUES ($1) RETURNING created_at", ["t"]
        )
        assert "." in result.rows[0]["created_at"]


class TestTagsRoundTrip:
    async def test_order_preserved(self, sqlite_adapter: SqliteAdapter):
        inserted = await sqlite_adapter.execute(
            "INSERT INTO tasks (title, tags) VALUES ($1, $2) RETURNING id",
            ["t", ["zeta", "alpha", "mid"]],
        )
        task_id = inserted.rows[0]["id"]
        fetched = await sqlite_adapter.execute("SELECT tags FROM tasks WHERE id = $1", [task_id])
        assert fetched.rows[0]["tags"] == ["zeta", "alpha", "mid"]

    async def test_malformed_tags_lenient(self, sqlite_adapter: SqliteAdapter):
        await sqlite_adapter.execute(
            "INSERT INTO tasks (title, tags) VALUES ($1, $2)", ["t", "not-json"]
        )
        result = await sqlite_adapter.execute("SELECT tags FROM tasks")
        assert result.rows[0]["tags"] == []

    async def test_malformed_tags_strict(self, tmp_path):
        adapter = await SqliteAdapter.connect(str(tmp_path / "strict.db"), strict_tags=True)
        try:
            await init_db(adapter)
            await adapter.execute(
                "INSERT INTO tasks (title, tags) VALUES ($1, $2)", ["t", "not-json"]
            )
            with pytest.raises(TagDecodeError):
                await adapter.execute("SELECT tags FROM tasks")
        finally:
            await adapter.close()


class TestMigration:
    async def test_migration_is_idempotent(self, sqlite_adapter: SqliteAdapter):
        before = await _schema_snapshot(sqlite_adapter)
        await sqlite_adapter.run_migration(SCHEMA_SQL)
        await sqlite_adapter.run_migration(SCHEMA_SQL)
        after = await _schema_snapshot(sqlite_adapter)
        assert before == after
        names = {name for _, name, _ in after}
        assert {"agents", "tasks", "agent_messages", "idx_agents_name"} <= names

    async def test_status_check_constraint(self, sqlite_adapter: SqliteAdapter):
        with pytest.raises(StorageError):
            await sqlite_adapter.execute(
                "INSERT INTO tasks (title, status) VALUES ($1, $2)", ["t", "done"]
            )

    async def test_failed_write_rolls_back(self, sqlite_adapter: SqliteAdapter):
        with pytest.raises(StorageError):
            await sqlite_adapter.execute("INSERT INTO tasks (description) VALUES ($1)", ["x"])
        result = await sqlite_adapter.execute("SELECT COUNT(*) AS count FROM tasks")
        assert result.rows[0]["count"] == 0

    async def test_bad_sql_raises_storage_error(self, sqlite_adapter: SqliteAdapter):
        with pytest.raises(StorageError) as exc_info:
            await sqlite_adapter.execute("SELECT * FROM no_such_table")
        assert "no_such_table" in str(exc_info.value)

    async def test_ping(self, sqlite_adapter: SqliteAdapter):
        await sqlite_adapter.ping()


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        "url,path",
        [
            ("sqlite:data/sqlite/clawcontrol.db", "data/sqlite/clawcontrol.db"),
            ("sqlite:///tmp/x.db", "/tmp/x.db"),
            ("sqlite::memory:", ":memory:"),
            ("sqlite:", ":memory:"),
        ],
    )
    def test_sqlite_path_from_url(self, url: str, path: str):
        assert is_sqlite_url(url)
        assert sqlite_path_from_url(url) == path

    def test_postgres_url_not_sqlite(self):
        assert not is_sqlite_url("postgresql://user:pw@localhost/claw")
