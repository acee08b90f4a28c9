"""领域 Store 单元测试

测试内容：
1. TaskStore：创建默认值、筛选、COALESCE 部分更新、删除、计数
2. AgentStore：创建、部分更新、按 name upsert、清空
3. MessageStore：agent_name 关联、倒序、limit
"""

import asyncio

import pytest
from clawcontrol.core.exceptions import MissingFieldError, RecordNotFoundError, StorageError
from clawcontrol.core.models import AgentDefinition, TaskStatus
from clawcontrol.core.store import StoreGroup


class TestTaskStore:
    async def test_create_defaults(self, store_group: StoreGroup):
        task = await store_group.task_store.create_task(title="Ship it")
        assert task.id > 0
        assert task.status == TaskStatus.BACKLOG
        assert task.tags == []
        assert task.agent_id is None
        assert task.created_at is not None

    @pytest.mark.parametrize("title", [None, "", "   "])
    async def test_create_requires_title(self, store_group: StoreGroup, title):
        with pytest.raises(MissingFieldError) as exc_info:
            await store_group.task_store.create_task(title=title)
        assert str(exc_info.value) == "title is required"
        assert await store_group.task_store.count_tasks() == 0

    async def test_partial_update_keeps_omitted_fields(self, store_group: StoreGroup):
        store = store_group.task_store
        task = await store.create_task(
            title="Original", description="keep me", tags=["a", "b"], status="todo"
        )
        updated = await store.update_task(task.id, title="Renamed")
        assert updated.title == "Renamed"
        assert updated.description == "keep me"
        assert updated.tags == ["a", "b"]
        assert updated.status == TaskStatus.TODO
        assert updated.updated_at >= task.updated_at

    async def test_update_tags_and_status(self, store_group: StoreGroup):
        store = store_group.task_store
        task = await store.create_task(title="t", tags=["old"])
        updated = await store.update_task(task.id, tags=["x", "y"], status="review")
        assert updated.tags == ["x", "y"]
        assert updated.status == TaskStatus.REVIEW

    async def test_update_missing_task(self, store_group: StoreGroup):
        with pytest.raises(RecordNotFoundError) as exc_info:
            await store_group.task_store.update_task(999, title="x")
        assert str(exc_info.value) == "Task with id 999 does not exist"

    async def test_delete_returns_row(self, store_group: StoreGroup):
        store = store_group.task_store
        task = await store.create_task(title="gone", tags=["t"])
        deleted = await store.delete_task(task.id)
        assert deleted.id == task.id
        assert deleted.tags == ["t"]
        assert await store.get_task(task.id) is None

    async def test_delete_missing(self, store_group: StoreGroup):
        with pytest.raises(RecordNotFoundError):
            await store_group.task_store.delete_task(12345)

    async def test_list_filters_and_order(self, store_group: StoreGroup):
        store = store_group.task_store
        agent = await store_group.agent_store.create_agent(name="Filter Agent")
        first = await store.create_task(title="first", status="todo", agent_id=agent.id)
        await asyncio.sleep(0.01)
        second = await store.create_task(title="second", status="todo")
        await store.create_task(title="third", status="review", agent_id=agent.id)

        todo = await store.list_tasks(status="todo")
        assert [t.id for t in todo] == [second.id, first.id]

        combined = await store.list_tasks(status="todo", agent_id=agent.id)
        assert [t.id for t in combined] == [first.id]

        assert len(await store.list_tasks()) == 3

    async def test_list_active_excludes_completed(self, store_group: StoreGroup):
        store = store_group.task_store
        await store.create_task(title="done", status="completed")
        open_task = await store.create_task(title="open")
        active = await store.list_active_tasks()
        assert [t.id for t in active] == [open_task.id]

    async def test_count_tasks(self, store_group: StoreGroup):
        store = store_group.task_store
        for status in ("backlog", "todo", "todo", "completed"):
            await store.create_task(title=status, status=status)
        assert await store.count_tasks() == 4
        assert await store.count_tasks(["backlog", "todo"]) == 3
        assert await store.count_tasks([]) == 0


class TestAgentStore:
    async def test_create_with_defaults(self, store_group: StoreGroup):
        agent = await store_group.agent_store.create_agent(name="Scout")
        assert agent.role == "Agent"
        assert agent.status == "idle"
        assert agent.avatar == "🤖"

    async def test_create_requires_name(self, store_group: StoreGroup):
        with pytest.raises(MissingFieldError):
            await store_group.agent_store.create_agent(name="  ")

    async def test_partial_update(self, store_group: StoreGroup):
        store = store_group.agent_store
        agent = await store.create_agent(name="Worker", role="Developer", description="d")
        updated = await store.update_agent(agent.id, status="working")
        assert updated.status == "working"
        assert updated.role == "Developer"
        assert updated.description == "d"
        assert await store.count_agents(status="working") == 1

    async def test_update_missing(self, store_group: StoreGroup):
        with pytest.raises(RecordNotFoundError) as exc_info:
            await store_group.agent_store.update_agent(42, status="idle")
        assert exc_info.value.entity == "agent"

    async def test_upsert_by_name_keeps_status(self, store_group: StoreGroup):
        store = store_group.agent_store
        agent = await store.create_agent(name="Agent Alpha", role="Old", status="working")
        upserted = await store.upsert_agent(
            AgentDefinition(name="Agent Alpha", role="Coordinator", description="new")
        )
        assert upserted.id == agent.id
        assert upserted.role == "Coordinator"
        assert upserted.description == "new"
        assert upserted.status == "working"
        assert await store.count_agents() == 1

    async def test_delete_all_unassigns_tasks(self, store_group: StoreGroup):
        agent = await store_group.agent_store.create_agent(name="Temp")
        task = await store_group.task_store.create_task(title="t", agent_id=agent.id)
        removed = await store_group.agent_store.delete_all_agents()
        assert removed == 1
        reloaded = await store_group.task_store.get_task(task.id)
        assert reloaded.agent_id is None


class TestMessageStore:
    async def test_create_joins_agent_name(self, store_group: StoreGroup):
        agent = await store_group.agent_store.create_agent(name="Talker")
        msg = await store_group.message_store.create_message("hello", agent_id=agent.id)
        assert msg.agent_name == "Talker"
        listed = await store_group.message_store.list_messages()
        assert listed[0].agent_name == "Talker"
        assert listed[0].message == "hello"

    async def test_create_requires_message(self, store_group: StoreGroup):
        with pytest.raises(MissingFieldError):
            await store_group.message_store.create_message("")

    async def test_newest_first_with_limit_and_filter(self, store_group: StoreGroup):
        agent = await store_group.agent_store.create_agent(name="Chatty")
        store = store_group.message_store
        for i in range(3):
            await store.create_message(f"m{i}", agent_id=agent.id)
        await store.create_message("system note")

        latest = await store.list_messages(limit=2)
        assert [m.message for m in latest] == ["system note", "m2"]

        by_agent = await store.list_messages(agent_id=agent.id)
        assert [m.message for m in by_agent] == ["m2", "m1", "m0"]


class TestConcurrentWrites:
    """共享连接上的并发写入互不影响"""

    async def test_failed_write_does_not_discard_concurrent_insert(
        self, store_group: StoreGroup
    ):
        store = store_group.task_store
        results = await asyncio.gather(
            store.create_task(title="survivor"),
            store.create_task(title="orphan", agent_id=9999),
            return_exceptions=True,
        )

        assert results[0].title == "survivor"
        assert isinstance(results[1], StorageError)
        persisted = await store.list_tasks()
        assert [t.title for t in persisted] == ["survivor"]
        assert persisted[0].id == results[0].id

    async def test_interleaved_writes_all_persist(self, store_group: StoreGroup):
        store = store_group.task_store
        attempts = [store.create_task(title=f"ok-{i}") for i in range(5)]
        attempts += [store.create_task(title=f"bad-{i}", agent_id=9000 + i) for i in range(5)]

        results = await asyncio.gather(*attempts, return_exceptions=True)

        created = {r.title for r in results if not isinstance(r, Exception)}
        assert created == {f"ok-{i}" for i in range(5)}
        assert {t.title for t in await store.list_tasks()} == created
