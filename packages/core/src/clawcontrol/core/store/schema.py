"""数据库 schema -- 三张表 DDL（PostgreSQL 规范方言）

SQLite 后端由适配器在迁移时逐条改写；
ALTER TABLE / DO $$ 块仅对 PostgreSQL 旧库升级生效，SQLite 下跳过。
"""

from .adapter import StorageAdapter

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS agents (
    id          SERIAL PRIMARY KEY,
    name        VARCHAR(255) NOT NULL,
    description TEXT,
    role        VARCHAR(100) DEFAULT 'Agent',
    avatar      VARCHAR(16) DEFAULT '🤖',
    status      VARCHAR(50) DEFAULT 'idle',
    created_at  TIMESTAMP DEFAULT NOW()
);

-- 配置重载以 name 作为 upsert 键
CREATE UNIQUE INDEX IF NOT EXISTS idx_agents_name ON agents(name);

CREATE TABLE IF NOT EXISTS tasks (
    id          SERIAL PRIMARY KEY,
    title       VARCHAR(500) NOT NULL,
    description TEXT,
    status      VARCHAR(50) NOT NULL DEFAULT 'backlog'
                CHECK (status IN ('backlog', 'todo', 'in_progress', 'review', 'completed')),
    tags        TEXT[] DEFAULT '{}',
    agent_id    INTEGER REFERENCES agents(id) ON DELETE SET NULL,
    created_at  TIMESTAMP DEFAULT NOW(),
    updated_at  TIMESTAMP DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
CREATE INDEX IF NOT EXISTS idx_tasks_agent_id ON tasks(agent_id);

CREATE TABLE IF NOT EXISTS agent_messages (
    id          SERIAL PRIMARY KEY,
    agent_id    INTEGER REFERENCES agents(id) ON DELETE SET NULL,
    message     TEXT NOT NULL,
    created_at  TIMESTAMP DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_agent_messages_agent_id ON agent_messages(agent_id);

-- 旧库升级：补充 avatar 列
ALTER TABLE agents ADD COLUMN IF NOT EXISTS avatar VARCHAR(16) DEFAULT '🤖';

-- 旧库升级：补充 status 取值约束
DO $$
BEGIN
    IF NOT EXISTS (
        SELECT 1 FROM information_schema.table_constraints
        WHERE table_name = 'tasks' AND constraint_name = 'tasks_status_check'
    ) THEN
        ALTER TABLE tasks ADD CONSTRAINT tasks_status_check
            CHECK (status IN ('backlog', 'todo', 'in_progress', 'review', 'completed'));
    END IF;
END $$;
"""


async def init_db(adapter: StorageAdapter) -> None:
    """初始化数据库：执行 schema 脚本（可重复执行）

    Args:
        adapter: 已连接的存储适配器
    """
    await adapter.run_migration(SCHEMA_SQL)
