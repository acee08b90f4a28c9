"""配置常量模块 -- 可通过环境变量覆盖

包含数据库连接串、SSE 心跳、Demo 模式节奏、agents.yaml 路径等可配置项。
使用函数读取，便于测试中通过环境变量覆盖。
"""

import os
from pathlib import Path

# 未设置 DATABASE_URL 时使用本地 SQLite 文件
DEFAULT_DATABASE_URL = "sqlite:data/sqlite/clawcontrol.db"

# SQLite 连接串前缀，其余一律视为 PostgreSQL
SQLITE_URL_PREFIX = "sqlite:"


def get_database_url() -> str:
    """获取数据库连接串（决定存储引擎）"""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


def get_sse_heartbeat_interval() -> float:
    """SSE 心跳间隔（秒）"""
    return float(os.environ.get("CLAW_SSE_HEARTBEAT_INTERVAL", "30"))


def get_sse_queue_maxsize() -> int:
    """每个订阅者的事件队列上限"""
    return int(os.environ.get("CLAW_SSE_QUEUE_MAXSIZE", "100"))


def get_demo_initial_delay() -> float:
    """Demo 模式首次推进前的等待（秒）"""
    return float(os.environ.get("CLAW_DEMO_INITIAL_DELAY", "2"))


def get_demo_interval_range() -> tuple[float, float]:
    """Demo 模式每次推进之间的随机等待区间（秒）"""
    low = float(os.environ.get("CLAW_DEMO_MIN_INTERVAL", "3"))
    high = float(os.environ.get("CLAW_DEMO_MAX_INTERVAL", "8"))
    return (low, high) if low <= high else (high, low)


def get_strict_tags() -> bool:
    """tags 列解码失败时是否抛错（默认降级为空列表）"""
    return os.environ.get("CLAW_STRICT_TAGS", "false").lower() == "true"


def get_agents_config_override() -> Path | None:
    """显式指定的 agents.yaml 路径"""
    value = os.environ.get("CLAW_AGENTS_CONFIG")
    return Path(value) if value else None


def get_agents_config_paths() -> list[Path]:
    """agents.yaml 搜索路径（按优先级）"""
    cwd = Path.cwd()
    paths = [
        cwd / "config" / "agents.yaml",
        cwd.parent.parent / "config" / "agents.yaml",
        Path("/app/config/agents.yaml"),
    ]
    override = get_agents_config_override()
    if override is not None:
        paths.insert(0, override)
    return paths


# 消息列表默认条数
MESSAGE_LIST_LIMIT: int = int(os.environ.get("CLAW_MESSAGE_LIST_LIMIT", "50"))
