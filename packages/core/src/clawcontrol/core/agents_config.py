"""agents.yaml 加载 -- Agent 定义配置

按优先级搜索配置文件；文件缺失或格式不合法时降级为内置默认 Agent 列表，
不阻塞启动。期望格式：

    agents:
      - name: Agent Alpha
        role: Coordinator
        description: ...
        avatar: "🤖"
        status: idle
"""

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from .config import get_agents_config_paths
from .models.agent import DEFAULT_AGENT_AVATAR, DEFAULT_AGENT_ROLE, DEFAULT_AGENT_STATUS, AgentDefinition

log = structlog.get_logger()


def get_default_agents() -> list[AgentDefinition]:
    """内置默认 Agent 列表"""
    return [
        AgentDefinition(
            name="Agent Alpha",
            role="Coordinator",
            description="Team lead and task coordinator",
            avatar="🤖",
        ),
        AgentDefinition(
            name="Agent Beta",
            role="Developer",
            description="Backend systems and APIs",
            avatar="💻",
        ),
        AgentDefinition(
            name="Agent Gamma",
            role="DevOps",
            description="Infrastructure and deployments",
            avatar="🔧",
        ),
        AgentDefinition(
            name="Agent Delta",
            role="Researcher",
            description="Analysis and documentation",
            avatar="📖",
        ),
    ]


def find_config_path() -> Path | None:
    """返回第一个存在的 agents.yaml 路径"""
    for path in get_agents_config_paths():
        if path.is_file():
            return path
    return None


def _optional_text(value) -> str | None:
    """YAML 标量统一转为字符串，空值为 None"""
    if value is None or value == "":
        return None
    return str(value)


def parse_agents_config(content: str) -> list[AgentDefinition] | None:
    """解析 agents.yaml 内容，格式不合法时返回 None

    缺失字段按序号/默认值补齐。
    """
    data = yaml.safe_load(content)
    if not isinstance(data, dict) or not isinstance(data.get("agents"), list):
        return None

    agents: list[AgentDefinition] = []
    for index, entry in enumerate(data["agents"]):
        if not isinstance(entry, dict):
            entry = {}
        agents.append(
            AgentDefinition(
                name=str(entry.get("name") or f"Agent {index + 1}"),
                description=_optional_text(entry.get("description")),
                role=str(entry.get("role") or DEFAULT_AGENT_ROLE),
                avatar=str(entry.get("avatar") or DEFAULT_AGENT_AVATAR),
                status=str(entry.get("status") or DEFAULT_AGENT_STATUS),
            )
        )
    return agents


def load_agents_config() -> list[AgentDefinition]:
    """加载 Agent 定义；找不到或解析失败时返回默认列表"""
    config_path = find_config_path()
    if config_path is None:
        log.warning(
            "agents_config_not_found",
            searched=[str(p) for p in get_agents_config_paths()],
            fallback="defaults",
        )
        return get_default_agents()

    try:
        agents = parse_agents_config(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError, ValidationError) as e:
        log.error("agents_config_load_failed", path=str(config_path), error=str(e))
        return get_default_agents()

    if agents is None:
        log.warning(
            "agents_config_invalid",
            path=str(config_path),
            expected="{agents: [...]}",
            fallback="defaults",
        )
        return get_default_agents()

    log.info("agents_config_loaded", path=str(config_path), count=len(agents))
    return agents
