"""SQL 方言转换 -- 纯函数

查询模板统一使用 PostgreSQL 方言 + $1/$2 编号占位符书写，
此模块负责：
1. 编号占位符 -> 驱动的位置占位符（? / %s），按出现顺序重排参数
2. PostgreSQL DDL/函数 -> SQLite 等价写法
3. SQLite 语句分类（读 / RETURNING 写 / 普通写）
4. 迁移脚本切分（识别 $$ 块）
5. 结果行归一化（tags 解码、datetime 转 ISO 字符串）
"""

import json
import re
from collections.abc import Sequence
from datetime import date, datetime
from enum import StrEnum
from typing import Any

import structlog

from ..exceptions import StorageError, TagDecodeError

log = structlog.get_logger()

_PLACEHOLDER_RE = re.compile(r"\$(\d+)")

# SQLite 下毫秒精度的当前时间，括号保证可直接用于 DEFAULT 子句
SQLITE_NOW = "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"

_SQLITE_REWRITES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bNOW\(\)", re.IGNORECASE), SQLITE_NOW),
    (
        re.compile(r"\bSERIAL\s+PRIMARY\s+KEY\b", re.IGNORECASE),
        "INTEGER PRIMARY KEY AUTOINCREMENT",
    ),
    (re.compile(r"\bTEXT\[\]", re.IGNORECASE), "TEXT"),
    (re.compile(r"DEFAULT\s+'\{\}'", re.IGNORECASE), "DEFAULT '[]'"),
    (re.compile(r"\bVARCHAR\(\d+\)", re.IGNORECASE), "TEXT"),
    (re.compile(r"\bTIMESTAMP\b", re.IGNORECASE), "TEXT"),
]

# SQLite 无等价实现的语句（迁移时跳过）
_SQLITE_UNSUPPORTED_RE = re.compile(r"information_schema|\bALTER\s+TABLE\b", re.IGNORECASE)

_PROCEDURAL_BLOCK_RE = re.compile(r"^DO\s+\$\$", re.IGNORECASE)

_READ_KEYWORDS = ("SELECT", "WITH", "PRAGMA", "EXPLAIN")

# 约定存放标签序列的列
TAG_COLUMNS = ("tags",)


class StatementKind(StrEnum):
    """SQLite 语句执行路径"""

    READ = "read"
    RETURNING = "returning"
    WRITE = "write"


def translate_placeholders(
    sql: str,
    params: Sequence[Any],
    marker: str = "?",
) -> tuple[str, list[Any]]:
    """将 $n 编号占位符改写为位置占位符

    参数按占位符在语句中从左到右的出现顺序重排；
    同一编号出现多次时对应参数也重复出现。

    Args:
        sql: 使用 $1/$2 的查询模板
        params: 按编号排列的参数（$1 对应 params[0]）
        marker: 目标驱动的位置占位符

    Returns:
        (改写后的 SQL, 位置参数列表)

    Raises:
        StorageError: 占位符编号超出参数个数
    """
    ordered: list[Any] = []

    def _substitute(match: re.Match[str]) -> str:
        index = int(match.group(1)) - 1
        if index < 0 or index >= len(params):
            raise StorageError(
                f"Placeholder ${match.group(1)} has no matching parameter "
                f"({len(params)} supplied)"
            )
        ordered.append(params[index])
        return marker

    return _PLACEHOLDER_RE.sub(_substitute, sql), ordered


def translate_for_sqlite(sql: str) -> str:
    """PostgreSQL 方言 -> SQLite 方言（纯文本改写）"""
    converted = sql
    for pattern, replacement in _SQLITE_REWRITES:
        converted = pattern.sub(replacement, converted)
    return converted


def is_unsupported_on_sqlite(statement: str) -> bool:
    """语句是否包含 SQLite 无等价写法的结构（schema 自省、列变更 DDL）"""
    return bool(_SQLITE_UNSUPPORTED_RE.search(statement))


def classify_statement(sql: str) -> StatementKind:
    """按首个关键字判定 SQLite 执行路径"""
    head = sql.lstrip().upper()
    if head.startswith(_READ_KEYWORDS):
        return StatementKind.READ
    if re.search(r"\bRETURNING\b", head):
        return StatementKind.RETURNING
    return StatementKind.WRITE


def split_script(script: str) -> list[str]:
    """按分号切分迁移脚本，$$ 包裹的过程块视为整体

    Returns:
        去除首尾空白后的非空语句列表
    """
    statements: list[str] = []
    current: list[str] = []
    in_dollar_block = False
    i = 0
    while i < len(script):
        if script.startswith("$$", i):
            in_dollar_block = not in_dollar_block
            current.append("$$")
            i += 2
            continue
        char = script[i]
        if char == ";" and not in_dollar_block:
            statements.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    statements.append("".join(current))
    stripped = (_strip_leading_comments(s) for s in statements)
    return [s for s in stripped if s]


def _strip_leading_comments(statement: str) -> str:
    """去掉语句前的 -- 注释行"""
    lines = statement.strip().splitlines()
    while lines and lines[0].lstrip().startswith("--"):
        lines.pop(0)
    return "\n".join(lines).strip()


def is_procedural_block(statement: str) -> bool:
    """是否为 PostgreSQL DO $$ ... $$ 过程块"""
    return bool(_PROCEDURAL_BLOCK_RE.match(statement))


def serialize_sqlite_params(params: Sequence[Any]) -> list[Any]:
    """SQLite 不支持数组参数，列表/元组编码为 JSON 文本"""
    return [
        json.dumps(list(value), ensure_ascii=False)
        if isinstance(value, (list, tuple))
        else value
        for value in params
    ]


def decode_tags(raw: Any, strict: bool = False) -> list[str]:
    """解码 tags 列

    非严格模式下，无法解析的内容降级为空列表并记录告警（存在数据丢失风险）。
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(item) for item in raw]
    if not isinstance(raw, str):
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        value = None
    if isinstance(value, list):
        return [str(item) for item in value]

    if strict:
        raise TagDecodeError(raw)
    log.warning("tags_decode_failed", raw=raw[:80])
    return []


def normalize_row(row: dict[str, Any], strict_tags: bool = False) -> dict[str, Any]:
    """归一化结果行，使两种引擎返回相同形状

    - tags 列：字符串 JSON 解码为列表
    - datetime/date：转为 ISO 字符串
    """
    normalized = dict(row)
    for column in TAG_COLUMNS:
        if column in normalized:
            normalized[column] = decode_tags(normalized[column], strict=strict_tags)
    for key, value in normalized.items():
        if isinstance(value, (datetime, date)):
            normalized[key] = value.isoformat()
    return normalized
