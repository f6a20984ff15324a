"""节点配置输入辅助函数（Domain Service）

职责：
- 把编辑器里的字段文本转换为 config 值，再写入节点
- 无论从检查面板还是脚本修改，转换规则都保持一致
"""

from __future__ import annotations

import json
import math
from typing import Any

from src.domain.value_objects.node_configs import AGENT_LIMIT_BOUNDS, is_json_scalar


def clamp_int(value: Any, bounds: tuple[int, int], *, fallback: int | None = None) -> int:
    """Clamp ``value`` into ``bounds`` (inclusive).

    Strings are parsed as numbers first; non-finite or unparsable input
    yields ``fallback`` (or the lower bound when no fallback is given).
    Floats are truncated toward zero before clamping.
    """

    low, high = bounds
    default = low if fallback is None else fallback

    number: float | None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            number = None
    else:
        number = None

    if number is None or not math.isfinite(number):
        return max(low, min(high, default))

    return max(low, min(high, int(number)))


def clamp_agent_limit(name: str, value: Any, *, fallback: int | None = None) -> int:
    """Clamp an agent.run ``limits`` field by name (e.g. ``maxTurns``)."""

    bounds = AGENT_LIMIT_BOUNDS.get(name)
    if bounds is None:
        raise KeyError(f"unknown agent limit: {name}")
    return clamp_int(value, bounds, fallback=fallback)


def parse_condition_value(text: str) -> Any:
    """Permissively parse a condition ``value`` typed by the user.

    Text that parses as a JSON scalar is stored as that scalar (``"true"`` ->
    ``True``, ``"3"`` -> ``3``, ``"null"`` -> ``None``). Anything else,
    including JSON arrays/objects and non-finite numbers, is kept as the raw
    string.
    """

    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return text
    if is_json_scalar(parsed):
        return parsed
    return text


def format_condition_value(value: Any) -> str:
    """Inverse of ``parse_condition_value`` for display in a text field."""

    if value is None:
        return "null"
    if isinstance(value, str):
        # A string that would re-parse as JSON is shown quoted.
        if not _looks_like_json(value):
            return value
    return json.dumps(value)


def _looks_like_json(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def normalize_string_list(text: str) -> list[str]:
    """Split newline-separated text into trimmed, non-empty, de-duplicated items.

    Order of first occurrence is preserved.
    """

    items = [line.strip() for line in text.split("\n")]
    return list(dict.fromkeys(item for item in items if item))
