"""Position / Viewport 值对象 - 节点在画布上的位置与视口

业务定义：
- Position 表示节点在工作流画布上的坐标
- Viewport 表示画布的平移与缩放
- 二者都只属于展示层，不参与 DSL 校验和相等性

设计原则：
- 值对象：不可变，通过值比较相等性
- 纯 Python 实现，不依赖任何框架
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Position:
    """Position 值对象

    属性说明：
    - x: 横坐标（像素，可为负数）
    - y: 纵坐标（像素，可为负数）

    示例：
    >>> Position(x=100, y=200) == Position(x=100, y=200)
    True
    """

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Viewport:
    """Viewport 值对象

    属性说明：
    - x / y: 画布平移量
    - zoom: 缩放比例
    """

    x: float = 0
    y: float = 0
    zoom: float = 1

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_position(raw: Any) -> Position:
    """宽松解析 {"x", "y"}：非数字坐标按 0 处理"""
    if not isinstance(raw, dict):
        return Position(x=0, y=0)
    x = raw.get("x")
    y = raw.get("y")
    return Position(x=x if _is_number(x) else 0, y=y if _is_number(y) else 0)


def coerce_viewport(raw: Any) -> Viewport | None:
    """宽松解析 {"x", "y", "zoom"}：非对象返回 None，缺失的 zoom 按 1 处理"""
    if not isinstance(raw, dict):
        return None
    x = raw.get("x")
    y = raw.get("y")
    zoom = raw.get("zoom")
    return Viewport(
        x=x if _is_number(x) else 0,
        y=y if _is_number(y) else 0,
        zoom=zoom if _is_number(zoom) else 1,
    )
