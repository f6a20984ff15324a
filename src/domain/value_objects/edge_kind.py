"""EdgeKind 枚举 - 边的分支语义

- ALWAYS: 无条件流转
- COND_TRUE: 条件节点为真时流转
- COND_FALSE: 条件节点为假时流转
"""

from enum import Enum


class EdgeKind(str, Enum):
    """边类型枚举"""

    ALWAYS = "always"
    COND_TRUE = "cond_true"
    COND_FALSE = "cond_false"

    @classmethod
    def parse(cls, value: object) -> "EdgeKind":
        """宽松解析：缺省或未知值都按 ALWAYS 处理"""
        if isinstance(value, EdgeKind):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return cls.ALWAYS
        return cls.ALWAYS
