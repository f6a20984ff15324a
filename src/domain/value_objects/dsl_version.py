"""DslVersion 枚举 - 工作流 DSL 版本

- V2: 线性节点列表（仅作为迁移来源）
- V3: 图结构（nodes map + edges list），唯一的规范版本
"""

from enum import Enum


class DslVersion(str, Enum):
    V2 = "v2"
    V3 = "v3"


CURRENT_DSL_VERSION = DslVersion.V3
