"""Domain Services 模块

领域服务：
- WorkflowDslValidator: DSL 三阶段校验（schema / structure / constraints）
- migrate_to_current / upgrade_v2_to_v3: DSL 版本迁移
- default_node_for: 节点默认配置
- locate_issues / normalize_issues: 把校验问题定位到节点 / 边
"""

from src.domain.services.issue_locator import locate_issues, normalize_issues
from src.domain.services.node_catalog import NodeDefaultsContext, default_node_for
from src.domain.services.workflow_dsl_validator import DslValidationReport, WorkflowDslValidator
from src.domain.services.workflow_migrator import (
    MigrationReport,
    migrate_to_current,
    upgrade_v2_to_v3,
)

__all__ = [
    "DslValidationReport",
    "MigrationReport",
    "NodeDefaultsContext",
    "WorkflowDslValidator",
    "default_node_for",
    "locate_issues",
    "migrate_to_current",
    "normalize_issues",
    "upgrade_v2_to_v3",
]
