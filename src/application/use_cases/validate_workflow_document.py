"""ValidateWorkflowDocumentUseCase - 迁移并校验一份原始 DSL 文档

业务场景：
- 命令行 / 批处理检查文档是否可保存
- 旧版本文档先迁移到 v3 再校验

设计原则：
- 单一职责：只负责编排（迁移 → 校验）
- 迁移失败以异常形式抛出，校验问题以数据返回
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.domain.services.workflow_dsl_validator import DslValidationReport, WorkflowDslValidator
from src.domain.services.workflow_migrator import MigrationReport, migrate_to_current


@dataclass
class ValidateWorkflowDocumentInput:
    """ValidateWorkflowDocument 输入参数

    属性说明：
    - document: 原始 DSL 文档（任意版本）
    """

    document: Any


@dataclass
class ValidateWorkflowDocumentOutput:
    """ValidateWorkflowDocument 输出

    属性说明：
    - document: 迁移后的 v3 文档
    - migration: 迁移记录
    - report: 校验结果
    """

    document: dict[str, Any]
    migration: MigrationReport
    report: DslValidationReport

    @property
    def ok(self) -> bool:
        return self.report.ok


class ValidateWorkflowDocumentUseCase:
    """ValidateWorkflowDocument Use Case

    依赖：
    - WorkflowDslValidator: 文档校验器
    """

    def __init__(self, validator: WorkflowDslValidator | None = None):
        self.validator = validator or WorkflowDslValidator()

    def execute(self, input_data: ValidateWorkflowDocumentInput) -> ValidateWorkflowDocumentOutput:
        """执行 Use Case

        抛出：
            UnsupportedDslVersionError: 未知的 DSL 版本
            WorkflowMigrationError: v2 文档无法迁移
        """
        document, migration = migrate_to_current(input_data.document)
        report = self.validator.validate(document)
        return ValidateWorkflowDocumentOutput(
            document=document,
            migration=migration,
            report=report,
        )
