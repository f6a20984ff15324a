#!/usr/bin/env python
"""工作流 DSL 校验脚本

用法：
    python scripts/validate_workflow_dsl.py workflow.json                  # 迁移并校验
    python scripts/validate_workflow_dsl.py workflow.json --migrate-only   # 只迁移，打印 v3 文档
    python scripts/validate_workflow_dsl.py workflow.json --no-constraints # 跳过 DAG / 分支 / 并行约束

示例输出：
    [PASS] workflow.json - Valid (v2 -> v3, 1 legacy node folded)
    [FAIL] broken.json - Invalid (2 issues, phase=schema)
       [INVALID_DSL] node=n2: String should have at least 1 character (graph.nodes.n2.config.url)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.application.use_cases.validate_workflow_document import (  # noqa: E402
    ValidateWorkflowDocumentInput,
    ValidateWorkflowDocumentUseCase,
)
from src.config import settings  # noqa: E402
from src.domain.exceptions import WorkflowMigrationError  # noqa: E402
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator  # noqa: E402
from src.domain.services.workflow_migrator import migrate_to_current  # noqa: E402
from src.domain.value_objects.validation_issue import ValidationIssue  # noqa: E402


def _format_issue(issue: ValidationIssue) -> str:
    target = ""
    if issue.node_id is not None:
        target = f" node={issue.node_id}:"
    elif issue.edge_id is not None:
        target = f" edge={issue.edge_id}:"
    return f"   [{issue.code}]{target} {issue.message}"


def _load_json(file_path: Path) -> object:
    with file_path.open(encoding="utf-8") as handle:
        return json.load(handle)


def validate_file(file_path: Path, *, migrate_only: bool, enforce_constraints: bool) -> bool:
    """校验单个文件

    返回：
        是否通过
    """
    try:
        document = _load_json(file_path)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"[FAIL] {file_path.name} - Unreadable ({exc})")
        return False

    try:
        if migrate_only:
            migrated, _ = migrate_to_current(document)
            print(json.dumps(migrated, indent=2, ensure_ascii=False))
            return True

        use_case = ValidateWorkflowDocumentUseCase(
            WorkflowDslValidator(enforce_graph_constraints=enforce_constraints)
        )
        result = use_case.execute(ValidateWorkflowDocumentInput(document=document))
    except WorkflowMigrationError as exc:
        print(f"[FAIL] {file_path.name} - Migration failed ({exc})")
        for raw in exc.issues:
            print(f"   [INVALID_DSL] {raw.message} ({raw.dotted_path})")
        return False

    migration = result.migration
    note = ""
    if migration.changed:
        note = f" ({migration.source_version} -> v3, {len(migration.folded_node_ids)} legacy node folded)"

    if result.ok:
        print(f"[PASS] {file_path.name} - Valid{note}")
        return True

    print(
        f"[FAIL] {file_path.name} - Invalid "
        f"({len(result.report.issues)} issues, phase={result.report.phase}){note}"
    )
    for issue in result.report.issues:
        print(_format_issue(issue))
    return False


def main() -> None:
    """主函数"""
    parser = argparse.ArgumentParser(
        description="Migrate and validate workflow DSL documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/validate_workflow_dsl.py workflow.json
  python scripts/validate_workflow_dsl.py legacy_v2.json --migrate-only
  python scripts/validate_workflow_dsl.py a.json b.json --no-constraints
        """,
    )
    parser.add_argument("files", nargs="+", help="DSL JSON files to validate")
    parser.add_argument(
        "--version",
        action="version",
        version=f"{settings.app_name} {settings.app_version}",
    )
    parser.add_argument(
        "--migrate-only",
        action="store_true",
        help="Only migrate to v3 and print the result",
    )
    parser.add_argument(
        "--no-constraints",
        action="store_true",
        help="Skip graph constraints (DAG, condition branches, parallel regions)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    failed = 0
    for raw_path in args.files:
        file_path = Path(raw_path)
        if not file_path.exists():
            print(f"[ERROR] File not found: {file_path}")
            failed += 1
            continue
        if not validate_file(
            file_path,
            migrate_only=args.migrate_only,
            enforce_constraints=not args.no_constraints,
        ):
            failed += 1

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
