"""GraphEditorSession 实体 - 一次图编辑会话

业务定义：
- 持有活动节点（活动 id → Node，payload 与位置分开保存）、有序的边、视口、选择和问题列表
- 维护编辑阶段状态机（EditorPhase），非法流转抛 EditorStateTransitionError
- 非草稿工作流以只读方式打开：任何修改和保存都抛 WorkflowNotEditableError
- 布局类操作（移动节点、视口）不会让 CLEAN 失效

选择规则：
- 同一时刻最多选中一个节点或一条边，选中其中一个会清空另一个
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from src.config import settings
from src.domain.entities.edge import Edge
from src.domain.entities.node import Node
from src.domain.entities.workflow import WorkflowDraft
from src.domain.exceptions import (
    DomainError,
    DomainValidationError,
    EditorStateTransitionError,
    NotFoundError,
    WorkflowNotEditableError,
)
from src.domain.ports.workflow_draft_repository import SaveDraftRequest
from src.domain.services.graph_layout import GridLayout
from src.domain.services.graph_sync import DEFAULT_TRIGGER, hydrate_graph, serialize_graph
from src.domain.services.issue_locator import locate_issue, normalize_issues
from src.domain.services.node_catalog import NodeDefaultsContext, default_node_for, new_node_id
from src.domain.services.node_config_inputs import (
    clamp_agent_limit,
    normalize_string_list,
    parse_condition_value,
)
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator, check_node_schema
from src.domain.services.workflow_migrator import edge_id_for, upgrade_legacy_node
from src.domain.value_objects.edge_kind import EdgeKind
from src.domain.value_objects.editor_phase import EditorPhase
from src.domain.value_objects.editor_state import EditorState
from src.domain.value_objects.node_configs import DEFAULT_AGENT_LIMITS
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position, Viewport
from src.domain.value_objects.validation_issue import RawValidationIssue, ValidationIssue
from src.domain.value_objects.workflow_dsl import MAX_ID_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FocusTarget:
    """画布聚焦目标：以 (x, y) 为中心，缩放到 zoom"""

    node_id: str
    x: float
    y: float
    zoom: float


@dataclass
class GraphEditorSession:
    """GraphEditorSession 实体

    属性说明：
    - workflow_id / name / status: 工作流标识、名称和协作方状态
    - read_only: 非草稿时为 True
    - nodes: 活动 id → Node（插入顺序即画布顺序）
    - edges: 边 id → Edge（插入顺序即文档顺序）
    - trigger: 文档触发器（原样保留）
    - viewport: 画布视口（可选）
    - selected_node_id / selected_edge_id: 当前选择（互斥）
    - issues: 最近一次校验或保存得到的问题
    - phase: 编辑阶段
    - focus_target: 最近一次聚焦问题时的画布中心
    """

    workflow_id: str
    name: str = ""
    status: str = "draft"
    read_only: bool = False
    nodes: dict[str, Node] = field(default_factory=dict)
    edges: dict[str, Edge] = field(default_factory=dict)
    trigger: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_TRIGGER))
    viewport: Viewport | None = None
    selected_node_id: str | None = None
    selected_edge_id: str | None = None
    issues: list[ValidationIssue] = field(default_factory=list)
    phase: EditorPhase = EditorPhase.LOADING
    focus_target: FocusTarget | None = None
    layout: GridLayout = field(default_factory=GridLayout.from_settings)
    validator: WorkflowDslValidator = field(default_factory=WorkflowDslValidator)
    focus_zoom: float = field(default_factory=lambda: settings.editor_focus_zoom)

    @classmethod
    def open(
        cls,
        draft: WorkflowDraft,
        document: dict[str, Any],
        *,
        layout: GridLayout | None = None,
        validator: WorkflowDslValidator | None = None,
    ) -> "GraphEditorSession":
        """为已迁移到 v3 的草稿打开编辑会话

        参数：
            draft: 协作方加载的草稿（提供名称、状态、布局）
            document: v3 文档（调用方负责迁移）
            layout: 默认网格布局（缺省读取配置）
            validator: 文档校验器（缺省读取配置）

        返回：
            处于 HYDRATED 阶段的会话
        """
        session = cls(
            workflow_id=draft.id,
            name=draft.name,
            status=draft.status,
            read_only=not draft.is_editable,
        )
        if layout is not None:
            session.layout = layout
        if validator is not None:
            session.validator = validator
        session.hydrate(document, draft.editor_state)
        return session

    # ========================================
    # 状态机
    # ========================================

    def _transition(self, target: EditorPhase, action: str) -> None:
        if not self.phase.can_transition_to(target):
            raise EditorStateTransitionError(self.phase.value, action)
        logger.debug(
            "graph_editor_phase",
            extra={
                "workflow_id": self.workflow_id,
                "action": action,
                "from_phase": self.phase.value,
                "to_phase": target.value,
            },
        )
        self.phase = target

    def _ensure_editable(self, action: str) -> None:
        if self.read_only:
            raise WorkflowNotEditableError(self.status)
        if not self.phase.accepts_edits:
            raise EditorStateTransitionError(self.phase.value, action)

    def _mark_edited(self, action: str) -> None:
        self._transition(EditorPhase.EDITING, action)

    def hydrate(self, document: dict[str, Any], editor_state: EditorState | None = None) -> None:
        """从 v3 文档重建活动图（LOADING / SAVING → HYDRATED）"""
        hydrated = hydrate_graph(document, editor_state, self.layout)
        self._transition(EditorPhase.HYDRATED, "hydrate")
        self.nodes = hydrated.nodes
        self.edges = hydrated.edges
        self.trigger = hydrated.trigger
        self.viewport = hydrated.viewport
        self.issues = []
        self.focus_target = None
        if self.selected_node_id not in self.nodes:
            self.selected_node_id = None
        if self.selected_edge_id not in self.edges:
            self.selected_edge_id = None

    # ========================================
    # 查询
    # ========================================

    def get_node(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            raise NotFoundError("Node", node_id)
        return node

    def get_edge(self, edge_id: str) -> Edge:
        edge = self.edges.get(edge_id)
        if edge is None:
            raise NotFoundError("Edge", edge_id)
        return edge

    def _find_node_for_issue(self, node_id: str) -> Node | None:
        node = self.nodes.get(node_id)
        if node is not None:
            return node
        for candidate in self.nodes.values():
            if candidate.business_id == node_id:
                return candidate
        return None

    @property
    def inspected_node(self) -> Node | None:
        if self.selected_node_id is None:
            return None
        return self.nodes.get(self.selected_node_id)

    @property
    def selected_issues(self) -> list[ValidationIssue]:
        if self.selected_node_id is not None:
            node = self.nodes.get(self.selected_node_id)
            ids = {self.selected_node_id}
            if node is not None and node.business_id:
                ids.add(node.business_id)
            return [issue for issue in self.issues if issue.node_id in ids]
        if self.selected_edge_id is not None:
            return [issue for issue in self.issues if issue.edge_id == self.selected_edge_id]
        return []

    # ========================================
    # 选择
    # ========================================

    def select_node(self, node_id: str) -> None:
        self.get_node(node_id)
        self.selected_node_id = node_id
        self.selected_edge_id = None

    def select_edge(self, edge_id: str) -> None:
        self.get_edge(edge_id)
        self.selected_edge_id = edge_id
        self.selected_node_id = None

    def clear_selection(self) -> None:
        self.selected_node_id = None
        self.selected_edge_id = None

    def focus_issue(self, issue: ValidationIssue | None) -> None:
        """选中问题所在的节点 / 边；节点问题同时把画布中心移到节点位置"""
        if issue is None:
            return
        if issue.node_id is not None:
            node = self._find_node_for_issue(issue.node_id)
            if node is None:
                return
            self.selected_node_id = node.id
            self.selected_edge_id = None
            self.focus_target = FocusTarget(
                node_id=node.id, x=node.position.x, y=node.position.y, zoom=self.focus_zoom
            )
            return
        if issue.edge_id is not None and issue.edge_id in self.edges:
            self.selected_edge_id = issue.edge_id
            self.selected_node_id = None

    # ========================================
    # 修改（节点）
    # ========================================

    def add_node(
        self,
        node_type: NodeType | str,
        context: NodeDefaultsContext | None = None,
    ) -> Node:
        """添加一个默认配置的节点，放在下一个空闲网格位置并选中它

        抛出：
            WorkflowNotEditableError: 只读会话
            DomainError: 未知类型或旧类型
        """
        self._ensure_editable("add_node")
        node_id = new_node_id(node_type)
        while node_id in self.nodes:
            node_id = new_node_id(node_type)
        payload = default_node_for(node_type, context, node_id=node_id)
        position = self.layout.next_free_position(
            len(self.nodes), (node.position for node in self.nodes.values())
        )
        node = Node.create(payload, position)

        self._mark_edited("add_node")
        self.nodes[node.id] = node
        self.select_node(node.id)
        return node

    def remove_node(self, node_id: str) -> None:
        """删除节点以及与之相连的边"""
        self._ensure_editable("remove_node")
        self.get_node(node_id)

        self._mark_edited("remove_node")
        del self.nodes[node_id]
        removed_edges = [
            edge_id
            for edge_id, edge in self.edges.items()
            if edge.source == node_id or edge.target == node_id
        ]
        for edge_id in removed_edges:
            del self.edges[edge_id]
        if self.selected_node_id == node_id or self.selected_edge_id in removed_edges:
            self.clear_selection()

    def apply_node_config(self, node_id: str, config: dict[str, Any]) -> list[ValidationIssue]:
        """整体替换节点配置（先单独校验，不通过则不修改）

        返回：
            校验问题列表；为空表示已应用
        """
        self._ensure_editable("apply_node_config")
        node = self.get_node(node_id)
        candidate = node.to_payload()
        candidate["config"] = copy.deepcopy(config)
        return self._apply_candidate(node, candidate, "apply_node_config")

    def replace_node_payload(self, node_id: str, payload: dict[str, Any]) -> list[ValidationIssue]:
        """整体替换节点 payload（先单独校验，不通过则不修改）"""
        self._ensure_editable("replace_node_payload")
        node = self.get_node(node_id)
        return self._apply_candidate(node, copy.deepcopy(payload), "replace_node_payload")

    def _apply_candidate(
        self, node: Node, candidate: dict[str, Any], action: str
    ) -> list[ValidationIssue]:
        raw_issues = check_node_schema(candidate)
        candidate_id = candidate.get("id") if isinstance(candidate, dict) else None
        if isinstance(candidate_id, str) and candidate_id and candidate_id != node.id:
            # 改 id 只能走 rename_node
            raw_issues.append(
                RawValidationIssue(
                    path=("id",),
                    message=f"Node id must match its key: {candidate_id!r} != {node.id!r}",
                )
            )
        if raw_issues:
            return [self._node_issue(node.id, raw) for raw in raw_issues]
        self._mark_edited(action)
        node.update_payload(candidate)
        return []

    def rename_node(self, node_id: str, new_id: str) -> Node:
        """修改节点 id：重新设置 key 和 payload["id"]，并改写相连的边与选择

        参数：
            node_id: 当前活动 id
            new_id: 新 id

        返回：
            改名后的节点（位置不变）

        抛出：
            NotFoundError: 节点不存在
            DomainError: 新 id 为空、过长或已被其他节点使用
        """
        self._ensure_editable("rename_node")
        node = self.get_node(node_id)
        new_id = new_id.strip() if isinstance(new_id, str) else ""
        if not new_id:
            raise DomainError("节点 id 不能为空")
        if len(new_id) > MAX_ID_LENGTH:
            raise DomainError(f"节点 id 不能超过 {MAX_ID_LENGTH} 个字符")
        if new_id == node_id:
            return node
        if any(
            other is not node and new_id in (other.id, other.business_id)
            for other in self.nodes.values()
        ):
            raise DomainError(f"节点 id 已存在: {new_id}")

        self._mark_edited("rename_node")
        payload = node.to_payload()
        payload["id"] = new_id
        node.id = new_id
        node.update_payload(payload)
        self.nodes = {
            (new_id if key == node_id else key): value for key, value in self.nodes.items()
        }
        for edge in self.edges.values():
            edge.replace_endpoint(node_id, new_id)
        if self.selected_node_id == node_id:
            self.selected_node_id = new_id
        return node

    @staticmethod
    def _node_issue(node_id: str, raw: RawValidationIssue) -> ValidationIssue:
        path = ("graph", "nodes", node_id) + raw.path
        return locate_issue(RawValidationIssue(path=path, message=raw.message, code=raw.code), [])

    def set_config_value(self, node_id: str, path: Sequence[str], value: Any) -> None:
        """设置 config 中某个字段（逐字段编辑，不做整体校验）"""
        self._ensure_editable("set_config_value")
        node = self.get_node(node_id)
        candidate = node.with_config_value(path, value)
        self._mark_edited("set_config_value")
        node.update_payload(candidate)

    def set_limit(self, node_id: str, name: str, value: Any) -> int:
        """设置 agent.run 的 limits 字段，值被限制在 schema 的上下界内

        返回：
            实际写入的值
        """
        self._ensure_editable("set_limit")
        node = self.get_node(node_id)
        if node.type != NodeType.AGENT_RUN.value:
            raise DomainError(f"节点 {node_id} 不是 agent.run，不能设置 limits")
        limits = node.config.get("limits")
        current = limits.get(name) if isinstance(limits, dict) else None
        fallback = current if isinstance(current, int) and not isinstance(current, bool) else None
        if fallback is None:
            fallback = DEFAULT_AGENT_LIMITS.get(name)
        clamped = clamp_agent_limit(name, value, fallback=fallback)
        self.set_config_value(node_id, ("limits", name), clamped)
        return clamped

    def set_condition_value_text(self, node_id: str, text: str) -> Any:
        """把输入框文本解析为条件值（JSON 标量优先，否则按字符串）并写入

        返回：
            实际写入的值
        """
        self._ensure_editable("set_condition_value_text")
        node = self.get_node(node_id)
        if node.type != NodeType.CONDITION.value:
            raise DomainError(f"节点 {node_id} 不是 condition")
        value = parse_condition_value(text)
        self.set_config_value(node_id, ("value",), value)
        return value

    def set_tools_allow_text(self, node_id: str, text: str) -> list[str]:
        """把多行文本写入 agent.run 的 tools.allow（去空行、去重）"""
        self._ensure_editable("set_tools_allow_text")
        node = self.get_node(node_id)
        if node.type != NodeType.AGENT_RUN.value:
            raise DomainError(f"节点 {node_id} 不是 agent.run")
        allow = normalize_string_list(text)
        self.set_config_value(node_id, ("tools", "allow"), allow)
        return allow

    def fold_legacy_nodes(self) -> list[str]:
        """把残留的旧类型节点原地折叠为 connector.action

        返回：
            被折叠的节点活动 id
        """
        self._ensure_editable("fold_legacy_nodes")
        legacy_ids = [
            node.id
            for node in self.nodes.values()
            if node.node_type is not None and node.node_type.is_legacy
        ]
        if not legacy_ids:
            return []
        self._mark_edited("fold_legacy_nodes")
        for node_id in legacy_ids:
            node = self.nodes[node_id]
            node.update_payload(upgrade_legacy_node(node.payload))
        return legacy_ids

    def move_node(self, node_id: str, position: Position) -> None:
        """移动节点（只改布局，不改变阶段）"""
        self._ensure_editable("move_node")
        self.get_node(node_id).update_position(position)

    def set_viewport(self, viewport: Viewport) -> None:
        """更新视口（只改布局，不改变阶段）"""
        self._ensure_editable("set_viewport")
        self.viewport = viewport

    def rename(self, name: str) -> None:
        self._ensure_editable("rename")
        if not name or not name.strip():
            raise DomainError("name 不能为空")
        self._mark_edited("rename")
        self.name = name.strip()

    # ========================================
    # 修改（边）
    # ========================================

    def connect(
        self,
        source: str,
        target: str,
        kind: EdgeKind | str = EdgeKind.ALWAYS,
    ) -> Edge:
        """连接两个已存在的节点

        抛出：
            NotFoundError: 源或目标节点不存在
            DomainError: 自连接
        """
        self._ensure_editable("connect")
        self.get_node(source)
        self.get_node(target)

        edge_id = edge_id_for(source, target)
        if edge_id in self.edges:
            edge_id = edge_id_for(source, target, suffix=f"#{uuid4().hex[:6]}")
        edge = Edge.create(source, target, EdgeKind.parse(kind), edge_id=edge_id)

        self._mark_edited("connect")
        self.edges[edge.id] = edge
        return edge

    def remove_edge(self, edge_id: str) -> None:
        self._ensure_editable("remove_edge")
        self.get_edge(edge_id)
        self._mark_edited("remove_edge")
        del self.edges[edge_id]
        if self.selected_edge_id == edge_id:
            self.selected_edge_id = None

    def set_edge_kind(self, edge_id: str, kind: EdgeKind | str) -> None:
        self._ensure_editable("set_edge_kind")
        edge = self.get_edge(edge_id)
        self._mark_edited("set_edge_kind")
        edge.update_kind(kind)

    # ========================================
    # 序列化 / 校验
    # ========================================

    def serialize(self) -> tuple[dict[str, Any], EditorState]:
        return serialize_graph(
            self.nodes.values(), self.edges.values(), self.trigger, self.viewport
        )

    def validate(self) -> list[ValidationIssue]:
        """校验当前活动图（→ VALIDATING → CLEAN | INVALID）

        不通过时聚焦第一个问题。校验问题作为数据返回，不抛异常。
        """
        self._transition(EditorPhase.VALIDATING, "validate")
        try:
            document, _ = self.serialize()
        except DomainValidationError as exc:
            self.issues = normalize_issues(exc.errors)
        else:
            self.issues = list(self.validator.validate(document).issues)
        if not self.issues:
            self._transition(EditorPhase.CLEAN, "validate")
            self.focus_target = None
        else:
            self._transition(EditorPhase.INVALID, "validate")
            self.focus_issue(self.issues[0])
        return list(self.issues)

    # ========================================
    # 保存
    # ========================================

    def begin_save(self) -> SaveDraftRequest:
        """进入 SAVING（只能从 CLEAN），返回保存请求"""
        if self.read_only:
            raise WorkflowNotEditableError(self.status)
        self._transition(EditorPhase.SAVING, "save")
        document, editor_state = self.serialize()
        return SaveDraftRequest(document=document, editor_state=editor_state, name=self.name or None)

    def complete_save(
        self, document: dict[str, Any], editor_state: EditorState | None = None
    ) -> None:
        """保存成功：用协作方返回的文档重建活动图（SAVING → HYDRATED）"""
        if self.phase is not EditorPhase.SAVING:
            raise EditorStateTransitionError(self.phase.value, "complete_save")
        if editor_state is None:
            _, editor_state = self.serialize()
        self.hydrate(document, editor_state)

    def fail_save(self, issues: list[ValidationIssue]) -> None:
        """协作方拒绝：记录问题并聚焦第一个（SAVING → INVALID）"""
        self._transition(EditorPhase.INVALID, "fail_save")
        self.issues = list(issues)
        if self.issues:
            self.focus_issue(self.issues[0])

    def abort_save(self) -> None:
        """传输失败：回到 CLEAN 以便重试（SAVING → CLEAN）"""
        self._transition(EditorPhase.CLEAN, "abort_save")
