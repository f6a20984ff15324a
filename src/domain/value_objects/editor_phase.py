"""EditorPhase 枚举 - 图编辑会话的生命周期阶段

状态流转：
    LOADING → HYDRATED → EDITING ⇄ VALIDATING → (CLEAN | INVALID) → SAVING → HYDRATED

- 只有 CLEAN 可以进入 SAVING
- SAVING 失败时：协作方拒绝 → INVALID，传输异常 → CLEAN（可重试）
- 布局类操作（移动节点、视口）不改变阶段
"""

from __future__ import annotations

from enum import Enum


class EditorPhase(str, Enum):
    LOADING = "loading"
    HYDRATED = "hydrated"
    EDITING = "editing"
    VALIDATING = "validating"
    CLEAN = "clean"
    INVALID = "invalid"
    SAVING = "saving"

    def can_transition_to(self, target: EditorPhase) -> bool:
        allowed: dict[EditorPhase, set[EditorPhase]] = {
            EditorPhase.LOADING: {EditorPhase.HYDRATED},
            EditorPhase.HYDRATED: {EditorPhase.EDITING, EditorPhase.VALIDATING},
            EditorPhase.EDITING: {EditorPhase.EDITING, EditorPhase.VALIDATING},
            EditorPhase.VALIDATING: {EditorPhase.CLEAN, EditorPhase.INVALID},
            EditorPhase.CLEAN: {EditorPhase.EDITING, EditorPhase.VALIDATING, EditorPhase.SAVING},
            EditorPhase.INVALID: {EditorPhase.EDITING, EditorPhase.VALIDATING},
            EditorPhase.SAVING: {EditorPhase.HYDRATED, EditorPhase.INVALID, EditorPhase.CLEAN},
        }
        return target in allowed[self]

    @property
    def accepts_edits(self) -> bool:
        return self in {
            EditorPhase.HYDRATED,
            EditorPhase.EDITING,
            EditorPhase.CLEAN,
            EditorPhase.INVALID,
        }
