"""校验问题值对象

- RawValidationIssue: schema 校验产生的位置型问题，path 为从文档根开始的 key/index 序列，
  例如 ("graph", "nodes", "n7", "config", "url") 或 ("graph", "edges", 2)
- ValidationIssue: 已定位的问题，携带稳定的 code，以及可选的 nodeId / edgeId，
  供编辑器高亮和聚焦
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

PathSegment = str | int

INVALID_DSL_CODE = "INVALID_DSL"


@dataclass(frozen=True)
class RawValidationIssue:
    path: tuple[PathSegment, ...]
    message: str
    code: str | None = None

    @property
    def dotted_path(self) -> str:
        return ".".join(str(segment) for segment in self.path)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code or INVALID_DSL_CODE,
            "message": self.message,
        }
        if self.path:
            payload["path"] = list(self.path)
        return payload


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    node_id: str | None = None
    edge_id: str | None = None
    # 原始位置（若有），不参与定位
    path: tuple[PathSegment, ...] = ()

    @property
    def is_document_level(self) -> bool:
        return self.node_id is None and self.edge_id is None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.path:
            payload["path"] = list(self.path)
        if self.node_id is not None:
            payload["nodeId"] = self.node_id
        if self.edge_id is not None:
            payload["edgeId"] = self.edge_id
        return payload
