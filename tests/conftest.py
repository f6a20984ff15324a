"""Pytest 配置文件 - 全局 fixtures"""

from __future__ import annotations

import pytest

SECRET_ID = "8f14e45f-ceea-467f-a0e6-1b2c3d4e5f60"
OTHER_SECRET_ID = "1c9e3d2a-5b7f-4a1e-9c8d-0f1e2d3c4b5a"


def make_http_node(node_id: str, url: str = "https://example.com") -> dict:
    return {"id": node_id, "type": "http.request", "config": {"method": "GET", "url": url}}


def make_condition_node(node_id: str) -> dict:
    return {
        "id": node_id,
        "type": "condition",
        "config": {"path": "$.ok", "op": "eq", "value": True},
    }


def make_edge(edge_id: str, source: str, target: str, kind: str = "always") -> dict:
    return {"id": edge_id, "from": source, "to": target, "kind": kind}


@pytest.fixture
def v3_document() -> dict:
    """合法的 v3 文档：fetch → check → (yes | no)"""
    return {
        "version": "v3",
        "trigger": {"type": "trigger.manual"},
        "graph": {
            "nodes": {
                "fetch": make_http_node("fetch"),
                "check": make_condition_node("check"),
                "yes": make_http_node("yes", "https://example.com/yes"),
                "no": make_http_node("no", "https://example.com/no"),
            },
            "edges": [
                make_edge("e1", "fetch", "check"),
                make_edge("e2", "check", "yes", "cond_true"),
                make_edge("e3", "check", "no", "cond_false"),
            ],
        },
    }


@pytest.fixture
def v2_document() -> dict:
    """合法的 v2 文档：http → 旧 github issue 节点 → http"""
    return {
        "version": "v2",
        "trigger": {"type": "trigger.webhook", "config": {"token": "tok_123"}},
        "nodes": [
            make_http_node("a"),
            {
                "id": "b",
                "type": "connector.github.issue.create",
                "config": {
                    "repo": "octo/test",
                    "title": "Bug",
                    "body": "",
                    "auth": {"secretId": SECRET_ID},
                },
            },
            make_http_node("c"),
        ],
    }
