"""测试：WorkflowMigrator（v2 → v3）

业务背景：
- v2 是线性节点列表，升级后相邻节点之间生成 always 边
- 旧 connector.github.issue.create 折叠为 connector.action
- 升级结果必须能通过 v3 校验
"""

import pytest

from src.domain.exceptions import UnsupportedDslVersionError, WorkflowMigrationError
from src.domain.services.node_catalog import default_node_for
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator
from src.domain.services.workflow_migrator import (
    MigrationReport,
    edge_id_for,
    migrate_to_current,
    upgrade_legacy_node,
    upgrade_v2_to_v3,
)
from src.domain.value_objects.node_type import CURRENT_NODE_TYPES
from src.domain.value_objects.workflow_dsl import MAX_ID_LENGTH

SECRET_ID = "8f14e45f-ceea-467f-a0e6-1b2c3d4e5f60"


def _http(node_id: str) -> dict:
    return {"id": node_id, "type": "http.request", "config": {"method": "GET", "url": "https://x"}}


def _legacy(node_id: str, body: str | None = None, labels=None, scope: str | None = None) -> dict:
    config = {"repo": "octo/test", "title": "Bug", "auth": {"secretId": SECRET_ID}}
    if body is not None:
        config["body"] = body
    if labels is not None:
        config["labels"] = labels
    if scope is not None:
        config["auth"]["scope"] = scope
    return {"id": node_id, "type": "connector.github.issue.create", "config": config}


class TestUpgradeV2ToV3:
    def test_nodes_keep_order_and_edges_chain_them(self, v2_document):
        upgraded = upgrade_v2_to_v3(v2_document)

        assert upgraded["version"] == "v3"
        assert list(upgraded["graph"]["nodes"]) == ["a", "b", "c"]
        assert upgraded["graph"]["edges"] == [
            {"id": "e:a->b", "from": "a", "to": "b", "kind": "always"},
            {"id": "e:b->c", "from": "b", "to": "c", "kind": "always"},
        ]
        assert upgraded["trigger"] == {"type": "trigger.webhook", "config": {"token": "tok_123"}}

    def test_legacy_node_is_folded_into_connector_action(self, v2_document):
        report = MigrationReport(source_version="v2")

        upgraded = upgrade_v2_to_v3(v2_document, report)

        assert upgraded["graph"]["nodes"]["b"] == {
            "id": "b",
            "type": "connector.action",
            "config": {
                "connectorId": "github",
                "actionId": "issue.create",
                "input": {"repo": "octo/test", "title": "Bug"},
                "auth": {"secretId": SECRET_ID},
            },
        }
        assert report.folded_node_ids == ["b"]
        assert report.dropped_fields == ["b.config.body"]
        assert report.changed

    def test_upgraded_document_is_valid_v3(self, v2_document):
        validator = WorkflowDslValidator(enforce_graph_constraints=True)
        assert validator.validate(upgrade_v2_to_v3(v2_document)).ok

    def test_input_is_not_mutated(self, v2_document):
        upgraded = upgrade_v2_to_v3(v2_document)
        upgraded["graph"]["nodes"]["a"]["config"]["url"] = "https://changed"

        assert v2_document["nodes"][0]["config"]["url"] == "https://example.com"
        assert v2_document["nodes"][1]["type"] == "connector.github.issue.create"

    def test_single_node_has_no_edges(self, v2_document):
        v2_document["nodes"] = v2_document["nodes"][:1]
        assert upgrade_v2_to_v3(v2_document)["graph"]["edges"] == []

    def test_invalid_v2_is_rejected_without_partial_migration(self, v2_document):
        v2_document["nodes"][1]["config"]["repo"] = "not-a-repo"

        with pytest.raises(WorkflowMigrationError) as exc:
            upgrade_v2_to_v3(v2_document)

        assert [issue.path for issue in exc.value.issues] == [("nodes", 1, "config", "repo")]

    def test_duplicate_v2_node_ids_are_rejected(self, v2_document):
        v2_document["nodes"][2]["id"] = "a"

        with pytest.raises(WorkflowMigrationError) as exc:
            upgrade_v2_to_v3(v2_document)

        paths = [issue.path for issue in exc.value.issues]
        assert ("nodes", 0, "id") in paths
        assert ("nodes", 2, "id") in paths

    def test_long_ids_get_hashed_edge_ids_within_the_limit(self):
        source, target = "a" * 60, "b" * 60
        document = {
            "version": "v2",
            "trigger": {"type": "trigger.manual"},
            "nodes": [_http(source), _http(target)],
        }

        upgraded = upgrade_v2_to_v3(document)

        (edge,) = upgraded["graph"]["edges"]
        assert edge["id"] == edge_id_for(source, target)
        assert edge["id"].startswith("e:")
        assert len(edge["id"]) <= MAX_ID_LENGTH
        assert (edge["from"], edge["to"]) == (source, target)
        assert WorkflowDslValidator().validate(upgraded).ok

    def test_node_ids_over_the_limit_are_rejected(self):
        document = {
            "version": "v2",
            "trigger": {"type": "trigger.manual"},
            "nodes": [_http("n" * (MAX_ID_LENGTH + 1))],
        }

        with pytest.raises(WorkflowMigrationError) as exc:
            upgrade_v2_to_v3(document)

        assert [issue.path for issue in exc.value.issues] == [("nodes", 0, "id")]

    @pytest.mark.parametrize(
        "nodes",
        [
            pytest.param([_http("a" * 60), _http("b" * 60)], id="long-ids"),
            pytest.param([_http("x" * MAX_ID_LENGTH), _http("y" * MAX_ID_LENGTH)], id="max-length-ids"),
            pytest.param([_http("only")], id="single-node"),
            pytest.param(
                [
                    default_node_for(node_type, node_id=f"n{index}")
                    for index, node_type in enumerate(CURRENT_NODE_TYPES)
                ]
                + [_legacy("gh")],
                id="every-node-type",
            ),
            pytest.param(
                [_legacy("gh", body="", labels=["bug"], scope="repo"), _http("after")],
                id="legacy-empty-body-and-extras",
            ),
            pytest.param([_legacy("gh")], id="legacy-only"),
        ],
    )
    def test_every_upgrade_passes_schema_and_structure(self, nodes):
        document = {"version": "v2", "trigger": {"type": "trigger.manual"}, "nodes": nodes}

        upgraded = upgrade_v2_to_v3(document)

        report = WorkflowDslValidator(enforce_graph_constraints=False).validate(upgraded)
        assert report.ok, report.to_errors()
        assert list(upgraded["graph"]["nodes"]) == [node["id"] for node in nodes]
        assert len(upgraded["graph"]["edges"]) == len(nodes) - 1
        assert all(len(edge["id"]) <= MAX_ID_LENGTH for edge in upgraded["graph"]["edges"])


def test_legacy_fold_keeps_body_and_reports_extras():
    report = MigrationReport(source_version="v2")
    node = {
        "id": "gh",
        "type": "connector.github.issue.create",
        "config": {
            "repo": "octo/test",
            "title": "Bug",
            "body": "details",
            "labels": ["bug"],
            "auth": {"secretId": SECRET_ID, "scope": "repo"},
        },
    }

    folded = upgrade_legacy_node(node, report)

    assert folded["config"]["input"] == {"repo": "octo/test", "title": "Bug", "body": "details"}
    assert report.dropped_fields == ["gh.config.labels", "gh.config.auth.scope"]


def test_non_legacy_nodes_are_copied():
    node = {"id": "h", "type": "http.request", "config": {"method": "GET", "url": "https://x"}}
    copied = upgrade_legacy_node(node)
    assert copied == node
    assert copied is not node


class TestMigrateToCurrent:
    def test_v3_passes_through_unchanged(self, v3_document):
        document, report = migrate_to_current(v3_document)

        assert document is v3_document
        assert not report.changed

    def test_v2_is_upgraded(self, v2_document):
        document, report = migrate_to_current(v2_document)

        assert document["version"] == "v3"
        assert report.source_version == "v2"

    def test_migration_is_idempotent(self, v2_document):
        once, _ = migrate_to_current(v2_document)
        twice, report = migrate_to_current(once)

        assert twice == once
        assert not report.changed

    @pytest.mark.parametrize("document", [{"version": "v1"}, {}, None, ["v3"]])
    def test_unknown_versions_are_rejected(self, document):
        with pytest.raises(UnsupportedDslVersionError):
            migrate_to_current(document)


def test_edge_id_for():
    assert edge_id_for("a", "b") == "e:a->b"


def test_edge_id_for_hashes_ids_that_would_be_too_long():
    long_id = edge_id_for("a" * 60, "b" * 60)

    assert long_id == edge_id_for("a" * 60, "b" * 60)
    assert long_id != edge_id_for("a" * 60, "c" * 60)
    assert len(long_id) == len("e:") + 16
    assert edge_id_for("a", "b", suffix="#abc123") == "e:a->b#abc123"
