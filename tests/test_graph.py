"""Tests for the release graph."""

import pytest

from helm_releases.exceptions import ObjectNotFoundError
from helm_releases.graph import NodeId, NodeKind, Operation
from helm_releases.registry import ReleaseRegistry
from helm_releases.synthesizer import synthesize


@pytest.mark.parametrize(
    ("node_id", "label", "kind"),
    [
        (
            NodeId(Operation.INSTALL, "awesome", "default"),
            "InstallAwesomeToDefault",
            NodeKind.ACTION,
        ),
        (
            NodeId(Operation.UNINSTALL, "awesome", "local"),
            "UninstallAwesomeFromLocal",
            NodeKind.ACTION,
        ),
        (NodeId(Operation.INSTALL, target="local"), "InstallToLocal", NodeKind.TARGET),
        (
            NodeId(Operation.UNINSTALL, target="local"),
            "UninstallFromLocal",
            NodeKind.TARGET,
        ),
        (
            NodeId(Operation.INSTALL, release="awesome"),
            "InstallAwesome",
            NodeKind.RELEASE,
        ),
        (NodeId(Operation.UNINSTALL), "Uninstall", NodeKind.GLOBAL),
    ],
)
def test_node_id(node_id: NodeId, label: str, kind: NodeKind) -> None:
    """Test node labels and kinds."""
    assert node_id.label == label
    assert str(node_id) == label
    assert node_id.kind == kind


def test_graph_lookups() -> None:
    """Test looking up nodes that are not in the graph."""
    registry = ReleaseRegistry()
    registry.release("awesome", chart="my-repo/awesome-chart")
    graph = synthesize(registry.freeze())

    missing = NodeId(Operation.INSTALL, "awesome", "local")
    assert missing not in graph
    with pytest.raises(ObjectNotFoundError, match="InstallAwesomeToLocal not found"):
        graph.dependencies(missing)
    with pytest.raises(ObjectNotFoundError, match="InstallAwesomeToLocal not found"):
        graph.kind(missing)
    with pytest.raises(ObjectNotFoundError, match="Action InstallAwesome not found"):
        graph.action(NodeId(Operation.INSTALL, release="awesome"))
    with pytest.raises(ObjectNotFoundError, match="Node Bogus not found"):
        graph.find("Bogus")
    assert graph.find("installawesometodefault") == NodeId(
        Operation.INSTALL, "awesome", "default"
    )
    assert len(graph) == 8


def test_to_dict() -> None:
    """Test the serializable form of the graph."""
    registry = ReleaseRegistry()
    registry.release(
        "awesome",
        chart="my-repo/awesome-chart",
        version="3.42.19",
        password="topsecret",
    )
    graph = synthesize(registry.freeze())
    result = graph.to_dict()
    assert list(result) == [
        "InstallAwesomeToDefault",
        "InstallToDefault",
        "UninstallAwesomeFromDefault",
        "UninstallFromDefault",
        "InstallAwesome",
        "UninstallAwesome",
        "Install",
        "Uninstall",
    ]
    assert result["InstallAwesomeToDefault"] == {
        "kind": "action",
        "action": {
            "operation": "install",
            "release": "awesome",
            "target": "default",
            "releaseName": "awesome",
            "chart": "my-repo/awesome-chart",
            "version": "3.42.19",
            "settings": {"password": "**PLACEHOLDER**"},
        },
    }
    assert result["Install"] == {"kind": "global", "dependsOn": ["InstallToDefault"]}
