"""The synthesized graph of release actions and aggregates.

Nodes are identified by a structured `NodeId` of operation, release and
target. A node with both a release and a target is an action that installs or
uninstalls a single release to a single target. All other nodes are
aggregates that have no action of their own and are complete when all of
their dependencies are complete.

Each node also has a human readable label used for reporting, for example
`InstallAwesomeToDefault` or `UninstallFromLocal`.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Any

from .exceptions import ObjectNotFoundError
from .manifest import ChartRef, ReleaseSettings

__all__ = [
    "Operation",
    "NodeKind",
    "NodeId",
    "ReleaseAction",
    "ReleaseGraph",
]

_LOGGER = logging.getLogger(__name__)


class Operation(StrEnum):
    """The operation performed by a node."""

    INSTALL = "install"
    UNINSTALL = "uninstall"

    @property
    def preposition(self) -> str:
        """Word joining the release and target in a label."""
        if self == Operation.INSTALL:
            return "To"
        return "From"


class NodeKind(StrEnum):
    """The kind of a node in the graph."""

    ACTION = "action"
    TARGET = "target"
    RELEASE = "release"
    GLOBAL = "global"


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


@dataclass(frozen=True)
class NodeId:
    """Identifier for a node in the graph."""

    operation: Operation
    release: str | None = None
    target: str | None = None

    @property
    def kind(self) -> NodeKind:
        """The kind of node identified."""
        if self.release is not None and self.target is not None:
            return NodeKind.ACTION
        if self.target is not None:
            return NodeKind.TARGET
        if self.release is not None:
            return NodeKind.RELEASE
        return NodeKind.GLOBAL

    @property
    def label(self) -> str:
        """Human readable name for reporting."""
        parts = [_capitalize(self.operation.value)]
        if self.release is not None:
            parts.append(_capitalize(self.release))
        if self.target is not None:
            parts.append(self.operation.preposition)
            parts.append(_capitalize(self.target))
        return "".join(parts)

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class ReleaseAction:
    """A leaf action handed to an executor.

    This is everything needed to install or uninstall a single release to a
    single target.
    """

    operation: Operation
    """Whether to install or uninstall."""

    release: str
    """Identity of the release in the model."""

    target: str
    """Identity of the release target in the model."""

    release_name: str
    """The helm release name."""

    chart_ref: ChartRef
    """The chart and version to install."""

    settings: ReleaseSettings
    """The effective settings, unset values mean the option is omitted."""

    @property
    def node_id(self) -> NodeId:
        """The identity of the node for this action."""
        return NodeId(self.operation, self.release, self.target)

    def compact_dict(self) -> dict[str, Any]:
        """Return a compact dictionary representation of the action."""
        result: dict[str, Any] = {
            "operation": str(self.operation),
            "release": self.release,
            "target": self.target,
            "releaseName": self.release_name,
            **self.chart_ref.compact_dict(),
        }
        if settings := self.settings.redacted().compact_dict():
            result["settings"] = settings
        return result


@dataclass(frozen=True)
class ReleaseGraph:
    """An immutable graph of actions and aggregates.

    Nodes and their dependencies are kept in synthesis order so output is
    deterministic.
    """

    dependencies_by_node: dict[NodeId, tuple[NodeId, ...]] = field(
        default_factory=dict
    )
    actions_by_node: dict[NodeId, ReleaseAction] = field(default_factory=dict)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.dependencies_by_node

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self.dependencies_by_node)

    def __len__(self) -> int:
        return len(self.dependencies_by_node)

    @property
    def nodes(self) -> list[NodeId]:
        """All node identities in synthesis order."""
        return list(self.dependencies_by_node)

    @property
    def edges(self) -> set[tuple[NodeId, NodeId]]:
        """All (node, dependency) pairs."""
        return {
            (node_id, dependency)
            for node_id, dependencies in self.dependencies_by_node.items()
            for dependency in dependencies
        }

    @property
    def actions(self) -> list[ReleaseAction]:
        """All leaf actions in synthesis order."""
        return list(self.actions_by_node.values())

    def _check(self, node_id: NodeId) -> None:
        if node_id not in self.dependencies_by_node:
            raise ObjectNotFoundError(f"Node {node_id.label} not found in graph")

    def kind(self, node_id: NodeId) -> NodeKind:
        """Return the kind of the node."""
        self._check(node_id)
        return node_id.kind

    def dependencies(self, node_id: NodeId) -> tuple[NodeId, ...]:
        """Return the direct dependencies of the node."""
        self._check(node_id)
        return self.dependencies_by_node[node_id]

    def action(self, node_id: NodeId) -> ReleaseAction:
        """Return the action of a leaf node."""
        if (action := self.actions_by_node.get(node_id)) is None:
            raise ObjectNotFoundError(f"Action {node_id.label} not found in graph")
        return action

    def find(self, label: str) -> NodeId:
        """Return the node with the given label, ignoring case."""
        for node_id in self.dependencies_by_node:
            if node_id.label.lower() == label.lower():
                return node_id
        raise ObjectNotFoundError(f"Node {label} not found in graph")

    def leaves(self, node_id: NodeId) -> list[NodeId]:
        """Return the action nodes reachable from the node, in graph order."""
        self._check(node_id)
        seen: set[NodeId] = set()
        result: list[NodeId] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            if current.kind == NodeKind.ACTION:
                result.append(current)
            stack.extend(reversed(self.dependencies_by_node[current]))
        order = {node: index for index, node in enumerate(self.dependencies_by_node)}
        return sorted(result, key=order.__getitem__)

    def to_dict(self) -> dict[str, Any]:
        """Return a serializable representation keyed by node label."""
        result: dict[str, Any] = {}
        for node_id, dependencies in self.dependencies_by_node.items():
            entry: dict[str, Any] = {"kind": str(node_id.kind)}
            if dependencies:
                entry["dependsOn"] = [dep.label for dep in dependencies]
            if (action := self.actions_by_node.get(node_id)) is not None:
                entry["action"] = action.compact_dict()
            result[node_id.label] = entry
        return result
