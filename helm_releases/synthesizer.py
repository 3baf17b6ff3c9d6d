"""Synthesizes the graph of install and uninstall actions for a release model.

For every release target (the implicit default target first, then the
declared targets) and every release eligible for that target, an install and
an uninstall action are created with the effective settings for the pair.
Aggregates are wired on top of the actions:

- Per target, e.g. `InstallToLocal`, depending on every action for the target.
- Per release, e.g. `InstallAwesome`, depending on the action for the active
  target only.
- Global, `Install` and `Uninstall`, depending on the per target aggregate of
  the active target only.

Synthesis is a pure function of the model, the global tag expression and the
active target. A release that is not eligible for a target produces no nodes
for that target.
"""

from collections.abc import Iterable
import logging

from .context import trace_context
from .exceptions import InputException, UnknownTargetError
from .graph import NodeId, Operation, ReleaseAction, ReleaseGraph
from .manifest import Release, ReleaseModel, ReleaseTarget
from .resolver import resolve_settings
from .tags import eligible

__all__ = [
    "synthesize",
]

_LOGGER = logging.getLogger(__name__)

OPERATIONS = (Operation.INSTALL, Operation.UNINSTALL)


def _action(
    operation: Operation,
    release: Release,
    target: ReleaseTarget,
    model: ReleaseModel,
) -> ReleaseAction:
    return ReleaseAction(
        operation=operation,
        release=release.name,
        target=target.name,
        release_name=release.helm_release_name,
        chart_ref=release.chart_ref,
        settings=resolve_settings(release, target, model.baseline),
    )


def _describe(node_id: NodeId) -> str:
    parts = [str(node_id.operation)]
    if node_id.release is not None:
        parts.append(f"release '{node_id.release}'")
    if node_id.target is not None:
        parts.append(f"target '{node_id.target}'")
    return " ".join(parts)


def _check_labels(node_ids: Iterable[NodeId]) -> None:
    """Raise if two nodes share a label, ignoring case."""
    seen: dict[str, NodeId] = {}
    for node_id in node_ids:
        key = node_id.label.lower()
        if (other := seen.get(key)) is not None:
            raise InputException(
                f"Graph node {other.label} is ambiguous between "
                f"{_describe(other)} and {_describe(node_id)}, rename the "
                "release or target"
            )
        seen[key] = node_id


def synthesize(
    model: ReleaseModel,
    global_tags: str | None = None,
    active_target: str | None = None,
) -> ReleaseGraph:
    """Build the action graph for the model.

    The active target defaults to the one declared in the model. An active
    target that names neither a declared target nor the default target raises
    UnknownTargetError before any node is produced.
    Release and target names that produce the same node label, ignoring case,
    raise InputException.
    """
    if active_target is None:
        active_target = model.active_target
    if model.get_target(active_target) is None:
        raise UnknownTargetError(active_target, model.target_names)

    dependencies: dict[NodeId, tuple[NodeId, ...]] = {}
    actions: dict[NodeId, ReleaseAction] = {}

    with trace_context("Synthesize"):
        for target in model.all_targets:
            eligible_releases = [
                release
                for release in model.releases
                if eligible(release.tags, global_tags, target.select_tags)
            ]
            _LOGGER.debug(
                "Target %s selects %d of %d releases",
                target.name,
                len(eligible_releases),
                len(model.releases),
            )
            for operation in OPERATIONS:
                target_deps: list[NodeId] = []
                for release in eligible_releases:
                    action = _action(operation, release, target, model)
                    dependencies[action.node_id] = ()
                    actions[action.node_id] = action
                    target_deps.append(action.node_id)
                dependencies[NodeId(operation, target=target.name)] = tuple(
                    target_deps
                )

        for release in model.releases:
            for operation in OPERATIONS:
                pair = NodeId(operation, release.name, active_target)
                dependencies[NodeId(operation, release=release.name)] = (
                    (pair,) if pair in actions else ()
                )

        for operation in OPERATIONS:
            dependencies[NodeId(operation)] = (
                NodeId(operation, target=active_target),
            )

        _check_labels(dependencies)

    _LOGGER.debug(
        "Synthesized %d nodes with %d actions for active target %s",
        len(dependencies),
        len(actions),
        active_target,
    )
    return ReleaseGraph(dependencies_by_node=dependencies, actions_by_node=actions)
