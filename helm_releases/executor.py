"""Adapter that turns synthesized release actions into helm invocations.

The synthesizer never runs anything. An `ActionExecutor` receives the leaf
`ReleaseAction` objects of a graph and is responsible for performing the
install or uninstall. `HelmExecutor` does this with the helm command line:

```python
from helm_releases.executor import HelmExecutor, execute

graph = synthesize(registry.freeze())
results = await execute(graph, graph.find("Install"), HelmExecutor())
```

Settings that resolved to None are omitted from the command line, leaving
the helm default in effect.
"""

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
import logging

from . import command
from .exceptions import HelmException
from .graph import NodeId, Operation, ReleaseAction, ReleaseGraph
from .manifest import ReleaseSettings

__all__ = [
    "ActionResult",
    "ActionExecutor",
    "HelmExecutor",
    "execute",
]

_LOGGER = logging.getLogger(__name__)


HELM_BIN = "helm"
KUBECONFIG_ENV = "KUBECONFIG"


@dataclass(frozen=True)
class ActionResult:
    """The outcome of running a single action."""

    node_id: NodeId
    """The action node that was run."""

    output: str
    """Output reported by the executor."""


class ActionExecutor(ABC):
    """Runs install and uninstall actions."""

    @abstractmethod
    async def run_install(self, action: ReleaseAction) -> ActionResult:
        """Install the release of the action to its target."""

    @abstractmethod
    async def run_uninstall(self, action: ReleaseAction) -> ActionResult:
        """Uninstall the release of the action from its target."""

    async def run(self, action: ReleaseAction) -> ActionResult:
        """Run the action according to its operation."""
        if action.operation == Operation.INSTALL:
            return await self.run_install(action)
        return await self.run_uninstall(action)


def _flag(args: list[str], name: str, value: bool | None) -> None:
    if value:
        args.append(name)


def _option(args: list[str], name: str, value: str | int | None) -> None:
    if value is not None:
        args.extend([name, str(value)])


def _server_args(settings: ReleaseSettings) -> list[str]:
    """Arguments for commands that communicate with the cluster."""
    args: list[str] = []
    _option(args, "--kube-context", settings.kube_context)
    if settings.remote_timeout is not None:
        args.extend(["--timeout", f"{settings.remote_timeout}s"])
    _flag(args, "--dry-run", settings.dry_run)
    _flag(args, "--no-hooks", settings.no_hooks)
    return args


def _server_env(settings: ReleaseSettings) -> dict[str, str] | None:
    if settings.kube_config is None:
        return None
    return {KUBECONFIG_ENV: settings.kube_config}


class HelmExecutor(ActionExecutor):
    """Runs actions with the helm command line tool."""

    def __init__(self, helm_bin: str = HELM_BIN) -> None:
        """Initialize HelmExecutor."""
        self._helm_bin = helm_bin

    def install_command(self, action: ReleaseAction) -> command.Command:
        """Return the `helm upgrade --install` command for the action."""
        if not action.chart_ref.chart:
            raise HelmException(
                f"Release {action.release} has no chart to install to "
                f"target {action.target}"
            )
        settings = action.settings
        args = [
            self._helm_bin,
            "upgrade",
            "--install",
            action.release_name,
            action.chart_ref.chart,
        ]
        _option(args, "--version", action.chart_ref.version)
        args.extend(_server_args(settings))
        _flag(args, "--atomic", settings.atomic)
        _flag(args, "--devel", settings.devel)
        _flag(args, "--verify", settings.verify)
        _flag(args, "--wait", settings.wait)
        _option(args, "--repo", settings.repository)
        _option(args, "--username", settings.username)
        _option(args, "--password", settings.password)
        _option(args, "--ca-file", settings.ca_file)
        _option(args, "--cert-file", settings.cert_file)
        _option(args, "--key-file", settings.key_file)
        return command.Command(
            args,
            env=_server_env(settings),
            exc=HelmException,
            secrets=[settings.password] if settings.password else [],
        )

    def uninstall_command(self, action: ReleaseAction) -> command.Command:
        """Return the `helm uninstall` command for the action."""
        settings = action.settings
        args = [self._helm_bin, "uninstall", action.release_name]
        args.extend(_server_args(settings))
        _flag(args, "--keep-history", settings.keep_history_on_uninstall)
        return command.Command(args, env=_server_env(settings), exc=HelmException)

    def command_for(self, action: ReleaseAction) -> command.Command:
        """Return the command for the action according to its operation."""
        if action.operation == Operation.INSTALL:
            return self.install_command(action)
        return self.uninstall_command(action)

    async def run_install(self, action: ReleaseAction) -> ActionResult:
        """Install the release of the action to its target."""
        _LOGGER.info("Installing %s to %s", action.release_name, action.target)
        output = await command.run(self.install_command(action))
        return ActionResult(node_id=action.node_id, output=output)

    async def run_uninstall(self, action: ReleaseAction) -> ActionResult:
        """Uninstall the release of the action from its target."""
        _LOGGER.info("Uninstalling %s from %s", action.release_name, action.target)
        output = await command.run(self.uninstall_command(action))
        return ActionResult(node_id=action.node_id, output=output)


async def execute(
    graph: ReleaseGraph, node_id: NodeId, executor: ActionExecutor
) -> list[ActionResult]:
    """Run every action the node depends on and return the results in graph order.

    Independent actions run concurrently. The first failure is raised once all
    started actions have completed.
    """
    leaves = graph.leaves(node_id)
    _LOGGER.debug("Executing %s with %d actions", node_id.label, len(leaves))
    results = await asyncio.gather(
        *(executor.run(graph.action(leaf)) for leaf in leaves),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return [result for result in results if isinstance(result, ActionResult)]
