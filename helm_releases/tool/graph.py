"""Helm-releases graph and plan actions."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from helm_releases.executor import HelmExecutor
from helm_releases.graph import NodeKind

from . import selector
from .format import PrintFormatter, formatter


_LOGGER = logging.getLogger(__name__)

DEFAULT_NODE = "Install"


class GraphAction:
    """Print the synthesized graph of actions and aggregates."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "graph",
                help="Print the graph of install and uninstall actions",
                description="Print every node of the synthesized graph with its "
                "dependencies",
            ),
        )
        selector.add_graph_flags(args)
        args.add_argument(
            "--output",
            "-o",
            choices=["wide", "yaml", "json"],
            default=None,
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        _, graph = await selector.build_graph(**kwargs)
        if (struct := formatter(output)) is not None:
            struct.print(graph.to_dict())
            return

        cols = ["node", "kind", "dependencies"]
        if output == "wide":
            cols.extend(["chart", "version"])
        results: list[dict[str, Any]] = []
        for node_id in graph:
            value: dict[str, Any] = {
                "node": node_id.label,
                "kind": node_id.kind,
                "dependencies": ",".join(
                    dep.label for dep in graph.dependencies(node_id)
                ),
            }
            if output == "wide" and node_id.kind == NodeKind.ACTION:
                chart_ref = graph.action(node_id).chart_ref
                value["chart"] = chart_ref.chart or ""
                value["version"] = chart_ref.version or ""
            results.append(value)
        PrintFormatter(cols).print(results)


class PlanAction:
    """Print the helm commands that running a node would invoke."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "plan",
                help="Print the helm commands for a node without running them",
                description="Print the helm command of every action the node "
                "depends on, in graph order",
            ),
        )
        args.add_argument(
            "node",
            help="The label of a graph node e.g. `InstallToLocal` "
            f"(default {DEFAULT_NODE})",
            type=str,
            default=DEFAULT_NODE,
            nargs="?",
        )
        selector.add_graph_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        node: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        _, graph = await selector.build_graph(**kwargs)
        node_id = graph.find(node)
        executor = HelmExecutor()
        leaves = graph.leaves(node_id)
        if not leaves:
            print(f"{node_id.label}: nothing to do")
            return
        for leaf in leaves:
            print(executor.command_for(graph.action(leaf)))
