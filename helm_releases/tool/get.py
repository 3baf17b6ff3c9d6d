"""Helm-releases get action."""

import dataclasses
import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from helm_releases.manifest import ReleaseModel, ReleaseTarget

from . import selector
from .format import PrintFormatter, formatter


_LOGGER = logging.getLogger(__name__)


def _add_output_flag(args: ArgumentParser) -> None:
    args.add_argument(
        "--output",
        "-o",
        choices=["yaml", "json"],
        default=None,
        help="Output format of the command",
    )


def _target_label(target: ReleaseTarget) -> str:
    if target.is_default:
        return f"{target.name} (implicit)"
    return target.name


class GetReleaseAction:
    """Get details about declared releases."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "releases",
                aliases=["release"],
                help="Get declared releases",
                description="Print information about the declared releases",
            ),
        )
        selector.add_model_flags(args)
        _add_output_flag(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        model: ReleaseModel = await selector.load_model(**kwargs)
        if (struct := formatter(output)) is not None:
            struct.print(
                [
                    dataclasses.replace(
                        release, settings=release.settings.redacted()
                    ).compact_dict()
                    for release in model.releases
                ]
            )
            return

        if not model.releases:
            print("no releases declared")
            return

        results: list[dict[str, Any]] = []
        for release in model.releases:
            results.append(
                {
                    "name": release.name,
                    "release": release.helm_release_name,
                    "chart": release.chart or "",
                    "version": release.version or "",
                    "tags": ",".join(sorted(release.tags)),
                }
            )
        PrintFormatter().print(results)


class GetTargetAction:
    """Get details about declared release targets."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "targets",
                aliases=["target"],
                help="Get release targets",
                description="Print information about the release targets",
            ),
        )
        selector.add_model_flags(args)
        _add_output_flag(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        model: ReleaseModel = await selector.load_model(**kwargs)
        active_target = selector.build_options(**kwargs).target_for(model)
        if (struct := formatter(output)) is not None:
            struct.print(
                [
                    {**target.compact_dict(), "implicit": True}
                    if target.is_default
                    else target.compact_dict()
                    for target in model.all_targets
                ]
            )
            return

        results: list[dict[str, Any]] = []
        for target in model.all_targets:
            results.append(
                {
                    "name": _target_label(target),
                    "select": target.select_tags or "",
                    "context": target.settings.kube_context or "",
                    "active": "*" if target.name == active_target else "",
                }
            )
        PrintFormatter().print(results)


class GetAction:
    """Helm-releases get action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print information about the release model",
                description="Print information about declared releases and targets",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        GetReleaseAction.register(subcmds)
        GetTargetAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # No-op given subcommands are always the dispatch target
