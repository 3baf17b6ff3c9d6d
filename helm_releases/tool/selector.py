"""Library for common model and graph selection flags."""

from argparse import ArgumentParser
import logging
import pathlib

from helm_releases.config import GraphOptions, TAGS_ENV, TARGET_ENV
from helm_releases.graph import ReleaseGraph
from helm_releases.manifest import ReleaseModel
from helm_releases.registry import read_model
from helm_releases.synthesizer import synthesize

_LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "helm-releases.yaml"


def add_model_flags(args: ArgumentParser) -> None:
    """Add flags selecting the model file to the arguments object."""
    args.add_argument(
        "--model",
        "-m",
        help="Path to the YAML file declaring releases and release targets",
        type=pathlib.Path,
        default=pathlib.Path(DEFAULT_MODEL),
    )


def add_graph_flags(args: ArgumentParser) -> None:
    """Add flags controlling graph synthesis to the arguments object."""
    add_model_flags(args)
    args.add_argument(
        "--target",
        "-t",
        type=str,
        default=None,
        help=f"The active release target, overrides the {TARGET_ENV} environment "
        "variable and the target declared in the model",
    )
    args.add_argument(
        "--tags",
        type=str,
        default=None,
        help=f"Tag expression selecting releases, overrides the {TAGS_ENV} "
        "environment variable e.g. `*` or `frontend,backend`",
    )


def build_options(**kwargs) -> GraphOptions:  # type: ignore[no-untyped-def]
    """Build graph options from the environment and flags."""
    options = GraphOptions.from_env().merge(
        GraphOptions(
            active_target=kwargs.get("target"),
            global_tags=kwargs.get("tags"),
        )
    )
    _LOGGER.debug("Graph options: %s", options)
    return options


async def load_model(**kwargs) -> ReleaseModel:  # type: ignore[no-untyped-def]
    """Read and freeze the model selected by the flags."""
    registry = await read_model(kwargs["model"])
    return registry.freeze()


async def build_graph(  # type: ignore[no-untyped-def]
    **kwargs,
) -> tuple[ReleaseModel, ReleaseGraph]:
    """Read the model and synthesize the graph selected by the flags."""
    model = await load_model(**kwargs)
    options = build_options(**kwargs)
    graph = synthesize(
        model,
        global_tags=options.global_tags,
        active_target=options.target_for(model),
    )
    return model, graph
