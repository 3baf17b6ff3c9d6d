"""Configuration objects for helm-releases.

The active release target and the global tag expression may be supplied from
outside the declared model, either as properties or as environment variables.
External values take precedence over the values declared in the model.
"""

from collections.abc import Mapping
from dataclasses import dataclass
import logging
import os

from .manifest import ReleaseModel

__all__ = [
    "TARGET_PROPERTY",
    "TAGS_PROPERTY",
    "TARGET_ENV",
    "TAGS_ENV",
    "GraphOptions",
]

_LOGGER = logging.getLogger(__name__)

TARGET_PROPERTY = "helm.release.target"
TAGS_PROPERTY = "helm.release.tags"

TARGET_ENV = "HELM_RELEASE_TARGET"
TAGS_ENV = "HELM_RELEASE_TAGS"


@dataclass
class GraphOptions:
    """Options for synthesizing the graph that are not part of the model."""

    active_target: str | None = None
    """Name of the active release target, None uses the declared target."""

    global_tags: str | None = None
    """Tag expression every release must match, None matches all releases."""

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> "GraphOptions":
        """Create options from a property lookup."""
        return cls(
            active_target=properties.get(TARGET_PROPERTY) or None,
            global_tags=properties.get(TAGS_PROPERTY) or None,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GraphOptions":
        """Create options from environment variables."""
        if environ is None:
            environ = os.environ
        return cls(
            active_target=environ.get(TARGET_ENV) or None,
            global_tags=environ.get(TAGS_ENV) or None,
        )

    def merge(self, other: "GraphOptions") -> "GraphOptions":
        """Return options where values set in other take precedence."""
        return GraphOptions(
            active_target=(
                other.active_target
                if other.active_target is not None
                else self.active_target
            ),
            global_tags=(
                other.global_tags if other.global_tags is not None else self.global_tags
            ),
        )

    def target_for(self, model: ReleaseModel) -> str:
        """Return the active target, falling back to the one declared in the model."""
        if self.active_target is not None:
            _LOGGER.debug("Using external active release target %s", self.active_target)
            return self.active_target
        return model.active_target
