"""Resolves the effective settings for a release installed to a target.

Every setting is resolved independently through an override chain, highest
precedence first:

1. The value set on the release.
2. The value set on the release target.
3. The process-wide baseline.

A setting unset at every level resolves to None and the corresponding
option is omitted when the action runs.
"""

import logging
from typing import Any

from .manifest import Release, ReleaseSettings, ReleaseTarget

__all__ = [
    "resolve",
    "resolve_settings",
]

_LOGGER = logging.getLogger(__name__)

_SETTING_NAMES = frozenset(ReleaseSettings.names())


def _chain(
    release: Release, target: ReleaseTarget, baseline: ReleaseSettings | None
) -> list[ReleaseSettings]:
    chain = [release.settings, target.settings]
    if baseline is not None:
        chain.append(baseline)
    return chain


def resolve(
    setting: str,
    release: Release,
    target: ReleaseTarget,
    baseline: ReleaseSettings | None = None,
) -> Any:
    """Return the effective value of a single setting for the release and target."""
    if setting not in _SETTING_NAMES:
        raise ValueError(f"Unknown release setting '{setting}'")
    for settings in _chain(release, target, baseline):
        if (value := getattr(settings, setting)) is not None:
            return value
    return None


def resolve_settings(
    release: Release,
    target: ReleaseTarget,
    baseline: ReleaseSettings | None = None,
) -> ReleaseSettings:
    """Return the effective settings for the release and target."""
    values: dict[str, Any] = {}
    for settings in reversed(_chain(release, target, baseline)):
        values.update(settings.explicit())
    _LOGGER.debug(
        "Resolved settings for release %s to target %s: %s",
        release.name,
        target.name,
        sorted(values),
    )
    return ReleaseSettings(**values)
