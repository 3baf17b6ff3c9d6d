"""Tests for resolving effective settings."""

import pytest

from helm_releases.manifest import Release, ReleaseSettings, ReleaseTarget
from helm_releases.resolver import resolve, resolve_settings


BASELINE = ReleaseSettings(kube_context="baseline-context", remote_timeout=300)


@pytest.mark.parametrize(
    ("release_settings", "target_settings", "expected"),
    [
        (ReleaseSettings(), ReleaseSettings(), "baseline-context"),
        (
            ReleaseSettings(),
            ReleaseSettings(kube_context="target-context"),
            "target-context",
        ),
        (
            ReleaseSettings(kube_context="release-context"),
            ReleaseSettings(),
            "release-context",
        ),
        (
            ReleaseSettings(kube_context="release-context"),
            ReleaseSettings(kube_context="target-context"),
            "release-context",
        ),
    ],
    ids=["baseline", "target", "release", "release-over-target"],
)
def test_precedence(
    release_settings: ReleaseSettings,
    target_settings: ReleaseSettings,
    expected: str,
) -> None:
    """Test the release, target and baseline override chain."""
    release = Release(name="awesome", settings=release_settings)
    target = ReleaseTarget(name="local", settings=target_settings)
    assert resolve("kube_context", release, target, BASELINE) == expected
    assert resolve_settings(release, target, BASELINE).kube_context == expected


def test_settings_resolve_independently() -> None:
    """Test that each setting is resolved on its own."""
    release = Release(name="awesome", settings=ReleaseSettings(remote_timeout=42))
    target = ReleaseTarget(
        name="local", settings=ReleaseSettings(kube_context="local", dry_run=True)
    )
    settings = resolve_settings(release, target, BASELINE)
    assert settings == ReleaseSettings(
        kube_context="local",
        remote_timeout=42,
        dry_run=True,
    )


def test_unset_settings() -> None:
    """Test that settings unset at every level resolve to None."""
    release = Release(name="awesome")
    target = ReleaseTarget(name="local")
    assert resolve("wait", release, target) is None
    assert resolve("keep_history_on_uninstall", release, target, BASELINE) is None
    assert resolve_settings(release, target) == ReleaseSettings()


def test_false_overrides_baseline() -> None:
    """Test that an explicit False is a value and not unset."""
    release = Release(name="awesome", settings=ReleaseSettings(wait=False))
    target = ReleaseTarget(name="local", settings=ReleaseSettings(wait=True))
    assert resolve("wait", release, target) is False


def test_unknown_setting() -> None:
    """Test resolving a setting that does not exist."""
    with pytest.raises(ValueError, match="Unknown release setting 'bogus'"):
        resolve("bogus", Release(name="awesome"), ReleaseTarget(name="local"))
