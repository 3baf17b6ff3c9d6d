"""Tests for the helm-releases `get` command."""

import json

import pytest
import yaml

from helm_releases.exceptions import CommandException

from . import run_command

MODEL = "tests/testdata/models/cluster.yaml"


async def test_get_releases() -> None:
    """Test listing releases as a table."""
    result = await run_command(["get", "releases", "--model", MODEL])
    assert [line.split() for line in result.splitlines()] == [
        ["NAME", "RELEASE", "CHART", "VERSION", "TAGS"],
        ["frontend", "frontend", "my-repo/frontend", "1.2.0", "web"],
        ["backend", "backend", "my-repo/backend", "2.0.1", "api,web"],
        ["monitoring", "monitoring", "./charts/monitoring"],
    ]


async def test_get_releases_yaml() -> None:
    """Test listing releases as yaml."""
    result = await run_command(["get", "releases", "--model", MODEL, "-o", "yaml"])
    releases = yaml.safe_load(result)
    assert [release["name"] for release in releases] == [
        "frontend",
        "backend",
        "monitoring",
    ]
    assert releases[1]["tags"] == ["api", "web"]
    assert releases[1]["settings"]["remoteTimeout"] == 42
    assert releases[1]["settings"]["password"] == "**PLACEHOLDER**"
    assert releases[2]["settings"] == {"keepHistoryOnUninstall": True}


async def test_get_targets() -> None:
    """Test listing targets including the default target."""
    result = await run_command(["get", "targets", "--model", MODEL])
    assert [line.split() for line in result.splitlines()] == [
        ["NAME", "SELECT", "CONTEXT", "ACTIVE"],
        ["default", "(implicit)"],
        ["local", "web", "kind-local", "*"],
        ["prod", "prod-cluster"],
    ]


async def test_get_targets_env() -> None:
    """Test the active target from the environment."""
    result = await run_command(
        ["get", "targets", "--model", MODEL, "-o", "json"],
        env={"HELM_RELEASE_TARGET": "prod"},
    )
    targets = json.loads(result)
    assert [target["name"] for target in targets] == ["default", "local", "prod"]
    assert targets[0]["implicit"] is True
    assert "implicit" not in targets[1]
    assert targets[2]["settings"] == {
        "kubeContext": "prod-cluster",
        "atomic": True,
        "wait": True,
    }


async def test_get_no_releases() -> None:
    """Test a model that declares no releases."""
    result = await run_command(
        ["get", "releases", "--model", "tests/testdata/models/targets-only.yaml"]
    )
    assert result == "no releases declared\n"


async def test_invalid_model() -> None:
    """Test a model with a target overriding a release setting."""
    with pytest.raises(CommandException, match="does not support settings"):
        await run_command(
            ["get", "targets", "--model", "tests/testdata/models/invalid-target.yaml"]
        )


async def test_missing_model() -> None:
    """Test a model file that does not exist."""
    with pytest.raises(CommandException, match="helm-releases error"):
        await run_command(["get", "releases", "--model", "does-not-exist.yaml"])
