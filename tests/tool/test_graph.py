"""Tests for the helm-releases `graph` command."""

import json

import pytest
import yaml

from helm_releases.exceptions import CommandException

from . import run_command

MODEL = "tests/testdata/models/cluster.yaml"


async def test_graph() -> None:
    """Test printing the graph as a table."""
    result = await run_command(["graph", "--model", MODEL])
    rows = [line.split() for line in result.splitlines()]
    assert rows[0] == ["NODE", "KIND", "DEPENDENCIES"]
    assert rows[1] == ["InstallFrontendToDefault", "action"]
    assert [
        "InstallToLocal",
        "target",
        "InstallFrontendToLocal,InstallBackendToLocal",
    ] in rows
    assert ["InstallMonitoring", "release"] in rows
    assert rows[-2:] == [
        ["Install", "global", "InstallToLocal"],
        ["Uninstall", "global", "UninstallFromLocal"],
    ]


async def test_graph_wide() -> None:
    """Test printing the chart of each action."""
    result = await run_command(["graph", "--model", MODEL, "-o", "wide"])
    rows = [line.split() for line in result.splitlines()]
    assert rows[0] == ["NODE", "KIND", "DEPENDENCIES", "CHART", "VERSION"]
    assert rows[1] == [
        "InstallFrontendToDefault",
        "action",
        "my-repo/frontend",
        "1.2.0",
    ]


async def test_graph_yaml() -> None:
    """Test printing the graph as yaml with redacted credentials."""
    result = await run_command(["graph", "--model", MODEL, "-o", "yaml"])
    graph = yaml.safe_load(result)
    action = graph["InstallBackendToLocal"]
    assert action["kind"] == "action"
    assert action["action"]["releaseName"] == "backend"
    assert action["action"]["settings"]["kubeContext"] == "kind-local"
    assert action["action"]["settings"]["password"] == "**PLACEHOLDER**"
    assert "topsecret" not in result


async def test_graph_target_env() -> None:
    """Test the active target from the environment."""
    result = await run_command(
        ["graph", "--model", MODEL, "-o", "json"],
        env={"HELM_RELEASE_TARGET": "prod"},
    )
    graph = json.loads(result)
    assert graph["Install"]["dependsOn"] == ["InstallToProd"]
    assert graph["InstallMonitoring"]["dependsOn"] == ["InstallMonitoringToProd"]


async def test_graph_target_flag_overrides_env() -> None:
    """Test the target flag takes precedence over the environment."""
    result = await run_command(
        ["graph", "--model", MODEL, "-o", "json", "--target", "default"],
        env={"HELM_RELEASE_TARGET": "prod"},
    )
    graph = json.loads(result)
    assert graph["Uninstall"]["dependsOn"] == ["UninstallFromDefault"]


async def test_graph_global_tags() -> None:
    """Test a global tag expression narrows every target."""
    result = await run_command(
        ["graph", "--model", MODEL, "-o", "json", "--tags", "api"]
    )
    graph = json.loads(result)
    assert graph["InstallToDefault"]["dependsOn"] == ["InstallBackendToDefault"]
    assert graph["InstallToLocal"]["dependsOn"] == ["InstallBackendToLocal"]
    assert "dependsOn" not in graph["InstallFrontend"]


async def test_unknown_target() -> None:
    """Test an active target that is not declared."""
    with pytest.raises(CommandException, match="Unknown release target 'staging'"):
        await run_command(
            ["graph", "--model", "tests/testdata/models/unknown-target.yaml"]
        )
