"""Tests for command library."""

import pytest

from helm_releases.command import Command, run
from helm_releases.exceptions import CommandException, HelmException


async def test_command() -> None:
    """Test stdout parsing of a command."""
    result = await run(Command(["echo", "Hello"]))
    assert result == "Hello\n"


async def test_command_env() -> None:
    """Test environment variables are passed to the command."""
    result = await run(Command(["printenv", "KUBECONFIG"], env={"KUBECONFIG": "a"}))
    assert result == "a\n"


async def test_failed_command() -> None:
    """Test a failing command."""
    with pytest.raises(CommandException, match="return code 1"):
        await run(Command(["/bin/false"]))


async def test_failed_command_exception_type() -> None:
    """Test a failing command raises the requested exception."""
    with pytest.raises(HelmException):
        await run(Command(["/bin/false"], exc=HelmException))


async def test_timeout() -> None:
    """Test a command that takes too long."""
    with pytest.raises(CommandException, match="timed out"):
        await run(Command(["sleep", "5"], timeout=0.1))


def test_redacted_string() -> None:
    """Test secrets are hidden when a command is displayed."""
    cmd = Command(
        ["helm", "--password", "top secret"],
        env={"KUBECONFIG": "/tmp/kube config"},
        secrets=["top secret"],
    )
    assert str(cmd) == "KUBECONFIG='/tmp/kube config' helm --password '**REDACTED**'"
    assert cmd.string == "helm --password 'top secret'"
