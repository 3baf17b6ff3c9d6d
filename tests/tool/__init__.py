"""Test helpers for helm-releases tools."""

import sys

from helm_releases.command import Command, run

TOOL_ARGS = [sys.executable, "-m", "helm_releases.tool"]


async def run_command(args: list[str], env: dict[str, str] | None = None) -> str:
    return await run(Command(TOOL_ARGS + args, env=env))
