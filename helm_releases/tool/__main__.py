"""Entry point for `python -m helm_releases.tool`."""

from .helm_releases import main

main()
