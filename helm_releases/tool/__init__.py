"""Command line tool for inspecting a helm release model."""
