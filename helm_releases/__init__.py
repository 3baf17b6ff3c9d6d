"""
helm-releases derives the install and uninstall actions for a set of helm
releases declared against a set of release targets.

The main modules are:
  - `registry`: declare releases and release targets, then freeze the model.
  - `synthesizer`: build the graph of actions and aggregates from the model.
  - `executor`: run the leaf actions of the graph with helm.
"""

__all__ = [
    "manifest",
    "registry",
    "tags",
    "resolver",
    "graph",
    "synthesizer",
    "executor",
    "config",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
