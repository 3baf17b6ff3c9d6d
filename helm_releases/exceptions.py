"""Exceptions related to helm-releases."""

__all__ = [
    "ReleaseException",
    "InputException",
    "UnknownTargetError",
    "DuplicateEntityError",
    "ModelFrozenError",
    "ObjectNotFoundError",
    "CommandException",
    "HelmException",
]


class ReleaseException(Exception):
    """Generic base exception used for this library."""


class InputException(ReleaseException):
    """Raised when the input model or values are not formatted as expected."""


class UnknownTargetError(InputException):
    """Raised when the active release target does not name a known target."""

    def __init__(self, target_name: str, known: list[str] | None = None) -> None:
        message = f"Unknown release target '{target_name}'"
        if known:
            message += f" (known targets: {', '.join(known)})"
        super().__init__(message)
        self.target_name = target_name


class DuplicateEntityError(InputException):
    """Raised when an entity is declared twice and re-declaration is disallowed."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} '{name}' is already declared")
        self.kind = kind
        self.name = name


class ModelFrozenError(ReleaseException):
    """Raised when the model is modified after it was frozen for synthesis."""


class ObjectNotFoundError(ReleaseException):
    """Raised when an entity or graph node is not found."""


class CommandException(ReleaseException):
    """Raised when there is a failure running a subcommand."""


class HelmException(CommandException):
    """Raised when there is a failure running a helm command."""
