"""Registry of the declared releases and release targets.

The registry is the input API of the model. It is populated during a single
configuration phase, where entities are created or updated by name, and then
frozen into an immutable `ReleaseModel` used for graph synthesis:

```python
from helm_releases.registry import ReleaseRegistry

registry = ReleaseRegistry()
registry.release("awesome", chart="my-repo/awesome-chart", version="3.42.19")
registry.target("local", kube_context="local")
model = registry.freeze()
```

The implicit default target is always present. It may be configured by name
like any other target but is never part of the enumerated targets.
"""

from collections.abc import Iterable
import dataclasses
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml

from .exceptions import (
    DuplicateEntityError,
    InputException,
    ModelFrozenError,
    ObjectNotFoundError,
)
from .manifest import (
    DEFAULT_TARGET,
    Release,
    ReleaseModel,
    ReleaseSettings,
    ReleaseTarget,
    parse_tags,
)

__all__ = [
    "ReleaseRegistry",
    "read_model",
]

_LOGGER = logging.getLogger(__name__)

RELEASE_ATTRIBUTES = frozenset({"chart", "version", "release_name", "tags"})
TARGET_ATTRIBUTES = frozenset({"select_tags"})
SETTING_NAMES = frozenset(ReleaseSettings.names())


def _split_attrs(
    kind: str, attributes: frozenset[str], attrs: dict[str, Any]
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split keyword arguments into entity attributes and settings."""
    entity_attrs: dict[str, Any] = {}
    settings: dict[str, Any] = {}
    for key, value in attrs.items():
        if key in attributes:
            entity_attrs[key] = value
        elif key in SETTING_NAMES:
            settings[key] = value
        else:
            raise TypeError(f"Unknown {kind} attribute '{key}'")
    return entity_attrs, settings


class ReleaseRegistry:
    """Holds the releases and release targets while the model is configured."""

    def __init__(self, *, allow_redeclare: bool = True) -> None:
        """Initialize ReleaseRegistry.

        When `allow_redeclare` is False, `declare_release` and `declare_target`
        raise DuplicateEntityError for a name that is already registered.
        The `release` and `target` helpers create or update by name in either
        mode.
        """
        self._allow_redeclare = allow_redeclare
        self._releases: dict[str, Release] = {}
        self._targets: dict[str, ReleaseTarget] = {}
        self._default_target = ReleaseTarget(name=DEFAULT_TARGET)
        self._baseline = ReleaseSettings()
        self._active_target: str | None = None
        self._model: ReleaseModel | None = None

    @property
    def frozen(self) -> bool:
        """Return True once the configuration phase has ended."""
        return self._model is not None

    def _check_mutable(self) -> None:
        if self._model is not None:
            raise ModelFrozenError("The release model is frozen and can't be modified")

    @property
    def releases(self) -> list[Release]:
        """Declared releases in declaration order."""
        return list(self._releases.values())

    @property
    def targets(self) -> list[ReleaseTarget]:
        """Declared release targets in declaration order.

        The implicit default target is not included.
        """
        return list(self._targets.values())

    @property
    def default_target(self) -> ReleaseTarget:
        """The implicit default target."""
        return self._default_target

    @property
    def baseline(self) -> ReleaseSettings:
        """Process-wide settings used when neither release nor target sets one."""
        return self._baseline

    @baseline.setter
    def baseline(self, settings: ReleaseSettings) -> None:
        self._check_mutable()
        self._baseline = settings

    def configure_baseline(self, **settings: Any) -> ReleaseSettings:
        """Update individual baseline settings."""
        self.baseline = dataclasses.replace(self._baseline, **settings)
        return self._baseline

    @property
    def active_target(self) -> str:
        """Name of the active release target, defaults to the default target."""
        return self._active_target or DEFAULT_TARGET

    @active_target.setter
    def active_target(self, name: str | None) -> None:
        self._check_mutable()
        self._active_target = name

    def get_release(self, name: str) -> Release:
        """Return the release with the given name."""
        if (release := self._releases.get(name)) is None:
            raise ObjectNotFoundError(f"Release '{name}' not found")
        return release

    def get_target(self, name: str) -> ReleaseTarget:
        """Return the release target with the given name, including the default."""
        if name == DEFAULT_TARGET:
            return self._default_target
        if (target := self._targets.get(name)) is None:
            raise ObjectNotFoundError(f"ReleaseTarget '{name}' not found")
        return target

    def declare_release(self, release: Release) -> Release:
        """Register a fully built release, replacing any release with the same name."""
        self._check_mutable()
        if release.name in self._releases:
            if not self._allow_redeclare:
                raise DuplicateEntityError(Release.kind, release.name)
            _LOGGER.debug("Updating existing release %s", release.name)
        else:
            _LOGGER.debug("Adding release %s", release.name)
        self._releases[release.name] = release
        return release

    def declare_target(self, target: ReleaseTarget) -> ReleaseTarget:
        """Register a fully built target, replacing any target with the same name."""
        self._check_mutable()
        if target.is_default:
            _LOGGER.debug("Configuring the default release target")
            self._default_target = target
            return target
        if target.name in self._targets:
            if not self._allow_redeclare:
                raise DuplicateEntityError(ReleaseTarget.kind, target.name)
            _LOGGER.debug("Updating existing release target %s", target.name)
        else:
            _LOGGER.debug("Adding release target %s", target.name)
        self._targets[target.name] = target
        return target

    def release(self, name: str, **attrs: Any) -> Release:
        """Create or update the release with the given name.

        Keyword arguments are either release attributes (`chart`, `version`,
        `release_name`, `tags`) or settings (e.g. `kube_context`). Settings are
        merged over the existing settings of the release.
        """
        self._check_mutable()
        entity_attrs, settings = _split_attrs(Release.kind, RELEASE_ATTRIBUTES, attrs)
        if "tags" in entity_attrs:
            entity_attrs["tags"] = parse_tags(name, entity_attrs["tags"])
        existing = self._releases.get(name) or Release(name=name)
        release = dataclasses.replace(
            existing,
            settings=dataclasses.replace(existing.settings, **settings),
            **entity_attrs,
        )
        self._releases[name] = release
        return release

    def add_tags(self, name: str, *tags: str) -> Release:
        """Add tags to the release with the given name."""
        release = self.get_release(name)
        return self.release(name, tags=release.tags | frozenset(tags))

    def target(self, name: str, **attrs: Any) -> ReleaseTarget:
        """Create or update the release target with the given name.

        Keyword arguments are either `select_tags` or target settings. The
        name `default` configures the implicit default target.
        """
        self._check_mutable()
        entity_attrs, settings = _split_attrs(
            ReleaseTarget.kind, TARGET_ATTRIBUTES, attrs
        )
        if name == DEFAULT_TARGET:
            existing = self._default_target
        else:
            existing = self._targets.get(name) or ReleaseTarget(name=name)
        target = dataclasses.replace(
            existing,
            settings=dataclasses.replace(existing.settings, **settings),
            **entity_attrs,
        )
        if target.is_default:
            self._default_target = target
        else:
            self._targets[name] = target
        return target

    def freeze(self) -> ReleaseModel:
        """End the configuration phase and return the immutable model."""
        if self._model is None:
            self._model = ReleaseModel(
                releases=tuple(self._releases.values()),
                targets=tuple(self._targets.values()),
                default_target=self._default_target,
                baseline=self._baseline,
                active_target=self.active_target,
            )
            _LOGGER.debug(
                "Froze release model with %d releases and %d targets",
                len(self._releases),
                len(self._targets),
            )
        return self._model

    @classmethod
    def parse_doc(cls, doc: Any) -> "ReleaseRegistry":
        """Create a registry from a parsed model document."""
        if doc is None:
            doc = {}
        if not isinstance(doc, dict):
            raise InputException(f"Invalid model expected a mapping: {doc}")
        registry = cls()
        if (defaults := doc.get("defaults")) is not None:
            if not isinstance(defaults, dict):
                raise InputException(f"Invalid model defaults: {defaults}")
            registry.baseline = ReleaseSettings.parse_doc(defaults)
        for entry in _entries(doc.get("releases"), "releases"):
            registry.declare_release(Release.parse_doc(entry))
        for entry in _entries(doc.get("releaseTargets"), "releaseTargets"):
            registry.declare_target(ReleaseTarget.parse_doc(entry))
        if active_target := doc.get("activeReleaseTarget"):
            registry.active_target = str(active_target)
        return registry


def _entries(value: Any, key: str) -> Iterable[dict[str, Any]]:
    """Return documents for a named collection given as a mapping or a list."""
    if value is None:
        return []
    if isinstance(value, dict):
        entries = []
        for name, entry in value.items():
            if entry is None:
                entry = {}
            if not isinstance(entry, dict):
                raise InputException(f"Invalid {key} entry '{name}': {entry}")
            entries.append({**entry, "name": str(name)})
        return entries
    if isinstance(value, list):
        if not all(isinstance(entry, dict) for entry in value):
            raise InputException(f"Invalid {key} expected a list of mappings")
        return value
    raise InputException(f"Invalid {key} expected a mapping or list: {value}")


async def read_model(model_path: Path) -> ReleaseRegistry:
    """Return a registry populated from a YAML model file."""
    try:
        async with aiofiles.open(str(model_path)) as model_file:
            content = await model_file.read()
    except FileNotFoundError as err:
        raise InputException(f"Model file {model_path} does not exist") from err
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Model file {model_path} failed to parse: {err}") from err
    _LOGGER.debug("Loading release model from %s", model_path)
    return ReleaseRegistry.parse_doc(doc)
