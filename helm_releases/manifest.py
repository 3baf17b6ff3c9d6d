"""Representation of declared releases and release targets.

A release is a helm chart that should be installed under a release name. A
release target is a destination (a kubeconfig and context) the release may
be installed to. Both carry an optional bag of settings that override the
process-wide baseline when installing or uninstalling.

Objects here are immutable values. The `ReleaseRegistry` replaces them by
name while the model is being configured and then freezes the whole set into
a `ReleaseModel` snapshot used for graph synthesis.
"""

import dataclasses
from dataclasses import dataclass, field, fields
import logging
from typing import Any, ClassVar

from mashumaro import DataClassDictMixin, field_options
from mashumaro.codecs.yaml import yaml_decode, yaml_encode
from mashumaro.config import BaseConfig
from mashumaro.exceptions import MissingField, InvalidFieldValue

from .exceptions import InputException

__all__ = [
    "DEFAULT_TARGET",
    "ReleaseSettings",
    "TARGET_SETTINGS",
    "ChartRef",
    "Release",
    "ReleaseTarget",
    "ReleaseModel",
    "parse_tags",
]

_LOGGER = logging.getLogger(__name__)


DEFAULT_TARGET = "default"
PASSWORD_PLACEHOLDER = "**PLACEHOLDER**"

# Chart references with these prefixes are paths on the local filesystem
# rather than `repo/chart` references.
LOCAL_CHART_PREFIXES = ("./", "../", "/", "~")
CHART_ARCHIVE_SUFFIX = ".tgz"


class BaseManifest(DataClassDictMixin):
    """Base class for all model objects."""

    def compact_dict(self) -> dict[str, Any]:
        """Return a compact dictionary representation of the object."""
        return self.to_dict()

    @classmethod
    def parse_yaml(cls, content: str) -> "BaseManifest":
        """Parse a serialized object."""
        return yaml_decode(content, cls)

    def yaml(self) -> str:
        """Return a YAML string representation of compact_dict."""
        return yaml_encode(self, self.__class__)  # type: ignore[return-value]

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass(frozen=True)
class ReleaseSettings(BaseManifest):
    """Settings that may be overridden per release, per target or globally.

    A value of None means the setting is unset at this level.
    """

    kube_config: str | None = field(
        metadata=field_options(alias="kubeConfig"), default=None
    )
    """Path to the Kubernetes configuration file."""

    kube_context: str | None = field(
        metadata=field_options(alias="kubeContext"), default=None
    )
    """Name of the kubeconfig context to use."""

    dry_run: bool | None = field(metadata=field_options(alias="dryRun"), default=None)
    """Simulate the operation."""

    no_hooks: bool | None = field(metadata=field_options(alias="noHooks"), default=None)
    """Prevent hooks from running during the operation."""

    remote_timeout: int | None = field(
        metadata=field_options(alias="remoteTimeout"), default=None
    )
    """Time in seconds to wait for any individual Kubernetes operation."""

    atomic: bool | None = None
    """Roll back changes made in case of a failed install."""

    devel: bool | None = None
    """Allow development (prerelease) chart versions."""

    verify: bool | None = None
    """Verify the chart package before using it."""

    wait: bool | None = None
    """Wait until all resources are in a ready state."""

    repository: str | None = None
    """URI of the chart repository."""

    username: str | None = None
    """Username for the chart repository."""

    password: str | None = field(default=None, repr=False)
    """Password for the chart repository."""

    ca_file: str | None = field(metadata=field_options(alias="caFile"), default=None)
    """Path to the CA bundle used to verify the repository certificate."""

    cert_file: str | None = field(
        metadata=field_options(alias="certFile"), default=None
    )
    """Path to the client certificate for the chart repository."""

    key_file: str | None = field(metadata=field_options(alias="keyFile"), default=None)
    """Path to the client key for the chart repository."""

    keep_history_on_uninstall: bool | None = field(
        metadata=field_options(alias="keepHistoryOnUninstall"), default=None
    )
    """Retain the release history when uninstalling."""

    @classmethod
    def names(cls) -> list[str]:
        """Return the names of all settings in declaration order."""
        return [f.name for f in fields(cls)]

    @classmethod
    def aliases(cls) -> dict[str, str]:
        """Return a mapping of serialized alias to setting name."""
        return {f.metadata.get("alias", f.name): f.name for f in fields(cls)}

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "ReleaseSettings":
        """Parse settings from the matching keys of a model document."""
        aliases = cls.aliases()
        values = {key: value for key, value in doc.items() if key in aliases}
        try:
            return cls.from_dict(values)
        except (MissingField, InvalidFieldValue) as err:
            raise InputException(f"Invalid settings {values}: {err}") from err

    def redacted(self) -> "ReleaseSettings":
        """Return a copy with credentials replaced by a placeholder."""
        if self.password is None:
            return self
        return dataclasses.replace(self, password=PASSWORD_PLACEHOLDER)

    def explicit(self) -> dict[str, Any]:
        """Return the settings that have a value at this level."""
        return {
            name: value
            for name in self.names()
            if (value := getattr(self, name)) is not None
        }


TARGET_SETTINGS = frozenset(
    {
        "kube_config",
        "kube_context",
        "dry_run",
        "no_hooks",
        "remote_timeout",
        "atomic",
        "devel",
        "verify",
        "wait",
    }
)
"""Settings a release target may override, related to connection and execution."""


@dataclass(frozen=True)
class ChartRef(BaseManifest):
    """A reference to a helm chart and version."""

    chart: str | None
    """A `repo/chart` reference or a local path to a chart."""

    version: str | None = None
    """The chart version, or None for the latest version."""

    @property
    def is_local(self) -> bool:
        """Return True if the chart is a path on the local filesystem."""
        if not self.chart:
            return False
        return self.chart.startswith(LOCAL_CHART_PREFIXES) or self.chart.endswith(
            CHART_ARCHIVE_SUFFIX
        )

    @property
    def repo_name(self) -> str | None:
        """Name of the repository for a `repo/chart` reference."""
        if self.is_local or not self.chart or "/" not in self.chart:
            return None
        return self.chart.split("/", 1)[0]

    @property
    def chart_name(self) -> str | None:
        """Name of the chart within its repository."""
        if not self.chart or self.is_local:
            return self.chart
        return self.chart.split("/", 1)[-1]

    def __str__(self) -> str:
        if self.version:
            return f"{self.chart}@{self.version}"
        return str(self.chart)


def _check_name(cls: type, doc: dict[str, Any]) -> str:
    if not (name := doc.get("name")):
        raise InputException(f"Invalid {cls.__name__} missing name: {doc}")
    if not isinstance(name, str):
        raise InputException(f"Invalid {cls.__name__} name must be a string: {doc}")
    return name


def parse_tags(name: str, value: Any) -> frozenset[str]:
    """Normalize the tags of a release, a single string is one tag."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value})
    if not isinstance(value, (list, tuple, set, frozenset)) or not all(
        isinstance(tag, str) for tag in value
    ):
        raise InputException(f"Invalid Release {name} tags must be a list of strings")
    return frozenset(value)


def _parse_version(name: str, value: Any) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InputException(
            f"Invalid Release {name} version must be a string, quote the "
            f"version '{value}' in the model file"
        )
    return value


@dataclass(frozen=True)
class Release(BaseManifest):
    """A named deployable helm chart."""

    kind: ClassVar[str] = "Release"

    name: str
    """The identity of the release in the model."""

    chart: str | None = None
    """A `repo/chart` reference or a local path to a chart."""

    version: str | None = None
    """The chart version."""

    release_name: str | None = field(
        metadata=field_options(alias="releaseName"), default=None
    )
    """The helm release name, defaults to the name of the release."""

    tags: frozenset[str] = field(
        metadata=field_options(serialize=sorted), default=frozenset()
    )
    """Free-form tags used to select the release for a target."""

    settings: ReleaseSettings = field(default_factory=ReleaseSettings)
    """Settings overriding those of the target and the baseline."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Release":
        """Parse a Release from a model document.

        Settings appear alongside the release attributes in the document.
        """
        name = _check_name(cls, doc)
        return cls(
            name=name,
            chart=doc.get("chart"),
            version=_parse_version(name, doc.get("version")),
            release_name=doc.get("releaseName"),
            tags=parse_tags(name, doc.get("tags")),
            settings=ReleaseSettings.parse_doc(doc),
        )

    @property
    def helm_release_name(self) -> str:
        """The name the release is installed under."""
        return self.release_name or self.name

    @property
    def chart_ref(self) -> ChartRef:
        """The chart and version of the release."""
        return ChartRef(chart=self.chart, version=self.version)


@dataclass(frozen=True)
class ReleaseTarget(BaseManifest):
    """A named destination that releases are installed to."""

    kind: ClassVar[str] = "ReleaseTarget"

    name: str
    """The identity of the target in the model."""

    select_tags: str | None = field(
        metadata=field_options(alias="selectTags"), default=None
    )
    """Tag expression selecting the releases for this target, None matches all."""

    settings: ReleaseSettings = field(default_factory=ReleaseSettings)
    """Connection settings overriding the baseline."""

    def __post_init__(self) -> None:
        """Validate that only target settings are overridden."""
        if invalid := sorted(set(self.settings.explicit()) - TARGET_SETTINGS):
            raise InputException(
                f"Invalid ReleaseTarget {self.name} does not support settings: "
                f"{', '.join(invalid)}"
            )

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "ReleaseTarget":
        """Parse a ReleaseTarget from a model document."""
        name = _check_name(cls, doc)
        select_tags = doc.get("selectTags")
        if select_tags is not None and not isinstance(select_tags, str):
            raise InputException(
                f"Invalid ReleaseTarget {name} selectTags must be a string"
            )
        return cls(
            name=name,
            select_tags=select_tags,
            settings=ReleaseSettings.parse_doc(doc),
        )

    @property
    def is_default(self) -> bool:
        """Return True for the implicit default target."""
        return self.name == DEFAULT_TARGET


@dataclass(frozen=True)
class ReleaseModel(BaseManifest):
    """A frozen snapshot of the declared releases and targets."""

    releases: tuple[Release, ...] = ()
    """Declared releases in declaration order."""

    targets: tuple[ReleaseTarget, ...] = ()
    """Declared targets in declaration order, excluding the default target."""

    default_target: ReleaseTarget = field(
        metadata=field_options(alias="defaultTarget"),
        default_factory=lambda: ReleaseTarget(name=DEFAULT_TARGET),
    )
    """The implicit default target."""

    baseline: ReleaseSettings = field(default_factory=ReleaseSettings)
    """Process-wide settings used when neither release nor target sets a value."""

    active_target: str = field(
        metadata=field_options(alias="activeReleaseTarget"), default=DEFAULT_TARGET
    )
    """The declared active target."""

    @property
    def all_targets(self) -> list[ReleaseTarget]:
        """The default target followed by the declared targets."""
        return [self.default_target, *self.targets]

    @property
    def target_names(self) -> list[str]:
        """Names of every target including the default target."""
        return [target.name for target in self.all_targets]

    def get_target(self, name: str) -> ReleaseTarget | None:
        """Return the target with the given name, including the default target."""
        return next(
            (target for target in self.all_targets if target.name == name), None
        )

    def get_release(self, name: str) -> Release | None:
        """Return the release with the given name."""
        return next(
            (release for release in self.releases if release.name == name), None
        )
