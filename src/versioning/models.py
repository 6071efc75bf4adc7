"""Data models for git situation based version resolution."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from constants import Constants

from .capture import compile_pattern


class RefType(Enum):
    """Kind of ref a version was derived from."""
    COMMIT = "commit"
    BRANCH = "branch"
    TAG = "tag"


@dataclass(frozen=True)
class RepositorySituation:
    """Snapshot of the repository head, taken once per resolution."""
    head_commit: str = Constants.NO_COMMIT
    head_branch: Optional[str] = None  # None when HEAD is detached
    head_tags: FrozenSet[str] = frozenset()
    dirty: bool = False

    @property
    def has_commit(self) -> bool:
        return self.head_commit != Constants.NO_COMMIT

    @property
    def is_detached(self) -> bool:
        return self.head_branch is None


@dataclass(frozen=True)
class RefDescriptor:
    """A configured (pattern, version format) rule for one ref category."""
    version_format: str
    pattern: Optional[str] = None  # None matches everything (commit fallback)
    prefix: str = ""
    update_pom: Optional[bool] = None

    def strip_prefix(self, ref_name: str) -> str:
        """Remove the first occurrence of the prefix; unchanged when it does not occur."""
        if not self.prefix:
            return ref_name
        return ref_name.replace(self.prefix, "", 1)


@dataclass(frozen=True)
class Configuration:
    """Ordered rule set: branch and tag descriptors plus the commit fallback."""
    commit: RefDescriptor = field(
        default_factory=lambda: RefDescriptor(Constants.DEFAULT_COMMIT_VERSION_FORMAT))
    branches: Tuple[RefDescriptor, ...] = ()
    tags: Tuple[RefDescriptor, ...] = ()
    update_pom: bool = False

    def validate(self) -> "Configuration":
        """Compile every descriptor pattern, raising ConfigurationError on the first bad one."""
        for descriptor in self.branches + self.tags:
            compile_pattern(descriptor.pattern)
        return self


@dataclass(frozen=True)
class RefSelection:
    """Outcome of ref classification: which ref and which descriptor won."""
    ref_type: RefType
    ref_name: str
    descriptor: RefDescriptor


@dataclass(frozen=True)
class ProjectCoordinates:
    """Identity of the project being versioned."""
    group_id: Optional[str]
    artifact_id: str
    version: str

    def __str__(self) -> str:
        return f"{self.group_id or ''}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class ProjectVersion:
    """Resolution outcome handed to whoever writes it back into the build descriptor."""
    version: str
    commit: str
    ref_name: str
    ref_type: RefType
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)
    ref_value: Optional[str] = None  # prefix-stripped ref name
    update_pom: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.ref_value is None:
            object.__setattr__(self, "ref_value", self.ref_name)

    def properties(self, namespace: str = Constants.PROPERTY_NAMESPACE) -> Dict[str, str]:
        """Return build properties describing this version."""
        props = {
            f"{namespace}.commit": self.commit,
            f"{namespace}.ref": self.ref_name,
            f"{namespace}.{self.ref_type.value}": self.ref_value,
        }
        for key, value in sorted(self.metadata.items()):
            props[f"{namespace}.ref.{key}"] = value
        props["version"] = self.version
        return props

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": self.version,
            "commit": self.commit,
            "refName": self.ref_name,
            "refType": self.ref_type.value,
            "metadata": dict(self.metadata),
            "properties": self.properties(),
        }

    def __str__(self) -> str:
        return self.version
