"""Git situation based version resolution engine."""

from .errors import ConfigurationError, GitVersioningError, RepositoryError
from .models import (
    Configuration,
    ProjectCoordinates,
    ProjectVersion,
    RefDescriptor,
    RefSelection,
    RefType,
    RepositorySituation,
)
from .resolver import VersionResolver
from .selector import RefDescriptorSelector

__all__ = [
    "ConfigurationError",
    "GitVersioningError",
    "RepositoryError",
    "Configuration",
    "ProjectCoordinates",
    "ProjectVersion",
    "RefDescriptor",
    "RefSelection",
    "RefType",
    "RepositorySituation",
    "VersionResolver",
    "RefDescriptorSelector",
]
