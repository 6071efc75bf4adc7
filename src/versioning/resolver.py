"""Turn a repository situation into a ProjectVersion."""
from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from common.logging_utils import log_once

from constants import Constants

from .capture import capture_groups
from .errors import ConfigurationError
from .models import (
    Configuration,
    ProjectCoordinates,
    ProjectVersion,
    RefSelection,
    RepositorySituation,
)
from .selector import RefDescriptorSelector
from .template import render

logger = logging.getLogger(__name__)

_SNAPSHOT_SUFFIX = re.compile(re.escape(Constants.SNAPSHOT_SUFFIX) + "$")


def escape_version(version: str) -> str:
    """Make a version safe for path-like consumers."""
    return version.replace("/", "-")


def common_values(project: ProjectCoordinates, situation: RepositorySituation) -> Dict[str, str]:
    """Substitution values available to every version format."""
    return {
        "version": project.version,
        "version.release": _SNAPSHOT_SUFFIX.sub("", project.version),
        "commit": situation.head_commit,
        "commit.short": situation.head_commit[:Constants.SHORT_COMMIT_LENGTH],
    }


class VersionResolver:
    """Resolves project versions against one rule set.

    The configuration is validated on construction so that a bad pattern
    fails before any version is produced.
    """

    def __init__(self, config: Configuration):
        self.config = config.validate()
        self.selector = RefDescriptorSelector(self.config)

    def resolve(
        self,
        situation: RepositorySituation,
        project: ProjectCoordinates,
        override_branch: Optional[str] = None,
        override_tag: Optional[str] = None,
    ) -> ProjectVersion:
        """Compute the version of ``project`` for ``situation``.

        Raises:
            ConfigurationError: invalid descriptor pattern, the message names the artifact.
        """
        if situation.dirty:
            log_once(logger, logging.WARNING, "project repository working tree is not clean!")

        try:
            selection = self.selector.select(situation, override_branch, override_tag)
        except ConfigurationError as e:
            raise ConfigurationError(f"{project.artifact_id}: {e}") from e

        project_version = self._build(situation, project, selection)
        log_once(
            logger,
            logging.INFO,
            f"{project.artifact_id}:{project.version} - {selection.ref_type.value}: "
            f"{selection.ref_name} -> version: {project_version.version}",
        )
        return project_version

    def _build(
        self,
        situation: RepositorySituation,
        project: ProjectCoordinates,
        selection: RefSelection,
    ) -> ProjectVersion:
        descriptor = selection.descriptor
        ref_value = descriptor.strip_prefix(selection.ref_name)
        captures = capture_groups(descriptor.pattern, selection.ref_name)

        values = common_values(project, situation)
        values[selection.ref_type.value] = ref_value
        values.update(captures)

        version = escape_version(render(descriptor.version_format, values))
        update_pom = descriptor.update_pom if descriptor.update_pom is not None else self.config.update_pom
        return ProjectVersion(
            version=version,
            commit=situation.head_commit,
            ref_name=selection.ref_name,
            ref_type=selection.ref_type,
            metadata=captures,
            ref_value=ref_value,
            update_pom=update_pom,
        )
