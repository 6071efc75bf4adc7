"""Classify the repository situation and pick the winning ref descriptor."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from common.logging_utils import extra_context, is_debug_enabled, log_once

from .capture import matches
from .comparator import compare_versions
from .models import Configuration, RefDescriptor, RefSelection, RefType, RepositorySituation

logger = logging.getLogger(__name__)


class RefDescriptorSelector:
    """Chooses ref type, ref name and descriptor for one repository situation.

    Branches: the first descriptor whose pattern matches the whole branch
    name wins; configuration order is priority. Tags: the first descriptor
    matching at least one head tag wins, and among the tags it matches the
    highest version (after prefix stripping) is taken. Anything else falls
    back to the commit descriptor.
    """

    def __init__(self, config: Configuration):
        self.config = config

    def select(
        self,
        situation: RepositorySituation,
        override_branch: Optional[str] = None,
        override_tag: Optional[str] = None,
    ) -> RefSelection:
        """Return the selection for ``situation``.

        Args:
            situation: Repository head snapshot.
            override_branch: Externally provided branch name, bypasses HEAD inspection.
            override_tag: Externally provided tag name; wins over ``override_branch``.

        Raises:
            ConfigurationError: a descriptor pattern is not a valid regular expression.
        """
        if override_branch is not None and override_tag is not None:
            log_once(
                logger,
                logging.WARNING,
                f"provided branch [{override_branch}] will be ignored "
                f"due to provided tag [{override_tag}]!",
            )
            override_branch = None

        if override_branch is not None:
            branch = override_branch or None
        elif situation.has_commit:
            branch = situation.head_branch
        else:
            branch = None

        if override_tag is not None or branch is None:
            if override_tag is not None:
                tags = [override_tag] if override_tag else []
            else:
                tags = list(situation.head_tags)
            if is_debug_enabled(logger):
                logger.debug(
                    "tag version",
                    extra=extra_context(event="select", component="selector", mode="tag", tags=tags),
                )
            selection = self._select_tag(tags)
        else:
            if is_debug_enabled(logger):
                logger.debug(
                    "branch version",
                    extra=extra_context(event="select", component="selector", mode="branch", branch=branch),
                )
            selection = self._select_branch(branch)

        if selection is not None:
            return selection
        return RefSelection(RefType.COMMIT, situation.head_commit, self.config.commit)

    def _select_branch(self, branch: str) -> Optional[RefSelection]:
        for descriptor in self.config.branches:
            if matches(descriptor.pattern, branch):
                return RefSelection(RefType.BRANCH, branch, descriptor)
        return None

    def _select_tag(self, tags: Iterable[str]) -> Optional[RefSelection]:
        candidates = sorted(set(tags))
        if not candidates:
            return None
        for descriptor in self.config.tags:
            matching = [tag for tag in candidates if matches(descriptor.pattern, tag)]
            if matching:
                return RefSelection(RefType.TAG, _latest(matching, descriptor), descriptor)
        return None


def _latest(tags: List[str], descriptor: RefDescriptor) -> str:
    """Highest version among ``tags``; ties go to the first tag in iteration order."""
    best = tags[0]
    for tag in tags[1:]:
        if compare_versions(
            descriptor.strip_prefix(tag), descriptor.strip_prefix(best)
        ) > 0:
            best = tag
    return best


def select(
    situation: RepositorySituation,
    config: Configuration,
    override_branch: Optional[str] = None,
    override_tag: Optional[str] = None,
) -> RefSelection:
    """Functional shortcut for RefDescriptorSelector(config).select(...)."""
    return RefDescriptorSelector(config).select(situation, override_branch, override_tag)
