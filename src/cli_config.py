"""Sourcing of externally provided options (CI branch/tag names, disable switch).

Each option is looked up as a build property (``-Dkey=value`` on the command
line) first and as an environment variable second. An empty value is kept
as-is: an empty provided tag means "no tag", an empty provided branch means
"no branch".
"""

from __future__ import annotations

import logging
import os
from typing import List, Mapping, Optional

from constants import Constants

logger = logging.getLogger(__name__)


def parse_properties(definitions: Optional[List[str]]) -> dict:
    """Turn ``key=value`` strings into a dict; a bare ``key`` maps to ``"true"``."""
    properties = {}
    for definition in definitions or []:
        key, sep, value = definition.partition("=")
        key = key.strip()
        if not key:
            logger.warning("Ignoring property definition without a name: %r", definition)
            continue
        properties[key] = value if sep else "true"
    return properties


def get_option(
    properties: Mapping[str, str],
    property_name: str,
    env_name: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return the property value, else the environment value, else None."""
    value = properties.get(property_name)
    if value is not None:
        return value
    env = os.environ if environ is None else environ
    return env.get(env_name)


def get_provided_branch(properties: Mapping[str, str], environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Branch name supplied by the build, e.g. by a CI job on a detached checkout."""
    return get_option(properties, Constants.PROVIDED_BRANCH_PROPERTY, Constants.PROVIDED_BRANCH_ENV, environ)


def get_provided_tag(properties: Mapping[str, str], environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Tag name supplied by the build."""
    return get_option(properties, Constants.PROVIDED_TAG_PROPERTY, Constants.PROVIDED_TAG_ENV, environ)


def is_disabled(properties: Mapping[str, str], environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when versioning was switched off with ``-DgitVersioning=false``."""
    if properties.get(Constants.DISABLE_PROPERTY, "").strip().lower() == "false":
        return True
    env = os.environ if environ is None else environ
    return env.get(Constants.DISABLE_ENV, "").strip().lower() in ("1", "true", "yes")
