"""Load the versioning rule set from XML, YAML or JSON files.

XML layout (the ``<branches>``/``<tags>`` wrappers are optional)::

    <gitVersioning>
        <commit><versionFormat>${commit.short}</versionFormat></commit>
        <branch>
            <pattern>feature/(?&lt;feature&gt;.+)</pattern>
            <versionFormat>${feature}-SNAPSHOT</versionFormat>
        </branch>
        <tag>
            <pattern>v[0-9].*</pattern>
            <prefix>v</prefix>
            <versionFormat>${tag}</versionFormat>
        </tag>
        <updatePom>false</updatePom>
    </gitVersioning>

YAML and JSON use the same field names, with ``branch``/``tag`` (or
``branches``/``tags``) holding lists of rules.
"""
from __future__ import annotations

import json
import logging
import os
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

import yaml

from constants import Constants

from .errors import ConfigurationError
from .models import Configuration, RefDescriptor

logger = logging.getLogger(__name__)

_RULE_FIELDS = {"pattern", "versionFormat", "prefix", "updatePom"}
_COMMIT_FIELDS = {"versionFormat", "updatePom"}
_TOP_LEVEL_FIELDS = {"commit", "branch", "branches", "tag", "tags", "updatePom"}


def find_config_file(project_dir: str, stop_dir: Optional[str] = None) -> Optional[str]:
    """Locate the configuration file for a project.

    Looks in ``<dir>/.mvn/`` for the project directory and then every ancestor
    up to and including ``stop_dir`` (typically the git work tree root).

    Returns:
        Path of the first file found, or None.
    """
    current = os.path.abspath(project_dir)
    stop = os.path.abspath(stop_dir) if stop_dir else None
    while True:
        config_dir = os.path.join(current, Constants.CONFIG_DIR)
        for ext in Constants.CONFIG_FILE_EXTENSIONS:
            candidate = os.path.join(config_dir, Constants.CONFIG_FILE_BASENAME + ext)
            if os.path.isfile(candidate):
                logger.debug("Using configuration file %s", candidate)
                return candidate
        parent = os.path.dirname(current)
        if current == stop or parent == current:
            break
        current = parent
    logger.debug("No configuration file found for %s", project_dir)
    return None


def load_configuration(path: Optional[str]) -> Configuration:
    """Read and validate a configuration file.

    A missing path or file yields the default configuration (commit rule
    only, reproducing the raw commit id).

    Raises:
        ConfigurationError: the file is malformed, has an unexpected structure
            or contains an invalid regular expression.
    """
    if not path or not os.path.isfile(path):
        logger.debug("Configuration file %s not found, using defaults", path)
        return Configuration()

    logger.debug("Loading configuration from %s", path)
    try:
        data = _read(path)
        return configuration_from_dict(data if data is not None else {}).validate()
    except (ET.ParseError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"{path}: malformed configuration file: {e}") from e
    except ConfigurationError as e:
        raise ConfigurationError(f"{path}: {e}") from e


def _read(path: str) -> Any:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".xml":
        return _read_xml(path)
    if ext in (".yml", ".yaml"):
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    if ext == ".json":
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    raise ConfigurationError(f"unsupported configuration file type '{ext}'")


def configuration_from_dict(data: Any) -> Configuration:
    """Build a Configuration from the plain data structure of a rule file."""
    if not isinstance(data, dict):
        raise ConfigurationError("configuration root must be a mapping")
    _check_fields(data, _TOP_LEVEL_FIELDS, "configuration")

    commit = Configuration().commit
    if data.get("commit") is not None:
        commit_data = data["commit"]
        if not isinstance(commit_data, dict):
            raise ConfigurationError("'commit' must be a mapping")
        _check_fields(commit_data, _COMMIT_FIELDS, "commit")
        commit = RefDescriptor(
            version_format=_text(commit_data, "versionFormat", "commit", commit.version_format),
            update_pom=_bool(commit_data.get("updatePom"), "commit.updatePom"),
        )

    return Configuration(
        commit=commit,
        branches=_rules(data, "branch", "branches"),
        tags=_rules(data, "tag", "tags"),
        update_pom=bool(_bool(data.get("updatePom"), "updatePom")),
    )


def _rules(data: Dict[str, Any], singular: str, plural: str) -> Tuple[RefDescriptor, ...]:
    raw = data.get(singular)
    if raw is None:
        raw = data.get(plural)
    if raw is None:
        return ()
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise ConfigurationError(f"'{singular}' must be a list of rules")

    rules: List[RefDescriptor] = []
    for index, item in enumerate(raw):
        where = f"{singular}[{index}]"
        if not isinstance(item, dict):
            raise ConfigurationError(f"{where} must be a mapping")
        _check_fields(item, _RULE_FIELDS, where)
        rules.append(RefDescriptor(
            pattern=_text(item, "pattern", where),
            version_format=_text(item, "versionFormat", where),
            prefix=_text(item, "prefix", where, ""),
            update_pom=_bool(item.get("updatePom"), f"{where}.updatePom"),
        ))
    return tuple(rules)


def _check_fields(data: Dict[str, Any], allowed: set, where: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigurationError(f"{where}: unknown field(s) {', '.join(unknown)}")


_MISSING = object()
_WRAPPED_RULES = {"branches": "branch", "tags": "tag"}


def _text(data: Dict[str, Any], key: str, where: str, default: Any = _MISSING) -> str:
    value = data.get(key)
    if value is None:
        if default is _MISSING:
            raise ConfigurationError(f"{where}: '{key}' is required")
        return default
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ConfigurationError(f"{where}: '{key}' must be a string")
    return str(value)


def _bool(value: Any, where: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigurationError(f"{where}: expected true or false, got '{value}'")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_dict(element: ET.Element) -> Dict[str, Any]:
    return {_local_name(child.tag): (child.text or "").strip() for child in element}


def _read_xml(path: str) -> Dict[str, Any]:
    """Flatten the XML rule file into the dict layout shared with YAML/JSON."""
    root = ET.parse(path).getroot()
    data: Dict[str, Any] = {}
    for child in root:
        name = _local_name(child.tag)
        if name == "commit":
            data["commit"] = _element_to_dict(child)
        elif name in ("branch", "tag"):
            data.setdefault(name, []).append(_element_to_dict(child))
        elif name in ("branches", "tags"):
            singular = _WRAPPED_RULES[name]
            for rule in child:
                if _local_name(rule.tag) != singular:
                    raise ConfigurationError(f"<{name}> may only contain <{singular}> elements")
                data.setdefault(singular, []).append(_element_to_dict(rule))
        elif name == "updatePom":
            data["updatePom"] = (child.text or "").strip()
        else:
            raise ConfigurationError(f"unknown element <{name}>")
    return data
