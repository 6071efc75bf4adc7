"""Read project POMs and write git versioned copies of them.

Multi-module builds are handled by resolving every project once per run
(keyed by ``groupId:artifactId``); a module whose parent POM is part of the
same source tree asks for the parent's already computed result instead of
computing its own parent version.
"""
from __future__ import annotations

import logging
import os
import shutil
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional, Set

from common.logging_utils import log_once
from constants import Constants
from versioning.cache import ProjectVersionCache
from versioning.errors import ConfigurationError
from versioning.models import ProjectCoordinates, ProjectVersion, RepositorySituation
from versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)

_NS = {"pom": Constants.POM_NAMESPACE}
_DEFAULT_PARENT_RELATIVE_PATH = "../pom.xml"

ET.register_namespace("", Constants.POM_NAMESPACE)
ET.register_namespace("xsi", "http://www.w3.org/2001/XMLSchema-instance")


@dataclass(frozen=True)
class PomParent:
    """The ``<parent>`` section of a POM."""
    group_id: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]
    relative_path: str = _DEFAULT_PARENT_RELATIVE_PATH


@dataclass(frozen=True)
class PomModel:
    """Coordinates read from a POM file."""
    path: str
    group_id: Optional[str]
    artifact_id: str
    version: Optional[str]
    parent: Optional[PomParent] = None

    @property
    def effective_group_id(self) -> Optional[str]:
        if self.group_id is None and self.parent is not None:
            return self.parent.group_id
        return self.group_id

    @property
    def effective_version(self) -> Optional[str]:
        if self.version is None and self.parent is not None:
            return self.parent.version
        return self.version

    @property
    def key(self) -> str:
        return f"{self.effective_group_id or ''}:{self.artifact_id}"

    def parent_pom_path(self) -> Optional[str]:
        """Location of the parent POM as declared by ``<relativePath>``."""
        if self.parent is None or not self.parent.relative_path:
            return None
        path = os.path.join(os.path.dirname(os.path.abspath(self.path)), self.parent.relative_path)
        if os.path.isdir(path):
            path = os.path.join(path, Constants.POM_XML_FILE)
        return os.path.normpath(path)


@dataclass(frozen=True)
class VersionedPom:
    """A POM together with the version computed for it."""
    pom: PomModel
    project_version: ProjectVersion
    parent_version: Optional[str] = None
    inherits_version: bool = False  # own <version> equals the parent's and is dropped on write

    @property
    def version(self) -> str:
        return self.project_version.version


def is_project_pom(path: Optional[str]) -> bool:
    """Project POMs are ``*.xml`` files; POMs of dependencies end in ``.pom``."""
    return bool(path) and os.path.isfile(path) and path.endswith(".xml")


def _find(element: ET.Element, name: str) -> Optional[ET.Element]:
    found = element.find(f"pom:{name}", _NS)
    if found is None:
        found = element.find(name)
    return found


def _text(element: Optional[ET.Element], name: str) -> Optional[str]:
    if element is None:
        return None
    child = _find(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def read_pom(path: str) -> PomModel:
    """Parse the coordinates of a POM file.

    Raises:
        ConfigurationError: the file is not well-formed XML or has no artifactId.
    """
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ConfigurationError(f"{path}: malformed POM: {e}") from e

    artifact_id = _text(root, "artifactId")
    if not artifact_id:
        raise ConfigurationError(f"{path}: 'artifactId' is missing")

    parent = None
    parent_element = _find(root, "parent")
    if parent_element is not None:
        relative_path = _text(parent_element, "relativePath")
        parent = PomParent(
            group_id=_text(parent_element, "groupId"),
            artifact_id=_text(parent_element, "artifactId"),
            version=_text(parent_element, "version"),
            relative_path=_DEFAULT_PARENT_RELATIVE_PATH if relative_path is None else relative_path,
        )

    return PomModel(
        path=path,
        group_id=_text(root, "groupId"),
        artifact_id=artifact_id,
        version=_text(root, "version"),
        parent=parent,
    )


def discover_poms(dir_name: str, recursive: bool = False) -> List[str]:
    """Find project POMs below ``dir_name``, skipping build output and hidden directories."""
    if not recursive:
        path = os.path.join(dir_name, Constants.POM_XML_FILE)
        return [path] if os.path.isfile(path) else []

    pom_files: List[str] = []
    for root, dirs, files in os.walk(dir_name):
        dirs[:] = sorted(d for d in dirs if not d.startswith(".") and d != Constants.BUILD_DIR)
        if Constants.POM_XML_FILE in files:
            pom_files.append(os.path.join(root, Constants.POM_XML_FILE))
    return pom_files


class PomVersioner:
    """Computes versions for the POMs of one source tree.

    Args:
        resolver: Resolver bound to the rule set.
        situation: Repository snapshot shared by every POM of the run.
        cache: Results by ``groupId:artifactId``; pass one in to share it between versioners.
        override_branch: Externally provided branch name.
        override_tag: Externally provided tag name.
    """

    def __init__(
        self,
        resolver: VersionResolver,
        situation: RepositorySituation,
        cache: Optional[ProjectVersionCache] = None,
        override_branch: Optional[str] = None,
        override_tag: Optional[str] = None,
    ):
        self.resolver = resolver
        self.situation = situation
        self.cache = cache if cache is not None else ProjectVersionCache()
        self.override_branch = override_branch
        self.override_tag = override_tag
        self._local = threading.local()

    def _in_progress(self) -> Set[str]:
        keys = getattr(self._local, "keys", None)
        if keys is None:
            keys = self._local.keys = set()
        return keys

    def process(self, pom_path: str) -> Optional[VersionedPom]:
        """Version one POM; returns None for POMs that are skipped.

        Raises:
            ConfigurationError: malformed POM, invalid rule set, a module
                version that differs from its parent version, or a parent
                chain that leads back to the POM itself.
        """
        if os.path.basename(pom_path) == Constants.GIT_VERSIONED_POM_FILE:
            logger.debug("skip - git versioned pom - %s", pom_path)
            return None

        pom = read_pom(pom_path)
        if pom.effective_version is None:
            logger.debug("skip - invalid model - 'version' is missing - %s", pom_path)
            return None

        in_progress = self._in_progress()
        if pom.key in in_progress:
            raise ConfigurationError(f"{pom_path}: cyclic parent reference")
        in_progress.add(pom.key)
        try:
            return self.cache.get_or_compute(pom.key, lambda: self._process(pom))
        finally:
            in_progress.discard(pom.key)

    def _process(self, pom: PomModel) -> VersionedPom:
        project = ProjectCoordinates(pom.effective_group_id, pom.artifact_id, pom.effective_version)
        project_version = self.resolver.resolve(
            self.situation, project, self.override_branch, self.override_tag)

        parent_version = None
        inherits_version = False
        parent_result = self._process_parent(pom)
        if parent_result is not None:
            if pom.version is not None:
                if pom.version != pom.parent.version:
                    raise ConfigurationError(
                        f"{pom.path}: 'version' has to be equal to parent 'version'")
                log_once(
                    logger,
                    logging.WARNING,
                    f"Do not set version tag in a multi module project module: {pom.path}",
                )
                inherits_version = True
            parent_version = parent_result.version
            logger.debug("%s adjust project parent version to %s", project, parent_version)

        logger.debug("%s adjust project version to %s", project, project_version.version)
        return VersionedPom(
            pom=pom,
            project_version=project_version,
            parent_version=parent_version,
            inherits_version=inherits_version,
        )

    def _process_parent(self, pom: PomModel) -> Optional[VersionedPom]:
        parent_path = pom.parent_pom_path()
        if not is_project_pom(parent_path):
            return None
        parent_pom = read_pom(parent_path)
        declared = pom.parent
        if (parent_pom.effective_group_id, parent_pom.artifact_id, parent_pom.effective_version) != (
                declared.group_id, declared.artifact_id, declared.version):
            logger.debug("%s: parent pom %s does not match declared parent", pom.path, parent_path)
            return None
        return self.process(parent_path)


def write_versioned_pom(versioned: VersionedPom, output_dir: Optional[str] = None) -> str:
    """Write ``.git-versioned-pom.xml`` carrying the computed versions.

    Only ``<version>`` elements that already exist are rewritten, so modules
    that inherit their version keep inheriting it. A module that repeats its
    parent version loses its own ``<version>`` element. When ``update_pom`` is in
    effect the original POM is overwritten with the result as well.

    Returns:
        Path of the generated file.
    """
    pom_path = versioned.pom.path
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    tree = ET.parse(pom_path, parser=parser)
    root = tree.getroot()

    version_element = _find(root, "version")
    if version_element is not None:
        if versioned.inherits_version:
            root.remove(version_element)
        else:
            version_element.text = versioned.version

    if versioned.parent_version is not None:
        parent_element = _find(root, "parent")
        parent_version_element = _find(parent_element, "version") if parent_element is not None else None
        if parent_version_element is not None:
            parent_version_element.text = versioned.parent_version

    if output_dir is None:
        output_dir = os.path.join(os.path.dirname(os.path.abspath(pom_path)), Constants.BUILD_DIR)
    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, Constants.GIT_VERSIONED_POM_FILE)
    logger.info("Generating git versioned POM of project %s", versioned.pom.key)
    tree.write(output_path, encoding="UTF-8", xml_declaration=True)

    if versioned.project_version.update_pom:
        logger.info("Updating original POM %s", pom_path)
        shutil.copyfile(output_path, pom_path)
    return output_path
