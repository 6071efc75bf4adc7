"""gitversioning - derive project versions from the git repository situation.

    Raises:
        SystemExit: with an ExitCodes value on configuration, repository or file errors.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys
from typing import List, Optional, Tuple

from packaging.version import InvalidVersion, Version

from args import parse_args
from cli_config import get_provided_branch, get_provided_tag, is_disabled, parse_properties
from common.logging_utils import configure_logging, log_once
from constants import Constants, ExitCodes, OutputFormats
from maven.pom import PomVersioner, discover_poms, write_versioned_pom
from repository.git import GitSituationProvider
from versioning.config import find_config_file, load_configuration
from versioning.errors import ConfigurationError, RepositoryError
from versioning.models import ProjectCoordinates, ProjectVersion
from versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)

Result = Tuple[str, ProjectVersion]


def to_pep440(version: str) -> str:
    """Normalize ``version`` to PEP 440, returning it unchanged when it does not comply."""
    try:
        return str(Version(version))
    except InvalidVersion:
        log_once(logger, logging.WARNING, f"version '{version}' is not PEP 440 compliant, left as is")
        return version


def resolve_config_path(args, stop_dir: str) -> Optional[str]:
    """Explicit --config (must exist) or the discovered rule file."""
    if args.CONFIG:
        if not os.path.isfile(args.CONFIG):
            raise FileNotFoundError(f"configuration file not found: {args.CONFIG}")
        return args.CONFIG
    return find_config_file(args.DIRECTORY, stop_dir)


def run(args, properties) -> List[Result]:
    """Resolve the version of every selected project.

    Raises:
        ConfigurationError: invalid rule file, pattern or POM.
        RepositoryError: the directory is not a git work tree.
        FileNotFoundError: an explicitly named file does not exist.
    """
    provider = GitSituationProvider(args.DIRECTORY)
    work_tree_root = provider.work_tree_root()
    situation = provider.situation()

    config = load_configuration(resolve_config_path(args, work_tree_root))
    resolver = VersionResolver(config)

    override_branch = args.BRANCH if args.BRANCH is not None else get_provided_branch(properties)
    override_tag = args.TAG if args.TAG is not None else get_provided_tag(properties)

    if args.POM_FILE:
        if not os.path.isfile(args.POM_FILE):
            raise FileNotFoundError(f"POM not found: {args.POM_FILE}")
        pom_files = [args.POM_FILE]
    else:
        pom_files = discover_poms(args.DIRECTORY, args.RECURSIVE)

    if not pom_files:
        project = ProjectCoordinates(
            None, os.path.basename(os.path.abspath(args.DIRECTORY)), args.PROJECT_VERSION)
        return [(project.artifact_id,
                 resolver.resolve(situation, project, override_branch, override_tag))]

    versioner = PomVersioner(resolver, situation, override_branch=override_branch, override_tag=override_tag)
    results: List[Result] = []
    for pom_file in pom_files:
        versioned = versioner.process(pom_file)
        if versioned is None:
            continue
        if args.WRITE:
            write_versioned_pom(versioned, args.OUTPUT_DIR)
        results.append((versioned.pom.key, versioned.project_version))
    return results


def render_results(results: List[Result], output_format: str, pep440: bool = False) -> str:
    """Format results for stdout."""
    def version_of(project_version: ProjectVersion) -> str:
        return to_pep440(project_version.version) if pep440 else project_version.version

    if output_format == OutputFormats.JSON.value:
        payload = []
        for project, project_version in results:
            entry = project_version.to_dict()
            entry["project"] = project
            entry["version"] = version_of(project_version)
            payload.append(entry)
        return json.dumps(payload[0] if len(payload) == 1 else payload, indent=2, sort_keys=True)

    lines: List[str] = []
    if output_format == OutputFormats.PROPERTIES.value:
        for project, project_version in results:
            if len(results) > 1:
                lines.append(f"# {project}")
            props = project_version.properties()
            props["version"] = version_of(project_version)
            lines.extend(f"{key}={value}" for key, value in props.items())
        return "\n".join(lines)

    if len(results) == 1:
        return version_of(results[0][1])
    return "\n".join(f"{project} {version_of(pv)}" for project, pv in results)


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)

    # Honor CLI --loglevel by passing it to centralized logger via env
    os.environ[Constants.ENV_LOG_LEVEL] = args.LOG_LEVEL
    configure_logging()

    properties = parse_properties(args.PROPERTIES)
    if is_disabled(properties):
        logger.info("Disabled.")
        return ExitCodes.SUCCESS.value

    try:
        results = run(args, properties)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)
    except RepositoryError as e:
        logger.error("Repository error: %s", e)
        sys.exit(ExitCodes.REPOSITORY_ERROR.value)
    except OSError as e:
        logger.error("File error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if results:
        print(render_results(results, args.OUTPUT_FORMAT, args.PEP440))
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
