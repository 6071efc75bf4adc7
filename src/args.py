"""Argument parsing functionality for gitversioning."""

import argparse
from constants import Constants, OutputFormats


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="gitversioning",
        description=(
            "Derive the project version from the git repository situation"
        ),
        add_help=True,
    )

    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Project directory (default: current directory)",
                        action="store", type=str,
                        default=".")
    parser.add_argument("-f", "--file",
                        dest="POM_FILE",
                        help="Project POM to version (default: <directory>/pom.xml)",
                        action="store", type=str)
    parser.add_argument("-r", "--recursive",
                        dest="RECURSIVE",
                        help="Version every module POM below the project directory",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Rule file (default: .mvn/maven-git-versioning-extension.{xml,yml,yaml,json})",
                        action="store", type=str)
    parser.add_argument("-D", "--define",
                        dest="PROPERTIES",
                        help="Build property, e.g. -D project.branch=main (repeatable)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--branch",
                        dest="BRANCH",
                        help=f"Provided branch name (overrides -D {Constants.PROVIDED_BRANCH_PROPERTY} "
                             f"and ${Constants.PROVIDED_BRANCH_ENV})",
                        action="store", type=str)
    parser.add_argument("--tag",
                        dest="TAG",
                        help=f"Provided tag name (overrides -D {Constants.PROVIDED_TAG_PROPERTY} "
                             f"and ${Constants.PROVIDED_TAG_ENV})",
                        action="store", type=str)
    parser.add_argument("--project-version",
                        dest="PROJECT_VERSION",
                        help="Project version used for ${version} when no POM is present",
                        action="store", type=str,
                        default="0.0.0-SNAPSHOT")
    parser.add_argument("-o", "--output",
                        dest="OUTPUT_FORMAT",
                        help="Output format (default: text)",
                        action="store",
                        type=str.lower,
                        choices=[f.value for f in OutputFormats],
                        default=OutputFormats.TEXT.value)
    parser.add_argument("--write",
                        dest="WRITE",
                        help=f"Write {Constants.GIT_VERSIONED_POM_FILE} next to the build output",
                        action="store_true")
    parser.add_argument("--output-dir",
                        dest="OUTPUT_DIR",
                        help=f"Directory for {Constants.GIT_VERSIONED_POM_FILE} (default: <module>/target)",
                        action="store", type=str)
    parser.add_argument("--pep440",
                        dest="PEP440",
                        help="Normalize the version to PEP 440 when possible",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS,
                        default="INFO")

    return parser.parse_args(argv)
