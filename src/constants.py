"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    REPOSITORY_ERROR = 3


class OutputFormats(Enum):
    """Output formats supported by the command line.

    Args:
        Enum (string): Output formats supported by the command line.
    """

    TEXT = "text"
    JSON = "json"
    PROPERTIES = "properties"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Head commit id used when the repository has no commit yet
    NO_COMMIT = "0000000000000000000000000000000000000000"
    SHORT_COMMIT_LENGTH = 7

    DEFAULT_COMMIT_VERSION_FORMAT = "${commit}"
    SNAPSHOT_SUFFIX = "-SNAPSHOT"

    CONFIG_DIR = ".mvn"
    CONFIG_FILE_BASENAME = "maven-git-versioning-extension"
    CONFIG_FILE_EXTENSIONS = [".xml", ".yml", ".yaml", ".json"]

    POM_XML_FILE = "pom.xml"
    POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
    GIT_VERSIONED_POM_FILE = ".git-versioned-pom.xml"
    BUILD_DIR = "target"

    # Externally provided ref names: build property first, then environment
    PROVIDED_BRANCH_PROPERTY = "project.branch"
    PROVIDED_BRANCH_ENV = "MAVEN_PROJECT_BRANCH"
    PROVIDED_TAG_PROPERTY = "project.tag"
    PROVIDED_TAG_ENV = "MAVEN_PROJECT_TAG"
    DISABLE_PROPERTY = "gitVersioning"
    DISABLE_ENV = "GITVERSIONING_DISABLE"

    PROPERTY_NAMESPACE = "git"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "GITVERSIONING_LOG_LEVEL"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    GIT_EXECUTABLE = "git"
    GIT_TIMEOUT_SEC = 10
