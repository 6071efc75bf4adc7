"""Exceptions raised while determining a project version."""


class GitVersioningError(Exception):
    """Base class for all versioning failures."""


class ConfigurationError(GitVersioningError):
    """Invalid rule set: malformed file, bad regular expression or conflicting POM versions."""


class RepositoryError(GitVersioningError):
    """The git repository could not be inspected."""
