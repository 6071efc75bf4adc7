"""Tests for the version resolver."""

import logging

import pytest

from constants import Constants
from versioning.errors import ConfigurationError
from versioning.models import (
    Configuration,
    ProjectCoordinates,
    RefDescriptor,
    RefType,
    RepositorySituation,
)
from versioning.resolver import VersionResolver, escape_version

COMMIT = "0123456789abcdef0123456789abcdef01234567"
PROJECT = ProjectCoordinates("com.example", "demo", "1.4.0-SNAPSHOT")


@pytest.fixture
def config():
    """Rule set close to a typical project setup."""
    return Configuration(
        commit=RefDescriptor(version_format="${commit.short}"),
        branches=(
            RefDescriptor(pattern="main", version_format="${version}"),
            RefDescriptor(pattern="feature/(?<feature>.+)", version_format="${feature}-SNAPSHOT",
                          update_pom=True),
            RefDescriptor(pattern=".+", version_format="${branch}-SNAPSHOT"),
        ),
        tags=(
            RefDescriptor(pattern=r"v(?<major>\d+)\.(?<minor>\d+)\.(?<patch>\d+)",
                          version_format="${tag}", prefix="v"),
        ),
    )


@pytest.fixture
def resolver(config):
    return VersionResolver(config)


class TestResolve:
    """End-to-end resolution of a situation."""

    def test_branch_version(self, resolver):
        result = resolver.resolve(RepositorySituation(COMMIT, "main"), PROJECT)
        assert result.version == "1.4.0-SNAPSHOT"
        assert result.ref_type == RefType.BRANCH
        assert result.ref_name == "main"
        assert result.commit == COMMIT

    def test_named_capture_in_format(self, resolver):
        result = resolver.resolve(RepositorySituation(COMMIT, "feature/login"), PROJECT)
        assert result.version == "login-SNAPSHOT"
        assert result.metadata["feature"] == "login"
        assert result.metadata["1"] == "login"

    def test_slashes_are_escaped(self, resolver):
        result = resolver.resolve(RepositorySituation(COMMIT, "bugfix/a/b"), PROJECT)
        assert result.version == "bugfix-a-b-SNAPSHOT"
        assert "/" not in result.version

    def test_tag_version_with_prefix_stripped(self, resolver):
        situation = RepositorySituation(COMMIT, None, frozenset({"v1.2.0", "v1.10.0"}))
        result = resolver.resolve(situation, PROJECT)
        assert result.version == "1.10.0"
        assert result.ref_name == "v1.10.0"
        assert result.metadata["major"] == "1"
        assert result.metadata["minor"] == "10"

    def test_commit_fallback(self, resolver):
        result = resolver.resolve(RepositorySituation(COMMIT, None), PROJECT)
        assert result.version == "0123456"
        assert result.ref_type == RefType.COMMIT
        assert result.metadata == {}

    def test_default_configuration_reproduces_commit(self):
        result = VersionResolver(Configuration()).resolve(RepositorySituation(COMMIT, "main"), PROJECT)
        assert result.version == COMMIT

    def test_version_release_strips_snapshot(self):
        config = Configuration(branches=(RefDescriptor(pattern=".*", version_format="${version.release}"),))
        result = VersionResolver(config).resolve(RepositorySituation(COMMIT, "main"), PROJECT)
        assert result.version == "1.4.0"

    def test_snapshot_only_when_not_tagged(self):
        config = Configuration(
            commit=RefDescriptor(version_format="${version.release}${tag:+:--SNAPSHOT}"),
        )
        result = VersionResolver(config).resolve(RepositorySituation(COMMIT, None), PROJECT)
        assert result.version == "1.4.0-SNAPSHOT"

    def test_empty_repository(self, resolver):
        result = resolver.resolve(RepositorySituation(), PROJECT)
        assert result.commit == Constants.NO_COMMIT
        assert result.ref_type == RefType.COMMIT
        assert result.version == "0000000"

    def test_deterministic(self, resolver):
        situation = RepositorySituation(COMMIT, None, frozenset({"v1.0.0", "v1.0.1", "v0.9.9"}))
        results = {resolver.resolve(situation, PROJECT) for _ in range(10)}
        assert len(results) == 1

    def test_update_pom_from_descriptor_or_global(self, config):
        resolver = VersionResolver(config)
        assert resolver.resolve(RepositorySituation(COMMIT, "feature/x"), PROJECT).update_pom is True
        assert resolver.resolve(RepositorySituation(COMMIT, "main"), PROJECT).update_pom is False
        global_config = Configuration(update_pom=True)
        assert VersionResolver(global_config).resolve(RepositorySituation(COMMIT, "main"), PROJECT).update_pom is True


class TestProperties:
    """Output metadata handed to the build."""

    def test_properties(self, resolver):
        situation = RepositorySituation(COMMIT, None, frozenset({"v2.3.4"}))
        props = resolver.resolve(situation, PROJECT).properties()
        assert props["git.commit"] == COMMIT
        assert props["git.ref"] == "v2.3.4"
        assert props["git.tag"] == "2.3.4"
        assert props["git.ref.major"] == "2"
        assert props["git.ref.0"] == "v2.3.4"
        assert props["version"] == "2.3.4"

    def test_metadata_is_read_only(self, resolver):
        result = resolver.resolve(RepositorySituation(COMMIT, "feature/x"), PROJECT)
        with pytest.raises(TypeError):
            result.metadata["feature"] = "y"  # type: ignore[index]


class TestWarningsAndErrors:
    """Dirty trees and invalid configuration."""

    def test_dirty_tree_warns_once(self, resolver, caplog):
        caplog.set_level(logging.INFO)
        situation = RepositorySituation(COMMIT, "main", dirty=True)
        for _ in range(3):
            assert resolver.resolve(situation, PROJECT).version == "1.4.0-SNAPSHOT"
        warnings = [r for r in caplog.records if "not clean" in r.getMessage()]
        assert len(warnings) == 1

    def test_result_info_logged_once(self, resolver, caplog):
        caplog.set_level(logging.INFO)
        for _ in range(2):
            resolver.resolve(RepositorySituation(COMMIT, "main"), PROJECT)
        infos = [r for r in caplog.records if "-> version: 1.4.0-SNAPSHOT" in r.getMessage()]
        assert len(infos) == 1
        assert infos[0].getMessage() == "demo:1.4.0-SNAPSHOT - branch: main -> version: 1.4.0-SNAPSHOT"

    def test_invalid_pattern_fails_on_construction(self):
        config = Configuration(branches=(RefDescriptor(pattern="feature/(", version_format="x"),))
        with pytest.raises(ConfigurationError):
            VersionResolver(config)


def test_escape_version():
    assert escape_version("feature/a/b") == "feature-a-b"
    assert escape_version("1.0.0") == "1.0.0"
