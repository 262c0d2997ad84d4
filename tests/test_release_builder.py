"""Tests for release building, version parsing and dependency extraction."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from artifactindex.domain import (
    ArtifactDescriptor,
    DependencyEdge,
    DropReason,
    DroppedArtifact,
    MavenReference,
    PreparedArtifact,
    RawDependency,
    RawLicense,
    RepositoryReference,
)
from artifactindex.errors import InvalidVersionError
from artifactindex.infra import LicenseNormalizer
from artifactindex.services.dependency_extractor import extract_dependencies
from artifactindex.services.release_builder import (
    ReleaseBuilder,
    format_date,
    is_prerelease,
    parse_date,
    parse_version,
    prepare_artifact,
)

CREATED = datetime(2023, 1, 2, 10, 0, 0, 123456, tzinfo=timezone.utc)
REPO = RepositoryReference("org", "repo")


def make_descriptor(artifact="lib", platform="_2.13", version="1.0.0", **kwargs):
    return ArtifactDescriptor(
        maven=MavenReference("org.example", f"{artifact}{platform}", version),
        artifact_name=artifact,
        platform=platform,
        created=kwargs.pop('created', CREATED),
        **kwargs,
    )


@pytest.fixture
def resolver():
    mock = MagicMock()
    mock.resolve.return_value = REPO
    return mock


class TestParseVersion:
    """Tests for parse_version()."""

    def test_release_version(self):
        assert str(parse_version("1.2.3")) == "1.2.3"

    def test_prerelease_version(self):
        assert is_prerelease(parse_version("2.0.0-RC1"))
        assert not is_prerelease(parse_version("2.0.0"))

    @pytest.mark.parametrize("raw, expected", [
        ("1.0.0-M1", "1.0.0-M1"),
        ("1.0-SNAPSHOT", "1.0.0-SNAPSHOT"),
        ("0.4.0-x.7.z.92", "0.4.0-x.7.z.92"),
        ("1.0.0-beta+exp.sha.5114f85", "1.0.0-beta+exp.sha.5114f85"),
    ])
    def test_maven_prereleases(self, raw, expected):
        version = parse_version(raw)
        assert str(version) == expected
        assert is_prerelease(version)

    def test_ordering(self):
        assert parse_version("1.0.0-M1") < parse_version("1.0.0-RC1") < parse_version("1.0.0")
        assert parse_version("1.10.0") > parse_version("1.9.3")

    def test_short_version(self):
        assert str(parse_version("2.13")) == "2.13.0"

    def test_invalid_version(self):
        with pytest.raises(InvalidVersionError):
            parse_version("not-a-version")

    def test_non_string(self):
        with pytest.raises(InvalidVersionError):
            parse_version(None)


class TestPrepareArtifact:
    """Tests for prepare_artifact()."""

    def test_prepared(self, resolver):
        outcome = prepare_artifact(make_descriptor(), resolver)
        assert isinstance(outcome, PreparedArtifact)
        assert outcome.repository == REPO
        assert outcome.artifact_name == "lib"
        assert outcome.created == CREATED

    def test_unknown_platform_dropped(self, resolver):
        outcome = prepare_artifact(make_descriptor(platform="_weird"), resolver)
        assert isinstance(outcome, DroppedArtifact)
        assert outcome.reason == DropReason.UNKNOWN_PLATFORM

    def test_invalid_version_dropped(self, resolver):
        outcome = prepare_artifact(make_descriptor(version="banana"), resolver)
        assert isinstance(outcome, DroppedArtifact)
        assert outcome.reason == DropReason.INVALID_VERSION

    def test_platform_checked_before_version(self, resolver):
        outcome = prepare_artifact(make_descriptor(platform="_weird", version="banana"), resolver)
        assert outcome.reason == DropReason.UNKNOWN_PLATFORM

    def test_no_repository_dropped(self, resolver):
        resolver.resolve.return_value = None
        outcome = prepare_artifact(make_descriptor(scm_url="https://example.com/x"), resolver)
        assert isinstance(outcome, DroppedArtifact)
        assert outcome.reason == DropReason.NO_REPOSITORY
        assert outcome.detail == "https://example.com/x"

    def test_explicit_repository_skips_resolver(self, resolver):
        other = RepositoryReference("other", "place")
        outcome = prepare_artifact(make_descriptor(), resolver, repository=other)
        assert outcome.repository == other
        resolver.resolve.assert_not_called()

    def test_explicit_created_overrides_descriptor(self, resolver):
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        outcome = prepare_artifact(make_descriptor(), resolver, created=when)
        assert outcome.created == when


class TestReleaseBuilder:
    """Tests for ReleaseBuilder."""

    def test_build_jvm_release(self, resolver):
        descriptor = make_descriptor(
            name="Lib",
            description="A library",
            resolver="central",
            licenses=(RawLicense("The Apache Software License, Version 2.0"),),
        )
        prepared = prepare_artifact(descriptor, resolver)
        release = ReleaseBuilder(LicenseNormalizer()).build(prepared)

        assert release.coordinate.organization == "org"
        assert release.coordinate.repository == "repo"
        assert release.artifact == "lib"
        assert release.version == "1.0.0"
        assert release.coordinate.platform == "_2.13"
        assert release.target_type == "Jvm"
        assert release.scala_version == "2.13"
        assert release.scala_js_version is None
        assert release.resolver == "central"
        assert release.released == "2023-01-02T10:00:00+00:00"
        assert [lic.short_name for lic in release.licenses] == ["Apache-2.0"]
        assert release.maven == descriptor.maven

    def test_build_js_release(self, resolver):
        prepared = prepare_artifact(make_descriptor(platform="_sjs1_2.13"), resolver)
        release = ReleaseBuilder(LicenseNormalizer()).build(prepared)
        assert release.target_type == "Js"
        assert release.scala_js_version == "1"
        assert release.coordinate.platform == "_sjs1_2.13"

    def test_build_java_release(self, resolver):
        prepared = prepare_artifact(make_descriptor(platform=""), resolver)
        release = ReleaseBuilder(LicenseNormalizer()).build(prepared)
        assert release.target_type == "Java"
        assert release.scala_version is None
        assert release.coordinate.platform == ""

    def test_build_is_pure(self, resolver):
        prepared = prepare_artifact(make_descriptor(), resolver)
        builder = ReleaseBuilder(LicenseNormalizer())
        assert builder.build(prepared) == builder.build(prepared)


class TestDates:
    """Tests for format_date() / parse_date()."""

    def test_format_drops_microseconds(self):
        assert format_date(CREATED) == "2023-01-02T10:00:00+00:00"

    def test_parse_naive_is_utc(self):
        assert parse_date("2023-01-02T10:00:00") == datetime(2023, 1, 2, 10, tzinfo=timezone.utc)

    def test_parse_malformed(self):
        with pytest.raises(ValueError):
            parse_date("yesterday")


class TestExtractDependencies:
    """Tests for extract_dependencies()."""

    def test_edges_from_descriptor(self):
        target = MavenReference("org.typelevel", "cats-core_2.13", "2.9.0")
        test_target = MavenReference("org.scalatest", "scalatest_2.13", "3.2.15")
        descriptor = make_descriptor(dependencies=(
            RawDependency(target),
            RawDependency(test_target, scope="test"),
        ))

        edges = extract_dependencies(descriptor)

        assert edges == (
            DependencyEdge(descriptor.maven, target, "compile"),
            DependencyEdge(descriptor.maven, test_target, "test"),
        )

    def test_duplicates_removed(self):
        target = MavenReference("org.typelevel", "cats-core_2.13", "2.9.0")
        descriptor = make_descriptor(dependencies=(
            RawDependency(target),
            RawDependency(target, scope="compile"),
        ))
        assert len(extract_dependencies(descriptor)) == 1

    def test_no_dependencies(self):
        assert extract_dependencies(make_descriptor()) == ()
