"""
Tests for artifactindex.database module.

Tests cover:
- Database connection management
- Schema creation and versioning
- Project, release and dependency CRUD operations
- Conversion drop records
- CatalogStore (including concurrent publishes)
"""

import os
import shutil
import sqlite3
import tempfile
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from artifactindex.database.connection import (
    Database,
    get_db_path,
    get_database_info,
    reset_database,
    transaction,
)
from artifactindex.database.schema import (
    CURRENT_VERSION,
    ensure_schema,
    get_schema_version,
)
from artifactindex.database.catalog import (
    get_dependencies,
    get_flags,
    get_indexed_releases,
    get_metadata,
    get_project,
    get_project_count,
    get_releases,
    insert_dependencies,
    set_flags,
    update_metadata,
    upsert_project,
    upsert_release,
)
from artifactindex.database.errors import (
    clear_drops,
    get_drop_counts,
    get_drops,
    record_drop,
    record_drops,
)
from artifactindex.database.store import CatalogStore
from artifactindex.domain import (
    ConversionReport,
    ConversionResult,
    DependencyEdge,
    DropReason,
    DroppedArtifact,
    License,
    MavenReference,
    Project,
    Release,
    ReleaseCoordinate,
    RepositoryMetadata,
    RepositoryReference,
    StoredFlags,
)

REPO = RepositoryReference("org", "repo")
NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_release(artifact="lib", version="1.0.0", platform="_2.13", reference=REPO, **kwargs):
    return Release(
        coordinate=ReleaseCoordinate(reference.organization, reference.repository, artifact, version, platform),
        maven=MavenReference("org.example", f"{artifact}{platform}", version),
        target_type=kwargs.pop('target_type', "Jvm"),
        released=kwargs.pop('released', "2023-01-01T00:00:00+00:00"),
        scala_version=kwargs.pop('scala_version', "2.13"),
        **kwargs,
    )


def make_project(reference=REPO, **kwargs):
    defaults = dict(
        artifacts=("lib",),
        default_artifact="lib",
        release_count=1,
        created="2023-01-01T00:00:00+00:00",
        updated="2023-01-01T00:00:00+00:00",
        target_type=("Jvm",),
        scala_version=("2.13",),
    )
    defaults.update(kwargs)
    return Project(reference.organization, reference.repository, **defaults)


class DatabaseTestCase(unittest.TestCase):
    """Base class with a temporary database path."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / 'test.db'

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)


class TestDatabaseConnection(DatabaseTestCase):
    """Tests for database connection management."""

    def test_get_db_path_default(self):
        """Test default database path."""
        with patch.dict(os.environ, {}, clear=True):
            path = get_db_path()
            self.assertTrue(str(path).endswith('catalog.db'))
            self.assertIn('.artifactindex', str(path))

    def test_get_db_path_from_env(self):
        """Test database path from environment variable."""
        with patch.dict(os.environ, {'ARTIFACTINDEX_DB': '/custom/path/db.sqlite'}):
            self.assertEqual(str(get_db_path()), '/custom/path/db.sqlite')

    def test_get_db_path_from_config(self):
        """Test database path from config."""
        with patch.dict(os.environ, {}, clear=True):
            path = get_db_path({'database': {'path': '~/mydb.sqlite'}})
            self.assertIn('mydb.sqlite', str(path))

    def test_database_creates_schema(self):
        """Test that Database creates schema on first connection."""
        with Database(db_path=self.db_path) as db:
            db.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = [row['name'] for row in db.fetchall()]

        for table in ('projects', 'releases', 'dependencies', 'conversion_errors', '_schema_info'):
            self.assertIn(table, tables)

    def test_get_database_info(self):
        """Test get_database_info returns stats."""
        with Database(db_path=self.db_path) as db:
            upsert_project(db, make_project())

        with patch.dict(os.environ, {}, clear=True):
            info = get_database_info({'database': {'path': str(self.db_path)}})

        self.assertTrue(info['exists'])
        self.assertEqual(info['projects'], 1)
        self.assertEqual(info['releases'], 0)
        self.assertEqual(info['schema_version'], CURRENT_VERSION)

    def test_get_database_info_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            info = get_database_info({'database': {'path': str(self.db_path)}})
        self.assertFalse(info['exists'])

    def test_reset_database(self):
        """Test reset_database clears all data."""
        with Database(db_path=self.db_path) as db:
            upsert_project(db, make_project())

        with patch.dict(os.environ, {}, clear=True):
            reset_database({'database': {'path': str(self.db_path)}})

        with Database(db_path=self.db_path) as db:
            self.assertEqual(get_project_count(db), 0)

    def test_transaction_rolls_back(self):
        with Database(db_path=self.db_path) as db:
            with self.assertRaises(RuntimeError):
                with transaction(db, immediate=True):
                    upsert_project(db, make_project())
                    raise RuntimeError("boom")
            self.assertEqual(get_project_count(db), 0)


class TestSchema(DatabaseTestCase):
    """Tests for schema creation and versioning."""

    def test_get_schema_version_empty_db(self):
        conn = sqlite3.connect(str(self.db_path))
        self.assertEqual(get_schema_version(conn), 0)
        conn.close()

    def test_ensure_schema_sets_version(self):
        conn = sqlite3.connect(str(self.db_path))
        ensure_schema(conn)
        self.assertEqual(get_schema_version(conn), CURRENT_VERSION)
        conn.close()

    def test_ensure_schema_keeps_data(self):
        with Database(db_path=self.db_path) as db:
            upsert_project(db, make_project())

        conn = sqlite3.connect(str(self.db_path))
        ensure_schema(conn)
        count = conn.execute("SELECT COUNT(*) FROM projects").fetchone()[0]
        conn.close()
        self.assertEqual(count, 1)


class TestCatalogOperations(DatabaseTestCase):
    """Tests for project/release/dependency CRUD."""

    def test_upsert_project_roundtrip(self):
        github = RepositoryMetadata(owner="org", name="repo", stars=3, topics=("json",))
        flags = StoredFlags(strict_versions=True, deprecated_artifacts=frozenset({"old"}))
        project = make_project(github=github, flags=flags, scala_version=("2.12", "2.13"))

        with Database(db_path=self.db_path) as db:
            self.assertTrue(upsert_project(db, project))
            self.assertEqual(get_project(db, REPO), project)

    def test_upsert_project_replaces(self):
        with Database(db_path=self.db_path) as db:
            upsert_project(db, make_project())
            self.assertFalse(upsert_project(db, make_project(release_count=5)))
            self.assertEqual(get_project(db, REPO).release_count, 5)
            self.assertEqual(get_project_count(db), 1)

    def test_get_project_missing(self):
        with Database(db_path=self.db_path) as db:
            self.assertIsNone(get_project(db, REPO))
            self.assertIsNone(get_flags(db, REPO))

    def test_release_roundtrip(self):
        release = make_release(
            licenses=(License("MIT License", "MIT", "https://opensource.org/licenses/MIT"),),
            is_non_standard_lib=True,
            description="A library",
        )
        with Database(db_path=self.db_path) as db:
            upsert_release(db, release)
            self.assertEqual(get_releases(db, REPO), [release])

    def test_release_same_coordinate_replaced(self):
        with Database(db_path=self.db_path) as db:
            upsert_release(db, make_release(description="first"))
            upsert_release(db, make_release(description="second"))
            releases = get_releases(db, REPO)
        self.assertEqual(len(releases), 1)
        self.assertEqual(releases[0].description, "second")

    def test_indexed_releases_grouped(self):
        other = RepositoryReference("other", "thing")
        with Database(db_path=self.db_path) as db:
            upsert_release(db, make_release(version="1.0.0"))
            upsert_release(db, make_release(version="2.0.0"))
            upsert_release(db, make_release(reference=other))
            indexed = get_indexed_releases(db)

        self.assertEqual(set(indexed), {REPO, other})
        self.assertEqual([r.version for r in indexed[REPO]], ["1.0.0", "2.0.0"])

    def test_dependencies_deduplicated(self):
        source = MavenReference("org.example", "lib_2.13", "1.0.0")
        edge = DependencyEdge(source, MavenReference("org.typelevel", "cats-core_2.13", "2.9.0"))
        test_edge = DependencyEdge(source, MavenReference("org.scalatest", "scalatest_2.13", "3.2.0"), "test")

        with Database(db_path=self.db_path) as db:
            insert_dependencies(db, [edge, test_edge])
            insert_dependencies(db, [edge])
            self.assertEqual(get_dependencies(db), sorted([edge, test_edge]))
            self.assertEqual(get_dependencies(db, source), sorted([edge, test_edge]))

    def test_set_flags(self):
        flags = StoredFlags(contributors_wanted=True, primary_topic="http")
        with Database(db_path=self.db_path) as db:
            self.assertFalse(set_flags(db, REPO, flags))
            upsert_project(db, make_project())
            self.assertTrue(set_flags(db, REPO, flags))
            self.assertEqual(get_flags(db, REPO), flags)

    def test_update_metadata(self):
        metadata = RepositoryMetadata(owner="org", name="repo", stars=99)
        with Database(db_path=self.db_path) as db:
            upsert_project(db, make_project())
            self.assertTrue(update_metadata(db, REPO, metadata, NOW))
            self.assertEqual(get_metadata(db, REPO), metadata)
            self.assertEqual(get_project(db, REPO).github, metadata)


class TestConversionDrops(DatabaseTestCase):
    """Tests for conversion drop records."""

    def drop(self, artifact="odd_weird", reason=DropReason.UNKNOWN_PLATFORM):
        return DroppedArtifact(MavenReference("org.example", artifact, "1.0"), reason, "detail")

    def test_record_and_get(self):
        with Database(db_path=self.db_path) as db:
            self.assertGreater(record_drop(db, self.drop()), 0)
            drops = get_drops(db)
        self.assertEqual(len(drops), 1)
        self.assertEqual(drops[0]['maven'], "org.example:odd_weird:1.0")
        self.assertEqual(drops[0]['reason'], "unknown_platform")

    def test_record_replaces_previous(self):
        with Database(db_path=self.db_path) as db:
            record_drop(db, self.drop())
            record_drop(db, self.drop(reason=DropReason.NO_REPOSITORY))
            drops = get_drops(db)
        self.assertEqual([d['reason'] for d in drops], ["no_repository"])

    def test_counts_and_filter(self):
        with Database(db_path=self.db_path) as db:
            record_drops(db, [
                self.drop("a"),
                self.drop("b"),
                self.drop("c", DropReason.INVALID_VERSION),
            ])
            self.assertEqual(get_drop_counts(db), {'invalid_version': 1, 'unknown_platform': 2})
            self.assertEqual(len(get_drops(db, reason='invalid_version')), 1)
            self.assertEqual(len(get_drops(db, limit=2)), 2)
            self.assertEqual(clear_drops(db), 3)
            self.assertEqual(get_drops(db), [])


class TestCatalogStore(DatabaseTestCase):
    """Tests for CatalogStore."""

    def setUp(self):
        super().setUp()
        self.store = CatalogStore(db_path=self.db_path)

    def test_insert_artifact_new_then_existing(self):
        self.assertTrue(self.store.insert_artifact(make_project(), make_release(), (), NOW))
        self.assertFalse(
            self.store.insert_artifact(make_project(release_count=2), make_release(version="2.0.0"), (), NOW)
        )
        self.assertEqual(self.store.project_of(REPO).release_count, 2)
        self.assertEqual(len(self.store.releases_of(REPO)), 2)

    def test_insert_artifact_keeps_stored_flags(self):
        self.store.insert_artifact(make_project(), make_release(), (), NOW)
        flags = StoredFlags(strict_versions=True)
        self.store.set_flags(REPO, flags)

        self.store.insert_artifact(make_project(), make_release(version="2.0.0"), (), NOW)

        self.assertEqual(self.store.flags_of(REPO), flags)

    def test_insert_artifact_stores_dependencies(self):
        release = make_release()
        edge = DependencyEdge(release.maven, MavenReference("org.typelevel", "cats-core_2.13", "2.9.0"))
        self.store.insert_artifact(make_project(), release, [edge], NOW)
        self.assertEqual(self.store.dependencies_of(release), [edge])

    def test_concurrent_insert_artifact_single_new_project(self):
        barrier = threading.Barrier(8)

        def publish(i):
            barrier.wait()
            return self.store.insert_artifact(make_project(), make_release(version=f"1.{i}.0"), (), NOW)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(publish, range(8)))

        self.assertEqual(results.count(True), 1)
        self.assertEqual(len(self.store.releases_of(REPO)), 8)

    def test_concurrent_insert_artifact_separate_stores(self):
        stores = [CatalogStore(db_path=self.db_path) for _ in range(4)]
        CatalogStore(db_path=self.db_path).projects()  # create schema up front
        barrier = threading.Barrier(4)

        def publish(i):
            barrier.wait()
            return stores[i].insert_artifact(make_project(), make_release(version=f"2.{i}.0"), (), NOW)

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(publish, range(4)))

        self.assertEqual(results.count(True), 1)

    def test_save_conversion_result(self):
        report = ConversionReport()
        report.add_kept()
        report.add_drop(DroppedArtifact(MavenReference("g", "a_weird", "1"), DropReason.UNKNOWN_PLATFORM))
        result = ConversionResult(
            projects=[make_project()],
            releases=[make_release()],
            dependencies=[],
            report=report,
        )

        self.store.save(result)

        self.assertEqual(self.store.projects(), [make_project()])
        self.assertEqual(list(self.store.indexed_releases()), [REPO])
        with Database(db_path=self.db_path) as db:
            self.assertEqual(get_drop_counts(db), {'unknown_platform': 1})

    def test_update_metadata_and_read(self):
        self.store.insert_artifact(make_project(), make_release(), (), NOW)
        metadata = RepositoryMetadata(owner="org", name="repo", stars=7)

        self.store.update_metadata(REPO, metadata, NOW)

        self.assertEqual(self.store.read(REPO), metadata)

    def test_update_metadata_unknown_project(self):
        self.store.update_metadata(REPO, RepositoryMetadata(owner="org", name="repo"), NOW)
        self.assertIsNone(self.store.read(REPO))


if __name__ == '__main__':
    unittest.main()
