"""
Database module for artifactindex.

Provides SQLite-based persistence for the catalog: projects, releases,
dependency edges and the drops of conversion runs.

Key components:
- connection: Database connection management
- schema: Table definitions and schema versioning
- catalog: Project/release/dependency CRUD operations
- errors: Conversion drop records
- store: CatalogStore, the default service collaborator
"""

from .connection import (
    get_connection,
    get_db_path,
    Database,
    get_database_info,
    reset_database,
    transaction,
)
from .schema import CURRENT_VERSION, ensure_schema
from .catalog import (
    upsert_project,
    upsert_release,
    insert_dependencies,
    get_project,
    get_all_projects,
    get_project_count,
    get_flags,
    set_flags,
    update_metadata,
    get_metadata,
    get_releases,
    get_indexed_releases,
    get_dependencies,
    record_to_project,
    record_to_release,
)
from .errors import (
    record_drop,
    record_drops,
    get_drops,
    get_drop_counts,
    clear_drops,
)
from .store import CatalogStore

__all__ = [
    # Connection
    'get_connection',
    'get_db_path',
    'Database',
    'get_database_info',
    'reset_database',
    'transaction',
    # Schema
    'ensure_schema',
    'CURRENT_VERSION',
    # Catalog
    'upsert_project',
    'upsert_release',
    'insert_dependencies',
    'get_project',
    'get_all_projects',
    'get_project_count',
    'get_flags',
    'set_flags',
    'update_metadata',
    'get_metadata',
    'get_releases',
    'get_indexed_releases',
    'get_dependencies',
    'record_to_project',
    'record_to_release',
    # Conversion drops
    'record_drop',
    'record_drops',
    'get_drops',
    'get_drop_counts',
    'clear_drops',
    # Store
    'CatalogStore',
]
