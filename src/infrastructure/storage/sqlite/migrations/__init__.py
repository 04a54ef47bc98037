"""Database migrations module."""

from src.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    MigrationResult,
    apply_migration,
    discover_migrations,
    get_applied_migrations,
    initialize_database,
)

__all__ = [
    "MigrationInfo",
    "MigrationResult",
    "apply_migration",
    "discover_migrations",
    "get_applied_migrations",
    "initialize_database",
]
