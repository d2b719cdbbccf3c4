"""
Persistence - registry file writes and tiered backups.
"""

from .backups import (
    BackupTier,
    RetentionPolicy,
    PersistenceManager,
    backup_name,
    serialize,
)

__all__ = [
    "BackupTier",
    "RetentionPolicy",
    "PersistenceManager",
    "backup_name",
    "serialize",
]
