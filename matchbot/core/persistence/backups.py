"""
Registry persistence with tiered backup rotation.

Every mutating command ends with PersistenceManager.persist(data):

1. serialize the whole tree,
2. copy the registry file currently on disk into four backup tiers,
   each file named by a time bucket, then prune each tier,
3. atomically replace the registry file with the new snapshot.

Tiers:
    history  - one file per write (microsecond bucket), keep 20
    hourly   - one file per hour, keep 24
    daily    - one file per day, keep 30
    monthly  - one file per 28 days, keep all

Bucket keys are zero-padded so sorting file names sorts them by time.
"""

import json
import os
import shutil
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from matchbot.common.logging import get_logger
from matchbot.core.errors import PersistenceError
from matchbot.core.registry.models import GlobalData

logger = get_logger(__name__)

HOUR_SEC = 60 * 60
DAY_SEC = 24 * HOUR_SEC
MONTH_SEC = 28 * DAY_SEC

BUCKET_WIDTH = 20
BACKUP_PREFIX = "registry."
BACKUP_SUFFIX = ".json"


class BackupTier(str, Enum):
    """Backup retention horizons."""
    HISTORY = "history"
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"

    def bucket(self, now: float) -> int:
        """Time bucket for a wall-clock timestamp (seconds since epoch)."""
        if self is BackupTier.HISTORY:
            return int(now * 1_000_000)
        seconds = int(now)
        if self is BackupTier.HOURLY:
            return seconds // HOUR_SEC
        if self is BackupTier.DAILY:
            return seconds // DAY_SEC
        return seconds // MONTH_SEC


@dataclass(frozen=True)
class RetentionPolicy:
    """How many files each tier keeps. None means unbounded."""
    history: Optional[int] = 20
    hourly: Optional[int] = 24
    daily: Optional[int] = 30
    monthly: Optional[int] = None

    def limit(self, tier: BackupTier) -> Optional[int]:
        return getattr(self, tier.value)


def backup_name(bucket: int) -> str:
    return f"{BACKUP_PREFIX}{bucket:0{BUCKET_WIDTH}d}{BACKUP_SUFFIX}"


def serialize(data: GlobalData) -> str:
    """Canonical on-disk form of the registry."""
    return json.dumps(data.to_dict(), indent=2, ensure_ascii=False) + "\n"


class PersistenceManager:
    """Writes the registry file and rotates its backups."""

    def __init__(
        self,
        registry_path: Union[str, Path],
        backup_dir: Union[str, Path],
        retention: Optional[RetentionPolicy] = None,
    ):
        """
        Args:
            registry_path: Primary registry JSON file
            backup_dir: Root directory holding one sub-directory per tier
            retention: Files kept per tier
        """
        self.registry_path = Path(registry_path)
        self.backup_dir = Path(backup_dir)
        self.retention = retention or RetentionPolicy()

    def tier_dir(self, tier: BackupTier) -> Path:
        return self.backup_dir / tier.value

    def persist(self, data: GlobalData, now: Optional[float] = None) -> None:
        """
        Back up the current file, then overwrite it with `data`.

        Runs synchronously; callers hold the registry write lock.

        Args:
            data: Registry tree to write
            now: Wall-clock time in seconds (default: time.time())

        Raises:
            PersistenceError: a backup or the registry file could not be written.
                The in-memory tree is left as is.
        """
        if now is None:
            now = time.time()

        payload = serialize(data)

        if self.registry_path.exists():
            for tier in BackupTier:
                self._backup(tier, now)
                self.prune(tier)

        self._write_atomic(payload)
        logger.debug("Registry persisted", data={
            "path": str(self.registry_path),
            "bytes": len(payload),
        })

    def _backup(self, tier: BackupTier, now: float) -> Path:
        target = self.tier_dir(tier) / backup_name(tier.bucket(now))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.registry_path, target)
        except OSError as e:
            raise PersistenceError(
                f"Could not write {tier.value} backup",
                data={"tier": tier.value, "path": str(target)},
                cause=e,
            ) from e
        return target

    def list_backups(self, tier: BackupTier) -> List[Path]:
        """Backup files of a tier, oldest first."""
        directory = self.tier_dir(tier)
        if not directory.is_dir():
            return []
        return sorted(
            (
                path for path in directory.iterdir()
                if path.is_file()
                and path.name.startswith(BACKUP_PREFIX)
                and path.name.endswith(BACKUP_SUFFIX)
            ),
            key=lambda path: path.name,
        )

    def prune(self, tier: BackupTier) -> List[Path]:
        """
        Delete the oldest backups beyond the tier's retention.

        Returns:
            Removed paths, oldest first
        """
        limit = self.retention.limit(tier)
        if limit is None:
            return []

        backups = self.list_backups(tier)
        to_remove = backups[:len(backups) - limit] if len(backups) > limit else []

        for path in to_remove:
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise PersistenceError(
                    f"Could not prune {tier.value} backup",
                    data={"tier": tier.value, "path": str(path)},
                    cause=e,
                ) from e

        if to_remove:
            logger.debug("Pruned backups", data={
                "tier": tier.value,
                "removed": len(to_remove),
            })
        return to_remove

    def backup_counts(self) -> Dict[str, int]:
        return {tier.value: len(self.list_backups(tier)) for tier in BackupTier}

    def _write_atomic(self, payload: str) -> None:
        tmp_path = self.registry_path.with_name(self.registry_path.name + ".tmp")
        try:
            self.registry_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.registry_path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise PersistenceError(
                "Could not write registry file",
                data={"path": str(self.registry_path)},
                cause=e,
            ) from e
