"""
Tests for PersistenceManager: atomic writes and tiered backup retention.
"""

import json
import os
from datetime import datetime, timezone

import pytest

from matchbot.core.errors import PersistenceError
from matchbot.core.persistence import (
    BackupTier,
    PersistenceManager,
    RetentionPolicy,
    backup_name,
    serialize,
)
from matchbot.core.persistence.backups import DAY_SEC, HOUR_SEC, MONTH_SEC
from matchbot.core.registry import GlobalData

T0 = datetime(2024, 5, 1, tzinfo=timezone.utc).timestamp()


def make_data(result_id: str) -> GlobalData:
    data = GlobalData()
    data.guild_mut(1).user_mut(2).headmate_mut(None).add_result(
        result_id, at=datetime(2024, 5, 1, tzinfo=timezone.utc)
    )
    return data


@pytest.mark.unit
class TestBuckets:

    def test_bucket_granularity(self):
        assert BackupTier.HISTORY.bucket(12.5) == 12_500_000
        assert BackupTier.HOURLY.bucket(HOUR_SEC * 3 + 10) == 3
        assert BackupTier.DAILY.bucket(DAY_SEC * 2 - 1) == 1
        assert BackupTier.MONTHLY.bucket(MONTH_SEC * 5) == 5

    def test_names_sort_chronologically(self):
        buckets = [9, 10, 100, 99999]
        names = [backup_name(b) for b in buckets]
        assert sorted(names) == names


@pytest.mark.unit
class TestPersist:

    def test_first_write_creates_file_without_backups(self, persistence, registry_path):
        persistence.persist(make_data("abc"), now=T0)

        assert json.loads(registry_path.read_text()) == make_data("abc").to_dict()
        assert persistence.backup_counts() == {
            "history": 0, "hourly": 0, "daily": 0, "monthly": 0,
        }

    def test_second_write_backs_up_previous_snapshot(self, persistence, registry_path):
        persistence.persist(make_data("first"), now=T0)
        persistence.persist(make_data("second"), now=T0 + 1)

        for tier in BackupTier:
            backups = persistence.list_backups(tier)
            assert len(backups) == 1
            assert backups[0].read_text() == serialize(make_data("first"))

        assert registry_path.read_text() == serialize(make_data("second"))

    def test_same_bucket_is_overwritten(self, persistence):
        persistence.persist(make_data("a"), now=T0)
        persistence.persist(make_data("b"), now=T0 + 1)
        persistence.persist(make_data("c"), now=T0 + 2)

        hourly = persistence.list_backups(BackupTier.HOURLY)
        assert len(hourly) == 1
        assert hourly[0].read_text() == serialize(make_data("b"))

    def test_no_temp_file_left_behind(self, persistence, registry_path):
        persistence.persist(make_data("abc"), now=T0)
        assert not registry_path.with_name(registry_path.name + ".tmp").exists()

    def test_write_failure_raises_and_keeps_old_file(self, tmp_path, monkeypatch):
        registry_path = tmp_path / "registry.json"
        manager = PersistenceManager(registry_path, tmp_path / "backups")
        manager.persist(make_data("old"), now=T0)

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)

        data = make_data("new")
        with pytest.raises(PersistenceError):
            manager.persist(data, now=T0 + 1)

        assert registry_path.read_text() == serialize(make_data("old"))
        assert not registry_path.with_name("registry.json.tmp").exists()
        # In-memory tree is untouched by the failure.
        assert data.guild(1).user(2).headmate(None).most_recent() == "new"

    def test_backup_failure_raises(self, tmp_path):
        registry_path = tmp_path / "registry.json"
        backup_dir = tmp_path / "backups"
        manager = PersistenceManager(registry_path, backup_dir)
        manager.persist(make_data("old"), now=T0)

        # A plain file where the tier directory should be.
        backup_dir.mkdir()
        (backup_dir / "history").write_text("")

        with pytest.raises(PersistenceError):
            manager.persist(make_data("new"), now=T0 + 1)


@pytest.mark.unit
class TestRetention:

    def test_history_keeps_most_recent_twenty(self, persistence):
        writes = 25
        for i in range(writes):
            persistence.persist(make_data(f"r{i}"), now=T0 + i)

        history = persistence.list_backups(BackupTier.HISTORY)
        assert len(history) == 20
        # Backups hold the snapshot preceding each write: r4..r23
        contents = [json.loads(p.read_text()) for p in history]
        expected = [make_data(f"r{i}").to_dict() for i in range(writes - 21, writes - 1)]
        assert contents == expected

    def test_hourly_bounded(self, persistence):
        for hour in range(30):
            persistence.persist(make_data(f"h{hour}"), now=T0 + hour * HOUR_SEC)

        assert len(persistence.list_backups(BackupTier.HOURLY)) == 24

    def test_daily_bounded(self, persistence):
        for day in range(35):
            persistence.persist(make_data(f"d{day}"), now=T0 + day * DAY_SEC)

        assert len(persistence.list_backups(BackupTier.DAILY)) == 30

    def test_monthly_unbounded_one_per_period(self, persistence):
        for period in range(40):
            persistence.persist(make_data("a"), now=T0 + period * MONTH_SEC)
            persistence.persist(make_data("b"), now=T0 + period * MONTH_SEC + DAY_SEC)

        # First write of the first period had nothing to back up.
        assert len(persistence.list_backups(BackupTier.MONTHLY)) == 40

    def test_custom_retention(self, tmp_path):
        manager = PersistenceManager(
            tmp_path / "registry.json",
            tmp_path / "backups",
            retention=RetentionPolicy(history=3),
        )
        for i in range(10):
            manager.persist(make_data(f"r{i}"), now=T0 + i)
        assert len(manager.list_backups(BackupTier.HISTORY)) == 3

    def test_prune_removes_oldest_first(self, persistence):
        directory = persistence.tier_dir(BackupTier.HISTORY)
        directory.mkdir(parents=True)
        for bucket in range(25):
            (directory / backup_name(bucket)).write_text("{}")
        (directory / "notes.txt").write_text("kept")

        removed = persistence.prune(BackupTier.HISTORY)

        assert [p.name for p in removed] == [backup_name(b) for b in range(5)]
        assert (directory / "notes.txt").exists()
        assert len(persistence.list_backups(BackupTier.HISTORY)) == 20

    def test_list_backups_missing_tier(self, persistence):
        assert persistence.list_backups(BackupTier.DAILY) == []
