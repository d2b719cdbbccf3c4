"""
Domain Models for the result registry.

These dataclasses form the persisted tree:

    GlobalData -> GuildData -> UserData -> HeadmateData

All models have to_dict() and from_dict() for serialization, and a
migrate() hook that upgrades older document shapes in place.

Containers are created lazily through the *_mut accessors (lookup; if
absent construct, insert, return). Plain accessors never create anything.
Empty containers are kept until removed explicitly.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Tuple

from matchbot.core.errors import MigrationError


# Bump together with a new branch in GlobalData.migrate().
CURRENT_SCHEMA_VERSION = 1

_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def format_timestamp(ts: datetime) -> str:
    """RFC 3339 UTC timestamp with microseconds and a Z suffix."""
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a stored timestamp key.

    Accepts a Z suffix or an explicit offset, and fractions longer than
    microseconds (older documents stored nanoseconds). Naive values are UTC.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(r".\1", text)
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass
class HeadmateData:
    """Result history of one identity: timestamp -> result id."""
    results: Dict[datetime, str] = field(default_factory=dict)

    def add_result(self, result_id: str, at: Optional[datetime] = None) -> datetime:
        """Record a result at `at` (default: now, UTC). Returns the key used."""
        ts = at or datetime.now(timezone.utc)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        self.results[ts] = result_id
        return ts

    def most_recent(self) -> Optional[str]:
        """Result id with the latest timestamp, regardless of insertion order."""
        if not self.results:
            return None
        return self.results[max(self.results)]

    def history(self) -> List[Tuple[datetime, str]]:
        """(timestamp, result id) pairs, newest first."""
        return sorted(self.results.items(), key=lambda item: item[0], reverse=True)

    def migrate(self) -> None:
        pass

    def to_dict(self) -> dict:
        return {
            'results': {
                format_timestamp(ts): result_id
                for ts, result_id in sorted(self.results.items())
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'HeadmateData':
        return cls(
            results={
                parse_timestamp(key): str(value)
                for key, value in (d.get('results') or {}).items()
            },
        )


@dataclass
class UserData:
    """A member's primary identity slot plus named headmates."""
    primary: Optional[HeadmateData] = None
    headmates: Dict[str, HeadmateData] = field(default_factory=dict)

    def headmate(self, name: Optional[str]) -> Optional[HeadmateData]:
        """Resolve None to the primary slot, a name to that headmate."""
        if name is None:
            return self.primary
        return self.headmates.get(name)

    def headmate_mut(self, name: Optional[str]) -> HeadmateData:
        """Like headmate(), creating the record when it does not exist."""
        if name is None:
            if self.primary is None:
                self.primary = HeadmateData()
            return self.primary

        record = self.headmates.get(name)
        if record is None:
            record = HeadmateData()
            self.headmates[name] = record
        return record

    def remove_headmate(self, name: Optional[str]) -> Optional[HeadmateData]:
        """Remove the named headmate (or clear primary). Returns what was removed."""
        if name is None:
            removed, self.primary = self.primary, None
            return removed
        return self.headmates.pop(name, None)

    def identities(self) -> Iterator[Tuple[Optional[str], HeadmateData]]:
        """Primary first (as None), then headmates sorted by name."""
        if self.primary is not None:
            yield None, self.primary
        for name in sorted(self.headmates):
            yield name, self.headmates[name]

    def migrate(self) -> None:
        if self.primary is not None:
            self.primary.migrate()
        for record in self.headmates.values():
            record.migrate()

    def to_dict(self) -> dict:
        d: dict = {}
        if self.primary is not None:
            d['primary'] = self.primary.to_dict()
        if self.headmates:
            d['headmates'] = {
                name: record.to_dict()
                for name, record in sorted(self.headmates.items())
            }
        return d

    @classmethod
    def from_dict(cls, d: dict) -> 'UserData':
        primary = d.get('primary')
        return cls(
            primary=HeadmateData.from_dict(primary) if primary is not None else None,
            headmates={
                str(name): HeadmateData.from_dict(record or {})
                for name, record in (d.get('headmates') or {}).items()
            },
        )


@dataclass
class GuildData:
    """Members of one group chat, keyed by user id."""
    users: Dict[int, UserData] = field(default_factory=dict)

    def user(self, user_id: int) -> Optional[UserData]:
        return self.users.get(user_id)

    def user_mut(self, user_id: int) -> UserData:
        record = self.users.get(user_id)
        if record is None:
            record = UserData()
            self.users[user_id] = record
        return record

    def sorted_users(self) -> List[Tuple[int, UserData]]:
        """Users in ascending id order."""
        return sorted(self.users.items())

    def migrate(self) -> None:
        for record in self.users.values():
            record.migrate()

    def to_dict(self) -> dict:
        return {
            'users': {
                str(user_id): record.to_dict()
                for user_id, record in self.sorted_users()
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'GuildData':
        return cls(
            users={
                int(user_id): UserData.from_dict(record or {})
                for user_id, record in (d.get('users') or {}).items()
            },
        )


@dataclass
class GlobalData:
    """Root of the persisted document, keyed by guild (group chat) id."""
    guilds: Dict[int, GuildData] = field(default_factory=dict)
    schema_version: int = CURRENT_SCHEMA_VERSION

    def guild(self, guild_id: int) -> Optional[GuildData]:
        """Read-only lookup; None means no data for this guild."""
        return self.guilds.get(guild_id)

    def guild_mut(self, guild_id: int) -> GuildData:
        record = self.guilds.get(guild_id)
        if record is None:
            record = GuildData()
            self.guilds[guild_id] = record
        return record

    def migrate(self) -> None:
        """
        Upgrade the whole tree to CURRENT_SCHEMA_VERSION in place.

        Visits every guild, user and headmate once. Running it again on a
        migrated document changes nothing.

        Raises:
            MigrationError: document was written by a newer schema
        """
        if self.schema_version > CURRENT_SCHEMA_VERSION:
            raise MigrationError(
                f"Registry schema version {self.schema_version} is newer than "
                f"supported version {CURRENT_SCHEMA_VERSION}",
                data={"schema_version": self.schema_version},
            )

        for record in self.guilds.values():
            record.migrate()

        self.schema_version = CURRENT_SCHEMA_VERSION

    def to_dict(self) -> dict:
        return {
            'schema_version': self.schema_version,
            'guilds': {
                str(guild_id): record.to_dict()
                for guild_id, record in sorted(self.guilds.items())
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'GlobalData':
        # Documents written before versioning carry no schema_version.
        return cls(
            guilds={
                int(guild_id): GuildData.from_dict(record or {})
                for guild_id, record in (d.get('guilds') or {}).items()
            },
            schema_version=int(d.get('schema_version', 0)),
        )
