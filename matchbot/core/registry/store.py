"""
Registry - the locked owner of the GlobalData tree.

One Registry is created at startup and handed to every command handler.
The tree is only reachable through the lock:

    async with registry.read() as data:      # shared
        guild = data.guild(chat_id)

    async with registry.write() as data:     # exclusive
        data.guild_mut(chat_id).user_mut(user_id).headmate_mut(None).add_result(rid)
        persistence.persist(data)

Writers keep the lock across the persist step, so readers never see a
half-applied mutation.
"""

import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Union

from matchbot.common.logging import get_logger
from matchbot.core.errors import MigrationError
from .locks import AsyncRWLock
from .models import GlobalData

logger = get_logger(__name__)


class Registry:
    """Process-wide holder of the registry tree and its read/write lock."""

    def __init__(self, data: Optional[GlobalData] = None):
        self._data = data if data is not None else GlobalData()
        self._lock = AsyncRWLock()

    @property
    def lock(self) -> AsyncRWLock:
        return self._lock

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'Registry':
        """
        Read, decode and migrate the registry file.

        A missing file yields an empty registry. The returned registry is
        fully migrated before anything can take the lock.

        Raises:
            MigrationError: file unreadable, not valid JSON, or not migratable
        """
        path = Path(path)
        data = load_document(path)
        logger.info("Registry loaded", data={
            "path": str(path),
            "guilds": len(data.guilds),
            "schema_version": data.schema_version,
        })
        return cls(data)

    @asynccontextmanager
    async def read(self) -> AsyncIterator[GlobalData]:
        """Shared access for the duration of the block."""
        async with self._lock.read():
            yield self._data

    @asynccontextmanager
    async def write(self) -> AsyncIterator[GlobalData]:
        """Exclusive access for the duration of the block."""
        async with self._lock.write():
            yield self._data

    def snapshot(self) -> dict:
        """Serializable copy of the current tree (caller holds a lock)."""
        return self._data.to_dict()


def load_document(path: Path) -> GlobalData:
    """Load and migrate a registry document from disk."""
    if not path.exists():
        logger.info("No registry file, starting empty", data={"path": str(path)})
        data = GlobalData(schema_version=0)
    else:
        try:
            raw = path.read_text(encoding="utf-8")
            document = json.loads(raw) if raw.strip() else {}
            if not isinstance(document, dict):
                raise ValueError("registry root is not an object")
            data = GlobalData.from_dict(document)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise MigrationError(
                f"Could not read registry file {path}",
                data={"path": str(path)},
                cause=e,
            ) from e

    data.migrate()
    return data
