"""
Registry - guild / user / headmate result data.

- models.py: dataclass tree with get-or-insert accessors and migration
- locks.py:  read-many / write-one asyncio lock
- store.py:  Registry, the locked owner of the tree
"""

from .models import (
    CURRENT_SCHEMA_VERSION,
    GlobalData,
    GuildData,
    UserData,
    HeadmateData,
    format_timestamp,
    parse_timestamp,
)
from .locks import AsyncRWLock
from .store import Registry, load_document

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "GlobalData",
    "GuildData",
    "UserData",
    "HeadmateData",
    "format_timestamp",
    "parse_timestamp",
    "AsyncRWLock",
    "Registry",
    "load_document",
]
