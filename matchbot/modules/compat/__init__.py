"""
Compat - compatibility scoring.

- cache.py:    MatchupCache, symmetric memoization over the score service
- resolver.py: CompatibilityResolver, ranked listing for one identity
"""

from .cache import Matchup, MatchupCache
from .resolver import (
    CompatibilityEntry,
    CompatibilityListing,
    CompatibilityResolver,
    MemberDirectory,
    DELETED_USER_LABEL,
    INVALID_RESULT_LABEL,
    EMPTY_LISTING_TEXT,
    find_identity,
    render_listing,
)

__all__ = [
    "Matchup",
    "MatchupCache",
    "CompatibilityEntry",
    "CompatibilityListing",
    "CompatibilityResolver",
    "MemberDirectory",
    "DELETED_USER_LABEL",
    "INVALID_RESULT_LABEL",
    "EMPTY_LISTING_TEXT",
    "find_identity",
    "render_listing",
]
