"""
CompatibilityResolver - ranked compatibility listing for one identity.

For a subject (member + optional headmate) in a group, every other member's
primary identity and headmates are scored against the subject's most recent
result through the MatchupCache, then sorted best first.

A failed score for one entry marks that entry invalid; the listing itself
still completes.
"""

import html
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from matchbot.common.logging import get_logger
from matchbot.core.errors import NotFoundError, ScoreServiceError
from matchbot.core.registry import GuildData, HeadmateData
from .cache import MatchupCache

logger = get_logger(__name__)

DELETED_USER_LABEL = "Deleted User"
INVALID_RESULT_LABEL = "Invalid Result"
EMPTY_LISTING_TEXT = "No other entries registered in this group yet."


class MemberDirectory(Protocol):
    """Display-name lookup on the chat platform."""

    async def display_name(self, guild_id: int, user_id: int) -> Optional[str]:
        """Display name, or None when the member cannot be found."""
        ...


@dataclass
class CompatibilityEntry:
    """One scored identity. score is None when the score lookup failed."""
    label: str
    score: Optional[int]
    user_id: int
    headmate: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.score is not None

    def sort_key(self) -> int:
        return self.score if self.score is not None else -1


@dataclass
class CompatibilityListing:
    """Subject's representative result plus ranked entries."""
    subject_result: str
    entries: List[CompatibilityEntry] = field(default_factory=list)

    @property
    def invalid_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.valid)


def find_identity(
    guild: Optional[GuildData],
    user_id: int,
    headmate: Optional[str],
) -> HeadmateData:
    """
    Locate a member's identity record in a group.

    Raises:
        NotFoundError: no data for the group, the member or the headmate
    """
    if guild is None:
        raise NotFoundError(
            "No data registered for this group, use /add_result first"
        )

    user = guild.user(user_id)
    if user is None:
        raise NotFoundError(
            "You have not registered any results. Use /add_result first"
        )

    record = user.headmate(headmate)
    if record is None:
        raise NotFoundError(
            f"Could not find headmate {html.escape(headmate)}" if headmate is not None
            else "No data for primary entry",
            data={"headmate": headmate},
        )
    return record


def entry_label(member_name: str, headmate: Optional[str]) -> str:
    if headmate is None:
        return member_name
    return f"{member_name} ({html.escape(headmate)})"


def format_score(entry: CompatibilityEntry) -> str:
    if entry.score is None:
        return INVALID_RESULT_LABEL
    return f"{entry.score:02d}%"


def render_listing(listing: CompatibilityListing, subject_label: str) -> str:
    """
    Reply text for a listing.

    Example:
        Compatibility for: Alex
        - Sam: 87%
        - Kim (Robin): Invalid Result
    """
    lines = [f"Compatibility for: {subject_label}"]
    if not listing.entries:
        lines.append(EMPTY_LISTING_TEXT)
    for entry in listing.entries:
        lines.append(f"- {entry.label}: {format_score(entry)}")
    return "\n".join(lines) + "\n"


class CompatibilityResolver:
    """Fans a subject's result out over the group through the cache."""

    def __init__(self, cache: MatchupCache, directory: MemberDirectory):
        self.cache = cache
        self.directory = directory

    async def resolve(
        self,
        guild: Optional[GuildData],
        guild_id: int,
        user_id: int,
        headmate: Optional[str] = None,
    ) -> CompatibilityListing:
        """
        Build the ranked listing for (user_id, headmate) in a group.

        The caller holds shared registry access for the whole call.

        Raises:
            NotFoundError: subject has no data or no results
        """
        subject = find_identity(guild, user_id, headmate)
        subject_result = subject.most_recent()
        if subject_result is None:
            raise NotFoundError(
                "No results registered for the given headmate. "
                "Use /add_result first",
                data={"headmate": headmate},
            )

        listing = CompatibilityListing(subject_result=subject_result)

        # Candidates are visited in ascending user id order.
        for other_id, other in guild.sorted_users():
            if other_id == user_id:
                continue

            identities = [
                (name, record.most_recent())
                for name, record in other.identities()
            ]
            identities = [(name, rid) for name, rid in identities if rid is not None]
            if not identities:
                continue

            member_name = await self._member_label(guild_id, other_id)

            for name, partner_result in identities:
                score = await self._score(subject_result, partner_result)
                listing.entries.append(CompatibilityEntry(
                    label=entry_label(member_name, name),
                    score=score,
                    user_id=other_id,
                    headmate=name,
                ))

        listing.entries.sort(key=CompatibilityEntry.sort_key, reverse=True)

        logger.info("Compatibility listing built", data={
            "guild_id": guild_id,
            "entries": len(listing.entries),
            "invalid": listing.invalid_count,
        })
        return listing

    async def _member_label(self, guild_id: int, user_id: int) -> str:
        name = await self.directory.display_name(guild_id, user_id)
        if not name:
            return DELETED_USER_LABEL
        return html.escape(name)

    async def _score(self, person: str, partner: str) -> Optional[int]:
        try:
            return await self.cache.lookup_or_compute(person, partner)
        except ScoreServiceError:
            return None
