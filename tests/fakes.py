"""Test doubles for the score service, member directory and Telegram messages."""

from typing import Callable, Dict, Optional, Set, Tuple
from unittest.mock import AsyncMock, MagicMock

from aiogram.enums import ChatType

from matchbot.core.errors import ScoreServiceError
from matchbot.modules.compat import Matchup


class FakeScoreService:
    """Score service double recording every call."""

    def __init__(
        self,
        scores: Optional[Dict[Tuple[str, str], int]] = None,
        failing: Optional[Set[str]] = None,
        default: Callable[[str, str], int] = lambda a, b: 50,
    ):
        self.scores = {Matchup.of(a, b): s for (a, b), s in (scores or {}).items()}
        self.failing = failing or set()
        self.default = default
        self.calls = []

    async def score(self, person: str, partner: str) -> int:
        self.calls.append((person, partner))
        if person in self.failing or partner in self.failing:
            raise ScoreServiceError(
                "Score service request failed",
                data={"person": person, "partner": partner},
            )
        return self.scores.get(Matchup.of(person, partner), self.default(person, partner))


class FakeDirectory:
    """Member directory double: user id -> display name, missing ids unresolvable."""

    def __init__(self, names: Optional[Dict[int, str]] = None):
        self.names = names or {}
        self.lookups = []

    async def display_name(self, guild_id: int, user_id: int) -> Optional[str]:
        self.lookups.append((guild_id, user_id))
        return self.names.get(user_id)


def make_message(
    user_id: int,
    chat_id: int = -100,
    full_name: str = "Tester",
    chat_type: str = ChatType.SUPERGROUP,
) -> MagicMock:
    """Telegram message double with an awaitable reply()."""
    message = MagicMock()
    message.from_user.id = user_id
    message.from_user.full_name = full_name
    message.chat.id = chat_id
    message.chat.type = chat_type
    message.reply = AsyncMock()
    message.answer = AsyncMock()
    return message


def make_command(args: Optional[str] = None) -> MagicMock:
    command = MagicMock()
    command.args = args
    return command


