"""Member directory backed by the Telegram Bot API."""

from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from matchbot.common.logging import get_logger

logger = get_logger(__name__)


class TelegramMemberDirectory:
    """Resolves display names with getChatMember."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def display_name(self, guild_id: int, user_id: int) -> Optional[str]:
        """Member's full name, or None if Telegram cannot resolve them."""
        try:
            member = await self.bot.get_chat_member(chat_id=guild_id, user_id=user_id)
        except TelegramAPIError as e:
            logger.debug(f"Member lookup failed: {e}", data={
                "guild_id": guild_id,
                "user_id": user_id,
            })
            return None
        return member.user.full_name
