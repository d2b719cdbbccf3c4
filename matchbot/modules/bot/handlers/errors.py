"""
Error handler - turns expected MatchbotErrors into replies.

Anything else is left to aiogram's default error logging.
"""

from aiogram import Router
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import ErrorEvent

from matchbot.core.errors import MatchbotError

router = Router()


@router.error(ExceptionTypeFilter(MatchbotError))
async def on_matchbot_error(event: ErrorEvent):
    """Reply to the failing command with the error message."""
    message = event.update.message
    if message is None:
        return
    await message.reply(event.exception.message)
