"""
Start handler - /start and /help.
"""

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import BotCommand, Message

router = Router()

BOT_COMMANDS = [
    BotCommand(command="add_result", description="Save a test result (optionally for a headmate)"),
    BotCommand(command="remove_results", description="Remove your (or a headmate's) results"),
    BotCommand(command="list_compatibility", description="Compatibility with everyone in this group"),
    BotCommand(command="show_result", description="Show your saved results"),
    BotCommand(command="help", description="How to use this bot"),
]


def get_help_text() -> str:
    """Get usage text."""
    return (
        "<b>Compatibility Bot</b>\n\n"
        "Save your test result in a group, then compare with everyone else:\n\n"
        "/add_result &lt;result id&gt; [headmate] - save a result\n"
        "/remove_results [headmate] - remove saved results\n"
        "/list_compatibility [headmate] - ranked compatibility list\n"
        "/show_result [headmate] - your saved results\n\n"
        "<i>Leave out the headmate name to use your own entry.</i>"
    )


@router.message(CommandStart())
@router.message(Command("help"))
async def cmd_help(message: Message):
    """Show usage."""
    await message.answer(get_help_text())
