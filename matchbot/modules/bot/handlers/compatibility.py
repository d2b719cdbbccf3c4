"""
Compatibility handler - /list_compatibility.

Holds shared registry access while the listing is built.
"""

import html

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from matchbot.core.registry import Registry
from matchbot.modules.compat import CompatibilityResolver, render_listing
from ..services.arguments import group_chat_id, parse_headmate

router = Router()


@router.message(Command("list_compatibility"))
async def cmd_list_compatibility(
    message: Message,
    command: CommandObject,
    registry: Registry,
    resolver: CompatibilityResolver,
):
    """List the caller's compatibility with everyone else in the group."""
    guild_id = group_chat_id(message)
    headmate = parse_headmate(command.args)

    async with registry.read() as data:
        listing = await resolver.resolve(
            data.guild(guild_id),
            guild_id,
            message.from_user.id,
            headmate,
        )

    subject_label = html.escape(headmate or message.from_user.full_name)
    await message.reply(render_listing(listing, subject_label))
