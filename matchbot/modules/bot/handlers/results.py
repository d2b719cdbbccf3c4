"""
Result handlers - add, remove and show a member's test results.

Mutating commands hold the registry write lock for the whole
mutate-then-persist sequence.
"""

import html

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from matchbot.common.logging import get_logger
from matchbot.core.errors import NotFoundError
from matchbot.core.persistence import PersistenceManager
from matchbot.core.registry import Registry
from matchbot.modules.compat import find_identity
from ..services.arguments import group_chat_id, parse_add_result_args, parse_headmate

router = Router()
logger = get_logger(__name__)

RESULT_URL = "https://bdsmtest.org/r/{}"


def render_results(record_label: str, history) -> str:
    """Reply text for /show_result, newest result first."""
    lines = [f"<b>Results for {html.escape(record_label)}</b>"]
    for ts, result_id in history:
        rid = html.escape(result_id)
        url = RESULT_URL.format(rid)
        lines.append(f"- {ts:%Y-%m-%d %H:%M} UTC: <a href=\"{url}\">{rid}</a>")
    return "\n".join(lines)


@router.message(Command("add_result"))
async def cmd_add_result(
    message: Message,
    command: CommandObject,
    registry: Registry,
    persistence: PersistenceManager,
):
    """Record a result for the caller or one of their headmates."""
    guild_id = group_chat_id(message)
    result_id, headmate = parse_add_result_args(command.args)

    async with registry.write() as data:
        record = (
            data.guild_mut(guild_id)
            .user_mut(message.from_user.id)
            .headmate_mut(headmate)
        )
        record.add_result(result_id)
        persistence.persist(data)

    logger.info("Result saved", data={
        "guild_id": guild_id,
        "headmate": headmate,
    })
    await message.reply("Result Saved")


@router.message(Command("remove_results"))
async def cmd_remove_results(
    message: Message,
    command: CommandObject,
    registry: Registry,
    persistence: PersistenceManager,
):
    """Remove every result of the caller's primary identity or a headmate."""
    guild_id = group_chat_id(message)
    headmate = parse_headmate(command.args)

    async with registry.write() as data:
        guild = data.guild(guild_id)
        user = guild.user(message.from_user.id) if guild is not None else None
        removed = user.remove_headmate(headmate) if user is not None else None

        if removed is None:
            raise NotFoundError(
                f"No entries found for ({html.escape(headmate)})" if headmate is not None
                else "No data for primary entry",
                data={"guild_id": guild_id, "headmate": headmate},
            )

        persistence.persist(data)

    logger.info("Entries removed", data={
        "guild_id": guild_id,
        "headmate": headmate,
        "results": len(removed.results),
    })
    await message.reply("Entries Removed")


@router.message(Command("show_result"))
async def cmd_show_result(
    message: Message,
    command: CommandObject,
    registry: Registry,
):
    """List the caller's (or a headmate's) recorded results."""
    guild_id = group_chat_id(message)
    headmate = parse_headmate(command.args)

    async with registry.read() as data:
        record = find_identity(data.guild(guild_id), message.from_user.id, headmate)
        history = record.history()

    if not history:
        raise NotFoundError(
            "No results registered for the given headmate. Use /add_result first",
            data={"headmate": headmate},
        )

    label = headmate or message.from_user.full_name
    await message.reply(render_results(label, history))
