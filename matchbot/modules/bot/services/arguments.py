"""Command argument parsing for the bot handlers."""

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from aiogram.enums import ChatType
from aiogram.types import Message

from matchbot.core.errors import CommandUsageError

URL_PATTERN = re.compile(r'^https?://', re.IGNORECASE)
RESULT_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

GROUP_CHAT_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)

ADD_RESULT_USAGE = "/add_result &lt;result id&gt; [headmate name]"


def group_chat_id(message: Message) -> int:
    """
    Chat id of the group a command was sent in.

    Raises:
        CommandUsageError: command sent outside a group chat
    """
    if message.chat.type not in GROUP_CHAT_TYPES:
        raise CommandUsageError("Must be used in a group chat")
    return message.chat.id


def parse_headmate(args: Optional[str]) -> Optional[str]:
    """Headmate name from the rest of the command line; None for primary."""
    if args is None:
        return None
    name = " ".join(args.split())
    return name or None


def parse_result_id(token: str) -> str:
    """
    Result id from a bare id or a pasted result link.

    Examples:
        >>> parse_result_id("abc123")
        'abc123'
        >>> parse_result_id("https://bdsmtest.org/r/abc123")
        'abc123'

    Raises:
        CommandUsageError: token is not a usable id
    """
    token = token.strip()
    if URL_PATTERN.match(token):
        segments = [s for s in urlparse(token).path.split('/') if s]
        token = segments[-1] if segments else ""

    if not token or not RESULT_ID_PATTERN.match(token):
        raise CommandUsageError(
            f"Invalid result id. Usage: {ADD_RESULT_USAGE}",
            data={"token": token},
        )
    return token


def parse_add_result_args(args: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Split '/add_result <result id> [headmate name...]'.

    Returns:
        (result id, headmate name or None)
    """
    if not args or not args.strip():
        raise CommandUsageError(
            f"Usage: {ADD_RESULT_USAGE}"
        )
    parts = args.strip().split(maxsplit=1)
    result_id = parse_result_id(parts[0])
    headmate = parse_headmate(parts[1]) if len(parts) > 1 else None
    return result_id, headmate
