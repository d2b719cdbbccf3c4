"""Bot services."""

from .members import TelegramMemberDirectory
from .arguments import (
    group_chat_id,
    parse_headmate,
    parse_add_result_args,
    parse_result_id,
)

__all__ = [
    'TelegramMemberDirectory',
    'group_chat_id',
    'parse_headmate',
    'parse_add_result_args',
    'parse_result_id',
]
