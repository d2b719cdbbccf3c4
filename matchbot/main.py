#!/usr/bin/env python3
"""
Matchbot - Main Entry Point

Loads .env, configures logging, opens the registry and starts polling.
"""

import asyncio
import sys

from dotenv import load_dotenv

from matchbot.common.logging import get_logger, setup_logging
from matchbot.core.config import get_settings
from matchbot.core.errors import MigrationError

logger = get_logger(__name__)


async def run():
    """Start the bot with settings from the environment."""
    settings = get_settings()
    setup_logging(
        log_file=settings.log_file,
        component="bot",
    )
    logger.info("Starting Matchbot...", data={
        "registry_path": str(settings.registry_path),
        "backup_dir": str(settings.backup_dir),
    })

    from matchbot.modules.bot.routers.main import start_bot
    await start_bot(settings)


def main():
    """Console script entry point."""
    load_dotenv()
    try:
        asyncio.run(run())
    except MigrationError as e:
        logger.error(f"Registry could not be opened: {e.message}")
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
