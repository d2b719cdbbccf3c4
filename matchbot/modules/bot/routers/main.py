"""
Main router - combines all bot handlers and wires shared services.

Registry, persistence, cache and resolver are created once here and passed
to handlers as aiogram workflow data (handler keyword arguments).
"""

from typing import Optional

from aiogram import Bot, Dispatcher, Router
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from matchbot.common.logging import get_logger, CorrelationMiddleware
from matchbot.core.config import Settings, get_settings
from matchbot.core.connectors import ScoreClient
from matchbot.core.errors import PersistenceError
from matchbot.core.persistence import PersistenceManager, RetentionPolicy
from matchbot.core.registry import Registry
from matchbot.modules.compat import CompatibilityResolver, MatchupCache
from ..handlers import start, results, compatibility, errors
from ..handlers.start import BOT_COMMANDS
from ..services.members import TelegramMemberDirectory

logger = get_logger(__name__)


def create_bot(token: Optional[str]) -> Bot:
    """Create bot instance."""
    if not token:
        raise ValueError("TELEGRAM_BOT_TOKEN environment variable not set")

    return Bot(
        token=token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )


def create_persistence(settings: Settings) -> PersistenceManager:
    """Persistence manager from settings."""
    return PersistenceManager(
        registry_path=settings.registry_path,
        backup_dir=settings.backup_dir,
        retention=RetentionPolicy(
            history=settings.history_retention,
            hourly=settings.hourly_retention,
            daily=settings.daily_retention,
        ),
    )


def create_dispatcher(
    registry: Registry,
    persistence: PersistenceManager,
    cache: MatchupCache,
    resolver: CompatibilityResolver,
) -> Dispatcher:
    """Create dispatcher with all routers and shared services."""
    dp = Dispatcher(
        registry=registry,
        persistence=persistence,
        cache=cache,
        resolver=resolver,
    )

    # Add correlation ID middleware for request tracing
    dp.update.middleware(CorrelationMiddleware())

    main_router = Router()
    main_router.include_router(start.router)
    main_router.include_router(results.router)
    main_router.include_router(compatibility.router)
    main_router.include_router(errors.router)

    dp.include_router(main_router)

    return dp


async def open_registry(settings: Settings, persistence: PersistenceManager) -> Registry:
    """
    Load and migrate the registry, then write it back once.

    A migration failure propagates and stops startup. Failing to write
    the migrated document back is only logged.
    """
    registry = Registry.load(settings.registry_path)
    async with registry.write() as data:
        try:
            persistence.persist(data)
        except PersistenceError as e:
            logger.warning(f"Initial registry write failed: {e.message}")
    return registry


async def start_bot(settings: Optional[Settings] = None):
    """Start the bot."""
    settings = settings or get_settings()

    persistence = create_persistence(settings)
    registry = await open_registry(settings, persistence)

    bot = create_bot(settings.telegram_bot_token)
    score_client = ScoreClient(
        url=settings.match_url,
        timeout=settings.score_timeout_sec,
    )
    cache = MatchupCache(score_client)
    resolver = CompatibilityResolver(cache, TelegramMemberDirectory(bot))
    dp = create_dispatcher(registry, persistence, cache, resolver)

    await bot.set_my_commands(BOT_COMMANDS)

    logger.info("Starting bot...")

    try:
        await dp.start_polling(bot)
    finally:
        await score_client.aclose()
        await bot.session.close()
        logger.info("Bot stopped", data=cache.stats())


__all__ = [
    'create_bot',
    'create_persistence',
    'create_dispatcher',
    'open_registry',
    'start_bot',
]
