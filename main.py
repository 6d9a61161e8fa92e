#!/usr/bin/env python3
"""
TON Deposit Bot - entry point

Startup sequence:
- validate configuration
- build the Telegram application and the application context
- on post_init: verify the database, create tables, start the deposit monitor
- run long polling until interrupted
- on post_stop/post_shutdown: stop the deposit monitor, dispose the engine
"""

import logging
import sys

from telegram.ext import Application

from app_context import AppContext, get_app_context
from config import Config, ConfigurationError
from database import create_tables, dispose_engine, verify_connection
from handlers.commands import register_command_handlers

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # Each getUpdates long poll is logged at INFO by httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def on_post_init(application: Application) -> None:
    """Database checks and background task start, once the bot is initialized"""
    app_context = get_app_context(application)

    logger.info("🗄️ Initializing database...")
    if not await verify_connection(app_context.engine):
        raise RuntimeError("Database connection test failed")
    await create_tables(app_context.engine)

    await app_context.deposit_monitor.start()


async def on_post_stop(application: Application) -> None:
    await get_app_context(application).deposit_monitor.stop(timeout=30)


async def on_post_shutdown(application: Application) -> None:
    await dispose_engine(get_app_context(application).engine)


def build_application() -> Application:
    """Create the Telegram application with handlers and context attached"""
    application = (
        Application.builder()
        .token(Config.BOT_TOKEN)
        .post_init(on_post_init)
        .post_stop(on_post_stop)
        .post_shutdown(on_post_shutdown)
        .build()
    )

    AppContext.build(application.bot).attach(application)
    register_command_handlers(application)
    return application


def main() -> None:
    setup_logging()
    logger.info("🚀 Starting TON deposit bot...")

    try:
        Config.validate()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    Config.log_configuration()

    application = build_application()

    logger.info("📡 Bot is running (polling mode)...")
    application.run_polling()
    logger.info("👋 Bot stopped")


if __name__ == "__main__":
    main()
