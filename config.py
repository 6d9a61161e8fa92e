"""Configuration management for the TON Deposit Bot"""

import os
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised at startup when a required setting is missing or invalid"""

    pass


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid integer for {name}={raw!r} - using default {default}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid number for {name}={raw!r} - using default {default}")
        return default


class Config:
    """Application configuration"""

    # Telegram
    BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN") or os.getenv("BOT_TOKEN")

    # TON Center ledger API
    TONCENTER_API_KEY = os.getenv("TONCENTER_API_KEY")
    TONCENTER_BASE_URL = os.getenv("TONCENTER_BASE_URL", "https://toncenter.com/api/v2").rstrip("/")
    TONCENTER_BATCH_LIMIT = _int_env("TONCENTER_BATCH_LIMIT", 100)
    TONCENTER_TIMEOUT_SECONDS = _float_env("TONCENTER_TIMEOUT_SECONDS", 30.0)

    # Single watched deposit address
    DEPOSIT_ADDRESS = os.getenv("DEPOSIT_ADDRESS")

    # Reconciliation loop
    DEPOSIT_POLL_INTERVAL_SECONDS = _float_env("DEPOSIT_POLL_INTERVAL_SECONDS", 2.0)
    CHECKPOINT_PATH = os.getenv("CHECKPOINT_PATH", "last_lt.txt")

    # Balance ledger storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./db.sqlite")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # 1 TON = 10^9 nanoTON
    NANOTON_PER_TON = 10**9

    @staticmethod
    def validate():
        """Validate the settings the bot cannot start without"""
        missing = []
        if not Config.BOT_TOKEN:
            missing.append("TELEGRAM_BOT_TOKEN")
        if not Config.DEPOSIT_ADDRESS:
            missing.append("DEPOSIT_ADDRESS")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        if not 0 < Config.TONCENTER_BATCH_LIMIT <= 100:
            raise ConfigurationError(
                f"TONCENTER_BATCH_LIMIT must be between 1 and 100, got {Config.TONCENTER_BATCH_LIMIT}"
            )
        if Config.DEPOSIT_POLL_INTERVAL_SECONDS <= 0:
            raise ConfigurationError("DEPOSIT_POLL_INTERVAL_SECONDS must be positive")

        if not Config.TONCENTER_API_KEY:
            logger.warning("⚠️ TONCENTER_API_KEY not configured - requests will be rate limited")

    @staticmethod
    def log_configuration():
        """Log current configuration for debugging (secrets masked)"""
        from utils.data_sanitizer import mask_api_key_safe

        logger.info("🔧 Bot Configuration:")
        logger.info(f"   Deposit address: {Config.DEPOSIT_ADDRESS}")
        logger.info(f"   TON Center: {Config.TONCENTER_BASE_URL}")
        logger.info(f"   TON Center API key: {mask_api_key_safe(Config.TONCENTER_API_KEY)}")
        logger.info(f"   Batch limit: {Config.TONCENTER_BATCH_LIMIT}")
        logger.info(f"   Poll interval: {Config.DEPOSIT_POLL_INTERVAL_SECONDS}s")
        logger.info(f"   Checkpoint file: {Config.CHECKPOINT_PATH}")
        logger.info(f"   Database: {Config.DATABASE_URL.split('://', 1)[0]}")
