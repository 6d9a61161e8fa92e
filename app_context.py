"""
Application context

Everything the handlers and the deposit monitor share, built once at startup
and passed explicitly. Handlers reach it through application.bot_data.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine
from telegram import Bot
from telegram.ext import Application

from config import Config
from database import create_engine_for_url, create_session_factory
from jobs.deposit_monitor import DepositMonitor, DepositReconciler
from services.balance_ledger import BalanceLedger
from services.deposits.checkpoint_store import CheckpointStore
from services.telegram_notification_service import TelegramNotifier
from services.toncenter_service import TonCenterService

BOT_DATA_KEY = "app_context"


@dataclass
class AppContext:
    engine: AsyncEngine
    ledger: BalanceLedger
    notifier: TelegramNotifier
    deposit_monitor: DepositMonitor
    deposit_address: str

    @classmethod
    def build(cls, bot: Bot, database_url: Optional[str] = None) -> "AppContext":
        """Wire the services from Config"""
        engine = create_engine_for_url(database_url or Config.DATABASE_URL)
        ledger = BalanceLedger(create_session_factory(engine))
        notifier = TelegramNotifier(bot)
        reconciler = DepositReconciler(
            feed=TonCenterService(),
            ledger=ledger,
            notifier=notifier,
            checkpoint_store=CheckpointStore(Config.CHECKPOINT_PATH),
            address=Config.DEPOSIT_ADDRESS,
            batch_limit=Config.TONCENTER_BATCH_LIMIT,
            api_key=Config.TONCENTER_API_KEY,
        )
        return cls(
            engine=engine,
            ledger=ledger,
            notifier=notifier,
            deposit_monitor=DepositMonitor(reconciler, Config.DEPOSIT_POLL_INTERVAL_SECONDS),
            deposit_address=Config.DEPOSIT_ADDRESS,
        )

    def attach(self, application: Application) -> None:
        application.bot_data[BOT_DATA_KEY] = self


def get_app_context(application: Application) -> AppContext:
    return application.bot_data[BOT_DATA_KEY]
