"""
Deposit Monitor - credits TON deposits to user balances

Polls the watched deposit address on a fixed interval, classifies incoming
transactions, credits each new payment intent once and advances the lt
checkpoint so restarts do not replay deposits.

Cycle: fetch -> classify -> filter by checkpoint -> credit -> notify -> save checkpoint
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from services.balance_ledger import BalanceLedger
from services.deposits.checkpoint_store import CheckpointStore
from services.deposits.transaction_classifier import PaymentIntent, classify
from services.telegram_notification_service import TelegramNotifier, format_deposit_confirmation
from services.toncenter_service import DecodeError, FetchError, RawTransaction, TonCenterService
from utils.ton_amounts import format_ton

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    fetched: int = 0
    discarded: int = 0
    already_processed: int = 0
    duplicates: int = 0
    credited: int = 0
    unknown_user: int = 0
    checkpoint_save_failures: int = 0
    checkpoint_before: int = 0
    checkpoint_after: int = 0

    @property
    def processed(self) -> int:
        return self.credited + self.unknown_user


class DepositReconciler:
    """Applies feed batches to the balance ledger exactly once per lt"""

    def __init__(
        self,
        feed: TonCenterService,
        ledger: BalanceLedger,
        notifier: TelegramNotifier,
        checkpoint_store: CheckpointStore,
        address: str,
        batch_limit: int,
        api_key: Optional[str] = None,
    ):
        self.feed = feed
        self.ledger = ledger
        self.notifier = notifier
        self.checkpoint_store = checkpoint_store
        self.address = address
        self.batch_limit = batch_limit
        self.api_key = api_key
        self.checkpoint = checkpoint_store.load()

    async def run_cycle(self) -> CycleReport:
        """
        Fetch the latest batch and apply it.

        Raises:
            FetchError, DecodeError: the batch could not be obtained; nothing
                was applied and the checkpoint is unchanged
            SQLAlchemyError: the ledger failed midway; intents applied before
                the failure stay committed and checkpointed
        """
        transactions = await self.feed.fetch_transactions(
            self.address, self.batch_limit, self.api_key
        )
        return await self.process_batch(transactions)

    async def process_batch(self, transactions: Sequence[RawTransaction]) -> CycleReport:
        start = self.checkpoint
        report = CycleReport(
            fetched=len(transactions),
            checkpoint_before=start,
            checkpoint_after=start,
        )

        intents: List[PaymentIntent] = []
        seen_lts = set()
        for tx in transactions:
            intent = classify(tx)
            if intent is None:
                report.discarded += 1
                continue
            if intent.lt <= start:
                report.already_processed += 1
                continue
            if intent.lt in seen_lts:
                report.duplicates += 1
                continue
            seen_lts.add(intent.lt)
            intents.append(intent)

        # Ascending lt: a ledger failure never leaves the saved checkpoint above the failed intent
        intents.sort(key=lambda i: i.lt)

        for intent in intents:
            # Only credited intents move the checkpoint
            if not await self._apply_intent(intent, report):
                continue

            self.checkpoint = max(self.checkpoint, intent.lt)
            report.checkpoint_after = self.checkpoint
            if not self.checkpoint_store.save(self.checkpoint):
                report.checkpoint_save_failures += 1

        return report

    async def _apply_intent(self, intent: PaymentIntent, report: CycleReport) -> bool:
        """Credit one intent and notify the user; returns True when credited"""
        if not await self.ledger.exists(intent.user_id):
            logger.warning(
                f"⚠️ DEPOSIT_UNKNOWN_USER: lt={intent.lt} uid={intent.user_id} "
                f"amount={intent.amount} - not credited"
            )
            report.unknown_user += 1
            return False

        if not await self.ledger.credit(intent.user_id, intent.amount):
            report.unknown_user += 1
            return False

        report.credited += 1
        logger.info(
            f"💰 DEPOSIT_CREDITED: lt={intent.lt} uid={intent.user_id} "
            f"amount={intent.amount} ({format_ton(intent.amount)} TON)"
        )

        # Credit is already committed
        try:
            await self.notifier.send(intent.user_id, format_deposit_confirmation(intent.amount))
        except Exception:
            logger.exception(f"❌ DEPOSIT_NOTIFY_FAILED: lt={intent.lt} uid={intent.user_id}")
        return True


class DepositMonitor:
    """Background task running the reconciler on a fixed interval"""

    def __init__(self, reconciler: DepositReconciler, interval: float):
        self.reconciler = reconciler
        self.interval = interval
        self.task: Optional[asyncio.Task] = None
        self.cycles_run = 0
        self.last_report: Optional[CycleReport] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    async def start(self):
        """Start the background task"""
        if self.running:
            logger.warning("Deposit monitor already running")
            return

        self._stop_event = asyncio.Event()
        self.task = asyncio.create_task(self._run_loop(), name="deposit-monitor")
        logger.info(
            f"✅ Deposit monitor started (interval={self.interval}s, "
            f"checkpoint lt={self.reconciler.checkpoint})"
        )

    async def stop(self, timeout: Optional[float] = None):
        """
        Stop the background task.

        The loop exits at its next sleep boundary, so a cycle in progress
        finishes (including its checkpoint write). With a timeout, a cycle
        still running after it is cancelled.
        """
        if self.task is None:
            return

        if self._stop_event is not None:
            self._stop_event.set()

        try:
            await asyncio.wait_for(asyncio.shield(self.task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"⚠️ Deposit monitor did not stop within {timeout}s - cancelling")
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

        self.task = None
        logger.info("✅ Deposit monitor stopped")

    async def run_once(self) -> Optional[CycleReport]:
        """Run a single guarded cycle; errors are logged, never raised"""
        try:
            report = await self.reconciler.run_cycle()
        except FetchError as e:
            logger.warning(f"⚠️ DEPOSIT_FETCH_FAILED: {e}")
            return None
        except DecodeError as e:
            logger.error(f"❌ DEPOSIT_DECODE_FAILED: {e}")
            return None
        except SQLAlchemyError as e:
            logger.error(
                f"❌ DEPOSIT_LEDGER_FAILED: {e} - checkpoint held at lt={self.reconciler.checkpoint}"
            )
            return None
        except Exception:
            logger.exception("❌ Unexpected error in deposit cycle")
            return None
        finally:
            self.cycles_run += 1

        self.last_report = report
        if report.processed or report.checkpoint_save_failures:
            logger.info(
                f"Deposit cycle: fetched={report.fetched} credited={report.credited} "
                f"unknown_user={report.unknown_user} skipped={report.already_processed} "
                f"checkpoint {report.checkpoint_before} -> {report.checkpoint_after}"
            )
        return report

    async def _run_loop(self):
        """Main loop: one cycle, then wait for the interval or a stop request"""
        stop_event = self._stop_event
        while not stop_event.is_set():
            await self.run_once()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
