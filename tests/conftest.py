"""
Shared fixtures for the TON deposit bot tests

- SQLite ledger on a per-test temp file (aiosqlite)
- Checkpoint store on a per-test temp file
- Scripted ledger feed and a mocked Telegram notifier
"""

import logging
from typing import List, Optional, Sequence, Union
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from database import create_engine_for_url, create_session_factory, create_tables
from jobs.deposit_monitor import DepositReconciler
from models import User
from services.balance_ledger import BalanceLedger
from services.deposits.checkpoint_store import CheckpointStore
from services.telegram_notification_service import TelegramNotifier
from services.toncenter_service import RawTransaction

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

DEPOSIT_ADDRESS = "EQDtestDepositAddress0000000000000000000000000000"


def make_tx(lt: Union[int, str], value: Union[int, str], comment: Optional[str]) -> RawTransaction:
    """RawTransaction with the API's string encoding of numbers"""
    return RawTransaction(lt=str(lt), value=str(value), comment=comment)


class ScriptedFeed:
    """Ledger feed returning queued batches (or raising queued errors) in order"""

    def __init__(self, *steps: Union[Sequence[RawTransaction], Exception]):
        self.steps: List[Union[Sequence[RawTransaction], Exception]] = list(steps)
        self.calls = []

    def push(self, step: Union[Sequence[RawTransaction], Exception]) -> None:
        self.steps.append(step)

    async def fetch_transactions(self, address, limit, api_key=None):
        self.calls.append((address, limit, api_key))
        if not self.steps:
            return []
        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return list(step)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'ledger.sqlite'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def ledger(session_factory):
    return BalanceLedger(session_factory)


@pytest.fixture
def checkpoint_path(tmp_path):
    return tmp_path / "last_lt.txt"


@pytest.fixture
def checkpoint_store(checkpoint_path):
    return CheckpointStore(checkpoint_path)


@pytest.fixture
def notifier():
    mock = AsyncMock(spec=TelegramNotifier)
    mock.send.return_value = True
    return mock


@pytest.fixture
def feed():
    return ScriptedFeed()


@pytest.fixture
def make_reconciler(feed, ledger, notifier, checkpoint_store):
    """Factory so a test can 'restart' the reconciler against the same stores"""

    def _make(**overrides) -> DepositReconciler:
        kwargs = dict(
            feed=feed,
            ledger=ledger,
            notifier=notifier,
            checkpoint_store=checkpoint_store,
            address=DEPOSIT_ADDRESS,
            batch_limit=100,
            api_key="test-api-key",
        )
        kwargs.update(overrides)
        return DepositReconciler(**kwargs)

    return _make


async def add_user(session_factory, uid: int, balance: int = 0) -> None:
    async with session_factory() as session:
        session.add(User(uid=uid, balance=balance))
        await session.commit()
