"""
Balance Ledger Service

Per-user nanoTON balances. Every operation runs in its own session and issues a
single statement, so increments are atomic against concurrent balance reads
from the command handlers.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database import async_managed_session
from models import User

logger = logging.getLogger(__name__)


class BalanceLedger:
    """Read/increment contract over the users table"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def exists(self, user_id: int) -> bool:
        """Check if user exists in the database"""
        async with async_managed_session(self.session_factory) as session:
            result = await session.execute(select(User.uid).where(User.uid == user_id))
            return result.scalar_one_or_none() is not None

    async def create(self, user_id: int) -> bool:
        """Add a new user with a zero balance; returns False if it already existed"""
        try:
            async with async_managed_session(self.session_factory) as session:
                existing = await session.get(User, user_id)
                if existing is not None:
                    return False
                session.add(User(uid=user_id, balance=0))
            logger.info(f"👤 USER_CREATED: uid={user_id}")
            return True
        except IntegrityError:
            # Concurrent /start for the same user
            logger.debug(f"User {user_id} created concurrently")
            return False

    async def get(self, user_id: int) -> int:
        """Balance in nanoTON, 0 when the user is unknown"""
        try:
            async with async_managed_session(self.session_factory) as session:
                result = await session.execute(select(User.balance).where(User.uid == user_id))
                balance = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to get balance for user {user_id}: {e}")
            return 0

        if balance is None:
            logger.warning(f"⚠️ Balance requested for unknown user {user_id}")
            return 0
        return balance

    async def credit(self, user_id: int, amount: int) -> bool:
        """
        Add amount to the user's balance.

        Returns True when a row was updated. A missing user is logged and
        reported as False. Database errors propagate so the caller does not
        treat an uncommitted credit as done.
        """
        try:
            async with async_managed_session(self.session_factory) as session:
                result = await session.execute(
                    update(User)
                    .where(User.uid == user_id)
                    .values(balance=User.balance + amount)
                )
                updated = result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to add balance for user {user_id}: {e}")
            raise

        if not updated:
            logger.warning(f"⚠️ Credit of {amount} skipped: user {user_id} not found")
            return False
        return True
