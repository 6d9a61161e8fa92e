"""
TON Deposit Bot - Database Schema
=================================

Balance ledger for Telegram users topping up with TON:
- One row per Telegram user, created on first /start
- Balance held as an integer number of nanoTON (10^9 per TON)
"""

from sqlalchemy import BigInteger, CheckConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class User(Base):
    """Telegram user account with its nanoTON balance"""
    __tablename__ = 'users'

    # Telegram user id, also the comment payers put on deposits
    uid: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")

    __table_args__ = (
        CheckConstraint('balance >= 0', name='ck_users_balance_non_negative'),
    )

    def __repr__(self) -> str:
        return f"<User uid={self.uid} balance={self.balance}>"
