"""
Deposit processing services

Checkpointing and classification used by the deposit monitor to credit
incoming TON transfers exactly once.
"""

from .checkpoint_store import CheckpointStore
from .transaction_classifier import ClassifyError, PaymentIntent, classify

__all__ = ["CheckpointStore", "ClassifyError", "PaymentIntent", "classify"]
