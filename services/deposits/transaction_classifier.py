"""
Transaction classification

Turns raw feed entries into payment intents. A deposit is actionable when its
lt and value are integers, the value is positive and the comment is the payer's
Telegram user id written as a decimal number. Anything else is ignored.
"""

from dataclasses import dataclass
from typing import Optional

from services.toncenter_service import RawTransaction


class ClassifyError(Exception):
    """A raw transaction field could not be parsed"""

    pass


@dataclass(frozen=True)
class PaymentIntent:
    user_id: int
    amount: int  # nanoTON
    lt: int


def _parse_int(raw: Optional[str], field: str) -> int:
    if raw is None:
        raise ClassifyError(f"{field} is missing")
    text = raw.strip()
    # int() would also accept "1_000" and non-ASCII digits
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise ClassifyError(f"{field} is not an integer: {raw[:40]!r}")
    return int(text)


def parse_lt(raw: Optional[str]) -> int:
    return _parse_int(raw, "lt")


def parse_amount(raw: Optional[str]) -> int:
    amount = _parse_int(raw, "value")
    if amount <= 0:
        raise ClassifyError(f"value is not positive: {amount}")
    return amount


def parse_user_id(comment: Optional[str]) -> int:
    """The comment must be a plain decimal user id, no sign"""
    if comment is None:
        raise ClassifyError("comment is missing")
    text = comment.strip()
    if not text or not (text.isascii() and text.isdigit()):
        raise ClassifyError(f"comment is not a user id: {comment[:40]!r}")
    return int(text)


def classify(tx: RawTransaction) -> Optional[PaymentIntent]:
    """Return the payment intent carried by a transaction, or None to skip it"""
    try:
        return PaymentIntent(
            user_id=parse_user_id(tx.comment),
            amount=parse_amount(tx.value),
            lt=parse_lt(tx.lt),
        )
    except ClassifyError:
        return None
