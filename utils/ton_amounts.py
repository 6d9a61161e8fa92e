"""
TON amount formatting

Balances and deposits are stored as integer nanoTON. Conversion to TON happens
only for display and always goes through Decimal.
"""

from decimal import Decimal, ROUND_HALF_UP

from config import Config

DISPLAY_PRECISION = Decimal("0.01")


def nanoton_to_ton(amount: int) -> Decimal:
    """Exact TON value of a nanoTON amount"""
    return Decimal(amount) / Decimal(Config.NANOTON_PER_TON)


def format_ton(amount: int) -> str:
    """nanoTON amount as a two-decimal TON string, e.g. 5000000000 -> '5.00'"""
    return str(nanoton_to_ton(amount).quantize(DISPLAY_PRECISION, rounding=ROUND_HALF_UP))
