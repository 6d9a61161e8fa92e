"""
Transaction classification tests
Which feed entries become payment intents and which are ignored
"""

import pytest

from conftest import make_tx
from services.deposits.transaction_classifier import (
    ClassifyError,
    PaymentIntent,
    classify,
    parse_amount,
    parse_lt,
    parse_user_id,
)
from services.toncenter_service import RawTransaction


class TestClassifyAccepts:
    """Well-formed deposits produce an intent"""

    def test_valid_deposit(self):
        intent = classify(make_tx(101, 5_000_000_000, "42"))
        assert intent == PaymentIntent(user_id=42, amount=5_000_000_000, lt=101)

    def test_comment_whitespace_is_ignored(self):
        intent = classify(make_tx(7, 1, "  42\n"))
        assert intent is not None
        assert intent.user_id == 42

    def test_large_lt_and_user_id(self):
        intent = classify(make_tx(48_123_456_000_003, 1, "7123456789"))
        assert intent == PaymentIntent(user_id=7_123_456_789, amount=1, lt=48_123_456_000_003)

    def test_classify_is_deterministic(self):
        tx = make_tx(5, 10, "1")
        assert classify(tx) == classify(tx)


class TestClassifyRejects:
    """Malformed or irrelevant entries are skipped, never raised"""

    @pytest.mark.parametrize("comment", ["hello", "", "   ", "42abc", "4 2", "-42", "+42", "4.2", "٤٢", None])
    def test_non_numeric_comment(self, comment):
        assert classify(make_tx(10, 1_000, comment)) is None

    @pytest.mark.parametrize("value", [0, -1, "-5000"])
    def test_zero_or_negative_value(self, value):
        assert classify(make_tx(10, value, "42")) is None

    @pytest.mark.parametrize("value", ["", "abc", "1e9", "1.5", "1_000"])
    def test_unparsable_value(self, value):
        assert classify(make_tx(10, value, "42")) is None

    @pytest.mark.parametrize("lt", ["", "not-a-number", "12.5", "0x10"])
    def test_unparsable_lt(self, lt):
        assert classify(make_tx(lt, 1_000, "42")) is None

    def test_missing_inbound_message(self):
        # decode_transactions produces this for transactions without in_msg
        assert classify(RawTransaction(lt="10", value="", comment=None)) is None


class TestFieldParsers:
    def test_parse_lt_accepts_integers(self):
        assert parse_lt("123") == 123

    def test_parse_lt_rejects_garbage(self):
        with pytest.raises(ClassifyError):
            parse_lt("abc")

    def test_parse_amount_requires_positive(self):
        with pytest.raises(ClassifyError, match="not positive"):
            parse_amount("0")

    def test_parse_user_id_rejects_sign(self):
        with pytest.raises(ClassifyError):
            parse_user_id("-1")
