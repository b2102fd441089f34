"""
Unit tests for the bid ledger.
"""

import pytest

from proxybid.core.auction import BidLedger
from proxybid.crypto import address_from_label


X = address_from_label("x")
Y = address_from_label("y")


class TestBidLedger:
    """Tests for per-bidder cumulative pledges."""

    def test_empty(self):
        ledger = BidLedger()
        assert ledger.get(X) == 0
        assert ledger.total() == 0
        assert len(ledger) == 0
        assert X not in ledger

    def test_credit_accumulates(self):
        ledger = BidLedger()
        assert ledger.credit(X, 50) == 50
        assert ledger.credit(X, 25) == 75
        assert ledger.get(X) == 75

    def test_total_sums_bidders(self):
        ledger = BidLedger()
        ledger.credit(X, 50)
        ledger.credit(Y, 70)
        assert ledger.total() == 120
        assert set(ledger.bidders()) == {X, Y}

    def test_release_zeroes_entry(self):
        ledger = BidLedger()
        ledger.credit(X, 50)
        assert ledger.release(X) == 50
        assert ledger.get(X) == 0
        assert ledger.release(X) == 0

    def test_negative_credit_rejected(self):
        ledger = BidLedger()
        with pytest.raises(ValueError):
            ledger.credit(X, -1)

    def test_view_is_read_only(self):
        ledger = BidLedger()
        ledger.credit(X, 50)
        view = ledger.view()
        assert view[X] == 50
        with pytest.raises(TypeError):
            view[X] = 0

    def test_snapshot_restore(self):
        ledger = BidLedger()
        ledger.credit(X, 50)
        snapshot = ledger.snapshot()
        ledger.credit(Y, 70)
        ledger.release(X)

        ledger.restore(snapshot)
        assert ledger.get(X) == 50
        assert ledger.get(Y) == 0
