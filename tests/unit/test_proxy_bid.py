"""
Unit tests for the proxy bid engine.

Tests cover:
1. Acceptance threshold (binding bid + increment)
2. First bid, outbidding, ceiling holding, self-raise
3. Reference scenarios A-C
4. Binding-bid invariants over random sequences
"""

import random

import pytest

from proxybid.core.auction import BidState, compute_new_state
from proxybid.core.errors import BidTooLow
from proxybid.crypto import address_from_label


X = address_from_label("x")
Y = address_from_label("y")
Z = address_from_label("z")


def apply(ledger, state, bidder, amount, increment=10):
    """Run the engine and record the pledge the way the auction does."""
    new_state = compute_new_state(
        ledger=ledger,
        current_leader=state.leader,
        current_highest_bid=state.highest_bid,
        current_binding_bid=state.binding_bid,
        bidder=bidder,
        new_pledge_amount=amount,
        increment=increment,
    )
    ledger[bidder] = ledger.get(bidder, 0) + amount
    return new_state


@pytest.fixture
def empty():
    return {}, BidState(leader=None, highest_bid=0, binding_bid=0)


class TestAcceptance:
    """Tests for the acceptance threshold."""

    def test_first_bid_must_clear_increment(self, empty):
        """With no bids, the threshold is one increment."""
        ledger, state = empty
        with pytest.raises(BidTooLow):
            apply(ledger, state, X, 9)

    def test_first_bid_at_increment_accepted(self, empty):
        ledger, state = empty
        state = apply(ledger, state, X, 10)
        assert state == BidState(leader=X, highest_bid=10, binding_bid=10)

    def test_rejection_leaves_ledger_untouched(self, empty):
        """A rejected pledge must not be counted."""
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        snapshot = dict(ledger)
        with pytest.raises(BidTooLow):
            compute_new_state(ledger, state.leader, state.highest_bid, state.binding_bid, Y, 55, 10)
        assert ledger == snapshot

    def test_invalid_increment(self, empty):
        ledger, state = empty
        with pytest.raises(ValueError):
            compute_new_state(ledger, None, 0, 0, X, 50, 0)

    def test_negative_pledge(self, empty):
        ledger, state = empty
        with pytest.raises(ValueError):
            compute_new_state(ledger, None, 0, 0, X, -5, 10)


class TestScenarios:
    """Reference scenarios with increment 10, minimum bid 0."""

    def test_scenario_a(self, empty):
        """X pledges 50, Y pledges 70: Y leads at binding 60."""
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        assert state == BidState(leader=X, highest_bid=50, binding_bid=50)

        state = apply(ledger, state, Y, 70)
        assert state == BidState(leader=Y, highest_bid=70, binding_bid=60)

    def test_scenario_b(self, empty):
        """X adding 15 (cumulative 65) is below 60 + 10."""
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, Y, 70)

        with pytest.raises(BidTooLow):
            apply(ledger, state, X, 15)
        assert ledger[X] == 50

    def test_scenario_c(self, empty):
        """X adding 25 (cumulative 75) retakes the lead at binding 75."""
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, Y, 70)

        state = apply(ledger, state, X, 25)
        assert state == BidState(leader=X, highest_bid=75, binding_bid=75)


class TestCeiling:
    """Tests for proxy-bidding against the leader's private ceiling."""

    def test_challenger_below_ceiling_raises_price(self, empty):
        """A pledge under the leader's ceiling pushes the price, not the lead."""
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, Y, 200)   # Y leads, binding 60
        state = apply(ledger, state, Z, 100)   # below Y's 200

        assert state.leader == Y
        assert state.highest_bid == 200
        assert state.binding_bid == 110

    def test_challenger_near_ceiling_caps_at_ceiling(self, empty):
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, Y, 100)   # binding 60
        state = apply(ledger, state, Z, 95)

        assert state.leader == Y
        assert state.binding_bid == 100

    def test_tie_goes_to_earlier_pledge(self, empty):
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, Y, 100)
        state = apply(ledger, state, Z, 100)

        assert state.leader == Y
        assert state.binding_bid == 100

    def test_challenger_above_ceiling_takes_lead(self, empty):
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, Y, 200)
        state = apply(ledger, state, Z, 250)

        assert state.leader == Z
        assert state.highest_bid == 250
        assert state.binding_bid == 210


class TestSelfRaise:
    """Tests for the leader increasing their own pledge."""

    def test_leader_raise_updates_ceiling(self, empty):
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        state = apply(ledger, state, X, 100)   # cumulative 150

        assert state.leader == X
        assert state.highest_bid == 150
        assert state.binding_bid == 60

    def test_leader_raise_must_clear_threshold(self, empty):
        ledger, state = empty
        state = apply(ledger, state, X, 50)
        with pytest.raises(BidTooLow):
            apply(ledger, state, X, 5)


class TestInvariants:
    """Binding bid never exceeds the ceiling and never decreases."""

    @pytest.mark.parametrize("seed", range(20))
    def test_random_sequences(self, seed, empty):
        rng = random.Random(seed)
        bidders = [address_from_label(f"bidder-{i}") for i in range(4)]
        ledger, state = empty
        increment = rng.randint(1, 20)
        previous_binding = 0

        for _ in range(60):
            bidder = rng.choice(bidders)
            amount = rng.randint(1, 80)
            try:
                state = apply(ledger, state, bidder, amount, increment)
            except BidTooLow:
                continue

            assert state.binding_bid <= state.highest_bid
            assert state.binding_bid >= previous_binding
            assert ledger[state.leader] == state.highest_bid
            assert state.highest_bid == max(ledger.values())
            previous_binding = state.binding_bid
