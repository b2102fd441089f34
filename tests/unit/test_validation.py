"""
Unit tests for input validation.
"""

import pytest

from proxybid.utils.validation import (
    MAX_AMOUNT,
    validate_address,
    validate_amount,
    validate_hex_string,
    validate_step_data,
    validate_string,
)


class TestScalars:
    """Tests for scalar validators."""

    @pytest.mark.parametrize("value", [0, 1, MAX_AMOUNT])
    def test_valid_amounts(self, value):
        assert validate_amount(value) == (True, "")

    @pytest.mark.parametrize("value", [-1, MAX_AMOUNT + 1, True, 1.0, "5", None])
    def test_invalid_amounts(self, value):
        valid, err = validate_amount(value)
        assert not valid
        assert "amount" in err

    def test_address(self):
        assert validate_address(b"\x01" * 20)[0]
        assert not validate_address(b"\x01" * 21)[0]
        assert not validate_address("0x" + "01" * 20)[0]

    def test_string(self):
        assert validate_string("", "name")[0]
        assert not validate_string("", "name", allow_empty=False)[0]
        assert not validate_string("x" * 2000, "name")[0]

    def test_hex_string(self):
        assert validate_hex_string("0xabcd", "h", expected_bytes=2)[0]
        assert not validate_hex_string("0xabc", "h")[0]
        assert not validate_hex_string("0xzz", "h")[0]
        assert not validate_hex_string("abcd", "h", expected_bytes=3)[0]


class TestStepData:
    """Tests for simulation script steps."""

    def test_bid_step(self):
        assert validate_step_data({"op": "bid", "party": "x", "at": 10, "amount": 5}) == (True, "")

    def test_settlement_steps(self):
        for op in ("cancel", "finalize", "end_early", "withdraw"):
            assert validate_step_data({"op": op, "party": "seller", "at": 10})[0]

    def test_missing_field(self):
        valid, err = validate_step_data({"op": "bid", "party": "x"})
        assert not valid
        assert "at" in err

    def test_bid_needs_amount(self):
        valid, err = validate_step_data({"op": "bid", "party": "x", "at": 1})
        assert not valid
        assert "amount" in err

    def test_unknown_op(self):
        valid, err = validate_step_data({"op": "steal", "party": "x", "at": 1})
        assert not valid
        assert "steal" in err

    def test_not_a_dict(self):
        assert not validate_step_data(["bid"])[0]

    def test_negative_time(self):
        assert not validate_step_data({"op": "cancel", "party": "x", "at": -1})[0]
