"""
Unit tests for nadfun.utils.

Tests address helpers and logger configuration.
"""

import logging

import pytest

from nadfun.utils import (
    ZERO_ADDRESS,
    address_set,
    get_logger,
    is_zero_address,
    same_address,
    setup_logging,
    sort_token_pair,
    to_checksum,
    to_hex,
)

from conftest import addr


class TestAddressUtils:
    """Test address helpers."""

    def test_to_checksum(self):
        assert to_checksum(addr(0xAB).lower()) == addr(0xAB)

    def test_same_address_ignores_case(self):
        assert same_address(addr(1), addr(1).lower())
        assert not same_address(addr(1), addr(2))
        assert not same_address(None, addr(1))

    def test_is_zero_address(self):
        assert is_zero_address(ZERO_ADDRESS)
        assert is_zero_address(None)
        assert is_zero_address("")
        assert not is_zero_address(addr(1))

    def test_address_set(self):
        assert address_set(None) is None
        assert address_set([]) == set()
        assert address_set([addr(0xAB), addr(0xAB).lower()]) == {addr(0xAB).lower()}

    def test_sort_token_pair(self):
        low, high = addr(0x10), addr(0xFFFF)
        assert sort_token_pair(high, low) == (low, high)
        assert sort_token_pair(low, high) == (low, high)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            (b"\x01\x02", "0x0102"),
            ("abcd", "0xabcd"),
            ("0xabcd", "0xabcd"),
        ],
    )
    def test_to_hex(self, value, expected):
        assert to_hex(value) == expected


class TestLogging:
    """Test logger setup."""

    def test_get_logger_attaches_single_handler(self):
        logger = get_logger("nadfun.tests.single")
        again = get_logger("nadfun.tests.single")

        assert logger is again
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO

    def test_get_logger_keeps_existing_level(self):
        logging.getLogger("nadfun.tests.level").setLevel(logging.DEBUG)
        assert get_logger("nadfun.tests.level").level == logging.DEBUG

    def test_minimal_format(self):
        logger = get_logger("nadfun.tests.minimal", minimal=True)
        assert logger.handlers[0].formatter._fmt == "%(asctime)s | %(message)s"

    def test_setup_logging_quiets_transport(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging(logging.DEBUG)
            assert len(root.handlers) == 1
            assert logging.getLogger("web3").level == logging.WARNING
            assert logging.getLogger("nadfun").level == logging.DEBUG
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
