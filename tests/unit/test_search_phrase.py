"""Unit tests for positional phrase matching."""

import pytest

from record_search.search.phrase import has_consecutive_positions


@pytest.mark.unit
class TestHasConsecutivePositions:
    def test_adjacent_tokens_match(self):
        assert has_consecutive_positions([[0, 7], [1]])

    def test_gap_does_not_match(self):
        assert not has_consecutive_positions([[0], [2]])

    def test_order_matters(self):
        assert not has_consecutive_positions([[3], [2]])

    def test_three_tokens(self):
        assert has_consecutive_positions([[4, 10], [11], [12]])
        assert not has_consecutive_positions([[4, 10], [11], [13]])

    def test_single_token(self):
        assert has_consecutive_positions([[5]])
        assert not has_consecutive_positions([[]])

    def test_no_tokens(self):
        assert not has_consecutive_positions([])
