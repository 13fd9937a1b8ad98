"""
Tests for the Random Source
"""

import pytest

from simulation.rng import NumpyRandomSource, RandomSource, choose


class TestNumpyRandomSource:
    """Tests for the numpy-backed source."""

    def test_is_random_source(self):
        """Test the source satisfies the protocol."""
        assert isinstance(NumpyRandomSource(seed=1), RandomSource)

    def test_inclusive_bounds(self):
        """Test draws cover both ends of the range and nothing outside it."""
        rng = NumpyRandomSource(seed=3)

        draws = [rng.randint(-2, 2) for _ in range(2000)]

        assert set(draws) == {-2, -1, 0, 1, 2}

    def test_single_value_range(self):
        """Test a one-value range always returns that value."""
        rng = NumpyRandomSource(seed=3)

        assert {rng.randint(7, 7) for _ in range(50)} == {7}

    def test_empty_range(self):
        """Test an inverted range is rejected."""
        with pytest.raises(ValueError):
            NumpyRandomSource(seed=3).randint(5, 4)

    def test_seed_reproducible(self):
        """Test the same seed gives the same draws."""
        first = NumpyRandomSource(seed=2024)
        second = NumpyRandomSource(seed=2024)

        assert [first.randint(-100, 100) for _ in range(100)] == [
            second.randint(-100, 100) for _ in range(100)
        ]

    def test_draws_span_block_refills(self):
        """Test draws continue in range across block boundaries."""
        rng = NumpyRandomSource(seed=9, block_size=8)

        draws = [rng.randint(0, 9) for _ in range(100)]

        assert all(0 <= draw <= 9 for draw in draws)
        assert len(set(draws)) > 1

    def test_choose(self, scripted_rng):
        """Test choose indexes with one draw over the whole list."""
        rng = scripted_rng([2])

        assert choose(rng, ["a", "b", "c"]) == "c"
        assert rng.calls == [(0, 2)]
