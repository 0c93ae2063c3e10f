"""Tests for the seeded generator."""

import pytest

from py_rlmod.core.prng import MapPRNG


class TestMapPRNG:
    """Test reproducibility and helper ranges."""

    def test_same_seed_same_sequence(self):
        a = MapPRNG(114514)
        b = MapPRNG(114514)
        assert [a.random() for _ in range(20)] == [b.random() for _ in range(20)]

    def test_different_seeds(self):
        a = MapPRNG(1)
        b = MapPRNG(2)
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_random_range(self):
        prng = MapPRNG(3)
        for _ in range(1000):
            value = prng.random()
            assert 0.0 <= value < 1.0

    def test_randint_range(self):
        prng = MapPRNG(4)
        values = {prng.randint(5, 10) for _ in range(500)}
        assert values == {5, 6, 7, 8, 9}

    def test_randint_empty_range(self):
        """An empty range returns the lower bound without a draw."""
        prng = MapPRNG(5)
        assert prng.randint(7, 7) == 7
        assert prng.randint(9, 3) == 9
        assert prng.call_count == 0

    def test_call_count(self):
        prng = MapPRNG(6)
        prng.random()
        prng.randint(0, 10)
        prng.choice([1, 2, 3])
        assert prng.call_count == 3

    def test_choice_empty(self):
        with pytest.raises(IndexError):
            MapPRNG(7).choice([])

    def test_shuffle_is_permutation(self):
        prng = MapPRNG(8)
        items = list(range(50))
        prng.shuffle(items)
        assert sorted(items) == list(range(50))

    def test_sample_distinct(self):
        prng = MapPRNG(9)
        picked = prng.sample(range(100), 30)
        assert len(picked) == 30
        assert len(set(picked)) == 30
        assert all(0 <= p < 100 for p in picked)

    def test_sample_too_large(self):
        with pytest.raises(ValueError):
            MapPRNG(10).sample([1, 2], 3)

    def test_gauss_zero_std_dev(self):
        """With no spread every sample equals the mean."""
        prng = MapPRNG(11)
        assert prng.gauss(42.0, 0.0) == 42.0

    def test_gauss_reproducible(self):
        a = MapPRNG(12)
        b = MapPRNG(12)
        assert [a.gauss(0, 1) for _ in range(10)] == [b.gauss(0, 1) for _ in range(10)]
