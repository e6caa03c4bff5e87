# tests/test_similarity.py
import math
import random

import pytest

from backend.recommender.similarity import cosine_similarity, jaccard_similarity, pearson_correlation


class TestCosine:
    def test_identical_vectors(self):
        a = {"i1": 2.0, "i2": 5.0, "i3": 1.0}
        assert cosine_similarity(a, a) == pytest.approx(1.0)
        assert cosine_similarity(a, dict(a)) <= 1.0

    def test_orthogonal_vectors(self):
        assert cosine_similarity({"i1": 1.0}, {"i2": 3.0}) == 0.0

    def test_known_value(self):
        a = {"item1": 2.0, "item2": 5.0}
        b = {"item1": 1.0, "item3": 3.0}
        assert cosine_similarity(a, b) == pytest.approx(2.0 / (math.sqrt(29) * math.sqrt(10)))

    def test_symmetric(self):
        a = {"x": 1.0, "y": 2.0}
        b = {"y": 4.0, "z": 1.0}
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    @pytest.mark.parametrize(
        "a,b",
        [
            ({}, {}),
            ({}, {"i1": 1.0}),
            ({"i1": 0.0}, {"i1": 3.0}),
            ({"i1": 0.0}, {"i2": 0.0}),
        ],
    )
    def test_degenerate_inputs_are_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0

    def test_bounds_on_random_non_negative_vectors(self):
        rng = random.Random(7)
        keys = [f"k{i}" for i in range(12)]
        for _ in range(200):
            a = {k: rng.choice([0.0, 1.0, 2.0, 5.0]) for k in rng.sample(keys, rng.randint(0, 12))}
            b = {k: rng.choice([0.0, 1.0, 3.0, 4.0]) for k in rng.sample(keys, rng.randint(0, 12))}
            sim = cosine_similarity(a, b)
            assert 0.0 <= sim <= 1.0


class TestJaccard:
    def test_partial_overlap(self):
        assert jaccard_similarity({"a", "b", "c"}, {"b", "c", "d"}) == pytest.approx(0.5)

    def test_identical_and_disjoint(self):
        assert jaccard_similarity({"a"}, {"a"}) == 1.0
        assert jaccard_similarity({"a"}, {"b"}) == 0.0

    def test_both_empty(self):
        assert jaccard_similarity(set(), set()) == 0.0

    def test_one_empty(self):
        assert jaccard_similarity(set(), {"a"}) == 0.0


class TestPearson:
    def test_perfect_positive(self):
        a = {"i1": 1.0, "i2": 2.0, "i3": 3.0}
        b = {"i1": 2.0, "i2": 4.0, "i3": 6.0}
        assert pearson_correlation(a, b) == pytest.approx(1.0)

    def test_perfect_negative(self):
        a = {"i1": 1.0, "i2": 2.0, "i3": 3.0}
        b = {"i1": 3.0, "i2": 2.0, "i3": 1.0}
        assert pearson_correlation(a, b) == pytest.approx(-1.0)

    def test_only_common_keys_count(self):
        a = {"i1": 1.0, "i2": 2.0, "only_a": 100.0}
        b = {"i1": 1.0, "i2": 2.0, "only_b": -50.0}
        assert pearson_correlation(a, b) == pytest.approx(1.0)

    def test_no_overlap(self):
        assert pearson_correlation({"i1": 1.0}, {"i2": 1.0}) == 0.0
        assert pearson_correlation({}, {}) == 0.0

    def test_single_common_point(self):
        assert pearson_correlation({"i1": 3.0, "i2": 1.0}, {"i1": 5.0}) == 0.0

    def test_zero_variance(self):
        a = {"i1": 2.0, "i2": 2.0, "i3": 2.0}
        b = {"i1": 1.0, "i2": 5.0, "i3": 3.0}
        assert pearson_correlation(a, b) == 0.0

    def test_zero_variance_with_inexact_floats(self):
        flat = {"i1": 0.1, "i2": 0.1, "i3": 0.1}
        assert pearson_correlation(flat, dict(flat)) == 0.0
        assert pearson_correlation(flat, {"i1": 1.0, "i2": 2.0, "i3": 4.0}) == 0.0
        assert pearson_correlation({"i1": 1.0, "i2": 2.0, "i3": 4.0}, flat) == 0.0

    def test_bounds(self):
        rng = random.Random(11)
        for _ in range(100):
            keys = [f"k{i}" for i in range(rng.randint(0, 8))]
            a = {k: rng.uniform(0, 5) for k in keys}
            b = {k: rng.uniform(0, 5) for k in keys}
            assert -1.0 <= pearson_correlation(a, b) <= 1.0
