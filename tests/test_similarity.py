from __future__ import annotations

import itertools

import numpy as np
import pytest

from user_cf.data import RatingStore, load_ratings
from user_cf.similarity import PearsonCorrelationSimilarity, pearson_correlation


def test_pearson_correlation_matches_numpy() -> None:
    x = np.array([1.0, 2.0, 4.0, 5.0])
    y = np.array([2.0, 1.0, 5.0, 4.5])

    assert pearson_correlation(x, y) == pytest.approx(float(np.corrcoef(x, y)[0, 1]))


def test_pearson_correlation_undefined_without_variance() -> None:
    assert pearson_correlation(np.array([3.0, 3.0]), np.array([1.0, 2.0])) is None
    assert pearson_correlation(np.array([1.0]), np.array([1.0])) is None


def test_perfect_and_anti_correlation(correlated_store: RatingStore) -> None:
    sim = PearsonCorrelationSimilarity(correlated_store)

    assert sim.similarity(1, 2) == 1.0
    assert sim.similarity(1, 3) == 1.0
    assert sim.similarity(1, 4) == -1.0


def test_similarity_is_symmetric(example_dataset) -> None:
    store = load_ratings(example_dataset)
    sim = PearsonCorrelationSimilarity(store)
    fresh = PearsonCorrelationSimilarity(store)

    for u, v in itertools.permutations(sorted(store.all_users()), 2):
        assert sim.similarity(u, v) == fresh.similarity(v, u)


def test_fewer_than_two_co_rated_items_is_undefined() -> None:
    store = RatingStore.from_records([(1, 10, 1.0), (1, 11, 2.0), (2, 10, 5.0), (2, 12, 1.0)])

    assert PearsonCorrelationSimilarity(store).similarity(1, 2) is None


def test_zero_variance_is_undefined_not_zero() -> None:
    store = RatingStore.from_records([(1, 10, 1.0), (1, 11, 2.0), (2, 10, 3.0), (2, 11, 3.0)])

    assert PearsonCorrelationSimilarity(store).similarity(1, 2) is None


def test_identical_rating_patterns_correlate_perfectly() -> None:
    # Co-rated items {10, 11} carry [1, 2] for both users: variance is non-zero.
    store = RatingStore.from_records(
        [(1, 10, 1.0), (1, 11, 2.0), (2, 10, 1.0), (2, 11, 2.0), (2, 12, 5.0)]
    )

    assert PearsonCorrelationSimilarity(store).similarity(1, 2) == 1.0


def test_self_similarity() -> None:
    store = RatingStore.from_records(
        [(1, 10, 1.0), (1, 11, 2.0), (2, 10, 3.0), (3, 10, 4.0), (3, 11, 4.0)]
    )
    sim = PearsonCorrelationSimilarity(store)

    assert sim.similarity(1, 1) == 1.0
    assert sim.similarity(2, 2) is None
    assert sim.similarity(3, 3) is None


def test_weighting_strengthens_widely_co_rated_correlations(correlated_store: RatingStore) -> None:
    weighted = PearsonCorrelationSimilarity(correlated_store, weighted=True)

    # Users 2 and 4 co-rate 4 of the 5 items: r = -0.9439, weighted -0.9813.
    assert weighted.similarity(1, 2) == 1.0
    plain = PearsonCorrelationSimilarity(correlated_store).similarity(2, 4)
    assert plain == pytest.approx(-3.5 / np.sqrt(13.75))
    assert weighted.similarity(2, 4) == pytest.approx(-1.0 + (1.0 - 4.0 / 6.0) * (1.0 + plain))
    assert abs(weighted.similarity(2, 4)) > abs(plain)


def test_similarities_stay_in_range(example_dataset) -> None:
    store = load_ratings(example_dataset)
    sim = PearsonCorrelationSimilarity(store, weighted=True)

    for u, v in itertools.combinations(sorted(store.all_users()), 2):
        s = sim.similarity(u, v)
        assert s is None or -1.0 <= s <= 1.0
