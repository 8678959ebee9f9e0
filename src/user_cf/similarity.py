"""User-user similarity over co-rated items."""
from __future__ import annotations

import logging
from typing import Optional, Protocol, Tuple

import numpy as np

from .data import RatingStore


logger = logging.getLogger(__name__)

MIN_CO_RATED = 2


class UserSimilarity(Protocol):
    def similarity(self, user_a: int, user_b: int) -> Optional[float]:
        """Similarity in [-1, 1], or None when it is undefined for the pair."""
        ...


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> Optional[float]:
    """Pearson's r for two paired vectors; None if either has zero variance."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape or x.size < MIN_CO_RATED:
        return None
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = float(np.sqrt(np.dot(dx, dx) * np.dot(dy, dy)))
    if denominator == 0.0 or not np.isfinite(denominator):
        return None
    r = float(np.dot(dx, dy)) / denominator
    return min(1.0, max(-1.0, r))


def _apply_count_weighting(r: float, n_common: int, n_items: int) -> float:
    # The more of the catalogue two users co-rate, the closer r is pushed to +-1.
    scale = 1.0 - n_common / float(n_items + 1)
    if r < 0.0:
        return -1.0 + scale * (1.0 + r)
    return 1.0 - scale * (1.0 - r)


class PearsonCorrelationSimilarity:
    """Pearson correlation between two users' ratings on the items both rated.

    Undefined (None) when fewer than two items are co-rated or when either
    rating vector has no variance. Pairs are evaluated in canonical order and
    memoised, so `similarity(u, v) == similarity(v, u)` holds exactly.
    """

    def __init__(self, store: RatingStore, *, weighted: bool = False) -> None:
        self.store = store
        self.weighted = bool(weighted)
        self._cache: dict[Tuple[int, int], Optional[float]] = {}

    def similarity(self, user_a: int, user_b: int) -> Optional[float]:
        a, b = int(user_a), int(user_b)
        key = (a, b) if a <= b else (b, a)
        if key not in self._cache:
            self._cache[key] = self._compute(*key)
        return self._cache[key]

    def _compute(self, a: int, b: int) -> Optional[float]:
        va = self.store.user_vector(a)
        vb = self.store.user_vector(b)
        common = sorted(va.keys() & vb.keys())
        if len(common) < MIN_CO_RATED:
            return None

        x = np.fromiter((va[i] for i in common), dtype=np.float64, count=len(common))
        if a == b:
            return 1.0 if float(np.ptp(x)) > 0.0 else None

        y = np.fromiter((vb[i] for i in common), dtype=np.float64, count=len(common))
        r = pearson_correlation(x, y)
        if r is None:
            return None
        if self.weighted:
            r = _apply_count_weighting(r, len(common), self.store.num_items)
        return min(1.0, max(-1.0, r))
