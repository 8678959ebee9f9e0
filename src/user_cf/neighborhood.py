"""Neighborhood selection: which users are similar enough to a target user."""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple

from .data import RatingStore
from .similarity import PearsonCorrelationSimilarity, UserSimilarity


logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.1


class UserNeighborhood(Protocol):
    def neighbors(self, user_id: int) -> frozenset[int]:
        ...


def _scored_candidates(user_id: int, similarity: UserSimilarity, store: RatingStore) -> List[Tuple[int, float]]:
    target = int(user_id)
    out: List[Tuple[int, float]] = []
    for other in sorted(store.all_users()):
        if other == target:
            continue
        sim = similarity.similarity(target, other)
        if sim is None:
            continue
        out.append((other, sim))
    return out


class ThresholdUserNeighborhood:
    """All other users whose (defined) similarity to the target is >= threshold."""

    def __init__(self, threshold: float, similarity: UserSimilarity, store: RatingStore) -> None:
        self.threshold = float(threshold)
        self.similarity = similarity
        self.store = store

    def neighbors(self, user_id: int) -> frozenset[int]:
        found = frozenset(
            other for other, sim in _scored_candidates(user_id, self.similarity, self.store) if sim >= self.threshold
        )
        logger.debug("Neighborhood user=%s threshold=%.3f size=%d", user_id, self.threshold, len(found))
        return found


class NearestNUserNeighborhood:
    """The `n` most similar users with similarity >= `min_similarity` (ties by user id)."""

    def __init__(
        self,
        n: int,
        similarity: UserSimilarity,
        store: RatingStore,
        *,
        min_similarity: float = float("-inf"),
    ) -> None:
        if int(n) < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        self.n = int(n)
        self.min_similarity = float(min_similarity)
        self.similarity = similarity
        self.store = store

    def neighbors(self, user_id: int) -> frozenset[int]:
        scored = [
            (other, sim)
            for other, sim in _scored_candidates(user_id, self.similarity, self.store)
            if sim >= self.min_similarity
        ]
        scored.sort(key=lambda x: (-x[1], x[0]))
        return frozenset(other for other, _ in scored[: self.n])


def threshold_neighbors(
    target: int,
    threshold: float,
    store: RatingStore,
    similarity: Optional[UserSimilarity] = None,
) -> frozenset[int]:
    """Functional form of `ThresholdUserNeighborhood.neighbors`.

    Uses Pearson similarity over `store` unless another `similarity` is given.
    """
    sim = similarity if similarity is not None else PearsonCorrelationSimilarity(store)
    return ThresholdUserNeighborhood(threshold, sim, store).neighbors(target)
