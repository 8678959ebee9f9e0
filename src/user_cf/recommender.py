from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

import pandas as pd

from .data import RatingStore
from .errors import UnknownUserError
from .neighborhood import DEFAULT_THRESHOLD, ThresholdUserNeighborhood, UserNeighborhood
from .similarity import PearsonCorrelationSimilarity, UserSimilarity


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommendedItem:
    item_id: int
    score: float

    def __str__(self) -> str:
        return f"RecommendedItem[item:{self.item_id}, value:{self.score:.6g}]"


@dataclass(frozen=True)
class SimilarUser:
    user_id: int
    similarity: float
    co_rated: int


class Recommender(Protocol):
    def recommend(self, user_id: int, top_n: int) -> List[RecommendedItem]:
        ...

    def estimate_preference(self, user_id: int, item_id: int) -> Optional[float]:
        ...


RecommenderBuilder = Callable[[RatingStore], Recommender]


class UserBasedRecommender:
    """User-based CF: similarity-weighted average of neighbor ratings.

    For a target user u and an item i the predicted score is

        sum(sim(u, v) * r(v, i)) / sum(|sim(u, v)|)

    over the neighbors v of u that rated i. Items whose weight sum is zero
    cannot be scored and are left out.
    """

    def __init__(
        self,
        store: RatingStore,
        neighborhood: UserNeighborhood,
        similarity: UserSimilarity,
        *,
        min_support: int = 1,
    ) -> None:
        self.store = store
        self.neighborhood = neighborhood
        self.similarity = similarity
        self.min_support = max(1, int(min_support))

    def _require_user(self, user_id: int) -> int:
        uid = int(user_id)
        if not self.store.has_user(uid):
            raise UnknownUserError(uid)
        return uid

    def recommend(self, user_id: int, top_n: int) -> List[RecommendedItem]:
        """Top-`top_n` unrated items for `user_id`, best first (ties by item id)."""
        uid = self._require_user(user_id)
        if int(top_n) < 1:
            raise ValueError(f"top_n must be >= 1, got {top_n}")

        neighbors = self.neighborhood.neighbors(uid)
        if not neighbors:
            logger.info("No neighbors for user=%d; nothing to recommend", uid)
            return []

        sim_w = {}
        for v in neighbors:
            sim = self.similarity.similarity(uid, v)
            if sim is not None:
                sim_w[int(v)] = float(sim)

        ratings = self.store.frame
        neigh_r = ratings[ratings["user_id"].isin(list(sim_w))].copy()

        seen = self.store.user_vector(uid)
        if seen:
            neigh_r = neigh_r[~neigh_r["item_id"].isin(list(seen))]
        if neigh_r.empty:
            return []

        neigh_r["w"] = neigh_r["user_id"].map(sim_w).astype(float)
        neigh_r["abs_w"] = neigh_r["w"].abs()
        neigh_r["weighted"] = neigh_r["w"] * neigh_r["value"]

        agg = neigh_r.groupby("item_id", as_index=False).agg(
            score=("weighted", "sum"),
            w_sum=("abs_w", "sum"),
            support=("user_id", "nunique"),
        )
        agg = agg[(agg["w_sum"] > 0.0) & (agg["support"] >= self.min_support)].copy()
        agg["score"] = agg["score"] / agg["w_sum"]
        agg = agg.sort_values(["score", "item_id"], ascending=[False, True], kind="mergesort").head(int(top_n))

        return [RecommendedItem(item_id=int(i), score=float(s)) for i, s in zip(agg["item_id"], agg["score"])]

    def estimate_preference(self, user_id: int, item_id: int) -> Optional[float]:
        """Predicted rating of `item_id` by `user_id`, or None if it cannot be estimated.

        A rating the user already gave is returned as is.
        """
        uid = self._require_user(user_id)
        own = self.store.preference(uid, item_id)
        if own is not None:
            return own

        neighbors = self.neighborhood.neighbors(uid)
        numerator = 0.0
        weight_sum = 0.0
        support = 0
        for v, value in self.store.ratings_for_item(item_id):
            if v not in neighbors:
                continue
            sim = self.similarity.similarity(uid, v)
            if sim is None:
                continue
            numerator += sim * value
            weight_sum += abs(sim)
            support += 1

        if weight_sum == 0.0 or support < self.min_support:
            return None
        return numerator / weight_sum

    def most_similar_users(self, user_id: int, n: int = 10) -> List[SimilarUser]:
        """Other users ranked by defined similarity to `user_id` (ties by user id)."""
        uid = self._require_user(user_id)
        out: List[SimilarUser] = []
        for other in self.store.all_users():
            if other == uid:
                continue
            sim = self.similarity.similarity(uid, other)
            if sim is None:
                continue
            co_rated = len(self.store.user_vector(uid).keys() & self.store.user_vector(other).keys())
            out.append(SimilarUser(user_id=int(other), similarity=float(sim), co_rated=co_rated))
        out.sort(key=lambda s: (-s.similarity, s.user_id))
        return out[: int(n)]


def build_recommender(
    store: RatingStore,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    weighted: bool = False,
    min_support: int = 1,
) -> UserBasedRecommender:
    """Pearson similarity + threshold neighborhood + user-based recommender over `store`."""
    similarity = PearsonCorrelationSimilarity(store, weighted=weighted)
    neighborhood = ThresholdUserNeighborhood(threshold, similarity, store)
    return UserBasedRecommender(store, neighborhood, similarity, min_support=min_support)


def recommendations_frame(items: List[RecommendedItem]) -> pd.DataFrame:
    return pd.DataFrame([r.__dict__ for r in items], columns=["item_id", "score"])
