"""Hold-out evaluation of a recommender by mean absolute error (MAE).

Each user takes part in an evaluation with probability `test_fraction`. Each
rating of a participating user goes to the training set with probability
`train_fraction` and is held out otherwise. A fresh recommender is built on
the training set and asked to estimate every held-out rating. Points it cannot
estimate are skipped and counted, never scored as zero error. The split is
random: fix `seed` for reproducible numbers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .data import RatingStore
from .errors import InsufficientDataError, UnknownUserError
from .recommender import RecommenderBuilder, build_recommender


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one evaluation. `mae` is None when no point could be estimated."""

    mae: Optional[float]
    n_evaluated: int
    n_skipped: int
    n_train: int
    n_test: int

    @property
    def is_defined(self) -> bool:
        return self.mae is not None

    def value(self) -> float:
        if self.mae is None:
            raise InsufficientDataError(
                f"no held-out rating could be estimated (test points={self.n_test}, skipped={self.n_skipped})"
            )
        return self.mae

    def __str__(self) -> str:
        return "undefined" if self.mae is None else f"{self.mae:.6f}"


def _check_fractions(train_fraction: float, test_fraction: float) -> None:
    if not 0.0 <= float(train_fraction) <= 1.0:
        raise ValueError(f"train_fraction must be in [0, 1], got {train_fraction}")
    if not 0.0 < float(test_fraction) <= 1.0:
        raise ValueError(f"test_fraction must be in (0, 1], got {test_fraction}")


def split_ratings(
    store: RatingStore,
    train_fraction: float,
    test_fraction: float,
    rng: np.random.Generator,
) -> tuple[RatingStore, pd.DataFrame]:
    """Randomly split `store` into a training store and a held-out ratings frame."""
    _check_fractions(train_fraction, test_fraction)
    ratings = store.frame
    users = np.array(sorted(store.all_users()), dtype=np.int64)
    sampled = users[rng.random(len(users)) < float(test_fraction)]

    pool = ratings[ratings["user_id"].isin(sampled)]
    to_train = rng.random(len(pool)) < float(train_fraction)

    train = RatingStore.from_frame(pool[to_train])
    held_out = pool[~to_train].reset_index(drop=True)
    return train, held_out


class AverageAbsoluteDifferenceEvaluator:
    """Scores recommenders by the mean |estimate - actual| on held-out ratings."""

    def __init__(
        self,
        builder: Optional[RecommenderBuilder] = None,
        *,
        seed: Optional[int] = None,
        cap_estimates: bool = True,
    ) -> None:
        self.builder = builder if builder is not None else build_recommender
        self.rng = np.random.default_rng(seed)
        self.cap_estimates = bool(cap_estimates)

    def evaluate(self, store: RatingStore, train_fraction: float, test_fraction: float) -> EvaluationResult:
        train, held_out = split_ratings(store, train_fraction, test_fraction, self.rng)
        recommender = self.builder(train)
        lo, hi = store.min_value, store.max_value

        errors: List[float] = []
        skipped = 0
        for user_id, item_id, actual in held_out.itertuples(index=False, name=None):
            try:
                estimate = recommender.estimate_preference(int(user_id), int(item_id))
            except UnknownUserError:
                # Every rating of this user landed in the held-out set.
                estimate = None
            if estimate is None or not np.isfinite(estimate):
                skipped += 1
                continue
            if self.cap_estimates:
                estimate = min(hi, max(lo, estimate))
            errors.append(abs(float(estimate) - float(actual)))

        mae = float(np.mean(errors)) if errors else None
        result = EvaluationResult(
            mae=mae,
            n_evaluated=len(errors),
            n_skipped=skipped,
            n_train=len(train),
            n_test=len(held_out),
        )
        logger.info(
            "Evaluation: train=%d test=%d evaluated=%d skipped=%d mae=%s",
            result.n_train,
            result.n_test,
            result.n_evaluated,
            result.n_skipped,
            result,
        )
        return result

    def run_trials(
        self,
        store: RatingStore,
        n_trials: int,
        train_fraction: float,
        test_fraction: float,
    ) -> List[EvaluationResult]:
        return [self.evaluate(store, train_fraction, test_fraction) for _ in range(int(n_trials))]


def evaluate(
    store: RatingStore,
    train_fraction: float,
    test_fraction: float,
    *,
    builder: Optional[RecommenderBuilder] = None,
    seed: Optional[int] = None,
    cap_estimates: bool = True,
) -> EvaluationResult:
    """One-shot MAE evaluation; see `AverageAbsoluteDifferenceEvaluator`."""
    evaluator = AverageAbsoluteDifferenceEvaluator(builder, seed=seed, cap_estimates=cap_estimates)
    return evaluator.evaluate(store, train_fraction, test_fraction)
