"""Pydantic schemas for the recommendation API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RecommendRequest(BaseModel):
    """Request for top-N user-based CF recommendations."""

    user_id: int = Field(..., ge=0, description="User id from the ratings file")
    top_n: int = Field(3, ge=1, le=100, description="Number of items to return (1..100)")


class RecommendationItem(BaseModel):
    item_id: int
    score: float


class RecommendResponse(BaseModel):
    user_id: int
    top_n: int
    results: list[RecommendationItem]


class SimilarUsersRequest(BaseModel):
    """Request for the users most similar to `user_id` (Pearson correlation)."""

    user_id: int = Field(..., ge=0, description="User id from the ratings file")
    top_n: int = Field(10, ge=1, le=100, description="Number of similar users to return")


class SimilarUserItem(BaseModel):
    user_id: int
    similarity: float
    co_rated: int


class SimilarUsersResponse(BaseModel):
    user_id: int
    top_n: int
    results: list[SimilarUserItem]


class EvaluateRequest(BaseModel):
    train_fraction: float = Field(0.9, ge=0.0, le=1.0, description="Share of each user's ratings used for training")
    test_fraction: float = Field(1.0, gt=0.0, le=1.0, description="Share of users taking part in the evaluation")
    seed: Optional[int] = Field(None, description="Seed for the random split")


class EvaluateResponse(BaseModel):
    """Evaluation outcome; `mae` is null when no held-out rating could be estimated."""

    mae: Optional[float] = None
    n_evaluated: int
    n_skipped: int
    n_train: int
    n_test: int
