"""FastAPI service exposing recommendations, similar users and evaluation."""

from __future__ import annotations

import argparse
import logging
import os
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request

from ..config import UserCFConfig, load_config
from ..data import load_ratings
from ..errors import UnknownUserError
from ..evaluation import evaluate
from ..recommender import UserBasedRecommender, build_recommender
from ..utils import setup_logging
from .schemas import (
    EvaluateRequest,
    EvaluateResponse,
    RecommendRequest,
    RecommendResponse,
    SimilarUsersRequest,
    SimilarUsersResponse,
)


logger = logging.getLogger(__name__)


def _config_from_env() -> UserCFConfig:
    raw = os.getenv("CONFIG_PATH")
    if raw is None or str(raw).strip() == "":
        return load_config()
    return load_config(Path(raw))


def create_app(config: Optional[UserCFConfig] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app_: FastAPI):
        cfg = config if config is not None else _config_from_env()
        setup_logging(os.getenv("LOG_LEVEL", cfg.log_level))
        logger.info("Starting service with dataset=%s threshold=%.3f", cfg.dataset_path, cfg.threshold)
        app_.state.config = cfg
        app_.state.store = load_ratings(cfg.dataset_path)
        app_.state.recommender = build_recommender(app_.state.store, threshold=cfg.threshold, weighted=cfg.weighted)
        yield

    app = FastAPI(title="User-based CF Recommender", lifespan=lifespan)

    def _recommender(request: Request) -> UserBasedRecommender:
        rec = getattr(request.app.state, "recommender", None)
        if rec is None:
            raise HTTPException(status_code=503, detail="Recommender not initialized")
        return rec

    @app.post("/recommend", response_model=RecommendResponse)
    def recommend(req: RecommendRequest, request: Request) -> dict:
        """Top-N items for a user, predicted from similar users' ratings."""
        rec = _recommender(request)
        try:
            items = rec.recommend(int(req.user_id), int(req.top_n))
        except UnknownUserError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

        return {
            "user_id": int(req.user_id),
            "top_n": int(req.top_n),
            "results": [r.__dict__ for r in items],
        }

    @app.post("/similar_users", response_model=SimilarUsersResponse)
    def similar_users(req: SimilarUsersRequest, request: Request) -> dict:
        """Users ranked by Pearson correlation with the given user."""
        rec = _recommender(request)
        try:
            sims = rec.most_similar_users(int(req.user_id), n=int(req.top_n))
        except UnknownUserError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

        return {
            "user_id": int(req.user_id),
            "top_n": int(req.top_n),
            "results": [s.__dict__ for s in sims],
        }

    @app.post("/evaluate", response_model=EvaluateResponse)
    def run_evaluation(req: EvaluateRequest, request: Request) -> dict:
        """One MAE evaluation over a random train/hold-out split."""
        cfg: UserCFConfig = request.app.state.config
        builder = partial(build_recommender, threshold=cfg.threshold, weighted=cfg.weighted)
        try:
            result = evaluate(
                request.app.state.store,
                req.train_fraction,
                req.test_fraction,
                builder=builder,
                seed=req.seed,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return result.__dict__

    return app


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Serve the user-based CF recommender over HTTP")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: <repo>/config.yaml)")
    p.add_argument("--host", type=str, default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    return p


def serve(argv: list[str] | None = None) -> None:
    """Run the service with uvicorn (install the `service` extra)."""
    import uvicorn

    args = build_arg_parser().parse_args(argv)
    config = load_config(args.config) if args.config is not None else None
    uvicorn.run(create_app(config), host=args.host, port=int(args.port))


if __name__ == "__main__":
    serve()
