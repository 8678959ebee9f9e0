from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass

import numpy as np


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass(frozen=True)
class ReproducibilityConfig:
    seed: int = 42


def setup_logging(level: int | str = "INFO") -> None:
    """Configure stdlib logging with a consistent, project-wide format."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Already configured (pytest, a notebook, or an earlier call).
        root_logger.setLevel(level)
        return

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def set_global_seed(cfg: ReproducibilityConfig) -> None:
    """Seed the stdlib and numpy global RNGs.

    The evaluator draws from its own `numpy.random.Generator`; pass it a seed
    as well when a whole run must be reproducible.
    """
    random.seed(cfg.seed)
    np.random.seed(cfg.seed)
    os.environ["PYTHONHASHSEED"] = str(cfg.seed)
