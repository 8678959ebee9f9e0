"""YAML-backed run configuration.

Example `config.yaml`:

    dataset:
      path: data/dataset.csv
    user_cf:
      threshold: 0.1
      user_id: 2
      top_n: 3
      train_fraction: 0.9
      test_fraction: 1.0
      trials: 10
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .neighborhood import DEFAULT_THRESHOLD
from .paths import get_repo_root, resolve_path


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserCFConfig:
    dataset_path: Path = Path("data/dataset.csv")
    threshold: float = DEFAULT_THRESHOLD
    weighted: bool = False
    user_id: int = 2
    top_n: int = 3
    train_fraction: float = 0.9
    test_fraction: float = 1.0
    trials: int = 10
    seed: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.train_fraction) <= 1.0:
            raise ValueError(f"train_fraction must be in [0, 1], got {self.train_fraction}")
        if not 0.0 < float(self.test_fraction) <= 1.0:
            raise ValueError(f"test_fraction must be in (0, 1], got {self.test_fraction}")
        if int(self.top_n) < 1:
            raise ValueError(f"top_n must be >= 1, got {self.top_n}")
        if int(self.trials) < 0:
            raise ValueError(f"trials must be >= 0, got {self.trials}")

    def with_overrides(self, **overrides: Any) -> "UserCFConfig":
        """Copy with every non-None override applied (CLI flags)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _section(cfg_yaml: dict, name: str) -> dict:
    section = cfg_yaml.get(name)
    return section if isinstance(section, dict) else {}


def load_config(config_path: Optional[Path] = None) -> UserCFConfig:
    """Read `config_path` (default: `<repo root>/config.yaml`).

    A missing default config yields the built-in defaults. Relative dataset
    paths are resolved against the directory holding the config file.
    """
    if config_path is None:
        try:
            config_path = get_repo_root() / "config.yaml"
        except FileNotFoundError:
            logger.info("No repo root found; using default configuration")
            return UserCFConfig()
        if not config_path.is_file():
            return UserCFConfig()

    config_path = Path(config_path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    cfg_yaml = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(cfg_yaml, dict):
        raise ValueError(f"Expected config YAML to be a mapping, got: {type(cfg_yaml)}")

    dataset_cfg = _section(cfg_yaml, "dataset")
    raw = _section(cfg_yaml, "user_cf")
    defaults = UserCFConfig()

    seed = raw.get("seed", defaults.seed)
    return UserCFConfig(
        dataset_path=resolve_path(str(dataset_cfg.get("path", defaults.dataset_path)), config_path.parent),
        threshold=float(raw.get("threshold", defaults.threshold)),
        weighted=bool(raw.get("weighted", defaults.weighted)),
        user_id=int(raw.get("user_id", defaults.user_id)),
        top_n=int(raw.get("top_n", defaults.top_n)),
        train_fraction=float(raw.get("train_fraction", defaults.train_fraction)),
        test_fraction=float(raw.get("test_fraction", defaults.test_fraction)),
        trials=int(raw.get("trials", defaults.trials)),
        seed=(None if seed is None else int(seed)),
        log_level=str(raw.get("log_level", defaults.log_level)),
    )
