from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import user_cf` works without an editable install.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from user_cf.data import RatingStore  # noqa: E402


EXAMPLE_DATASET = REPO_ROOT / "data" / "dataset.csv"


@pytest.fixture
def correlated_store() -> RatingStore:
    """Users 1-3 rate items 10-12 in perfect agreement; user 4 is their mirror image."""
    return RatingStore.from_records(
        [
            (1, 10, 1.0), (1, 11, 2.0), (1, 12, 3.0),
            (2, 10, 2.0), (2, 11, 3.0), (2, 12, 4.0), (2, 13, 5.0),
            (3, 10, 1.0), (3, 11, 3.0), (3, 12, 5.0), (3, 14, 2.0),
            (4, 10, 3.0), (4, 11, 2.0), (4, 12, 1.0), (4, 13, 1.0), (4, 14, 5.0),
        ]
    )


@pytest.fixture
def example_dataset() -> Path:
    return EXAMPLE_DATASET
