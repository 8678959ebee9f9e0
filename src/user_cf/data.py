"""Rating dataset loading and the in-memory rating store.

The on-disk format is one record per line, `userID,itemID,value`, e.g.

    1,10,1.0
    1,11,2.0
    2,10,1.0

A fourth (timestamp) field is tolerated and ignored, and tab-separated files
are read the same way. The load is rejected as a whole on the first malformed
record.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .errors import MalformedRecordError


logger = logging.getLogger(__name__)

COLUMNS: Tuple[str, str, str] = ("user_id", "item_id", "value")

_ID_PATTERN = r"\d+"
_MAX_ID = int(np.iinfo(np.int64).max)


@dataclass(frozen=True)
class Rating:
    user_id: int
    item_id: int
    value: float


class RatingStore:
    """Read-only (user, item) -> value mapping with lookups by user and by item."""

    def __init__(self, frame: pd.DataFrame) -> None:
        df = frame[list(COLUMNS)].copy()
        df["user_id"] = df["user_id"].astype("int64")
        df["item_id"] = df["item_id"].astype("int64")
        df["value"] = df["value"].astype("float64")
        # Later duplicates overwrite earlier ones.
        df = df.drop_duplicates(subset=["user_id", "item_id"], keep="last")
        self._df = df.sort_values(["user_id", "item_id"]).reset_index(drop=True)

        self._by_user: dict[int, dict[int, float]] = {}
        for uid, grp in self._df.groupby("user_id", sort=True):
            self._by_user[int(uid)] = dict(zip(grp["item_id"].tolist(), grp["value"].tolist()))

        self._by_item: dict[int, dict[int, float]] = {}
        for iid, grp in self._df.groupby("item_id", sort=True):
            self._by_item[int(iid)] = dict(zip(grp["user_id"].tolist(), grp["value"].tolist()))

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "RatingStore":
        missing = [c for c in COLUMNS if c not in frame.columns]
        if missing:
            raise ValueError(f"ratings frame missing columns: {missing}")
        return cls(frame)

    @classmethod
    def from_records(cls, records: Iterable[Union[Rating, Tuple[int, int, float]]]) -> "RatingStore":
        rows = [tuple(r) if not isinstance(r, Rating) else (r.user_id, r.item_id, r.value) for r in records]
        return cls(pd.DataFrame(rows, columns=list(COLUMNS)))

    def __len__(self) -> int:
        return int(len(self._df))

    def __iter__(self) -> Iterator[Rating]:
        for u, i, v in self._df.itertuples(index=False, name=None):
            yield Rating(int(u), int(i), float(v))

    def __repr__(self) -> str:
        return f"RatingStore(users={self.num_users}, items={self.num_items}, ratings={len(self)})"

    @property
    def frame(self) -> pd.DataFrame:
        """Backing (user_id, item_id, value) table. Callers must not mutate it."""
        return self._df

    @property
    def num_users(self) -> int:
        return len(self._by_user)

    @property
    def num_items(self) -> int:
        return len(self._by_item)

    @property
    def min_value(self) -> float:
        return float(self._df["value"].min()) if len(self._df) else float("nan")

    @property
    def max_value(self) -> float:
        return float(self._df["value"].max()) if len(self._df) else float("nan")

    def has_user(self, user_id: int) -> bool:
        return int(user_id) in self._by_user

    def all_users(self) -> frozenset[int]:
        return frozenset(self._by_user)

    def all_items(self) -> frozenset[int]:
        return frozenset(self._by_item)

    def ratings_for_user(self, user_id: int) -> List[Tuple[int, float]]:
        """(item, value) pairs rated by `user_id`, ordered by item; empty if unknown."""
        return sorted(self._by_user.get(int(user_id), {}).items())

    def ratings_for_item(self, item_id: int) -> List[Tuple[int, float]]:
        """(user, value) pairs for `item_id`, ordered by user; empty if unknown."""
        return sorted(self._by_item.get(int(item_id), {}).items())

    def user_vector(self, user_id: int) -> dict[int, float]:
        """Internal mapping item -> value for a user. Callers must not mutate it."""
        return self._by_user.get(int(user_id), {})

    def preference(self, user_id: int, item_id: int) -> Optional[float]:
        return self._by_user.get(int(user_id), {}).get(int(item_id))

    def to_frame(self) -> pd.DataFrame:
        return self._df.copy()


Source = Union[str, Path, IO[str]]


def _read_text(source: Source) -> str:
    if not isinstance(source, (str, Path)):
        return source.read()

    data = Path(source).read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_number = data.count(b"\n", 0, exc.start) + 1
        record = data.splitlines()[line_number - 1].decode("utf-8", errors="replace")
        raise MalformedRecordError(line_number, record, "not valid UTF-8") from exc


def _valid_ids(ids: pd.Series) -> pd.Series:
    """Non-negative integers that fit in int64."""
    ok = ids.str.fullmatch(_ID_PATTERN).fillna(False).astype(bool)
    fits = ids.where(ok, "0").map(int) <= _MAX_ID
    return ok & fits.astype(bool)


def _detect_delimiter(lines: List[str]) -> str:
    for line in lines:
        if line.strip():
            return "\t" if "\t" in line else ","
    return ","


def _first_ragged_line(lines: List[str], sep: str) -> int:
    expected = next((len(line.split(sep)) for line in lines if line.strip()), 0)
    for n, line in enumerate(lines):
        if not line.strip() or len(line.split(sep)) != expected:
            return n
    return 0


def load_ratings(source: Source) -> RatingStore:
    """Load a `userID,itemID,value[,timestamp]` file into a `RatingStore`.

    Raises
    ------
    MalformedRecordError
        On the first blank line, invalid UTF-8, wrong field count, an id that
        is not a non-negative int64, or a non-numeric value. Nothing is
        loaded in that case.
    """
    text = _read_text(source)
    lines = text.splitlines()
    if not lines:
        logger.warning("Empty ratings source %s", source)
        return RatingStore(pd.DataFrame(columns=list(COLUMNS)))

    sep = _detect_delimiter(lines)
    try:
        raw = pd.read_csv(
            io.StringIO(text),
            sep=sep,
            header=None,
            dtype=str,
            skip_blank_lines=False,
            keep_default_na=False,
        )
    except pd.errors.ParserError as exc:
        n = _first_ragged_line(lines, sep)
        raise MalformedRecordError(n + 1, lines[n], "inconsistent number of fields") from exc

    if raw.shape[1] not in (3, 4):
        raise MalformedRecordError(1, lines[0], f"expected 3 or 4 fields, got {raw.shape[1]}")

    raw = raw.fillna("")
    users = raw[0].astype(str).str.strip()
    items = raw[1].astype(str).str.strip()
    values = pd.to_numeric(raw[2].astype(str).str.strip(), errors="coerce")

    user_ok = _valid_ids(users)
    item_ok = _valid_ids(items)
    value_ok = values.notna() & np.isfinite(values.fillna(0.0))
    bad = ~(user_ok & item_ok & value_ok)
    if bad.any():
        idx = int(bad.to_numpy().nonzero()[0][0])
        record = lines[idx] if idx < len(lines) else ""
        if not record.strip():
            reason = "blank line"
        elif not user_ok.iloc[idx]:
            reason = f"user id is not a non-negative 64-bit integer: {users.iloc[idx]!r}"
        elif not item_ok.iloc[idx]:
            reason = f"item id is not a non-negative 64-bit integer: {items.iloc[idx]!r}"
        else:
            reason = f"value is not a finite number: {raw[2].iloc[idx]!r}"
        raise MalformedRecordError(idx + 1, record, reason)

    frame = pd.DataFrame(
        {
            "user_id": users.map(int).astype("int64"),
            "item_id": items.map(int).astype("int64"),
            "value": values.astype("float64"),
        }
    )
    store = RatingStore(frame)
    logger.info(
        "Loaded ratings: records=%d users=%d items=%d ratings=%d",
        len(frame),
        store.num_users,
        store.num_items,
        len(store),
    )
    return store
