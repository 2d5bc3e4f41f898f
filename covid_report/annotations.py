"""Locally stored annotations ("comments") attached to report targets.

The default store is a CSV file with columns ``country``, ``datetime``
and ``comment``; rows are matched case-insensitively on ``country`` and
returned in chronological order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

import pandas as pd

logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("country", "datetime", "comment")


class AnnotationStoreError(Exception):
    """Raised when the annotation source cannot be read."""

    def __init__(self, source: str, detail: str = "") -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"Annotation store error in {source}: {detail}")


@dataclass(frozen=True)
class AnnotationEntry:
    timestamp: datetime
    text: str


@runtime_checkable
class AnnotationStore(Protocol):
    """Anything that can list the annotations for a target."""

    def get_annotations(self, target_id: str) -> list[AnnotationEntry]: ...


class InMemoryAnnotationStore:
    """Annotations held in a dict keyed by target identifier."""

    def __init__(self, entries: dict[str, Iterable[AnnotationEntry]] | None = None) -> None:
        self._entries: dict[str, list[AnnotationEntry]] = {}
        for target_id, items in (entries or {}).items():
            for entry in items:
                self.add(target_id, entry)

    def add(self, target_id: str, entry: AnnotationEntry) -> None:
        self._entries.setdefault(target_id.lower(), []).append(entry)

    def get_annotations(self, target_id: str) -> list[AnnotationEntry]:
        items = self._entries.get(target_id.lower(), [])
        return sorted(items, key=lambda e: e.timestamp)


class CsvAnnotationStore:
    """Read-only annotation store backed by a CSV file.

    The file is re-read on every lookup so edits show up in the next
    report without a restart.  A missing file means "no annotations".
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> pd.DataFrame:
        if not self._path.exists():
            logger.debug("Annotation file %s not found", self._path)
            return pd.DataFrame(columns=list(_REQUIRED_COLUMNS))

        try:
            df = pd.read_csv(self._path, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as exc:
            raise AnnotationStoreError(str(self._path), str(exc)) from exc

        missing = [c for c in _REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise AnnotationStoreError(
                str(self._path), f"missing column(s): {', '.join(missing)}",
            )

        df["datetime"] = pd.to_datetime(df["datetime"], errors="coerce")
        bad = df["datetime"].isna()
        if bad.any():
            logger.warning(
                "Skipping %d annotation row(s) with unparseable datetime in %s",
                int(bad.sum()), self._path,
            )
            df = df[~bad]
        return df

    def get_annotations(self, target_id: str) -> list[AnnotationEntry]:
        df = self._load()
        if df.empty:
            return []

        rows = df[df["country"].str.strip().str.lower() == target_id.strip().lower()]
        rows = rows.sort_values("datetime", kind="stable")
        return [
            AnnotationEntry(timestamp=ts.to_pydatetime(), text=text)
            for ts, text in zip(rows["datetime"], rows["comment"])
        ]
