"""Persistence utilities for the expense ledger core services."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from .exceptions import PersistenceError

DEFAULT_DATA_FILE = "expenses.csv"
CORRUPT_SUFFIX = ".corrupt"

logger = logging.getLogger(__name__)


def _needs_full_quoting(row: Sequence[str]) -> bool:
    # Minimal quoting only covers the "\n" terminator, so a bare "\r" would split the record.
    return any("\r" in field for field in row)


class CSVStorage:
    """Flat comma-separated text file rewritten in full on every save.

    Fields are written with minimal quoting, so rows whose values contain no
    delimiter, quote or line break stay plain ``a,b,c`` lines.
    """

    def __init__(self, path: Path | str = DEFAULT_DATA_FILE) -> None:
        self._path = Path(path)

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> List[List[str]]:
        if not self._path.exists():
            return []
        try:
            with self._path.open("r", encoding="utf-8", newline="") as handle:
                rows = [row for row in csv.reader(handle) if row]
        except csv.Error as exc:
            raise PersistenceError("parse", self._path) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError("read", self._path) from exc
        logger.debug("Read %d rows from %s", len(rows), self._path)
        return rows

    def save(self, rows: Iterable[Sequence[str]]) -> None:
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8", newline="") as handle:
                minimal = csv.writer(handle, lineterminator="\n")
                quoted = csv.writer(handle, lineterminator="\n", quoting=csv.QUOTE_ALL)
                for row in rows:
                    (quoted if _needs_full_quoting(row) else minimal).writerow(row)
                handle.flush()
            # replace() is an atomic move on POSIX.
            temp_path.replace(self._path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise PersistenceError("write", self._path) from exc

    def quarantine(self) -> Path:
        """Move an unreadable data file aside so the next save cannot overwrite it."""
        target = self._path.with_suffix(self._path.suffix + CORRUPT_SUFFIX)
        try:
            self._path.replace(target)
        except OSError as exc:
            raise PersistenceError("move aside", self._path) from exc
        logger.warning("Moved unreadable data file %s to %s", self._path, target)
        return target

    @property
    def path(self) -> Path:
        return self._path
