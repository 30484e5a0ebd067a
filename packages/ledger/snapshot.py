"""Point-in-time view of the ledger input directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Mapping

from .entries import LedgerEntry, parse_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Parsed content of every CSV batch found in a directory.

    The snapshot never re-reads the disk. Callers decide when a fresh one is
    needed by loading it again.
    """

    source_dir: Path
    files: Mapping[str, tuple[LedgerEntry, ...]]
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def entries(self) -> Iterator[LedgerEntry]:
        for file_entries in self.files.values():
            yield from file_entries

    @property
    def entry_count(self) -> int:
        return sum(len(file_entries) for file_entries in self.files.values())

    @classmethod
    def from_entries(cls, entries: list[LedgerEntry], *, name: str = "inline.csv") -> "LedgerSnapshot":
        return cls(source_dir=Path("."), files={name: tuple(entries)})


def load_snapshot(directory: Path | str) -> LedgerSnapshot:
    """Read and parse every ``*.csv`` file of ``directory`` in file name order."""

    source_dir = Path(directory)
    files: dict[str, tuple[LedgerEntry, ...]] = {}
    for path in sorted(source_dir.iterdir(), key=lambda item: item.name):
        if not path.is_file() or not path.name.endswith(".csv"):
            continue
        with path.open("r", encoding="utf-8", newline="") as handle:
            files[path.name] = tuple(parse_lines(handle))
    snapshot = LedgerSnapshot(source_dir=source_dir, files=files)
    logger.info("Loaded %d ledger entries from %d files in %s", snapshot.entry_count, len(files), source_dir)
    return snapshot
