from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

from .client import ClientDraft

"""Result models for the bulk client import.

Three counts are kept apart so the caller can report them separately:
- parse-time skips (NormalizeResult.skipped_rows)
- drafts accepted by the normalizer (NormalizeResult.accepted_rows)
- drafts actually persisted vs rejected by the store (InsertTally)
"""

__all__ = [
    "NormalizeResult",
    "InsertTally",
    "ImportResult",
]


@dataclass(frozen=True)
class NormalizeResult:
    """Normalizer output: drafts in input order plus the parse-skip count."""
    drafts: list[ClientDraft]
    skipped_rows: int = 0

    @property
    def accepted_rows(self) -> int:
        return len(self.drafts)

    @property
    def processed_rows(self) -> int:
        return self.accepted_rows + self.skipped_rows

    def __iter__(self) -> Iterator[ClientDraft]:
        return iter(self.drafts)

    def __len__(self) -> int:
        return len(self.drafts)


@dataclass
class InsertTally:
    """Per-draft persistence outcome accumulated by the store."""
    inserted: int = 0
    failed: int = 0
    # (draft index, draft, store error message)
    failures: list[tuple[int, ClientDraft, str]] = field(default_factory=list)

    def record_success(self) -> None:
        self.inserted += 1

    def record_failure(self, index: int, draft: ClientDraft, message: str) -> None:
        self.failed += 1
        self.failures.append((index, draft, message))


@dataclass(frozen=True)
class ImportResult:
    """Aggregated outcome of one import run (feeds the SUMMARY line)."""
    source: str
    processed_rows: int  # rows examined by the normalizer
    accepted_rows: int  # drafts produced
    skipped_rows: int  # parse-time skips
    inserted_rows: int  # drafts persisted
    failed_rows: int  # drafts rejected by the store
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    dry_run: bool = False

    @property
    def partial_failure(self) -> bool:
        return self.failed_rows > 0
