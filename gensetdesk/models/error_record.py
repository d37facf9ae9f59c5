from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured record for one import problem that is counted rather than raised
(a draft rejected by the store, a source that could not be read). ``row`` is
the 1-based draft position, or -1 for source-level errors where no single row
applies.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Import source (file name, or "<paste>" for pasted text)
        row: Draft number (1-based). Use -1 for source-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Store error message or description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
