from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from ..models.client import ClientDraft, ClientStatus
from ..models.config_models import MIN_NAME_LENGTH, ImportDefaults
from ..models.import_result import NormalizeResult

"""Tabular import normalizer.

Turns rows of string cells (pasted text, CSV lines, spreadsheet rows, Word
table rows) into ClientDraft records. Column meaning is positional and picked
from the row's cell count:

    3+ cells  -> [name, province, city, address?, phone?]
    2 cells   -> [name, city]          province = fallback_province
    1 cell    -> [name]                province = city = unknown_placeholder

Blank cells keep their position (a blank city in a three column row is the
unknown placeholder); only padding beyond the third cell is ignored.

Malformed rows are skipped and counted; nothing here raises on bad data.
"""

__all__ = [
    "RowShape",
    "clean_cell",
    "classify_row",
    "is_header_row",
    "row_to_draft",
    "normalize",
]

logger = logging.getLogger(__name__)


class RowShape(Enum):
    """Column-count variant resolved once per row."""
    THREE_OR_MORE = "3+"
    EXACTLY_2 = "2"
    EXACTLY_1 = "1"
    EMPTY = "0"


def clean_cell(value: Any, unquote: bool = True) -> str:
    """Trim a cell and, with unquote, undo CSV-style quoting.

    A cell wrapped in a matching pair of double quotes loses them, and its
    doubled inner quotes collapse to one. Cells already decoded by a CSV
    parser are passed with ``unquote=False`` so their real quotes survive.
    """
    if value is None:
        return ""
    if isinstance(value, float) and value != value:  # NaN from spreadsheets
        return ""
    text = str(value).strip()
    if unquote and len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1].replace('""', '"').strip()
    return text


def _trim_padding(cells: list[str]) -> list[str]:
    # spreadsheets pad short rows to the widest column; the first three
    # positions are name / province / city and always count
    end = len(cells)
    while end > 3 and cells[end - 1] == "":
        end -= 1
    return cells[:end]


def classify_row(cells: Sequence[str]) -> RowShape:
    """Resolve the shape of an already cleaned row from its cell count."""
    trimmed = _trim_padding(list(cells))
    if not trimmed or trimmed[0] == "":
        return RowShape.EMPTY
    if len(trimmed) >= 3:
        return RowShape.THREE_OR_MORE
    if len(trimmed) == 2:
        return RowShape.EXACTLY_2
    return RowShape.EXACTLY_1


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def is_header_row(first_cell: str, defaults: ImportDefaults) -> bool:
    folded = _fold(first_cell.strip())
    return any(folded == _fold(token) for token in defaults.header_tokens)


def _cell(cells: Sequence[str], index: int) -> str:
    return cells[index] if index < len(cells) else ""


def row_to_draft(
    raw: Sequence[Any] | None,
    defaults: ImportDefaults | None = None,
    *,
    unquote: bool = True,
) -> ClientDraft | None:
    """Map a single raw row to a ClientDraft, or None when it is not data.

    Names shorter than MIN_NAME_LENGTH are rejected whatever the configured
    min_name_length says; the setting can only make the check stricter.
    """
    defaults = defaults or ImportDefaults()
    if not raw:
        return None
    cells = [clean_cell(v, unquote) for v in raw]
    shape = classify_row(cells)
    if shape is RowShape.EMPTY:
        return None

    name = cells[0]
    if len(name) < max(defaults.min_name_length, MIN_NAME_LENGTH):
        return None
    if is_header_row(name, defaults):
        return None

    unknown = defaults.unknown_placeholder
    missing = defaults.missing_placeholder
    if shape is RowShape.THREE_OR_MORE:
        province = cells[1] or unknown
        city = cells[2] or unknown
        address = _cell(cells, 3) or missing
        phone = _cell(cells, 4) or missing
    elif shape is RowShape.EXACTLY_2:
        province = defaults.fallback_province
        city = cells[1] or unknown
        address = phone = missing
    else:
        province = city = unknown
        address = phone = missing

    return ClientDraft(
        name=name,
        province=province,
        city=city,
        address=address,
        phone=phone,
        status=ClientStatus.ACTIVE,
    )


def normalize(
    rows: Iterable[Sequence[Any]],
    defaults: ImportDefaults | None = None,
    *,
    unquote: bool = True,
) -> NormalizeResult:
    """Normalize raw rows into client drafts, preserving input order.

    Args:
        rows: Sequence of raw rows (each an ordered sequence of cells)
        defaults: Placeholder / fallback configuration (ImportDefaults() if None)
        unquote: Undo CSV quoting per cell; False for rows a CSV parser
            already decoded (see importer.reader)

    Returns:
        NormalizeResult with the accepted drafts and the parse-skip count

    Raises:
        TypeError: If rows is None (caller bug, not a data problem)
    """
    if rows is None:
        raise TypeError("normalize() requires a sequence of rows, got None")
    defaults = defaults or ImportDefaults()

    drafts: list[ClientDraft] = []
    skipped = 0
    for index, raw in enumerate(rows, start=1):
        draft = row_to_draft(raw, defaults, unquote=unquote)
        if draft is None:
            skipped += 1
            logger.debug("row=%d skipped (not a client row): %r", index, raw)
            continue
        drafts.append(draft)

    logger.debug("normalize accepted=%d skipped=%d", len(drafts), skipped)
    return NormalizeResult(drafts=drafts, skipped_rows=skipped)
