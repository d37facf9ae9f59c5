from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd
from docx import Document

from ..models.equipment import Equipment

"""Row extraction for the bulk client import.

Every source is reduced to rows of string cells (RawRow); column meaning is
assigned later by the normalizer. Cells come out decoded: CSV quoting of text
sources is undone here, and spreadsheet / Word cells are plain values.

- pasted text: one line per row, TAB separated (Word/Excel copy), falling back
  to comma / semicolon with CSV quoting when a line has no TAB
- .csv: csv module, delimiter guessed from the first line, ragged rows kept
- .xlsx/.xls: pandas, every sheet, no header
- .docx: python-docx, table rows first, then non-empty paragraphs
"""

__all__ = [
    "UnsupportedSourceError",
    "TEXT_SUFFIXES",
    "split_line",
    "split_pasted_text",
    "read_rows",
    "read_equipment_file",
]

TEXT_SUFFIXES = {".txt", ".tsv"}
CSV_SUFFIXES = {".csv"}
EXCEL_SUFFIXES = {".xlsx", ".xls"}
WORD_SUFFIXES = {".docx"}

_LINE_SPLIT = re.compile(r"\r?\n")


class UnsupportedSourceError(Exception):
    """Raised when a source file type has no row extractor."""


def _guess_delimiter(line: str) -> str:
    if "\t" in line:
        return "\t"
    # comma unless the line only uses semicolons (Spanish locale exports)
    if ";" in line and "," not in line:
        return ";"
    return ","


def split_line(line: str) -> list[str]:
    """Split one pasted line into decoded cells.

    TAB wins when present; otherwise comma (or semicolon when the line has no
    comma) separates fields. Double-quoted fields may contain the delimiter
    and doubled quotes; the csv module removes that quoting here, so the
    normalizer must not unquote these cells again.
    """
    delimiter = _guess_delimiter(line)
    reader = csv.reader([line], delimiter=delimiter, skipinitialspace=delimiter != "\t")
    return next(reader, [line])


def split_pasted_text(text: str) -> list[list[str]]:
    """Split free pasted text into raw rows (blank lines dropped)."""
    rows: list[list[str]] = []
    for line in _LINE_SPLIT.split(text or ""):
        if not line.strip():
            continue
        rows.append(split_line(line))
    return rows


def _cell_text(value: Any) -> str:
    if pd.isna(value):
        return ""
    # phone numbers typed into Excel come back as 3764123456.0
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _frame_rows(df: pd.DataFrame) -> list[list[str]]:
    rows: list[list[str]] = []
    for _, raw in df.iterrows():
        if raw.isna().all():
            continue
        rows.append([_cell_text(v) for v in raw.tolist()])
    return rows


def _read_csv(path: Path) -> list[list[str]]:
    # csv module instead of pandas: hand-made lists are ragged and
    # read_csv rejects rows wider than the first one
    with path.open(encoding="utf-8-sig", newline="") as f:
        text = f.read()
    first = next((ln for ln in _LINE_SPLIT.split(text) if ln.strip()), "")
    delimiter = _guess_delimiter(first)
    rows: list[list[str]] = []
    # quoted cells may span lines
    for cells in csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, skipinitialspace=True):
        if not any(c.strip() for c in cells):
            continue
        rows.append(cells)
    return rows


def _read_excel(path: Path, target_sheets: Iterable[str] | None = None) -> list[list[str]]:
    rows: list[list[str]] = []
    xls = pd.ExcelFile(path)
    for name in xls.sheet_names:
        if target_sheets is not None and str(name) not in target_sheets:
            continue
        df = xls.parse(name, header=None, dtype=object)
        rows.extend(_frame_rows(df))
    return rows


def _read_docx(path: Path) -> list[list[str]]:
    doc = Document(str(path))
    rows: list[list[str]] = []
    for table in doc.tables:
        for tr in table.rows:
            rows.append([cell.text for cell in tr.cells])
    for para in doc.paragraphs:
        text = para.text.strip()
        if not text:
            continue
        rows.append(split_line(text))
    return rows


def read_rows(path: Path, target_sheets: Iterable[str] | None = None) -> list[list[str]]:
    """Extract raw rows from a file, dispatching on its suffix.

    Raises:
        FileNotFoundError: If path does not exist
        UnsupportedSourceError: If the suffix has no extractor
    """
    if not path.exists():
        raise FileNotFoundError(f"source not found: {path}")
    suffix = path.suffix.lower()
    if suffix in TEXT_SUFFIXES:
        return split_pasted_text(path.read_text(encoding="utf-8"))
    if suffix in CSV_SUFFIXES:
        return _read_csv(path)
    if suffix in EXCEL_SUFFIXES:
        return _read_excel(path, target_sheets)
    if suffix in WORD_SUFFIXES:
        return _read_docx(path)
    raise UnsupportedSourceError(f"unsupported source type: {path.suffix or path.name}")


def read_equipment_file(path: Path) -> list[Equipment]:
    """Load equipment rows from a CSV / Excel export with a header row.

    Column names follow the store (id, client_id, model, type,
    next_service_date, client_name, client_city); unknown columns are ignored.
    """
    if not path.exists():
        raise FileNotFoundError(f"equipment file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        df = pd.read_csv(path, dtype=object)
    elif suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, dtype=object)
    else:
        raise UnsupportedSourceError(f"unsupported equipment file type: {path.suffix or path.name}")
    df.columns = [str(c).strip().lower() for c in df.columns]
    records: list[dict[str, Any]] = []
    for raw in df.to_dict(orient="records"):
        records.append({k: (None if pd.isna(v) else v) for k, v in raw.items()})
    return [Equipment.from_record(r) for r in records]
