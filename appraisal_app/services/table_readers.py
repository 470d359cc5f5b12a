# appraisal_app/services/table_readers.py
"""
Decode uploaded CSV / XLSX files into a 2-D string table for the Section B
codec, and render a table back into a downloadable file.
"""
import csv
import io
import re
from datetime import date, datetime
from io import TextIOWrapper
from pathlib import Path
from typing import Any, BinaryIO, List

import openpyxl

CSV_SUFFIXES = {".csv"}
XLSX_SUFFIXES = {".xlsx", ".xlsm"}

_PLAIN_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")


# ---------- Public API ----------

def parse_table_upload(request) -> List[List[str]]:
    """
    Return the table from either a multipart CSV/XLSX uploaded under the
    'file' key or a JSON body carrying it as "table": [[...], ...].
    """
    if "file" in request.FILES:
        f = request.FILES["file"]
        return read_table(f.file, f.name)

    # JSON
    data = request.data.get("table") if hasattr(request.data, "get") else None
    if not isinstance(data, list) or not all(isinstance(r, (list, tuple)) for r in data):
        raise ValueError('Expected "table" as a JSON array of rows or upload a file as "file".')
    return _drop_blank_rows([[_cell_text(v) for v in r] for r in data])


def read_table(stream: BinaryIO, filename: str) -> List[List[str]]:
    """Read a binary CSV or XLSX stream; the file type comes from `filename`."""
    suffix = Path(filename or "").suffix.lower()

    if suffix in CSV_SUFFIXES:
        text = TextIOWrapper(stream, encoding="utf-8-sig", newline="")
        rows = _drop_blank_rows([[_cell_text(v) for v in r] for r in csv.reader(text)])
        if not rows:
            raise ValueError("CSV appears empty.")
        return rows

    if suffix in XLSX_SUFFIXES:
        wb = openpyxl.load_workbook(stream, data_only=True, read_only=True)
        try:
            ws = wb.active
            rows = _drop_blank_rows(
                [[_cell_text(v) for v in r] for r in ws.iter_rows(values_only=True)]
            )
        finally:
            wb.close()
        if not rows:
            raise ValueError("XLSX sheet appears empty.")
        return rows

    raise ValueError("Unsupported file type. Upload CSV or XLSX.")


def read_table_path(path) -> List[List[str]]:
    path = Path(path)
    with path.open("rb") as fh:
        return read_table(fh, path.name)


def render_csv(table: List[List[Any]]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    for row in table:
        writer.writerow([_cell_text(v) for v in row])
    return out.getvalue()


def render_xlsx(table: List[List[Any]], *, title: str = "Section B") -> bytes:
    """Single-sheet workbook; plain numeric strings are written as numbers."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title[:31]
    for row in table:
        ws.append([_xlsx_value(v) for v in row])
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


# ---------- Internal helpers ----------

def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _xlsx_value(value):
    text = _cell_text(value)
    if _PLAIN_NUMBER_RE.match(text):
        return float(text) if "." in text else int(text)
    return text


def _drop_blank_rows(rows: List[List[str]]) -> List[List[str]]:
    return [r for r in rows if any(cell != "" for cell in r)]
