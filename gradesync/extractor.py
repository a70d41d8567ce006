"""Read student grade records out of a CSV gradebook export."""

from io import BytesIO, StringIO
from pathlib import Path
from typing import IO, Any
import logging
import math
import re

import pandas as pd

from .errors import EmptySourceError
from .models import FieldMapping, GradeRecord

logger = logging.getLogger(__name__)

CsvSource = str | Path | bytes | IO[str] | IO[bytes]

_LEADING_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _as_readable(source: CsvSource):
    if isinstance(source, (bytes, bytearray)):
        return BytesIO(bytes(source))
    return source


def _clean_header(header: Any) -> str:
    return str(header).lstrip("\ufeff").strip()


def read_csv(source: CsvSource) -> pd.DataFrame:
    """Read a CSV export with every cell kept as text."""
    # dtype=str keeps ids such as "00123" intact; utf-8-sig drops the BOM Moodle writes.
    return pd.read_csv(
        _as_readable(source),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )


def read_headers(source: CsvSource) -> list[str]:
    """Return the header row of a CSV source, or an empty list for empty input."""
    try:
        df = pd.read_csv(_as_readable(source), dtype=str, nrows=0, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        return []
    return [_clean_header(col) for col in df.columns]


def parse_score(value: Any) -> float:
    """
    Parse a component score permissively.

    The leading number of the text is used, so "85.00 %" reads as 85 and
    "90 / 100" as 90. Empty cells, a lone dash and text without a leading
    number give 0 so a single malformed cell never aborts an import.
    Negative scores are clamped to 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if not match:
            return 0.0
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    if number < 0:
        logger.warning("Negative score %s treated as 0", value)
        return 0.0
    return number


def _cell(row: pd.Series, column: str) -> str:
    if not column or column not in row.index:
        return ""
    value = row[column]
    return "" if value is None else str(value).strip()


def dataframe_to_records(df: pd.DataFrame, mapping: FieldMapping) -> list[GradeRecord]:
    """Convert a text DataFrame into GradeRecords using a field mapping."""
    df = df.rename(columns=_clean_header)
    missing = [header for header in mapping.as_dict().values() if header and header not in df.columns]
    if missing:
        logger.warning("Mapped columns not found in source: %s", missing)

    records = []
    for _, row in df.iterrows():
        student_id = _cell(row, mapping.id)
        if not student_id:
            continue
        records.append(
            GradeRecord(
                id=student_id,
                first_name=_cell(row, mapping.first_name),
                last_name=_cell(row, mapping.last_name),
                daily=parse_score(_cell(row, mapping.daily)),
                midterm=parse_score(_cell(row, mapping.midterm)),
                final=parse_score(_cell(row, mapping.final)),
            )
        )

    dropped = len(df) - len(records)
    if dropped:
        logger.info("Skipped %d source rows without a student id", dropped)

    if not records:
        raise EmptySourceError("No valid student data found in CSV based on current mapping.")
    return records


def extract_records(source: CsvSource, mapping: FieldMapping) -> list[GradeRecord]:
    """
    Parse a CSV source into grade records.

    Args:
        source: Path, file object, raw bytes of the CSV file
        mapping: Column headers to read each field from

    Returns:
        One GradeRecord per data row with a non-empty id.

    Raises:
        EmptySourceError: if no row yields a record.
    """
    try:
        df = read_csv(source)
    except pd.errors.EmptyDataError as exc:
        raise EmptySourceError("The CSV file is empty.") from exc
    return dataframe_to_records(df, mapping)


def extract_records_from_text(text: str, mapping: FieldMapping) -> list[GradeRecord]:
    """Parse CSV text (header row followed by data rows) into grade records."""
    return extract_records(StringIO(text), mapping)
