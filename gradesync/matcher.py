"""Locate student rows inside an arbitrary multi-sheet workbook."""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import IO, Any, Iterable
import logging

from openpyxl import Workbook, load_workbook
from openpyxl.cell.rich_text import CellRichText

from .errors import NoMatchError, TemplateReadError
from .models import GradeRecord, MatchedRecord

logger = logging.getLogger(__name__)

TemplateSource = str | Path | bytes | IO[bytes]

DEFAULT_MAX_COLUMNS = 30


@dataclass
class MatchResult:
    matches: list[MatchedRecord] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)
    sheet_counts: dict[str, int] = field(default_factory=dict)

    @property
    def matched_ids(self) -> set[str]:
        return {normalize_id(match.id) for match in self.matches}


def load_template(source: TemplateSource, data_only: bool = True, keep_vba: bool = False) -> Workbook:
    """
    Parse a workbook from a path, a binary file object or raw bytes.

    Every call returns an independent in-memory copy.

    Raises:
        TemplateReadError: if the source is not a readable workbook.
    """
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(bytes(source))
    try:
        return load_workbook(source, data_only=data_only, keep_vba=keep_vba, rich_text=True)
    except Exception as exc:
        raise TemplateReadError(f"Failed to analyze template structure: {exc}") from exc


def cell_text(value: Any) -> str:
    """Return the rendered text of a cell value."""
    if value is None:
        return ""
    if isinstance(value, CellRichText):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_id(text: Any) -> str:
    return str(text).strip().lower()


def _scan_sheet(ws, vocabulary: set[str], max_columns: int) -> dict[str, int]:
    rows: dict[str, int] = {}
    for row in ws.iter_rows(min_col=1, max_col=max_columns):
        for cell in row:
            normalized = normalize_id(cell_text(cell.value))
            if normalized and normalized in vocabulary:
                rows[normalized] = cell.row
                break
    return rows


def match_workbook(
    workbook: Workbook,
    records: Iterable[GradeRecord],
    max_columns: int = DEFAULT_MAX_COLUMNS,
) -> MatchResult:
    """Match records against an already loaded workbook."""
    records = list(records)
    vocabulary = {normalize_id(record.id) for record in records if record.id}
    result = MatchResult()

    for ws in workbook.worksheets:
        sheet_rows = _scan_sheet(ws, vocabulary, max_columns)
        result.sheet_counts[ws.title] = len(sheet_rows)

        for record in records:
            row_number = sheet_rows.get(normalize_id(record.id))
            if row_number:
                result.matches.append(MatchedRecord.from_record(record, row_number, ws.title))

        if sheet_rows:
            result.logs.append(f"Matched {len(sheet_rows)} students in sheet '{ws.title}'")
        else:
            result.logs.append(f"No students found in sheet '{ws.title}'")

    logger.info("Matched %d records across %d sheets", len(result.matches), len(result.sheet_counts))
    return result


def match_records(
    template: TemplateSource,
    records: Iterable[GradeRecord],
    max_columns: int = DEFAULT_MAX_COLUMNS,
    strict: bool = False,
) -> MatchResult:
    """
    Find the template row of every source record, sheet by sheet.

    Only cells whose text equals a known source id count as a hit, so a
    grade value can never be mistaken for an identifier. The first hit in a
    row ends the scan of that row.

    Args:
        template: Workbook path, file object or bytes
        records: Source records; their ids form the matching vocabulary
        max_columns: Number of leading columns scanned in each row
        strict: Raise NoMatchError when nothing matches in any sheet

    Returns:
        MatchResult with one MatchedRecord per (record, sheet) hit.
    """
    workbook = load_template(template)
    result = match_workbook(workbook, records, max_columns=max_columns)
    if strict and not result.matches:
        raise NoMatchError("No students matched in the template. Please check your IDs.")
    return result
