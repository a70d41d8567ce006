"""Extract, match, compute and write in one call."""

from dataclasses import dataclass
from pathlib import Path
from typing import IO
import logging

from .calculator import ClassStatistics, calculate_statistics
from .errors import NoMatchError
from .extractor import CsvSource, extract_records
from .matcher import DEFAULT_MAX_COLUMNS, MatchResult, match_records
from .models import FieldMapping, GradeRecord, ScoreConfig, SyncResult
from .writer import TemplateLayout, write_grades

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    records: list[GradeRecord]
    match: MatchResult
    statistics: ClassStatistics | None
    sync: SyncResult


def read_template_bytes(template: str | Path | bytes | IO[bytes]) -> bytes:
    """Read a template once so that matching and writing parse the same bytes."""
    if isinstance(template, (bytes, bytearray)):
        return bytes(template)
    if isinstance(template, (str, Path)):
        return Path(template).read_bytes()
    return template.read()


def require_matches(result: MatchResult) -> MatchResult:
    if not result.matches:
        raise NoMatchError("No students matched in the template. Please check your IDs.")
    return result


def prepare_matches(
    csv_source: CsvSource,
    template: bytes,
    mapping: FieldMapping,
    max_columns: int = DEFAULT_MAX_COLUMNS,
) -> tuple[list[GradeRecord], MatchResult]:
    """Extract records from the CSV and locate them in the template."""
    records = extract_records(csv_source, mapping)
    logger.info("Extracted %d records from source", len(records))
    return records, match_records(template, records, max_columns=max_columns)


def sync_grades(
    csv_source: CsvSource,
    template: str | Path | bytes | IO[bytes],
    mapping: FieldMapping,
    config: ScoreConfig,
    layout: TemplateLayout | None = None,
    max_columns: int = DEFAULT_MAX_COLUMNS,
    keep_vba: bool = False,
) -> PipelineResult:
    """
    Run the whole synchronization.

    Raises:
        EmptySourceError: no usable records in the CSV
        TemplateReadError: the template is not a workbook
        NoMatchError: no record was found in any sheet
    """
    template_bytes = read_template_bytes(template)
    records, match = prepare_matches(csv_source, template_bytes, mapping, max_columns=max_columns)
    require_matches(match)
    statistics = calculate_statistics(match.matches, config)
    sync = write_grades(template_bytes, match.matches, config, layout=layout, keep_vba=keep_vba)
    return PipelineResult(records=records, match=match, statistics=statistics, sync=sync)
