"""Core module for synchronizing gradebook exports into spreadsheet templates."""

from .config_schema import DEFAULT_CONFIG, get_default_config, load_config, merge_config
from .errors import EmptySourceError, GradeSyncError, NoMatchError, TemplateReadError, WriteError
from .models import (
    GRADE_SCALE,
    FieldMapping,
    GradeRecord,
    GradeScaleEntry,
    MatchedRecord,
    ScoreConfig,
    SyncResult,
)
from .extractor import extract_records, extract_records_from_text, parse_score, read_headers
from .matcher import MatchResult, load_template, match_records
from .calculator import (
    ClassStatistics,
    GradeStatus,
    build_preview_frame,
    calculate_statistics,
    calculate_total,
    grade_status,
    letter_grade,
)
from .writer import TemplateLayout, write_grades
from .mapping import resolve_mapping, suggest_mapping
from .validators import unmatched_records, validate_config, validate_mapping, validate_records
from .pipeline import PipelineResult, require_matches, sync_grades

__all__ = [
    "DEFAULT_CONFIG",
    "get_default_config",
    "load_config",
    "merge_config",
    "GradeSyncError",
    "EmptySourceError",
    "TemplateReadError",
    "NoMatchError",
    "WriteError",
    "GRADE_SCALE",
    "FieldMapping",
    "GradeRecord",
    "GradeScaleEntry",
    "MatchedRecord",
    "ScoreConfig",
    "SyncResult",
    "extract_records",
    "extract_records_from_text",
    "parse_score",
    "read_headers",
    "MatchResult",
    "load_template",
    "match_records",
    "ClassStatistics",
    "GradeStatus",
    "build_preview_frame",
    "calculate_statistics",
    "calculate_total",
    "grade_status",
    "letter_grade",
    "TemplateLayout",
    "write_grades",
    "resolve_mapping",
    "suggest_mapping",
    "unmatched_records",
    "validate_config",
    "validate_mapping",
    "validate_records",
    "PipelineResult",
    "require_matches",
    "sync_grades",
]
