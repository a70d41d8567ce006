"""Data types shared by the extractor, matcher, calculator and writer."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any


@dataclass(frozen=True)
class GradeScaleEntry:
    label: str
    minimum: float


# Ordered from the highest band down; the last band catches everything from 0.
GRADE_SCALE: tuple[GradeScaleEntry, ...] = (
    GradeScaleEntry("A", 80),
    GradeScaleEntry("B+", 75),
    GradeScaleEntry("B", 70),
    GradeScaleEntry("C+", 65),
    GradeScaleEntry("C", 60),
    GradeScaleEntry("D+", 55),
    GradeScaleEntry("D", 50),
    GradeScaleEntry("F", 0),
)

FAIL_LABEL = "F"


def scale_labels(scale: tuple[GradeScaleEntry, ...] = GRADE_SCALE) -> list[str]:
    """Return the labels of a grade scale, highest band first."""
    return [entry.label for entry in scale]


@dataclass(frozen=True)
class FieldMapping:
    """Which source column header supplies which record field."""

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    daily: str = ""
    midterm: str = ""
    final: str = ""

    @classmethod
    def from_dict(cls, mapping: dict[str, Any] | None) -> "FieldMapping":
        mapping = mapping or {}
        values = {}
        for f in fields(cls):
            value = mapping.get(f.name)
            values[f.name] = str(value).strip() if value is not None else ""
        return cls(**values)

    def as_dict(self) -> dict[str, str]:
        return asdict(self)

    def missing_fields(self) -> list[str]:
        """Names of the fields that have no column assigned."""
        return [name for name, header in self.as_dict().items() if not header]

    def is_complete(self) -> bool:
        return not self.missing_fields()


@dataclass(frozen=True)
class GradeRecord:
    """One student's raw scores as read from the source file."""

    id: str
    first_name: str
    last_name: str
    daily: float
    midterm: float
    final: float

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class MatchedRecord(GradeRecord):
    """A GradeRecord located at a physical row of a template sheet."""

    row_number: int
    sheet_name: str

    @classmethod
    def from_record(cls, record: GradeRecord, row_number: int, sheet_name: str) -> "MatchedRecord":
        values = {f.name: getattr(record, f.name) for f in fields(GradeRecord)}
        return cls(**values, row_number=row_number, sheet_name=sheet_name)


@dataclass(frozen=True)
class ScoreConfig:
    """Component weights (in percent) and the minimum passing grade."""

    daily_weight: float
    midterm_weight: float
    final_weight: float
    passing_grade: str = "D"

    def __post_init__(self):
        for name in ("daily_weight", "midterm_weight", "final_weight"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.passing_grade not in scale_labels():
            raise ValueError(f"Unknown passing grade '{self.passing_grade}'")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ScoreConfig":
        """Build a ScoreConfig from a (merged) configuration dictionary."""
        weights = config.get("weights", {})
        return cls(
            daily_weight=float(weights.get("daily", 0)),
            midterm_weight=float(weights.get("midterm", 0)),
            final_weight=float(weights.get("final", 0)),
            passing_grade=config.get("passing_grade", "D"),
        )


@dataclass
class SyncResult:
    """Outcome of a write operation."""

    success: bool
    message: str
    output: bytes | None = None
    logs: list[str] = field(default_factory=list)
