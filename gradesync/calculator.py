"""Weighted totals, letter grades and class statistics."""

from dataclasses import dataclass
from typing import Iterable
import math

import pandas as pd

from .models import FAIL_LABEL, GRADE_SCALE, GradeRecord, GradeScaleEntry, MatchedRecord, ScoreConfig

FAILURE_FAIL = "fail"
FAILURE_BELOW_PASSING = "below_passing"


@dataclass(frozen=True)
class GradeStatus:
    total: int
    label: str
    failure: str | None = None

    @property
    def is_failing(self) -> bool:
        return self.failure is not None


@dataclass(frozen=True)
class ClassStatistics:
    count: int
    average: float
    median: int
    highest: int
    lowest: int
    pass_count: int
    fail_count: int
    pass_rate: float
    grade_distribution: dict[str, int]
    component_averages: dict[str, float]


def calculate_total(record: GradeRecord, config: ScoreConfig) -> int:
    """Weighted sum of the three components, always rounded up."""
    weighted = (
        record.daily * config.daily_weight / 100
        + record.midterm * config.midterm_weight / 100
        + record.final * config.final_weight / 100
    )
    # Drop float noise first so 81.00000000000001 is not bumped to 82.
    return math.ceil(round(weighted, 9))


def letter_grade(total: float, scale: tuple[GradeScaleEntry, ...] = GRADE_SCALE) -> str:
    for entry in scale:
        if total >= entry.minimum:
            return entry.label
    return scale[-1].label


def passing_threshold(passing_grade: str, scale: tuple[GradeScaleEntry, ...] = GRADE_SCALE) -> float:
    """Minimum total of the band labelled passing_grade."""
    for entry in scale:
        if entry.label == passing_grade:
            return entry.minimum
    raise ValueError(f"Unknown passing grade '{passing_grade}'")


def grade_status(
    total: int,
    passing_grade: str,
    scale: tuple[GradeScaleEntry, ...] = GRADE_SCALE,
) -> GradeStatus:
    """
    Classify a total.

    An "F" always fails. Any other grade fails when the total is below the
    minimum of the configured passing band.
    """
    label = letter_grade(total, scale)
    if label == FAIL_LABEL:
        return GradeStatus(total, label, FAILURE_FAIL)
    if total < passing_threshold(passing_grade, scale):
        return GradeStatus(total, label, FAILURE_BELOW_PASSING)
    return GradeStatus(total, label)


def record_status(
    record: GradeRecord,
    config: ScoreConfig,
    scale: tuple[GradeScaleEntry, ...] = GRADE_SCALE,
) -> GradeStatus:
    return grade_status(calculate_total(record, config), config.passing_grade, scale)


def is_failing(record: GradeRecord, config: ScoreConfig) -> bool:
    return record_status(record, config).is_failing


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def calculate_statistics(
    records: Iterable[GradeRecord],
    config: ScoreConfig,
    scale: tuple[GradeScaleEntry, ...] = GRADE_SCALE,
) -> ClassStatistics | None:
    """
    Aggregate statistics over a set of records.

    The median is the element at index len // 2 of the sorted totals; the two
    middle values of an even-sized class are not averaged.

    Returns:
        ClassStatistics, or None when there are no records.
    """
    records = list(records)
    if not records:
        return None

    statuses = [record_status(record, config, scale) for record in records]
    totals = sorted(status.total for status in statuses)
    fail_count = sum(1 for status in statuses if status.is_failing)
    pass_count = len(statuses) - fail_count

    distribution = {entry.label: 0 for entry in scale}
    for status in statuses:
        distribution[status.label] += 1

    return ClassStatistics(
        count=len(records),
        average=_mean(totals),
        median=totals[len(totals) // 2],
        highest=totals[-1],
        lowest=totals[0],
        pass_count=pass_count,
        fail_count=fail_count,
        pass_rate=pass_count / len(records) * 100,
        grade_distribution=distribution,
        component_averages={
            "daily": _mean([record.daily for record in records]),
            "midterm": _mean([record.midterm for record in records]),
            "final": _mean([record.final for record in records]),
        },
    )


PREVIEW_COLUMNS = [
    "Sheet",
    "Row",
    "Student ID",
    "Name",
    "Daily",
    "Midterm",
    "Final",
    "Total",
    "Grade",
    "Status",
]


def build_preview_frame(records: Iterable[MatchedRecord], config: ScoreConfig) -> pd.DataFrame:
    """Tabulate matched records with their computed totals and grades."""
    rows = []
    for record in records:
        status = record_status(record, config)
        if status.failure == FAILURE_FAIL:
            state = "Fail"
        elif status.failure == FAILURE_BELOW_PASSING:
            state = "Below passing"
        else:
            state = "Pass"
        rows.append(
            {
                "Sheet": record.sheet_name,
                "Row": record.row_number,
                "Student ID": record.id,
                "Name": record.full_name,
                "Daily": record.daily,
                "Midterm": record.midterm,
                "Final": record.final,
                "Total": status.total,
                "Grade": status.label,
                "Status": state,
            }
        )
    return pd.DataFrame(rows, columns=PREVIEW_COLUMNS)
