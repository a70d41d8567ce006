"""Advisory validation for configuration, column mappings and records."""

from collections import Counter
from typing import Any, Iterable

from .models import FieldMapping, GradeRecord, scale_labels
from .matcher import MatchResult, normalize_id


def validate_config(config: dict[str, Any]) -> list[dict[str, str]]:
    """
    Validate configuration and return list of issues.

    Returns:
        List of dicts with 'type' (error/warning) and 'message'.
    """
    issues = []

    weights = config.get("weights", {})
    total_weight = 0.0
    for name in ("daily", "midterm", "final"):
        value = weights.get(name, 0)
        try:
            value = float(value)
        except (TypeError, ValueError):
            issues.append({
                "type": "error",
                "message": f"{name.title()} weight '{value}' is not a number"
            })
            continue
        if value < 0:
            issues.append({
                "type": "error",
                "message": f"{name.title()} weight cannot be negative"
            })
        total_weight += value

    # Weights are percentages
    if total_weight > 100.001:
        issues.append({
            "type": "error",
            "message": f"Weights sum to {total_weight:g}% (cannot exceed 100%)"
        })
    elif abs(total_weight - 100) > 0.001:
        issues.append({
            "type": "warning",
            "message": f"Weights sum to {total_weight:g}% (should be 100%)"
        })

    passing_grade = config.get("passing_grade", "D")
    if passing_grade not in scale_labels():
        issues.append({
            "type": "error",
            "message": f"Passing grade '{passing_grade}' is not on the grade scale"
        })

    return issues


def validate_mapping(mapping: FieldMapping, headers: list[str]) -> list[dict[str, str]]:
    """
    Check that every field is mapped to a header present in the source file.

    Returns:
        List of dicts with 'type' and 'message'.
    """
    issues = []

    for field_name in mapping.missing_fields():
        issues.append({
            "type": "error",
            "message": f"No column selected for {field_name.replace('_', ' ')}"
        })

    assigned = {name: header for name, header in mapping.as_dict().items() if header}
    for field_name, header in assigned.items():
        if header not in headers:
            issues.append({
                "type": "error",
                "message": f"Column '{header}' for {field_name.replace('_', ' ')} not found in CSV"
            })

    counts = Counter(assigned.values())
    for header, count in counts.items():
        if count > 1:
            issues.append({
                "type": "warning",
                "message": f"Column '{header}' is used for {count} fields"
            })

    return issues


def validate_records(records: Iterable[GradeRecord], max_score: float = 100) -> list[dict[str, str]]:
    """Report duplicate ids and component scores above max_score."""
    issues = []
    records = list(records)

    counts = Counter(normalize_id(record.id) for record in records)
    duplicates = sorted(student_id for student_id, count in counts.items() if count > 1)
    if duplicates:
        issues.append({
            "type": "warning",
            "message": f"Duplicate student ids: {', '.join(duplicates)}"
        })

    over_max = [
        record.id for record in records
        if max(record.daily, record.midterm, record.final) > max_score
    ]
    if over_max:
        issues.append({
            "type": "warning",
            "message": f"{len(over_max)} student(s) have scores above {max_score:g}"
        })

    return issues


def unmatched_records(records: Iterable[GradeRecord], match: MatchResult) -> list[GradeRecord]:
    """Source records that were not found in any sheet."""
    matched = match.matched_ids
    return [record for record in records if normalize_id(record.id) not in matched]
