from gradesync.config_schema import get_default_config
from gradesync.matcher import MatchResult
from gradesync.models import FieldMapping, GradeRecord, MatchedRecord
from gradesync.validators import unmatched_records, validate_config, validate_mapping, validate_records

HEADERS = ["sid", "first", "last", "d", "m", "f"]
FULL_MAPPING = FieldMapping(id="sid", first_name="first", last_name="last", daily="d", midterm="m", final="f")


def _messages(issues, kind):
    return [issue["message"] for issue in issues if issue["type"] == kind]


def test_default_config_is_valid():
    assert validate_config(get_default_config()) == []


def test_weights_not_summing_to_100_warn():
    config = get_default_config()
    config["weights"] = {"daily": 10, "midterm": 30, "final": 50}
    issues = validate_config(config)
    assert _messages(issues, "warning") == ["Weights sum to 90% (should be 100%)"]
    assert _messages(issues, "error") == []


def test_weights_over_100_are_errors():
    config = get_default_config()
    config["weights"]["final"] = 60
    assert _messages(validate_config(config), "error") == ["Weights sum to 110% (cannot exceed 100%)"]


def test_negative_and_non_numeric_weights():
    config = get_default_config()
    config["weights"] = {"daily": -10, "midterm": "forty", "final": 50}
    errors = _messages(validate_config(config), "error")
    assert "Daily weight cannot be negative" in errors
    assert "Midterm weight 'forty' is not a number" in errors


def test_unknown_passing_grade():
    config = get_default_config()
    config["passing_grade"] = "E"
    assert _messages(validate_config(config), "error") == ["Passing grade 'E' is not on the grade scale"]


def test_complete_mapping_is_valid():
    assert validate_mapping(FULL_MAPPING, HEADERS) == []


def test_mapping_missing_fields():
    mapping = FieldMapping(id="sid", daily="d", midterm="m", final="f")
    errors = _messages(validate_mapping(mapping, HEADERS), "error")
    assert errors == ["No column selected for first name", "No column selected for last name"]


def test_mapping_header_not_in_csv():
    mapping = FieldMapping.from_dict({**FULL_MAPPING.as_dict(), "final": "Final total"})
    errors = _messages(validate_mapping(mapping, HEADERS), "error")
    assert errors == ["Column 'Final total' for final not found in CSV"]


def test_mapping_reused_header_warns():
    mapping = FieldMapping.from_dict({**FULL_MAPPING.as_dict(), "midterm": "f"})
    assert _messages(validate_mapping(mapping, HEADERS), "warning") == ["Column 'f' is used for 2 fields"]


def test_validate_records():
    records = [
        GradeRecord(id="A1", first_name="", last_name="", daily=10, midterm=20, final=30),
        GradeRecord(id="a1 ", first_name="", last_name="", daily=10, midterm=20, final=30),
        GradeRecord(id="B2", first_name="", last_name="", daily=10, midterm=120, final=30),
    ]
    warnings = _messages(validate_records(records), "warning")
    assert warnings == ["Duplicate student ids: a1", "1 student(s) have scores above 100"]


def test_validate_records_clean(records):
    assert validate_records(records) == []


def test_unmatched_records(records):
    match = MatchResult(matches=[MatchedRecord.from_record(records[0], row_number=6, sheet_name="Section 1")])
    missing = unmatched_records(records, match)
    assert [record.id for record in missing] == ["1002", "1003"]
