import pytest

from gradesync.errors import EmptySourceError
from gradesync.extractor import extract_records, extract_records_from_text, parse_score, read_headers
from gradesync.models import FieldMapping

MOODLE_MAPPING = FieldMapping(
    id="ID number",
    first_name="First name",
    last_name="Last name",
    daily="Daily total (Real)",
    midterm="Midterm total (Real)",
    final="Final total (Real)",
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("85", 85.0),
        (" 72.5 ", 72.5),
        (90, 90.0),
        ("", 0.0),
        ("   ", 0.0),
        ("-", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("nan", 0.0),
        ("-4", 0.0),
        ("85.00 %", 85.0),
        ("72.5%", 72.5),
        ("90 / 100", 90.0),
        (".5", 0.5),
        ("Absent 40", 0.0),
    ],
)
def test_parse_score_is_permissive(raw, expected):
    assert parse_score(raw) == expected


def test_extract_records_from_text(source_csv):
    records = extract_records_from_text(source_csv, MOODLE_MAPPING)

    ids = [record.id for record in records]
    # The blank separator row and the id-less footer row are dropped.
    assert ids == ["1001", "1002", "1003", "1004"]

    ada = records[0]
    assert ada.first_name == "Ada"
    assert ada.last_name == "Lovelace"
    assert (ada.daily, ada.midterm, ada.final) == (80.0, 70.0, 90.0)
    assert ada.full_name == "Ada Lovelace"


def test_malformed_scores_default_to_zero(source_csv):
    records = extract_records_from_text(source_csv, MOODLE_MAPPING)
    dijkstra = next(record for record in records if record.id == "1004")
    assert (dijkstra.daily, dijkstra.midterm, dijkstra.final) == (0.0, 0.0, 0.0)


def test_ids_are_trimmed_and_keep_leading_zeros():
    csv = "sid,daily\n  00123  ,10\n"
    records = extract_records_from_text(csv, FieldMapping(id="sid", daily="daily"))
    assert records[0].id == "00123"


def test_unmapped_columns_read_as_empty():
    csv = "sid,daily\nA1,10\n"
    records = extract_records_from_text(csv, FieldMapping(id="sid", daily="daily", final="Final total"))
    assert records[0].final == 0.0
    assert records[0].first_name == ""


def test_wrong_mapping_raises_empty_source(source_csv):
    with pytest.raises(EmptySourceError):
        extract_records_from_text(source_csv, FieldMapping(id="Student Number"))


def test_empty_mapping_raises_empty_source(source_csv):
    with pytest.raises(EmptySourceError):
        extract_records_from_text(source_csv, FieldMapping())


def test_empty_file_raises_empty_source():
    with pytest.raises(EmptySourceError):
        extract_records(b"", MOODLE_MAPPING)


def test_extract_from_bytes_with_bom(source_csv):
    data = source_csv.encode("utf-8-sig")
    records = extract_records(data, MOODLE_MAPPING)
    assert len(records) == 4


def test_extract_from_path(tmp_path, source_csv):
    path = tmp_path / "grades.csv"
    path.write_text(source_csv, encoding="utf-8")
    records = extract_records(path, MOODLE_MAPPING)
    assert records[2].id == "1003"


def test_read_headers(source_csv):
    headers = read_headers(source_csv.encode("utf-8-sig"))
    assert headers[0] == "ID number"
    assert "Final total (Real)" in headers


def test_read_headers_empty_input():
    assert read_headers(b"") == []


def test_percentage_display_cells_keep_their_value():
    csv = "sid,daily,midterm,final\nA1,85.00 %,72.5%,90 / 100\n"
    records = extract_records_from_text(csv, FieldMapping(id="sid", daily="daily", midterm="midterm", final="final"))
    assert (records[0].daily, records[0].midterm, records[0].final) == (85.0, 72.5, 90.0)
