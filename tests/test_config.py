import json

from gradesync.config_schema import DEFAULT_CONFIG, get_default_config, load_config, merge_config
from gradesync.models import ScoreConfig
from gradesync.writer import TemplateLayout


def test_get_default_config_returns_a_copy():
    config = get_default_config()
    config["weights"]["daily"] = 99
    config["template"]["weight_columns"]["Daily"] = 1
    assert DEFAULT_CONFIG["weights"]["daily"] == 10
    assert DEFAULT_CONFIG["template"]["weight_columns"]["Daily"] == 6


def test_merge_config_keeps_unset_defaults():
    config = merge_config({"weights": {"daily": 20}, "passing_grade": "C"})
    assert config["weights"] == {"daily": 20, "midterm": 40, "final": 50}
    assert config["passing_grade"] == "C"
    assert config["matcher"]["max_columns"] == 30


def test_merge_config_updates_nested_template_sections():
    config = merge_config({
        "template": {
            "colors": {"fail": "FF0000FF"},
            "label_scan_rows": 10,
        }
    })
    assert config["template"]["colors"] == {"fail": "FF0000FF", "below_passing": "FFFF4500"}
    assert config["template"]["label_scan_rows"] == 10
    assert config["template"]["score_columns"]["total"] == 11


def test_merge_config_mapping_and_output():
    config = merge_config({"mapping": {"id": "ID number"}, "output_file": "out.xlsx"})
    assert config["mapping"]["id"] == "ID number"
    assert config["mapping"]["final"] == ""
    assert config["output_file"] == "out.xlsx"


def test_load_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"weights": {"daily": 0, "midterm": 50, "final": 50}}), encoding="utf-8")
    config = load_config(path)
    assert config["weights"]["midterm"] == 50
    assert config["passing_grade"] == "D"


def test_score_config_from_config():
    score_config = ScoreConfig.from_config(merge_config({"weights": {"daily": "15"}, "passing_grade": "B"}))
    assert score_config.daily_weight == 15.0
    assert score_config.midterm_weight == 40.0
    assert score_config.passing_grade == "B"


def test_layout_from_merged_config():
    layout = TemplateLayout.from_config(merge_config({"template": {"label_row_offset": 2}}))
    assert layout.label_row_offset == 2
    assert layout.weight_columns["Final"] == 10
