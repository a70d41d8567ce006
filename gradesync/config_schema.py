"""Configuration schema and defaults for grade synchronization."""

from pathlib import Path
from typing import Any
import copy
import json

DEFAULT_CONFIG: dict[str, Any] = {
    "weights": {
        "daily": 10,
        "midterm": 40,
        "final": 50
    },
    "passing_grade": "D",
    "mapping": {
        "id": "",
        "first_name": "",
        "last_name": "",
        "daily": "",
        "midterm": "",
        "final": ""
    },
    "matcher": {
        "max_columns": 30
    },
    "template": {
        "label_scan_rows": 50,
        "label_scan_columns": 20,
        "label_row_offset": 1,
        "weight_columns": {"Daily": 6, "Midterm": 8, "Final": 10},
        "score_columns": {"daily": 5, "midterm": 7, "final": 9, "total": 11},
        "percent_columns": [6, 8, 10],
        "colored_columns": [5, 6, 7, 8, 9, 10, 11],
        "component_format": "#,#0.0",
        "total_format": "0",
        "colors": {
            "fail": "FFFF0000",
            "below_passing": "FFFF4500"
        }
    },
    "output_file": ""
}


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(user_config: dict[str, Any]) -> dict[str, Any]:
    """
    Merge user configuration with defaults.

    User config values override defaults. Missing keys use default values.
    """
    result = get_default_config()

    if "weights" in user_config:
        result["weights"].update(user_config["weights"])

    if "passing_grade" in user_config:
        result["passing_grade"] = user_config["passing_grade"]

    if "mapping" in user_config:
        result["mapping"].update(user_config["mapping"])

    if "matcher" in user_config:
        result["matcher"].update(user_config["matcher"])

    if "template" in user_config:
        template = user_config["template"]
        for key, value in template.items():
            if isinstance(value, dict) and isinstance(result["template"].get(key), dict):
                result["template"][key].update(value)
            else:
                result["template"][key] = value

    if "output_file" in user_config:
        result["output_file"] = user_config["output_file"]

    return result


def load_config(config_path: str | Path) -> dict[str, Any]:
    """Load a JSON configuration file and merge it over the defaults."""
    with open(config_path, "r", encoding="utf-8") as f:
        return merge_config(json.load(f))
