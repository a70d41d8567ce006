#!/usr/bin/env python3
"""
Grade Sync

Reads a gradebook CSV export and an Excel template, finds every student's
row in the template, and writes weights, scores and failure colours into a
processed copy of the workbook.

Usage:
    python sync_grades.py grades.csv template.xlsx
    python sync_grades.py grades.csv template.xlsm -c config.json -o out.xlsm
    python sync_grades.py grades.csv template.xlsx --daily 20 --midterm 30 --final 50 --passing C
"""

from datetime import date
from pathlib import Path
import argparse
import json
import logging
import sys

from gradesync import (
    FieldMapping,
    GradeSyncError,
    ScoreConfig,
    TemplateLayout,
    build_preview_frame,
    get_default_config,
    load_config,
    read_headers,
    resolve_mapping,
    sync_grades,
    unmatched_records,
    validate_config,
    validate_mapping,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync gradebook CSV scores into an Excel template.")
    parser.add_argument("csv", type=Path, help="Gradebook CSV export")
    parser.add_argument("template", type=Path, help="Excel template (.xlsx or .xlsm)")
    parser.add_argument("-c", "--config", type=Path, help="JSON configuration file")
    parser.add_argument("-o", "--output", type=Path, help="Output workbook path")
    parser.add_argument("--daily", type=float, help="Daily weight in percent")
    parser.add_argument("--midterm", type=float, help="Midterm weight in percent")
    parser.add_argument("--final", type=float, help="Final weight in percent")
    parser.add_argument("--passing", help="Minimum passing letter grade")
    parser.add_argument("--preview", action="store_true", help="Print the matched students table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return parser


def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    """Apply command line weight and passing grade overrides to the config."""
    for name in ("daily", "midterm", "final"):
        value = getattr(args, name)
        if value is not None:
            config["weights"][name] = value
    if args.passing:
        config["passing_grade"] = args.passing
    return config


def default_output_path(template: Path) -> Path:
    extension = ".xlsm" if template.suffix.lower() == ".xlsm" else ".xlsx"
    return template.with_name(f"Processed_Grades_{date.today().isoformat()}{extension}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("📊 Grade Sync")
    print("=" * 40)

    # Load configuration
    try:
        config = load_config(args.config) if args.config else get_default_config()
    except OSError as exc:
        print(f"❌ Error: cannot read config file {args.config}: {exc.strerror or exc}")
        return 1
    except json.JSONDecodeError as exc:
        print(f"❌ Error: invalid JSON in {args.config}: {exc}")
        return 1
    config = apply_overrides(config, args)

    issues = validate_config(config)
    for issue in issues:
        marker = "❌" if issue["type"] == "error" else "⚠️"
        print(f"{marker} {issue['message']}")
    if any(issue["type"] == "error" for issue in issues):
        return 1

    score_config = ScoreConfig.from_config(config)
    layout = TemplateLayout.from_config(config)

    # Resolve the column mapping
    try:
        headers = read_headers(args.csv)
    except OSError as exc:
        print(f"❌ Error: cannot read CSV file {args.csv}: {exc.strerror or exc}")
        return 1
    mapping = FieldMapping.from_dict(config["mapping"])
    if not mapping.is_complete():
        suggested = resolve_mapping(headers)
        mapping = FieldMapping.from_dict({
            name: value or suggested.as_dict()[name]
            for name, value in mapping.as_dict().items()
        })

    mapping_issues = validate_mapping(mapping, headers)
    for issue in mapping_issues:
        marker = "❌" if issue["type"] == "error" else "⚠️"
        print(f"{marker} {issue['message']}")
    if any(issue["type"] == "error" for issue in mapping_issues):
        print(f"   Available columns: {', '.join(headers)}")
        return 1
    print(f"✓ Column mapping: {mapping.as_dict()}")

    # Extract, match and write
    try:
        result = sync_grades(
            args.csv,
            args.template,
            mapping,
            score_config,
            layout=layout,
            max_columns=int(config["matcher"]["max_columns"]),
            keep_vba=args.template.suffix.lower() == ".xlsm",
        )
    except GradeSyncError as exc:
        print(f"❌ Error: {exc}")
        return 1
    except OSError as exc:
        print(f"❌ Error: cannot read template {args.template}: {exc.strerror or exc}")
        return 1

    print(f"✓ Loaded {len(result.records)} students from {args.csv}")
    for line in result.match.logs:
        print(f"   {line}")

    missing = unmatched_records(result.records, result.match)
    if missing:
        print(f"⚠️ {len(missing)} students were not found in any sheet")

    if args.preview:
        print()
        print(build_preview_frame(result.match.matches, score_config).to_string(index=False))

    for line in result.sync.logs:
        print(f"   {line}")
    if not result.sync.success:
        print(f"❌ {result.sync.message}")
        return 1

    output_file = args.output
    if output_file is None:
        output_file = Path(config["output_file"]) if config["output_file"] else default_output_path(args.template)
    output_file.write_bytes(result.sync.output)
    print(f"✓ Saved to {output_file}")

    # Summary
    stats = result.statistics
    print("\n" + "=" * 40)
    print("📋 Summary:")
    print(f"   Matched: {stats.count}")
    print(f"   Average: {stats.average:.1f}   Median: {stats.median}")
    print(f"   Highest: {stats.highest}   Lowest: {stats.lowest}")
    print(f"   Passed: {stats.pass_count}   Failed: {stats.fail_count} ({stats.pass_rate:.1f}% pass rate)")
    distribution = ", ".join(f"{label}: {count}" for label, count in stats.grade_distribution.items())
    print(f"   Grades: {distribution}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
