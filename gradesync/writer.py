"""Write computed grades back into a copy of the template workbook."""

from copy import copy
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Iterable
import logging

from openpyxl.cell import MergedCell
from openpyxl.workbook.properties import CalcProperties

from .calculator import FAILURE_BELOW_PASSING, FAILURE_FAIL, record_status
from .config_schema import DEFAULT_CONFIG
from .errors import TemplateReadError, WriteError
from .matcher import TemplateSource, cell_text, load_template
from .models import MatchedRecord, ScoreConfig, SyncResult

logger = logging.getLogger(__name__)

_TEMPLATE_DEFAULTS = DEFAULT_CONFIG["template"]


@dataclass(frozen=True)
class TemplateLayout:
    """Cell positions and styles of the supported template layout."""

    label_scan_rows: int = _TEMPLATE_DEFAULTS["label_scan_rows"]
    label_scan_columns: int = _TEMPLATE_DEFAULTS["label_scan_columns"]
    label_row_offset: int = _TEMPLATE_DEFAULTS["label_row_offset"]
    weight_columns: dict[str, int] = field(default_factory=lambda: dict(_TEMPLATE_DEFAULTS["weight_columns"]))
    score_columns: dict[str, int] = field(default_factory=lambda: dict(_TEMPLATE_DEFAULTS["score_columns"]))
    percent_columns: tuple[int, ...] = tuple(_TEMPLATE_DEFAULTS["percent_columns"])
    colored_columns: tuple[int, ...] = tuple(_TEMPLATE_DEFAULTS["colored_columns"])
    component_format: str = _TEMPLATE_DEFAULTS["component_format"]
    total_format: str = _TEMPLATE_DEFAULTS["total_format"]
    colors: dict[str, str] = field(default_factory=lambda: dict(_TEMPLATE_DEFAULTS["colors"]))

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "TemplateLayout":
        template = config.get("template", {})
        defaults = cls()
        return cls(
            label_scan_rows=int(template.get("label_scan_rows", defaults.label_scan_rows)),
            label_scan_columns=int(template.get("label_scan_columns", defaults.label_scan_columns)),
            label_row_offset=int(template.get("label_row_offset", defaults.label_row_offset)),
            weight_columns={**defaults.weight_columns, **template.get("weight_columns", {})},
            score_columns={**defaults.score_columns, **template.get("score_columns", {})},
            percent_columns=tuple(template.get("percent_columns", defaults.percent_columns)),
            colored_columns=tuple(template.get("colored_columns", defaults.colored_columns)),
            component_format=template.get("component_format", defaults.component_format),
            total_format=template.get("total_format", defaults.total_format),
            colors={**defaults.colors, **template.get("colors", {})},
        )


def _label_weights(config: ScoreConfig) -> dict[str, float]:
    return {
        "Daily": config.daily_weight,
        "Midterm": config.midterm_weight,
        "Final": config.final_weight,
    }


def _set_value(ws, row: int, column: int, value, logs: list[str]) -> bool:
    cell = ws.cell(row=row, column=column)
    if isinstance(cell, MergedCell):
        logs.append(f"Skipped merged cell {cell.coordinate} in {ws.title}")
        return False
    cell.value = value
    return True


def _set_number_format(ws, row: int, column: int, number_format: str):
    cell = ws.cell(row=row, column=column)
    if not isinstance(cell, MergedCell):
        cell.number_format = number_format


def _set_font_color(ws, row: int, column: int, argb: str):
    cell = ws.cell(row=row, column=column)
    if isinstance(cell, MergedCell):
        return
    # Copy the existing font so bold, size and family survive; only the colour changes.
    font = copy(cell.font)
    font.color = argb
    cell.font = font


def write_weights(ws, config: ScoreConfig, layout: TemplateLayout, logs: list[str]) -> int:
    """
    Write the configured weights next to the "Daily", "Midterm" and "Final" labels.

    Returns:
        Number of weight cells written.
    """
    weights = _label_weights(config)
    last_row = min(layout.label_scan_rows, ws.max_row)
    written = 0
    for row in ws.iter_rows(min_row=1, max_row=last_row, max_col=layout.label_scan_columns):
        for cell in row:
            label = cell_text(cell.value)
            if label not in weights or label not in layout.weight_columns:
                continue
            target_row = cell.row + layout.label_row_offset
            if _set_value(ws, target_row, layout.weight_columns[label], weights[label] / 100, logs):
                written += 1
    return written


def write_student_row(ws, match: MatchedRecord, config: ScoreConfig, layout: TemplateLayout, logs: list[str]):
    """Write one student's components, number formats and failure colour."""
    row = match.row_number
    columns = layout.score_columns

    _set_value(ws, row, columns["daily"], match.daily, logs)
    _set_value(ws, row, columns["midterm"], match.midterm, logs)
    _set_value(ws, row, columns["final"], match.final, logs)

    for column in layout.percent_columns:
        _set_number_format(ws, row, column, layout.component_format)
    _set_number_format(ws, row, columns["total"], layout.total_format)

    status = record_status(match, config)
    if status.failure == FAILURE_FAIL:
        color = layout.colors["fail"]
    elif status.failure == FAILURE_BELOW_PASSING:
        color = layout.colors["below_passing"]
    else:
        return
    for column in layout.colored_columns:
        _set_font_color(ws, row, column, color)


def _group_by_sheet(matches: Iterable[MatchedRecord]) -> dict[str, list[MatchedRecord]]:
    grouped: dict[str, list[MatchedRecord]] = {}
    for match in matches:
        grouped.setdefault(match.sheet_name, []).append(match)
    return grouped


def write_grades(
    template: TemplateSource,
    matches: Iterable[MatchedRecord],
    config: ScoreConfig,
    layout: TemplateLayout | None = None,
    keep_vba: bool = False,
) -> SyncResult:
    """
    Write matched grades into a fresh copy of the template.

    The template is parsed again from its bytes, so a failure here leaves
    any earlier match result untouched. Errors never propagate: they are
    returned as a failed SyncResult carrying the logs gathered so far.

    Args:
        template: Original workbook path, file object or bytes
        matches: Records located by the matcher
        config: Weights and passing grade
        layout: Template cell positions, defaults to the standard layout
        keep_vba: Preserve the macro project of .xlsm templates

    Returns:
        SyncResult with the serialized workbook on success.
    """
    layout = layout or TemplateLayout()
    logs: list[str] = []

    try:
        logs.append("Reloading template for writing...")
        workbook = load_template(template, data_only=False, keep_vba=keep_vba)
        if workbook.calculation is None:
            workbook.calculation = CalcProperties()
        # Formulas depending on the written cells are recalculated when Excel opens the file.
        workbook.calculation.fullCalcOnLoad = True

        by_sheet = _group_by_sheet(matches)
        for ws in workbook.worksheets:
            weights_written = write_weights(ws, config, layout, logs)
            if weights_written:
                logs.append(f"Updated {weights_written} weight cells in {ws.title}")

            sheet_matches = by_sheet.pop(ws.title, None)
            if sheet_matches:
                for match in sheet_matches:
                    write_student_row(ws, match, config, layout, logs)
                logs.append(f"Updated {len(sheet_matches)} records in {ws.title}")

        for sheet_name, orphaned in by_sheet.items():
            logs.append(f"Sheet '{sheet_name}' not found; {len(orphaned)} records not written")

        buffer = BytesIO()
        workbook.save(buffer)
    except TemplateReadError as exc:
        logger.error("Template reload failed: %s", exc)
        return SyncResult(success=False, message=str(exc), logs=logs)
    except Exception as exc:
        logger.exception("Writing grades failed")
        error = WriteError(f"Error during processing: {exc}")
        return SyncResult(success=False, message=str(error), logs=logs)

    return SyncResult(success=True, message="Processing complete", output=buffer.getvalue(), logs=logs)
