from io import BytesIO

import pytest
from openpyxl import Workbook
from openpyxl.styles import Font

from gradesync.models import GradeRecord, ScoreConfig

SOURCE_CSV = """ID number,First name,Last name,Email address,Daily total (Real),Midterm total (Real),Final total (Real)
1001,Ada,Lovelace,ada@example.com,80,70,90
1002,Alan,Turing,alan@example.com,0,0,49
1003,Grace,Hopper,grace@example.com,55,50,52
1004,Edsger,Dijkstra,edsger@example.com,-,abc,
,,,,,,
,,,Overall average,60,50,55
"""


def workbook_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def add_grade_sheet(wb: Workbook, title: str, students: list[tuple[str, str]], first_row: int = 6):
    """Lay out a sheet the way the supported templates do."""
    ws = wb.create_sheet(title=title)
    ws["A1"] = f"{title} grade sheet"
    ws["E3"] = "Daily"
    ws["G3"] = "Midterm"
    ws["I3"] = "Final"
    ws["A5"] = "No."
    ws["B5"] = "Student ID"
    ws["C5"] = "Name"
    for offset, (student_id, name) in enumerate(students):
        row = first_row + offset
        ws.cell(row=row, column=1, value=offset + 1)
        ws.cell(row=row, column=2, value=student_id)
        ws.cell(row=row, column=3, value=name)
        ws.cell(row=row, column=6, value=f"=E{row}*$F$4")
        ws.cell(row=row, column=8, value=f"=G{row}*$H$4")
        ws.cell(row=row, column=10, value=f"=I{row}*$J$4")
        ws.cell(row=row, column=11, value=f"=ROUNDUP(F{row}+H{row}+J{row},0)")
        for column in range(5, 12):
            ws.cell(row=row, column=column).font = Font(name="Calibri", size=12, bold=True)
    return ws


@pytest.fixture()
def template_bytes():
    wb = Workbook()
    wb.remove(wb.active)
    add_grade_sheet(wb, "Section 1", [("1001", "Ada Lovelace"), ("1002", "Alan Turing")])
    add_grade_sheet(wb, "Section 2", [("1003", "Grace Hopper"), ("1001", "Ada Lovelace")])
    notes = wb.create_sheet(title="Notes")
    notes["A1"] = "Remember to submit by Friday"
    notes["B2"] = 1001.5
    return workbook_bytes(wb)


@pytest.fixture()
def records():
    return [
        GradeRecord(id="1001", first_name="Ada", last_name="Lovelace", daily=80, midterm=70, final=90),
        GradeRecord(id="1002", first_name="Alan", last_name="Turing", daily=0, midterm=0, final=49),
        GradeRecord(id="1003", first_name="Grace", last_name="Hopper", daily=55, midterm=50, final=52),
    ]


@pytest.fixture()
def score_config():
    return ScoreConfig(daily_weight=10, midterm_weight=40, final_weight=50, passing_grade="D")


@pytest.fixture()
def source_csv():
    return SOURCE_CSV


@pytest.fixture()
def save_workbook():
    return workbook_bytes


@pytest.fixture()
def grade_sheet():
    return add_grade_sheet
