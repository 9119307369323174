"""
Spreadsheet ingestion tests
"""
import io

import pandas as pd
import pytest

from hrportal.core.exceptions import BadRequestException
from hrportal.services.spreadsheet import (
    read_spreadsheet,
    normalize_employee_row,
    normalize_role_row,
    split_list,
)


def test_read_csv_rows():
    content = (
        "Employee ID , Name,Position\n"
        "1001,Budi Santoso,Engineer\n"
        ",,\n"
        "1002,Sari Wijaya,Analyst\n"
    ).encode()
    rows = read_spreadsheet(content, "roster.csv")
    assert len(rows) == 2
    assert rows[0]["Employee ID"] == "1001"
    assert rows[0]["Name"] == "Budi Santoso"
    assert rows[0]["source_file"] == "roster.csv"
    assert rows[0]["source_sheet"] == "csv"


def test_read_workbook_reads_every_sheet():
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame([{"RoleID": 101, "RoleTitle": "RAN Engineer"}]).to_excel(writer, sheet_name="XL", index=False)
        pd.DataFrame([{"RoleID": 201, "RoleTitle": "Core Engineer"}]).to_excel(writer, sheet_name="SMART", index=False)

    rows = read_spreadsheet(buffer.getvalue(), "roles.xlsx")
    assert [row["source_sheet"] for row in rows] == ["XL", "SMART"]
    assert rows[1]["RoleTitle"] == "Core Engineer"


def test_unsupported_extension():
    with pytest.raises(BadRequestException):
        read_spreadsheet(b"data", "roster.txt")


def test_normalize_employee_row_aliases():
    employee = normalize_employee_row({
        "Employee ID": 1001.0,
        "Name": "Budi Santoso Putra",
        "Job Title": "Network Engineer",
        "Dept": "Network Operations",
        "Years of Experience": "7.0",
        "Skills": "5G; LTE, IP Networking",
        "Unknown Column": "ignored",
    }, default_company="XL")
    assert employee.employee_number == "1001"
    assert employee.first_name == "Budi"
    assert employee.last_name == "Santoso Putra"
    assert employee.current_position == "Network Engineer"
    assert employee.current_department == "Network Operations"
    assert employee.years_of_experience == 7
    assert employee.skills == ["5G", "LTE", "IP Networking"]
    assert employee.source_company == "xl"


def test_normalize_employee_row_missing_fields():
    with pytest.raises(ValueError, match="employee_number"):
        normalize_employee_row({"Name": "No Number", "Position": "Clerk"})


def test_normalize_employee_row_invalid_values():
    with pytest.raises(ValueError, match="performance_rating"):
        normalize_employee_row({
            "Employee ID": "1",
            "Name": "Ana",
            "Position": "Clerk",
            "Rating": 9,
        })


def test_normalize_role_row():
    role = normalize_role_row({
        "RoleID": 101.0,
        "RoleTitle": "RAN Engineer",
        "Department": "Network",
        "ExperienceMinYears": "4",
        "RequiredSkills": "RAN, 5G",
    }, source_company="xl")
    assert role["role_code"] == "101"
    assert role["role_title"] == "RAN Engineer"
    assert role["experience_min_years"] == 4
    assert role["required_skills"] == "RAN, 5G"
    assert role["source_company"] == "xl"
    assert role["education"] is None

    assert normalize_role_row({}, source_company="smart")["role_title"] == "Unknown Role"


def test_split_list():
    assert split_list(None) == []
    assert split_list(["a ", "", "b"]) == ["a", "b"]
    assert split_list("a,b;\nc") == ["a", "b", "c"]
