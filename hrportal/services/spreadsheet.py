"""
Spreadsheet ingestion

Reads .xlsx/.xls/.csv uploads into header-keyed row dicts and normalizes
employee and role rows into model fields.
"""
import io
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from loguru import logger
from pydantic import ValidationError

from hrportal.core.exceptions import BadRequestException
from hrportal.models.employee import EmployeeCreate

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")

# normalized header -> EmployeeCreate field
EMPLOYEE_HEADER_ALIASES: Dict[str, str] = {
    "employeenumber": "employee_number",
    "employeeid": "employee_number",
    "employeeno": "employee_number",
    "empid": "employee_number",
    "nik": "employee_number",
    "id": "employee_number",
    "firstname": "first_name",
    "givenname": "first_name",
    "lastname": "last_name",
    "surname": "last_name",
    "familyname": "last_name",
    "name": "full_name",
    "fullname": "full_name",
    "employeename": "full_name",
    "email": "email",
    "emailaddress": "email",
    "phone": "phone",
    "phonenumber": "phone",
    "mobile": "phone",
    "currentposition": "current_position",
    "position": "current_position",
    "jobtitle": "current_position",
    "title": "current_position",
    "role": "current_position",
    "currentrole": "current_position",
    "currentdepartment": "current_department",
    "department": "current_department",
    "dept": "current_department",
    "division": "current_department",
    "currentlevel": "current_level",
    "level": "current_level",
    "grade": "current_level",
    "band": "current_level",
    "yearsofexperience": "years_of_experience",
    "experience": "years_of_experience",
    "experienceyears": "years_of_experience",
    "yearsexperience": "years_of_experience",
    "performancerating": "performance_rating",
    "rating": "performance_rating",
    "performance": "performance_rating",
    "skills": "skills",
    "skillset": "skills",
    "certifications": "certifications",
    "certificates": "certifications",
    "salary": "salary",
    "basesalary": "salary",
    "currency": "currency",
    "hiredate": "hire_date",
    "joindate": "hire_date",
    "startdate": "hire_date",
    "sourcecompany": "source_company",
    "company": "source_company",
    "managerid": "manager_id",
}

LIST_FIELDS = {"skills", "certifications"}
TEXT_FIELDS = {
    "first_name", "last_name", "email", "current_position", "current_department",
    "current_level", "currency", "source_company", "manager_id",
}

# XL / SMART catalogue header -> uploaded_roles column
ROLE_HEADERS: Dict[str, str] = {
    "RoleID": "role_code",
    "Department": "department",
    "RoleFamily": "role_family",
    "RoleTitle": "role_title",
    "SeniorityBand": "seniority_band",
    "RolePurpose": "role_purpose",
    "CoreResponsibilities": "core_responsibilities",
    "RequiredSkills": "required_skills",
    "PreferredSkills": "preferred_skills",
    "Certifications": "certifications",
    "ToolsPlatforms": "tools_platforms",
    "ExperienceMinYears": "experience_min_years",
    "Education": "education",
    "Location": "location",
    "RoleVariant": "role_variant",
    "AlternateTitles": "alternate_titles",
}


def _clean_value(value: Any) -> Any:
    """pandas cell -> plain python value, blanks become None"""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (list, dict)):
        return value
    if pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item"):
        return value.item()
    return value


def _frame_rows(frame: pd.DataFrame, source_file: str, source_sheet: str) -> List[Dict[str, Any]]:
    frame = frame.rename(columns=lambda c: str(c).strip())
    frame = frame.loc[:, [c for c in frame.columns if c and not c.startswith("Unnamed:")]]
    frame = frame.dropna(how="all")
    rows = []
    for record in frame.to_dict(orient="records"):
        row = {key: _clean_value(value) for key, value in record.items()}
        if all(value is None for value in row.values()):
            continue
        row["source_file"] = source_file
        row["source_sheet"] = source_sheet
        rows.append(row)
    return rows


def read_spreadsheet(content: bytes, filename: str) -> List[Dict[str, Any]]:
    """
    Parse one uploaded file

    Every sheet of a workbook is read; each row becomes a dict keyed by the
    trimmed header plus source_file / source_sheet. Fully blank rows are
    dropped.
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise BadRequestException(
            f"Unsupported file type: {filename}",
            data={"supported": list(SUPPORTED_EXTENSIONS)},
        )

    try:
        if suffix == ".csv":
            frames = {"csv": pd.read_csv(io.BytesIO(content), dtype=object)}
        else:
            frames = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object)
    except Exception as exc:
        logger.warning("Failed to parse {}: {}", filename, exc)
        raise BadRequestException(f"Could not read {filename}: {exc}")

    rows: List[Dict[str, Any]] = []
    for sheet_name, frame in frames.items():
        rows.extend(_frame_rows(frame, filename, str(sheet_name)))
    logger.info("Parsed {} rows from {} ({} sheets)", len(rows), filename, len(frames))
    return rows


def _header_key(header: str) -> str:
    return re.sub(r"[^a-z0-9]", "", header.lower())


def split_list(value: Any) -> List[str]:
    """'a, b; c' -> ['a', 'b', 'c']"""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in re.split(r"[,;\n]", str(value)) if part.strip()]


def _to_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = pd.to_datetime(str(value), errors="coerce")
    return None if pd.isna(parsed) else parsed.date()


def _number_text(value: Any) -> Any:
    """Employee numbers read as floats (1001.0) go back to '1001'"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value) if value is not None else None


def normalize_employee_row(row: Dict[str, Any], default_company: str = "xlsmart") -> EmployeeCreate:
    """
    Map a header-keyed row onto EmployeeCreate

    Unknown headers are ignored. A single name column is split into first
    and last name. Raises ValueError when required fields are missing or
    invalid.
    """
    data: Dict[str, Any] = {}
    for header, value in row.items():
        value = _clean_value(value)
        field = EMPLOYEE_HEADER_ALIASES.get(_header_key(str(header)))
        if field and value is not None and field not in data:
            data[field] = value

    full_name = data.pop("full_name", None)
    if full_name and not data.get("first_name"):
        first, _, last = str(full_name).strip().partition(" ")
        data["first_name"] = first
        data.setdefault("last_name", last.strip())

    for field in LIST_FIELDS:
        data[field] = split_list(data.get(field))
    for field in TEXT_FIELDS & data.keys():
        data[field] = str(data[field]).strip()
    if "employee_number" in data:
        data["employee_number"] = _number_text(data["employee_number"])
    if "phone" in data:
        data["phone"] = _number_text(data["phone"])
    if "hire_date" in data:
        data["hire_date"] = _to_date(data["hire_date"])
    if "years_of_experience" in data:
        try:
            data["years_of_experience"] = int(float(data["years_of_experience"]))
        except (TypeError, ValueError):
            data.pop("years_of_experience")
    data["source_company"] = str(data.get("source_company") or default_company).lower()

    missing = [f for f in ("employee_number", "first_name", "current_position") if not data.get(f)]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")
    try:
        return EmployeeCreate.model_validate(data)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValueError(errors) from None


def normalize_role_row(row: Dict[str, Any], source_company: str) -> Dict[str, Any]:
    """Map an XL or SMART catalogue row onto uploaded_roles columns"""
    data: Dict[str, Any] = {"source_company": source_company}
    for header, column in ROLE_HEADERS.items():
        value = row.get(header)
        data[column] = str(value) if value is not None and column != "experience_min_years" else value

    try:
        years = data.get("experience_min_years")
        data["experience_min_years"] = int(float(years)) if years is not None else None
    except (TypeError, ValueError):
        data["experience_min_years"] = None
    if data.get("role_code") is not None:
        data["role_code"] = _number_text(row.get("RoleID"))
    data["role_title"] = (data.get("role_title") or "Unknown Role")[:300]
    return data
