"""
Employee certification model

Certifications held by an employee, with issue and expiry dates
"""
from datetime import date
from typing import Optional
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class EmployeeCertificationBase(SQLModelBase):
    certification_name: str = Field(..., min_length=1, max_length=200, description="Certification name")
    issuing_authority: Optional[str] = Field(None, max_length=200, description="Issuing authority")
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = Field(None, description="Empty for certifications that never expire")
    certificate_url: Optional[str] = Field(None, max_length=500)


class EmployeeCertification(EmployeeCertificationBase, TimestampMixin, IDMixin, table=True):
    """Employee certification table"""
    __tablename__ = "employee_certifications"

    employee_id: str = Field(..., foreign_key="employees.id", index=True)


class EmployeeCertificationCreate(EmployeeCertificationBase):
    pass


class EmployeeCertificationUpdate(SQLModelBase):
    certification_name: Optional[str] = Field(None, min_length=1, max_length=200)
    issuing_authority: Optional[str] = Field(None, max_length=200)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    certificate_url: Optional[str] = Field(None, max_length=500)


class EmployeeCertificationResponse(TimestampResponse):
    employee_id: str
    certification_name: str
    issuing_authority: Optional[str]
    issue_date: Optional[date]
    expiry_date: Optional[date]
    certificate_url: Optional[str]
