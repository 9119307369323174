"""
SQLModel base classes

Shared fields and mixins
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from pydantic import field_validator
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive values are taken as UTC, aware values are converted to it"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLModelBase(SQLModel):
    """
    Base configuration for request/response schemas

    Every schema class should inherit from this class
    """
    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
        "str_strip_whitespace": True,
    }


class TimestampMixin(SQLModel):
    """Timestamp mixin for table models"""
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        description="Created at"
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        description="Updated at"
    )


class IDMixin(SQLModel):
    """UUID primary key mixin for table models"""
    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        description="Primary key"
    )


class TimestampResponse(SQLModelBase):
    """Response base carrying id and timestamps"""
    id: str
    created_at: datetime
    updated_at: datetime

    _timestamps_utc = field_validator("created_at", "updated_at")(as_utc)
