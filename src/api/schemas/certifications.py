from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class CertificationCreate(BaseModel):
    employee_id: str | None = None
    course_id: str | None = None
    expiry_years: int | None = Field(None, description="Validity in whole years (default 2)")


class CertificationItem(BaseModel):
    id: str
    employee_id: str
    course_id: str
    certificate_number: str
    issue_date: date
    expiry_date: date
    status: str
    employee_name: str | None = None
    course_title: str | None = None
    created_at: datetime | None = None
