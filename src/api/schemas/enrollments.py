from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class EnrollmentCreate(BaseModel):
    employee_id: str | None = None
    course_id: str | None = None
    enrollment_type: str = Field("Manual", max_length=32)
    program_name: str | None = None
    comments: str | None = None


class EnrollmentUpdate(BaseModel):
    status: str | None = Field(None, description="Pending, Active, Completed, Cancelled or Expired")
    completion_percentage: float | None = None


class EnrollmentItem(BaseModel):
    id: str
    employee_id: str
    course_id: str
    status: str
    completion_percentage: float
    enrollment_date: date
    enrollment_type: str
    enrolled_by: str | None = None
    program_name: str | None = None
    comments: str | None = None
