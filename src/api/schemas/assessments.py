from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AttemptSubmitRequest(BaseModel):
    # Optional here so a missing field is reported as 400 by the service
    employee_id: str | None = Field(None, description="Employee submitting the attempt")
    score: float | None = Field(None, description="Raw score as a percentage")


class AttemptItem(BaseModel):
    id: str
    assessment_id: str
    employee_id: str
    employee_name: str | None = None
    score: float
    status: str
    attempted_at: datetime
    completed_at: datetime
