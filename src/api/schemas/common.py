from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope shared by every successful JSON response."""

    success: bool = True
    data: DataT
    message: str | None = None
