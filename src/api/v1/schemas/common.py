"""Response bodies shared by the user routes."""

from typing import Any

from pydantic import BaseModel, Field


class FieldViolation(BaseModel):
    field: str = Field(..., examples=["companyName"])
    message: str = Field(..., examples=["Company name is required for entrepreneurs"])


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response.

    ``details`` lists field violations for validation failures, carries the
    offending identifier for conflicts and lookups, and is null otherwise.
    """

    error_code: str = Field(..., examples=["VALIDATION_ERROR"])
    message: str = Field(..., examples=["Validation failed"])
    details: list[FieldViolation] | dict[str, Any] | None = None


class MessageResponse(BaseModel):
    message: str = Field(..., examples=["Password verified successfully"])
