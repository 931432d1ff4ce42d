"""
Shared error response schemas.

Used in the ``responses=`` metadata of each route so that OpenAPI documents
the error envelope as well as the success payload.
"""

from typing import List

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-validation failure."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(
        ...,
        description="Human-readable error description",
        examples=["Fund with code 'X1' not found"],
    )


class ValidationErrorDetail(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(..., examples=["body -> amount"])
    message: str = Field(..., examples=["Input should be greater than 0"])


class ValidationErrorResponse(BaseModel):
    """Response body for a malformed request (400)."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(default="Validation failed")
    details: List[ValidationErrorDetail] = Field(..., description="Per-field validation failures")
