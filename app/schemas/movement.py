"""
Schemas for ``PUT /funds/{code}/netAssetValue`` — net asset value movements.

A movement is validated completely here, before the service is called: the
operation must be ``ADD`` or ``SUB`` in any letter case and the amount must be
strictly positive with at most two decimal places.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from app.models.fund import NET_ASSET_VALUE_MAX_DIGITS
from app.schemas.fund import CamelModel, FundResponse


class MovementOperation(str, Enum):
    """Direction of a net asset value movement."""

    INCREASE = "ADD"
    DECREASE = "SUB"


class MovementRequest(CamelModel):
    """Request body for a net asset value movement."""

    operation: MovementOperation = Field(
        ...,
        description="``ADD`` to increase or ``SUB`` to decrease (case-insensitive)",
        examples=["ADD"],
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=NET_ASSET_VALUE_MAX_DIGITS,
        decimal_places=2,
        description="Amount to move (positive, at most two decimal places)",
        examples=[100.00],
    )

    @field_validator("operation", mode="before")
    @classmethod
    def normalise_operation(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def signed_amount(self) -> Decimal:
        """``+amount`` for an increase, ``-amount`` for a decrease."""
        if self.operation is MovementOperation.INCREASE:
            return self.amount
        return -self.amount

    def describe(self) -> str:
        verb = "increased" if self.operation is MovementOperation.INCREASE else "decreased"
        return f"Net asset value {verb} by {self.amount:,.2f}"


class MovementResponse(CamelModel):
    """Outcome message plus the fund as it stands after the movement."""

    message: str = Field(..., examples=["Net asset value increased by 100.00"])
    updated_fund: FundResponse
