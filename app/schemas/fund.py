"""
Pydantic schemas for Fund API request / response serialisation.

JSON payloads use camelCase (``taxId``, ``typeCode``, ``netAssetValue``);
Python attributes stay snake_case.  Both spellings are accepted on input.

The request schema only checks shape and types.  Content rules (blank fields,
non-positive type code, negative net asset value) belong to the service so
that the same rules hold for every caller, not only HTTP.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from app.models.fund import NET_ASSET_VALUE_MAX_DIGITS


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FundPayload(CamelModel):
    """Schema for ``POST /funds`` and ``PUT /funds/{code}``."""

    code: str = Field(
        ...,
        max_length=20,
        description="Unique fund code (ignored on update; the path code wins)",
        examples=["ITAUTESTE01"],
    )
    name: str = Field(
        ...,
        max_length=100,
        description="Fund name",
        examples=["Fundo de Teste Renda Fixa"],
    )
    tax_id: str = Field(
        ...,
        max_length=18,
        description="National tax identifier (CNPJ)",
        examples=["00.000.000/0001-00"],
    )
    type_code: int = Field(
        ...,
        description="Code of the fund type lookup row",
        examples=[1],
    )
    net_asset_value: Optional[Decimal] = Field(
        default=None,
        max_digits=NET_ASSET_VALUE_MAX_DIGITS,
        decimal_places=2,
        description="Net asset value; omit or null when not yet known",
        examples=[1_000_000.00],
    )


class FundResponse(CamelModel):
    """Schema returned by all fund endpoints."""

    code: str
    name: str
    tax_id: str
    type_code: int
    type_name: str
    net_asset_value: Optional[Decimal] = None

    @field_serializer("net_asset_value")
    def serialize_decimal_as_number(
        self, v: Optional[Decimal]
    ) -> Optional[Union[float, str]]:
        """
        Emit the decimal as a JSON number rather than Pydantic's default string.

        A double holds about 15 significant digits.  Values it cannot represent
        exactly (large balances near the column limit) are emitted as a decimal
        string instead, so no cents are lost on the wire.
        """
        if v is None:
            return None
        as_float = float(v)
        if Decimal(repr(as_float)) == v:
            return as_float
        return str(v)

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )
