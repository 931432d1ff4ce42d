"""
Fund domain models.

``FundType`` is the lookup table of fund categories, ``Fund`` is the fund
record itself.  ``FundDetail`` is the read-side entity returned by the
repository: the fund's own columns plus the joined ``type_name``.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from app.db.types import Money

# DECIMAL(18,2): the largest value's integer cents still fit the signed
# 64-bit integer that SQLite stores.
NET_ASSET_VALUE_MAX_DIGITS = 18
MAX_NET_ASSET_VALUE = Decimal("9999999999999999.99")


class FundType(SQLModel, table=True):
    """Lookup row describing a fund category (e.g. ``RENDA FIXA``)."""

    __tablename__ = "fund_types"  # type: ignore[assignment]

    code: int = Field(primary_key=True)
    name: str = Field(max_length=100)

    def __repr__(self) -> str:
        return f"<FundType code={self.code} name='{self.name}'>"


class FundBase(SQLModel):
    """Columns shared by the table model and the read-side entity."""

    code: str = Field(max_length=20)
    name: str = Field(max_length=100)
    tax_id: str = Field(max_length=18)
    type_code: int
    # None means "not yet set" and is kept distinct from zero on every read.
    net_asset_value: Optional[Decimal] = Field(
        default=None,
        max_digits=NET_ASSET_VALUE_MAX_DIGITS,
        decimal_places=2,
        sa_type=Money(NET_ASSET_VALUE_MAX_DIGITS),  # type: ignore[arg-type]
    )


class Fund(FundBase, table=True):
    """
    SQLModel / SQLAlchemy table definition for funds.

    - ``code`` is the primary key, so uniqueness is enforced by the store.
    - ``type_code`` references ``fund_types.code``.
    - ``net_asset_value`` is DECIMAL(18,2) (integer cents on SQLite)
      and may never be negative.
    """

    __tablename__ = "funds"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint(
            "net_asset_value IS NULL OR net_asset_value >= 0",
            name="ck_funds_net_asset_value_non_negative",
        ),
        CheckConstraint("length(code) > 0", name="ck_funds_code_not_empty"),
        CheckConstraint("length(name) > 0", name="ck_funds_name_not_empty"),
        CheckConstraint("length(tax_id) > 0", name="ck_funds_tax_id_not_empty"),
    )

    code: str = Field(primary_key=True, max_length=20)
    type_code: int = Field(foreign_key="fund_types.code", index=True, ondelete="RESTRICT")

    def __repr__(self) -> str:
        return f"<Fund code={self.code} name='{self.name}' nav={self.net_asset_value}>"


class FundDetail(FundBase):
    """A fund as read back from the store, joined with its type name."""

    type_name: str
