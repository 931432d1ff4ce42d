"""
Column types.

SQLite has no exact decimal storage: a ``NUMERIC`` column holds a REAL and
arithmetic inside statements runs in binary floating point.  ``Money`` keeps
amounts exact everywhere by storing integer cents on SQLite and a plain
``NUMERIC(precision, 2)`` on every other dialect.
"""

from decimal import ROUND_HALF_EVEN, Decimal

from sqlalchemy import BigInteger, Numeric
from sqlalchemy.types import TypeDecorator

SCALE = 2
_QUANT = Decimal("1").scaleb(-SCALE)


def quantize(value: Decimal) -> Decimal:
    return value.quantize(_QUANT, rounding=ROUND_HALF_EVEN)


class Money(TypeDecorator):
    """Fixed-point amount with two decimal places."""

    impl = Numeric
    cache_ok = True

    def __init__(self, precision: int = 18, **kwargs):
        super().__init__(**kwargs)
        self.precision = precision

    @property
    def python_type(self) -> type:
        return Decimal

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(self.precision, SCALE, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        value = quantize(value)
        if dialect.name == "sqlite":
            return int(value.scaleb(SCALE))
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return Decimal(int(value)).scaleb(-SCALE)
        return quantize(Decimal(str(value)))
