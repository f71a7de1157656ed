"""
Exact money column type.

Amounts are Decimal in Python and stored as integer minor units
(1/10 000 of the currency unit) in the database. Storing integers
keeps every backend exact, including SQLite, whose NUMERIC affinity
would otherwise round-trip through floating point. It also makes the
SQL-side increment `current_balance + :delta` integer arithmetic.
"""

from decimal import Decimal

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

# Number of fractional digits kept for every amount.
MONEY_SCALE = 4
MINOR_UNITS = 10 ** MONEY_SCALE
QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)


class Money(TypeDecorator):
    """Decimal <-> integer minor units."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        minor = value * MINOR_UNITS
        if minor != minor.to_integral_value():
            raise ValueError(
                f"{value} has more than {MONEY_SCALE} decimal places"
            )
        return int(minor)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(int(value)) / MINOR_UNITS).quantize(QUANTUM)

    def coerce_compared_value(self, op, value):
        # `column + Decimal(...)` binds the right-hand side as minor
        # units too, so the addition happens in the integer domain.
        return self
