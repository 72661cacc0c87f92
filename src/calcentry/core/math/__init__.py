"""
Core math modules

Точная десятичная арифметика и форматирование чисел.
"""

# Arithmetic Engine
from calcentry.core.math.arithmetic import (
    UNLIMITED_DIVISION_PRECISION,
    ArithmeticEngine,
    CalcArithmeticError,
    DivisionByZeroError,
    Operator,
    OutOfBoundsError,
    strip_trailing_zeroes,
)

# Decimal Format
from calcentry.core.math.decimal_format import (
    CANONICAL_DECIMAL_POINT,
    DecimalFormatter,
    insert_group_separators,
    parse_canonical,
    remove_group_separators,
    to_plain_string,
)

__all__ = [
    # Arithmetic: Constants
    "UNLIMITED_DIVISION_PRECISION",
    # Arithmetic: Exceptions
    "CalcArithmeticError",
    "DivisionByZeroError",
    "OutOfBoundsError",
    # Arithmetic: Types
    "ArithmeticEngine",
    "Operator",
    # Arithmetic: Functions
    "strip_trailing_zeroes",
    # Decimal Format: Constants
    "CANONICAL_DECIMAL_POINT",
    # Decimal Format: Types
    "DecimalFormatter",
    # Decimal Format: Functions
    "insert_group_separators",
    "parse_canonical",
    "remove_group_separators",
    "to_plain_string",
]
