import decimal
import enum
import fractions
import math
import numbers
import typing

import numpy


Number = typing.TypeVar('Number')
Number = typing.Union[int, float, decimal.Decimal, fractions.Fraction]


class UndefinedRatioError(ZeroDivisionError):
    """Attempt to form a ratio with a zero denominator."""

    def __init__(self, numerator, denominator=0) -> None:
        self.numerator = numerator
        self.denominator = denominator

    def __str__(self) -> str:
        return f"Undefined ratio {self.numerator!r} / {self.denominator!r}"


class Kind(enum.Enum):
    """The representations of a numeric value."""

    INTEGER = 'integer'
    FLOAT = 'float'
    DECIMAL = 'decimal'
    RATIONAL = 'rational'


_KINDS = (
    (bool, None),
    (int, Kind.INTEGER),
    (float, Kind.FLOAT),
    (decimal.Decimal, Kind.DECIMAL),
    (fractions.Fraction, Kind.RATIONAL),
)


def kind(value) -> Kind:
    """Identify the representation of `value`.

    Raises `TypeError` if `value` is not one of the four supported numeric
    types. Booleans are not numbers here.
    """
    for t, k in _KINDS:
        if isinstance(value, t):
            if k is None:
                break
            return k
    raise TypeError(
        f"Unsupported numeric type {type(value).__qualname__!r}"
    ) from None


# The representation in which to compute `a (op) b`, keyed by the kinds of
# `a` and `b`. Rational takes precedence over decimal.
PROMOTIONS = {
    (Kind.INTEGER, Kind.INTEGER): Kind.INTEGER,
    (Kind.INTEGER, Kind.FLOAT): Kind.FLOAT,
    (Kind.INTEGER, Kind.DECIMAL): Kind.DECIMAL,
    (Kind.INTEGER, Kind.RATIONAL): Kind.RATIONAL,
    (Kind.FLOAT, Kind.INTEGER): Kind.FLOAT,
    (Kind.FLOAT, Kind.FLOAT): Kind.FLOAT,
    (Kind.FLOAT, Kind.DECIMAL): Kind.DECIMAL,
    (Kind.FLOAT, Kind.RATIONAL): Kind.RATIONAL,
    (Kind.DECIMAL, Kind.INTEGER): Kind.DECIMAL,
    (Kind.DECIMAL, Kind.FLOAT): Kind.DECIMAL,
    (Kind.DECIMAL, Kind.DECIMAL): Kind.DECIMAL,
    (Kind.DECIMAL, Kind.RATIONAL): Kind.RATIONAL,
    (Kind.RATIONAL, Kind.INTEGER): Kind.RATIONAL,
    (Kind.RATIONAL, Kind.FLOAT): Kind.RATIONAL,
    (Kind.RATIONAL, Kind.DECIMAL): Kind.RATIONAL,
    (Kind.RATIONAL, Kind.RATIONAL): Kind.RATIONAL,
}
"""The promotion table for binary operations on numeric values."""


def _as_decimal(value) -> decimal.Decimal:
    """Represent `value` as a decimal number."""
    if isinstance(value, float):
        # The shortest round-tripping string avoids binary noise.
        return decimal.Decimal(repr(value))
    return decimal.Decimal(value)


def _as_rational(value) -> fractions.Fraction:
    """Represent `value` as an exact rational number."""
    if isinstance(value, float):
        return fractions.Fraction(repr(value))
    return fractions.Fraction(value)


def _promote(a, b):
    """Convert `a` and `b` to their common representation."""
    target = PROMOTIONS[(kind(a), kind(b))]
    if target is Kind.RATIONAL:
        if any(isinstance(v, float) and not math.isfinite(v) for v in (a, b)):
            return float(a), float(b)
        return _as_rational(a), _as_rational(b)
    if target is Kind.DECIMAL:
        return _as_decimal(a), _as_decimal(b)
    if target is Kind.FLOAT:
        return float(a), float(b)
    return a, b


def normalize(value: Number) -> Number:
    """Collapse a rational with a trivial denominator or numerator."""
    if isinstance(value, fractions.Fraction):
        if value.numerator == 0:
            return 0
        if value.denominator == 1:
            return value.numerator
    return value


def _is(value, target: int) -> bool:
    """True if `value` is the integral or floating-point `target`."""
    return type(value) in (int, float) and value == target


def number(value) -> Number:
    """Convert `value` into a supported numeric value.

    Parameters
    ----------
    value : number
        A built-in integer or float, a `decimal.Decimal`, any
        `numbers.Rational` (including `fractions.Fraction`), or a numpy
        integral or floating-point scalar.

    Returns
    -------
    int, float, `decimal.Decimal`, or `fractions.Fraction`
        The equivalent value, with rationals normalized.

    Raises
    ------
    TypeError
        The argument is not a supported numeric value.
    """
    if isinstance(value, (bool, numpy.bool_)):
        raise TypeError("Boolean values are not numeric quantities") from None
    if isinstance(value, numpy.integer):
        return int(value)
    if isinstance(value, numpy.floating):
        return float(value)
    if isinstance(value, (int, float, decimal.Decimal)):
        return value
    if isinstance(value, numbers.Rational):
        return normalize(
            fractions.Fraction(value.numerator, value.denominator)
        )
    raise TypeError(
        f"Can't use {value!r} as a numeric value"
    ) from None


def parse(string: str) -> Number:
    """Parse a numeric string exactly.

    Integers stay integers; anything else that `fractions.Fraction` accepts
    (e.g., ``'201168/125'``, ``'0.3048'``, or ``'1e-3'``) becomes a
    normalized rational.
    """
    text = string.strip()
    try:
        return int(text)
    except ValueError:
        pass
    if '/' in text:
        n, d = text.split('/', 1)
        return rational(int(n), int(d))
    try:
        return normalize(fractions.Fraction(text))
    except ValueError as err:
        raise ValueError(f"Can't parse {string!r} as a number") from err


def rational(numerator: int, denominator: int) -> Number:
    """Create an exact ratio of two integers.

    Parameters
    ----------
    numerator : int
        The numerator of the ratio.

    denominator : int
        The denominator of the ratio. Must not be zero.

    Returns
    -------
    int or `fractions.Fraction`
        ``1`` if the arguments are equal, ``0`` if `numerator` is zero,
        `numerator` if `denominator` is one, and otherwise the normalized
        rational number.

    Raises
    ------
    UndefinedRatioError
        The denominator is zero.
    """
    if denominator == 0:
        raise UndefinedRatioError(numerator, denominator)
    if numerator == denominator:
        return 1
    if numerator == 0:
        return 0
    if denominator == 1:
        return numerator
    return normalize(fractions.Fraction(numerator, denominator))


def add(a: Number, b: Number) -> Number:
    """Compute a + b."""
    if _is(b, 0):
        return a
    x, y = _promote(a, b)
    return normalize(x + y)


def sub(a: Number, b: Number) -> Number:
    """Compute a - b."""
    if _is(b, 0):
        return a
    x, y = _promote(a, b)
    return normalize(x - y)


def mul(a: Number, b: Number) -> Number:
    """Compute a * b."""
    if type(b) is int and b == 0:
        return 0
    if _is(b, 1):
        return a
    if type(a) is int and a == 1:
        return b
    x, y = _promote(a, b)
    return normalize(x * y)


def div(a: Number, b: Number) -> Number:
    """Compute a / b.

    The ratio of two integers is exact. Division by any zero raises
    `UndefinedRatioError`.
    """
    if _is(b, 1):
        return a
    if b == 0:
        raise UndefinedRatioError(a, b)
    x, y = _promote(a, b)
    if isinstance(x, int):
        return rational(x, y)
    return normalize(x / y)


def pow(a: Number, b: Number) -> Number:
    """Compute a ** b.

    Integral exponents of integral or rational bases are exact. Integral
    exponents of decimal bases stay decimal. Every other combination uses
    floating-point arithmetic. A rational exponent with a trivial denominator
    counts as integral.
    """
    b = normalize(b)
    k = kind(b)
    if k is Kind.INTEGER and b == 0:
        return 1
    if type(a) is int and a == 1:
        return 1
    if k is not Kind.INTEGER:
        return math.pow(float(a), float(b))
    base = kind(a)
    if base is Kind.INTEGER:
        if b < 0 and a == 0:
            raise UndefinedRatioError(1, 0)
        return normalize(fractions.Fraction(a) ** b)
    if base is Kind.RATIONAL:
        return normalize(a ** b)
    if base is Kind.DECIMAL:
        return a ** b
    return math.pow(a, b)
