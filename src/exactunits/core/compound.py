import logging

from exactunits.core import descriptors
from exactunits.core import numerical
from exactunits.core import resolution


logger = logging.getLogger(__name__)


def to_base(
    value: numerical.Number,
    expression: descriptors.Expression,
) -> numerical.Number:
    """Convert `value` from the unit described by `expression` to its base.

    Parameters
    ----------
    value : number
        The quantity to convert.

    expression : `~descriptors.Leaf`, `~descriptors.Product`, or `~descriptors.Quotient`
        The conversion expression of the current unit.

    Returns
    -------
    number
        The equivalent quantity in the base unit.

    Notes
    -----
    * A leaf computes ``value * factor + offset``.
    * A product applies each of its terms to the running value, from first to
      last. An empty product returns `value`.
    * A quotient computes the rate of its numerator to its denominator by
      converting ``1`` through each, then multiplies `value` by that rate.
    """
    if isinstance(expression, descriptors.Leaf):
        factor = expression.factor
        return numerical.add(
            numerical.mul(value, factor.factor),
            factor.offset,
        )
    if isinstance(expression, descriptors.Product):
        for term in expression:
            value = to_base(value, term)
        return value
    if isinstance(expression, descriptors.Quotient):
        rate = numerical.div(
            to_base(1, expression.numerator),
            to_base(1, expression.denominator),
        )
        return numerical.mul(rate, value)
    raise descriptors.MalformedConversionError(expression)


def from_base(
    value: numerical.Number,
    expression: descriptors.Expression,
) -> numerical.Number:
    """Convert `value` from its base unit to the unit described by `expression`.

    This is the mirror of `~compound.to_base`: a leaf computes ``(value -
    offset) / factor``, a product applies its terms in order, and a quotient
    multiplies `value` by the ratio of ``1`` converted from the base unit of
    the numerator to ``1`` converted from the base unit of the denominator.
    """
    if isinstance(expression, descriptors.Leaf):
        factor = expression.factor
        return numerical.div(
            numerical.sub(value, factor.offset),
            factor.factor,
        )
    if isinstance(expression, descriptors.Product):
        for term in expression:
            value = from_base(value, term)
        return value
    if isinstance(expression, descriptors.Quotient):
        rate = numerical.div(
            from_base(1, expression.numerator),
            from_base(1, expression.denominator),
        )
        return numerical.mul(rate, value)
    raise descriptors.MalformedConversionError(expression)


def maybe_invert(
    value: numerical.Number,
    direction: resolution.Direction,
) -> numerical.Number:
    """Take the reciprocal of `value` if `direction` is inverted."""
    if direction is resolution.Direction.INVERTED:
        return numerical.div(1, value)
    return value


def convert_value(
    value: numerical.Number,
    source: descriptors.Expression,
    target: descriptors.Expression,
    direction: resolution.Direction=resolution.Direction.FORWARD,
) -> numerical.Number:
    """Convert a bare number between two conversion expressions.

    Parameters
    ----------
    value : number
        The quantity in the unit described by `source`.

    source : conversion expression
        The conversion expression of the current unit.

    target : conversion expression
        The conversion expression of the new unit.

    direction : `~resolution.Direction`, default=FORWARD
        Whether the source and target quantities are reciprocals.

    Returns
    -------
    number
        The quantity in the unit described by `target`.
    """
    base = to_base(value, source)
    logger.debug("Base value of %r is %r", value, base)
    return from_base(maybe_invert(base, direction), target)
