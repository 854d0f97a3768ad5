import enum
import logging
import typing

from exactunits.core import descriptors
from exactunits.core import registry as _registry


logger = logging.getLogger(__name__)


class IncompatibleUnitsError(_registry.UnitError):
    """The units have neither a common base unit nor a common category."""

    def __init__(self, u0: str, u1: str) -> None:
        self.u0 = u0
        self.u1 = u1

    def __str__(self) -> str:
        return (
            "Operations can only be performed between units with the same"
            f" base unit. Received {self.u0!r} and {self.u1!r}"
        )


class Direction(enum.Enum):
    """How the quantities of two related units correspond."""

    FORWARD = 'forward'
    INVERTED = 'inverted'


class Relation(typing.NamedTuple):
    """The conversion from one unit into another.

    The expression is always the target unit's own conversion expression. An
    inverted relation means that the source and target quantities are
    reciprocals, so the converted value must be inverted on the way through
    the base unit.
    """

    expression: descriptors.Expression
    direction: Direction


def _name_of(unit) -> str:
    """The name of a unit or unit name."""
    return getattr(unit, 'name', unit)


def resolve(unit_1, unit_2, registry: _registry.Registry) -> Relation:
    """Determine how to convert `unit_1` into `unit_2`.

    Parameters
    ----------
    unit_1, unit_2 : `~conversion.Unit` or string
        The source and target units.

    registry : `~registry.Registry`
        The unit definitions to consult.

    Returns
    -------
    `~resolution.Relation`
        The target unit's conversion expression and the direction of the
        conversion.

    Raises
    ------
    UnknownUnitError
        Either unit does not resolve in `registry`.

    IncompatibleUnitsError
        The units are not convertible.

    Notes
    -----
    This function tries the following, in order:

    1. If the units have the same canonical base unit, the relation is
       forward.
    1. If the target is a rate whose reciprocal has the same base unit as the
       source (e.g., fuel consumption versus fuel economy), the relation is
       inverted. A rate that fails this test is incompatible.
    1. If the units belong to the same category, the relation is forward even
       though their base units differ. This assumes that all units in the
       category are linearly related, which this function does not verify.
    """
    _, expression_1 = registry.lookup(unit_1)
    _, expression_2 = registry.lookup(unit_2)
    base_1 = registry.canonical_base_unit(expression_1)
    base_2 = registry.canonical_base_unit(expression_2)
    if base_1 == base_2:
        return Relation(expression_2, Direction.FORWARD)
    name_1, name_2 = _name_of(unit_1), _name_of(unit_2)
    if isinstance(expression_2, descriptors.Quotient):
        swapped = registry.canonical_base_unit(expression_2.swapped())
        if swapped == base_1:
            logger.debug(
                "Converting %r to %r via the reciprocal of %r",
                name_1, name_2, swapped,
            )
            return Relation(expression_2, Direction.INVERTED)
        raise IncompatibleUnitsError(name_1, name_2)
    category_1 = registry.unit_category(unit_1)
    category_2 = registry.unit_category(unit_2)
    if category_1 == category_2:
        logger.debug(
            "Base units %r and %r differ; converting %r to %r by category %r",
            base_1, base_2, name_1, name_2, category_1,
        )
        return Relation(expression_2, Direction.FORWARD)
    raise IncompatibleUnitsError(name_1, name_2)
