import typing

from exactunits.core import numerical


class MalformedConversionError(TypeError):
    """A conversion expression has an unrecognized shape.

    This indicates inconsistent unit definitions rather than bad user input,
    so it is not a `~registry.UnitError`.
    """

    def __init__(self, expression) -> None:
        self.expression = expression

    def __str__(self) -> str:
        return f"Conversion not recognised: {self.expression!r}"


class Factor(typing.NamedTuple):
    """The affine map from a unit to its base unit.

    A quantity with value ``raw`` in this unit has the value ``raw * factor +
    offset`` in the base unit.
    """

    factor: numerical.Number
    offset: numerical.Number
    base_unit: typing.Tuple[str, ...]


class Leaf(typing.NamedTuple):
    """A single named unit and its conversion factor."""

    unit: str
    factor: Factor


class Product:
    """An ordered sequence of conversions applied one after another.

    The order of terms matters whenever any term carries a nonzero offset. An
    empty product is the identity conversion.
    """

    __slots__ = ('terms',)

    def __init__(self, *terms: 'Expression') -> None:
        self.terms = tuple(terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __iter__(self) -> typing.Iterator['Expression']:
        return iter(self.terms)

    def __eq__(self, other) -> bool:
        if isinstance(other, Product):
            return self.terms == other.terms
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Product, self.terms))

    def __repr__(self) -> str:
        terms = ', '.join(repr(term) for term in self.terms)
        return f"Product({terms})"


class Quotient:
    """A rate: the numerator quantity per the denominator quantity."""

    __slots__ = ('numerator', 'denominator')

    def __init__(
        self,
        numerator: 'Expression',
        denominator: 'Expression',
    ) -> None:
        for member in (numerator, denominator):
            if has_offset(member):
                raise ValueError(
                    f"Members of a quotient must be purely multiplicative;"
                    f" got {member!r}"
                ) from None
        self.numerator = numerator
        self.denominator = denominator

    def swapped(self) -> 'Quotient':
        """The reciprocal quotient (denominator per numerator)."""
        return Quotient(self.denominator, self.numerator)

    def __eq__(self, other) -> bool:
        if isinstance(other, Quotient):
            return (
                self.numerator == other.numerator
                and self.denominator == other.denominator
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Quotient, self.numerator, self.denominator))

    def __repr__(self) -> str:
        return f"Quotient({self.numerator!r}, {self.denominator!r})"


Expression = typing.Union[Leaf, Product, Quotient]
"""A description of how to convert a unit to its base unit."""


def has_offset(expression) -> bool:
    """True if any leaf of `expression` has a nonzero offset."""
    if isinstance(expression, Leaf):
        return expression.factor.offset != 0
    if isinstance(expression, Product):
        return any(has_offset(term) for term in expression)
    if isinstance(expression, Quotient):
        return (
            has_offset(expression.numerator)
            or has_offset(expression.denominator)
        )
    return False
