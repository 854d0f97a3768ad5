import logging
import types
import typing

from exactunits.core import compound
from exactunits.core import descriptors
from exactunits.core import numerical
from exactunits.core import registry as _registry
from exactunits.core import resolution


logger = logging.getLogger(__name__)


Options = typing.Mapping[str, typing.Any]


_NO_OPTIONS: Options = types.MappingProxyType({})


class Unit(typing.NamedTuple):
    """A quantity in a named unit.

    The `options` (e.g., usage or formatting hints) belong to the caller. This
    module copies them from each unit to the units converted from it without
    inspecting them.
    """

    name: str
    value: numerical.Number
    conversion: descriptors.Expression
    options: Options = _NO_OPTIONS

    @classmethod
    def new(
        cls,
        name: str,
        value,
        registry: _registry.Registry,
        **options
    ) -> 'Unit':
        """Create a unit after validating its name.

        Parameters
        ----------
        name : string
            Any unit name that `registry` can validate.

        value : number
            The quantity. See `~numerical.number` for supported types.

        registry : `~registry.Registry`
            The unit definitions to consult.

        **options
            Opaque metadata to carry along with the unit.

        Raises
        ------
        UnknownUnitError
            The registry does not know `name`.

        TypeError
            The value is not numeric.
        """
        validated, conversion = registry.validate_unit(name)
        return cls(
            name=validated,
            value=numerical.number(value),
            conversion=conversion,
            options=types.MappingProxyType(dict(options)),
        )

    def __str__(self) -> str:
        return f"{self.value} {self.name}"


Error = typing.Union[_registry.UnitError, numerical.UndefinedRatioError]


class Result(typing.NamedTuple):
    """The outcome of a conversion that does not raise.

    Exactly one of `unit` and `error` is not ``None``. An instance is true if
    the conversion succeeded.
    """

    unit: typing.Optional[Unit] = None
    error: typing.Optional[Error] = None

    def __bool__(self) -> bool:
        return self.error is None

    def unwrap(self) -> Unit:
        """Return the converted unit or raise the error."""
        if self.error is not None:
            raise self.error
        return self.unit


_RECOVERABLE = (_registry.UnitError, numerical.UndefinedRatioError)


def _convert(
    unit: Unit,
    target: str,
    registry: _registry.Registry,
) -> Unit:
    """Convert `unit` to `target`, raising any error."""
    if target == unit.name:
        return unit
    name, _ = registry.lookup(target)
    if name == unit.name:
        return unit
    relation = resolution.resolve(unit, name, registry)
    logger.debug(
        "Converting %s to %r (%s)", unit, name, relation.direction.value,
    )
    value = compound.convert_value(
        unit.value,
        unit.conversion,
        relation.expression,
        relation.direction,
    )
    return Unit(
        name=name,
        value=value,
        conversion=relation.expression,
        options=unit.options,
    )


def convert(
    unit: Unit,
    target: str,
    registry: _registry.Registry,
) -> Result:
    """Convert a unit into another unit of the same kind.

    Parameters
    ----------
    unit : `~conversion.Unit`
        The unit to convert.

    target : string
        The name of the unit to which to convert.

    registry : `~registry.Registry`
        The unit definitions to consult.

    Returns
    -------
    `~conversion.Result`
        On success, the `unit` attribute holds a new instance of
        `~conversion.Unit` (or `unit` itself, if `target` is its name). On
        failure, the `error` attribute holds the exception.

    Examples
    --------
    >>> from exactunits.core import registry
    >>> units = registry.load()
    >>> convert(Unit.new('mile', 1, units), 'foot', units).unit.value
    5280
    >>> convert(Unit.new('mile', 1, units), 'gallon', units).error
    IncompatibleUnitsError('mile', 'gallon')

    Notes
    -----
    A `~descriptors.MalformedConversionError` always propagates because it
    indicates inconsistent unit definitions.
    """
    try:
        return Result(unit=_convert(unit, str(target), registry))
    except _RECOVERABLE as err:
        logger.debug("Can't convert %s to %r: %s", unit, target, err)
        return Result(error=err)


def convert_strict(
    unit: Unit,
    target: str,
    registry: _registry.Registry,
) -> Unit:
    """Convert a unit into another unit, raising on failure.

    See `~conversion.convert` for parameters. This function raises the
    exception that `~conversion.convert` would return.
    """
    return convert(unit, target, registry).unwrap()


UnitLike = typing.Union[Unit, str, typing.Sequence[str]]


def _as_unit(unit: UnitLike, registry: _registry.Registry) -> Unit:
    """Create a unit with quantity 1 from a name, if necessary."""
    if isinstance(unit, Unit):
        return unit
    if not isinstance(unit, str):
        # A sequence of names, as in a list of preferred units.
        unit = next(iter(unit), '')
    return Unit.new(unit, 1, registry)


def convert_to_base_unit(
    unit: UnitLike,
    registry: _registry.Registry,
) -> Result:
    """Convert a unit into its canonical base unit.

    Parameters
    ----------
    unit : `~conversion.Unit`, string, or sequence of strings
        The unit to convert. A unit name becomes a unit with quantity 1. A
        sequence of names uses the first one.

    registry : `~registry.Registry`
        The unit definitions to consult.

    Returns
    -------
    `~conversion.Result`
        See `~conversion.convert`.

    Examples
    --------
    >>> from exactunits.core import registry
    >>> units = registry.load()
    >>> convert_to_base_unit(Unit.new('kilometer', 10, units), units).unit
    Unit(name='meter', value=10000, ...)
    """
    try:
        this = _as_unit(unit, registry)
        base = registry.base_unit(this)
    except _RECOVERABLE as err:
        return Result(error=err)
    return convert(this, base, registry)


def convert_to_base_unit_strict(
    unit: UnitLike,
    registry: _registry.Registry,
) -> Unit:
    """Convert a unit into its canonical base unit, raising on failure."""
    return convert_to_base_unit(unit, registry).unwrap()
