import collections.abc
import configparser
import logging
import os
import pathlib
import types
import typing

from exactunits.core import descriptors
from exactunits.core import numerical


logger = logging.getLogger(__name__)


PathLike = typing.Union[str, os.PathLike]


FILENAME = 'units.ini'
"""The name of the file containing unit definitions."""


ENVVAR = 'EXACTUNITS_INI'
"""An environment variable naming a directory that contains `FILENAME`."""


POWERS = {'square': 2, 'cubic': 3}
"""Prefixes that raise a simple unit to a power."""


SEPARATOR = '-'
"""The separator between the terms of a compound unit name."""


PER = '-per-'
"""The separator between the numerator and denominator of a rate unit."""


class UnitError(Exception):
    """Base class for recoverable unit-conversion errors."""


class UnknownUnitError(UnitError, KeyError):
    """A unit identifier does not resolve in the registry."""

    def __init__(self, unit: str) -> None:
        self.unit = unit

    def __str__(self) -> str:
        return f"Unknown unit was detected at {self.unit!r}"


class UnknownCategoryError(UnitError):
    """The registry can't classify a unit."""

    def __init__(self, unit: str) -> None:
        self.unit = unit

    def __str__(self) -> str:
        return f"The category for {self.unit!r} is unknown"


class Definition(typing.NamedTuple):
    """The configured properties of a simple unit."""

    factor: numerical.Number
    offset: numerical.Number
    base_unit: typing.Tuple[str, ...]
    category: str


def canonical_base_unit(expression: descriptors.Expression) -> str:
    """Compute the canonical base unit of a conversion expression.

    Parameters
    ----------
    expression : `~descriptors.Leaf`, `~descriptors.Product`, or `~descriptors.Quotient`
        The conversion expression of a unit.

    Returns
    -------
    string
        The hyphen-separated base unit. Members of a product appear in sorted
        order so that, for example, ``kilowatt-hour`` and ``hour-kilowatt``
        have the same base unit.

    Raises
    ------
    UnknownUnitError
        The expression is an empty product or a leaf without a base unit.

    MalformedConversionError
        The expression, or one of its members, has an unrecognized shape.
    """
    if isinstance(expression, descriptors.Leaf):
        if not expression.factor.base_unit:
            raise UnknownUnitError(expression.unit)
        return SEPARATOR.join(expression.factor.base_unit)
    if isinstance(expression, descriptors.Product):
        if not expression:
            raise UnknownUnitError(repr(expression))
        terms = sorted(canonical_base_unit(term) for term in expression)
        return SEPARATOR.join(terms)
    if isinstance(expression, descriptors.Quotient):
        numerator = canonical_base_unit(expression.numerator)
        denominator = canonical_base_unit(expression.denominator)
        return f"{numerator}{PER}{denominator}"
    raise descriptors.MalformedConversionError(expression)


class Registry(collections.abc.Mapping):
    """An immutable collection of unit definitions.

    Instances of this class map the name of each simple unit to its
    `~registry.Definition`. They also know how to validate compound unit names
    built from simple units, and how to classify units into categories.
    """

    def __init__(
        self,
        units: typing.Mapping[str, Definition],
        categories: typing.Mapping[str, str]=None,
    ) -> None:
        for name in units:
            _check_name(name)
        self._units = types.MappingProxyType(dict(units))
        self._categories = types.MappingProxyType(dict(categories or {}))

    @classmethod
    def from_ini(cls, path: PathLike):
        """Create a registry from an INI file of unit definitions.

        Each simple unit is a section named ``unit:<name>`` with a `factor`, an
        optional `offset`, a hyphen-separated `base_unit`, and a `category`.
        The optional ``categories`` section maps canonical base units of
        compound units to category names. Numbers are parsed exactly.
        """
        config = configparser.ConfigParser()
        if not config.read(path):
            raise FileNotFoundError(f"Can't read unit definitions from {path}")
        units = {}
        for section in config.sections():
            if not section.startswith('unit:'):
                continue
            name = section[len('unit:'):].strip()
            options = config[section]
            units[name] = Definition(
                factor=numerical.parse(options.get('factor', '1')),
                offset=numerical.parse(options.get('offset', '0')),
                base_unit=tuple(options['base_unit'].split(SEPARATOR)),
                category=options['category'],
            )
        categories = (
            dict(config['categories']) if config.has_section('categories')
            else {}
        )
        logger.info("Loaded %d unit definitions from %s", len(units), path)
        return cls(units, categories)

    def __len__(self) -> int:
        """The number of simple units."""
        return len(self._units)

    def __iter__(self) -> typing.Iterator[str]:
        """Iterate over the names of simple units."""
        return iter(self._units)

    def __getitem__(self, name: str) -> Definition:
        """Access the definition of a simple unit."""
        if name in self._units:
            return self._units[name]
        raise UnknownUnitError(name)

    @property
    def categories(self) -> typing.Mapping[str, str]:
        """The categories of compound base units."""
        return self._categories

    def validate_unit(self, unit) -> typing.Tuple[str, descriptors.Expression]:
        """Resolve a unit name into its conversion expression.

        Parameters
        ----------
        unit : string
            The name of a simple unit (e.g., ``'meter'``), a simple unit raised
            to a power (``'square-meter'``), a product of hyphen-joined terms
            (``'kilowatt-hour'``), or a rate with exactly one ``'-per-'``
            (``'meter-per-second'``).

        Returns
        -------
        tuple
            The validated name and its conversion expression.

        Raises
        ------
        UnknownUnitError
            Some part of the name does not resolve.
        """
        name = str(unit).strip()
        parts = name.split(PER)
        if len(parts) == 1:
            return name, self._parse_terms(parts[0])
        if len(parts) != 2:
            raise UnknownUnitError(name)
        numerator, denominator = (self._parse_terms(part) for part in parts)
        try:
            expression = descriptors.Quotient(numerator, denominator)
        except ValueError as err:
            raise UnknownUnitError(name) from err
        return name, expression

    def _parse_terms(self, string: str) -> descriptors.Expression:
        """Parse hyphen-joined terms into a leaf or a product."""
        tokens = string.split(SEPARATOR)
        terms = []
        while tokens:
            token = tokens.pop(0)
            if token in POWERS:
                if not tokens:
                    raise UnknownUnitError(token)
                terms.append(self._power(token, tokens.pop(0)))
            else:
                terms.append(self._leaf(token))
        if len(terms) == 1:
            return terms[0]
        return descriptors.Product(*terms)

    def _leaf(self, name: str) -> descriptors.Leaf:
        """Create the conversion expression of a simple unit."""
        definition = self[name]
        factor = descriptors.Factor(
            factor=definition.factor,
            offset=definition.offset,
            base_unit=definition.base_unit,
        )
        return descriptors.Leaf(name, factor)

    def _power(self, prefix: str, name: str) -> descriptors.Leaf:
        """Create the conversion expression of a simple unit to a power."""
        definition = self[name]
        unit = f"{prefix}{SEPARATOR}{name}"
        if definition.offset != 0:
            raise UnknownUnitError(unit)
        if any(token in POWERS for token in definition.base_unit):
            raise UnknownUnitError(unit)
        factor = descriptors.Factor(
            factor=numerical.pow(definition.factor, POWERS[prefix]),
            offset=0,
            base_unit=(prefix, *definition.base_unit),
        )
        return descriptors.Leaf(unit, factor)

    def lookup(self, unit) -> typing.Tuple[str, descriptors.Expression]:
        """Get the name and expression of a unit-like object."""
        conversion = getattr(unit, 'conversion', None)
        if conversion is not None:
            return unit.name, conversion
        return self.validate_unit(unit)

    def canonical_base_unit(self, expression: descriptors.Expression) -> str:
        """Compute the canonical base unit of `expression`."""
        return canonical_base_unit(expression)

    def base_unit(self, unit) -> str:
        """The canonical base unit of a unit or unit name."""
        _, expression = self.lookup(unit)
        return canonical_base_unit(expression)

    def unit_category(self, unit) -> str:
        """The category (e.g., 'length') of a unit or unit name.

        A simple unit has the category in its definition. A compound unit has
        the category that this registry associates with its canonical base
        unit, if any.
        """
        name, expression = self.lookup(unit)
        if name in self._units:
            return self._units[name].category
        base = canonical_base_unit(expression)
        if base in self._categories:
            return self._categories[base]
        if base in self._units:
            return self._units[base].category
        raise UnknownCategoryError(name)


def _check_name(name: str) -> None:
    """Make sure `name` can appear in a compound unit name."""
    if not name or SEPARATOR in name or name in POWERS or name == 'per':
        raise ValueError(f"Invalid simple unit name {name!r}") from None


def load(path: PathLike=None) -> Registry:
    """Load unit definitions from a configuration file.

    Parameters
    ----------
    path : path-like, optional
        The file to read. By default, this function searches for
        ``units.ini`` in the current working directory, the user's home
        directory, ``~/.config``, ``/etc/exactunits``, the directory named by
        the ``EXACTUNITS_INI`` environment variable, and finally the package
        directory, which contains the default definitions.
    """
    if path is None:
        path = _find(FILENAME)
    return Registry.from_ini(path)


def _find(filename: str) -> pathlib.Path:
    """Get the first existing copy of `filename` along the search path."""
    home = pathlib.Path('~').expanduser()
    directories = [
        pathlib.Path.cwd(),
        home,
        home / '.config',
        '/etc/exactunits',
        os.environ.get(ENVVAR),
        pathlib.Path(__file__).parent.parent,
    ]
    for directory in filter(None, directories):
        candidate = pathlib.Path(directory).expanduser().resolve() / filename
        if candidate.is_file():
            logger.debug("Found %s", candidate)
            return candidate
    raise FileNotFoundError(f"Can't find {filename}") from None
