import pathlib

import pytest

from exactunits.core import numerical
from exactunits.core import registry as _registry


@pytest.fixture
def inipath() -> pathlib.Path:
    """The path to the default unit definitions.

    This function finds the file relative to the installed module rather than
    searching, so that a stray ``units.ini`` in the current working directory
    or the user's home directory can't affect the tests.
    """
    return pathlib.Path(_registry.__file__).parent.parent / 'units.ini'


@pytest.fixture
def registry(inipath: pathlib.Path):
    """The default unit registry."""
    return _registry.Registry.from_ini(inipath)


def _define(factor, base_unit: str, category: str, offset=0):
    """Helper for defining a simple unit."""
    return _registry.Definition(
        factor=factor,
        offset=offset,
        base_unit=tuple(base_unit.split('-')),
        category=category,
    )


@pytest.fixture
def synthetic():
    """A small registry of made-up units.

    The 'widget' units support rates and their reciprocals. The 'league' and
    'stride' units share a category but not a base unit.
    """
    units = {
        'widget': _define(1, 'widget', 'count'),
        'dozen': _define(12, 'widget', 'count'),
        'second': _define(1, 'second', 'duration'),
        'hour': _define(3600, 'second', 'duration'),
        'league': _define(3, 'league', 'distance'),
        'stride': _define(numerical.rational(1, 2), 'stride', 'distance'),
    }
    categories = {
        'widget-per-second': 'production rate',
        'second-per-widget': 'cycle time',
    }
    return _registry.Registry(units, categories)
