"""Exact, composable conversions between units of measurement."""

# read version from installed package
from importlib.metadata import version
__version__ = version("exactunits")
