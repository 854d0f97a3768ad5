import decimal
import fractions

import pytest

from exactunits.core import conversion
from exactunits.core import descriptors
from exactunits.core import numerical
from exactunits.core import registry as _registry
from exactunits.core import resolution


@pytest.fixture
def mile(registry: _registry.Registry):
    """One mile, with some options."""
    return conversion.Unit.new('mile', 1, registry, usage='road')


def test_new(registry: _registry.Registry, mile: conversion.Unit):
    """Test validated creation of units."""
    assert mile.name == 'mile'
    assert mile.value == 1
    assert mile.conversion == registry.validate_unit('mile')[1]
    assert mile.options == {'usage': 'road'}
    assert str(mile) == '1 mile'
    with pytest.raises(TypeError):
        mile.options['usage'] = 'sea'
    with pytest.raises(_registry.UnknownUnitError):
        conversion.Unit.new('furlong', 1, registry)
    with pytest.raises(TypeError):
        conversion.Unit.new('mile', 'one', registry)


def test_identity(registry: _registry.Registry, mile: conversion.Unit):
    """Converting a unit to its own name returns the same unit."""
    result = conversion.convert(mile, 'mile', registry)
    assert result
    assert result.unit is mile


def test_exact(registry: _registry.Registry, mile: conversion.Unit):
    """Exact factors produce exact results."""
    feet = conversion.convert(mile, 'foot', registry).unit
    assert feet.name == 'foot'
    assert feet.value == 5280
    assert type(feet.value) is int
    assert feet.conversion == registry.validate_unit('foot')[1]
    assert feet.options is mile.options
    inches = conversion.convert_strict(
        conversion.Unit.new('yard', 3, registry), 'inch', registry
    )
    assert inches.value == 108
    assert type(inches.value) is int


def test_target_name(registry: _registry.Registry, mile: conversion.Unit):
    """The new unit has the validated name of the target."""
    feet = conversion.convert_strict(mile, ' foot ', registry)
    assert feet.name == 'foot'
    assert feet.value == 5280
    assert conversion.convert_strict(mile, 'mile ', registry) is mile


def test_round_trip(registry: _registry.Registry):
    """Affine conversions with exact factors round-trip exactly."""
    celsius = conversion.Unit.new('celsius', 0, registry)
    fahrenheit = conversion.convert_strict(celsius, 'fahrenheit', registry)
    assert fahrenheit.value == 32
    assert type(fahrenheit.value) is int
    back = conversion.convert_strict(fahrenheit, 'celsius', registry)
    assert back.value == 0
    assert type(back.value) is int
    boiling = conversion.Unit.new('celsius', 100, registry)
    assert conversion.convert_strict(boiling, 'fahrenheit', registry).value == 212
    ounces = conversion.Unit.new('ounce', 17, registry)
    grams = conversion.convert_strict(ounces, 'gram', registry)
    again = conversion.convert_strict(grams, 'ounce', registry)
    assert again.value == 17


def test_other_numeric_types(registry: _registry.Registry):
    """Decimal values stay decimal; float values join exact factors."""
    km = conversion.Unit.new('kilometer', decimal.Decimal('2.5'), registry)
    meters = conversion.convert_strict(km, 'meter', registry)
    assert isinstance(meters.value, decimal.Decimal)
    assert meters.value == decimal.Decimal('2500')
    miles = conversion.Unit.new('mile', 1.5, registry)
    assert conversion.convert_strict(miles, 'foot', registry).value == 7920


def test_compound(registry: _registry.Registry):
    """Test conversions between products and quotients."""
    kph = conversion.Unit.new('kilometer-per-hour', 36, registry)
    assert conversion.convert_strict(kph, 'meter-per-second', registry).value == 10
    mph = conversion.Unit.new('mile-per-hour', 60, registry)
    result = conversion.convert_strict(mph, 'kilometer-per-hour', registry)
    assert result.value == fractions.Fraction('96.56064')
    energy = conversion.Unit.new('joule', 3600000, registry)
    assert conversion.convert_strict(energy, 'kilowatt-hour', registry).value == 1
    area = conversion.Unit.new('square-kilometer', 3, registry)
    assert conversion.convert_strict(area, 'hectare', registry).value == 300


def test_inverted(registry: _registry.Registry):
    """Fuel consumption converts to fuel economy by inversion."""
    consumption = conversion.Unit.new('liter-per-kilometer', 1, registry)
    economy = conversion.convert_strict(
        consumption, 'mile-per-gallon', registry
    )
    gallon = fractions.Fraction('0.003785411784')
    mile = fractions.Fraction('1609.344')
    assert economy.value == gallon / mile * 10**6
    assert float(economy.value) == pytest.approx(2.352145833)
    back = conversion.convert_strict(economy, 'liter-per-kilometer', registry)
    assert back.value == 1


def test_inverted_synthetic(synthetic: _registry.Registry):
    """A rate converts to its reciprocal quantity."""
    rate = conversion.Unit.new('widget-per-hour', 4, synthetic)
    period = conversion.convert_strict(rate, 'hour-per-widget', synthetic)
    assert period.value == fractions.Fraction(1, 4)
    dozens = conversion.Unit.new('dozen-per-hour', 5, synthetic)
    each = conversion.convert_strict(dozens, 'second-per-widget', synthetic)
    assert each.value == 60


def test_inverted_zero(registry: _registry.Registry):
    """The reciprocal of zero is an undefined ratio."""
    zero = conversion.Unit.new('liter-per-kilometer', 0, registry)
    result = conversion.convert(zero, 'mile-per-gallon', registry)
    assert not result
    assert isinstance(result.error, numerical.UndefinedRatioError)
    with pytest.raises(numerical.UndefinedRatioError):
        conversion.convert_strict(zero, 'mile-per-gallon', registry)


def test_category_fallback(synthetic: _registry.Registry):
    """Same-category units convert through the target's own factor."""
    leagues = conversion.Unit.new('league', 2, synthetic)
    strides = conversion.convert_strict(leagues, 'stride', synthetic)
    assert strides.value == 12


def test_incompatible(registry: _registry.Registry, mile: conversion.Unit):
    """Incompatible units produce an error rather than raising."""
    result = conversion.convert(mile, 'gallon', registry)
    assert not result
    assert result.unit is None
    assert isinstance(result.error, resolution.IncompatibleUnitsError)
    assert "'mile' and 'gallon'" in str(result.error)
    with pytest.raises(resolution.IncompatibleUnitsError):
        result.unwrap()
    with pytest.raises(resolution.IncompatibleUnitsError):
        conversion.convert_strict(mile, 'gallon', registry)


def test_unknown(registry: _registry.Registry, mile: conversion.Unit):
    """Unknown target units produce an error rather than raising."""
    result = conversion.convert(mile, 'furlong', registry)
    assert isinstance(result.error, _registry.UnknownUnitError)
    with pytest.raises(_registry.UnknownUnitError):
        conversion.convert_strict(mile, 'furlong', registry)


def test_malformed(registry: _registry.Registry):
    """A malformed conversion propagates instead of becoming a result."""
    error = descriptors.MalformedConversionError
    assert not issubclass(error, _registry.UnitError)
    meter = conversion.Unit.new('meter', 1, registry)
    cases = [
        ('meter', 1),
        descriptors.Product(meter.conversion, 'oops'),
        descriptors.Quotient(meter.conversion, None),
    ]
    for malformed in cases:
        broken = meter._replace(conversion=malformed)
        with pytest.raises(error):
            conversion.convert(broken, 'foot', registry)
        with pytest.raises(error):
            conversion.convert_strict(broken, 'foot', registry)
        with pytest.raises(error):
            conversion.convert_to_base_unit(broken, registry)


def test_convert_to_base_unit(registry: _registry.Registry):
    """Test conversion to canonical base units."""
    km = conversion.Unit.new('kilometer', 10, registry)
    result = conversion.convert_to_base_unit(km, registry)
    assert result.unit.name == 'meter'
    assert result.unit.value == 10000
    cases = {
        'kilometer': ('meter', 1000),
        'mile': ('meter', fractions.Fraction(201168, 125)),
        'celsius': ('kelvin', fractions.Fraction(5483, 20)),
        'hectare': ('square-meter', 10000),
        'kilowatt-hour': ('second-watt', 3600000),
        'kilometer-per-hour': ('meter-per-second', fractions.Fraction(5, 18)),
    }
    for unit, (name, value) in cases.items():
        base = conversion.convert_to_base_unit_strict(unit, registry)
        assert base.name == name
        assert base.value == value
    listed = conversion.convert_to_base_unit(['gram', 'pound'], registry)
    assert listed.unit.name == 'kilogram'
    assert listed.unit.value == fractions.Fraction(1, 1000)


def test_convert_to_base_unit_errors(registry: _registry.Registry):
    """Unknown units produce an error or raise."""
    result = conversion.convert_to_base_unit('furlong', registry)
    assert not result
    assert isinstance(result.error, _registry.UnknownUnitError)
    assert not conversion.convert_to_base_unit([], registry)
    with pytest.raises(_registry.UnknownUnitError):
        conversion.convert_to_base_unit_strict('furlong', registry)
