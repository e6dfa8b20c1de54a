"""
Physical measurement types used by imucal.

Each measurement is an immutable pydantic model holding a value and a unit.
Conversions go through the default (SI) unit of each kind using a factor
table, so any unit of a kind can be converted into any other.
"""

import math
from enum import Enum
from typing import ClassVar, Dict, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict

M = TypeVar("M", bound="Measurement")


class TimeUnit(str, Enum):
    """Units of time."""
    NANOSECOND = "ns"
    MICROSECOND = "us"
    MILLISECOND = "ms"
    SECOND = "s"
    MINUTE = "min"
    HOUR = "h"


class AccelerationUnit(str, Enum):
    """Units of acceleration."""
    METERS_PER_SQUARED_SECOND = "m/s2"
    G = "g"
    FEET_PER_SQUARED_SECOND = "ft/s2"


class AngularSpeedUnit(str, Enum):
    """Units of angular speed."""
    RADIANS_PER_SECOND = "rad/s"
    DEGREES_PER_SECOND = "deg/s"
    REVOLUTIONS_PER_MINUTE = "rpm"


class MagneticFluxDensityUnit(str, Enum):
    """Units of magnetic flux density."""
    TESLA = "T"
    MILLITESLA = "mT"
    MICROTESLA = "uT"
    NANOTESLA = "nT"
    GAUSS = "G"


# Standard gravity (m/s^2)
STANDARD_GRAVITY = 9.80665

_TIME_FACTORS = {
    TimeUnit.NANOSECOND: 1e-9,
    TimeUnit.MICROSECOND: 1e-6,
    TimeUnit.MILLISECOND: 1e-3,
    TimeUnit.SECOND: 1.0,
    TimeUnit.MINUTE: 60.0,
    TimeUnit.HOUR: 3600.0,
}

_ACCELERATION_FACTORS = {
    AccelerationUnit.METERS_PER_SQUARED_SECOND: 1.0,
    AccelerationUnit.G: STANDARD_GRAVITY,
    AccelerationUnit.FEET_PER_SQUARED_SECOND: 0.3048,
}

_ANGULAR_SPEED_FACTORS = {
    AngularSpeedUnit.RADIANS_PER_SECOND: 1.0,
    AngularSpeedUnit.DEGREES_PER_SECOND: math.pi / 180.0,
    AngularSpeedUnit.REVOLUTIONS_PER_MINUTE: 2.0 * math.pi / 60.0,
}

_MAGNETIC_FLUX_DENSITY_FACTORS = {
    MagneticFluxDensityUnit.TESLA: 1.0,
    MagneticFluxDensityUnit.MILLITESLA: 1e-3,
    MagneticFluxDensityUnit.MICROTESLA: 1e-6,
    MagneticFluxDensityUnit.NANOTESLA: 1e-9,
    MagneticFluxDensityUnit.GAUSS: 1e-4,
}


class Measurement(BaseModel):
    """
    Base class for a scalar physical measurement.

    Subclasses declare the `unit` field with their own unit enum and set
    FACTORS (unit -> multiplier to the default unit) and DEFAULT_UNIT.
    """
    model_config = ConfigDict(frozen=True)

    FACTORS: ClassVar[Dict[Enum, float]] = {}
    DEFAULT_UNIT: ClassVar[Enum]

    value: float

    @classmethod
    def convert(cls, value: float, from_unit: Enum, to_unit: Enum) -> float:
        """
        Convert a raw value between two units of this kind.

        Args:
            value: Value expressed in from_unit
            from_unit: Source unit
            to_unit: Target unit

        Returns:
            The value expressed in to_unit
        """
        if from_unit == to_unit:
            return value
        return value * cls.FACTORS[from_unit] / cls.FACTORS[to_unit]

    def to(self: M, unit: Enum) -> M:
        """Return an equivalent measurement expressed in another unit."""
        return type(self)(value=self.convert(self.value, self.unit, unit), unit=unit)

    def in_default_unit(self: M) -> M:
        """Return an equivalent measurement expressed in the default unit."""
        return self.to(self.DEFAULT_UNIT)

    def __float__(self) -> float:
        return float(self.value)


class Time(Measurement):
    """A time or time interval."""
    FACTORS: ClassVar[Dict[Enum, float]] = _TIME_FACTORS
    DEFAULT_UNIT: ClassVar[Enum] = TimeUnit.SECOND

    unit: TimeUnit = TimeUnit.SECOND


class Acceleration(Measurement):
    """An acceleration or specific force."""
    FACTORS: ClassVar[Dict[Enum, float]] = _ACCELERATION_FACTORS
    DEFAULT_UNIT: ClassVar[Enum] = AccelerationUnit.METERS_PER_SQUARED_SECOND

    unit: AccelerationUnit = AccelerationUnit.METERS_PER_SQUARED_SECOND


class AngularSpeed(Measurement):
    """An angular rate."""
    FACTORS: ClassVar[Dict[Enum, float]] = _ANGULAR_SPEED_FACTORS
    DEFAULT_UNIT: ClassVar[Enum] = AngularSpeedUnit.RADIANS_PER_SECOND

    unit: AngularSpeedUnit = AngularSpeedUnit.RADIANS_PER_SECOND


class MagneticFluxDensity(Measurement):
    """A magnetic flux density."""
    FACTORS: ClassVar[Dict[Enum, float]] = _MAGNETIC_FLUX_DENSITY_FACTORS
    DEFAULT_UNIT: ClassVar[Enum] = MagneticFluxDensityUnit.TESLA

    unit: MagneticFluxDensityUnit = MagneticFluxDensityUnit.TESLA


def as_default_value(value: Union[float, Measurement], kind: Type[Measurement]) -> float:
    """
    Get a raw value in the default unit of a measurement kind.

    Args:
        value: A raw value, assumed to be in the default unit, or a measurement
        kind: Measurement class the value must belong to

    Returns:
        The value expressed in the default unit of kind

    Raises:
        TypeError: If value is a measurement of another kind
    """
    if isinstance(value, Measurement):
        if not isinstance(value, kind):
            raise TypeError(f"Expected {kind.__name__}, got {type(value).__name__}")
        return value.in_default_unit().value
    return float(value)
