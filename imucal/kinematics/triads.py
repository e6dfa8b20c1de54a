"""
Triad value types.

A triad is a three component (x, y, z) measurement along the axes of an
instrument. Each triad kind carries a unit of its physical quantity and can be
converted to any other unit of that quantity.
"""

import math
from enum import Enum
from typing import ClassVar, Optional, Sequence, Type, TypeVar

import numpy as np
from pydantic import BaseModel, ConfigDict

from imucal.core.units import (
    Measurement,
    Acceleration,
    AccelerationUnit,
    AngularSpeed,
    AngularSpeedUnit,
    MagneticFluxDensity,
    MagneticFluxDensityUnit,
)

T = TypeVar("T", bound="Triad")


class Triad(BaseModel):
    """
    Immutable three component measurement.

    Subclasses bind MEASUREMENT to the scalar measurement type of their
    quantity and declare the `unit` field.
    """
    model_config = ConfigDict(frozen=True)

    MEASUREMENT: ClassVar[Type[Measurement]]

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_array(cls: Type[T], values: Sequence[float], unit: Optional[Enum] = None) -> T:
        """
        Build a triad from three values.

        Args:
            values: x, y and z components
            unit: Unit of the values, defaults to the quantity's default unit

        Returns:
            The new triad
        """
        x, y, z = (float(v) for v in values)
        if unit is None:
            return cls(x=x, y=y, z=z)
        return cls(x=x, y=y, z=z, unit=unit)

    @property
    def norm(self) -> float:
        """Euclidean norm of the triad, in the triad's unit."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def as_array(self) -> np.ndarray:
        """Components as a numpy array of shape (3,)."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def as_tuple(self):
        return self.x, self.y, self.z

    def get_measurement_x(self) -> Measurement:
        return self.MEASUREMENT(value=self.x, unit=self.unit)

    def get_measurement_y(self) -> Measurement:
        return self.MEASUREMENT(value=self.y, unit=self.unit)

    def get_measurement_z(self) -> Measurement:
        return self.MEASUREMENT(value=self.z, unit=self.unit)

    def get_measurement_norm(self) -> Measurement:
        return self.MEASUREMENT(value=self.norm, unit=self.unit)

    def to(self: T, unit: Enum) -> T:
        """
        Return an equivalent triad expressed in another unit.

        Args:
            unit: Target unit

        Returns:
            The converted triad, or this triad if the unit already matches
        """
        if unit == self.unit:
            return self
        convert = self.MEASUREMENT.convert
        return type(self)(
            x=convert(self.x, self.unit, unit),
            y=convert(self.y, self.unit, unit),
            z=convert(self.z, self.unit, unit),
            unit=unit,
        )

    def in_default_unit(self: T) -> T:
        """Return an equivalent triad expressed in the default unit."""
        return self.to(self.MEASUREMENT.DEFAULT_UNIT)


class AccelerationTriad(Triad):
    """Specific force triad measured by an accelerometer."""
    MEASUREMENT: ClassVar[Type[Measurement]] = Acceleration

    unit: AccelerationUnit = AccelerationUnit.METERS_PER_SQUARED_SECOND


class AngularSpeedTriad(Triad):
    """Angular rate triad measured by a gyroscope."""
    MEASUREMENT: ClassVar[Type[Measurement]] = AngularSpeed

    unit: AngularSpeedUnit = AngularSpeedUnit.RADIANS_PER_SECOND


class MagneticFluxDensityTriad(Triad):
    """Magnetic flux density triad measured by a magnetometer."""
    MEASUREMENT: ClassVar[Type[Measurement]] = MagneticFluxDensity

    unit: MagneticFluxDensityUnit = MagneticFluxDensityUnit.TESLA
