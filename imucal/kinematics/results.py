"""
Calibration measurements produced by the generators.

Static interval measurements summarize a period where the device was at rest.
Dynamic interval sequences hold every sample recorded while the device was
moving, together with the mean specific force before and after the motion.
All results are immutable once published.
"""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .samples import BodyKinematics
from .triads import AccelerationTriad, AngularSpeedTriad, MagneticFluxDensityTriad


class StaticIntervalMeasurement(BaseModel):
    """Mean and per-axis standard deviation of one static interval."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    sample_count: int


class SpecificForceMeasurement(StaticIntervalMeasurement):
    """Accelerometer measurement of one static interval."""
    mean: AccelerationTriad
    standard_deviation: AccelerationTriad


class MagneticFluxDensityMeasurement(StaticIntervalMeasurement):
    """
    Magnetometer measurement of one static interval.

    Position and timestamp are taken from the sample that closed the interval.
    """
    mean: MagneticFluxDensityTriad
    standard_deviation: MagneticFluxDensityTriad
    position: Optional[Any] = None
    timestamp_seconds: Optional[float] = None


class DynamicIntervalItem(BaseModel):
    """
    One sample recorded during a dynamic interval.

    The standard deviations are those measured while the device was held still
    during initialization.
    """
    model_config = ConfigDict(frozen=True)

    kinematics: BodyKinematics
    timestamp_seconds: float
    specific_force_standard_deviation: AccelerationTriad
    angular_rate_standard_deviation: AngularSpeedTriad


class DynamicIntervalSequence(BaseModel):
    """Gyroscope measurement spanning one dynamic interval."""
    model_config = ConfigDict(frozen=True)

    items: Tuple[DynamicIntervalItem, ...]
    before_mean_specific_force: AccelerationTriad
    after_mean_specific_force: AccelerationTriad

    def __len__(self) -> int:
        return len(self.items)

    def time_deltas(self) -> List[float]:
        """Time elapsed between consecutive items (s)."""
        return [
            later.timestamp_seconds - earlier.timestamp_seconds
            for earlier, later in zip(self.items, self.items[1:])
        ]
