"""
Kinematics types: triads, input samples and calibration results.
"""

from .triads import Triad, AccelerationTriad, AngularSpeedTriad, MagneticFluxDensityTriad
from .samples import (
    BodyKinematics,
    TimedBodyKinematics,
    BodyKinematicsAndMagneticFluxDensity,
    TimedBodyKinematicsAndMagneticFluxDensity,
)
from .results import (
    StaticIntervalMeasurement,
    SpecificForceMeasurement,
    MagneticFluxDensityMeasurement,
    DynamicIntervalItem,
    DynamicIntervalSequence,
)

__all__ = [
    'Triad',
    'AccelerationTriad',
    'AngularSpeedTriad',
    'MagneticFluxDensityTriad',
    'BodyKinematics',
    'TimedBodyKinematics',
    'BodyKinematicsAndMagneticFluxDensity',
    'TimedBodyKinematicsAndMagneticFluxDensity',
    'StaticIntervalMeasurement',
    'SpecificForceMeasurement',
    'MagneticFluxDensityMeasurement',
    'DynamicIntervalItem',
    'DynamicIntervalSequence',
]
