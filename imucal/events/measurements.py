"""
Measurement events for imucal.

This module defines the events that carry calibration measurements out of the
generators, one per sensor channel.
"""

from typing import Literal
from imucal.core.events import BaseEvent, EventType
from imucal.kinematics.results import (
    SpecificForceMeasurement,
    MagneticFluxDensityMeasurement,
    DynamicIntervalSequence,
)


class AccelerometerMeasurementEvent(BaseEvent):
    """
    Event published when a static interval has been measured by the accelerometer generator.
    """
    type: Literal[EventType.ACCELEROMETER_MEASUREMENT] = EventType.ACCELEROMETER_MEASUREMENT
    measurement: SpecificForceMeasurement


class GyroscopeMeasurementEvent(BaseEvent):
    """
    Event published when a dynamic interval has been recorded by the gyroscope generator.
    """
    type: Literal[EventType.GYROSCOPE_MEASUREMENT] = EventType.GYROSCOPE_MEASUREMENT
    measurement: DynamicIntervalSequence


class MagnetometerMeasurementEvent(BaseEvent):
    """
    Event published when a static interval has been measured by the magnetometer generator.
    """
    type: Literal[EventType.MAGNETOMETER_MEASUREMENT] = EventType.MAGNETOMETER_MEASUREMENT
    measurement: MagneticFluxDensityMeasurement
