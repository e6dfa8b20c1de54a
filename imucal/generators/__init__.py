"""
Calibration measurement generators.

One generator per sensor channel, plus the combined generator that drives all
three over a stream of combined samples.
"""

from .base import GeneratorParametersMixin, MeasurementsGenerator
from .accelerometer import AccelerometerMeasurementsGenerator
from .gyroscope import GyroscopeMeasurementsGenerator
from .magnetometer import MagnetometerMeasurementsGenerator
from .combined import CombinedMeasurementsGenerator, ChannelPolicy, FORWARDED_EVENTS

__all__ = [
    'GeneratorParametersMixin',
    'MeasurementsGenerator',
    'AccelerometerMeasurementsGenerator',
    'GyroscopeMeasurementsGenerator',
    'MagnetometerMeasurementsGenerator',
    'CombinedMeasurementsGenerator',
    'ChannelPolicy',
    'FORWARDED_EVENTS',
]
