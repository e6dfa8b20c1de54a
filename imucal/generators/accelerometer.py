"""
Accelerometer measurement generator.

Publishes the mean and per-axis standard deviation of the specific force for
every static interval long enough to be measured.
"""

from imucal.events.intervals import DynamicIntervalDetectedEvent
from imucal.events.measurements import AccelerometerMeasurementEvent
from imucal.kinematics.results import SpecificForceMeasurement
from imucal.kinematics.samples import BodyKinematics
from imucal.kinematics.triads import AccelerationTriad
from .base import MeasurementsGenerator


class AccelerometerMeasurementsGenerator(MeasurementsGenerator[BodyKinematics]):
    """
    Generates accelerometer calibration measurements from body kinematics.

    A measurement is published when a static interval closes, i.e. when the
    device starts moving, unless the interval was shorter than
    `min_static_samples`.
    """

    def _specific_force(self, sample: BodyKinematics) -> AccelerationTriad:
        return sample.specific_force

    def _handle_static_to_dynamic_change(self, event: DynamicIntervalDetectedEvent) -> None:
        if self.is_static_interval_skipped:
            return

        measurement = SpecificForceMeasurement(
            mean=AccelerationTriad.from_array(event.accumulated_mean),
            standard_deviation=AccelerationTriad.from_array(event.accumulated_standard_deviation),
            sample_count=self._static_interval_samples,
        )
        self.logger.info("Static interval measured", samples=measurement.sample_count)
        self._notify(AccelerometerMeasurementEvent(producer_name=self.name, measurement=measurement))
