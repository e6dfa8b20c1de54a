"""
Gyroscope measurement generator.

Records every sample of a dynamic interval and publishes the whole sequence
once the device is at rest again. The angular rate observed while the device
was held still during initialization is kept as a bias sanity check.
"""

import math
from typing import List, Optional

from imucal.core.units import AngularSpeed
from imucal.events.intervals import DetectionErrorEvent, StaticIntervalDetectedEvent, DynamicIntervalDetectedEvent
from imucal.events.measurements import GyroscopeMeasurementEvent
from imucal.intervals.detector import DetectorStatus
from imucal.intervals.noise import AccumulatedTriadNoiseEstimator
from imucal.kinematics.results import DynamicIntervalItem, DynamicIntervalSequence
from imucal.kinematics.samples import TimedBodyKinematics
from imucal.kinematics.triads import AccelerationTriad, AngularSpeedTriad
from .base import MeasurementsGenerator


class GyroscopeMeasurementsGenerator(MeasurementsGenerator[TimedBodyKinematics]):
    """
    Generates gyroscope calibration measurements from timed body kinematics.

    Every sample processed during a dynamic interval becomes an item of the
    sequence, tagged with the specific force and angular rate standard
    deviations measured during initialization. The sequence also holds the mean
    specific force before and after the motion. Dynamic intervals longer than
    `max_dynamic_samples` are dropped.
    """

    def __init__(self, *args, **kwargs):
        self._initial_angular_rate = AccumulatedTriadNoiseEstimator()
        self._reset_channel()
        super().__init__(*args, **kwargs)

    def _reset_channel(self) -> None:
        self._initial_angular_rate.reset()
        self._initial_avg_angular_rate = AngularSpeedTriad()
        self._initial_angular_rate_std = AngularSpeedTriad()
        self._initial_specific_force_std = AccelerationTriad()
        self._gyroscope_base_noise_level = 0.0
        self._items: List[DynamicIntervalItem] = []
        self._before_mean: Optional[AccelerationTriad] = None

    @property
    def initial_avg_angular_speed_triad(self) -> AngularSpeedTriad:
        """Mean angular rate during initialization."""
        return self._initial_avg_angular_rate

    @property
    def initial_angular_speed_triad_standard_deviation(self) -> AngularSpeedTriad:
        """Per-axis angular rate standard deviation during initialization."""
        return self._initial_angular_rate_std

    @property
    def gyroscope_base_noise_level(self) -> float:
        """Norm of the angular rate standard deviations during initialization (rad/s)."""
        return self._gyroscope_base_noise_level

    @property
    def gyroscope_base_noise_level_as_measurement(self) -> AngularSpeed:
        return AngularSpeed(value=self._gyroscope_base_noise_level)

    @property
    def gyroscope_base_noise_level_psd(self) -> float:
        return self._gyroscope_base_noise_level ** 2 * self.time_interval

    @property
    def gyroscope_base_noise_level_root_psd(self) -> float:
        return self._gyroscope_base_noise_level * math.sqrt(self.time_interval)

    def _specific_force(self, sample: TimedBodyKinematics) -> AccelerationTriad:
        return sample.kinematics.specific_force

    def _accumulate_initialization(self, sample: TimedBodyKinematics) -> None:
        angular_rate = sample.kinematics.angular_rate.in_default_unit()
        self._initial_angular_rate.add(angular_rate.x, angular_rate.y, angular_rate.z)

    def _post_process(self, sample: TimedBodyKinematics) -> None:
        if self.status == DetectorStatus.DYNAMIC_INTERVAL and not self.is_dynamic_interval_skipped:
            self._items.append(DynamicIntervalItem(
                kinematics=sample.kinematics,
                timestamp_seconds=sample.timestamp_seconds,
                specific_force_standard_deviation=self._initial_specific_force_std,
                angular_rate_standard_deviation=self._initial_angular_rate_std,
            ))

    def _handle_initialization_completed(self) -> None:
        statistics = self._initial_angular_rate.statistics
        self._initial_avg_angular_rate = AngularSpeedTriad.from_array(statistics.mean)
        self._initial_angular_rate_std = AngularSpeedTriad.from_array(statistics.standard_deviation)
        self._initial_specific_force_std = self._detector.accumulated_standard_deviation_triad
        self._gyroscope_base_noise_level = statistics.standard_deviation_norm
        self.logger.info("Gyroscope initialization completed",
                         base_noise_level=self._gyroscope_base_noise_level)

    def _handle_initialization_failed(self, event: DetectionErrorEvent) -> None:
        self._initial_angular_rate.reset()

    def _handle_static_to_dynamic_change(self, event: DynamicIntervalDetectedEvent) -> None:
        self._items = []
        self._before_mean = AccelerationTriad.from_array(event.accumulated_mean)

    def _handle_dynamic_to_static_change(self, event: StaticIntervalDetectedEvent) -> None:
        items, self._items = self._items, []
        if self.is_dynamic_interval_skipped or not items or self._before_mean is None:
            return

        sequence = DynamicIntervalSequence(
            items=tuple(items),
            before_mean_specific_force=self._before_mean,
            after_mean_specific_force=AccelerationTriad.from_array(event.instantaneous_mean),
        )
        self.logger.info("Dynamic interval recorded", samples=len(sequence))
        self._notify(GyroscopeMeasurementEvent(producer_name=self.name, measurement=sequence))

    def _handle_dynamic_interval_skipped(self) -> None:
        self._items = []
