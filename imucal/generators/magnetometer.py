"""
Magnetometer measurement generator.

Publishes the mean and per-axis standard deviation of the magnetic flux
density for every static interval long enough to be measured, along with the
position and time of the sample that closed the interval.
"""

import math

from imucal.core.units import MagneticFluxDensity
from imucal.events.intervals import DetectionErrorEvent, StaticIntervalDetectedEvent, DynamicIntervalDetectedEvent
from imucal.events.measurements import MagnetometerMeasurementEvent
from imucal.intervals.detector import DetectorStatus
from imucal.intervals.noise import AccumulatedTriadNoiseEstimator
from imucal.kinematics.results import MagneticFluxDensityMeasurement
from imucal.kinematics.samples import BodyKinematicsAndMagneticFluxDensity
from imucal.kinematics.triads import AccelerationTriad, MagneticFluxDensityTriad
from .base import MeasurementsGenerator


class MagnetometerMeasurementsGenerator(MeasurementsGenerator[BodyKinematicsAndMagneticFluxDensity]):
    """
    Generates magnetometer calibration measurements.

    Intervals are detected on the specific force, while the magnetic flux
    density is accumulated separately during initialization and during each
    static interval. Samples carrying a `timestamp_seconds` tag the
    measurements with it.
    """

    def __init__(self, *args, **kwargs):
        self._initial_flux = AccumulatedTriadNoiseEstimator()
        self._static_flux = AccumulatedTriadNoiseEstimator()
        self._magnetometer_base_noise_level = 0.0
        super().__init__(*args, **kwargs)

    def _reset_channel(self) -> None:
        self._initial_flux.reset()
        self._static_flux.reset()
        self._magnetometer_base_noise_level = 0.0

    @property
    def magnetometer_base_noise_level(self) -> float:
        """Norm of the flux density standard deviations during initialization (T)."""
        return self._magnetometer_base_noise_level

    @property
    def magnetometer_base_noise_level_as_measurement(self) -> MagneticFluxDensity:
        return MagneticFluxDensity(value=self._magnetometer_base_noise_level)

    @property
    def magnetometer_base_noise_level_psd(self) -> float:
        return self._magnetometer_base_noise_level ** 2 * self.time_interval

    @property
    def magnetometer_base_noise_level_root_psd(self) -> float:
        return self._magnetometer_base_noise_level * math.sqrt(self.time_interval)

    def _specific_force(self, sample: BodyKinematicsAndMagneticFluxDensity) -> AccelerationTriad:
        return sample.kinematics.specific_force

    @staticmethod
    def _add_flux(estimator: AccumulatedTriadNoiseEstimator,
                  sample: BodyKinematicsAndMagneticFluxDensity) -> None:
        flux = sample.magnetic_flux_density.in_default_unit()
        estimator.add(flux.x, flux.y, flux.z)

    def _accumulate_initialization(self, sample: BodyKinematicsAndMagneticFluxDensity) -> None:
        self._add_flux(self._initial_flux, sample)

    def _post_process(self, sample: BodyKinematicsAndMagneticFluxDensity) -> None:
        if self.status == DetectorStatus.STATIC_INTERVAL:
            self._add_flux(self._static_flux, sample)

    def _handle_initialization_completed(self) -> None:
        self._magnetometer_base_noise_level = self._initial_flux.standard_deviation_norm
        self._initial_flux.reset()
        self.logger.info("Magnetometer initialization completed",
                         base_noise_level=self._magnetometer_base_noise_level)

    def _handle_initialization_failed(self, event: DetectionErrorEvent) -> None:
        self._initial_flux.reset()

    def _handle_dynamic_to_static_change(self, event: StaticIntervalDetectedEvent) -> None:
        self._static_flux.reset()

    def _handle_static_to_dynamic_change(self, event: DynamicIntervalDetectedEvent) -> None:
        statistics = self._static_flux.statistics
        count = self._static_flux.count
        self._static_flux.reset()
        if self.is_static_interval_skipped or count == 0:
            return

        sample = self._current_sample
        measurement = MagneticFluxDensityMeasurement(
            mean=MagneticFluxDensityTriad.from_array(statistics.mean),
            standard_deviation=MagneticFluxDensityTriad.from_array(statistics.standard_deviation),
            sample_count=count,
            position=sample.position,
            timestamp_seconds=getattr(sample, "timestamp_seconds", None),
        )
        self.logger.info("Static interval measured", samples=count)
        self._notify(MagnetometerMeasurementEvent(producer_name=self.name, measurement=measurement))
