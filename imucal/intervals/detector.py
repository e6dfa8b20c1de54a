"""
Static interval detector for triad samples.

The detector classifies every incoming triad as belonging to a static interval
(device at rest) or a dynamic interval (device moving). It first estimates the
base noise level of the sensor while the device is held still, and derives the
decision threshold from it. Interval boundaries are published as events.

Status transitions:

    INITIALIZING -> INITIALIZATION_COMPLETED -> STATIC_INTERVAL <-> DYNAMIC_INTERVAL
    INITIALIZING -> FAILED (until reset)
"""

import math
from enum import Enum
from typing import Optional, Type, Union

import structlog

from imucal.core.config import ConfigOwner, MeasurementsGeneratorConfig
from imucal.core.errors import LockedError
from imucal.core.events import BaseEvent, EventListener
from imucal.core.units import Measurement, Time, as_default_value
from imucal.events.intervals import (
    ErrorReason,
    InitializationStartedEvent,
    InitializationCompletedEvent,
    DetectionErrorEvent,
    StaticIntervalDetectedEvent,
    DynamicIntervalDetectedEvent,
    ResetEvent,
)
from imucal.kinematics.triads import Triad, AccelerationTriad
from .noise import (
    AccumulatedTriadNoiseEstimator,
    TriadStatistics,
    Vector3,
    WindowedTriadNoiseEstimator,
)

_ZERO_STATISTICS = TriadStatistics(mean=(0.0, 0.0, 0.0), standard_deviation=(0.0, 0.0, 0.0))


class DetectorStatus(str, Enum):
    """Status of a static interval detector."""
    INITIALIZING = "initializing"
    INITIALIZATION_COMPLETED = "initialization_completed"
    STATIC_INTERVAL = "static_interval"
    DYNAMIC_INTERVAL = "dynamic_interval"
    FAILED = "failed"


class TriadStaticIntervalDetector:
    """
    Detects static and dynamic intervals in a stream of triads.

    While initializing, every sample is accumulated to estimate the base noise
    level of the sensor. If the noise within the window suddenly grows beyond
    `instantaneous_noise_level_factor` times the accumulated noise level, the
    device was moved during initialization and detection fails. Once
    `initial_static_samples` samples have been received and the window is full,
    the base noise level is the norm of the accumulated per-axis standard
    deviations and `threshold = base_noise_level * threshold_factor`.

    Afterwards, motion starts when the noise level of the window rises above the
    threshold and the sample itself lies further than the threshold from the
    mean of the current static interval. Sensor noise alone keeps the window
    noise level close to the base noise level, so single noisy samples do not
    open dynamic intervals. A dynamic interval ends on the first sample back
    within the threshold of the last static mean, or when the device settles in
    a new orientation: the window then holds only samples taken after the
    motion started and their noise level drops below the threshold.

    Samples are raw values in the default unit of `triad_type`. Triads in other
    units can be passed to process_triad() and are converted first.

    Detectors are not thread-safe. The running flag only rejects re-entrant
    calls made from listeners.
    """

    def __init__(self,
                 config: Optional[MeasurementsGeneratorConfig] = None,
                 listener: Optional[EventListener] = None,
                 name: Optional[str] = None,
                 triad_type: Type[Triad] = AccelerationTriad,
                 owner: Optional[ConfigOwner] = None):
        """
        Initialize the detector.

        Args:
            config: Detection parameters. The object is kept by reference, so it
                can be shared with other detectors. Defaults to a new config.
            listener: Optional callable receiving every published event
            name: Optional detector name used in events and logs
                (defaults to class name)
            triad_type: Kind of triad being processed
            owner: Optional holder of the shared config. Parameter changes and
                configure() calls are handed to it.
        """
        self.name = name or self.__class__.__name__
        self.triad_type = triad_type
        self._config = config if config is not None else MeasurementsGeneratorConfig()
        self._listener = listener
        self._owner = owner
        self._running = False

        self.logger = structlog.get_logger(detector=self.name)

        self._window = WindowedTriadNoiseEstimator(self._config.window_size)
        self._accumulator = AccumulatedTriadNoiseEstimator()
        self._clear_state()

    def _clear_state(self) -> None:
        self._status = DetectorStatus.INITIALIZING
        self._processed_samples = 0
        self._dynamic_interval_samples = 0
        self._base_noise_level = 0.0
        self._threshold = 0.0
        self._instantaneous = _ZERO_STATISTICS
        self._accumulated = _ZERO_STATISTICS
        self._last_static_mean: Vector3 = (0.0, 0.0, 0.0)

    # Configuration

    @property
    def config(self) -> MeasurementsGeneratorConfig:
        return self._config

    def configure(self, config: MeasurementsGeneratorConfig) -> None:
        """
        Use the given detection parameters.

        Changing the window size empties the window. A detector with an owner
        asks the owner to configure every component sharing its config.

        Args:
            config: Detection parameters, kept by reference

        Raises:
            LockedError: If the detector or its owner is running
        """
        self._check_not_running()
        if self._owner is not None:
            self._owner.configure(config)
            return
        self._apply_config(config)

    def _apply_config(self, config: MeasurementsGeneratorConfig) -> None:
        self._check_not_running()
        self._config = config
        if self._window.window_size != config.window_size:
            self._window.window_size = config.window_size

    def _update_config(self, field: str, value) -> None:
        self._check_not_running()
        if self._owner is not None:
            self._owner._update_config(field, value)
            return
        # Validated by pydantic; a rejected value leaves the config untouched
        setattr(self._config, field, value)
        self._apply_config(self._config)

    @property
    def listener(self) -> Optional[EventListener]:
        return self._listener

    @listener.setter
    def listener(self, listener: Optional[EventListener]) -> None:
        self._check_not_running()
        if self._owner is not None and self._owner.is_running:
            raise LockedError(self._owner.name)
        self._listener = listener

    @property
    def owner(self) -> Optional[ConfigOwner]:
        return self._owner

    @property
    def window(self) -> WindowedTriadNoiseEstimator:
        """Sliding window of the most recent samples."""
        return self._window

    @property
    def window_size(self) -> int:
        return self._config.window_size

    @window_size.setter
    def window_size(self, value: int) -> None:
        self._update_config("window_size", value)

    @property
    def initial_static_samples(self) -> int:
        return self._config.initial_static_samples

    @initial_static_samples.setter
    def initial_static_samples(self, value: int) -> None:
        self._update_config("initial_static_samples", value)

    @property
    def threshold_factor(self) -> float:
        return self._config.threshold_factor

    @threshold_factor.setter
    def threshold_factor(self, value: float) -> None:
        self._update_config("threshold_factor", value)

    @property
    def instantaneous_noise_level_factor(self) -> float:
        return self._config.instantaneous_noise_level_factor

    @instantaneous_noise_level_factor.setter
    def instantaneous_noise_level_factor(self, value: float) -> None:
        self._update_config("instantaneous_noise_level_factor", value)

    @property
    def base_noise_level_absolute_threshold(self) -> float:
        """Largest accepted base noise level, in the default unit of the triad."""
        return self._config.base_noise_level_absolute_threshold

    @base_noise_level_absolute_threshold.setter
    def base_noise_level_absolute_threshold(self, value: Union[float, Measurement]) -> None:
        self._update_config(
            "base_noise_level_absolute_threshold",
            as_default_value(value, self.triad_type.MEASUREMENT),
        )

    @property
    def base_noise_level_absolute_threshold_as_measurement(self) -> Measurement:
        return self._as_measurement(self._config.base_noise_level_absolute_threshold)

    @property
    def time_interval(self) -> float:
        """Time between consecutive samples (s)."""
        return self._config.time_interval

    @time_interval.setter
    def time_interval(self, value: Union[float, Time]) -> None:
        self._update_config("time_interval", as_default_value(value, Time))

    @property
    def time_interval_as_time(self) -> Time:
        return Time(value=self._config.time_interval)

    # Status

    @property
    def status(self) -> DetectorStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def processed_samples(self) -> int:
        return self._processed_samples

    @property
    def base_noise_level(self) -> float:
        """
        Noise level measured during initialization.

        Norm of the per-axis standard deviations, zero until initialization
        completes.
        """
        return self._base_noise_level

    @property
    def base_noise_level_as_measurement(self) -> Measurement:
        return self._as_measurement(self._base_noise_level)

    @property
    def base_noise_level_psd(self) -> float:
        """Power spectral density of the base noise level."""
        return self._base_noise_level ** 2 * self._config.time_interval

    @property
    def base_noise_level_root_psd(self) -> float:
        """Root power spectral density of the base noise level."""
        return self._base_noise_level * math.sqrt(self._config.time_interval)

    @property
    def threshold(self) -> float:
        """Window noise level and distance to the static mean above which the device is moving."""
        return self._threshold

    @property
    def threshold_as_measurement(self) -> Measurement:
        return self._as_measurement(self._threshold)

    @property
    def accumulated_mean(self) -> Vector3:
        """Mean of the last closed static interval (or of initialization)."""
        return self._accumulated.mean

    @property
    def accumulated_standard_deviation(self) -> Vector3:
        """Per-axis standard deviation of the last closed static interval (or of initialization)."""
        return self._accumulated.standard_deviation

    @property
    def accumulated_mean_triad(self) -> Triad:
        return self.triad_type.from_array(self._accumulated.mean)

    @property
    def accumulated_standard_deviation_triad(self) -> Triad:
        return self.triad_type.from_array(self._accumulated.standard_deviation)

    @property
    def instantaneous_mean(self) -> Vector3:
        """Mean of the samples in the window."""
        return self._instantaneous.mean

    @property
    def instantaneous_standard_deviation(self) -> Vector3:
        """Per-axis standard deviation of the samples in the window."""
        return self._instantaneous.standard_deviation

    @property
    def instantaneous_mean_triad(self) -> Triad:
        return self.triad_type.from_array(self._instantaneous.mean)

    @property
    def instantaneous_standard_deviation_triad(self) -> Triad:
        return self.triad_type.from_array(self._instantaneous.standard_deviation)

    @property
    def instantaneous_noise_level(self) -> float:
        return self._instantaneous.standard_deviation_norm

    @property
    def current_static_interval_samples(self) -> int:
        """Samples accumulated in the static interval in progress."""
        if self._status == DetectorStatus.STATIC_INTERVAL:
            return self._accumulator.count
        return 0

    # Processing

    def process_triad(self, triad: Triad) -> bool:
        """
        Process a triad, converting it to the default unit first.

        Args:
            triad: Triad of the kind handled by this detector

        Returns:
            True if the sample was processed, False if it was rejected
        """
        triad = triad.in_default_unit()
        return self.process(triad.x, triad.y, triad.z)

    def process(self, x: float, y: float, z: float) -> bool:
        """
        Process one triad sample.

        Args:
            x: x component, in the default unit of the triad
            y: y component, in the default unit of the triad
            z: z component, in the default unit of the triad

        Returns:
            True if the sample was processed, False if it made initialization
            fail or the detector already failed and must be reset

        Raises:
            LockedError: If called while the detector is running
        """
        self._check_not_running()
        if self._status == DetectorStatus.FAILED:
            return False

        self._running = True
        try:
            if self._processed_samples == 0:
                self.logger.debug("Initialization started")
                self._notify(InitializationStartedEvent(producer_name=self.name))

            self._instantaneous = self._window.push(x, y, z)
            self._processed_samples += 1

            if self._status == DetectorStatus.INITIALIZING:
                return self._process_initializing(x, y, z)
            self._process_interval(x, y, z)
            return True
        finally:
            self._running = False

    def _process_initializing(self, x: float, y: float, z: float) -> bool:
        self._accumulator.add(x, y, z)
        accumulated_noise_level = self._accumulator.standard_deviation_norm
        instantaneous_noise_level = self._instantaneous.standard_deviation_norm

        if self._processed_samples < self._config.initial_static_samples:
            if (self._window.is_filled and instantaneous_noise_level
                    > self._config.instantaneous_noise_level_factor * accumulated_noise_level):
                self._fail(ErrorReason.SUDDEN_EXCESSIVE_MOVEMENT_DETECTED,
                           accumulated_noise_level, instantaneous_noise_level)
                return False
            return True

        if not self._window.is_filled:
            return True

        self._base_noise_level = accumulated_noise_level
        self._threshold = accumulated_noise_level * self._config.threshold_factor
        self._accumulated = self._accumulator.statistics
        self._last_static_mean = self._accumulated.mean
        self._accumulator.reset()

        if self._base_noise_level > self._config.base_noise_level_absolute_threshold:
            self._fail(ErrorReason.OVERALL_EXCESSIVE_MOVEMENT_DETECTED,
                       accumulated_noise_level, instantaneous_noise_level)
            return False

        self._status = DetectorStatus.INITIALIZATION_COMPLETED
        self.logger.info("Initialization completed",
                         base_noise_level=self._base_noise_level,
                         threshold=self._threshold,
                         samples=self._processed_samples)
        self._notify(InitializationCompletedEvent(
            producer_name=self.name, base_noise_level=self._base_noise_level))
        return True

    def _process_interval(self, x: float, y: float, z: float) -> None:
        if self._status == DetectorStatus.STATIC_INTERVAL and self._accumulator.count > 0:
            reference = self._accumulator.mean
        else:
            reference = self._last_static_mean
        deviation = math.sqrt((x - reference[0]) ** 2
                              + (y - reference[1]) ** 2
                              + (z - reference[2]) ** 2)

        if self._status == DetectorStatus.DYNAMIC_INTERVAL:
            settled = (self._dynamic_interval_samples >= self._config.window_size
                       and self._instantaneous.standard_deviation_norm < self._threshold)
            if deviation <= self._threshold or settled:
                self._start_static_interval(x, y, z)
            else:
                self._dynamic_interval_samples += 1
            return

        if (deviation > self._threshold
                and self._instantaneous.standard_deviation_norm > self._threshold):
            self._start_dynamic_interval()
            return

        self._accumulator.add(x, y, z)
        if self._status == DetectorStatus.INITIALIZATION_COMPLETED:
            self._status = DetectorStatus.STATIC_INTERVAL
            self._notify_static_interval()

    def _start_static_interval(self, x: float, y: float, z: float) -> None:
        self._status = DetectorStatus.STATIC_INTERVAL
        self._dynamic_interval_samples = 0
        self._accumulator.reset()
        self._accumulator.add(x, y, z)
        self._notify_static_interval()

    def _notify_static_interval(self) -> None:
        self.logger.debug("Static interval detected", sample=self._processed_samples)
        self._notify(StaticIntervalDetectedEvent(
            producer_name=self.name,
            instantaneous_mean=self._instantaneous.mean,
            instantaneous_standard_deviation=self._instantaneous.standard_deviation,
        ))

    def _start_dynamic_interval(self) -> None:
        # The accumulator is empty when motion starts right after initialization
        if self._accumulator.count > 0:
            self._accumulated = self._accumulator.statistics
            self._last_static_mean = self._accumulated.mean
        self._accumulator.reset()

        self._status = DetectorStatus.DYNAMIC_INTERVAL
        self._dynamic_interval_samples = 1
        self.logger.debug("Dynamic interval detected", sample=self._processed_samples)
        self._notify(DynamicIntervalDetectedEvent(
            producer_name=self.name,
            instantaneous_mean=self._instantaneous.mean,
            instantaneous_standard_deviation=self._instantaneous.standard_deviation,
            accumulated_mean=self._accumulated.mean,
            accumulated_standard_deviation=self._accumulated.standard_deviation,
        ))

    def _fail(self, reason: ErrorReason, accumulated_noise_level: float,
              instantaneous_noise_level: float) -> None:
        self._status = DetectorStatus.FAILED
        self.logger.warning("Initialization failed",
                            reason=reason.value,
                            accumulated_noise_level=accumulated_noise_level,
                            instantaneous_noise_level=instantaneous_noise_level,
                            sample=self._processed_samples)
        self._notify(DetectionErrorEvent(
            producer_name=self.name,
            reason=reason,
            accumulated_noise_level=accumulated_noise_level,
            instantaneous_noise_level=instantaneous_noise_level,
        ))

    def reset(self) -> None:
        """
        Return to INITIALIZING, discarding every sample processed so far.

        The configuration is kept.

        Raises:
            LockedError: If the detector is running
        """
        self._check_not_running()
        self._running = True
        try:
            self._window.reset()
            self._accumulator.reset()
            self._clear_state()
            self.logger.info("Detector reset")
            self._notify(ResetEvent(producer_name=self.name))
        finally:
            self._running = False

    # Helpers

    def _check_not_running(self) -> None:
        if self._running:
            raise LockedError(self.name)

    def _as_measurement(self, value: float) -> Measurement:
        return self.triad_type.MEASUREMENT(value=value)

    def _notify(self, event: BaseEvent) -> None:
        if self._listener is not None:
            self._listener(event)
