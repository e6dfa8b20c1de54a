"""
Base measurement generator.

A measurement generator wraps a static interval detector running on the
specific force of its input samples, and turns interval boundaries into
calibration measurements for one sensor channel. Subclasses decide what is
recorded and published for their channel through the _handle_* hooks.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar, Union

import structlog

from imucal.core.config import ConfigOwner, MeasurementsGeneratorConfig
from imucal.core.errors import LockedError
from imucal.core.events import BaseEvent, EventType, EventListener
from imucal.core.units import Acceleration, Time, as_default_value
from imucal.events.intervals import (
    DetectionErrorEvent,
    DynamicIntervalDetectedEvent,
    DynamicIntervalSkippedEvent,
    StaticIntervalDetectedEvent,
    StaticIntervalSkippedEvent,
    ResetEvent,
)
from imucal.intervals.detector import DetectorStatus, TriadStaticIntervalDetector
from imucal.kinematics.triads import AccelerationTriad

S = TypeVar("S")


class GeneratorParametersMixin(ABC):
    """
    Detection parameter accessors shared by generators and the combined generator.

    Classes using this mixin keep a MeasurementsGeneratorConfig in `_config`.
    """
    _config: MeasurementsGeneratorConfig

    @abstractmethod
    def _update_config(self, field: str, value: Any) -> None:
        """Validate and apply one parameter change, reconfiguring what depends on it."""

    @property
    def config(self) -> MeasurementsGeneratorConfig:
        return self._config

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

    @property
    def min_static_samples(self) -> int:
        return self._config.min_static_samples

    @min_static_samples.setter
    def min_static_samples(self, value: int) -> None:
        self._update_config("min_static_samples", value)

    @property
    def max_dynamic_samples(self) -> int:
        return self._config.max_dynamic_samples

    @max_dynamic_samples.setter
    def max_dynamic_samples(self, value: int) -> None:
        self._update_config("max_dynamic_samples", value)

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
        """Largest accepted accelerometer base noise level (m/s^2)."""
        return self._config.base_noise_level_absolute_threshold

    @base_noise_level_absolute_threshold.setter
    def base_noise_level_absolute_threshold(self, value: Union[float, Acceleration]) -> None:
        self._update_config("base_noise_level_absolute_threshold", as_default_value(value, Acceleration))

    @property
    def base_noise_level_absolute_threshold_as_measurement(self) -> Acceleration:
        return Acceleration(value=self._config.base_noise_level_absolute_threshold)


class MeasurementsGenerator(GeneratorParametersMixin, Generic[S]):
    """
    Base class for channel measurement generators.

    This class provides:
    - Static/dynamic interval detection on the specific force of each sample
    - Cumulative counters of processed static and dynamic samples
    - Skipping of static intervals shorter than `min_static_samples` and of
      dynamic intervals longer than `max_dynamic_samples`
    - Re-publishing of detector events under the generator's name
    - A running guard rejecting re-entrant calls and changes while processing

    A generator created with an owner, such as the combined generator, hands
    parameter changes and configure() calls to the owner, which reconfigures
    every channel sharing the config.

    Subclasses implement _specific_force() and the channel specific hooks.
    """

    def __init__(self,
                 config: Optional[MeasurementsGeneratorConfig] = None,
                 listener: Optional[EventListener] = None,
                 name: Optional[str] = None,
                 owner: Optional[ConfigOwner] = None):
        """
        Initialize the generator.

        Args:
            config: Detection parameters, kept by reference. Defaults to a new config.
            listener: Optional callable receiving every published event
            name: Optional generator name (defaults to class name)
            owner: Optional holder of the shared config
        """
        self.name = name or self.__class__.__name__
        self._config = config if config is not None else MeasurementsGeneratorConfig()
        self._listener = listener
        self._owner = owner
        self._running = False

        self.logger = structlog.get_logger(generator=self.name)

        self._detector = TriadStaticIntervalDetector(
            config=self._config,
            listener=self._on_detector_event,
            name=f"{self.name}.detector",
            triad_type=AccelerationTriad,
            owner=self,
        )
        self._current_sample: Optional[S] = None
        self._clear_counters()

    def _clear_counters(self) -> None:
        self._processed_static_samples = 0
        self._processed_dynamic_samples = 0
        self._static_interval_samples = 0
        self._dynamic_interval_samples = 0
        self._static_interval_skipped = False
        self._dynamic_interval_skipped = False

    # Configuration

    def configure(self, config: MeasurementsGeneratorConfig) -> None:
        """
        Use the given detection parameters.

        Args:
            config: Detection parameters, kept by reference

        Raises:
            LockedError: If the generator or its owner is running
        """
        self._check_not_running()
        if self._owner is not None:
            self._owner.configure(config)
            return
        self._apply_config(config)

    def _apply_config(self, config: MeasurementsGeneratorConfig) -> None:
        self._check_not_running()
        self._config = config
        self._detector._apply_config(config)

    def _update_config(self, field: str, value: Any) -> None:
        self._check_not_running()
        if self._owner is not None:
            self._owner._update_config(field, value)
            return
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

    # Status

    @property
    def detector(self) -> TriadStaticIntervalDetector:
        return self._detector

    @property
    def status(self) -> DetectorStatus:
        return self._detector.status

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def processed_static_samples(self) -> int:
        """Samples processed in static intervals since the last reset."""
        return self._processed_static_samples

    @property
    def processed_dynamic_samples(self) -> int:
        """Samples processed in dynamic intervals since the last reset."""
        return self._processed_dynamic_samples

    @property
    def is_static_interval_skipped(self) -> bool:
        """Whether the last static interval was too short to be measured."""
        return self._static_interval_skipped

    @property
    def is_dynamic_interval_skipped(self) -> bool:
        """Whether the current dynamic interval is too long to be measured."""
        return self._dynamic_interval_skipped

    @property
    def accelerometer_base_noise_level(self) -> float:
        """Accelerometer noise level measured during initialization (m/s^2)."""
        return self._detector.base_noise_level

    @property
    def accelerometer_base_noise_level_as_measurement(self) -> Acceleration:
        return Acceleration(value=self._detector.base_noise_level)

    @property
    def accelerometer_base_noise_level_psd(self) -> float:
        return self._detector.base_noise_level_psd

    @property
    def accelerometer_base_noise_level_root_psd(self) -> float:
        return self._detector.base_noise_level_root_psd

    @property
    def threshold(self) -> float:
        """Window noise level and specific force deviation above which the device is moving (m/s^2)."""
        return self._detector.threshold

    @property
    def threshold_as_measurement(self) -> Acceleration:
        return Acceleration(value=self._detector.threshold)

    # Processing

    def process(self, sample: S) -> bool:
        """
        Process one input sample.

        Args:
            sample: Input sample of the generator's channel

        Returns:
            True if the sample was processed, False if it was rejected because
            initialization failed. A failed generator must be reset.

        Raises:
            LockedError: If called while the generator is running
        """
        self._check_not_running()
        self._running = True
        try:
            self._current_sample = sample
            if self._detector.status == DetectorStatus.INITIALIZING:
                self._accumulate_initialization(sample)

            result = self._detector.process_triad(self._specific_force(sample))
            if result:
                self._update_counters()
                self._post_process(sample)
            return result
        finally:
            self._current_sample = None
            self._running = False

    def reset(self) -> None:
        """
        Reset the generator and its detector to their initial state.

        Raises:
            LockedError: If the generator is running
        """
        self._check_not_running()
        self._running = True
        try:
            self._detector.reset()
            self._clear_counters()
            self._reset_channel()
            self.logger.info("Generator reset")
            self._notify(ResetEvent(producer_name=self.name))
        finally:
            self._running = False

    def _update_counters(self) -> None:
        status = self._detector.status
        if status == DetectorStatus.STATIC_INTERVAL:
            self._processed_static_samples += 1
            self._static_interval_samples += 1
            self._dynamic_interval_samples = 0
        elif status == DetectorStatus.DYNAMIC_INTERVAL:
            self._processed_dynamic_samples += 1
            self._dynamic_interval_samples += 1
            self._static_interval_samples = 0

            if (self._dynamic_interval_samples > self._config.max_dynamic_samples
                    and not self._dynamic_interval_skipped):
                self._dynamic_interval_skipped = True
                self.logger.warning("Dynamic interval skipped",
                                    samples=self._dynamic_interval_samples,
                                    max_dynamic_samples=self._config.max_dynamic_samples)
                self._handle_dynamic_interval_skipped()
                self._notify(DynamicIntervalSkippedEvent(producer_name=self.name))

    def _on_detector_event(self, event: BaseEvent) -> None:
        """Translate an event published by the detector."""
        event_type = event.type

        if event_type == EventType.RESET:
            # The generator publishes its own reset event
            return

        if event_type == EventType.INITIALIZATION_COMPLETED:
            self._handle_initialization_completed()
        elif event_type == EventType.DETECTION_ERROR:
            self._handle_initialization_failed(event)
        elif event_type == EventType.STATIC_INTERVAL_DETECTED:
            self._handle_dynamic_to_static_change(event)
            self._dynamic_interval_skipped = False
            self._static_interval_skipped = False
        elif event_type == EventType.DYNAMIC_INTERVAL_DETECTED:
            if self._static_interval_samples < self._config.min_static_samples:
                self._static_interval_skipped = True
                self.logger.warning("Static interval skipped",
                                    samples=self._static_interval_samples,
                                    min_static_samples=self._config.min_static_samples)
                self._notify(StaticIntervalSkippedEvent(producer_name=self.name))
            self._handle_static_to_dynamic_change(event)

        self._notify(event.model_copy(update={"producer_name": self.name}))

    # Channel hooks

    @abstractmethod
    def _specific_force(self, sample: S) -> AccelerationTriad:
        """Get the specific force triad used for interval detection."""

    def _accumulate_initialization(self, sample: S) -> None:
        """Called with every sample received while initializing, before detection."""

    def _post_process(self, sample: S) -> None:
        """Called after the detector accepted a sample."""

    def _handle_initialization_completed(self) -> None:
        pass

    def _handle_initialization_failed(self, event: DetectionErrorEvent) -> None:
        pass

    def _handle_static_to_dynamic_change(self, event: DynamicIntervalDetectedEvent) -> None:
        pass

    def _handle_dynamic_to_static_change(self, event: StaticIntervalDetectedEvent) -> None:
        pass

    def _handle_dynamic_interval_skipped(self) -> None:
        pass

    def _reset_channel(self) -> None:
        pass

    # Helpers

    def _check_not_running(self) -> None:
        if self._running:
            raise LockedError(self.name)

    def _notify(self, event: BaseEvent) -> None:
        if self._listener is not None:
            self._listener(event)
