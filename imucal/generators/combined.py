"""
Combined accelerometer, gyroscope and magnetometer measurement generator.

Drives the three channel generators over one stream of combined samples,
keeps their configuration identical by sharing a single config object, and
relays a subset of their events through one listener.
"""

from enum import Enum
from functools import partial
from typing import Any, Dict, FrozenSet, Optional

import structlog

from imucal.core.config import ApplicationConfig, MeasurementsGeneratorConfig
from imucal.core.errors import LockedError
from imucal.core.events import BaseEvent, Channel, EventType, EventListener
from imucal.core.units import Acceleration, AngularSpeed, MagneticFluxDensity
from imucal.events.intervals import ResetEvent
from imucal.intervals.detector import DetectorStatus
from imucal.kinematics.samples import TimedBodyKinematicsAndMagneticFluxDensity
from imucal.kinematics.triads import AngularSpeedTriad
from .accelerometer import AccelerometerMeasurementsGenerator
from .base import GeneratorParametersMixin
from .gyroscope import GyroscopeMeasurementsGenerator
from .magnetometer import MagnetometerMeasurementsGenerator


class ChannelPolicy(str, Enum):
    """
    How a sample rejected by one channel affects the following channels.

    GATED: channels run in order (accelerometer, gyroscope, magnetometer) and a
    sample rejected by one channel is withheld from the channels after it.
    Once the accelerometer fails, gyroscope and magnetometer receive nothing
    until reset.

    INDEPENDENT: every channel processes every sample.
    """
    GATED = "gated"
    INDEPENDENT = "independent"


# Channels run the same detection on the same specific force, so most of their
# events are duplicates. Only these are relayed to the listener.
FORWARDED_EVENTS: Dict[Channel, FrozenSet[EventType]] = {
    Channel.ACCELEROMETER: frozenset({
        EventType.DETECTION_ERROR,
        EventType.ACCELEROMETER_MEASUREMENT,
    }),
    Channel.GYROSCOPE: frozenset({
        EventType.GYROSCOPE_MEASUREMENT,
    }),
    Channel.MAGNETOMETER: frozenset({
        EventType.INITIALIZATION_STARTED,
        EventType.INITIALIZATION_COMPLETED,
        EventType.STATIC_INTERVAL_DETECTED,
        EventType.DYNAMIC_INTERVAL_DETECTED,
        EventType.STATIC_INTERVAL_SKIPPED,
        EventType.DYNAMIC_INTERVAL_SKIPPED,
        EventType.MAGNETOMETER_MEASUREMENT,
    }),
}


class CombinedMeasurementsGenerator(GeneratorParametersMixin):
    """
    Generates accelerometer, gyroscope and magnetometer measurements at once.

    Every parameter setter validates the new value on the shared configuration
    and reconfigures the three generators, so they can never diverge. The
    channel generators and their detectors are owned by this generator: their
    setters and configure() come back here and are locked while it runs. Status
    getters report the accelerometer channel unless they are channel specific.

    Relayed events carry this generator's name as producer and the channel
    they come from.

    Not thread-safe: the running flag only rejects re-entrant calls made from
    the listener.
    """

    def __init__(self,
                 config: Optional[MeasurementsGeneratorConfig] = None,
                 listener: Optional[EventListener] = None,
                 name: Optional[str] = None,
                 policy: ChannelPolicy = ChannelPolicy.GATED):
        """
        Initialize the combined generator.

        Args:
            config: Detection parameters shared by the three generators.
                Defaults to a new config.
            listener: Optional callable receiving relayed events
            name: Optional generator name (defaults to class name)
            policy: How a rejected sample affects the following channels
        """
        self.name = name or self.__class__.__name__
        self._config = config if config is not None else MeasurementsGeneratorConfig()
        self._listener = listener
        self._policy = policy
        self._running = False

        self.logger = structlog.get_logger(generator=self.name)

        self._accelerometer = AccelerometerMeasurementsGenerator(
            config=self._config,
            listener=partial(self._relay, Channel.ACCELEROMETER),
            name=f"{self.name}.{Channel.ACCELEROMETER.value}",
            owner=self,
        )
        self._gyroscope = GyroscopeMeasurementsGenerator(
            config=self._config,
            listener=partial(self._relay, Channel.GYROSCOPE),
            name=f"{self.name}.{Channel.GYROSCOPE.value}",
            owner=self,
        )
        self._magnetometer = MagnetometerMeasurementsGenerator(
            config=self._config,
            listener=partial(self._relay, Channel.MAGNETOMETER),
            name=f"{self.name}.{Channel.MAGNETOMETER.value}",
            owner=self,
        )

    @classmethod
    def from_config(cls, app_config: ApplicationConfig,
                    listener: Optional[EventListener] = None,
                    **kwargs: Any) -> "CombinedMeasurementsGenerator":
        """
        Create a combined generator from application settings.

        Args:
            app_config: Application configuration
            listener: Optional callable receiving relayed events
            **kwargs: Other constructor arguments

        Returns:
            A new combined generator using app_config.generator
        """
        return cls(config=app_config.generator, listener=listener, **kwargs)

    # Configuration

    def configure(self, config: MeasurementsGeneratorConfig) -> None:
        """
        Use the given detection parameters for all three channels.

        Args:
            config: Detection parameters, kept by reference

        Raises:
            LockedError: If the generator is running
        """
        self._check_not_running()
        self._config = config
        for generator in self.generators.values():
            generator._apply_config(config)

    def _update_config(self, field: str, value: Any) -> None:
        self._check_not_running()
        setattr(self._config, field, value)
        self.configure(self._config)

    @property
    def listener(self) -> Optional[EventListener]:
        return self._listener

    @listener.setter
    def listener(self, listener: Optional[EventListener]) -> None:
        self._check_not_running()
        self._listener = listener

    @property
    def policy(self) -> ChannelPolicy:
        return self._policy

    @policy.setter
    def policy(self, policy: ChannelPolicy) -> None:
        self._check_not_running()
        self._policy = ChannelPolicy(policy)

    # Channels

    @property
    def accelerometer(self) -> AccelerometerMeasurementsGenerator:
        return self._accelerometer

    @property
    def gyroscope(self) -> GyroscopeMeasurementsGenerator:
        return self._gyroscope

    @property
    def magnetometer(self) -> MagnetometerMeasurementsGenerator:
        return self._magnetometer

    @property
    def generators(self) -> Dict[Channel, Any]:
        """Channel generators in processing order."""
        return {
            Channel.ACCELEROMETER: self._accelerometer,
            Channel.GYROSCOPE: self._gyroscope,
            Channel.MAGNETOMETER: self._magnetometer,
        }

    # Status

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def status(self) -> DetectorStatus:
        return self._accelerometer.status

    @property
    def processed_static_samples(self) -> int:
        return self._accelerometer.processed_static_samples

    @property
    def processed_dynamic_samples(self) -> int:
        return self._accelerometer.processed_dynamic_samples

    @property
    def is_static_interval_skipped(self) -> bool:
        return self._accelerometer.is_static_interval_skipped

    @property
    def is_dynamic_interval_skipped(self) -> bool:
        return self._accelerometer.is_dynamic_interval_skipped

    @property
    def accelerometer_base_noise_level(self) -> float:
        return self._accelerometer.accelerometer_base_noise_level

    @property
    def accelerometer_base_noise_level_as_measurement(self) -> Acceleration:
        return self._accelerometer.accelerometer_base_noise_level_as_measurement

    @property
    def accelerometer_base_noise_level_psd(self) -> float:
        return self._accelerometer.accelerometer_base_noise_level_psd

    @property
    def accelerometer_base_noise_level_root_psd(self) -> float:
        return self._accelerometer.accelerometer_base_noise_level_root_psd

    @property
    def threshold(self) -> float:
        return self._accelerometer.threshold

    @property
    def threshold_as_measurement(self) -> Acceleration:
        return self._accelerometer.threshold_as_measurement

    @property
    def initial_avg_angular_speed_triad(self) -> AngularSpeedTriad:
        return self._gyroscope.initial_avg_angular_speed_triad

    @property
    def initial_angular_speed_triad_standard_deviation(self) -> AngularSpeedTriad:
        return self._gyroscope.initial_angular_speed_triad_standard_deviation

    @property
    def gyroscope_base_noise_level(self) -> float:
        return self._gyroscope.gyroscope_base_noise_level

    @property
    def gyroscope_base_noise_level_as_measurement(self) -> AngularSpeed:
        return self._gyroscope.gyroscope_base_noise_level_as_measurement

    @property
    def gyroscope_base_noise_level_psd(self) -> float:
        return self._gyroscope.gyroscope_base_noise_level_psd

    @property
    def gyroscope_base_noise_level_root_psd(self) -> float:
        return self._gyroscope.gyroscope_base_noise_level_root_psd

    @property
    def magnetometer_base_noise_level(self) -> float:
        return self._magnetometer.magnetometer_base_noise_level

    @property
    def magnetometer_base_noise_level_as_measurement(self) -> MagneticFluxDensity:
        return self._magnetometer.magnetometer_base_noise_level_as_measurement

    @property
    def magnetometer_base_noise_level_psd(self) -> float:
        return self._magnetometer.magnetometer_base_noise_level_psd

    @property
    def magnetometer_base_noise_level_root_psd(self) -> float:
        return self._magnetometer.magnetometer_base_noise_level_root_psd

    # Processing

    def process(self, sample: TimedBodyKinematicsAndMagneticFluxDensity) -> bool:
        """
        Process one combined sample on the three channels.

        Args:
            sample: Combined accelerometer, gyroscope and magnetometer sample

        Returns:
            True if every channel that received the sample accepted it

        Raises:
            LockedError: If called while the generator is running
        """
        self._check_not_running()
        self._running = True
        try:
            views: Dict[Channel, Any] = {
                Channel.ACCELEROMETER: sample.as_body_kinematics(),
                Channel.GYROSCOPE: sample.as_timed_body_kinematics(),
                Channel.MAGNETOMETER: sample.as_body_kinematics_and_magnetic_flux_density(),
            }

            if self._policy == ChannelPolicy.INDEPENDENT:
                results = [generator.process(views[channel])
                           for channel, generator in self.generators.items()]
                return all(results)

            for channel, generator in self.generators.items():
                if not generator.process(views[channel]):
                    self.logger.debug("Sample rejected, withheld from later channels",
                                      channel=channel.value)
                    return False
            return True
        finally:
            self._running = False

    def reset(self) -> None:
        """
        Reset the three generators and notify the listener once.

        Raises:
            LockedError: If the generator is running
        """
        self._check_not_running()
        self._running = True
        try:
            for generator in self.generators.values():
                generator.reset()
            self.logger.info("Combined generator reset")
            self._notify(ResetEvent(producer_name=self.name))
        finally:
            self._running = False

    def _relay(self, channel: Channel, event: BaseEvent) -> None:
        """Relay an allowed event of a channel generator to the listener."""
        if event.type not in FORWARDED_EVENTS[channel]:
            return
        self._notify(event.model_copy(update={"producer_name": self.name, "channel": channel}))

    # Helpers

    def _check_not_running(self) -> None:
        if self._running:
            raise LockedError(self.name)

    def _notify(self, event: BaseEvent) -> None:
        if self._listener is not None:
            self._listener(event)
