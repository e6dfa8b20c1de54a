"""
Configuration management for imucal.

This module provides Pydantic models for type-safe configuration with validation
and environment variable integration:
- MeasurementsGeneratorConfig holds the detection parameters shared by every
  detector and generator of a combined generator
- ApplicationConfig collects application settings from the environment
"""

import math
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Detection defaults
DEFAULT_WINDOW_SIZE = 101
MINIMUM_WINDOW_SIZE = 3
DEFAULT_INITIAL_STATIC_SAMPLES = 5000
MINIMUM_INITIAL_STATIC_SAMPLES = 2
DEFAULT_THRESHOLD_FACTOR = 2.0
DEFAULT_INSTANTANEOUS_NOISE_LEVEL_FACTOR = 2.0
DEFAULT_BASE_NOISE_LEVEL_ABSOLUTE_THRESHOLD = math.inf
DEFAULT_TIME_INTERVAL_SECONDS = 0.02  # 50Hz

# Generator defaults
DEFAULT_MIN_STATIC_SAMPLES = 2 * DEFAULT_WINDOW_SIZE
DEFAULT_MAX_DYNAMIC_SAMPLES = 30 * DEFAULT_WINDOW_SIZE
MINIMUM_INTERVAL_SAMPLES = 3


class LogLevel(str, Enum):
    """Log levels for the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MeasurementsGeneratorConfig(BaseModel):
    """
    Detection parameters shared by detectors and measurement generators.

    A combined generator owns one instance and hands the same object to its
    three channel generators, so their configuration cannot diverge.
    Assignments are validated, and a rejected value leaves the model unchanged.
    """
    model_config = ConfigDict(validate_assignment=True)

    time_interval: float = Field(
        DEFAULT_TIME_INTERVAL_SECONDS, description="Time between consecutive samples (s)"
    )
    min_static_samples: int = Field(
        DEFAULT_MIN_STATIC_SAMPLES, description="Samples a static interval needs to be measured"
    )
    max_dynamic_samples: int = Field(
        DEFAULT_MAX_DYNAMIC_SAMPLES, description="Samples after which a dynamic interval is skipped"
    )
    window_size: int = Field(DEFAULT_WINDOW_SIZE, description="Samples in the sliding window (odd)")
    initial_static_samples: int = Field(
        DEFAULT_INITIAL_STATIC_SAMPLES, description="Samples used to estimate the base noise level"
    )
    threshold_factor: float = Field(
        DEFAULT_THRESHOLD_FACTOR, description="Multiplier applied to the base noise level"
    )
    instantaneous_noise_level_factor: float = Field(
        DEFAULT_INSTANTANEOUS_NOISE_LEVEL_FACTOR,
        description="Ratio of window to accumulated noise that counts as sudden motion",
    )
    base_noise_level_absolute_threshold: float = Field(
        DEFAULT_BASE_NOISE_LEVEL_ABSOLUTE_THRESHOLD,
        description="Largest base noise level accepted during initialization",
    )

    @field_validator("time_interval")
    @classmethod
    def validate_time_interval(cls, v: float) -> float:
        """Validate time interval is not negative."""
        if v < 0.0:
            raise ValueError("Time interval must be zero or positive")
        return v

    @field_validator("min_static_samples", "max_dynamic_samples")
    @classmethod
    def validate_interval_samples(cls, v: int) -> int:
        """Validate interval sample limits."""
        if v < MINIMUM_INTERVAL_SAMPLES:
            raise ValueError(f"Interval sample limits must be at least {MINIMUM_INTERVAL_SAMPLES}")
        return v

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, v: int) -> int:
        """Validate window size is odd and large enough."""
        if v < MINIMUM_WINDOW_SIZE or v % 2 == 0:
            raise ValueError(f"Window size must be odd and at least {MINIMUM_WINDOW_SIZE}")
        return v

    @field_validator("initial_static_samples")
    @classmethod
    def validate_initial_static_samples(cls, v: int) -> int:
        """Validate enough initial samples are requested."""
        if v < MINIMUM_INITIAL_STATIC_SAMPLES:
            raise ValueError(f"Initial static samples must be at least {MINIMUM_INITIAL_STATIC_SAMPLES}")
        return v

    @field_validator("threshold_factor", "instantaneous_noise_level_factor", "base_noise_level_absolute_threshold")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate factors and thresholds are positive."""
        if not v > 0.0:
            raise ValueError("Value must be positive")
        return v


class ConfigOwner(Protocol):
    """
    Holder of a MeasurementsGeneratorConfig shared with its components.

    Components created with an owner hand their parameter changes and
    configure() calls to it, so every component sharing the config is
    reconfigured and the owner's running flag is honoured.
    """
    name: str

    @property
    def is_running(self) -> bool: ...

    def configure(self, config: MeasurementsGeneratorConfig) -> None: ...

    def _update_config(self, field: str, value: Any) -> None: ...


class BaseConfig(BaseSettings):
    """
    Base configuration class with common settings for all components.

    All other settings classes should inherit from this class.
    """
    model_config = SettingsConfigDict(env_file=".env", env_prefix="IMUCAL_", extra="ignore")

    debug: bool = False
    log_level: LogLevel = LogLevel.INFO


class EventConfig(BaseConfig):
    """Configuration for the event system."""
    model_config = SettingsConfigDict(env_prefix="IMUCAL_EVENT_")

    max_trace_events: int = 1000
    tracing_enabled: bool = True

    @field_validator("max_trace_events")
    @classmethod
    def validate_max_trace_events(cls, v: int) -> int:
        """Validate the trace buffer holds at least one event."""
        if v < 1:
            raise ValueError("Trace buffer must hold at least one event")
        return v


class ApplicationConfig(BaseConfig):
    """
    Main application configuration that combines all component configurations.

    Generator parameters can be overridden from the environment with the
    nested delimiter, e.g. IMUCAL_GENERATOR__WINDOW_SIZE=51.
    """
    model_config = SettingsConfigDict(env_nested_delimiter="__")

    event: EventConfig = Field(default_factory=EventConfig)
    generator: MeasurementsGeneratorConfig = Field(default_factory=MeasurementsGeneratorConfig)


def get_config() -> ApplicationConfig:
    """
    Get the application configuration.

    Returns:
        The validated ApplicationConfig instance
    """
    return ApplicationConfig()
