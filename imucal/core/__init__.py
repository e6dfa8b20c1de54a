"""
Core framework for imucal.

This package provides the infrastructure shared by detectors and generators:
- Event system with typed event definitions
- Event registry, bus and tracing
- Configuration management
- Physical measurement units
- Logging setup
"""

from .events import EventType, BaseEvent, Channel, EventListener
from .registry import EventRegistry
from .bus import EventBus
from .tracing import EventTracer
from .errors import ImucalError, LockedError
from .config import get_config, ApplicationConfig, MeasurementsGeneratorConfig
from .logging import setup_logging, setup_logging_from_config

__all__ = [
    'EventType',
    'BaseEvent',
    'Channel',
    'EventListener',
    'EventRegistry',
    'EventBus',
    'EventTracer',
    'ImucalError',
    'LockedError',
    'get_config',
    'ApplicationConfig',
    'MeasurementsGeneratorConfig',
    'setup_logging',
    'setup_logging_from_config',
]
