"""
Event definitions for imucal.

This package contains all event types used in the system, organized by functional area.
EVENT_SCHEMAS maps every event type to its class and description and is used to
populate the default EventRegistry.
"""

from typing import Dict, Tuple, Type

# Re-export core types
from imucal.core.events import EventType, BaseEvent, Channel
from .intervals import (
    ErrorReason,
    InitializationStartedEvent,
    InitializationCompletedEvent,
    DetectionErrorEvent,
    StaticIntervalDetectedEvent,
    DynamicIntervalDetectedEvent,
    StaticIntervalSkippedEvent,
    DynamicIntervalSkippedEvent,
    ResetEvent,
)
from .measurements import (
    AccelerometerMeasurementEvent,
    GyroscopeMeasurementEvent,
    MagnetometerMeasurementEvent,
)

EVENT_SCHEMAS: Dict[EventType, Tuple[Type[BaseEvent], str]] = {
    EventType.INITIALIZATION_STARTED: (
        InitializationStartedEvent, "First sample received, device must be held still"),
    EventType.INITIALIZATION_COMPLETED: (
        InitializationCompletedEvent, "Base noise level estimated"),
    EventType.DETECTION_ERROR: (
        DetectionErrorEvent, "Initialization failed because of excessive movement"),
    EventType.STATIC_INTERVAL_DETECTED: (
        StaticIntervalDetectedEvent, "Device came to rest"),
    EventType.DYNAMIC_INTERVAL_DETECTED: (
        DynamicIntervalDetectedEvent, "Device started moving"),
    EventType.STATIC_INTERVAL_SKIPPED: (
        StaticIntervalSkippedEvent, "Static interval too short to be measured"),
    EventType.DYNAMIC_INTERVAL_SKIPPED: (
        DynamicIntervalSkippedEvent, "Dynamic interval too long to be measured"),
    EventType.ACCELEROMETER_MEASUREMENT: (
        AccelerometerMeasurementEvent, "Specific force measured over a static interval"),
    EventType.GYROSCOPE_MEASUREMENT: (
        GyroscopeMeasurementEvent, "Kinematics recorded over a dynamic interval"),
    EventType.MAGNETOMETER_MEASUREMENT: (
        MagnetometerMeasurementEvent, "Magnetic flux density measured over a static interval"),
    EventType.RESET: (
        ResetEvent, "Component reset to its initial state"),
}

__all__ = [
    'EventType',
    'BaseEvent',
    'Channel',
    'ErrorReason',
    'InitializationStartedEvent',
    'InitializationCompletedEvent',
    'DetectionErrorEvent',
    'StaticIntervalDetectedEvent',
    'DynamicIntervalDetectedEvent',
    'StaticIntervalSkippedEvent',
    'DynamicIntervalSkippedEvent',
    'ResetEvent',
    'AccelerometerMeasurementEvent',
    'GyroscopeMeasurementEvent',
    'MagnetometerMeasurementEvent',
    'EVENT_SCHEMAS',
]
