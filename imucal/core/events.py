"""
Core event system for imucal.

This module defines the base event model and the event type enum that form the
foundation of the typed event system. All events published by detectors,
generators and the combined generator inherit from BaseEvent.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Callable, Optional
from enum import Enum
import time
import uuid


class EventType(str, Enum):
    """
    Enum defining all event types in the system.

    Using string-based enum to ensure JSON serialization works properly.
    """
    # Initialization events
    INITIALIZATION_STARTED = "initialization_started"
    INITIALIZATION_COMPLETED = "initialization_completed"
    DETECTION_ERROR = "detection_error"

    # Interval events
    STATIC_INTERVAL_DETECTED = "static_interval_detected"
    DYNAMIC_INTERVAL_DETECTED = "dynamic_interval_detected"
    STATIC_INTERVAL_SKIPPED = "static_interval_skipped"
    DYNAMIC_INTERVAL_SKIPPED = "dynamic_interval_skipped"

    # Measurement events
    ACCELEROMETER_MEASUREMENT = "accelerometer_measurement"
    GYROSCOPE_MEASUREMENT = "gyroscope_measurement"
    MAGNETOMETER_MEASUREMENT = "magnetometer_measurement"

    # Lifecycle events
    RESET = "reset"


class Channel(str, Enum):
    """Sensor channels handled by the combined generator."""
    ACCELEROMETER = "accelerometer"
    GYROSCOPE = "gyroscope"
    MAGNETOMETER = "magnetometer"


def generate_trace_id() -> str:
    """Generate a unique trace ID for event tracing."""
    return str(uuid.uuid4())


class BaseEvent(BaseModel):
    """
    Base model for all events with common metadata.

    All events in the system should inherit from this class and specify the event type
    and any additional payload fields required for that event.
    """
    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    type: EventType
    producer_name: str = ""
    channel: Optional[Channel] = None  # Set when relayed by the combined generator
    timestamp: float = Field(default_factory=time.time)
    trace_id: Optional[str] = Field(default_factory=generate_trace_id)


# Listeners are plain synchronous callables. EventBus.publish fits this signature.
EventListener = Callable[[BaseEvent], None]
