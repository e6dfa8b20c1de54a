"""
Interval detection events for imucal.

This module defines events published by static interval detectors and relayed
by the measurement generators: initialization progress, detection failures,
interval boundaries and skipped intervals.
"""

from enum import Enum
from typing import Literal, Tuple
from imucal.core.events import BaseEvent, EventType

Vector3 = Tuple[float, float, float]


class ErrorReason(str, Enum):
    """Reasons a detector fails during initialization."""
    SUDDEN_EXCESSIVE_MOVEMENT_DETECTED = "sudden_excessive_movement_detected"
    OVERALL_EXCESSIVE_MOVEMENT_DETECTED = "overall_excessive_movement_detected"


class InitializationStartedEvent(BaseEvent):
    """
    Event published when the first sample after a reset is received.

    The device is expected to be held still from now on, until
    initialization completes.
    """
    type: Literal[EventType.INITIALIZATION_STARTED] = EventType.INITIALIZATION_STARTED


class InitializationCompletedEvent(BaseEvent):
    """
    Event published when the base noise level has been estimated.
    """
    type: Literal[EventType.INITIALIZATION_COMPLETED] = EventType.INITIALIZATION_COMPLETED
    base_noise_level: float  # Norm of per-axis standard deviations during initialization


class DetectionErrorEvent(BaseEvent):
    """
    Event published when initialization fails.

    The detector stays failed until it is reset. The usual remedy is to reset,
    adjust the threshold factor and acquire the data again.
    """
    type: Literal[EventType.DETECTION_ERROR] = EventType.DETECTION_ERROR
    reason: ErrorReason
    accumulated_noise_level: float
    instantaneous_noise_level: float


class StaticIntervalDetectedEvent(BaseEvent):
    """
    Event published when a static interval starts.
    """
    type: Literal[EventType.STATIC_INTERVAL_DETECTED] = EventType.STATIC_INTERVAL_DETECTED
    instantaneous_mean: Vector3 = (0.0, 0.0, 0.0)  # Window mean when the interval started
    instantaneous_standard_deviation: Vector3 = (0.0, 0.0, 0.0)


class DynamicIntervalDetectedEvent(BaseEvent):
    """
    Event published when a dynamic interval starts.

    The accumulated statistics describe the static interval that just closed.
    """
    type: Literal[EventType.DYNAMIC_INTERVAL_DETECTED] = EventType.DYNAMIC_INTERVAL_DETECTED
    instantaneous_mean: Vector3 = (0.0, 0.0, 0.0)
    instantaneous_standard_deviation: Vector3 = (0.0, 0.0, 0.0)
    accumulated_mean: Vector3 = (0.0, 0.0, 0.0)
    accumulated_standard_deviation: Vector3 = (0.0, 0.0, 0.0)


class StaticIntervalSkippedEvent(BaseEvent):
    """
    Event published when a static interval is too short to be measured.
    """
    type: Literal[EventType.STATIC_INTERVAL_SKIPPED] = EventType.STATIC_INTERVAL_SKIPPED


class DynamicIntervalSkippedEvent(BaseEvent):
    """
    Event published when a dynamic interval grows too long to be measured.
    """
    type: Literal[EventType.DYNAMIC_INTERVAL_SKIPPED] = EventType.DYNAMIC_INTERVAL_SKIPPED


class ResetEvent(BaseEvent):
    """
    Event published when a detector or generator has been reset.
    """
    type: Literal[EventType.RESET] = EventType.RESET
