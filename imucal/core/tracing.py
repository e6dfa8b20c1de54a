"""
Event tracing for imucal.

Keeps the most recently published events, so a calibration session can be
inspected after the fact: which intervals were detected on which channel and
which measurements were produced.
"""

import time
import logging
from collections import deque
from typing import Any, Deque, Dict, List, NamedTuple, Optional

from .events import BaseEvent, Channel, EventType

logger = logging.getLogger(__name__)


class TracedEvent(NamedTuple):
    """One published event as seen by the tracer."""
    recorded_at: float
    trace_id: Optional[str]
    type: EventType
    producer: str
    channel: Optional[Channel]
    data: Dict[str, Any]


class EventTracer:
    """
    Bounded buffer of published events.

    Once `max_events` events are held, recording a new one drops the oldest.
    """

    def __init__(self, max_events: int = 1000):
        self.max_events = max_events
        self._events: Deque[TracedEvent] = deque(maxlen=max_events)

    def __len__(self) -> int:
        return len(self._events)

    def record_event(self, event: BaseEvent) -> None:
        self._events.append(TracedEvent(
            recorded_at=time.time(),
            trace_id=event.trace_id,
            type=event.type,
            producer=event.producer_name,
            channel=event.channel,
            data=event.model_dump(exclude={'trace_id', 'type', 'producer_name', 'channel'}),
        ))
        logger.debug("Traced %s from %s", event.type.value, event.producer_name)

    def find(self,
             event_type: Optional[EventType] = None,
             channel: Optional[Channel] = None) -> List[TracedEvent]:
        """
        Get the traced events, oldest first.

        Args:
            event_type: Only events of this type, if given
            channel: Only events relayed from this channel, if given

        Returns:
            Matching events
        """
        return [e for e in self._events
                if (event_type is None or e.type == event_type)
                and (channel is None or e.channel == channel)]

    def clear(self) -> None:
        self._events.clear()
