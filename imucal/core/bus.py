"""
Event bus for imucal.

This module provides the event bus that delivers events from detectors and
generators to application code. It handles event validation, tracing, and
delivery to subscribers.
"""

import logging
from typing import Dict, List, Optional, Set
from .events import EventType, BaseEvent, EventListener
from .registry import EventRegistry
from .tracing import EventTracer
from .config import EventConfig


class EventBus:
    """
    Central event bus for delivering typed events.

    The event bus is responsible for:
    - Validating events against their registered schemas
    - Tracking event producers and consumers
    - Routing events to subscribers
    - Handling errors during event delivery
    - Providing observability through tracing

    Delivery is synchronous: publish() returns once every subscriber has been
    called. Because publish() accepts a single event, a bus can be passed
    directly as the listener of any generator (listener=bus.publish).
    """

    def __init__(self, registry: Optional[EventRegistry] = None, tracer: Optional[EventTracer] = None):
        """
        Initialize the event bus.

        Args:
            registry: The event registry for validation and tracking.
                Defaults to a registry holding every imucal event schema.
            tracer: Optional event tracer for observability
        """
        self.registry = registry if registry is not None else EventRegistry.default()
        self.tracer = tracer
        self.subscribers: Dict[EventType, List[EventListener]] = {}
        self.wildcard_subscribers: List[EventListener] = []
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: EventConfig, registry: Optional[EventRegistry] = None) -> "EventBus":
        """
        Create an event bus from event settings.

        Args:
            config: Event settings. A tracer is attached when tracing is enabled.
            registry: Optional event registry, defaults to EventRegistry.default()

        Returns:
            A new EventBus
        """
        tracer = EventTracer(max_events=config.max_trace_events) if config.tracing_enabled else None
        return cls(registry, tracer)

    def publish(self, event: BaseEvent, sender: Optional[str] = None) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event: The event to publish
            sender: Name of the component publishing the event, used when the
                event has no producer name
        """
        if not event.producer_name and sender:
            event.producer_name = sender

        # Validate event against registry
        try:
            self.registry.validate_schema(event)
        except (ValueError, TypeError) as e:
            self.logger.error(f"Event validation failed: {e}")
            return

        self.registry.register_producer(event.producer_name, event.type)

        if self.tracer is not None:
            self.tracer.record_event(event)

        event_type = event.type
        specific_subscribers = self.subscribers.get(event_type, [])
        all_subscribers = specific_subscribers + self.wildcard_subscribers

        if not all_subscribers:
            self.logger.debug(f"No subscribers for event type: {event_type.value}")
            return

        for subscriber in all_subscribers:
            self._deliver_event(subscriber, event)

    def _deliver_event(self, handler: EventListener, event: BaseEvent) -> None:
        """
        Deliver an event to a single handler with error handling.

        Args:
            handler: The event handler function
            event: The event to deliver
        """
        try:
            handler(event)
        except Exception as e:
            # Handler errors must not stop delivery to the remaining subscribers
            self.logger.error(
                f"Error delivering event {event.type.value} to {getattr(handler, '__qualname__', handler)}: {e}",
                exc_info=True,
            )

    def subscribe(self, event_type: Optional[EventType], handler: EventListener, consumer_name: str) -> None:
        """
        Subscribe a handler to events of a specific type, or all events if None.

        Args:
            event_type: The event type to subscribe to, or None for all events
            handler: The handler function to call when events arrive
            consumer_name: Name of the subscribing component
        """
        if event_type is None:
            self.wildcard_subscribers.append(handler)
            self.logger.debug(f"{consumer_name} subscribed to all events")
        else:
            if event_type not in self.subscribers:
                self.subscribers[event_type] = []
            self.subscribers[event_type].append(handler)

            self.registry.register_consumer(consumer_name, event_type)
            self.logger.debug(f"{consumer_name} subscribed to {event_type.value}")

    def unsubscribe(self, event_type: Optional[EventType], handler: EventListener) -> None:
        """
        Unsubscribe a handler from events of a specific type, or all events if None.

        Args:
            event_type: The event type to unsubscribe from, or None for all events
            handler: The handler function to unsubscribe
        """
        if event_type is None:
            if handler in self.wildcard_subscribers:
                self.wildcard_subscribers.remove(handler)
                self.logger.debug("Handler unsubscribed from all events")
        elif event_type in self.subscribers:
            if handler in self.subscribers[event_type]:
                self.subscribers[event_type].remove(handler)
                if not self.subscribers[event_type]:
                    del self.subscribers[event_type]
                self.logger.debug(f"Handler unsubscribed from {event_type.value}")

    def get_subscribers(self, event_type: EventType) -> Set[EventListener]:
        """
        Get all subscribers for an event type.

        Args:
            event_type: The event type to get subscribers for

        Returns:
            Set of event handlers subscribed to the event type
        """
        specific = set(self.subscribers.get(event_type, []))
        wildcards = set(self.wildcard_subscribers)
        return specific.union(wildcards)
