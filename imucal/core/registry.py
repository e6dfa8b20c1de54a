"""
Event registry for imucal.

Maps every event type to the model class published for it, and records which
named components publish and subscribe to each type.
"""

import logging
from collections import defaultdict
from typing import Dict, Optional, Set, Type

from .events import EventType, BaseEvent

logger = logging.getLogger(__name__)


class EventRegistry:
    """
    Known event types and the components exchanging them.

    The bus rejects an event whose type is unknown or whose class is not the
    one registered for its type.
    """

    def __init__(self):
        self._schemas: Dict[EventType, Type[BaseEvent]] = {}
        self._producers: Dict[EventType, Set[str]] = defaultdict(set)
        self._consumers: Dict[EventType, Set[str]] = defaultdict(set)

    @classmethod
    def default(cls) -> "EventRegistry":
        """Create a registry holding every imucal event type."""
        # Imported here because imucal.events depends on this package
        from imucal.events import EVENT_SCHEMAS

        registry = cls()
        for event_type, (schema, description) in EVENT_SCHEMAS.items():
            registry.register_event(event_type, schema, description)
        return registry

    @property
    def event_types(self) -> Set[EventType]:
        return set(self._schemas)

    def register_event(self, event_type: EventType, event_schema: Type[BaseEvent],
                       description: str = "") -> None:
        self._schemas[event_type] = event_schema
        logger.debug("Registered %s as %s: %s", event_type.value, event_schema.__name__, description)

    def register_producer(self, producer_name: str, event_type: EventType) -> None:
        producers = self._producers[event_type]
        if producer_name not in producers:
            producers.add(producer_name)
            logger.debug("%s publishes %s", producer_name, event_type.value)

    def register_consumer(self, consumer_name: str, event_type: EventType) -> None:
        self._consumers[event_type].add(consumer_name)
        logger.debug("%s consumes %s", consumer_name, event_type.value)

    def get_event_schema(self, event_type: EventType) -> Optional[Type[BaseEvent]]:
        return self._schemas.get(event_type)

    def validate_schema(self, event: BaseEvent) -> bool:
        """
        Check an event against the class registered for its type.

        Raises:
            ValueError: If the event type is not registered
            TypeError: If the event is not an instance of the registered class
        """
        schema = self._schemas.get(event.type)
        if schema is None:
            raise ValueError(f"Unknown event type: {event.type.value}")
        if not isinstance(event, schema):
            raise TypeError(f"{type(event).__name__} is not a {schema.__name__} ({event.type.value})")
        return True

    def get_event_flow(self, event_type: EventType) -> Dict[str, Set[str]]:
        """Names of the components publishing and consuming an event type."""
        return {
            'producers': set(self._producers.get(event_type, ())),
            'consumers': set(self._consumers.get(event_type, ())),
        }
