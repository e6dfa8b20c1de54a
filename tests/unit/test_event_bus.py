"""
Unit tests for the event bus, registry and tracer.
"""

import unittest
from unittest.mock import MagicMock

from imucal.core.bus import EventBus
from imucal.core.config import EventConfig
from imucal.core.events import BaseEvent, Channel, EventType
from imucal.core.registry import EventRegistry
from imucal.core.tracing import EventTracer
from imucal.events import (
    EVENT_SCHEMAS,
    InitializationCompletedEvent,
    ResetEvent,
    StaticIntervalDetectedEvent,
)


class TestEventBus(unittest.TestCase):
    """Test cases for the EventBus class."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.tracer = EventTracer(max_events=3)
        self.bus = EventBus(tracer=self.tracer)

    def test_delivers_to_type_subscribers(self):
        """Test events reach handlers subscribed to their type only."""
        reset_handler = MagicMock()
        static_handler = MagicMock()
        self.bus.subscribe(EventType.RESET, reset_handler, "reset-consumer")
        self.bus.subscribe(EventType.STATIC_INTERVAL_DETECTED, static_handler, "static-consumer")

        event = ResetEvent(producer_name="detector")
        self.bus.publish(event)

        reset_handler.assert_called_once_with(event)
        static_handler.assert_not_called()

    def test_wildcard_subscribers(self):
        """Test a handler subscribed to None receives every event."""
        handler = MagicMock()
        self.bus.subscribe(None, handler, "everything")

        self.bus.publish(ResetEvent(producer_name="detector"))
        self.bus.publish(InitializationCompletedEvent(producer_name="detector", base_noise_level=0.01))

        self.assertEqual(handler.call_count, 2)
        self.assertIn(handler, self.bus.get_subscribers(EventType.MAGNETOMETER_MEASUREMENT))

    def test_invalid_event_is_dropped(self):
        """Test an event not matching its schema is logged and not delivered."""
        handler = MagicMock()
        self.bus.subscribe(EventType.RESET, handler, "consumer")

        with self.assertLogs("imucal.core.bus", level="ERROR"):
            self.bus.publish(BaseEvent(type=EventType.RESET, producer_name="impostor"))

        handler.assert_not_called()
        self.assertEqual(len(self.tracer), 0)

    def test_unknown_event_type_is_dropped(self):
        """Test a registry without the event type rejects it."""
        bus = EventBus(registry=EventRegistry())
        handler = MagicMock()
        bus.subscribe(EventType.RESET, handler, "consumer")

        with self.assertLogs("imucal.core.bus", level="ERROR"):
            bus.publish(ResetEvent(producer_name="detector"))
        handler.assert_not_called()

    def test_handler_error_does_not_stop_delivery(self):
        """Test a failing handler is logged and the others still run."""
        failing = MagicMock(side_effect=RuntimeError("boom"))
        working = MagicMock()
        self.bus.subscribe(EventType.RESET, failing, "failing")
        self.bus.subscribe(EventType.RESET, working, "working")

        with self.assertLogs("imucal.core.bus", level="ERROR") as logs:
            self.bus.publish(ResetEvent(producer_name="detector"))

        working.assert_called_once()
        self.assertIn("boom", logs.output[0])

    def test_unsubscribe(self):
        """Test unsubscribed handlers no longer receive events."""
        handler = MagicMock()
        self.bus.subscribe(EventType.RESET, handler, "consumer")
        self.bus.subscribe(None, handler, "consumer")
        self.bus.unsubscribe(EventType.RESET, handler)
        self.bus.unsubscribe(None, handler)

        self.bus.publish(ResetEvent(producer_name="detector"))

        handler.assert_not_called()
        self.assertEqual(self.bus.get_subscribers(EventType.RESET), set())

    def test_sender_fills_missing_producer(self):
        """Test the sender name is used when the event has no producer."""
        self.bus.publish(ResetEvent(), sender="generator")
        flow = self.bus.registry.get_event_flow(EventType.RESET)
        self.assertEqual(flow['producers'], {"generator"})

    def test_tracing(self):
        """Test published events are traced in a bounded buffer."""
        for i in range(4):
            channel = Channel.MAGNETOMETER if i % 2 else Channel.ACCELEROMETER
            self.bus.publish(StaticIntervalDetectedEvent(producer_name=f"detector-{i}", channel=channel))

        self.assertEqual(len(self.tracer), 3)
        self.assertEqual([e.producer for e in self.tracer.find()], ["detector-1", "detector-2", "detector-3"])
        self.assertEqual(len(self.tracer.find(EventType.STATIC_INTERVAL_DETECTED)), 3)
        self.assertEqual(self.tracer.find(EventType.RESET), [])

        magnetometer = self.tracer.find(channel=Channel.MAGNETOMETER)
        self.assertEqual([e.producer for e in magnetometer], ["detector-1", "detector-3"])
        self.assertEqual(magnetometer[0].type, EventType.STATIC_INTERVAL_DETECTED)
        self.assertNotIn('producer_name', magnetometer[0].data)

        self.tracer.clear()
        self.assertEqual(self.tracer.find(), [])

    def test_empty_tracer_records_first_event(self):
        """Test the first event is traced even though the buffer starts empty."""
        self.bus.publish(ResetEvent(producer_name="detector"))
        self.assertEqual(len(self.tracer), 1)

    def test_from_config(self):
        """Test the tracer follows the event settings."""
        bus = EventBus.from_config(EventConfig(max_trace_events=5))
        self.assertEqual(bus.tracer.max_events, 5)
        self.assertIn(EventType.RESET, bus.registry.event_types)

        bus = EventBus.from_config(EventConfig(tracing_enabled=False))
        self.assertIsNone(bus.tracer)
        bus.publish(ResetEvent(producer_name="detector"))


class TestEventRegistry(unittest.TestCase):
    """Test cases for the EventRegistry class."""

    def test_default_registry_knows_every_event(self):
        """Test the default registry holds every event type."""
        registry = EventRegistry.default()
        self.assertEqual(registry.event_types, set(EventType))
        self.assertEqual(set(EVENT_SCHEMAS), set(EventType))
        self.assertIs(registry.get_event_schema(EventType.RESET), ResetEvent)

    def test_validate_schema(self):
        """Test schema validation errors."""
        registry = EventRegistry.default()
        self.assertTrue(registry.validate_schema(ResetEvent()))
        with self.assertRaises(TypeError):
            registry.validate_schema(BaseEvent(type=EventType.RESET))
        with self.assertRaises(ValueError):
            EventRegistry().validate_schema(ResetEvent())

    def test_event_flow(self):
        """Test producers and consumers are tracked per event type."""
        registry = EventRegistry.default()
        registry.register_producer("imu", EventType.GYROSCOPE_MEASUREMENT)
        registry.register_producer("imu", EventType.GYROSCOPE_MEASUREMENT)
        registry.register_consumer("calibrator", EventType.GYROSCOPE_MEASUREMENT)

        self.assertEqual(registry.get_event_flow(EventType.GYROSCOPE_MEASUREMENT),
                         {'producers': {"imu"}, 'consumers': {"calibrator"}})
        self.assertEqual(registry.get_event_flow(EventType.RESET), {'producers': set(), 'consumers': set()})
        self.assertIsNone(EventRegistry().get_event_schema(EventType.RESET))


if __name__ == '__main__':
    unittest.main()
