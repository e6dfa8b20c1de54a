"""
Unit tests for the accelerometer, gyroscope and magnetometer measurement generators.

Each generator is fed synthetic samples holding still, moving along x and
holding still again, and the published measurements are checked.
"""

import unittest
from unittest.mock import MagicMock

import numpy as np

from imucal.core.config import MeasurementsGeneratorConfig
from imucal.core.errors import LockedError
from imucal.core.events import EventType
from imucal.events import ErrorReason
from imucal.generators import (
    AccelerometerMeasurementsGenerator,
    GeneratorParametersMixin,
    GyroscopeMeasurementsGenerator,
    MagnetometerMeasurementsGenerator,
)
from imucal.intervals import DetectorStatus
from imucal.kinematics import (
    AccelerationTriad,
    DynamicIntervalSequence,
    MagneticFluxDensityMeasurement,
    SpecificForceMeasurement,
)

from synthetic import (
    ANGULAR_RATE,
    FLUX,
    GRAVITY,
    KICKED,
    TIME_INTERVAL,
    combined_samples,
    event_types,
    events_of,
    specific_forces,
)


def make_config(**overrides):
    values = dict(window_size=11, initial_static_samples=50, min_static_samples=20, max_dynamic_samples=100)
    values.update(overrides)
    return MeasurementsGeneratorConfig(**values)


def round_trip_forces(static_before=70, dynamic=20, static_after=20):
    return specific_forces([(GRAVITY, static_before), (KICKED, dynamic), (GRAVITY, static_after)])


class TestAccelerometerMeasurementsGenerator(unittest.TestCase):
    """Test cases for the AccelerometerMeasurementsGenerator class."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.listener = MagicMock()
        self.generator = AccelerometerMeasurementsGenerator(config=make_config(), listener=self.listener)

    def _feed(self, forces):
        return [self.generator.process(s.as_body_kinematics()) for s in combined_samples(forces)]

    def test_round_trip_measurement(self):
        """Test a static interval followed by motion yields one measurement."""
        results = self._feed(round_trip_forces())

        self.assertTrue(all(results))
        self.assertEqual(event_types(self.listener), [
            EventType.INITIALIZATION_STARTED,
            EventType.INITIALIZATION_COMPLETED,
            EventType.STATIC_INTERVAL_DETECTED,
            EventType.ACCELEROMETER_MEASUREMENT,
            EventType.DYNAMIC_INTERVAL_DETECTED,
            EventType.STATIC_INTERVAL_DETECTED,
        ])

        measurement = events_of(self.listener, EventType.ACCELEROMETER_MEASUREMENT)[0].measurement
        self.assertIsInstance(measurement, SpecificForceMeasurement)
        self.assertEqual(measurement.mean, AccelerationTriad.from_array(GRAVITY))
        self.assertEqual(measurement.standard_deviation, AccelerationTriad())
        self.assertEqual(measurement.sample_count, 20)

    def test_events_are_published_under_generator_name(self):
        """Test detector events are re-published with the generator as producer."""
        self._feed(round_trip_forces())
        producers = {c.args[0].producer_name for c in self.listener.call_args_list}
        self.assertEqual(producers, {self.generator.name})

    def test_counters(self):
        """Test static and dynamic samples are counted."""
        self._feed(round_trip_forces())
        self.assertEqual(self.generator.processed_static_samples, 40)
        self.assertEqual(self.generator.processed_dynamic_samples, 20)

    def test_counters_never_decrease(self):
        """Test counters only grow while processing a noisy stream."""
        self.generator.threshold_factor = 0.8
        forces = specific_forces([(GRAVITY, 400)], noise_std=0.01, rng=np.random.default_rng(5))
        previous = (0, 0)
        for sample in combined_samples(forces):
            self.generator.process(sample.as_body_kinematics())
            current = (self.generator.processed_static_samples, self.generator.processed_dynamic_samples)
            self.assertGreaterEqual(current[0], previous[0])
            self.assertGreaterEqual(current[1], previous[1])
            previous = current
        self.assertGreater(previous[1], 0)

    def test_short_static_interval_is_skipped(self):
        """Test a static interval shorter than min_static_samples is not measured."""
        self._feed(round_trip_forces(static_before=60))

        self.assertIn(EventType.STATIC_INTERVAL_SKIPPED, event_types(self.listener))
        self.assertNotIn(EventType.ACCELEROMETER_MEASUREMENT, event_types(self.listener))

    def test_static_interval_exactly_min_samples_is_measured(self):
        """Test a static interval of exactly min_static_samples samples is measured."""
        self.generator.min_static_samples = 20
        self._feed(round_trip_forces(static_before=70))
        self.assertNotIn(EventType.STATIC_INTERVAL_SKIPPED, event_types(self.listener))
        self.assertFalse(self.generator.is_static_interval_skipped)

    def test_failure_is_reported(self):
        """Test initialization failures are reported and later samples rejected."""
        self.generator.base_noise_level_absolute_threshold = 1e-6
        results = self._feed(specific_forces([(GRAVITY, 50)], noise_std=0.01))

        self.assertFalse(results[-1])
        self.assertEqual(self.generator.status, DetectorStatus.FAILED)
        error = events_of(self.listener, EventType.DETECTION_ERROR)[0]
        self.assertEqual(error.reason, ErrorReason.OVERALL_EXCESSIVE_MOVEMENT_DETECTED)
        self.assertFalse(self._feed(specific_forces([(GRAVITY, 1)]))[0])

    def test_reset(self):
        """Test reset clears counters and publishes one reset event."""
        self._feed(round_trip_forces())
        self.listener.reset_mock()

        self.generator.reset()

        self.assertEqual(self.generator.status, DetectorStatus.INITIALIZING)
        self.assertEqual(self.generator.processed_static_samples, 0)
        self.assertEqual(self.generator.processed_dynamic_samples, 0)
        self.assertEqual(self.generator.accelerometer_base_noise_level, 0.0)
        self.assertEqual(event_types(self.listener), [EventType.RESET])

    def test_configuration_is_shared_with_detector(self):
        """Test setters update the detector through the shared config."""
        self.generator.window_size = 21
        self.assertEqual(self.generator.detector.window_size, 21)
        self.assertEqual(self.generator.detector.window.window_size, 21)
        self.assertIs(self.generator.detector.config, self.generator.config)
        self.assertIs(self.generator.detector.owner, self.generator)

    def test_detector_setters_go_through_generator(self):
        """Test a change made on the detector is applied by the generator."""
        self.generator.detector.window_size = 31
        self.assertEqual(self.generator.window_size, 31)
        self.assertEqual(self.generator.detector.window.window_size, 31)

        config = make_config(window_size=15)
        self.generator.detector.configure(config)
        self.assertIs(self.generator.config, config)
        self.assertIs(self.generator.detector.config, config)
        self.assertEqual(self.generator.detector.window.window_size, 15)

    def test_detector_setters_are_locked_while_generator_runs(self):
        """Test the generator listener cannot change parameters through the detector."""
        generator = self.generator

        def reconfigure(event):
            generator.detector.threshold_factor = 9.0

        generator.listener = reconfigure
        with self.assertRaises(LockedError):
            generator.process(combined_samples(specific_forces([(GRAVITY, 1)]))[0].as_body_kinematics())
        self.assertEqual(generator.threshold_factor, 2.0)

    def test_parameter_hook_is_required(self):
        """Test a parameter holder without _update_config cannot be created."""
        class IncompleteParameters(GeneratorParametersMixin):
            pass

        with self.assertRaises(TypeError):
            IncompleteParameters()

    def test_reentrant_calls_are_locked(self):
        """Test the listener cannot call back into the generator."""
        generator = self.generator

        def reenter(event):
            generator.reset()

        generator.listener = reenter
        with self.assertRaises(LockedError):
            generator.process(combined_samples(specific_forces([(GRAVITY, 1)]))[0].as_body_kinematics())
        self.assertFalse(generator.is_running)


class TestGyroscopeMeasurementsGenerator(unittest.TestCase):
    """Test cases for the GyroscopeMeasurementsGenerator class."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.listener = MagicMock()
        self.generator = GyroscopeMeasurementsGenerator(config=make_config(), listener=self.listener)

    def _feed(self, forces):
        return [self.generator.process(s.as_timed_body_kinematics()) for s in combined_samples(forces)]

    def test_round_trip_sequence(self):
        """Test a dynamic interval yields one sequence holding every moving sample."""
        self._feed(round_trip_forces())

        events = events_of(self.listener, EventType.GYROSCOPE_MEASUREMENT)
        self.assertEqual(len(events), 1)
        sequence = events[0].measurement
        self.assertIsInstance(sequence, DynamicIntervalSequence)
        self.assertEqual(len(sequence), 20)
        self.assertEqual(sequence.before_mean_specific_force, AccelerationTriad.from_array(GRAVITY))
        self.assertAlmostEqual(sequence.items[0].timestamp_seconds, 70 * TIME_INTERVAL)
        self.assertEqual(sequence.items[0].kinematics.specific_force, AccelerationTriad.from_array(KICKED))
        for delta in sequence.time_deltas():
            self.assertAlmostEqual(delta, TIME_INTERVAL)

    def test_initial_angular_rate(self):
        """Test the angular rate observed during initialization is kept."""
        self._feed(specific_forces([(GRAVITY, 50)]))

        np.testing.assert_allclose(self.generator.initial_avg_angular_speed_triad.as_array(), ANGULAR_RATE)
        self.assertEqual(self.generator.initial_angular_speed_triad_standard_deviation.norm, 0.0)
        self.assertEqual(self.generator.gyroscope_base_noise_level, 0.0)

    def test_dynamic_interval_at_max_samples_is_measured(self):
        """Test a dynamic interval of exactly max_dynamic_samples samples is measured."""
        self.generator.max_dynamic_samples = 30
        self._feed(round_trip_forces(dynamic=30))

        self.assertNotIn(EventType.DYNAMIC_INTERVAL_SKIPPED, event_types(self.listener))
        sequence = events_of(self.listener, EventType.GYROSCOPE_MEASUREMENT)[0].measurement
        self.assertEqual(len(sequence), 30)

    def test_dynamic_interval_over_max_samples_is_skipped(self):
        """Test a dynamic interval one sample over max_dynamic_samples is skipped."""
        self.generator.max_dynamic_samples = 30
        self._feed(round_trip_forces(dynamic=31))

        self.assertEqual(event_types(self.listener).count(EventType.DYNAMIC_INTERVAL_SKIPPED), 1)
        self.assertNotIn(EventType.GYROSCOPE_MEASUREMENT, event_types(self.listener))
        # Skip flag clears once the device is at rest again
        self.assertFalse(self.generator.is_dynamic_interval_skipped)

    def test_reset_clears_initial_statistics(self):
        """Test reset discards the initialization statistics."""
        self._feed(specific_forces([(GRAVITY, 50)]))
        self.generator.reset()
        self.assertEqual(self.generator.initial_avg_angular_speed_triad.norm, 0.0)


class TestMagnetometerMeasurementsGenerator(unittest.TestCase):
    """Test cases for the MagnetometerMeasurementsGenerator class."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.listener = MagicMock()
        self.generator = MagnetometerMeasurementsGenerator(config=make_config(), listener=self.listener)

    def test_round_trip_measurement(self):
        """Test a static interval yields a flux measurement tagged with time and position."""
        position = {"latitude": 41.38, "longitude": 2.17, "height": 12.0}
        samples = combined_samples(round_trip_forces(), position=position)
        for sample in samples:
            self.generator.process(sample.as_body_kinematics_and_magnetic_flux_density())

        events = events_of(self.listener, EventType.MAGNETOMETER_MEASUREMENT)
        self.assertEqual(len(events), 1)
        measurement = events[0].measurement
        self.assertIsInstance(measurement, MagneticFluxDensityMeasurement)
        np.testing.assert_allclose(measurement.mean.as_array(), FLUX)
        self.assertEqual(measurement.standard_deviation.norm, 0.0)
        self.assertEqual(measurement.sample_count, 20)
        self.assertEqual(measurement.position, position)
        # Tagged with the sample that started the motion
        self.assertAlmostEqual(measurement.timestamp_seconds, 70 * TIME_INTERVAL)

    def test_magnetometer_base_noise_level(self):
        """Test the flux noise during initialization is measured."""
        rng = np.random.default_rng(9)
        samples = combined_samples(specific_forces([(GRAVITY, 50)]))
        flux_noise = rng.normal(0.0, 1e-7, size=(50, 3))
        noisy = [
            s.model_copy(update={"magnetic_flux_density": s.magnetic_flux_density.from_array(
                np.asarray(FLUX) + noise)})
            for s, noise in zip(samples, flux_noise)
        ]
        for sample in noisy:
            self.generator.process(sample)

        expected = np.linalg.norm(np.std(np.asarray(FLUX) + flux_noise, axis=0))
        self.assertAlmostEqual(self.generator.magnetometer_base_noise_level, expected, places=15)


if __name__ == '__main__':
    unittest.main()
