"""
Unit tests for the windowed and accumulated noise estimators.

Statistics are checked against numpy's population mean and standard deviation.
"""

import unittest

import numpy as np

from imucal.intervals import AccumulatedTriadNoiseEstimator, WindowedTriadNoiseEstimator


class TestWindowedTriadNoiseEstimator(unittest.TestCase):
    """Test cases for the windowed estimator."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.rng = np.random.default_rng(42)
        self.estimator = WindowedTriadNoiseEstimator(window_size=5)

    def test_statistics_before_window_is_filled(self):
        """Test statistics cover the samples pushed so far."""
        samples = self.rng.normal(0.0, 1.0, size=(3, 3))
        for sample in samples:
            stats = self.estimator.push(*sample)

        self.assertFalse(self.estimator.is_filled)
        self.assertEqual(self.estimator.num_samples_in_window, 3)
        np.testing.assert_allclose(stats.mean, samples.mean(axis=0))
        np.testing.assert_allclose(stats.standard_deviation, samples.std(axis=0))

    def test_oldest_samples_are_evicted(self):
        """Test only the last window_size samples are used."""
        samples = self.rng.normal(9.81, 0.5, size=(23, 3))
        for sample in samples:
            stats = self.estimator.push(*sample)

        self.assertTrue(self.estimator.is_filled)
        self.assertEqual(self.estimator.num_samples_in_window, 5)
        np.testing.assert_allclose(stats.mean, samples[-5:].mean(axis=0))
        np.testing.assert_allclose(stats.standard_deviation, samples[-5:].std(axis=0), atol=1e-12)
        self.assertAlmostEqual(stats.standard_deviation_norm,
                               np.linalg.norm(samples[-5:].std(axis=0)))

    def test_long_stream_matches_reference(self):
        """Test no error builds up over a long stream with a large offset."""
        estimator = WindowedTriadNoiseEstimator(window_size=11)
        samples = 1000.0 + self.rng.normal(0.0, 1e-3, size=(5000, 3))
        for sample in samples:
            stats = estimator.push(*sample)

        np.testing.assert_allclose(stats.standard_deviation, samples[-11:].std(axis=0), rtol=1e-6)

    def test_constant_signal_has_zero_deviation(self):
        """Test a constant signal yields exactly zero standard deviation."""
        for _ in range(20):
            stats = self.estimator.push(0.1, -0.2, -9.81)

        self.assertEqual(stats.standard_deviation, (0.0, 0.0, 0.0))
        self.assertEqual(stats.standard_deviation_norm, 0.0)
        self.assertEqual(stats.mean, (0.1, -0.2, -9.81))

    def test_constant_signal_after_step_has_zero_deviation(self):
        """Test the deviation returns to zero once a step leaves the window."""
        for _ in range(7):
            self.estimator.push(0.0, 0.0, -9.81)
        for _ in range(13):
            stats = self.estimator.push(3.0, 0.0, -9.81)

        self.assertEqual(stats.standard_deviation_norm, 0.0)

    def test_reset_and_resize(self):
        """Test reset empties the window and resizing resets it."""
        for _ in range(5):
            self.estimator.push(1.0, 2.0, 3.0)
        self.estimator.reset()
        self.assertEqual(self.estimator.num_samples_in_window, 0)

        for _ in range(5):
            self.estimator.push(1.0, 2.0, 3.0)
        self.estimator.window_size = 7
        self.assertEqual(self.estimator.window_size, 7)
        self.assertEqual(self.estimator.num_samples_in_window, 0)


class TestAccumulatedTriadNoiseEstimator(unittest.TestCase):
    """Test cases for the accumulated estimator."""

    def test_matches_reference(self):
        """Test mean, variance and noise levels against numpy."""
        rng = np.random.default_rng(7)
        samples = rng.normal([0.0, 0.0, -9.81], [0.01, 0.02, 0.03], size=(500, 3))
        estimator = AccumulatedTriadNoiseEstimator()
        for sample in samples:
            estimator.add(*sample)

        self.assertEqual(estimator.count, 500)
        np.testing.assert_allclose(estimator.mean, samples.mean(axis=0))
        np.testing.assert_allclose(estimator.variance, samples.var(axis=0))
        np.testing.assert_allclose(estimator.standard_deviation, samples.std(axis=0))

        norm = np.linalg.norm(samples.std(axis=0))
        self.assertAlmostEqual(estimator.standard_deviation_norm, norm)
        self.assertAlmostEqual(estimator.noise_psd(0.02), norm ** 2 * 0.02)
        self.assertAlmostEqual(estimator.noise_root_psd(0.02), norm * np.sqrt(0.02))

    def test_empty_and_reset(self):
        """Test an empty estimator reports zero deviation."""
        estimator = AccumulatedTriadNoiseEstimator()
        self.assertEqual(estimator.standard_deviation_norm, 0.0)

        estimator.add(1.0, 2.0, 3.0)
        estimator.add(3.0, 2.0, 1.0)
        self.assertEqual(estimator.mean, (2.0, 2.0, 2.0))

        estimator.reset()
        self.assertEqual(estimator.count, 0)
        self.assertEqual(estimator.variance, (0.0, 0.0, 0.0))


if __name__ == '__main__':
    unittest.main()
