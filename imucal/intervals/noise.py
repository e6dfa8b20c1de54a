"""
Noise estimators for triad samples.

WindowedTriadNoiseEstimator keeps statistics of the most recent samples in a
bounded window. AccumulatedTriadNoiseEstimator keeps statistics of every sample
added since its last reset. Both use the population estimator of the standard
deviation so their noise levels can be compared with each other.
"""

import math
from collections import deque
from typing import Deque, NamedTuple, Tuple

import numpy as np

Vector3 = Tuple[float, float, float]


def _as_vector(values: np.ndarray) -> Vector3:
    return float(values[0]), float(values[1]), float(values[2])


class TriadStatistics(NamedTuple):
    """Per-axis mean and standard deviation of a set of triads."""
    mean: Vector3
    standard_deviation: Vector3

    @property
    def standard_deviation_norm(self) -> float:
        """Norm of the per-axis standard deviations, i.e. the noise level."""
        return math.sqrt(sum(s * s for s in self.standard_deviation))


class WindowedTriadNoiseEstimator:
    """
    Mean and standard deviation of the last `window_size` triads.

    Sums and sums of squares are kept relative to an anchor sample, so a
    constant signal yields an exactly zero deviation. They are rebuilt from the
    buffer every `window_size` pushes to discard accumulated rounding errors.
    """

    def __init__(self, window_size: int):
        self._window_size = window_size
        self._buffer: Deque[np.ndarray] = deque()
        self._anchor = np.zeros(3)
        self._sum = np.zeros(3)
        self._sum_squares = np.zeros(3)
        self._pushes_since_rebuild = 0

    @property
    def window_size(self) -> int:
        return self._window_size

    @window_size.setter
    def window_size(self, value: int) -> None:
        # Statistics of a window of another size are meaningless
        self._window_size = value
        self.reset()

    @property
    def num_samples_in_window(self) -> int:
        return len(self._buffer)

    @property
    def is_filled(self) -> bool:
        """Whether the window holds `window_size` samples."""
        return len(self._buffer) >= self._window_size

    def reset(self) -> None:
        """Remove every sample from the window."""
        self._buffer.clear()
        self._anchor = np.zeros(3)
        self._sum = np.zeros(3)
        self._sum_squares = np.zeros(3)
        self._pushes_since_rebuild = 0

    def push(self, x: float, y: float, z: float) -> TriadStatistics:
        """
        Add a triad to the window, evicting the oldest one if the window is full.

        Args:
            x: x component
            y: y component
            z: z component

        Returns:
            Statistics of the window after the push
        """
        sample = np.array([x, y, z], dtype=float)

        if not self._buffer:
            self._anchor = sample.copy()

        if len(self._buffer) >= self._window_size:
            evicted = self._buffer.popleft() - self._anchor
            self._sum -= evicted
            self._sum_squares -= evicted * evicted

        self._buffer.append(sample)
        shifted = sample - self._anchor
        self._sum += shifted
        self._sum_squares += shifted * shifted

        self._pushes_since_rebuild += 1
        if self._pushes_since_rebuild >= self._window_size:
            self._rebuild()

        return self.statistics

    @property
    def statistics(self) -> TriadStatistics:
        """
        Statistics of the samples currently in the window.

        Must not be queried before the first push.
        """
        n = len(self._buffer)
        shifted_mean = self._sum / n
        variance = np.maximum(self._sum_squares / n - shifted_mean * shifted_mean, 0.0)
        return TriadStatistics(
            mean=_as_vector(self._anchor + shifted_mean),
            standard_deviation=_as_vector(np.sqrt(variance)),
        )

    def _rebuild(self) -> None:
        samples = np.array(self._buffer)
        self._anchor = samples[0].copy()
        shifted = samples - self._anchor
        self._sum = shifted.sum(axis=0)
        self._sum_squares = (shifted * shifted).sum(axis=0)
        self._pushes_since_rebuild = 0


class AccumulatedTriadNoiseEstimator:
    """
    Running mean and standard deviation of triads (Welford's algorithm).
    """

    def __init__(self):
        self._count = 0
        self._mean = np.zeros(3)
        self._m2 = np.zeros(3)

    @property
    def count(self) -> int:
        return self._count

    def reset(self) -> None:
        self._count = 0
        self._mean = np.zeros(3)
        self._m2 = np.zeros(3)

    def add(self, x: float, y: float, z: float) -> None:
        """Add a triad to the accumulated statistics."""
        sample = np.array([x, y, z], dtype=float)
        self._count += 1
        delta = sample - self._mean
        self._mean = self._mean + delta / self._count
        self._m2 = self._m2 + delta * (sample - self._mean)

    @property
    def mean(self) -> Vector3:
        return _as_vector(self._mean)

    @property
    def variance(self) -> Vector3:
        if self._count == 0:
            return 0.0, 0.0, 0.0
        return _as_vector(np.maximum(self._m2 / self._count, 0.0))

    @property
    def standard_deviation(self) -> Vector3:
        return tuple(math.sqrt(v) for v in self.variance)

    @property
    def standard_deviation_norm(self) -> float:
        return math.sqrt(sum(self.variance))

    @property
    def statistics(self) -> TriadStatistics:
        return TriadStatistics(mean=self.mean, standard_deviation=self.standard_deviation)

    def noise_psd(self, time_interval: float) -> float:
        """
        Power spectral density of the accumulated noise level.

        Args:
            time_interval: Time between samples (s)
        """
        return self.standard_deviation_norm ** 2 * time_interval

    def noise_root_psd(self, time_interval: float) -> float:
        """Root power spectral density of the accumulated noise level."""
        return self.standard_deviation_norm * math.sqrt(time_interval)
