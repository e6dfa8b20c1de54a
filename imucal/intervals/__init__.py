"""
Static/dynamic interval detection.
"""

from .noise import TriadStatistics, WindowedTriadNoiseEstimator, AccumulatedTriadNoiseEstimator
from .detector import TriadStaticIntervalDetector, DetectorStatus
from imucal.events.intervals import ErrorReason

__all__ = [
    'TriadStatistics',
    'WindowedTriadNoiseEstimator',
    'AccumulatedTriadNoiseEstimator',
    'TriadStaticIntervalDetector',
    'DetectorStatus',
    'ErrorReason',
]
