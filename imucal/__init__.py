"""
imucal - inertial/magnetic calibration measurement generation.

This package segments a stream of combined accelerometer, gyroscope and
magnetometer samples into static and dynamic intervals and turns them into
calibration measurements:

- Static interval summaries (mean + standard deviation) for accelerometers
- Dynamic interval sequences for gyroscopes
- Static interval summaries tagged with position/time for magnetometers

All results are delivered as typed events through a single listener.
"""

__version__ = "0.1.0"
