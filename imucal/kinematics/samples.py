"""
Input samples consumed by the measurement generators.

Every sample refers to one instant. The combined sample is split into the
per-channel views each generator expects; the views share the triads of the
combined sample since all of them are immutable.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .triads import AccelerationTriad, AngularSpeedTriad, MagneticFluxDensityTriad


class BodyKinematics(BaseModel):
    """Specific force and angular rate sensed by an IMU at one instant."""
    model_config = ConfigDict(frozen=True)

    specific_force: AccelerationTriad = AccelerationTriad()
    angular_rate: AngularSpeedTriad = AngularSpeedTriad()


class TimedBodyKinematics(BaseModel):
    """Body kinematics with the time they were sensed at."""
    model_config = ConfigDict(frozen=True)

    kinematics: BodyKinematics = BodyKinematics()
    timestamp_seconds: float = 0.0


class BodyKinematicsAndMagneticFluxDensity(BaseModel):
    """
    Body kinematics with the magnetic flux density sensed at the same instant.

    The optional position is passed through into magnetometer measurements and
    is never interpreted here.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kinematics: BodyKinematics = BodyKinematics()
    magnetic_flux_density: MagneticFluxDensityTriad = MagneticFluxDensityTriad()
    position: Optional[Any] = None


class TimedBodyKinematicsAndMagneticFluxDensity(BodyKinematicsAndMagneticFluxDensity):
    """
    Combined accelerometer, gyroscope and magnetometer sample.

    This is the sample fed to the combined generator. It is also accepted
    directly by the magnetometer generator, which then tags its measurements
    with the sample timestamp.
    """
    timestamp_seconds: float = 0.0

    @classmethod
    def from_triads(
        cls,
        specific_force: AccelerationTriad,
        angular_rate: AngularSpeedTriad,
        magnetic_flux_density: MagneticFluxDensityTriad,
        timestamp_seconds: float,
        position: Optional[Any] = None,
    ) -> "TimedBodyKinematicsAndMagneticFluxDensity":
        return cls(
            kinematics=BodyKinematics(specific_force=specific_force, angular_rate=angular_rate),
            magnetic_flux_density=magnetic_flux_density,
            timestamp_seconds=timestamp_seconds,
            position=position,
        )

    def as_body_kinematics(self) -> BodyKinematics:
        """View consumed by the accelerometer generator."""
        return self.kinematics

    def as_timed_body_kinematics(self) -> TimedBodyKinematics:
        """View consumed by the gyroscope generator."""
        return TimedBodyKinematics(kinematics=self.kinematics, timestamp_seconds=self.timestamp_seconds)

    def as_body_kinematics_and_magnetic_flux_density(self) -> "TimedBodyKinematicsAndMagneticFluxDensity":
        """View consumed by the magnetometer generator."""
        return self
