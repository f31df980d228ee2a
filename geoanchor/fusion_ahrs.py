"""
AHRS fusion using imufusion: gyro + accelerometer (+ magnetometer) -> yaw.

Yaw follows the NWU convention: counter-clockwise seen from above, the same
rotation sense as a device orientation alpha angle.
"""

import logging
from typing import Any, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

STANDARD_GRAVITY = 9.80665

_imufusion: Any = None
try:
    import imufusion

    _imufusion = imufusion
except ImportError:
    pass

Vector = Tuple[float, float, float]


class FusionAhrs:
    """
    Wrapper around imufusion Ahrs.

    Feed accelerometer (m/s^2), gyroscope (deg/s) and optionally magnetometer
    (uT) at each time step; read yaw/pitch/roll in degrees.
    """

    def __init__(self, gain: float = 0.5) -> None:
        if _imufusion is None:
            raise RuntimeError("imufusion not installed; pip install imufusion")
        self._ahrs = _imufusion.Ahrs()
        self._ahrs.settings = _imufusion.Settings(
            _imufusion.CONVENTION_NWU,
            gain,
            2000,  # gyroscope range, deg/s
            10,  # acceleration rejection, deg
            10,  # magnetic rejection, deg
            5 * 100,  # recovery trigger period, samples
        )
        self._yaw: float = 0.0
        self._pitch: float = 0.0
        self._roll: float = 0.0
        self._initialized = False

    def update(
        self,
        accel: Vector,
        gyro: Vector,
        sample_period_s: float,
        magnetometer: Optional[Vector] = None,
    ) -> None:
        """
        Update AHRS with one IMU sample.

        Without a magnetometer the yaw is relative to the start orientation.
        """
        gyroscope = np.array(gyro, dtype=float)
        accelerometer = np.array(accel, dtype=float) / STANDARD_GRAVITY
        if magnetometer is not None:
            self._ahrs.update(
                gyroscope,
                accelerometer,
                np.array(magnetometer, dtype=float),
                sample_period_s,
            )
        else:
            self._ahrs.update_no_magnetometer(gyroscope, accelerometer, sample_period_s)
        euler = self._ahrs.quaternion.to_euler()
        self._roll, self._pitch, self._yaw = (
            float(euler[0]),
            float(euler[1]),
            float(euler[2]),
        )
        self._initialized = True

    @property
    def yaw_deg(self) -> float:
        """Yaw in degrees [0, 360)."""
        return self._yaw % 360.0

    @property
    def pitch_deg(self) -> float:
        return self._pitch

    @property
    def roll_deg(self) -> float:
        return self._roll

    @property
    def initialized(self) -> bool:
        """True after at least one update."""
        return self._initialized
