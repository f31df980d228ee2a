"""
Read accelerometer, gyroscope, and magnetometer vectors from Linux IIO sysfs.

Each sensor is an IIO channel group (in_accel, in_anglvel, in_magn) with
x/y/z raw values, a shared scale and optional per-axis offsets:
value = (raw + offset) * scale. Output units: m/s^2, deg/s, microtesla.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

IIO_BASE = Path("/sys/bus/iio/devices")

ACCEL = "in_accel"
GYRO = "in_anglvel"
MAGNETOMETER = "in_magn"

_AXES = ("x", "y", "z")


def _read_one(path: Path, default: float = 0.0) -> float:
    """Read a single value from sysfs; return default on error."""
    try:
        return float(path.read_text().strip())
    except (OSError, ValueError):
        return default


def has_channels(device_path: Path, prefix: str) -> bool:
    """Return True if device has x,y,z raw and scale for the given prefix."""
    for axis in _AXES:
        if not (device_path / f"{prefix}_{axis}_raw").exists():
            return False
    return (device_path / f"{prefix}_scale").exists()


def discover_iio_devices(base: Path = IIO_BASE) -> List[Path]:
    """Return IIO device sysfs paths (e.g. .../iio:device0), sorted by name."""
    if not base.exists():
        return []
    return sorted(
        (p for p in base.iterdir() if p.is_dir() and p.name.startswith("iio:device")),
        key=lambda p: p.name,
    )


def find_device(
    prefix: str,
    explicit_path: Optional[str] = None,
    preferred: Optional[Path] = None,
    base: Path = IIO_BASE,
) -> Optional[Path]:
    """
    Return the sysfs path of a device exposing the prefix channels.

    An explicit path wins if valid; then the preferred device (e.g. a combo
    IMU that already provides the accelerometer); then the first match.
    """
    if explicit_path:
        p = Path(explicit_path)
        if p.exists() and has_channels(p, prefix):
            return p
        logger.warning("%s path %s missing or invalid", prefix, explicit_path)
    if preferred and has_channels(preferred, prefix):
        return preferred
    for dev in discover_iio_devices(base):
        if has_channels(dev, prefix):
            return dev
    return None


class IIOChannel:
    """One x/y/z channel group of an IIO device."""

    def __init__(self, device_path: Path, prefix: str) -> None:
        self.device_path = device_path
        self.prefix = prefix
        self.scale = _read_one(device_path / f"{prefix}_scale", 1.0)
        self.offset = [
            _read_one(device_path / f"{prefix}_{axis}_offset", 0.0) for axis in _AXES
        ]
        logger.debug("%s scale=%s offset=%s", prefix, self.scale, self.offset)

    def read(self) -> Optional[Tuple[float, float, float]]:
        values = []
        for i, axis in enumerate(_AXES):
            raw_path = self.device_path / f"{self.prefix}_{axis}_raw"
            try:
                raw = float(raw_path.read_text().strip())
            except (OSError, ValueError):
                return None
            values.append((raw + self.offset[i]) * self.scale)
        return (values[0], values[1], values[2])


class IIOReader:
    """
    Read the IMU vectors a LinuxOrientationSource needs.

    IIO reports angular velocity in rad/s; it is converted to deg/s.
    """

    def __init__(
        self,
        accel_path: Path,
        gyro_path: Path,
        magnetometer_path: Optional[Path] = None,
    ) -> None:
        self._accel = IIOChannel(accel_path, ACCEL)
        self._gyro = IIOChannel(gyro_path, GYRO)
        self._magnetometer = (
            IIOChannel(magnetometer_path, MAGNETOMETER) if magnetometer_path else None
        )

    @property
    def has_magnetometer(self) -> bool:
        return self._magnetometer is not None

    def read_accel(self) -> Optional[Tuple[float, float, float]]:
        return self._accel.read()

    def read_gyro(self) -> Optional[Tuple[float, float, float]]:
        rad = self._gyro.read()
        if rad is None:
            return None
        return (math.degrees(rad[0]), math.degrees(rad[1]), math.degrees(rad[2]))

    def read_magnetometer(self) -> Optional[Tuple[float, float, float]]:
        """Magnetometer in microtesla; IIO reports gauss (1 G = 100 uT)."""
        if self._magnetometer is None:
            return None
        gauss = self._magnetometer.read()
        if gauss is None:
            return None
        return (gauss[0] * 100.0, gauss[1] * 100.0, gauss[2] * 100.0)
