"""
Linux data sources: IIO sysfs + AHRS (orientation) and gpsd (geolocation).
"""

import logging
from typing import Optional, Tuple

from geoanchor.fusion_ahrs import FusionAhrs
from geoanchor.iio_reader import ACCEL, GYRO, MAGNETOMETER, IIOReader, find_device
from geoanchor.orientation import HeadingSample
from geoanchor.sources.base import OrientationSource
from geoanchor.sources.gpsd import GpsdGeolocationSource, connect_gpsd

logger = logging.getLogger(__name__)


class LinuxOrientationSource(OrientationSource):
    """
    Orientation from IIO sensors fused by imufusion.

    The relative channel carries the gyro/accel-only yaw (zero at start-up);
    with a magnetometer the absolute channel carries the magnetometer-aided
    yaw. Both are published as alpha angles. Nothing is emitted until
    warmup_samples updates have settled the filters.
    """

    def __init__(
        self,
        reader: IIOReader,
        sample_period_s: float,
        gain: float = 0.5,
        warmup_samples: int = 100,
    ) -> None:
        super().__init__()
        self._reader = reader
        self._dt = sample_period_s
        self._warmup = max(0, warmup_samples)
        self._updates = 0
        self._relative_ahrs = FusionAhrs(gain=gain)
        self._absolute_ahrs = FusionAhrs(gain=gain) if reader.has_magnetometer else None

    def poll(self, now: Optional[float] = None) -> None:
        """Read one IMU sample and publish headings once warmed up."""
        accel = self._reader.read_accel()
        gyro = self._reader.read_gyro()
        if accel is None or gyro is None:
            return
        self._relative_ahrs.update(accel, gyro, self._dt)
        magnetometer = self._reader.read_magnetometer()
        if self._absolute_ahrs is not None and magnetometer is not None:
            self._absolute_ahrs.update(accel, gyro, self._dt, magnetometer=magnetometer)
        self._updates += 1
        if self._updates <= self._warmup:
            return
        if self._absolute_ahrs is not None and self._absolute_ahrs.initialized:
            self.absolute.emit(HeadingSample(alpha=self._absolute_ahrs.yaw_deg))
        self.relative.emit(HeadingSample(alpha=self._relative_ahrs.yaw_deg))


def create_linux_sources(
    gpsd_host: str,
    gpsd_port: int,
    sample_period_s: float,
    gain: float = 0.5,
    accel_path_str: Optional[str] = None,
    gyro_path_str: Optional[str] = None,
    magnetometer_path_str: Optional[str] = None,
) -> Optional[Tuple[LinuxOrientationSource, GpsdGeolocationSource]]:
    """
    Create IIO orientation + gpsd geolocation sources.

    Returns None if no IIO accelerometer/gyroscope is found. A missing
    magnetometer leaves the absolute channel silent; a missing gpsd makes
    every position request fail with position_unavailable.
    """
    accel_path = find_device(ACCEL, accel_path_str)
    gyro_path = find_device(GYRO, gyro_path_str, preferred=accel_path)
    if not accel_path or not gyro_path:
        return None
    magnetometer_path = find_device(
        MAGNETOMETER, magnetometer_path_str, preferred=accel_path
    )
    if magnetometer_path:
        logger.info("Magnetometer found at %s", magnetometer_path)
    else:
        logger.warning("No magnetometer; heading will be relative to start-up")
    reader = IIOReader(accel_path, gyro_path, magnetometer_path)
    gpsd = connect_gpsd(gpsd_host, gpsd_port)
    if gpsd is None:
        logger.warning("gpsd not available; position will be unavailable.")
    orientation = LinuxOrientationSource(
        reader,
        sample_period_s,
        gain=gain,
        warmup_samples=int(round(1.0 / sample_period_s)) if sample_period_s > 0 else 0,
    )
    return (orientation, GpsdGeolocationSource(gpsd))
