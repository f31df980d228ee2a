"""
Geolocation from gpsd.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from geoanchor.geodesy import GeoCoordinate
from geoanchor.sources.base import GeoFix, GeolocationSource
from geoanchor.tracker import LocationErrorKind

logger = logging.getLogger(__name__)


def connect_gpsd(host: str = "127.0.0.1", port: int = 2947) -> Optional[object]:
    """
    Connect to gpsd and return the gpsd-py3 module as connection object.

    Returns None on failure.
    """
    try:
        import gpsd  # type: ignore[import-untyped]

        gpsd.connect(host=host, port=port)
        return gpsd  # type: ignore[no-any-return]
    except Exception as e:
        logger.error("gpsd connect failed: %s", e)
        return None


def _time_iso(value: object) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )
    return str(value)


def packet_to_fix(packet: object) -> Optional[GeoFix]:
    """
    Convert a gpsd-py3 response to a GeoFix.

    Returns None without a 2D/3D fix or with out-of-range coordinates.
    """
    mode = getattr(packet, "mode", 0) or 0
    if mode < 2:
        return None
    lat, lon = packet.position()  # type: ignore[attr-defined]
    coordinate = GeoCoordinate(float(lat), float(lon))
    if not coordinate.is_valid():
        return None
    accuracy = None
    try:
        epx, epy = packet.position_precision()  # type: ignore[attr-defined]
        accuracy = float(max(epx, epy))
    except (AttributeError, KeyError, TypeError, ValueError):
        pass
    return GeoFix(
        coordinate=coordinate,
        accuracy_m=accuracy,
        altitude_m=float(getattr(packet, "alt", None) or 0.0),
        mode=int(mode),
        time_iso=_time_iso(getattr(packet, "time", None)),
    )


class GpsdGeolocationSource(GeolocationSource):
    """
    Resolves position requests from the current gpsd packet.

    Without a gpsd connection every request fails with POSITION_UNAVAILABLE;
    otherwise requests wait for an acceptable fix (3D when high accuracy is
    asked for) until their deadline.
    """

    def __init__(self, gpsd_module: Optional[object]) -> None:
        super().__init__()
        self._gpsd = gpsd_module

    def poll(self, now: Optional[float] = None) -> None:
        if not self.pending_requests:
            return
        if self._gpsd is None:
            self._deliver_error(LocationErrorKind.POSITION_UNAVAILABLE)
            return
        fix = self._current_fix()
        if fix is not None:
            self._deliver_fix(fix)
        self._expire_requests(now)

    def _current_fix(self) -> Optional[GeoFix]:
        try:
            packet = self._gpsd.get_current()  # type: ignore[union-attr]
        except Exception as e:
            logger.debug("gpsd get_current error: %s", e)
            return None
        if packet is None:
            return None
        try:
            return packet_to_fix(packet)
        except Exception as e:
            logger.debug("gpsd packet error: %s", e)
            return None
