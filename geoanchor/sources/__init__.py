"""
Pluggable sensor sources for orientation and geolocation.

- linux: IIO sysfs + imufusion (orientation) and gpsd (geolocation)
- remote: TCP server accepting JSON lines from a phone/browser client
"""

from geoanchor.sources.base import GeoFix, GeolocationSource, OrientationSource
from geoanchor.sources.gpsd import GpsdGeolocationSource
from geoanchor.sources.linux import LinuxOrientationSource, create_linux_sources
from geoanchor.sources.remote import RemoteSource, create_remote_source

__all__ = [
    "GeoFix",
    "GeolocationSource",
    "GpsdGeolocationSource",
    "LinuxOrientationSource",
    "OrientationSource",
    "RemoteSource",
    "create_linux_sources",
    "create_remote_source",
]
