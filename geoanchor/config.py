"""
Configuration defaults and parsing for geoanchor.
"""

import argparse
from dataclasses import dataclass, field
from typing import List, Optional

from geoanchor.geodesy import GeoCoordinate
from geoanchor.points import PointOfInterest
from geoanchor.tracker import ANCHOR_POLICIES


@dataclass
class Config:
    """Runtime configuration."""

    source: str = "remote"
    gpsd_host: str = "127.0.0.1"
    gpsd_port: int = 2947
    remote_host: str = "0.0.0.0"
    remote_port: int = 2949
    scene_host: str = "127.0.0.1"
    scene_port: int = 2950
    imu_rate_hz: float = 100.0
    fusion_gain: float = 0.5
    accel_path: Optional[str] = None
    gyro_path: Optional[str] = None
    magnetometer_path: Optional[str] = None
    world_origin: Optional[GeoCoordinate] = None
    entities: str = "constellation"
    points: List[PointOfInterest] = field(default_factory=list)
    anchor_policy: str = "first"
    reanchor_distance_m: float = 0.0
    location_timeout_s: float = 0.0
    location_retry_s: float = 0.0
    high_accuracy: bool = True
    debug: bool = False


def parse_coordinate(value: str) -> GeoCoordinate:
    """Parse "LAT,LON" in decimal degrees (argparse type)."""
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("expected LAT,LON")
    try:
        coordinate = GeoCoordinate(float(parts[0]), float(parts[1]))
    except ValueError:
        raise argparse.ArgumentTypeError("expected LAT,LON as numbers")
    if not coordinate.is_valid():
        raise argparse.ArgumentTypeError("latitude/longitude out of range")
    return coordinate


def parse_point(value: str) -> PointOfInterest:
    """Parse "NAME@LAT,LON[@KIND]" into an unsaved point (argparse type)."""
    parts = value.split("@")
    if len(parts) not in (2, 3) or not parts[0]:
        raise argparse.ArgumentTypeError("expected NAME@LAT,LON[@KIND]")
    kind = parts[2] if len(parts) == 3 and parts[2] else "box"
    return PointOfInterest(
        name=parts[0], coordinate=parse_coordinate(parts[1]), kind=kind
    )


def positive_float(value: str) -> float:
    """argparse type for strictly positive numbers."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value}")
    return number


def parse_args(args: Optional[list] = None) -> Config:
    """Parse command-line arguments into Config."""
    parser = argparse.ArgumentParser(
        description="Anchor AR content to GPS coordinates; stream scenes over TCP."
    )
    parser.add_argument(
        "--source",
        choices=("linux", "remote", "auto"),
        default="remote",
        help="Source: linux (IIO+gpsd), remote (TCP), auto (default: remote)",
    )
    parser.add_argument(
        "--gpsd-host",
        default="127.0.0.1",
        help="gpsd host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--gpsd-port",
        type=int,
        default=2947,
        help="gpsd port (default: 2947)",
    )
    parser.add_argument(
        "--remote-host",
        default="0.0.0.0",
        help="Bind address for remote source (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--remote-port",
        type=int,
        default=2949,
        help="Port for remote source (default: 2949)",
    )
    parser.add_argument(
        "--scene-host",
        default="127.0.0.1",
        help="Bind address for the scene TCP server (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--scene-port",
        type=int,
        default=2950,
        help="Port for the scene TCP server (default: 2950)",
    )
    parser.add_argument(
        "--imu-rate",
        type=positive_float,
        default=100.0,
        help="IMU sample rate in Hz for the linux source (default: 100)",
    )
    parser.add_argument(
        "--fusion-gain",
        type=float,
        default=0.5,
        help="AHRS fusion gain 0-1 (default: 0.5)",
    )
    parser.add_argument(
        "--accel-path",
        default=None,
        help="IIO sysfs path for accelerometer (e.g. /sys/bus/iio/devices/iio:device0)",
    )
    parser.add_argument(
        "--gyro-path",
        default=None,
        help="IIO sysfs path for gyroscope (default: auto-detect)",
    )
    parser.add_argument(
        "--magnetometer-path",
        default=None,
        help="IIO sysfs path for magnetometer (default: auto-detect)",
    )
    parser.add_argument(
        "--world-origin",
        type=parse_coordinate,
        default=None,
        metavar="LAT,LON",
        help="Fixed world origin (default: first accepted fix)",
    )
    parser.add_argument(
        "--entities",
        choices=("constellation", "store"),
        default="constellation",
        help="constellation: built-in props around the first fix; "
        "store: points given with --point (default: constellation)",
    )
    parser.add_argument(
        "--point",
        dest="points",
        type=parse_point,
        action="append",
        default=[],
        metavar="NAME@LAT,LON[@KIND]",
        help="Point of interest for --entities=store (repeatable; KIND button "
        "makes it interactive)",
    )
    parser.add_argument(
        "--anchor-policy",
        choices=ANCHOR_POLICIES,
        default="first",
        help="first: anchor once; follow: re-anchor as the device moves",
    )
    parser.add_argument(
        "--reanchor-distance",
        type=float,
        default=0.0,
        help="Meters moved before re-anchoring with --anchor-policy=follow "
        "(default: 0, every fix)",
    )
    parser.add_argument(
        "--location-timeout",
        type=float,
        default=0.0,
        help="Seconds before a position request fails (0=no timeout)",
    )
    parser.add_argument(
        "--location-retry",
        type=float,
        default=0.0,
        help="Seconds between retries while location is unavailable (0=never)",
    )
    parser.add_argument(
        "--low-accuracy",
        action="store_true",
        help="Accept 2D fixes (default: require high accuracy)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parsed = parser.parse_args(args)
    return Config(
        source=parsed.source,
        gpsd_host=parsed.gpsd_host,
        gpsd_port=parsed.gpsd_port,
        remote_host=parsed.remote_host,
        remote_port=parsed.remote_port,
        scene_host=parsed.scene_host,
        scene_port=parsed.scene_port,
        imu_rate_hz=parsed.imu_rate,
        fusion_gain=parsed.fusion_gain,
        accel_path=parsed.accel_path,
        gyro_path=parsed.gyro_path,
        magnetometer_path=parsed.magnetometer_path,
        world_origin=parsed.world_origin,
        entities=parsed.entities,
        points=parsed.points,
        anchor_policy=parsed.anchor_policy,
        reanchor_distance_m=parsed.reanchor_distance,
        location_timeout_s=parsed.location_timeout,
        location_retry_s=parsed.location_retry,
        high_accuracy=not parsed.low_accuracy,
        debug=parsed.debug,
    )
