"""
Main loop: feed sensor sources into an AnchorSession, stream scenes over TCP.
"""

import logging
import select
import signal
import sys
import time
from typing import Optional, Tuple

from geoanchor.config import Config, parse_args
from geoanchor.orientation import OrientationCalibrator
from geoanchor.output_server import SceneTcpServer
from geoanchor.points import InMemoryPointStore, store_entities
from geoanchor.session import AnchorSession
from geoanchor.sources import create_linux_sources, create_remote_source
from geoanchor.sources.base import GeolocationSource, OrientationSource
from geoanchor.sources.remote import RemoteSource
from geoanchor.tracker import (
    EntityFactory,
    PositionTracker,
    TrackerStatus,
    default_constellation,
)

logger = logging.getLogger(__name__)

_shutdown = False

Sources = Tuple[OrientationSource, GeolocationSource]


def _signal_handler(signum: int, frame: Optional[object]) -> None:
    global _shutdown
    _shutdown = True


def _linux_sources(config: Config) -> Optional[Sources]:
    try:
        return create_linux_sources(
            config.gpsd_host,
            config.gpsd_port,
            1.0 / config.imu_rate_hz,
            gain=config.fusion_gain,
            accel_path_str=config.accel_path,
            gyro_path_str=config.gyro_path,
            magnetometer_path_str=config.magnetometer_path,
        )
    except RuntimeError as e:
        logger.error("%s", e)
        return None


def entity_factory(config: Config) -> EntityFactory:
    """Entity factory for config.entities; the store is seeded from --point."""
    if config.entities != "store":
        return default_constellation
    store = InMemoryPointStore()
    for point in config.points:
        store.create(point)
    logger.info("Using point store (%d points)", len(config.points))
    return store_entities(store)


def select_sources(config: Config) -> Tuple[Optional[Sources], Optional[RemoteSource]]:
    """
    Build sensor sources for config.source.

    Returns ((orientation, geolocation) or None, remote source to stop later).
    """
    if config.source in ("linux", "auto"):
        sources = _linux_sources(config)
        if sources:
            logger.info("Using Linux source (IIO + gpsd)")
            return sources, None
        if config.source == "linux":
            logger.error(
                "IIO accel or gyro not found. Use --source=remote for phone clients."
            )
            return None, None
    remote = create_remote_source(config.remote_host, config.remote_port)
    if not remote:
        logger.error("Remote source bind failed")
        return None, None
    logger.info("Using remote source (waiting for phone/browser client)")
    return (remote, remote), remote


def run(config: Config) -> int:  # noqa: C901
    """
    Run the daemon until SIGINT/SIGTERM.

    Returns exit code (0 = success).
    """
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    log_level = logging.DEBUG if config.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    sources, remote_source = select_sources(config)
    if sources is None:
        return 1
    orientation, geolocation = sources

    server = SceneTcpServer(host=config.scene_host, port=config.scene_port)
    if not server.start():
        if remote_source:
            remote_source.stop()
        return 1

    tracker = PositionTracker(
        entity_factory=entity_factory(config),
        policy=config.anchor_policy,
        reanchor_distance_m=config.reanchor_distance_m,
        fixed_origin=config.world_origin,
    )
    session = AnchorSession(
        OrientationCalibrator(),
        tracker,
        server,
        continuous=config.anchor_policy == "follow",
    )
    session.start(
        orientation.channels(),
        geolocation,
        high_accuracy=config.high_accuracy,
        timeout_s=config.location_timeout_s or None,
    )

    poll_dt = 1.0 / config.imu_rate_hz
    last_poll_time = time.monotonic()
    last_retry_time = last_poll_time

    try:
        while not _shutdown:
            now = time.monotonic()

            if server.get_socket():
                r, _, _ = select.select(
                    [server.get_socket()], [], [], min(poll_dt, 0.1)
                )
                if r:
                    server.accept_new()

            while (time.monotonic() - last_poll_time) >= poll_dt and not _shutdown:
                orientation.poll()
                last_poll_time += poll_dt
            if last_poll_time < now:
                last_poll_time = now

            geolocation.poll()

            if (
                config.location_retry_s > 0
                and tracker.status is TrackerStatus.UNAVAILABLE
                and not geolocation.pending_requests
                and (now - last_retry_time) >= config.location_retry_s
            ):
                logger.info("Retrying position request")
                last_retry_time = now
                session.request_location()

    except KeyboardInterrupt:
        pass
    finally:
        session.close()
        server.stop()
        if remote_source:
            remote_source.stop()

    return 0


def main() -> None:
    """Entry point for the geoanchor script."""
    config = parse_args()
    sys.exit(run(config))


if __name__ == "__main__":
    main()
