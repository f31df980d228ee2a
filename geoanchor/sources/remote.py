"""
Remote data source: TCP server accepting JSON from a phone/browser client.

Protocol: one JSON object per line (newline-delimited).
- Orientation: {"compassHeading": float} or {"alpha": float|null},
  optional "channel": "absolute" | "relative" (default "absolute")
- Fix: {"lat": float, "lon": float, "accuracy": float, "alt": float,
        "time_iso": str|null}
- Location error: {"location_error": "permission_denied" | "timeout" |
                   "position_unavailable"}
- Combined: orientation and fix keys in one object.

The listener thread only parses and queues; poll() dispatches on the caller's
thread in arrival order.
"""

import json
import logging
import queue
import socket
import threading
from typing import Any, Optional, Tuple

from geoanchor.geodesy import GeoCoordinate
from geoanchor.orientation import HeadingSample
from geoanchor.sources.base import GeoFix, GeolocationSource, OrientationSource
from geoanchor.tracker import LocationErrorKind

logger = logging.getLogger(__name__)

_Event = Tuple[str, Any]


def _optional_float(value: object) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_message(data: object) -> list:
    """
    Turn one decoded JSON object into a list of (kind, payload) events.

    kind is "absolute"/"relative" (HeadingSample), "fix" (GeoFix) or
    "error" (LocationErrorKind). Unknown or malformed content yields nothing.
    """
    if not isinstance(data, dict):
        return []
    events = []
    if "compassHeading" in data or "alpha" in data:
        channel = data.get("channel", "absolute")
        if channel in ("absolute", "relative"):
            events.append((channel, HeadingSample.from_dict(data)))
    if "lat" in data and "lon" in data:
        lat = _optional_float(data["lat"])
        lon = _optional_float(data["lon"])
        if lat is not None and lon is not None:
            coordinate = GeoCoordinate(lat, lon)
            if coordinate.is_valid():
                time_iso = data.get("time_iso")
                events.append(
                    (
                        "fix",
                        GeoFix(
                            coordinate=coordinate,
                            accuracy_m=_optional_float(data.get("accuracy")),
                            altitude_m=_optional_float(data.get("alt")) or 0.0,
                            time_iso=time_iso if isinstance(time_iso, str) else None,
                        ),
                    )
                )
            else:
                logger.debug("Out-of-range fix dropped: %s,%s", lat, lon)
    error = data.get("location_error")
    if error is not None:
        try:
            events.append(("error", LocationErrorKind(error)))
        except ValueError:
            logger.debug("Unknown location error %r", error)
    return events


class RemoteSource(OrientationSource, GeolocationSource):
    """
    Orientation and geolocation from one remote TCP client.

    Start the server with start(); call poll() from the main loop.
    """

    def __init__(self, host: str = "0.0.0.0", port: int = 2949) -> None:
        OrientationSource.__init__(self)
        GeolocationSource.__init__(self)
        self._host = host
        self._port = port
        self._events: "queue.Queue[_Event]" = queue.Queue()
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._shutdown = False

    def start(self) -> bool:
        """Bind and start the listener thread. Return True on success."""
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self._host, self._port))
            self._sock.listen(1)
            self._sock.settimeout(1.0)
            self._thread = threading.Thread(target=self._accept_loop, daemon=True)
            self._thread.start()
            logger.info(
                "Remote source listening on %s:%s (phone/browser clients)",
                self._host,
                self._port,
            )
            return True
        except OSError as e:
            logger.error("Remote source bind failed: %s", e)
            return False

    def stop(self) -> None:
        """Stop the listener and close the socket."""
        self._shutdown = True
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def _accept_loop(self) -> None:
        while not self._shutdown and self._sock:
            try:
                client, addr = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                if not self._shutdown:
                    logger.debug("Remote accept error")
                break
            logger.info("Remote client connected from %s", addr)
            try:
                client.settimeout(5.0)
                with client.makefile(
                    mode="r", encoding="utf-8", errors="replace"
                ) as f:
                    for line in f:
                        if self._shutdown:
                            break
                        line = line.strip()
                        if line:
                            self._parse_line(line)
            except (
                ConnectionResetError,
                BrokenPipeError,
                socket.timeout,
                ValueError,
            ) as e:
                logger.debug("Remote client error: %s", e)
            finally:
                try:
                    client.close()
                except OSError:
                    pass
                logger.info("Remote client disconnected")

    def _parse_line(self, line: str) -> None:
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Invalid JSON from remote client: %.80s", line)
            return
        for event in parse_message(data):
            self._events.put(event)

    def poll(self, now: Optional[float] = None) -> None:
        """Dispatch queued events, then expire timed-out position requests."""
        while True:
            try:
                kind, payload = self._events.get_nowait()
            except queue.Empty:
                break
            if kind == "absolute":
                self.absolute.emit(payload)
            elif kind == "relative":
                self.relative.emit(payload)
            elif kind == "fix":
                self._deliver_fix(payload)
            elif kind == "error":
                self._deliver_error(payload)
        self._expire_requests(now)


def create_remote_source(host: str, port: int) -> Optional[RemoteSource]:
    """Create and start the remote source. Returns None on bind failure."""
    source = RemoteSource(host=host, port=port)
    if source.start():
        return source
    return None
