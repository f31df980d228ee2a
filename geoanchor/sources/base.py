"""
Abstract interfaces for orientation and geolocation capabilities.

Sources never call into the core from their own threads: events are delivered
from poll(), which the daemon main loop calls on its thread.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from geoanchor.events import EventChannel
from geoanchor.geodesy import GeoCoordinate
from geoanchor.tracker import LocationErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoFix:
    """Position with accuracy metadata."""

    coordinate: GeoCoordinate
    accuracy_m: Optional[float] = None
    altitude_m: float = 0.0
    mode: int = 3  # gpsd convention: 0/1=no fix, 2=2D, 3=3D
    time_iso: Optional[str] = None


SuccessCallback = Callable[[GeoCoordinate, GeoFix], None]
ErrorCallback = Callable[[LocationErrorKind], None]


@dataclass
class PositionRequest:
    on_success: SuccessCallback
    on_error: ErrorCallback
    high_accuracy: bool = False
    deadline: Optional[float] = None

    def accepts(self, fix: GeoFix) -> bool:
        if fix.mode < 2:
            return False
        return not (self.high_accuracy and fix.mode < 3)


class OrientationSource:
    """
    Two independent channels of HeadingSample events.

    `absolute` carries north-referenced readings, `relative` readings whose
    zero is arbitrary (e.g. gyro-integrated). Either may stay silent.
    """

    def __init__(self) -> None:
        self.absolute = EventChannel("orientation-absolute")
        self.relative = EventChannel("orientation-relative")

    def channels(self) -> Tuple[EventChannel, EventChannel]:
        return (self.absolute, self.relative)

    def poll(self, now: Optional[float] = None) -> None:
        """Deliver pending samples on the calling thread."""
        raise NotImplementedError


class GeolocationSource:
    """
    Single-shot position requests.

    A pending request is resolved by the next acceptable fix, rejected by a
    reported error, or rejected with TIMEOUT once its deadline has passed.
    """

    def __init__(self) -> None:
        self._requests: List[PositionRequest] = []

    def request_current_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        high_accuracy: bool = False,
        timeout_s: Optional[float] = None,
    ) -> None:
        deadline = None
        if timeout_s is not None and timeout_s > 0:
            deadline = time.monotonic() + timeout_s
        self._requests.append(
            PositionRequest(on_success, on_error, high_accuracy, deadline)
        )

    @property
    def pending_requests(self) -> int:
        return len(self._requests)

    def poll(self, now: Optional[float] = None) -> None:
        """Resolve or expire pending requests on the calling thread."""
        raise NotImplementedError

    def _deliver_fix(self, fix: GeoFix) -> None:
        requests, self._requests = self._requests, []
        remaining = []
        for request in requests:
            if request.accepts(fix):
                request.on_success(fix.coordinate, fix)
            else:
                remaining.append(request)
        self._requests = remaining + self._requests

    def _deliver_error(self, kind: LocationErrorKind) -> None:
        requests, self._requests = self._requests, []
        for request in requests:
            request.on_error(kind)

    def _expire_requests(self, now: Optional[float] = None) -> None:
        if now is None:
            now = time.monotonic()
        requests, self._requests = self._requests, []
        remaining = []
        for request in requests:
            if request.deadline is not None and now >= request.deadline:
                logger.debug("Position request timed out")
                request.on_error(LocationErrorKind.TIMEOUT)
            else:
                remaining.append(request)
        self._requests = remaining + self._requests
