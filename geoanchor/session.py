"""
AnchorSession: the composition root of one AR session.

Owns the calibrator, the tracker and the overlay presenter, holds the render
surface it was given, and recomputes the scene whenever the heading, the
world origin or the entity list changes.
"""

import logging
from typing import List, Optional, Sequence

from geoanchor.events import EventChannel, Subscription
from geoanchor.geodesy import GeoCoordinate
from geoanchor.orientation import OrientationCalibrator
from geoanchor.output_server import RenderSurface
from geoanchor.overlay import OverlayPresenter, location_banner
from geoanchor.scene import Scene, compose
from geoanchor.sources.base import GeoFix, GeolocationSource
from geoanchor.tracker import LocationErrorKind, PositionTracker

logger = logging.getLogger(__name__)


class AnchorSession:
    """
    Wires sensors to the core and the core to the render surface.

    With continuous=True every successful position request is followed by a
    new one, so a "follow" tracker keeps receiving fixes.
    """

    def __init__(
        self,
        calibrator: OrientationCalibrator,
        tracker: PositionTracker,
        surface: RenderSurface,
        continuous: bool = False,
    ) -> None:
        self.calibrator = calibrator
        self.tracker = tracker
        self.presenter = OverlayPresenter(calibrator)
        self._surface = surface
        self._continuous = continuous
        self._geolocation: Optional[GeolocationSource] = None
        self._high_accuracy = True
        self._timeout_s: Optional[float] = None
        self._closed = False
        self._scene: Optional[Scene] = None
        self._subscriptions: List[Subscription] = [
            calibrator.calibrated.subscribe(lambda heading: self.refresh()),
            tracker.changed.subscribe(self.refresh),
        ]

    @property
    def scene(self) -> Optional[Scene]:
        """Last scene handed to the render surface."""
        return self._scene

    def start(
        self,
        orientation_channels: Sequence[EventChannel],
        geolocation: GeolocationSource,
        high_accuracy: bool = True,
        timeout_s: Optional[float] = None,
    ) -> None:
        """Begin calibration, request a position and render the initial state."""
        self._geolocation = geolocation
        self._high_accuracy = high_accuracy
        self._timeout_s = timeout_s
        self.calibrator.listen(*orientation_channels)
        self.refresh()
        self.request_location()

    def request_location(self) -> None:
        """Issue a single-shot position request (also used for retries)."""
        if self._closed or self._geolocation is None:
            return
        self._geolocation.request_current_position(
            self._on_position,
            self._on_position_error,
            high_accuracy=self._high_accuracy,
            timeout_s=self._timeout_s,
        )

    def refresh(self) -> Scene:
        """Recompute the scene from current state and render it."""
        tracker = self.tracker
        scene = compose(tracker.origin, tracker.entities, self.calibrator.heading)
        self._scene = scene
        if not self._closed:
            self._surface.render(
                scene, self.presenter.render(), location_banner(tracker)
            )
        return scene

    def close(self) -> None:
        """Stop listening to sensors and state changes. Idempotent."""
        self.calibrator.stop()
        for subscription in self._subscriptions:
            subscription.cancel()
        self._closed = True

    def _on_position(self, coord: GeoCoordinate, fix: GeoFix) -> None:
        logger.debug(
            "Position %.7f,%.7f accuracy=%s",
            coord.latitude,
            coord.longitude,
            fix.accuracy_m,
        )
        self.tracker.on_fix(coord)
        if self._continuous:
            self.request_location()

    def _on_position_error(self, kind: LocationErrorKind) -> None:
        self.tracker.on_error(kind)
