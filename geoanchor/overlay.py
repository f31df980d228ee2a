"""
Compass overlay: heading readout plus the awaiting-location banner.
"""

from dataclasses import dataclass
from typing import Optional

from geoanchor.orientation import OrientationCalibrator
from geoanchor.tracker import PositionTracker, TrackerStatus

CALIBRATING_LABEL = "Calibrating…"
AWAITING_LOCATION_LABEL = "Getting GPS…"

_CARDINALS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def cardinal(heading_deg: float) -> str:
    """Eight-point compass direction for a heading."""
    index = int(((heading_deg % 360.0) + 22.5) // 45.0) % 8
    return _CARDINALS[index]


@dataclass(frozen=True)
class OverlayView:
    calibrating: bool
    label: str
    needle_deg: float
    cardinal: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "calibrating": self.calibrating,
            "label": self.label,
            "needle_deg": self.needle_deg,
            "cardinal": self.cardinal,
        }


class OverlayPresenter:
    """Read-only view of the calibrator's heading."""

    def __init__(self, calibrator: OrientationCalibrator) -> None:
        self._calibrator = calibrator

    def render(self) -> OverlayView:
        heading = self._calibrator.heading
        if heading is None:
            return OverlayView(
                calibrating=True, label=CALIBRATING_LABEL, needle_deg=0.0
            )
        return OverlayView(
            calibrating=False,
            label=f"{heading:.1f}°",
            needle_deg=heading,
            cardinal=cardinal(heading),
        )


def location_banner(tracker: PositionTracker) -> Optional[str]:
    """Text shown while no content can be placed; None once located."""
    status = tracker.status
    if status is TrackerStatus.LOCATED:
        return None
    if status is TrackerStatus.UNAVAILABLE and tracker.error is not None:
        return f"Location unavailable ({tracker.error.kind.value}); waiting for a fix"
    return AWAITING_LOCATION_LABEL
