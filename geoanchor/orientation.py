"""
One-shot heading calibration from device orientation samples.

Two encodings are accepted: a device-reported compass heading (degrees
clockwise from north, used as-is) or an alpha rotation angle, whose rotation
sense is the opposite (heading = 360 - alpha). The first sample that yields a
heading calibrates the session; the calibrator then unsubscribes from every
orientation channel it was listening to. Calibration is terminal.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from geoanchor.events import EventChannel, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeadingSample:
    """Raw orientation sample; either field may be missing."""

    compass_heading: Optional[float] = None
    alpha: Optional[float] = None

    @classmethod
    def from_dict(cls, data: object) -> "HeadingSample":
        """Build from a JSON object using the browser field names."""
        if not isinstance(data, dict):
            return cls()
        return cls(
            compass_heading=_to_angle(data.get("compassHeading")),
            alpha=_to_angle(data.get("alpha")),
        )


def _to_angle(value: object) -> Optional[float]:
    """Convert a JSON number to float; None for anything else or NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    angle = float(value)
    if math.isnan(angle) or math.isinf(angle):
        return None
    return angle


def heading_from_sample(sample: HeadingSample) -> Optional[float]:
    """
    Return compass degrees for a sample, or None if it carries no usable angle.

    A compass heading wins over alpha when both are present.
    """
    if sample.compass_heading is not None and not math.isnan(sample.compass_heading):
        return sample.compass_heading
    if sample.alpha is not None and not math.isnan(sample.alpha):
        return (360.0 - sample.alpha) % 360.0
    return None


class OrientationCalibrator:
    """
    State machine: uncalibrated -> calibrated(heading).

    Only this class writes the heading; others read the `heading` property or
    subscribe to `calibrated`, which fires exactly once with the heading.
    """

    def __init__(self) -> None:
        self._heading: Optional[float] = None
        self._subscriptions: List[Subscription] = []
        self.calibrated = EventChannel("calibrated")

    @property
    def heading(self) -> Optional[float]:
        """Calibrated heading in degrees, None until calibration completes."""
        return self._heading

    @property
    def is_calibrated(self) -> bool:
        return self._heading is not None

    @property
    def listening(self) -> bool:
        return any(s.active for s in self._subscriptions)

    def listen(self, *channels: EventChannel) -> None:
        """Subscribe to orientation channels carrying HeadingSample events."""
        if self.is_calibrated:
            return
        for channel in channels:
            self._subscriptions.append(channel.subscribe(self.handle_sample))
            logger.debug("Calibrator listening on %s", channel.name)

    def handle_sample(self, sample: HeadingSample) -> None:
        """Consume one sample; calibrates on the first usable one."""
        if self._heading is not None:
            return
        heading = heading_from_sample(sample)
        if heading is None:
            logger.debug("Orientation sample without heading ignored: %s", sample)
            return
        self._heading = heading
        self.stop()
        logger.info("Initial heading captured: %.1f deg", heading)
        self.calibrated.emit(heading)

    def stop(self) -> None:
        """Unsubscribe from all channels. Idempotent."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
