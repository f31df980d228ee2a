"""
Position tracking: world origin and the anchored entity list.

The first accepted fix sets the world origin (unless a fixed origin is
configured) and builds the entity list. With the default "first" policy later
fixes are ignored, trading drift correction for placement stability. The
"follow" policy re-anchors when the device has moved far enough.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from geoanchor.events import EventChannel
from geoanchor.geodesy import GeoCoordinate, distance_m

logger = logging.getLogger(__name__)

ANCHOR_POLICIES = ("first", "follow")


class EntityKind(str, enum.Enum):
    USER = "user"
    STATIC_PROP = "static_prop"
    INTERACTIVE_BUTTON = "interactive_button"


class LocationErrorKind(str, enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"


class TrackerStatus(str, enum.Enum):
    AWAITING = "awaiting"
    LOCATED = "located"
    UNAVAILABLE = "unavailable"


class LocationUnavailable(Exception):
    """Geolocation failed; recoverable once a fix arrives."""

    def __init__(self, kind: LocationErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


@dataclass(frozen=True)
class AnchoredEntity:
    """Content bound to a geodetic coordinate."""

    id: str
    kind: EntityKind
    coordinate: GeoCoordinate
    name: str = ""
    asset_ref: Optional[str] = None


EntityFactory = Callable[[GeoCoordinate], List[AnchoredEntity]]

# (d_lat, d_lon) in degrees; 1e-5 deg is roughly 1.1 m of latitude.
PROP_OFFSETS: Tuple[Tuple[float, float], ...] = (
    (0.00005, 0.0),
    (0.0001, 0.0001),
    (0.00001, 0.00001),
    (0.00002, 0.00002),
)
BUTTON_OFFSET = (0.0, 0.00005)


def user_marker(fix: GeoCoordinate) -> AnchoredEntity:
    return AnchoredEntity(id="user", kind=EntityKind.USER, coordinate=fix, name="You")


def default_constellation(fix: GeoCoordinate) -> List[AnchoredEntity]:
    """Self marker, a few props a handful of meters away, and one button."""
    entities = [user_marker(fix)]
    for i, (d_lat, d_lon) in enumerate(PROP_OFFSETS):
        entities.append(
            AnchoredEntity(
                id=f"prop-{i}",
                kind=EntityKind.STATIC_PROP,
                coordinate=fix.offset_by(d_lat, d_lon),
                asset_ref="monk.glb",
            )
        )
    entities.append(
        AnchoredEntity(
            id="button-0",
            kind=EntityKind.INTERACTIVE_BUTTON,
            coordinate=fix.offset_by(*BUTTON_OFFSET),
            name="Tap Me!",
        )
    )
    return entities


class PositionTracker:
    """
    Owns the world origin and the entity list.

    `changed` fires after every accepted fix and every reported error.
    """

    def __init__(
        self,
        entity_factory: EntityFactory = default_constellation,
        policy: str = "first",
        reanchor_distance_m: float = 0.0,
        fixed_origin: Optional[GeoCoordinate] = None,
    ) -> None:
        if policy not in ANCHOR_POLICIES:
            raise ValueError(f"unknown anchor policy: {policy}")
        self._entity_factory = entity_factory
        self._policy = policy
        self._reanchor_distance_m = max(0.0, reanchor_distance_m)
        self._fixed_origin = fixed_origin
        self._origin: Optional[GeoCoordinate] = None
        self._anchor_fix: Optional[GeoCoordinate] = None
        self._entities: Tuple[AnchoredEntity, ...] = ()
        self._error: Optional[LocationUnavailable] = None
        self.changed = EventChannel("tracker")

    @property
    def origin(self) -> Optional[GeoCoordinate]:
        """World origin, None until the first fix is accepted."""
        return self._origin

    @property
    def entities(self) -> Sequence[AnchoredEntity]:
        return self._entities

    @property
    def error(self) -> Optional[LocationUnavailable]:
        return self._error

    @property
    def status(self) -> TrackerStatus:
        if self._origin is not None:
            return TrackerStatus.LOCATED
        if self._error is not None:
            return TrackerStatus.UNAVAILABLE
        return TrackerStatus.AWAITING

    def on_fix(self, coord: GeoCoordinate) -> bool:
        """
        Offer a fix. Returns True if it was accepted (origin/entities rebuilt).
        """
        if self._anchor_fix is not None and not self._should_reanchor(coord):
            logger.debug("Fix %s ignored (policy=%s)", coord, self._policy)
            return False
        self._anchor(coord)
        self.changed.emit()
        return True

    def on_error(self, kind: LocationErrorKind) -> None:
        """Record a geolocation failure. Placed content, if any, is kept."""
        self._error = LocationUnavailable(kind)
        logger.warning("Location unavailable: %s", kind.value)
        self.changed.emit()

    def _should_reanchor(self, coord: GeoCoordinate) -> bool:
        if self._policy == "first" or self._anchor_fix is None:
            return False
        moved = distance_m(self._anchor_fix, coord)
        return moved > 0.0 and moved >= self._reanchor_distance_m

    def _anchor(self, coord: GeoCoordinate) -> None:
        first = self._anchor_fix is None
        self._anchor_fix = coord
        self._origin = self._fixed_origin or coord
        self._entities = tuple(self._entity_factory(coord))
        self._error = None
        logger.info(
            "%s at %.7f,%.7f (%d entities)",
            "Anchored" if first else "Re-anchored",
            coord.latitude,
            coord.longitude,
            len(self._entities),
        )
