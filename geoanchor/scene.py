"""
Scene composition: world origin + entities + heading -> render-ready scene.

A single yaw is applied at the scene root so that north-relative offsets line
up with the device's calibrated forward direction; entities are never rotated
individually.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from geoanchor.geodesy import GeoCoordinate, LocalOffset, project
from geoanchor.tracker import AnchoredEntity, EntityKind


@dataclass(frozen=True)
class Placement:
    entity_id: str
    kind: EntityKind
    offset: LocalOffset

    def to_dict(self) -> dict:
        return {
            "id": self.entity_id,
            "kind": self.kind.value,
            "position": list(self.offset.as_tuple()),
        }


@dataclass(frozen=True)
class Scene:
    """Scene root yaw in degrees plus the placements under it."""

    yaw_deg: float
    placements: Tuple[Placement, ...] = ()

    def to_dict(self) -> dict:
        return {
            "yaw_deg": self.yaw_deg,
            "placements": [p.to_dict() for p in self.placements],
        }


def scene_yaw(heading: Optional[float]) -> float:
    """Scene root rotation for a calibrated heading; 0 while uncalibrated."""
    if heading is None:
        return 0.0
    return -heading


def compose(
    origin: Optional[GeoCoordinate],
    entities: Sequence[AnchoredEntity],
    heading: Optional[float],
) -> Scene:
    """
    Place every entity relative to origin.

    Pure: the same inputs always give the same Scene. Without an origin there
    is nothing to place yet.
    """
    placements: List[Placement] = []
    if origin is not None:
        for entity in entities:
            placements.append(
                Placement(entity.id, entity.kind, project(origin, entity.coordinate))
            )
    return Scene(yaw_deg=scene_yaw(heading), placements=tuple(placements))
