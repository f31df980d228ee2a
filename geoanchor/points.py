"""
Points-of-interest store interface and its entity adapter.

The real store lives elsewhere (a document database behind a REST API); the
anchoring core only needs list/create/delete. InMemoryPointStore backs tests
and standalone runs.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from geoanchor.geodesy import GeoCoordinate
from geoanchor.tracker import AnchoredEntity, EntityFactory, EntityKind, user_marker

logger = logging.getLogger(__name__)

# modelType values the POI backend uses for clickable content.
INTERACTIVE_MODEL_TYPES = ("button",)


@dataclass(frozen=True)
class PointOfInterest:
    """One stored point."""

    name: str
    coordinate: GeoCoordinate
    kind: str = "box"
    asset_ref: Optional[str] = None
    id: str = ""
    created_at: float = field(default=0.0)


class PointStore:
    """External collaborator holding points of interest."""

    def list(self) -> List[PointOfInterest]:
        """Return all points, newest first."""
        raise NotImplementedError

    def create(self, point: PointOfInterest) -> PointOfInterest:
        """Store a point and return it with id and created_at set."""
        raise NotImplementedError

    def delete(self, point_id: str) -> bool:
        """Delete by id. Returns True if a point was removed."""
        raise NotImplementedError


class InMemoryPointStore(PointStore):
    def __init__(self) -> None:
        self._points: Dict[str, PointOfInterest] = {}

    def list(self) -> List[PointOfInterest]:
        return sorted(self._points.values(), key=lambda p: p.created_at, reverse=True)

    def create(self, point: PointOfInterest) -> PointOfInterest:
        stored = replace(
            point,
            id=point.id or uuid.uuid4().hex,
            created_at=point.created_at or time.time(),
        )
        self._points[stored.id] = stored
        logger.debug("Point created: %s", stored.id)
        return stored

    def delete(self, point_id: str) -> bool:
        return self._points.pop(point_id, None) is not None


def point_to_entity(point: PointOfInterest) -> AnchoredEntity:
    kind = (
        EntityKind.INTERACTIVE_BUTTON
        if point.kind in INTERACTIVE_MODEL_TYPES
        else EntityKind.STATIC_PROP
    )
    return AnchoredEntity(
        id=point.id,
        kind=kind,
        coordinate=point.coordinate,
        name=point.name,
        asset_ref=point.asset_ref,
    )


def store_entities(store: PointStore) -> EntityFactory:
    """Entity factory listing the store on each accepted fix."""

    def factory(fix: GeoCoordinate) -> List[AnchoredEntity]:
        entities = [user_marker(fix)]
        for point in store.list():
            if not point.coordinate.is_valid():
                logger.warning("Skipping point %s with invalid coordinate", point.id)
                continue
            entities.append(point_to_entity(point))
        return entities

    return factory
