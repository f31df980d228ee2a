"""
Unit tests for PositionTracker: anchoring policies, entity list, errors.
"""

from typing import List

import pytest

from geoanchor.geodesy import GeoCoordinate
from geoanchor.tracker import (
    AnchoredEntity,
    EntityKind,
    LocationErrorKind,
    PositionTracker,
    TrackerStatus,
    default_constellation,
)


class TestDefaultConstellation:
    """User marker, props and one button around the fix."""

    def test_layout(self) -> None:
        fix = GeoCoordinate(10.0, 20.0)
        entities = default_constellation(fix)
        kinds = [e.kind for e in entities]
        assert kinds.count(EntityKind.USER) == 1
        assert kinds.count(EntityKind.STATIC_PROP) == 4
        assert kinds.count(EntityKind.INTERACTIVE_BUTTON) == 1

    def test_user_marker_at_fix(self) -> None:
        fix = GeoCoordinate(10.0, 20.0)
        user = [e for e in default_constellation(fix) if e.kind is EntityKind.USER][0]
        assert user.coordinate == fix

    def test_button_east_of_fix(self) -> None:
        fix = GeoCoordinate(10.0, 20.0)
        button = [
            e
            for e in default_constellation(fix)
            if e.kind is EntityKind.INTERACTIVE_BUTTON
        ][0]
        assert button.coordinate.latitude == 10.0
        assert button.coordinate.longitude == pytest.approx(20.00005)

    def test_ids_unique(self) -> None:
        ids = [e.id for e in default_constellation(GeoCoordinate(0.0, 0.0))]
        assert len(ids) == len(set(ids))


class TestFirstFixPolicy:
    """Default policy: the first fix anchors the session, later ones are ignored."""

    def test_initial_state(self) -> None:
        tracker = PositionTracker()
        assert tracker.origin is None
        assert list(tracker.entities) == []
        assert tracker.status is TrackerStatus.AWAITING

    def test_first_fix_sets_origin_and_entities(self) -> None:
        tracker = PositionTracker()
        assert tracker.on_fix(GeoCoordinate(10.0, 20.0)) is True
        assert tracker.origin == GeoCoordinate(10.0, 20.0)
        assert len(tracker.entities) > 0
        assert tracker.status is TrackerStatus.LOCATED

    def test_second_fix_ignored(self) -> None:
        tracker = PositionTracker()
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        entities = tracker.entities
        assert tracker.on_fix(GeoCoordinate(11.0, 21.0)) is False
        assert tracker.origin == GeoCoordinate(10.0, 20.0)
        assert tracker.entities == entities

    def test_changed_fires_once_per_accepted_fix(self) -> None:
        tracker = PositionTracker()
        calls: List[int] = []
        tracker.changed.subscribe(lambda: calls.append(1))
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        tracker.on_fix(GeoCoordinate(11.0, 21.0))
        assert len(calls) == 1

    def test_fixed_origin(self) -> None:
        world = GeoCoordinate(12.7489708, 80.1988392)
        tracker = PositionTracker(fixed_origin=world)
        fix = GeoCoordinate(12.749, 80.199)
        tracker.on_fix(fix)
        assert tracker.origin == world
        user = [e for e in tracker.entities if e.kind is EntityKind.USER][0]
        assert user.coordinate == fix

    def test_custom_entity_factory(self) -> None:
        def factory(fix: GeoCoordinate) -> List[AnchoredEntity]:
            return [AnchoredEntity("only", EntityKind.STATIC_PROP, fix)]

        tracker = PositionTracker(entity_factory=factory)
        tracker.on_fix(GeoCoordinate(1.0, 2.0))
        assert [e.id for e in tracker.entities] == ["only"]

    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(ValueError):
            PositionTracker(policy="sometimes")


class TestFollowPolicy:
    """Re-anchoring replaces origin and entity list."""

    def test_every_fix_reanchors(self) -> None:
        tracker = PositionTracker(policy="follow")
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        assert tracker.on_fix(GeoCoordinate(11.0, 21.0)) is True
        assert tracker.origin == GeoCoordinate(11.0, 21.0)
        user = [e for e in tracker.entities if e.kind is EntityKind.USER][0]
        assert user.coordinate == GeoCoordinate(11.0, 21.0)

    def test_small_moves_below_threshold_ignored(self) -> None:
        tracker = PositionTracker(policy="follow", reanchor_distance_m=100.0)
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        # about 11 m north
        assert tracker.on_fix(GeoCoordinate(10.0001, 20.0)) is False
        assert tracker.origin == GeoCoordinate(10.0, 20.0)
        # about 1.1 km north
        assert tracker.on_fix(GeoCoordinate(10.01, 20.0)) is True
        assert tracker.origin == GeoCoordinate(10.01, 20.0)

    def test_unchanged_fix_not_reanchored(self) -> None:
        tracker = PositionTracker(policy="follow")
        notified: List[None] = []
        tracker.changed.subscribe(lambda: notified.append(None))
        assert tracker.on_fix(GeoCoordinate(10.0, 20.0)) is True
        assert tracker.on_fix(GeoCoordinate(10.0, 20.0)) is False
        assert tracker.on_fix(GeoCoordinate(10.0, 20.0)) is False
        assert len(notified) == 1

    def test_threshold_measured_from_last_anchor(self) -> None:
        tracker = PositionTracker(policy="follow", reanchor_distance_m=100.0)
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        tracker.on_fix(GeoCoordinate(10.01, 20.0))
        assert tracker.on_fix(GeoCoordinate(10.0101, 20.0)) is False

    def test_threshold_ignores_fixed_origin(self) -> None:
        tracker = PositionTracker(
            policy="follow",
            reanchor_distance_m=100.0,
            fixed_origin=GeoCoordinate(0.0, 0.0),
        )
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        assert tracker.on_fix(GeoCoordinate(10.0001, 20.0)) is False
        assert tracker.origin == GeoCoordinate(0.0, 0.0)


class TestLocationErrors:
    """Errors are recoverable; status reflects them until a fix arrives."""

    def test_error_sets_unavailable(self) -> None:
        tracker = PositionTracker()
        tracker.on_error(LocationErrorKind.PERMISSION_DENIED)
        assert tracker.status is TrackerStatus.UNAVAILABLE
        assert tracker.error is not None
        assert tracker.error.kind is LocationErrorKind.PERMISSION_DENIED
        assert tracker.origin is None
        assert list(tracker.entities) == []

    def test_fix_after_error_recovers(self) -> None:
        tracker = PositionTracker()
        tracker.on_error(LocationErrorKind.TIMEOUT)
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        assert tracker.status is TrackerStatus.LOCATED
        assert tracker.error is None

    def test_error_notifies(self) -> None:
        tracker = PositionTracker()
        calls: List[int] = []
        tracker.changed.subscribe(lambda: calls.append(1))
        tracker.on_error(LocationErrorKind.POSITION_UNAVAILABLE)
        assert calls == [1]

    def test_error_after_fix_keeps_content(self) -> None:
        tracker = PositionTracker()
        tracker.on_fix(GeoCoordinate(10.0, 20.0))
        tracker.on_error(LocationErrorKind.TIMEOUT)
        assert tracker.status is TrackerStatus.LOCATED
        assert tracker.origin == GeoCoordinate(10.0, 20.0)
