"""
Unit tests for FusionAhrs. Skips when imufusion is unavailable.
"""

import pytest

try:
    import imufusion  # noqa: F401

    IMUFUSION_AVAILABLE = True
except ImportError:
    IMUFUSION_AVAILABLE = False

if IMUFUSION_AVAILABLE:
    from geoanchor.fusion_ahrs import FusionAhrs
else:
    FusionAhrs = None

GRAVITY = (0.0, 0.0, 9.80665)


@pytest.mark.skipif(not IMUFUSION_AVAILABLE, reason="imufusion not installed")
class TestFusionAhrs:
    """Updates and angle ranges."""

    def test_initialized_false_before_update(self) -> None:
        ahrs = FusionAhrs(gain=0.5)
        assert ahrs.initialized is False

    def test_one_update_sets_initialized(self) -> None:
        ahrs = FusionAhrs(gain=0.5)
        ahrs.update(GRAVITY, (0.0, 0.0, 0.0), 0.01)
        assert ahrs.initialized is True

    def test_yaw_deg_in_range_0_360(self) -> None:
        ahrs = FusionAhrs(gain=0.5)
        for _ in range(10):
            ahrs.update(GRAVITY, (0.0, 0.0, -5.0), 0.01)
        assert 0 <= ahrs.yaw_deg < 360

    def test_with_magnetometer(self) -> None:
        ahrs = FusionAhrs(gain=0.5)
        for _ in range(10):
            ahrs.update(GRAVITY, (0.0, 0.0, 0.0), 0.01, magnetometer=(20.0, 0.0, -40.0))
        assert ahrs.initialized is True
        assert 0 <= ahrs.yaw_deg < 360
        assert -180 <= ahrs.pitch_deg <= 180
        assert -180 <= ahrs.roll_deg <= 180


@pytest.mark.skipif(IMUFUSION_AVAILABLE, reason="imufusion is installed")
class TestFusionAhrsWithoutImufusion:
    """When imufusion is not installed, constructor raises."""

    def test_init_raises_when_imufusion_missing(self) -> None:
        from geoanchor.fusion_ahrs import FusionAhrs

        with pytest.raises(RuntimeError, match="imufusion not installed"):
            FusionAhrs(gain=0.5)
