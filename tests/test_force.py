"""Tests for FrictionForce."""

import pytest

from bouncy import FrictionForce


class TestAcceleration:
    def test_opposes_positive_motion(self):
        f = FrictionForce(friction=3000)
        assert f.acceleration(0.0, 10.0) == -3000

    def test_opposes_negative_motion(self):
        f = FrictionForce(friction=3000)
        assert f.acceleration(0.0, -10.0) == 3000

    def test_zero_at_rest(self):
        f = FrictionForce(friction=3000)
        assert f.acceleration(5.0, 0.0) == 0.0

    def test_independent_of_position(self):
        f = FrictionForce(friction=3000)
        assert f.acceleration(-1e6, 1.0) == f.acceleration(1e6, 1.0)

    def test_rejects_non_positive_friction(self):
        with pytest.raises(ValueError):
            FrictionForce(friction=0)


class TestEquilibrium:
    def test_default_threshold_from_min_visible_change(self):
        """One pixel of visible change * 0.75."""
        f = FrictionForce()
        assert f.velocity_threshold == 0.75
        assert f.is_at_equilibrium(0.0, 0.74)
        assert not f.is_at_equilibrium(0.0, 0.75)
        assert f.is_at_equilibrium(0.0, -0.5)

    def test_with_value_threshold_returns_new_force(self):
        f = FrictionForce(friction=1000)
        g = f.with_value_threshold(5.0)
        assert g.velocity_threshold == 5.0
        assert g.friction == 1000
        assert f.velocity_threshold == 0.75

    def test_is_dissipative(self):
        assert FrictionForce().dissipative
