"""Tests for link/tools.py - the two-circle intersection primitive."""
from __future__ import annotations

import math

import numpy as np
import pytest

from link.tools import find_third_point
from link.tools import get_cart_distance
from link.tools import LOCKED
from link.tools import Locked
from link.tools import signed_area
from link.tools import Solved


def check_distances(placed, p1, p2, d1, d2, tol=1e-9):
    assert isinstance(placed, Solved)
    assert get_cart_distance(p1, placed.as_tuple()) == pytest.approx(d1, abs=tol)
    assert get_cart_distance(p2, placed.as_tuple()) == pytest.approx(d2, abs=tol)


class TestLockedMarker:
    def test_singleton(self):
        assert Locked() is LOCKED

    def test_falsy_and_nan(self):
        assert not LOCKED
        assert repr(LOCKED) == 'LOCKED'
        x, y = LOCKED.as_tuple()
        assert math.isnan(x) and math.isnan(y)


class TestSignedArea:
    def test_orientation(self):
        assert signed_area((0, 0), (1, 0), (0, 1)) > 0
        assert signed_area((0, 0), (1, 0), (0, -1)) < 0
        assert signed_area((0, 0), (1, 0), (2, 0)) == 0


class TestFindThirdPoint:
    def test_right_triangle_keeps_initial_side(self):
        p1, p2 = (0.0, 0.0), (4.0, 0.0)
        placed = find_third_point(p1, p2, 3.0, 5.0, p1, p2, (0.0, 3.0))
        assert placed.as_tuple() == pytest.approx((0.0, 3.0))

    def test_mirror_layout_picks_other_candidate(self):
        p1, p2 = (0.0, 0.0), (4.0, 0.0)
        placed = find_third_point(p1, p2, 3.0, 5.0, p1, p2, (0.0, -3.0))
        assert placed.y == pytest.approx(-3.0)

    @pytest.mark.parametrize('angle', [0.0, 37.0, 90.0, 181.0, 300.0])
    def test_branch_follows_rotated_anchors(self, angle):
        """Rotating the whole triangle keeps the joint on the same side of p1 -> p2."""
        initial_p1, initial_p2, initial_p3 = (0.0, 0.0), (3.1, 0.0), (1.0, 1.7)
        d1 = get_cart_distance(initial_p1, initial_p3)
        d2 = get_cart_distance(initial_p2, initial_p3)

        rad = math.radians(angle)
        p1 = (5.0, -2.0)
        p2 = (p1[0] + 3.1 * math.cos(rad), p1[1] + 3.1 * math.sin(rad))
        placed = find_third_point(p1, p2, d1, d2, initial_p1, initial_p2, initial_p3)

        check_distances(placed, p1, p2, d1, d2)
        assert np.sign(signed_area(p1, p2, placed.as_tuple())) == np.sign(
            signed_area(initial_p1, initial_p2, initial_p3),
        )

    def test_anchors_too_far_apart(self):
        assert find_third_point((0, 0), (10, 0), 1.0, 1.0, (0, 0), (1, 0), (0.5, 0.5)) is LOCKED

    def test_anchors_too_close(self):
        assert find_third_point((0, 0), (1, 0), 5.0, 1.0, (0, 0), (4, 0), (0, 5)) is LOCKED

    def test_coincident_anchors(self):
        assert find_third_point((2, 2), (2, 2), 1.0, 1.0, (0, 0), (1, 0), (0.5, 0.8)) is LOCKED

    def test_fully_extended(self):
        placed = find_third_point((0, 0), (4, 0), 1.0, 3.0, (0, 0), (4, 0), (1, 1))
        assert placed.as_tuple() == pytest.approx((1.0, 0.0))

    def test_fully_folded_longer_first_link(self):
        placed = find_third_point((0, 0), (2, 0), 3.0, 1.0, (0, 0), (2, 0), (2, 1))
        assert placed.as_tuple() == pytest.approx((3.0, 0.0))
        check_distances(placed, (0, 0), (2, 0), 3.0, 1.0)

    def test_fully_folded_longer_second_link(self):
        """The joint sits behind p1 when the second link is the longer one."""
        placed = find_third_point((0, 0), (2, 0), 1.0, 3.0, (0, 0), (2, 0), (-1, 1))
        assert placed.as_tuple() == pytest.approx((-1.0, 0.0))
        check_distances(placed, (0, 0), (2, 0), 1.0, 3.0)

    def test_within_tolerance_band_is_solved(self):
        placed = find_third_point((0, 0), (4 + 1e-12, 0), 1.0, 3.0, (0, 0), (4, 0), (1, 1))
        assert isinstance(placed, Solved)
