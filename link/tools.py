"""
tools.py - Closed-form planar geometry for dyad solving.

Every movable joint of a dyadic mechanism is placed from two already-known
joints by intersecting two circles whose radii are the rest lengths of the
two links. This module holds that primitive and the small helpers it needs.

Positions are a tagged variant rather than raw NaN pairs:
  - Solved(x, y): the joint could be placed this frame
  - LOCKED: the geometry cannot close (or an anchor was itself locked)
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from configs.appconfig import LOCKING_EPSILON

Point = tuple[float, float]


@dataclass(frozen=True)
class Solved:
    """A joint position that satisfies its link constraints."""
    x: float
    y: float

    def as_tuple(self) -> Point:
        return (self.x, self.y)


class Locked:
    """Marker for a joint that could not be placed in the current frame."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'LOCKED'

    def __bool__(self) -> bool:
        return False

    def as_tuple(self) -> Point:
        return (math.nan, math.nan)


LOCKED = Locked()

NodePosition = Union[Solved, Locked]


def get_cart_distance(pos1, pos2) -> float:
    """
    Calculate the distance between two points in Cartesian coordinates.

    Parameters:
    pos1 (tuple): (x, y) of the first point
    pos2 (tuple): (x, y) of the second point

    Returns:
    float: Distance between the two points
    """
    return math.hypot(pos2[0] - pos1[0], pos2[1] - pos1[1])


def signed_area(origin, p1, p2) -> float:
    """
    Return the cross product (p1 - origin) x (p2 - origin).

    Positive when p2 lies counter-clockwise of the ray origin -> p1,
    negative when clockwise, zero when collinear.
    """
    dx1 = p1[0] - origin[0]
    dy1 = p1[1] - origin[1]
    dx2 = p2[0] - origin[0]
    dy2 = p2[1] - origin[1]
    return dx1 * dy2 - dy1 * dx2


def find_third_point(
    p1: Point,
    p2: Point,
    d1: float,
    d2: float,
    initial_p1: Point,
    initial_p2: Point,
    initial_p3: Point,
    eps: float = LOCKING_EPSILON,
) -> NodePosition:
    """
    Place a joint at distance d1 from p1 and d2 from p2.

    Of the (up to) two circle intersections, the one lying on the same side
    of the anchor line p1 -> p2 as the joint did in the initial layout is
    returned, so the mechanism never snaps to its mirror assembly.

    Args:
        p1, p2: Current positions of the two known anchors
        d1, d2: Rest lengths from the joint to p1 and p2
        initial_p1, initial_p2, initial_p3: Anchor and joint positions in the
            undeformed layout (fix the assembly branch)
        eps: Tolerance of the feasibility band

    Returns:
        Solved position, or LOCKED when |d1 - d2| <= |p2 - p1| <= d1 + d2
        does not hold (or the anchors coincide).
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    d = math.hypot(dx, dy)

    if d > d1 + d2 + eps or d < abs(d1 - d2) - eps:
        return LOCKED

    # Coincident anchors: every point of the circle is a solution
    if d < eps:
        return LOCKED

    # Fully extended: the joint sits between the anchors
    if abs(d - (d1 + d2)) < eps:
        ratio = d1 / (d1 + d2)
        return Solved(p1[0] + ratio * dx, p1[1] + ratio * dy)

    # Fully folded: the joint sits on the anchor line, beyond the shorter link.
    # The signed ratio puts it behind p1 when d2 > d1.
    if abs(d - abs(d1 - d2)) < eps:
        ratio = d1 / (d1 - d2)
        return Solved(p1[0] + ratio * dx, p1[1] + ratio * dy)

    a = (d1 * d1 - d2 * d2 + d * d) / (2 * d)
    h = math.sqrt(max(0.0, d1 * d1 - a * a))

    x0 = p1[0] + a * dx / d
    y0 = p1[1] + a * dy / d

    candidate_a = (x0 + h * dy / d, y0 - h * dx / d)
    candidate_b = (x0 - h * dy / d, y0 + h * dx / d)

    initial_side = signed_area(initial_p1, initial_p2, initial_p3)
    side_a = signed_area(p1, p2, candidate_a)

    if (initial_side >= 0) == (side_a >= 0):
        return Solved(*candidate_a)
    return Solved(*candidate_b)
