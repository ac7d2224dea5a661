"""
basic.py - Ready-made mechanisms in the editor's document shape.

Used by the backend's /demo endpoint, the visualisation helpers and the tests.
"""
from __future__ import annotations


def make_state(
    nodes: list[tuple[int, float, float, bool]],
    edges: list[tuple[int, int]],
    motor: tuple[int, int] | None = None,
    target: int | None = None,
) -> dict:
    """
    Build an editor mechanism document.

    Args:
        nodes: (id, x, y, is_ground) per node
        edges: (node_a, node_b) per link
        motor: The motor link, one of ``edges`` in either order
        target: Node flagged as the challenge target

    Returns:
        Dict in the editor's camelCase shape
    """
    motor_key = frozenset(motor) if motor is not None else None
    return {
        'nodes': [
            {'id': nid, 'x': x, 'y': y, 'isGround': is_ground, 'isTarget': nid == target}
            for nid, x, y, is_ground in nodes
        ],
        'edges': [
            {'nodeIds': [a, b], 'isMotor': frozenset((a, b)) == motor_key}
            for a, b in edges
        ],
        'nodeCount': len(nodes),
    }


def make_initial_fourbar(canvas_width: float = 800, canvas_height: float = 600) -> dict:
    """
    The editor's start-up mechanism: a crank-rocker four-bar with a coupler triangle.

    Two ground joints, three movable joints, the crank (ground 0 -> node 2)
    as motor and the coupler apex (node 4) as target, centred on the canvas
    at 30% of its smaller dimension.
    """
    cx = canvas_width // 2
    cy = canvas_height // 2
    size = min(canvas_width, canvas_height) * 0.3

    nodes = [
        (0, cx - size / 2, cy + size / 4, True),
        (1, cx + size / 2, cy + size / 4, True),
        (2, cx - size / 2, cy - size / 6, False),
        (3, cx + size / 2, cy - size / 3, False),
        (4, cx + size / 8, cy - size / 1.5, False),
    ]
    edges = [(0, 2), (2, 3), (3, 1), (3, 4), (4, 2)]
    return make_state(nodes, edges, motor=(0, 2), target=4)


def make_crank_rocker() -> dict:
    """
    Grashof crank-rocker: crank 1, coupler ~3.61, rocker ~3.16, ground 4.

    The crank turns fully without the linkage locking.
    """
    nodes = [
        (0, 0.0, 0.0, True),
        (1, 4.0, 0.0, True),
        (2, 1.0, 0.0, False),
        (3, 3.0, 3.0, False),
    ]
    edges = [(0, 2), (2, 3), (3, 1)]
    return make_state(nodes, edges, motor=(0, 2), target=3)


def make_locking_fourbar() -> dict:
    """
    Four-bar whose coupler (2.5) plus rocker (~1.80) is shorter than the
    crank-tip-to-ground distance once the crank passes roughly 101 degrees.
    """
    nodes = [
        (0, 0.0, 0.0, True),
        (1, 4.0, 0.0, True),
        (2, 1.0, 0.0, False),
        (3, 3.0, 1.5, False),
    ]
    edges = [(0, 2), (2, 3), (3, 1)]
    return make_state(nodes, edges, motor=(0, 2), target=3)
