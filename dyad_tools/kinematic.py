"""
kinematic.py - Position kinematics of single-input dyadic linkages.

This module provides:
  - Preparing the editor's mechanism state for the solver
  - Solving every joint position for one motor angle (solve_frame)
  - Simulating a full motor revolution (simulate_mechanism)
  - Mechanism validation without running any frames

Design notes:
  - The topology is planned and canonicalised once per call; every frame
    then walks joints by increasing canonical index
  - Link rest lengths are the distances of the initial layout
  - Locking is an expected per-frame outcome and never raises; only
    malformed input is turned into status="error" at the simulate boundary
  - Nothing is cached between calls
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import networkx as nx
import numpy as np
from pydantic import ValidationError

from configs.appconfig import DEFAULT_N_STEPS
from configs.appconfig import LOCKING_EPSILON
from configs.appconfig import MAX_N_STEPS
from configs.link_models import MechanismState
from configs.logging_config import get_logger
from dyad_tools.schemas import Frame
from dyad_tools.schemas import MechanismInputError
from dyad_tools.schemas import SimulationResult
from link.graph_tools import build_link_graph
from link.graph_tools import canonicalize_mechanism
from link.graph_tools import CanonicalMechanism
from link.graph_tools import find_solve_path
from link.graph_tools import NOT_DYADIC_MESSAGE
from link.graph_tools import SolvePath
from link.tools import find_third_point
from link.tools import Locked
from link.tools import LOCKED
from link.tools import NodePosition
from link.tools import Solved

logger = get_logger(__name__)


@dataclass
class PreparedMechanism:
    """Solver view of an editor state: graph, layout, motor pair and grounds."""
    state: MechanismState
    link_graph: nx.Graph
    positions: dict[int, tuple[float, float]]
    motor_nodes: tuple[int, int]
    ground_nodes: list[int]


# =============================================================================
# Input preparation
# =============================================================================

def as_mechanism_state(mechanism_state: MechanismState | dict) -> MechanismState:
    """Validate a raw editor dict; pass MechanismState through unchanged."""
    if isinstance(mechanism_state, MechanismState):
        return mechanism_state
    if not isinstance(mechanism_state, dict):
        raise MechanismInputError(
            f'expected a mechanism state dict, got {type(mechanism_state).__name__}',
        )
    return MechanismState.model_validate(mechanism_state)


def prepare_mechanism_data(mechanism_state: MechanismState | dict) -> PreparedMechanism:
    """
    Convert the editor state into the solver's inputs.

    The motor pair is ordered (ground end, crank tip).

    Raises:
        MechanismInputError: No motor edge, motor not touching ground, or
            motor joining two ground nodes
        pydantic.ValidationError: Malformed state dict
    """
    state = as_mechanism_state(mechanism_state)
    ground_nodes = state.ground_ids

    motor_edge = state.motor_edge
    if motor_edge is None:
        raise MechanismInputError('Mechanism has no motor edge')

    m0, m1 = motor_edge.node_ids
    grounded = set(ground_nodes)
    if m0 in grounded and m1 in grounded:
        raise MechanismInputError(f'Motor edge {[m0, m1]} joins two ground nodes')
    if m1 in grounded:
        m0, m1 = m1, m0
    if m0 not in grounded:
        raise MechanismInputError(f'Motor edge {[m0, m1]} must connect to a ground node')

    return PreparedMechanism(
        state=state,
        link_graph=build_link_graph(state),
        positions={node.id: node.position for node in state.nodes},
        motor_nodes=(m0, m1),
        ground_nodes=ground_nodes,
    )


def generate_thetas(n_steps: int) -> np.ndarray:
    """``n_steps`` motor angles evenly spaced over [0, 2*pi)."""
    return np.arange(n_steps, dtype=np.float64) * (2 * math.pi / n_steps)


# =============================================================================
# Per-angle solver
# =============================================================================

def solve_frame(
    canonical: CanonicalMechanism,
    theta: float,
    rest_lengths: np.ndarray | None = None,
) -> Frame:
    """
    Place every joint of a canonical mechanism for one motor angle.

    Ground joints keep their initial positions, the crank tip (index 1)
    circles index 0 at the motor's rest length, and every later joint is
    triangulated from its two lower-index neighbours. A joint whose anchors
    are locked is locked too; the rest of the frame is still solved.

    Args:
        canonical: Mechanism in canonical order
        theta: Motor angle in radians
        rest_lengths: (n, n) initial-layout distances (computed when omitted)

    Returns:
        Frame; ``locked`` is True when any joint could not be placed
    """
    if rest_lengths is None:
        rest_lengths = canonical.rest_lengths()

    initial = canonical.positions
    n = len(canonical)
    positions: list[NodePosition] = [LOCKED] * n

    for g in canonical.ground:
        positions[g] = Solved(float(initial[g, 0]), float(initial[g, 1]))

    radius = rest_lengths[0, 1]
    positions[1] = Solved(
        float(initial[0, 0] + radius * math.cos(theta)),
        float(initial[0, 1] + radius * math.sin(theta)),
    )

    locked = False
    for k in range(canonical.first_solved_index, n):
        neighbors = canonical.earlier_neighbors(k)
        if len(neighbors) != 2:
            logger.debug(
                'Node %s has %d earlier neighbours, expected 2',
                canonical.order[k], len(neighbors),
            )
            locked = True
            continue

        i, j = neighbors
        anchor_i, anchor_j = positions[i], positions[j]
        if isinstance(anchor_i, Locked) or isinstance(anchor_j, Locked):
            locked = True
            continue

        placed = find_third_point(
            anchor_i.as_tuple(),
            anchor_j.as_tuple(),
            float(rest_lengths[i, k]),
            float(rest_lengths[j, k]),
            tuple(initial[i]),
            tuple(initial[j]),
            tuple(initial[k]),
        )
        if isinstance(placed, Locked):
            locked = True
        positions[k] = placed

    return Frame(theta=float(theta), positions=tuple(positions), locked=locked)


def solve_mechanism(canonical: CanonicalMechanism, thetas) -> list[Frame]:
    """Solve one frame per motor angle; frames are independent of each other."""
    rest_lengths = canonical.rest_lengths()
    return [solve_frame(canonical, theta, rest_lengths) for theta in thetas]


def reorder_results(
    frames: list[Frame],
    canonical: CanonicalMechanism,
    node_ids: list[int],
) -> np.ndarray:
    """
    Map canonical frames back to caller node ids.

    Returns:
        (n_frames, len(node_ids), 2) array; column j belongs to node_ids[j]
    """
    if not frames:
        return np.empty((0, len(node_ids), 2), dtype=np.float64)
    canonical_array = np.stack([frame.as_array() for frame in frames])
    columns = [canonical.index_of[node_id] for node_id in node_ids]
    return canonical_array[:, columns, :]


# =============================================================================
# Main Entry Point
# =============================================================================

def simulate_mechanism(
    mechanism_state: MechanismState | dict,
    n_steps: int = DEFAULT_N_STEPS,
) -> SimulationResult:
    """
    Simulate one full revolution of the motor.

    This is the main entry point for the editor and the backend. It never
    raises: structural problems come back as ``is_valid=False`` and any
    unexpected failure as ``status="error"``.

    Args:
        mechanism_state: Editor state (dict or MechanismState)
        n_steps: Number of motor angles over [0, 2*pi)

    Returns:
        SimulationResult with positions indexed by node id column
    """
    try:
        if isinstance(n_steps, bool) or not isinstance(n_steps, (int, np.integer)):
            raise MechanismInputError(f'n_steps must be an integer, got {n_steps!r}')
        if not 0 < n_steps <= MAX_N_STEPS:
            raise MechanismInputError(f'n_steps must be in [1, {MAX_N_STEPS}], got {n_steps}')

        prepared = prepare_mechanism_data(mechanism_state)

        path = find_solve_path(prepared.link_graph, prepared.motor_nodes, prepared.ground_nodes)
        if not path.is_valid:
            logger.warning('Mechanism rejected: %s', path.reason)
            return SimulationResult(
                is_valid=False,
                status='invalid',
                error_message=NOT_DYADIC_MESSAGE,
            )

        canonical = canonicalize_mechanism(
            prepared.link_graph,
            prepared.positions,
            prepared.motor_nodes,
            prepared.ground_nodes,
            path,
        )
        if canonical.rest_lengths()[0, 1] < LOCKING_EPSILON:
            raise MechanismInputError('Motor link has zero length')

        frames = solve_mechanism(canonical, generate_thetas(int(n_steps)))

        node_ids = prepared.state.node_ids
        locking_frames = [frame.locked for frame in frames]
        has_locking = any(locking_frames)

        logger.info(
            'Simulated %d frames for %d nodes (%d locked)',
            len(frames), len(node_ids), sum(locking_frames),
        )

        return SimulationResult(
            is_valid=True,
            status='partial' if has_locking else 'complete',
            positions=reorder_results(frames, canonical, node_ids),
            node_ids=node_ids,
            locking_frames=locking_frames,
            has_locking=has_locking,
            path=list(path.steps),
        )

    except (MechanismInputError, ValidationError) as e:
        logger.warning('Simulation input error: %s', e)
        return SimulationResult(is_valid=False, status='error', error_message=str(e))
    except Exception as e:
        logger.exception('Unexpected error during mechanism simulation')
        return SimulationResult(
            is_valid=False,
            status='error',
            error_message=f'{type(e).__name__}: {e}',
        )


simulate = simulate_mechanism


# =============================================================================
# Mechanism Validation
# =============================================================================

def count_degrees_of_freedom(mechanism_state: MechanismState | dict) -> int:
    """
    Mobility of a pin-jointed bar linkage.

    Each movable joint has two coordinates; each link not joining two
    ground joints removes one.
    """
    state = as_mechanism_state(mechanism_state)
    grounded = set(state.ground_ids)
    movable = sum(1 for node in state.nodes if not node.is_ground)
    constraints = sum(
        1 for edge in state.edges
        if not (edge.node_ids[0] in grounded and edge.node_ids[1] in grounded)
    )
    return 2 * movable - constraints


def plan_mechanism(mechanism_state: MechanismState | dict) -> SolvePath:
    """Solve path of a mechanism state (raises on malformed input)."""
    prepared = prepare_mechanism_data(mechanism_state)
    return find_solve_path(prepared.link_graph, prepared.motor_nodes, prepared.ground_nodes)


def validate_mechanism(mechanism_state: MechanismState | dict) -> dict[str, Any]:
    """
    Check that a mechanism can be simulated, without solving any frame.

    Returns:
        {
            "valid": bool,
            "dof": int | None,
            "path": [[node, neighbor_a, neighbor_b], ...],
            "errors": [str, ...]
        }
    """
    errors: list[str] = []
    dof = None
    path_steps: list[list[int]] = []

    try:
        state = as_mechanism_state(mechanism_state)
        dof = count_degrees_of_freedom(state)
        path = plan_mechanism(state)
        if path.is_valid:
            path_steps = [step.as_list() for step in path.steps]
        else:
            errors.append(NOT_DYADIC_MESSAGE)
            if path.reason:
                errors.append(path.reason)
    except (MechanismInputError, ValidationError) as e:
        errors.append(str(e))

    if dof is not None and dof != 1 and not errors:
        logger.warning('Mechanism plans but mobility count is %d', dof)

    return {
        'valid': not errors,
        'dof': dof,
        'path': path_steps,
        'errors': errors,
    }
