"""
graph_tools.py - Mechanism topology: link graph, solve path and canonical order.

A dyadic mechanism is solvable one joint at a time: starting from the ground
joints and the crank tip, every remaining joint must become reachable from
exactly two already-placed neighbours. This module finds that order once per
topology (it does not depend on the motor angle) and relabels the mechanism
so the numeric solver can walk joints by increasing index.
"""
from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field

import networkx as nx
import numpy as np

from configs.link_models import MechanismState
from configs.logging_config import get_logger

logger = get_logger(__name__)

NOT_DYADIC_MESSAGE = 'Mechanism is not dyadic or has DOF other than 1'


@dataclass(frozen=True)
class SolveStep:
    """Place ``node`` from the two already-known ``neighbor_a`` and ``neighbor_b``."""
    node: int
    neighbor_a: int
    neighbor_b: int

    def as_list(self) -> list[int]:
        return [self.node, self.neighbor_a, self.neighbor_b]


@dataclass
class SolvePath:
    """Outcome of path planning; ``steps`` is empty when the plan failed."""
    steps: list[SolveStep]
    is_valid: bool
    reason: str | None = None

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def nodes(self) -> list[int]:
        return [step.node for step in self.steps]


@dataclass
class CanonicalMechanism:
    """
    Mechanism relabelled into solve order.

    Index 0 is the ground end of the motor, index 1 the crank tip, then the
    remaining ground joints, then the solved joints in dependency order.

    Attributes:
        order: canonical index -> editor node id
        index_of: editor node id -> canonical index
        adjacency: (n, n) 0/1 matrix in canonical order
        positions: (n, 2) initial layout in canonical order
        ground: canonical indices of ground joints
        motor: canonical motor pair, always (0, 1)
    """
    order: tuple[int, ...]
    index_of: dict[int, int]
    adjacency: np.ndarray
    positions: np.ndarray
    ground: tuple[int, ...]
    motor: tuple[int, int] = (0, 1)
    _rest_lengths: np.ndarray | None = field(default=None, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.order)

    @property
    def first_solved_index(self) -> int:
        return len(self.ground) + 1

    def earlier_neighbors(self, k: int) -> list[int]:
        """Canonical indices below ``k`` that share a link with ``k``."""
        return [int(j) for j in np.flatnonzero(self.adjacency[k, :k])]

    def rest_lengths(self) -> np.ndarray:
        """Pairwise distances of the initial layout, computed once."""
        if self._rest_lengths is None:
            diff = self.positions[:, None, :] - self.positions[None, :, :]
            self._rest_lengths = np.sqrt(np.sum(diff**2, axis=-1))
        return self._rest_lengths


# =============================================================================
# Link graph
# =============================================================================

def build_link_graph(state: MechanismState) -> nx.Graph:
    """
    Build an undirected link graph from the editor state.

    Nodes carry ``pos`` and ``ground``; edges carry ``motor``.
    """
    graph = nx.Graph()
    for node in sorted(state.nodes, key=lambda n: n.id):
        graph.add_node(node.id, pos=node.position, ground=node.is_ground)
    for edge in state.edges:
        a, b = edge.node_ids
        graph.add_edge(a, b, motor=edge.is_motor)
    return graph


def known_neighbors(link_graph: nx.Graph, node: int, known: Iterable[int]) -> list[int]:
    """Neighbours of ``node`` already in ``known``, in ascending id order."""
    known = set(known)
    return [nbr for nbr in sorted(link_graph.neighbors(node)) if nbr in known]


# =============================================================================
# Path planning
# =============================================================================

def find_solve_path(
    link_graph: nx.Graph,
    motor_nodes: tuple[int, int],
    ground_nodes: Iterable[int],
) -> SolvePath:
    """
    Find the order in which a dyadic mechanism's joints can be placed.

    Known joints start as the ground joints plus the crank tip ``motor_nodes[1]``.
    The unknown joints are scanned in ascending id order; the first one with
    exactly two known neighbours is placed, and the scan restarts from the
    lowest remaining id. This tie-break keeps the order deterministic.

    Args:
        link_graph: Undirected graph of joints and links
        motor_nodes: (ground end, crank tip)
        ground_nodes: Fixed joints

    Returns:
        SolvePath. Invalid when the crank tip is linked to a ground joint
        other than its own, when a scanned joint has more than two known
        neighbours (both overconstrained) or when a full pass places nothing
        (not dyadic, or DOF other than 1).
    """
    grounds = set(ground_nodes)
    known = grounds | {motor_nodes[1]}

    # Links among the starting joints constrain nothing the scan can place;
    # only the motor and ground-to-ground links are allowed there.
    motor_key = frozenset(motor_nodes)
    for a, b in sorted(tuple(sorted(edge)) for edge in link_graph.subgraph(known).edges):
        if frozenset((a, b)) == motor_key or (a in grounds and b in grounds):
            continue
        reason = f'link {[a, b]} joins the crank tip to a ground joint (overconstrained)'
        logger.info('Path planning failed: %s', reason)
        return SolvePath(steps=[], is_valid=False, reason=reason)

    unknowns = sorted(n for n in link_graph.nodes if n not in known)

    steps: list[SolveStep] = []
    while unknowns:
        for node in unknowns:
            neighbors = known_neighbors(link_graph, node, known)
            if len(neighbors) > 2:
                reason = f'node {node} has {len(neighbors)} known neighbours (overconstrained)'
                logger.info('Path planning failed: %s', reason)
                return SolvePath(steps=[], is_valid=False, reason=reason)
            if len(neighbors) == 2:
                step = SolveStep(node, neighbors[0], neighbors[1])
                logger.debug('Solve step %s', step.as_list())
                steps.append(step)
                known.add(node)
                unknowns.remove(node)
                break
        else:
            reason = f'no joint among {unknowns} has exactly two known neighbours'
            logger.info('Path planning failed: %s', reason)
            return SolvePath(steps=[], is_valid=False, reason=reason)

    return SolvePath(steps=steps, is_valid=True)


def get_solve_order(
    link_graph: nx.Graph,
    motor_nodes: tuple[int, int],
    ground_nodes: Iterable[int],
    path: SolvePath | None = None,
) -> list[int]:
    """
    Canonical node order: motor pair, remaining grounds, then solved joints.

    Raises:
        ValueError: If the mechanism has no valid solve path
    """
    if path is None:
        path = find_solve_path(link_graph, motor_nodes, ground_nodes)
    if not path.is_valid:
        raise ValueError(NOT_DYADIC_MESSAGE)

    other_grounds = sorted(g for g in set(ground_nodes) if g not in motor_nodes)
    return [motor_nodes[0], motor_nodes[1], *other_grounds, *path.nodes]


def canonicalize_mechanism(
    link_graph: nx.Graph,
    positions: Mapping[int, tuple[float, float]],
    motor_nodes: tuple[int, int],
    ground_nodes: Iterable[int],
    path: SolvePath | None = None,
) -> CanonicalMechanism:
    """
    Relabel the mechanism into canonical solve order.

    Args:
        link_graph: Undirected graph of joints and links
        positions: node id -> initial (x, y)
        motor_nodes: (ground end, crank tip)
        ground_nodes: Fixed joints
        path: Pre-computed solve path (planned here when omitted)

    Returns:
        CanonicalMechanism whose joint ``k`` only depends on joints below ``k``
    """
    ground_nodes = set(ground_nodes)
    order = get_solve_order(link_graph, motor_nodes, ground_nodes, path)
    if len(order) != link_graph.number_of_nodes():
        raise ValueError(
            f'solve order covers {len(order)} of {link_graph.number_of_nodes()} nodes',
        )

    adjacency = nx.to_numpy_array(link_graph, nodelist=order, weight=None, dtype=np.int8)
    canonical_positions = np.array([positions[node] for node in order], dtype=np.float64)
    ground = tuple(i for i, node in enumerate(order) if node in ground_nodes)

    return CanonicalMechanism(
        order=tuple(order),
        index_of={node: i for i, node in enumerate(order)},
        adjacency=adjacency,
        positions=canonical_positions,
        ground=ground,
    )
