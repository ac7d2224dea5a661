"""Tests for link/graph_tools.py - link graph, path planning and canonical order."""
from __future__ import annotations

import numpy as np
import pytest

from configs.link_models import MechanismState
from link.graph_tools import build_link_graph
from link.graph_tools import canonicalize_mechanism
from link.graph_tools import find_solve_path
from link.graph_tools import get_solve_order
from link.graph_tools import known_neighbors
from link.graph_tools import SolveStep
from structs.basic import make_state


def graph_of(state_dict):
    state = MechanismState.model_validate(state_dict)
    return state, build_link_graph(state)


@pytest.fixture
def two_triangle_state():
    """Two independent dyads hanging off the crank tip: 3 on (0, 2), 4 on (1, 2)."""
    nodes = [
        (0, 0.0, 0.0, True),
        (1, 4.0, 0.0, True),
        (2, 1.0, 0.0, False),
        (3, 0.5, 1.0, False),
        (4, 3.0, 2.0, False),
    ]
    edges = [(0, 2), (2, 4), (4, 1), (2, 3), (3, 0)]
    return make_state(nodes, edges, motor=(0, 2))


class TestLinkGraph:
    def test_attributes(self, crank_rocker):
        _, graph = graph_of(crank_rocker)
        assert sorted(graph.nodes) == [0, 1, 2, 3]
        assert graph.number_of_edges() == 3
        assert graph.nodes[1]['ground'] is True
        assert graph.nodes[3]['pos'] == (3.0, 3.0)
        assert graph.edges[0, 2]['motor'] is True
        assert graph.edges[2, 3]['motor'] is False

    def test_known_neighbors_sorted(self, crank_rocker):
        _, graph = graph_of(crank_rocker)
        assert known_neighbors(graph, 3, {2, 1, 0}) == [1, 2]
        assert known_neighbors(graph, 3, {0}) == []


class TestFindSolvePath:
    def test_fourbar(self, crank_rocker):
        _, graph = graph_of(crank_rocker)
        path = find_solve_path(graph, (0, 2), [0, 1])
        assert path.is_valid
        assert path.steps == [SolveStep(3, 1, 2)]

    def test_coupler_triangle(self, initial_fourbar):
        _, graph = graph_of(initial_fourbar)
        path = find_solve_path(graph, (0, 2), [0, 1])
        assert path.is_valid
        assert [step.as_list() for step in path.steps] == [[3, 1, 2], [4, 2, 3]]
        assert path.nodes == [3, 4]

    def test_lowest_id_first(self, two_triangle_state):
        _, graph = graph_of(two_triangle_state)
        path = find_solve_path(graph, (0, 2), [0, 1])
        assert [step.as_list() for step in path.steps] == [[3, 0, 2], [4, 1, 2]]

    def test_overconstrained(self, crank_rocker):
        """A third ground link on node 3 gives it three known neighbours."""
        crank_rocker['nodes'].append({'id': 5, 'x': 3.0, 'y': 5.0, 'isGround': True})
        crank_rocker['edges'].append({'nodeIds': [3, 5]})
        _, graph = graph_of(crank_rocker)
        path = find_solve_path(graph, (0, 2), [0, 1, 5])
        assert not path.is_valid
        assert path.steps == []
        assert 'overconstrained' in path.reason

    def test_crank_tip_linked_to_other_ground(self, crank_rocker):
        crank_rocker['edges'].append({'nodeIds': [2, 1]})
        _, graph = graph_of(crank_rocker)
        path = find_solve_path(graph, (0, 2), [0, 1])
        assert not path.is_valid
        assert path.steps == []
        assert '[1, 2]' in path.reason
        assert 'overconstrained' in path.reason

    def test_ground_to_ground_link_allowed(self, crank_rocker):
        crank_rocker['edges'].append({'nodeIds': [1, 0]})
        _, graph = graph_of(crank_rocker)
        path = find_solve_path(graph, (0, 2), [0, 1])
        assert path.is_valid
        assert path.steps == [SolveStep(3, 1, 2)]

    def test_isolated_node(self, crank_rocker):
        crank_rocker['nodes'].append({'id': 4, 'x': 9.0, 'y': 9.0})
        _, graph = graph_of(crank_rocker)
        path = find_solve_path(graph, (0, 2), [0, 1])
        assert not path.is_valid
        assert '4' in path.reason

    def test_dangling_node(self, crank_rocker):
        """A node hanging from a single link never gets a second known neighbour."""
        crank_rocker['nodes'].append({'id': 4, 'x': 5.0, 'y': 4.0})
        crank_rocker['edges'].append({'nodeIds': [3, 4]})
        _, graph = graph_of(crank_rocker)
        assert not find_solve_path(graph, (0, 2), [0, 1]).is_valid

    def test_nothing_to_solve(self):
        state = make_state([(0, 0.0, 0.0, True), (1, 1.0, 0.0, False)], [(0, 1)], motor=(0, 1))
        _, graph = graph_of(state)
        path = find_solve_path(graph, (0, 1), [0])
        assert path.is_valid
        assert len(path) == 0


class TestCanonicalize:
    def test_fourbar_order(self, crank_rocker):
        state, graph = graph_of(crank_rocker)
        positions = {node.id: node.position for node in state.nodes}
        canonical = canonicalize_mechanism(graph, positions, (0, 2), [0, 1])

        assert canonical.order == (0, 2, 1, 3)
        assert canonical.index_of == {0: 0, 2: 1, 1: 2, 3: 3}
        assert canonical.ground == (0, 2)
        assert canonical.motor == (0, 1)
        assert canonical.first_solved_index == 3
        assert len(canonical) == 4
        np.testing.assert_array_equal(canonical.positions[1], [1.0, 0.0])

    def test_earlier_neighbors(self, initial_fourbar):
        state, graph = graph_of(initial_fourbar)
        positions = {node.id: node.position for node in state.nodes}
        canonical = canonicalize_mechanism(graph, positions, (0, 2), [0, 1])

        assert canonical.order == (0, 2, 1, 3, 4)
        for k in range(canonical.first_solved_index, len(canonical)):
            assert len(canonical.earlier_neighbors(k)) == 2
        assert canonical.earlier_neighbors(4) == [1, 3]

    def test_adjacency_symmetric(self, initial_fourbar):
        state, graph = graph_of(initial_fourbar)
        positions = {node.id: node.position for node in state.nodes}
        canonical = canonicalize_mechanism(graph, positions, (0, 2), [0, 1])
        np.testing.assert_array_equal(canonical.adjacency, canonical.adjacency.T)
        assert canonical.adjacency.sum() == 2 * graph.number_of_edges()

    def test_rest_lengths(self, crank_rocker):
        state, graph = graph_of(crank_rocker)
        positions = {node.id: node.position for node in state.nodes}
        canonical = canonicalize_mechanism(graph, positions, (0, 2), [0, 1])
        lengths = canonical.rest_lengths()
        assert lengths[0, 1] == pytest.approx(1.0)
        assert lengths[1, 3] == pytest.approx(np.sqrt(13))
        assert canonical.rest_lengths() is lengths

    def test_extra_grounds_sorted(self):
        state_dict = make_state(
            [
                (0, 0.0, 0.0, False),
                (3, 0.0, 1.0, True),
                (7, 5.0, 0.0, True),
                (5, 4.0, 3.0, False),
            ],
            [(3, 0), (0, 5), (5, 7)],
            motor=(3, 0),
        )
        _, graph = graph_of(state_dict)
        assert get_solve_order(graph, (3, 0), [3, 7]) == [3, 0, 7, 5]

    def test_invalid_plan_raises(self, crank_rocker):
        crank_rocker['nodes'].append({'id': 4, 'x': 9.0, 'y': 9.0})
        state, graph = graph_of(crank_rocker)
        positions = {node.id: node.position for node in state.nodes}
        with pytest.raises(ValueError, match='not dyadic'):
            canonicalize_mechanism(graph, positions, (0, 2), [0, 1])
