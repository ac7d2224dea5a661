"""Tests for dyad_tools/mechanism_io.py - saving, loading and fitting mechanisms."""
from __future__ import annotations

import json
import math

import pytest
from pydantic import ValidationError

from configs.link_models import MechanismState
from dyad_tools.mechanism_io import fit_to_canvas
from dyad_tools.mechanism_io import load_mechanism
from dyad_tools.mechanism_io import save_mechanism
from dyad_tools.schemas import MechanismInputError


class TestSaveLoad:
    def test_round_trip(self, initial_fourbar, tmp_path):
        path = save_mechanism(initial_fourbar, tmp_path / 'nested' / 'fourbar.json')
        assert path.exists()

        loaded = load_mechanism(path)
        assert loaded.to_editor_dict() == MechanismState.model_validate(initial_fourbar).to_editor_dict()
        assert loaded.motor_edge.node_ids == (0, 2)
        assert loaded.target_id == 4

    def test_file_is_editor_json(self, crank_rocker, tmp_path):
        path = save_mechanism(crank_rocker, tmp_path / 'crank.json')
        data = json.loads(path.read_text())
        assert set(data) == {'nodes', 'edges', 'nodeCount'}
        assert data['edges'][0] == {'nodeIds': [0, 2], 'isMotor': True}
        assert data['nodes'][1]['isGround'] is True

    def test_missing_keys(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'nodes': []}))
        with pytest.raises(MechanismInputError, match='nodeCount'):
            load_mechanism(path)

    def test_invalid_document(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'nodes': [{'id': 0}], 'edges': [], 'nodeCount': 1}))
        with pytest.raises(ValidationError):
            load_mechanism(path)


class TestFitToCanvas:
    def test_centred_and_scaled(self, crank_rocker):
        state = MechanismState.model_validate(crank_rocker)
        fitted = fit_to_canvas(state, 600, 400, fill=0.5)

        xs = [node.x for node in fitted.nodes]
        ys = [node.y for node in fitted.nodes]
        assert (min(xs) + max(xs)) / 2 == pytest.approx(300.0)
        assert (min(ys) + max(ys)) / 2 == pytest.approx(200.0)
        assert max(ys) - min(ys) == pytest.approx(200.0)

    def test_link_ratios_kept(self, crank_rocker):
        state = MechanismState.model_validate(crank_rocker)
        fitted = fit_to_canvas(state, 600, 400)

        def length(s, a, b):
            return math.dist(s.node(a).position, s.node(b).position)

        ratio = length(fitted, 2, 3) / length(state, 2, 3)
        assert length(fitted, 0, 2) / length(state, 0, 2) == pytest.approx(ratio)
        assert length(fitted, 3, 1) / length(state, 3, 1) == pytest.approx(ratio)

    def test_input_untouched(self, crank_rocker):
        state = MechanismState.model_validate(crank_rocker)
        fit_to_canvas(state, 600, 400)
        assert state.node(3).position == (3.0, 3.0)
