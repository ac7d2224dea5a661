from __future__ import annotations

import math
import time
import traceback
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from configs.appconfig import CHALLENGE_N_STEPS
from configs.appconfig import DEFAULT_N_STEPS
from configs.appconfig import USER_DIR
from configs.logging_config import get_logger
from dyad_tools.kinematic import simulate_mechanism
from dyad_tools.kinematic import validate_mechanism
from dyad_tools.mechanism_io import fit_to_canvas
from dyad_tools.mechanism_io import load_mechanism
from dyad_tools.mechanism_io import save_mechanism
from dyad_tools.trajectory_scoring import evaluate_challenge
from structs.basic import make_crank_rocker
from structs.basic import make_initial_fourbar
from structs.basic import make_locking_fourbar

logger = get_logger(__name__)

app = FastAPI(title='dyadsim API')

# Simple CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

DEMOS = {
    'fourbar': make_initial_fourbar,
    'crank_rocker': make_crank_rocker,
    'locking': make_locking_fourbar,
}


@app.get('/')
def root():
    return {'message': 'dyadsim API is running'}


@app.get('/status')
def get_status():
    return {
        'status': 'operational',
        'message': 'dyadsim backend is running successfully',
    }


def sanitize_for_json(obj):
    """
    Recursively sanitize an object for JSON serialization.

    Converts inf/-inf to string "Infinity"/"-Infinity" and nan to null,
    so locked joints come back as [null, null].
    """
    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    elif isinstance(obj, bool):
        return obj
    elif isinstance(obj, float):
        if math.isinf(obj):
            return 'Infinity' if obj > 0 else '-Infinity'
        elif math.isnan(obj):
            return None
        return obj
    elif hasattr(obj, '__float__') and not isinstance(obj, int):  # numpy types
        val = float(obj)
        if math.isinf(val):
            return 'Infinity' if val > 0 else '-Infinity'
        elif math.isnan(val):
            return None
        return val
    return obj


def _mechanism_from_request(request: dict) -> dict:
    """The request may wrap the editor state under 'mechanism' or be the state itself."""
    mechanism = request.get('mechanism', request)
    if not isinstance(mechanism, dict):
        raise ValueError(f'Invalid request: expected dict, got {type(mechanism).__name__}')
    return mechanism


@app.post('/simulate')
def simulate_endpoint(request: dict):
    """
    Simulate one motor revolution.

    Request body:
        {
            "mechanism": {"nodes": [...], "edges": [...], "nodeCount": 4},
            "n_steps": 200           # Optional, defaults to 200
        }

    Returns:
        {
            "status": "complete" | "partial" | "invalid" | "error",
            "isValid": bool,
            "positions": [[[x, y] | [null, null], ...], ...],
            "nodeIds": [...],
            "path": [[node, a, b], ...],
            "hasLocking": bool,
            "lockingFrames": [bool, ...],
            "execution_time_ms": float
        }
    """
    try:
        start_time = time.perf_counter()
        mechanism = _mechanism_from_request(request)
        n_steps = request.get('n_steps', DEFAULT_N_STEPS)

        result = simulate_mechanism(mechanism, n_steps)

        response = result.to_dict()
        response['execution_time_ms'] = (time.perf_counter() - start_time) * 1000
        return sanitize_for_json(response)

    except Exception as e:
        logger.error('Error simulating mechanism: %s', e)
        return {
            'status': 'error',
            'isValid': False,
            'positions': [],
            'message': f'Failed to simulate mechanism: {str(e)}',
            'traceback': traceback.format_exc().split('\n'),
        }


@app.post('/validate')
def validate_endpoint(request: dict):
    """
    Check that a mechanism is dyadic with a single input, without simulating.

    Returns:
        {"status": "success", "valid": bool, "dof": int, "path": [...], "errors": [...]}
    """
    try:
        report = validate_mechanism(_mechanism_from_request(request))
        return {'status': 'success', **report}

    except Exception as e:
        logger.error('Error validating mechanism: %s', e)
        return {
            'status': 'error',
            'valid': False,
            'message': f'Validation failed: {str(e)}',
        }


@app.post('/score')
def score_endpoint(request: dict):
    """
    Score the target node's path against a challenge curve.

    Request body:
        {
            "mechanism": {...},
            "target_curve": [[x, y], ...],
            "target_node": 4,            # Optional, defaults to the isTarget node
            "canvas": [600, 400]         # Optional
        }
    """
    try:
        target_curve = request.get('target_curve')
        if not target_curve:
            return {'status': 'error', 'message': 'target_curve is required'}

        kwargs = {}
        if request.get('canvas'):
            kwargs['canvas'] = tuple(request['canvas'])

        result = evaluate_challenge(
            _mechanism_from_request(request),
            target_curve,
            target_node=request.get('target_node'),
            n_steps=request.get('n_steps', CHALLENGE_N_STEPS),
            **kwargs,
        )
        if not result['success']:
            return {'status': 'error', 'message': result['error']}

        return sanitize_for_json({
            'status': 'success',
            'score': result['score'],
            'path': result['path'],
        })

    except Exception as e:
        logger.error('Error scoring mechanism: %s', e)
        return {
            'status': 'error',
            'message': f'Scoring failed: {str(e)}',
        }


@app.post('/save')
def save_endpoint(request: dict):
    """Save a mechanism to the user directory"""
    try:
        mechanism = _mechanism_from_request(request)
        filename = request.get('filename') or f'mechanism_{datetime.now().strftime("%Y%m%d_%H%M%S")}'
        # Only a bare file name; directory parts would escape the user directory
        filename = Path(filename).name
        if not filename:
            raise ValueError('filename is empty')
        if not filename.endswith('.json'):
            filename += '.json'

        save_path = save_mechanism(mechanism, USER_DIR / filename)

        return {
            'status': 'success',
            'message': 'Mechanism saved successfully',
            'filename': filename,
            'path': str(save_path),
        }

    except Exception as e:
        return {
            'status': 'error',
            'message': f'Failed to save mechanism: {str(e)}',
        }


@app.get('/load/{filename}')
def load_endpoint(filename: str, width: float | None = None, height: float | None = None):
    """
    Load a mechanism from the user directory.

    When both width and height are given the mechanism is rescaled and
    centred to fit that canvas.
    """
    try:
        file_path = USER_DIR / Path(filename).name
        if not file_path.exists():
            return {
                'status': 'error',
                'message': f'File not found: {filename}',
            }

        state = load_mechanism(file_path)
        if width and height:
            state = fit_to_canvas(state, width, height)
        return {
            'status': 'success',
            'filename': file_path.name,
            'data': state.to_editor_dict(),
        }

    except Exception as e:
        logger.error('Error loading mechanism %s: %s', filename, e)
        return {
            'status': 'error',
            'message': f'Failed to load mechanism: {str(e)}',
        }


@app.get('/demo/{name}')
def load_demo(name: str):
    """Return one of the built-in mechanisms"""
    if name not in DEMOS:
        return {
            'status': 'error',
            'message': f'Unknown demo: {name}. Available: {list(DEMOS)}',
        }
    return {
        'status': 'success',
        'name': name,
        'data': DEMOS[name](),
    }
