"""
dyad_tools - Kinematic simulation of single-input dyadic planar linkages.

Key components:
  - simulate_mechanism: Full-revolution position solve (the main entry point)
  - validate_mechanism: Planner verdict and mobility count without solving
  - evaluate_challenge / score_path: Match a traced path against a target curve

Example usage:
    from dyad_tools import simulate_mechanism

    result = simulate_mechanism(editor_state, n_steps=360)
    if result.is_valid:
        coupler_path = result.trajectory(target_id)
        if result.has_locking:
            print(sum(result.locking_frames), 'frames locked')
"""
from __future__ import annotations

from dyad_tools.kinematic import count_degrees_of_freedom
from dyad_tools.kinematic import simulate
from dyad_tools.kinematic import simulate_mechanism
from dyad_tools.kinematic import solve_frame
from dyad_tools.kinematic import validate_mechanism
from dyad_tools.mechanism_io import load_mechanism
from dyad_tools.mechanism_io import save_mechanism
from dyad_tools.schemas import Frame
from dyad_tools.schemas import MechanismInputError
from dyad_tools.schemas import SimulationResult
from dyad_tools.trajectory_scoring import evaluate_challenge
from dyad_tools.trajectory_scoring import extract_target_path
from dyad_tools.trajectory_scoring import score_path

__all__ = [
    # Simulation
    'simulate_mechanism',
    'simulate',
    'solve_frame',
    'validate_mechanism',
    'count_degrees_of_freedom',
    # Data types
    'Frame',
    'SimulationResult',
    'MechanismInputError',
    # Challenge scoring
    'evaluate_challenge',
    'extract_target_path',
    'score_path',
    # Persistence
    'load_mechanism',
    'save_mechanism',
]
