"""
trajectory_scoring.py - Match a traced joint path against a target curve.

The challenge score compares shapes, not placement:
  1. The target curve is fitted into a canvas box
  2. The traced path is moved and scaled onto the target's centroid and
     RMS radius (Procrustes normalisation)
  3. The path is rotated in one-degree steps about its centroid; the angle
     minimising the symmetric chamfer distance wins
  4. score = round(400 * (0.5 - d / r)^2), zero once d / r >= 0.5

Design:
  - No simulation imports except evaluate_challenge (keeps scoring reusable)
  - Nearest-neighbour queries go through scipy.spatial.cKDTree
  - All functions take anything np.asarray accepts and work on (n, 2) arrays
"""
from __future__ import annotations

import numpy as np
from scipy.spatial import cKDTree

from configs.appconfig import CHALLENGE_CANVAS
from configs.appconfig import CHALLENGE_FILL
from configs.appconfig import CHALLENGE_N_STEPS
from configs.logging_config import get_logger

logger = get_logger(__name__)


def _as_curve(curve) -> np.ndarray:
    arr = np.asarray(curve, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f'curve must be shape (n, 2), got {arr.shape}')
    if len(arr) == 0:
        raise ValueError('curve is empty')
    return arr


def extract_target_path(result, node_id: int) -> np.ndarray:
    """
    Positions of one node over the frames that did not lock.

    Args:
        result: SimulationResult from simulate_mechanism
        node_id: Node to trace

    Returns:
        (m, 2) array, m <= n_steps
    """
    if not result.is_valid:
        return np.empty((0, 2), dtype=np.float64)
    trajectory = result.trajectory(node_id)
    keep = ~np.asarray(result.locking_frames, dtype=bool) & np.all(np.isfinite(trajectory), axis=1)
    return trajectory[keep]


def procrustes_stats(curve) -> tuple[float, float, float]:
    """Centroid (x, y) and RMS radius about it."""
    arr = _as_curve(curve)
    mean = arr.mean(axis=0)
    rms_radius = float(np.sqrt(np.mean(np.sum((arr - mean) ** 2, axis=1))))
    return float(mean[0]), float(mean[1]), rms_radius


def apply_procrustes(curve, mean_x: float, mean_y: float, rms_radius: float) -> np.ndarray:
    """Move ``curve`` onto the given centroid and scale it to the given RMS radius."""
    arr = _as_curve(curve)
    cx, cy, radius = procrustes_stats(arr)
    if radius == 0:
        raise ValueError('curve has zero RMS radius (all points coincide)')
    scale = rms_radius / radius
    return np.column_stack([
        mean_x + (arr[:, 0] - cx) * scale,
        mean_y + (arr[:, 1] - cy) * scale,
    ])


def rotate_curve(curve, angle: float) -> np.ndarray:
    """Rotate about the origin by ``angle`` degrees."""
    arr = _as_curve(curve)
    rad = np.radians(angle)
    c, s = np.cos(rad), np.sin(rad)
    return arr @ np.array([[c, s], [-s, c]])


def chamfer_distance(curve1, curve2) -> float:
    """
    Symmetric chamfer distance.

    Sum of nearest-neighbour distances in both directions divided by the
    total number of points.
    """
    a = _as_curve(curve1)
    b = _as_curve(curve2)
    d_ab, _ = cKDTree(b).query(a)
    d_ba, _ = cKDTree(a).query(b)
    return float((np.sum(d_ab) + np.sum(d_ba)) / (len(a) + len(b)))


def normalize_curve_for_rendering(curve, width: float, height: float, fill: float = CHALLENGE_FILL) -> np.ndarray:
    """Scale and centre ``curve`` into a width x height box, keeping its aspect ratio."""
    arr = _as_curve(curve)
    lo = arr.min(axis=0)
    span = arr.max(axis=0) - lo
    with np.errstate(divide='ignore'):
        scale = float(np.min(np.array([width, height]) / span)) * fill
    if not np.isfinite(scale):
        raise ValueError('curve has no extent to fit into the canvas')
    offset = (np.array([width, height]) - span * scale) / 2
    return (arr - lo) * scale + offset


def find_optimal_rotation(curve, target_curve, n_angles: int = 360) -> tuple[np.ndarray, float]:
    """
    Best rotation of ``curve`` onto ``target_curve``.

    The curve is scaled to the target's RMS radius, rotated about its centroid
    at ``n_angles`` evenly spaced angles and re-centred on the target.

    Returns:
        (aligned curve, chamfer distance). The distance of the unrotated
        input is the starting bound, so the result never gets worse than it.
    """
    target = _as_curve(target_curve)
    mean_x, mean_y, rms_radius = procrustes_stats(target)
    centered = apply_procrustes(curve, 0.0, 0.0, rms_radius)

    best_angle = 0.0
    best_distance = chamfer_distance(curve, target)
    for angle in np.arange(n_angles) * (360.0 / n_angles):
        candidate = apply_procrustes(rotate_curve(centered, angle), mean_x, mean_y, rms_radius)
        distance = chamfer_distance(candidate, target)
        if distance < best_distance:
            best_distance = distance
            best_angle = float(angle)

    aligned = apply_procrustes(rotate_curve(centered, best_angle), mean_x, mean_y, rms_radius)
    return aligned, best_distance


def score_path(
    solution_path,
    target_curve,
    canvas: tuple[float, float] = CHALLENGE_CANVAS,
) -> tuple[int, np.ndarray]:
    """
    Score a traced path against a target curve.

    Args:
        solution_path: (n, 2) traced positions
        target_curve: (m, 2) target points (any units)
        canvas: (width, height) box the target is fitted into

    Returns:
        (score, aligned path in canvas coordinates); score in [0, 100],
        100 for a perfect match
    """
    target = normalize_curve_for_rendering(target_curve, *canvas)
    mean_x, mean_y, rms_radius = procrustes_stats(target)
    normalized = apply_procrustes(solution_path, mean_x, mean_y, rms_radius)
    aligned, distance = find_optimal_rotation(normalized, target)

    ratio = distance / rms_radius
    score = 0 if ratio >= 0.5 else int(round((0.5 - ratio) ** 2 * 100 * 4))
    logger.debug('Challenge distance %.4f (ratio %.4f) -> score %d', distance, ratio, score)
    return score, aligned


def evaluate_challenge(
    mechanism_state,
    target_curve,
    target_node: int | None = None,
    canvas: tuple[float, float] = CHALLENGE_CANVAS,
    n_steps: int = CHALLENGE_N_STEPS,
) -> dict:
    """
    Simulate a mechanism and score its target node against a curve.

    Args:
        mechanism_state: Editor state (dict or MechanismState)
        target_curve: (m, 2) curve to reproduce
        target_node: Node to trace; defaults to the node flagged isTarget
        canvas: Box the target curve is fitted into
        n_steps: Simulation resolution

    Returns:
        {"success": bool, "score": int | None, "path": [[x, y], ...], "error": str | None}
    """
    from dyad_tools.kinematic import as_mechanism_state
    from dyad_tools.kinematic import simulate_mechanism

    state = as_mechanism_state(mechanism_state)
    if target_node is None:
        target_node = state.target_id
    if target_node is None:
        return {'success': False, 'score': None, 'path': [], 'error': 'No target node selected'}

    result = simulate_mechanism(state, n_steps)
    if not result.is_valid:
        return {'success': False, 'score': None, 'path': [], 'error': result.error_message}

    traced = extract_target_path(result, target_node)
    if len(traced) == 0:
        return {'success': False, 'score': None, 'path': [], 'error': 'Target node never moves freely'}

    try:
        score, aligned = score_path(traced, target_curve, canvas)
    except ValueError as e:
        return {'success': False, 'score': None, 'path': [], 'error': str(e)}

    return {'success': True, 'score': score, 'path': aligned.tolist(), 'error': None}
