"""
mechanism_io.py - Save and load editor mechanism documents.

Files use the editor's JSON shape (nodes / edges / nodeCount, indent 2).
"""
from __future__ import annotations

import json
from pathlib import Path

from configs.link_models import MechanismState
from configs.logging_config import get_logger
from dyad_tools.schemas import MechanismInputError

logger = get_logger(__name__)

REQUIRED_KEYS = ('nodes', 'edges', 'nodeCount')


def save_mechanism(state: MechanismState | dict, path: str | Path) -> Path:
    """
    Write a mechanism document to ``path``.

    Returns:
        The written path
    """
    if not isinstance(state, MechanismState):
        state = MechanismState.model_validate(state)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(state.to_editor_dict(), f, indent=2)

    logger.info('Saved mechanism with %d nodes to %s', len(state.nodes), path)
    return path


def load_mechanism(path: str | Path) -> MechanismState:
    """
    Read a mechanism document.

    Raises:
        MechanismInputError: File is not a mechanism document
        pydantic.ValidationError: Document fails model validation
    """
    path = Path(path)
    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict) or any(key not in data for key in REQUIRED_KEYS):
        raise MechanismInputError(f'Invalid file format: {path.name} needs {", ".join(REQUIRED_KEYS)}')

    return MechanismState.model_validate(data)


def fit_to_canvas(
    state: MechanismState,
    width: float,
    height: float,
    fill: float = 0.5,
) -> MechanismState:
    """
    Scale and centre a mechanism inside a width x height canvas.

    Uniform scaling keeps every link ratio, so the fitted mechanism moves
    exactly like the unscaled one up to scale.

    Returns:
        A new MechanismState; ``state`` is not modified
    """
    xs = [node.x for node in state.nodes]
    ys = [node.y for node in state.nodes]
    if not xs:
        return state.model_copy(deep=True)

    span_x = max(xs) - min(xs)
    span_y = max(ys) - min(ys)
    scales = [extent / span for extent, span in ((width, span_x), (height, span_y)) if span > 0]
    scale = min(scales) * fill if scales else 1.0

    offset_x = width / 2 - (min(xs) + max(xs)) / 2 * scale
    offset_y = height / 2 - (min(ys) + max(ys)) / 2 * scale

    fitted = state.model_copy(deep=True)
    for node in fitted.nodes:
        node.x = node.x * scale + offset_x
        node.y = node.y * scale + offset_y
    return fitted
