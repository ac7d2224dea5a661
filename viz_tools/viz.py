from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from configs.link_models import MechanismState
from dyad_tools.kinematic import as_mechanism_state
from dyad_tools.schemas import SimulationResult
from viz_tools.viz_styling import _handle_output
from viz_tools.viz_styling import _setup_plot_style
from viz_tools.viz_styling import DEFAULT_PLOT_STYLE
from viz_tools.viz_styling import PlotStyleConfig


def _draw_links(ax, state: MechanismState, frame_positions: np.ndarray, result: SimulationResult, style: PlotStyleConfig):
    for edge in state.edges:
        a, b = (result.index_of(nid) for nid in edge.node_ids)
        segment = frame_positions[[a, b]]
        if not np.all(np.isfinite(segment)):
            continue
        ax.plot(
            segment[:, 0], segment[:, 1],
            color=style.motor_color if edge.is_motor else style.link_color,
            linewidth=style.linewidth * (1.5 if edge.is_motor else 1.0),
            zorder=2,
        )


def _draw_nodes(ax, state: MechanismState, frame_positions: np.ndarray, result: SimulationResult, style: PlotStyleConfig):
    for node in state.nodes:
        x, y = frame_positions[result.index_of(node.id)]
        if not (np.isfinite(x) and np.isfinite(y)):
            continue
        ax.plot(
            x, y,
            marker='s' if node.is_ground else 'o',
            markersize=style.markersize,
            color=style.ground_node_color if node.is_ground else style.free_node_color,
            zorder=3,
        )
        ax.annotate(str(node.id), (x, y), textcoords='offset points', xytext=(6, 6))


def plot_node_paths(
    mechanism_state,
    result: SimulationResult,
    out_path: str | Path,
    node_ids: list[int] | None = None,
    title: str = 'Node Paths',
    style: PlotStyleConfig = DEFAULT_PLOT_STYLE,
) -> Path:
    """
    Plot the traced path of every movable node over one revolution.

    Locked frames break the line (NaN gaps) and are marked on the path of
    the last position before locking.

    Args:
        mechanism_state: Editor state the result was computed from
        result: Valid SimulationResult
        out_path: Output file or directory
        node_ids: Nodes to trace (default: all non-ground nodes)
        title: Plot title
        style: Style configuration

    Returns:
        Path of the written image
    """
    state = as_mechanism_state(mechanism_state)
    if not result.is_valid:
        raise ValueError(f'cannot plot an invalid simulation: {result.error_message}')

    if node_ids is None:
        node_ids = [node.id for node in sorted(state.nodes, key=lambda n: n.id) if not node.is_ground]

    fig, ax = plt.subplots(figsize=(10, 8))
    colors = sns.color_palette(style.color_palette, n_colors=max(len(node_ids), 1))

    for color, node_id in zip(colors, node_ids):
        path = result.trajectory(node_id)
        closed = np.vstack([path, path[:1]])
        ax.plot(closed[:, 0], closed[:, 1], color=color, linewidth=style.linewidth,
                alpha=style.alpha, label=f'node {node_id}')

    locked = np.asarray(result.locking_frames, dtype=bool)
    if locked.any():
        for node_id in node_ids:
            path = result.trajectory(node_id)
            finite = np.all(np.isfinite(path), axis=1)
            onset = np.flatnonzero(finite & np.roll(~finite, -1))
            ax.scatter(path[onset, 0], path[onset, 1], color=style.locked_color, marker='x', zorder=4)

    _draw_links(ax, state, result.positions[0], result, style)
    _draw_nodes(ax, state, result.positions[0], result, style)

    _setup_plot_style(ax, title, style)
    return _handle_output(fig, title, out_path, style)


def plot_frame(
    mechanism_state,
    result: SimulationResult,
    frame: int,
    out_path: str | Path,
    title: str | None = None,
    style: PlotStyleConfig = DEFAULT_PLOT_STYLE,
) -> Path:
    """
    Draw the mechanism at one simulated frame.

    Returns:
        Path of the written image
    """
    state = as_mechanism_state(mechanism_state)
    if not result.is_valid:
        raise ValueError(f'cannot plot an invalid simulation: {result.error_message}')
    if title is None:
        title = f'Frame {frame}' + (' (locked)' if result.locking_frames[frame] else '')

    fig, ax = plt.subplots(figsize=(8, 6))
    positions = result.positions[frame]
    _draw_links(ax, state, positions, result, style)
    _draw_nodes(ax, state, positions, result, style)

    _setup_plot_style(ax, title, style)
    return _handle_output(fig, title, out_path, style)
