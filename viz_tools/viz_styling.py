"""
viz_styling.py - Styling configuration for the visualization module.
"""
from __future__ import annotations

from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # non-GUI backend, figures are written to disk
import matplotlib.pyplot as plt  # noqa: E402
import seaborn as sns  # noqa: E402
from pydantic import BaseModel  # noqa: E402
from pydantic import Field  # noqa: E402

sns.set_theme(style='whitegrid', context='notebook', palette='colorblind')


class PlotStyleConfig(BaseModel):
    """Pydantic configuration for plot styling (used by viz.py)"""

    # Colors
    color_palette: str = Field(default='colorblind', description='Seaborn color palette')
    ground_node_color: str = Field(default='#2C3E50', description='Color for ground nodes')
    free_node_color: str = Field(default='#E67E22', description='Color for movable nodes')
    link_color: str = Field(default='#7F8C8D', description='Color for links')
    motor_color: str = Field(default='#E74C3C', description='Color for the motor link')
    locked_color: str = Field(default='#C0392B', description='Marker color for locked frames')

    # Line and marker properties
    linewidth: float = Field(default=2.0, ge=0.1, le=10.0, description='Line width')
    markersize: float = Field(default=8.0, ge=1.0, le=50.0, description='Marker size')
    alpha: float = Field(default=0.9, ge=0.0, le=1.0, description='Transparency')

    # Display options
    show_grid: bool = Field(default=True, description='Show grid')
    show_legend: bool = Field(default=True, description='Show legend')
    equal_aspect: bool = Field(default=True, description='Use equal aspect ratio')
    invert_y: bool = Field(default=True, description='Editor coordinates grow downwards')

    # Output properties
    dpi: int = Field(default=150, ge=72, le=600, description='DPI for saved figures')
    bbox_inches: str = Field(default='tight', description='Bounding box for saved figures')


DEFAULT_PLOT_STYLE = PlotStyleConfig()


def _setup_plot_style(ax: plt.Axes, title: str, style: PlotStyleConfig = DEFAULT_PLOT_STYLE) -> None:
    """
    Setup common plot styling.

    Args:
        ax: Axes to style
        title: Plot title
        style: Style configuration
    """
    ax.set_xlabel('X')
    ax.set_ylabel('Y')
    ax.set_title(title)
    ax.grid(style.show_grid, zorder=-1)
    if style.equal_aspect:
        ax.set_aspect('equal', adjustable='datalim')
    if style.invert_y and not ax.yaxis_inverted():
        ax.invert_yaxis()
    if style.show_legend and ax.get_legend_handles_labels()[0]:
        ax.legend()


def _handle_output(
    fig: plt.Figure,
    title: str,
    out_path: str | Path,
    style: PlotStyleConfig = DEFAULT_PLOT_STYLE,
) -> Path:
    """
    Save the figure and close it.

    Args:
        fig: Figure to save
        title: Plot title (used as file name when out_path is a directory)
        out_path: Output file or directory
        style: Style configuration

    Returns:
        Path of the written image
    """
    out_path = Path(out_path)
    full_path = out_path / f'{title}.png' if out_path.is_dir() else out_path
    full_path.parent.mkdir(parents=True, exist_ok=True)

    fig.savefig(full_path, dpi=style.dpi, bbox_inches=style.bbox_inches)
    plt.close(fig)
    return full_path
