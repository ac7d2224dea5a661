"""
schemas.py - Data structures returned by the kinematic solver.

Dataclasses used across dyad_tools modules.
"""
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Literal

import numpy as np

from link.graph_tools import SolveStep
from link.tools import NodePosition

SimulationStatus = Literal['complete', 'partial', 'invalid', 'error']


class MechanismInputError(ValueError):
    """The mechanism state cannot be turned into a solvable problem."""


@dataclass(frozen=True)
class Frame:
    """All joint positions (canonical order) at one motor angle."""
    theta: float
    positions: tuple[NodePosition, ...]
    locked: bool

    def as_array(self) -> np.ndarray:
        """(n, 2) array, NaN rows for locked joints."""
        return np.array([p.as_tuple() for p in self.positions], dtype=np.float64)


@dataclass
class SimulationResult:
    """
    Result of simulating one full motor revolution.

    ``positions[i, j]`` is the position of node ``node_ids[j]`` at frame ``i``
    (NaN where the joint locked). Columns follow ascending node id, so
    editor ids that are dense from 0 index the array directly.
    """
    is_valid: bool
    status: SimulationStatus
    positions: np.ndarray = field(default_factory=lambda: np.empty((0, 0, 2)))
    node_ids: list[int] = field(default_factory=list)
    locking_frames: list[bool] = field(default_factory=list)
    has_locking: bool = False
    path: list[SolveStep] = field(default_factory=list)
    error_message: str | None = None

    @property
    def n_steps(self) -> int:
        return int(self.positions.shape[0]) if self.is_valid else 0

    def index_of(self, node_id: int) -> int:
        return self.node_ids.index(node_id)

    def trajectory(self, node_id: int) -> np.ndarray:
        """(n_steps, 2) path of one node, NaN rows where it locked."""
        return self.positions[:, self.index_of(node_id), :]

    def to_dict(self) -> dict:
        """Editor-facing payload (camelCase keys, NaN kept as float)."""
        data = {
            'isValid': self.is_valid,
            'positions': self.positions.tolist() if self.is_valid else [],
            'status': self.status,
        }
        if self.is_valid:
            data.update({
                'nodeIds': list(self.node_ids),
                'path': [step.as_list() for step in self.path],
                'hasLocking': self.has_locking,
                'lockingFrames': list(self.locking_frames),
            })
        else:
            data['errorMessage'] = self.error_message
        return data
