"""
link_models.py - Validated input models for the editor's mechanism state.

The editor hands the solver a plain JSON document:

    {
        "nodes": [{"id": 0, "x": 120, "y": 300, "isGround": true, "isTarget": false}, ...],
        "edges": [{"nodeIds": [0, 2], "isMotor": true}, ...],
        "nodeCount": 5
    }

These models accept the editor's camelCase keys as well as snake_case names.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator
from typing_extensions import Annotated


class NodeState(BaseModel):
    """A pin joint placed in the editor."""

    id: Annotated[int, Field(ge=0, description='Editor-assigned node identifier')]
    x: float = Field(description='Initial x position (editor pixels)')
    y: float = Field(description='Initial y position (editor pixels)')
    is_ground: bool = Field(default=False, alias='isGround', description='Pinned to the frame')
    is_target: bool = Field(default=False, alias='isTarget', description='Traced node for challenges')

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


class EdgeState(BaseModel):
    """A rigid link between two nodes; at most one link is the motor."""

    node_ids: tuple[int, int] = Field(alias='nodeIds', description='The two joined node ids')
    is_motor: bool = Field(default=False, alias='isMotor', description='Driven (crank) link')

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    @field_validator('node_ids')
    @classmethod
    def validate_node_ids(cls, v):
        if v[0] == v[1]:
            raise ValueError(f'edge joins node {v[0]} to itself')
        return v

    @property
    def key(self) -> frozenset[int]:
        return frozenset(self.node_ids)


class MechanismState(BaseModel):
    """The whole mechanism as drawn: nodes, links and the motor flag."""

    nodes: list[NodeState]
    edges: list[EdgeState] = Field(default_factory=list)
    node_count: int | None = Field(default=None, alias='nodeCount')

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    @model_validator(mode='after')
    def check_references(self):
        ids = [node.id for node in self.nodes]
        if len(set(ids)) != len(ids):
            raise ValueError('node ids must be unique')

        known = set(ids)
        seen: set[frozenset[int]] = set()
        for edge in self.edges:
            missing = [nid for nid in edge.node_ids if nid not in known]
            if missing:
                raise ValueError(f'edge {list(edge.node_ids)} references unknown node(s) {missing}')
            if edge.key in seen:
                raise ValueError(f'duplicate edge {list(edge.node_ids)}')
            seen.add(edge.key)

        n_motors = sum(1 for edge in self.edges if edge.is_motor)
        if n_motors > 1:
            raise ValueError(f'at most one motor edge is allowed, got {n_motors}')
        return self

    @property
    def node_ids(self) -> list[int]:
        return sorted(node.id for node in self.nodes)

    @property
    def ground_ids(self) -> list[int]:
        return sorted(node.id for node in self.nodes if node.is_ground)

    @property
    def motor_edge(self) -> EdgeState | None:
        return next((edge for edge in self.edges if edge.is_motor), None)

    @property
    def target_id(self) -> int | None:
        return next((node.id for node in self.nodes if node.is_target), None)

    def node(self, node_id: int) -> NodeState:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def to_editor_dict(self) -> dict[str, Any]:
        """Serialize back to the editor's camelCase document."""
        data = self.model_dump(by_alias=True)
        for edge in data['edges']:
            edge['nodeIds'] = list(edge['nodeIds'])
        if data['nodeCount'] is None:
            data['nodeCount'] = len(self.nodes)
        return data
