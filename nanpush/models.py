from pydantic import BaseModel, ConfigDict, Field
from typing import List


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    stale_probability: float = Field(0.0, ge=0.0, le=1.0)
    available: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class NodeTable(BaseModel):
    nodes: List[Node] = Field(..., min_length=1)


class Observation(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: str
    instance: str
    value: float
    timestamp_ms: int


DEFAULT_NODES = (
    Node(name="node1", available=32, total=128, stale_probability=0.01),
    Node(name="node2", available=64, total=128, stale_probability=0.1),
    Node(name="node3", available=96, total=128, stale_probability=0.0),
)
