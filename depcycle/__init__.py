"""depcycle: cycle detection and topological ordering for dependency charts."""

from depcycle.graph import (
    CycleAnalyzer,
    CyclicGraphError,
    DirectedGraph,
    GraphError,
    SequencerState,
    TieBreak,
    TopologicalSequencer,
    UnknownVertexError,
    VertexNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "CycleAnalyzer",
    "CyclicGraphError",
    "DirectedGraph",
    "GraphError",
    "SequencerState",
    "TieBreak",
    "TopologicalSequencer",
    "UnknownVertexError",
    "VertexNotFoundError",
]
