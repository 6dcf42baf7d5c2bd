"""Graph module for cycle detection and topological ordering.

This module provides the directed graph container, strongly-connected-component
based cycle analysis and Kahn's algorithm for topological ordering.
"""

from depcycle.graph.cycle_analyzer import CycleAnalyzer
from depcycle.graph.directed_graph import DirectedGraph
from depcycle.graph.errors import (
    CyclicGraphError,
    GraphError,
    UnknownVertexError,
    VertexNotFoundError,
)
from depcycle.graph.topological import SequencerState, TieBreak, TopologicalSequencer

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
