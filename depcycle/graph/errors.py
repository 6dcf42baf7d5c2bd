"""Exceptions raised by the graph components.

All errors derive from GraphError so callers can catch the whole family,
while each concrete kind keeps the offending vertex (or vertices) available
for reporting.
"""

from collections.abc import Hashable


class GraphError(Exception):
    """Base class for graph construction and analysis errors."""

    def __init__(self, message: str):
        """Initialize the exception with a descriptive message.

        Args:
            message: Description of the error
        """
        super().__init__(message)
        self.message = message


class UnknownVertexError(GraphError):
    """Exception raised when an edge references a vertex that was never added.

    The caller must add the vertex before connecting it; the edge is not
    recorded.
    """

    def __init__(self, vertex: Hashable):
        super().__init__(f"Cannot add edge: unknown vertex {vertex!r}")
        self.vertex = vertex


class VertexNotFoundError(GraphError):
    """Exception raised when a query names a vertex that is not in the graph.

    Distinguishes "not in the graph" from "in the graph but on no cycle".
    """

    def __init__(self, vertex: Hashable):
        super().__init__(f"Vertex not found in graph: {vertex!r}")
        self.vertex = vertex


class CyclicGraphError(GraphError):
    """Exception raised when a topological order is requested for a cyclic graph.

    This is a precondition violation, not a transient fault. Check the graph
    with CycleAnalyzer before sequencing it.

    Attributes:
        remaining: Vertices that could not be emitted, in insertion order
    """

    def __init__(self, remaining: tuple[Hashable, ...]):
        super().__init__(
            f"Cycle detected: {len(remaining)} vertex(es) could not be ordered",
        )
        self.remaining = remaining
