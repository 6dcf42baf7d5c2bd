"""Directed graph storage for dependency charts.

This module provides the DirectedGraph class, which owns the vertex set and
the edge multiset that the cycle analyzer and the topological sequencer read.
"""

from collections.abc import Hashable, Iterator

from depcycle.graph.errors import UnknownVertexError, VertexNotFoundError
from depcycle.log_config import get_logger

logger = get_logger(__name__)


class DirectedGraph:
    """Directed graph with insertion-ordered vertices and counted edges.

    Vertices are opaque hashable labels. Edges are ordered (source, target)
    pairs; self-loops are allowed and parallel edges are recorded with their
    multiplicity, while adjacency queries report each neighbor once.

    Every successful mutation bumps ``revision`` so that derived results
    (cycle analyses, orderings) can tell when they were computed against an
    older graph.

    Thread-safety:
        This class is NOT thread-safe. Protect all method calls with external
        synchronization, or hand a ``copy()`` to the analysis components.

    Example:
        >>> graph = DirectedGraph()
        >>> graph.add_vertex("a")
        True
        >>> graph.add_vertex("b")
        True
        >>> graph.add_edge("a", "b")
        >>> graph.neighbors("a")
        {'b'}
    """

    def __init__(self):
        """Initialize an empty graph."""
        self._successors: dict[Hashable, dict[Hashable, int]] = {}
        self._predecessors: dict[Hashable, dict[Hashable, int]] = {}
        self._edges: list[tuple[Hashable, Hashable]] = []
        self._revision = 0

        logger.debug("directed_graph_initialized")

    def add_vertex(self, vertex: Hashable) -> bool:
        """Add a vertex if it is not already present.

        Args:
            vertex: Label of the vertex to add

        Returns:
            True if the vertex was added, False if it already existed
        """
        if vertex in self._successors:
            logger.debug("vertex_already_present", vertex=vertex)
            return False

        self._successors[vertex] = {}
        self._predecessors[vertex] = {}
        self._revision += 1

        logger.debug("vertex_added", vertex=vertex, vertex_count=len(self._successors))
        return True

    def add_edge(self, source: Hashable, target: Hashable) -> None:
        """Add a directed edge from ``source`` to ``target``.

        Both endpoints must already be vertices. Adding the same edge twice
        records it twice.

        Args:
            source: Vertex the edge leaves
            target: Vertex the edge enters

        Raises:
            UnknownVertexError: If either endpoint is not in the graph. The
                graph is left unchanged.
        """
        for endpoint in (source, target):
            if endpoint not in self._successors:
                logger.error(
                    "edge_references_unknown_vertex",
                    source=source,
                    target=target,
                    unknown=endpoint,
                )
                raise UnknownVertexError(endpoint)

        out_edges = self._successors[source]
        out_edges[target] = out_edges.get(target, 0) + 1
        in_edges = self._predecessors[target]
        in_edges[source] = in_edges.get(source, 0) + 1
        self._edges.append((source, target))
        self._revision += 1

        logger.debug(
            "edge_added",
            source=source,
            target=target,
            multiplicity=out_edges[target],
        )

    def _require(self, vertex: Hashable) -> None:
        if vertex not in self._successors:
            raise VertexNotFoundError(vertex)

    def neighbors(self, vertex: Hashable) -> set[Hashable]:
        """Return the vertices reachable from ``vertex`` over a single edge.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        self._require(vertex)
        return set(self._successors[vertex])

    def successors(self, vertex: Hashable) -> tuple[Hashable, ...]:
        """Return distinct edge targets of ``vertex`` in first-edge order.

        Same membership as ``neighbors()``, but ordered so that traversals
        over the graph are reproducible.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        self._require(vertex)
        return tuple(self._successors[vertex])

    def predecessors(self, vertex: Hashable) -> set[Hashable]:
        """Return the vertices with an edge into ``vertex``.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        self._require(vertex)
        return set(self._predecessors[vertex])

    def vertices(self) -> tuple[Hashable, ...]:
        """Return all vertices in insertion order."""
        return tuple(self._successors)

    def edges(self) -> tuple[tuple[Hashable, Hashable], ...]:
        """Return all edges, parallel edges included, in insertion order."""
        return tuple(self._edges)

    def edge_multiplicity(self, source: Hashable, target: Hashable) -> int:
        """Return how many times the edge (source, target) was added."""
        return self._successors.get(source, {}).get(target, 0)

    def contains_edge(self, source: Hashable, target: Hashable) -> bool:
        """Check whether at least one edge (source, target) exists."""
        return self.edge_multiplicity(source, target) > 0

    def has_self_loop(self, vertex: Hashable) -> bool:
        """Check whether ``vertex`` has an edge to itself.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        self._require(vertex)
        return vertex in self._successors[vertex]

    def out_degree(self, vertex: Hashable) -> int:
        """Return the number of edges leaving ``vertex``, counting parallel edges.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        self._require(vertex)
        return sum(self._successors[vertex].values())

    def in_degree(self, vertex: Hashable) -> int:
        """Return the number of edges entering ``vertex``, counting parallel edges.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        self._require(vertex)
        return sum(self._predecessors[vertex].values())

    @property
    def revision(self) -> int:
        """Mutation counter, incremented by every vertex or edge added."""
        return self._revision

    def get_stats(self) -> dict[str, int]:
        """Get statistics about the current graph.

        Returns:
            Dictionary with graph statistics including:
                - vertex_count: Number of vertices
                - edge_count: Number of edges, parallel edges included
                - distinct_edge_count: Number of distinct (source, target) pairs
                - self_loop_count: Number of vertices with an edge to themselves
                - revision: Current mutation counter
        """
        stats = {
            "vertex_count": len(self._successors),
            "edge_count": len(self._edges),
            "distinct_edge_count": sum(len(targets) for targets in self._successors.values()),
            "self_loop_count": sum(
                1 for vertex, targets in self._successors.items() if vertex in targets
            ),
            "revision": self._revision,
        }

        logger.debug("graph_stats_retrieved", **stats)

        return stats

    def copy(self) -> "DirectedGraph":
        """Create an independent copy of the graph.

        Returns:
            A new DirectedGraph with the same vertices and edges, in the same
            order. The copy starts its own revision counter.

        Example:
            >>> graph = DirectedGraph()
            >>> graph.add_vertex("a")
            True
            >>> snapshot = graph.copy()
            >>> snapshot.add_vertex("b")
            True
            >>> "b" in graph
            False
        """
        new_graph = DirectedGraph()
        for vertex in self._successors:
            new_graph.add_vertex(vertex)
        for source, target in self._edges:
            new_graph.add_edge(source, target)

        logger.debug(
            "directed_graph_copied",
            vertex_count=len(self._successors),
            edge_count=len(self._edges),
        )

        return new_graph

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._successors

    def __len__(self) -> int:
        return len(self._successors)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._successors)

    def __str__(self) -> str:
        vertices = ", ".join(str(vertex) for vertex in self._successors)
        edges = ", ".join(f"({source},{target})" for source, target in self._edges)
        return f"([{vertices}], [{edges}])"
