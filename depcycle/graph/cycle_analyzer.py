"""Cycle analysis based on strongly connected components.

This module provides the CycleAnalyzer class, which answers "is there a
cycle", "which vertices lie on one" and "which cycle group holds this
vertex" from a single SCC computation, without enumerating individual
simple cycles.
"""

from collections.abc import Hashable

from depcycle.graph.directed_graph import DirectedGraph
from depcycle.graph.errors import VertexNotFoundError
from depcycle.log_config import analysis_run, get_logger

logger = get_logger(__name__)


def strongly_connected_components(graph: DirectedGraph) -> list[list[Hashable]]:
    """Compute the strongly connected components of a graph.

    Iterative Tarjan so that long dependency chains do not hit the
    interpreter's recursion limit. Roots are visited in vertex insertion
    order and successors in first-edge order, so the result is
    deterministic for a given graph.

    Args:
        graph: The graph to decompose

    Returns:
        Components in the order Tarjan completes them (reverse topological
        order of the condensation). Every vertex appears in exactly one.

    Complexity:
        Time: O(V + E), parallel edges counted once
        Space: O(V)
    """
    index: dict[Hashable, int] = {}
    lowlink: dict[Hashable, int] = {}
    on_stack: set[Hashable] = set()
    stack: list[Hashable] = []
    components: list[list[Hashable]] = []
    counter = 0

    for root in graph.vertices():
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        # Each frame holds a vertex and the iterator over its remaining successors
        work = [(root, iter(graph.successors(root)))]

        while work:
            node, children = work[-1]
            for child in children:
                if child not in index:
                    index[child] = lowlink[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(graph.successors(child))))
                    break
                if child in on_stack:
                    lowlink[node] = min(lowlink[node], index[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

                if lowlink[node] == index[node]:
                    component = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    components.append(component)

    return components


class CycleAnalyzer:
    """Cycle detection and cycle grouping for a DirectedGraph.

    A vertex lies on a cycle if and only if its strongly connected component
    has more than one member or the vertex has a self-loop. Each such
    component is a cycle group; groups are disjoint and together cover every
    cycle vertex. A vertex with a self-loop that also sits on a larger cycle
    is reported once, as part of the larger group.

    Components are computed on the first query and cached. The cache is not
    invalidated when the graph changes: queries on a stale analysis log a
    warning and answer from the cache until ``refresh()`` is called.

    Example:
        >>> graph = DirectedGraph()
        >>> for v in ("a", "b", "c"):
        ...     _ = graph.add_vertex(v)
        >>> graph.add_edge("a", "b")
        >>> graph.add_edge("b", "a")
        >>> analyzer = CycleAnalyzer(graph)
        >>> analyzer.has_cycle()
        True
        >>> sorted(analyzer.cycle_group_containing("a"))
        ['a', 'b']
        >>> analyzer.cycle_group_containing("c")
        frozenset()
    """

    def __init__(self, graph: DirectedGraph):
        """Initialize the analyzer for a graph.

        Args:
            graph: The graph to analyze
        """
        self.graph = graph
        self._components: tuple[frozenset[Hashable], ...] | None = None
        self._cycle_groups: tuple[frozenset[Hashable], ...] = ()
        self._group_of: dict[Hashable, frozenset[Hashable]] = {}
        self._computed_revision: int | None = None
        # run_id of the SCC computation that produced the cached results
        self.run_id: str | None = None

    def refresh(self) -> None:
        """Discard cached results so the next query recomputes them."""
        logger.debug("cycle_analysis_refreshed", revision=self.graph.revision)
        self._components = None
        self._cycle_groups = ()
        self._group_of = {}
        self._computed_revision = None
        self.run_id = None

    @property
    def is_stale(self) -> bool:
        """Check if the graph changed since the cached analysis was computed."""
        return (
            self._computed_revision is not None
            and self._computed_revision != self.graph.revision
        )

    def _analyze(self) -> None:
        if self._components is not None:
            if self.is_stale:
                logger.warning(
                    "cycle_analysis_stale",
                    analysis_run_id=self.run_id,
                    computed_revision=self._computed_revision,
                    graph_revision=self.graph.revision,
                    message="Graph changed since analysis. Call refresh() to recompute.",
                )
            return

        with analysis_run("scc") as run_id:
            position = {vertex: i for i, vertex in enumerate(self.graph.vertices())}
            logger.debug(
                "strongly_connected_components_started",
                vertex_count=len(position),
                revision=self.graph.revision,
            )

            components = [
                frozenset(members)
                for members in sorted(
                    strongly_connected_components(self.graph),
                    key=lambda members: min(position[m] for m in members),
                )
            ]

            cycle_groups = []
            group_of = {}
            for component in components:
                if len(component) > 1 or any(self.graph.has_self_loop(v) for v in component):
                    cycle_groups.append(component)
                    for vertex in component:
                        group_of[vertex] = component

            self._components = tuple(components)
            self._cycle_groups = tuple(cycle_groups)
            self._group_of = group_of
            self._computed_revision = self.graph.revision
            self.run_id = run_id

            logger.info(
                "strongly_connected_components_computed",
                vertex_count=len(position),
                component_count=len(components),
                cycle_group_count=len(cycle_groups),
                cycle_vertex_count=len(group_of),
            )

    def has_cycle(self) -> bool:
        """Check whether the graph contains at least one cycle."""
        self._analyze()
        return bool(self._cycle_groups)

    def cycle_vertices(self) -> frozenset[Hashable]:
        """Return every vertex that lies on at least one cycle."""
        self._analyze()
        return frozenset(self._group_of)

    def cycle_group_containing(self, vertex: Hashable) -> frozenset[Hashable]:
        """Return the cycle group that contains ``vertex``.

        Args:
            vertex: Vertex to look up

        Returns:
            The vertex's cycle group, or an empty frozenset if the vertex is
            in the graph but on no cycle

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        if vertex not in self.graph:
            logger.error("cycle_query_for_unknown_vertex", vertex=vertex)
            raise VertexNotFoundError(vertex)

        self._analyze()
        return self._group_of.get(vertex, frozenset())

    def detect_cycles_containing_vertex(self, vertex: Hashable) -> bool:
        """Check whether ``vertex`` lies on a cycle.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        return bool(self.cycle_group_containing(vertex))

    def all_cycle_groups(self) -> tuple[frozenset[Hashable], ...]:
        """Return the disjoint cycle groups of the graph.

        Groups are ordered by the insertion position of their earliest
        added member.
        """
        self._analyze()
        return self._cycle_groups

    def strongly_connected_components(self) -> tuple[frozenset[Hashable], ...]:
        """Return all strongly connected components, trivial ones included.

        Uses the same ordering as ``all_cycle_groups()``.
        """
        self._analyze()
        return self._components
