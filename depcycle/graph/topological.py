"""Topological ordering of acyclic graphs using Kahn's algorithm.

This module provides the TopologicalSequencer class. It keeps in-degree
counts per vertex, repeatedly emits a vertex whose in-degree is zero and
decrements the counts of its successors. If the ready queue drains before
every vertex was emitted, the graph has a cycle and the sequencer fails
instead of returning a partial order.
"""

import heapq
from collections import deque
from collections.abc import Callable, Hashable, Iterator
from enum import Enum
from typing import TYPE_CHECKING, Any

from depcycle.graph.directed_graph import DirectedGraph
from depcycle.graph.errors import CyclicGraphError
from depcycle.log_config import get_logger, new_run_id

if TYPE_CHECKING:
    from depcycle.config import AnalysisConfig

logger = get_logger(__name__)


class TieBreak(str, Enum):
    """Rule for choosing among several vertices that are ready at once."""

    INSERTION = "insertion"
    FIFO = "fifo"
    KEY = "key"


class SequencerState(Enum):
    """Sequencer state enumeration.

    Represents the outcome of the most recent ordering computation.
    """

    READY = "ready"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class _ReadyQueue:
    """Zero in-degree vertices waiting to be emitted."""

    def __init__(self, priority: Callable[[Hashable], Any] | None):
        self._priority = priority
        self._fifo: deque[Hashable] = deque()
        self._heap: list[tuple[Any, Hashable]] = []

    def push(self, vertex: Hashable) -> None:
        if self._priority is None:
            self._fifo.append(vertex)
        else:
            heapq.heappush(self._heap, (self._priority(vertex), vertex))

    def pop(self) -> Hashable:
        if self._priority is None:
            return self._fifo.popleft()
        return heapq.heappop(self._heap)[1]

    def __bool__(self) -> bool:
        return bool(self._fifo) or bool(self._heap)


class TopologicalSequencer:
    """Produces a topological order of a DirectedGraph.

    Each call to ``order()`` or ``iter_order()`` runs a fresh computation over
    a snapshot of the graph taken when the computation starts, so repeated
    calls never share iterator state and later graph mutations do not affect
    an ordering already in progress.

    Parallel edges count once. A self-loop makes its vertex impossible to
    emit, so it is reported as a cycle like any other.

    Example:
        >>> graph = DirectedGraph()
        >>> for v in ("a", "b", "c"):
        ...     _ = graph.add_vertex(v)
        >>> graph.add_edge("a", "b")
        >>> graph.add_edge("b", "c")
        >>> TopologicalSequencer(graph).order()
        ('a', 'b', 'c')
    """

    def __init__(
        self,
        graph: DirectedGraph,
        tie_break: TieBreak | str = TieBreak.INSERTION,
        key: Callable[[Hashable], Any] | None = None,
    ):
        """Initialize the sequencer.

        Args:
            graph: The graph to order. Expected to be acyclic.
            tie_break: Rule for choosing among simultaneously ready vertices
            key: Sort key for ``TieBreak.KEY``. Passing a key selects that rule;
                without one, ``TieBreak.KEY`` orders vertices by ``str(vertex)``
                so graphs with mixed label types stay comparable.
        """
        self.graph = graph
        self.tie_break = TieBreak(tie_break)
        self.key = key
        if key is not None:
            self.tie_break = TieBreak.KEY
        self._state = SequencerState.READY
        self.run_id: str | None = None

    @classmethod
    def from_config(
        cls,
        graph: DirectedGraph,
        config: "AnalysisConfig",
    ) -> "TopologicalSequencer":
        """Create a sequencer using the configured tie-break rule."""
        return cls(graph, tie_break=config.ordering.tie_break)

    @property
    def state(self) -> SequencerState:
        """Outcome of the most recent computation.

        READY from the moment a new computation is requested by ``order()``
        or ``iter_order()`` until it finishes, then EXHAUSTED or FAILED.
        """
        return self._state

    def _priority(self, position: dict[Hashable, int]) -> Callable[[Hashable], Any] | None:
        if self.tie_break is TieBreak.FIFO:
            return None
        if self.tie_break is TieBreak.INSERTION:
            return position.__getitem__

        key = self.key if self.key is not None else str
        return lambda vertex: (key(vertex), position[vertex])

    def iter_order(self) -> Iterator[Hashable]:
        """Lazily yield the vertices in topological order.

        The graph is snapshotted and the state reset to READY when this
        method is called, not when the first vertex is requested. The acyclic
        prefix of a cyclic graph is yielded before the failure is detected;
        use ``order()`` when an all-or-nothing result is needed.

        Returns:
            Iterator over vertices such that for every edge (u, v), u comes
            before v. Exhausting it raises CyclicGraphError if the graph
            contains a cycle.
        """
        self._state = SequencerState.READY
        self.run_id = new_run_id("order")

        vertices = self.graph.vertices()
        successors = {vertex: self.graph.successors(vertex) for vertex in vertices}
        in_degree = dict.fromkeys(vertices, 0)
        for targets in successors.values():
            for target in targets:
                in_degree[target] += 1

        # A contextvar binding cannot be held across yields; bind run_id on the logger
        log = logger.bind(run_id=self.run_id)
        log.debug(
            "topological_order_started",
            vertex_count=len(vertices),
            tie_break=self.tie_break.value,
        )

        return self._kahn(vertices, successors, in_degree, log)

    def _kahn(
        self,
        vertices: tuple[Hashable, ...],
        successors: dict[Hashable, tuple[Hashable, ...]],
        in_degree: dict[Hashable, int],
        log: Any,
    ) -> Iterator[Hashable]:
        position = {vertex: i for i, vertex in enumerate(vertices)}
        ready = _ReadyQueue(self._priority(position))
        for vertex in vertices:
            if in_degree[vertex] == 0:
                ready.push(vertex)

        emitted = 0
        while ready:
            vertex = ready.pop()
            emitted += 1
            log.debug("vertex_emitted", vertex=vertex, emitted=emitted)
            yield vertex

            for target in successors[vertex]:
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    ready.push(target)

        if emitted < len(vertices):
            remaining = tuple(vertex for vertex in vertices if in_degree[vertex] > 0)
            self._state = SequencerState.FAILED
            log.error(
                "cyclic_graph_detected",
                emitted=emitted,
                vertex_count=len(vertices),
                remaining=list(remaining),
            )
            raise CyclicGraphError(remaining)

        self._state = SequencerState.EXHAUSTED
        log.info("topological_order_computed", vertex_count=len(vertices))

    def __iter__(self) -> Iterator[Hashable]:
        return self.iter_order()

    def order(self) -> tuple[Hashable, ...]:
        """Return the complete topological order.

        Returns:
            Every vertex exactly once, each before all of its successors

        Raises:
            CyclicGraphError: If the graph contains a cycle. No partial order
                is returned.
        """
        return tuple(self.iter_order())
