"""Unit tests for the logging configuration module.

This test module validates the structured logging configuration, the
per-run ``run_id`` binding, and the events emitted by the graph components.
"""

import json
import logging

import pytest
import structlog

from depcycle.graph.cycle_analyzer import CycleAnalyzer
from depcycle.graph.directed_graph import DirectedGraph
from depcycle.graph.errors import CyclicGraphError
from depcycle.graph.topological import TopologicalSequencer
from depcycle.log_config import analysis_run, configure_logging, get_logger, new_run_id


def json_events(caplog) -> list[dict]:
    return [json.loads(record.getMessage()) for record in caplog.records]


class TestLoggingConfiguration:
    """Test cases for logging configuration."""

    def test_configure_logging_info_level(self):
        """Test logging configuration with INFO level."""
        configure_logging(level="INFO", json_logs=True)
        assert logging.getLogger("depcycle").level == logging.INFO

    def test_configure_logging_lower_case_level(self):
        """Test that level names are case-insensitive."""
        configure_logging(level="debug", json_logs=True)
        assert logging.getLogger("depcycle").level == logging.DEBUG

    def test_configure_logging_invalid_level(self):
        """Test logging configuration with invalid level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", json_logs=True)

    def test_configure_logging_console_renderer(self):
        """Test logging configuration with console renderer."""
        configure_logging(level="INFO", json_logs=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_configure_logging_json_renderer(self):
        """Test that JSON output is the default renderer."""
        configure_logging(level="INFO")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)


class TestRunId:
    """Test cases for run ID generation and binding."""

    def setup_method(self):
        """Set up test environment before each test."""
        configure_logging(level="INFO", json_logs=True)
        structlog.contextvars.clear_contextvars()

    def teardown_method(self):
        """Clean up after each test."""
        structlog.contextvars.clear_contextvars()

    def test_new_run_id_format(self):
        """Test that run IDs carry their kind and are unique."""
        first = new_run_id("scc")
        second = new_run_id("scc")

        assert first.startswith("scc-")
        assert len(first) == len("scc-") + 12
        assert first != second

    def test_analysis_run_binds_run_id(self, caplog):
        """Test that events inside an analysis run carry its run ID."""
        caplog.set_level(logging.INFO)
        logger = get_logger("depcycle.test")

        with analysis_run("scc") as run_id:
            logger.info("inside_run")
        logger.info("outside_run")

        inside, outside = json_events(caplog)
        assert inside["run_id"] == run_id
        assert "run_id" not in outside

    def test_analysis_run_restores_outer_run_id(self, caplog):
        """Test that a caller-bound run ID survives a nested run."""
        caplog.set_level(logging.INFO)
        logger = get_logger("depcycle.test")

        structlog.contextvars.bind_contextvars(run_id="batch-1")
        with analysis_run("scc") as run_id:
            logger.info("nested_run")
        logger.info("after_nested_run")

        nested, after = json_events(caplog)
        assert nested["run_id"] == run_id
        assert after["run_id"] == "batch-1"


class TestStructuredLogging:
    """Test cases for structured logging output."""

    def setup_method(self):
        """Set up test environment before each test."""
        configure_logging(level="INFO", json_logs=True)
        structlog.contextvars.clear_contextvars()

    def test_json_output_has_standard_fields(self, caplog):
        """Test that events carry level, logger name and timestamp fields."""
        caplog.set_level(logging.INFO)
        logger = get_logger("depcycle.test")

        logger.info("test_event", vertex_count=3)

        event = json_events(caplog)[0]
        assert event["level"] == "info"
        assert event["logger"] == "depcycle.test"
        assert event["vertex_count"] == 3
        assert "timestamp" in event

    def test_log_with_exception(self, caplog):
        """Test logging with exception information."""
        caplog.set_level(logging.ERROR)
        logger = get_logger("depcycle.test")

        def _raise_test_error():
            msg = "Test exception"
            raise ValueError(msg)

        try:
            _raise_test_error()
        except ValueError:
            logger.exception("error_occurred", operation="test")

        event = json_events(caplog)[0]
        assert event["event"] == "error_occurred"
        assert "Test exception" in event["exception"]


@pytest.mark.integration
class TestGraphEvents:
    """Test the events emitted by the graph components."""

    def setup_method(self):
        """Set up test environment before each test."""
        configure_logging(level="INFO", json_logs=True)
        structlog.contextvars.clear_contextvars()

    def teardown_method(self):
        """Clean up after each test."""
        structlog.contextvars.clear_contextvars()

    def test_scc_computation_runs_under_run_id(self, caplog):
        """Test that the SCC summary event carries the analyzer's run ID."""
        caplog.set_level(logging.INFO)
        graph = DirectedGraph()
        graph.add_vertex("a")
        graph.add_vertex("b")
        graph.add_edge("a", "b")
        graph.add_edge("b", "a")
        analyzer = CycleAnalyzer(graph)

        assert analyzer.has_cycle()

        computed = [
            event
            for event in json_events(caplog)
            if event["event"] == "strongly_connected_components_computed"
        ]
        assert len(computed) == 1
        assert computed[0]["run_id"] == analyzer.run_id
        assert analyzer.run_id.startswith("scc-")

    def test_refresh_starts_new_scc_run(self, caplog):
        """Test that recomputing after refresh() logs under a new run ID."""
        caplog.set_level(logging.INFO)
        graph = DirectedGraph()
        graph.add_vertex("a")
        analyzer = CycleAnalyzer(graph)

        analyzer.has_cycle()
        first_run = analyzer.run_id
        analyzer.refresh()
        analyzer.has_cycle()

        run_ids = [
            event["run_id"]
            for event in json_events(caplog)
            if event["event"] == "strongly_connected_components_computed"
        ]
        assert run_ids == [first_run, analyzer.run_id]
        assert first_run != analyzer.run_id

    def test_ordering_events_share_run_id(self, caplog):
        """Test that every event of one ordering carries the same run ID."""
        configure_logging(level="DEBUG", json_logs=True)
        caplog.set_level(logging.DEBUG)
        graph = DirectedGraph()
        graph.add_vertex("a")
        graph.add_vertex("b")
        graph.add_edge("a", "b")
        sequencer = TopologicalSequencer(graph)

        sequencer.order()

        ordering = [
            event
            for event in json_events(caplog)
            if event["event"]
            in ("topological_order_started", "vertex_emitted", "topological_order_computed")
        ]
        assert len(ordering) == 4
        assert {event["run_id"] for event in ordering} == {sequencer.run_id}
        assert sequencer.run_id.startswith("order-")

    def test_cyclic_graph_logged_as_error(self, caplog):
        """Test that a failed ordering emits cyclic_graph_detected."""
        caplog.set_level(logging.INFO)
        graph = DirectedGraph()
        graph.add_vertex("a")
        graph.add_edge("a", "a")
        sequencer = TopologicalSequencer(graph)

        with pytest.raises(CyclicGraphError):
            sequencer.order()

        cyclic = [
            event for event in json_events(caplog) if event["event"] == "cyclic_graph_detected"
        ]
        assert len(cyclic) == 1
        assert cyclic[0]["level"] == "error"
        assert cyclic[0]["remaining"] == ["a"]
        assert cyclic[0]["run_id"] == sequencer.run_id

    def test_debug_events_filtered_at_info(self, caplog):
        """Test that per-vertex debug events are dropped at INFO level."""
        caplog.set_level(logging.INFO)
        graph = DirectedGraph()
        graph.add_vertex("a")

        TopologicalSequencer(graph).order()

        events = [event["event"] for event in json_events(caplog)]
        assert "vertex_added" not in events
        assert "vertex_emitted" not in events
        assert "topological_order_computed" in events
