"""Telemetry instrumentation unit tests."""

from __future__ import annotations

import logging
import sys
from unittest.mock import MagicMock

import pytest

from seabattle.config import MatchConfig
from seabattle.engine.board import Board
from seabattle.engine.ship import Ship
from seabattle.engine.game import Match, MatchPhase, Player
from seabattle.engine.instrumented_game import InstrumentedMatch
from seabattle.engine.coordinate import Coordinate
from seabattle.engine.states import Outcome
from seabattle.telemetry import config as telemetry_config_module
from seabattle.telemetry import logger as logger_module
from seabattle.telemetry import metrics as metrics_module
from seabattle.telemetry import tracer as tracer_module
from seabattle.telemetry.config import TelemetryConfig


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self._names = names
        self._names.append(span_name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, *_):
        pass


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


class NullOutput:
    def show_board(self, board, reveal) -> None:
        pass

    def announce(self, message) -> None:
        pass

    def hand_over(self) -> None:
        pass


def reset_singletons() -> None:
    tracer_module._TRACER = None
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METER = None
    metrics_module._METER_PROVIDER = None
    metrics_module._INSTRUMENTS = {}
    logger_module._LOGGER = None


def test_lazy_init_tracer_and_meter(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    assert tracer_module.get_tracer() is tracer_module.get_tracer()

    provider_instance = MagicMock()
    provider_instance.get_tracer.return_value = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    tracer_module.init_tracing(TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example"))
    assert tracer_module._TRACER is provider_instance.get_tracer.return_value

    meter_provider = MagicMock()
    meter_provider.get_meter.return_value = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module, "OTLPMetricExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(metrics_module, "PeriodicExportingMetricReader", MagicMock())
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    metrics_module.init_metrics(TelemetryConfig(enable_metrics=True, otlp_metrics_endpoint="http://example"))
    assert metrics_module._METER is meter_provider.get_meter.return_value
    reset_singletons()


def test_record_game_metric_reuses_counters(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    meter = MagicMock()
    monkeypatch.setattr(metrics_module, "_METER", meter)

    metrics_module.record_game_metric("seabattle_test_total", 1, {"player": "Player 1"})
    metrics_module.record_game_metric("seabattle_test_total", 2)

    meter.create_counter.assert_called_once_with("seabattle_test_total")
    counter = meter.create_counter.return_value
    assert counter.add.call_count == 2
    reset_singletons()


def test_logging_init_noop_without_endpoint() -> None:
    reset_singletons()
    logger = logger_module.get_logger("test")
    assert logger_module.init_logging(TelemetryConfig()) is logger
    assert logger_module._OTLP_HANDLER is None


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    config = TelemetryConfig(enable_tracing=True, enable_logging=True)
    telemetry_config_module.init_telemetry(config)
    assert calls == ["tr", "lo"]


def test_config_from_env_reads_flags_and_endpoints(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "OTEL_TRACES_ENABLED",
        "OTEL_METRICS_ENABLED",
        "OTEL_LOGS_ENABLED",
        "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
        "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
        "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
        "OTEL_SERVICE_NAME",
        "OTEL_SERVICE_NAMESPACE",
        "SEABATTLE_ENABLE_TRACING",
        "SEABATTLE_ENABLE_METRICS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    monkeypatch.setenv("SEABATTLE_ENABLE_LOGGING", "false")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "deployment.environment=test,broken")

    config = TelemetryConfig.from_env()
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.otlp_metrics_endpoint == "http://collector:4317/v1/metrics"
    assert config.enable_tracing and config.enable_metrics
    assert config.enable_logging is False
    assert config.resource()["deployment.environment"] == "test"
    assert config.resource()["service.name"] == "seabattle"


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    def fake_from_env(cls, **overrides):
        calls["count"] += 1
        return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(TelemetryConfig, "from_env", classmethod(fake_from_env))

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_instrumented_match_emits_spans_and_metrics(monkeypatch: pytest.MonkeyPatch) -> None:
    tracer = DummyTracer()
    metrics_calls: list[tuple[str, float, dict | None]] = []
    logger = MagicMock()

    monkeypatch.setattr("seabattle.engine.instrumented_game.get_tracer", lambda *_: tracer)
    monkeypatch.setattr("seabattle.engine.instrumented_game.get_logger", lambda *_: logger)
    monkeypatch.setattr(
        "seabattle.engine.instrumented_game.record_game_metric",
        lambda name, value, attrs=None: metrics_calls.append((name, value, attrs)),
    )

    def fake_fire(self, player, at):
        self.phase = MatchPhase.FINISHED
        self.winner = player
        return Outcome.WON

    monkeypatch.setattr(Match, "fire", fake_fire)

    match = InstrumentedMatch([], NullOutput(), MatchConfig(pause_between_turns=False))
    match.phase = MatchPhase.IN_PROGRESS
    assert match.fire(Player.PLAYER1, Coordinate("A", 1)) is Outcome.WON

    assert "seabattle.engine.fire" in tracer.span_names
    assert "seabattle.engine.match_complete" in tracer.span_names
    metric_names = {name for name, _, _ in metrics_calls}
    assert "seabattle_shots_total" in metric_names
    assert "seabattle_shots_by_outcome_total" in metric_names
    assert "seabattle_match_completed_total" in metric_names


def test_instrumented_match_counts_rejected_commands(monkeypatch: pytest.MonkeyPatch) -> None:
    metric_names: list[str] = []
    monkeypatch.setattr("seabattle.engine.instrumented_game.get_tracer", lambda *_: DummyTracer())
    monkeypatch.setattr(
        "seabattle.engine.instrumented_game.record_game_metric",
        lambda name, value, attrs=None: metric_names.append(name),
    )

    setup = ["A1 B2", "A1 A5", "C1 C4", "E1 E3", "G1 G3", "I1 I2"]
    match = InstrumentedMatch(setup, NullOutput(), MatchConfig(pause_between_turns=False))
    match.setup_player(Player.PLAYER1)

    assert metric_names.count("seabattle_invalid_commands_total") == 1
    assert "seabattle_fleet_placed_total" in metric_names


class CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.events: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.events.append(record.getMessage())


def test_console_level_does_not_filter_info_events_for_export(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(logger_module, "_CONSOLE_HANDLER", None)
    original_level = root.level
    try:
        logger_module.configure_console_logging("WARNING")
        console = logger_module._CONSOLE_HANDLER
        assert console is not None
        assert console.level == logging.WARNING
        assert root.level <= logging.INFO

        export = CaptureHandler()
        root.addHandler(export)
        board = Board()
        board.place(Ship(Coordinate("A", 1), Coordinate("A", 2), 2, "Destroyer"))
        board.resolve_shot(Coordinate("A", 1))
        assert export.events == ["ship_placed", "shot_hit"]
    finally:
        root.setLevel(original_level)


def test_console_span_exporter_writes_to_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    console_exporter = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock())
    monkeypatch.setattr(tracer_module, "SimpleSpanProcessor", MagicMock())
    monkeypatch.setattr(tracer_module, "ConsoleSpanExporter", console_exporter)
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())

    tracer_module.init_tracing(TelemetryConfig(enable_tracing=True))

    console_exporter.assert_called_once_with(out=sys.stderr)
    reset_singletons()
