"""Tests for the snapshot exporter."""
from gaugeshell.config import ExporterConfig
from gaugeshell.exporter import PrometheusExporter, SelfMetrics
from gaugeshell.series import Metric


def test_published_view_changes_only_on_refresh(registry):
    exporter = PrometheusExporter(registry, ExporterConfig())
    registry.add(Metric("x", {"a": "1"}), 1.0)
    assert exporter.published.get_sample_value("x", {"a": "1"}) is None

    exporter.refresh()
    assert exporter.published.get_sample_value("x", {"a": "1"}) == 1.0

    registry.remove(Metric("x", {"a": "1"}))
    assert exporter.published.get_sample_value("x", {"a": "1"}) == 1.0
    exporter.refresh()
    assert exporter.published.get_sample_value("x", {"a": "1"}) is None
    assert exporter.refresh_count == 2


def test_refresh_updates_self_metrics(registry, surface):
    self_metrics = SelfMetrics(registry=surface)
    exporter = PrometheusExporter(registry, ExporterConfig(), self_metrics)
    registry.add(Metric("x", {"a": "1"}), 1.0)
    registry.add(Metric("x", {"a": "2"}), 1.0)
    registry.add(Metric("y"), 1.0)

    exporter.refresh()
    assert surface.get_sample_value("gaugeshell_families") == 2.0
    assert surface.get_sample_value("gaugeshell_series") == 3.0
    assert surface.get_sample_value("gaugeshell_refresh_duration_seconds_count") == 1.0


def test_self_metrics_are_published(registry, surface):
    self_metrics = SelfMetrics(registry=surface)
    exporter = PrometheusExporter(registry, ExporterConfig(), self_metrics)
    self_metrics.record_command("set")
    exporter.refresh()
    assert exporter.published.get_sample_value(
        "gaugeshell_commands_total", {"command": "set"}
    ) == 1.0


def test_stop_without_start(registry):
    exporter = PrometheusExporter(registry, ExporterConfig())
    exporter.stop()
    assert not exporter.running
