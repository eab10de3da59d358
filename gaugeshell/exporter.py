"""Prometheus pull exporter serving periodic registry snapshots."""
from typing import List, Optional
from prometheus_client import (
    Counter, Gauge, Histogram,
    CollectorRegistry, start_http_server
)
from prometheus_client.core import Metric as MetricFamily
import logging
import threading
import time

from gaugeshell.config import ExporterConfig
from gaugeshell.registry import DynamicRegistry

logger = logging.getLogger(__name__)


class SnapshotCollector:
    """Serves the families captured by the last refresh."""

    def __init__(self):
        self._families: List[MetricFamily] = []
        self._lock = threading.Lock()

    def update(self, families: List[MetricFamily]):
        with self._lock:
            self._families = families

    def collect(self) -> List[MetricFamily]:
        with self._lock:
            return list(self._families)


class PrometheusExporter:
    """Publishes registry snapshots over HTTP on a fixed interval."""

    def __init__(self, registry: DynamicRegistry, config: ExporterConfig, self_metrics=None):
        self.registry = registry
        self.config = config
        self.self_metrics = self_metrics

        # The HTTP server only ever sees the last published snapshot
        self.published = CollectorRegistry(auto_describe=False)
        self.snapshot_collector = SnapshotCollector()
        self.published.register(self.snapshot_collector)

        self.running = False
        self.refresh_count = 0
        self._stop_event = threading.Event()
        self._server = None
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Bind the HTTP server and start the refresh thread."""
        self._start_server()
        self.refresh()
        self.running = True
        self._thread = threading.Thread(target=self.run, name="exporter", daemon=True)
        self._thread.start()

    def _start_server(self):
        """Start Prometheus HTTP server."""
        try:
            self._server, _ = start_http_server(
                self.config.port,
                addr=self.config.host,
                registry=self.published
            )
            logger.info(
                f"Prometheus exporter listening on "
                f"{self.config.address}/metrics"
            )
        except Exception as e:
            logger.error(f"Failed to start Prometheus HTTP server: {e}")
            raise

    def refresh(self):
        """Take one snapshot of the registry and publish it."""
        refresh_start = time.time()
        families = self.registry.snapshot()
        self.snapshot_collector.update(families)
        self.refresh_count += 1

        if self.self_metrics:
            family_count, series_count = self.registry.counts()
            self.self_metrics.set_active(family_count, series_count)
            self.self_metrics.record_refresh_duration(time.time() - refresh_start)

    def run(self):
        """Refresh until stopped."""
        logger.info("Starting exporter refresh loop")

        interval = self.config.refresh_interval_s

        while not self._stop_event.is_set():
            refresh_start = time.time()

            try:
                self.refresh()
            except Exception as e:
                logger.error(f"Error refreshing snapshot: {e}", exc_info=True)

            # Sleep for remaining time in refresh interval
            refresh_duration = time.time() - refresh_start
            sleep_time = max(0, interval - refresh_duration)

            if sleep_time > 0:
                self._stop_event.wait(sleep_time)
            else:
                logger.warning(
                    f"Refresh took {refresh_duration:.3f}s, longer than interval {interval}s"
                )

    def stop(self):
        """Stop the refresh loop and the HTTP server."""
        logger.info("Stopping exporter")
        self.running = False
        self._stop_event.set()

        if self._thread is not None:
            self._thread.join(timeout=self.config.refresh_interval_s + 1)
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None


class SelfMetrics:
    """Self-monitoring metrics for the shell."""

    def __init__(self, registry=None, prefix="gaugeshell_"):
        if registry is None:
            registry = CollectorRegistry()

        self.commands_total = Counter(
            f"{prefix}commands_total",
            "Total number of commands executed",
            ["command"],
            registry=registry
        )

        self.command_errors_total = Counter(
            f"{prefix}command_errors_total",
            "Total number of rejected or failed commands",
            ["kind"],
            registry=registry
        )

        self.refresh_duration_seconds = Histogram(
            f"{prefix}refresh_duration_seconds",
            "Duration of each snapshot refresh in seconds",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
            registry=registry
        )

        self.families = Gauge(
            f"{prefix}families",
            "Number of gauge families created from the shell",
            registry=registry
        )

        self.series = Gauge(
            f"{prefix}series",
            "Number of series across all shell gauges",
            registry=registry
        )

    def record_command(self, command: str):
        """Record an executed command."""
        self.commands_total.labels(command=command).inc()

    def record_error(self, kind: str):
        """Record a parse or registry error."""
        self.command_errors_total.labels(kind=kind).inc()

    def record_refresh_duration(self, duration: float):
        """Record refresh duration."""
        self.refresh_duration_seconds.observe(duration)

    def set_active(self, families: int, series: int):
        """Set active family and series counts."""
        self.families.set(families)
        self.series.set(series)
