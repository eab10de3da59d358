"""Interactive shell for dynamically labeled Prometheus gauges."""

__version__ = "0.1.0"
