"""Dynamic registry of label-parameterized gauge families."""
import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily, Metric as MetricFamily

from gaugeshell.series import Metric

logger = logging.getLogger(__name__)

FAMILY_DOC = "Gauge managed from the interactive shell"


class RegistryError(Exception):
    """Base class for registry failures surfaced to the operator."""


class MetricNotFound(RegistryError):
    """Raised when a metric name or series does not exist."""


class RegistrationError(RegistryError):
    """Raised when the exposition surface rejects a new family."""


class UnregistrationError(RegistryError):
    """Raised when the exposition surface cannot drop an emptied family."""


class GaugeFamily:
    """
    Collector for one dynamically created gauge family.

    The label names are fixed when the family is created. Values for later
    commands are resolved against them, with missing tags read as the empty
    string. Note that this can alias distinct tag sets onto one series.
    """

    def __init__(self, name: str, label_names: Sequence[str]):
        self.name = name
        self.label_names: Tuple[str, ...] = tuple(label_names)
        self.series: Dict[Tuple[str, ...], float] = {}

    def resolve(self, tags: Dict[str, str]) -> Tuple[str, ...]:
        """Map tags onto this family's label order."""
        return tuple(tags.get(key, "") for key in self.label_names)

    def describe(self) -> List[MetricFamily]:
        return [GaugeMetricFamily(self.name, FAMILY_DOC, labels=list(self.label_names))]

    def collect(self) -> List[MetricFamily]:
        family = GaugeMetricFamily(self.name, FAMILY_DOC, labels=list(self.label_names))
        for label_values, value in self.series.items():
            family.add_metric(list(label_values), value)
        return [family]


class DynamicRegistry:
    """
    Thread-safe map from metric name to gauge family.

    Families are registered on the exposition surface when first created and
    unregistered when their last series is removed. One lock guards every
    operation, including the snapshot read by the exporter.
    """

    def __init__(self, surface: Optional[CollectorRegistry] = None):
        # Use a custom registry to avoid exporting default Python/process metrics
        self.surface = surface if surface is not None else CollectorRegistry()
        self._families: Dict[str, GaugeFamily] = {}
        self._lock = threading.Lock()

    def add(self, metric: Metric, value: float):
        """Create the series (and its family if needed) or overwrite its value."""
        with self._lock:
            family = self._families.get(metric.name)
            if family is None:
                family = GaugeFamily(metric.name, sorted(metric.tags))
                try:
                    self.surface.register(family)
                except ValueError as e:
                    raise RegistrationError(f"failed to register metric {metric.name}: {e}") from e
                self._families[metric.name] = family
                logger.info(f"Registered gauge {metric.name} with labels {list(family.label_names)}")

            family.series[family.resolve(metric.tags)] = float(value)

    def get(self, metric: Metric) -> float:
        """Return the value of a series; unknown series of a known family read as 0."""
        with self._lock:
            family = self._families.get(metric.name)
            if family is None:
                raise MetricNotFound(f"metric not found: {metric.name}")
            return family.series.get(family.resolve(metric.tags), 0.0)

    def remove(self, metric: Metric):
        """
        Remove one series, dropping the whole family once it is empty.

        Removing under an unknown name does nothing. When the surface refuses
        to unregister an emptied family the registry has already forgotten it,
        so the error is reported but not rolled back.
        """
        with self._lock:
            family = self._families.get(metric.name)
            if family is None:
                return

            label_values = family.resolve(metric.tags)
            if label_values not in family.series:
                raise MetricNotFound(f"series not found: {metric}")
            del family.series[label_values]

            if family.series:
                return

            del self._families[metric.name]
            try:
                self.surface.unregister(family)
            except KeyError as e:
                raise UnregistrationError(f"failed to unregister metric {metric.name}") from e
            logger.info(f"Unregistered gauge {metric.name}")

    def snapshot(self) -> List[MetricFamily]:
        """Collect everything on the surface as one consistent view."""
        with self._lock:
            return list(self.surface.collect())

    def family(self, name: str) -> Optional[GaugeFamily]:
        """Look up a family by name, for introspection and tests."""
        with self._lock:
            return self._families.get(name)

    def names(self) -> List[str]:
        """Sorted names of the families currently held, for introspection and tests."""
        with self._lock:
            return sorted(self._families)

    def counts(self) -> Tuple[int, int]:
        """Return (families, series) currently held."""
        with self._lock:
            return len(self._families), sum(len(f.series) for f in self._families.values())
