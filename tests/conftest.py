"""Pytest fixtures for gauge shell tests."""
import pytest
from prometheus_client import CollectorRegistry

from gaugeshell.exporter import SelfMetrics
from gaugeshell.interpreter import Interpreter
from gaugeshell.registry import DynamicRegistry


@pytest.fixture()
def surface() -> CollectorRegistry:
    """A fresh exposition surface per test."""
    return CollectorRegistry()


@pytest.fixture()
def registry(surface: CollectorRegistry) -> DynamicRegistry:
    return DynamicRegistry(surface)


@pytest.fixture()
def self_metrics(surface: CollectorRegistry) -> SelfMetrics:
    return SelfMetrics(registry=surface)


@pytest.fixture()
def interpreter(registry: DynamicRegistry, self_metrics: SelfMetrics) -> Interpreter:
    return Interpreter(registry, self_metrics)
