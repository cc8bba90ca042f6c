import pytest
from prometheus_client import CollectorRegistry

from lottery.devnet import LocalNetwork
from lottery.metrics import Metrics


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> Metrics:
    # A private registry per test keeps the global one free of duplicates.
    return Metrics(registry=registry)


@pytest.fixture
def net(metrics: Metrics) -> LocalNetwork:
    return LocalNetwork.deploy(metrics=metrics)
