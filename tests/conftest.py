"""Test configuration for pytest."""

import os
import sys

import pytest

# Make tests.helpers importable as ``helpers`` and the stack package importable from deploy/cdk
tests_dir = os.path.dirname(__file__)
if tests_dir not in sys.path:
    sys.path.insert(0, tests_dir)

from helpers import FakeClusterAccessBackend, make_context  # noqa: E402

from eks_access.config import ReconcilerConfig  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep reconciler settings from the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("EKS_ACCESS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_REGION", raising=False)


@pytest.fixture
def config() -> ReconcilerConfig:
    return ReconcilerConfig()


@pytest.fixture
def backend() -> FakeClusterAccessBackend:
    """Two clusters from the reference scenario: ``a`` (API) and ``b`` (CONFIG_MAP)."""
    return FakeClusterAccessBackend(clusters={"a": "API", "b": "CONFIG_MAP"})


@pytest.fixture
def lambda_context():
    return make_context()
