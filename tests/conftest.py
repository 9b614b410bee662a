"""
Pytest configuration and shared fixtures for the urbact tests.

Remote Earth Engine calls are replaced by a fake backend and a manually
driven executor, so the tests run without credentials or network access.
"""

import concurrent.futures
import json
import sys
from pathlib import Path

import pytest


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Add project root to sys.path for urbact imports
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from urbact.session import DashboardSession  # noqa: E402
from urbact.tasks import TaskRunner  # noqa: E402


class ManualExecutor(concurrent.futures.Executor):
    """Executor whose work only runs when the test says so."""

    def __init__(self):
        self.queue = []

    def submit(self, fn, *args, **kwargs):
        future = concurrent.futures.Future()
        self.queue.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        while self.queue:
            self.run_next()

    def run_next(self, index: int = 0):
        future, fn, args, kwargs = self.queue.pop(index)
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)

    def shutdown(self, wait=True, *, cancel_futures=False):
        self.queue.clear()


class FakeBackend:
    """Stands in for UrbanActivityAnalysis: records calls, returns canned results."""

    def __init__(self, population=1234.4, histogram=None, ward_records=None):
        self.population = population
        self.histogram = histogram or {"bucket_means": [10.0, 20.0], "counts": [3.0, 5.0]}
        self.ward_records = ward_records if ward_records is not None else []
        self.calls = []

    def population_sum(self, geom):
        self.calls.append(("population_sum", geom))
        return self.population

    def population_histogram(self, geom):
        self.calls.append(("population_histogram", geom))
        return self.histogram

    def ward_means(self, prop=None):
        self.calls.append(("ward_means", prop))
        return self.ward_records


@pytest.fixture(scope="session")
def project_root():
    """Returns the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def registry_config():
    """Loads the shipped cities.json registry."""
    config_path = PROJECT_ROOT / "cities.json"
    if not config_path.exists():
        pytest.skip("cities.json not found in project root")
    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def executor():
    return ManualExecutor()


@pytest.fixture
def runner(executor):
    return TaskRunner(executor=executor)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session(backend, runner):
    return DashboardSession(backend=backend, runner=runner)
