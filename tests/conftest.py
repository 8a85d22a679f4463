"""Shared pytest fixtures for ecolight tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta

import pytest

from ecolight import log
from ecolight.assembler import ResultAssembler
from ecolight.catalog import PlantCatalog, PlantLightRequirement, default_catalog
from ecolight.matcher import PlantMatcher
from ecolight.scheduler import ManualScheduler
from ecolight.session import AnalysisSessionController
from ecolight.sensors.feed import SensorFeed
from ecolight.storage import JsonRecordStore


@pytest.fixture(autouse=True)
def quiet_logs():
    """Keep event output out of test runs."""
    log.set_enabled(False)
    yield
    log.set_enabled(True)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def feed(scheduler):
    """A feed with no backend; tests push samples with publish()."""
    return SensorFeed(backend=None, scheduler=scheduler)


@pytest.fixture
def store(tmp_path):
    return JsonRecordStore(tmp_path / "records.json")


@pytest.fixture
def clock():
    """Deterministic wall clock: one minute later on every call."""
    base = datetime(2026, 3, 1, 9, 0, 0)
    counter = itertools.count()
    return lambda: base + timedelta(minutes=next(counter))


@pytest.fixture
def matcher(scheduler):
    """Default catalog with the search latency charged to the manual clock."""
    return PlantMatcher(default_catalog(), search_delay=1.0, sleep=scheduler.sleep)


@pytest.fixture
def assembler(matcher, store, clock):
    return ResultAssembler(matcher, store, clock=clock)


@pytest.fixture
def controller(feed, assembler, scheduler):
    ctrl = AnalysisSessionController(feed, assembler, scheduler=scheduler, tick_interval=0.1)
    yield ctrl
    ctrl.close()


@pytest.fixture
def small_catalog():
    """Three-entry catalog with two keywords that can both appear in one name."""
    return PlantCatalog(
        [
            ("rosa", PlantLightRequirement("Rosa", 6000, 60000, "Pleno sol.")),
            ("rosa del desierto", PlantLightRequirement("Rosa del Desierto", 10000, 90000, "Sol intenso.")),
            ("musgo", PlantLightRequirement("Musgo", 100, 800, "Sombra húmeda.")),
        ]
    )
