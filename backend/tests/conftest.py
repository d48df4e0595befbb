"""Shared test fixtures for backend tests.

Provides a recording playback double and factories for schedulers and
engines that are shut down on teardown, so no alert timer thread outlives
its test.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakePlayback


@pytest.fixture()
def fake_playback() -> FakePlayback:
    return FakePlayback()


@pytest.fixture()
def scheduler_factory(fake_playback):
    """Create AlertSchedulers wired to the fake playback.

    Returns a factory function that accepts keyword overrides.
    """
    from alerts import AlertScheduler

    created: list[AlertScheduler] = []

    def _factory(**kwargs) -> AlertScheduler:
        defaults = dict(playback=fake_playback, join_timeout_seconds=1.0)
        defaults.update(kwargs)
        scheduler = AlertScheduler(**defaults)
        created.append(scheduler)
        return scheduler

    yield _factory

    for scheduler in created:
        scheduler.shutdown()


@pytest.fixture()
def engine_factory(fake_playback):
    """Create ProximityEngines over an in-memory pin store."""
    from engine import ProximityEngine
    from storage import InMemoryPinStore

    created: list[ProximityEngine] = []

    def _factory(pins=(), **kwargs) -> ProximityEngine:
        store = kwargs.pop("pin_store", None)
        if store is None:
            store = InMemoryPinStore(pins)
        kwargs.setdefault("playback", fake_playback)
        engine = ProximityEngine(pin_store=store, **kwargs)
        created.append(engine)
        return engine

    yield _factory

    for engine in created:
        engine.shutdown()


@pytest.fixture()
def app_client():
    """TestClient for the full api.app with a fresh engine per test."""
    import api

    with TestClient(api.app) as c:
        yield c
