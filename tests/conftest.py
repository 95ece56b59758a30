"""
Pytest configuration shared by the unit tests.
"""

import pytest

from biodensity.config import loader
from biodensity.core.models import Observation, Polygon, Polyline, Region, Trail


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep rulebook caching and env overrides from leaking between tests."""
    monkeypatch.delenv("BUFFER_DISTANCE_KM", raising=False)
    monkeypatch.delenv("BIODENSITY_CONFIG", raising=False)
    loader.clear_cache()
    yield
    loader.clear_cache()


@pytest.fixture
def square():
    """Factory for an axis-aligned square polygon (lon/lat degrees)."""
    def _square(west, south, size=1.0):
        east, north = west + size, south + size
        return Polygon.from_rings(
            [(west, south), (east, south), (east, north), (west, north), (west, south)]
        )
    return _square


@pytest.fixture
def make_region(square):
    def _region(region_id, west, south, size=1.0):
        return Region(region_id=region_id, parts=square(west, south, size))
    return _region


@pytest.fixture
def make_trail():
    def _trail(trail_id, coords):
        return Trail(trail_id=trail_id, parts=Polyline.from_coords(coords))
    return _trail


@pytest.fixture
def obs():
    """Factory for observations: obs(lon, lat, id=None)."""
    counter = {"n": 0}

    def _obs(lon, lat, observation_id=None):
        counter["n"] += 1
        return Observation(observation_id or f"o{counter['n']}", (lon, lat))
    return _obs
