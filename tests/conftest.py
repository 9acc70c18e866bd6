"""
Shared fixtures: a venue factory that places venues at exact kilometre
offsets from a fixed origin in Dunsan-dong, and a fixed planning start time.
"""

import math
from datetime import datetime

import pytest

from datecourse import config
from datecourse.schemas.venue import Category, Venue

BASE_LAT, BASE_LNG = 36.3512, 127.3848
KM_PER_DEG_LAT = 6371.0 * math.pi / 180


def build_venue(venue_id, category=Category.ACTIVITY, north_km=0.0, east_km=0.0, **kwargs):
    """Venue *north_km* / *east_km* away from the origin (north offsets are exact)."""
    km_per_deg_lng = KM_PER_DEG_LAT * math.cos(math.radians(BASE_LAT))
    return Venue(
        id=venue_id,
        name=kwargs.pop("name", venue_id.title()),
        category=Category(category),
        lat=BASE_LAT + north_km / KM_PER_DEG_LAT,
        lng=BASE_LNG + east_km / km_per_deg_lng,
        **kwargs,
    )


@pytest.fixture
def make_venue():
    return build_venue


@pytest.fixture
def start_time():
    return datetime(2026, 5, 2, 10, 0)


@pytest.fixture(autouse=True)
def _no_perf_log_files(monkeypatch, tmp_path):
    """Keep test runs from writing JSONL files into the repository."""
    monkeypatch.setattr(config, "ENABLE_PERF_LOG", False)
    monkeypatch.setattr(config, "LOGS_DIR", str(tmp_path / "logs"))
