"""Venue supplier: reproducible generator and JSON loading."""

import json

import pytest

from datecourse.modules.tool_usage.venue_tool import (
    HUBS,
    VenueTool,
    venue_from_dict,
    venue_to_dict,
)
from datecourse.modules.validation import validate_venue
from datecourse.schemas.venue import Category, MealType, Theme


class TestGenerator:

    def test_same_seed_same_pool(self):
        a = [venue_to_dict(v) for v in VenueTool(seed=7).generate(200)]
        b = [venue_to_dict(v) for v in VenueTool(seed=7).generate(200)]
        assert a == b

    def test_different_seeds_differ(self):
        a = [venue_to_dict(v) for v in VenueTool(seed=1).generate(50)]
        b = [venue_to_dict(v) for v in VenueTool(seed=2).generate(50)]
        assert a != b

    @pytest.mark.parametrize("count", [1, 50, 1500])
    def test_count_honoured(self, count):
        pool = VenueTool(seed=3).generate(count)
        assert len(pool) == count
        assert len({v.id for v in pool}) == count

    def test_generated_venues_are_valid_and_consistent(self):
        for v in VenueTool(seed=11).generate(400):
            assert validate_venue(venue_to_dict(v)), v
            assert v.themes
            if v.category == Category.RESTAURANT:
                assert v.meal_type in (None, MealType.LUNCH, MealType.DINNER)
                assert 60 <= v.estimated_duration <= 120
            elif v.category in (Category.CAFE, Category.BAKERY):
                assert v.meal_type == MealType.CAFE
                assert 30 <= v.estimated_duration <= 90
            else:
                assert v.category in (Category.ACTIVITY, Category.LANDMARK)
                assert v.meal_type is None
                assert 60 <= v.estimated_duration <= 180

    def test_venues_stay_near_their_hub(self):
        hub = HUBS[0]
        for v in VenueTool(seed=5).generate(hub.count):
            assert abs(v.lat - hub.lat) <= hub.radius_km / 111.0 + 1e-9


class TestConversion:

    def test_dict_round_trip(self, make_venue):
        v = make_venue(
            "x", Category.RESTAURANT, name="Grand Pasta", meal_type=MealType.DINNER,
            themes=frozenset({Theme.GOURMET}), estimated_duration=90, is_indoor=False,
        )
        assert venue_from_dict(venue_to_dict(v)) == v

    def test_unknown_themes_dropped(self):
        v = venue_from_dict({
            "id": "a", "name": "A", "category": "cafe", "lat": 36.3, "lng": 127.3,
            "themes": ["Healing", "Nightlife"],
        })
        assert v.themes == frozenset({Theme.HEALING})
        assert v.meal_type is None
        assert v.visit_minutes == 60


class TestLoadJson:

    def test_invalid_records_are_skipped(self, tmp_path):
        path = tmp_path / "venues.json"
        path.write_text(json.dumps([
            {"id": "good", "name": "Good", "category": "activity", "lat": 36.35, "lng": 127.38},
            {"id": "bad", "name": "Bad", "category": "activity", "lat": 0.0, "lng": 0.0},
        ]), encoding="utf-8")

        pool = VenueTool.load_json(path)
        assert [v.id for v in pool] == ["good"]

    def test_non_list_payload_rejected(self, tmp_path):
        path = tmp_path / "venues.json"
        path.write_text(json.dumps({"venues": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            VenueTool.load_json(path)
