"""Venue record validation."""

import logging

import pytest

from datecourse.modules.validation import filter_valid, validate_venue


def record(**overrides):
    base = {
        "id": "v1",
        "name": "Zen Gallery",
        "category": "culture",
        "lat": 36.35,
        "lng": 127.38,
        "meal_type": None,
        "estimated_duration": 60,
    }
    base.update(overrides)
    return base


def test_valid_record():
    result = validate_venue(record())
    assert result
    assert result.errors == []


@pytest.mark.parametrize("overrides, fragment", [
    ({"id": ""}, "id must not be empty"),
    ({"name": "  "}, "name must not be empty"),
    ({"lat": None}, "must not be NULL"),
    ({"lat": "north"}, "must be numeric"),
    ({"lat": 91.0}, "outside valid range [-90, 90]"),
    ({"lng": -181.0}, "outside valid range [-180, 180]"),
    ({"lat": 0.0, "lng": 0.0}, "likely a missing/default value"),
    ({"category": "spaceport"}, "category='spaceport'"),
    ({"meal_type": "brunch"}, "meal_type='brunch'"),
    ({"estimated_duration": -5}, "must be >= 0"),
    ({"estimated_duration": 12.5}, "must be an integer"),
])
def test_invalid_records(overrides, fragment):
    result = validate_venue(record(**overrides))
    assert not result
    assert any(fragment in e for e in result.errors), result.errors


def test_missing_optional_fields_are_fine():
    rec = record()
    del rec["meal_type"]
    del rec["estimated_duration"]
    assert validate_venue(rec)


def test_filter_valid_drops_and_logs(caplog):
    records = [record(id="ok"), record(id="bad", category="nope"), record(id="ok2")]
    with caplog.at_level(logging.WARNING):
        kept = filter_valid(records)
    assert [r["id"] for r in kept] == ["ok", "ok2"]
    assert "bad" in caplog.text
    assert "1/3 venue records rejected" in caplog.text


def test_filter_valid_with_converter():
    items = [("a", record(id="a")), ("b", record(id="b", lat=None))]
    kept = filter_valid(items, to_dict=lambda item: item[1])
    assert [k for k, _ in kept] == ["a"]
