"""End-to-end planning properties of the greedy itinerary builder."""

import os
import uuid
from datetime import timedelta

import pytest

from datecourse import config, generate_itinerary
from datecourse.modules.observability.logger import PERFORMANCE, StructuredLogger
from datecourse.modules.planning.itinerary_builder import ItineraryBuilder
from datecourse.modules.tool_usage.distance_tool import travel_minutes, venue_distance_km
from datecourse.schemas.itinerary import GenerationOptions, WeatherSnapshot
from datecourse.schemas.venue import Category, MealType, Transport


def hops(itinerary):
    seq = itinerary.sequence
    return [venue_distance_km(a, b) for a, b in zip(seq, seq[1:])]


@pytest.fixture
def neighbourhood(make_venue):
    """A compact walkable pool around the start venue."""
    return [
        make_venue("start"),
        make_venue("act1", north_km=0.10),
        make_venue("act2", north_km=0.20),
        make_venue("act3", north_km=0.30),
        make_venue("act4", north_km=0.40),
        make_venue("act5", north_km=0.50),
        make_venue("act6", north_km=0.60),
        make_venue("gallery", Category.CULTURE, north_km=0.35),
        make_venue("cafe1", Category.CAFE, north_km=0.15, meal_type=MealType.CAFE),
        make_venue("cafe2", Category.BAKERY, north_km=0.25, meal_type=MealType.CAFE),
        make_venue("lunch1", Category.RESTAURANT, north_km=0.20, meal_type=MealType.LUNCH),
        make_venue("bistro", Category.RESTAURANT, north_km=0.30),
        make_venue("dinner1", Category.RESTAURANT, north_km=0.45, meal_type=MealType.DINNER),
        make_venue("faraway", north_km=4.0),
    ]


class TestBasics:

    def test_no_start_venue_returns_none(self, start_time, neighbourhood):
        assert generate_itinerary(neighbourhood, GenerationOptions(None, start_time)) is None

    def test_single_hop_scenario(self, make_venue, start_time):
        a = make_venue("a")
        b = make_venue("b", north_km=0.3)
        it = generate_itinerary([a, b], GenerationOptions(a, start_time, duration_hours=2))

        assert it.sequence == [a, b]
        assert it.total_distance_km == pytest.approx(0.3)
        assert it.estimated_duration == round(travel_minutes(0.3, Transport.FOOT) + 60)

    def test_start_step_is_zero_length(self, start_time, neighbourhood):
        it = generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time))
        first = it.steps[0]
        assert first.venue.id == "start"
        assert first.start_time == first.end_time == start_time
        assert first.distance_km == 0.0

    def test_no_candidates_gives_start_only(self, make_venue, start_time):
        s = make_venue("s")
        it = generate_itinerary([s, make_venue("far", north_km=5.0)], GenerationOptions(s, start_time))
        assert it.sequence == [s]
        assert it.total_distance_km == 0.0
        assert it.estimated_duration == 0

    def test_deterministic(self, start_time, neighbourhood):
        opts = GenerationOptions(neighbourhood[0], start_time, duration_hours=6)
        assert generate_itinerary(neighbourhood, opts).to_dict() == \
            generate_itinerary(neighbourhood, opts).to_dict()

    def test_inputs_not_mutated(self, make_venue, start_time, neighbourhood):
        pool = list(neighbourhood)
        locked = {2: neighbourhood[3]}
        opts = GenerationOptions(neighbourhood[0], start_time, locked_steps=locked)
        generate_itinerary(pool, opts)
        assert pool == neighbourhood
        assert opts.locked_steps == {2: neighbourhood[3]}
        assert opts.user_vector is None


class TestTimeProperties:

    def test_three_hour_outing_has_no_meals(self, start_time, neighbourhood):
        it = generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time, duration_hours=3))

        assert len(it.steps) > 1
        assert it.steps[-1].end_time <= start_time + timedelta(hours=3)
        assert all(s.meal_type not in (MealType.LUNCH, MealType.DINNER) for s in it.steps)
        assert all(s.venue.category != Category.RESTAURANT for s in it.steps)

    def test_six_hour_outing_has_exactly_one_lunch(self, start_time, neighbourhood):
        it = generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time, duration_hours=6))

        lunches = [s for s in it.steps if s.meal_type == MealType.LUNCH]
        assert len(lunches) == 1
        assert lunches[0].venue.category == Category.RESTAURANT
        assert lunches[0].venue.meal_type in (None, MealType.LUNCH)
        assert not any(s.meal_type == MealType.DINNER for s in it.steps)
        assert it.steps[-1].end_time <= start_time + timedelta(hours=6)

    def test_steps_are_chronological_and_unique(self, start_time, neighbourhood):
        it = generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time, duration_hours=8))
        ids = [v.id for v in it.sequence]
        assert len(ids) == len(set(ids))
        for prev, cur in zip(it.steps, it.steps[1:]):
            assert cur.start_time >= prev.end_time
            assert cur.end_time >= cur.start_time

    def test_end_time_caps_duration(self, start_time, neighbourhood):
        end = start_time + timedelta(hours=2)
        opts = GenerationOptions(neighbourhood[0], start_time, end_time=end, duration_hours=8)
        it = generate_itinerary(neighbourhood, opts)
        assert it.steps[-1].end_time <= end

    def test_total_distance_is_sum_of_hops(self, start_time, neighbourhood):
        it = generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time))
        assert it.total_distance_km == round(sum(hops(it)), 1)


class TestWalkingLimit:

    def test_foot_hops_stay_within_limit(self, start_time, neighbourhood):
        it = generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time, duration_hours=8))
        assert all(h <= config.WALK_MAX_HOP_KM for h in hops(it))
        assert "faraway" not in [v.id for v in it.sequence]

    def test_car_mode_reaches_distant_venues(self, make_venue, start_time):
        s = make_venue("s")
        far = make_venue("far", north_km=5.0)
        foot = generate_itinerary([s, far], GenerationOptions(s, start_time))
        car = generate_itinerary([s, far], GenerationOptions(s, start_time, transport=Transport.CAR))

        assert foot.sequence == [s]
        assert car.sequence == [s, far]
        assert car.steps[1].travel_minutes == pytest.approx(25.0)


class TestAnchors:

    def test_anchors_visited_in_order(self, make_venue, start_time, neighbourhood):
        m1 = make_venue("m1", north_km=0.5)
        m2 = make_venue("m2", north_km=1.0)
        pool = neighbourhood + [m1, m2]
        it = generate_itinerary(pool, GenerationOptions(pool[0], start_time, must_visit=[m1, m2]))
        ids = [v.id for v in it.sequence]
        assert ids[1:3] == ["m1", "m2"]

    def test_long_walk_gets_intermediate_stops(self, make_venue, start_time):
        s = make_venue("s")
        i1 = make_venue("i1", north_km=1.0)
        i2 = make_venue("i2", Category.CULTURE, north_km=2.0)
        anchor = make_venue("anchor", north_km=3.0)
        it = generate_itinerary([s, i1, i2, anchor], GenerationOptions(s, start_time, must_visit=[anchor]))

        assert [v.id for v in it.sequence] == ["s", "i1", "i2", "anchor"]
        assert all(h <= config.WALK_MAX_HOP_KM for h in hops(it))

    def test_anchor_connected_directly_when_nothing_bridges(self, make_venue, start_time):
        s = make_venue("s")
        anchor = make_venue("anchor", north_km=3.0)
        it = generate_itinerary([s, anchor], GenerationOptions(s, start_time, must_visit=[anchor]))

        assert it.sequence == [s, anchor]
        assert it.steps[1].distance_km == pytest.approx(3.0)
        assert it.steps[1].travel_minutes == pytest.approx(36.0)

    def test_later_anchor_is_not_a_stop_on_the_way_to_an_earlier_one(self, make_venue, start_time):
        s = make_venue("s")
        m1 = make_venue("m1", north_km=3.0)
        m2 = make_venue("m2", north_km=1.0)
        it = generate_itinerary([s, m1, m2], GenerationOptions(s, start_time, must_visit=[m1, m2]))

        assert [v.id for v in it.sequence] == ["s", "m1", "m2"]

    def test_lock_on_a_later_anchor_does_not_pull_it_forward(self, make_venue, start_time):
        s = make_venue("s")
        m1 = make_venue("m1", north_km=3.0)
        m2 = make_venue("m2", north_km=1.0)
        opts = GenerationOptions(s, start_time, must_visit=[m1, m2], locked_steps={1: m2})
        it = generate_itinerary([s, m1, m2], opts)

        assert [v.id for v in it.sequence] == ["s", "m1", "m2"]

    def test_restaurant_anchor_in_lunch_window_counts_as_lunch(self, make_venue):
        from datetime import datetime

        s = make_venue("s")
        r = make_venue("r", Category.RESTAURANT, north_km=0.2)
        it = generate_itinerary([s, r], GenerationOptions(s, datetime(2026, 5, 2, 12, 0), must_visit=[r]))
        assert it.steps[1].meal_type == MealType.LUNCH


class TestEndVenue:

    def test_end_venue_is_last_and_arrival_only(self, make_venue, start_time, neighbourhood):
        end = make_venue("end", north_km=0.5)
        pool = neighbourhood + [end]
        it = generate_itinerary(pool, GenerationOptions(pool[0], start_time, end_venue=end, duration_hours=3))

        last = it.steps[-1]
        assert last.venue == end
        assert last.start_time == last.end_time
        assert last.end_time <= start_time + timedelta(hours=3)
        assert [v.id for v in it.sequence].count("end") == 1

    def test_end_venue_that_is_also_an_anchor_appears_once_at_the_end(
        self, make_venue, start_time, neighbourhood,
    ):
        end = make_venue("end", north_km=0.5, estimated_duration=30)
        pool = neighbourhood + [end]
        opts = GenerationOptions(pool[0], start_time, end_venue=end, must_visit=[end], duration_hours=4)
        it = generate_itinerary(pool, opts)

        assert it.sequence[-1] == end
        assert [v.id for v in it.sequence].count("end") == 1

    def test_end_venue_equal_to_start_is_not_repeated(self, start_time, neighbourhood):
        start = neighbourhood[0]
        it = generate_itinerary(neighbourhood, GenerationOptions(start, start_time, end_venue=start))
        assert [v.id for v in it.sequence].count("start") == 1


class TestLockedSteps:

    def test_locked_venue_used_at_its_index(self, start_time, neighbourhood):
        act3 = neighbourhood[3]
        it = generate_itinerary(
            neighbourhood, GenerationOptions(neighbourhood[0], start_time, locked_steps={1: act3}),
        )
        assert it.sequence[1] == act3

    def test_infeasible_lock_is_ignored(self, start_time, neighbourhood):
        bistro = next(v for v in neighbourhood if v.id == "bistro")
        opts = GenerationOptions(neighbourhood[0], start_time, duration_hours=3, locked_steps={1: bistro})
        it = generate_itinerary(neighbourhood, opts)
        assert bistro not in it.sequence
        assert len(it.steps) > 1

    def test_lock_applies_to_an_intermediate_stop(self, make_venue, start_time):
        s = make_venue("s")
        i1 = make_venue("i1", north_km=1.0)
        i2 = make_venue("i2", north_km=1.4)
        anchor = make_venue("anchor", north_km=3.0)
        pool = [s, i1, i2, anchor]

        free = generate_itinerary(pool, GenerationOptions(s, start_time, must_visit=[anchor]))
        pinned = generate_itinerary(
            pool, GenerationOptions(s, start_time, must_visit=[anchor], locked_steps={1: i2}),
        )

        assert [v.id for v in free.sequence] == ["s", "i1", "i2", "anchor"]
        assert [v.id for v in pinned.sequence] == ["s", "i2", "anchor"]


class TestContext:

    def test_rain_prefers_indoor(self, make_venue, start_time):
        s = make_venue("s")
        outdoor = make_venue("outdoor", north_km=0.1, is_indoor=False)
        indoor = make_venue("indoor", north_km=0.3, is_indoor=True)
        opts = GenerationOptions(
            s, start_time, duration_hours=2, weather=WeatherSnapshot(temperature=18, is_raining=True),
        )
        it = generate_itinerary([s, outdoor, indoor], opts)
        assert it.sequence[1] == indoor

    def test_performance_event_logged(self, monkeypatch, tmp_path, start_time, neighbourhood):
        monkeypatch.setattr(config, "ENABLE_PERF_LOG", True)
        perf = StructuredLogger(tmp_path)
        builder = ItineraryBuilder(perf_logger=perf, session_id="perf_test")
        it = builder.build(neighbourhood, GenerationOptions(neighbourhood[0], start_time))

        events = perf.read_events("perf_test", PERFORMANCE)
        assert len(events) == 1
        payload = events[0]["payload"]
        assert payload["component"] == "ItineraryBuilder.build"
        assert payload["steps"] == len(it.steps)
        assert payload["duration_ms"] >= 0


class TestTieBreak:

    def test_first_candidate_in_pool_wins_equal_scores(self, make_venue, start_time):
        s = make_venue("s")
        x = make_venue("x", north_km=0.3, name="Spot")
        y = make_venue("y", north_km=0.3, name="Spot")
        opts = GenerationOptions(s, start_time, duration_hours=2)

        assert generate_itinerary([s, x, y], opts).sequence[1] == x
        assert generate_itinerary([s, y, x], opts).sequence[1] == y


class TestPerformanceLog:

    def test_plain_call_writes_no_files(self, monkeypatch, start_time, neighbourhood):
        monkeypatch.setattr(config, "ENABLE_PERF_LOG", True)
        generate_itinerary(neighbourhood, GenerationOptions(neighbourhood[0], start_time))
        assert not os.path.exists(config.LOGS_DIR)

    def test_disabled_flag_skips_injected_logger(self, tmp_path, start_time, neighbourhood):
        perf = StructuredLogger(tmp_path)
        ItineraryBuilder(perf_logger=perf, session_id="off").build(
            neighbourhood, GenerationOptions(neighbourhood[0], start_time),
        )
        assert perf.read_events("off") == []

    @pytest.mark.skipif(not os.path.isdir("/proc/self/fd"), reason="needs /proc/self/fd")
    def test_repeated_builds_leave_no_open_files(self, monkeypatch, tmp_path, start_time, neighbourhood):
        monkeypatch.setattr(config, "ENABLE_PERF_LOG", True)
        perf = StructuredLogger(tmp_path)
        opts = GenerationOptions(neighbourhood[0], start_time, duration_hours=2)

        before = len(os.listdir("/proc/self/fd"))
        for _ in range(50):
            ItineraryBuilder(perf_logger=perf, session_id=str(uuid.uuid4())).build(neighbourhood, opts)
        after = len(os.listdir("/proc/self/fd"))

        assert after <= before
        assert len(list(tmp_path.glob("*.jsonl"))) == 50
