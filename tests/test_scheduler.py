# tests/test_scheduler.py
import math
from datetime import timedelta

import pytest

from conftest import make_card
from immersion_tracker.models import Difficulty
from immersion_tracker.scheduler import (
    SchedulerConfig, compute_next_review, round_half_up, schedule,
)


def test_again_resets_card():
    result = schedule("again", repetitions=3, ease_factor=2.5, interval=15)
    assert result["interval"] == 1
    assert result["repetitions"] == 0
    assert result["ease_factor"] == pytest.approx(1.7)


def test_again_ease_factor_floor():
    result = schedule(Difficulty.AGAIN, repetitions=0, ease_factor=1.5, interval=1)
    assert result["ease_factor"] == pytest.approx(1.3)


def test_hard_grows_interval_by_twenty_percent():
    result = schedule("hard", repetitions=2, ease_factor=2.5, interval=10)
    assert result["interval"] == 12
    assert result["repetitions"] == 3
    assert result["ease_factor"] == pytest.approx(2.35)


def test_hard_on_new_card_gives_minimum_interval():
    result = schedule("hard", repetitions=0, ease_factor=2.5, interval=0)
    assert result["interval"] == 1
    assert result["repetitions"] == 1


def test_hard_ease_factor_floor():
    result = schedule("hard", repetitions=4, ease_factor=1.35, interval=5)
    assert result["ease_factor"] == pytest.approx(1.3)
    assert result["interval"] == 6


def test_good_first_review():
    """Brand-new card answered good: interval=1, repetitions=1."""
    result = schedule("good", repetitions=0, ease_factor=2.5, interval=0)
    assert result == {"interval": 1, "repetitions": 1, "ease_factor": 2.5}


def test_good_second_review():
    result = schedule("good", repetitions=1, ease_factor=2.5, interval=1)
    assert result == {"interval": 6, "repetitions": 2, "ease_factor": 2.5}


def test_good_third_review():
    """Third+ good: interval = old_interval * ease_factor."""
    result = schedule("good", repetitions=2, ease_factor=2.5, interval=6)
    assert result == {"interval": 15, "repetitions": 3, "ease_factor": 2.5}


def test_good_rounds_half_up():
    # 1 * 2.5 = 2.5 must become 3, not 2
    result = schedule("good", repetitions=2, ease_factor=2.5, interval=1)
    assert result["interval"] == 3


def test_easy_first_review():
    result = schedule("easy", repetitions=0, ease_factor=2.5, interval=0)
    assert result["interval"] == 4
    assert result["repetitions"] == 1
    assert result["ease_factor"] == pytest.approx(2.6)


def test_easy_second_review():
    result = schedule("easy", repetitions=1, ease_factor=2.5, interval=4)
    assert result["interval"] == 6
    assert result["repetitions"] == 2


def test_easy_uses_ease_factor_before_bonus():
    result = schedule("easy", repetitions=2, ease_factor=2.0, interval=10)
    assert result["interval"] == 26  # round(10 * 2.0 * 1.3)
    assert result["ease_factor"] == pytest.approx(2.1)


def test_easy_has_no_ease_ceiling():
    result = schedule("easy", repetitions=5, ease_factor=4.0, interval=30)
    assert result["ease_factor"] == pytest.approx(4.1)


def test_unknown_difficulty_rejected():
    with pytest.raises(ValueError):
        schedule("medium", repetitions=0, ease_factor=2.5, interval=0)


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(7.0) == 7


# --- Corrupt stored values ---


def test_negative_interval_clamped():
    result = schedule("good", repetitions=3, ease_factor=2.5, interval=-5)
    assert result["interval"] == 1


def test_nan_interval_clamped():
    result = schedule("hard", repetitions=3, ease_factor=2.5, interval=float("nan"))
    assert result["interval"] == 1


def test_nan_ease_factor_clamped_to_floor():
    result = schedule("good", repetitions=3, ease_factor=float("nan"), interval=10)
    assert result["ease_factor"] == pytest.approx(1.3)
    assert result["interval"] == 13


def test_infinite_ease_factor_clamped_to_floor():
    result = schedule("easy", repetitions=0, ease_factor=float("inf"), interval=0)
    assert math.isfinite(result["ease_factor"])
    assert result["ease_factor"] == pytest.approx(1.4)


def test_ease_factor_below_floor_clamped():
    result = schedule("good", repetitions=0, ease_factor=0.5, interval=0)
    assert result["ease_factor"] == pytest.approx(1.3)


def test_negative_repetitions_treated_as_new():
    result = schedule("good", repetitions=-2, ease_factor=2.5, interval=0)
    assert result["repetitions"] == 1
    assert result["interval"] == 1


# --- Properties over a spread of states ---


STATES = [
    (reps, ef, ivl)
    for reps in (0, 1, 2, 7)
    for ef in (1.3, 1.5, 2.5, 3.2)
    for ivl in (0, 1, 6, 15, 120)
]


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_floors_hold_for_every_state(difficulty):
    for reps, ef, ivl in STATES:
        result = schedule(difficulty, repetitions=reps, ease_factor=ef, interval=ivl)
        assert result["ease_factor"] >= 1.3
        assert result["interval"] >= 1
        assert isinstance(result["interval"], int)


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_repetitions_reset_only_on_again(difficulty):
    for reps, ef, ivl in STATES:
        result = schedule(difficulty, repetitions=reps, ease_factor=ef, interval=ivl)
        if difficulty is Difficulty.AGAIN:
            assert result["repetitions"] == 0
            assert result["interval"] == 1
        else:
            assert result["repetitions"] == reps + 1


# --- compute_next_review ---


def test_compute_next_review_returns_full_delta(now):
    card = make_card(1)
    delta = compute_next_review(card, "good", now)
    assert delta["difficulty"] is Difficulty.GOOD
    assert delta["last_reviewed"] == now
    assert delta["next_review"] == now + timedelta(days=1)
    assert delta["interval"] == 1
    assert delta["repetitions"] == 1
    assert delta["ease_factor"] == 2.5


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_next_review_is_interval_days_after_last_review(now, difficulty):
    card = make_card(1, repetitions=4, ease_factor=2.2, interval=11)
    delta = compute_next_review(card, difficulty, now)
    assert delta["next_review"] - delta["last_reviewed"] == timedelta(days=delta["interval"])


def test_compute_next_review_does_not_mutate_card(now):
    card = make_card(1, repetitions=2, interval=6)
    compute_next_review(card, "easy", now)
    assert card.repetitions == 2
    assert card.interval == 6
    assert card.ease_factor == 2.5


def test_compute_next_review_is_deterministic(now):
    card = make_card(1, repetitions=3, interval=15)
    assert compute_next_review(card, "hard", now) == compute_next_review(card, "hard", now)


def test_good_progression_scenario(now):
    card = make_card(1, ease_factor=2.5, interval=0, repetitions=0)
    expected = [(1, 1), (6, 2), (15, 3)]
    for interval, repetitions in expected:
        delta = compute_next_review(card, "good", now)
        assert (delta["interval"], delta["repetitions"], delta["ease_factor"]) == (interval, repetitions, 2.5)
        card.interval = delta["interval"]
        card.repetitions = delta["repetitions"]
        card.ease_factor = delta["ease_factor"]


def test_lapse_scenario(now):
    card = make_card(1, ease_factor=2.5, interval=15, repetitions=3)
    delta = compute_next_review(card, "again", now)
    assert delta["interval"] == 1
    assert delta["repetitions"] == 0
    assert delta["ease_factor"] == pytest.approx(1.7)


def test_custom_config(now):
    config = SchedulerConfig(easy_first_interval=3, minimum_ease_factor=1.5)
    card = make_card(1, ease_factor=1.6)
    assert compute_next_review(card, "easy", now, config)["interval"] == 3
    assert compute_next_review(card, "again", now, config)["ease_factor"] == pytest.approx(1.5)


# --- Very long intervals ---


def test_huge_stored_interval_is_capped(now):
    card = make_card(1, repetitions=5, ease_factor=2.5, interval=2_000_000)
    delta = compute_next_review(card, "good", now)
    assert delta["interval"] == 36500
    assert delta["next_review"] == now + timedelta(days=36500)


def test_float_max_interval_is_capped():
    result = schedule("easy", repetitions=5, ease_factor=2.5, interval=1e308)
    assert result["interval"] == 36500


def test_huge_ease_factor_is_capped():
    result = schedule("good", repetitions=5, ease_factor=1e308, interval=100)
    assert result["interval"] == 36500


def test_repeated_easy_answers_stay_within_cap(now):
    card = make_card(1)
    for _ in range(20):
        delta = compute_next_review(card, "easy", now)
        card.interval = delta["interval"]
        card.repetitions = delta["repetitions"]
        card.ease_factor = delta["ease_factor"]
    assert card.interval == 36500


def test_good_first_interval_is_configurable():
    config = SchedulerConfig(good_first_interval=2)
    assert schedule("good", repetitions=0, ease_factor=2.5, interval=0, config=config)["interval"] == 2


def test_naive_now_is_taken_as_utc(now):
    delta = compute_next_review(make_card(1), "good", now.replace(tzinfo=None))
    assert delta["last_reviewed"] == now
    assert delta["next_review"] == now + timedelta(days=1)
