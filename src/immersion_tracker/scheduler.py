"""SM-2 style review scheduler with again/hard/good/easy answers."""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from immersion_tracker.models import Difficulty, as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerConfig:
    initial_ease_factor: float = 2.5
    minimum_ease_factor: float = 1.3
    minimum_interval: int = 1
    maximum_interval: int = 36500
    again_ease_penalty: float = 0.8
    hard_ease_penalty: float = 0.15
    hard_interval_multiplier: float = 1.2
    easy_ease_bonus: float = 0.1
    easy_interval_multiplier: float = 1.3
    good_first_interval: int = 1
    easy_first_interval: int = 4
    second_interval: int = 6


DEFAULT_CONFIG = SchedulerConfig()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always going up."""
    return int(math.floor(value + 0.5))


def _clamp_state(repetitions, ease_factor, interval, config: SchedulerConfig) -> tuple[int, float, float]:
    # Stored values can be corrupt; keep the computation total.
    if not _is_finite(repetitions) or repetitions < 0:
        repetitions = 0
    if not _is_finite(ease_factor) or ease_factor < config.minimum_ease_factor:
        ease_factor = config.minimum_ease_factor
    if not _is_finite(interval) or interval < 0:
        interval = 0
    interval = min(interval, config.maximum_interval)
    return int(repetitions), float(ease_factor), float(interval)


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _grow(value: float, config: SchedulerConfig) -> int:
    # A huge ease factor can push the product past float range.
    if not _is_finite(value) or value > config.maximum_interval:
        return config.maximum_interval
    return round_half_up(value)


def schedule(
    difficulty: Difficulty | str,
    repetitions: int,
    ease_factor: float,
    interval: float,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> dict:
    """Calculate the next interval, repetition count and ease factor.

    Args:
        difficulty: One of again, hard, good, easy.
        repetitions: Consecutive non-"again" answers since the last lapse.
        ease_factor: Current ease factor (floor 1.3).
        interval: Current interval in days.
        config: Scheduling constants.

    Returns:
        Dict with updated interval, repetitions, ease_factor.

    Raises:
        ValueError: If difficulty is not a known category.
    """
    difficulty = Difficulty(difficulty)
    repetitions, ease_factor, interval = _clamp_state(repetitions, ease_factor, interval, config)
    floor_ef = config.minimum_ease_factor
    new_ef = ease_factor

    if difficulty is Difficulty.AGAIN:
        new_interval = config.minimum_interval
        new_repetitions = 0
        new_ef = max(floor_ef, ease_factor - config.again_ease_penalty)
    elif difficulty is Difficulty.HARD:
        new_interval = _grow(interval * config.hard_interval_multiplier, config)
        new_repetitions = repetitions + 1
        new_ef = max(floor_ef, ease_factor - config.hard_ease_penalty)
    elif difficulty is Difficulty.GOOD:
        if repetitions == 0:
            new_interval = config.good_first_interval
        elif repetitions == 1:
            new_interval = config.second_interval
        else:
            new_interval = _grow(interval * ease_factor, config)
        new_repetitions = repetitions + 1
    else:
        # Interval grows with the ease factor from before the bonus.
        if repetitions == 0:
            new_interval = config.easy_first_interval
        elif repetitions == 1:
            new_interval = config.second_interval
        else:
            new_interval = _grow(interval * ease_factor * config.easy_interval_multiplier, config)
        new_repetitions = repetitions + 1
        new_ef = ease_factor + config.easy_ease_bonus

    return {
        "interval": min(config.maximum_interval, max(config.minimum_interval, new_interval)),
        "repetitions": new_repetitions,
        "ease_factor": round(new_ef, 2),
    }


def compute_next_review(
    card,
    difficulty: Difficulty | str,
    now: datetime,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> dict:
    """Return the scheduling fields to persist after answering a card.

    ``card`` is anything with ``ease_factor``, ``interval`` and ``repetitions``
    attributes. ``next_review`` is ``now`` plus the new interval in whole
    24-hour days.
    """
    difficulty = Difficulty(difficulty)
    now = as_utc(now)
    updated = schedule(
        difficulty,
        repetitions=card.repetitions,
        ease_factor=card.ease_factor,
        interval=card.interval,
        config=config,
    )
    logger.debug(
        "Scheduled card %s as %s: interval %s -> %s, ease %s -> %s",
        getattr(card, "id", None), difficulty.value,
        card.interval, updated["interval"], card.ease_factor, updated["ease_factor"],
    )
    return {
        **updated,
        "difficulty": difficulty,
        "last_reviewed": now,
        "next_review": now + timedelta(days=updated["interval"]),
    }
