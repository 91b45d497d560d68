"""SM-2 derived spaced repetition scheduler.

A card's scheduling state is moved forward one rating at a time. Every call is
a pure function of (state, rating, policy, now): the scheduler never reads a
clock, touches storage, or keeps anything between calls.

Key concepts:
- Interval: days until the next review. Stored as a real number so that
  multipliers accumulate smoothly over many reviews.
- Ease factor: how quickly intervals grow. Never drops below the policy floor,
  except that the EASY branch adds its bonus without clamping.
- Due date: always ``now + ceil(interval)`` days, so a card is never shown
  before its interval has fully elapsed.
- Rating: Again / Hard / Good / Easy.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from backend.srs.errors import InvalidPolicy, InvalidRating, InvalidState

if TYPE_CHECKING:
    from backend.config import Settings

DEFAULT_MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5


class Rating(Enum):
    """The learner's self-reported recall quality for one review."""

    AGAIN = "again"  # Forgot: full reset
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


@dataclass(frozen=True)
class RatingAdjustment:
    """Per-rating scheduling coefficients."""

    interval_multiplier: float  # Applied to the current interval (0 = reset)
    ease_change: float  # Added to the ease factor
    min_interval: float  # Floor on the new interval, in days


DEFAULT_ADJUSTMENTS: Mapping[Rating, RatingAdjustment] = MappingProxyType(
    {
        Rating.AGAIN: RatingAdjustment(interval_multiplier=0.0, ease_change=-0.2, min_interval=0.0),
        Rating.HARD: RatingAdjustment(interval_multiplier=1.2, ease_change=-0.15, min_interval=1.0),
        Rating.GOOD: RatingAdjustment(interval_multiplier=2.5, ease_change=0.0, min_interval=3.0),
        Rating.EASY: RatingAdjustment(interval_multiplier=4.0, ease_change=0.1, min_interval=7.0),
    }
)


@dataclass(frozen=True)
class SchedulingPolicy:
    """Coefficients for every rating plus the ease factor floor and default.

    Raises:
        InvalidPolicy: If a rating is missing or a coefficient is out of range.
    """

    adjustments: Mapping[Rating, RatingAdjustment] = field(
        default_factory=lambda: DEFAULT_ADJUSTMENTS, hash=False
    )
    min_ease_factor: float = DEFAULT_MIN_EASE_FACTOR
    default_ease_factor: float = DEFAULT_EASE_FACTOR

    def __post_init__(self) -> None:
        # Read-only copy of the validated table
        object.__setattr__(self, "adjustments", MappingProxyType(dict(self.adjustments)))
        missing = [r.name for r in Rating if r not in self.adjustments]
        if missing:
            raise InvalidPolicy(f"Policy has no adjustment for: {', '.join(missing)}")
        for rating, adj in self.adjustments.items():
            if not adj.interval_multiplier >= 0:
                raise InvalidPolicy(
                    f"{rating.name} interval multiplier must be >= 0, got {adj.interval_multiplier}"
                )
            if not math.isfinite(adj.ease_change):
                raise InvalidPolicy(
                    f"{rating.name} ease change must be a finite number, got {adj.ease_change}"
                )
            if not adj.min_interval >= 0:
                raise InvalidPolicy(
                    f"{rating.name} minimum interval must be >= 0, got {adj.min_interval}"
                )
        if not self.min_ease_factor > 0:
            raise InvalidPolicy(f"Ease factor floor must be > 0, got {self.min_ease_factor}")
        if not self.default_ease_factor >= self.min_ease_factor:
            raise InvalidPolicy(
                f"Default ease factor {self.default_ease_factor} is below "
                f"the floor {self.min_ease_factor}"
            )

    def for_rating(self, rating: Rating) -> RatingAdjustment:
        return self.adjustments[rating]


DEFAULT_POLICY = SchedulingPolicy()


def policy_from_settings(settings: Settings) -> SchedulingPolicy:
    """Build the default policy with the configured ease floor and default."""
    return SchedulingPolicy(
        min_ease_factor=settings.min_ease_factor,
        default_ease_factor=settings.default_ease_factor,
    )


@dataclass(frozen=True)
class ReviewState:
    """The scheduling-relevant part of a card."""

    interval: float  # Days until the next review
    ease_factor: float
    next_review_date: datetime  # Due once now >= next_review_date
    review_count: int  # Completed ratings, informational only

    @classmethod
    def initial(cls, now: datetime, policy: SchedulingPolicy = DEFAULT_POLICY) -> ReviewState:
        """Return the state of a freshly created card: due immediately."""
        return cls(
            interval=0.0,
            ease_factor=policy.default_ease_factor,
            next_review_date=now,
            review_count=0,
        )

    def is_due(self, now: datetime) -> bool:
        return now >= self.next_review_date


def validate_state(state: ReviewState, policy: SchedulingPolicy = DEFAULT_POLICY) -> None:
    """Reject malformed stored state instead of silently repairing it.

    Raises:
        InvalidState: On a negative (or NaN) interval, an ease factor below
            the policy floor, or a negative review count.
    """
    if not state.interval >= 0:
        raise InvalidState(f"Interval must be >= 0, got {state.interval}")
    if not state.ease_factor >= policy.min_ease_factor:
        raise InvalidState(
            f"Ease factor {state.ease_factor} is below the floor {policy.min_ease_factor}"
        )
    if state.review_count < 0:
        raise InvalidState(f"Review count must be >= 0, got {state.review_count}")


def _next_interval(state: ReviewState, rating: Rating, policy: SchedulingPolicy) -> float:
    adj = policy.for_rating(rating)
    if rating is Rating.AGAIN:
        return float(adj.min_interval)
    return max(float(adj.min_interval), state.interval * adj.interval_multiplier)


def _next_ease(state: ReviewState, rating: Rating, policy: SchedulingPolicy) -> float:
    adj = policy.for_rating(rating)
    if rating is Rating.AGAIN or rating is Rating.HARD:
        return max(policy.min_ease_factor, state.ease_factor + adj.ease_change)
    if rating is Rating.GOOD:
        return state.ease_factor
    if rating is Rating.EASY:
        # Not clamped in either direction.
        return state.ease_factor + adj.ease_change
    raise InvalidRating(f"No ease rule for rating {rating!r}")


def _due_after(now: datetime, interval: float) -> datetime:
    try:
        return now + timedelta(days=math.ceil(interval))
    except OverflowError:
        # Past the calendar's range: the card is effectively retired.
        return datetime.max.replace(tzinfo=now.tzinfo)


def compute_next_review(
    state: ReviewState,
    rating: Rating,
    policy: SchedulingPolicy = DEFAULT_POLICY,
    *,
    now: datetime,
) -> ReviewState:
    """Apply one rating to a card's review state.

    Args:
        state: The card's current state. Left untouched.
        rating: What the learner answered. Must be a ``Rating`` member.
        policy: Coefficients per rating (defaults to ``DEFAULT_POLICY``).
        now: The instant the rating was given.

    Returns:
        A new ReviewState with the next interval, ease factor, due date and
        review count.

    Raises:
        InvalidRating: If ``rating`` is not a ``Rating``.
        InvalidState: If ``state`` is malformed.
    """
    if not isinstance(rating, Rating):
        raise InvalidRating(f"Expected one of {[r.value for r in Rating]}, got {rating!r}")
    validate_state(state, policy)

    new_interval = _next_interval(state, rating, policy)
    return replace(
        state,
        interval=new_interval,
        ease_factor=_next_ease(state, rating, policy),
        next_review_date=_due_after(now, new_interval),
        review_count=state.review_count + 1,
    )


def preview_intervals(
    state: ReviewState,
    policy: SchedulingPolicy = DEFAULT_POLICY,
    *,
    now: datetime,
) -> dict[Rating, float]:
    """Return the interval each rating would produce, for labelling rating buttons."""
    return {
        rating: compute_next_review(state, rating, policy, now=now).interval
        for rating in Rating
    }
