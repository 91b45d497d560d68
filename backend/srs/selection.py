"""Study session card selection.

Overdue material comes first. When there is not enough of it to fill a
session, the newest not-yet-due cards top it up so a session is never empty
while the deck has cards.
"""

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from datetime import datetime

from backend.srs.scheduler import ReviewState


@dataclass(frozen=True)
class CardSnapshot:
    """A card's identity, creation time and review state, read by the caller."""

    card_id: Hashable
    state: ReviewState
    created_at: datetime


def select_study_cards(
    cards: Iterable[CardSnapshot],
    max_session_size: int,
    now: datetime,
) -> list:
    """Pick the card ids for a study session, in presentation order.

    Args:
        cards: Snapshot of every card in the deck. Duplicate ids are
            collapsed to their first occurrence.
        max_session_size: Upper bound on the returned list.
        now: The reference instant for deciding what is due.

    Returns:
        Due cards by due date ascending, then (if room remains) not-due cards
        by creation time descending. Ties are broken by card id.

    Raises:
        ValueError: If ``max_session_size`` is negative.
    """
    if max_session_size < 0:
        raise ValueError(f"max_session_size must be >= 0, got {max_session_size}")

    seen: set = set()
    due: list[CardSnapshot] = []
    not_due: list[CardSnapshot] = []
    for card in cards:
        if card.card_id in seen:
            continue
        seen.add(card.card_id)
        if card.state.next_review_date <= now:
            due.append(card)
        else:
            not_due.append(card)

    due.sort(key=lambda c: (c.state.next_review_date, c.card_id))
    selected = [c.card_id for c in due[:max_session_size]]

    remaining = max_session_size - len(selected)
    if remaining > 0:
        # Newest first; stable sort keeps ids ascending within equal timestamps.
        not_due.sort(key=lambda c: c.card_id)
        not_due.sort(key=lambda c: c.created_at, reverse=True)
        selected.extend(c.card_id for c in not_due[:remaining])

    return selected
