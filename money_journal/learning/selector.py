"""
Learning Content Selector

Pure decision engine: given a user's progress and money signals, pick
the next card to show, or None.

Selection, in priority order:
1. Rate limit: nothing within an hour of the last card (not even celebrations)
2. Celebration: highest unacknowledged balance milestone reached
3. Dismissal retry: a card dismissed 7+ days ago comes back as its
   first unseen alternate format
4. Fresh content: a random unacknowledged, non-celebration card at or
   below the user's level

DESIGN DECISION: Time and randomness are parameters (``now_ms``, ``rng``)
so callers and tests control them. Nothing here raises and nothing
mutates its input; the mark_* functions return updated copies.
"""

import random
import time
from decimal import Decimal
from typing import Any, Optional, Sequence, Union

from money_journal.learning.catalog import (
    CELEBRATION_MILESTONES,
    FIRST_SAVE_CARD_ID,
    LearningCatalog,
    get_catalog,
)
from money_journal.models.learning import InteractionRecord, LearningCard, UserProgress


Number = Union[int, float, Decimal]

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR

DEFAULT_MIN_HOURS_BETWEEN_CARDS = 1.0
DEFAULT_DISMISSAL_RETRY_DAYS = 7.0


def current_time_ms() -> int:
    return int(time.time() * 1000)


def calculate_user_level(
    total_balance: Number,
    transaction_count: int,
    days_since_first_use: int = 0,
) -> int:
    """
    Level 1 to 4 from balance and engagement.

    Level 1 needs BOTH a small balance and few transactions; levels 2
    and 3 hold while EITHER signal is below its threshold. Account age
    does not affect the level.
    """
    if total_balance < 100 and transaction_count < 10:
        return 1
    if total_balance < 500 or transaction_count < 25:
        return 2
    if total_balance < 1500 or transaction_count < 50:
        return 3
    return 4


def get_cards_for_level(level: int, catalog: Optional[LearningCatalog] = None) -> list[LearningCard]:
    return (catalog or get_catalog()).cards_for_level(level)


def check_for_celebration(
    total_balance: Number,
    progress: UserProgress,
    catalog: Optional[LearningCatalog] = None,
) -> Optional[LearningCard]:
    """Highest milestone reached whose card is not yet acknowledged."""
    catalog = catalog or get_catalog()

    for threshold, card_id in CELEBRATION_MILESTONES:
        if total_balance >= threshold and card_id not in progress.acknowledged_card_ids:
            return catalog.get_card(card_id)

    if total_balance > 0 and FIRST_SAVE_CARD_ID not in progress.acknowledged_card_ids:
        return catalog.get_card(FIRST_SAVE_CARD_ID)

    return None


def _has_unseen_alternate(
    card: LearningCard,
    progress: UserProgress,
    catalog: LearningCatalog,
) -> bool:
    return any(
        catalog.get_card(alternate_id) is not None
        and alternate_id not in progress.seen_card_ids
        for alternate_id in card.alternate_formats
    )


def _dismissal_retries(
    available: Sequence[LearningCard],
    progress: UserProgress,
    catalog: LearningCatalog,
    now_ms: int,
    retry_days: float,
) -> list[LearningCard]:
    """Dismissed cards old enough to retry that still have an unseen alternate."""
    retries = []
    for card in available:
        if card.id not in progress.dismissed_card_ids:
            continue
        dismissed_at = progress.dismissed_timestamps.get(card.id)
        if dismissed_at is None or now_ms - dismissed_at < retry_days * MS_PER_DAY:
            continue
        if _has_unseen_alternate(card, progress, catalog):
            retries.append(card)
    return retries


def _retry_format(
    card: LearningCard,
    progress: UserProgress,
    catalog: LearningCatalog,
) -> Optional[LearningCard]:
    """
    The first alternate in the card's list, unless it was already seen.

    DESIGN DECISION: Only the first alternate is ever offered. A dismissed
    card whose first alternate was seen yields no retry and selection
    falls through to fresh content.
    """
    alternate = catalog.get_card(card.alternate_formats[0])
    if alternate is None or alternate.id in progress.seen_card_ids:
        return None
    return alternate


def get_next_card(
    progress: UserProgress,
    total_balance: Number,
    transaction_count: int,
    days_since_first_use: int = 0,
    *,
    now_ms: Optional[int] = None,
    rng: Optional[random.Random] = None,
    catalog: Optional[LearningCatalog] = None,
    min_hours_between_cards: float = DEFAULT_MIN_HOURS_BETWEEN_CARDS,
    dismissal_retry_days: float = DEFAULT_DISMISSAL_RETRY_DAYS,
) -> Optional[LearningCard]:
    """
    Pick the next card to show, or None when there is nothing to show.

    ``rng`` only needs a ``choice(seq)`` method; it defaults to the
    ``random`` module.
    """
    now_ms = current_time_ms() if now_ms is None else now_ms
    chooser = rng if rng is not None else random
    catalog = catalog or get_catalog()

    if now_ms - progress.last_shown_timestamp < min_hours_between_cards * MS_PER_HOUR:
        return None

    celebration = check_for_celebration(total_balance, progress, catalog)
    if celebration is not None:
        return celebration

    level = calculate_user_level(total_balance, transaction_count, days_since_first_use)
    available = catalog.cards_for_level(level)

    retries = _dismissal_retries(available, progress, catalog, now_ms, dismissal_retry_days)
    if retries:
        alternate = _retry_format(chooser.choice(retries), progress, catalog)
        if alternate is not None:
            return alternate

    fresh = [
        card for card in available
        if not card.is_celebration and card.id not in progress.acknowledged_card_ids
    ]
    if not fresh:
        return None
    return chooser.choice(fresh)


# =============================================================================
# Progress transitions
# =============================================================================

def initialize_user_progress(now_ms: Optional[int] = None) -> UserProgress:
    """Level 1, nothing seen, never rate-limited on the first check."""
    now_ms = current_time_ms() if now_ms is None else now_ms
    return UserProgress(current_level=1, level_unlocked_dates={1: now_ms})


def mark_card_as_shown(
    progress: UserProgress,
    card_id: str,
    now_ms: Optional[int] = None,
) -> UserProgress:
    now_ms = current_time_ms() if now_ms is None else now_ms
    return progress.model_copy(update={
        "seen_card_ids": progress.seen_card_ids | {card_id},
        "last_shown_timestamp": now_ms,
    })


def mark_card_as_acknowledged(
    progress: UserProgress,
    card_id: str,
    interaction_type: str,
    response: Any = None,
    now_ms: Optional[int] = None,
) -> UserProgress:
    """Record the acknowledgment and the child's answer, if any."""
    now_ms = current_time_ms() if now_ms is None else now_ms
    record = InteractionRecord(
        card_id=card_id,
        timestamp=now_ms,
        interaction_type=interaction_type,
        response=response,
    )
    return progress.model_copy(update={
        "acknowledged_card_ids": progress.acknowledged_card_ids | {card_id},
        "interaction_history": [*progress.interaction_history, record],
    })


def mark_card_as_dismissed(
    progress: UserProgress,
    card_id: str,
    now_ms: Optional[int] = None,
) -> UserProgress:
    now_ms = current_time_ms() if now_ms is None else now_ms
    return progress.model_copy(update={
        "dismissed_card_ids": progress.dismissed_card_ids | {card_id},
        "dismissed_timestamps": {**progress.dismissed_timestamps, card_id: now_ms},
    })


def update_level(
    progress: UserProgress,
    level: int,
    now_ms: Optional[int] = None,
) -> UserProgress:
    """Move to ``level``, stamping when it was reached. No-op if unchanged."""
    if level == progress.current_level:
        return progress
    now_ms = current_time_ms() if now_ms is None else now_ms
    return progress.model_copy(update={
        "current_level": level,
        "level_unlocked_dates": {**progress.level_unlocked_dates, level: now_ms},
    })
