"""
Learning Package

Progressive money lessons for children: a static card catalog, a pure
selector that decides what to show next, and a service that persists
each user's progress.
"""

from money_journal.learning.catalog import (
    CELEBRATION_MILESTONES,
    FIRST_SAVE_CARD_ID,
    LearningCatalog,
    get_card,
    get_catalog,
    load_catalog,
)
from money_journal.learning.selector import (
    calculate_user_level,
    check_for_celebration,
    get_cards_for_level,
    get_next_card,
    initialize_user_progress,
    mark_card_as_acknowledged,
    mark_card_as_dismissed,
    mark_card_as_shown,
    update_level,
)
from money_journal.learning.service import (
    FIRST_USE_KEY,
    LearningService,
    progress_key,
)

__all__ = [
    # Catalog
    "CELEBRATION_MILESTONES",
    "FIRST_SAVE_CARD_ID",
    "LearningCatalog",
    "get_card",
    "get_catalog",
    "load_catalog",
    # Selector
    "calculate_user_level",
    "check_for_celebration",
    "get_cards_for_level",
    "get_next_card",
    "initialize_user_progress",
    "mark_card_as_acknowledged",
    "mark_card_as_dismissed",
    "mark_card_as_shown",
    "update_level",
    # Service
    "FIRST_USE_KEY",
    "LearningService",
    "progress_key",
]
