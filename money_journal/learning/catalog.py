"""
Learning Card Catalog

The cards are static reference data shipped as ``cards.json`` inside the
package. They are loaded once, validated, and never mutated.

On load we also check the catalog hangs together: unique ids, every
alternate format points at a real card, and the four milestone
celebration cards exist.
"""

import json
from functools import lru_cache
from importlib import resources
from typing import Iterable, Optional

from money_journal.models.learning import LearningCard
from money_journal.validation.validator import ValidationError, validate_array


CARDS_RESOURCE = "cards.json"

FIRST_SAVE_CARD_ID = "celebrate-first-save"

# (balance threshold, card id), checked highest first
CELEBRATION_MILESTONES: tuple[tuple[int, str], ...] = (
    (1500, "celebrate-1500"),
    (500, "celebrate-500"),
    (100, "celebrate-100"),
)


class LearningCatalog:
    """Immutable, indexed set of learning cards."""

    def __init__(self, cards: Iterable[LearningCard]):
        self._cards = tuple(cards)
        self._by_id: dict[str, LearningCard] = {}
        for card in self._cards:
            if card.id in self._by_id:
                raise ValidationError(f"Duplicate learning card id: {card.id}", field="id")
            self._by_id[card.id] = card
        self._check_references()

    def _check_references(self) -> None:
        for card in self._cards:
            for alternate_id in card.alternate_formats:
                if alternate_id not in self._by_id:
                    raise ValidationError(
                        f"Card {card.id} lists unknown alternate format {alternate_id}",
                        field="alternateFormats",
                    )

        required = [FIRST_SAVE_CARD_ID] + [card_id for _, card_id in CELEBRATION_MILESTONES]
        for card_id in required:
            card = self._by_id.get(card_id)
            if card is None or not card.is_celebration:
                raise ValidationError(f"Missing celebration card: {card_id}", field="id")

    @property
    def cards(self) -> tuple[LearningCard, ...]:
        return self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._by_id

    def get_card(self, card_id: str) -> Optional[LearningCard]:
        return self._by_id.get(card_id)

    def cards_for_level(self, level: int) -> list[LearningCard]:
        """Every card at or below ``level``, celebrations included."""
        return [card for card in self._cards if card.level <= level]


def load_catalog(raw: Optional[str] = None) -> LearningCatalog:
    """
    Parse and validate a catalog.

    Args:
        raw: JSON text; defaults to the packaged cards.json
    """
    if raw is None:
        raw = resources.files(__package__).joinpath(CARDS_RESOURCE).read_text(encoding="utf-8")

    data = json.loads(raw)
    cards = validate_array(LearningCard, data["cards"], "Invalid learning card")
    return LearningCatalog(cards)


@lru_cache()
def get_catalog() -> LearningCatalog:
    """The packaged catalog (cached)."""
    return load_catalog()


def get_card(card_id: str) -> Optional[LearningCard]:
    return get_catalog().get_card(card_id)
