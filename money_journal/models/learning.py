"""
Learning Models for Money Journal

Cards are static reference data: loaded once, never mutated.
UserProgress is the per-user record of which cards were shown,
acknowledged or dismissed. Timestamps are epoch milliseconds.
"""

from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import ConfigDict, Field, PlainSerializer

from money_journal.models.finance import JournalModel


class ContentType(str, Enum):
    """Kind of learning card."""
    TIP = "tip"
    SCENARIO = "scenario"
    QUIZ = "quiz"
    FUNFACT = "funfact"
    REFLECTION = "reflection"
    CHALLENGE = "challenge"
    CELEBRATION = "celebration"  # Milestone cards, shown once per threshold


class InteractionType(str, Enum):
    """How the child answers a card."""
    THUMBS = "thumbs"
    MULTIPLE_CHOICE = "multiple-choice"
    EMOJI = "emoji"
    YES_NO = "yes-no"
    SLIDER = "slider"
    SWIPE = "swipe"


ProgressLevel = Annotated[int, Field(ge=1, le=4)]

# Sets are stored sorted so the persisted record is stable between writes
IdSet = Annotated[
    set[str],
    PlainSerializer(lambda ids: sorted(ids), return_type=list[str], when_used="json"),
]


class SliderLabels(JournalModel):
    model_config = ConfigDict(frozen=True)

    min: str
    max: str


class InteractionData(JournalModel):
    """Question, options and answer key for interactive cards."""

    model_config = ConfigDict(frozen=True)

    question: Optional[str] = None
    options: Optional[tuple[str, ...]] = None
    correct_answer: Optional[Union[int, str]] = None
    explanation: Optional[str] = None
    emoji_options: Optional[tuple[str, ...]] = None
    slider_labels: Optional[SliderLabels] = None


class LearningCard(JournalModel):
    """One educational card. Immutable at runtime."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    level: ProgressLevel
    type: ContentType
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    interaction_type: InteractionType
    interaction_data: Optional[InteractionData] = None
    requires_acknowledgment: bool
    alternate_formats: tuple[str, ...] = Field(
        default=(),
        description="IDs of other cards teaching the same concept"
    )

    @property
    def is_celebration(self) -> bool:
        return self.type == ContentType.CELEBRATION


class InteractionRecord(JournalModel):
    """A single acknowledged card and the child's answer."""

    card_id: str = Field(..., min_length=1)
    timestamp: int = Field(..., ge=0, description="Epoch milliseconds")
    interaction_type: str
    response: Any = None


class UserProgress(JournalModel):
    """
    Learning state for one user.

    A card id may sit in both seen and dismissed. Acknowledged and
    dismissed are exclusive per presentation but both accumulate across
    alternate-format retries of the same concept.
    """

    current_level: ProgressLevel = 1
    seen_card_ids: IdSet = Field(default_factory=set)
    acknowledged_card_ids: IdSet = Field(default_factory=set)
    dismissed_card_ids: IdSet = Field(default_factory=set)
    dismissed_timestamps: dict[str, int] = Field(
        default_factory=dict,
        description="card id -> epoch ms of the last dismissal"
    )
    last_shown_timestamp: int = Field(
        default=0,
        ge=0,
        description="Epoch ms; 0 means nothing shown yet"
    )
    level_unlocked_dates: dict[int, int] = Field(
        default_factory=dict,
        description="level -> epoch ms it was reached"
    )
    interaction_history: list[InteractionRecord] = Field(default_factory=list)


class LearningStats(JournalModel):
    """Counters shown on the learning hub."""

    cards_shown: int = Field(ge=0)
    cards_acknowledged: int = Field(ge=0)
    cards_dismissed: int = Field(ge=0)
    current_level: ProgressLevel
