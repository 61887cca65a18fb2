# carousel_engine.py
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)

FRONT_FACE = "front"
BACK_FACE = "back"


@dataclass(frozen=True)
class Card:
    front: str
    back: str


@dataclass(frozen=True)
class CarouselFrame:
    """Everything the UI needs to draw one deck: the single visible card and its nav bar."""
    card_index: int
    card: Card
    visible_face: str
    visible_text: str
    prev_disabled: bool
    next_disabled: bool
    position_label: str

    @property
    def front_visible(self) -> bool:
        return self.visible_face == FRONT_FACE

    @property
    def back_visible(self) -> bool:
        return self.visible_face == BACK_FACE


@dataclass
class CarouselState:
    cards: tuple
    current_index: int = 0
    flipped: set = field(default_factory=set)

    def __post_init__(self):
        self.cards = tuple(self.cards)
        if not self.cards:
            raise ValueError("A card carousel needs at least one card.")
        for card in self.cards:
            if not isinstance(card, Card):
                raise TypeError(f"Carousel cards must be Card instances, got {type(card).__name__}")
        if not (0 <= self.current_index < len(self.cards)):
            raise ValueError(f"current_index {self.current_index} out of range for {len(self.cards)} cards")
        logger.debug(f"CarouselState Inst:{str(id(self))[-6:]} created with {len(self.cards)} cards")

    @classmethod
    def from_payload(cls, raw_cards):
        """Build a deck from the server's `[{"front": ..., "back": ...}, ...]` list."""
        return cls(cards=tuple(Card(front=c["front"], back=c["back"]) for c in raw_cards))

    @property
    def total(self) -> int:
        return len(self.cards)

    @property
    def current_card(self) -> Card:
        return self.cards[self.current_index]

    def is_flipped(self, index: int) -> bool:
        return index in self.flipped

    @property
    def can_go_prev(self) -> bool:
        return self.current_index > 0

    @property
    def can_go_next(self) -> bool:
        return self.current_index < self.total - 1

    def flip(self):
        if self.current_index in self.flipped:
            self.flipped.discard(self.current_index)
        else:
            self.flipped.add(self.current_index)

    def next(self):
        if not self.can_go_next:
            logger.debug(f"next() ignored at last card ({self.current_index + 1}/{self.total})")
            return
        self.flipped.discard(self.current_index)  # reset the card being left
        self.current_index += 1

    def prev(self):
        if not self.can_go_prev:
            logger.debug("prev() ignored at first card")
            return
        self.flipped.discard(self.current_index)
        self.current_index -= 1

    def position_label(self) -> str:
        return f"Card {self.current_index + 1} of {self.total}"

    def render_frame(self) -> CarouselFrame:
        card = self.current_card
        showing_back = self.is_flipped(self.current_index)
        return CarouselFrame(
            card_index=self.current_index,
            card=card,
            visible_face=BACK_FACE if showing_back else FRONT_FACE,
            visible_text=card.back if showing_back else card.front,
            prev_disabled=not self.can_go_prev,
            next_disabled=not self.can_go_next,
            position_label=self.position_label(),
        )
