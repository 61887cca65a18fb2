# chat_transcript.py
from dataclasses import dataclass, field
import logging
import uuid

from carousel_engine import CarouselState

logger = logging.getLogger(__name__)

THINKING_TEXT = "..."


def _new_entry_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class UserMessage:
    text: str
    entry_id: str = field(default_factory=_new_entry_id)
    role = "user"


@dataclass(frozen=True)
class BotMessage:
    text: str
    entry_id: str = field(default_factory=_new_entry_id)
    role = "assistant"


@dataclass(frozen=True)
class ThinkingPlaceholder:
    entry_id: str = field(default_factory=_new_entry_id)
    role = "assistant"

    @property
    def text(self) -> str:
        return THINKING_TEXT


@dataclass(frozen=True)
class CardCarousel:
    carousel: CarouselState
    entry_id: str = field(default_factory=_new_entry_id)
    role = "assistant"

    @property
    def cards(self):
        return self.carousel.cards


class Transcript:
    """Append-only chat log.

    Every mutation moves `scroll_target_id` to the newest entry and then calls
    `on_change(transcript)`. The hook runs only after the log is consistent, so a
    hook that raises never leaves a half-applied change behind.
    Only ThinkingPlaceholder entries are ever removed.
    """

    def __init__(self, on_change=None):
        self._entries = []
        self.on_change = on_change
        self.has_greeting_been_dismissed = False
        self.scroll_target_id = None

    @property
    def entries(self) -> tuple:
        return tuple(self._entries)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    @property
    def latest_entry(self):
        return self._entries[-1] if self._entries else None

    @property
    def live_placeholders(self) -> list:
        return [e for e in self._entries if isinstance(e, ThinkingPlaceholder)]

    def append(self, entry):
        self._append_entry(entry)
        self._scroll_to_latest()
        return entry

    def remove_thinking_placeholder(self, placeholder=None) -> bool:
        """Remove `placeholder` (or the newest live one if not given). Returns False if there was nothing to remove."""
        removed = self._remove_placeholder_entry(placeholder)
        if removed:
            self._scroll_to_latest()
        return removed

    def resolve_placeholder(self, placeholder, entry):
        """Swap a request's placeholder for its terminal entry, notifying once after both changes."""
        self._remove_placeholder_entry(placeholder)
        self._append_entry(entry)
        self._scroll_to_latest()
        return entry

    def entries_since(self, start: int) -> tuple:
        return tuple(self._entries[start:])

    def _append_entry(self, entry):
        if not isinstance(entry, (UserMessage, BotMessage, ThinkingPlaceholder, CardCarousel)):
            raise TypeError(f"Unsupported transcript entry: {type(entry).__name__}")
        if isinstance(entry, UserMessage) and not self.has_greeting_been_dismissed:
            self.has_greeting_been_dismissed = True
        self._entries.append(entry)
        logger.debug(f"Transcript append: {type(entry).__name__} ({len(self._entries)} entries)")

    def _remove_placeholder_entry(self, placeholder=None) -> bool:
        if placeholder is None:
            live = self.live_placeholders
            if not live:
                return False
            placeholder = live[-1]
        for idx, entry in enumerate(self._entries):
            if entry is placeholder:
                del self._entries[idx]
                logger.debug(f"Transcript removed thinking placeholder {placeholder.entry_id}")
                return True
        return False

    def _scroll_to_latest(self):
        latest = self.latest_entry
        self.scroll_target_id = latest.entry_id if latest is not None else None
        if self.on_change is not None:
            self.on_change(self)
