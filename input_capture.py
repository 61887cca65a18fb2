# input_capture.py
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

LEARN_MODES = ("revision", "learning")
DEFAULT_LEARN_MODE = "revision"
LEARN_MODE_LABELS = {
    "revision": "Revision (quick review)",
    "learning": "Learning (first time)",
}


@dataclass(frozen=True)
class RequestCycle:
    topic: str
    mode: str

    def to_payload(self) -> dict:
        return {"topic": self.topic, "learnMode": self.mode}


def capture_submission(raw_topic, mode):
    """Return a RequestCycle for a submit, or None when the topic is blank (the submit is ignored)."""
    topic = (raw_topic or "").strip()
    if not topic:
        logger.debug("Empty topic submitted; ignoring.")
        return None
    if mode not in LEARN_MODES:
        raise ValueError(f"Learn mode must be one of {LEARN_MODES}, got {mode!r}")
    return RequestCycle(topic=topic, mode=mode)
