# request_orchestrator.py
import json
import logging

import httpx

from carousel_engine import CarouselState
from chat_transcript import BotMessage, CardCarousel, ThinkingPlaceholder, UserMessage
from input_capture import capture_submission

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:3000/api/generate-lesson"
DEFAULT_REQUEST_TIMEOUT = 180.0

CONNECTION_FAILURE_MESSAGE = "Sorry, I'm having difficulties connecting to my brain. Please try again."
NO_CARDS_MESSAGE = "Sorry, I couldn't generate any flashcards for that topic."


def normalize_lesson_body(response_data):
    """Check a decoded server body against `{"cards": [{"front": str, "back": str}, ...]}`.

    Returns `{"cards": [...]}` (possibly empty) or an error dict with `error` and `raw_output`.
    """
    if not isinstance(response_data, dict):
        return {"error": f"Expected a JSON object, got {type(response_data).__name__}", "raw_output": json.dumps(response_data)}
    raw_cards = response_data.get("cards")
    if raw_cards is None:
        return {"cards": []}
    if not isinstance(raw_cards, list):
        return {"error": f"'cards' must be a list, got {type(raw_cards).__name__}", "raw_output": json.dumps(response_data)}
    cards = []
    for i, item in enumerate(raw_cards):
        if not isinstance(item, dict) or not isinstance(item.get("front"), str) or not isinstance(item.get("back"), str):
            return {"error": f"Card {i} is missing a string 'front' or 'back'", "raw_output": json.dumps(response_data)}
        cards.append({"front": item["front"], "back": item["back"]})
    return {"cards": cards}


class RequestOrchestrator:
    """Runs request cycles against the lesson server and writes their outcome into a Transcript.

    Each submit is independent: overlapping cycles each own their thinking placeholder,
    and their terminal entries land in completion order.
    """

    def __init__(self, transcript, server_url: str = DEFAULT_SERVER_URL, timeout: float = DEFAULT_REQUEST_TIMEOUT, transport=None):
        self.transcript = transcript
        self.server_url = (server_url or DEFAULT_SERVER_URL).strip()
        self.timeout = timeout
        self.transport = transport  # httpx transport override, e.g. MockTransport in tests
        self.cycle_count = 0

    async def handle_submit(self, raw_topic, mode):
        """Input capture plus submit. A blank topic touches nothing and returns None."""
        cycle = capture_submission(raw_topic, mode)
        if cycle is None:
            return None
        return await self.submit(cycle)

    async def submit(self, cycle):
        self.cycle_count += 1
        log_prefix = f"Cycle {self.cycle_count} (topic: '{cycle.topic[:40]}', mode: {cycle.mode}):"
        placeholder = ThinkingPlaceholder()
        terminal_entry = None
        # on_change may raise (e.g. a UI rerun); the finally still settles the cycle
        try:
            self.transcript.append(UserMessage(text=cycle.topic))
            self.transcript.append(placeholder)
            result = await self.fetch_cards(cycle)
            terminal_entry = self._terminal_entry_for(result, log_prefix)
        finally:
            if terminal_entry is None:
                logger.warning(f"{log_prefix} Cycle interrupted before a response was handled.")
                terminal_entry = BotMessage(text=CONNECTION_FAILURE_MESSAGE)
            self.transcript.resolve_placeholder(placeholder, terminal_entry)
        return terminal_entry

    def _terminal_entry_for(self, result, log_prefix):
        if "error" in result:
            logger.error(f"{log_prefix} Lesson request failed: {result['error']}. Raw: {str(result.get('raw_output', ''))[:200]}")
            return BotMessage(text=CONNECTION_FAILURE_MESSAGE)
        if not result["cards"]:
            logger.warning(f"{log_prefix} Server returned no cards.")
            return BotMessage(text=NO_CARDS_MESSAGE)

        carousel = CarouselState.from_payload(result["cards"])
        logger.info(f"{log_prefix} Received {carousel.total} cards.")
        return CardCarousel(carousel=carousel)

    async def fetch_cards(self, cycle) -> dict:
        payload = cycle.to_payload()
        logger.debug(f"Lesson Request Payload: {payload} -> {self.server_url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.server_url, json=payload)
                logger.debug(f"Lesson Response Status: {response.status_code}")
                response.raise_for_status()
                response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Lesson server HTTP status error: {e.response.status_code} - {e.response.text[:200]}")
            return {"error": f"Lesson server HTTP error {e.response.status_code}", "raw_output": e.response.text}
        except httpx.RequestError as e:
            logger.error(f"Request error to lesson server: {e}", exc_info=True)
            return {"error": f"Lesson server request error: {e}", "raw_output": ""}
        except json.JSONDecodeError as e:
            logger.error(f"Lesson server returned a body that is not JSON: {e}")
            return {"error": "Failed to parse lesson server JSON", "raw_output": response.text}
        except Exception as e:
            logger.error(f"Unexpected error calling lesson server: {e}", exc_info=True)
            return {"error": f"Lesson server unexpected error: {e}", "raw_output": ""}
        return normalize_lesson_body(response_data)
