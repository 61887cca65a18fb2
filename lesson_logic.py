# lesson_logic.py
import logging

logger = logging.getLogger(__name__)

PROMPT_BASE_INSTRUCTIONS = """You are "Cardemy," an expert teacher AI. Your job is to take a complex topic
and generate simple, clear flashcards. You MUST respond ONLY with JSON.
Do not add any text before or after the JSON object.
The JSON format MUST be an object containing a single key "cards",
which is an array of card objects (each with "front" and "back" keys).
"""

PROMPT_LEARNING_MODE = """The user is learning this topic for the FIRST TIME. Be extremely thorough.
Generate a comprehensive deck of 15 to 30 flashcards.
Cover all foundational concepts, key definitions, important processes, formulas, and key historical examples.
Ensure the deck provides a complete and deep understanding of the topic from the ground up.
"""

PROMPT_REVISION_MODE = """The user wants a quick REVISION of this topic. Be concise and high-level.
Generate only 5 to 10 essential flashcards.
Focus ONLY on the absolute most critical keywords, definitions, and core concepts needed for a fast review.
"""

GENERATION_FAILURE_MESSAGE = "The AI engine failed to generate a response. Please try again."


def build_system_prompt(mode):
    # anything other than "learning" gets the revision prompt
    if mode == "learning":
        return PROMPT_BASE_INSTRUCTIONS + PROMPT_LEARNING_MODE
    return PROMPT_BASE_INSTRUCTIONS + PROMPT_REVISION_MODE


def _normalize_cards_response(response):
    if isinstance(response, dict) and "error" in response:
        return response
    if isinstance(response, list):
        logger.warning(f"LLM returned a bare list of {len(response)} items; wrapping it as 'cards'.")
        response = {"cards": response}
    if not isinstance(response, dict):
        err_msg = f"LLM did not return a JSON object (got {type(response).__name__})."
        logger.error(f"{err_msg} Content: {str(response)[:300]}")
        return {"error": err_msg, "raw_output": str(response)}
    if not isinstance(response.get("cards"), list):
        err_msg = "LLM JSON object has no 'cards' list."
        logger.error(f"{err_msg} Content: {str(response)[:300]}")
        return {"error": err_msg, "raw_output": str(response)}
    return {"cards": response["cards"]}


async def generate_lesson_cards(topic, mode, generate_with_llm_func):
    """Ask the LLM for a deck on `topic`. Returns `{"cards": [...]}` or an error dict."""
    response = await generate_with_llm_func(
        system_prompt=build_system_prompt(mode),
        user_prompt=topic,
        output_format_json=True,
    )
    result = _normalize_cards_response(response)
    if "error" in result:
        logger.error(f"LLM Processor Error for lesson '{topic[:40]}' ({mode}): {result.get('error')}. Raw: {str(result.get('raw_output', ''))[:200]}")
    return result
