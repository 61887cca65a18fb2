# llm_processors.py
import asyncio
import json
import logging

import httpx
from google import genai
from google.genai import types as google_genai_types

logger = logging.getLogger(__name__)


class OllamaLlamaProcessor:
    def __init__(self, base_url="http://localhost:11434", model_name="llama3.1:8b", transport=None):
        self.base_url = base_url.strip().rstrip("/") if base_url else "http://localhost:11434"
        self.model_name = model_name.strip() if model_name else "llama3.1:8b"
        self.api_url = f"{self.base_url}/api/generate"
        self.transport = transport
        logger.debug(f"OllamaLlamaProcessor Inst:{id(self)} initialized for model: {self.model_name} at {self.api_url}")

    @property
    def provider_name(self) -> str:
        return f"ollama:{self.model_name}"

    async def generate_text(self, system_prompt: str, user_prompt: str, output_format_json: bool = False) -> str | dict:
        payload = {"model": self.model_name, "prompt": user_prompt, "system": system_prompt, "stream": False}
        if output_format_json:
            payload["format"] = "json"

        logger.debug(f"Ollama Request Payload: {payload}")
        try:
            async with httpx.AsyncClient(timeout=180.0, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload)
                logger.debug(f"Ollama Response Status: {response.status_code}")
                response.raise_for_status()
                response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"OllamaLlamaProcessor: HTTP status error from Ollama API: {e.response.status_code} - {e.response.text}")
            return {"error": f"Ollama HTTP error {e.response.status_code}: {e.response.text}", "raw_output": e.response.text}
        except httpx.RequestError as e:
            logger.error(f"OllamaLlamaProcessor: Request error to Ollama API: {e}", exc_info=True)
            return {"error": f"Ollama request error: {e}", "raw_output": ""}
        except json.JSONDecodeError as e:
            logger.error(f"OllamaLlamaProcessor: Ollama API body is not JSON: {e}")
            return {"error": "Ollama API returned a non-JSON body", "raw_output": response.text}

        generated_content = response_data.get("response", "")
        if not generated_content and "error" in response_data:
            logger.error(f"Ollama API returned an error in response: {response_data['error']}")
            return {"error": f"Ollama API error: {response_data['error']}", "raw_output": json.dumps(response_data)}

        if output_format_json:
            try:
                return json.loads(generated_content)
            except json.JSONDecodeError as e:
                logger.error(f"OllamaLlamaProcessor: Failed to parse JSON from: {generated_content}. Error: {e}")
                return {"error": "Failed to parse LLM JSON output", "raw_output": generated_content}
        return generated_content.strip()


class GeminiAPIProcessor:
    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash", max_output_tokens: int = 8000):
        self.instance_id_log = str(id(self))[-6:]
        if not api_key:
            logger.error(f"GeminiAPIProc Inst:{self.instance_id_log} Initialization failed: API key is missing.")
            raise ValueError("Gemini API key is required for GeminiAPIProcessor.")
        self.client = genai.Client(api_key=api_key)
        logger.info(f"GeminiAPIProc Inst:{self.instance_id_log} GenAI client CREATED with API key.")
        self.default_model_name_str = model_name or "gemini-2.0-flash"
        self.max_output_tokens = max_output_tokens
        self.generation_count = 0

    @property
    def provider_name(self) -> str:
        return f"gemini:{self.default_model_name_str}"

    async def _generate_content_collected(self, contents: list, generation_config_obj: google_genai_types.GenerateContentConfig) -> str:
        loop = asyncio.get_running_loop()

        def sync_call_gemini_stream_and_collect():
            full_text_response = ""
            response_stream = self.client.models.generate_content_stream(
                model=self.default_model_name_str,
                contents=contents,
                config=generation_config_obj,
            )
            for chunk in response_stream:
                if getattr(chunk, 'text', None):
                    full_text_response += chunk.text
            return full_text_response.strip()

        return await loop.run_in_executor(None, sync_call_gemini_stream_and_collect)

    async def generate_text(self, system_prompt: str, user_prompt: str, output_format_json: bool = False) -> str | dict:
        self.generation_count += 1
        log_prefix = f"GeminiAPIProc Inst:{self.instance_id_log} GenCall {self.generation_count} (Model: {self.default_model_name_str}):"

        contents = [google_genai_types.Content(role="user", parts=[google_genai_types.Part(text=user_prompt)])]
        gen_config_dict = {
            "response_mime_type": "application/json" if output_format_json else "text/plain",
            "max_output_tokens": self.max_output_tokens,
        }
        if system_prompt:
            gen_config_dict["system_instruction"] = [google_genai_types.Part.from_text(text=system_prompt)]
        generation_config_obj = google_genai_types.GenerateContentConfig(**gen_config_dict)

        logger.debug(f"{log_prefix} Calling Gemini. OutputJSON: {output_format_json}, System: '{system_prompt[:50]}...', User: '{user_prompt[:50]}...'")
        try:
            generated_text_response = await self._generate_content_collected(contents, generation_config_obj)
        except Exception as e:
            logger.error(f"{log_prefix} Gemini content streaming failed: {e}", exc_info=True)
            return {"error": f"Gemini content streaming failed - {type(e).__name__}", "raw_output": ""}

        if not output_format_json:
            return generated_text_response
        if not generated_text_response.startswith(("{", "[")):
            logger.error(f"{log_prefix} Expected JSON but got: {generated_text_response[:200]}")
            return {"error": "LLM did not return valid JSON format.", "raw_output": generated_text_response}
        try:
            return json.loads(generated_text_response)
        except json.JSONDecodeError as e:
            logger.error(f"{log_prefix} Failed to parse JSON from: {generated_text_response[:200]}. Error: {e}")
            return {"error": "Failed to parse LLM JSON output", "raw_output": generated_text_response}


def build_llm_processor(settings: dict):
    """Pick the processor named by `llm_provider`. Gemini falls back to Ollama when no API key is configured."""
    provider = (settings.get("llm_provider") or "gemini").strip().lower()
    api_key = (settings.get("gemini_api_key") or "").strip()
    if provider == "gemini" and api_key:
        return GeminiAPIProcessor(api_key=api_key, model_name=settings.get("gemini_model", "gemini-2.0-flash"))
    if provider == "gemini":
        logger.warning("Gemini selected but GEMINI_API_KEY is empty; falling back to Ollama.")
    elif provider != "ollama":
        logger.warning(f"Unknown llm_provider '{provider}'; using Ollama.")
    return OllamaLlamaProcessor(base_url=settings.get("ollama_endpoint"), model_name=settings.get("ollama_model"))
