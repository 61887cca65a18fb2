import asyncio
import json

import httpx

from llm_processors import GeminiAPIProcessor, OllamaLlamaProcessor, build_llm_processor


def _ollama(handler):
    return OllamaLlamaProcessor(base_url="http://ollama.test/", model_name="llama-test", transport=httpx.MockTransport(handler))


def test_ollama_json_output_is_parsed() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((str(request.url), json.loads(request.content)))
        return httpx.Response(200, json={"response": json.dumps({"cards": [{"front": "f", "back": "b"}]})})

    result = asyncio.run(_ollama(handler).generate_text("sys", "Photosynthesis", output_format_json=True))
    assert result == {"cards": [{"front": "f", "back": "b"}]}
    url, payload = seen[0]
    assert url == "http://ollama.test/api/generate"
    assert payload["format"] == "json"
    assert payload["system"] == "sys"
    assert payload["stream"] is False


def test_ollama_bad_json_returns_error_dict() -> None:
    result = asyncio.run(_ollama(lambda r: httpx.Response(200, json={"response": "not json"})).generate_text("s", "u", output_format_json=True))
    assert result["error"] == "Failed to parse LLM JSON output"
    assert result["raw_output"] == "not json"


def test_ollama_http_error_returns_error_dict() -> None:
    result = asyncio.run(_ollama(lambda r: httpx.Response(503, text="busy")).generate_text("s", "u"))
    assert result["error"].startswith("Ollama HTTP error 503")


def test_ollama_text_output_is_stripped() -> None:
    result = asyncio.run(_ollama(lambda r: httpx.Response(200, json={"response": "  hi  "})).generate_text("s", "u"))
    assert result == "hi"


def test_build_llm_processor_falls_back_to_ollama_without_key() -> None:
    processor = build_llm_processor({"llm_provider": "gemini", "gemini_api_key": "", "ollama_endpoint": "http://o", "ollama_model": "m"})
    assert isinstance(processor, OllamaLlamaProcessor)
    assert processor.provider_name == "ollama:m"


def test_build_llm_processor_uses_gemini_with_key() -> None:
    processor = build_llm_processor({"llm_provider": "gemini", "gemini_api_key": "test-key", "gemini_model": "gemini-2.0-flash"})
    assert isinstance(processor, GeminiAPIProcessor)
    assert processor.provider_name == "gemini:gemini-2.0-flash"
