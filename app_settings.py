# app_settings.py
import json
import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

SETTINGS_FILE_PATH = os.getenv("CARDEMY_SETTINGS_FILE", "cardemy_settings.json")

DEFAULT_SETTINGS = {
    "server_url": "http://localhost:3000/api/generate-lesson",
    "request_timeout": 180.0,
    "llm_provider": "gemini",
    "gemini_api_key": "",
    "gemini_model": "gemini-2.0-flash",
    "ollama_endpoint": "http://localhost:11434",
    "ollama_model": "llama3.1:8b",
    "server_port": 3000,
}

# settings key -> environment variable
ENV_OVERRIDES = {
    "server_url": "CARDEMY_SERVER_URL",
    "request_timeout": "CARDEMY_REQUEST_TIMEOUT",
    "llm_provider": "CARDEMY_LLM_PROVIDER",
    "gemini_api_key": "GEMINI_API_KEY",
    "gemini_model": "GEMINI_MODEL",
    "ollama_endpoint": "OLLAMA_ENDPOINT",
    "ollama_model": "OLLAMA_MODEL",
    "server_port": "CARDEMY_PORT",
}


def _coerce_setting(key, value):
    default = DEFAULT_SETTINGS[key]
    try:
        if isinstance(default, float):
            return float(value)
        if isinstance(default, int):
            return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value {value!r} for setting '{key}'. Using default {default!r}.")
        return default
    return str(value).strip()


def load_app_settings(path=None):
    """Defaults, then the JSON settings file, then environment variables (highest priority)."""
    path = path or SETTINGS_FILE_PATH
    settings = dict(DEFAULT_SETTINGS)
    if os.path.exists(path):
        try:
            with open(path, 'r') as f: file_settings = json.load(f)
            if isinstance(file_settings, dict):
                for key_s in DEFAULT_SETTINGS:
                    if key_s in file_settings: settings[key_s] = _coerce_setting(key_s, file_settings[key_s])
                logger.info(f"Loaded settings from {path}")
            else:
                logger.error(f"Settings file {path} does not hold a JSON object (got {type(file_settings).__name__}). Using defaults.")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading {path}: {e}. Using defaults.")
    else:
        logger.info(f"{path} not found. Using default settings.")
    for key_s, env_name in ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value:
            settings[key_s] = _coerce_setting(key_s, env_value)
    return settings


def save_app_settings(settings_dict, path=None):
    path = path or SETTINGS_FILE_PATH
    to_save = {k: v for k, v in settings_dict.items() if k in DEFAULT_SETTINGS}
    try:
        with open(path, 'w') as f: json.dump(to_save, f, indent=4)
        logger.info(f"Settings saved to {path}")
        return True
    except OSError as e:
        logger.error(f"Error saving settings to {path}: {e}")
        return False
