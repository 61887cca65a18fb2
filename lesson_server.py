#!/usr/bin/env python3
"""
Cardemy lesson server

Single-endpoint passthrough to a generative model: POST a topic and a learn mode,
get back `{"cards": [{"front": ..., "back": ...}, ...]}`.

Usage:
  1. Create .env file with GEMINI_API_KEY=your_key (or CARDEMY_LLM_PROVIDER=ollama)
  2. python lesson_server.py
  3. Point the Streamlit app at http://localhost:3000/api/generate-lesson
"""

import asyncio
import logging

from flask import Flask, jsonify, request

from app_settings import load_app_settings
from lesson_logic import GENERATION_FAILURE_MESSAGE, generate_lesson_cards
from llm_processors import build_llm_processor

logger = logging.getLogger(__name__)


def create_app(llm_processor=None, settings=None):
    settings = settings or load_app_settings()
    app = Flask(__name__)
    app.config["LLM_PROCESSOR"] = llm_processor

    def get_llm_processor():
        if app.config["LLM_PROCESSOR"] is None:
            app.config["LLM_PROCESSOR"] = build_llm_processor(settings)
        return app.config["LLM_PROCESSOR"]

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        processor = app.config["LLM_PROCESSOR"]
        return jsonify({
            "status": "healthy",
            "llm_provider": processor.provider_name if processor is not None else settings.get("llm_provider"),
        })

    @app.route('/api/generate-lesson', methods=['POST'])
    def generate_lesson():
        """
        Generate a flashcard deck.

        Request body:
        {
            "topic": "Photosynthesis",
            "learnMode": "revision" | "learning"
        }
        """
        data = request.get_json(silent=True) or {}
        topic = str(data.get('topic') or '').strip()
        learn_mode = data.get('learnMode', 'revision')
        logger.info(f"SERVER: Received request for topic: \"{topic}\", Mode: \"{learn_mode}\"")

        if not topic:
            return jsonify({"error": "Please provide a topic."}), 400

        try:
            processor = get_llm_processor()
            result = asyncio.run(generate_lesson_cards(topic, learn_mode, processor.generate_text))
        except Exception as e:
            logger.error(f"AI Generation Error: {e}", exc_info=True)
            return jsonify({"error": GENERATION_FAILURE_MESSAGE}), 500

        if "error" in result:
            logger.error(f"AI Generation Error: {result['error']}")
            return jsonify({"error": GENERATION_FAILURE_MESSAGE}), 500
        logger.info(f"SERVER: Returning {len(result['cards'])} cards for \"{topic}\"")
        return jsonify(result)

    return app


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s')
    settings = load_app_settings()
    app = create_app(settings=settings)
    port = int(settings.get("server_port", 3000))
    logger.info(f"Cardemy server is running and listening on http://localhost:{port}")
    app.run(host='0.0.0.0', port=port, threaded=True)


if __name__ == '__main__':
    main()
