"""
Google Gemini used as the custom classifier — google-genai SDK (v1 API).
Same prompt and JSON shape as the OpenAI classifier.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from google import genai
from google.genai import types as genai_types

from analysis import ClassifierResult
from collaborators.base import CLASSIFIER_PROMPT, CustomClassifier, parse_json_response, sniff_mime

logger = logging.getLogger(__name__)

USER_PROMPT = "Describe this item and return the JSON."


class GeminiClassifier(CustomClassifier):

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash"):
        self.name = f"google/{model}"
        self.model_id = model
        self._client = genai.Client(api_key=api_key, http_options={"api_version": "v1"})

    async def classify(self, image_bytes: bytes) -> Optional[ClassifierResult]:
        try:
            raw = await self._generate(image_bytes)
            data = parse_json_response(raw, self.name)
        except Exception as exc:
            logger.error("[%s] Classifier failed: %s", self.name, exc)
            return None
        return ClassifierResult.from_dict(data)

    async def _generate(self, image_bytes: bytes) -> str:
        gen_config = genai_types.GenerateContentConfig(
            system_instruction=CLASSIFIER_PROMPT,
            temperature=0,
            max_output_tokens=300,
        )
        t0 = time.monotonic()

        response = await self._client.aio.models.generate_content(
            model=self.model_id,
            contents=[
                genai_types.Part.from_bytes(data=image_bytes, mime_type=sniff_mime(image_bytes)),
                USER_PROMPT,
            ],
            config=gen_config,
        )

        logger.info("[%s] OK — latency=%dms", self.name, int((time.monotonic() - t0) * 1000))
        return response.text
