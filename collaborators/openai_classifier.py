"""
OpenAI vision model used as the custom classifier (gpt-4o-mini by default).

The model is prompted for the same JSON shape the dedicated classifier
endpoint returns, so the rest of the engine cannot tell them apart.
"""
from __future__ import annotations

import base64
import logging
import time
from typing import Optional

from openai import AsyncOpenAI

from analysis import ClassifierResult
from collaborators.base import CLASSIFIER_PROMPT, CustomClassifier, parse_json_response, sniff_mime

logger = logging.getLogger(__name__)

USER_PROMPT = "Describe this item and return the JSON."


class OpenAIClassifier(CustomClassifier):

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        self.name = f"openai/{model}"
        self.model_id = model
        self._client = AsyncOpenAI(api_key=api_key)

    async def classify(self, image_bytes: bytes) -> Optional[ClassifierResult]:
        try:
            raw = await self._complete(image_bytes)
            data = parse_json_response(raw, self.name)
        except Exception as exc:
            logger.error("[%s] Classifier failed: %s", self.name, exc)
            return None
        return ClassifierResult.from_dict(data)

    async def _complete(self, image_bytes: bytes) -> str:
        b64 = base64.b64encode(image_bytes).decode()
        t0 = time.monotonic()

        response = await self._client.chat.completions.create(
            model=self.model_id,
            max_tokens=300,
            temperature=0,
            messages=[
                {"role": "system", "content": CLASSIFIER_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:{sniff_mime(image_bytes)};base64,{b64}",
                                "detail": "low",
                            },
                        },
                        {"type": "text", "text": USER_PROMPT},
                    ],
                },
            ],
        )

        logger.info("[%s] OK — latency=%dms", self.name, int((time.monotonic() - t0) * 1000))
        return response.choices[0].message.content
