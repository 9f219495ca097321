"""
Custom fashion classifier served behind an HTTP endpoint.

The endpoint receives the raw image bytes and answers with the classifier
JSON (domain, brand, pieceType, color, material, confidence and optional
per-attribute confidences). Any failure — network, HTTP status, bad JSON —
is logged and reported as "no result" so inference carries on without it.
"""
from __future__ import annotations

import logging
from typing import Optional

import aiohttp

from analysis import ClassifierResult
from collaborators.base import CustomClassifier, sniff_mime

logger = logging.getLogger(__name__)


class EndpointClassifier(CustomClassifier):

    def __init__(self, url: str, token: Optional[str] = None, timeout_s: float = 20) -> None:
        self.name = "endpoint"
        self._url = url
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)

    async def classify(self, image_bytes: bytes) -> Optional[ClassifierResult]:
        try:
            data = await self._invoke(image_bytes)
        except Exception as exc:
            logger.error("[%s] Classifier failed: %s", self.name, exc)
            return None
        if not isinstance(data, dict):
            logger.error("[%s] Unexpected classifier payload: %r", self.name, data)
            return None
        return ClassifierResult.from_dict(data)

    async def _invoke(self, image_bytes: bytes):
        headers = dict(self._headers, **{"Content-Type": sniff_mime(image_bytes)})
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self._url,
                data=image_bytes,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise RuntimeError(f"endpoint error {resp.status}: {text[:200]}")
                return await resp.json(content_type=None)
