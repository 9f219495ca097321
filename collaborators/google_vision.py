"""
Google Cloud Vision label + text detector over the REST API.

One `images:annotate` call per feature:
  LABEL_DETECTION → labelAnnotations[{description, score 0–1}]
  TEXT_DETECTION  → textAnnotations[0] is the full text block (newline-separated
                    lines), textAnnotations[1:] are the individual words

Scores are rescaled to 0–100 so every label detector speaks the same units.
"""
from __future__ import annotations

import base64
import logging

import aiohttp

import config
from analysis import LINE, WORD, RawLabel, RawTextDetection
from collaborators.base import LabelDetector, TextDetector

logger = logging.getLogger(__name__)


class GoogleVisionDetector(LabelDetector, TextDetector):

    def __init__(self, api_key: str, max_labels: int = 20, timeout_s: float = 15) -> None:
        self.name = "google-vision"
        self._key = api_key
        self._max_labels = max_labels
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)

    async def detect_labels(self, image_bytes: bytes) -> list[RawLabel]:
        response = await self._annotate(image_bytes, "LABEL_DETECTION", self._max_labels)
        labels = [
            RawLabel(
                name=annotation.get("description", ""),
                confidence=round(float(annotation.get("score", 0.0)) * 100, 1),
            )
            for annotation in response.get("labelAnnotations", [])
            if annotation.get("description")
        ]
        logger.info("[%s] %d labels", self.name, len(labels))
        return labels

    async def detect_text(self, image_bytes: bytes) -> list[RawTextDetection]:
        response = await self._annotate(image_bytes, "TEXT_DETECTION")
        annotations = response.get("textAnnotations", [])
        if not annotations:
            return []

        detections: list[RawTextDetection] = []
        full = annotations[0]
        full_score = float(full.get("score", 0.0)) * 100
        for line in full.get("description", "").split("\n"):
            if line.strip():
                detections.append(RawTextDetection(kind=LINE, text=line.strip(), confidence=full_score))

        for word in annotations[1:]:
            text = word.get("description", "").strip()
            if text:
                detections.append(RawTextDetection(
                    kind=WORD, text=text, confidence=float(word.get("score", 0.0)) * 100,
                ))
        logger.info("[%s] %d text detections", self.name, len(detections))
        return detections

    # ── HTTP helper ───────────────────────────────────────────────────────────

    async def _annotate(self, image_bytes: bytes, feature: str, max_results: int | None = None) -> dict:
        """Single images:annotate call. Returns the first response object."""
        feature_spec: dict = {"type": feature}
        if max_results:
            feature_spec["maxResults"] = max_results
        payload = {
            "requests": [{
                "image": {"content": base64.b64encode(image_bytes).decode()},
                "features": [feature_spec],
            }]
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(
                config.GOOGLE_VISION_URL,
                params={"key": self._key},
                json=payload,
                timeout=self._timeout,
            ) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise RuntimeError(f"[{self.name}] {feature} error {resp.status}: {text[:200]}")
                data = await resp.json()

        responses = data.get("responses") or [{}]
        first = responses[0]
        if "error" in first:
            message = first["error"].get("message", "unknown error")
            raise RuntimeError(f"[{self.name}] {feature} failed: {message}")
        return first
