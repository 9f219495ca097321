"""
Interfaces for the detection collaborators the inference engine depends on.

Each one is an independent, fallible async operation over image bytes:

  BackgroundRemover.remove_background(image)   → bytes   raises on failure
  ImageUploader.upload_image(image, key, ct)   → url     raises on failure
  LabelDetector.detect_labels(image)           → labels  raises on failure
  TextDetector.detect_text(image)              → text    raises on failure
  CustomClassifier.classify(image)             → result  None on failure / unconfigured

The engine decides which failures are fatal; implementations just report them.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from analysis import ClassifierResult, RawLabel, RawTextDetection

logger = logging.getLogger(__name__)

# ── Prompt (shared by the vision-LLM classifiers) ─────────────────────────────

CLASSIFIER_PROMPT = """You are an expert fashion cataloguer.
Look at the single garment or shoe in the photo and return ONLY a valid JSON
object — no markdown, no prose.

JSON schema (omit a field or use null when you cannot tell):
{
  "domain":              "APPAREL | FOOTWEAR",
  "brand":               "brand name if a logo or label is readable",
  "pieceType":           "plural catalog type, e.g. Shirts, Pants, Dresses, Sneakers, Boots",
  "color":               "dominant color, e.g. Black, Navy Blue, Beige",
  "material":            "main material, e.g. Cotton, Denim, Leather, Suede",
  "confidence":          0.0-1.0 overall certainty,
  "brandConfidence":     0-100,
  "pieceTypeConfidence": 0-100,
  "colorConfidence":     0-100,
  "materialConfidence":  0-100
}
"""


def parse_json_response(raw: str, provider_name: str) -> dict:
    """
    Parse JSON from a model response, handling markdown fences gracefully.
    Raises ValueError on parse failure.
    """
    text = (raw or "").strip()
    # Strip ```json ... ``` or ``` ... ``` fences if present
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("[%s] Non-JSON response: %s", provider_name, text[:300])
        raise ValueError(f"[{provider_name}] JSON parse error: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"[{provider_name}] expected a JSON object, got {type(data).__name__}")
    return data


def sniff_mime(image_bytes: bytes) -> str:
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"GIF8":
        return "image/gif"
    if image_bytes[:4] == b"RIFF":
        return "image/webp"
    return "image/jpeg"


# ── Abstract collaborators ────────────────────────────────────────────────────

class BackgroundRemover(ABC):
    name: str

    @abstractmethod
    async def remove_background(self, image_bytes: bytes) -> bytes:
        """Return the image with its background removed."""
        ...


class ImageUploader(ABC):
    name: str

    @abstractmethod
    async def upload_image(self, image_bytes: bytes, key: str, content_type: str) -> str:
        """Store image_bytes under key and return a URL for it."""
        ...


class LabelDetector(ABC):
    name: str

    @abstractmethod
    async def detect_labels(self, image_bytes: bytes) -> list[RawLabel]:
        """Labels in relevance order; [] when nothing was detected."""
        ...


class TextDetector(ABC):
    name: str

    @abstractmethod
    async def detect_text(self, image_bytes: bytes) -> list[RawTextDetection]:
        """LINE and WORD detections in reading order; [] when there is no text."""
        ...


class CustomClassifier(ABC):
    name: str

    @abstractmethod
    async def classify(self, image_bytes: bytes) -> Optional[ClassifierResult]:
        """Best guess for the item, or None when the classifier failed."""
        ...


@dataclass
class Collaborators:
    """The set of collaborators one inference run uses. Only labels are required."""
    label_detector: LabelDetector
    text_detector: Optional[TextDetector] = None
    classifier: Optional[CustomClassifier] = None
    background_remover: Optional[BackgroundRemover] = None
    uploader: Optional[ImageUploader] = None
