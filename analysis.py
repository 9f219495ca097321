"""
analysis.py — data model shared by the collaborators and the inference engine.

Inputs (what the collaborators hand back):
  RawLabel          — one label from the label detector, confidence 0–100
  RawTextDetection  — one LINE or WORD from the text detector
  ClassifierResult  — optional best guess from the custom classifier

Output (what the engine hands to the caller):
  ItemAttributeAnalysis — immutable, one per uploaded photo
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

APPAREL  = "APPAREL"
FOOTWEAR = "FOOTWEAR"
DOMAINS  = (APPAREL, FOOTWEAR)

LINE = "LINE"
WORD = "WORD"


# ── Collaborator outputs ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class RawLabel:
    name: str
    confidence: float       # 0–100

    def to_dict(self) -> dict:
        return {"name": self.name, "confidence": self.confidence}


@dataclass(frozen=True)
class RawTextDetection:
    kind: str               # LINE | WORD
    text: str
    confidence: float


def _clean_str(value: Any) -> Optional[str]:
    """Blank and non-string values carry no signal."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _clean_number(value: Any) -> Optional[float]:
    """NaN and ±Infinity are dropped along with anything non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_domain(value: Any) -> Optional[str]:
    text = _clean_str(value)
    if text is None:
        return None
    upper = text.upper()
    return upper if upper in DOMAINS else None


@dataclass
class ClassifierResult:
    """
    Output of the custom classifier. Every field is optional and independent:
    a result may carry only `confidence`, only a brand, or anything between.
    """
    domain: Optional[str] = None
    brand: Optional[str] = None
    piece_type: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    confidence: Optional[float] = None              # 0–1
    brand_confidence: Optional[float] = None        # 0–100
    piece_type_confidence: Optional[float] = None   # 0–100
    color_confidence: Optional[float] = None        # 0–100
    material_confidence: Optional[float] = None     # 0–100

    @classmethod
    def from_dict(cls, data: dict) -> "ClassifierResult":
        """
        Build from a classifier JSON payload. Accepts the camelCase keys the
        model endpoint emits (pieceType, brandConfidence, …) as well as
        snake_case. Blank strings are dropped, numeric strings are coerced.
        """
        def pick(snake: str, camel: str) -> Any:
            return data.get(camel, data.get(snake))

        return cls(
            domain=normalize_domain(data.get("domain")),
            brand=_clean_str(data.get("brand")),
            piece_type=_clean_str(pick("piece_type", "pieceType")),
            color=_clean_str(data.get("color")),
            material=_clean_str(data.get("material")),
            confidence=_clean_number(data.get("confidence")),
            brand_confidence=_clean_number(pick("brand_confidence", "brandConfidence")),
            piece_type_confidence=_clean_number(pick("piece_type_confidence", "pieceTypeConfidence")),
            color_confidence=_clean_number(pick("color_confidence", "colorConfidence")),
            material_confidence=_clean_number(pick("material_confidence", "materialConfidence")),
        )


# ── Engine output ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AttributeConfidence:
    """Integer scores, each 0–100."""
    overall: int
    brand: int = 0
    piece_type: int = 0
    color: int = 0
    material: int = 0

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "brand": self.brand,
            "piece_type": self.piece_type,
            "color": self.color,
            "material": self.material,
        }


@dataclass(frozen=True)
class CompositionEntry:
    material: str
    percentage: int

    def to_dict(self) -> dict:
        return {"material": self.material, "percentage": self.percentage}


@dataclass(frozen=True)
class ItemAttributeAnalysis:
    """Structured, confidence-scored description of one garment photo."""
    domain: str                             # APPAREL | FOOTWEAR
    detected_brand: Optional[str]
    detected_piece_type: Optional[str]
    detected_color: Optional[str]
    detected_material: Optional[str]
    confidence: AttributeConfidence
    raw_labels: tuple[RawLabel, ...]
    detected_text: tuple[str, ...]
    background_removed: bool
    processed_image_url: Optional[str]      # set only when removal AND upload succeeded

    # Read off tags / labels after fusion; never influence the fields above
    detected_viewpoint: Optional[str] = None
    detected_size: Optional[str] = None
    parsed_composition: Optional[tuple[CompositionEntry, ...]] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "domain": self.domain,
            "detected_brand": self.detected_brand,
            "detected_piece_type": self.detected_piece_type,
            "detected_color": self.detected_color,
            "detected_material": self.detected_material,
            "confidence": self.confidence.to_dict(),
            "raw_labels": [label.to_dict() for label in self.raw_labels],
            "detected_text": list(self.detected_text),
            "background_removed": self.background_removed,
            "processed_image_url": self.processed_image_url,
            "detected_viewpoint": self.detected_viewpoint,
            "detected_size": self.detected_size,
            "parsed_composition": (
                [entry.to_dict() for entry in self.parsed_composition]
                if self.parsed_composition else None
            ),
        }
