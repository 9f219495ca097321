"""
Confidence scoring for a fused attribute record.

overall   — classifier confidence × 100, or BASE_CONFIDENCE without a classifier
attribute — 0 when the attribute did not resolve; otherwise the classifier's
            own per-attribute score when it sent one, else the attribute's
            fixed default (the fallback sources differ in reliability)

All scores are integers clamped to 0–100. A resolved attribute never scores 0
and an unresolved one always does.
"""
from __future__ import annotations

import math
from typing import Optional

from analysis import AttributeConfidence, ClassifierResult
from attribute_resolvers import ResolvedAttributes

BASE_CONFIDENCE = 50

DEFAULT_BRAND_CONFIDENCE      = 70
DEFAULT_PIECE_TYPE_CONFIDENCE = 80
DEFAULT_COLOR_CONFIDENCE      = 85
DEFAULT_MATERIAL_CONFIDENCE   = 60


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _score(value: float) -> int:
    """Round half up (0.5 → 1) and clamp into 0–100."""
    return max(0, min(100, round_half_up(value)))


def _usable(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def _attribute_score(resolved: Optional[str], reported: Optional[float], default: int) -> int:
    if resolved is None:
        return 0
    if _usable(reported):
        score = _score(reported)
        if score > 0:
            return score
    return default


def overall_confidence(classifier_result: Optional[ClassifierResult]) -> int:
    if classifier_result is None or not _usable(classifier_result.confidence):
        return BASE_CONFIDENCE
    return _score(classifier_result.confidence * 100)


def compute_confidence(
    classifier_result: Optional[ClassifierResult],
    resolved: ResolvedAttributes,
) -> AttributeConfidence:
    cr = classifier_result or ClassifierResult()
    return AttributeConfidence(
        overall=overall_confidence(classifier_result),
        brand=_attribute_score(resolved.brand, cr.brand_confidence, DEFAULT_BRAND_CONFIDENCE),
        piece_type=_attribute_score(resolved.piece_type, cr.piece_type_confidence, DEFAULT_PIECE_TYPE_CONFIDENCE),
        color=_attribute_score(resolved.color, cr.color_confidence, DEFAULT_COLOR_CONFIDENCE),
        material=_attribute_score(resolved.material, cr.material_confidence, DEFAULT_MATERIAL_CONFIDENCE),
    )
