"""
Attribute inference — turns one garment photo into an ItemAttributeAnalysis.

Flow (one call per uploaded photo, nothing shared between calls):

  image ─┬─ background removal → upload          best effort, never aborts
         ├─ label detection                       required: failure is re-raised
         ├─ text detection                        failure → no text
         └─ classifier                            failure → no classifier result
                      │  (all four run concurrently; the join waits for every one)
                      ▼
         domain → brand / piece type / color / material → confidence → record

Detectors and the classifier always see the original bytes; only the upload
uses the background-removed image. Each collaborator call is bounded by
COLLABORATOR_TIMEOUT_S and a timeout counts as that collaborator failing.
"""
from __future__ import annotations

import asyncio
import logging
import os
import re
import time
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

import config
from analysis import ClassifierResult, ItemAttributeAnalysis, RawLabel, RawTextDetection
from attribute_resolvers import detected_text_values, resolve_attributes
from collaborators.base import Collaborators
from confidence import compute_confidence
from domain_classifier import classify_domain
from tag_reader import detect_viewpoint, extract_size, parse_composition
from vocabulary import Vocabulary
from vufs import VufsExtraction
from vufs import extract_vufs_properties as _vufs_from_analysis

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROCESSED_PREFIX = "processed"
PROCESSED_CONTENT_TYPE = "image/jpeg"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def processed_image_key(filename: str, timestamp_ms: int) -> str:
    """processed/<unix-ms>-<filename>, with any directory part and unsafe characters removed."""
    base = os.path.basename(filename.replace("\\", "/"))
    safe = _UNSAFE_KEY_CHARS.sub("_", base).strip("._") or "image.jpg"
    return f"{PROCESSED_PREFIX}/{timestamp_ms}-{safe}"


async def _bounded(call: Awaitable[T], timeout_s: Optional[float]) -> T:
    if timeout_s is None or timeout_s <= 0:
        return await call
    return await asyncio.wait_for(call, timeout_s)


# ── Individual collaborator paths ─────────────────────────────────────────────

async def _remove_and_upload(
    image_bytes: bytes,
    key: str,
    collaborators: Collaborators,
    timeout_s: Optional[float],
) -> tuple[bool, Optional[str]]:
    """Returns (background_removed, processed_image_url); (False, None) on any failure."""
    remover, uploader = collaborators.background_remover, collaborators.uploader
    if remover is None or uploader is None:
        return False, None

    try:
        processed = await _bounded(remover.remove_background(image_bytes), timeout_s)
    except Exception as exc:
        logger.warning("[%s] Background removal failed: %r", remover.name, exc)
        return False, None

    try:
        url = await _bounded(uploader.upload_image(processed, key, PROCESSED_CONTENT_TYPE), timeout_s)
    except Exception as exc:
        logger.warning("[%s] Upload of %s failed: %r", uploader.name, key, exc)
        return False, None

    return True, url


async def _detect_text(
    image_bytes: bytes,
    collaborators: Collaborators,
    timeout_s: Optional[float],
) -> list[RawTextDetection]:
    detector = collaborators.text_detector
    if detector is None:
        return []
    try:
        return list(await _bounded(detector.detect_text(image_bytes), timeout_s))
    except Exception as exc:
        logger.warning("[%s] Text detection failed, continuing without text: %r", detector.name, exc)
        return []


async def _classify(
    image_bytes: bytes,
    collaborators: Collaborators,
    timeout_s: Optional[float],
) -> Optional[ClassifierResult]:
    classifier = collaborators.classifier
    if classifier is None:
        return None
    try:
        return await _bounded(classifier.classify(image_bytes), timeout_s)
    except Exception as exc:
        logger.warning("[%s] Classifier failed, continuing without it: %r", classifier.name, exc)
        return None


# ── Fusion ────────────────────────────────────────────────────────────────────

def fuse(
    labels: Sequence[RawLabel],
    texts: Sequence[RawTextDetection],
    classifier_result: Optional[ClassifierResult],
    background_removed: bool = False,
    processed_image_url: Optional[str] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> ItemAttributeAnalysis:
    """Combine settled collaborator outputs into the final record. Pure."""
    domain = classify_domain(labels, classifier_result, vocabulary)
    resolved = resolve_attributes(domain, labels, texts, classifier_result, vocabulary)
    confidence = compute_confidence(classifier_result, resolved)
    detected_text = detected_text_values(texts)
    composition = parse_composition(detected_text)

    return ItemAttributeAnalysis(
        domain=domain,
        detected_brand=resolved.brand,
        detected_piece_type=resolved.piece_type,
        detected_color=resolved.color,
        detected_material=resolved.material,
        confidence=confidence,
        raw_labels=tuple(labels),
        detected_text=tuple(detected_text),
        background_removed=background_removed,
        processed_image_url=processed_image_url if background_removed else None,
        detected_viewpoint=detect_viewpoint(labels, detected_text),
        detected_size=extract_size(detected_text),
        parsed_composition=tuple(composition) or None,
    )


# ── Public API ────────────────────────────────────────────────────────────────

async def infer_attributes(
    image_bytes: bytes,
    filename: str,
    collaborators: Optional[Collaborators] = None,
    *,
    timeout_s: Optional[float] = None,
    vocabulary: Optional[Vocabulary] = None,
    clock: Callable[[], float] = time.time,
) -> ItemAttributeAnalysis:
    """
    Analyse one uploaded photo.

    Raises whatever the label detector raised (including a timeout);
    every other collaborator failure degrades to its safe default.
    """
    if collaborators is None:
        from collaborators.manager import get_collaborators
        collaborators = get_collaborators()
    if timeout_s is None:
        timeout_s = config.COLLABORATOR_TIMEOUT_S

    key = processed_image_key(filename, int(clock() * 1000))
    t0 = time.monotonic()

    side_path, labels, texts, classifier_result = await asyncio.gather(
        _remove_and_upload(image_bytes, key, collaborators, timeout_s),
        _bounded(collaborators.label_detector.detect_labels(image_bytes), timeout_s),
        _detect_text(image_bytes, collaborators, timeout_s),
        _classify(image_bytes, collaborators, timeout_s),
        return_exceptions=True,
    )

    if isinstance(labels, BaseException):
        logger.error(
            "[%s] Label detection failed for %s: %r",
            collaborators.label_detector.name, filename, labels,
        )
        raise labels

    background_removed, processed_image_url = side_path
    analysis = fuse(
        labels,
        texts,
        classifier_result,
        background_removed=background_removed,
        processed_image_url=processed_image_url,
        vocabulary=vocabulary,
    )

    logger.info(
        "Analysed %s: domain=%s brand=%s piece=%s color=%s material=%s overall=%d bg=%s (%dms)",
        filename, analysis.domain, analysis.detected_brand, analysis.detected_piece_type,
        analysis.detected_color, analysis.detected_material, analysis.confidence.overall,
        analysis.background_removed, int((time.monotonic() - t0) * 1000),
    )
    return analysis


async def extract_vufs_properties(
    image_bytes: bytes,
    filename: str,
    collaborators: Optional[Collaborators] = None,
    **kwargs,
) -> VufsExtraction:
    """Run inference, then map the result onto catalog properties."""
    analysis = await infer_attributes(image_bytes, filename, collaborators, **kwargs)
    return _vufs_from_analysis(analysis, kwargs.get("vocabulary"))
