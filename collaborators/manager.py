"""
Collaborator Manager — builds the collaborator set from config and caches it.

  labels + text  → Google Cloud Vision         (required: GOOGLE_API_KEY)
  background     → rembg                       (BACKGROUND_REMOVAL_ENABLED)
  uploads        → MinIO / S3-compatible store (MINIO_ENDPOINT + keys)
  classifier     → CLASSIFIER_BACKEND: auto | endpoint | openai | gemini | none

Optional collaborators that are not configured are simply left out; the
engine treats a missing collaborator exactly like one that failed.
Modules are imported lazily so an unused backend's SDK is never loaded.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

import config
from collaborators.base import (
    BackgroundRemover,
    Collaborators,
    CustomClassifier,
    ImageUploader,
)

logger = logging.getLogger(__name__)

CLASSIFIER_BACKENDS = ("auto", "endpoint", "openai", "gemini", "none")

# Module-level cache, cleared by reset()
_collaborators: Optional[Collaborators] = None


def _build_background_remover() -> Optional[BackgroundRemover]:
    if not config.BACKGROUND_REMOVAL_ENABLED:
        logger.info("Skipped background remover (disabled by BACKGROUND_REMOVAL_ENABLED)")
        return None
    from collaborators.rembg_remover import RembgBackgroundRemover
    remover = RembgBackgroundRemover(config.REMBG_MODEL)
    logger.info("Loaded background remover: %s", remover.name)
    return remover


def _build_uploader() -> Optional[ImageUploader]:
    if not (config.MINIO_ENDPOINT and config.MINIO_ACCESS_KEY and config.MINIO_SECRET_KEY):
        logger.info("Skipped image uploader (MINIO_ENDPOINT / credentials not set)")
        return None
    from collaborators.minio_uploader import MinioImageUploader
    uploader = MinioImageUploader(
        endpoint=config.MINIO_ENDPOINT,
        access_key=config.MINIO_ACCESS_KEY,
        secret_key=config.MINIO_SECRET_KEY,
        bucket=config.MINIO_BUCKET,
        secure=config.MINIO_SECURE,
        public_base_url=config.MINIO_PUBLIC_BASE_URL,
        url_expiry=timedelta(hours=config.MINIO_URL_EXPIRY_HOURS),
    )
    logger.info("Loaded image uploader: %s", uploader.name)
    return uploader


def _build_classifier() -> Optional[CustomClassifier]:
    backend = config.CLASSIFIER_BACKEND
    if backend not in CLASSIFIER_BACKENDS:
        raise ValueError(
            f"Unknown CLASSIFIER_BACKEND '{backend}'. Choose one of: {', '.join(CLASSIFIER_BACKENDS)}"
        )
    if backend == "auto":
        backend = "endpoint" if config.CLASSIFIER_ENDPOINT_URL else "none"

    if backend == "none":
        logger.info("Skipped classifier (no backend configured)")
        return None

    if backend == "endpoint":
        if not config.CLASSIFIER_ENDPOINT_URL:
            logger.warning("CLASSIFIER_BACKEND=endpoint but CLASSIFIER_ENDPOINT_URL is not set")
            return None
        from collaborators.endpoint_classifier import EndpointClassifier
        classifier = EndpointClassifier(config.CLASSIFIER_ENDPOINT_URL, config.CLASSIFIER_ENDPOINT_TOKEN)

    elif backend == "openai":
        if not config.OPENAI_API_KEY:
            logger.warning("CLASSIFIER_BACKEND=openai but OPENAI_API_KEY is not set")
            return None
        from collaborators.openai_classifier import OpenAIClassifier
        classifier = OpenAIClassifier(config.OPENAI_API_KEY, config.OPENAI_CLASSIFIER_MODEL)

    else:
        if not config.GOOGLE_API_KEY:
            logger.warning("CLASSIFIER_BACKEND=gemini but GOOGLE_API_KEY is not set")
            return None
        from collaborators.gemini_classifier import GeminiClassifier
        classifier = GeminiClassifier(config.GOOGLE_API_KEY, config.GEMINI_CLASSIFIER_MODEL)

    logger.info("Loaded classifier: %s", classifier.name)
    return classifier


def _build_collaborators() -> Collaborators:
    if not config.GOOGLE_API_KEY:
        raise RuntimeError(
            "No label detector available.\n"
            "Set GOOGLE_API_KEY (Cloud Vision API enabled) in the environment or .env"
        )

    from collaborators.google_vision import GoogleVisionDetector
    vision = GoogleVisionDetector(config.GOOGLE_API_KEY, max_labels=config.LABEL_MAX_RESULTS)
    logger.info("Loaded label/text detector: %s", vision.name)

    return Collaborators(
        label_detector=vision,
        text_detector=vision,
        classifier=_build_classifier(),
        background_remover=_build_background_remover(),
        uploader=_build_uploader(),
    )


def get_collaborators() -> Collaborators:
    global _collaborators
    if _collaborators is None:
        _collaborators = _build_collaborators()
    return _collaborators


def reset() -> None:
    """Drop the cached set so the next call rebuilds it from config."""
    global _collaborators
    _collaborators = None
