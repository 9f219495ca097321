"""
Shared pytest fixtures.

Every test starts from the built-in keyword tables, the default domain and an
empty collaborator cache, so no test depends on the developer's .env file.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from analysis import LINE, WORD, ClassifierResult, RawLabel, RawTextDetection  # noqa: E402
from collaborators.base import (  # noqa: E402
    BackgroundRemover,
    Collaborators,
    CustomClassifier,
    ImageUploader,
    LabelDetector,
    TextDetector,
)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Reset module caches and pin the config values the engine reads."""
    import config
    import vocabulary
    import collaborators.manager as manager_mod

    monkeypatch.setattr(config, "DEFAULT_DOMAIN", "APPAREL")
    monkeypatch.setattr(config, "VOCABULARY_FILE", None)
    monkeypatch.setattr(config, "COLLABORATOR_TIMEOUT_S", 5.0)
    vocabulary.reset_vocabulary()
    manager_mod.reset()
    yield
    vocabulary.reset_vocabulary()
    manager_mod.reset()


# ── Builders ──────────────────────────────────────────────────────────────────

def labels(*names: str, confidence: float = 90.0) -> list[RawLabel]:
    return [RawLabel(name, confidence) for name in names]


def lines(*texts: str) -> list[RawTextDetection]:
    return [RawTextDetection(LINE, t, 95.0) for t in texts]


def words(*texts: str) -> list[RawTextDetection]:
    return [RawTextDetection(WORD, t, 95.0) for t in texts]


def make_collaborators(
    label_result=None,
    text_result=None,
    classifier_result: Optional[ClassifierResult] = None,
    remove_result=b"processed-bytes",
    upload_result="https://cdn.test/processed/img.jpg",
    with_classifier: bool = True,
    with_remover: bool = True,
    with_uploader: bool = True,
) -> Collaborators:
    """
    Mocked collaborator set. Pass an exception instance as any *_result to
    make that collaborator raise it.
    """
    def mock_for(spec, method: str, result, name: str):
        m = MagicMock(spec=spec)
        m.name = name
        if isinstance(result, BaseException):
            setattr(m, method, AsyncMock(side_effect=result))
        else:
            setattr(m, method, AsyncMock(return_value=result))
        return m

    return Collaborators(
        label_detector=mock_for(LabelDetector, "detect_labels",
                                [] if label_result is None else label_result, "labels"),
        text_detector=mock_for(TextDetector, "detect_text",
                               [] if text_result is None else text_result, "text"),
        classifier=mock_for(CustomClassifier, "classify", classifier_result, "classifier")
        if with_classifier else None,
        background_remover=mock_for(BackgroundRemover, "remove_background", remove_result, "remover")
        if with_remover else None,
        uploader=mock_for(ImageUploader, "upload_image", upload_result, "uploader")
        if with_uploader else None,
    )
