"""
Tests for collaborators/google_vision.py.

The aiohttp session is replaced by a MagicMock so no request leaves the test.
"""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from analysis import LINE, WORD, RawLabel
from collaborators.google_vision import GoogleVisionDetector

SESSION = "collaborators.google_vision.aiohttp.ClientSession"


@pytest.fixture
def detector():
    return GoogleVisionDetector(api_key="test-key", max_labels=5)


def fake_session(payload: dict, status: int = 200) -> MagicMock:
    mock_resp = MagicMock()
    mock_resp.status = status
    mock_resp.json = AsyncMock(return_value=payload)
    mock_resp.text = AsyncMock(return_value="error text")
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)

    mock_session = MagicMock()
    mock_session.post = MagicMock(return_value=mock_resp)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=False)
    return mock_session


@pytest.mark.asyncio
class TestDetectLabels:
    async def test_labels_rescaled_in_order(self, detector):
        session = fake_session({"responses": [{"labelAnnotations": [
            {"description": "Clothing", "score": 0.955},
            {"description": "Shirt", "score": 0.892},
            {"description": "", "score": 0.5},
        ]}]})

        with patch(SESSION, return_value=session):
            result = await detector.detect_labels(b"img")

        assert result == [RawLabel("Clothing", 95.5), RawLabel("Shirt", 89.2)]
        payload = session.post.call_args.kwargs["json"]
        assert payload["requests"][0]["features"] == [{"type": "LABEL_DETECTION", "maxResults": 5}]
        assert session.post.call_args.kwargs["params"] == {"key": "test-key"}

    async def test_no_labels_is_empty_list(self, detector):
        with patch(SESSION, return_value=fake_session({"responses": [{}]})):
            assert await detector.detect_labels(b"img") == []

    async def test_http_error_raises(self, detector):
        with patch(SESSION, return_value=fake_session({}, status=403)):
            with pytest.raises(RuntimeError, match="403"):
                await detector.detect_labels(b"img")

    async def test_api_error_raises(self, detector):
        payload = {"responses": [{"error": {"message": "Bad image data."}}]}
        with patch(SESSION, return_value=fake_session(payload)):
            with pytest.raises(RuntimeError, match="Bad image data"):
                await detector.detect_labels(b"img")


@pytest.mark.asyncio
class TestDetectText:
    async def test_lines_then_words(self, detector):
        payload = {"responses": [{"textAnnotations": [
            {"description": "ZARA\nMade in Portugal\n"},
            {"description": "ZARA"},
            {"description": "Made"},
        ]}]}

        with patch(SESSION, return_value=fake_session(payload)):
            result = await detector.detect_text(b"img")

        assert [(t.kind, t.text) for t in result] == [
            (LINE, "ZARA"), (LINE, "Made in Portugal"), (WORD, "ZARA"), (WORD, "Made"),
        ]

    async def test_no_text(self, detector):
        with patch(SESSION, return_value=fake_session({"responses": [{}]})):
            assert await detector.detect_text(b"img") == []
