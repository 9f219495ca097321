"""
Local background removal with rembg (U²-Net family models).

rembg is CPU-bound and synchronous, so the work runs in a worker thread to
keep the event loop free for the detector calls running alongside it.
The cut-out is flattened onto white and re-encoded as JPEG, which is the
format the processed image is stored in.
"""
from __future__ import annotations

import asyncio
import io
import logging

from PIL import Image
from rembg import new_session, remove

from collaborators.base import BackgroundRemover

logger = logging.getLogger(__name__)


class RembgBackgroundRemover(BackgroundRemover):

    def __init__(self, model: str = "u2net", jpeg_quality: int = 90) -> None:
        self.name = f"rembg/{model}"
        self.model = model
        self.jpeg_quality = jpeg_quality
        self._session = None    # created on first use; loading the model is slow

    async def remove_background(self, image_bytes: bytes) -> bytes:
        return await asyncio.to_thread(self._remove, image_bytes)

    def _remove(self, image_bytes: bytes) -> bytes:
        if self._session is None:
            logger.info("[%s] Loading model", self.name)
            self._session = new_session(self.model)

        source = Image.open(io.BytesIO(image_bytes))
        cutout = remove(source, session=self._session).convert("RGBA")

        flattened = Image.new("RGB", cutout.size, (255, 255, 255))
        flattened.paste(cutout, mask=cutout.getchannel("A"))

        out = io.BytesIO()
        flattened.save(out, format="JPEG", quality=self.jpeg_quality)
        return out.getvalue()
