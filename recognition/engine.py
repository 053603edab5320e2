"""
recognition.engine — Local recognition engine adapter.

Provides a single contract, :meth:`RecognitionEngine.recognize`, over the
local image-to-text recognizer, plus the small input union the rest of the
system passes around:

* :class:`ImageBytes` — an encoded image (PNG, JPEG, ...) held in memory.
* :class:`RawText` — text that was already extracted elsewhere (replay,
  tests, remote transcriptions). It is passed straight through.

The Tesseract backend (``pytesseract``) is imported lazily on first use and
held by the engine instance, so repeated calls through the same engine do not
pay the loading cost more than once.

Recognition failures never propagate: a failing call logs a warning and
returns an empty :class:`RecognitionResult`, so a single bad variant cannot
abort the multi-variant search built on top of this module.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Tesseract page segmentation modes used by the variant search.
PSM_SINGLE_BLOCK = 6
PSM_SPARSE_TEXT = 11

_WS_RE = re.compile(r"\s+")


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse every whitespace run to a single space and strip the ends."""
    return _WS_RE.sub(" ", text or "").strip()


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageBytes:
    """An encoded image held in memory."""

    data: bytes
    mime: Optional[str] = None


@dataclass(frozen=True)
class RawText:
    """Already-extracted receipt text."""

    text: str


ImageSource = Union[ImageBytes, RawText]


@dataclass(frozen=True)
class RecognitionResult:
    """Text recognised from one image/settings combination.

    Attributes
    ----------
    text : str
        Whitespace-collapsed text; empty when nothing was recognised.
    confidence : float or None
        Engine self-reported quality in ``[0, 100]``. ``None`` when the
        engine is not confidence-aware.
    variant : str, optional
        Label of the preprocessing candidate that produced the text
        (e.g. ``"rot90-psm11"``).
    """

    text: str
    confidence: Optional[float] = None
    variant: Optional[str] = None


EMPTY_RESULT = RecognitionResult(text="", confidence=0.0)


# ---------------------------------------------------------------------------
# Input resolution
# ---------------------------------------------------------------------------

_MIME_BY_FORMAT = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "TIFF": "image/tiff",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
    "GIF": "image/gif",
}

_MIME_BY_SUFFIX = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}


def to_source(value: Any) -> ImageSource:
    """Resolve a caller-supplied input into an :data:`ImageSource`.

    Accepted inputs:

    * :class:`ImageBytes` / :class:`RawText` — returned unchanged.
    * ``bytes``, ``bytearray``, ``memoryview`` — image bytes.
    * :class:`pathlib.Path` — image file, read from disk.
    * ``str`` — already-extracted text.
    * binary file objects (anything with ``read()``) — image bytes.

    Raises
    ------
    TypeError
        For any other input type.
    """
    if isinstance(value, (ImageBytes, RawText)):
        return value
    if isinstance(value, str):
        return RawText(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ImageBytes(bytes(value))
    if isinstance(value, Path):
        return ImageBytes(value.read_bytes(), _MIME_BY_SUFFIX.get(value.suffix.lower()))
    if hasattr(value, "read"):
        data = value.read()
        if isinstance(data, str):
            raise TypeError("file objects must be opened in binary mode")
        return ImageBytes(bytes(data))
    raise TypeError(f"Unsupported receipt input type: {type(value).__name__}")


def guess_mime(image: ImageBytes) -> str:
    """Best-effort MIME type for *image* (``image/jpeg`` when unknown)."""
    if image.mime:
        return image.mime
    try:
        with Image.open(io.BytesIO(image.data)) as im:
            return _MIME_BY_FORMAT.get(str(im.format).upper(), "image/jpeg")
    except Exception:
        return "image/jpeg"


def load_pil(image: ImageBytes) -> Image.Image:
    """Decode *image* into a fully loaded RGB Pillow image."""
    im = Image.open(io.BytesIO(image.data))
    im.load()
    if im.mode not in ("RGB", "L"):
        im = im.convert("RGB")
    return im


# ---------------------------------------------------------------------------
# Engine contract
# ---------------------------------------------------------------------------

class RecognitionEngine(ABC):
    """
    Abstract local recognizer. Subclasses implement ``_recognize_image``;
    the base class handles text pass-through and failure isolation.
    """

    def recognize(
        self,
        source: ImageSource,
        segmentation_mode: Optional[int] = None,
    ) -> RecognitionResult:
        if isinstance(source, RawText):
            return RecognitionResult(text=collapse_whitespace(source.text), confidence=100.0)
        try:
            return self._recognize_image(source, segmentation_mode)
        except Exception as exc:
            logger.warning("Recognition failed (psm=%s): %s", segmentation_mode, exc)
            return EMPTY_RESULT

    @abstractmethod
    def _recognize_image(
        self,
        image: ImageBytes,
        segmentation_mode: Optional[int],
    ) -> RecognitionResult:
        ...


class TesseractEngine(RecognitionEngine):
    """Local recognizer backed by Tesseract through ``pytesseract``."""

    def __init__(self, language: str = "eng", tesseract_cmd: Optional[str] = None):
        self.language = language
        self.tesseract_cmd = tesseract_cmd
        self._backend = None

    def _get_backend(self):
        """Import and configure ``pytesseract`` once per engine."""
        if self._backend is None:
            import pytesseract  # type: ignore

            if self.tesseract_cmd:
                pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
            logger.debug("Loaded pytesseract backend (lang=%s)", self.language)
            self._backend = pytesseract
        return self._backend

    def _recognize_image(
        self,
        image: ImageBytes,
        segmentation_mode: Optional[int],
    ) -> RecognitionResult:
        tess = self._get_backend()
        config = f"--psm {segmentation_mode}" if segmentation_mode else ""

        with load_pil(image) as im:
            data = tess.image_to_data(
                im,
                lang=self.language,
                config=config,
                output_type=tess.Output.DICT,
            )

        words = [str(w) for w in data.get("text", []) if str(w).strip()]
        confs = np.asarray(
            [float(c) for c in data.get("conf", []) if str(c).strip() not in ("", "-1")],
            dtype=np.float64,
        )
        confs = confs[confs >= 0]
        confidence = float(confs.mean()) if confs.size else 0.0

        return RecognitionResult(
            text=collapse_whitespace(" ".join(words)),
            confidence=round(confidence, 2),
        )
