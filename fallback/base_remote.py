"""
RemoteRecognizer: Abstract base class for server-hosted, higher-accuracy
recognizers used when the local engine is not confident enough.
Defines the contract every remote backend must fulfil.
"""

from __future__ import annotations

import base64
import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from recognition.engine import ImageBytes, ImageSource, RawText, collapse_whitespace, guess_mime

DEFAULT_TIMEOUT_S = 8.0


class RemoteRecognitionError(Exception):
    """Raised when a remote recognizer cannot produce a usable transcription."""
    pass


# ---------------------------------------------------------------------------
# Data model for a remote transcription
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoteResult:
    """Text recognised by a remote service."""

    text: str
    confidence: float           # [0.0 – 100.0], same scale as the local engine
    word_count: int

    @classmethod
    def from_payload(cls, data: Any) -> "RemoteResult":
        """Validate and normalise a decoded ``{text, confidence, wordCount}`` payload."""
        if not isinstance(data, dict):
            raise RemoteRecognitionError(f"Unexpected payload type: {type(data).__name__}")
        if "text" not in data:
            raise RemoteRecognitionError("Remote payload has no 'text' field")

        text = collapse_whitespace(str(data.get("text") or ""))

        try:
            confidence = float(data.get("confidence", 0.0))
        except (TypeError, ValueError) as exc:
            raise RemoteRecognitionError(f"Invalid confidence: {data.get('confidence')!r}") from exc
        confidence = max(0.0, min(100.0, confidence))

        word_count = data.get("wordCount", data.get("word_count"))
        if word_count is None:
            word_count = len(text.split())

        return cls(text=text, confidence=confidence, word_count=int(word_count))


# ---------------------------------------------------------------------------
# Abstract base class
# ---------------------------------------------------------------------------

class RemoteRecognizer(ABC):
    """
    Abstract remote recognizer. Subclasses implement `_call_api` to hit the
    specific service and return the decoded payload; the base class handles
    image encoding and payload validation.
    """

    name: str = "remote"

    def __init__(self, timeout_s: float = DEFAULT_TIMEOUT_S):
        self.timeout_s = timeout_s

    def recognize_remote(self, image: ImageSource) -> RemoteResult:
        if isinstance(image, RawText):
            raise RemoteRecognitionError("Remote recognition needs image bytes, got text")
        image_b64 = self._encode_image(image)
        mime = guess_mime(image)
        payload = self._call_api(image_b64=image_b64, mime=mime)
        return RemoteResult.from_payload(payload)

    # ------------------------------------------------------------------
    # Subclass contract
    # ------------------------------------------------------------------

    @abstractmethod
    def _call_api(self, image_b64: str, mime: str) -> dict:
        """
        Send the base64 image to the service and return its decoded
        ``{text, confidence, wordCount}`` payload.
        Must raise on transport or service errors.
        """
        ...

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _encode_image(image: ImageBytes) -> str:
        return base64.b64encode(image.data).decode("utf-8")

    @staticmethod
    def _extract_json(text: str) -> str:
        """
        Attempt to extract a JSON object from a model reply.
        Handles markdown code fences and extra surrounding text.
        """
        text = re.sub(r"```(?:json)?", "", text).strip()
        match = re.search(r"\{.*\}", text, re.DOTALL)
        if match:
            return match.group(0)
        return text

    @classmethod
    def _loads(cls, text: str) -> dict:
        try:
            return json.loads(cls._extract_json(text))
        except json.JSONDecodeError as exc:
            raise RemoteRecognitionError(f"JSON decode error: {exc}") from exc
