"""
recognition — Local receipt text recognition.

Modules
-------
engine      Recognition engine adapter (Tesseract via ``pytesseract``) and
            the ``ImageBytes`` / ``RawText`` input union.
variants    Multi-variant search over rotations and segmentation modes.
quality     Text-quality heuristics for variant selection and the
            manual-review gate.
"""

from .engine import (
    ImageBytes,
    ImageSource,
    RawText,
    RecognitionEngine,
    RecognitionResult,
    TesseractEngine,
    collapse_whitespace,
    to_source,
)
from .quality import score_manual_gate, score_variant_text
from .variants import MultiVariantRecognizer, Variant, rotate_image

__all__ = [
    "ImageBytes",
    "ImageSource",
    "RawText",
    "RecognitionEngine",
    "RecognitionResult",
    "TesseractEngine",
    "collapse_whitespace",
    "to_source",
    "score_manual_gate",
    "score_variant_text",
    "MultiVariantRecognizer",
    "Variant",
    "rotate_image",
]
