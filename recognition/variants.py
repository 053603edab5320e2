"""
recognition.variants — Multi-variant recognition search.

A photographed receipt is often rotated or laid out as scattered text.
Rather than guessing, the recognizer tries every combination of

* rotation: 0°, 90°, 180°, 270° (clockwise, with a mild contrast boost on
  the rotated copies), and
* segmentation mode: single block (PSM 6) and sparse text (PSM 11),

and keeps the text that :func:`~recognition.quality.score_variant_text`
ranks highest. Candidate order is fixed (original block, original sparse,
then each rotation in increasing angle, block before sparse) and ties keep
the earlier candidate, so the winner does not depend on execution order.

Candidates are recognised one at a time by default to bound peak CPU and
memory. ``max_workers > 1`` runs them on a small thread pool; results are
still evaluated in candidate order.
"""

from __future__ import annotations

import io
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageEnhance

from .engine import (
    EMPTY_RESULT,
    PSM_SINGLE_BLOCK,
    PSM_SPARSE_TEXT,
    ImageBytes,
    ImageSource,
    RawText,
    RecognitionEngine,
    RecognitionResult,
    load_pil,
)
from .quality import score_variant_text

logger = logging.getLogger(__name__)

DEFAULT_ROTATIONS: Tuple[int, ...] = (0, 90, 180, 270)
DEFAULT_SEGMENTATION_MODES: Tuple[int, ...] = (PSM_SINGLE_BLOCK, PSM_SPARSE_TEXT)
DEFAULT_CONTRAST_BOOST = 1.15

# Clockwise rotation by angle, expressed as Pillow transposes.
_TRANSPOSE_BY_ANGLE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


@dataclass(frozen=True)
class Variant:
    """One (image, segmentation mode) candidate."""

    label: str
    source: ImageSource
    segmentation_mode: Optional[int] = None


def rotate_image(image: ImageBytes, angle: int, contrast: float = DEFAULT_CONTRAST_BOOST) -> ImageBytes:
    """Return *image* rotated clockwise by *angle* with a contrast boost, as PNG."""
    if angle % 360 == 0:
        return image
    transpose = _TRANSPOSE_BY_ANGLE.get(angle % 360)
    if transpose is None:
        raise ValueError(f"Only right-angle rotations are supported, got {angle}")

    with load_pil(image) as im:
        rotated = im.transpose(transpose)
    if contrast and contrast != 1.0:
        rotated = ImageEnhance.Contrast(rotated).enhance(contrast)

    buf = io.BytesIO()
    rotated.save(buf, format="PNG")
    return ImageBytes(buf.getvalue(), "image/png")


class MultiVariantRecognizer:
    """
    Runs a :class:`RecognitionEngine` over rotated / re-segmented copies of
    one image and keeps the best-scoring text.

    Args:
        engine: local recognition engine (loaded once, shared by all variants)
        rotations: clockwise angles to try; 0 is always the original image
        segmentation_modes: Tesseract PSM values tried on every image
        contrast_boost: contrast factor applied to rotated copies
        max_workers: 1 = sequential search; >1 = bounded thread pool
    """

    def __init__(
        self,
        engine: RecognitionEngine,
        rotations: Sequence[int] = DEFAULT_ROTATIONS,
        segmentation_modes: Sequence[int] = DEFAULT_SEGMENTATION_MODES,
        contrast_boost: float = DEFAULT_CONTRAST_BOOST,
        max_workers: int = 1,
    ):
        self.engine = engine
        self.rotations = tuple(rotations)
        self.segmentation_modes = tuple(segmentation_modes)
        self.contrast_boost = contrast_boost
        self.max_workers = max(1, int(max_workers))

    # ------------------------------------------------------------------
    # Candidate generation
    # ------------------------------------------------------------------

    def build_variants(self, source: ImageSource) -> List[Variant]:
        if isinstance(source, RawText):
            return [Variant(label="text", source=source)]

        variants = [
            Variant(label=f"orig-psm{psm}", source=source, segmentation_mode=psm)
            for psm in self.segmentation_modes
        ]

        for angle in sorted(a % 360 for a in self.rotations if a % 360):
            try:
                rotated = rotate_image(source, angle, self.contrast_boost)
            except Exception as exc:
                # Undecodable input: keep the original-only candidates.
                logger.debug("Skipping rotated variants: %s", exc)
                break
            variants.extend(
                Variant(label=f"rot{angle}-psm{psm}", source=rotated, segmentation_mode=psm)
                for psm in self.segmentation_modes
            )

        return variants

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def recognize_best(self, source: ImageSource) -> RecognitionResult:
        """Recognise every candidate and return the highest-scoring result.

        Always returns a result; when every candidate is empty the text is
        ``""`` (never ``None``).
        """
        variants = self.build_variants(source)
        results = self._run(variants)

        best = EMPTY_RESULT
        best_score = float("-inf")
        for variant, result in zip(variants, results):
            score = score_variant_text(result.text)
            logger.debug(
                "variant=%s score=%.2f conf=%s chars=%d",
                variant.label, score, result.confidence, len(result.text),
            )
            if score > best_score:
                best_score = score
                best = RecognitionResult(
                    text=result.text,
                    confidence=result.confidence,
                    variant=variant.label,
                )

        return best

    def _run(self, variants: Sequence[Variant]) -> List[RecognitionResult]:
        if self.max_workers == 1 or len(variants) <= 1:
            return [self.engine.recognize(v.source, v.segmentation_mode) for v in variants]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                pool.submit(self.engine.recognize, v.source, v.segmentation_mode)
                for v in variants
            ]
            return [f.result() for f in futures]
