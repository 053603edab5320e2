"""
HybridOrchestrator — public entry point of the receipt suggestion engine.

Flow
----
  1. Resolve the input once (image bytes / file / already-extracted text).
  2. Local path: multi-variant recognition -> both dialect parsers ->
     winner + manual-review flag.
  3. If the local confidence is missing or >= threshold (default 60):
     done, ``source="local"``.
  4. Otherwise ask the remote recognizer, re-parse its text and return
     ``source="remote"`` with the remote confidence.
  5. If the remote call fails for any reason (HTTP error, timeout, bad
     payload), the local suggestion is returned with ``fallback_error`` set.

The caller never receives an exception for a recognition problem: the worst
case is a suggestion with every field None and ``should_manual=True``.

Usage
-----
    from pipeline.hybrid import HybridOrchestrator
    orch = HybridOrchestrator.from_config("configs/ocr.yaml")
    suggestion = orch.process(Path("receipt.jpg"))
    suggestion.winner.suggested_amount
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from fallback import ConfigError, RemoteRecognizer, load_remote_from_config
from parsers import FieldParser, default_parsers
from recognition.engine import TesseractEngine, to_source
from recognition.variants import (
    DEFAULT_CONTRAST_BOOST,
    DEFAULT_ROTATIONS,
    DEFAULT_SEGMENTATION_MODES,
    MultiVariantRecognizer,
)

from .suggest import (
    CONFIDENCE_THRESHOLD,
    MANUAL_SCORE_FLOOR,
    SOURCE_REMOTE,
    ReceiptSuggestion,
    suggest_from_recognition,
    suggest_from_text,
)

logger = logging.getLogger("receipt_ocr")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("[receipt_ocr] %(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(logging.INFO)


CONFIG_PATH = Path(__file__).parent.parent / "configs" / "ocr.yaml"


def load_config(config_path: str | Path = CONFIG_PATH) -> Dict[str, Any]:
    cfg_path = Path(config_path)
    with open(cfg_path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"{cfg_path} must contain a mapping at the top level")
    return cfg


class HybridOrchestrator:
    """
    Local-first receipt suggestion with remote fallback.

    Args:
        recognizer: multi-variant local recognizer
        remote: optional remote recognizer used when local confidence is low
        confidence_threshold: local confidence below this triggers the fallback
        parsers: dialect parsers, in tie-break order (bank, cash by default)
        manual_floor: manual-gate text score below this recommends manual entry
    """

    def __init__(
        self,
        recognizer: MultiVariantRecognizer,
        remote: Optional[RemoteRecognizer] = None,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
        parsers: Optional[Sequence[FieldParser]] = None,
        manual_floor: float = MANUAL_SCORE_FLOOR,
    ):
        self.recognizer = recognizer
        self.remote = remote
        self.confidence_threshold = float(confidence_threshold)
        self.parsers = list(parsers) if parsers is not None else default_parsers()
        self.manual_floor = float(manual_floor)

    @classmethod
    def from_config(cls, config_path: str | Path = CONFIG_PATH) -> "HybridOrchestrator":
        cfg = load_config(config_path)
        rec_cfg = cfg.get("recognition", {}) or {}
        sug_cfg = cfg.get("suggestion", {}) or {}

        engine = TesseractEngine(
            language=str(rec_cfg.get("language", "eng")),
            tesseract_cmd=rec_cfg.get("tesseract_cmd"),
        )
        recognizer = MultiVariantRecognizer(
            engine,
            rotations=rec_cfg.get("rotations", DEFAULT_ROTATIONS),
            segmentation_modes=rec_cfg.get("segmentation_modes", DEFAULT_SEGMENTATION_MODES),
            contrast_boost=float(rec_cfg.get("contrast_boost", DEFAULT_CONTRAST_BOOST)),
            max_workers=int(rec_cfg.get("max_workers", 1)),
        )
        return cls(
            recognizer=recognizer,
            remote=load_remote_from_config(cfg.get("remote")),
            confidence_threshold=float(sug_cfg.get("confidence_threshold", CONFIDENCE_THRESHOLD)),
            manual_floor=float(sug_cfg.get("manual_score_floor", MANUAL_SCORE_FLOOR)),
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def process(self, image: Any, force_remote: bool = False) -> ReceiptSuggestion:
        source = to_source(image)

        if force_remote:
            try:
                return self._process_remote(source)
            except Exception as exc:
                logger.warning("Forced remote recognition failed, using local result: %s", exc)
                local = self._process_local(source)
                return dataclasses.replace(local, fallback_error=str(exc))

        local = self._process_local(source)
        if not local.should_fallback:
            logger.info(
                "Local recognition accepted (confidence=%s, variant=%s)",
                local.confidence, local.variant,
            )
            return local

        if self.remote is None:
            logger.info(
                "Local confidence %.1f below %.1f but no remote recognizer is configured",
                local.confidence, self.confidence_threshold,
            )
            return local

        logger.info(
            "Local confidence %.1f below %.1f, trying %s fallback",
            local.confidence, self.confidence_threshold, self.remote.name,
        )
        try:
            return self._process_remote(source)
        except Exception as exc:
            logger.warning("Remote fallback failed, using local result: %s", exc)
            return dataclasses.replace(local, fallback_error=str(exc))

    def parse_text(self, text: str) -> ReceiptSuggestion:
        """Suggest fields from already-extracted text (no recognition)."""
        return suggest_from_text(
            text,
            parsers=self.parsers,
            threshold=self.confidence_threshold,
            manual_floor=self.manual_floor,
        )

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _process_local(self, source) -> ReceiptSuggestion:
        result = self.recognizer.recognize_best(source)
        return suggest_from_recognition(
            result,
            parsers=self.parsers,
            threshold=self.confidence_threshold,
            manual_floor=self.manual_floor,
        )

    def _process_remote(self, source) -> ReceiptSuggestion:
        if self.remote is None:
            raise ConfigError("No remote recognizer configured")
        remote = self.remote.recognize_remote(source)
        suggestion = suggest_from_text(
            remote.text,
            remote.confidence,
            parsers=self.parsers,
            threshold=self.confidence_threshold,
            manual_floor=self.manual_floor,
            source=SOURCE_REMOTE,
        )
        suggestion.should_fallback = False
        suggestion.word_count = remote.word_count
        logger.info(
            "Remote recognition via %s (confidence=%.1f, words=%d)",
            self.remote.name, remote.confidence, remote.word_count,
        )
        return suggestion


def process_receipt(
    image: Any,
    orchestrator: Optional[HybridOrchestrator] = None,
    force_remote: bool = False,
) -> ReceiptSuggestion:
    """Convenience wrapper: build an orchestrator from the default config if needed."""
    orch = orchestrator or HybridOrchestrator.from_config()
    return orch.process(image, force_remote=force_remote)
