from .hybrid import HybridOrchestrator, load_config, process_receipt
from .suggest import (
    CONFIDENCE_THRESHOLD,
    ReceiptSuggestion,
    pick_winner,
    score_suggestion,
    should_fallback,
    suggest_from_recognition,
    suggest_from_text,
)

__all__ = [
    "HybridOrchestrator",
    "load_config",
    "process_receipt",
    "CONFIDENCE_THRESHOLD",
    "ReceiptSuggestion",
    "pick_winner",
    "score_suggestion",
    "should_fallback",
    "suggest_from_recognition",
    "suggest_from_text",
]
