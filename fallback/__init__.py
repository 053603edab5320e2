from __future__ import annotations

from typing import Any, Dict, Optional

from .base_remote import RemoteRecognitionError, RemoteRecognizer, RemoteResult
from .endpoint_remote import EndpointRecognizer
from .hf_remote import HFVisionRecognizer


class ConfigError(Exception):
    """Raised for malformed or incomplete configuration."""
    pass


def load_remote_from_config(cfg: Dict[str, Any] | None) -> Optional[RemoteRecognizer]:
    """Build the remote recognizer described by the ``remote`` config section.

    Returns None when the backend is ``none`` (or the section is missing).
    """
    cfg = cfg or {}
    backend = str(cfg.get("backend", "none") or "none").strip().lower()
    timeout_s = float(cfg.get("timeout_s", 8.0))

    if backend == "none":
        return None
    if backend == "endpoint":
        url = cfg.get("endpoint_url")
        if not url:
            raise ConfigError("remote.endpoint_url is required for the 'endpoint' backend")
        return EndpointRecognizer.from_env(
            url=str(url),
            api_key_env=cfg.get("api_key_env"),
            timeout_s=timeout_s,
        )
    if backend in ("huggingface", "hf"):
        return HFVisionRecognizer(
            model_id=cfg.get("model_id"),
            timeout_s=timeout_s,
            max_tokens=int(cfg.get("max_tokens", 1024)),
        )
    raise ConfigError(f"Unsupported remote backend in config: {backend}")


__all__ = [
    "ConfigError",
    "RemoteRecognitionError",
    "RemoteRecognizer",
    "RemoteResult",
    "EndpointRecognizer",
    "HFVisionRecognizer",
    "load_remote_from_config",
]
