"""
HFVisionRecognizer: remote recognizer using a vision-language model served by
Hugging Face Inference Providers. The model is asked for a verbatim
transcription plus a self-reported confidence, returned as JSON.

Requires:
- HF_TOKEN env var with permissions to call Inference Providers.
"""

from __future__ import annotations

import os

from huggingface_hub import InferenceClient

from .base_remote import DEFAULT_TIMEOUT_S, RemoteRecognitionError, RemoteRecognizer

TRANSCRIBE_PROMPT = (
    "Transcribe all text visible in this payment receipt exactly as printed, "
    "keeping numbers, dates, times and reference codes verbatim. Do not "
    "summarise or correct anything. Reply with JSON only: "
    '{"text": "<transcription>", "confidence": <0-100 estimate of how '
    'legible the receipt was>}'
)


class HFVisionRecognizer(RemoteRecognizer):
    """
    Remote recognizer backed by Qwen/Qwen2.5-VL-72B-Instruct (configurable)
    via HuggingFace InferenceClient.
    """

    name = "huggingface"
    MODEL_ID = "Qwen/Qwen2.5-VL-72B-Instruct"

    def __init__(
        self,
        model_id: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        max_tokens: int = 1024,
        client: InferenceClient | None = None,
    ):
        super().__init__(timeout_s=timeout_s)
        self.model_id = model_id or self.MODEL_ID
        self.max_tokens = max_tokens

        if client is None:
            hf_token = os.getenv("HF_TOKEN")
            if not hf_token:
                raise RuntimeError("Missing HF_TOKEN environment variable.")
            client = InferenceClient(api_key=hf_token, timeout=timeout_s)
        self._client = client

    def _call_api(self, image_b64: str, mime: str) -> dict:
        completion = self._client.chat.completions.create(
            model=self.model_id,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime};base64,{image_b64}"},
                        },
                        {"type": "text", "text": TRANSCRIBE_PROMPT},
                    ],
                }
            ],
            temperature=0.0,
            max_tokens=self.max_tokens,
        )
        content = completion.choices[0].message.content
        raw = content if isinstance(content, str) else str(content or "")
        if not raw.strip():
            raise RemoteRecognitionError(f"{self.model_id} returned an empty reply")
        return self._loads(raw)
