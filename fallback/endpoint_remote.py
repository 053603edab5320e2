"""
EndpointRecognizer: remote recognizer behind a plain HTTPS endpoint, e.g. a
cloud function that forwards the image to a document-text-detection service.

Request:   POST <url>  {"image": "<base64>"}
Response:  {"text": "...", "confidence": 0-100, "wordCount": N}
           (callable-function envelopes {"result": {...}} / {"data": {...}}
           are unwrapped)
"""

from __future__ import annotations

import os

import requests

from .base_remote import DEFAULT_TIMEOUT_S, RemoteRecognitionError, RemoteRecognizer


class EndpointRecognizer(RemoteRecognizer):
    """Remote recognizer that posts the image to an HTTP endpoint."""

    name = "endpoint"

    def __init__(
        self,
        url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ):
        super().__init__(timeout_s=timeout_s)
        if not url:
            raise ValueError("EndpointRecognizer requires a URL.")
        self.url = url
        self.api_key = api_key
        self._session = session or requests.Session()

    @classmethod
    def from_env(cls, url: str, api_key_env: str | None = None, **kwargs) -> "EndpointRecognizer":
        api_key = os.getenv(api_key_env) if api_key_env else None
        return cls(url=url, api_key=api_key, **kwargs)

    def _call_api(self, image_b64: str, mime: str) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = self._session.post(
                self.url,
                json={"image": image_b64, "mimeType": mime},
                headers=headers,
                timeout=self.timeout_s,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            raise RemoteRecognitionError(
                f"Timed out after {self.timeout_s}s contacting {self.url}"
            ) from exc
        except requests.HTTPError as exc:
            raise RemoteRecognitionError(f"The endpoint answered with an HTTP error: {exc}") from exc
        except requests.RequestException as exc:
            raise RemoteRecognitionError(f"Could not reach {self.url}: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteRecognitionError(f"Endpoint returned non-JSON body: {exc}") from exc

        for envelope in ("result", "data"):
            if isinstance(data, dict) and isinstance(data.get(envelope), dict):
                data = data[envelope]
                break
        return data
