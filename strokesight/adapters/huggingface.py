"""Hugging Face Inference API clients for the classifier and detector boundaries.

Both are synchronous (requests); adapters run them in a worker thread.
"""

from __future__ import annotations

import logging
from typing import Any

import requests  # For HF Inference API calls

from strokesight.errors import AdapterError

logger = logging.getLogger(__name__)


class HuggingFaceInferenceClient:
    def __init__(
        self,
        model_id: str,
        token: str,
        base_url: str = "https://api-inference.huggingface.co/models",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.model_id = model_id
        self.token = token
        self.url = f"{base_url.rstrip('/')}/{model_id}"
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.token and self.model_id)

    def post_image(self, png: bytes) -> Any:
        headers = {"Authorization": f"Bearer {self.token}", "Content-Type": "image/png"}
        try:
            response = self.session.post(self.url, headers=headers, data=png, timeout=self.timeout)
        except requests.RequestException as e:
            raise AdapterError(self.model_id, f"request failed: {e}") from e

        if response.status_code != 200:
            raise AdapterError(
                self.model_id, f"HTTP {response.status_code}: {response.text[:200]}"
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise AdapterError(self.model_id, "response is not JSON") from e

        # Errors (model loading, quota) arrive as {"error": ...}
        if isinstance(payload, dict) and "error" in payload:
            raise AdapterError(self.model_id, str(payload["error"]))
        if not isinstance(payload, list):
            raise AdapterError(self.model_id, f"unexpected payload type {type(payload).__name__}")
        return payload


class HuggingFaceClassifier(HuggingFaceInferenceClient):
    """image-classification task: [{label, score}] -> [{label, probability}]."""

    def classify(self, png: bytes) -> list[dict[str, Any]]:
        payload = self.post_image(png)
        return [
            {"label": item.get("label", ""), "probability": item.get("score", 0.0)}
            for item in payload
            if isinstance(item, dict)
        ]


class HuggingFaceDetector(HuggingFaceInferenceClient):
    """object-detection task: [{label, score, box: {xmin, ymin, xmax, ymax}}]."""

    def detect(self, png: bytes) -> list[dict[str, Any]]:
        payload = self.post_image(png)
        results = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            box = item.get("box") or {}
            try:
                xmin, ymin = float(box["xmin"]), float(box["ymin"])
                xmax, ymax = float(box["xmax"]), float(box["ymax"])
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping detection without a usable box: %s", item)
                continue
            results.append(
                {
                    "label": item.get("label", ""),
                    "confidence": item.get("score", 0.0),
                    "boundingBox": {"x": xmin, "y": ymin, "width": xmax - xmin, "height": ymax - ymin},
                }
            )
        return results
