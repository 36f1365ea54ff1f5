"""
Workers AI Inference Provider - Cloudflare Workers AI REST integration.

Captions the photo with a vision-language model and classifies it with an
image classifier. One bounded attempt per model, no retries.
"""

from ecocity.core.exceptions import InferenceError
from ecocity.core.settings import settings
from ecocity.services.inference.base import InferenceProvider, InferenceResult, MAX_LABELS
from typing import Any, Dict, List, Optional, Tuple
import logging

import requests

logger = logging.getLogger(__name__)


class WorkersAIProvider(InferenceProvider):
    """
    Cloudflare Workers AI provider.

    Requires CF_ACCOUNT_ID and CF_API_TOKEN in environment variables.
    Raises InferenceError on any failure so the caller can degrade.
    """

    MODEL_VERSION = "1.0"
    API_BASE_URL = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"
    CAPTION_PROMPT = (
        "Describe this image in detail, focusing on any urban infrastructure issues "
        "like waste, water leaks, road damage, or lighting problems."
    )
    CAPTION_MAX_TOKENS = 256

    def __init__(
        self,
        account_id: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.account_id = account_id if account_id is not None else settings.CF_ACCOUNT_ID
        self.api_token = api_token if api_token is not None else settings.CF_API_TOKEN
        self.timeout_seconds = timeout_seconds or settings.INFERENCE_TIMEOUT_SECONDS
        self.caption_model = settings.CAPTION_MODEL
        self.classification_model = settings.CLASSIFICATION_MODEL
        self.session = session or requests.Session()
        self.enabled = bool(self.account_id and self.api_token)

        if self.enabled:
            logger.info(f"✅ Workers AI provider initialized: {self.caption_model}, {self.classification_model}")
        else:
            logger.info("⚠️ Workers AI provider disabled: no account id / API token configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": f"{self.caption_model}+{self.classification_model}",
            "version": self.MODEL_VERSION,
        }

    def analyze_image(self, image_bytes: bytes) -> InferenceResult:
        if not self.enabled:
            raise InferenceError("Workers AI credentials not configured")
        if not image_bytes:
            raise InferenceError("No image bytes supplied")

        pixels = list(image_bytes)
        caption_payload = self._run_model(
            self.caption_model,
            {"image": pixels, "prompt": self.CAPTION_PROMPT, "max_tokens": self.CAPTION_MAX_TOKENS},
        )
        classification_payload = self._run_model(self.classification_model, {"image": pixels})

        caption = self._parse_caption(caption_payload)
        labels = self._parse_labels(classification_payload)
        top_score = labels[0][1] if labels else None

        return InferenceResult(
            caption=caption,
            labels=labels,
            top_score=top_score,
            model_name=self.get_model_info()["name"],
        )

    def _run_model(self, model: str, body: Dict[str, Any]) -> Any:
        url = self.API_BASE_URL.format(account_id=self.account_id, model=model)
        headers = {"Authorization": f"Bearer {self.api_token}"}
        try:
            resp = self.session.post(url, json=body, headers=headers, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise InferenceError(f"{model} request failed: {e}") from e

        if resp.status_code != 200:
            raise InferenceError(f"{model} returned status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise InferenceError(f"{model} returned invalid JSON") from e

        if not isinstance(data, dict) or not data.get("success", True):
            raise InferenceError(f"{model} reported failure: {data.get('errors') if isinstance(data, dict) else data}")
        return data.get("result")

    @staticmethod
    def _parse_caption(result: Any) -> str:
        if isinstance(result, dict):
            return str(result.get("description") or "")
        return ""

    @staticmethod
    def _parse_labels(result: Any) -> List[Tuple[str, float]]:
        if not isinstance(result, list):
            raise InferenceError("Classification result is not a list")

        labels = []
        for item in result[:MAX_LABELS]:
            try:
                labels.append((str(item["label"]), float(item["score"])))
            except (KeyError, TypeError, ValueError) as e:
                raise InferenceError(f"Malformed classification entry: {item!r}") from e
        return labels
