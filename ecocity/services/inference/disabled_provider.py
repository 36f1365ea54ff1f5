"""
Disabled Inference Provider - used when INFERENCE_ENABLED is false.

Always raises, which sends the signal extractor down its text-only path.
"""

from ecocity.core.exceptions import InferenceError
from ecocity.services.inference.base import InferenceProvider, InferenceResult
from typing import Dict


class DisabledInferenceProvider(InferenceProvider):

    MODEL_NAME = "disabled"
    MODEL_VERSION = "1.0.0"

    def is_enabled(self) -> bool:
        return False

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.MODEL_NAME, "version": self.MODEL_VERSION}

    def analyze_image(self, image_bytes: bytes) -> InferenceResult:
        raise InferenceError("Image inference is disabled")
