"""
Image inference plug-ins.

Optional photo captioning + classification. Fails gracefully and never
blocks report ingestion.
"""

from ecocity.services.inference.base import InferenceProvider, InferenceResult
from ecocity.services.inference.disabled_provider import DisabledInferenceProvider
from ecocity.services.inference.workers_ai_provider import WorkersAIProvider
from ecocity.services.inference.registry import get_inference_provider

__all__ = [
    "InferenceProvider",
    "InferenceResult",
    "DisabledInferenceProvider",
    "WorkersAIProvider",
    "get_inference_provider",
]
