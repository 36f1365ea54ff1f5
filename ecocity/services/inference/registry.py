"""
Inference Provider Registry.

Selects the image inference provider from configuration.
"""

from ecocity.services.inference.base import InferenceProvider
from ecocity.services.inference.disabled_provider import DisabledInferenceProvider
from ecocity.services.inference.workers_ai_provider import WorkersAIProvider
from ecocity.core.settings import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Global provider instance (singleton)
_provider: Optional[InferenceProvider] = None


def _build_provider() -> InferenceProvider:
    if not settings.INFERENCE_ENABLED:
        logger.info("⚠️ Inference disabled globally (INFERENCE_ENABLED=false), text-only extraction")
        return DisabledInferenceProvider()

    provider = WorkersAIProvider()
    if provider.is_enabled():
        logger.info("✅ Workers AI inference provider registered")
        return provider

    logger.warning("⚠️ Inference enabled but Workers AI is not configured, text-only extraction")
    return DisabledInferenceProvider()


def get_inference_provider() -> InferenceProvider:
    """Get or create the inference provider singleton."""
    global _provider
    if _provider is None:
        _provider = _build_provider()
    return _provider
