"""
Inference Provider Base Interface.

Defines the contract for image captioning + classification providers.
The signal extractor treats providers as a black box and degrades to
text-only classification whenever a provider raises.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

MAX_LABELS = 5


class InferenceResult:
    """
    Standardized inference output.

    labels are (label, score) pairs ordered by descending score and capped
    at MAX_LABELS. top_score is the top-1 classification score when known.
    """

    def __init__(
        self,
        caption: str,
        labels: Optional[List[Tuple[str, float]]] = None,
        top_score: Optional[float] = None,
        model_name: str = "unknown",
    ):
        self.caption = caption
        self.labels = list(labels or [])[:MAX_LABELS]
        self.top_score = top_score
        self.model_name = model_name

    @property
    def label_names(self) -> List[str]:
        return [label for label, _ in self.labels]

    def to_dict(self) -> Dict:
        return {
            "caption": self.caption,
            "labels": [{"label": label, "score": score} for label, score in self.labels],
            "top_score": self.top_score,
            "model_name": self.model_name,
        }


class InferenceProvider(ABC):
    """
    Abstract base class for image inference providers.

    Implementations make a single bounded attempt per call.
    On any failure they raise InferenceError; they never retry.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether the provider is configured and can be called."""
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """Dict with 'name' and 'version' keys."""
        pass

    @abstractmethod
    def analyze_image(self, image_bytes: bytes) -> InferenceResult:
        """
        Caption and classify an image.

        Raises:
            InferenceError: provider disabled, timed out, or returned garbage
        """
        pass
