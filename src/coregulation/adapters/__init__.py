"""Feature adapters — normalise extractor outputs into :class:`ModalitySignal`
and caregiver :class:`EmotionReading` records."""

from coregulation.adapters.base import FeatureAdapter
from coregulation.adapters.caregiver import caregiver_reading
from coregulation.adapters.child import (
    FaceAdapter,
    FacialFeatures,
    PoseAdapter,
    PoseFeatures,
    VocalFeatures,
    VoiceAdapter,
)
from coregulation.adapters.registry import (
    adapt_frame,
    available_modalities,
    get_adapter,
    register_adapter,
    unregister_adapter,
)

__all__ = [
    "FaceAdapter",
    "FacialFeatures",
    "FeatureAdapter",
    "PoseAdapter",
    "PoseFeatures",
    "VocalFeatures",
    "VoiceAdapter",
    "adapt_frame",
    "available_modalities",
    "caregiver_reading",
    "get_adapter",
    "register_adapter",
    "unregister_adapter",
]
