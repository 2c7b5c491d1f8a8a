"""Per-modality adapter lookup and frame adaptation.

Every child frame is adapted through the adapter currently registered for
each modality, so swapping in a tuned or test adapter with
:func:`register_adapter` changes what the classifier sees from the next
frame on.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from coregulation.adapters.base import FeatureAdapter
from coregulation.adapters.child import (
    FaceAdapter,
    FacialFeatures,
    PoseAdapter,
    PoseFeatures,
    VocalFeatures,
    VoiceAdapter,
)
from coregulation.models import Modality, ModalitySignal

logger = structlog.get_logger(__name__)

_ADAPTERS: dict[Modality, FeatureAdapter] = {
    adapter.modality: adapter for adapter in (PoseAdapter(), FaceAdapter(), VoiceAdapter())
}


def register_adapter(adapter: FeatureAdapter) -> FeatureAdapter | None:
    """Install ``adapter`` for its modality; returns the one it replaced."""
    previous = _ADAPTERS.get(adapter.modality)
    _ADAPTERS[adapter.modality] = adapter
    logger.info(
        "adapters.registered",
        modality=adapter.modality.value,
        adapter=type(adapter).__name__,
    )
    return previous


def unregister_adapter(modality: Modality) -> FeatureAdapter | None:
    return _ADAPTERS.pop(modality, None)


def get_adapter(modality: Modality) -> FeatureAdapter:
    """Return the adapter registered for ``modality``.

    Raises :class:`ValueError` if there is none.
    """
    try:
        return _ADAPTERS[modality]
    except KeyError:
        raise ValueError(
            f"No adapter registered for {modality.value}; "
            f"registered: {sorted(m.value for m in _ADAPTERS)}"
        ) from None


def available_modalities() -> list[Modality]:
    return [m for m in Modality if m in _ADAPTERS]


def adapt_frame(
    pose: PoseFeatures | None = None,
    face: FacialFeatures | None = None,
    voice: VocalFeatures | None = None,
    timestamp: datetime | None = None,
) -> list[ModalitySignal]:
    """Adapt one frame tuple and return only the modalities that are present.

    A present record whose modality has no registered adapter is dropped
    with a warning, the same as if the extractor had produced nothing.
    """
    ts = timestamp or datetime.utcnow()
    signals: list[ModalitySignal] = []
    for modality, features in (
        (Modality.POSE, pose),
        (Modality.FACE, face),
        (Modality.VOICE, voice),
    ):
        if features is None:
            continue
        adapter = _ADAPTERS.get(modality)
        if adapter is None:
            logger.warning("adapters.unregistered_modality", modality=modality.value)
            continue
        signal = adapter.adapt(features, ts)
        if signal is not None:
            signals.append(signal)
    return signals
