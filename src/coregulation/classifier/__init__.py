"""Arousal-band classification with two-tier temporal smoothing."""

from coregulation.classifier.bands import band_range, instant_band
from coregulation.classifier.classifier import BandClassifier
from coregulation.classifier.smoothing import MajorityVoteBuffer
from coregulation.classifier.sustain import SustainFilter

__all__ = [
    "BandClassifier",
    "MajorityVoteBuffer",
    "SustainFilter",
    "band_range",
    "instant_band",
]
