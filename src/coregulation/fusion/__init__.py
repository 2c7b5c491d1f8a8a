"""Multimodal signal fusion."""

from coregulation.fusion.engine import NEUTRAL_SCORE, FusionResult, fuse

__all__ = ["NEUTRAL_SCORE", "FusionResult", "fuse"]
