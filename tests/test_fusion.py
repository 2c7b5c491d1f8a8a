"""Tests for the fusion engine."""

from __future__ import annotations

import pytest

from coregulation.fusion import NEUTRAL_SCORE, fuse
from coregulation.fusion.engine import agreement, latest_per_modality
from coregulation.models import Modality


class TestInsufficientSignal:
    def test_no_signals(self):
        result = fuse([])
        assert result.score == NEUTRAL_SCORE == 0.5
        assert result.confidence == 0.0
        assert result.insufficient_signal
        assert result.contributions == {}

    def test_accepts_any_iterable(self):
        assert fuse(iter(())).insufficient_signal


class TestSingleModality:
    def test_score_is_the_value(self, make_signal):
        result = fuse([make_signal(Modality.VOICE, 0.37, 0.8)])
        assert result.score == 0.37
        assert result.confidence == pytest.approx(0.8)
        assert not result.insufficient_signal

    def test_zero_confidence_keeps_value(self, make_signal):
        result = fuse([make_signal(Modality.FACE, 0.42, 0.0)])
        assert result.score == 0.42
        assert result.confidence == 0.0

    def test_profile_multiplier_scales_confidence(self, make_signal, autism_profile):
        result = fuse([make_signal(Modality.FACE, 0.7, 1.0)], autism_profile)
        assert result.score == 0.7
        assert result.confidence == pytest.approx(0.6)


class TestMultiModality:
    def test_disagreement_collapses_confidence(self, make_signal):
        result = fuse([
            make_signal(Modality.POSE, 0.1, 0.9),
            make_signal(Modality.FACE, 0.9, 0.9),
        ])
        assert result.score == pytest.approx(0.5)
        # stddev 0.4 → agreement 0.2
        assert result.confidence == pytest.approx(0.18)
        assert result.confidence < 0.9

    def test_same_score_lower_confidence_when_modalities_split(self, make_signal):
        split = fuse([
            make_signal(Modality.POSE, 0.2, 0.9),
            make_signal(Modality.VOICE, 0.8, 0.9),
        ])
        agreed = fuse([
            make_signal(Modality.POSE, 0.5, 0.9),
            make_signal(Modality.VOICE, 0.5, 0.9),
        ])
        assert split.score == pytest.approx(0.5)
        assert agreed.score == pytest.approx(0.5)
        # stddev 0.3 → agreement 0.4
        assert split.confidence == pytest.approx(0.36)
        assert agreed.confidence == pytest.approx(0.9)
        assert split.confidence < agreed.confidence

    def test_agreement_keeps_confidence(self, make_signal):
        result = fuse([
            make_signal(Modality.POSE, 0.6, 0.9),
            make_signal(Modality.FACE, 0.6, 0.7),
            make_signal(Modality.VOICE, 0.6, 0.8),
        ])
        assert result.score == pytest.approx(0.6)
        assert result.confidence == pytest.approx(0.7)

    def test_confidence_weighting(self, make_signal):
        result = fuse([
            make_signal(Modality.POSE, 0.2, 0.9),
            make_signal(Modality.VOICE, 0.8, 0.3),
        ])
        assert result.score == pytest.approx((0.2 * 0.9 + 0.8 * 0.3) / 1.2)

    def test_contributions_sum_to_score(self, make_signal):
        result = fuse([
            make_signal(Modality.POSE, 0.3, 0.5),
            make_signal(Modality.FACE, 0.5, 0.6),
            make_signal(Modality.VOICE, 0.9, 0.4),
        ])
        assert sum(result.contributions.values()) == pytest.approx(result.score)
        assert set(result.contributions) == set(Modality)

    def test_absent_modality_does_not_pull_down(self, make_signal):
        result = fuse([
            make_signal(Modality.POSE, 0.8, 0.9),
            make_signal(Modality.VOICE, 0.8, 0.9),
        ])
        assert result.score == pytest.approx(0.8)
        assert Modality.FACE not in result.contributions

    def test_profile_weights(self, make_signal, autism_profile):
        result = fuse(
            [make_signal(Modality.POSE, 0.2, 1.0), make_signal(Modality.FACE, 0.8, 1.0)],
            autism_profile,
        )
        # weights 0.8 (pose) and 0.6 (face)
        assert result.score == pytest.approx((0.2 * 0.8 + 0.8 * 0.6) / 1.4)

    def test_all_zero_confidence_falls_back_to_mean(self, make_signal):
        result = fuse([
            make_signal(Modality.POSE, 0.2, 0.0),
            make_signal(Modality.FACE, 0.6, 0.0),
        ])
        assert result.score == pytest.approx(0.4)
        assert result.confidence == 0.0
        assert not result.insufficient_signal


class TestHelpers:
    def test_latest_duplicate_wins(self, make_signal):
        older = make_signal(Modality.POSE, 0.1, t=0)
        newer = make_signal(Modality.POSE, 0.9, t=1)
        assert latest_per_modality([newer, older])[Modality.POSE] is newer
        assert fuse([older, newer]).score == 0.9

    def test_agreement_bounds(self):
        assert agreement([0.5]) == 1.0
        assert agreement([0.0, 1.0]) == 0.0
        assert agreement([0.4, 0.6]) == pytest.approx(0.8)
