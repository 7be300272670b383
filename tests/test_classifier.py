"""Tests for scene classification and setting recommendations."""

import dataclasses

import pytest

from lumina.classifier import (
    ISO_STOPS,
    SCENE_FILTERS,
    ClassifierThresholds,
    FilterKey,
    Scene,
    adopt_suggested_filter,
    classify_scene,
    recommend_iso,
)
from lumina.metrics import Hotspot, SceneMetrics


def make_metrics(**overrides) -> SceneMetrics:
    values = dict(
        brightness=0.5,
        contrast=0.1,
        color_temperature_bias=0.0,
        motion_estimate=0.05,
        hotspot=Hotspot(x=0.4, y=0.4, strength=0.6),
        face_confidence=0.0,
    )
    values.update(overrides)
    return SceneMetrics(**values)


class TestSceneSelection:
    def test_low_light_end_to_end(self):
        dark = make_metrics(brightness=0.1, contrast=0.3, motion_estimate=0.05)
        baseline = make_metrics(brightness=0.6, contrast=0.3, motion_estimate=0.05)

        dark_suggestion = classify_scene(dark)
        baseline_suggestion = classify_scene(baseline)

        assert dark_suggestion.scene is Scene.LOW_LIGHT
        assert dark_suggestion.recommended.iso > baseline_suggestion.recommended.iso

    def test_portrait(self):
        assert classify_scene(make_metrics(face_confidence=0.8)).scene is Scene.PORTRAIT

    def test_action(self):
        assert classify_scene(make_metrics(motion_estimate=0.7)).scene is Scene.ACTION

    def test_landscape(self):
        suggestion = classify_scene(make_metrics(contrast=0.4, brightness=0.6))
        assert suggestion.scene is Scene.LANDSCAPE

    def test_neutral_fallback(self):
        assert classify_scene(make_metrics()).scene is Scene.NEUTRAL

    def test_face_outranks_darkness(self):
        metrics = make_metrics(face_confidence=0.9, brightness=0.1, motion_estimate=0.9)
        assert classify_scene(metrics).scene is Scene.PORTRAIT

    def test_darkness_outranks_motion(self):
        metrics = make_metrics(brightness=0.1, motion_estimate=0.9)
        assert classify_scene(metrics).scene is Scene.LOW_LIGHT

    def test_motion_outranks_landscape(self):
        metrics = make_metrics(contrast=0.5, brightness=0.7, motion_estimate=0.8)
        assert classify_scene(metrics).scene is Scene.ACTION

    def test_thresholds_are_configurable(self):
        metrics = make_metrics(face_confidence=0.2)
        assert classify_scene(metrics).scene is Scene.NEUTRAL

        relaxed = ClassifierThresholds(portrait_face=0.1)
        assert classify_scene(metrics, relaxed).scene is Scene.PORTRAIT

    def test_idempotent(self):
        metrics = make_metrics(brightness=0.2, contrast=0.05)
        assert classify_scene(metrics) == classify_scene(metrics)


class TestConfidence:
    def test_portrait_confidence_rises_with_faces(self):
        values = [
            classify_scene(make_metrics(face_confidence=face)).confidence
            for face in (0.4, 0.6, 0.8, 1.0)
        ]
        assert values == sorted(values)
        assert values[0] < values[-1]

    def test_low_light_confidence_rises_with_darkness(self):
        values = [
            classify_scene(make_metrics(brightness=b)).confidence
            for b in (0.24, 0.18, 0.1, 0.0)
        ]
        assert values == sorted(values)
        assert values[0] < values[-1]

    def test_action_confidence_rises_with_motion(self):
        values = [
            classify_scene(make_metrics(motion_estimate=m)).confidence
            for m in (0.4, 0.6, 1.0)
        ]
        assert values == sorted(values)
        assert values[0] < values[-1]

    def test_confidence_in_range(self):
        for face in (0.0, 0.5, 1.0):
            for brightness in (0.0, 0.3, 1.0):
                for motion in (0.0, 0.5, 1.0):
                    metrics = make_metrics(
                        face_confidence=face, brightness=brightness, motion_estimate=motion
                    )
                    assert 0.0 <= classify_scene(metrics).confidence <= 1.0


class TestRecommendations:
    @pytest.mark.parametrize("scene", list(Scene))
    def test_iso_never_rises_with_brightness(self, scene):
        isos = [recommend_iso(scene, b / 10) for b in range(11)]
        assert isos == sorted(isos, reverse=True)
        assert all(iso in ISO_STOPS for iso in isos)

    def test_white_balance_counters_warm_light(self):
        neutral = classify_scene(make_metrics())
        warm = classify_scene(make_metrics(color_temperature_bias=0.5))

        assert neutral.recommended.white_balance == "5500K"
        assert warm.recommended.white_balance == "5000K"

    def test_action_uses_fast_shutter(self):
        suggestion = classify_scene(make_metrics(motion_estimate=0.9))
        assert suggestion.recommended.shutter_speed == "1/1000"

    @pytest.mark.parametrize("scene", list(Scene))
    def test_filter_mapping_is_fixed(self, scene):
        assert isinstance(SCENE_FILTERS[scene], FilterKey)

    def test_suggested_filter(self):
        assert classify_scene(make_metrics(brightness=0.1)).suggested_filter is FilterKey.NOIR
        assert classify_scene(make_metrics()).suggested_filter is FilterKey.NEUTRAL


class TestTips:
    def test_tips_are_non_empty(self):
        for metrics in (
            make_metrics(),
            make_metrics(face_confidence=0.9),
            make_metrics(brightness=0.05),
            make_metrics(motion_estimate=0.9),
            make_metrics(contrast=0.5, brightness=0.6),
        ):
            tips = classify_scene(metrics).tips
            assert len(tips) > 0
            assert all(isinstance(tip, str) and tip for tip in tips)

    def test_missing_subject_adds_tip(self):
        with_subject = classify_scene(make_metrics()).tips
        without_subject = classify_scene(make_metrics(hotspot=None)).tips

        assert len(without_subject) == len(with_subject) + 1
        assert without_subject[: len(with_subject)] == with_subject

    def test_flat_light_adds_tip(self):
        tips = classify_scene(make_metrics(contrast=0.01)).tips
        assert "Light looks flat, try side lighting" in tips


class TestFilterAdoption:
    def test_adopts_when_neutral(self):
        suggestion = classify_scene(make_metrics(face_confidence=0.9))
        assert adopt_suggested_filter(FilterKey.NEUTRAL, suggestion) is FilterKey.WARM

    def test_keeps_user_choice(self):
        suggestion = classify_scene(make_metrics(face_confidence=0.9))
        assert adopt_suggested_filter(FilterKey.NOIR, suggestion) is FilterKey.NOIR

    def test_suggestion_is_immutable(self):
        suggestion = classify_scene(make_metrics())
        with pytest.raises(dataclasses.FrozenInstanceError):
            suggestion.scene = Scene.ACTION
