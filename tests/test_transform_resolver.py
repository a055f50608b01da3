"""
Tests for resolving layer transforms at a frame.
"""

import math

import pytest

from bodymovin_pipeline.models import StaticTrack, Transform, Vec2
from bodymovin_pipeline.transform_resolver import clamp_opacity, resolve

from helpers import fade_track, static_transform


class TestDefaults:

    def test_empty_transform_is_identity(self):
        resolved = resolve(Transform(), 0)
        assert resolved.position == Vec2(0.0, 0.0)
        assert resolved.anchor == Vec2(0.0, 0.0)
        assert resolved.scale == Vec2(1.0, 1.0)
        assert resolved.rotation == 0.0
        assert resolved.opacity == 1.0

    def test_non_finite_values_fall_back(self):
        transform = Transform(
            position=StaticTrack(Vec2(float('nan'), 4.0)),
            rotation=StaticTrack(float('inf')),
            opacity=StaticTrack(float('nan')),
        )
        resolved = resolve(transform, 0)
        assert resolved.position == Vec2(0.0, 4.0)
        assert resolved.rotation == 0.0
        assert resolved.opacity == 1.0


class TestUnitConversion:

    def test_scale_percent_to_multiplier(self):
        resolved = resolve(static_transform(scale=(50, 200)), 0)
        assert resolved.scale == Vec2(0.5, 2.0)

    def test_opacity_percent_to_fraction(self):
        resolved = resolve(static_transform(opacity=25), 0)
        assert resolved.opacity == pytest.approx(0.25)

    @pytest.mark.parametrize("opacity_percent, expected", [
        (-50, 0.0), (0, 0.0), (100, 1.0), (150, 1.0), (1e9, 1.0),
    ])
    def test_opacity_always_clamped(self, opacity_percent, expected):
        resolved = resolve(static_transform(opacity=opacity_percent), 0)
        assert 0.0 <= resolved.opacity <= 1.0
        assert resolved.opacity == expected

    def test_clamp_opacity(self):
        assert clamp_opacity(-0.1) == 0.0
        assert clamp_opacity(0.3) == 0.3
        assert clamp_opacity(7) == 1.0


class TestAnimatedTransform:

    def test_animated_opacity(self):
        transform = Transform(opacity=fade_track(0, 100, 10, 0))
        assert resolve(transform, 0).opacity == 1.0
        assert resolve(transform, 5).opacity == pytest.approx(0.5)
        assert resolve(transform, 10).opacity == 0.0

    def test_animated_rotation(self):
        transform = Transform(rotation=fade_track(0, 0, 10, 90))
        assert resolve(transform, 5).rotation == pytest.approx(45.0)

    def test_properties_are_independent(self):
        transform = Transform(
            position=StaticTrack(Vec2(10.0, 20.0)),
            opacity=fade_track(0, 100, 10, 0),
        )
        resolved = resolve(transform, 5)
        assert resolved.position == Vec2(10.0, 20.0)
        assert resolved.scale == Vec2(1.0, 1.0)
        assert resolved.opacity == pytest.approx(0.5)

    def test_resolve_is_deterministic(self):
        transform = Transform(
            position=StaticTrack(Vec2(1.5, 2.5)),
            scale=fade_track(0, 10, 7, 333),
            rotation=fade_track(0, -30, 7, 30),
            opacity=fade_track(0, 100, 7, 0),
        )
        first = resolve(transform, 3.3)
        second = resolve(transform, 3.3)
        assert first == second
        assert math.isclose(first.rotation, second.rotation, rel_tol=0, abs_tol=0)
