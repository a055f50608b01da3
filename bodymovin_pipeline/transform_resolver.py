"""
Resolves an authored layer transform into concrete values for one frame.
"""

import math
from typing import Optional

from .interpolation import interpolate
from .models import ResolvedTransform, Track, Transform, Value, Vec2

DEFAULT_POSITION = Vec2(0.0, 0.0)
DEFAULT_ANCHOR = Vec2(0.0, 0.0)
DEFAULT_SCALE_PERCENT = Vec2(100.0, 100.0)
DEFAULT_ROTATION = 0.0
DEFAULT_OPACITY_PERCENT = 100.0


def _finite(value: float, default: float) -> float:
    return value if math.isfinite(value) else default


def _as_vec2(value: Value, default: Vec2) -> Vec2:
    if isinstance(value, Vec2):
        return Vec2(_finite(value.x, default.x), _finite(value.y, default.y))
    # A scalar on a vector property applies to both axes
    scalar = float(value)
    return Vec2(_finite(scalar, default.x), _finite(scalar, default.y))


def _as_scalar(value: Value, default: float) -> float:
    if isinstance(value, Vec2):
        value = value.x
    return _finite(float(value), default)


def _vec2_at(track: Optional[Track], frame: float, default: Vec2) -> Vec2:
    if track is None:
        return default
    return _as_vec2(interpolate(track, frame), default)


def _scalar_at(track: Optional[Track], frame: float, default: float) -> float:
    if track is None:
        return default
    return _as_scalar(interpolate(track, frame), default)


def clamp_opacity(opacity: float) -> float:
    return max(0.0, min(1.0, opacity))


def resolve(transform: Transform, frame: float) -> ResolvedTransform:
    """
    Evaluate every transform property at ``frame``.

    Scale and opacity are converted from percent to fractions here, and
    only here. Opacity is clamped to [0, 1]. Missing or non-finite values
    fall back to the neutral value of their property.
    """
    position = _vec2_at(transform.position, frame, DEFAULT_POSITION)
    anchor = _vec2_at(transform.anchor, frame, DEFAULT_ANCHOR)
    scale_percent = _vec2_at(transform.scale, frame, DEFAULT_SCALE_PERCENT)
    rotation = _scalar_at(transform.rotation, frame, DEFAULT_ROTATION)
    opacity_percent = _scalar_at(transform.opacity, frame, DEFAULT_OPACITY_PERCENT)

    return ResolvedTransform(
        position=position,
        anchor=anchor,
        scale=Vec2(scale_percent.x / 100.0, scale_percent.y / 100.0),
        rotation=rotation,
        opacity=clamp_opacity(opacity_percent / 100.0),
    )
