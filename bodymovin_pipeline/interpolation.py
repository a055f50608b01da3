"""
Keyframe interpolation.

Every function here is pure: tracks are immutable and nothing is cached,
so frames can be evaluated concurrently without locking.
"""

from typing import Tuple

from .models import AnimatedTrack, Keyframe, StaticTrack, Track, Value, Vec2


def find_bounding_keyframes(keyframes: Tuple[Keyframe, ...], frame: float) -> Tuple[Keyframe, Keyframe]:
    """
    Find (prev, next) with prev.time <= frame < next.time.

    Before the first keyframe both bounds are the first keyframe; at or
    past the last keyframe both bounds are the last one. Keyframes must
    already be sorted by time.
    """
    prev_kf = keyframes[0]
    next_kf = keyframes[0]

    for keyframe in keyframes:
        if keyframe.time <= frame:
            prev_kf = keyframe
            next_kf = keyframe
        else:
            next_kf = keyframe
            break

    return prev_kf, next_kf


def segment_progress(prev_kf: Keyframe, next_kf: Keyframe, frame: float) -> float:
    span = next_kf.time - prev_kf.time
    if span == 0:
        return 0.0
    return (frame - prev_kf.time) / span


def lerp(start: Value, end: Value, progress: float) -> Value:
    """Linear interpolation, component-wise for vectors."""
    if isinstance(start, Vec2):
        end_vec = end if isinstance(end, Vec2) else Vec2(float(end), float(end))
        return Vec2(
            start.x + (end_vec.x - start.x) * progress,
            start.y + (end_vec.y - start.y) * progress,
        )
    if isinstance(end, Vec2):
        end = end.x
    return start + (end - start) * progress


def interpolate(track: Track, frame: float) -> Value:
    """
    Evaluate a track at a (possibly fractional) frame number.

    Static tracks ignore the frame. Animated tracks interpolate linearly
    between the bounding keyframes and clamp outside the keyframe range.
    """
    if isinstance(track, StaticTrack):
        return track.value

    if not isinstance(track, AnimatedTrack):
        raise TypeError(f"Unsupported track type: {type(track).__name__}")

    frame = float(frame)
    prev_kf, next_kf = find_bounding_keyframes(track.keyframes, frame)

    if prev_kf is next_kf:
        return prev_kf.value

    # Bodymovin segments run from a keyframe's start value to its end value
    end_value = prev_kf.end_value if prev_kf.end_value is not None else next_kf.value
    progress = segment_progress(prev_kf, next_kf, frame)
    return lerp(prev_kf.value, end_value, progress)
