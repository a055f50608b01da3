"""
Builders for synthetic documents and images used across the tests.
"""

import numpy as np

from bodymovin_pipeline.models import (
    AnimatedTrack,
    AnimationDocument,
    Keyframe,
    Layer,
    StaticTrack,
    Transform,
    Vec2,
)


def solid_image(width, height, color):
    """HxWx4 uint8 image filled with one RGBA colour."""
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    return image


def static_transform(position=(0, 0), anchor=(0, 0), scale=(100, 100), rotation=0, opacity=100):
    return Transform(
        position=StaticTrack(Vec2(*position)),
        anchor=StaticTrack(Vec2(*anchor)),
        scale=StaticTrack(Vec2(*scale)),
        rotation=StaticTrack(float(rotation)),
        opacity=StaticTrack(float(opacity)),
    )


def make_layer(asset_id, start=0, end=10, **transform_kwargs):
    return Layer(start_frame=float(start), end_frame=float(end),
                 transform=static_transform(**transform_kwargs), asset_id=asset_id)


def make_document(layers, width=100, height=100, total_frames=11):
    return AnimationDocument(width=width, height=height, total_frames=total_frames,
                             frame_rate=30.0, layers=tuple(layers))


def fade_track(start_frame, start_value, end_frame, end_value):
    return AnimatedTrack((
        Keyframe(time=float(start_frame), value=float(start_value), end_value=float(end_value)),
        Keyframe(time=float(end_frame), value=float(end_value)),
    ))


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


