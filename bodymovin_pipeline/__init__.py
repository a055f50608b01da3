"""
Bodymovin Frame Rendering Pipeline
==================================

Renders Bodymovin (Lottie) animations made of image layers into RGBA
frames:
- Document model over the parsed animation JSON
- Linear keyframe interpolation of position, anchor, scale, rotation, opacity
- Per-layer scale, rotation and alpha compositing
- Parallel, frame-ordered batch rendering
"""

from .core.config import RenderConfig
from .core.errors import (
    BodymovinError,
    DocumentReadError,
    DocumentStructureError,
    AssetLoadError,
    FrameRenderError,
    BatchRenderError,
    RenderCancelled,
)
from .models import (
    Vec2,
    Keyframe,
    StaticTrack,
    AnimatedTrack,
    Transform,
    ResolvedTransform,
    Layer,
    AssetRef,
    AnimationDocument,
)
from .document import load_bodymovin_json, parse_document, load_document
from .interpolation import interpolate
from .transform_resolver import resolve
from .compositor import composite, new_canvas
from .asset_store import load_assets
from .frame_renderer import FrameRenderer, render_frame
from .parallel_frame_generator import ParallelFrameGenerator, render_all, iter_frames
from .output import save_frame, save_frames, stream_frames
from .main import get_all_frames

__all__ = [
    'RenderConfig',
    'BodymovinError',
    'DocumentReadError',
    'DocumentStructureError',
    'AssetLoadError',
    'FrameRenderError',
    'BatchRenderError',
    'RenderCancelled',
    'Vec2',
    'Keyframe',
    'StaticTrack',
    'AnimatedTrack',
    'Transform',
    'ResolvedTransform',
    'Layer',
    'AssetRef',
    'AnimationDocument',
    'load_bodymovin_json',
    'parse_document',
    'load_document',
    'interpolate',
    'resolve',
    'composite',
    'new_canvas',
    'load_assets',
    'FrameRenderer',
    'render_frame',
    'ParallelFrameGenerator',
    'render_all',
    'iter_frames',
    'save_frame',
    'save_frames',
    'stream_frames',
    'get_all_frames',
]
