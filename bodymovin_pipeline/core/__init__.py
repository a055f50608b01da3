"""
Core configuration and error types shared by every pipeline stage.
"""

from .config import RenderConfig
from .errors import (
    BodymovinError,
    DocumentReadError,
    DocumentStructureError,
    AssetLoadError,
    FrameRenderError,
    BatchRenderError,
    RenderCancelled,
)

__all__ = [
    'RenderConfig',
    'BodymovinError',
    'DocumentReadError',
    'DocumentStructureError',
    'AssetLoadError',
    'FrameRenderError',
    'BatchRenderError',
    'RenderCancelled',
]
