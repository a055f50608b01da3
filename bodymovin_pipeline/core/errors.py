"""
Error taxonomy for the Bodymovin pipeline.

Document and asset errors are fatal and raised before any frame is
rendered. Frame errors are raised from the parallel phase.
"""

from typing import Dict, List, Optional

import numpy as np


class BodymovinError(Exception):
    """Base class for every error raised by the pipeline."""


class DocumentReadError(BodymovinError):
    """The animation file could not be read or is not valid JSON."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read animation {path}: {cause}")


class DocumentStructureError(BodymovinError):
    """The animation data is missing a required field or breaks an invariant."""


class AssetLoadError(BodymovinError):
    """An image asset could not be located or decoded."""

    def __init__(self, message: str, asset_id: Optional[str] = None, path: Optional[str] = None):
        self.asset_id = asset_id
        self.path = path
        super().__init__(message)


class FrameRenderError(BodymovinError):
    """Rendering a single frame failed."""

    def __init__(self, frame_number: int, cause: BaseException):
        self.frame_number = frame_number
        self.cause = cause
        super().__init__(f"Frame {frame_number} failed: {cause}")


class BatchRenderError(BodymovinError):
    """
    One or more frames failed while rendering with fail_fast disabled.

    ``failures`` maps frame index to the exception it raised and
    ``frames`` holds the canvases that rendered successfully.
    """

    def __init__(self, failures: Dict[int, BaseException], frames: Dict[int, np.ndarray]):
        self.failures = failures
        self.frames = frames
        failed = sorted(failures)
        shown = ", ".join(str(i) for i in failed[:10])
        if len(failed) > 10:
            shown += ", ..."
        super().__init__(f"{len(failed)} frame(s) failed: {shown}")

    @property
    def failed_frames(self) -> List[int]:
        return sorted(self.failures)


class RenderCancelled(BodymovinError):
    """The batch was cancelled before every frame was rendered."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        super().__init__(f"Rendering cancelled after {completed}/{total} frames")
