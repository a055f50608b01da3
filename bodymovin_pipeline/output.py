"""
Writing rendered frames to disk as numbered PNG files.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List, Tuple, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def frame_filename(frame_number: int) -> str:
    return f"frame_{frame_number:04d}.png"


def save_frame(frame: np.ndarray, output_dir: PathLike, frame_number: int) -> Path:
    """Save one RGBA frame as ``frame_NNNN.png`` inside ``output_dir``."""
    path = Path(output_dir) / frame_filename(frame_number)
    Image.fromarray(frame, 'RGBA').save(path)
    return path


def save_frames(frames: Iterable[np.ndarray], output_dir: PathLike) -> List[Path]:
    """
    Save every frame, all or nothing.

    Frames are written to a temporary directory next to ``output_dir`` and
    only moved into place once all of them were written. Frame files left
    in ``output_dir`` by an earlier run are removed at that point.
    """
    output_dir = Path(output_dir)
    output_dir.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{output_dir.name}_", dir=output_dir.parent))

    try:
        staged = [save_frame(frame, staging, i) for i, frame in enumerate(frames)]
        output_dir.mkdir(parents=True, exist_ok=True)
        stale = list(output_dir.glob('frame_*.png'))
        for path in stale:
            path.unlink()
        if stale:
            logger.debug("Removed %d frames of an earlier run from %s", len(stale), output_dir)

        saved = []
        for path in staged:
            target = output_dir / path.name
            shutil.move(str(path), str(target))
            saved.append(target)
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.info("Saved %d frames to %s", len(saved), output_dir)
    return saved


def stream_frames(frames: Iterable[Tuple[int, np.ndarray]], output_dir: PathLike) -> List[Path]:
    """
    Save frames as they arrive.

    If the source fails part way, the frames written so far stay on disk.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    saved = []
    for frame_number, frame in frames:
        saved.append(save_frame(frame, output_dir, frame_number))
    logger.info("Saved %d frames to %s", len(saved), output_dir)
    return saved
