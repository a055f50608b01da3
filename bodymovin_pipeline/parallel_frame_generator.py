"""
Parallel frame generator
Renders every frame of an animation concurrently and hands them back in
frame order.
"""

import logging
import threading
from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np
from tqdm import tqdm

from .core.config import RenderConfig
from .core.errors import BatchRenderError, FrameRenderError, RenderCancelled
from .frame_renderer import FrameRenderer
from .models import AnimationDocument

logger = logging.getLogger(__name__)

# How often a blocked wait re-checks the cancel event, in seconds
CANCEL_POLL_INTERVAL = 0.1

# Renderer owned by each worker process, set by _init_worker
_worker_renderer: Optional[FrameRenderer] = None


def _init_worker(document: AnimationDocument, assets: Dict[str, np.ndarray], config: RenderConfig):
    global _worker_renderer
    _worker_renderer = FrameRenderer(document, assets, config)


def _render_in_worker(frame_number: int) -> np.ndarray:
    return _worker_renderer.render_frame(frame_number)


class ParallelFrameGenerator:
    """
    Fans frame rendering out over a bounded worker pool.

    Frames never share state: the document and assets are read-only and
    every frame gets its own canvas. At most ``2 * workers`` frames are in
    flight, which bounds memory and lets cancellation stop new work.
    """

    def __init__(
        self,
        document: AnimationDocument,
        assets: Mapping[str, np.ndarray],
        config: Optional[RenderConfig] = None,
    ):
        self.document = document
        self.assets = assets
        self.config = config or RenderConfig()
        self.renderer = FrameRenderer(document, assets, self.config)
        self.num_workers = self.config.worker_count

    @property
    def total_frames(self) -> int:
        return self.document.total_frames

    def _create_executor(self) -> Executor:
        if self.config.use_processes:
            return ProcessPoolExecutor(
                max_workers=self.num_workers,
                initializer=_init_worker,
                initargs=(self.document, dict(self.assets), self.config),
            )
        return ThreadPoolExecutor(max_workers=self.num_workers, thread_name_prefix='frame')

    def _submit(self, executor: Executor, frame_number: int) -> Future:
        if self.config.use_processes:
            return executor.submit(_render_in_worker, frame_number)
        return executor.submit(self.renderer.render_frame, frame_number)

    @staticmethod
    def _check_cancel(cancel_event: Optional[threading.Event], completed: int, total: int):
        if cancel_event is not None and cancel_event.is_set():
            raise RenderCancelled(completed, total)

    def _wait(self, future: Future, cancel_event: Optional[threading.Event], completed: int) -> None:
        if cancel_event is None:
            wait([future])
            return
        while not future.done():
            self._check_cancel(cancel_event, completed, self.total_frames)
            wait([future], timeout=CANCEL_POLL_INTERVAL, return_when=FIRST_COMPLETED)

    def _results(self, cancel_event: Optional[threading.Event]) -> Iterator[Tuple[int, Optional[np.ndarray], Optional[BaseException]]]:
        """Yield (frame, canvas, error) in frame order."""
        total = self.total_frames

        if self.num_workers == 1:
            for frame_number in range(total):
                self._check_cancel(cancel_event, frame_number, total)
                try:
                    yield frame_number, self.renderer.render_frame(frame_number), None
                except Exception as e:
                    yield frame_number, None, e
            return

        window = self.num_workers * 2
        pending: Dict[int, Future] = {}
        next_submit = 0
        executor = self._create_executor()
        try:
            for frame_number in range(total):
                self._check_cancel(cancel_event, frame_number, total)
                while next_submit < total and len(pending) < window:
                    pending[next_submit] = self._submit(executor, next_submit)
                    next_submit += 1

                future = pending.pop(frame_number)
                self._wait(future, cancel_event, frame_number)
                try:
                    yield frame_number, future.result(), None
                except Exception as e:
                    yield frame_number, None, e
        finally:
            # Queued frames are dropped; in-flight ones finish and are discarded
            executor.shutdown(wait=True, cancel_futures=True)

    def iter_frames(self, cancel_event: Optional[threading.Event] = None) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Yield ``(frame_number, canvas)`` in ascending frame order.

        With ``fail_fast`` the first failing frame raises FrameRenderError.
        Otherwise failing frames are skipped and a BatchRenderError listing
        them is raised once every frame has been attempted.
        """
        total = self.total_frames
        logger.info("Rendering %d frames with %d worker(s) (%s)", total, self.num_workers,
                    'processes' if self.config.use_processes and self.num_workers > 1 else 'threads')

        failures: Dict[int, BaseException] = {}
        results = self._results(cancel_event)
        try:
            with tqdm(total=total, desc="Rendering frames", disable=not self.config.show_progress) as progress:
                for frame_number, canvas, error in results:
                    progress.update(1)
                    if error is not None:
                        if self.config.fail_fast:
                            logger.error("Frame %d failed: %s", frame_number, error)
                            raise FrameRenderError(frame_number, error) from error
                        logger.warning("Frame %d failed, continuing: %s", frame_number, error)
                        failures[frame_number] = error
                        continue
                    yield frame_number, canvas
        finally:
            results.close()

        if failures:
            raise BatchRenderError(failures, {})

    def render_all(self, cancel_event: Optional[threading.Event] = None) -> List[np.ndarray]:
        """Render every frame; the result is indexed by frame number."""
        frames: Dict[int, np.ndarray] = {}
        try:
            for frame_number, canvas in self.iter_frames(cancel_event):
                frames[frame_number] = canvas
        except BatchRenderError as e:
            raise BatchRenderError(e.failures, frames) from None
        return [frames[i] for i in range(self.total_frames)]


def render_all(
    document: AnimationDocument,
    assets: Mapping[str, np.ndarray],
    config: Optional[RenderConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[np.ndarray]:
    """Render frames ``0 .. total_frames - 1`` of ``document``."""
    return ParallelFrameGenerator(document, assets, config).render_all(cancel_event)


def iter_frames(
    document: AnimationDocument,
    assets: Mapping[str, np.ndarray],
    config: Optional[RenderConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[Tuple[int, np.ndarray]]:
    """Stream ``(frame_number, canvas)`` pairs in frame order."""
    return ParallelFrameGenerator(document, assets, config).iter_frames(cancel_event)
