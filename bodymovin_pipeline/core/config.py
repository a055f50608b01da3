"""
Render configuration
====================

Settings can come from keyword arguments, from the CLI, or from
``BODYMOVIN_*`` environment variables (a ``.env`` file in the working
directory is honoured).
"""

import os
from dataclasses import dataclass
from multiprocessing import cpu_count
from typing import Optional

from dotenv import find_dotenv, load_dotenv


def default_worker_count() -> int:
    """Leave one CPU free, use at most 8 workers."""
    return max(1, min(cpu_count() - 1, 8))


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class RenderConfig:
    """Configuration for a rendering batch."""

    # Parallelism
    max_workers: Optional[int] = None  # None = default_worker_count()
    use_processes: bool = False

    # Failure policy: abort on the first failing frame, or render
    # everything and report all failures at the end
    fail_fast: bool = True

    # Compositing
    floor_scale: bool = False  # legacy: scale magnitudes below 1.0 become 1.0
    scale_anchor: bool = True  # anchor is scaled with the layer image

    # Canvas size used when the document does not declare one
    default_width: int = 540
    default_height: int = 800

    show_progress: bool = False

    def __post_init__(self):
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.default_width <= 0 or self.default_height <= 0:
            raise ValueError(
                f"Default canvas size must be positive, got "
                f"{self.default_width}x{self.default_height}"
            )

    @property
    def worker_count(self) -> int:
        return self.max_workers if self.max_workers is not None else default_worker_count()

    @classmethod
    def from_env(cls, **overrides) -> 'RenderConfig':
        """Build a config from ``BODYMOVIN_*`` environment variables."""
        load_dotenv(find_dotenv(usecwd=True))
        values = dict(
            max_workers=_env_int('BODYMOVIN_WORKERS', None),
            use_processes=_env_flag('BODYMOVIN_USE_PROCESSES', False),
            fail_fast=_env_flag('BODYMOVIN_FAIL_FAST', True),
            floor_scale=_env_flag('BODYMOVIN_FLOOR_SCALE', False),
            scale_anchor=_env_flag('BODYMOVIN_SCALE_ANCHOR', True),
            default_width=_env_int('BODYMOVIN_DEFAULT_WIDTH', 540),
            default_height=_env_int('BODYMOVIN_DEFAULT_HEIGHT', 800),
            show_progress=_env_flag('BODYMOVIN_SHOW_PROGRESS', False),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
