"""
Entry points for rendering a Bodymovin animation to PNG frames.

Usage:
    python -m bodymovin_pipeline assets/bodymovin.json
    python -m bodymovin_pipeline anim.json --assets anim/images --output out --workers 4
    python -m bodymovin_pipeline anim.json --stream --keep-going
"""

import argparse
import logging
import threading
import time
from typing import List, Optional

import numpy as np

from .asset_store import load_assets
from .core.config import RenderConfig
from .core.errors import BatchRenderError, BodymovinError
from .document import load_document
from .output import save_frames, stream_frames
from .parallel_frame_generator import ParallelFrameGenerator

logger = logging.getLogger(__name__)

DEFAULT_ANIMATION = "assets/bodymovin.json"
DEFAULT_ASSETS_DIR = "assets/images"
DEFAULT_OUTPUT_DIR = "output_frames"


def create_generator(bodymovin_json: str, assets_dir: str,
                     config: Optional[RenderConfig] = None) -> ParallelFrameGenerator:
    """Load the document and its assets; all I/O happens here."""
    config = config or RenderConfig()
    document = load_document(bodymovin_json, config.default_width, config.default_height)
    assets = load_assets(assets_dir, document)
    return ParallelFrameGenerator(document, assets, config)


def get_all_frames(bodymovin_json: str, assets_dir: str,
                   config: Optional[RenderConfig] = None,
                   cancel_event: Optional[threading.Event] = None) -> List[np.ndarray]:
    """Render every frame of an animation file into RGBA arrays."""
    return create_generator(bodymovin_json, assets_dir, config).render_all(cancel_event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a Bodymovin (Lottie) animation of image layers to PNG frames",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render with defaults (assets/images -> output_frames)
  python -m bodymovin_pipeline assets/bodymovin.json

  # Four worker processes, keep rendering past failing frames
  python -m bodymovin_pipeline anim.json --workers 4 --processes --keep-going
        """
    )
    parser.add_argument("animation", nargs="?", default=DEFAULT_ANIMATION,
                        help=f"Path to the Bodymovin JSON file (default: {DEFAULT_ANIMATION})")
    parser.add_argument("--assets", default=DEFAULT_ASSETS_DIR,
                        help=f"Directory image asset paths are relative to (default: {DEFAULT_ASSETS_DIR})")
    parser.add_argument("--output", default=DEFAULT_OUTPUT_DIR,
                        help=f"Directory for frame_NNNN.png files (default: {DEFAULT_OUTPUT_DIR})")

    # Parallelism
    parser.add_argument("--workers", type=int, default=None,
                        help="Number of parallel workers (default: CPU count - 1, max 8)")
    parser.add_argument("--processes", action="store_true", default=None,
                        help="Use worker processes instead of threads")

    # Rendering behaviour
    parser.add_argument("--floor-scale", action="store_true", default=None,
                        help="Never shrink layers below their original size (legacy behaviour)")
    parser.add_argument("--no-scale-anchor", dest="scale_anchor", action="store_false", default=None,
                        help="Do not scale the anchor point with the layer")
    parser.add_argument("--keep-going", action="store_true",
                        help="Render all frames and report failures at the end instead of stopping")
    parser.add_argument("--stream", action="store_true",
                        help="Write frames as they finish instead of all at once")

    parser.add_argument("--progress", action="store_true", default=None,
                        help="Show a progress bar")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RenderConfig.from_env(
            max_workers=args.workers,
            use_processes=args.processes,
            floor_scale=args.floor_scale,
            scale_anchor=args.scale_anchor,
            show_progress=args.progress,
            fail_fast=False if args.keep_going else None,
        )
    except ValueError as e:
        print(f"❌ Error: {e}")
        return 1
    logger.debug("Render config: %s", config)

    print("BODYMOVIN FRAME RENDERER")
    print("=" * 60)
    print(f"Animation: {args.animation}")
    print(f"Assets:    {args.assets}")
    print(f"Output:    {args.output}")
    print()

    try:
        start = time.time()
        generator = create_generator(args.animation, args.assets, config)
        document = generator.document
        print(f"Canvas {document.width}x{document.height}, {document.total_frames} frames @ "
              f"{document.frame_rate:g} fps, {len(document.layers)} layers")

        if args.stream:
            saved = stream_frames(generator.iter_frames(), args.output)
            print(f"✓ Rendered and saved {len(saved)} frames in {time.time() - start:.2f}s")
        else:
            frames = generator.render_all()
            print(f"✓ Got the frames in {time.time() - start:.2f}s")

            start = time.time()
            saved = save_frames(frames, args.output)
            print(f"✓ Saved {len(saved)} frames in {time.time() - start:.2f}s")

    except BatchRenderError as e:
        print(f"❌ {e}")
        for frame_number in e.failed_frames:
            print(f"   frame {frame_number}: {e.failures[frame_number]}")
        return 1
    except BodymovinError as e:
        print(f"❌ {e}")
        return 1
    except OSError as e:
        print(f"❌ Could not write frames to {args.output}: {e}")
        return 1

    print(f"\n✨ Frames ready in: {args.output}")
    return 0
