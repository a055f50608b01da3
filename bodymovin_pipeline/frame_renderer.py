"""
Frame rendering: composites every active layer of one frame.
"""

import logging
from typing import Mapping, Optional

import numpy as np

from .compositor import composite, new_canvas
from .core.config import RenderConfig
from .models import AnimationDocument, Layer
from .transform_resolver import resolve

logger = logging.getLogger(__name__)


class FrameRenderer:
    """
    Renders single frames of a document.

    The document and asset mapping are only read, so one renderer can be
    shared by many threads. Each call owns the canvas it returns.
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

    def layer_image(self, layer: Layer) -> Optional[np.ndarray]:
        """Decoded image for a layer, or None if it has nothing to paint."""
        if layer.asset_id is None:
            return None
        return self.assets.get(layer.asset_id)

    def render_frame(self, frame_number: int) -> np.ndarray:
        """Composite all layers active at ``frame_number``, bottom layer first."""
        canvas = new_canvas(self.document.width, self.document.height)

        # Layers are stored top-first; paint from the bottom up
        for layer in reversed(self.document.layers):
            if not layer.is_active(frame_number):
                continue
            image = self.layer_image(layer)
            if image is None:
                logger.debug("Frame %d: layer %r has no image asset, skipped", frame_number, layer.name)
                continue
            resolved = resolve(layer.transform, float(frame_number))
            composite(canvas, image, resolved, self.config)

        return canvas


def render_frame(
    document: AnimationDocument,
    assets: Mapping[str, np.ndarray],
    frame_number: int,
    config: Optional[RenderConfig] = None,
) -> np.ndarray:
    """Render one frame of ``document``."""
    return FrameRenderer(document, assets, config).render_frame(frame_number)
