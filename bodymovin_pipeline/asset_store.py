"""
Asset store: decodes every image asset once, before rendering starts.

The returned mapping and the arrays in it are read-only, so any number of
frame workers can share them without locking.
"""

import base64
import binascii
import io
import logging
import os
from types import MappingProxyType
from typing import Mapping

import numpy as np
from PIL import Image, UnidentifiedImageError

from .core.errors import AssetLoadError
from .models import AnimationDocument, AssetRef

logger = logging.getLogger(__name__)


def _to_rgba_array(image: Image.Image) -> np.ndarray:
    rgba = np.array(image.convert('RGBA'), dtype=np.uint8)
    rgba.setflags(write=False)
    return rgba


def decode_embedded(data_uri: str, asset_id: str) -> np.ndarray:
    """Decode a ``data:image/...;base64,`` payload."""
    header, _, payload = data_uri.partition(',')
    if not payload or ';base64' not in header:
        raise AssetLoadError(f"Asset {asset_id}: unsupported embedded data", asset_id=asset_id)
    try:
        raw = base64.b64decode(payload, validate=False)
        with Image.open(io.BytesIO(raw)) as image:
            return _to_rgba_array(image)
    except (binascii.Error, UnidentifiedImageError, OSError) as e:
        raise AssetLoadError(f"Asset {asset_id}: cannot decode embedded image: {e}", asset_id=asset_id) from e


def decode_file(path: str, asset_id: str) -> np.ndarray:
    if not os.path.isfile(path):
        raise AssetLoadError(f"Asset {asset_id}: image not found: {path}", asset_id=asset_id, path=path)
    try:
        with Image.open(path) as image:
            return _to_rgba_array(image)
    except (UnidentifiedImageError, OSError) as e:
        raise AssetLoadError(
            f"Asset {asset_id}: cannot decode image {path}: {e}", asset_id=asset_id, path=path
        ) from e


def load_asset(assets_dir: str, asset: AssetRef) -> np.ndarray:
    """Decode one asset into an HxWx4 uint8 RGBA array."""
    if asset.asset_id is None:
        raise AssetLoadError("Missing asset id")
    if asset.path is None:
        raise AssetLoadError(f"Missing asset path for {asset.asset_id}", asset_id=asset.asset_id)

    if asset.embedded and asset.path.startswith('data:'):
        return decode_embedded(asset.path, asset.asset_id)

    return decode_file(os.path.join(assets_dir, asset.path), asset.asset_id)


def load_assets(assets_dir: str, document: AnimationDocument) -> Mapping[str, np.ndarray]:
    """
    Decode every image asset of the document.

    Raises AssetLoadError on the first asset that cannot be loaded; a
    later frame may depend on any asset, so a partial store is useless.
    """
    images = {}
    for asset in document.assets:
        if asset.is_precomp:
            logger.debug("Skipping precomposition asset %s", asset.asset_id)
            continue
        image = load_asset(assets_dir, asset)
        images[asset.asset_id] = image
        logger.debug("Loaded asset %s (%dx%d)", asset.asset_id, image.shape[1], image.shape[0])

    logger.info("Loaded %d asset(s) from %s", len(images), assets_dir)
    return MappingProxyType(images)
