"""
Layer compositing.

A layer image is scaled, rotated, faded by its opacity and then
alpha-blended onto the frame canvas at ``position - anchor``. Canvases and
layer images are HxWx4 uint8 RGBA numpy arrays.
"""

import math
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from .core.config import RenderConfig
from .models import ResolvedTransform, Vec2

_DEFAULT_CONFIG = RenderConfig()

# Layers whose scaled area exceeds this many canvases are resampled
# straight into a canvas-sized window
OVERSIZE_FACTOR = 4


def new_canvas(width: int, height: int) -> np.ndarray:
    """Fully transparent RGBA canvas."""
    return np.zeros((height, width, 4), dtype=np.uint8)


def effective_scale(scale: Vec2, floor_scale: bool = False) -> Vec2:
    """
    Scale magnitudes actually applied to the image.

    With ``floor_scale`` any x magnitude below 1.0 resets both axes to
    1.0, the behaviour of older renderers that broke shrink animations.
    """
    sx, sy = abs(scale.x), abs(scale.y)
    if floor_scale and sx < 1.0:
        sx, sy = 1.0, 1.0
    return Vec2(sx, sy)


def scaled_size(image: np.ndarray, scale: Vec2) -> Optional[Tuple[int, int]]:
    """``(round(w * sx), round(h * sy))``, or None when either is zero."""
    height, width = image.shape[:2]
    target_w = int(round(width * scale.x))
    target_h = int(round(height * scale.y))
    if target_w <= 0 or target_h <= 0:
        return None
    return target_w, target_h


def resize_image(image: np.ndarray, scale: Vec2) -> Optional[np.ndarray]:
    """
    Lanczos resample to ``round(w * sx) x round(h * sy)``.

    Returns None when either target dimension is zero.
    """
    size = scaled_size(image, scale)
    if size is None:
        return None
    height, width = image.shape[:2]
    target_w, target_h = size
    if (target_w, target_h) == (width, height):
        return image.copy()

    # Pillow premultiplies RGBA internally while resampling
    resized = Image.fromarray(image, 'RGBA').resize((target_w, target_h), Image.Resampling.LANCZOS)
    return np.array(resized, dtype=np.uint8)


def _premultiply(image: np.ndarray) -> np.ndarray:
    rgba = image.astype(np.float32)
    rgba[:, :, :3] *= rgba[:, :, 3:4] / 255.0
    return rgba


def _unpremultiply(rgba: np.ndarray) -> np.ndarray:
    alpha = rgba[:, :, 3:4]
    rgb = np.divide(rgba[:, :, :3] * 255.0, alpha, out=np.zeros_like(rgba[:, :, :3]), where=alpha > 0)
    out = np.concatenate([rgb, alpha], axis=2)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def rotate_image(image: np.ndarray, degrees: float) -> Tuple[np.ndarray, float, float]:
    """
    Rotate clockwise about the image centre with bilinear sampling.

    The output grows to hold the whole rotated image; exposed pixels are
    transparent. Returns ``(rotated, dx, dy)`` where (dx, dy) is where the
    rotated image's top-left lands relative to the unrotated top-left, so
    both share the same centre.
    """
    height, width = image.shape[:2]
    center = ((width - 1) / 2.0, (height - 1) / 2.0)

    # OpenCV treats positive angles as counter-clockwise
    matrix = cv2.getRotationMatrix2D(center, -degrees, 1.0)
    cos_a = abs(matrix[0, 0])
    sin_a = abs(matrix[0, 1])
    new_w = max(1, int(math.ceil(round(width * cos_a + height * sin_a, 6))))
    new_h = max(1, int(math.ceil(round(width * sin_a + height * cos_a, 6))))

    matrix[0, 2] += (new_w - 1) / 2.0 - center[0]
    matrix[1, 2] += (new_h - 1) / 2.0 - center[1]

    rotated = cv2.warpAffine(
        _premultiply(image),
        matrix,
        (new_w, new_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    return _unpremultiply(rotated), (width - new_w) / 2.0, (height - new_h) / 2.0


def apply_opacity(image: np.ndarray, opacity: float) -> np.ndarray:
    """Scale the image's own alpha channel, in place."""
    if opacity < 1.0:
        alpha = image[:, :, 3].astype(np.float32) * max(0.0, opacity)
        image[:, :, 3] = np.clip(np.rint(alpha), 0, 255).astype(np.uint8)
    return image


def transform_layer_image(
    layer_image: np.ndarray,
    resolved: ResolvedTransform,
    config: Optional[RenderConfig] = None,
) -> Optional[Tuple[np.ndarray, int, int]]:
    """
    Produce the transformed layer image and its integer paint origin.

    Returns None when the layer is invisible (zero size or zero opacity).
    """
    config = config or _DEFAULT_CONFIG
    if resolved.opacity <= 0.0:
        return None

    scale = effective_scale(resolved.scale, config.floor_scale)
    image = resize_image(layer_image, scale)
    if image is None:
        return None

    dx = dy = 0.0
    if resolved.rotation % 360.0 != 0.0:
        image, dx, dy = rotate_image(image, resolved.rotation)

    apply_opacity(image, resolved.opacity)

    anchor = resolved.anchor.scaled(scale) if config.scale_anchor else resolved.anchor
    origin = resolved.position - anchor
    return image, int(math.floor(origin.x + dx)), int(math.floor(origin.y + dy))


def warp_to_canvas(
    layer_image: np.ndarray,
    resolved: ResolvedTransform,
    canvas_size: Tuple[int, int],
    config: Optional[RenderConfig] = None,
) -> Optional[np.ndarray]:
    """
    Scale, rotate and place a layer in one resampling pass.

    Only the ``canvas_size`` window is computed, so memory does not grow
    with the layer's scale. The result is a canvas-sized sprite painted at
    (0, 0) with the same geometry as ``transform_layer_image``: the scaled
    image's top-left sits at the floored ``position - anchor`` and rotation
    turns it clockwise about its centre.
    """
    config = config or _DEFAULT_CONFIG
    if resolved.opacity <= 0.0:
        return None

    scale = effective_scale(resolved.scale, config.floor_scale)
    size = scaled_size(layer_image, scale)
    if size is None:
        return None
    height, width = layer_image.shape[:2]
    target_w, target_h = size
    kx, ky = target_w / width, target_h / height

    anchor = resolved.anchor.scaled(scale) if config.scale_anchor else resolved.anchor
    origin = resolved.position - anchor
    theta = math.radians(resolved.rotation)
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    # Source pixel s lands at (s + 0.5) * k - 0.5 in the scaled image,
    # which is then rotated about its own centre
    cx, cy = (target_w - 1) / 2.0, (target_h - 1) / 2.0
    ux, uy = 0.5 * (kx - 1.0) - cx, 0.5 * (ky - 1.0) - cy
    matrix = np.array([
        [cos_t * kx, -sin_t * ky, cos_t * ux - sin_t * uy + cx + math.floor(origin.x)],
        [sin_t * kx, cos_t * ky, sin_t * ux + cos_t * uy + cy + math.floor(origin.y)],
    ])

    warped = cv2.warpAffine(
        _premultiply(layer_image),
        matrix,
        canvas_size,
        flags=cv2.INTER_LANCZOS4,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    # Lanczos rings past the valid range
    np.clip(warped, 0.0, 255.0, out=warped)
    sprite = _unpremultiply(warped)
    return apply_opacity(sprite, resolved.opacity)


def is_oversized(layer_image: np.ndarray, scale: Vec2, canvas: np.ndarray) -> bool:
    size = scaled_size(layer_image, scale)
    if size is None:
        return False
    canvas_h, canvas_w = canvas.shape[:2]
    return size[0] * size[1] > OVERSIZE_FACTOR * canvas_w * canvas_h


def overlay(canvas: np.ndarray, sprite: np.ndarray, x: int, y: int) -> np.ndarray:
    """
    Source-over blend ``sprite`` onto ``canvas`` with its top-left at (x, y).

    Parts outside the canvas are clipped.
    """
    h, w = sprite.shape[:2]
    bg_h, bg_w = canvas.shape[:2]

    # Source region in sprite
    src_x1 = max(0, -x)
    src_y1 = max(0, -y)
    src_x2 = min(w, bg_w - x)
    src_y2 = min(h, bg_h - y)

    # Check if any part is visible
    if src_x2 <= src_x1 or src_y2 <= src_y1:
        return canvas

    dst_x1 = x + src_x1
    dst_y1 = y + src_y1
    dst_x2 = x + src_x2
    dst_y2 = y + src_y2

    sprite_region = sprite[src_y1:src_y2, src_x1:src_x2].astype(np.float32)
    bg_region = canvas[dst_y1:dst_y2, dst_x1:dst_x2].astype(np.float32)

    alpha = sprite_region[:, :, 3:4] / 255.0
    bg_alpha = bg_region[:, :, 3:4] / 255.0

    blended = sprite_region[:, :, :3] * alpha + bg_region[:, :, :3] * (1.0 - alpha)
    new_alpha = alpha + bg_alpha * (1.0 - alpha)

    out = np.concatenate([blended, new_alpha * 255.0], axis=2)
    canvas[dst_y1:dst_y2, dst_x1:dst_x2] = np.clip(np.rint(out), 0, 255).astype(np.uint8)
    return canvas


def composite(
    canvas: np.ndarray,
    layer_image: np.ndarray,
    resolved: ResolvedTransform,
    config: Optional[RenderConfig] = None,
) -> np.ndarray:
    """Transform ``layer_image`` and blend it onto ``canvas`` in place."""
    config = config or _DEFAULT_CONFIG
    scale = effective_scale(resolved.scale, config.floor_scale)
    if is_oversized(layer_image, scale, canvas):
        canvas_h, canvas_w = canvas.shape[:2]
        sprite = warp_to_canvas(layer_image, resolved, (canvas_w, canvas_h), config)
        if sprite is None:
            return canvas
        return overlay(canvas, sprite, 0, 0)

    transformed = transform_layer_image(layer_image, resolved, config)
    if transformed is None:
        return canvas
    sprite, x, y = transformed
    return overlay(canvas, sprite, x, y)
