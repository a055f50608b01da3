"""
Bodymovin document loading
==========================

Turns the parsed JSON tree into an immutable AnimationDocument.

Structural problems (no layer list, non-positive canvas, a layer that
ends before it starts) raise DocumentStructureError. Malformed numbers
never raise: they fall back to the neutral value of the field.
"""

import json
import logging
import math
from typing import Any, Callable, List, Mapping, Optional

from .core.errors import DocumentReadError, DocumentStructureError
from .models import (
    AnimatedTrack,
    AnimationDocument,
    AssetRef,
    Keyframe,
    Layer,
    StaticTrack,
    Track,
    Transform,
    Value,
    Vec2,
)

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 540
DEFAULT_HEIGHT = 800
DEFAULT_FRAME_RATE = 30.0


def load_bodymovin_json(path: str) -> dict:
    """Read an animation file from disk."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise DocumentReadError(str(path), e) from e


# ── Field helpers ──

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite_float(value: Any) -> Optional[float]:
    if not _is_number(value):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def parse_number(value: Any, default: float) -> float:
    """Number, or the first element of a list of numbers; default otherwise."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    number = _finite_float(value)
    return default if number is None else number


def _parse_int(value: Any) -> Optional[int]:
    number = _finite_float(value)
    return None if number is None else int(number)


def parse_vec2(value: Any, default: Vec2) -> Vec2:
    """Accepts [x, y, (z)] lists and {"x": .., "y": ..} objects."""
    if isinstance(value, (list, tuple)):
        x = parse_number(value[0], default.x) if len(value) > 0 else default.x
        y = parse_number(value[1], default.y) if len(value) > 1 else default.y
        return Vec2(x, y)
    if isinstance(value, Mapping):
        return Vec2(parse_number(value.get('x'), default.x), parse_number(value.get('y'), default.y))
    return default


def _looks_animated(k: Any) -> bool:
    return isinstance(k, list) and len(k) > 0 and isinstance(k[0], Mapping) and 't' in k[0]


def parse_keyframes(raw: List[Any], parse_value: Callable[[Any], Value], default: Value) -> Optional[AnimatedTrack]:
    """
    Build keyframes from Bodymovin ``{t, s, e}`` entries.

    A keyframe without ``s`` (the closing keyframe of older exports)
    takes the end value of the keyframe before it.
    """
    keyframes = []
    previous_end = None
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        time = parse_number(entry.get('t'), 0.0)
        if 's' in entry:
            value = parse_value(entry['s'])
        elif previous_end is not None:
            value = previous_end
        else:
            value = default
        end_value = parse_value(entry['e']) if 'e' in entry else None
        keyframes.append(Keyframe(time=time, value=value, end_value=end_value))
        previous_end = end_value

    if not keyframes:
        return None

    # Stable sort keeps authored order among equal times
    keyframes.sort(key=lambda kf: kf.time)
    return AnimatedTrack(tuple(keyframes))


def parse_track(prop: Any, vector: bool, default: Value) -> Optional[Track]:
    """Parse one ``{"a": 0|1, "k": ...}`` transform property."""
    if not isinstance(prop, Mapping) or 'k' not in prop:
        return None

    if vector:
        def parse_value(v):
            return parse_vec2(v, default)
    else:
        def parse_value(v):
            return parse_number(v, default)

    k = prop['k']
    animated = prop.get('a') == 1 or _looks_animated(k)
    if animated and isinstance(k, list):
        track = parse_keyframes(k, parse_value, default)
        if track is not None:
            return track
        logger.debug("Animated property without usable keyframes, using default")
        return None

    return StaticTrack(parse_value(k))


def parse_transform(ks: Any) -> Transform:
    if not isinstance(ks, Mapping):
        return Transform()
    return Transform(
        position=parse_track(ks.get('p'), vector=True, default=Vec2(0.0, 0.0)),
        anchor=parse_track(ks.get('a'), vector=True, default=Vec2(0.0, 0.0)),
        scale=parse_track(ks.get('s'), vector=True, default=Vec2(100.0, 100.0)),
        rotation=parse_track(ks.get('r'), vector=False, default=0.0),
        opacity=parse_track(ks.get('o'), vector=False, default=100.0),
    )


def parse_layer(data: Any, position: int) -> Layer:
    if not isinstance(data, Mapping):
        raise DocumentStructureError(f"Layer {position} is not an object")

    start_frame = parse_number(data.get('ip'), 0.0)
    authored_end = _finite_float(data.get('op'))
    if authored_end is None:
        end_frame = 0.0
        if start_frame > end_frame:
            logger.debug("Layer %d has no usable op and starts at %g, it is never active",
                         position, start_frame)
    elif authored_end < start_frame:
        raise DocumentStructureError(
            f"Layer {position} ends before it starts (ip={start_frame}, op={authored_end})"
        )
    else:
        end_frame = authored_end

    ref_id = data.get('refId')
    return Layer(
        start_frame=start_frame,
        end_frame=end_frame,
        transform=parse_transform(data.get('ks')),
        asset_id=ref_id if isinstance(ref_id, str) else None,
        name=str(data.get('nm', '')),
        index=_parse_int(data.get('ind')),
    )


def parse_asset(data: Any) -> AssetRef:
    if not isinstance(data, Mapping):
        return AssetRef(asset_id=None, path=None)

    asset_id = data.get('id')
    path = data.get('p')
    return AssetRef(
        asset_id=str(asset_id) if isinstance(asset_id, (str, int)) and not isinstance(asset_id, bool) else None,
        path=path if isinstance(path, str) else None,
        directory=data.get('u') if isinstance(data.get('u'), str) else '',
        embedded=data.get('e') == 1 or (isinstance(path, str) and path.startswith('data:')),
        is_precomp=isinstance(data.get('layers'), list) and path is None,
        width=_parse_int(data.get('w')),
        height=_parse_int(data.get('h')),
    )


def _canvas_dimension(value: Any, default: int, field_name: str) -> int:
    size = _parse_int(value)
    if size is None:
        return default
    if size <= 0:
        raise DocumentStructureError(f"Canvas {field_name} must be positive, got {value}")
    return size


def parse_document(
    data: Any,
    default_width: int = DEFAULT_WIDTH,
    default_height: int = DEFAULT_HEIGHT,
) -> AnimationDocument:
    """Build an AnimationDocument from a parsed Bodymovin JSON tree."""
    if not isinstance(data, Mapping):
        raise DocumentStructureError("Animation root must be an object")

    raw_layers = data.get('layers')
    if not isinstance(raw_layers, list):
        raise DocumentStructureError("No layers found")

    raw_assets = data.get('assets')
    if not isinstance(raw_assets, list):
        raw_assets = []

    layers = tuple(parse_layer(layer, i) for i, layer in enumerate(raw_layers))
    assets = tuple(parse_asset(asset) for asset in raw_assets)

    total_frames = max(0, int(parse_number(data.get('op'), 0.0)))
    frame_rate = parse_number(data.get('fr'), DEFAULT_FRAME_RATE)

    document = AnimationDocument(
        width=_canvas_dimension(data.get('w'), default_width, 'width'),
        height=_canvas_dimension(data.get('h'), default_height, 'height'),
        total_frames=total_frames,
        frame_rate=frame_rate,
        layers=layers,
        assets=assets,
        name=str(data.get('nm', '')),
        version=str(data.get('v', '')),
        in_point=parse_number(data.get('ip'), 0.0),
    )
    logger.debug(
        "Parsed animation %r: %dx%d, %d frames @ %.2f fps, %d layers, %d assets",
        document.name, document.width, document.height, document.total_frames,
        document.frame_rate, len(layers), len(assets),
    )
    return document


def load_document(path: str, default_width: int = DEFAULT_WIDTH, default_height: int = DEFAULT_HEIGHT) -> AnimationDocument:
    """Read and parse an animation file."""
    return parse_document(load_bodymovin_json(path), default_width, default_height)
