"""
Data models for the Bodymovin pipeline
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Vec2:
    """2-D point or scale pair"""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: 'Vec2') -> 'Vec2':
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vec2') -> 'Vec2':
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Vec2':
        return Vec2(self.x * scalar, self.y * scalar)

    def scaled(self, other: 'Vec2') -> 'Vec2':
        """Component-wise product"""
        return Vec2(self.x * other.x, self.y * other.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


Value = Union[float, Vec2]


@dataclass(frozen=True)
class Keyframe:
    """A (time, value) sample; end_value is the authored segment end, if any"""
    time: float
    value: Value
    end_value: Optional[Value] = None


@dataclass(frozen=True)
class StaticTrack:
    """Property that holds one value for the whole animation"""
    value: Value


@dataclass(frozen=True)
class AnimatedTrack:
    """Property driven by keyframes, sorted by time"""
    keyframes: Tuple[Keyframe, ...]

    def __post_init__(self):
        if not self.keyframes:
            raise ValueError("AnimatedTrack needs at least one keyframe")


Track = Union[StaticTrack, AnimatedTrack]


@dataclass(frozen=True)
class Transform:
    """
    Authored layer transform. Scale and opacity are kept in percent,
    as authored; a missing property is None.
    """
    position: Optional[Track] = None
    anchor: Optional[Track] = None
    scale: Optional[Track] = None
    rotation: Optional[Track] = None
    opacity: Optional[Track] = None


@dataclass(frozen=True)
class ResolvedTransform:
    """Transform evaluated at one frame, ready for compositing"""
    position: Vec2 = Vec2(0.0, 0.0)
    anchor: Vec2 = Vec2(0.0, 0.0)
    scale: Vec2 = Vec2(1.0, 1.0)  # multiplier, 1.0 == 100%
    rotation: float = 0.0  # degrees, positive is clockwise on screen
    opacity: float = 1.0  # [0, 1]


@dataclass(frozen=True)
class Layer:
    """One image layer with an inclusive active frame interval"""
    start_frame: float
    end_frame: float
    transform: Transform = field(default_factory=Transform)
    asset_id: Optional[str] = None
    name: str = ''
    index: Optional[int] = None

    def is_active(self, frame_number: int) -> bool:
        frame = float(frame_number)
        return self.start_frame <= frame <= self.end_frame


@dataclass(frozen=True)
class AssetRef:
    """Asset entry as declared in the document (not yet decoded)"""
    asset_id: Optional[str]
    path: Optional[str]
    directory: str = ''
    embedded: bool = False
    is_precomp: bool = False
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class AnimationDocument:
    """
    Typed view over a parsed Bodymovin document.

    Layers keep authored order: the first layer is the top of the stack,
    so painting walks them in reverse.
    """
    width: int
    height: int
    total_frames: int
    frame_rate: float = 30.0
    layers: Tuple[Layer, ...] = ()
    assets: Tuple[AssetRef, ...] = ()
    name: str = ''
    version: str = ''
    in_point: float = 0.0

    def active_layers(self, frame_number: int) -> Tuple[Layer, ...]:
        """Layers active at frame_number, in authored (top-first) order"""
        return tuple(layer for layer in self.layers if layer.is_active(frame_number))

    @property
    def duration_seconds(self) -> float:
        if self.frame_rate <= 0:
            return 0.0
        return self.total_frames / self.frame_rate
