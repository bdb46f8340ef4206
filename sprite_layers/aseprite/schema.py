"""
schema.py
---------
Typed model of an Aseprite json-array sprite-sheet export, and the parser
that builds it from raw text.

Responsibilities
----------------
- Deserialize the export into frozen dataclasses
- Validate every required field and its type
- Report the JSON path of the first offending value

This is the only place untrusted input is read. Nothing is returned
unless the whole document is valid.
"""

import json
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Tuple

from sprite_layers.aseprite.errors import MalformedDocument
from sprite_layers.core.debug.debug_logger import DebugLogger


# ===========================================================
# Document Types
# ===========================================================

class Direction(Enum):
    """Playback direction declared on a frame tag."""
    FORWARD = "forward"
    BACKWARD = "backward"
    PINGPONG = "pingpong"
    PINGPONG_REVERSE = "pingpong_reverse"


@dataclass(frozen=True)
class Rect:
    """Pixel rectangle inside the atlas image."""
    x: int
    y: int
    w: int
    h: int

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.w, self.h)


@dataclass(frozen=True)
class Size:
    w: int
    h: int


@dataclass(frozen=True)
class FrameInfo:
    """One atlas sub-image. duration (ms) is informational only."""
    filename: str
    frame: Rect
    rotated: bool
    trimmed: bool
    sprite_source_size: Rect
    source_size: Size
    duration: int


@dataclass(frozen=True)
class TagInfo:
    """
    Inclusive frame-ordinal window of one animation tag.

    ``name`` holds the raw document string after parsing; the tag registry
    stores copies whose ``name`` is the resolved tag value.
    """
    name: Any
    from_frame: int
    to_frame: int
    direction: Direction = Direction.FORWARD

    @property
    def length(self) -> int:
        """Number of distinct frames in the window."""
        return self.to_frame - self.from_frame + 1

    def contains(self, ordinal: int) -> bool:
        return self.from_frame <= ordinal <= self.to_frame

    def with_name(self, name) -> "TagInfo":
        return replace(self, name=name)


@dataclass(frozen=True)
class LayerInfo:
    name: str
    opacity: int = 255
    blend_mode: str = "normal"


@dataclass(frozen=True)
class Meta:
    image: str
    size: Size
    frame_tags: Tuple[TagInfo, ...]
    layers: Tuple[LayerInfo, ...]
    app: Optional[str] = None
    version: Optional[str] = None
    format: Optional[str] = None
    scale: Optional[str] = None
    slices: Tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SpriteSheet:
    """Parsed export document."""
    frames: Tuple[FrameInfo, ...]
    meta: Meta

    def grid_layout(self) -> Tuple[Size, int, int]:
        """
        Atlas grid as laid out by a split-layers export.

        Returns:
            (tile size, columns, rows): tile size from the first frame's
            sourceSize, one column per frame ordinal up to the last tagged
            frame, one row per declared layer.
        """
        if not self.frames or not self.meta.frame_tags:
            raise MalformedDocument("grid layout needs at least one frame and one tag")
        tile = self.frames[0].source_size
        columns = max(tag.to_frame for tag in self.meta.frame_tags) + 1
        rows = len(self.meta.layers)
        return tile, columns, rows


# ===========================================================
# Field Readers
# ===========================================================

def _require(obj: dict, key: str, path: str):
    if not isinstance(obj, dict):
        raise MalformedDocument("expected an object", path)
    if key not in obj:
        raise MalformedDocument(f"missing required field '{key}'", path)
    return obj[key]


def _int(value, path: str, minimum: int = None) -> int:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        else:
            raise MalformedDocument(f"expected an integer, got {value!r}", path)
    if minimum is not None and value < minimum:
        raise MalformedDocument(f"must be >= {minimum}, got {value}", path)
    return value


def _bool(value, path: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedDocument(f"expected a boolean, got {value!r}", path)
    return value


def _str(value, path: str) -> str:
    if not isinstance(value, str):
        raise MalformedDocument(f"expected a string, got {value!r}", path)
    return value


def _list(value, path: str) -> list:
    if not isinstance(value, list):
        raise MalformedDocument(f"expected an array, got {type(value).__name__}", path)
    return value


def _optional_str(obj: dict, key: str, path: str) -> Optional[str]:
    if obj.get(key) is None:
        return None
    return _str(obj[key], f"{path}.{key}")


def _rect(obj, path: str) -> Rect:
    return Rect(
        x=_int(_require(obj, "x", path), f"{path}.x", 0),
        y=_int(_require(obj, "y", path), f"{path}.y", 0),
        w=_int(_require(obj, "w", path), f"{path}.w", 0),
        h=_int(_require(obj, "h", path), f"{path}.h", 0),
    )


def _size(obj, path: str) -> Size:
    return Size(
        w=_int(_require(obj, "w", path), f"{path}.w", 0),
        h=_int(_require(obj, "h", path), f"{path}.h", 0),
    )


# ===========================================================
# Section Parsers
# ===========================================================

def _parse_frame(obj, path: str) -> FrameInfo:
    return FrameInfo(
        filename=_str(_require(obj, "filename", path), f"{path}.filename"),
        frame=_rect(_require(obj, "frame", path), f"{path}.frame"),
        rotated=_bool(_require(obj, "rotated", path), f"{path}.rotated"),
        trimmed=_bool(_require(obj, "trimmed", path), f"{path}.trimmed"),
        sprite_source_size=_rect(_require(obj, "spriteSourceSize", path), f"{path}.spriteSourceSize"),
        source_size=_size(_require(obj, "sourceSize", path), f"{path}.sourceSize"),
        duration=_int(_require(obj, "duration", path), f"{path}.duration", 0),
    )


# Aseprite writes "reverse" for backward playback
_DIRECTION_ALIASES = {"reverse": Direction.BACKWARD.value}


def _parse_tag(obj, path: str) -> TagInfo:
    name = _str(_require(obj, "name", path), f"{path}.name")
    from_frame = _int(_require(obj, "from", path), f"{path}.from", 0)
    to_frame = _int(_require(obj, "to", path), f"{path}.to", 0)
    if to_frame < from_frame:
        raise MalformedDocument(f"'to' ({to_frame}) is before 'from' ({from_frame})", f"{path}.to")

    raw_direction = _str(obj.get("direction", Direction.FORWARD.value), f"{path}.direction")
    try:
        direction = Direction(_DIRECTION_ALIASES.get(raw_direction.lower(), raw_direction.lower()))
    except ValueError:
        raise MalformedDocument(f"unknown direction {raw_direction!r}", f"{path}.direction") from None

    return TagInfo(name=name, from_frame=from_frame, to_frame=to_frame, direction=direction)


def _parse_layer(obj, path: str) -> LayerInfo:
    # Group layers carry no opacity/blendMode in the export
    name = _str(_require(obj, "name", path), f"{path}.name")
    opacity = _int(obj.get("opacity", 255), f"{path}.opacity", 0)
    blend_mode = _str(obj.get("blendMode", "normal"), f"{path}.blendMode")
    return LayerInfo(name=name, opacity=opacity, blend_mode=blend_mode)


def _parse_meta(obj, path: str) -> Meta:
    tags = _list(_require(obj, "frameTags", path), f"{path}.frameTags")
    layers = _list(_require(obj, "layers", path), f"{path}.layers")
    slices = _list(obj.get("slices", []), f"{path}.slices")

    return Meta(
        image=_str(_require(obj, "image", path), f"{path}.image"),
        size=_size(_require(obj, "size", path), f"{path}.size"),
        frame_tags=tuple(_parse_tag(t, f"{path}.frameTags[{i}]") for i, t in enumerate(tags)),
        layers=tuple(_parse_layer(layer, f"{path}.layers[{i}]") for i, layer in enumerate(layers)),
        app=_optional_str(obj, "app", path),
        version=_optional_str(obj, "version", path),
        format=_optional_str(obj, "format", path),
        scale=_optional_str(obj, "scale", path),
        slices=tuple(slices),
    )


# ===========================================================
# Public API
# ===========================================================

def parse_sprite_sheet(text: str) -> SpriteSheet:
    """
    Parse an export document.

    Args:
        text: Raw JSON text

    Returns:
        SpriteSheet

    Raises:
        MalformedDocument: text is not JSON or breaks the schema
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedDocument(f"not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise MalformedDocument("top level must be an object", "$")

    frames = _list(_require(data, "frames", "$"), "frames")
    sheet = SpriteSheet(
        frames=tuple(_parse_frame(f, f"frames[{i}]") for i, f in enumerate(frames)),
        meta=_parse_meta(_require(data, "meta", "$"), "meta"),
    )

    DebugLogger.system(
        f"Parsed sheet '{sheet.meta.image}': {len(sheet.frames)} frames, "
        f"{len(sheet.meta.frame_tags)} tags, {len(sheet.meta.layers)} layers",
        category="sheet"
    )
    return sheet


def load_sprite_sheet(path: str) -> SpriteSheet:
    """Read a UTF-8 export file and parse it."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise MalformedDocument(f"not UTF-8 text ({e})", os.path.basename(path)) from e

    DebugLogger.system(f"Loaded {os.path.basename(path)}", category="loading")
    return parse_sprite_sheet(text)
