"""
layer_index.py
--------------
Builds the layer -> tag -> frames index from a parsed sheet.

Responsibilities
----------------
- Decode every frame filename into (tag, layer, ordinal)
- Group frames per layer, then per tag, keeping document order
- Record which tags each layer takes part in
- Resolve each layer's z-order from meta.layers
- Check every (layer, tag) frame list fills the tag's from..to window

Grouping by layer first lets each layer be shown or hidden on its own
while the other layers keep their frame progression.

The result is immutable and shared by every runtime playing the sheet.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Hashable, Iterator, List, Mapping, Optional, Tuple

from sprite_layers.aseprite.errors import (
    FrameOrderError,
    MalformedDocument,
    SpriteSheetError,
    UndeclaredLayer,
    UnknownAnimationTag,
)
from sprite_layers.aseprite.filename_decoder import decode_filename
from sprite_layers.aseprite.schema import FrameInfo, SpriteSheet
from sprite_layers.aseprite.tag_registry import AnimationTagRegistry
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.core.debug.debug_logger import DebugLogger
from sprite_layers.core.settings import Animation


# ===========================================================
# Index Types
# ===========================================================

@dataclass(frozen=True)
class LayerAnimations:
    """Everything one layer contributes to playback."""
    name: str
    z_order: int                                         # 1-based position in meta.layers
    frames_by_tag: Mapping[Hashable, Tuple[FrameInfo, ...]]
    supported: FrozenSet[Hashable]

    def frames(self, tag: Hashable) -> Tuple[FrameInfo, ...]:
        return self.frames_by_tag.get(tag, ())

    def supports(self, tag: Hashable) -> bool:
        return tag in self.supported


class LayerAnimationIndex:
    """Immutable mapping layer name -> LayerAnimations, iterated in z-order."""

    def __init__(self, layers: Dict[str, LayerAnimations]):
        ordered = sorted(layers.values(), key=lambda layer: layer.z_order)
        self._layers = MappingProxyType({layer.name: layer for layer in ordered})

    def __getitem__(self, name: str) -> LayerAnimations:
        return self._layers[name]

    def __contains__(self, name) -> bool:
        return name in self._layers

    def __iter__(self) -> Iterator[str]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def layers(self) -> Tuple[LayerAnimations, ...]:
        return tuple(self._layers.values())

    def __eq__(self, other):
        if not isinstance(other, LayerAnimationIndex):
            return NotImplemented
        return self._as_comparable() == other._as_comparable()

    __hash__ = None

    def _as_comparable(self):
        return {
            name: (layer.z_order, dict(layer.frames_by_tag), layer.supported)
            for name, layer in self._layers.items()
        }

    def __repr__(self):
        return f"LayerAnimationIndex({list(self._layers)})"


# ===========================================================
# Indexer
# ===========================================================

class LayerAnimationIndexer:
    """Groups the frames of one sheet into a LayerAnimationIndex."""

    def __init__(self, vocabulary: TagVocabulary,
                 strict: bool = Animation.STRICT,
                 ordinal_policy: str = Animation.ORDINAL_POLICY,
                 delimiter: str = Animation.FILENAME_DELIMITER):
        """
        Args:
            vocabulary: Host tag set used to decode filenames
            strict: Abort on the first bad frame; otherwise skip it with a warning
            ordinal_policy: "trust" keeps document order, "sort" orders each
                            frame list by ordinal, "reject" raises on disorder
            delimiter: Filename token separator
        """
        if ordinal_policy not in Animation.ORDINAL_POLICIES:
            raise ValueError(f"Unknown ordinal_policy {ordinal_policy!r}")
        self.vocabulary = vocabulary
        self.strict = strict
        self.ordinal_policy = ordinal_policy
        self.delimiter = delimiter

    def build(self, sheet: SpriteSheet, registry: AnimationTagRegistry) -> LayerAnimationIndex:
        """
        Index every frame of the sheet.

        Raises:
            InvalidFilenameFormat, UnknownAnimationTag, UndeclaredLayer: strict mode only
            MalformedDocument: strict mode only, a frame list does not fill its tag window
            FrameOrderError: ordinal_policy "reject", in either mode
        """
        # layer -> tag -> [(ordinal, frame)]
        buckets: Dict[str, Dict[Hashable, List[Tuple[int, FrameInfo]]]] = {}
        skipped = 0

        for position, frame in enumerate(sheet.frames):
            try:
                decoded = decode_filename(frame.filename, self.vocabulary, self.delimiter)
                if decoded.tag not in registry:
                    raise UnknownAnimationTag(self.vocabulary.canonical(decoded.tag))
            except SpriteSheetError as e:
                if self.strict:
                    raise
                skipped += 1
                DebugLogger.warn(f"Skipping frames[{position}]: {e}", category="index")
                continue

            entries = buckets.setdefault(decoded.layer, {}).setdefault(decoded.tag, [])
            if self.ordinal_policy == "reject" and entries and decoded.ordinal <= entries[-1][0]:
                raise FrameOrderError(
                    f"ordinal {decoded.ordinal} of {frame.filename!r} follows {entries[-1][0]}",
                    f"frames[{position}].filename"
                )
            entries.append((decoded.ordinal, frame))

        z_orders = self._declared_z_orders(sheet)
        layers: Dict[str, LayerAnimations] = {}

        for layer_name, by_tag in buckets.items():
            z_order = z_orders.get(layer_name)
            if z_order is None:
                if self.strict:
                    raise UndeclaredLayer(layer_name)
                DebugLogger.warn(f"Dropping undeclared layer '{layer_name}'", category="index")
                continue

            frames_by_tag = {}
            for tag, entries in by_tag.items():
                if self._covers_window(layer_name, tag, entries, registry):
                    frames_by_tag[tag] = self._ordered(entries)

            layers[layer_name] = LayerAnimations(
                name=layer_name,
                z_order=z_order,
                frames_by_tag=MappingProxyType(frames_by_tag),
                supported=frozenset(frames_by_tag),
            )
            DebugLogger.trace(
                f"Layer '{layer_name}' z={z_order} tags="
                f"{sorted(self.vocabulary.canonical(t) for t in frames_by_tag)}",
                category="index"
            )

        index = LayerAnimationIndex(layers)
        DebugLogger.system(
            f"Indexed {len(sheet.frames) - skipped} frame(s) into {len(index)} layer(s)"
            + (f", skipped {skipped}" if skipped else ""),
            category="index"
        )
        return index

    # ===========================================================
    # Helpers
    # ===========================================================

    def _covers_window(self, layer_name: str, tag: Hashable,
                       entries: List[Tuple[int, FrameInfo]],
                       registry: AnimationTagRegistry) -> bool:
        """
        A layer that takes part in a tag needs one frame per window slot,
        otherwise counter - from would select the wrong frame.

        Raises:
            MalformedDocument: strict mode only; lenient mode drops the tag
                               from this layer with a warning
        """
        expected = registry.frame_range_length(tag)
        if len(entries) == expected:
            return True

        info = registry.get(tag)
        message = (
            f"layer '{layer_name}' has {len(entries)} frame(s) for "
            f"'{self.vocabulary.canonical(tag)}' ({info.from_frame}..{info.to_frame} needs {expected})"
        )
        if self.strict:
            raise MalformedDocument(message, "frames")
        DebugLogger.warn(f"Dropping tag from layer: {message}", category="index")
        return False

    def _ordered(self, entries: List[Tuple[int, FrameInfo]]) -> Tuple[FrameInfo, ...]:
        if self.ordinal_policy == "sort":
            # sorted() is stable: equal ordinals keep document order
            entries = sorted(entries, key=lambda entry: entry[0])
        return tuple(frame for _, frame in entries)

    @staticmethod
    def _declared_z_orders(sheet: SpriteSheet) -> Dict[str, int]:
        z_orders = {}
        for position, layer in enumerate(sheet.meta.layers, start=1):
            # first declaration wins on duplicate names
            z_orders.setdefault(layer.name, position)
        return z_orders


def build_layer_index(sheet: SpriteSheet, registry: AnimationTagRegistry,
                      vocabulary: TagVocabulary, settings: Optional[dict] = None) -> LayerAnimationIndex:
    """Build an index using a settings dict from load_animation_settings()."""
    settings = settings or {}
    indexer = LayerAnimationIndexer(
        vocabulary,
        strict=settings.get("strict", Animation.STRICT),
        ordinal_policy=settings.get("ordinal_policy", Animation.ORDINAL_POLICY),
        delimiter=settings.get("filename_delimiter", Animation.FILENAME_DELIMITER),
    )
    return indexer.build(sheet, registry)
