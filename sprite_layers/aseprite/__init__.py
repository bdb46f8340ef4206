"""
Aseprite export loading exports.

Provides the document model, filename decoding, the tag registry and the
layer index builder.
"""

from sprite_layers.aseprite.errors import (
    SpriteSheetError,
    MalformedDocument,
    FrameOrderError,
    InvalidFilenameFormat,
    UnknownAnimationTag,
    DuplicateAnimationTag,
    UndeclaredLayer,
    AnimationInvariantError,
)
from sprite_layers.aseprite.schema import (
    Direction,
    Rect,
    Size,
    FrameInfo,
    TagInfo,
    LayerInfo,
    Meta,
    SpriteSheet,
    parse_sprite_sheet,
    load_sprite_sheet,
)
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.aseprite.filename_decoder import DecodedFilename, decode_filename
from sprite_layers.aseprite.tag_registry import AnimationTagRegistry
from sprite_layers.aseprite.layer_index import (
    LayerAnimations,
    LayerAnimationIndex,
    LayerAnimationIndexer,
    build_layer_index,
)

__all__ = [
    # Errors
    'SpriteSheetError',
    'MalformedDocument',
    'FrameOrderError',
    'InvalidFilenameFormat',
    'UnknownAnimationTag',
    'DuplicateAnimationTag',
    'UndeclaredLayer',
    'AnimationInvariantError',
    # Document
    'Direction',
    'Rect',
    'Size',
    'FrameInfo',
    'TagInfo',
    'LayerInfo',
    'Meta',
    'SpriteSheet',
    'parse_sprite_sheet',
    'load_sprite_sheet',
    # Decoding & indexing
    'TagVocabulary',
    'DecodedFilename',
    'decode_filename',
    'AnimationTagRegistry',
    'LayerAnimations',
    'LayerAnimationIndex',
    'LayerAnimationIndexer',
    'build_layer_index',
]
