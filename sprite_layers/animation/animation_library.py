"""
animation_library.py
--------------------
Loads a sheet once into the read-only bundle shared by all runtimes.

Pipeline: text -> SpriteSheet -> AnimationTagRegistry -> LayerAnimationIndex
"""

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from sprite_layers.aseprite.layer_index import LayerAnimationIndex, build_layer_index
from sprite_layers.aseprite.schema import SpriteSheet, load_sprite_sheet, parse_sprite_sheet
from sprite_layers.aseprite.tag_registry import AnimationTagRegistry
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.core.debug.debug_logger import DebugLogger
from sprite_layers.core.settings import load_animation_settings


@dataclass(frozen=True, eq=False)
class AnimationLibrary:
    """Parsed sheet plus the indexes built from it. Never mutated; compared by identity."""
    sheet: SpriteSheet
    vocabulary: TagVocabulary
    registry: AnimationTagRegistry
    index: LayerAnimationIndex
    settings: Mapping[str, Any]

    @property
    def atlas_image(self) -> str:
        return self.sheet.meta.image

    @classmethod
    def from_sheet(cls, sheet: SpriteSheet, vocabulary: TagVocabulary,
                   settings: Optional[dict] = None) -> "AnimationLibrary":
        """
        Build the registry and the index for an already parsed sheet.

        Args:
            sheet: Parsed export
            vocabulary: Host tag set
            settings: Overrides for load_animation_settings()
        """
        merged = load_animation_settings(overrides=settings)

        registry = AnimationTagRegistry.build(sheet.meta.frame_tags, vocabulary)
        index = build_layer_index(sheet, registry, vocabulary, merged)
        return cls(sheet=sheet, vocabulary=vocabulary, registry=registry, index=index,
                   settings=MappingProxyType(merged))

    @classmethod
    def from_text(cls, text: str, vocabulary: TagVocabulary,
                  settings: Optional[dict] = None) -> "AnimationLibrary":
        return cls.from_sheet(parse_sprite_sheet(text), vocabulary, settings)

    @classmethod
    def from_file(cls, path: str, vocabulary: TagVocabulary,
                  settings: Optional[dict] = None) -> "AnimationLibrary":
        DebugLogger.init_entry(f"Sheet {os.path.basename(path)}", "LOADING")
        library = cls.from_sheet(load_sprite_sheet(path), vocabulary, settings)
        DebugLogger.init_sub(f"{len(library.registry)} tags, {len(library.index)} layers")
        return library
