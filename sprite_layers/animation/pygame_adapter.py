"""
pygame_adapter.py
-----------------
Bridges runtime output to a pygame host.

The host owns the atlas surface (loaded from ``meta.image``); this module
only cuts it into per-layer subsurfaces and orders them back to front.
Subsurfaces share pixels with the atlas, so nothing is copied per tick.
"""

from typing import Dict, List, Tuple

import pygame

from sprite_layers.animation.animation_runtime import AnimationRuntime, LayerFrame
from sprite_layers.aseprite.schema import Rect
from sprite_layers.core.debug.debug_logger import DebugLogger


def to_pygame_rect(rect: Rect) -> pygame.Rect:
    return pygame.Rect(rect.x, rect.y, rect.w, rect.h)


class AtlasSlicer:
    """Caches one subsurface per atlas rectangle."""

    def __init__(self, atlas: pygame.Surface):
        self.atlas = atlas
        self._cache: Dict[Tuple[int, int, int, int], pygame.Surface] = {}

    def slice(self, rect: Rect) -> pygame.Surface:
        key = rect.as_tuple()
        surface = self._cache.get(key)
        if surface is None:
            bounds = to_pygame_rect(rect)
            if not self.atlas.get_rect().contains(bounds):
                raise ValueError(f"Frame rect {key} lies outside the atlas {self.atlas.get_size()}")
            surface = self.atlas.subsurface(bounds)
            self._cache[key] = surface
            DebugLogger.trace(f"Sliced atlas rect {key}", category="runtime")
        return surface

    def layer_surfaces(self, runtime: AnimationRuntime) -> List[Tuple[LayerFrame, pygame.Surface]]:
        """Visible layers of a runtime as (frame, surface), back to front."""
        return [
            (frame, self.slice(frame.frame_rect))
            for frame in runtime.visible_frames()
            if frame.frame_rect is not None
        ]
