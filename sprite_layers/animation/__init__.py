"""
Animation playback exports.

Provides the shared sheet bundle, the fixed-step timer and the per-instance
runtime state machine.
"""

from sprite_layers.animation.animation_library import AnimationLibrary
from sprite_layers.animation.repeating_timer import RepeatingTimer
from sprite_layers.animation.animation_runtime import (
    AnimationRuntime,
    AnimationRuntimeState,
    LayerPlayback,
    LayerFrame,
    advance_counter,
)

__all__ = [
    'AnimationLibrary',
    'RepeatingTimer',
    'AnimationRuntime',
    'AnimationRuntimeState',
    'LayerPlayback',
    'LayerFrame',
    'advance_counter',
]
