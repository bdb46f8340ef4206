"""
sprite_layers
-------------
Layered sprite-sheet animation for Aseprite exports.

Loads a split-layers json-array export, indexes its frames per layer and
per tag, and plays it back with a fixed-step, per-layer state machine.
"""

__version__ = "0.1.0"
