"""
animation_runtime.py
--------------------
Per-instance playback of a layered sheet.

Responsibilities
----------------
- Hold the current tag and one frame counter per layer
- Turn host time deltas into fixed-step advance events
- On each advance, step the counters of layers that take part in the
  current tag and hide the layers that do not
- Expose per-layer (visible, frame rect, atlas image) for the renderer

State machine
-------------
A runtime is always "playing"; a host pauses it by not calling tick().
set_tag() only records the new tag. Visibility and frames change on the
next advance, which is the single update path.

Counters hold frame ordinals in the sheet's shared numbering. A layer that
is already showing the current tag steps cyclically inside the tag window.
A layer that enters the tag, or comes from another tag whose window overlaps
this one, restarts at the window's first frame without stepping.
Hidden layers keep their counter, so coming back to the same tag resumes
where they left off unless reset_on_regain is set.
"""

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

from sprite_layers.animation.animation_library import AnimationLibrary
from sprite_layers.animation.repeating_timer import RepeatingTimer
from sprite_layers.aseprite.errors import AnimationInvariantError
from sprite_layers.aseprite.layer_index import LayerAnimations
from sprite_layers.aseprite.schema import FrameInfo, Rect, TagInfo
from sprite_layers.core.debug.debug_logger import DebugLogger
from sprite_layers.core.services.event_manager import (
    AnimationAdvancedEvent,
    AnimationTagChangedEvent,
    EventManager,
)


# ===========================================================
# State Records
# ===========================================================

@dataclass
class LayerPlayback:
    """Mutable playback state of one layer inside one runtime."""
    counter: int
    visible: bool
    entered_tag: Any = None     # tag whose window the counter last stepped in
    frame: Optional[FrameInfo] = None


@dataclass
class AnimationRuntimeState:
    """Everything a runtime owns. Never shared between runtimes."""
    current_tag: Any
    layers: Dict[str, LayerPlayback] = field(default_factory=dict)


class LayerFrame(NamedTuple):
    """Per-layer output handed to the renderer."""
    name: str
    z_order: int
    visible: bool
    frame_rect: Optional[Rect]
    atlas_image: str


def advance_counter(counter: int, tag_info: TagInfo) -> int:
    """Step a counter cyclically through the inclusive tag window."""
    length = tag_info.to_frame - tag_info.from_frame + 1
    return tag_info.from_frame + ((counter - tag_info.from_frame + 1) % length)


# ===========================================================
# Runtime
# ===========================================================

class AnimationRuntime:
    """Timer-gated layered playback for one sprite instance."""

    _ids = itertools.count(1)

    def __init__(self, library: AnimationLibrary, start_tag,
                 tick_period: Optional[float] = None,
                 reset_on_regain: Optional[bool] = None,
                 events: Optional[EventManager] = None):
        """
        Args:
            library: Shared sheet bundle (read only)
            start_tag: Tag playing at creation
            tick_period: Seconds per advance; library settings when None
            reset_on_regain: Restart a layer at its window start when it
                             becomes visible again; library settings when None
            events: Optional dispatcher for advance/tag-change events
        """
        self.runtime_id = next(self._ids)
        self.library = library
        self.events = events

        settings = library.settings
        self.timer = RepeatingTimer(tick_period if tick_period is not None else settings["tick_period"])
        self.reset_on_regain = (
            reset_on_regain if reset_on_regain is not None else settings["reset_on_regain"]
        )

        self.state = AnimationRuntimeState(current_tag=start_tag)
        for layer in library.index.layers():
            if layer.supports(start_tag):
                info = library.registry.get(start_tag)
                playback = LayerPlayback(counter=info.from_frame, visible=True)
                playback.frame = self._frame_at(layer, start_tag, info, info.from_frame)
            else:
                playback = LayerPlayback(counter=0, visible=False)
            self.state.layers[layer.name] = playback

        DebugLogger.state(
            f"Runtime #{self.runtime_id} created on '{library.atlas_image}' playing {start_tag!r}",
            category="animation"
        )

    # ===========================================================
    # Controls
    # ===========================================================

    @property
    def current_tag(self):
        return self.state.current_tag

    def set_tag(self, tag):
        """Switch animation. Takes effect on the next advance."""
        previous = self.state.current_tag
        if tag == previous:
            return
        self.state.current_tag = tag

        DebugLogger.state(f"Runtime #{self.runtime_id}: {previous!r} -> {tag!r}", category="animation")
        if self.events:
            self.events.dispatch(AnimationTagChangedEvent(self.runtime_id, previous, tag))

    def tick(self, dt: float) -> int:
        """
        Feed dt seconds of host time.

        Returns:
            Number of advance events fired
        """
        fired = self.timer.tick(dt)
        for _ in range(fired):
            self.advance()
        return fired

    # ===========================================================
    # Advance
    # ===========================================================

    def advance(self):
        """
        Step every layer once for the current tag.

        Raises:
            AnimationInvariantError: current tag has no TagInfo, or a layer's
                                     frame list is shorter than its window
        """
        tag = self.state.current_tag
        info = self.library.registry.get(tag)

        for layer in self.library.index.layers():
            playback = self.state.layers[layer.name]

            if not layer.supports(tag):
                playback.visible = False
                continue

            if not playback.visible and self.reset_on_regain:
                playback.counter = info.from_frame
            elif playback.entered_tag == tag and info.contains(playback.counter):
                playback.counter = advance_counter(playback.counter, info)
            else:
                playback.counter = info.from_frame

            playback.entered_tag = tag
            playback.visible = True
            playback.frame = self._frame_at(layer, tag, info, playback.counter)

        DebugLogger.trace(
            f"Runtime #{self.runtime_id} {tag!r}: "
            + ", ".join(f"{name}={p.counter}" if p.visible else f"{name}=hidden"
                        for name, p in self.state.layers.items()),
            category="runtime"
        )
        if self.events:
            self.events.dispatch(AnimationAdvancedEvent(self.runtime_id, tag, self.visible_layer_names()))

    @staticmethod
    def _frame_at(layer: LayerAnimations, tag, info: TagInfo, counter: int) -> FrameInfo:
        frames = layer.frames(tag)
        offset = counter - info.from_frame
        if not 0 <= offset < len(frames):
            raise AnimationInvariantError(
                f"Layer '{layer.name}' has {len(frames)} frame(s) for {tag!r}, "
                f"counter {counter} is outside them"
            )
        return frames[offset]

    # ===========================================================
    # Output
    # ===========================================================

    def counter(self, layer_name: str) -> int:
        return self._playback(layer_name).counter

    def is_visible(self, layer_name: str) -> bool:
        return self._playback(layer_name).visible

    def visible_layer_names(self) -> tuple:
        return tuple(name for name, p in self.state.layers.items() if p.visible)

    def layer_frames(self) -> List[LayerFrame]:
        """Output for every layer, back to front."""
        atlas = self.library.atlas_image
        frames = []
        for layer in self.library.index.layers():
            playback = self.state.layers[layer.name]
            rect = playback.frame.frame if playback.frame else None
            frames.append(LayerFrame(layer.name, layer.z_order, playback.visible, rect, atlas))
        return frames

    def visible_frames(self) -> List[LayerFrame]:
        return [frame for frame in self.layer_frames() if frame.visible]

    def _playback(self, layer_name: str) -> LayerPlayback:
        try:
            return self.state.layers[layer_name]
        except KeyError:
            raise AnimationInvariantError(f"Layer '{layer_name}' is not in the index") from None
