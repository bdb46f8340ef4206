"""
test_animation_runtime.py
-------------------------
Regression tests for layered playback.

Covers:
- Inclusive frame-range stepping (and the old from + to + 1 bug)
- Initial state and the first advance
- Visibility per tag, tag switching, resume vs reset on regain
- The two-layer bomb scenario end to end
- Fixed-step ticking and event dispatch
- Invariant violations
"""

import json
from dataclasses import replace
from types import MappingProxyType

import pytest

from sprite_layers.animation.animation_library import AnimationLibrary
from sprite_layers.animation.animation_runtime import AnimationRuntime, advance_counter
from sprite_layers.aseprite.errors import AnimationInvariantError
from sprite_layers.aseprite.layer_index import LayerAnimationIndex
from sprite_layers.aseprite.schema import Direction, Rect, TagInfo
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.core.services.event_manager import (
    AnimationAdvancedEvent,
    AnimationTagChangedEvent,
    EventManager,
)
from conftest import BombState, grid_frame, make_document, make_layer, make_tag

IDLE = BombState.IDLE
FUSE = BombState.FUSE


def advance_and_record(runtime, count, layer):
    counters = []
    for _ in range(count):
        runtime.advance()
        counters.append(runtime.counter(layer))
    return counters


# ===========================================================
# Counter Stepping
# ===========================================================

class TestAdvanceCounter:

    def test_wraps_inside_inclusive_window(self):
        info = TagInfo("walk", 2, 5, Direction.FORWARD)
        counter = 2
        for _ in range(4):
            counter = advance_counter(counter, info)
        assert counter == 2

    def test_visits_every_frame_once_per_cycle(self):
        info = TagInfo("walk", 2, 5, Direction.FORWARD)
        seen = []
        counter = 2
        for _ in range(4):
            counter = advance_counter(counter, info)
            seen.append(counter)
        assert seen == [3, 4, 5, 2]

    def test_does_not_use_from_plus_to_plus_one(self):
        """from + to + 1 would give a cycle of 8 for the 2..5 window."""
        info = TagInfo("walk", 2, 5, Direction.FORWARD)
        assert info.length == 4
        assert info.length != info.from_frame + info.to_frame + 1
        assert advance_counter(5, info) == 2

    def test_single_frame_window_stays_put(self):
        info = TagInfo("hit", 3, 3, Direction.FORWARD)
        assert advance_counter(3, info) == 3


# ===========================================================
# Initial State
# ===========================================================

def test_initial_counters_and_visibility(bomb_library):
    runtime = AnimationRuntime(bomb_library, IDLE)

    assert runtime.current_tag is IDLE
    assert runtime.counter("body") == 0
    assert runtime.is_visible("body")
    assert runtime.counter("fuse") == 0
    assert not runtime.is_visible("fuse")


def test_initial_counter_is_window_start(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE)
    assert runtime.counter("body") == 2
    assert runtime.counter("fuse") == 2


def test_first_advance_shows_window_start(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE)
    runtime.advance()
    assert runtime.counter("body") == 2


def test_advancing_one_full_cycle_returns_to_start():
    doc = make_document(
        [grid_frame("idle", "body", i, 0) for i in range(2, 6)],
        [make_tag("idle", 2, 5)],
        [make_layer("body")],
    )
    library = AnimationLibrary.from_text(json.dumps(doc), TagVocabulary.from_enum(BombState))
    runtime = AnimationRuntime(library, IDLE)
    runtime.advance()
    assert runtime.counter("body") == 2

    assert advance_and_record(runtime, 4, "body") == [3, 4, 5, 2]


# ===========================================================
# Bomb Scenario
# ===========================================================

@pytest.mark.integration
def test_bomb_scenario_end_to_end(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE)

    body, fuse = [], []
    for _ in range(5):
        runtime.advance()
        body.append(runtime.counter("body"))
        fuse.append(runtime.counter("fuse"))
        assert runtime.is_visible("body") and runtime.is_visible("fuse")
    assert body == [2, 3, 4, 2, 3]
    assert fuse == [2, 3, 4, 2, 3]

    runtime.set_tag(IDLE)
    body, fuse_hidden = [], []
    for _ in range(5):
        runtime.advance()
        body.append(runtime.counter("body"))
        fuse_hidden.append((runtime.is_visible("fuse"), runtime.counter("fuse")))
    assert body == [0, 1, 0, 1, 0]
    assert fuse_hidden == [(False, 3)] * 5


def test_fuse_only_layer_hidden_while_idle(bomb_library):
    runtime = AnimationRuntime(bomb_library, IDLE)
    for _ in range(6):
        runtime.advance()
        assert not runtime.is_visible("fuse")
        assert runtime.counter("fuse") == 0

    runtime.set_tag(FUSE)
    assert advance_and_record(runtime, 4, "fuse") == [2, 3, 4, 2]
    assert runtime.is_visible("fuse")


def test_set_tag_waits_for_next_advance(bomb_library):
    runtime = AnimationRuntime(bomb_library, IDLE)
    runtime.advance()

    runtime.set_tag(FUSE)
    assert runtime.current_tag is FUSE
    assert not runtime.is_visible("fuse")
    assert runtime.counter("body") == 0

    runtime.advance()
    assert runtime.is_visible("fuse")
    assert runtime.counter("body") == 2


def test_overlapping_window_restarts_instead_of_repeating():
    frames = [grid_frame("idle", "body", i, 0) for i in range(4)]
    frames += [grid_frame("fuse", "body", i, 0) for i in range(2, 5)]
    doc = make_document(frames, [make_tag("idle", 0, 3), make_tag("fuse", 2, 4)], [make_layer("body")])
    library = AnimationLibrary.from_text(json.dumps(doc), TagVocabulary.from_enum(BombState))
    runtime = AnimationRuntime(library, IDLE)

    assert advance_and_record(runtime, 4, "body") == [0, 1, 2, 3]
    runtime.set_tag(FUSE)
    assert advance_and_record(runtime, 3, "body") == [2, 3, 4]
    assert runtime.layer_frames()[0].frame_rect == Rect(128, 0, 32, 32)


def test_hidden_layer_resumes_where_it_left_off(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE)
    advance_and_record(runtime, 2, "fuse")      # shows 2, 3
    runtime.set_tag(IDLE)
    advance_and_record(runtime, 3, "body")
    assert runtime.counter("fuse") == 3

    runtime.set_tag(FUSE)
    assert advance_and_record(runtime, 2, "fuse") == [4, 2]


def test_reset_on_regain_restarts_hidden_layer(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE, reset_on_regain=True)
    advance_and_record(runtime, 2, "fuse")
    runtime.set_tag(IDLE)
    runtime.advance()

    runtime.set_tag(FUSE)
    assert advance_and_record(runtime, 2, "fuse") == [2, 3]


def test_layer_frames_report_rect_and_atlas(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE)
    runtime.advance()
    runtime.advance()

    frames = runtime.layer_frames()
    assert [f.name for f in frames] == ["body", "fuse"]
    assert [f.z_order for f in frames] == [1, 2]
    assert frames[0].frame_rect == Rect(96, 0, 32, 32)
    assert frames[1].frame_rect == Rect(96, 32, 32, 32)
    assert all(f.atlas_image == "basic_bomb.png" for f in frames)


def test_visible_frames_skip_hidden_layers(bomb_library):
    runtime = AnimationRuntime(bomb_library, IDLE)
    runtime.advance()
    assert [f.name for f in runtime.visible_frames()] == ["body"]
    assert runtime.visible_layer_names() == ("body",)


def test_runtimes_share_library_without_sharing_state(bomb_library):
    first = AnimationRuntime(bomb_library, FUSE)
    second = AnimationRuntime(bomb_library, IDLE)

    advance_and_record(first, 3, "body")
    second.advance()

    assert first.counter("body") == 4
    assert second.counter("body") == 0
    assert first.runtime_id != second.runtime_id


# ===========================================================
# Ticking
# ===========================================================

def test_tick_below_period_does_not_advance(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE, tick_period=0.1)
    assert runtime.tick(0.05) == 0
    assert runtime.tick(0.04) == 0
    assert runtime.tick(0.01) == 1


def test_long_tick_fires_every_missed_period(bomb_library):
    runtime = AnimationRuntime(bomb_library, FUSE, tick_period=0.1)
    assert runtime.tick(0.35) == 3
    # shows 2, then 3, then 4
    assert runtime.counter("body") == 4


def test_default_period_comes_from_settings(bomb_library):
    runtime = AnimationRuntime(bomb_library, IDLE)
    assert runtime.timer.period == pytest.approx(0.1)


# ===========================================================
# Events
# ===========================================================

def test_dispatches_advance_and_tag_change_events(bomb_library):
    events = EventManager()
    advanced, changed = [], []
    events.subscribe(AnimationAdvancedEvent, advanced.append)
    events.subscribe(AnimationTagChangedEvent, changed.append)

    runtime = AnimationRuntime(bomb_library, IDLE, events=events)
    runtime.tick(0.2)
    runtime.set_tag(FUSE)
    runtime.set_tag(FUSE)

    assert len(advanced) == 2
    assert advanced[0].tag is IDLE
    assert advanced[0].visible_layers == ("body",)
    assert changed == [AnimationTagChangedEvent(runtime.runtime_id, IDLE, FUSE)]


# ===========================================================
# Invariant Violations
# ===========================================================

def test_tag_without_tag_info_is_fatal():
    doc = make_document([grid_frame("idle", "body", 0, 0)], [make_tag("idle", 0, 0)], [make_layer("body")])
    library = AnimationLibrary.from_text(json.dumps(doc), TagVocabulary.from_enum(BombState))
    runtime = AnimationRuntime(library, IDLE)

    runtime.set_tag(FUSE)
    with pytest.raises(AnimationInvariantError):
        runtime.advance()


def test_frame_list_shorter_than_window_is_fatal(bomb_library):
    # built indexes always fill the window; hand-assemble one that does not
    body = bomb_library.index["body"]
    short = replace(body, frames_by_tag=MappingProxyType({FUSE: body.frames(FUSE)[:2]}),
                    supported=frozenset({FUSE}))
    library = replace(bomb_library, index=LayerAnimationIndex({"body": short}))

    runtime = AnimationRuntime(library, FUSE)
    runtime.advance()
    runtime.advance()
    with pytest.raises(AnimationInvariantError):
        runtime.advance()


def test_unknown_layer_lookup_is_fatal(bomb_library):
    runtime = AnimationRuntime(bomb_library, IDLE)
    with pytest.raises(AnimationInvariantError):
        runtime.counter("spark")
