#!/usr/bin/env python3
"""
cli.py
------
Command line diagnostics for sprite-sheet exports.

Usage:
    python -m sprite_layers inspect assets/basic_bomb.json
    python -m sprite_layers simulate assets/basic_bomb.json --play fuse:5,idle:5
    python -m sprite_layers simulate assets/basic_bomb.json --play fuse:8 --reset-on-regain

Tags are taken from the sheet's own frameTags unless --tags lists them.
"""

import argparse
import itertools

from sprite_layers.animation.animation_library import AnimationLibrary
from sprite_layers.animation.animation_runtime import AnimationRuntime
from sprite_layers.aseprite.errors import AnimationInvariantError, SpriteSheetError
from sprite_layers.aseprite.schema import load_sprite_sheet
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.core.debug.debug_logger import DebugLogger
from sprite_layers.core.services.event_manager import AnimationAdvancedEvent, get_events
from sprite_layers.core.settings import Animation


# ===========================================================
# Helpers
# ===========================================================

def _vocabulary(args, sheet) -> TagVocabulary:
    if args.tags:
        names = [name.strip() for name in args.tags.split(",") if name.strip()]
    else:
        names = [tag.name for tag in sheet.meta.frame_tags]
    # keep the first spelling of each case-insensitive name
    unique = {}
    for name in names:
        unique.setdefault(name.lower(), name)
    return TagVocabulary.from_names(unique.values())


def _settings(args) -> dict:
    settings = {}
    if args.lenient:
        settings["strict"] = False
    if args.ordinal_policy:
        settings["ordinal_policy"] = args.ordinal_policy
    if getattr(args, "reset_on_regain", False):
        settings["reset_on_regain"] = True
    return settings


def _parse_plan(text: str, vocabulary: TagVocabulary):
    """'fuse:5,idle:3' -> [(tag, 5), (tag, 3)]"""
    plan = []
    for step in text.split(","):
        name, _, count = step.partition(":")
        try:
            advances = int(count) if count else 1
        except ValueError:
            raise argparse.ArgumentTypeError(f"Bad advance count in {step!r}") from None
        if advances < 1:
            raise argparse.ArgumentTypeError(f"Advance count must be at least 1 in {step!r}")
        plan.append((vocabulary.parse(name.strip()), advances))
    return plan


# ===========================================================
# Commands
# ===========================================================

def cmd_inspect(args) -> int:
    sheet = load_sprite_sheet(args.sheet)
    vocabulary = _vocabulary(args, sheet)
    library = AnimationLibrary.from_sheet(sheet, vocabulary, _settings(args))

    DebugLogger.section(f"Sheet {sheet.meta.image}")
    DebugLogger.init_entry("Frames", str(len(sheet.frames)))
    DebugLogger.init_entry("Canvas", f"{sheet.meta.size.w}x{sheet.meta.size.h}")
    if sheet.frames and sheet.meta.frame_tags:
        tile, columns, rows = sheet.grid_layout()
        DebugLogger.init_entry("Grid", f"{columns}x{rows} of {tile.w}x{tile.h}")

    DebugLogger.section("Tags")
    for tag in library.registry:
        info = library.registry.get(tag)
        DebugLogger.init_entry(
            vocabulary.canonical(tag),
            f"{info.from_frame}..{info.to_frame} {info.direction.value}"
        )

    DebugLogger.section("Layers")
    for layer in library.index.layers():
        DebugLogger.init_entry(f"{layer.z_order}. {layer.name}", "OK")
        for tag in library.registry:
            if layer.supports(tag):
                DebugLogger.init_sub(f"{vocabulary.canonical(tag)}: {len(layer.frames(tag))} frame(s)")
    return 0


def cmd_simulate(args) -> int:
    sheet = load_sprite_sheet(args.sheet)
    vocabulary = _vocabulary(args, sheet)
    library = AnimationLibrary.from_sheet(sheet, vocabulary, _settings(args))
    plan = _parse_plan(args.play, vocabulary)

    events = get_events()
    runtime = AnimationRuntime(library, plan[0][0], events=events)
    steps = itertools.count(1)

    def print_advance(event: AnimationAdvancedEvent):
        if event.runtime_id != runtime.runtime_id:
            return
        cells = [
            f"{frame.name}={runtime.counter(frame.name)}" if frame.visible else f"{frame.name}=-"
            for frame in runtime.layer_frames()
        ]
        print(f"{next(steps):4d} {vocabulary.canonical(event.tag):<12} " + " ".join(cells))

    events.subscribe(AnimationAdvancedEvent, print_advance)
    try:
        for tag, advances in plan:
            runtime.set_tag(tag)
            for _ in range(advances):
                runtime.tick(runtime.timer.period)
    finally:
        events.unsubscribe(AnimationAdvancedEvent, print_advance)
    return 0


# ===========================================================
# Entry Point
# ===========================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sprite_layers", description="Layered sprite-sheet diagnostics")
    parser.add_argument("--tags", help="Comma-separated tag names (default: the sheet's frameTags)")
    parser.add_argument("--lenient", action="store_true",
                        help="Skip bad frames with a warning instead of rejecting the sheet")
    parser.add_argument("--ordinal-policy", choices=sorted(Animation.ORDINAL_POLICIES),
                        help="How frame ordinals inside a tag are treated")

    commands = parser.add_subparsers(dest="command", required=True)

    inspect = commands.add_parser("inspect", help="Print tags, layers and index summary")
    inspect.add_argument("sheet", help="Path to the exported .json")
    inspect.set_defaults(handler=cmd_inspect)

    simulate = commands.add_parser("simulate", help="Print layer counters advance by advance")
    simulate.add_argument("sheet", help="Path to the exported .json")
    simulate.add_argument("--play", required=True, help="Plan such as 'fuse:5,idle:5'")
    simulate.add_argument("--reset-on-regain", action="store_true",
                          help="Restart layers at their window start when shown again")
    simulate.set_defaults(handler=cmd_simulate)

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.handler(args)
    except (SpriteSheetError, AnimationInvariantError, argparse.ArgumentTypeError) as e:
        DebugLogger.fail(str(e), category="cli")
        return 1
    except OSError as e:
        DebugLogger.fail(f"Cannot read {args.sheet}: {e}", category="cli")
        return 1
