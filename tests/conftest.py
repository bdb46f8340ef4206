"""
conftest.py
-----------
Shared pytest configuration and fixtures for sprite_layers tests.

Contains:
- A host tag enum and its vocabulary
- Builders for export documents (frames, tags, layers)
- The two-layer bomb sheet used across loading and playback tests
- Marker registration
"""

import json
import os
import sys
from enum import Enum

import pytest

# Add the repository root to the path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from sprite_layers.animation.animation_library import AnimationLibrary  # noqa: E402
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary  # noqa: E402

TILE = 32


class BombState(Enum):
    """Host-side tag enum, as a game would declare it."""
    IDLE = "idle"
    FUSE = "fuse"


# ===========================================================
# Document Builders
# ===========================================================

def make_frame(filename, x=0, y=0, w=TILE, h=TILE, duration=100):
    """One frames[] entry of a json-array export."""
    return {
        "filename": filename,
        "frame": {"x": x, "y": y, "w": w, "h": h},
        "rotated": False,
        "trimmed": False,
        "spriteSourceSize": {"x": 0, "y": 0, "w": w, "h": h},
        "sourceSize": {"w": w, "h": h},
        "duration": duration,
    }


def make_tag(name, start, end, direction="forward"):
    return {"name": name, "from": start, "to": end, "direction": direction}


def make_layer(name):
    return {"name": name, "opacity": 255, "blendMode": "normal"}


def make_document(frames, tags, layers, image="sheet.png", size=(160, 64)):
    return {
        "frames": frames,
        "meta": {
            "app": "http://www.aseprite.org/",
            "version": "1.2.30",
            "image": image,
            "format": "RGBA8888",
            "size": {"w": size[0], "h": size[1]},
            "scale": "1",
            "frameTags": tags,
            "layers": layers,
            "slices": [],
        },
    }


def grid_frame(tag, layer, ordinal, row):
    """Frame placed on the split-layers grid: column = ordinal, row = layer."""
    return make_frame(f"{tag}-{layer}-{ordinal}", x=ordinal * TILE, y=row * TILE)


def bomb_document():
    """
    Two layers:
      body: idle 0-1, fuse 2-4
      fuse: fuse 2-4 only
    """
    frames = [
        grid_frame("idle", "body", 0, 0),
        grid_frame("idle", "body", 1, 0),
        grid_frame("fuse", "body", 2, 0),
        grid_frame("fuse", "body", 3, 0),
        grid_frame("fuse", "body", 4, 0),
        grid_frame("fuse", "fuse", 2, 1),
        grid_frame("fuse", "fuse", 3, 1),
        grid_frame("fuse", "fuse", 4, 1),
    ]
    tags = [make_tag("idle", 0, 1), make_tag("fuse", 2, 4)]
    layers = [make_layer("body"), make_layer("fuse")]
    return make_document(frames, tags, layers, image="basic_bomb.png")


# ===========================================================
# Fixtures
# ===========================================================

@pytest.fixture
def vocabulary():
    return TagVocabulary.from_enum(BombState)


@pytest.fixture
def bomb_text():
    return json.dumps(bomb_document())


@pytest.fixture
def bomb_library(bomb_text, vocabulary):
    """Library built with the shipped defaults."""
    return AnimationLibrary.from_text(bomb_text, vocabulary)


@pytest.fixture
def sheet_file(tmp_path):
    """Write a document dict to disk and return the path."""
    def _write(document, name="sheet.json"):
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return str(path)
    return _write


# ===========================================================
# Pytest configuration
# ===========================================================

def pytest_configure(config):
    """Custom pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "regression: marks tests as regression tests")


def pytest_collection_modifyitems(config, items):
    """Add the unit marker to everything not marked integration."""
    for item in items:
        if "integration" not in item.keywords:
            item.add_marker(pytest.mark.unit)
