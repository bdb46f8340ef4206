"""
errors.py
---------
Exception taxonomy for sprite-sheet loading and index building.

Every SpriteSheetError is raised while a document is loaded or indexed and
rejects the document as a whole. AnimationInvariantError is raised during
playback when the built index and the live tag set disagree.
"""


class SpriteSheetError(Exception):
    """Base class for all load/index-build failures."""


class MalformedDocument(SpriteSheetError):
    """The document is not valid JSON or does not match the export schema."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class FrameOrderError(MalformedDocument):
    """A frame ordinal is out of order while ordinal_policy is 'reject'."""


class InvalidFilenameFormat(SpriteSheetError):
    """A frame filename does not follow '<tag>-<layer>-<ordinal>'."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        super().__init__(f"Invalid frame filename {filename!r}: {reason}")


class UnknownAnimationTag(SpriteSheetError):
    """A tag name does not parse into the supplied tag vocabulary."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown animation tag {name!r}")


class DuplicateAnimationTag(SpriteSheetError):
    """The same tag appears twice in meta.frameTags."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Animation tag {name!r} is declared more than once")


class UndeclaredLayer(SpriteSheetError):
    """A frame references a layer missing from meta.layers."""

    def __init__(self, layer: str):
        self.layer = layer
        super().__init__(f"Layer {layer!r} is not declared in meta.layers")


class AnimationInvariantError(RuntimeError):
    """Playback lookup miss: the index and the tag set in use have diverged."""
