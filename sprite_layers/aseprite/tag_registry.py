"""
tag_registry.py
---------------
Lookup from tag value to its frame window.

Built once from ``meta.frameTags`` in document order. Queried by the
indexer to validate frame tags and by every runtime on each advance.

Performance
-----------
- Built once per sheet (cold path)
- get(): O(1) dict lookup
"""

from typing import Dict, Hashable, Iterable, Iterator

from sprite_layers.aseprite.errors import AnimationInvariantError, DuplicateAnimationTag
from sprite_layers.aseprite.schema import TagInfo
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.core.debug.debug_logger import DebugLogger


class AnimationTagRegistry:
    """Read-only mapping tag -> TagInfo."""

    def __init__(self, tags: Dict[Hashable, TagInfo]):
        self._tags = dict(tags)

    @classmethod
    def build(cls, frame_tags: Iterable[TagInfo], vocabulary: TagVocabulary) -> "AnimationTagRegistry":
        """
        Resolve every declared tag through the vocabulary.

        Raises:
            UnknownAnimationTag: a declared name is not in the vocabulary
            DuplicateAnimationTag: two declarations resolve to the same tag
        """
        tags = {}
        for info in frame_tags:
            tag = vocabulary.parse(info.name)
            if tag in tags:
                raise DuplicateAnimationTag(info.name)
            tags[tag] = info.with_name(tag)
            DebugLogger.trace(
                f"Tag {info.name} -> frames {info.from_frame}..{info.to_frame} ({info.direction.value})",
                category="index"
            )

        DebugLogger.system(f"Registered {len(tags)} animation tag(s)", category="index")
        return cls(tags)

    # ===========================================================
    # Queries
    # ===========================================================

    def get(self, tag: Hashable) -> TagInfo:
        """
        Raises:
            AnimationInvariantError: tag has no TagInfo
        """
        try:
            return self._tags[tag]
        except KeyError:
            raise AnimationInvariantError(f"No TagInfo registered for tag {tag!r}") from None

    def frame_range_length(self, tag: Hashable) -> int:
        return self.get(tag).length

    def __contains__(self, tag) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)
