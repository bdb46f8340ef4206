"""
tag_vocabulary.py
-----------------
Caller-supplied set of animation tags.

The core never hard-codes tag names. A host hands in a vocabulary: a
bijection between canonical strings and its own tag values (usually the
members of an Enum). Parsing is case-insensitive.

Usage:
    class BombState(Enum):
        IDLE = "idle"
        FUSE = "fuse"

    tags = TagVocabulary.from_enum(BombState)
    tags.parse("Fuse")        # -> BombState.FUSE
    tags.canonical(BombState.FUSE)  # -> "FUSE"
"""

from enum import Enum
from typing import Dict, Hashable, Iterable, Iterator, Type

from sprite_layers.aseprite.errors import UnknownAnimationTag


class TagVocabulary:
    """Bijection canonical name <-> tag value with case-insensitive lookup."""

    def __init__(self, mapping: Dict[str, Hashable]):
        """
        Args:
            mapping: canonical name -> tag value. Names must stay distinct
                     once lower-cased, values must be distinct.
        """
        self._by_key: Dict[str, Hashable] = {}
        self._canonical: Dict[Hashable, str] = {}

        for name, value in mapping.items():
            key = name.lower()
            if key in self._by_key:
                raise ValueError(f"Tag names collide case-insensitively: {name!r}")
            if value in self._canonical:
                raise ValueError(f"Tag value {value!r} is mapped twice")
            self._by_key[key] = value
            self._canonical[value] = name

    # ===========================================================
    # Constructors
    # ===========================================================

    @classmethod
    def from_enum(cls, enum_cls: Type[Enum]) -> "TagVocabulary":
        """Use member names as canonical strings."""
        return cls({member.name: member for member in enum_cls})

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "TagVocabulary":
        """Plain-string tags; each value is its own canonical name."""
        return cls({name: name for name in names})

    # ===========================================================
    # Lookup
    # ===========================================================

    def parse(self, text: str) -> Hashable:
        """
        Resolve a tag name ignoring case.

        Raises:
            UnknownAnimationTag: no tag matches
        """
        try:
            return self._by_key[text.lower()]
        except KeyError:
            raise UnknownAnimationTag(text) from None

    def canonical(self, value: Hashable) -> str:
        return self._canonical[value]

    def __contains__(self, value) -> bool:
        return value in self._canonical

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._canonical)

    def __len__(self) -> int:
        return len(self._canonical)

    def __repr__(self):
        return f"TagVocabulary({sorted(self._canonical.values())})"
