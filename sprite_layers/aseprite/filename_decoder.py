"""
filename_decoder.py
-------------------
Decodes the frame naming convention of split-layer exports.

Aseprite is exported with the filename format ``{tag}-{layer}-{frame}``,
e.g. ``fuse-body-0003``. Only the first three tokens matter; anything after
them is ignored.
"""

from dataclasses import dataclass
from typing import Hashable

from sprite_layers.aseprite.errors import InvalidFilenameFormat
from sprite_layers.aseprite.tag_vocabulary import TagVocabulary
from sprite_layers.core.settings import Animation


@dataclass(frozen=True)
class DecodedFilename:
    tag: Hashable
    layer: str
    ordinal: int


def decode_filename(filename: str, vocabulary: TagVocabulary,
                    delimiter: str = Animation.FILENAME_DELIMITER) -> DecodedFilename:
    """
    Split a frame filename into (tag, layer, ordinal).

    Args:
        filename: Encoded frame name
        vocabulary: Tags the host knows about
        delimiter: Token separator

    Raises:
        InvalidFilenameFormat: fewer than three tokens, or a non-numeric ordinal
        UnknownAnimationTag: first token is not in the vocabulary
    """
    tokens = filename.split(delimiter)
    if len(tokens) < 3:
        raise InvalidFilenameFormat(
            filename, f"expected '<tag>{delimiter}<layer>{delimiter}<ordinal>', got {len(tokens)} token(s)"
        )

    raw_tag, layer, raw_ordinal = tokens[0], tokens[1], tokens[2]

    # isdigit() alone accepts superscripts and other non-ASCII digits
    if not (raw_ordinal.isascii() and raw_ordinal.isdigit()):
        raise InvalidFilenameFormat(filename, f"ordinal {raw_ordinal!r} is not an unsigned integer")
    if not layer:
        raise InvalidFilenameFormat(filename, "layer name is empty")

    tag = vocabulary.parse(raw_tag)
    return DecodedFilename(tag=tag, layer=layer, ordinal=int(raw_ordinal))
