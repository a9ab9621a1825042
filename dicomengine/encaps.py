# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Splitting encapsulated *Pixel Data* into frames, and building it.

Encapsulated data is a run of little endian items (PS3.5 Annex A.4)::

    FE FF 00 E0 | length | Basic Offset Table (0 or 4 bytes per frame)
    FE FF 00 E0 | length | fragment
    ...
    FE FF DD E0 | 00 00 00 00       (optional sequence delimiter)

The offsets in the Basic Offset Table are measured from the first byte of
the first fragment item.
"""

from bisect import bisect_right
from itertools import groupby
from struct import pack

from dicomengine.errors import ConversionError
from dicomengine.filebase import DicomBytesIO
from dicomengine.tag import ItemTag, SequenceDelimiterTag


_ITEM_PREFIX = b'\xFE\xFF\x00\xE0'
_ITEM_HEADER_LENGTH = 8


def get_frame_offsets(fp):
    """Read the Basic Offset Table item at the current position of `fp`.

    Returns
    -------
    list of int
        The offset of each frame's first fragment, ``[]`` if the table is
        empty.

    Raises
    ------
    ConversionError
        If `fp` isn't at an item or the table length isn't a multiple of 4.
    """
    fp.is_little_endian = True
    tag = fp.read_tag()
    if tag != ItemTag:
        raise ConversionError(
            f"Unexpected tag '{tag}' when parsing the Basic Offset Table item"
        )

    length = fp.read_UL()
    if length % 4:
        raise ConversionError(
            "The length of the Basic Offset Table item is not a multiple of 4"
        )

    return [fp.read_UL() for _ in range(length // 4)]


def generate_pixel_data_fragment(fp):
    """Yield the value of each fragment item from the current position of
    `fp` up to the end of the data or a sequence delimiter.

    Raises
    ------
    ConversionError
        For an item with undefined length or any tag that isn't an item or
        sequence delimiter.
    """
    fp.is_little_endian = True
    while not fp.at_end:
        offset = fp.tell()
        tag = fp.read_tag()
        if tag == SequenceDelimiterTag:
            return

        if tag != ItemTag:
            raise ConversionError(
                f"Unexpected tag '{tag}' at offset {offset} when parsing the "
                "encapsulated pixel data fragment items"
            )

        length = fp.read_UL()
        if length == 0xFFFFFFFF:
            raise ConversionError(
                f"Undefined item length at offset {offset + 4} when parsing "
                "the encapsulated pixel data fragments"
            )

        yield fp.read(length)


def _located_fragments(fp):
    """Yield ``(offset, fragment)`` with offsets measured like those in the
    Basic Offset Table.
    """
    offset = 0
    for fragment in generate_pixel_data_fragment(fp):
        yield offset, fragment
        offset += _ITEM_HEADER_LENGTH + len(fragment)


def generate_pixel_data_frame(bytestream, number_of_frames=1):
    """Yield each frame of the encapsulated *Pixel Data* `bytestream`.

    With a Basic Offset Table the fragments are grouped by its offsets.
    Without one, a single frame is taken to be all of the fragments and
    each fragment is taken to be a frame when there are several.

    Parameters
    ----------
    bytestream : bytes
        The *Pixel Data* value, starting with the Basic Offset Table item.
    number_of_frames : int, optional
        The (0028,0008) *Number of Frames* (default 1).
    """
    fp = DicomBytesIO(bytestream)
    offsets = get_frame_offsets(fp)
    if not offsets:
        fragments = generate_pixel_data_fragment(fp)
        if number_of_frames > 1:
            yield from fragments
        else:
            yield b''.join(fragments)
        return

    located = _located_fragments(fp)
    for _, group in groupby(
        located, key=lambda pair: bisect_right(offsets, pair[0])
    ):
        yield b''.join(fragment for _, fragment in group)


def get_frame(bytestream, index=0, number_of_frames=1):
    """Return frame `index` of the encapsulated `bytestream`.

    Raises
    ------
    ConversionError
        If there are fewer than ``index + 1`` frames.
    """
    frames = generate_pixel_data_frame(bytestream, number_of_frames)
    for frame_index, frame in enumerate(frames):
        if frame_index == index:
            return frame

    raise ConversionError(f"No frame {index} in the encapsulated pixel data")


def itemise_fragment(fragment):
    """Return `fragment` wrapped in an item, NULL padded to even length."""
    if len(fragment) % 2:
        fragment += b'\x00'

    return _ITEM_PREFIX + pack('<I', len(fragment)) + fragment


def encapsulate(frames, has_bot=True):
    """Return `frames` encapsulated with one fragment per frame.

    The result starts with the Basic Offset Table item, filled in unless
    `has_bot` is ``False``, and has no trailing sequence delimiter.
    """
    items = [itemise_fragment(frame) for frame in frames]
    offsets = []
    if has_bot:
        position = 0
        for item in items:
            offsets.append(position)
            position += len(item)

    table = pack(f'<I{len(offsets)}I', 4 * len(offsets), *offsets)
    return b''.join([_ITEM_PREFIX, table] + items)
