# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Unit tests for the dicomengine.encaps module."""

from struct import pack

import pytest

from dicomengine.encaps import (
    get_frame_offsets, generate_pixel_data_fragment,
    generate_pixel_data_frame, get_frame, itemise_fragment, encapsulate
)
from dicomengine.errors import ConversionError
from dicomengine.filebase import DicomBytesIO


ITEM = b'\xFE\xFF\x00\xE0'
SEQUENCE_DELIMITER = b'\xFE\xFF\xDD\xE0\x00\x00\x00\x00'
EMPTY_BOT = ITEM + b'\x00\x00\x00\x00'


def item(value, length=None):
    """Return `value` framed as an item."""
    length = len(value) if length is None else length
    return ITEM + pack('<L', length) + value


def stream(*parts):
    return DicomBytesIO(b''.join(parts))


class TestGetFrameOffsets:
    def test_not_an_item(self):
        """Test a table that isn't an item raises"""
        fp = stream(b'\xFE\xFF\x00\xE1', pack('<L', 4), b'\x01\x02\x03\x04')
        with pytest.raises(ConversionError, match=r"Unexpected tag"):
            get_frame_offsets(fp)

    def test_odd_table_length(self):
        """Test a table length that isn't a multiple of 4 raises"""
        fp = stream(item(b'\x01\x02\x03\x04', length=10))
        with pytest.raises(ConversionError, match=r"not a multiple of 4"):
            get_frame_offsets(fp)

    def test_empty_table(self):
        """Test an empty table has no offsets"""
        assert get_frame_offsets(stream(EMPTY_BOT)) == []

    def test_offsets(self):
        """Test the offsets of a four frame table"""
        offsets = [0, 4966, 9716, 14334]
        fp = stream(item(pack('<4L', *offsets)))
        assert get_frame_offsets(fp) == offsets


class TestGeneratePixelDataFragment:
    def test_undefined_length_item(self):
        """Test an undefined length fragment raises"""
        fp = stream(item(b'\x01\x00\x00\x00', length=0xFFFFFFFF))
        with pytest.raises(ConversionError, match=r"Undefined item length"):
            next(generate_pixel_data_fragment(fp))

    def test_stops_at_delimiter(self):
        """Test fragments after the sequence delimiter aren't read"""
        fp = stream(item(b'\x01\x00'), SEQUENCE_DELIMITER, item(b'\x02\x00'))
        assert list(generate_pixel_data_fragment(fp)) == [b'\x01\x00']

    def test_non_item_tag(self):
        """Test a tag other than an item raises once reached"""
        fp = stream(item(b'\x01\x00'), b'\x10\x00\x10\x00\x04\x00\x00\x00')
        fragments = generate_pixel_data_fragment(fp)
        assert next(fragments) == b'\x01\x00'
        with pytest.raises(ConversionError, match=r"at offset 10"):
            next(fragments)

    def test_fragments_in_order(self):
        """Test the fragments are yielded in the order they're stored"""
        fragments = [b'\x01\x00\x00\x00', b'\x01\x02\x03\x04\x05\x06']
        fp = stream(*map(item, fragments))
        assert list(generate_pixel_data_fragment(fp)) == fragments


class TestGeneratePixelDataFrame:
    def test_single_fragment(self):
        """Test a frame held in one fragment"""
        data = EMPTY_BOT + item(b'\x01\x00')
        assert list(generate_pixel_data_frame(data)) == [b'\x01\x00']

    def test_fragments_joined(self):
        """Test a single frame is all of the fragments without a table"""
        data = EMPTY_BOT + item(b'\x01\x00') + item(b'\x02\x00') + item(
            b'\x03\x00'
        )
        assert list(generate_pixel_data_frame(data)) == [
            b'\x01\x00\x02\x00\x03\x00'
        ]

    def test_fragment_per_frame(self):
        """Test several frames without a table take a fragment each"""
        data = EMPTY_BOT + item(b'\x01\x00') + item(b'\x02\x00')
        frames = generate_pixel_data_frame(data, number_of_frames=2)
        assert list(frames) == [b'\x01\x00', b'\x02\x00']

    def test_table_groups_fragments(self):
        """Test the table offsets group the fragments into frames"""
        data = (
            item(pack('<2L', 0, 24)) + item(b'\x01\x00\x00\x00')
            + item(b'\x02\x00\x00\x00') + item(b'\x03\x00\x00\x00')
        )
        assert list(generate_pixel_data_frame(data, 2)) == [
            b'\x01\x00\x00\x00\x02\x00\x00\x00', b'\x03\x00\x00\x00'
        ]

    def test_get_frame(self):
        """Test getting a frame by index"""
        bytestream = encapsulate([b'\x01\x02', b'\x03\x04'])
        assert get_frame(bytestream, 1, 2) == b'\x03\x04'
        with pytest.raises(ConversionError, match=r"No frame 2"):
            get_frame(bytestream, 2, 2)

class TestEncapsulate:
    def test_itemise_fragment(self):
        """Test odd length fragments are padded"""
        assert itemise_fragment(b'\x01\x02') == (
            b'\xFE\xFF\x00\xE0\x02\x00\x00\x00\x01\x02'
        )
        assert itemise_fragment(b'\x01') == (
            b'\xFE\xFF\x00\xE0\x02\x00\x00\x00\x01\x00'
        )

    def test_encapsulate_bot(self):
        """Test the Basic Offset Table holds the item offsets"""
        data = encapsulate([b'\x01\x02', b'\x03\x04\x05\x06'])
        assert data == (
            b'\xFE\xFF\x00\xE0\x08\x00\x00\x00'
            b'\x00\x00\x00\x00\x0A\x00\x00\x00'
            b'\xFE\xFF\x00\xE0\x02\x00\x00\x00\x01\x02'
            b'\xFE\xFF\x00\xE0\x04\x00\x00\x00\x03\x04\x05\x06'
        )
        fp = DicomBytesIO(data)
        assert get_frame_offsets(fp) == [0, 10]

    def test_encapsulate_no_bot(self):
        """Test the Basic Offset Table can be left empty"""
        data = encapsulate([b'\x01\x02'], has_bot=False)
        assert data == (
            b'\xFE\xFF\x00\xE0\x00\x00\x00\x00'
            b'\xFE\xFF\x00\xE0\x02\x00\x00\x00\x01\x02'
        )
        assert list(generate_pixel_data_frame(data)) == [b'\x01\x02']
