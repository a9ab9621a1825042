# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Tests for values.py"""

import logging

import pytest

from dicomengine.dataelem import RawDataElement
from dicomengine.tag import Tag
from dicomengine.uid import UID
from dicomengine.valuerep import DSfloat, IS
from dicomengine.values import (
    convert_value, converters, convert_tag, convert_ATvalue,
    convert_DS_string, convert_IS_string, convert_numbers, convert_OWvalue,
    convert_UR_string, MultiString, swap_words
)


def _raw(value, is_little_endian=True):
    return RawDataElement(
        Tag(0x00100010), None, len(value), value, 0, True, is_little_endian
    )


class TestConvertTag:
    def test_big_endian(self):
        """Test convert_tag with a big endian byte string"""
        bytestring = b'\x00\x10\x00\x20'
        assert convert_tag(bytestring, False) == Tag(0x0010, 0x0020)

    def test_little_endian(self):
        """Test convert_tag with a little endian byte string"""
        bytestring = b'\x10\x00\x20\x00'
        assert convert_tag(bytestring, True) == Tag(0x0010, 0x0020)

    def test_offset(self):
        """Test convert_tag with an offset"""
        bytestring = b'\x12\x23\x10\x00\x20\x00\x34\x45'
        assert convert_tag(bytestring, True, 0) == Tag(0x2312, 0x0010)
        assert convert_tag(bytestring, True, 2) == Tag(0x0010, 0x0020)


class TestConvertAT:
    def test_big_endian(self):
        """Test convert_ATvalue with a big endian byte string"""
        # VM 1
        bytestring = b'\x00\x10\x00\x20'
        assert convert_ATvalue(bytestring, False) == Tag(0x0010, 0x0020)

        # VM 3
        bytestring += b'\x00\x10\x00\x30\x00\x10\x00\x40'
        out = convert_ATvalue(bytestring, False)
        assert Tag(0x0010, 0x0020) in out
        assert Tag(0x0010, 0x0030) in out
        assert Tag(0x0010, 0x0040) in out

    def test_empty_and_bad_length(self):
        """Test an empty AT value and a bad length"""
        assert convert_ATvalue(b'', True) is None
        with pytest.raises(ValueError, match=r"multiple of 4"):
            convert_ATvalue(b'\x00\x10\x00', True)


class TestConvertNumbers:
    def test_numbers(self):
        """Test decoding binary numbers"""
        assert convert_numbers(b'\x01\x00', True, 'H') == 1
        assert convert_numbers(b'\x00\x01', False, 'H') == 1
        assert convert_numbers(b'\xff\xff\x02\x00', True, 'h') == [-1, 2]
        assert convert_numbers(b'', True, 'H') is None

    def test_bad_length(self):
        """Test a length that isn't a multiple of the value size"""
        with pytest.raises(ValueError, match=r"even multiple of bytes"):
            convert_numbers(b'\x01\x00\x00', True, 'H')


class TestConvertStrings:
    def test_multi_string(self):
        """Test MultiString splits and strips padding"""
        assert MultiString('ORIGINAL\\PRIMARY ') == ['ORIGINAL', 'PRIMARY']
        assert MultiString('1.2.3\x00', UID) == '1.2.3'
        assert MultiString('') == ''

    def test_DS(self):
        """Test decoding DS values"""
        value = convert_DS_string(b'1.5\\2 ', True)
        assert value == [1.5, 2.0]
        assert all(isinstance(v, DSfloat) for v in value)
        assert value[0].original_string == '1.5'
        assert convert_DS_string(b'  ', True) is None

    def test_invalid_DS(self, caplog):
        """Test invalid DS values are kept as str"""
        with caplog.at_level(logging.WARNING, logger='dicomengine'):
            assert convert_DS_string(b'1.5\\abc ', True) == ['1.5', 'abc']

        assert "Invalid decimal string value" in caplog.text

    def test_IS(self):
        """Test decoding IS values"""
        value = convert_IS_string(b'12', True)
        assert value == 12
        assert isinstance(value, IS)
        assert convert_IS_string(b'', True) is None

    def test_invalid_IS(self, caplog):
        """Test invalid IS values are kept as str"""
        with caplog.at_level(logging.WARNING, logger='dicomengine'):
            assert convert_IS_string(b'1.5 ', True) == '1.5'

        assert "Invalid integer string value" in caplog.text

    def test_UR(self):
        """Test UR values aren't split"""
        assert convert_UR_string(b'http://a\\b ', True) == 'http://a\\b'


class TestConvertValue:
    def test_unknown_VR(self):
        """Test an unknown VR raises NotImplementedError"""
        with pytest.raises(NotImplementedError, match=r"Unknown Value Repr"):
            convert_value('XX', _raw(b''))

    def test_text_uses_encodings(self):
        """Test text VRs are decoded with the given encodings"""
        raw = _raw('Jérôme'.encode('utf8'))
        assert convert_value('PN', raw, ['UTF8']) == 'Jérôme'
        assert convert_value('LT', _raw(b'a\\b '), None) == 'a\\b'

    def test_word_VRs(self):
        """Test word values are held as little endian"""
        raw = _raw(b'\x00\x01\x00\x02', is_little_endian=False)
        assert convert_value('OW', raw) == b'\x01\x00\x02\x00'
        assert convert_value('OB', raw) == b'\x00\x01\x00\x02'
        assert convert_OWvalue(b'\x00\x01', True, 2) == b'\x00\x01'

    def test_all_VRs_converted(self):
        """Test there's a converter for every VR except SQ"""
        assert 'SQ' not in converters
        for VR in ('AE', 'AS', 'AT', 'CS', 'DA', 'DS', 'DT', 'FD', 'FL',
                   'IS', 'LO', 'LT', 'OB', 'OD', 'OF', 'OL', 'OV', 'OW',
                   'PN', 'SH', 'SL', 'SS', 'ST', 'SV', 'TM', 'UC', 'UI',
                   'UL', 'UN', 'UR', 'US', 'UT', 'UV'):
            assert VR in converters


class TestSwapWords:
    def test_swap(self):
        """Test swapping the bytes of words"""
        assert swap_words(b'\x01\x02\x03\x04', 2) == b'\x02\x01\x04\x03'
        assert swap_words(b'\x01\x02\x03\x04', 4) == b'\x04\x03\x02\x01'
        assert swap_words(b'\x01\x02\x03', 2) == b'\x01\x02\x03'
        assert swap_words(b'\x01\x02', 1) == b'\x01\x02'
