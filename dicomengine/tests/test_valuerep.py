# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Unit tests for the dicomengine.valuerep module."""

import pytest

from dicomengine.valuerep import (
    DS, DSfloat, IS, format_DS, validate_value, validate_vr_length,
    validate_regex, validate_number, VALID_VRS, binary_VRs,
    single_value_VRs, string_VRs
)


class TestDSfloat:
    """Unit tests for DSfloat"""
    def test_str(self):
        """Test DSfloat.__str__()."""
        val = DSfloat(1.1)
        assert '1.1' == str(val)

        val = DSfloat('1.1 ')
        assert '1.1' == str(val)
        assert val.original_string == '1.1'

    def test_repr(self):
        """Test DSfloat.__repr__()."""
        assert '"1.1"' == repr(DSfloat(1.1))

    def test_DS_factory(self):
        """Test the DS factory function"""
        assert DS(None) is None
        assert DS('  ') is None
        assert DS('1.5') == 1.5
        assert isinstance(DS(2), DSfloat)

        with pytest.raises(ValueError):
            DS('abc')

    def test_copy_keeps_string(self):
        """Test a DSfloat from a DSfloat keeps the original string"""
        assert DSfloat(DSfloat('1.50')).original_string == '1.50'


class TestIS:
    """Test IS"""
    def test_str(self):
        """Test IS.__str__()."""
        assert str(IS(1)) == '1'
        assert str(IS(' 012 ')) == '012'
        assert repr(IS(1)) == '"1"'

    def test_valid(self):
        """Test valid IS values"""
        assert IS(None) is None
        assert IS('') is None
        assert IS('1.0') == 1
        assert IS(2.0) == 2

    def test_loss_raises(self):
        """Test a value that loses information raises TypeError"""
        with pytest.raises(TypeError, match=r"without loss"):
            IS('1.5')
        with pytest.raises(TypeError, match=r"without loss"):
            IS(1.5)

    def test_invalid_raises(self):
        """Test a non-numeric value raises ValueError"""
        with pytest.raises(ValueError):
            IS('abc')


class TestFormatDS:
    """Test format_DS"""
    def test_short(self):
        """Test values that fit without shrinking"""
        assert format_DS(1.0) == '1'
        assert format_DS(-0.5) == '-0.5'
        assert format_DS(DSfloat('1.50')) == '1.50'

    def test_long(self):
        """Test long values are shrunk to 16 characters"""
        value = format_DS(1 / 3)
        assert len(value) <= 16
        assert abs(float(value) - 1 / 3) < 1e-12

        value = format_DS(-1.234567890123456e-100)
        assert len(value) <= 16
        assert value.startswith('-1.2')


class TestValidation:
    """Tests for the value validators"""
    def test_length(self):
        """Test the maximum value length"""
        assert validate_vr_length('CS', 'A' * 16) == (True, '')
        valid, msg = validate_vr_length('CS', 'A' * 17)
        assert not valid
        assert 'exceeds the maximum length of 16' in msg
        # The PN limit applies per component group
        assert validate_vr_length('PN', 'A' * 64 + '=' + 'B' * 64)[0]
        assert validate_vr_length('LO', 'A' * 65)[0] is False
        assert validate_vr_length('UT', 'A' * 100000)[0]

    def test_regex(self):
        """Test the value formats"""
        assert validate_regex('DA', '20240101')[0]
        assert validate_regex('DA', '2024-01-01')[0] is False
        assert validate_regex('DA', '20240101-20240201')[0]
        assert validate_regex('TM', '235959.123456')[0]
        assert validate_regex('CS', 'ORIGINAL')[0]
        assert validate_regex('CS', 'original')[0] is False
        assert validate_regex('AS', '045Y')[0]
        assert validate_regex('AS', '45Y')[0] is False
        assert validate_regex('UI', '1.2.840.10008')[0]
        assert validate_regex('UI', '1.02.3')[0] is False
        assert validate_regex('IS', ' -12 ')[0]
        assert validate_regex('DS', '1.5e-3')[0]
        assert validate_regex('CS', 'A\n')[0] is False
        assert validate_regex('LO', 'anything')[0]
        assert validate_regex('DA', '')[0]

    def test_number(self):
        """Test the binary integer ranges"""
        assert validate_number('US', 65535)[0]
        valid, msg = validate_number('US', 65536)
        assert not valid
        assert 'between 0 and 65535' in msg
        assert validate_number('SS', -32768)[0]
        assert validate_number('SS', -32769)[0] is False

    def test_value(self):
        """Test validate_value"""
        assert validate_value('US', None) == (True, '')
        assert validate_value('US', 12)[0]
        valid, msg = validate_value('US', '12')
        assert not valid
        assert "type 'str'" in msg
        assert validate_value('DA', '20241301')[0] is False
        assert validate_value('IS', 12)[0]
        assert validate_value('OB', b'\x00')[0]

    def test_format_checked_before_length(self):
        """Test a malformed value that is also too long is a format error"""
        valid, msg = validate_value('DA', '2024-01-01')
        assert not valid
        assert msg == "Invalid value for VR DA: '2024-01-01'"
        valid, msg = validate_value('SH', 'x' * 17)
        assert not valid
        assert 'exceeds the maximum length of 16' in msg

    def test_vr_groups(self):
        """Test the VR groupings"""
        assert 'SQ' in VALID_VRS
        assert 'AT' in VALID_VRS
        assert 'XX' not in VALID_VRS
        assert 'OW' in binary_VRs
        assert 'UT' in single_value_VRs
        assert 'LO' not in single_value_VRs
        assert 'UI' in string_VRs
