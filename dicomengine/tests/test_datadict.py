# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Test for datadict.py"""

import pytest

from dicomengine.datadict import (
    get_entry, dictionary_is_retired, dictionary_VR, dictionary_VM,
    dictionary_description, dictionary_keyword, dictionary_has_tag,
    keyword_for_tag, tag_for_keyword
)


class TestDict:
    def test_tag_not_found(self):
        """dicom_dictionary: CleanName returns blank string for unknown tag"""
        assert keyword_for_tag(0x99991111) == ''
        assert keyword_for_tag(0x00090010) == ''

    def test_get_entry(self):
        """Test getting dictionary entries"""
        assert get_entry(0x00100010) == (
            'PN', '1', "Patient's Name", '', 'PatientName'
        )
        assert get_entry('PatientID')[0] == 'LO'

        with pytest.raises(KeyError, match=r"Tag \(9999, 1111\) not found"):
            get_entry(0x99991111)

    def test_generic_entries(self):
        """Test group length and private creator tags resolve"""
        assert get_entry(0x00080000)[:3] == ('UL', '1', 'Group Length')
        assert dictionary_VR(0x00090010) == 'LO'
        assert dictionary_description(0x000900FF) == 'Private Creator'
        with pytest.raises(KeyError):
            dictionary_VR(0x00091001)

    def test_dictionary_lookups(self):
        """Test the single value dictionary lookups"""
        assert dictionary_VR(0x7FE00010) == 'OB or OW'
        assert dictionary_VM(0x00080008) == '2-n'
        assert dictionary_description(0x00101010) == "Patient's Age"
        assert dictionary_keyword(0x00120062) == 'PatientIdentityRemoved'

    def test_dictionary_is_retired(self):
        """Test dictionary_is_retired"""
        assert dictionary_is_retired(0x00101000)
        assert not dictionary_is_retired(0x00100010)

    def test_dictionary_has_tag(self):
        """Test dictionary_has_tag"""
        assert dictionary_has_tag(0x00100010)
        assert not dictionary_has_tag(0x00090010)
        assert not dictionary_has_tag(0x99991111)

    def test_tag_for_keyword(self):
        """Test tag_for_keyword"""
        assert tag_for_keyword('PatientName') == 0x00100010
        assert tag_for_keyword('PixelData') == 0x7FE00010
        assert tag_for_keyword('NotAKeyword') is None
        assert keyword_for_tag(tag_for_keyword('BitsStored')) == 'BitsStored'
