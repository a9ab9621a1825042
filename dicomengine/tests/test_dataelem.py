# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Unit tests for the dicomengine.dataelem module."""

import logging

import pytest

from dicomengine.dataelem import (
    DataElement, RawDataElement, DataElement_from_raw, correct_ambiguous_VR,
    empty_value_for_VR
)
from dicomengine.dataset import Dataset
from dicomengine.errors import VrMismatchError
from dicomengine.sequence import Sequence
from dicomengine.tag import Tag
from dicomengine.uid import UID
from dicomengine.valuerep import DSfloat, IS


class TestDataElement:
    """Tests for dataelem.DataElement."""
    def test_backslash(self):
        """DataElement: Passing string with '\\' sets multi-value data_element
        """
        elem = DataElement(0x00080008, 'CS', 'ORIGINAL\\PRIMARY')
        assert elem.value == ['ORIGINAL', 'PRIMARY']
        assert elem.VM == 2

    def test_backslash_single_value_vr(self):
        """Test a backslash isn't a delimiter for LT, ST, UT and UR"""
        elem = DataElement(0x00204000, 'LT', 'C:\\temp')
        assert elem.value == 'C:\\temp'
        assert elem.VM == 1

    def test_single_item_list(self):
        """Test a list with a single value is unwrapped"""
        elem = DataElement(0x00100020, 'LO', ['12345'])
        assert elem.value == '12345'

    def test_number_conversion(self):
        """Test IS, DS, UI and AT values are converted"""
        elem = DataElement(0x00200013, 'IS', '12')
        assert isinstance(elem.value, IS)
        assert elem.value == 12

        elem = DataElement(0x00281053, 'DS', ['1.5', '2'])
        assert all(isinstance(v, DSfloat) for v in elem.value)
        assert elem.value == [1.5, 2.0]

        elem = DataElement(0x00080018, 'UI', '1.2.3')
        assert isinstance(elem.value, UID)

        elem = DataElement(0x00209165, 'AT', 0x00100010)
        assert elem.value == Tag(0x00100010)

    def test_bytes_for_ascii_vr(self):
        """Test bytes are decoded for default repertoire VRs"""
        elem = DataElement(0x00080060, 'CS', b'CT')
        assert elem.value == 'CT'

    def test_empty_values(self):
        """Test the empty value for each kind of VR"""
        assert DataElement(0x00100010, 'PN', None).value == ''
        assert DataElement(0x00200013, 'IS', '').value is None
        assert DataElement(0x00281053, 'DS', None).value is None
        assert DataElement(0x7FE00010, 'OB', None).value == b''
        assert DataElement(0x00081140, 'SQ', None).value == Sequence()
        assert DataElement(0x00280010, 'US', []).value is None
        assert empty_value_for_VR('OB or OW') == b''
        assert empty_value_for_VR('FD') is None

    def test_vm(self):
        """Test the value multiplicity"""
        assert DataElement(0x00100010, 'PN', '').VM == 0
        assert DataElement(0x00100010, 'PN', 'DOE^JOHN').VM == 1
        assert DataElement(0x00280010, 'US', 4).VM == 1
        assert DataElement(0x00280030, 'DS', [0.5, 0.5]).VM == 2
        assert DataElement(0x00280010, 'US', None).VM == 0

    def test_is_empty_and_clear(self):
        """Test is_empty and clear"""
        elem = DataElement(0x00100010, 'PN', 'DOE^JOHN')
        assert not elem.is_empty
        elem.clear()
        assert elem.is_empty
        assert elem.value == ''

    def test_equality(self):
        """DataElement: equality returns correct value"""
        dd = DataElement(0x00100010, 'PN', 'ANON')
        assert dd == dd
        ee = DataElement(0x00100010, 'PN', 'ANON')
        assert dd == ee

        # Check value
        ee.value = 'ANAN'
        assert not dd == ee

        # Check VR
        ee = DataElement(0x00100010, 'SH', 'ANON')
        assert not dd == ee
        assert dd != ee

        # Check Tag
        ee = DataElement(0x00100011, 'PN', 'ANON')
        assert not dd == ee

        # Check non-DataElement
        assert not dd == {'a': 1}

    def test_inequality_sequence(self):
        """Test DataElement.__ne__ for sequence element"""
        item = Dataset()
        item.PatientName = 'ANON'
        dd = DataElement(0x300A00B0, 'SQ', [item])
        ee = DataElement(0x300A00B0, 'SQ', [item])
        assert not dd != ee

        other = Dataset()
        other.PatientName = 'ANONY'
        ee.value = [other]
        assert dd != ee

    def test_hash(self):
        """Test hash(DataElement) raises TypeError"""
        with pytest.raises(TypeError, match=r"unhashable"):
            hash(DataElement(0x00100010, 'PN', 'ANONYMOUS'))

    def test_keyword_and_name(self):
        """Test the dictionary derived properties"""
        elem = DataElement(0x00100010, 'PN', 'DOE^JOHN')
        assert elem.keyword == 'PatientName'
        assert elem.name == "Patient's Name"
        assert elem.dictionary_VR == 'PN'
        assert not elem.is_private
        assert not elem.is_retired

        private = DataElement(0x00091001, 'LO', 'secret')
        assert private.keyword == ''
        assert private.name == 'Private tag data'
        assert private.is_private
        assert private.dictionary_VR is None

        creator = DataElement(0x00090010, 'LO', 'ACME')
        assert creator.name == 'Private Creator'

    def test_str_and_repval(self):
        """Test the string representation"""
        elem = DataElement(0x00100010, 'PN', 'DOE^JOHN')
        assert "(0010, 0010) Patient's Name" in str(elem)
        assert "PN: 'DOE^JOHN'" in str(elem)

        elem = DataElement(0x7FE00010, 'OB', b'\x00' * 32)
        assert elem.repval == 'Array of 32 elements'

        elem = DataElement(0x00020010, 'UI', '1.2.840.10008.1.2.1')
        assert elem.repval == 'Explicit VR Little Endian'

    def test_getitem(self):
        """Test indexing the value"""
        elem = DataElement(0x00080008, 'CS', ['ORIGINAL', 'PRIMARY'])
        assert elem[1] == 'PRIMARY'

        elem = DataElement(0x00280010, 'US', 4)
        with pytest.raises(TypeError, match=r"unscriptable"):
            elem[0]


class TestTypedAccessors:
    """Tests for the typed value accessors."""
    def test_as_str(self):
        """Test as_str joins multiple values"""
        elem = DataElement(0x00080008, 'CS', ['ORIGINAL', 'PRIMARY'])
        assert elem.as_str() == 'ORIGINAL\\PRIMARY'
        assert elem.as_strings() == ['ORIGINAL', 'PRIMARY']
        assert DataElement(0x00100010, 'PN', '').as_strings() == []

    def test_as_int(self):
        """Test as_int returns the first value"""
        assert DataElement(0x00280010, 'US', 512).as_int() == 512
        assert DataElement(0x00200013, 'IS', '7').as_int() == 7
        assert DataElement(0x00280010, 'US', None).as_int() is None

    def test_as_float(self):
        """Test as_float accepts integer and decimal VRs"""
        assert DataElement(0x00281053, 'DS', '1.5').as_float() == 1.5
        assert DataElement(0x00280010, 'US', 4).as_float() == 4.0

    def test_as_bytes_and_sequence(self):
        """Test as_bytes and as_sequence"""
        elem = DataElement(0x7FE00010, 'OB', b'\x00\x01')
        assert elem.as_bytes() == b'\x00\x01'

        seq = DataElement(0x00081140, 'SQ', [Dataset()])
        assert len(seq.as_sequence()) == 1

    def test_mismatch_raises(self):
        """Test a VR mismatch raises VrMismatchError"""
        with pytest.raises(VrMismatchError, match=r"as int"):
            DataElement(0x00100010, 'PN', 'DOE^JOHN').as_int()

        with pytest.raises(VrMismatchError) as exc:
            DataElement(0x00280010, 'US', 4).as_str()

        assert exc.value.tag == 0x00280010
        assert exc.value.VR == 'US'

        with pytest.raises(VrMismatchError):
            DataElement(0x00100010, 'PN', 'A').as_bytes()

        with pytest.raises(VrMismatchError):
            DataElement(0x00100010, 'PN', 'A').as_sequence()

        with pytest.raises(VrMismatchError):
            DataElement(0x00100010, 'PN', 'A').as_float()


class TestJSON:
    """Tests for DataElement.to_json_dict."""
    def test_person_name(self):
        """Test PN values use the component group names"""
        elem = DataElement(0x00100010, 'PN', 'Yamada^Tarou=山田^太郎')
        assert elem.to_json_dict() == {
            'vr': 'PN',
            'Value': [{'Alphabetic': 'Yamada^Tarou', 'Ideographic': '山田^太郎'}]
        }

    def test_numbers(self):
        """Test IS and DS values are JSON numbers"""
        assert DataElement(0x00200013, 'IS', '7').to_json_dict() == {
            'vr': 'IS', 'Value': [7]
        }
        assert DataElement(0x00281053, 'DS', '1.5').to_json_dict() == {
            'vr': 'DS', 'Value': [1.5]
        }

    def test_binary(self):
        """Test binary values are base64 encoded"""
        elem = DataElement(0x7FE00010, 'OB', b'\x00\x01\x02\x03')
        assert elem.to_json_dict() == {'vr': 'OB', 'InlineBinary': 'AAECAw=='}

    def test_tag_and_empty(self):
        """Test AT values and empty values"""
        elem = DataElement(0x00209165, 'AT', [0x00100010, 0x7FE00010])
        assert elem.to_json_dict()['Value'] == ['00100010', '7FE00010']
        assert DataElement(0x00100010, 'PN', '').to_json_dict() == {'vr': 'PN'}

    def test_sequence(self):
        """Test sequence items are nested datasets"""
        item = Dataset()
        item.ReferencedSOPInstanceUID = '1.2.3'
        elem = DataElement(0x00081140, 'SQ', [item])
        assert elem.to_json_dict() == {
            'vr': 'SQ',
            'Value': [{'00081155': {'vr': 'UI', 'Value': ['1.2.3']}}]
        }


class TestRawDataElement:
    """Tests for DataElement_from_raw."""
    def test_known_implicit(self):
        """Test the VR of implicit elements comes from the dictionary"""
        raw = RawDataElement(
            Tag(0x00100010), None, 4, b'DOE ', 0, True, True
        )
        elem = DataElement_from_raw(raw)
        assert elem.VR == 'PN'
        assert elem.value == 'DOE'

    def test_unknown_implicit(self):
        """Test an unknown implicit element becomes UN"""
        raw = RawDataElement(
            Tag(0x00091001), None, 2, b'\x01\x02', 0, True, True
        )
        elem = DataElement_from_raw(raw)
        assert elem.VR == 'UN'
        assert elem.value == b'\x01\x02'

    def test_ambiguous_VR(self):
        """Test ambiguous dictionary VRs are resolved"""
        assert correct_ambiguous_VR('OB or OW', None) == 'OW'
        assert correct_ambiguous_VR('OB or OW', None, 8) == 'OB'
        assert correct_ambiguous_VR('OB or OW', None, 16) == 'OW'
        assert correct_ambiguous_VR('US or OW', None, 8) == 'OW'
        assert correct_ambiguous_VR('US or SS', 1) == 'SS'
        assert correct_ambiguous_VR('US or SS', 0) == 'US'
        assert correct_ambiguous_VR('PN', 0) == 'PN'

        raw = RawDataElement(
            Tag(0x00283002), None, 6, b'\x00\x01\x00\x00\x10\x00', 0, True,
            True
        )
        elem = DataElement_from_raw(raw, pixel_representation=1)
        assert elem.VR == 'SS'

    def test_invalid_value_becomes_UN(self, caplog):
        """Test a value that can't be decoded becomes UN"""
        raw = RawDataElement(
            Tag(0x00280010), 'US', 3, b'\x01\x02\x03', 0, False, True
        )
        with caplog.at_level(logging.WARNING, logger='dicomengine'):
            elem = DataElement_from_raw(raw)

        assert elem.VR == 'UN'
        assert elem.value == b'\x01\x02\x03'
        assert "changed to 'UN'" in caplog.text

    def test_undefined_length(self):
        """Test the undefined length flag is kept"""
        raw = RawDataElement(
            Tag(0x00091001), 'UN', 0xFFFFFFFF, b'', 0, False, True
        )
        assert DataElement_from_raw(raw).is_undefined_length
