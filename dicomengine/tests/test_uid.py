# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Test suite for uid.py"""

import pytest

from dicomengine.uid import (
    UID, generate_uid, DICOMENGINE_ROOT_UID, DICOMENGINE_IMPLEMENTATION_UID,
    ImplicitVRLittleEndian, ExplicitVRLittleEndian, ExplicitVRBigEndian,
    DeflatedExplicitVRLittleEndian, JPEGBaseline8Bit, RLELossless,
    CTImageStorage, AllTransferSyntaxes, UncompressedTransferSyntaxes
)


class TestGenerateUID:
    def test_generate_uid(self):
        """Test UID generator"""
        # Test standard UID generation with dicomengine prefix
        uid = generate_uid()
        assert uid[:len(DICOMENGINE_ROOT_UID)] == DICOMENGINE_ROOT_UID
        assert len(uid) <= 64
        assert uid.is_valid

        # Test standard UID generation with no prefix
        uid = generate_uid(None)
        assert uid[:5] == '2.25.'
        assert uid.is_valid

        # Test invalid UID prefixes
        for invalid_prefix in (('1' * 63) + '.', '', '.', '1', '1.2',
                               '1.2..3.', '1.a.2.', '1.01.1.'):
            with pytest.raises(ValueError):
                generate_uid(prefix=invalid_prefix)

        # Test some valid prefixes and make sure they survive
        for valid_prefix in ('0.', '1.', '1.23.', '1.0.23.',
                             ('1' * 62) + '.', '1.2.3.444444.'):
            uid = generate_uid(prefix=valid_prefix)
            assert uid[:len(valid_prefix)] == valid_prefix
            assert len(uid) <= 64

    def test_entropy_src(self):
        """Test UID generator with entropy_src args"""
        uid = generate_uid(entropy_srcs=['lorem', 'ipsum'])
        assert uid == generate_uid(entropy_srcs=['lorem', 'ipsum'])
        assert uid != generate_uid(entropy_srcs=['lorem', 'dolor'])
        assert uid.is_valid

    def test_roots(self):
        """Test the root and implementation UIDs"""
        assert DICOMENGINE_ROOT_UID.startswith('2.25.')
        assert DICOMENGINE_ROOT_UID.endswith('.')
        assert UID(DICOMENGINE_IMPLEMENTATION_UID).is_valid


class TestUID:
    """Test DICOM UIDs"""
    def test_equality(self):
        """Test that UID.__eq__ works."""
        assert UID('1.2.840.10008.1.2') == ImplicitVRLittleEndian
        assert UID('1.2.840.10008.1.2') == '1.2.840.10008.1.2'
        assert UID('1.2.3') != '1.2.4'

    def test_padding_stripped(self):
        """Test trailing padding is removed"""
        assert UID('1.2.3\x00') == '1.2.3'
        assert UID(' 1.2.3 ') == '1.2.3'

    def test_non_str_raises(self):
        """Test a UID can only be created from str"""
        with pytest.raises(TypeError, match=r"from a string"):
            UID(123)

    def test_transfer_syntax_properties(self):
        """Test the transfer syntax properties"""
        assert ImplicitVRLittleEndian.is_implicit_VR
        assert ImplicitVRLittleEndian.is_little_endian
        assert not ExplicitVRLittleEndian.is_implicit_VR
        assert not ExplicitVRBigEndian.is_little_endian
        assert DeflatedExplicitVRLittleEndian.is_deflated
        assert not ExplicitVRLittleEndian.is_deflated
        assert JPEGBaseline8Bit.is_compressed
        assert RLELossless.is_encapsulated
        assert not ExplicitVRBigEndian.is_compressed

    def test_not_transfer_syntax(self):
        """Test the transfer syntax properties raise for other UIDs"""
        assert not CTImageStorage.is_transfer_syntax
        for prop in ('is_implicit_VR', 'is_little_endian', 'is_deflated',
                     'is_compressed', 'is_encapsulated'):
            with pytest.raises(ValueError, match=r"not a transfer syntax"):
                getattr(CTImageStorage, prop)

    def test_private(self):
        """Test private UIDs are never transfer syntaxes"""
        uid = UID('1.2.3.4')
        assert uid.is_private
        assert not uid.is_transfer_syntax
        assert not ImplicitVRLittleEndian.is_private

    def test_dictionary_properties(self):
        """Test the properties from the UID dictionary"""
        assert CTImageStorage.name == 'CT Image Storage'
        assert CTImageStorage.keyword == 'CTImageStorage'
        assert CTImageStorage.type == 'SOP Class'
        assert UID('1.2.3').name == '1.2.3'
        assert UID('1.2.3').keyword == ''
        assert UID('1.2.3').type == ''

    def test_is_valid(self):
        """Test UID.is_valid"""
        assert UID('1.2.840.10008.1.2').is_valid
        assert not UID('1.2.04').is_valid
        assert not UID('1.2.a').is_valid
        assert not UID('1.' * 32 + '1').is_valid

    def test_transfer_syntax_lists(self):
        """Test the transfer syntax groupings"""
        assert ExplicitVRBigEndian in UncompressedTransferSyntaxes
        assert RLELossless in AllTransferSyntaxes
        assert all(uid.is_transfer_syntax for uid in AllTransferSyntaxes)
