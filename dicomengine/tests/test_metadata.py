# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Unit tests for the dicomengine.metadata module."""

import base64
import json
import logging

from dicomengine.dataelem import DataElement
from dicomengine.dataset import Dataset, FileMetaDataset
from dicomengine.metadata import (
    extract_metadata, element_value, metadata_key, parse_include_fields
)
from dicomengine.tag import Tag
from dicomengine.uid import ExplicitVRLittleEndian


class TestMetadataKey:
    """Tests for metadata_key()"""
    def test_keyword(self):
        """Test the keyword is used for known elements"""
        elem = DataElement(0x00100010, 'PN', 'DOE^JOHN')
        assert metadata_key(elem) == 'PatientName'

    def test_private(self):
        """Test the tag is used for elements without a keyword"""
        elem = DataElement(0x00091001, 'LO', 'secret')
        assert metadata_key(elem) == '(0009,1001)'


class TestElementValue:
    """Tests for element_value()"""
    def test_numbers(self):
        """Test number strings are returned as numbers"""
        assert element_value(DataElement(0x00281052, 'DS', '-1024')) == (
            -1024.0
        )
        assert element_value(DataElement(0x00200013, 'IS', '7')) == 7
        value = element_value(DataElement(0x00281050, 'DS', ['40', '50']))
        assert value == [40.0, 50.0]
        assert all(isinstance(v, float) for v in value)

    def test_strings(self):
        """Test text values are plain strings"""
        elem = DataElement(0x00080008, 'CS', ['ORIGINAL', 'PRIMARY'])
        assert element_value(elem) == ['ORIGINAL', 'PRIMARY']
        assert type(element_value(DataElement(0x00100010, 'PN', 'A^B'))) is str

    def test_binary(self):
        """Test binary values are base64 encoded"""
        elem = DataElement(0x7FE00010, 'OB', b'\x00\x01\x02\x03')
        assert element_value(elem) == base64.b64encode(
            b'\x00\x01\x02\x03'
        ).decode('ascii')
        assert element_value(DataElement(0x7FE00010, 'OB', b'')) is None

    def test_tag(self):
        """Test AT values are hex strings"""
        elem = DataElement(0x00209165, 'AT', 0x00100010)
        assert element_value(elem) == '00100010'

    def test_sequence(self):
        """Test sequences are lists of dicts"""
        item = Dataset()
        item.ReferencedSOPInstanceUID = '1.2.3'
        ds = Dataset()
        ds.ReferencedImageSequence = [item]
        assert element_value(ds['ReferencedImageSequence']) == [
            {'ReferencedSOPInstanceUID': '1.2.3'}
        ]

    def test_empty(self):
        """Test empty values"""
        assert element_value(DataElement(0x00100010, 'PN', '')) == ''
        assert element_value(DataElement(0x00281052, 'DS', None)) is None


class TestParseIncludeFields:
    """Tests for parse_include_fields()"""
    def test_empty(self):
        """Test no fields gives an empty list"""
        assert parse_include_fields(None) == []
        assert parse_include_fields('') == []
        assert parse_include_fields([]) == []

    def test_string(self):
        """Test a comma-separated string of keywords and tags"""
        tags = parse_include_fields('PatientName, 0x00080060,,00100020')
        assert tags == [Tag(0x00100010), Tag(0x00080060), Tag(0x00100020)]

    def test_list(self):
        """Test a list of keywords and ints"""
        tags = parse_include_fields(['Modality', 0x00100010])
        assert tags == [Tag(0x00080060), Tag(0x00100010)]

    def test_unknown(self, caplog):
        """Test unknown fields are logged and ignored"""
        with caplog.at_level(logging.WARNING, logger='dicomengine'):
            tags = parse_include_fields('PatientName,NotAKeyword')

        assert tags == [Tag(0x00100010)]
        assert "Ignoring the unknown metadata field 'NotAKeyword'" in (
            caplog.text
        )


class TestExtractMetadata:
    """Tests for extract_metadata()"""
    def test_all(self, ct_dataset):
        """Test all elements are extracted without the pixel data"""
        metadata = extract_metadata(ct_dataset)
        assert metadata['PatientName'] == 'DOE^JOHN'
        assert metadata['PatientID'] == '12345'
        assert metadata['Rows'] == 4
        assert metadata['ImageType'] == ['ORIGINAL', 'PRIMARY', 'AXIAL']
        assert metadata['RescaleSlope'] == 1.0
        assert 'PixelData' not in metadata
        assert list(metadata) == [
            elem.keyword for elem in ct_dataset if elem.keyword != 'PixelData'
        ]

    def test_json_serialisable(self, private_dataset):
        """Test the extracted values only use JSON types"""
        metadata = extract_metadata(private_dataset, include_pixel_data=True)
        decoded = json.loads(json.dumps(metadata))
        assert decoded['(0009,1001)'] == 'secret'
        assert base64.b64decode(decoded['PixelData']) == bytes(range(16))

    def test_include_fields(self, ct_dataset):
        """Test only the named elements are extracted in tag order"""
        metadata = extract_metadata(ct_dataset, 'PatientID,Modality')
        assert metadata == {'Modality': 'CT', 'PatientID': '12345'}
        assert list(metadata) == ['Modality', 'PatientID']

    def test_missing_fields(self, ct_dataset):
        """Test fields missing from the dataset are skipped"""
        metadata = extract_metadata(ct_dataset, ['PatientID', 'PatientAge'])
        assert metadata == {'PatientID': '12345'}

    def test_file_meta(self, ct_file):
        """Test file meta elements are only extracted when named"""
        assert 'TransferSyntaxUID' not in extract_metadata(ct_file)
        metadata = extract_metadata(ct_file, 'TransferSyntaxUID,Modality')
        assert metadata == {
            'TransferSyntaxUID': ExplicitVRLittleEndian, 'Modality': 'CT'
        }

    def test_no_file_meta(self, ct_dataset):
        """Test naming file meta elements without file meta"""
        assert extract_metadata(ct_dataset, 'TransferSyntaxUID') == {}
        ct_dataset.file_meta = FileMetaDataset()
        assert extract_metadata(ct_dataset, 'TransferSyntaxUID') == {}

    def test_pixel_data_named(self, ct_dataset):
        """Test the pixel data needs include_pixel_data even when named"""
        assert extract_metadata(ct_dataset, 'PixelData') == {}
        metadata = extract_metadata(
            ct_dataset, 'PixelData', include_pixel_data=True
        )
        assert list(metadata) == ['PixelData']

    def test_empty_dataset(self):
        """Test an empty dataset"""
        assert extract_metadata(Dataset()) == {}
