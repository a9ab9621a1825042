# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Unit tests for the Native DICOM Model XML representation."""

import xml.etree.ElementTree as ET

from dicomengine.dataelem import DataElement
from dicomengine.dataset import Dataset
from dicomengine.xmlrep import (
    data_element_to_xml, dataset_to_xml, dataset_to_xml_bytes
)


def attribute_for(data_element):
    return data_element_to_xml(ET.Element('NativeDicomModel'), data_element)


class TestDataElementToXML:
    """Tests for data_element_to_xml()"""
    def test_attributes(self):
        """Test the tag, VR and keyword attributes"""
        attribute = attribute_for(DataElement(0x00080060, 'CS', 'CT'))
        assert attribute.tag == 'DicomAttribute'
        assert attribute.attrib == {
            'tag': '00080060', 'vr': 'CS', 'keyword': 'Modality'
        }
        value = attribute.find('Value')
        assert value.get('number') == '1'
        assert value.text == 'CT'

    def test_private(self):
        """Test elements without a keyword have no keyword attribute"""
        attribute = attribute_for(DataElement(0x00091001, 'LO', 'secret'))
        assert 'keyword' not in attribute.attrib
        assert attribute.get('tag') == '00091001'

    def test_multi_value(self):
        """Test each value is numbered"""
        attribute = attribute_for(
            DataElement(0x00281050, 'DS', ['40', '50.5'])
        )
        values = attribute.findall('Value')
        assert [v.get('number') for v in values] == ['1', '2']
        assert [v.text for v in values] == ['40', '50.5']

    def test_empty(self):
        """Test an empty element has no values"""
        attribute = attribute_for(DataElement(0x00100010, 'PN', ''))
        assert len(attribute) == 0

    def test_person_name(self):
        """Test PN values use the PersonName structure"""
        attribute = attribute_for(
            DataElement(0x00100010, 'PN', 'Yamada^Tarou=山田^太郎')
        )
        person_name = attribute.find('PersonName')
        assert person_name.get('number') == '1'
        alphabetic = person_name.find('Alphabetic')
        assert alphabetic.find('FamilyName').text == 'Yamada'
        assert alphabetic.find('GivenName').text == 'Tarou'
        assert alphabetic.find('MiddleName') is None
        ideographic = person_name.find('Ideographic')
        assert ideographic.find('FamilyName').text == '山田'
        assert person_name.find('Phonetic') is None

    def test_binary(self):
        """Test binary values are inline base64"""
        attribute = attribute_for(
            DataElement(0x7FE00010, 'OB', b'\x00\x01\x02\x03')
        )
        assert attribute.find('InlineBinary').text == 'AAECAw=='
        assert attribute.find('Value') is None

    def test_tag(self):
        """Test AT values are hex strings"""
        attribute = attribute_for(DataElement(0x00209165, 'AT', 0x00100010))
        assert attribute.find('Value').text == '00100010'

    def test_sequence(self):
        """Test sequence items are numbered Item elements"""
        item = Dataset()
        item.ReferencedSOPInstanceUID = '1.2.3'
        ds = Dataset()
        ds.ReferencedImageSequence = [item, Dataset()]
        attribute = attribute_for(ds['ReferencedImageSequence'])
        items = attribute.findall('Item')
        assert [i.get('number') for i in items] == ['1', '2']
        nested = items[0].find('DicomAttribute')
        assert nested.get('keyword') == 'ReferencedSOPInstanceUID'
        assert nested.find('Value').text == '1.2.3'
        assert len(items[1]) == 0


class TestDatasetToXML:
    """Tests for dataset_to_xml() and dataset_to_xml_bytes()"""
    def test_root(self, ct_dataset):
        """Test the root element holds the elements in tag order"""
        root = dataset_to_xml(ct_dataset)
        assert root.tag == 'NativeDicomModel'
        tags = [a.get('tag') for a in root.findall('DicomAttribute')]
        assert tags == [format(elem.tag, '08X') for elem in ct_dataset]

    def test_parent(self):
        """Test adding to an existing element"""
        parent = ET.Element('Item')
        ds = Dataset()
        ds.Modality = 'MR'
        assert dataset_to_xml(ds, parent) is parent
        assert parent.find('DicomAttribute').get('keyword') == 'Modality'

    def test_bytes(self, ct_dataset):
        """Test the encoded document"""
        data = dataset_to_xml_bytes(ct_dataset)
        assert data.startswith(b"<?xml version='1.0' encoding='utf-8'?>")
        root = ET.fromstring(data)
        attribute = root.find("DicomAttribute[@keyword='PatientName']")
        assert attribute.find('PersonName/Alphabetic/FamilyName').text == (
            'DOE'
        )

    def test_empty_dataset(self):
        """Test an empty dataset gives an empty root element"""
        root = ET.fromstring(dataset_to_xml_bytes(Dataset()))
        assert root.tag == 'NativeDicomModel'
        assert len(root) == 0
