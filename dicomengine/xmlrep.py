# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Methods for converting Datasets and DataElements to the Native DICOM
Model XML representation described in the DICOM Standard, Part 19,
Annex A.
"""

import base64
import xml.etree.ElementTree as ET

from dicomengine.jsonrep import BINARY_VR_VALUES, PN_COMPONENT_GROUPS


# The components of a PN component group, in order
PN_COMPONENTS = (
    'FamilyName', 'GivenName', 'MiddleName', 'NamePrefix', 'NameSuffix'
)


def _add_person_name(parent, number, value):
    person_name = ET.SubElement(
        parent, 'PersonName', {'number': str(number)}
    )
    for group_name, group in zip(PN_COMPONENT_GROUPS, value.split('=')):
        if not group:
            continue
        group_elem = ET.SubElement(person_name, group_name)
        for name, component in zip(PN_COMPONENTS, group.split('^')):
            if component:
                ET.SubElement(group_elem, name).text = component


def data_element_to_xml(parent, data_element):
    """Append the ``DicomAttribute`` XML element for `data_element` to
    `parent` and return it.
    """
    attrib = {
        'tag': format(data_element.tag, '08X'),
        'vr': data_element.VR,
    }
    keyword = data_element.keyword
    if keyword:
        attrib['keyword'] = keyword

    attribute = ET.SubElement(parent, 'DicomAttribute', attrib)
    if data_element.is_empty:
        return attribute

    VR = data_element.VR
    if VR == 'SQ':
        for number, item in enumerate(data_element.value, start=1):
            item_elem = ET.SubElement(
                attribute, 'Item', {'number': str(number)}
            )
            dataset_to_xml(item, item_elem)
    elif VR in BINARY_VR_VALUES:
        ET.SubElement(attribute, 'InlineBinary').text = (
            base64.b64encode(data_element.value).decode('ascii')
        )
    else:
        values = data_element.value
        if not isinstance(values, list):
            values = [values]
        for number, value in enumerate(values, start=1):
            if VR == 'PN':
                _add_person_name(attribute, number, str(value))
                continue
            if VR == 'AT':
                text = format(value, '08X')
            else:
                text = str(value)
            ET.SubElement(
                attribute, 'Value', {'number': str(number)}
            ).text = text

    return attribute


def dataset_to_xml(dataset, parent=None):
    """Return the XML element tree root for `dataset`.

    Parameters
    ----------
    dataset : dataset.Dataset
        The dataset to convert.
    parent : xml.etree.ElementTree.Element, optional
        The element to add the ``DicomAttribute`` elements to. If not used
        then a new ``NativeDicomModel`` root element is created.

    Returns
    -------
    xml.etree.ElementTree.Element
        The element the dataset was added to.
    """
    if parent is None:
        parent = ET.Element(
            'NativeDicomModel', {'xml:space': 'preserve'}
        )

    for data_element in dataset:
        data_element_to_xml(parent, data_element)

    return parent


def dataset_to_xml_bytes(dataset):
    """Return `dataset` encoded as a UTF-8 Native DICOM Model document."""
    root = dataset_to_xml(dataset)
    return ET.tostring(root, encoding='utf-8', xml_declaration=True)
