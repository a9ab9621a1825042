# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Fixtures used in different tests."""

import logging

import pytest

from dicomengine import config
from dicomengine.dataset import Dataset
from dicomengine.filereader import parse
from dicomengine.filewriter import serialize
from dicomengine.uid import CTImageStorage


SOP_INSTANCE_UID = '1.2.826.0.1.3680043.8.498.1'
STUDY_INSTANCE_UID = '1.2.826.0.1.3680043.8.498.2'
SERIES_INSTANCE_UID = '1.2.826.0.1.3680043.8.498.3'


@pytest.fixture(autouse=True)
def default_config():
    """Restore the package configuration after each test."""
    level = config.logger.level
    config.reset()
    yield
    config.reset()
    config.logger.setLevel(level)


@pytest.fixture
def ct_dataset():
    """Return a small 8-bit CT image without file meta information."""
    ds = Dataset()
    ds.SpecificCharacterSet = 'ISO_IR 100'
    ds.ImageType = ['ORIGINAL', 'PRIMARY', 'AXIAL']
    ds.SOPClassUID = CTImageStorage
    ds.SOPInstanceUID = SOP_INSTANCE_UID
    ds.StudyDate = '20240101'
    ds.Modality = 'CT'
    ds.InstitutionName = 'General Hospital'
    ds.ReferringPhysicianName = 'WHO^DOCTOR'
    ds.PatientName = 'DOE^JOHN'
    ds.PatientID = '12345'
    ds.PatientBirthDate = '19700101'
    ds.PatientSex = 'M'
    ds.StudyInstanceUID = STUDY_INSTANCE_UID
    ds.SeriesInstanceUID = SERIES_INSTANCE_UID
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = 'MONOCHROME2'
    ds.Rows = 4
    ds.Columns = 4
    ds.BitsAllocated = 8
    ds.BitsStored = 8
    ds.HighBit = 7
    ds.PixelRepresentation = 0
    ds.RescaleIntercept = 0
    ds.RescaleSlope = 1
    ds.PixelData = bytes(range(16))

    return ds


@pytest.fixture
def ct_bytes(ct_dataset):
    """Return the encoded Part 10 file of the CT image."""
    return serialize(ct_dataset)


@pytest.fixture
def multi_valued_syntax_bytes(ct_bytes):
    """Return the CT image with a two valued (0002,0010) Transfer Syntax
    UID of the same length.
    """
    data = ct_bytes.replace(
        b'1.2.840.10008.1.2.1\x00', b'1.2.840.10008.1.2\\1\x00', 1
    )
    assert data != ct_bytes
    return data


@pytest.fixture
def ct_file(ct_bytes):
    """Return the CT image as read from its encoded file."""
    return parse(ct_bytes)


@pytest.fixture
def ct_path(tmp_path, ct_bytes):
    """Return the path to the CT image written to a file."""
    path = tmp_path / 'ct.dcm'
    path.write_bytes(ct_bytes)
    return path


@pytest.fixture
def private_dataset(ct_dataset):
    """Return the CT image with a private block added."""
    ct_dataset.add_new(0x00090010, 'LO', 'ACME')
    ct_dataset.add_new(0x00091001, 'LO', 'secret')
    return ct_dataset


@pytest.fixture
def debug_logging():
    """Capture the debug output of the package logger."""
    config.debug(True, default_handler=False)
    yield
    config.debug(False, default_handler=False)
    config.logger.setLevel(logging.WARNING)
