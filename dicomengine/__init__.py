# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine package -- parse, de-identify, convert and validate DICOM
data. See Quick Start below.

-----------
Quick Start
-----------

1. Parse a DICOM file, anonymize it and encode the result::

    from dicomengine import parse, anonymize, serialize
    with open("file1.dcm", "rb") as f:
        ds = parse(f.read())
    anonymized = anonymize(ds, profile="full")
    data = serialize(anonymized)

2. Render the pixel data as a PNG image::

    from dicomengine import convert
    result = convert(ds, "png", window_center=40, window_width=400)

3. Validate a dataset and inspect the findings::

    from dicomengine import validate
    report = validate(ds, level="strict")
    print(report.to_dict())

4. Learn the methods of the Dataset class; that is the one you will work with
   most directly.
"""

from dicomengine.anonymizer import AnonymizationRule, Anonymizer, anonymize
from dicomengine.converter import ConversionResult, convert, pixel_array
from dicomengine.dataelem import DataElement
from dicomengine.dataset import Dataset, FileMetaDataset
from dicomengine.errors import (
    ConversionError, DicomEngineError, MalformedSequenceError, NotDicomError,
    RuleValueError, TruncatedDataError, UnsupportedTransferSyntaxError,
    VrMismatchError
)
from dicomengine.filereader import dcmread, parse
from dicomengine.filewriter import dcmwrite, serialize
from dicomengine.metadata import extract_metadata
from dicomengine.sequence import Sequence
from dicomengine.tag import Tag
from dicomengine.validator import (
    ValidationFinding, ValidationReport, validate, validate_bytes
)

from ._version import __version__, __version_info__, __dicom_version__

__all__ = [
    "AnonymizationRule",
    "Anonymizer",
    "ConversionError",
    "ConversionResult",
    "DataElement",
    "Dataset",
    "DicomEngineError",
    "FileMetaDataset",
    "MalformedSequenceError",
    "NotDicomError",
    "RuleValueError",
    "Sequence",
    "Tag",
    "TruncatedDataError",
    "UnsupportedTransferSyntaxError",
    "ValidationFinding",
    "ValidationReport",
    "VrMismatchError",
    "anonymize",
    "convert",
    "dcmread",
    "dcmwrite",
    "extract_metadata",
    "parse",
    "pixel_array",
    "serialize",
    "validate",
    "validate_bytes",
    "__version__",
    "__version_info__",
    "__dicom_version__",
]
