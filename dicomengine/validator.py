# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Check datasets for conformance with the DICOM Standard.

There are three levels of validation, each one including all the checks of
the levels before it:

* ``'basic'``: the 'DICM' file signature, a supported (0002,0010)
  *Transfer Syntax UID* and a dataset that can be encoded again.
* ``'standard'``: a non-empty dataset, the required File Meta Information,
  matching SOP Class and Instance UIDs, the type 1 elements of the SOP
  Class and element VRs that match the data dictionary.
* ``'strict'``: value formats and lengths, enumerated values and no private
  elements other than those in the configured exceptions.

Failing a check is not an error, the findings are returned in a
:class:`ValidationReport`.
"""

import struct
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from dicomengine import config
from dicomengine.config import logger
from dicomengine.datadict import dictionary_has_tag, dictionary_VR
from dicomengine.dataelem import DataElement
from dicomengine.dataset import Dataset
from dicomengine.errors import DicomEngineError
from dicomengine.filereader import parse
from dicomengine.filewriter import serialize
from dicomengine.tag import BaseTag, Tag
from dicomengine.uid import (
    UID, AllTransferSyntaxes, CTImageStorage, ComputedRadiographyImageStorage,
    DigitalXRayImageStorageForPresentation, MRImageStorage,
    NuclearMedicineImageStorage, PositronEmissionTomographyImageStorage,
    SecondaryCaptureImageStorage, UltrasoundImageStorage
)
from dicomengine.valuerep import (
    INT_VR_RANGES, format_DS, string_VRs, validate_value
)


LEVELS = ('basic', 'standard', 'strict')

# Type 1 elements of every composite instance
_COMMON_TYPE_1 = (
    'SOPClassUID', 'SOPInstanceUID', 'StudyInstanceUID', 'SeriesInstanceUID',
    'Modality',
)

# Type 1 elements of the Image Pixel module
_IMAGE_PIXEL_TYPE_1 = (
    'SamplesPerPixel', 'PhotometricInterpretation', 'Rows', 'Columns',
    'BitsAllocated', 'BitsStored', 'HighBit', 'PixelRepresentation',
    'PixelData',
)

_IMAGE_TYPE_1 = _COMMON_TYPE_1 + _IMAGE_PIXEL_TYPE_1

# The type 1 elements of common storage SOP Classes
TYPE_1_ELEMENTS: Dict[str, tuple] = {
    ComputedRadiographyImageStorage: _IMAGE_TYPE_1,
    DigitalXRayImageStorageForPresentation: _IMAGE_TYPE_1 + ('ImageType', ),
    CTImageStorage: _IMAGE_TYPE_1 + (
        'ImageType', 'RescaleIntercept', 'RescaleSlope'
    ),
    MRImageStorage: _IMAGE_TYPE_1 + (
        'ImageType', 'ScanningSequence', 'SequenceVariant'
    ),
    UltrasoundImageStorage: _IMAGE_TYPE_1,
    SecondaryCaptureImageStorage: _IMAGE_TYPE_1 + ('ConversionType', ),
    NuclearMedicineImageStorage: _IMAGE_TYPE_1 + ('ImageType', ),
    PositronEmissionTomographyImageStorage: _IMAGE_TYPE_1 + ('ImageType', ),
}

ENUMERATED_VALUES: Dict[str, tuple] = {
    'PatientSex': ('M', 'F', 'O'),
    'PhotometricInterpretation': (
        'MONOCHROME1', 'MONOCHROME2', 'PALETTE COLOR', 'RGB', 'YBR_FULL',
        'YBR_FULL_422', 'YBR_PARTIAL_420', 'YBR_ICT', 'YBR_RCT',
    ),
    'PixelRepresentation': (0, 1),
    'BitsAllocated': (1, 8, 16, 32, 64),
    'SamplesPerPixel': (1, 3),
}
_ENUMERATED_TAGS = {Tag(kw): kw for kw in ENUMERATED_VALUES}

_PIXEL_DATA = BaseTag(0x7FE00010)


class ValidationFinding(NamedTuple):
    """A single validation error or warning."""
    message: str
    tag: Optional[BaseTag] = None

    def __str__(self) -> str:
        if self.tag is None:
            return self.message

        return f"{self.tag}: {self.message}"


class ValidationReport(NamedTuple):
    """The result of validating a dataset.

    Attributes
    ----------
    valid : bool
        ``True`` if there are no errors.
    errors : list of ValidationFinding
        The errors found, in the order they were found.
    warnings : list of ValidationFinding
        The warnings found, in the order they were found.
    level : str
        The validation level used.
    """
    valid: bool
    errors: List[ValidationFinding]
    warnings: List[ValidationFinding]
    level: str

    def to_dict(self) -> Dict[str, Any]:
        """Return the report as a :class:`dict` with JSON types."""
        return {
            'valid': self.valid,
            'errors': [str(finding) for finding in self.errors],
            'warnings': [str(finding) for finding in self.warnings],
            'level': self.level,
        }


class _Findings:
    def __init__(self) -> None:
        self.errors: List[ValidationFinding] = []
        self.warnings: List[ValidationFinding] = []

    def error(self, message: str, tag: Optional[BaseTag] = None) -> None:
        self.errors.append(ValidationFinding(message, tag))

    def warning(self, message: str, tag: Optional[BaseTag] = None) -> None:
        self.warnings.append(ValidationFinding(message, tag))


def _values(data_element: DataElement) -> List[Any]:
    if data_element.is_empty:
        return []
    if isinstance(data_element.value, list):
        return data_element.value

    return [data_element.value]


def _check_basic(ds: Dataset, findings: _Findings) -> None:
    if ds.preamble is None:
        findings.error("The dataset wasn't read from a DICOM file with the "
                       "'DICM' prefix")

    file_meta = ds.__dict__.get('file_meta') or Dataset()
    transfer_syntax = file_meta.get('TransferSyntaxUID')
    if not transfer_syntax:
        findings.error(
            "The File Meta Information has no Transfer Syntax UID",
            BaseTag(0x00020010)
        )
        return

    transfer_syntax = UID(transfer_syntax)
    if transfer_syntax not in AllTransferSyntaxes:
        findings.error(
            f"The transfer syntax '{transfer_syntax}' is not supported",
            BaseTag(0x00020010)
        )
        return

    if transfer_syntax.is_encapsulated and _PIXEL_DATA in ds:
        handlers = [
            h for h in config.pixel_data_handlers
            if h.supports_transfer_syntax(transfer_syntax)
        ]
        if not handlers:
            findings.warning(
                f"The pixel data compressed with '{transfer_syntax.name}' "
                "can't be decoded",
                _PIXEL_DATA
            )

    try:
        serialize(ds)
    except (DicomEngineError, ValueError, TypeError, OverflowError,
            struct.error) as exc:
        findings.error(f"The dataset can't be encoded: {exc}")


def _check_vr(data_element: DataElement, findings: _Findings) -> None:
    tag = data_element.tag
    if tag.is_private or tag.is_group_length or not dictionary_has_tag(tag):
        return

    expected = dictionary_VR(tag)
    if data_element.VR == 'UN':
        findings.warning(
            f"The VR is UN instead of the dictionary VR {expected}", tag
        )
    elif data_element.VR not in expected.split(' or '):
        findings.error(
            f"The VR {data_element.VR} doesn't match the dictionary VR "
            f"{expected}",
            tag
        )


def _check_standard(ds: Dataset, findings: _Findings) -> None:
    if len(ds) == 0:
        findings.error("The dataset contains no elements")
        return

    file_meta = ds.__dict__.get('file_meta') or Dataset()
    for keyword in ('MediaStorageSOPClassUID', 'MediaStorageSOPInstanceUID'):
        if not file_meta.get(keyword):
            findings.error(
                f"The File Meta Information is missing {keyword}",
                Tag(keyword)
            )
    for keyword in ('FileMetaInformationVersion', 'ImplementationClassUID'):
        if keyword not in file_meta:
            findings.warning(
                f"The File Meta Information is missing {keyword}",
                Tag(keyword)
            )

    pairs = (
        ('SOPClassUID', 'MediaStorageSOPClassUID'),
        ('SOPInstanceUID', 'MediaStorageSOPInstanceUID'),
    )
    for keyword, meta_keyword in pairs:
        value = ds.get(keyword)
        meta_value = file_meta.get(meta_keyword)
        if value and meta_value and value != meta_value:
            findings.error(
                f"{keyword} '{value}' doesn't match the {meta_keyword} "
                f"'{meta_value}'",
                Tag(keyword)
            )

    sop_class = ds.get('SOPClassUID')
    required = TYPE_1_ELEMENTS.get(sop_class, _COMMON_TYPE_1)
    if sop_class and sop_class not in TYPE_1_ELEMENTS:
        findings.warning(
            f"Only the common type 1 elements are checked for the SOP Class "
            f"'{UID(sop_class).name}'",
            BaseTag(0x00080016)
        )

    for keyword in required:
        tag = Tag(keyword)
        if tag not in ds:
            findings.error(f"The type 1 element {keyword} is missing", tag)
        elif ds[tag].is_empty:
            findings.error(f"The type 1 element {keyword} is empty", tag)

    ds.walk(lambda dataset, elem: _check_vr(elem, findings))


def _private_creator(dataset: Dataset, tag: BaseTag) -> Optional[str]:
    if tag.is_private_creator:
        creator_tag = tag
    else:
        creator_tag = BaseTag((tag.group << 16) | (tag.element >> 8))

    if creator_tag not in dataset:
        return None

    creator = dataset[creator_tag].value
    if isinstance(creator, bytes):
        creator = creator.decode('ascii', errors='replace')

    return str(creator).strip()


def _check_private(
    dataset: Dataset,
    data_element: DataElement,
    exceptions: Iterable[Union[int, str]],
    findings: _Findings
) -> None:
    tag = data_element.tag
    if tag.group in exceptions:
        return

    creator = _private_creator(dataset, tag)
    if creator is not None and creator in exceptions:
        return

    if tag.is_private_creator:
        message = f"The private creator '{creator}' is not allowed"
    elif creator is None:
        message = "The private element has no private creator"
    else:
        message = f"The private element of '{creator}' is not allowed"

    findings.error(message, tag)


def _check_value(data_element: DataElement, findings: _Findings) -> None:
    tag = data_element.tag
    VR = data_element.VR
    if VR not in string_VRs and VR not in INT_VR_RANGES:
        return

    for value in _values(data_element):
        if VR == 'DS' and isinstance(value, float):
            value = format_DS(value)
        elif VR in string_VRs:
            value = '' if value is None else str(value)
        valid, msg = validate_value(VR, value)
        if not valid:
            findings.error(msg, tag)

    keyword = _ENUMERATED_TAGS.get(tag)
    if keyword is None:
        return

    allowed = ENUMERATED_VALUES[keyword]
    for value in _values(data_element):
        if value not in allowed:
            findings.error(
                f"The value {value!r} of {keyword} is not one of "
                f"{', '.join(str(v) for v in allowed)}",
                tag
            )


def _check_strict(
    ds: Dataset,
    exceptions: Iterable[Union[int, str]],
    findings: _Findings
) -> None:
    def check(dataset, data_element):
        if data_element.tag.is_private:
            _check_private(dataset, data_element, exceptions, findings)
        else:
            _check_value(data_element, findings)

    ds.walk(check)


def _unknown_level(level: str) -> ValidationReport:
    finding = ValidationFinding(
        f"Unknown validation level '{level}', must be one of "
        f"{', '.join(LEVELS)}"
    )
    return ValidationReport(False, [finding], [], level)


def validate(
    ds: Dataset,
    level: str = 'standard',
    private_tag_exceptions: Optional[Iterable[Union[int, str]]] = None
) -> ValidationReport:
    """Validate `ds` and return a report of the findings.

    Parameters
    ----------
    ds : dataset.Dataset
        The dataset to validate, it is never modified.
    level : str, optional
        One of ``'basic'``, ``'standard'`` (default) or ``'strict'``.
    private_tag_exceptions : list of int or str, optional
        Private groups and private creator names allowed by the ``'strict'``
        level. Defaults to :attr:`config.private_tag_exceptions
        <dicomengine.config.private_tag_exceptions>`.

    Returns
    -------
    ValidationReport
        The findings, the dataset is valid if there are no errors. An
        unknown `level` gives an invalid report naming it.
    """
    level = str(level).lower()
    if level not in LEVELS:
        return _unknown_level(level)

    if private_tag_exceptions is None:
        private_tag_exceptions = config.private_tag_exceptions
    exceptions = [
        e.strip() if isinstance(e, str) else e for e in private_tag_exceptions
    ]

    findings = _Findings()
    checks = [lambda: _check_basic(ds, findings)]
    if level in ('standard', 'strict'):
        checks.append(lambda: _check_standard(ds, findings))
    if level == 'strict':
        checks.append(lambda: _check_strict(ds, exceptions, findings))

    for check in checks:
        try:
            check()
        except Exception as exc:
            logger.debug("Exception raised during validation", exc_info=exc)
            findings.error(f"Unable to complete the validation: {exc}")

    report = ValidationReport(
        not findings.errors, findings.errors, findings.warnings, level
    )
    logger.debug(
        f"Validated the dataset at the '{level}' level: "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )

    return report


def validate_bytes(
    buffer: bytes,
    level: str = 'standard',
    private_tag_exceptions: Optional[Iterable[Union[int, str]]] = None
) -> ValidationReport:
    """Parse and validate an encoded dataset.

    Failure to parse `buffer` is reported as an error rather than raised.

    Parameters
    ----------
    buffer : bytes
        The DICOM Part 10 encoded data.
    level : str, optional
        One of ``'basic'``, ``'standard'`` (default) or ``'strict'``.
    private_tag_exceptions : list of int or str, optional
        See :func:`validate`.

    Returns
    -------
    ValidationReport
        The findings.
    """
    if str(level).lower() not in LEVELS:
        return _unknown_level(str(level).lower())

    try:
        ds = parse(buffer)
    except Exception as exc:
        logger.debug("Exception raised during parsing", exc_info=exc)
        finding = ValidationFinding(f"Unable to parse the data: {exc}")
        return ValidationReport(False, [finding], [], str(level).lower())

    return validate(ds, level, private_tag_exceptions)
