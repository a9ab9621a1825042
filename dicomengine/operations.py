# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Run engine operations on items supplied by a workflow host.

An item is a :class:`dict` with a ``'binary'`` mapping of property names to
the encoded DICOM data, either as :class:`bytes` or as a :class:`dict` with
a ``'data'`` key holding :class:`bytes` or a base64 encoded :class:`str`.
Each operation produces an output record such as::

    {
        'json': {'success': True, 'profile': 'basic', 'sourceFile': 'data'},
        'binary': {
            'anonymized': {
                'data': b'...',
                'mimeType': 'application/dicom',
                'fileName': 'anonymized.dcm',
            },
        },
        'paired_item': 0,
    }
"""

import base64
import binascii
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from dicomengine.anonymizer import PROFILES, AnonymizationRule, Anonymizer
from dicomengine.config import logger
from dicomengine.converter import AUTO_WINDOW, MIME_TYPES, convert
from dicomengine.errors import DicomEngineError
from dicomengine.filereader import parse
from dicomengine.filewriter import serialize
from dicomengine.metadata import extract_metadata
from dicomengine.validator import LEVELS, validate_bytes


DEFAULT_FILE_PROPERTY_NAME = 'data'


class ExtractMetadata(NamedTuple):
    """Extract the metadata of the dataset as JSON."""
    include_fields: Union[str, List[str]] = ''
    include_pixel_data: bool = False
    file_property_name: str = DEFAULT_FILE_PROPERTY_NAME


class Anonymize(NamedTuple):
    """Anonymize the dataset and return it as binary data."""
    profile: str = 'basic'
    rules: Tuple[AnonymizationRule, ...] = ()
    file_property_name: str = DEFAULT_FILE_PROPERTY_NAME


class Convert(NamedTuple):
    """Convert the dataset to another format."""
    output_format: str = 'png'
    quality: int = 90
    window_center: float = AUTO_WINDOW
    window_width: float = AUTO_WINDOW
    file_property_name: str = DEFAULT_FILE_PROPERTY_NAME


class Validate(NamedTuple):
    """Validate the dataset."""
    level: str = 'standard'
    file_property_name: str = DEFAULT_FILE_PROPERTY_NAME


Operation = Union[ExtractMetadata, Anonymize, Convert, Validate]


def _parse_rules(custom_tag_rules: Any) -> Tuple[AnonymizationRule, ...]:
    if not custom_tag_rules:
        return ()

    if isinstance(custom_tag_rules, dict):
        custom_tag_rules = custom_tag_rules.get('rules') or []

    return tuple(
        r if isinstance(r, AnonymizationRule)
        else AnonymizationRule.from_dict(r)
        for r in custom_tag_rules
    )


def _choice(params: Dict[str, Any], name: str, default: str,
            choices: Tuple[str, ...]) -> str:
    value = str(params.get(name, default)).lower()
    if value not in choices:
        raise ValueError(
            f"Invalid value '{value}' for '{name}', must be one of "
            f"{', '.join(choices)}"
        )

    return value


def operation_from_parameters(
    operation: str, params: Optional[Dict[str, Any]] = None
) -> Operation:
    """Return the operation record for the host `operation` and `params`.

    Parameters
    ----------
    operation : str
        One of ``'extractMetadata'``, ``'anonymize'``, ``'convert'`` or
        ``'validate'``.
    params : dict, optional
        The host parameters: ``filePropertyName``, ``includeFields``,
        ``includePixelData``, ``anonymizationProfile``, ``customTagRules``,
        ``outputFormat``, ``quality``, ``windowCenter``, ``windowWidth`` and
        ``validationLevel``. Missing parameters use their defaults.

    Returns
    -------
    ExtractMetadata, Anonymize, Convert or Validate
        The operation record.

    Raises
    ------
    ValueError
        If the operation or a parameter is not valid.
    """
    params = params or {}
    name = params.get('filePropertyName') or DEFAULT_FILE_PROPERTY_NAME

    if operation == 'extractMetadata':
        return ExtractMetadata(
            params.get('includeFields') or '',
            bool(params.get('includePixelData', False)),
            name
        )

    if operation == 'anonymize':
        return Anonymize(
            _choice(params, 'anonymizationProfile', 'basic', PROFILES),
            _parse_rules(params.get('customTagRules')),
            name
        )

    if operation == 'convert':
        try:
            quality = int(params.get('quality', 90))
            center = float(params.get('windowCenter', AUTO_WINDOW))
            width = float(params.get('windowWidth', AUTO_WINDOW))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid conversion parameter: {exc}") from exc

        return Convert(
            _choice(params, 'outputFormat', 'png', tuple(MIME_TYPES)),
            quality,
            center,
            width,
            name
        )

    if operation == 'validate':
        return Validate(
            _choice(params, 'validationLevel', 'standard', LEVELS), name
        )

    raise ValueError(f"Unknown operation '{operation}'")


def _binary_data(item: Dict[str, Any], name: str) -> bytes:
    binary = item.get('binary') or {}
    data = binary.get(name)
    if isinstance(data, dict):
        data = data.get('data')

    if isinstance(data, str):
        try:
            return base64.b64decode(data, validate=True)
        except binascii.Error as exc:
            raise DicomEngineError(
                f"The binary data property \"{name}\" isn't valid base64: "
                f"{exc}"
            ) from exc

    if not isinstance(data, (bytes, bytearray)) or not data:
        raise DicomEngineError(
            f"No binary data property \"{name}\" exists on item!"
        )

    return bytes(data)


def _extract_metadata(operation: ExtractMetadata, data: bytes):
    ds = parse(data)
    metadata = extract_metadata(
        ds, operation.include_fields, operation.include_pixel_data
    )
    metadata['sourceFile'] = operation.file_property_name
    return {'json': metadata}


def _anonymize(operation: Anonymize, data: bytes):
    anonymizer = Anonymizer(operation.profile, operation.rules)
    ds = anonymizer.anonymize(parse(data))
    return {
        'json': {
            'success': True,
            'profile': operation.profile,
            'sourceFile': operation.file_property_name,
            'ruleErrors': [str(exc) for exc in anonymizer.rule_errors],
        },
        'binary': {
            'anonymized': {
                'data': serialize(ds),
                'mimeType': 'application/dicom',
                'fileName': 'anonymized.dcm',
            },
        },
    }


def _convert(operation: Convert, data: bytes):
    result = convert(
        parse(data),
        operation.output_format,
        operation.quality,
        operation.window_center,
        operation.window_width
    )
    return {
        'json': {
            'success': True,
            'format': operation.output_format,
            'sourceFile': operation.file_property_name,
        },
        'binary': {
            'converted': {
                'data': result.data,
                'mimeType': result.mime_type,
                'fileName': result.file_name,
            },
        },
    }


def _validate(operation: Validate, data: bytes):
    report = validate_bytes(data, operation.level).to_dict()
    report['sourceFile'] = operation.file_property_name
    return {'json': report}


_EXECUTORS = {
    ExtractMetadata: _extract_metadata,
    Anonymize: _anonymize,
    Convert: _convert,
    Validate: _validate,
}


def execute(operation: Operation, item: Dict[str, Any]) -> Dict[str, Any]:
    """Run `operation` on a single host `item` and return the output record.

    Raises
    ------
    DicomEngineError
        If the item has no binary data for the operation's
        ``file_property_name`` or the operation fails.
    """
    data = _binary_data(item, operation.file_property_name)
    return _EXECUTORS[type(operation)](operation, data)


def process_items(
    items: List[Dict[str, Any]],
    operation: Operation,
    continue_on_fail: bool = False
) -> List[Dict[str, Any]]:
    """Run `operation` on each of `items` in order.

    Parameters
    ----------
    items : list of dict
        The host items.
    operation : ExtractMetadata, Anonymize, Convert or Validate
        The operation to run.
    continue_on_fail : bool, optional
        If ``False`` (default) the first failure is raised, otherwise each
        failure becomes an ``{'json': {'error': message}}`` record.

    Returns
    -------
    list of dict
        The output records, each with the index of its input item as
        ``'paired_item'``.
    """
    results = []
    for index, item in enumerate(items):
        try:
            result = execute(operation, item)
        except (DicomEngineError, ValueError) as exc:
            if not continue_on_fail:
                raise

            logger.warning(f"Unable to process item {index}: {exc}")
            result = {'json': {'error': str(exc)}}

        result['paired_item'] = index
        results.append(result)

    return results
