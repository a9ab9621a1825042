# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Extract the elements of a dataset as a JSON friendly mapping."""

import base64
from typing import Any, Dict, Iterable, List, Union

from dicomengine.config import logger
from dicomengine.dataelem import DataElement
from dicomengine.dataset import Dataset
from dicomengine.tag import BaseTag, Tag
from dicomengine.valuerep import DSfloat, IS, binary_VRs


_PIXEL_DATA_TAGS = (
    BaseTag(0x7FE00008), BaseTag(0x7FE00009), BaseTag(0x7FE00010)
)


def metadata_key(data_element: DataElement) -> str:
    """Return the key used for `data_element`: its keyword or, for elements
    without one, the tag as ``'(gggg,eeee)'``.
    """
    keyword = data_element.keyword
    if keyword:
        return keyword

    tag = data_element.tag
    return f"({tag.group:04X},{tag.element:04X})"


def _python_value(value: Any, VR: str) -> Any:
    if isinstance(value, IS):
        return int(value)
    if isinstance(value, DSfloat):
        return float(value)
    if VR == 'AT':
        return format(value, '08X')
    if isinstance(value, str):
        return str(value)

    return value


def element_value(data_element: DataElement) -> Any:
    """Return the value of `data_element` using only JSON types.

    Sequences become lists of dicts, byte values base64 encoded strings and
    tags 8 character hex strings.
    """
    VR = data_element.VR
    if VR == 'SQ':
        return [_dataset_metadata(item) for item in data_element.value]

    if VR in binary_VRs or isinstance(data_element.value, bytes):
        if data_element.is_empty:
            return None
        return base64.b64encode(data_element.value).decode('ascii')

    value = data_element.value
    if isinstance(value, list):
        return [_python_value(v, VR) for v in value]

    return _python_value(value, VR)


def _dataset_metadata(dataset: Dataset) -> Dict[str, Any]:
    return {metadata_key(elem): element_value(elem) for elem in dataset}


def parse_include_fields(
    include_fields: Union[None, str, Iterable[Any]]
) -> List[BaseTag]:
    """Return the tags named by `include_fields`.

    Parameters
    ----------
    include_fields : str or list or None
        A comma-separated string or a list of element keywords or tags in
        any form accepted by :func:`~dicomengine.tag.Tag`. Unrecognised
        entries are logged and ignored.
    """
    if not include_fields:
        return []

    if isinstance(include_fields, str):
        include_fields = include_fields.split(',')

    tags = []
    for field in include_fields:
        if isinstance(field, str):
            field = field.strip()
            if not field:
                continue
        try:
            tags.append(Tag(field))
        except (ValueError, OverflowError) as exc:
            logger.warning(f"Ignoring the unknown metadata field {field!r}: "
                           f"{exc}")

    return tags


def extract_metadata(
    ds: Dataset,
    include_fields: Union[None, str, Iterable[Any]] = None,
    include_pixel_data: bool = False
) -> Dict[str, Any]:
    """Return the elements of `ds` as a :class:`dict` keyed by keyword.

    Parameters
    ----------
    ds : dataset.Dataset
        The dataset to extract from.
    include_fields : str or list, optional
        Keywords or tags of the elements to extract as a list or a
        comma-separated string. If empty (default) then all the dataset's
        elements are extracted. File meta information elements are only
        extracted when named.
    include_pixel_data : bool, optional
        If ``True`` then include the pixel data as a base64 string
        (default ``False``).

    Returns
    -------
    dict
        The element values using only JSON types, in ascending tag order.

    Examples
    --------
    >>> extract_metadata(ds, 'PatientName, Modality')
    {'PatientName': 'CITIZEN^Jan', 'Modality': 'CT'}
    """
    tags = parse_include_fields(include_fields)
    file_meta = ds.__dict__.get('file_meta') or Dataset()

    elements: List[DataElement] = []
    if tags:
        for tag in sorted(set(tags)):
            if tag.group == 0x0002:
                if tag in file_meta:
                    elements.append(file_meta[tag])
            elif tag in ds:
                elements.append(ds[tag])
    else:
        elements = ds.values()

    metadata: Dict[str, Any] = {}
    for elem in elements:
        if elem.tag in _PIXEL_DATA_TAGS and not include_pixel_data:
            continue
        metadata[metadata_key(elem)] = element_value(elem)

    return metadata

