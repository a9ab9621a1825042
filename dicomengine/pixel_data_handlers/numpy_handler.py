# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Convert native (uncompressed) *Pixel Data* to a :class:`numpy.ndarray`.

Handles the implicit and explicit VR little endian, deflated and explicit VR
big endian transfer syntaxes. The model always holds pixel data as little
endian words, so no byte swapping happens here.

Integer *Pixel Data* with Bits Allocated of 1, 8, 16 or 32 and the
*Float Pixel Data* and *Double Float Pixel Data* elements are supported.
Rows, Columns, Samples per Pixel, Bits Allocated and Photometric
Interpretation are required, plus Bits Stored and Pixel Representation for
integer data and Planar Configuration when there's more than one sample per
pixel.
"""

import logging
from typing import TYPE_CHECKING

import numpy

from dicomengine.pixel_data_handlers.util import (
    pixel_dtype, get_expected_length, unpack_bits, transfer_syntax_of
)
from dicomengine.uid import UncompressedTransferSyntaxes

if TYPE_CHECKING:  # pragma: no cover
    from dicomengine.dataset import Dataset
    from dicomengine.uid import UID


logger = logging.getLogger('dicomengine')

HANDLER_NAME = 'Numpy'

DEPENDENCIES = {
    'numpy': ('http://www.numpy.org/', 'NumPy'),
}

SUPPORTED_TRANSFER_SYNTAXES = UncompressedTransferSyntaxes

_PIXEL_KEYWORDS = ('PixelData', 'FloatPixelData', 'DoubleFloatPixelData')
_REQUIRED = (
    'BitsAllocated', 'Rows', 'Columns', 'SamplesPerPixel',
    'PhotometricInterpretation',
)
# Integer pixel data also needs these to pick the dtype and mask
_REQUIRED_INTEGER = ('PixelRepresentation', 'BitsStored')


def is_available() -> bool:
    """Return ``True``; numpy is a dependency of the package."""
    return True


def supports_transfer_syntax(transfer_syntax: "UID") -> bool:
    """Return ``True`` for the native (uncompressed) transfer syntaxes."""
    return transfer_syntax in SUPPORTED_TRANSFER_SYNTAXES


def should_change_PhotometricInterpretation_to_RGB(ds: "Dataset") -> bool:
    """Return ``False``, native data is returned in its own colour space."""
    return False


def _pixel_keyword(ds: "Dataset") -> str:
    present = [kw for kw in _PIXEL_KEYWORDS if kw in ds]
    if len(present) != 1:
        raise AttributeError(
            "Unable to convert the pixel data: exactly one of Pixel Data, "
            "Float Pixel Data or Double Float Pixel Data must be present"
        )

    return present[0]


def _check_elements(ds: "Dataset", keyword: str) -> None:
    required = list(_REQUIRED)
    if keyword == 'PixelData':
        required.extend(_REQUIRED_INTEGER)

    absent = [kw for kw in required if kw not in ds]
    nr_samples = ds.get('SamplesPerPixel') or 1
    if nr_samples > 1 and 'PlanarConfiguration' not in ds:
        absent.append('PlanarConfiguration')
    if absent:
        raise AttributeError(
            "Unable to convert the pixel data, the dataset has no "
            f"{', '.join(absent)}"
        )


def _trim_padding(data: bytes, expected: int) -> bytes:
    """Return `data` without trailing padding, checking its length."""
    # Odd length values are padded with a single NULL byte
    padded = expected + expected % 2
    actual = len(data)
    if actual == expected and expected != padded:
        logger.warning(
            "The odd length pixel data is missing its trailing padding byte"
        )
    elif actual < padded:
        raise ValueError(
            f"The pixel data is {actual} bytes long but the Image Pixel "
            f"module gives an expected length of {padded} bytes"
        )
    elif actual > padded:
        logger.warning(
            f"The pixel data ({actual} bytes) contains excess padding, "
            f"the last {actual - expected} bytes will be ignored"
        )

    return data[:expected]


def _upsample_422(arr: numpy.ndarray) -> numpy.ndarray:
    """Expand YBR_FULL_422 samples to one (Y, Cb, Cr) triplet per pixel.

    Each pair of pixels is stored as Y1 Y2 Cb Cr and shares its chroma,
    Part 3 Section C.7.6.3.1.2.
    """
    quads = arr.reshape(-1, 4)
    out = numpy.empty((quads.shape[0], 2, 3), dtype=arr.dtype)
    out[:, :, 0] = quads[:, :2]
    out[:, :, 1] = quads[:, 2:3]
    out[:, :, 2] = quads[:, 3:4]
    return out.ravel()


def get_pixeldata(ds: "Dataset") -> numpy.ndarray:
    """Return the native pixel data of `ds` as a 1D :class:`numpy.ndarray`.

    One of *Pixel Data*, *Float Pixel Data* or *Double Float Pixel Data*
    is read. *Bits Allocated* of 1 is unpacked to one ``uint8`` per pixel
    and *YBR_FULL_422* data is expanded to three samples per pixel.

    Raises
    ------
    NotImplementedError
        If the transfer syntax isn't a native one.
    AttributeError
        If `ds` is missing an element needed to size the data.
    ValueError
        If the pixel data is shorter than the Image Pixel module requires.
    """
    if not supports_transfer_syntax(transfer_syntax_of(ds)):
        raise NotImplementedError(
            "The numpy handler can only convert uncompressed pixel data"
        )

    keyword = _pixel_keyword(ds)
    _check_elements(ds, keyword)

    expected = get_expected_length(ds)
    data = _trim_padding(getattr(ds, keyword), expected)

    if ds.BitsAllocated == 1:
        # The last byte may hold unused bits
        arr = unpack_bits(data)[:get_expected_length(ds, unit='pixels')]
    else:
        dtype = pixel_dtype(ds, as_float=keyword != 'PixelData')
        arr = numpy.frombuffer(data, dtype=dtype)
        if ds.PhotometricInterpretation == 'YBR_FULL_422':
            arr = _upsample_422(arr)

    logger.debug(f"Read {arr.size} pixel samples using the numpy handler")

    return arr.copy()
