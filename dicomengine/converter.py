# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Decode *Pixel Data* and convert datasets to other formats.

Raster output (PNG and JPEG) is made from the first frame of the pixel data
using `Pillow <https://python-pillow.org/>`_. Structured output uses the
DICOM JSON Model or the Native DICOM Model XML representation.
"""

import io
import json
from typing import NamedTuple, Tuple, TYPE_CHECKING

import numpy
from PIL import Image

from dicomengine import config
from dicomengine.config import logger
from dicomengine.dataset import Dataset
from dicomengine.errors import (
    ConversionError, UnsupportedTransferSyntaxError
)
from dicomengine.pixel_data_handlers.util import (
    apply_modality_lut, apply_windowing, convert_color_space,
    get_nr_frames, reshape_pixel_array, transfer_syntax_of,
    window_from_dataset
)
from dicomengine.tag import BaseTag
from dicomengine.xmlrep import dataset_to_xml_bytes

if TYPE_CHECKING:  # pragma: no cover
    from types import ModuleType


# Sentinel for window values taken from the dataset or the pixel range
AUTO_WINDOW = -1

MIME_TYPES = {
    'png': 'image/png',
    'jpeg': 'image/jpeg',
    'json': 'application/json',
    'xml': 'application/xml',
}

_PIXEL_DATA_TAGS = (
    BaseTag(0x7FE00008), BaseTag(0x7FE00009), BaseTag(0x7FE00010)
)


class ConversionResult(NamedTuple):
    """The output of :func:`convert`."""
    data: bytes
    mime_type: str
    file_name: str


def _decode(ds: Dataset) -> Tuple[numpy.ndarray, "ModuleType"]:
    """Return the reshaped pixel data of `ds` and the handler used."""
    if not any(tag in ds for tag in _PIXEL_DATA_TAGS):
        raise ConversionError("The dataset contains no pixel data")

    transfer_syntax = transfer_syntax_of(ds)
    handlers = [
        h for h in config.pixel_data_handlers
        if h.supports_transfer_syntax(transfer_syntax)
    ]
    if not handlers:
        raise UnsupportedTransferSyntaxError(
            transfer_syntax,
            f"no pixel data handler can decode '{transfer_syntax.name}'"
        )

    available = [h for h in handlers if h.is_available()]
    if not available:
        names = '; '.join(
            f"{h.HANDLER_NAME} requires "
            f"{', '.join(dep[1] for dep in h.DEPENDENCIES.values())}"
            for h in handlers
        )
        raise UnsupportedTransferSyntaxError(
            transfer_syntax,
            f"the handlers for '{transfer_syntax.name}' are missing "
            f"required dependencies: {names}"
        )

    last_exception = None
    for handler in available:
        try:
            arr = handler.get_pixeldata(ds)
            return reshape_pixel_array(ds, arr), handler
        except Exception as exc:
            logger.debug(
                f"Exception raised by the {handler.HANDLER_NAME} pixel data "
                "handler", exc_info=exc
            )
            last_exception = exc

    if isinstance(last_exception, NotImplementedError):
        raise UnsupportedTransferSyntaxError(
            transfer_syntax, str(last_exception)
        ) from last_exception

    raise ConversionError(
        f"Unable to decode the pixel data: {last_exception}"
    ) from last_exception


def pixel_array(ds: Dataset) -> numpy.ndarray:
    """Return the *Pixel Data* of `ds` as a :class:`numpy.ndarray`.

    The handlers in :attr:`config.pixel_data_handlers
    <dicomengine.config.pixel_data_handlers>` are tried in order. The
    dataset is never modified.

    Returns
    -------
    numpy.ndarray
        The pixel data, shaped (rows, columns), (rows, columns, samples),
        (frames, rows, columns) or (frames, rows, columns, samples).

    Raises
    ------
    UnsupportedTransferSyntaxError
        If no available handler supports the transfer syntax.
    ConversionError
        If the pixel data is missing or can't be decoded.
    """
    return _decode(ds)[0]


def _auto_window(ds: Dataset, arr: numpy.ndarray) -> Tuple[float, float]:
    """Return the (center, width) from the dataset VOI LUT module or from the
    range of values in `arr`.
    """
    window = window_from_dataset(ds)
    if window is not None and window[1] >= 1:
        return window

    low = float(arr.min())
    high = float(arr.max())
    width = high - low + 1
    return low + width / 2, width


def render_frame(
    ds: Dataset,
    window_center: float = AUTO_WINDOW,
    window_width: float = AUTO_WINDOW
) -> numpy.ndarray:
    """Return the first frame of the pixel data as 8-bit display values.

    Parameters
    ----------
    ds : dataset.Dataset
        The dataset containing the pixel data.
    window_center, window_width : float, optional
        The window to apply to monochrome data. ``-1`` (default) uses the
        (0028,1050) *Window Center* and (0028,1051) *Window Width* of the
        dataset when present, otherwise the full range of pixel values.

    Returns
    -------
    numpy.ndarray
        A ``uint8`` array shaped (rows, columns) for monochrome data or
        (rows, columns, 3) for colour data.
    """
    arr, handler = _decode(ds)
    if get_nr_frames(ds) > 1:
        logger.info(
            f"The pixel data contains {get_nr_frames(ds)} frames, only the "
            "first frame will be converted"
        )
        arr = arr[0]

    photometric = ds.get('PhotometricInterpretation', 'MONOCHROME2')
    if handler.should_change_PhotometricInterpretation_to_RGB(ds):
        photometric = 'RGB'

    if arr.ndim == 3:
        if arr.shape[-1] != 3:
            raise ConversionError(
                f"Unable to render pixel data with {arr.shape[-1]} samples "
                "per pixel"
            )

        if arr.dtype != numpy.uint8:
            bits_stored = ds.get('BitsStored', arr.dtype.itemsize * 8)
            arr = arr.astype(numpy.float64) * 255 / (2**bits_stored - 1)
            arr = numpy.clip(numpy.rint(arr), 0, 255).astype(numpy.uint8)

        if photometric in ('YBR_FULL', 'YBR_FULL_422'):
            arr = convert_color_space(arr, photometric, 'RGB')
        elif photometric != 'RGB':
            raise ConversionError(
                f"Unable to render pixel data with a Photometric "
                f"Interpretation of '{photometric}'"
            )

        return arr

    if photometric not in ('MONOCHROME1', 'MONOCHROME2'):
        raise ConversionError(
            f"Unable to render single sample pixel data with a Photometric "
            f"Interpretation of '{photometric}'"
        )

    arr = apply_modality_lut(arr, ds)
    if window_center == AUTO_WINDOW or window_width == AUTO_WINDOW:
        center, width = _auto_window(ds, arr)
        if window_center != AUTO_WINDOW:
            center = window_center
        if window_width != AUTO_WINDOW:
            width = window_width
    else:
        center, width = window_center, window_width

    try:
        out = apply_windowing(arr, float(center), float(width))
    except ValueError as exc:
        raise ConversionError(str(exc)) from exc

    if photometric == 'MONOCHROME1':
        out = 255 - out

    return numpy.rint(out).astype(numpy.uint8)


def _encode_image(arr: numpy.ndarray, output_format: str, quality: int):
    image = Image.fromarray(arr)
    buffer = io.BytesIO()
    try:
        if output_format == 'jpeg':
            image.save(buffer, format='JPEG', quality=quality)
        else:
            image.save(buffer, format='PNG')
    except (OSError, ValueError) as exc:
        raise ConversionError(
            f"Unable to encode the image as {output_format.upper()}: {exc}"
        ) from exc

    return buffer.getvalue()


def _without_pixel_data(ds: Dataset) -> Dataset:
    return Dataset({
        tag: ds[tag] for tag in ds.keys() if tag not in _PIXEL_DATA_TAGS
    })


def convert(
    ds: Dataset,
    output_format: str,
    quality: int = 90,
    window_center: float = AUTO_WINDOW,
    window_width: float = AUTO_WINDOW
) -> ConversionResult:
    """Convert `ds` to another format.

    Parameters
    ----------
    ds : dataset.Dataset
        The dataset to convert. It is never modified.
    output_format : str
        One of ``'png'``, ``'jpeg'``, ``'json'`` or ``'xml'``.
    quality : int, optional
        The JPEG quality, 1 to 100 (default ``90``). Ignored for other
        formats.
    window_center, window_width : float, optional
        The window used for monochrome raster output, ``-1`` (default) for
        automatic windowing.

    Returns
    -------
    ConversionResult
        The converted data with its MIME type and a file name.

    Raises
    ------
    ConversionError
        If `output_format` is unknown or the conversion fails.
    UnsupportedTransferSyntaxError
        If the pixel data uses a compression that can't be decoded.
    """
    output_format = output_format.lower()
    if output_format not in MIME_TYPES:
        raise ConversionError(
            f"Unknown output format '{output_format}', must be one of "
            f"{', '.join(MIME_TYPES)}"
        )

    if output_format in ('png', 'jpeg'):
        if output_format == 'jpeg' and not 1 <= int(quality) <= 100:
            raise ConversionError(
                f"The JPEG quality must be between 1 and 100, not {quality}"
            )

        arr = render_frame(ds, window_center, window_width)
        data = _encode_image(arr, output_format, int(quality))
    elif output_format == 'json':
        data = json.dumps(_without_pixel_data(ds).to_json_dict())
        data = data.encode('utf-8')
    else:
        data = dataset_to_xml_bytes(_without_pixel_data(ds))

    logger.debug(f"Converted the dataset to {len(data)} bytes of "
                 f"{output_format.upper()}")

    return ConversionResult(
        data, MIME_TYPES[output_format], f'converted.{output_format}'
    )
