# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Utility functions used in the pixel data handlers."""

from typing import Optional, TYPE_CHECKING

import numpy

from dicomengine.uid import (
    UID, ExplicitVRLittleEndian, ImplicitVRLittleEndian, ExplicitVRBigEndian,
    RLETransferSyntaxes
)

if TYPE_CHECKING:  # pragma: no cover
    from dicomengine.dataset import Dataset


# Encapsulated syntaxes whose decoded samples are always pixel interleaved
_INTERLEAVED_SYNTAXES = [
    '1.2.840.10008.1.2.4.50',
    '1.2.840.10008.1.2.4.51',
    '1.2.840.10008.1.2.4.57',
    '1.2.840.10008.1.2.4.70',
    '1.2.840.10008.1.2.4.80',
    '1.2.840.10008.1.2.4.81',
    '1.2.840.10008.1.2.4.90',
    '1.2.840.10008.1.2.4.91',
]


def transfer_syntax_of(ds: "Dataset") -> UID:
    """Return the transfer syntax the *Pixel Data* in `ds` is encoded with.

    The (0002,0010) *Transfer Syntax UID* is used when present, otherwise the
    syntax is derived from the encoding the dataset was read with, defaulting
    to *Explicit VR Little Endian*.
    """
    file_meta = ds.__dict__.get('file_meta')
    if file_meta is not None and 'TransferSyntaxUID' in file_meta:
        return UID(file_meta.TransferSyntaxUID)

    if ds.is_little_endian is False:
        return ExplicitVRBigEndian
    if ds.is_implicit_VR:
        return ImplicitVRLittleEndian

    return ExplicitVRLittleEndian


def get_nr_frames(ds: "Dataset") -> int:
    """Return *Number of Frames* or 1 if it's absent, empty or 0."""
    nr_frames = ds.get('NumberOfFrames', 1)
    if not nr_frames:
        return 1

    return int(nr_frames)


def pixel_dtype(ds: "Dataset", as_float: bool = False) -> numpy.dtype:
    """Return a :class:`numpy.dtype` for the pixel data in `ds`.

    Word values are held as little endian bytes regardless of the transfer
    syntax so the returned dtype is always little endian.

    +------------------------------------------+------------------+
    | Element                                  | Supported        |
    +-------------+---------------------+------+ values           |
    | Tag         | Keyword             | Type |                  |
    +=============+=====================+======+==================+
    | (0028,0101) | BitsAllocated       | 1    | 1, 8, 16, 32, 64 |
    +-------------+---------------------+------+------------------+
    | (0028,0103) | PixelRepresentation | 1    | 0, 1             |
    +-------------+---------------------+------+------------------+

    Parameters
    ----------
    ds : Dataset
        The :class:`~dicomengine.dataset.Dataset` containing the pixel data
        you wish to get the data type for.
    as_float : bool, optional
        If ``True`` then return a float dtype, otherwise return an integer
        dtype (default ``False``). Float dtypes are only supported when
        (0028,0101) *Bits Allocated* is 32 or 64.

    Returns
    -------
    numpy.dtype
        A :class:`numpy.dtype` suitable for containing the pixel data.

    Raises
    ------
    ValueError
        If *Pixel Representation* or *Bits Allocated* hold unusable values.
    """
    if not as_float:
        # (0028,0103) Pixel Representation, US, 1
        #   0x0000 - unsigned int
        #   0x0001 - 2's complement (signed int)
        pixel_repr = ds.get('PixelRepresentation', 0)
        if pixel_repr == 0:
            dtype_str = 'uint'
        elif pixel_repr == 1:
            dtype_str = 'int'
        else:
            raise ValueError(
                "Unable to determine the data type to use to contain the "
                f"Pixel Data as a value of '{pixel_repr}' for '(0028,0103) "
                "Pixel Representation' is invalid"
            )
    else:
        dtype_str = 'float'

    # (0028,0100) Bits Allocated, US, 1
    #   PS3.5 8.1.1: Bits Allocated shall either be 1 or a multiple of 8
    #   For bit packed data we use uint8
    bits_allocated = ds.BitsAllocated
    if bits_allocated == 1:
        dtype_str = 'uint8'
    elif bits_allocated in (8, 16, 32, 64):
        dtype_str += str(bits_allocated)
    else:
        raise ValueError(
            "Unable to determine the data type to use to contain the "
            f"Pixel Data as a value of '{bits_allocated}' for '(0028,0100) "
            "Bits Allocated' is invalid"
        )

    if dtype_str == 'float8' or dtype_str == 'float16':
        raise ValueError(
            f"Float pixel data with {bits_allocated} bits allocated is not "
            "supported"
        )

    return numpy.dtype(dtype_str).newbyteorder('<')


def get_expected_length(ds: "Dataset", unit: str = 'bytes') -> int:
    """Return the expected length (in terms of bytes or pixels) of the *Pixel
    Data*.

    Parameters
    ----------
    ds : Dataset
        The :class:`~dicomengine.dataset.Dataset` containing the Image Pixel
        module and *Pixel Data*.
    unit : str, optional
        If ``'bytes'`` then returns the expected length of the *Pixel Data* in
        whole bytes and NOT including an odd length trailing NULL padding
        byte. If ``'pixels'`` then returns the expected length of the *Pixel
        Data* in terms of the total number of pixels (default ``'bytes'``).

    Returns
    -------
    int
        The expected length of the *Pixel Data* in either whole bytes or
        pixels, excluding the NULL trailing padding byte for odd length data.
    """
    length = ds.Rows * ds.Columns * ds.get('SamplesPerPixel', 1)
    length *= get_nr_frames(ds)

    if unit == 'pixels':
        return length

    # Correct for the number of bytes per pixel
    bits_allocated = ds.BitsAllocated
    if bits_allocated == 1:
        # Determine the nearest whole number of bytes needed to contain
        #   1-bit pixel data. e.g. 10 x 10 1-bit pixels is 100 bits, which
        #   are packed into 12.5 -> 13 bytes
        length = length // 8 + (length % 8 > 0)
    else:
        length *= bits_allocated // 8

    # DICOM Standard, Part 4, Annex C.7.6.3.1.2
    if ds.get('PhotometricInterpretation') == 'YBR_FULL_422':
        length = length // 3 * 2

    return length


def reshape_pixel_array(ds: "Dataset", arr: numpy.ndarray) -> numpy.ndarray:
    """Return a reshaped :class:`numpy.ndarray` `arr`.

    (0028,0006) *Planar Configuration* is required when (0028,0002)
    *Samples per Pixel* is greater than 1. For the JPEG family of transfer
    syntaxes it is always taken to be 0 and for *RLE Lossless* 1.

    Parameters
    ----------
    ds : dataset.Dataset
        The :class:`~dicomengine.dataset.Dataset` containing the Image Pixel
        module corresponding to the data in `arr`.
    arr : numpy.ndarray
        The 1D array containing the pixel data.

    Returns
    -------
    numpy.ndarray
        A reshaped array containing the pixel data. The shape of the array
        depends on the contents of the dataset:

        * For single frame, single sample data (rows, columns)
        * For single frame, multi-sample data (rows, columns, samples)
        * For multi-frame, single sample data (frames, rows, columns)
        * For multi-frame, multi-sample data (frames, rows, columns, samples)
    """
    nr_frames = get_nr_frames(ds)
    nr_samples = ds.get('SamplesPerPixel', 1)

    if nr_samples < 1:
        raise ValueError(
            f"Unable to reshape the pixel array as a value of {nr_samples} "
            "for (0028,0002) 'Samples per Pixel' is invalid."
        )

    planar_configuration = 0
    if nr_samples > 1:
        transfer_syntax = transfer_syntax_of(ds)
        if transfer_syntax in _INTERLEAVED_SYNTAXES:
            planar_configuration = 0
        elif transfer_syntax in RLETransferSyntaxes:
            planar_configuration = 1
        else:
            planar_configuration = ds.get('PlanarConfiguration', 0)

        if planar_configuration not in (0, 1):
            raise ValueError(
                "Unable to reshape the pixel array as a value of "
                f"{planar_configuration} for (0028,0006) 'Planar "
                "Configuration' is invalid."
            )

    rows = ds.Rows
    columns = ds.Columns
    if nr_frames > 1:
        if nr_samples == 1:
            arr = arr.reshape(nr_frames, rows, columns)
        elif planar_configuration == 0:
            arr = arr.reshape(nr_frames, rows, columns, nr_samples)
        else:
            arr = arr.reshape(nr_frames, nr_samples, rows, columns)
            arr = arr.transpose(0, 2, 3, 1)
    else:
        if nr_samples == 1:
            arr = arr.reshape(rows, columns)
        elif planar_configuration == 0:
            arr = arr.reshape(rows, columns, nr_samples)
        else:
            arr = arr.reshape(nr_samples, rows, columns)
            arr = arr.transpose(1, 2, 0)

    return arr


def unpack_bits(src: bytes) -> numpy.ndarray:
    """Return the bit-packed data in `src` as a :class:`numpy.ndarray` of
    ``uint8`` with one element per bit.

    Suitable for use when (0028,0100) *Bits Allocated* is 1. Bits are
    unpacked least significant first, as in DICOM Standard, Part 5,
    Section 8.1.1.
    """
    arr = numpy.frombuffer(src, dtype='u1')
    return numpy.unpackbits(arr, bitorder='little')


def apply_modality_lut(arr: numpy.ndarray, ds: "Dataset") -> numpy.ndarray:
    """Apply a modality lookup table or rescale operation to `arr`.

    Parameters
    ----------
    arr : numpy.ndarray
        The :class:`~numpy.ndarray` to apply the modality LUT or rescale
        operation to.
    ds : dataset.Dataset
        A dataset containing a Modality LUT Module.

    Returns
    -------
    numpy.ndarray
        An array with applied modality LUT or rescale operation. If
        (0028,3000) *Modality LUT Sequence* is present then returns an array
        of ``numpy.uint8`` or ``numpy.uint16``, depending on the 3rd value of
        (0028,3002) *LUT Descriptor*. If (0028,1052) *Rescale Intercept* and
        (0028,1053) *Rescale Slope* are present then returns an array of
        ``numpy.float64``. If neither are present then `arr` will be returned
        unchanged.
    """
    if ds.get('ModalityLUTSequence'):
        item = ds.ModalityLUTSequence[0]
        nr_entries = item.LUTDescriptor[0] or 2**16
        first_map = item.LUTDescriptor[1]
        nominal_depth = item.LUTDescriptor[2]

        dtype = f'uint{8 if nominal_depth <= 8 else 16}'

        lut_data = item.LUTData
        if isinstance(lut_data, bytes):
            # OW values are held as little endian words
            lut_data = numpy.frombuffer(lut_data, dtype='<u2')[:nr_entries]
        elif not isinstance(lut_data, list):
            lut_data = [lut_data]

        lut = numpy.asarray(lut_data, dtype=dtype)

        # IVs < `first_map` get set to first LUT entry (i.e. index 0)
        clipped_iv = numpy.zeros(arr.shape, dtype='int64')
        mapped_pixels = arr >= first_map
        clipped_iv[mapped_pixels] = arr[mapped_pixels] - first_map
        # IVs > number of entries get set to last entry
        numpy.clip(clipped_iv, 0, len(lut) - 1, out=clipped_iv)

        return lut[clipped_iv]

    slope = ds.get('RescaleSlope')
    intercept = ds.get('RescaleIntercept')
    if slope is not None and intercept is not None:
        arr = arr.astype(numpy.float64) * float(slope)
        arr += float(intercept)

    return arr


def apply_windowing(
    arr: numpy.ndarray,
    center: float,
    width: float,
    voi_func: str = 'LINEAR',
    y_min: float = 0,
    y_max: float = 255
) -> numpy.ndarray:
    """Return `arr` with a windowing operation applied.

    Values are mapped to the output range [`y_min`, `y_max`] and clamped at
    both ends.

    Parameters
    ----------
    arr : numpy.ndarray
        The :class:`~numpy.ndarray` to apply the windowing operation to.
    center : float
        The window center.
    width : float
        The window width.
    voi_func : str, optional
        One of ``'LINEAR'`` (default), ``'LINEAR_EXACT'`` or ``'SIGMOID'``,
        as used by (0028,1056) *VOI LUT Function*.
    y_min, y_max : float, optional
        The output range, default 0 to 255.

    Returns
    -------
    numpy.ndarray
        An array of ``numpy.float64``.

    Raises
    ------
    ValueError
        If the window width is invalid for the `voi_func`, or `voi_func`
        is unknown.

    References
    ----------
    * DICOM Standard, Part 3, Annex C.11.2.1.2 and C.11.2.1.3
    """
    voi_func = voi_func.upper()
    y_range = y_max - y_min
    arr = arr.astype('float64')

    if voi_func in ('LINEAR', 'LINEAR_EXACT'):
        # PS3.3 C.11.2.1.2.1 and C.11.2.1.3.2
        if voi_func == 'LINEAR':
            if width < 1:
                raise ValueError(
                    "The Window Width must be greater than or equal to 1 "
                    "for a 'LINEAR' windowing operation"
                )
            center -= 0.5
            width -= 1
        elif width <= 0:
            raise ValueError(
                "The Window Width must be greater than 0 for a "
                "'LINEAR_EXACT' windowing operation"
            )

        below = arr <= (center - width / 2)
        above = arr > (center + width / 2)
        between = numpy.logical_and(~below, ~above)

        arr[below] = y_min
        arr[above] = y_max
        if between.any():
            arr[between] = (
                ((arr[between] - center) / width + 0.5) * y_range + y_min
            )
    elif voi_func == 'SIGMOID':
        # PS3.3 C.11.2.1.3.1
        if width <= 0:
            raise ValueError(
                "The Window Width must be greater than 0 for a 'SIGMOID' "
                "windowing operation"
            )

        arr = y_range / (1 + numpy.exp(-4 * (arr - center) / width)) + y_min
    else:
        raise ValueError(f"Unsupported VOI LUT Function value '{voi_func}'")

    return numpy.clip(arr, y_min, y_max)


def convert_color_space(
    arr: numpy.ndarray, current: str, desired: str
) -> numpy.ndarray:
    """Convert the image(s) in `arr` from one color space to another.

    Parameters
    ----------
    arr : numpy.ndarray
        The image(s) as :class:`numpy.ndarray` with shape (frames, rows,
        columns, 3) or (rows, columns, 3) and a 'uint8' dtype.
    current : str
        The current color space, one of ``'RGB'``, ``'YBR_FULL'``,
        ``'YBR_FULL_422'``.
    desired : str
        The desired color space, one of ``'RGB'``, ``'YBR_FULL'``,
        ``'YBR_FULL_422'``.

    Returns
    -------
    numpy.ndarray
        The image(s) converted to the desired color space.

    References
    ----------
    * DICOM Standard, Part 3, Annex C.7.6.3.1.2
    * ISO/IEC 10918-5:2012 (ITU T.871), Section 7
    """
    if arr.dtype != numpy.dtype('u1'):
        raise ValueError(
            f"Invalid ndarray.dtype '{arr.dtype}' for color space conversion, "
            "must be 'uint8' or an equivalent"
        )

    def _no_change(arr):
        return arr

    _converters = {
        'YBR_FULL_422': {
            'YBR_FULL_422': _no_change,
            'YBR_FULL': _no_change,
            'RGB': _convert_YBR_FULL_to_RGB,
        },
        'YBR_FULL': {
            'YBR_FULL': _no_change,
            'YBR_FULL_422': _no_change,
            'RGB': _convert_YBR_FULL_to_RGB,
        },
        'RGB': {
            'RGB': _no_change,
            'YBR_FULL': _convert_RGB_to_YBR_FULL,
            'YBR_FULL_422': _convert_RGB_to_YBR_FULL,
        },
    }
    try:
        converter = _converters[current][desired]
    except KeyError:
        raise NotImplementedError(
            f"Conversion from {current} to {desired} is not supported."
        )

    return converter(arr)


def _convert_RGB_to_YBR_FULL(arr: numpy.ndarray) -> numpy.ndarray:
    """Return an ndarray converted from RGB to YBR_FULL color space."""
    orig_dtype = arr.dtype

    rgb_to_ybr = numpy.asarray(
        [
            [+0.299, -0.299 / 1.772, +0.701 / 1.402],
            [+0.587, -0.587 / 1.772, -0.587 / 1.402],
            [+0.114, +0.886 / 1.772, -0.114 / 1.402],
        ],
        dtype=numpy.float32,
    )

    arr = numpy.matmul(arr, rgb_to_ybr, dtype=numpy.float32)
    arr += [0.5, 128.5, 128.5]
    # Round(x) -> floor of (arr + 0.5) : 0.5 added in previous step
    numpy.floor(arr, out=arr)
    numpy.clip(arr, 0, 255, out=arr)

    return arr.astype(orig_dtype)


def _convert_YBR_FULL_to_RGB(arr: numpy.ndarray) -> numpy.ndarray:
    """Return an ndarray converted from YBR_FULL to RGB color space."""
    orig_dtype = arr.dtype

    ybr_to_rgb = numpy.asarray(
        [
            [1.000, 1.000, 1.000],
            [0.000, -0.114 * 1.772 / 0.587, 1.772],
            [1.402, -0.299 * 1.402 / 0.587, 0.000],
        ],
        dtype=numpy.float32,
    )

    arr = arr.astype(numpy.float32)
    arr -= [0, 128, 128]

    # Round(x) -> floor of (arr + 0.5)
    numpy.matmul(arr, ybr_to_rgb, out=arr)
    arr += 0.5
    numpy.floor(arr, out=arr)
    numpy.clip(arr, 0, 255, out=arr)

    return arr.astype(orig_dtype)


def window_from_dataset(ds: "Dataset") -> Optional[tuple]:
    """Return the first (center, width) pair from the VOI LUT module of `ds`
    or ``None`` if the dataset has no usable window.
    """
    center = ds.get('WindowCenter')
    width = ds.get('WindowWidth')
    if center is None or width is None or center == '' or width == '':
        return None

    if isinstance(center, list):
        center = center[0]
    if isinstance(width, list):
        width = width[0]

    try:
        return float(center), float(width)
    except (TypeError, ValueError):
        return None
