# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Decode *RLE Lossless* (1.2.840.10008.1.2.5) *Pixel Data* with numpy.

Each encapsulated frame starts with a 64 byte header giving the number of
byte segments and their offsets, followed by the PackBits encoded segments.
A segment holds one byte of one sample for every pixel in the frame, most
significant byte first, so 16-bit RGB data has six segments. Bits Allocated
must be a multiple of 8.

The decoded frames are returned as a flat array of native little endian
samples in planar configuration 1, which
:func:`~dicomengine.pixel_data_handlers.util.reshape_pixel_array` expects
for this transfer syntax.
"""

import logging
from struct import unpack_from

import numpy

from dicomengine.encaps import generate_pixel_data_frame
from dicomengine.pixel_data_handlers.util import (
    pixel_dtype, get_nr_frames, transfer_syntax_of
)
from dicomengine.uid import RLELossless


logger = logging.getLogger('dicomengine')

HANDLER_NAME = 'RLE Lossless'

DEPENDENCIES = {
    'numpy': ('http://www.numpy.org/', 'NumPy'),
}

SUPPORTED_TRANSFER_SYNTAXES = [RLELossless]

# Image Pixel elements that must be present to size the output
_REQUIRED = (
    'PixelData', 'Rows', 'Columns', 'SamplesPerPixel', 'BitsAllocated',
    'PixelRepresentation',
)
_HEADER_LENGTH = 64
_MAX_SEGMENTS = 15


def is_available():
    """Return ``True``; numpy is a dependency of the package."""
    return True


def supports_transfer_syntax(transfer_syntax):
    """Return ``True`` for *RLE Lossless*."""
    return transfer_syntax in SUPPORTED_TRANSFER_SYNTAXES


def should_change_PhotometricInterpretation_to_RGB(ds):
    """Return ``False``, RLE data keeps its photometric interpretation."""
    return False


def get_pixeldata(ds, rle_segment_order='>'):
    """Decode every frame of the RLE *Pixel Data* in `ds`.

    Parameters
    ----------
    ds : dataset.Dataset
        A dataset with an Image Pixel module and RLE encapsulated
        *Pixel Data*.
    rle_segment_order : str, optional
        ``'>'`` (default) to treat the segments of multi-byte samples as
        most significant byte first, as the standard requires. Use ``'<'``
        for data written by encoders that got the order the wrong way
        round.

    Returns
    -------
    numpy.ndarray
        The decoded samples as a 1D little endian array.

    Raises
    ------
    NotImplementedError
        If the transfer syntax isn't *RLE Lossless* or Bits Allocated isn't
        a multiple of 8.
    AttributeError
        If an element needed to size the output is missing.
    ValueError
        If the encoded frames are inconsistent with the Image Pixel module.
    """
    if not supports_transfer_syntax(transfer_syntax_of(ds)):
        raise NotImplementedError(
            "The RLE handler can only decode 'RLE Lossless' pixel data"
        )

    absent = [keyword for keyword in _REQUIRED if keyword not in ds]
    if absent:
        raise AttributeError(
            "Unable to decode the RLE pixel data, the dataset has no "
            f"{', '.join(absent)}"
        )

    nr_frames = get_nr_frames(ds)
    shape = (ds.Rows, ds.Columns, ds.SamplesPerPixel, ds.BitsAllocated)
    decoded = b''.join(
        decode_frame(frame, *shape)
        for frame in generate_pixel_data_frame(ds.PixelData, nr_frames)
    )

    dtype = pixel_dtype(ds).newbyteorder(rle_segment_order)
    arr = numpy.frombuffer(decoded, dtype)
    logger.debug(f"Decoded {nr_frames} RLE frame(s) to {arr.size} samples")

    return arr.astype(dtype.newbyteorder('<'))


def segment_offsets(header):
    """Return the segment offsets given in the 64 byte RLE `header`.

    The header is sixteen little endian unsigned longs: the number of
    segments, then up to 15 offsets measured from the start of the frame.

    Raises
    ------
    ValueError
        If `header` isn't 64 bytes or gives more than 15 segments.
    """
    if len(header) != _HEADER_LENGTH:
        raise ValueError(
            f"An RLE header must be {_HEADER_LENGTH} bytes, not {len(header)}"
        )

    nr_segments = unpack_from('<L', header)[0]
    if nr_segments > _MAX_SEGMENTS:
        raise ValueError(
            f"The RLE header gives {nr_segments} segments, the most allowed "
            f"is {_MAX_SEGMENTS}"
        )

    return list(unpack_from(f'<{nr_segments}L', header, 4))


def decode_frame(data, rows, columns, nr_samples, nr_bits):
    """Return one decoded RLE frame.

    Parameters
    ----------
    data : bytes
        The encoded frame, header included.
    rows, columns : int
        The frame size in pixels.
    nr_samples : int
        Samples per pixel.
    nr_bits : int
        Bits allocated per sample.

    Returns
    -------
    bytes
        The frame in planar configuration 1 with the bytes of each sample
        most significant first.
    """
    if nr_bits % 8:
        raise NotImplementedError(
            f"RLE pixel data with a Bits Allocated of {nr_bits} isn't "
            "supported"
        )

    nr_bytes = nr_bits // 8
    offsets = segment_offsets(data[:_HEADER_LENGTH])
    if len(offsets) != nr_samples * nr_bytes:
        raise ValueError(
            f"The RLE frame has {len(offsets)} segments but "
            f"{nr_samples * nr_bytes} are needed for {nr_samples} sample(s) "
            f"of {nr_bits} bits"
        )

    nr_pixels = rows * columns
    # planes[sample, byte, pixel]
    planes = numpy.empty((nr_samples, nr_bytes, nr_pixels), dtype='u1')
    bounds = offsets + [len(data)]
    for index, (start, end) in enumerate(zip(bounds, bounds[1:])):
        segment = decode_segment(data[start:end])
        if len(segment) != nr_pixels:
            raise ValueError(
                f"RLE segment {index} decoded to {len(segment)} bytes, "
                f"expected {nr_pixels}"
            )
        planes[divmod(index, nr_bytes)] = numpy.frombuffer(segment, 'u1')

    return planes.transpose(0, 2, 1).tobytes()


def decode_segment(data):
    """Return the PackBits decoded contents of an RLE segment.

    A header byte ``n`` of 0 to 127 is followed by ``n + 1`` literal bytes,
    129 to 255 by one byte to repeat ``257 - n`` times, and 128 is a no-op.
    """
    out = bytearray()
    pos = 0
    end = len(data)
    while pos < end:
        n = data[pos]
        pos += 1
        if n < 128:
            out += data[pos:pos + n + 1]
            pos += n + 1
        elif n > 128:
            out += data[pos:pos + 1] * (257 - n)
            pos += 1

    return bytes(out)
