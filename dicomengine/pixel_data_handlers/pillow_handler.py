# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Use the `pillow <https://python-pillow.org/>`_ Python package
to decode *Pixel Data*.

**Supported transfer syntaxes**

* 1.2.840.10008.1.2.4.50 : JPEG Baseline (Process 1)
* 1.2.840.10008.1.2.4.51 : JPEG Extended (Process 2 and 4), 8-bit only
* 1.2.840.10008.1.2.4.90 : JPEG 2000 Image Compression (Lossless Only)
* 1.2.840.10008.1.2.4.91 : JPEG 2000 Image Compression

JPEG 2000 needs a Pillow build with the OpenJPEG codec.
"""

import io
import logging

import numpy
from PIL import Image, features

from dicomengine.encaps import generate_pixel_data_frame
from dicomengine.pixel_data_handlers.util import (
    pixel_dtype, get_nr_frames, transfer_syntax_of
)
from dicomengine.uid import (
    JPEG2000, JPEG2000Lossless, JPEGBaseline8Bit, JPEGExtended12Bit
)


logger = logging.getLogger('dicomengine')


PillowJPEG2000TransferSyntaxes = [JPEG2000, JPEG2000Lossless]
PillowJPEGTransferSyntaxes = [JPEGBaseline8Bit, JPEGExtended12Bit]
PillowSupportedTransferSyntaxes = (
    PillowJPEGTransferSyntaxes + PillowJPEG2000TransferSyntaxes
)


HANDLER_NAME = 'Pillow'
DEPENDENCIES = {
    'numpy': ('http://www.numpy.org/', 'NumPy'),
    'PIL': ('https://python-pillow.org/', 'Pillow'),
}


def have_jpeg():
    """Return ``True`` if Pillow was built with the JPEG codec."""
    return bool(features.check_codec('jpg'))


def have_jpeg2k():
    """Return ``True`` if Pillow was built with the JPEG 2000 codec."""
    return bool(features.check_codec('jpg_2000'))


def is_available():
    """Return ``True`` if the handler has its dependencies met."""
    return have_jpeg() or have_jpeg2k()


def supports_transfer_syntax(transfer_syntax):
    """Return ``True`` if the handler supports the `transfer_syntax`.

    Parameters
    ----------
    transfer_syntax : uid.UID
        The Transfer Syntax UID of the *Pixel Data* that is to be used with
        the handler.
    """
    return transfer_syntax in PillowSupportedTransferSyntaxes


def should_change_PhotometricInterpretation_to_RGB(ds):
    """Return ``True`` if the *Photometric Interpretation* should be changed
    to RGB.

    Pillow returns colour JPEG data as RGB regardless of the colour space
    of the codestream.
    """
    return (
        transfer_syntax_of(ds) in PillowJPEGTransferSyntaxes
        and ds.get('SamplesPerPixel', 1) == 3
    )


def _decompress_single_frame(src):
    """Return the pixel samples of a single compressed frame as an
    :class:`numpy.ndarray`.
    """
    with Image.open(io.BytesIO(src)) as im:
        im.load()
        return numpy.asarray(im)


def get_pixeldata(ds):
    """Return a :class:`numpy.ndarray` of the *Pixel Data*.

    The dataset is never modified; use
    :func:`should_change_PhotometricInterpretation_to_RGB` to find the colour
    space of the returned samples.

    Parameters
    ----------
    ds : Dataset
        The :class:`Dataset` containing an Image Pixel module and the
        *Pixel Data* to be decompressed and returned.

    Returns
    -------
    numpy.ndarray
       The contents of (7FE0,0010) *Pixel Data* as a 1D array.

    Raises
    ------
    NotImplementedError
        If the transfer syntax is not supported or Pillow lacks the codec.
    """
    transfer_syntax = transfer_syntax_of(ds)

    if transfer_syntax not in PillowSupportedTransferSyntaxes:
        raise NotImplementedError(
            "Unable to convert the pixel data as the transfer syntax "
            "is not supported by the Pillow pixel data handler."
        )

    if not have_jpeg() and transfer_syntax in PillowJPEGTransferSyntaxes:
        raise NotImplementedError(
            f"The pixel data with transfer syntax {transfer_syntax.name}, "
            "cannot be read because Pillow lacks the JPEG plugin"
        )

    if (
        not have_jpeg2k()
        and transfer_syntax in PillowJPEG2000TransferSyntaxes
    ):
        raise NotImplementedError(
            f"The pixel data with transfer syntax {transfer_syntax.name}, "
            "cannot be read because Pillow lacks the JPEG 2000 plugin"
        )

    if transfer_syntax == JPEGExtended12Bit and ds.BitsAllocated != 8:
        raise NotImplementedError(
            f"{JPEGExtended12Bit} - {JPEGExtended12Bit.name} only supported "
            "by Pillow if Bits Allocated = 8"
        )

    nr_frames = get_nr_frames(ds)
    frames = []
    for frame in generate_pixel_data_frame(ds.PixelData, nr_frames):
        frames.append(_decompress_single_frame(frame).ravel())

    arr = numpy.concatenate(frames)
    logger.debug(f"Successfully decoded {arr.size} pixel samples")

    if transfer_syntax in PillowJPEG2000TransferSyntaxes:
        # Pillow returns signed JPEG 2000 samples offset to unsigned
        if ds.get('PixelRepresentation', 0) == 1:
            bits_stored = ds.get('BitsStored', ds.BitsAllocated)
            arr = arr.astype('int64') - 2**(bits_stored - 1)

    return arr.astype(pixel_dtype(ds))
