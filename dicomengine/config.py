# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine configuration options."""

# doc strings following items are picked up by sphinx for documentation

import logging


DEFAULT_MAX_SEQUENCE_DEPTH = 64

max_sequence_depth = DEFAULT_MAX_SEQUENCE_DEPTH
"""The maximum nesting depth of sequences accepted when parsing.

Streams nesting deeper than this raise
:class:`~dicomengine.errors.MalformedSequenceError` rather than exhausting
the interpreter's stack.

Default ``64``.
"""

allow_headerless = False
"""If ``True`` then :func:`~dicomengine.filereader.parse` accepts streams
without the 128-byte preamble and 'DICM' prefix when called without an
explicit `force` argument.

Default ``False``.
"""

private_tag_exceptions = []
"""Private groups (as :class:`int`) or private creator names (as
:class:`str`) that the ``strict`` validation level accepts.

Default ``[]``.
"""

debugging = False
"""``True`` when element level read and write tracing is logged. Set using
:func:`debug`."""

# Logging system and debug function to change logging level
logger = logging.getLogger('dicomengine')
logger.addHandler(logging.NullHandler())


import dicomengine.pixel_data_handlers.numpy_handler as np_handler  # noqa
import dicomengine.pixel_data_handlers.rle_handler as rle_handler  # noqa
import dicomengine.pixel_data_handlers.pillow_handler as pillow_handler  # noqa

pixel_data_handlers = [
    np_handler,
    rle_handler,
    pillow_handler,
]
"""Handlers for converting (7FE0,0010) *Pixel Data*.

.. currentmodule:: dicomengine.converter

This is an ordered list of *Pixel Data* handlers that :func:`pixel_array`
will use to try to extract a correctly sized numpy array from the *Pixel
Data* element.

Handlers shall have four methods:

def supports_transfer_syntax(transfer_syntax)
    Return ``True`` if the handler supports the transfer syntax `uid.UID`,
    ``False`` otherwise.

def is_available():
    Return ``True`` if the handler's dependencies are installed, ``False``
    otherwise.

def get_pixeldata(ds):
    Return a correctly sized 1D :class:`numpy.ndarray` derived from the
    *Pixel Data* in :class:`Dataset` `ds` or raise an exception. Reshaping the
    returned array to the correct dimensions is handled automatically.

def should_change_PhotometricInterpretation_to_RGB(ds):
    Return ``True`` if the decoded samples are RGB regardless of the
    dataset's *Photometric Interpretation*.

The first handler that both announces that it supports the transfer syntax
and does not raise an exception is the handler that will provide the
data. If they all fail only the last exception is reported.
"""


def debug(debug_on=True, default_handler=True):
    """Turn on/off debugging of DICOM parsing and serialization.

    When debugging is on, buffer offsets and details about the elements read
    or written at that location are logged to the 'dicomengine' logger using
    Python's :mod:`logging` module.

    Parameters
    ----------
    debug_on : bool, optional
        If ``True`` (default) then turn on debugging, ``False`` to turn off.
    default_handler : bool, optional
        If ``True`` (default) then use :class:`logging.StreamHandler` as the
        handler for log messages.
    """
    global logger, debugging

    if default_handler:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if debug_on:
        logger.setLevel(logging.DEBUG)
        debugging = True
    else:
        logger.setLevel(logging.WARNING)
        debugging = False


def reset():
    """Restore the default configuration values."""
    global max_sequence_depth, allow_headerless, private_tag_exceptions
    global pixel_data_handlers

    max_sequence_depth = DEFAULT_MAX_SEQUENCE_DEPTH
    allow_headerless = False
    private_tag_exceptions = []
    pixel_data_handlers = [np_handler, rle_handler, pillow_handler]


# force level=WARNING, in case logging default is set differently
debug(False, False)
