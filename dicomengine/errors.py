# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Module for dicomengine exception classes"""


class DicomEngineError(Exception):
    """Base class for all errors raised by the engine."""


class NotDicomError(DicomEngineError):
    """Exception that is raised when the the data does not appear to be DICOM.

    Usually raised when the "DICM" prefix is not present at position 128 in
    the buffer.

    To force reading the data (because maybe it is a DICOM stream without
    a header), use ``parse(..., force=True)``.
    """

    def __init__(self, *args):
        if not args:
            args = ('The specified data is not a valid DICOM file.', )
        super().__init__(*args)


class TruncatedDataError(DicomEngineError):
    """Raised when reading past the end of the buffer.

    Attributes
    ----------
    offset : int
        The buffer offset the read started at.
    length : int
        The number of bytes requested.
    available : int
        The number of bytes that were actually left.
    """

    def __init__(self, offset, length, available=0):
        self.offset = offset
        self.length = length
        self.available = available
        super().__init__(
            "Unexpected end of data. Read {0} bytes of {1} expected "
            "starting at position 0x{2:x}".format(available, length, offset)
        )


class UnsupportedTransferSyntaxError(DicomEngineError):
    """Raised for a transfer syntax that can't be decoded or encoded."""

    def __init__(self, transfer_syntax, reason=None):
        self.transfer_syntax = transfer_syntax
        msg = f"The transfer syntax '{transfer_syntax}' is not supported"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class MalformedSequenceError(DicomEngineError):
    """Raised for mismatched item/delimiter framing or excessive nesting."""


class VrMismatchError(DicomEngineError):
    """Raised when a typed accessor doesn't fit the element's VR."""

    def __init__(self, tag, VR, requested):
        self.tag = tag
        self.VR = VR
        self.requested = requested
        super().__init__(
            f"Element {tag} has a VR of '{VR}' and can't be accessed "
            f"as {requested}"
        )


class RuleValueError(DicomEngineError):
    """Raised when an anonymization replacement value doesn't fit the VR."""

    def __init__(self, tag, value, reason):
        self.tag = tag
        self.value = value
        self.reason = reason
        super().__init__(
            f"Unable to replace the value of {tag} with {value!r}: {reason}"
        )


class ConversionError(DicomEngineError):
    """Raised when pixel data can't be decoded, rendered or encoded."""
