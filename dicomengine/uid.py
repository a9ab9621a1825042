# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""DICOM unique identifiers, the transfer syntaxes and SOP classes the
engine knows about, and UID generation.
"""

import hashlib
import re
import uuid
from typing import List, NamedTuple, Optional, TypeVar, Type, Union

from dicomengine._uid_dict import UID_dictionary


# A UUID derived root (PS3.5 Annex B.2) so no organisational root is needed
DICOMENGINE_ROOT_UID = "2.25.{}.".format(
    uuid.uuid5(uuid.NAMESPACE_OID, "dicomengine").int
)
"""The prefix of every UID generated by dicomengine"""
DICOMENGINE_IMPLEMENTATION_UID = DICOMENGINE_ROOT_UID + '1'
"""The (0002,0012) *Implementation Class UID* written to file meta"""

_MAX_UID_LENGTH = 64
_DICOM_ROOT = '1.2.840.10008.'
# Dot separated components without leading zeros
_RE_UID = re.compile(r'(0|[1-9][0-9]*)(\.(0|[1-9][0-9]*))*')


class _Encoding(NamedTuple):
    implicit_VR: bool = False
    little_endian: bool = True
    deflated: bool = False
    encapsulated: bool = True


_UID = TypeVar("_UID", bound="UID")


class UID(str):
    """A DICOM UID as a :class:`str` with dictionary and transfer syntax
    properties.

    Trailing NULL and space padding is removed on creation.

    >>> UID('1.2.840.10008.1.2.2').is_little_endian
    False
    >>> UID('1.2.840.10008.1.2.4.50').name
    'JPEG Baseline (Process 1)'

    The transfer syntax properties raise :class:`ValueError` for any other
    kind of UID.
    """
    def __new__(cls: Type[_UID], val: str) -> _UID:
        if not isinstance(val, str):
            raise TypeError("A UID must be created from a string")

        return super().__new__(cls, val.strip(' \x00'))

    def _encoding(self) -> _Encoding:
        if not self.is_transfer_syntax:
            raise ValueError(f"'{self}' is not a transfer syntax")

        return _NATIVE_ENCODINGS.get(self, _Encoding())

    @property
    def is_transfer_syntax(self) -> bool:
        """``True`` for transfer syntaxes in the UID dictionary."""
        return not self.is_private and self.type == 'Transfer Syntax'

    @property
    def is_implicit_VR(self) -> bool:
        return self._encoding().implicit_VR

    @property
    def is_little_endian(self) -> bool:
        return self._encoding().little_endian

    @property
    def is_deflated(self) -> bool:
        return self._encoding().deflated

    @property
    def is_compressed(self) -> bool:
        """``True`` if the pixel data is encapsulated."""
        return self._encoding().encapsulated

    is_encapsulated = is_compressed

    def _lookup(self, index: int, default: str = '') -> str:
        entry = UID_dictionary.get(str(self))
        return entry[index] if entry else default

    @property
    def name(self) -> str:
        """The dictionary name, or the UID itself if it isn't listed."""
        return self._lookup(0, str(self))

    @property
    def type(self) -> str:
        """The dictionary type, such as 'SOP Class', or ``''``."""
        return self._lookup(1)

    @property
    def keyword(self) -> str:
        return self._lookup(4)

    @property
    def is_private(self) -> bool:
        """``True`` unless the UID is under the DICOM root."""
        return not self.startswith(_DICOM_ROOT)

    @property
    def is_valid(self) -> bool:
        return (
            len(self) <= _MAX_UID_LENGTH
            and _RE_UID.fullmatch(self) is not None
        )


# Transfer syntaxes
ImplicitVRLittleEndian = UID('1.2.840.10008.1.2')
ExplicitVRLittleEndian = UID('1.2.840.10008.1.2.1')
DeflatedExplicitVRLittleEndian = UID('1.2.840.10008.1.2.1.99')
ExplicitVRBigEndian = UID('1.2.840.10008.1.2.2')
JPEGBaseline8Bit = UID('1.2.840.10008.1.2.4.50')
JPEGExtended12Bit = UID('1.2.840.10008.1.2.4.51')
JPEGLosslessP14 = UID('1.2.840.10008.1.2.4.57')
JPEGLosslessSV1 = UID('1.2.840.10008.1.2.4.70')
JPEGLSLossless = UID('1.2.840.10008.1.2.4.80')
JPEGLSNearLossless = UID('1.2.840.10008.1.2.4.81')
JPEG2000Lossless = UID('1.2.840.10008.1.2.4.90')
JPEG2000 = UID('1.2.840.10008.1.2.4.91')
RLELossless = UID('1.2.840.10008.1.2.5')

# Encapsulated syntaxes all use the explicit VR little endian default
_NATIVE_ENCODINGS = {
    ImplicitVRLittleEndian: _Encoding(implicit_VR=True, encapsulated=False),
    ExplicitVRLittleEndian: _Encoding(encapsulated=False),
    DeflatedExplicitVRLittleEndian: _Encoding(
        deflated=True, encapsulated=False
    ),
    ExplicitVRBigEndian: _Encoding(little_endian=False, encapsulated=False),
}

UncompressedTransferSyntaxes = list(_NATIVE_ENCODINGS)
"""Native (uncompressed) transfer syntaxes."""

RLETransferSyntaxes = [RLELossless]

AllTransferSyntaxes = UncompressedTransferSyntaxes + [
    JPEGBaseline8Bit, JPEGExtended12Bit, JPEGLosslessP14, JPEGLosslessSV1,
    JPEGLSLossless, JPEGLSNearLossless, JPEG2000Lossless, JPEG2000,
    RLELossless,
]
"""Every transfer syntax the parser and serializer recognise."""

# Storage SOP classes
ComputedRadiographyImageStorage = UID('1.2.840.10008.5.1.4.1.1.1')
DigitalXRayImageStorageForPresentation = UID('1.2.840.10008.5.1.4.1.1.1.1')
CTImageStorage = UID('1.2.840.10008.5.1.4.1.1.2')
MRImageStorage = UID('1.2.840.10008.5.1.4.1.1.4')
UltrasoundImageStorage = UID('1.2.840.10008.5.1.4.1.1.6.1')
SecondaryCaptureImageStorage = UID('1.2.840.10008.5.1.4.1.1.7')
NuclearMedicineImageStorage = UID('1.2.840.10008.5.1.4.1.1.20')
PositronEmissionTomographyImageStorage = UID('1.2.840.10008.5.1.4.1.1.128')
RTDoseStorage = UID('1.2.840.10008.5.1.4.1.1.481.2')


def generate_uid(prefix: Union[str, None] = DICOMENGINE_ROOT_UID,
                 entropy_srcs: Optional[List[str]] = None) -> UID:
    """Return a new UID of at most 64 characters.

    Parameters
    ----------
    prefix : str or None, optional
        The root the UID is made under, which must end with ``'.'``
        (default :attr:`DICOMENGINE_ROOT_UID`). ``None`` gives a ``'2.25.'``
        UID from a random :func:`uuid.uuid4`.
    entropy_srcs : list of str, optional
        The suffix is the decimal SHA512 digest of these strings, truncated
        to fit, so the same sources always give the same UID. Without them
        a random UUID is used.

    Raises
    ------
    ValueError
        If `prefix` isn't a valid UID root of at most 63 characters.
    """
    if prefix is None:
        return UID(f"2.25.{uuid.uuid4().int}")

    if len(prefix) >= _MAX_UID_LENGTH:
        raise ValueError("The prefix must be less than 63 chars")
    if not prefix.endswith('.') or not _RE_UID.fullmatch(prefix[:-1]):
        raise ValueError("The prefix is not in a valid format")

    if entropy_srcs is None:
        entropy_srcs = [uuid.uuid4().hex]

    digest = hashlib.sha512(''.join(entropy_srcs).encode('utf-8'))
    suffix = str(int(digest.hexdigest(), 16))

    return UID(prefix + suffix[:_MAX_UID_LENGTH - len(prefix)])
