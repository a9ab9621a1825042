# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Byte level reading and writing of DICOM streams.

:class:`DicomBytesIO` is the cursor the reader and writer work through. The
byte order of the US, UL and tag helpers follows
:attr:`DicomIO.is_little_endian`, which may change partway through a stream
(the file meta is always little endian).
"""

from io import BytesIO
from struct import Struct

from dicomengine.errors import TruncatedDataError
from dicomengine.tag import Tag, BaseTag, TupleTag


_LE_US, _BE_US = Struct('<H'), Struct('>H')
_LE_UL, _BE_UL = Struct('<L'), Struct('>L')
_LE_TAG, _BE_TAG = Struct('<HH'), Struct('>HH')


class DicomIO:
    """Endian aware primitives on top of ``parent_read``, ``write``,
    ``seek`` and ``tell``, which subclasses supply.
    """
    def __init__(self):
        self.is_implicit_VR = True
        self.is_little_endian = True

    def read(self, length=None):
        """Return the next `length` bytes, or all that remain if ``None``.

        Raises
        ------
        TruncatedDataError
            If fewer than `length` bytes remain. The position is left after
            the bytes that were available.
        """
        offset = self.tell()
        data = self.parent_read(length)
        if length is not None and len(data) < length:
            raise TruncatedDataError(offset, length, len(data))

        return data

    def _unpack(self, struct):
        return struct.unpack(self.read(struct.size))

    def read_leUS(self):
        return self._unpack(_LE_US)[0]

    def read_beUS(self):
        return self._unpack(_BE_US)[0]

    def read_leUL(self):
        return self._unpack(_LE_UL)[0]

    def read_beUL(self):
        return self._unpack(_BE_UL)[0]

    def read_le_tag(self):
        return TupleTag(self._unpack(_LE_TAG))

    def read_be_tag(self):
        return TupleTag(self._unpack(_BE_TAG))

    def read_US(self):
        return self._unpack(_LE_US if self._little_endian else _BE_US)[0]

    def read_UL(self):
        return self._unpack(_LE_UL if self._little_endian else _BE_UL)[0]

    def read_tag(self):
        """Return the next tag in the current byte order."""
        return TupleTag(
            self._unpack(_LE_TAG if self._little_endian else _BE_TAG)
        )

    def peek_tag(self):
        """Return the next tag without moving, or ``None`` if fewer than
        4 bytes remain.
        """
        position = self.tell()
        raw = self.parent_read(4)
        self.seek(position)
        if len(raw) < 4:
            return None

        struct = _LE_TAG if self._little_endian else _BE_TAG
        return TupleTag(struct.unpack(raw))

    @property
    def at_end(self):
        """``True`` if nothing is left to read."""
        position = self.tell()
        remaining = self.parent_read(1)
        self.seek(position)
        return not remaining

    def write_leUS(self, val):
        self.write(_LE_US.pack(val))

    def write_beUS(self, val):
        self.write(_BE_US.pack(val))

    def write_leUL(self, val):
        self.write(_LE_UL.pack(val))

    def write_beUL(self, val):
        self.write(_BE_UL.pack(val))

    def _write_tag(self, tag, struct):
        if not isinstance(tag, BaseTag):
            tag = Tag(tag)
        self.write(struct.pack(tag.group, tag.element))

    def write_le_tag(self, tag):
        self._write_tag(tag, _LE_TAG)

    def write_be_tag(self, tag):
        self._write_tag(tag, _BE_TAG)

    def write_US(self, val):
        self.write((_LE_US if self._little_endian else _BE_US).pack(val))

    def write_UL(self, val):
        self.write((_LE_UL if self._little_endian else _BE_UL).pack(val))

    def write_tag(self, tag):
        """Write `tag` in the current byte order."""
        self._write_tag(tag, _LE_TAG if self._little_endian else _BE_TAG)

    @property
    def is_little_endian(self):
        return self._little_endian

    @is_little_endian.setter
    def is_little_endian(self, value):
        self._little_endian = bool(value)

    @property
    def is_implicit_VR(self):
        return self._implicit_VR

    @is_implicit_VR.setter
    def is_implicit_VR(self, value):
        self._implicit_VR = bool(value)


class DicomBytesIO(DicomIO):
    """A :class:`DicomIO` over an in-memory buffer.

    Parameters
    ----------
    buffer : bytes, optional
        The initial contents; writes start at position 0.
    """
    name = '<no filename>'

    def __init__(self, buffer=b''):
        super().__init__()
        self.parent = BytesIO(buffer)
        self.parent_read = self.parent.read
        self.write = self.parent.write
        self.seek = self.parent.seek
        self.tell = self.parent.tell

    def getvalue(self):
        return self.parent.getvalue()

    def close(self):
        self.parent.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
