# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Encode datasets as DICOM Part 10 byte streams.

Element values are encoded into a scratch buffer first so the length field
can be written ahead of the value without seeking back. Group length
(gggg,0000) values are always recomputed.
"""

from functools import partial
import os
from struct import pack
import zlib

from dicomengine import config
from dicomengine._version import __version__
from dicomengine.charset import convert_encodings, encode_string
from dicomengine.config import logger
from dicomengine.dataelem import DataElement, correct_ambiguous_VR
from dicomengine.dataset import FileMetaDataset
from dicomengine.errors import UnsupportedTransferSyntaxError
from dicomengine.filebase import DicomBytesIO
from dicomengine.tag import (
    Tag, ItemTag, ItemDelimiterTag, SequenceDelimiterTag, tag_in_exception
)
from dicomengine.uid import (
    UID, ImplicitVRLittleEndian, ExplicitVRLittleEndian, ExplicitVRBigEndian,
    DICOMENGINE_IMPLEMENTATION_UID
)
from dicomengine.util.hexutil import bytes2hex
from dicomengine.values import swap_words
from dicomengine.valuerep import (
    default_encoding, extra_length_VRs, text_VRs, word_VRs, format_DS
)


IMPLEMENTATION_VERSION_NAME = ('DICOMENGINE' + __version__)[:16]
UNDEFINED_LENGTH = 0xFFFFFFFF
_MAX_SHORT_LENGTH = 0xFFFF
# The item tag as written by encapsulated pixel data
_ENCAPSULATED_START = b'\xfe\xff\x00\xe0'


def _as_list(value):
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _even(data, padding):
    """Return `data` padded to an even length with `padding`."""
    return data + padding if len(data) % 2 else data


# Value encoders: each takes the output stream (for its byte order), the
# element and the text encodings, and returns the encoded value

def _encode_ascii(fp, elem, encodings, padding=b' '):
    if isinstance(elem.value, bytes):
        return _even(elem.value, padding)

    text = "\\".join(str(v) for v in _as_list(elem.value))
    return _even(text.encode(default_encoding), padding)


def _encode_text(fp, elem, encodings):
    encoded = [
        v if isinstance(v, bytes) else encode_string(str(v), encodings)
        for v in _as_list(elem.value)
    ]
    return _even(b'\\'.join(encoded), b' ')


def _number_string(value):
    """Return the text for one **DS** or **IS** value, reusing the text it
    was parsed from where there is one.
    """
    if value is None:
        return ''

    original = getattr(value, 'original_string', None)
    if original is not None:
        return original

    if isinstance(value, float):
        return format_DS(value)

    return str(value)


def _encode_number_string(fp, elem, encodings):
    text = "\\".join(_number_string(v) for v in _as_list(elem.value))
    return _even(text.encode(default_encoding), b' ')


def _encode_numbers(fp, elem, encodings, fmt):
    fmt = ('<' if fp.is_little_endian else '>') + fmt
    try:
        return b''.join(pack(fmt, v) for v in _as_list(elem.value))
    except Exception as exc:
        raise ValueError(f"{exc}\nfor data_element:\n{elem}") from exc


def _encode_words(fp, elem, encodings):
    # Values are held as little endian words, OB and UN have 1 byte words
    if fp.is_little_endian:
        return elem.value

    return swap_words(elem.value, word_VRs[elem.VR])


def _encode_tags(fp, elem, encodings):
    buffer = _scratch(fp)
    for value in _as_list(elem.value):
        buffer.write_tag(Tag(value))

    return buffer.getvalue()


def _encode_sequence(fp, elem, encodings):
    buffer = _scratch(fp)
    for item in elem.value:
        write_sequence_item(buffer, item, encodings)

    return buffer.getvalue()


_ENCODERS = {
    'AT': _encode_tags,
    'SQ': _encode_sequence,
    'UI': partial(_encode_ascii, padding=b'\x00'),
}
_ENCODERS.update(dict.fromkeys(
    ('AE', 'AS', 'CS', 'DA', 'DT', 'TM', 'UR'), _encode_ascii
))
_ENCODERS.update(dict.fromkeys(text_VRs, _encode_text))
_ENCODERS.update(dict.fromkeys(('DS', 'IS'), _encode_number_string))
_ENCODERS.update(dict.fromkeys(word_VRs, _encode_words))
_ENCODERS.update({
    VR: partial(_encode_numbers, fmt=fmt) for VR, fmt in (
        ('FD', 'd'), ('FL', 'f'), ('SL', 'l'), ('SS', 'h'), ('SV', 'q'),
        ('UL', 'L'), ('US', 'H'), ('UV', 'Q'),
    )
})


def _scratch(fp):
    """Return an empty buffer encoding like `fp`."""
    buffer = DicomBytesIO()
    buffer.is_little_endian = fp.is_little_endian
    buffer.is_implicit_VR = fp.is_implicit_VR
    return buffer


def _resolve_VR(VR):
    if VR in _ENCODERS:
        return VR

    resolved = correct_ambiguous_VR(VR, None)
    if resolved not in _ENCODERS:
        raise NotImplementedError(
            f"Unable to encode an element with the VR '{VR}'"
        )

    return resolved


def write_sequence_item(fp, dataset, encodings):
    """Write `dataset` to `fp` as a sequence item (PS3.5 Section 7.5).

    Items read with an item delimiter are written the same way, any other
    item gets an explicit length.
    """
    fp.write_tag(ItemTag)
    if not dataset.is_undefined_length_sequence_item:
        buffer = _scratch(fp)
        write_dataset(buffer, dataset, parent_encoding=encodings)
        fp.write_UL(buffer.tell())
        fp.write(buffer.getvalue())
        return

    fp.write_UL(UNDEFINED_LENGTH)
    write_dataset(fp, dataset, parent_encoding=encodings)
    fp.write_tag(ItemDelimiterTag)
    fp.write_UL(0)


def write_data_element(fp, data_element, encodings=None):
    """Write `data_element` to `fp` using the byte order and VR mode of
    `fp`.

    Explicit VR elements with a 2-byte length field whose value is longer
    than 64 kB are written as **UN** instead, with a warning.

    Raises
    ------
    ValueError
        If the value can't be encoded, or undefined length *Pixel Data*
        isn't encapsulated.
    NotImplementedError
        If the VR is unknown.
    """
    tag = data_element.tag
    VR = _resolve_VR(data_element.VR)
    if VR == 'SQ':
        undefined = data_element.value.is_undefined_length
    else:
        undefined = data_element.is_undefined_length

    value = b''
    if not data_element.is_empty:
        value = _ENCODERS[VR](
            fp, data_element, encodings or [default_encoding]
        )

    if undefined and VR != 'SQ' and not value.startswith(_ENCAPSULATED_START):
        raise ValueError(
            f"{tag} has an undefined length indicating that it's "
            "encapsulated, but the value doesn't start with an item tag"
        )

    explicit = not fp.is_implicit_VR
    short_length = explicit and VR not in extra_length_VRs and not undefined
    if short_length and len(value) > _MAX_SHORT_LENGTH:
        logger.warning(
            f"The value for the data element {tag} exceeds the size of 64 "
            "kByte and cannot be written in an explicit transfer syntax. "
            f"The data element VR is changed from '{VR}' to 'UN' to allow "
            "saving the data."
        )
        VR, short_length = 'UN', False

    if config.debugging:
        logger.debug(
            f"{fp.tell():08x}: {tag} {VR} Length: "
            f"{'Undefined' if undefined else len(value)}"
        )

    fp.write_tag(tag)
    if explicit:
        fp.write(VR.encode(default_encoding))
    if short_length:
        fp.write_US(len(value))
    else:
        if explicit and VR in extra_length_VRs:
            fp.write_US(0)
        fp.write_UL(UNDEFINED_LENGTH if undefined else len(value))

    fp.write(value)
    if undefined:
        fp.write_tag(SequenceDelimiterTag)
        fp.write_UL(0)


def write_dataset(fp, dataset, parent_encoding=default_encoding):
    """Write the elements of `dataset` to `fp` in ascending tag order.

    Text is encoded with the dataset's own (0008,0005) *Specific Character
    Set*, or `parent_encoding` if it has none.

    Returns
    -------
    int
        The number of bytes written.
    """
    if isinstance(parent_encoding, str):
        parent_encoding = [parent_encoding]

    char_set = dataset.get('SpecificCharacterSet')
    encodings = convert_encodings(char_set) if char_set else parent_encoding

    start = fp.tell()
    # A group with a group length element is buffered until it is complete
    pending = None
    for elem in dataset:
        tag = elem.tag
        if pending is not None and tag.group != pending[0].group:
            _flush_group(fp, *pending)
            pending = None

        if tag.is_group_length:
            pending = (tag, _scratch(fp))
            continue

        with tag_in_exception(tag):
            out = fp if pending is None else pending[1]
            write_data_element(out, elem, encodings)

    if pending is not None:
        _flush_group(fp, *pending)

    return fp.tell() - start


def _flush_group(fp, tag, group):
    with tag_in_exception(tag):
        write_data_element(fp, DataElement(tag, 'UL', group.tell()))

    fp.write(group.getvalue())


def write_file_meta_info(fp, file_meta):
    """Write `file_meta` to `fp` as *Explicit VR Little Endian*.

    (0002,0000) *File Meta Information Group Length* comes first, set to the
    length of the elements that follow it. `file_meta` isn't changed.

    Raises
    ------
    ValueError
        If `file_meta` has elements outside group 2.
    """
    meta = FileMetaDataset(file_meta).copy()
    meta.FileMetaInformationGroupLength = 0

    buffer = DicomBytesIO()
    buffer.is_little_endian = True
    buffer.is_implicit_VR = False
    write_dataset(buffer, meta)
    fp.write(buffer.getvalue())


def _transfer_syntax_of(ds):
    """Return the transfer syntax `ds` was read with, or ``None``."""
    file_meta = ds.__dict__.get('file_meta')
    if file_meta is not None and file_meta.get('TransferSyntaxUID'):
        return UID(file_meta.TransferSyntaxUID)

    if ds.is_implicit_VR:
        return ImplicitVRLittleEndian
    if ds.is_little_endian is False:
        return ExplicitVRBigEndian
    if ds.is_implicit_VR is False:
        return ExplicitVRLittleEndian

    return None


def _check_transfer_syntax(ds, source, target):
    """Raise if `ds` can't be encoded with the `target` transfer syntax.

    Raises
    ------
    UnsupportedTransferSyntaxError
        If `target` is unknown or private, or changing from `source`
        would require decoding or re-encoding the *Pixel Data*.
    """
    if not target.is_transfer_syntax:
        raise UnsupportedTransferSyntaxError(
            target, "unknown or private transfer syntax"
        )

    pixel_data = ds.get(0x7FE00010)
    if pixel_data is None:
        return

    is_encapsulated = pixel_data.is_undefined_length
    if is_encapsulated != target.is_encapsulated:
        raise UnsupportedTransferSyntaxError(
            target,
            "the Pixel Data is {} and would need to be {}".format(
                'encapsulated' if is_encapsulated else 'native',
                'decoded' if is_encapsulated else 'compressed'
            )
        )

    if (
        is_encapsulated
        and source is not None
        and source.is_transfer_syntax
        and source.is_encapsulated
        and source != target
    ):
        raise UnsupportedTransferSyntaxError(
            target,
            f"the Pixel Data would need to be transcoded from '{source.name}'"
        )


def _output_file_meta(ds, target):
    """Return the file meta to write for `ds`, leaving ``ds.file_meta``
    unchanged.
    """
    file_meta = ds.__dict__.get('file_meta')
    file_meta = FileMetaDataset() if file_meta is None else file_meta.copy()
    if 'FileMetaInformationVersion' not in file_meta:
        file_meta.FileMetaInformationVersion = b'\x00\x01'
    if 'SOPClassUID' in ds:
        file_meta.MediaStorageSOPClassUID = ds.SOPClassUID
    if 'SOPInstanceUID' in ds:
        file_meta.MediaStorageSOPInstanceUID = ds.SOPInstanceUID

    file_meta.TransferSyntaxUID = target
    file_meta.ImplementationClassUID = DICOMENGINE_IMPLEMENTATION_UID
    file_meta.ImplementationVersionName = IMPLEMENTATION_VERSION_NAME
    return file_meta


def _deflate(data):
    """Return `data` as a raw deflate stream padded to an even length."""
    compressor = zlib.compressobj(
        zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -zlib.MAX_WBITS
    )
    return _even(compressor.compress(data) + compressor.flush(), b'\x00')


def serialize(ds, transfer_syntax=None):
    """Return `ds` encoded as a DICOM Part 10 byte stream.

    The stream holds the 128-byte preamble, the 'DICM' prefix, the File Meta
    Information and the dataset encoded with the transfer syntax.

    Parameters
    ----------
    ds : dataset.Dataset
        The dataset to encode, it isn't modified.
    transfer_syntax : str, optional
        The transfer syntax UID to encode with. Defaults to the transfer
        syntax in ``ds.file_meta``, then the encoding `ds` was read with, then
        *Explicit VR Little Endian*.

    Returns
    -------
    bytes
        The encoded data.

    Raises
    ------
    UnsupportedTransferSyntaxError
        If the transfer syntax can't be used for `ds`.
    ValueError
        If `ds` holds File Meta Information (0002,eeee) elements or has a
        preamble that isn't 128 bytes.
    """
    source = _transfer_syntax_of(ds)
    if transfer_syntax is None:
        target = source or ExplicitVRLittleEndian
    else:
        target = UID(transfer_syntax)

    _check_transfer_syntax(ds, source, target)
    if any(tag.group == 2 for tag in ds.keys()):
        raise ValueError(
            "File Meta Information Group Elements (0002,eeee) should be in "
            "their own Dataset object in the 'file_meta' attribute."
        )

    preamble = ds.preamble or b'\x00' * 128
    if len(preamble) != 128:
        raise ValueError("'preamble' must be 128-bytes long.")

    fp = DicomBytesIO()
    fp.write(preamble + b'DICM')
    write_file_meta_info(fp, _output_file_meta(ds, target))
    if config.debugging:
        logger.debug(
            f"{fp.tell():08x}: File Meta Information written with transfer "
            f"syntax '{target.name}'"
        )

    body = DicomBytesIO()
    body.is_implicit_VR = target.is_implicit_VR
    body.is_little_endian = target.is_little_endian
    write_dataset(body, ds, parent_encoding=ds._character_set)
    data = body.getvalue()
    if target.is_deflated:
        data = _deflate(data)

    if config.debugging:
        logger.debug(f"Dataset written: {bytes2hex(data[:16])}...")

    return fp.getvalue() + data


def dcmwrite(filename, dataset, transfer_syntax=None):
    """Write `dataset` to a file, see :func:`serialize`.

    Parameters
    ----------
    filename : str or PathLike or file-like
        The path to write to, or an open binary file-like.
    dataset : dataset.Dataset
        The dataset to write.
    transfer_syntax : str, optional
        The transfer syntax UID to encode with.
    """
    data = serialize(dataset, transfer_syntax)
    if not isinstance(filename, (str, os.PathLike)):
        filename.write(data)
        return

    with open(filename, 'wb') as f:
        f.write(data)
