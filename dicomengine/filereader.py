# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Read a DICOM Part 10 byte stream into a Dataset"""

import os
from struct import Struct
import zlib

from dicomengine import config
from dicomengine.charset import convert_encodings
from dicomengine.config import logger
from dicomengine.datadict import dictionary_VR
from dicomengine.dataelem import (
    DataElement, RawDataElement, DataElement_from_raw
)
from dicomengine.dataset import Dataset, FileMetaDataset
from dicomengine.errors import (
    NotDicomError, MalformedSequenceError, TruncatedDataError
)
from dicomengine.filebase import DicomBytesIO
from dicomengine.sequence import Sequence
from dicomengine.tag import (
    ItemTag, ItemDelimiterTag, SequenceDelimiterTag, TupleTag, BaseTag
)
import dicomengine.uid
from dicomengine.util.hexutil import bytes2hex
from dicomengine.valuerep import default_encoding, extra_length_VRs, VALID_VRS


UNDEFINED_LENGTH = 0xFFFFFFFF
_CHARSET_TAG = BaseTag(0x00080005)
_BITS_ALLOCATED_TAG = BaseTag(0x00280100)
_PIXEL_REPRESENTATION_TAG = BaseTag(0x00280103)
_PIXEL_DATA_TAGS = (
    BaseTag(0x7FE00008), BaseTag(0x7FE00009), BaseTag(0x7FE00010)
)
_ENCAPSULATED_VRS = ('OB', 'OW', 'UN', 'OB or OW')

# Keyed by is_little_endian
_TAG_LENGTH = {True: Struct('<HHL'), False: Struct('>HHL')}
_TAG_VR_LENGTH = {True: Struct('<HH2sH'), False: Struct('>HH2sH')}
_LONG_LENGTH = {True: Struct('<L'), False: Struct('>L')}
_LE_GROUP = Struct('<H')


def _header_trace(offset, raw, tag, VR, length):
    """Return the debug line for an element header."""
    shown = "Undefined length (FFFFFFFF)"
    if length != UNDEFINED_LENGTH:
        shown = str(length)
    vr = f" {VR}" if VR is not None else ""
    return f"{offset:08x}: {bytes2hex(raw):<38}  {tag}{vr} Length: {shown}"


def _check_delimiter_length(fp, length):
    if length:
        logger.warning(
            f"Delimiter at 0x{fp.tell() - 8:x} has a length of 0x{length:x}"
            ", expected 0"
        )


class _HeaderReader:
    """Reads element headers in one transfer syntax.

    Calling an instance returns ``(tag, VR, length)``, with `VR` ``None``
    for implicit VR elements and for items and delimiters.
    """
    def __init__(self, fp, is_implicit_VR, is_little_endian):
        self.fp = fp
        self.is_implicit_VR = is_implicit_VR
        self.is_little_endian = is_little_endian

    def __call__(self):
        fp = self.fp
        offset = fp.tell()
        raw = fp.read(8)
        little = bool(self.is_little_endian)
        group, elem, length = _TAG_LENGTH[little].unpack(raw)
        tag = TupleTag((group, elem))
        VR = None
        # Items and delimiters never carry a VR
        if not self.is_implicit_VR and group != 0xFFFE:
            _, _, code, length = _TAG_VR_LENGTH[little].unpack(raw)
            VR = code.decode(default_encoding, errors='replace')
            if VR not in VALID_VRS:
                raise NotDicomError(
                    f"Unknown VR '{VR}' for the element {tag} at offset "
                    f"0x{offset:x}"
                )
            if VR in extra_length_VRs:
                extra = fp.read(4)
                raw += extra
                length = _LONG_LENGTH[little].unpack(extra)[0]

        if config.debugging:
            logger.debug(_header_trace(offset, raw, tag, VR, length))

        return tag, VR, length


def data_element_generator(fp, is_implicit_VR, is_little_endian,
                           stop_when=None, depth=0,
                           encoding=default_encoding,
                           stop_at_item_delimiter=False):
    """Yield the elements of a dataset read from `fp`.

    Values with a defined length are yielded as
    :class:`~dicomengine.dataelem.RawDataElement`, sequences and undefined
    length values already decoded as
    :class:`~dicomengine.dataelem.DataElement`.

    Parameters
    ----------
    fp : filebase.DicomIO
        The stream, positioned at the first element.
    is_implicit_VR : bool
        The VR encoding of the dataset.
    is_little_endian : bool
        The byte order of the dataset.
    stop_when : callable, optional
        Called with each tag before it is read, reading stops on ``True``.
    depth : int, optional
        How deeply the dataset is nested in sequences.
    encoding : list of str, optional
        Encodings passed on to nested sequences.
    stop_at_item_delimiter : bool, optional
        Read up to an Item Delimitation Item, as for an undefined length
        sequence item.

    Raises
    ------
    NotDicomError
        For an unknown explicit VR.
    MalformedSequenceError
        For items or delimiters in the wrong place.
    TruncatedDataError
        If a value runs past the end of the data.
    """
    read_header = _HeaderReader(fp, is_implicit_VR, is_little_endian)
    while not fp.at_end:
        if stop_when is not None and stop_when(fp.peek_tag()):
            return

        tag, VR, length = read_header()
        if tag == ItemDelimiterTag:
            if not stop_at_item_delimiter:
                raise MalformedSequenceError(
                    f"Unexpected Item Delimitation Item at offset "
                    f"0x{fp.tell() - 8:x}"
                )
            _check_delimiter_length(fp, length)
            return

        if tag == ItemTag:
            raise MalformedSequenceError(
                f"Unexpected Item tag outside of a sequence at offset "
                f"0x{fp.tell() - 8:x}"
            )
        if tag == SequenceDelimiterTag:
            raise MalformedSequenceError(
                f"Unexpected Sequence Delimitation Item outside of a "
                f"sequence at offset 0x{fp.tell() - 8:x}"
            )

        if length == UNDEFINED_LENGTH:
            yield _undefined_length_element(
                fp, tag, VR, is_implicit_VR, is_little_endian, encoding,
                depth
            )
            continue

        if VR == 'SQ':
            seq = read_sequence(fp, is_implicit_VR, is_little_endian,
                                length, encoding, depth)
            yield DataElement(tag, VR, seq, already_converted=True)
            continue

        value_tell = fp.tell()
        value = fp.read(length) if length else b''
        if config.debugging and value:
            logger.debug(f"{value_tell:08x}: {bytes2hex(value[:12])}"
                         f"{'...' if length > 12 else ''}")

        if VR is None and _is_implicit_sequence(tag, value, is_little_endian):
            seq = _try_sequence(value, tag, is_little_endian, encoding, depth)
            if seq is not None:
                yield DataElement(tag, 'SQ', seq, already_converted=True)
                continue

        if tag == _CHARSET_TAG:
            # Nested sequences inherit the character set
            from dicomengine.values import convert_string
            encoding = convert_encodings(
                convert_string(value, is_little_endian) or None
            )

        yield RawDataElement(tag, VR, length, value, value_tell,
                             is_implicit_VR, is_little_endian)

    if stop_at_item_delimiter:
        raise MalformedSequenceError(
            "End of data reached before the Item Delimitation Item of an "
            "undefined length sequence item"
        )


def _try_sequence(value, tag, is_little_endian, encoding, depth):
    """Return `value` read as an implicit VR sequence, or ``None`` if it
    doesn't parse as one and the dictionary doesn't say it must.
    """
    item_fp = DicomBytesIO(value)
    item_fp.is_little_endian = is_little_endian
    try:
        return read_sequence(item_fp, True, is_little_endian, len(value),
                             encoding, depth)
    except (MalformedSequenceError, TruncatedDataError):
        if _dictionary_is_sequence(tag):
            raise
        return None


def _undefined_length_element(fp, tag, VR, is_implicit_VR,
                              is_little_endian, encoding, depth):
    """Return the element for an undefined length value, read up to its
    delimiter.
    """
    if VR is None:
        try:
            VR = dictionary_VR(tag)
        except KeyError:
            # Unknown tags holding items are sequences
            VR = 'SQ' if fp.peek_tag() == ItemTag else 'UN'

    if VR == 'SQ':
        seq = read_sequence(fp, is_implicit_VR, is_little_endian,
                            UNDEFINED_LENGTH, encoding, depth)
        return DataElement(tag, VR, seq, is_undefined_length=True,
                           already_converted=True)

    if VR == 'UN' and not is_implicit_VR and tag not in _PIXEL_DATA_TAGS:
        # Always an implicit VR little endian sequence
        logger.debug(f"Reading {tag} UN as an undefined length sequence")
        fp.is_little_endian = True
        try:
            seq = read_sequence(fp, True, True, UNDEFINED_LENGTH, encoding,
                                depth)
        finally:
            fp.is_little_endian = is_little_endian
        return DataElement(tag, 'SQ', seq, is_undefined_length=True,
                           already_converted=True)

    if VR in _ENCAPSULATED_VRS:
        value = read_encapsulated_value(fp, is_little_endian)
        return DataElement(tag, 'OB' if VR == 'OB or OW' else VR, value,
                           is_undefined_length=True, already_converted=True)

    raise MalformedSequenceError(
        f"Undefined length found for the element {tag} with VR '{VR}' at "
        f"offset 0x{fp.tell():x}"
    )


def _dictionary_is_sequence(tag):
    """Return ``True`` if the dictionary VR of `tag` is 'SQ'."""
    try:
        return dictionary_VR(tag) == 'SQ'
    except KeyError:
        return False


def _is_implicit_sequence(tag, value, is_little_endian):
    """Return ``True`` if the defined length implicit VR `value` is made of
    sequence items.
    """
    try:
        return dictionary_VR(tag) == 'SQ'
    except KeyError:
        pass

    if tag.is_private_creator or len(value) < 8:
        return False

    group, elem, length = _TAG_LENGTH[bool(is_little_endian)].unpack(value[:8])
    if TupleTag((group, elem)) != ItemTag:
        return False

    return length == UNDEFINED_LENGTH or length <= len(value) - 8


def read_encapsulated_value(fp, is_little_endian):
    """Return the item framing of an undefined length encapsulated value.

    The returned bytes hold every item (tag, length and fragment) up to, but
    not including, the Sequence Delimitation Item, which is consumed.

    Raises
    ------
    MalformedSequenceError
        If a non-item tag, an undefined length item or the end of the data
        is found before the delimiter.
    """
    start = fp.tell()
    while True:
        if fp.at_end:
            raise MalformedSequenceError(
                "End of data reached before the Sequence Delimitation Item "
                f"of the encapsulated value starting at 0x{start:x}"
            )

        item_start = fp.tell()
        tag = fp.read_tag()
        length = fp.read_UL()
        if tag == SequenceDelimiterTag:
            _check_delimiter_length(fp, length)
            end = item_start
            break

        if tag != ItemTag or length == UNDEFINED_LENGTH:
            raise MalformedSequenceError(
                f"Expected a defined length item in the encapsulated value "
                f"at offset 0x{item_start:x}, found {tag}"
            )
        fp.read(length)

    fp.seek(start)
    value = fp.read(end - start)
    fp.read(8)
    return value


def read_dataset(fp, is_implicit_VR, is_little_endian, bytelength=None,
                 stop_when=None, parent_encoding=default_encoding,
                 depth=0, stop_at_item_delimiter=False):
    """Read the next dataset in `fp`.

    Parameters
    ----------
    fp : filebase.DicomIO
        The stream to read from.
    is_implicit_VR : bool
        The VR encoding of the dataset.
    is_little_endian : bool
        The byte order of the dataset.
    bytelength : int, optional
        The number of bytes the dataset occupies, default to read until the
        data (or the Item Delimitation Item) ends.
    stop_when : callable, optional
        Called with each tag before it is read, reading stops on ``True``.
    parent_encoding : str or list of str, optional
        The character set used until a (0008,0005) *Specific Character Set*
        element is read.
    depth : int, optional
        How deeply the dataset is nested in sequences.
    stop_at_item_delimiter : bool, optional
        Read up to an Item Delimitation Item.

    Returns
    -------
    dataset.Dataset
        The decoded elements.
    """
    if isinstance(parent_encoding, str):
        parent_encoding = [parent_encoding]

    ds = Dataset(parent_encoding=parent_encoding)
    ds.is_implicit_VR = is_implicit_VR
    ds.is_little_endian = is_little_endian

    encoding = parent_encoding
    pixel_representation = None
    bits_allocated = None
    start = fp.tell()
    stop = stop_when
    if bytelength is not None:
        def stop(tag):
            if fp.tell() - start >= bytelength:
                return True
            return stop_when is not None and stop_when(tag)

    elements = data_element_generator(
        fp, is_implicit_VR, is_little_endian, stop, depth, encoding,
        stop_at_item_delimiter
    )
    for raw in elements:
        elem = raw
        if isinstance(raw, RawDataElement):
            elem = DataElement_from_raw(
                raw, encoding, pixel_representation, bits_allocated
            )

        if elem.tag == _CHARSET_TAG:
            encoding = convert_encodings(elem.value or None)
        elif elem.tag == _PIXEL_REPRESENTATION_TAG:
            pixel_representation = elem.value
        elif elem.tag == _BITS_ALLOCATED_TAG:
            bits_allocated = elem.value

        if elem.tag in ds:
            logger.warning(f"Duplicate element {elem.tag} found, the last "
                           "value read is used")
        ds.add(elem)

    if bytelength is not None and fp.tell() - start != bytelength:
        raise MalformedSequenceError(
            f"Sequence item contents ended at 0x{fp.tell():x}, which doesn't "
            f"match the item length of {bytelength} bytes"
        )

    return ds


def read_sequence(fp, is_implicit_VR, is_little_endian, bytelength,
                  encoding, depth=0):
    """Read the items of a sequence value into a
    :class:`~dicomengine.sequence.Sequence`.

    `bytelength` is the value length, or ``0xFFFFFFFF`` when the sequence
    ends with a Sequence Delimitation Item.

    Raises
    ------
    MalformedSequenceError
        If the items don't fit the sequence or the nesting is deeper than
        :attr:`~dicomengine.config.max_sequence_depth`.
    """
    if depth >= config.max_sequence_depth:
        raise MalformedSequenceError(
            f"Sequences nested deeper than the maximum of "
            f"{config.max_sequence_depth} levels"
        )

    delimited = bytelength == UNDEFINED_LENGTH
    end = None if delimited else fp.tell() + bytelength
    items = []
    while end is None or fp.tell() < end:
        if fp.at_end:
            if delimited:
                raise MalformedSequenceError(
                    "End of data reached before the Sequence Delimitation "
                    "Item of an undefined length sequence"
                )
            break

        item = read_sequence_item(fp, is_implicit_VR, is_little_endian,
                                  encoding, depth + 1, delimited)
        if item is None:
            break
        items.append(item)

    if end is not None and fp.tell() != end:
        raise MalformedSequenceError(
            f"Sequence items ended at 0x{fp.tell():x}, which doesn't match "
            f"the sequence length of {bytelength} bytes"
        )

    return Sequence(items, is_undefined_length=delimited)


def read_sequence_item(fp, is_implicit_VR, is_little_endian, encoding,
                       depth=1, in_undefined_length_sequence=True):
    """Read one sequence item as a :class:`~dicomengine.dataset.Dataset`.

    Returns ``None`` for the Sequence Delimitation Item that ends an
    undefined length sequence.
    """
    offset = fp.tell()
    tag = fp.read_tag()
    length = fp.read_UL()
    if tag == SequenceDelimiterTag:
        if not in_undefined_length_sequence:
            raise MalformedSequenceError(
                f"Unexpected Sequence Delimitation Item at offset "
                f"0x{offset:x} in a defined length sequence"
            )
        logger.debug(f"{offset:08x}: End of Sequence")
        _check_delimiter_length(fp, length)
        return None

    if tag != ItemTag:
        raise MalformedSequenceError(
            f"Expected a sequence item at offset 0x{offset:x}, found {tag}"
        )

    if config.debugging:
        logger.debug(f"{offset:08x}: Item of depth {depth}")

    delimited = length == UNDEFINED_LENGTH
    ds = read_dataset(
        fp, is_implicit_VR, is_little_endian,
        bytelength=None if delimited else length,
        parent_encoding=encoding, depth=depth,
        stop_at_item_delimiter=delimited
    )
    ds.is_undefined_length_sequence_item = delimited
    return ds


def _not_group_0002(tag):
    return tag is None or tag.group != 2


def _read_meta_group(fp, is_implicit_VR):
    fp.is_little_endian = True
    return read_dataset(fp, is_implicit_VR, True, stop_when=_not_group_0002)


def read_file_meta_info(fp):
    """Return the group 0x0002 File Meta Information elements at the
    current position of `fp`.

    The group is explicit VR little endian, though implicit VR is accepted
    with a warning. Afterwards `fp` is positioned at the first element of
    the dataset.

    Returns
    -------
    dataset.FileMetaDataset
        The elements read, empty if there are none.
    """
    start = fp.tell()
    try:
        elements = _read_meta_group(fp, False)
    except NotDicomError:
        logger.warning("The File Meta Information is implicit VR, which "
                       "isn't allowed, reading it anyway")
        fp.seek(start)
        elements = _read_meta_group(fp, True)

    file_meta = FileMetaDataset(elements)
    declared = file_meta.get('FileMetaInformationGroupLength')
    if declared is not None:
        # Counted from the end of the 12 byte group length element
        actual = fp.tell() - start - 12
        if declared != actual:
            logger.info(f"(0002,0000) File Meta Information Group Length is "
                        f"{declared} but the group has {actual} bytes")

    return file_meta


def read_preamble(fp, force):
    """Return the 128 byte preamble that precedes the 'DICM' prefix.

    Afterwards `fp` is positioned just past the prefix. Without a prefix
    `fp` is rewound to the start and ``None`` is returned, provided `force`
    is ``True``.

    Raises
    ------
    NotDicomError
        If there is no 'DICM' prefix and `force` is ``False``.
    """
    preamble = fp.parent_read(128)
    prefix = fp.parent_read(4)
    if prefix == b"DICM":
        logger.debug(f"{fp.tell() - 4:08x}: 'DICM' prefix found")
        return preamble

    if not force:
        raise NotDicomError(
            "No 'DICM' prefix at offset 128 so the data isn't a DICOM "
            "Part 10 stream. Use force=True to read it without a header."
        )

    logger.info("No 'DICM' prefix found, reading the data as a dataset "
                "without a header")
    fp.seek(0)
    return None


def _first_header(fp):
    """Return up to 6 bytes of the next element header without moving."""
    start = fp.tell()
    header = fp.parent_read(6)
    fp.seek(start)
    return header


def _looks_implicit(header):
    # A VR is two uppercase letters, very unlikely as the low bytes of a
    # 4 byte length
    if len(header) < 6:
        return True

    return not all(0x40 < char < 0x5B for char in header[4:6])


def _guess_transfer_syntax(fp):
    """Return ``(is_implicit_VR, is_little_endian)`` judged from the first
    element of a dataset with no (0002,0010) *Transfer Syntax UID*.
    """
    header = _first_header(fp)
    VR = header[4:6].decode(default_encoding, errors='replace')
    if _looks_implicit(header) or VR not in VALID_VRS:
        return True, True

    # Only explicit VR is big endian. Big endian group 0x0008 reads as
    # little endian 0x0800
    group = _LE_GROUP.unpack(header[:2])[0]
    return False, group < 0x0400


def _inflate(fp):
    try:
        data = zlib.decompress(fp.read(), -zlib.MAX_WBITS)
    except zlib.error as exc:
        raise NotDicomError(
            f"Unable to inflate the deflated dataset: {exc}"
        ) from exc

    return DicomBytesIO(data)


def _dataset_encoding(fp, transfer_syntax):
    """Return ``(fp, is_implicit_VR, is_little_endian)`` for the dataset
    following the File Meta Information.

    A deflated dataset is inflated into a new stream. When data is present
    the VR encoding is checked against the first element header.
    """
    if not transfer_syntax:
        if fp.at_end:
            return fp, True, True
        logger.info("No (0002,0010) 'Transfer Syntax UID' found, guessing "
                    "the encoding from the first element")
        return (fp, *_guess_transfer_syntax(fp))

    if not isinstance(transfer_syntax, str):
        raise NotDicomError(
            "The (0002,0010) 'Transfer Syntax UID' must be a single UID, "
            f"not {transfer_syntax!r}"
        )

    syntax = dicomengine.uid.UID(transfer_syntax)
    if syntax.is_transfer_syntax:
        is_implicit_VR = syntax.is_implicit_VR
        is_little_endian = syntax.is_little_endian
    elif fp.at_end:
        return fp, True, True
    else:
        logger.warning(f"Unknown transfer syntax '{syntax}', reading the "
                       "dataset as explicit VR little endian")
        is_implicit_VR, is_little_endian = False, True

    if fp.at_end:
        return fp, is_implicit_VR, is_little_endian

    if syntax.is_transfer_syntax and syntax.is_deflated:
        fp = _inflate(fp)

    found_implicit = _looks_implicit(_first_header(fp))
    if found_implicit != is_implicit_VR:
        found = 'implicit' if found_implicit else 'explicit'
        logger.warning(f"The transfer syntax is {syntax.name} but the "
                       f"dataset is {found} VR, reading it as {found} VR")
        is_implicit_VR = found_implicit

    return fp, is_implicit_VR, is_little_endian


def parse(buffer, force=None):
    """Parse a DICOM Part 10 byte stream and return the decoded dataset.

    Parameters
    ----------
    buffer : bytes or bytearray
        The encoded data.
    force : bool, optional
        If ``True`` accept streams without the preamble and 'DICM' prefix.
        Defaults to :attr:`~dicomengine.config.allow_headerless`.

    Returns
    -------
    dataset.Dataset
        The decoded dataset, with its ``file_meta`` and ``preamble``.

    Raises
    ------
    NotDicomError
        If the header is missing and the parser isn't permissive, or an
        unknown explicit VR is found.
    TruncatedDataError
        If an element runs past the end of the buffer.
    MalformedSequenceError
        If the sequence framing is inconsistent or nested too deeply.
    """
    if force is None:
        force = config.allow_headerless

    fp = DicomBytesIO(bytes(buffer))
    preamble = read_preamble(fp, force)
    file_meta = read_file_meta_info(fp)
    fp, is_implicit_VR, is_little_endian = _dataset_encoding(
        fp, file_meta.get("TransferSyntaxUID")
    )

    fp.is_little_endian = is_little_endian
    fp.is_implicit_VR = is_implicit_VR
    dataset = read_dataset(fp, is_implicit_VR, is_little_endian)
    dataset.preamble = preamble
    dataset.file_meta = file_meta
    return dataset


def dcmread(fp, force=None):
    """Read and parse a DICOM Part 10 file.

    Parameters
    ----------
    fp : str or PathLike or bytes or file-like
        A path to the file, the encoded data itself or a readable binary
        file-like object.
    force : bool, optional
        See :func:`parse`.

    Returns
    -------
    dataset.Dataset
        The decoded dataset.
    """
    if isinstance(fp, (bytes, bytearray, memoryview)):
        return parse(fp, force=force)

    if isinstance(fp, (str, os.PathLike)):
        logger.debug(f"Reading file '{fp}'")
        with open(fp, 'rb') as f:
            return parse(f.read(), force=force)

    return parse(fp.read(), force=force)
