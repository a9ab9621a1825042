# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Decoding of encoded element values by VR.

Every entry in :data:`converters` is called as
``converter(byte_string, is_little_endian, encodings)``. Word VRs (**OW**,
**OF** and so on) are returned as little endian bytes whatever the source
byte order.
"""

from struct import Struct, unpack, calcsize

import numpy

from dicomengine.charset import decode_bytes
from dicomengine.config import logger
from dicomengine.tag import TupleTag
from dicomengine.uid import UID
from dicomengine.valuerep import DS, IS, default_encoding, word_VRs


_TAG_STRUCTS = {True: Struct('<HH'), False: Struct('>HH')}


def convert_tag(byte_string, is_little_endian, offset=0):
    """Return the tag encoded at `offset` in `byte_string`."""
    group_elem = _TAG_STRUCTS[bool(is_little_endian)].unpack_from(
        byte_string, offset
    )
    return TupleTag(group_elem)


def swap_words(byte_string, width):
    """Return `byte_string` with the byte order of each `width` byte word
    reversed.

    Values whose length isn't a multiple of `width` are returned unchanged.
    """
    if width == 1 or not byte_string or len(byte_string) % width:
        return byte_string

    words = numpy.frombuffer(byte_string, dtype=f'u{width}')
    return words.byteswap().tobytes()


def MultiString(val, valtype=None):
    """Return the backslash separated values in `val`.

    Trailing space and NULL padding is removed first. A single value is
    returned on its own rather than in a list, and an empty value as
    ``''``.

    Parameters
    ----------
    val : str
        The decoded text.
    valtype : callable, optional
        Applied to each value, default :class:`str`.
    """
    valtype = valtype or str
    values = val.rstrip(' \x00').split('\\')
    if len(values) > 1:
        return [valtype(v) for v in values]

    return valtype(values[0]) if values[0] else ''


def _ascii(byte_string):
    return byte_string.decode(default_encoding)


def convert_string(byte_string, is_little_endian, encodings=None):
    """Decode a default repertoire multi-valued string (AS, CS, DA, DT
    and TM).
    """
    return MultiString(_ascii(byte_string))


def convert_AE_string(byte_string, is_little_endian, encodings=None):
    """Decode an **AE** value, where leading spaces aren't significant
    either.
    """
    return MultiString(_ascii(byte_string), str.strip)


def convert_UI(byte_string, is_little_endian, encodings=None):
    return MultiString(_ascii(byte_string), UID)


def convert_UR_string(byte_string, is_little_endian, encodings=None):
    """Decode a **UR** value, which is never split on backslashes."""
    return _ascii(byte_string).rstrip()


def convert_text(byte_string, is_little_endian=True, encodings=None):
    """Decode a multi-valued text string (LO, PN, SH and UC) using the
    *Specific Character Set* `encodings`.
    """
    return MultiString(
        decode_bytes(byte_string, encodings or [default_encoding])
    )


def convert_single_string(byte_string, is_little_endian=True, encodings=None):
    """Decode a single valued text string (LT, ST and UT)."""
    text = decode_bytes(byte_string, encodings or [default_encoding])
    return text.rstrip('\x00 ')


def _number_string(byte_string, valtype, description):
    text = _ascii(byte_string)
    if not text.strip(' \x00'):
        return None

    try:
        return MultiString(text, valtype)
    except (ValueError, TypeError):
        logger.warning(f"Invalid {description} value '{text.strip()}'")
        return MultiString(text)


def convert_DS_string(byte_string, is_little_endian, encodings=None):
    """Decode a **DS** value to :class:`DSfloat`, or ``None`` if empty.

    Invalid decimal strings are logged and kept as :class:`str`.
    """
    return _number_string(byte_string, DS, 'decimal string')


def convert_IS_string(byte_string, is_little_endian, encodings=None):
    """Decode an **IS** value to :class:`IS`, or ``None`` if empty.

    Invalid integer strings are logged and kept as :class:`str`.
    """
    return _number_string(byte_string, IS, 'integer string')


def convert_ATvalue(byte_string, is_little_endian, encodings=None):
    """Decode an **AT** value to one tag or a list of them.

    Raises
    ------
    ValueError
        If the length isn't a multiple of 4.
    """
    length = len(byte_string)
    if not length:
        return None

    if length % 4:
        raise ValueError(
            "Expected length to be multiple of 4 for VR 'AT', got length "
            f"{length}"
        )

    tags = [
        convert_tag(byte_string, is_little_endian, offset)
        for offset in range(0, length, 4)
    ]
    return tags[0] if len(tags) == 1 else tags


def convert_numbers(byte_string, is_little_endian, struct_format):
    """Decode binary numbers packed with the :mod:`struct` character
    `struct_format`.

    Returns
    -------
    int or float or list or None
        A single value on its own, several as a list, ``None`` if empty.

    Raises
    ------
    ValueError
        If the length isn't a multiple of the value size.
    """
    size = calcsize('=' + struct_format)
    count, remainder = divmod(len(byte_string), size)
    if remainder:
        shown = repr(byte_string) if len(byte_string) <= 256 else ''
        raise ValueError(
            "Expected total bytes to be an even multiple of bytes per value. "
            f"Instead received {shown} with length {len(byte_string)} and "
            f"struct format '{struct_format}' which corresponds to bytes per "
            f"value of {size}."
        )

    if not count:
        return None

    order = '<' if is_little_endian else '>'
    values = unpack(f"{order}{count}{struct_format}", byte_string)
    return values[0] if count == 1 else list(values)


def convert_OWvalue(byte_string, is_little_endian, width=2):
    """Return a word VR value as little endian bytes.

    `width` is the size of each word in bytes.
    """
    if is_little_endian:
        return byte_string

    return swap_words(byte_string, width)


def convert_value(VR, raw_data_element, encodings=None):
    """Return the decoded value of `raw_data_element` as `VR`.

    **SQ** values are decoded by the parser and have no converter.

    Parameters
    ----------
    VR : str
        The VR to decode as.
    raw_data_element : dataelem.RawDataElement
        The parsed element, giving the bytes and their byte order.
    encodings : list of str, optional
        Python codecs for the text VRs.

    Raises
    ------
    NotImplementedError
        If `VR` has no converter.
    ValueError
        If the value can't be decoded as `VR`.
    """
    converter = converters.get(VR)
    if converter is None:
        raise NotImplementedError(f"Unknown Value Representation '{VR}'")

    return converter(
        raw_data_element.value, raw_data_element.is_little_endian, encodings
    )


def _numbers(struct_format):
    def convert(byte_string, is_little_endian, encodings=None):
        return convert_numbers(byte_string, is_little_endian, struct_format)
    return convert


def _words(width):
    def convert(byte_string, is_little_endian, encodings=None):
        return convert_OWvalue(byte_string, is_little_endian, width)
    return convert


# VR -> converter(byte_string, is_little_endian, encodings)
converters = {
    'AE': convert_AE_string,
    'AT': convert_ATvalue,
    'DS': convert_DS_string,
    'IS': convert_IS_string,
    'UI': convert_UI,
    'UR': convert_UR_string,
}
converters.update(
    dict.fromkeys(('AS', 'CS', 'DA', 'DT', 'TM'), convert_string)
)
converters.update(dict.fromkeys(('LO', 'PN', 'SH', 'UC'), convert_text))
converters.update(dict.fromkeys(('LT', 'ST', 'UT'), convert_single_string))
converters.update(
    (VR, _words(width)) for VR, width in word_VRs.items()
)
converters.update(
    (VR, _numbers(fmt)) for VR, fmt in (
        ('FD', 'd'), ('FL', 'f'), ('SL', 'l'), ('SS', 'h'), ('SV', 'q'),
        ('UL', 'L'), ('US', 'H'), ('UV', 'Q'),
    )
)
