# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""(0008,0005) *Specific Character Set* support for text values.

Code extension escape sequences aren't interpreted. A multi-valued character
set is tried one Python codec after another, which is right for the common
single byte and UTF-8 cases.
"""
import warnings

from dicomengine.config import logger
from dicomengine.valuerep import default_encoding


# ISO-IR registration number -> Python codec, for both the single byte
# 'ISO_IR n' and the code extension 'ISO 2022 IR n' forms
_ISO_IR = {
    '6': default_encoding,
    '13': 'shift_jis',
    '100': 'latin_1',
    '101': 'iso8859_2',
    '109': 'iso8859_3',
    '110': 'iso8859_4',
    '126': 'iso_ir_126',  # Greek
    '127': 'iso_ir_127',  # Arabic
    '138': 'iso_ir_138',  # Hebrew
    '144': 'iso_ir_144',  # Cyrillic
    '148': 'iso_ir_148',  # Latin 5
    '166': 'iso_ir_166',  # Thai
}
# Multi-byte sets only defined with code extensions
_ISO_2022_IR = {
    '58': 'iso_ir_58',
    '87': 'iso2022_jp',
    '149': 'euc_kr',
    '159': 'iso-2022-jp',
}

python_encoding = {
    '': default_encoding,
    'ISO_IR 192': 'UTF8',
    'GB18030': 'GB18030',
    'GBK': 'GBK',
    'ISO 2022 GBK': 'GBK',
    'ISO 2022 58': 'GB2312',
}
"""Specific Character Set defined term -> Python codec name"""
python_encoding.update(
    (f'ISO_IR {number}', codec) for number, codec in _ISO_IR.items()
)
python_encoding.update(
    (f'ISO 2022 IR {number}', codec)
    for number, codec in {**_ISO_IR, **_ISO_2022_IR}.items()
)


def _lookup(term):
    if term in python_encoding:
        return python_encoding[term]

    # 'ISO_IR_100' and 'ISO IR 100' are frequent misspellings
    if 'IR' in term:
        fixed = term.replace('_', ' ').replace('ISO IR', 'ISO_IR')
        if fixed in python_encoding:
            logger.warning(
                f"Incorrect value for Specific Character Set '{term}' - "
                f"assuming '{fixed}'"
            )
            return python_encoding[fixed]

    logger.warning(
        f"Unknown encoding '{term}' - using default encoding instead"
    )
    return default_encoding


def convert_encodings(encodings):
    """Return the Python codecs for a *Specific Character Set* value.

    Parameters
    ----------
    encodings : str or list of str or None
        The element value; empty values mean the default repertoire.

    Returns
    -------
    list of str
        One codec per term, unknown terms logged and replaced with the
        default. Never empty.
    """
    if not encodings:
        return [default_encoding]

    if isinstance(encodings, str):
        encodings = [encodings]

    return [_lookup((term or '').strip()) for term in encodings]


def decode_bytes(value, encodings):
    """Return `value` decoded with the first codec in `encodings` that
    accepts it.

    If none do, a :class:`UserWarning` is issued and the first codec is used
    with replacement characters.
    """
    for encoding in encodings:
        try:
            return value.decode(encoding)
        except UnicodeError:
            pass

    warnings.warn(
        f"Failed to decode byte string with encodings: "
        f"{', '.join(encodings)} - using replacement characters in decoded "
        "string"
    )
    return value.decode(encodings[0], errors='replace')


def encode_string(value, encodings):
    """Return `value` encoded with the first codec in `encodings` that can
    represent it, replacing characters as a last resort.
    """
    for encoding in encodings:
        try:
            return value.encode(encoding)
        except UnicodeError:
            pass

    warnings.warn(
        f"Failed to encode value with encodings: {', '.join(encodings)} - "
        "using replacement characters in encoded string"
    )
    return value.encode(encodings[0], errors='replace')
