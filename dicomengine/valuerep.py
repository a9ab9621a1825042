# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Special classes and groupings for DICOM value representations (VR)"""

import re
from decimal import Decimal
from typing import Tuple, Type, TypeVar, Optional, Union, Dict

# Types
_IS = TypeVar("_IS", bound="IS")

# can't import from charset or get circular import
default_encoding = "iso8859"

# For reading/writing data elements,
# these ones have longer explicit VR format
# Taken from PS3.5 Section 7.1.2
extra_length_VRs = (
    'OB', 'OD', 'OF', 'OL', 'OV', 'OW', 'SQ', 'SV', 'UC', 'UN', 'UR', 'UT',
    'UV'
)

# VRs that can be affected by character repertoire
# in (0008,0005) Specific Character Set
# See PS-3.5 (2011), section 6.1.2 Graphic Characters
text_VRs: Tuple[str, ...] = ('SH', 'LO', 'ST', 'LT', 'UC', 'UT', 'PN')

# VRs that never hold more than one value; backslash is not a delimiter
single_value_VRs: Tuple[str, ...] = ('LT', 'ST', 'UT', 'UR')

# String VRs, padded with a space to an even length except for UI
string_VRs: Tuple[str, ...] = (
    'AE', 'AS', 'CS', 'DA', 'DS', 'DT', 'IS', 'LO', 'LT', 'PN', 'SH', 'ST',
    'TM', 'UC', 'UI', 'UR', 'UT'
)

# Binary numeric VRs with their struct format character
numeric_VRs: Dict[str, str] = {
    'US': 'H', 'SS': 'h', 'UL': 'L', 'SL': 'l', 'FL': 'f', 'FD': 'd',
    'SV': 'q', 'UV': 'Q',
}

# Byte stream VRs with the width of the words they hold; words other than
# bytes are byte swapped when read from or written to a big endian stream
word_VRs: Dict[str, int] = {
    'OB': 1, 'UN': 1, 'OW': 2, 'OF': 4, 'OL': 4, 'OD': 8, 'OV': 8,
}
binary_VRs: Tuple[str, ...] = tuple(word_VRs)

# VRs understood by the parser
VALID_VRS = (
    set(string_VRs) | set(numeric_VRs) | set(word_VRs) | {'AT', 'SQ'}
)

# Maximum length of a single value in characters, see PS3.5 Table 6.2-1
MAX_VALUE_LENGTHS: Dict[str, int] = {
    'AE': 16, 'AS': 4, 'CS': 16, 'DA': 8, 'DS': 16, 'DT': 26, 'IS': 12,
    'LO': 64, 'LT': 10240, 'PN': 64, 'SH': 16, 'ST': 1024, 'TM': 14,
    'UI': 64,
}


def _range_regex(regex: str) -> str:
    """Compose a regex that allows ranges of the given regex,
    as defined for VRs DA, DT and TM in PS 3.4, C.2.2.2.5.
    """
    return rf"^{regex}$|^\-{regex} ?$|^{regex}\- ?$|^{regex}\-{regex} ?$"


# regular expressions to match valid values for some VRs
VR_REGEXES = {
    'AE': r"^[\x20-\x7e]*$",
    'AS': r"^\d\d\d[DWMY]$",
    'CS': r"^[A-Z0-9 _]*$",
    'DS': r"^ *[+\-]?(\d+|\d+\.\d*|\.\d+)([eE][+\-]?\d+)? *$",
    'IS': r"^ *[+\-]?\d+ *$",
    'DA': _range_regex(r"\d{4}(0[1-9]|1[0-2])([0-2]\d|3[01])"),
    'DT': _range_regex(
        r"\d{4}((0[1-9]|1[0-2])(([0-2]\d|3[01])(([01]\d|2[0-3])"
        r"([0-5]\d((60|[0-5]\d)(\.\d{1,6} ?)?)?)?)?)?)?([+-][01]\d\d\d)?"
    ),
    'TM': _range_regex(
        r"([01]\d|2[0-3])([0-5]\d((60|[0-5]\d)(\.\d{1,6} ?)?)?)?"
    ),
    'UI': r"^(0|[1-9][0-9]*)(\.(0|[1-9][0-9]*))*$",
}

STR_VR_REGEXES = {vr: re.compile(regex) for (vr, regex) in VR_REGEXES.items()}

# Inclusive ranges of the binary integer VRs
INT_VR_RANGES: Dict[str, Tuple[int, int]] = {
    'SS': (-0x8000, 0x7FFF),
    'US': (0, 0xFFFF),
    'SL': (-0x80000000, 0x7FFFFFFF),
    'UL': (0, 0xFFFFFFFF),
    'SV': (-0x8000000000000000, 0x7FFFFFFFFFFFFFFF),
    'UV': (0, 0xFFFFFFFFFFFFFFFF),
}


def validate_vr_length(VR: str, value: str) -> Tuple[bool, str]:
    """Validate the length of a single string `value` for `VR`.

    Returns
    -------
        A tuple of a boolean validation result and the error message.
    """
    max_length = MAX_VALUE_LENGTHS.get(VR, 0)
    if VR == 'PN':
        # The limit applies to each component group
        lengths = [len(group) for group in value.split('=')]
    else:
        lengths = [len(value)]

    if max_length and max(lengths) > max_length:
        return False, (
            f"The value length ({max(lengths)}) exceeds the maximum length "
            f"of {max_length} allowed for VR {VR}"
        )
    return True, ''


def validate_regex(VR: str, value: str) -> Tuple[bool, str]:
    """Validate a single string `value` for `VR` using a regular expression.

    Returns
    -------
        A tuple of a boolean validation result and the error message.
    """
    regex = STR_VR_REGEXES.get(VR)
    if value and regex is not None:
        if not regex.match(value) or value[-1] == '\n':
            return False, f"Invalid value for VR {VR}: {value!r}"
    return True, ''


def validate_number(VR: str, value: int) -> Tuple[bool, str]:
    """Validate the range of a single integer `value` for `VR`."""
    min_value, max_value = INT_VR_RANGES[VR]
    if value < min_value or value > max_value:
        return False, (
            f"Invalid value: a value for a tag with VR {VR} must be "
            f"between {min_value} and {max_value}"
        )
    return True, ''


def validate_value(VR: str, value: object) -> Tuple[bool, str]:
    """Validate a single `value` against the format of `VR`.

    Parameters
    ----------
    VR : str
        The value representation to validate against.
    value : object
        A single value, the string form is checked for string VRs.

    Returns
    -------
        A tuple of a boolean validation result and the error message.
    """
    if value is None:
        return True, ''

    if VR in INT_VR_RANGES:
        if not isinstance(value, int):
            return False, (
                f"A value of type '{type(value).__name__}' cannot be "
                f"used with VR {VR}"
            )
        return validate_number(VR, value)

    if VR in string_VRs:
        value = str(value)
        # A malformed value is reported as such, whatever its length
        valid, msg = validate_regex(VR, value)
        if not valid:
            return valid, msg
        return validate_vr_length(VR, value)

    return True, ''


class DSfloat(float):
    """Store value for an element with VR **DS** as :class:`float`.

    The original string is kept, if one is given, so the value can be written
    back out exactly as it was read.
    """
    def __init__(self, val: Union[str, int, float, Decimal]) -> None:
        """Store the original string if one given, for exact write-out of same
        value later.
        """
        if isinstance(val, str):
            self.original_string = val.strip()
        elif isinstance(val, DSfloat) and hasattr(val, 'original_string'):
            self.original_string = val.original_string

    def __str__(self) -> str:
        if hasattr(self, 'original_string'):
            return self.original_string

        return repr(self)[1:-1]

    def __repr__(self) -> str:
        return f'"{super().__repr__()}"'


def DS(val: Union[None, str, int, float, Decimal]) -> Union[None, DSfloat]:
    """Factory function for creating :class:`DSfloat` instances.

    Returns ``None`` for a blank string or ``None``.
    """
    if isinstance(val, str):
        val = val.strip()

    if val == '' or val is None:
        return None

    return DSfloat(val)


class IS(int):
    """Store value for an element with VR **IS** as :class:`int`.

    Stores original integer string for exact rewriting of the string
    originally read or stored.
    """

    def __new__(
        cls: Type[_IS], val: Union[None, str, int, float, Decimal]
    ) -> Optional[_IS]:
        """Create instance if new integer string"""
        if val is None:
            return val

        if isinstance(val, str) and val.strip() == '':
            return None

        try:
            newval = super().__new__(cls, val)
        except ValueError:
            # accept float strings when no integer loss, e.g. "1.0"
            newval = super().__new__(cls, float(val))

        # check if a float or Decimal passed in, then could have lost info,
        # and will raise error. E.g. IS(Decimal('1')) is ok, but not IS(1.23)
        if isinstance(val, (float, Decimal, str)) and newval != float(val):
            raise TypeError("Could not convert value to integer without loss")

        return newval

    def __init__(self, val: Union[str, int, float, Decimal]) -> None:
        # If a string passed, then store it
        if isinstance(val, str):
            self.original_string = val.strip()
        elif isinstance(val, IS) and hasattr(val, 'original_string'):
            self.original_string = val.original_string

    def __str__(self) -> str:
        if hasattr(self, 'original_string'):
            return self.original_string

        return repr(self)[1:-1]

    def __repr__(self) -> str:
        return f'"{super().__repr__()}"'


def format_DS(val: float) -> str:
    """Return a **DS** string of at most 16 characters for `val`."""
    if isinstance(val, DSfloat) and hasattr(val, 'original_string'):
        return val.original_string

    s = repr(float(val))
    if s.endswith('.0'):
        s = s[:-2]
    if len(s) <= 16:
        return s

    # Shrink the precision until the value fits
    for precision in range(15, 0, -1):
        s = f"{val:.{precision}g}"
        if len(s) <= 16:
            return s

    raise OverflowError(f"Unable to fit '{val}' into a 16 character DS")
