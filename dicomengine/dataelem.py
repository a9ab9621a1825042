# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""DICOM data elements.

:class:`DataElement` is the decoded form held in a
:class:`~dicomengine.dataset.Dataset`. :class:`RawDataElement` is what the
parser produces before the value bytes are decoded, and
:func:`DataElement_from_raw` turns one into the other.
"""

import base64
from typing import (
    Optional, Any, Tuple, Union, TYPE_CHECKING, Dict, List, NamedTuple
)

from dicomengine.datadict import (
    dictionary_has_tag, dictionary_description, dictionary_keyword,
    dictionary_is_retired, dictionary_VR
)
from dicomengine.config import logger
from dicomengine.errors import VrMismatchError
from dicomengine import jsonrep
from dicomengine.tag import Tag, BaseTag
from dicomengine.uid import UID
from dicomengine.valuerep import (
    DS, IS, string_VRs, single_value_VRs, binary_VRs
)

if TYPE_CHECKING:  # pragma: no cover
    from dicomengine.sequence import Sequence


INT_VRS = ('IS', 'SL', 'SS', 'SV', 'UL', 'US', 'UV')
FLOAT_VRS = ('DS', 'FD', 'FL')

# String VRs limited to the default repertoire, so bytes can be decoded
_ASCII_VRS = ('AE', 'AS', 'CS', 'DA', 'DS', 'DT', 'IS', 'TM', 'UI', 'UR')
_DELIMITER = '\\'
_UNDEFINED_LENGTH = 0xFFFFFFFF


def empty_value_for_VR(VR: Optional[str]) -> Any:
    """Return what an element of `VR` holds when it has no value.

    That is an empty :class:`~dicomengine.sequence.Sequence` for **SQ**,
    ``''`` for the text VRs, ``b''`` for the byte stream VRs and ``None``
    for everything else, **DS** and **IS** included.
    """
    if VR == 'SQ':
        from dicomengine.sequence import Sequence
        return Sequence()

    if VR in ('DS', 'IS'):
        return None

    if VR in string_VRs:
        return ''

    if VR in binary_VRs or VR in ('OB or OW', 'US or SS or OW'):
        return b''

    return None


class DataElement:
    """A tag, a VR and a normalised value.

    >>> elem = DataElement('ImageType', 'CS', 'ORIGINAL\\\\PRIMARY')
    >>> elem.value
    ['ORIGINAL', 'PRIMARY']
    >>> elem.VM
    2

    Setting :attr:`value` normalises it:

    * a text value containing ``'\\'`` is split into a list, except for the
      single valued VRs **LT**, **ST**, **UT** and **UR**
    * a list of one value is unwrapped and an empty list becomes the empty
      value for the VR (see :func:`empty_value_for_VR`)
    * **IS**, **DS**, **UI** and **AT** values become :class:`IS`,
      :class:`DSfloat` or :class:`DSdecimal`, :class:`UID` and
      :class:`~dicomengine.tag.BaseTag`
    * a list of datasets for **SQ** becomes a
      :class:`~dicomengine.sequence.Sequence` of frozen items

    Elements compare equal on tag, VR and value, and can't be hashed.

    Attributes
    ----------
    tag : dicomengine.tag.BaseTag
        The element tag.
    VR : str
        The element value representation.
    is_undefined_length : bool
        ``True`` if the element was, or is to be, encoded with an undefined
        (0xFFFFFFFF) length.
    """

    # Layout of str(elem)
    descripWidth = 35
    maxBytesToDisplay = 16
    showVR = True

    def __init__(
        self,
        tag: Union[int, str, Tuple[int, int]],
        VR: str,
        value: Any,
        is_undefined_length: bool = False,
        already_converted: bool = False
    ) -> None:
        """
        Parameters
        ----------
        tag : int or str or 2-tuple of int
            Anything :func:`~dicomengine.tag.Tag` accepts.
        VR : str
            The value representation.
        value
            The value, normalised unless `already_converted`.
        is_undefined_length : bool, optional
            Whether the encoded length is undefined (default ``False``).
        already_converted : bool, optional
            ``True`` when `value` is already in normalised form, as it is
            for values the parser has decoded.
        """
        self.tag = tag if isinstance(tag, BaseTag) else Tag(tag)
        # VR is needed by the value setter
        self.VR = VR
        if already_converted:
            self._value = value
        else:
            self.value = value

        self.is_undefined_length = is_undefined_length

    @property
    def value(self) -> Any:
        """The element value."""
        return self._value

    @value.setter
    def value(self, val: Any) -> None:
        splittable = (
            self.VR in string_VRs and self.VR not in single_value_VRs
        )
        if splittable and isinstance(val, str) and _DELIMITER in val:
            val = val.split(_DELIMITER)

        self._value = self._normalise(val)

    def _normalise(self, val: Any) -> Any:
        if self.VR == 'SQ':
            from dicomengine.sequence import Sequence
            return val if isinstance(val, Sequence) else Sequence(val or [])

        if val is None:
            return self.empty_value

        if not isinstance(val, (list, tuple)):
            return self._normalise_one(val)

        if not val:
            return self.empty_value

        items = [self._normalise_one(v) for v in val]
        return items[0] if len(items) == 1 else items

    def _normalise_one(self, val: Any) -> Any:
        if isinstance(val, bytes) and self.VR in _ASCII_VRS:
            val = val.decode('ascii')

        VR = self.VR
        if VR == 'IS':
            return IS(val)

        if VR == 'DS':
            return DS(val)

        if val is None:
            return '' if VR in string_VRs else None

        if VR == 'UI':
            return UID(val)

        if VR == 'AT' and not isinstance(val, BaseTag):
            return Tag(val)

        return val

    @property
    def VM(self) -> int:
        """The number of values held, 0 when empty."""
        value = self._value
        if value is None:
            return 0

        if isinstance(value, (str, bytes)):
            return int(bool(value))

        if isinstance(value, (list, tuple)):
            return len(value)

        return 1

    @property
    def is_empty(self) -> bool:
        return self.VM == 0

    @property
    def empty_value(self) -> Any:
        """The value this element holds when empty."""
        return empty_value_for_VR(self.VR)

    def clear(self) -> None:
        """Set the value to :attr:`empty_value`."""
        self._value = self.empty_value

    def __eq__(self, other: Any) -> Any:
        if other is self:
            return True

        if not isinstance(other, self.__class__):
            return NotImplemented

        return (
            self.tag == other.tag
            and self.VR == other.VR
            and self.value == other.value
        )

    def __ne__(self, other: Any) -> Any:
        return not self == other

    def __getitem__(self, key: int) -> Any:
        """Index into a multi-valued or sequence value."""
        try:
            return self.value[key]
        except TypeError:
            raise TypeError(
                "DataElement value is unscriptable (not a Sequence)"
            )

    # Dictionary information

    def description(self) -> str:
        """Return the dictionary name, or a generic name for private and
        group length elements.
        """
        tag = self.tag
        if tag.is_private:
            if tag.is_private_creator:
                return "Private Creator"
            return "Private tag data"

        if dictionary_has_tag(tag):
            return dictionary_description(tag)

        return "Group Length" if tag.is_group_length else ""

    @property
    def name(self) -> str:
        """Same as :meth:`description`."""
        return self.description()

    @property
    def keyword(self) -> str:
        """The dictionary keyword, ``''`` if there isn't one."""
        if not dictionary_has_tag(self.tag):
            return ''

        return dictionary_keyword(self.tag)

    @property
    def is_private(self) -> bool:
        return self.tag.is_private

    @property
    def is_retired(self) -> bool:
        return (
            dictionary_has_tag(self.tag)
            and bool(dictionary_is_retired(self.tag))
        )

    @property
    def dictionary_VR(self) -> Optional[str]:
        """The VR listed in the dictionary, or ``None`` if not listed."""
        try:
            return dictionary_VR(self.tag)
        except KeyError:
            return None

    # Display

    @property
    def repval(self) -> str:
        """A short display form of the value.

        Long byte values and values with many items are summarised and
        UIDs are shown by name.
        """
        value = self.value
        limit = self.maxBytesToDisplay
        if self.VR in binary_VRs or self.VR == 'UT':
            if hasattr(value, '__len__') and len(value) > limit:
                return f"Array of {len(value)} elements"

        if self.VM > limit:
            return f"Array of {self.VM} elements"

        if isinstance(value, UID):
            return value.name

        return repr(value)

    def __str__(self) -> str:
        width = self.descripWidth
        fields = [str(self.tag), f"{self.description()[:width]:<{width}}"]
        if self.showVR:
            fields.append(f"{self.VR}:")

        fields.append(self.repval or '')
        return " ".join(fields)

    def __repr__(self) -> str:
        if self.VR == "SQ":
            return repr(self.value)

        return str(self)

    # Typed accessors

    def _values(self) -> List[Any]:
        if self.is_empty:
            return []

        return self.value if isinstance(self.value, list) else [self.value]

    def _require(self, VRs, wanted: str) -> None:
        if self.VR not in VRs:
            raise VrMismatchError(self.tag, self.VR, wanted)

    def as_str(self) -> str:
        """Return a text value, multiple values joined with ``'\\'``.

        Raises
        ------
        VrMismatchError
            For elements without a text VR.
        """
        self._require(string_VRs, 'str')
        return _DELIMITER.join(self._text_values())

    def as_strings(self) -> List[str]:
        """Return each value of a text element, ``[]`` when empty.

        Raises
        ------
        VrMismatchError
            For elements without a text VR.
        """
        self._require(string_VRs, 'list of str')
        return self._text_values()

    def _text_values(self) -> List[str]:
        return ['' if v is None else str(v) for v in self._values()]

    def as_int(self) -> Optional[int]:
        """Return the first value as an :class:`int`, ``None`` when empty.

        Raises
        ------
        VrMismatchError
            Unless the VR is **IS** or one of the binary integer VRs.
        """
        self._require(INT_VRS, 'int')
        values = self._values()
        return int(values[0]) if values else None

    def as_float(self) -> Optional[float]:
        """Return the first value as a :class:`float`, ``None`` when empty.

        Raises
        ------
        VrMismatchError
            Unless the VR is numeric.
        """
        self._require(FLOAT_VRS + INT_VRS, 'float')
        values = self._values()
        return float(values[0]) if values else None

    def as_bytes(self) -> bytes:
        """Return the value of a byte stream element.

        Raises
        ------
        VrMismatchError
            For elements without a byte stream VR.
        """
        self._require(binary_VRs, 'bytes')
        return self.value

    def as_sequence(self) -> "Sequence":
        """Return the frozen items of an **SQ** element.

        Raises
        ------
        VrMismatchError
            For any other VR.
        """
        self._require(('SQ',), 'sequence')
        return self.value

    def to_json_dict(self) -> Dict[str, Any]:
        """Return the element in the DICOM JSON Model (PS3.18 Annex F).

        Byte values are given as base64 ``InlineBinary``, person names as
        component groups and tags as 'GGGGEEEE' strings. Empty elements only
        carry their ``vr``.
        """
        json_element: Dict[str, Any] = {'vr': self.VR}
        if self.VR == 'SQ':
            json_element['Value'] = [
                item.to_json_dict() for item in self.value
            ]
            return json_element

        if self.is_empty:
            return json_element

        if self.VR in jsonrep.BINARY_VR_VALUES:
            json_element['InlineBinary'] = (
                base64.b64encode(self.value).decode('utf-8')
            )
            return json_element

        if self.VR == 'PN':
            values = [
                jsonrep.person_name_components(v) for v in self._values()
            ]
        elif self.VR == 'AT':
            values = [format(v, '08X') for v in self._values()]
        else:
            values = [str(v) if isinstance(v, str) else v
                      for v in self._values()]

        json_element['Value'] = jsonrep.convert_to_python_number(
            values, self.VR
        )
        return json_element


class RawDataElement(NamedTuple):
    """An element as parsed, with its value still encoded."""
    tag: BaseTag
    VR: Optional[str]
    length: int
    value: Optional[bytes]
    value_tell: int
    is_implicit_VR: bool
    is_little_endian: bool


def correct_ambiguous_VR(
    VR: str,
    pixel_representation: Optional[int],
    bits_allocated: Optional[int] = None
) -> str:
    """Return the VR to use for a multi-choice dictionary VR when the data
    is implicit VR.

    'OB or OW' is **OB** for a (0028,0100) *Bits Allocated* of 8 or less
    and **OW** otherwise, or when it isn't known. 'US or OW' is read as
    **OW**. 'US or SS' (and 'US or SS or OW') is **SS** for a (0028,0103)
    *Pixel Representation* of 1 and **US** otherwise.
    """
    if VR == 'OB or OW':
        if isinstance(bits_allocated, int) and bits_allocated <= 8:
            return 'OB'
        return 'OW'

    if VR == 'US or OW':
        return 'OW'

    if VR in ('US or SS', 'US or SS or OW'):
        return 'SS' if pixel_representation == 1 else 'US'

    return VR


def DataElement_from_raw(
    raw_data_element: RawDataElement,
    encoding: Optional[List[str]] = None,
    pixel_representation: Optional[int] = None,
    bits_allocated: Optional[int] = None
) -> DataElement:
    """Decode `raw_data_element` into a :class:`DataElement`.

    Implicit VR elements take their VR from the dictionary, or **UN** if
    the tag isn't listed. A value that can't be decoded as its VR is kept as
    raw **UN** bytes and a warning is logged.

    Parameters
    ----------
    raw_data_element : RawDataElement
        The parsed element.
    encoding : list of str, optional
        The Python codecs for text values.
    pixel_representation : int, optional
        Used to pick **US** or **SS** for 'US or SS' elements.
    bits_allocated : int, optional
        Used to pick **OB** or **OW** for 'OB or OW' elements.
    """
    from dicomengine.values import convert_value

    raw = raw_data_element
    VR = raw.VR
    if VR is None:
        try:
            VR = dictionary_VR(raw.tag)
        except KeyError:
            VR = 'UN'
        VR = correct_ambiguous_VR(
            VR, pixel_representation, bits_allocated
        )

    try:
        value = convert_value(VR, raw, encoding)
    except ValueError as exc:
        logger.warning(
            f"Unable to decode the value of {raw.tag} as '{VR}', the "
            f"element has been changed to 'UN': {exc}"
        )
        VR, value = 'UN', raw.value

    return DataElement(
        raw.tag, VR, value,
        is_undefined_length=raw.length == _UNDEFINED_LENGTH,
        already_converted=True
    )
