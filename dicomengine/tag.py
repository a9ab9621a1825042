# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""DICOM (group, element) tags.

A tag is held as a single 32-bit :class:`int` (group in the high word) so
that datasets can key and sort on it directly. :func:`Tag` accepts the
other forms a caller may have to hand: a (group, element) pair, a hex string
or a dictionary keyword.
"""
import re
import traceback
from typing import Tuple, Any, Union, TypeVar, Optional, Iterator
from contextlib import contextmanager


# '0010,0010', '(0010,0010)' and '(0010, 0010)'
_RE_GROUP_ELEMENT = re.compile(
    r"^\(?\s*([0-9A-Fa-f]{4})\s*,\s*([0-9A-Fa-f]{4})\s*\)?$"
)
_MAX_TAG = 0xFFFFFFFF
_MAX_WORD = 0xFFFF


@contextmanager
def tag_in_exception(tag: "BaseTag") -> Iterator[None]:
    """Add `tag` to the message of any exception raised in the context.

    :class:`~dicomengine.errors.DicomEngineError` subclasses are re-raised
    unchanged since their attributes are read by callers.
    """
    from dicomengine.errors import DicomEngineError

    try:
        yield
    except DicomEngineError:
        raise
    except Exception as exc:
        msg = f"With tag {tag} got exception: {exc}\n{traceback.format_exc()}"
        raise type(exc)(msg) from exc


T = TypeVar("T", int, str)


def _from_pair(group: T, element: T) -> int:
    if isinstance(group, str) and isinstance(element, str):
        group, element = int(group, 16), int(element, 16)
    elif not (isinstance(group, int) and isinstance(element, int)):
        raise ValueError(
            "Both arguments for Tag must be the same type, either string or "
            "int."
        )

    if group > _MAX_WORD or element > _MAX_WORD:
        raise OverflowError(
            "Groups and elements of tags must each be <=2 byte integers"
        )

    return group << 16 | element


def _from_str(value: str) -> int:
    value = value.strip()
    match = _RE_GROUP_ELEMENT.match(value)
    if match:
        return _from_pair(*match.groups())

    try:
        return int(value, 16)
    except ValueError:
        pass

    from dicomengine.datadict import tag_for_keyword

    tag = tag_for_keyword(value)
    if tag is None:
        raise ValueError(f"'{value}' is not a valid int or DICOM keyword")

    return tag


def Tag(arg: Union[T, Tuple[T, T]], arg2: Optional[T] = None) -> "BaseTag":
    """Return a :class:`BaseTag` for `arg`.

    Accepted forms are ``Tag(0x00100010)``, ``Tag(0x0010, 0x0010)``,
    ``Tag((0x0010, 0x0010))``, ``Tag(('0010', '0010'))``,
    ``Tag('00100010')``, ``Tag('0x00100010')``, ``Tag('0010,0010')``,
    ``Tag('(0010,0010)')`` and ``Tag('PatientName')``.

    Raises
    ------
    ValueError
        If `arg` can't be interpreted as a tag.
    OverflowError
        If the value doesn't fit in 32 bits.
    """
    if isinstance(arg, BaseTag):
        return arg

    if arg2 is not None:
        arg = (arg, arg2)  # type: ignore

    if isinstance(arg, (tuple, list)):
        if len(arg) != 2:
            raise ValueError("Tag must be created using an int or 2-tuple")
        value = _from_pair(*arg)
    elif isinstance(arg, str):
        value = _from_str(arg)
    elif isinstance(arg, int):
        value = arg
    else:
        raise ValueError(f"Unable to create a tag from {arg!r}")

    if value < 0:
        raise ValueError("Tags must be positive.")
    if value > _MAX_TAG:
        raise OverflowError(
            f"Tags are limited to 32-bit length; tag {value!r}"
        )

    return BaseTag(value)


class BaseTag(int):
    """A DICOM tag as an :class:`int`.

    Comparisons accept anything :func:`Tag` does, so
    ``BaseTag(0x00100010) == 'PatientName'`` holds.
    """
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, int):
            try:
                other = Tag(other)
            except (ValueError, OverflowError, TypeError):
                return False

        return int(self) == int(other)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, int):
            try:
                other = Tag(other)
            except (ValueError, OverflowError) as exc:
                raise TypeError(
                    f"Unable to compare a tag with {other!r}"
                ) from exc

        return int(self) < int(other)

    def __le__(self, other: Any) -> bool:
        return self == other or self < other

    def __gt__(self, other: Any) -> bool:
        return not self <= other

    def __ge__(self, other: Any) -> bool:
        return not self < other

    def __ne__(self, other: Any) -> bool:
        return not self == other

    __hash__ = int.__hash__

    def __str__(self) -> str:
        return f"({self.group:04x}, {self.element:04x})"

    __repr__ = __str__

    @property
    def group(self) -> int:
        return self >> 16

    @property
    def element(self) -> int:
        return self & _MAX_WORD

    elem = element

    @property
    def is_private(self) -> bool:
        """``True`` for odd groups."""
        return self.group % 2 == 1

    @property
    def is_private_creator(self) -> bool:
        """``True`` for the private block reservations (gggg,0010-00FF)."""
        return self.is_private and 0x0010 <= self.element <= 0x00FF

    @property
    def is_group_length(self) -> bool:
        return self.element == 0

    @property
    def json_key(self) -> str:
        """The tag as used for DICOM JSON model keys, 'GGGGEEEE'."""
        return f"{int(self):08X}"


def TupleTag(group_elem: Tuple[int, int]) -> BaseTag:
    """Return a :class:`BaseTag` from a known valid (group, element)."""
    return BaseTag(group_elem[0] << 16 | group_elem[1])


# Item framing tags, Part 5 Section 7.5
ItemTag = TupleTag((0xFFFE, 0xE000))
ItemDelimiterTag = TupleTag((0xFFFE, 0xE00D))
SequenceDelimiterTag = TupleTag((0xFFFE, 0xE0DD))
