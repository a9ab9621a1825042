# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""The in-memory DICOM object: :class:`Dataset` and its group 2 variant
:class:`FileMetaDataset`.

A dataset maps :class:`~dicomengine.tag.BaseTag` to
:class:`~dicomengine.dataelem.DataElement`. SQ elements hold a
:class:`~dicomengine.sequence.Sequence` of nested datasets, and those nested
items are frozen: reading through them hands out detached element copies and
any mutation raises :class:`TypeError`. Edit a nested item by building a
replacement item and assigning a new sequence.
"""

from typing import Any, Callable, Dict, Iterator, List, Optional

from dicomengine.charset import convert_encodings
from dicomengine.config import logger
from dicomengine.datadict import (
    dictionary_VR, tag_for_keyword, keyword_for_tag
)
from dicomengine.dataelem import DataElement
from dicomengine.tag import Tag, BaseTag, tag_in_exception
from dicomengine.valuerep import default_encoding


_SPECIFIC_CHARACTER_SET = BaseTag(0x00080005)
_PIXEL_REPRESENTATION = BaseTag(0x00280103)

# Dictionary VRs that depend on the value or on the dataset
_AMBIGUOUS_VR = {
    'OB or OW': lambda ds, value: 'OB' if isinstance(value, bytes) else 'OW',
    'US or OW': lambda ds, value: 'OW' if isinstance(value, bytes) else 'US',
    'US or SS': lambda ds, value: (
        'SS' if ds.get_int(_PIXEL_REPRESENTATION) == 1 else 'US'
    ),
}

_RULE = "-" * 49


def _detached(elem):
    """Return a copy of `elem` whose value list isn't shared."""
    value = elem.value
    if isinstance(value, list):
        value = value[:]

    return DataElement(
        elem.tag, elem.VR, value,
        is_undefined_length=elem.is_undefined_length,
        already_converted=True
    )


def _as_tag(key) -> Optional[BaseTag]:
    """Return `key` as a tag, or ``None`` if it isn't one."""
    try:
        return Tag(key)
    except (ValueError, OverflowError, TypeError):
        return None


class Dataset:
    """A DICOM dataset, keyed by tag and always ordered by tag.

    Elements can be reached by keyword as attributes, or by tag or keyword
    through indexing:

    >>> ds = Dataset()
    >>> ds.PatientID = '12345'
    >>> ds.add_new(0x00100030, 'DA', '19700101')
    >>> ds['PatientID'].VR
    'LO'
    >>> ds[0x0010, 0x0030].value
    '19700101'
    >>> 'PatientBirthDate' in ds
    True

    Attribute access returns the element value, indexing returns the
    :class:`~dicomengine.dataelem.DataElement` itself.

    Sequence items are read-only once added, so fill in an item before
    putting it in a sequence:

    >>> item = Dataset()
    >>> item.ReferencedSOPInstanceUID = '1.2.3.4'
    >>> ds.ReferencedImageSequence = [item]
    >>> ds.ReferencedImageSequence[0].is_frozen
    True

    Attributes
    ----------
    indent_chars : str
        The indent used per sequence level by ``str(ds)``.
    is_little_endian : bool or None
        Byte order of the encoding the dataset was parsed from.
    is_implicit_VR : bool or None
        VR mode of the encoding the dataset was parsed from.
    is_undefined_length_sequence_item : bool
        For items, whether the source used an item delimiter.
    preamble : bytes or None
        The 128 byte file preamble, top-level datasets only.
    """
    indent_chars = "   "

    def __init__(self, *args, **kwargs):
        self._parent_encoding = kwargs.get('parent_encoding', default_encoding)
        source = args[0] if args and args[0] is not None else {}
        if isinstance(source, Dataset):
            self._dict = dict(source._dict)
        else:
            self._dict = {Tag(tag): elem for tag, elem in source.items()}

        self._frozen = False
        self.is_little_endian = None
        self.is_implicit_VR = None
        self.is_undefined_length_sequence_item = False
        self.preamble = None

    # Frozen items

    def _check_mutable(self):
        if self._frozen:
            raise TypeError(
                "Sequence items are read-only; build a new item and assign "
                "a new Sequence to the element instead"
            )

    @property
    def is_frozen(self) -> bool:
        """``True`` for a read-only sequence item."""
        return self._frozen

    def freeze(self) -> "Dataset":
        """Return a read-only copy suitable for use as a sequence item."""
        if self._frozen:
            return self

        frozen = self.copy()
        frozen._frozen = True
        return frozen

    def copy(self) -> "Dataset":
        """Return a mutable copy that shares no element values with `self`.

        Nested sequence items are shared, they can't change anyway.
        """
        new = self.__class__.__new__(self.__class__)
        Dataset.__init__(new, parent_encoding=self._parent_encoding)
        new._dict = {tag: _detached(e) for tag, e in self._dict.items()}
        for attr in (
            'is_little_endian', 'is_implicit_VR',
            'is_undefined_length_sequence_item', 'preamble'
        ):
            setattr(new, attr, getattr(self, attr))

        file_meta = self.__dict__.get('file_meta')
        if file_meta is not None:
            new.file_meta = file_meta.copy()

        return new

    # Element access

    def add(self, data_element: DataElement) -> None:
        """Store `data_element` under its own tag."""
        self[data_element.tag] = data_element

    def add_new(self, tag, VR: str, value: Any) -> None:
        """Build a :class:`~dicomengine.dataelem.DataElement` and store it.

        Parameters
        ----------
        tag : int or str or tuple
            Anything :func:`~dicomengine.tag.Tag` accepts.
        VR : str
            The element's value representation.
        value
            The element's value, converted as for
            :attr:`DataElement.value<dicomengine.dataelem.DataElement.value>`.
        """
        self.add(DataElement(tag, VR, value))

    def data_element(self, name: str) -> Optional[DataElement]:
        """Return the element for keyword `name`, or ``None``."""
        tag = tag_for_keyword(name)
        if tag is None or tag not in self._dict:
            return None

        return self[tag]

    def __getitem__(self, key) -> DataElement:
        """Return the element for a tag or keyword `key`.

        Frozen items return a detached copy, so changing it has no effect on
        the item.
        """
        tag = key if isinstance(key, BaseTag) else Tag(key)
        elem = self._dict[tag]

        return _detached(elem) if self._frozen else elem

    def __setitem__(self, key, value: DataElement) -> None:
        """Store element `value` under `key`, which must be its tag.

        Raises
        ------
        TypeError
            If `value` isn't a :class:`DataElement` or the dataset is frozen.
        ValueError
            If `key` and ``value.tag`` differ.
        """
        self._check_mutable()
        if not isinstance(value, DataElement):
            raise TypeError("Dataset contents must be DataElement instances.")

        if Tag(key) != value.tag:
            raise ValueError("DataElement.tag must match the dictionary key")

        if value.tag.is_private:
            logger.debug(f"Setting private element {value.tag}")

        self._dict[value.tag] = value

    def __delitem__(self, key) -> None:
        self._check_mutable()
        del self._dict[Tag(key)]

    def __contains__(self, key) -> bool:
        """``True`` if an element with tag or keyword `key` is present."""
        tag = _as_tag(key)
        return tag is not None and tag in self._dict

    def __getattr__(self, name: str) -> Any:
        # Only called once normal attribute lookup has failed
        if name == '_dict':
            # Unpickling looks attributes up before __init__ has run
            return {}

        tag = tag_for_keyword(name)
        if tag is not None and tag in self._dict:
            return self[tag].value

        return object.__getattribute__(self, name)

    def __setattr__(self, name: str, value: Any) -> None:
        """Set the value of the element for keyword `name`.

        A missing element is created using its dictionary VR. Names that
        aren't keywords become ordinary instance attributes.
        """
        tag = tag_for_keyword(name)
        if tag is None:
            if name == "file_meta":
                self._set_file_meta(value)
            else:
                object.__setattr__(self, name, value)
            return

        self._check_mutable()
        tag = Tag(tag)
        elem = self._dict.get(tag)
        if elem is None:
            VR = dictionary_VR(tag)
            if VR in _AMBIGUOUS_VR:
                VR = _AMBIGUOUS_VR[VR](self, value)
            elem = DataElement(tag, VR, value)
        else:
            elem.value = value

        self[tag] = elem

    def __delattr__(self, name: str) -> None:
        """Remove the element for keyword `name`, or the instance attribute
        of that name.
        """
        tag = tag_for_keyword(name)
        if tag is not None and tag in self._dict:
            self._check_mutable()
            del self._dict[tag]
        elif name in self.__dict__:
            del self.__dict__[name]
        else:
            raise AttributeError(name)

    def _set_file_meta(self, value):
        if value is not None and not isinstance(value, FileMetaDataset):
            value = FileMetaDataset(value)

        self.__dict__["file_meta"] = value

    def get(self, key, default=None):
        """Like :meth:`dict.get` for keywords and tags.

        A :class:`str` `key` is looked up as an attribute, so a keyword gives
        the element *value* and any other name an instance attribute. Any
        other `key` is converted with :func:`~dicomengine.tag.Tag` and gives
        the :class:`~dicomengine.dataelem.DataElement`.

        Raises
        ------
        TypeError
            If a non-string `key` isn't a tag.
        """
        if isinstance(key, str):
            return getattr(self, key, default)

        tag = _as_tag(key)
        if tag is None:
            raise TypeError("Dataset.get key must be a string or tag")

        if tag not in self._dict:
            return default

        return self[tag]

    def _get_element(self, key) -> Optional[DataElement]:
        tag = _as_tag(key)
        if tag is None or tag not in self._dict:
            return None

        return self[tag]

    def get_str(self, key, default: Optional[str] = None) -> Optional[str]:
        """Return the string value of element `key`, or `default` if it's
        absent.

        Raises
        ------
        VrMismatchError
            If the element's VR isn't a string VR.
        """
        elem = self._get_element(key)
        return default if elem is None else elem.as_str()

    def get_strings(self, key) -> List[str]:
        """Return every string value of element `key`, ``[]`` if absent."""
        elem = self._get_element(key)
        return [] if elem is None else elem.as_strings()

    def get_int(self, key, default: Optional[int] = None) -> Optional[int]:
        """Return the integer value of element `key`, or `default` if it's
        absent or empty.
        """
        elem = self._get_element(key)
        value = None if elem is None else elem.as_int()
        return default if value is None else value

    def get_float(
        self, key, default: Optional[float] = None
    ) -> Optional[float]:
        """Return the numeric value of element `key` as a :class:`float`,
        or `default` if it's absent or empty.
        """
        elem = self._get_element(key)
        value = None if elem is None else elem.as_float()
        return default if value is None else value

    @property
    def _character_set(self) -> List[str]:
        """Python codecs for this dataset's text, inherited from the
        enclosing dataset when (0008,0005) is absent or empty.
        """
        elem = self._dict.get(_SPECIFIC_CHARACTER_SET)
        if elem is not None and not elem.is_empty:
            return convert_encodings(elem.value)

        if isinstance(self._parent_encoding, str):
            return [self._parent_encoding]

        return list(self._parent_encoding)

    # Mapping behaviour, always in tag order

    def keys(self) -> List[BaseTag]:
        return sorted(self._dict)

    def values(self) -> List[DataElement]:
        return [self[tag] for tag in self.keys()]

    def items(self):
        return [(tag, self[tag]) for tag in self.keys()]

    def __iter__(self) -> Iterator[DataElement]:
        """Yield the top-level elements by ascending tag.

        SQ elements are yielded whole; see :meth:`iterall` for a flattened
        view.
        """
        for tag in self.keys():
            yield self[tag]

    def __len__(self) -> int:
        return len(self._dict)

    def __eq__(self, other: Any) -> Any:
        """Datasets are equal when they hold equal elements.

        The encoding attributes and preamble are ignored.
        """
        if other is self:
            return True

        if not isinstance(other, Dataset):
            return NotImplemented

        if self._dict.keys() != other._dict.keys():
            return False

        return all(self[tag] == other[tag] for tag in self._dict)

    def __ne__(self, other: Any) -> Any:
        return not self == other

    __hash__ = None  # type: ignore

    def clear(self) -> None:
        self._check_mutable()
        self._dict.clear()

    def pop(self, key, *args):
        """Remove and return the element for tag or keyword `key`.

        As with :meth:`dict.pop`, a missing `key` returns the default when
        one is given and raises :class:`KeyError` otherwise.
        """
        self._check_mutable()
        tag = _as_tag(key)
        return self._dict.pop(key if tag is None else tag, *args)

    def dir(self, *filters: str) -> List[str]:
        """Return the sorted keywords of the elements present.

        Elements without a keyword, such as private ones, are left out.

        Parameters
        ----------
        filters : str
            If given, only keywords containing one of them are returned.
            Matching ignores case.
        """
        keywords = filter(None, map(keyword_for_tag, self._dict))
        needles = [f.lower() for f in filters]
        return sorted(
            kw for kw in keywords
            if not needles or any(n in kw.lower() for n in needles)
        )

    def group_dataset(self, group: int) -> "Dataset":
        """Return a new dataset with copies of the elements in `group`."""
        return Dataset({
            tag: _detached(elem) for tag, elem in self._dict.items()
            if tag.group == group
        })

    # Traversal

    def iterall(self) -> Iterator[DataElement]:
        """Yield every element depth first, including those in sequence
        items, each SQ element coming before its contents.
        """
        for elem in self:
            yield elem
            if elem.VR == "SQ":
                for item in elem.value:
                    yield from item.iterall()

    def iterall_tags(self) -> Iterator[BaseTag]:
        """Yield the tag of every element, as ordered by :meth:`iterall`."""
        for elem in self.iterall():
            yield elem.tag

    def walk(
        self,
        callback: Callable[["Dataset", DataElement], None],
        recursive: bool = True
    ) -> None:
        """Call ``callback(dataset, element)`` for each element.

        Elements are visited by ascending tag, and when `recursive` is
        ``True`` (the default) the items of an SQ element are walked straight
        after the callback for the SQ element itself. The callback may delete
        the element it is given; it can't change a sequence item in place.

        Exceptions raised by `callback` have the current tag added to their
        message.
        """
        for tag in self.keys():
            with tag_in_exception(tag):
                elem = self[tag]
                callback(self, elem)
                if not recursive or elem.VR != "SQ":
                    continue
                if tag not in self._dict:
                    continue
                for item in elem.value:
                    item.walk(callback)

    def remove_private_tags(self) -> None:
        """Delete every private element, rebuilding any sequence whose items
        contain one.
        """
        from dicomengine.sequence import Sequence

        self._check_mutable()
        for tag in self.keys():
            if tag.is_private:
                del self._dict[tag]
                continue

            elem = self._dict[tag]
            if elem.VR != 'SQ':
                continue

            private = (
                t.is_private
                for item in elem.value for t in item.iterall_tags()
            )
            if not any(private):
                continue

            cleaned = []
            for item in elem.value:
                item = item.copy()
                item.remove_private_tags()
                cleaned.append(item)
            elem.value = Sequence(cleaned, elem.value.is_undefined_length)

    # Output

    def to_json_dict(self) -> Dict[str, Any]:
        """Return the dataset in the DICOM JSON Model (PS3.18 Annex F),
        keyed by 'GGGGEEEE'.
        """
        return {elem.tag.json_key: elem.to_json_dict() for elem in self}

    @property
    def pixel_array(self):
        """The decoded *Pixel Data*, see
        :func:`~dicomengine.converter.pixel_array`.
        """
        from dicomengine.converter import pixel_array
        return pixel_array(self)

    def _lines(self, depth: int, top_level_only: bool) -> Iterator[str]:
        prefix = self.indent_chars * depth
        for elem in self:
            if elem.VR != "SQ":
                yield prefix + repr(elem)
                continue

            yield (
                f"{prefix}{elem.tag}  {elem.description()}   "
                f"{len(elem.value)} item(s) ---- "
            )
            if top_level_only:
                continue

            for item in elem.value:
                yield from item._lines(depth + 1, False)
                yield self.indent_chars * (depth + 1) + "---------"

    def _pretty_str(self, indent: int = 0, top_level_only: bool = False):
        """Return one line per element, nested items indented by
        :attr:`indent_chars` per level and the file meta, if any, first.
        """
        lines = []
        file_meta = self.__dict__.get('file_meta')
        if file_meta:
            lines.append("Dataset.file_meta " + _RULE[18:])
            lines.extend(
                self.indent_chars * indent + repr(e) for e in file_meta
            )
            lines.append(_RULE)

        lines.extend(self._lines(indent, top_level_only))
        return "\n".join(lines)

    def top(self) -> str:
        """Return ``str(self)`` without the contents of sequence items."""
        return self._pretty_str(top_level_only=True)

    def __str__(self) -> str:
        return self._pretty_str()

    __repr__ = __str__


class FileMetaDataset(Dataset):
    """A :class:`Dataset` restricted to group 2, the File Meta Information.

    Raises
    ------
    TypeError
        If the initial contents aren't a :class:`dict` or :class:`Dataset`.
    ValueError
        If the initial contents or any element added later aren't group 2.
    """

    def __init__(self, *args, **kwargs):
        if args:
            self.validate(args[0])
        super().__init__(*args, **kwargs)

    @staticmethod
    def validate(init_value):
        """Check `init_value` can be used as file meta contents."""
        if init_value is None:
            return

        if not isinstance(init_value, (Dataset, dict)):
            raise TypeError(
                f"Argument must be a dict or Dataset, not {type(init_value)}"
            )

        others = [Tag(t) for t in init_value.keys() if Tag(t).group != 2]
        if others:
            raise ValueError(
                f"Attempted to set non-group 2 elements: {others}"
            )

    def __setitem__(self, key, value):
        if Tag(value.tag).group != 2:
            raise ValueError(
                "Only group 2 data elements are allowed in a FileMetaDataset"
            )

        super().__setitem__(key, value)
