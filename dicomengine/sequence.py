# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Define the Sequence class, which contains a sequence DataElement's items.

A Sequence is a read-only, ordered collection of frozen
:class:`~dicomengine.dataset.Dataset` items. Changing a sequence means
building a new :class:`Sequence` and assigning it to the element.
"""
from typing import Iterable, Optional

from dicomengine.dataset import Dataset


def validate_dataset(elem: object) -> Dataset:
    """Check that `elem` is a :class:`~dicomengine.dataset.Dataset`
    instance and return a frozen version of it.
    """
    if not isinstance(elem, Dataset):
        raise TypeError('Sequence contents must be Dataset instances.')

    if elem.is_frozen:
        return elem

    return elem.freeze()


class Sequence(tuple):
    """Class to hold multiple :class:`~dicomengine.dataset.Dataset` in a
    :class:`tuple`.

    Items are frozen copies of the datasets used to create the sequence, so
    no reference held elsewhere can be used to change them.

    Attributes
    ----------
    is_undefined_length : bool
        ``True`` if the sequence was (or will be) encoded with undefined
        length and a sequence delimitation item.
    """

    def __new__(
        cls,
        iterable: Optional[Iterable[Dataset]] = None,
        is_undefined_length: bool = False
    ) -> "Sequence":
        """Create a new sequence.

        Parameters
        ----------
        iterable : list-like of dataset.Dataset, optional
            An iterable object (e.g. :class:`list`, :class:`tuple`) containing
            :class:`~dicomengine.dataset.Dataset`. If not used then an empty
            :class:`Sequence` is generated.
        is_undefined_length : bool, optional
            Keep the undefined length framing when encoding.
        """
        # A Dataset is iterable itself, so give a relevant error
        if isinstance(iterable, Dataset):
            raise TypeError('The Sequence constructor requires an iterable')

        return super().__new__(
            cls, (validate_dataset(ds) for ds in (iterable or []))
        )

    def __init__(
        self,
        iterable: Optional[Iterable[Dataset]] = None,
        is_undefined_length: bool = False
    ) -> None:
        self.is_undefined_length = is_undefined_length

    def __str__(self) -> str:
        """String description of the Sequence."""
        return f"[{''.join([str(x) for x in self])}]"

    def __repr__(self) -> str:
        """String representation of the Sequence."""
        return f"<{self.__class__.__name__}, length {len(self)}>"
