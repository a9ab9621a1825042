# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Lookups in the static DICOM data dictionary.

Entries are ``(VR, VM, name, retired, keyword)`` tuples keyed by tag. Group
length (gggg,0000) and private creator (gggg,0010-00FF) tags aren't listed
individually and resolve to generic entries. Callers that need a VR for a
tag with no entry fall back to ``'UN'`` themselves.
"""

from dicomengine.tag import Tag, BaseTag
from dicomengine._dicom_dict import DicomDictionary


GROUP_LENGTH_ENTRY = ('UL', '1', "Group Length", '', '')
PRIVATE_CREATOR_ENTRY = ('LO', '1', "Private Creator", '', '')

# keyword -> tag
keyword_dict = {
    entry[4]: tag for tag, entry in DicomDictionary.items() if entry[4]
}


def get_entry(tag):
    """Return the dictionary entry for `tag`.

    Parameters
    ----------
    tag : int or str or tuple
        Anything accepted by :func:`~dicomengine.tag.Tag`.

    Returns
    -------
    tuple of str
        ``(VR, VM, name, retired, keyword)``.

    Raises
    ------
    KeyError
        If the dictionary has no entry for `tag`.
    """
    if not isinstance(tag, BaseTag):
        tag = Tag(tag)

    entry = DicomDictionary.get(tag)
    if entry is not None:
        return entry
    if tag.is_group_length:
        return GROUP_LENGTH_ENTRY
    if tag.is_private_creator:
        return PRIVATE_CREATOR_ENTRY

    raise KeyError(f"Tag {tag} not found in DICOM dictionary")


def dictionary_VR(tag):
    """Return the VR of `tag`, which may be ambiguous such as 'OB or OW'."""
    return get_entry(tag)[0]


def dictionary_VM(tag):
    return get_entry(tag)[1]


def dictionary_description(tag):
    return get_entry(tag)[2]


def dictionary_is_retired(tag):
    return get_entry(tag)[3].lower() == 'retired'


def dictionary_keyword(tag):
    return get_entry(tag)[4]


def dictionary_has_tag(tag):
    """Return ``True`` if `tag` has its own entry in the dictionary."""
    return tag in DicomDictionary


def keyword_for_tag(tag):
    """Return the keyword for `tag`, or ``''`` if it has none."""
    try:
        return dictionary_keyword(tag)
    except KeyError:
        return ''


def tag_for_keyword(keyword):
    """Return the tag for `keyword`, or ``None`` if it isn't known."""
    return keyword_dict.get(keyword)
