# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Methods for converting Datasets and DataElements to json"""

from typing import Any, Dict, Optional, Type, Union


BINARY_VR_VALUES = ['OB', 'OD', 'OF', 'OL', 'OV', 'OW', 'UN']
VRs_TO_BE_FLOATS = ['DS', 'FD', 'FL']
VRs_TO_BE_INTS = ['IS', 'SL', 'SS', 'SV', 'UL', 'US', 'UV']

# Component group names of a PN value in the JSON and XML models
PN_COMPONENT_GROUPS = ('Alphabetic', 'Ideographic', 'Phonetic')


def convert_to_python_number(value: Any, vr: str) -> Any:
    """When possible convert numeric-like values to either ints or floats
    based on their value representation.

    Parameters
    ----------
    value : Any
        Value of the data element.
    vr : str
        Value representation of the data element.

    Returns
    -------
    Any

        * If `value` is ``None`` then returns ``None``
        * If `vr` is a integer-like VR type then returns ``int`` or
          ``List[int]``, with ``None`` for empty values
        * If `vr` is a float-like VR type then returns ``float`` or
          ``List[float]``, with ``None`` for empty values
        * Otherwise returns `value` unchanged
    """
    if value is None:
        return value

    number_type: Optional[Union[Type[int], Type[float]]] = None
    if vr in VRs_TO_BE_INTS:
        number_type = int
    if vr in VRs_TO_BE_FLOATS:
        number_type = float

    if number_type is None:
        return value

    def _convert(e):
        if e is None:
            return e
        try:
            return number_type(e)
        except ValueError:
            # Invalid DS and IS values are kept as their original string
            return str(e)

    if isinstance(value, (list, tuple,)):
        return [_convert(e) for e in value]

    return _convert(value)


def person_name_components(value: str) -> Dict[str, str]:
    """Return the non-empty component groups of a **PN** value.

    >>> person_name_components('Yamada^Tarou=山田^太郎')
    {'Alphabetic': 'Yamada^Tarou', 'Ideographic': '山田^太郎'}
    """
    groups = str(value).split('=')
    return {
        name: group
        for name, group in zip(PN_COMPONENT_GROUPS, groups)
        if group
    }
