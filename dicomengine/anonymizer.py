# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""De-identification of datasets using profile tables and custom rules.

Each element of a dataset resolves an action, in order of precedence, from
a custom :class:`AnonymizationRule` for its exact tag, from the table of the
active profile, or falls back to ``'keep'``:

* ``'remove'`` deletes the element
* ``'replace'`` sets a new value, coerced to the VR of the element
* ``'keep'`` passes the element through unchanged

Sequence items are anonymized with the same rules. The output always
carries (0012,0062) *Patient Identity Removed* and (0012,0063)
*De-identification Method* so that de-identified data can be audited.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from dicomengine._version import __version__
from dicomengine.config import logger
from dicomengine.dataelem import DataElement
from dicomengine.dataset import Dataset
from dicomengine.errors import RuleValueError
from dicomengine.sequence import Sequence
from dicomengine.tag import BaseTag, Tag
from dicomengine.uid import UID, DICOMENGINE_ROOT_UID, generate_uid
from dicomengine.valuerep import (
    DS, IS, INT_VR_RANGES, binary_VRs, single_value_VRs, string_VRs,
    validate_value
)


REMOVE = 'remove'
REPLACE = 'replace'
KEEP = 'keep'
ACTIONS = (REMOVE, REPLACE, KEEP)

PROFILES = ('basic', 'full', 'custom')

# Direct identifiers of the patient
BASIC_PROFILE: Dict[str, Tuple[str, Any]] = {
    'PatientName': (REPLACE, 'ANONYMOUS'),
    'PatientID': (REPLACE, 'ANONYMOUS'),
    'IssuerOfPatientID': (REMOVE, None),
    'PatientBirthDate': (REMOVE, None),
    'PatientBirthTime': (REMOVE, None),
    'OtherPatientIDs': (REMOVE, None),
    'OtherPatientNames': (REMOVE, None),
    'OtherPatientIDsSequence': (REMOVE, None),
    'PatientBirthName': (REMOVE, None),
    'PatientMotherBirthName': (REMOVE, None),
    'PatientAddress': (REMOVE, None),
    'PatientTelephoneNumbers': (REMOVE, None),
    'MedicalRecordLocator': (REMOVE, None),
}

# Indirect identifiers and free text that may contain identifiers
_FULL_ADDITIONS: Dict[str, Tuple[str, Any]] = {
    'InstitutionName': (REMOVE, None),
    'InstitutionAddress': (REMOVE, None),
    'InstitutionalDepartmentName': (REMOVE, None),
    'ReferringPhysicianName': (REPLACE, ''),
    'ReferringPhysicianAddress': (REMOVE, None),
    'ReferringPhysicianTelephoneNumbers': (REMOVE, None),
    'PhysiciansOfRecord': (REMOVE, None),
    'PerformingPhysicianName': (REMOVE, None),
    'NameOfPhysiciansReadingStudy': (REMOVE, None),
    'RequestingPhysician': (REMOVE, None),
    'OperatorsName': (REMOVE, None),
    'StationName': (REMOVE, None),
    'DeviceSerialNumber': (REMOVE, None),
    'DeviceUID': (REMOVE, None),
    'PlateID': (REMOVE, None),
    'AccessionNumber': (REPLACE, ''),
    'StudyID': (REPLACE, ''),
    'PerformedProcedureStepID': (REMOVE, None),
    'MilitaryRank': (REMOVE, None),
    'Occupation': (REMOVE, None),
    'AdditionalPatientHistory': (REMOVE, None),
    'PatientComments': (REMOVE, None),
    'AdmittingDiagnosesDescription': (REMOVE, None),
    'ImageComments': (REMOVE, None),
    'StudyComments': (REMOVE, None),
    'DerivationDescription': (REMOVE, None),
    'RequestedProcedureDescription': (REMOVE, None),
    'PerformedProcedureStepDescription': (REMOVE, None),
}
FULL_PROFILE: Dict[str, Tuple[str, Any]] = dict(BASIC_PROFILE)
FULL_PROFILE.update(_FULL_ADDITIONS)

# Instance UIDs remapped by the full profile
UID_REMAP_KEYWORDS = (
    'StudyInstanceUID', 'SeriesInstanceUID', 'SOPInstanceUID',
    'FrameOfReferenceUID', 'ReferencedSOPInstanceUID', 'InstanceCreatorUID',
)

# The de-identification marker, never changed by rules
PATIENT_IDENTITY_REMOVED = BaseTag(0x00120062)
DEIDENTIFICATION_METHOD = BaseTag(0x00120063)
PROTECTED_TAGS = (PATIENT_IDENTITY_REMOVED, DEIDENTIFICATION_METHOD)

_PROFILE_TABLES = {
    'basic': {Tag(kw): action for kw, action in BASIC_PROFILE.items()},
    'full': {Tag(kw): action for kw, action in FULL_PROFILE.items()},
    'custom': {},
}
_UID_REMAP_TAGS = frozenset(Tag(kw) for kw in UID_REMAP_KEYWORDS)

# Internal action for the full profile UID remapping
_REMAP = 'remap'


class AnonymizationRule:
    """A custom action for the element with a given tag.

    Parameters
    ----------
    tag : int or str or 2-tuple of int
        The tag of the element in any form accepted by
        :func:`~dicomengine.tag.Tag`, such as ``'PatientName'``,
        ``'(0010,0010)'`` or ``0x00100010``.
    action : str
        One of ``'remove'``, ``'replace'`` or ``'keep'``.
    replace_value : optional
        The new value when `action` is ``'replace'``.

    Raises
    ------
    ValueError
        If the tag or action is not valid.
    """

    def __init__(
        self,
        tag: Union[int, str, Tuple[int, int]],
        action: str,
        replace_value: Any = None
    ) -> None:
        try:
            self.tag = Tag(tag)
        except (ValueError, OverflowError, TypeError) as exc:
            raise ValueError(
                f"Invalid tag {tag!r} in an anonymization rule: {exc}"
            ) from exc

        action = str(action).lower()
        if action not in ACTIONS:
            raise ValueError(
                f"Invalid anonymization action '{action}', must be one of "
                f"{', '.join(ACTIONS)}"
            )

        self.action = action
        self.replace_value = replace_value

    @classmethod
    def from_dict(cls, rule: Dict[str, Any]) -> "AnonymizationRule":
        """Return a rule from a mapping with ``'tag'``, ``'action'`` and
        optionally ``'replaceValue'`` keys.
        """
        if 'tag' not in rule or 'action' not in rule:
            raise ValueError(
                "An anonymization rule requires 'tag' and 'action' values"
            )

        return cls(rule['tag'], rule['action'], rule.get('replaceValue'))

    def __eq__(self, other: Any) -> Any:
        if not isinstance(other, AnonymizationRule):
            return NotImplemented

        return (
            self.tag == other.tag
            and self.action == other.action
            and self.replace_value == other.replace_value
        )

    def __repr__(self) -> str:
        return (
            f"AnonymizationRule({self.tag}, '{self.action}', "
            f"{self.replace_value!r})"
        )


def _split_values(value: Any, VR: str) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str) and VR not in single_value_VRs:
        return value.split('\\')

    return [value]


def _coerce_single(tag: BaseTag, VR: str, value: Any) -> Any:
    if VR in INT_VR_RANGES:
        try:
            value = int(str(value).strip())
        except ValueError:
            raise RuleValueError(tag, value, f"not an integer for VR {VR}")
    elif VR in ('FL', 'FD'):
        try:
            return float(value)
        except (TypeError, ValueError):
            raise RuleValueError(tag, value, f"not a number for VR {VR}")
    elif VR == 'AT':
        try:
            return Tag(value)
        except (ValueError, OverflowError, TypeError):
            raise RuleValueError(tag, value, "not a valid tag")
    elif VR in string_VRs:
        value = str(value)

    valid, msg = validate_value(VR, value)
    if not valid:
        raise RuleValueError(tag, value, msg)

    if VR == 'IS':
        try:
            return IS(value)
        except (TypeError, ValueError):
            raise RuleValueError(tag, value, "not an integer string")
    if VR == 'DS':
        return DS(value)
    if VR == 'UI':
        return UID(value)

    return value


def coerce_value(tag: BaseTag, VR: str, value: Any) -> Any:
    """Return `value` converted to a value suitable for an element with `VR`.

    Parameters
    ----------
    tag : tag.BaseTag
        The tag of the element, used in error messages.
    VR : str
        The VR of the element.
    value
        The replacement value. Strings may contain multiple values separated
        by a backslash. ``None`` or an empty string gives an empty value.

    Returns
    -------
    object
        The coerced value, a list if there are multiple values.

    Raises
    ------
    RuleValueError
        If `value` can't be used with `VR`.
    """
    if value is None or value == '':
        return None

    if VR == 'SQ':
        raise RuleValueError(
            tag, value, "sequences can only be replaced by an empty value"
        )

    if VR in binary_VRs:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if VR in ('OB', 'UN') and isinstance(value, str):
            value = value.encode('ascii', errors='replace')
            return value + b'\x00' * (len(value) % 2)
        raise RuleValueError(
            tag, value, f"a bytes value is required for VR {VR}"
        )

    values = [_coerce_single(tag, VR, v) for v in _split_values(value, VR)]
    return values[0] if len(values) == 1 else values


def remap_uid(uid: str) -> UID:
    """Return the deterministic replacement for an instance `uid`.

    UIDs that already start with the engine root are returned unchanged.
    """
    if uid.startswith(DICOMENGINE_ROOT_UID):
        return UID(uid)

    return generate_uid(DICOMENGINE_ROOT_UID, [uid])


class Anonymizer:
    """Apply a de-identification profile and custom rules to datasets.

    Parameters
    ----------
    profile : str, optional
        One of ``'basic'`` (default), ``'full'`` or ``'custom'``. The
        ``'custom'`` profile uses only the custom `rules`.
    rules : list of AnonymizationRule, optional
        Custom rules which take precedence over the profile table. For rules
        with the same tag the last one is used.

    Attributes
    ----------
    rule_errors : list of errors.RuleValueError
        The replacements that failed during the last call to
        :meth:`anonymize`. The affected elements are left unchanged.
    """

    def __init__(
        self,
        profile: str = 'basic',
        rules: Optional[Iterable[AnonymizationRule]] = None
    ) -> None:
        profile = str(profile).lower()
        if profile not in PROFILES:
            raise ValueError(
                f"Unknown anonymization profile '{profile}', must be one of "
                f"{', '.join(PROFILES)}"
            )

        self.profile = profile
        self.rules: Dict[BaseTag, AnonymizationRule] = {}
        for rule in rules or []:
            if rule.tag in PROTECTED_TAGS:
                logger.warning(
                    f"Ignoring the anonymization rule for {rule.tag} as the "
                    "de-identification marker can't be changed"
                )
                continue
            self.rules[rule.tag] = rule

        self.rule_errors: List[RuleValueError] = []

    @property
    def method(self) -> str:
        """Return the value used for (0012,0063) *De-identification
        Method*.
        """
        return f"dicomengine {__version__} {self.profile}"

    def action_for(self, data_element: DataElement) -> Tuple[str, Any]:
        """Return the (action, replacement value) for `data_element`."""
        tag = data_element.tag
        rule = self.rules.get(tag)
        if rule is not None:
            return rule.action, rule.replace_value

        table = _PROFILE_TABLES[self.profile]
        if tag in table:
            return table[tag]

        if self.profile == 'full':
            if tag.is_private:
                return REMOVE, None
            if tag in _UID_REMAP_TAGS:
                return _REMAP, None

        return KEEP, None

    def _replace(self, data_element: DataElement, value: Any) -> None:
        try:
            data_element.value = coerce_value(
                data_element.tag, data_element.VR, value
            )
        except RuleValueError as exc:
            self.rule_errors.append(exc)
            logger.warning(f"Skipped the anonymization rule: {exc}")

    def _anonymize_dataset(self, ds: Dataset) -> Dataset:
        new = ds.copy()
        for data_element in ds:
            tag = data_element.tag
            action, value = self.action_for(data_element)
            if action == REMOVE:
                del new[tag]
            elif action == REPLACE:
                self._replace(new[tag], value)
            elif action == _REMAP:
                elem = new[tag]
                uids = elem.value if isinstance(elem.value, list) else [
                    elem.value
                ]
                remapped = [remap_uid(uid) for uid in uids if uid]
                elem.value = remapped or None
            elif data_element.VR == 'SQ' and data_element.value:
                sequence = data_element.value
                new[tag].value = Sequence(
                    [self._anonymize_dataset(item) for item in sequence],
                    sequence.is_undefined_length
                )

        return new

    def anonymize(self, ds: Dataset) -> Dataset:
        """Return an anonymized copy of `ds`.

        Parameters
        ----------
        ds : dataset.Dataset
            The dataset to anonymize, it is never modified.

        Returns
        -------
        dataset.Dataset
            A new dataset with the rules applied and the de-identification
            marker elements added.
        """
        self.rule_errors = []
        anonymized = self._anonymize_dataset(ds)

        file_meta = anonymized.__dict__.get('file_meta')
        if file_meta is not None and 'SOPInstanceUID' in anonymized:
            sop_instance_uid = anonymized.SOPInstanceUID
            if (
                'MediaStorageSOPInstanceUID' in file_meta
                and sop_instance_uid
            ):
                file_meta.MediaStorageSOPInstanceUID = sop_instance_uid

        anonymized.PatientIdentityRemoved = 'YES'
        anonymized.DeidentificationMethod = self.method

        nr_errors = len(self.rule_errors)
        logger.debug(
            f"Anonymized the dataset with the '{self.profile}' profile and "
            f"{len(self.rules)} custom rule(s), {nr_errors} rule(s) skipped"
        )

        return anonymized


def anonymize(
    ds: Dataset,
    profile: str = 'basic',
    rules: Optional[Iterable[Union[AnonymizationRule, Dict[str, Any]]]] = None
) -> Dataset:
    """Return an anonymized copy of `ds`.

    Parameters
    ----------
    ds : dataset.Dataset
        The dataset to anonymize, it is never modified.
    profile : str, optional
        ``'basic'`` (default) for the direct patient identifiers, ``'full'``
        to also cover institution, staff, device and free text elements,
        remove private elements and remap instance UIDs, or ``'custom'`` to
        use only `rules`.
    rules : list, optional
        :class:`AnonymizationRule` or mappings with ``'tag'``, ``'action'``
        and ``'replaceValue'`` keys, which take precedence over the profile.

    Returns
    -------
    dataset.Dataset
        The anonymized dataset.

    Raises
    ------
    ValueError
        If the profile or a rule is not valid.

    Examples
    --------
    >>> ds = Dataset()
    >>> ds.PatientName = 'DOE^JOHN'
    >>> anonymize(ds).PatientName
    'ANONYMOUS'
    """
    rules = [
        r if isinstance(r, AnonymizationRule)
        else AnonymizationRule.from_dict(r)
        for r in rules or []
    ]

    return Anonymizer(profile, rules).anonymize(ds)
