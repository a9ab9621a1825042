# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""DICOM data dictionary auto-generated by generate_dicom_dict.py"""

# Each dict entry is Tag : (VR, VM, Name, Retired, Keyword)
DicomDictionary = {
    0x00020000: ('UL', '1', "File Meta Information Group Length", '', 'FileMetaInformationGroupLength'),  # noqa
    0x00020001: ('OB', '1', "File Meta Information Version", '', 'FileMetaInformationVersion'),  # noqa
    0x00020002: ('UI', '1', "Media Storage SOP Class UID", '', 'MediaStorageSOPClassUID'),  # noqa
    0x00020003: ('UI', '1', "Media Storage SOP Instance UID", '', 'MediaStorageSOPInstanceUID'),  # noqa
    0x00020010: ('UI', '1', "Transfer Syntax UID", '', 'TransferSyntaxUID'),  # noqa
    0x00020012: ('UI', '1', "Implementation Class UID", '', 'ImplementationClassUID'),  # noqa
    0x00020013: ('SH', '1', "Implementation Version Name", '', 'ImplementationVersionName'),  # noqa
    0x00020016: ('AE', '1', "Source Application Entity Title", '', 'SourceApplicationEntityTitle'),  # noqa
    0x00020017: ('AE', '1', "Sending Application Entity Title", '', 'SendingApplicationEntityTitle'),  # noqa
    0x00020018: ('AE', '1', "Receiving Application Entity Title", '', 'ReceivingApplicationEntityTitle'),  # noqa
    0x00020100: ('UI', '1', "Private Information Creator UID", '', 'PrivateInformationCreatorUID'),  # noqa
    0x00020102: ('OB', '1', "Private Information", '', 'PrivateInformation'),  # noqa
    0x00080005: ('CS', '1-n', "Specific Character Set", '', 'SpecificCharacterSet'),  # noqa
    0x00080008: ('CS', '2-n', "Image Type", '', 'ImageType'),  # noqa
    0x00080012: ('DA', '1', "Instance Creation Date", '', 'InstanceCreationDate'),  # noqa
    0x00080013: ('TM', '1', "Instance Creation Time", '', 'InstanceCreationTime'),  # noqa
    0x00080014: ('UI', '1', "Instance Creator UID", '', 'InstanceCreatorUID'),  # noqa
    0x00080016: ('UI', '1', "SOP Class UID", '', 'SOPClassUID'),  # noqa
    0x00080018: ('UI', '1', "SOP Instance UID", '', 'SOPInstanceUID'),  # noqa
    0x00080020: ('DA', '1', "Study Date", '', 'StudyDate'),  # noqa
    0x00080021: ('DA', '1', "Series Date", '', 'SeriesDate'),  # noqa
    0x00080022: ('DA', '1', "Acquisition Date", '', 'AcquisitionDate'),  # noqa
    0x00080023: ('DA', '1', "Content Date", '', 'ContentDate'),  # noqa
    0x0008002A: ('DT', '1', "Acquisition DateTime", '', 'AcquisitionDateTime'),  # noqa
    0x00080030: ('TM', '1', "Study Time", '', 'StudyTime'),  # noqa
    0x00080031: ('TM', '1', "Series Time", '', 'SeriesTime'),  # noqa
    0x00080032: ('TM', '1', "Acquisition Time", '', 'AcquisitionTime'),  # noqa
    0x00080033: ('TM', '1', "Content Time", '', 'ContentTime'),  # noqa
    0x00080050: ('SH', '1', "Accession Number", '', 'AccessionNumber'),  # noqa
    0x00080060: ('CS', '1', "Modality", '', 'Modality'),  # noqa
    0x00080064: ('CS', '1', "Conversion Type", '', 'ConversionType'),  # noqa
    0x00080070: ('LO', '1', "Manufacturer", '', 'Manufacturer'),  # noqa
    0x00080080: ('LO', '1', "Institution Name", '', 'InstitutionName'),  # noqa
    0x00080081: ('ST', '1', "Institution Address", '', 'InstitutionAddress'),  # noqa
    0x00080090: ('PN', '1', "Referring Physician's Name", '', 'ReferringPhysicianName'),  # noqa
    0x00080092: ('ST', '1', "Referring Physician's Address", '', 'ReferringPhysicianAddress'),  # noqa
    0x00080094: ('SH', '1-n', "Referring Physician's Telephone Numbers", '', 'ReferringPhysicianTelephoneNumbers'),  # noqa
    0x00080100: ('SH', '1', "Code Value", '', 'CodeValue'),  # noqa
    0x00080102: ('SH', '1', "Coding Scheme Designator", '', 'CodingSchemeDesignator'),  # noqa
    0x00080104: ('LO', '1', "Code Meaning", '', 'CodeMeaning'),  # noqa
    0x00081010: ('SH', '1', "Station Name", '', 'StationName'),  # noqa
    0x00081030: ('LO', '1', "Study Description", '', 'StudyDescription'),  # noqa
    0x0008103E: ('LO', '1', "Series Description", '', 'SeriesDescription'),  # noqa
    0x00081040: ('LO', '1', "Institutional Department Name", '', 'InstitutionalDepartmentName'),  # noqa
    0x00081048: ('PN', '1-n', "Physician(s) of Record", '', 'PhysiciansOfRecord'),  # noqa
    0x00081050: ('PN', '1-n', "Performing Physician's Name", '', 'PerformingPhysicianName'),  # noqa
    0x00081060: ('PN', '1-n', "Name of Physician(s) Reading Study", '', 'NameOfPhysiciansReadingStudy'),  # noqa
    0x00081070: ('PN', '1-n', "Operators' Name", '', 'OperatorsName'),  # noqa
    0x00081080: ('LO', '1-n', "Admitting Diagnoses Description", '', 'AdmittingDiagnosesDescription'),  # noqa
    0x00081090: ('LO', '1', "Manufacturer's Model Name", '', 'ManufacturerModelName'),  # noqa
    0x00081110: ('SQ', '1', "Referenced Study Sequence", '', 'ReferencedStudySequence'),  # noqa
    0x00081111: ('SQ', '1', "Referenced Performed Procedure Step Sequence", '', 'ReferencedPerformedProcedureStepSequence'),  # noqa
    0x00081115: ('SQ', '1', "Referenced Series Sequence", '', 'ReferencedSeriesSequence'),  # noqa
    0x00081140: ('SQ', '1', "Referenced Image Sequence", '', 'ReferencedImageSequence'),  # noqa
    0x00081150: ('UI', '1', "Referenced SOP Class UID", '', 'ReferencedSOPClassUID'),  # noqa
    0x00081155: ('UI', '1', "Referenced SOP Instance UID", '', 'ReferencedSOPInstanceUID'),  # noqa
    0x00082111: ('ST', '1', "Derivation Description", '', 'DerivationDescription'),  # noqa
    0x00100010: ('PN', '1', "Patient's Name", '', 'PatientName'),  # noqa
    0x00100020: ('LO', '1', "Patient ID", '', 'PatientID'),  # noqa
    0x00100021: ('LO', '1', "Issuer of Patient ID", '', 'IssuerOfPatientID'),  # noqa
    0x00100030: ('DA', '1', "Patient's Birth Date", '', 'PatientBirthDate'),  # noqa
    0x00100032: ('TM', '1', "Patient's Birth Time", '', 'PatientBirthTime'),  # noqa
    0x00100040: ('CS', '1', "Patient's Sex", '', 'PatientSex'),  # noqa
    0x00101000: ('LO', '1-n', "Other Patient IDs", 'Retired', 'OtherPatientIDs'),  # noqa
    0x00101001: ('PN', '1-n', "Other Patient Names", '', 'OtherPatientNames'),  # noqa
    0x00101002: ('SQ', '1', "Other Patient IDs Sequence", '', 'OtherPatientIDsSequence'),  # noqa
    0x00101005: ('PN', '1', "Patient's Birth Name", '', 'PatientBirthName'),  # noqa
    0x00101010: ('AS', '1', "Patient's Age", '', 'PatientAge'),  # noqa
    0x00101020: ('DS', '1', "Patient's Size", '', 'PatientSize'),  # noqa
    0x00101030: ('DS', '1', "Patient's Weight", '', 'PatientWeight'),  # noqa
    0x00101040: ('LO', '1', "Patient's Address", '', 'PatientAddress'),  # noqa
    0x00101060: ('PN', '1', "Patient's Mother's Birth Name", '', 'PatientMotherBirthName'),  # noqa
    0x00101080: ('LO', '1', "Military Rank", '', 'MilitaryRank'),  # noqa
    0x00101090: ('LO', '1', "Medical Record Locator", 'Retired', 'MedicalRecordLocator'),  # noqa
    0x00102154: ('SH', '1-n', "Patient's Telephone Numbers", '', 'PatientTelephoneNumbers'),  # noqa
    0x00102160: ('SH', '1', "Ethnic Group", '', 'EthnicGroup'),  # noqa
    0x00102180: ('SH', '1', "Occupation", '', 'Occupation'),  # noqa
    0x001021B0: ('LT', '1', "Additional Patient History", '', 'AdditionalPatientHistory'),  # noqa
    0x00104000: ('LT', '1', "Patient Comments", '', 'PatientComments'),  # noqa
    0x00120062: ('CS', '1', "Patient Identity Removed", '', 'PatientIdentityRemoved'),  # noqa
    0x00120063: ('LO', '1-n', "De-identification Method", '', 'DeidentificationMethod'),  # noqa
    0x00120064: ('SQ', '1', "De-identification Method Code Sequence", '', 'DeidentificationMethodCodeSequence'),  # noqa
    0x00180015: ('CS', '1', "Body Part Examined", '', 'BodyPartExamined'),  # noqa
    0x00180020: ('CS', '1-n', "Scanning Sequence", '', 'ScanningSequence'),  # noqa
    0x00180021: ('CS', '1-n', "Sequence Variant", '', 'SequenceVariant'),  # noqa
    0x00180022: ('CS', '1-n', "Scan Options", '', 'ScanOptions'),  # noqa
    0x00180023: ('CS', '1', "MR Acquisition Type", '', 'MRAcquisitionType'),  # noqa
    0x00180050: ('DS', '1', "Slice Thickness", '', 'SliceThickness'),  # noqa
    0x00180060: ('DS', '1', "KVP", '', 'KVP'),  # noqa
    0x00180088: ('DS', '1', "Spacing Between Slices", '', 'SpacingBetweenSlices'),  # noqa
    0x00181000: ('LO', '1', "Device Serial Number", '', 'DeviceSerialNumber'),  # noqa
    0x00181002: ('UI', '1', "Device UID", '', 'DeviceUID'),  # noqa
    0x00181004: ('LO', '1', "Plate ID", '', 'PlateID'),  # noqa
    0x00181020: ('LO', '1-n', "Software Versions", '', 'SoftwareVersions'),  # noqa
    0x00181030: ('LO', '1', "Protocol Name", '', 'ProtocolName'),  # noqa
    0x00185100: ('CS', '1', "Patient Position", '', 'PatientPosition'),  # noqa
    0x0020000D: ('UI', '1', "Study Instance UID", '', 'StudyInstanceUID'),  # noqa
    0x0020000E: ('UI', '1', "Series Instance UID", '', 'SeriesInstanceUID'),  # noqa
    0x00200010: ('SH', '1', "Study ID", '', 'StudyID'),  # noqa
    0x00200011: ('IS', '1', "Series Number", '', 'SeriesNumber'),  # noqa
    0x00200012: ('IS', '1', "Acquisition Number", '', 'AcquisitionNumber'),  # noqa
    0x00200013: ('IS', '1', "Instance Number", '', 'InstanceNumber'),  # noqa
    0x00200020: ('CS', '2', "Patient Orientation", '', 'PatientOrientation'),  # noqa
    0x00200032: ('DS', '3', "Image Position (Patient)", '', 'ImagePositionPatient'),  # noqa
    0x00200037: ('DS', '6', "Image Orientation (Patient)", '', 'ImageOrientationPatient'),  # noqa
    0x00200052: ('UI', '1', "Frame of Reference UID", '', 'FrameOfReferenceUID'),  # noqa
    0x00201040: ('LO', '1', "Position Reference Indicator", '', 'PositionReferenceIndicator'),  # noqa
    0x00201041: ('DS', '1', "Slice Location", '', 'SliceLocation'),  # noqa
    0x00204000: ('LT', '1', "Image Comments", '', 'ImageComments'),  # noqa
    0x00280002: ('US', '1', "Samples per Pixel", '', 'SamplesPerPixel'),  # noqa
    0x00280004: ('CS', '1', "Photometric Interpretation", '', 'PhotometricInterpretation'),  # noqa
    0x00280006: ('US', '1', "Planar Configuration", '', 'PlanarConfiguration'),  # noqa
    0x00280008: ('IS', '1', "Number of Frames", '', 'NumberOfFrames'),  # noqa
    0x00280010: ('US', '1', "Rows", '', 'Rows'),  # noqa
    0x00280011: ('US', '1', "Columns", '', 'Columns'),  # noqa
    0x00280030: ('DS', '2', "Pixel Spacing", '', 'PixelSpacing'),  # noqa
    0x00280100: ('US', '1', "Bits Allocated", '', 'BitsAllocated'),  # noqa
    0x00280101: ('US', '1', "Bits Stored", '', 'BitsStored'),  # noqa
    0x00280102: ('US', '1', "High Bit", '', 'HighBit'),  # noqa
    0x00280103: ('US', '1', "Pixel Representation", '', 'PixelRepresentation'),  # noqa
    0x00280106: ('US or SS', '1', "Smallest Image Pixel Value", '', 'SmallestImagePixelValue'),  # noqa
    0x00280107: ('US or SS', '1', "Largest Image Pixel Value", '', 'LargestImagePixelValue'),  # noqa
    0x00280120: ('US or SS', '1', "Pixel Padding Value", '', 'PixelPaddingValue'),  # noqa
    0x00281050: ('DS', '1-n', "Window Center", '', 'WindowCenter'),  # noqa
    0x00281051: ('DS', '1-n', "Window Width", '', 'WindowWidth'),  # noqa
    0x00281052: ('DS', '1', "Rescale Intercept", '', 'RescaleIntercept'),  # noqa
    0x00281053: ('DS', '1', "Rescale Slope", '', 'RescaleSlope'),  # noqa
    0x00281054: ('LO', '1', "Rescale Type", '', 'RescaleType'),  # noqa
    0x00281055: ('LO', '1-n', "Window Center & Width Explanation", '', 'WindowCenterWidthExplanation'),  # noqa
    0x00281056: ('CS', '1', "VOI LUT Function", '', 'VOILUTFunction'),  # noqa
    0x00282110: ('CS', '1', "Lossy Image Compression", '', 'LossyImageCompression'),  # noqa
    0x00283000: ('SQ', '1', "Modality LUT Sequence", '', 'ModalityLUTSequence'),  # noqa
    0x00283002: ('US or SS', '3', "LUT Descriptor", '', 'LUTDescriptor'),  # noqa
    0x00283003: ('LO', '1', "LUT Explanation", '', 'LUTExplanation'),  # noqa
    0x00283004: ('LO', '1', "Modality LUT Type", '', 'ModalityLUTType'),  # noqa
    0x00283006: ('US or OW', '1-n or 1', "LUT Data", '', 'LUTData'),  # noqa
    0x00283010: ('SQ', '1', "VOI LUT Sequence", '', 'VOILUTSequence'),  # noqa
    0x00321032: ('PN', '1', "Requesting Physician", '', 'RequestingPhysician'),  # noqa
    0x00321060: ('LO', '1', "Requested Procedure Description", '', 'RequestedProcedureDescription'),  # noqa
    0x00324000: ('LT', '1', "Study Comments", 'Retired', 'StudyComments'),  # noqa
    0x00400244: ('DA', '1', "Performed Procedure Step Start Date", '', 'PerformedProcedureStepStartDate'),  # noqa
    0x00400245: ('TM', '1', "Performed Procedure Step Start Time", '', 'PerformedProcedureStepStartTime'),  # noqa
    0x00400253: ('SH', '1', "Performed Procedure Step ID", '', 'PerformedProcedureStepID'),  # noqa
    0x00400254: ('LO', '1', "Performed Procedure Step Description", '', 'PerformedProcedureStepDescription'),  # noqa
    0x0040A040: ('CS', '1', "Value Type", '', 'ValueType'),  # noqa
    0x0040A043: ('SQ', '1', "Concept Name Code Sequence", '', 'ConceptNameCodeSequence'),  # noqa
    0x0040A124: ('UI', '1', "UID", '', 'UID'),  # noqa
    0x0040A160: ('UT', '1', "Text Value", '', 'TextValue'),  # noqa
    0x0040A491: ('CS', '1', "Completion Flag", '', 'CompletionFlag'),  # noqa
    0x0040A493: ('CS', '1', "Verification Flag", '', 'VerificationFlag'),  # noqa
    0x0040A730: ('SQ', '1', "Content Sequence", '', 'ContentSequence'),  # noqa
    0x30020002: ('SH', '1', "RT Image Label", '', 'RTImageLabel'),  # noqa
    0x30040002: ('CS', '1', "Dose Units", '', 'DoseUnits'),  # noqa
    0x30040004: ('CS', '1', "Dose Type", '', 'DoseType'),  # noqa
    0x3004000A: ('CS', '1', "Dose Summation Type", '', 'DoseSummationType'),  # noqa
    0x3004000E: ('DS', '1', "Dose Grid Scaling", '', 'DoseGridScaling'),  # noqa
    0x30060002: ('SH', '1', "Structure Set Label", '', 'StructureSetLabel'),  # noqa
    0x30060020: ('SQ', '1', "Structure Set ROI Sequence", '', 'StructureSetROISequence'),  # noqa
    0x300A0002: ('SH', '1', "RT Plan Label", '', 'RTPlanLabel'),  # noqa
    0x300A000A: ('CS', '1', "Plan Intent", '', 'PlanIntent'),  # noqa
    0x300A000C: ('CS', '1', "RT Plan Geometry", '', 'RTPlanGeometry'),  # noqa
    0x7FE00008: ('OF', '1', "Float Pixel Data", '', 'FloatPixelData'),  # noqa
    0x7FE00009: ('OD', '1', "Double Float Pixel Data", '', 'DoubleFloatPixelData'),  # noqa
    0x7FE00010: ('OB or OW', '1', "Pixel Data", '', 'PixelData'),  # noqa
    0xFFFAFFFA: ('SQ', '1', "Digital Signatures Sequence", '', 'DigitalSignaturesSequence'),  # noqa
    0xFFFCFFFC: ('OB', '1', "Data Set Trailing Padding", '', 'DataSetTrailingPadding'),  # noqa
    0xFFFEE000: ('NONE', '1', "Item", '', 'Item'),  # noqa
    0xFFFEE00D: ('NONE', '1', "Item Delimitation Item", '', 'ItemDelimitationItem'),  # noqa
    0xFFFEE0DD: ('NONE', '1', "Sequence Delimitation Item", '', 'SequenceDelimitationItem'),  # noqa
}
