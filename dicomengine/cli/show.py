# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine command line interface program for `dicomengine show`"""

import json

from dicomengine.cli.main import filespec_help, filespec_parser
from dicomengine.dataset import Dataset
from dicomengine.metadata import extract_metadata


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "show", description="Display all or part of a DICOM file"
    )
    subparser.add_argument(
        "filespec",
        help=filespec_help,
        type=filespec_parser
    )
    subparser.add_argument(
        "-x",
        "--exclude-private",
        help="Don't show private data elements",
        action="store_true",
    )
    subparser.add_argument(
        "-t", "--top", help="Only show top level", action="store_true"
    )
    subparser.add_argument(
        "-q",
        "--quiet",
        help="Only show basic information",
        action="store_true",
    )
    subparser.add_argument(
        "-j",
        "--json",
        help="Show the metadata as JSON",
        action="store_true",
    )
    subparser.add_argument(
        "-f",
        "--fields",
        help="Comma-separated keywords or tags of the elements to show as "
             "JSON",
        default="",
    )

    subparser.set_defaults(func=do_command)


def do_command(args):
    ds, element = args.filespec[0]
    if args.exclude_private:
        ds = ds.copy()
        ds.remove_private_tags()

    if element is None:
        element = ds

    if args.json and isinstance(element, Dataset):
        metadata = extract_metadata(element, args.fields)
        print(json.dumps(metadata, indent=2))
    elif args.quiet and isinstance(element, Dataset):
        show_quiet(element)
    elif args.top and isinstance(element, Dataset):
        print(element.top())
    else:
        print(str(element))

    return 0


_QUIET_KEYWORDS = (
    "PatientName", "PatientID", "StudyID", "StudyDate", "StudyTime",
    "StudyDescription",
)


def quiet_lines(ds):
    """Yield the summary lines shown by ``dicomengine show -q``."""
    sop_class = ds.get("SOPClassUID")
    if sop_class is not None:
        yield f"SOPClassUID: {sop_class.name}"

    for keyword in _QUIET_KEYWORDS:
        yield f"{keyword}: {ds.get(keyword, 'N/A')}"

    if sop_class is not None and "Image Storage" in sop_class.name:
        bits, modality, rows, columns, location = (
            ds.get(keyword, "N/A") for keyword in (
                "BitsStored", "Modality", "Rows", "Columns", "SliceLocation"
            )
        )
        yield (
            f"Image: {bits}-bit {modality} {rows}x{columns} pixels "
            f"Slice location: {location}"
        )

    if ds.get("PatientIdentityRemoved") == "YES":
        method = ds.get("DeidentificationMethod", "N/A")
        yield f"De-identified: {method}"


def show_quiet(ds):
    for line in quiet_lines(ds):
        print(line)
