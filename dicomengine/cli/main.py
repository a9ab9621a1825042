# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine command line interface program

Each subcommand is a module within dicomengine.cli, which
defines an add_subparser(subparsers) function to set argparse
attributes, and calls set_defaults(func=callback_function). The callback
returns the exit code of the program.

Other packages can add subcommands through the ``dicomengine_subcommands``
entry point group.
"""

import argparse
from importlib.metadata import entry_points
import re
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

from dicomengine.datadict import tag_for_keyword
from dicomengine.dataset import Dataset
from dicomengine.errors import DicomEngineError
from dicomengine.filereader import dcmread


subparsers: Optional[argparse._SubParsersAction] = None


# Restrict the allowed syntax tightly, only keywords, tags and indexes
re_kywd_or_item = (
    r"("
    r"\w+"  # Keyword (\w allows underscore, needed for file_meta)
    r"|"  # or
    r"\([0-9A-Fa-f]{4},[0-9A-Fa-f]{4}\)"  # DICOM hex tag (gggg,eeee)
    r")"
    r"(?:\[(-?\d+)\])?"  # Optional [index] or [-index], keep inside brackets
)

re_file_spec_object = re.compile(
    re_kywd_or_item + r"(\." + re_kywd_or_item + r")*$"
)

re_match_tag = r"\(([0-9A-Fa-f]{4}),([0-9A-Fa-f]{4})\)"
re_tag_with_spaces = r"\([0-9A-Fa-f]{4}, +[0-9A-Fa-f]{4}\)"

filespec_help = (
    "File specification, in format filename[::element]. "
    "If `element` is given, use only that data element within the file. "
    "Examples: "
    "path/to/your_file.dcm, "
    "your_file.dcm::StudyDate, "
    "your_file.dcm::(0001,0001), "
    "yourplan.dcm::BeamSequence[0].BeamNumber"
)


def eval_element(ds: Dataset, element: str) -> Any:
    """Return the value of the `element` path within `ds`."""
    obj: Any = ds
    for sub_elem in element.split("."):
        # e.g. match "BeamSequence[1]" --> groups: ['BeamSequence', '1']
        m = re.match(re_kywd_or_item, sub_elem)
        identifier = m.groups()[0]  # type: ignore

        if identifier == "file_meta" and isinstance(obj, Dataset):
            obj = obj.__dict__.get("file_meta")
            if obj is None:
                raise argparse.ArgumentTypeError(
                    "The dataset has no file meta information"
                )
        elif tag_for_keyword(identifier) is not None:  # DICOM keyword
            if not isinstance(obj, Dataset) or identifier not in obj:
                raise argparse.ArgumentTypeError(
                    f"'{identifier}' is not in the parent object"
                )
            obj = obj[identifier].value
        # Try (gggg,eee) tag
        elif re.match(re_match_tag, identifier):
            match = re.match(re_match_tag, identifier)
            tag = int("".join(match.groups()[0:2]), 16)  # type: ignore
            if not isinstance(obj, Dataset) or tag not in obj:
                raise argparse.ArgumentTypeError(
                    f"'{identifier}' is not in the parent object"
                )
            obj = obj[tag].value
        else:
            raise argparse.ArgumentTypeError(
                f"'{identifier}' is not a known DICOM keyword or tag"
            )

        # If here, then have the new object, handle indexing if there
        index = m.groups()[1]  # type: ignore
        if index is not None:
            try:
                obj = obj[int(index)]
            except (IndexError, TypeError) as e:
                raise argparse.ArgumentTypeError(
                    f"'{index}' gave an index error: {str(e)}"
                )

    return obj


def filespec_parts(filespec: str) -> Tuple[str, str]:
    """Parse the filespec format into filename, element

    Format is filename[::element]

    Note that ':' can also exist in valid filename, e.g. r'c:\\temp\\test.dcm'
    """
    filename, sep, element = filespec.rpartition("::")
    if not sep:
        return element, ""

    return filename, element


def filespec_parser(filespec: str) -> List[Tuple[Dataset, Any]]:
    """Utility to return a dataset and an optional data element value within it

    Note: this is used as an argparse 'type' for adding parsing arguments.

    Parameters
    ----------
    filespec: str
        A filename with an optional data element, in format
        ``<filename>[::<element>]``. If an element is specified, it must be
        a path to a data element, sequence item (dataset), or a sequence,
        specified with DICOM keywords, or DICOM tags in the format
        (gggg,eeee).

    Returns
    -------
    List[Tuple[Dataset, Any]]
        Matching pairs of (dataset, data element value).

    Raises
    ------
    argparse.ArgumentTypeError
        If the file does not exist or can't be parsed, or the element is
        not a valid expression or does not exist within the dataset.
    """
    filename, element = filespec_parts(filespec)

    # Check element syntax first to avoid unnecessary load of file
    if element and not re_file_spec_object.match(element):
        # Special message if a tag with spaces
        m = re.search(re_tag_with_spaces, element)
        if m:
            msg = (
                f"Tag '{m.group()}' is not valid syntax for a tag: no spaces "
                "allowed"
            )
        else:
            msg = (
                f"Component '{element}' is not valid syntax for a "
                "data element, sequence, or sequence item"
            )
        raise argparse.ArgumentTypeError(msg)

    ds = read_file(filename)
    if not element:
        return [(ds, None)]

    return [(ds, eval_element(ds, element))]


def read_file(filename: str) -> Dataset:
    """Return the dataset in `filename` for use as an argparse type."""
    try:
        return dcmread(filename)
    except FileNotFoundError:
        raise argparse.ArgumentTypeError(f"File '{filename}' not found")
    except (OSError, DicomEngineError) as e:
        raise argparse.ArgumentTypeError(f"Error reading '{filename}': {e}")


def help_command(args: argparse.Namespace) -> int:
    if subparsers is None:
        print("No subcommands are available")
        return 0

    subcommands: List[str] = list(subparsers.choices.keys())
    if args.subcommand and args.subcommand in subcommands:
        subparsers.choices[args.subcommand].print_help()
    else:
        print("Use dicomengine help [subcommand] to show help for a "
              "subcommand")
        subcommands.remove("help")
        print(f"Available subcommands: {', '.join(subcommands)}")

    return 0


SubCommandType = Dict[str, Callable[[argparse._SubParsersAction], None]]


def get_subcommands() -> SubCommandType:
    """Return the built-in subcommands and those of installed plugins."""
    from dicomengine.cli import anonymize, convert, show, validate

    subcommands = {
        "show": show.add_subparser,
        "anonymize": anonymize.add_subparser,
        "convert": convert.add_subparser,
        "validate": validate.add_subparser,
    }
    for entry_point in entry_points(group="dicomengine_subcommands"):
        subcommands.setdefault(entry_point.name, entry_point.load())

    return subcommands


def main(args: Optional[List[str]] = None) -> int:
    """Entry point for 'dicomengine' command line interface

    Parameters
    ----------
    args : List[str], optional
        Command-line arguments to parse.  If ``None``, then :attr:`sys.argv`
        is used.

    Returns
    -------
    int
        The exit code, ``1`` if the command failed or the file was not
        valid.
    """
    global subparsers

    py_version = sys.version.split()[0]

    parser = argparse.ArgumentParser(
        prog="dicomengine",
        description=f"dicomengine command line tools (Python {py_version})",
    )
    subparsers = parser.add_subparsers(help="subcommand help")

    help_parser = subparsers.add_parser(
        "help", help="display help for subcommands"
    )
    help_parser.add_argument(
        "subcommand", nargs="?", help="Subcommand to show help for"
    )
    help_parser.set_defaults(func=help_command)

    # Get subcommands to register themselves as a subparser
    subcommands = get_subcommands()
    for subcommand in subcommands.values():
        subcommand(subparsers)

    ns = parser.parse_args(args)
    if not vars(ns):
        parser.print_help()
        return 0

    try:
        return ns.func(ns) or 0
    except DicomEngineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
