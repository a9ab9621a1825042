# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine command line interface program for `dicomengine anonymize`"""

import argparse
import sys

from dicomengine.anonymizer import PROFILES, AnonymizationRule, Anonymizer
from dicomengine.cli.main import read_file
from dicomengine.filewriter import dcmwrite


def rule_parser(spec):
    """Return an :class:`AnonymizationRule` from ``tag:action[:value]``.

    Note: this is used as an argparse 'type' for adding parsing arguments.
    Tags in the ``(gggg,eeee)`` form may be used as they contain no colon.
    """
    tag, sep, rest = spec.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(
            f"Rule '{spec}' is not in the format tag:action[:value]"
        )

    action, _, value = rest.partition(":")
    try:
        return AnonymizationRule(tag, action, value or None)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "anonymize", description="De-identify a DICOM file"
    )
    subparser.add_argument(
        "filename", help="The DICOM file to anonymize", type=read_file
    )
    subparser.add_argument("output", help="The file to write to")
    subparser.add_argument(
        "-p",
        "--profile",
        help="The anonymization profile (default: basic)",
        choices=PROFILES,
        default="basic",
    )
    subparser.add_argument(
        "-r",
        "--rule",
        help="A custom rule as tag:action[:value], e.g. "
             "PatientID:replace:ANON or (0008,0080):remove. May be repeated",
        action="append",
        type=rule_parser,
        default=[],
    )

    subparser.set_defaults(func=do_command)


def do_command(args):
    anonymizer = Anonymizer(args.profile, args.rule)
    ds = anonymizer.anonymize(args.filename)
    for exc in anonymizer.rule_errors:
        print(f"Warning: {exc}", file=sys.stderr)

    dcmwrite(args.output, ds)
    print(f"Anonymized file written to '{args.output}'")
    return 0
