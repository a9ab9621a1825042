# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine command line interface program for `dicomengine validate`"""

import argparse
import json

from dicomengine.validator import LEVELS, validate_bytes


def private_exception(value):
    """Return a private group as :class:`int` for hex values, otherwise
    the private creator name.
    """
    try:
        group = int(value, 16)
    except ValueError:
        return value

    if group % 2 == 0 or group > 0xFFFF:
        raise argparse.ArgumentTypeError(
            f"'{value}' is not a private group number"
        )

    return group


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "validate", description="Validate a DICOM file"
    )
    subparser.add_argument("filename", help="The DICOM file to validate")
    subparser.add_argument(
        "-l",
        "--level",
        help="The validation level (default: standard)",
        choices=LEVELS,
        default="standard",
    )
    subparser.add_argument(
        "-p",
        "--private-exception",
        help="A private group (hex) or private creator name allowed by the "
             "strict level. May be repeated",
        action="append",
        type=private_exception,
        default=None,
    )
    subparser.add_argument(
        "-j",
        "--json",
        help="Show the report as JSON",
        action="store_true",
    )

    subparser.set_defaults(func=do_command)


def do_command(args):
    with open(args.filename, "rb") as f:
        data = f.read()

    report = validate_bytes(data, args.level, args.private_exception)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        status = "valid" if report.valid else "not valid"
        print(f"'{args.filename}' is {status} at the '{report.level}' level")
        for finding in report.errors:
            print(f"  Error: {finding}")
        for finding in report.warnings:
            print(f"  Warning: {finding}")

    return 0 if report.valid else 1
