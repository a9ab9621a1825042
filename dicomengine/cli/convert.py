# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""dicomengine command line interface program for `dicomengine convert`"""

import os

from dicomengine.cli.main import read_file
from dicomengine.converter import AUTO_WINDOW, MIME_TYPES, convert


_EXTENSIONS = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".json": "json",
    ".xml": "xml",
}


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "convert",
        description="Convert a DICOM file to PNG, JPEG, JSON or XML"
    )
    subparser.add_argument(
        "filename", help="The DICOM file to convert", type=read_file
    )
    subparser.add_argument("output", help="The file to write to")
    subparser.add_argument(
        "-f",
        "--format",
        help="The output format, by default from the output file extension",
        choices=list(MIME_TYPES),
    )
    subparser.add_argument(
        "-q",
        "--quality",
        help="The JPEG quality, 1 to 100 (default: 90)",
        type=int,
        default=90,
    )
    subparser.add_argument(
        "-c",
        "--window-center",
        help="The window center, -1 for automatic (default)",
        type=float,
        default=AUTO_WINDOW,
    )
    subparser.add_argument(
        "-w",
        "--window-width",
        help="The window width, -1 for automatic (default)",
        type=float,
        default=AUTO_WINDOW,
    )

    subparser.set_defaults(func=do_command)


def do_command(args):
    output_format = args.format
    if output_format is None:
        extension = os.path.splitext(args.output)[1].lower()
        output_format = _EXTENSIONS.get(extension, "png")

    result = convert(
        args.filename,
        output_format,
        args.quality,
        args.window_center,
        args.window_width
    )
    with open(args.output, "wb") as f:
        f.write(result.data)

    print(f"Converted file written to '{args.output}' ({result.mime_type})")
    return 0
