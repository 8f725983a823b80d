"""Command-line flag parser."""

import argparse
from typing import Optional, Sequence

from blockmap.config import COMPRESSION
from cli.models import BuildCommand
from cli.utils import parse_file_size

DESCRIPTION = (
    "Divide in-file into variable-sized, content-defined chunks that are robust to\n"
    "insertions, deletions, and changes to in-file."
)


class ParseError(Exception):
    """Raised when command-line parsing fails."""

    pass


class _RaisingArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ParseError(message)


def _byte_size(text: str) -> int:
    try:
        return parse_file_size(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser; flags accept one or two leading dashes."""
    parser = _RaisingArgumentParser(
        prog="blockmap",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("-in", "--in", dest="in_file", required=True, metavar="FILE", help="input file")
    parser.add_argument(
        "-out", "--out", dest="out_file", metavar="FILE",
        help="output file, '-' for stdout (default: stdout)",
    )
    parser.add_argument(
        "-compression", "--compression", default=COMPRESSION,
        help="the compression, one of: gzip, deflate",
    )
    parser.add_argument(
        "-append", "--append", action="store_true",
        help="append the block map to the input file instead of writing a new file",
    )
    parser.add_argument("-window", "--window", type=_byte_size, metavar="W", help="use a rolling hash with window size W")
    parser.add_argument("-avg", "--avg", type=_byte_size, metavar="SIZE", help="average chunk size; must be a power of 2")
    parser.add_argument("-min", "--min", type=_byte_size, metavar="SIZE", help="minimum chunk size")
    parser.add_argument("-max", "--max", type=_byte_size, metavar="SIZE", help="maximum chunk size")
    parser.add_argument("-debug", "--debug", action="store_true", help="enable debug logging")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> BuildCommand:
    """Parse command-line arguments into a BuildCommand.

    Args:
        argv: Arguments without the program name. Defaults to sys.argv[1:]

    Returns:
        BuildCommand

    Raises:
        ParseError: If flags are unknown, malformed or conflicting
    """
    args = build_parser().parse_args(argv)

    if args.append and args.out_file is not None:
        raise ParseError("-append and -out are mutually exclusive")

    return BuildCommand(
        in_file=args.in_file,
        out_file=args.out_file,
        append=args.append,
        compression=args.compression,
        window=args.window,
        min=args.min,
        avg=args.avg,
        max=args.max,
        debug=args.debug,
    )
