"""CLI entry point."""

import sys
from typing import Optional, Sequence

from blockmap.config import OutputKind
from blockmap.exceptions import BlockMapError
from cli.commands import handle_build, resolve_output
from cli.parser import ParseError, build_parser, parse_args
from common.logging_config import setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for CLI; returns the process exit status."""
    try:
        cmd = parse_args(argv)
    except ParseError as e:
        build_parser().print_usage(sys.stderr)
        print(f"blockmap: {e}", file=sys.stderr)
        return EXIT_USAGE

    log_level = 'DEBUG' if cmd.debug else None
    setup_logging('blockmap', log_level=log_level)
    logger = setup_logging('cli', log_level=log_level)

    if cmd.debug:
        logger.info("Debug logging enabled")

    try:
        info = handle_build(cmd)
    except BlockMapError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=cmd.debug)
        return EXIT_FAILURE

    if resolve_output(cmd).kind is OutputKind.STDOUT:
        result_stream = sys.stderr.buffer
    else:
        result_stream = sys.stdout.buffer
    result_stream.write(info.to_json() + b"\n")
    result_stream.flush()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
