import argparse
import logging
import sys
from pathlib import Path

from optfile import engine, store
from optfile.engine import DeleteSet, ReadSet, UsageError, WriteSet

logger = logging.getLogger(__name__)

LOG_FORMAT = "[optfile] %(message)s"

EPILOG = """\
Notes:
  - The file format is one <key>=<value> pair per line.
  - Lines starting with '#' are comments and are never touched.
  - Writing a key that is not present appends 'key=value' at the end.
  - Reading a key that is not present prints an empty line.
"""

MODES = {"read": ReadSet, "write": WriteSet, "delete": DeleteSet}


def build_parser():
    parser = argparse.ArgumentParser(
        prog="optfile",
        description="Read, write or delete keys of a <key>=<value> file in place.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="show more detailed output"
    )
    parser.add_argument(
        "-f",
        "--file",
        dest="path",
        type=Path,
        metavar="FILE",
        help="path to the file to parse (required)",
    )
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "-r", "--read", dest="mode", action="store_const", const="read",
        help="print the value of each <key>",
    )
    modes.add_argument(
        "-w", "--write", dest="mode", action="store_const", const="write",
        help="set each <key>=<value>",
    )
    modes.add_argument(
        "-d", "--delete", dest="mode", action="store_const", const="delete",
        help="delete every line of each <key>",
    )
    parser.add_argument(
        "operands", nargs="*", metavar="ARG", help="<key> or <key>=<value>"
    )
    return parser


def configure_logging(verbose: bool) -> None:
    """Send package log records to stderr; DEBUG with -v, WARNING otherwise."""
    pkg_logger = logging.getLogger("optfile")
    for handler in pkg_logger.handlers[:]:
        pkg_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    pkg_logger.propagate = False


def run(path: Path, request, verbose=False) -> None:
    """Load ``path``, apply ``request`` and print or persist the result."""
    lines = store.load(path)

    if isinstance(request, ReadSet):
        logger.info("Mode: READ")
        values = engine.read_values(lines, request)
        for key, value in values.items():
            if verbose:
                sys.stderr.write(f"{key}=")
                sys.stderr.flush()
            print(value)
        return

    # refuse early rather than after the rewrite
    store.ensure_writable(path)
    logger.info("Mode: %s", "WRITE" if isinstance(request, WriteSet) else "DELETE")
    store.persist(engine.apply(lines, request), path)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        parser.print_help(sys.stderr)
        return 0

    args = parser.parse_intermixed_args(argv)
    configure_logging(args.verbose)

    if args.path is None:
        parser.error("Please specify a file path")
    if args.mode is None:
        parser.error("Please specify a mode: READ, WRITE or DELETE")
    try:
        request = MODES[args.mode].from_args(args.operands)
    except UsageError as e:
        parser.error(str(e))

    logger.info("File to parse: %s", args.path)
    if isinstance(request, WriteSet):
        logger.info(
            "Keys to set: [%s]", ", ".join(f"{k}: {v}" for k, v in request.pairs)
        )
    else:
        logger.info("Keys to read/delete: [%s]", ", ".join(request.keys))

    try:
        run(args.path, request, verbose=args.verbose)
    except OSError as e:
        logger.error("Failed to open file: '%s' (%s)", args.path, e.strerror or e)
        return 1
    return 0

