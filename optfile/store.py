"""Load, inspect and persist the lines of a key=value file."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DELIMITER = "="
COMMENT_PREFIX = "#"
ENCODING = "utf-8"
# keeps undecodable bytes intact on pass-through lines
ERRORS = "surrogateescape"

LineStore = list[str]


def load(path: Path) -> LineStore:
    """Return the lines of ``path`` in file order, without terminators.

    Only ``\\n`` separates lines; ``\\r`` and everything else stays part
    of the line so untouched lines can be written back unchanged.
    """
    with open(path, encoding=ENCODING, errors=ERRORS, newline="") as f:
        text = f.read()
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    logger.debug("Loaded %d line(s) from %s", len(lines), path)
    return lines


def is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIX)


def match_key(line: str, key: str) -> int | None:
    """Return the delimiter index if ``line`` assigns ``key``, else None."""
    if is_comment(line):
        return None
    idx = line.find(DELIMITER)
    # need raw text on both sides of the delimiter
    if idx <= 0 or idx == len(line) - 1:
        return None
    if line[:idx].strip() != key:
        return None
    return idx


def split_value(line: str, idx: int) -> str:
    return line[idx + 1 :].strip()


def format_pair(key: str, value: str) -> str:
    return f"{key}{DELIMITER}{value}"


def ensure_writable(path: Path) -> None:
    """Fail before any work is done if ``path`` cannot be opened for writing."""
    # append mode so the existing content survives the probe
    with open(path, "a", encoding=ENCODING):
        pass


def persist(lines: LineStore, path: Path) -> None:
    """Overwrite ``path`` in place with one newline-terminated entry per line.

    Symlinks are followed and the file keeps its inode and permissions.
    """
    with open(path, "w", encoding=ENCODING, errors=ERRORS, newline="") as f:
        for line in lines:
            f.write(line + "\n")
    logger.debug("Wrote %d line(s) to %s", len(lines), path)
