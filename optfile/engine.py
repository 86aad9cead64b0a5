"""Apply read, write and delete requests to a loaded line store.

Every function here is pure: it takes the lines and a request and
returns a new result, leaving its inputs untouched.
"""

import logging
from dataclasses import dataclass

from optfile.store import (
    COMMENT_PREFIX,
    DELIMITER,
    LineStore,
    format_pair,
    is_comment,
    match_key,
    split_value,
)

logger = logging.getLogger(__name__)


class UsageError(ValueError):
    """Raised for operands that cannot form a valid request."""


def _check_key(key: str, arg: str) -> None:
    # comment lines never match any key
    if key.startswith(COMMENT_PREFIX):
        raise UsageError(f"Key must not start with '{COMMENT_PREFIX}' - Got '{arg}'")


def parse_key(arg: str) -> str:
    """Validate a read/delete operand and return the trimmed key."""
    if DELIMITER in arg:
        raise UsageError(f"Wrong format of options - Expected <key> | Got '{arg}'")
    key = arg.strip()
    if not key:
        raise UsageError(f"Empty key - Got '{arg}'")
    _check_key(key, arg)
    return key


def parse_pair(arg: str) -> tuple[str, str]:
    """Validate a write operand and return the trimmed (key, value)."""
    idx = arg.find(DELIMITER)
    if idx <= 0 or idx == len(arg) - 1:
        raise UsageError(
            f"Wrong format to set key - Expected <key>=<value> | Got '{arg}'"
        )
    key, value = arg[:idx].strip(), arg[idx + 1 :].strip()
    if not key or not value:
        raise UsageError(
            f"Wrong format to set key - Expected <key>=<value> | Got '{arg}'"
        )
    _check_key(key, arg)
    return key, value


def _unique(keys) -> tuple[str, ...]:
    return tuple(dict.fromkeys(keys))


@dataclass(frozen=True)
class ReadSet:
    keys: tuple[str, ...]

    @classmethod
    def from_args(cls, args) -> "ReadSet":
        keys = _unique(parse_key(a) for a in args)
        if not keys:
            raise UsageError("Specify at least one key to READ")
        return cls(keys)


@dataclass(frozen=True)
class DeleteSet:
    keys: tuple[str, ...]

    @classmethod
    def from_args(cls, args) -> "DeleteSet":
        keys = _unique(parse_key(a) for a in args)
        if not keys:
            raise UsageError("Specify at least one key to DELETE")
        return cls(keys)


@dataclass(frozen=True)
class WriteSet:
    pairs: tuple[tuple[str, str], ...]

    @classmethod
    def from_args(cls, args) -> "WriteSet":
        pending: dict[str, str] = {}
        for arg in args:
            key, value = parse_pair(arg)
            # first occurrence on the command line wins
            pending.setdefault(key, value)
        if not pending:
            raise UsageError("Specify at least one key to WRITE")
        return cls(tuple(pending.items()))


def read_values(lines: LineStore, request: ReadSet) -> dict[str, str]:
    """Map every requested key to its value; missing keys map to ''."""
    found: dict[str, str] = {}
    for line in lines:
        if is_comment(line):
            continue
        for key in request.keys:
            idx = match_key(line, key)
            if idx is not None:
                # later lines overwrite earlier ones
                found[key] = split_value(line, idx)
    return {key: found.get(key, "") for key in request.keys}


def write_values(lines: LineStore, request: WriteSet) -> LineStore:
    """Replace the first line of each key, appending keys not present."""
    pending = dict(request.pairs)
    result = []
    for line in lines:
        for key, value in pending.items():
            if match_key(line, key) is not None:
                line = format_pair(key, value)
                del pending[key]
                break
        result.append(line)
    if pending:
        logger.debug("Appending new key(s): %s", ", ".join(pending))
    result.extend(format_pair(key, value) for key, value in pending.items())
    return result


def delete_keys(lines: LineStore, request: DeleteSet) -> LineStore:
    """Drop every line that assigns one of the requested keys."""
    result = [
        line
        for line in lines
        if not any(match_key(line, key) is not None for key in request.keys)
    ]
    logger.debug("Removed %d line(s)", len(lines) - len(result))
    return result


def apply(lines: LineStore, request):
    """Run ``request`` against ``lines``.

    Returns the value mapping for a ReadSet and the new lines otherwise.
    """
    if isinstance(request, ReadSet):
        return read_values(lines, request)
    if isinstance(request, WriteSet):
        return write_values(lines, request)
    if isinstance(request, DeleteSet):
        return delete_keys(lines, request)
    raise TypeError(f"Unsupported request: {request!r}")
