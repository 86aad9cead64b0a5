"""Edit flat key=value files in place."""

from optfile.engine import (
    DeleteSet,
    ReadSet,
    UsageError,
    WriteSet,
    apply,
    delete_keys,
    read_values,
    write_values,
)
from optfile.store import ensure_writable, load, match_key, persist

__version__ = "0.1.0"

__all__ = [
    "DeleteSet",
    "ReadSet",
    "UsageError",
    "WriteSet",
    "apply",
    "delete_keys",
    "ensure_writable",
    "load",
    "match_key",
    "persist",
    "read_values",
    "write_values",
]
