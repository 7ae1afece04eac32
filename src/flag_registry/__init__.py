"""
flag_registry - declare command-line flags with callbacks and dispatch them through getopt.

This package provides a small builder for command-line flags: each flag correlates
a long and a short spelling, carries help text and an optional argument metavar,
and is bound to a callback invoked when the flag is seen. Helpers bind flags
directly to attributes, mapping keys or lists with best-effort type conversion.
"""

from .convert import append_value, convert, set_flag, set_value
from .registry import LONG_ONLY, FlagDescriptor, Flags, FlagsFrozenError, LongOption

__version__ = "1.0.0"
__all__ = [
    "Flags",
    "FlagDescriptor",
    "FlagsFrozenError",
    "LongOption",
    "LONG_ONLY",
    "append_value",
    "convert",
    "set_flag",
    "set_value",
]
