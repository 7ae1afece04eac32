"""
Conversion helpers for binding flag arguments to caller-owned state.

The helpers in this module produce the callbacks handed to ``Flags.add``:
``set_flag`` for zero-argument switches, ``set_value`` and ``append_value`` for
flags that carry an argument. Argument text is turned into typed values by
``convert``, which follows the C library's ``strtoll``/``strtod`` rules: the
longest valid numeric prefix is used and text with no numeric prefix becomes
zero.
"""

import re
from collections.abc import MutableMapping
from typing import Any, Callable, Optional, Type

_INT_PREFIX = re.compile(
    r"\s*(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]+)|(?P<oct>0[0-7]*)|(?P<dec>[1-9][0-9]*))"
)

_FLOAT_PREFIX = re.compile(
    r"""\s*(?P<number>[+-]?(?:
        0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?
        |(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?
        |inf(?:inity)?
        |nan
    ))""",
    re.VERBOSE | re.IGNORECASE,
)


def _check_consumed(text: str, end: int, kind: Type[Any], strict: bool) -> None:
    if strict and (end == 0 or text[end:]):
        raise ValueError(f"Invalid {kind.__name__} value: {text!r}")


def _parse_int(text: str, strict: bool = False) -> int:
    """
    Parse an integer the way ``strtoll(text, NULL, 0)`` does.

    ``0x`` selects hexadecimal, a leading ``0`` selects octal and anything else
    is decimal. Parsing stops at the first character that does not fit.
    """
    match = _INT_PREFIX.match(text)
    if match is None:
        _check_consumed(text, 0, int, strict)
        return 0
    _check_consumed(text, match.end(), int, strict)

    if match.group("hex") is not None:
        value = int(match.group("hex"), 16)
    elif match.group("oct") is not None:
        value = int(match.group("oct"), 8)
    else:
        value = int(match.group("dec"), 10)
    return -value if match.group("sign") == "-" else value


def _parse_float(text: str, strict: bool = False) -> float:
    """
    Parse a real number the way ``strtod`` does in the "C" locale.
    """
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        _check_consumed(text, 0, float, strict)
        return 0.0
    _check_consumed(text, match.end(), float, strict)

    number = match.group("number")
    if number.lstrip("+-")[:2].lower() == "0x":
        return float.fromhex(number)
    return float(number)


def convert(text: str, kind: Type[Any] = str, strict: bool = False) -> Any:
    """
    Convert flag argument text to ``kind``.

    Integral kinds (``int``, ``bool`` and their subclasses) use base-agnostic
    integer parsing, floating-point kinds use decimal parsing, and every other
    kind is treated as string-like and built directly from the text.

    Args:
        text (str): The raw argument text.
        kind (Type[Any]): The target type. Defaults to ``str``.
        strict (bool): If True, numeric text that is not entirely consumed
            raises instead of falling back to the parsed prefix or zero.

    Returns:
        Any: The converted value.

    Raises:
        ValueError: If ``strict`` is set and the text is not a valid number.
    """
    if issubclass(kind, bool):
        return bool(_parse_int(text, strict))
    if issubclass(kind, int):
        return kind(_parse_int(text, strict))
    if issubclass(kind, float):
        return kind(_parse_float(text, strict))
    if kind is str:
        return text
    return kind(text)


def _assign(target: Any, name: str, value: Any) -> None:
    if isinstance(target, MutableMapping):
        target[name] = value
    else:
        setattr(target, name, value)


def set_flag(target: Any, name: str, value: Any = True) -> Callable[[], None]:
    """
    Return a zero-argument callback that stores ``value`` into ``target.name``.

    ``target`` may be a mutable mapping (assigned by key) or any object that
    accepts attribute assignment, such as a dataclass instance.
    """

    def callback() -> None:
        _assign(target, name, value)

    return callback


def set_value(
    target: Any, name: str, kind: Type[Any] = str, strict: bool = False
) -> Callable[[Optional[str]], None]:
    """
    Return a callback that converts its argument and stores it into ``target.name``.
    """

    def callback(text: Optional[str]) -> None:
        _assign(target, name, convert(text or "", kind, strict))

    return callback


def append_value(
    container: Any, kind: Type[Any] = str, strict: bool = False
) -> Callable[[Optional[str]], None]:
    """
    Return a callback that converts its argument and appends it to ``container``.

    Args:
        container: Any object with an ``append`` method, usually a list.
        kind (Type[Any]): Element type passed to ``convert``.
        strict (bool): Passed through to ``convert``.

    Returns:
        Callable[[Optional[str]], None]: The flag callback.
    """

    def callback(text: Optional[str]) -> None:
        container.append(convert(text or "", kind, strict))

    return callback
