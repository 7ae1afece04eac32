"""
Flags - a registry of command-line flags dispatched through ``getopt``.

This module correlates the long and short spellings of each flag, hands the
derived option tables to the standard library's ``getopt`` scanner, and invokes
a per-flag callback for every option the scanner recognises. It also renders a
one-line-per-flag help listing.
"""

import getopt
import logging
import os
import sys
from dataclasses import dataclass
from io import StringIO
from typing import (
    Any,
    Callable,
    NamedTuple,
    Optional,
    TextIO,
    overload,
)

from result import Err, Ok, Result

logger = logging.getLogger(__name__)

# Pass as ``short`` to declare a flag that has no single-character spelling.
LONG_ONLY = None

# First code handed out to long-only flags. Codes count down from here so they
# never collide with a character ordinal.
_FIRST_LONG_ONLY_CODE = -2

ArgCallback = Callable[[Optional[str]], None]
NoArgCallback = Callable[[], None]


class FlagsFrozenError(RuntimeError):
    """Raised when a flag is added to a registry that has already been frozen."""


@dataclass(frozen=True)
class FlagDescriptor:
    """
    A single declared flag.

    Attributes:
        name: Long name without the leading ``--``, or None for a short-only flag.
        short: Single-character short name, or None for a long-only flag.
        code: Integer identity used for dispatch.
        metavar: Placeholder for the flag's argument in help output. None means
            the flag takes no argument.
        help: Help text.
        callback: Invoked with the argument text (None for argument-less flags).
    """

    name: Optional[str]
    short: Optional[str]
    code: int
    metavar: Optional[str]
    help: str
    callback: ArgCallback

    @property
    def takes_argument(self) -> bool:
        return self.metavar is not None


class LongOption(NamedTuple):
    """One entry of the derived long-option table."""

    name: str
    has_arg: bool
    code: int


class Flags:
    """
    A builder for a set of command-line flags, and the parser that dispatches them.

    Flags are declared by chaining ``add`` calls. ``parse`` freezes the
    declaration set on first use, scans the argument vector with ``getopt`` and
    calls each recognised flag's callback in the order the flags appear.

    Example:
        opts = SimpleNamespace(verbose=False, output=None, retries=0)

        flags = (
            Flags()
            .add("verbose", "v", "Enable verbose output", set_flag(opts, "verbose"))
            .add("output", "o", "FILE", "Write output to FILE", set_value(opts, "output"))
            .add("retries", LONG_ONLY, "N", "Retry count", set_value(opts, "retries", int))
        )
        flags.parse(["-v", "--output=log.txt", "--retries", "3"])
    """

    def __init__(self, prog: Optional[str] = None, permute: bool = True) -> None:
        """
        Create an empty registry.

        Args:
            prog (Optional[str]): Program name used in error reports. Defaults to
                the basename of ``sys.argv[0]``.
            permute (bool): If True, flags and operands may be interleaved
                (``getopt.gnu_getopt``). If False, scanning stops at the first
                operand (``getopt.getopt``).
        """
        self.prog: str = prog or os.path.basename(sys.argv[0])
        self.permute: bool = permute
        self.operands: list[str] = []

        self._descriptors: list[FlagDescriptor] = []
        self._by_code: dict[int, FlagDescriptor] = {}
        self._next_long_only_code: int = _FIRST_LONG_ONLY_CODE
        self._frozen: bool = False

        # derived by done()
        self._short_options: str = ""
        self._long_options: tuple[LongOption, ...] = ()
        self._getopt_long: tuple[str, ...] = ()
        self._code_by_spelling: dict[str, int] = {}

    @overload
    def add(
        self,
        name: Optional[str],
        short: Optional[str],
        help: str,
        callback: NoArgCallback,
    ) -> "Flags": ...

    @overload
    def add(
        self,
        name: Optional[str],
        short: Optional[str],
        metavar: Optional[str],
        help: str,
        callback: ArgCallback,
    ) -> "Flags": ...

    def add(self, name: Optional[str], short: Optional[str], *rest: Any) -> "Flags":
        """
        Declare a flag.

        Two forms are accepted:

            add(name, short, metavar, help, callback)
            add(name, short, help, callback)

        The first is the general form: a non-None ``metavar`` means the flag
        takes an argument, and ``callback`` receives the argument text. The
        second declares a flag without an argument, and ``callback`` is called
        with no arguments.

        Args:
            name (Optional[str]): Long name, without the leading ``--``.
            short (Optional[str]): Single-character short name, or ``LONG_ONLY``.

        Returns:
            Flags: This registry, for chaining.

        Raises:
            FlagsFrozenError: If the registry has already been frozen.
            ValueError: If a name is malformed or conflicts with an existing flag.
            TypeError: If the wrong number of arguments is given.
        """
        if len(rest) == 3:
            metavar, help_text, callback = rest
        elif len(rest) == 2:
            help_text, no_arg_callback = rest
            metavar = None

            def callback(_text: Optional[str]) -> None:
                no_arg_callback()

        else:
            raise TypeError(
                f"add() takes (name, short, [metavar,] help, callback), got {2 + len(rest)} arguments"
            )

        if self._frozen:
            raise FlagsFrozenError(
                f"Cannot add flag {name or short!r}: flags have already been frozen"
            )
        self._check_names(name, short)

        if short is LONG_ONLY:
            code = self._next_long_only_code
            self._next_long_only_code -= 1
        else:
            code = ord(short)

        descriptor = FlagDescriptor(
            name=name,
            short=short,
            code=code,
            metavar=metavar,
            help=help_text,
            callback=callback,
        )
        self._descriptors.append(descriptor)
        self._by_code[code] = descriptor
        logger.debug("Registered flag %s with code %d", _spelling(descriptor), code)
        return self

    def _check_names(self, name: Optional[str], short: Optional[str]) -> None:
        if name is None and short is LONG_ONLY:
            raise ValueError("A flag needs a long name, a short name, or both")

        if short is not LONG_ONLY:
            if len(short) != 1 or short in ":-+" or short.isspace():
                raise ValueError(f"Invalid short flag name: {short!r}")
            if ord(short) in self._by_code:
                raise ValueError(f"Flag name conflict: -{short}")

        if name is not None:
            if (
                not name
                or name.startswith("-")
                or "=" in name
                or any(c.isspace() for c in name)
            ):
                raise ValueError(f"Invalid long flag name: {name!r}")
            if any(d.name == name for d in self._descriptors):
                raise ValueError(f"Flag name conflict: --{name}")

    def done(self) -> "Flags":
        """
        Freeze the registry and compute the option tables handed to ``getopt``.

        Calling this more than once has no further effect.

        Returns:
            Flags: This registry.
        """
        if self._frozen:
            return self

        self._short_options = "".join(
            d.short + (":" if d.takes_argument else "")
            for d in self._descriptors
            if d.short is not None
        )
        self._long_options = tuple(
            LongOption(d.name, d.takes_argument, d.code)
            for d in self._descriptors
            if d.name is not None
        )
        self._getopt_long = tuple(
            opt.name + ("=" if opt.has_arg else "") for opt in self._long_options
        )

        for d in self._descriptors:
            if d.short is not None:
                self._code_by_spelling[f"-{d.short}"] = d.code
            if d.name is not None:
                self._code_by_spelling[f"--{d.name}"] = d.code

        self._frozen = True
        logger.debug(
            "Froze %d flags: short options %r, long options %r",
            len(self._descriptors),
            self._short_options,
            self._getopt_long,
        )
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def descriptors(self) -> tuple[FlagDescriptor, ...]:
        """Declared flags in registration order."""
        return tuple(self._descriptors)

    @property
    def short_options(self) -> str:
        return self.done()._short_options

    @property
    def long_options(self) -> tuple[LongOption, ...]:
        return self.done()._long_options

    def parse(self, args: Optional[list[str]] = None) -> "Flags":
        """
        Scan ``args`` and invoke the callback of every flag found, in order.

        The registry is frozen first if it is not already. Arguments that are
        not flags are collected in ``self.operands``.

        Args:
            args (Optional[list[str]]): Arguments to parse, without the program
                name. If None, uses ``sys.argv[1:]``.

        Returns:
            Flags: This registry, for chaining.

        Raises:
            getopt.GetoptError: If ``args`` holds an unrecognised option or a flag
                is missing its argument. No callback is invoked in that case.
        """
        self.done()
        if args is None:
            args = sys.argv[1:]

        scan = getopt.gnu_getopt if self.permute else getopt.getopt
        found, self.operands = scan(
            list(args), self._short_options, list(self._getopt_long)
        )

        for spelling, value in found:
            descriptor = self._by_code[self._code_by_spelling[spelling]]
            logger.debug("Dispatching %s (code %d)", spelling, descriptor.code)
            descriptor.callback(value if descriptor.takes_argument else None)
        return self

    def safe_parse(self, args: Optional[list[str]] = None) -> Result["Flags", str]:
        """
        Parse like ``parse``, reporting user errors as a value instead of raising.

        Args:
            args (Optional[list[str]]): Arguments to parse. If None, uses ``sys.argv[1:]``.

        Returns:
            Result[Flags, str]:
                - Ok with this registry if parsing succeeded,
                - Err with the error message if an option was not recognised,
                  was missing its argument, or its value failed a strict conversion.
        """
        try:
            return Ok(self.parse(args))
        except (getopt.GetoptError, ValueError) as e:
            return Err(str(e))

    def parse_or_exit(
        self, args: Optional[list[str]] = None, stream: Optional[TextIO] = None
    ) -> "Flags":
        """
        Parse like ``parse``, but report user errors and exit with status 2.

        The error message is written to ``stream`` (default ``sys.stderr``),
        followed by the help listing.
        """
        try:
            return self.parse(args)
        except (getopt.GetoptError, ValueError) as e:
            stream = stream if stream is not None else sys.stderr
            stream.write(f"{self.prog}: {e}\n")
            self.dump(stream)
            raise SystemExit(2) from e

    def dump(self, stream: Optional[TextIO] = None) -> TextIO:
        """
        Write one help line per flag, in registration order.

        Args:
            stream (Optional[TextIO]): Destination. Defaults to ``sys.stdout``.

        Returns:
            TextIO: The stream written to.
        """
        if stream is None:
            stream = sys.stdout

        columns = [_usage_column(d) for d in self._descriptors]
        width = max((len(c) for c in columns), default=0)
        for column, descriptor in zip(columns, self._descriptors):
            stream.write(f"  {column.ljust(width)}  {descriptor.help}".rstrip() + "\n")
        return stream

    def __str__(self) -> str:
        return self.dump(StringIO()).getvalue()


def _spelling(descriptor: FlagDescriptor) -> str:
    if descriptor.name is not None:
        return f"--{descriptor.name}"
    return f"-{descriptor.short}"


def _usage_column(descriptor: FlagDescriptor) -> str:
    if descriptor.short is not None and descriptor.name is not None:
        column = f"-{descriptor.short}, --{descriptor.name}"
    elif descriptor.short is not None:
        column = f"-{descriptor.short}"
    else:
        column = f"    --{descriptor.name}"
    if descriptor.takes_argument:
        column += f" {descriptor.metavar}"
    return column
