#!/usr/bin/env python3
"""
Example script demonstrating the usage of Flags.

This script declares a boolean switch, a string option and a long-only integer
option, binds them to a dataclass instance and prints the result.

    python basic_example.py -v --output=log.txt --retries 3 input.dat
"""

from dataclasses import dataclass, field

from flag_registry import LONG_ONLY, Flags, set_flag, set_value


@dataclass
class RunConfig:
    """Configuration filled in from the command line."""

    verbose: bool = False
    output: str = "-"
    retries: int = 0
    inputs: list[str] = field(default_factory=list)


def main() -> None:
    """Main function demonstrating the parser."""
    config = RunConfig()
    show_help = []

    flags = (
        Flags()
        .add("verbose", "v", "Enable verbose output", set_flag(config, "verbose"))
        .add("output", "o", "FILE", "Write results to FILE", set_value(config, "output"))
        .add(
            "retries",
            LONG_ONLY,
            "N",
            "Number of times to retry a failed step",
            set_value(config, "retries", int),
        )
        .add("help", "h", "Show this help and exit", lambda: show_help.append(True))
        .parse_or_exit()
    )

    if show_help:
        print(f"usage: {flags.prog} [options] [INPUT...]")
        flags.dump()
        return

    config.inputs = flags.operands
    print(config)


if __name__ == "__main__":
    main()
