#!/usr/bin/env python3
"""
Example demonstrating callbacks other than the binding helpers.

This example shows:
- Binding into a plain dict with set_value
- Collecting a repeated flag into a list with append_value
- Writing a custom callback for a flag that takes an argument
- Reporting errors as a value with safe_parse
"""

from flag_registry import LONG_ONLY, Flags, append_value, set_value

if __name__ == "__main__":
    settings = {"threads": 1, "scale": 1.0}
    includes: list[str] = []
    defines: dict[str, str] = {}

    def define(text):
        key, _, value = text.partition("=")
        defines[key] = value

    flags = (
        Flags(prog="custom_flags_example")
        .add("threads", "j", "COUNT", "Worker threads", set_value(settings, "threads", int))
        .add("scale", LONG_ONLY, "FACTOR", "Scale factor", set_value(settings, "scale", float))
        .add("include", "I", "DIR", "Add DIR to the search path", append_value(includes))
        .add("define", "D", "KEY=VALUE", "Define a variable", define)
    )

    # Simulate parsing arguments (replace with `None` to use CLI args)
    args = ["-j", "0x10", "--scale=2.5", "-I", "/usr/include", "-Ilocal", "-DMODE=fast"]

    result = flags.safe_parse(args)
    if result.is_err():
        print(f"error: {result.unwrap_err()}")
        flags.dump()
    else:
        print("Settings:", settings)
        print("Includes:", includes)
        print("Defines:", defines)

    print("Unknown flag:", flags.safe_parse(["--bogus"]).unwrap_err())
