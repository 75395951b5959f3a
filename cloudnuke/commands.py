"""Command line helpers: duration parsing and the destructive-action prompt."""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from termcolor import cprint

_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}

_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]+)")


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as "10m", "1h30m" or "1.5h"."""
    text = value
    sign = 1
    if text and text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"time: invalid duration {value!r}")
    total = 0
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if match is None:
            raise ValueError(f"time: invalid duration {value!r}")
        whole, fraction, unit = match.groups()
        if not whole and not fraction:
            raise ValueError(f"time: invalid duration {value!r}")
        scale = _NANOS.get(unit)
        if scale is None:
            raise ValueError(f"time: unknown unit {unit!r} in duration {value!r}")
        total += int(whole or "0") * scale
        if fraction:
            total += int(fraction) * scale // 10 ** len(fraction)
        position = match.end()
    return timedelta(microseconds=sign * total // 1000)


def parse_duration_param(param_value: str) -> datetime:
    """Return the moment that lies the given duration before now."""
    return datetime.now() - parse_duration(param_value)


def confirmation_prompt(prompt: str, max_prompts: int) -> bool:
    """Ask up to max_prompts times for the word 'nuke'; True if it was entered."""
    cprint(
        "\nTHE NEXT STEPS ARE DESTRUCTIVE AND COMPLETELY IRREVERSIBLE, PROCEED WITH CAUTION!!!",
        "red",
        attrs=["bold"],
    )
    for _ in range(max_prompts):
        answer = input(prompt).strip()
        if answer.lower() == "nuke":
            return True
        print(f"Invalid value '{answer}' was entered.")
    return False