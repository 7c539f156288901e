"""
Text <-> number-array codec.

``parse`` splits free text into the numbers it contains and the literal text
around them; ``join`` puts an edited array back into the same text.  The
separator list always has one more entry than the number list: the text
before the first number, the text between each pair, and the trailing text.
"""

from __future__ import annotations

import math
import re
from typing import Sequence

NUMBER_PATTERN: re.Pattern[str] = re.compile(r"-?\d*\.?\d+")


def parse(text: str) -> tuple[list[float], list[str]]:
    numbers: list[float] = []
    separators: list[str] = []
    last = 0
    for match in NUMBER_PATTERN.finditer(text):
        separators.append(text[last:match.start()])
        numbers.append(float(match.group()))
        last = match.end()
    separators.append(text[last:])
    return numbers, separators


def format_number(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value!r}")
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def join(
    numbers: Sequence[float],
    separators: Sequence[str],
    default_separator: str = " ",
) -> str:
    """Rebuild text from ``numbers`` using the separators recorded by ``parse``.

    Numbers past the recorded separators (the array grew) are separated by
    ``default_separator``; the trailing text always stays at the end.
    """
    prefix = separators[0] if separators else ""
    suffix = separators[-1] if len(separators) >= 2 else ""
    if not numbers:
        return prefix + suffix

    parts = [prefix, format_number(numbers[0])]
    for i in range(1, len(numbers)):
        parts.append(separators[i] if i < len(separators) - 1 else default_separator)
        parts.append(format_number(numbers[i]))
    parts.append(suffix)
    return "".join(parts)
