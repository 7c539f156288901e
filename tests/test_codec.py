from __future__ import annotations

import math

import pytest

from curve_editor.codec import format_number, join, parse


def test_parse_splits_numbers_and_separators() -> None:
    numbers, separators = parse("[1, 2.5, -3]")
    assert numbers == [1.0, 2.5, -3.0]
    assert separators == ["[", ", ", ", ", "]"]


def test_parse_without_numbers() -> None:
    assert parse("abc") == ([], ["abc"])
    assert parse("") == ([], [""])


def test_adjacent_sign_starts_a_new_number() -> None:
    numbers, separators = parse("1-2")
    assert numbers == [1.0, -2.0]
    assert join(numbers, separators) == "1-2"


@pytest.mark.parametrize(
    "text",
    ["1 2 3", "[1, 2.5, -3]", "x = {4;5;6};", "values: 10\n20\n30\n", "abc", "", "7"],
)
def test_join_restores_canonical_text(text: str) -> None:
    assert join(*parse(text)) == text


def test_edited_values_keep_surrounding_text() -> None:
    numbers, separators = parse("data = [1, 2, 3];")
    numbers[1] = 20.5
    assert join(numbers, separators) == "data = [1, 20.5, 3];"


def test_grown_array_uses_default_separator() -> None:
    _, separators = parse("[1,2]")
    assert join([1, 2, 3, 4], separators) == "[1,2 3 4]"
    assert join([1, 2, 3], separators, default_separator=",") == "[1,2,3]"


def test_shrunk_array_keeps_suffix() -> None:
    _, separators = parse("[1, 2, 3]")
    assert join([9], separators) == "[9]"
    assert join([], separators) == "[]"


def test_join_without_separators() -> None:
    assert join([1, 2], []) == "1 2"


@pytest.mark.parametrize(("value", "text"), [(2.0, "2"), (-0.0, "0"), (2.5, "2.5"), (0.1, "0.1"), (-3, "-3")])
def test_format_number(value: float, text: str) -> None:
    assert format_number(value) == text


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_format_rejects_non_finite(value: float) -> None:
    with pytest.raises(ValueError):
        format_number(value)
