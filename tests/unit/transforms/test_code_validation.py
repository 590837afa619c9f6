"""Unit tests for structural coupon code validation."""

from __future__ import annotations

import pytest

from core.types import ValidationRules
from transforms.code_validation import is_valid_code

_ALPHANUMERIC = ValidationRules(min_length=8, max_length=10, allowed_characters="alphanumeric")


def test_is_valid_code_accepts_alphanumeric_code() -> None:
    """A conforming alphanumeric code should pass."""
    assert is_valid_code("ABC12345", _ALPHANUMERIC) is True


def test_is_valid_code_rejects_short_code() -> None:
    """Codes below the minimum length should fail."""
    assert is_valid_code("ab", _ALPHANUMERIC) is False


def test_is_valid_code_rejects_hyphenated_code() -> None:
    """Punctuation is outside the alphanumeric class."""
    assert is_valid_code("THIS-CODE", _ALPHANUMERIC) is False


def test_is_valid_code_length_bounds_are_inclusive() -> None:
    """Both length bounds should be accepted, one past them rejected."""
    assert is_valid_code("A" * 8, _ALPHANUMERIC) is True
    assert is_valid_code("A" * 10, _ALPHANUMERIC) is True
    assert is_valid_code("A" * 7, _ALPHANUMERIC) is False
    assert is_valid_code("A" * 11, _ALPHANUMERIC) is False


@pytest.mark.parametrize(
    ("allowed_characters", "code", "expected"),
    [
        ("digits", "12345678", True),
        ("digits", "1234567A", False),
        ("letters", "AbCdEfGh", True),
        ("letters", "AbCdEfG1", False),
        ("uppercase", "ABCDEFGH", True),
        ("uppercase", "ABCDEFGh", False),
        ("lowercase", "abcdefgh", True),
        ("lowercase", "abcdefgH", False),
        ("alphanumeric", "abcDEF12", True),
        ("alphanumeric", "abcDEF1 ", False),
    ],
)
def test_is_valid_code_applies_character_class(
    allowed_characters: str, code: str, expected: bool
) -> None:
    """Every character must belong to the configured class."""
    rules = ValidationRules(min_length=8, max_length=10, allowed_characters=allowed_characters)

    assert is_valid_code(code, rules) is expected


def test_is_valid_code_rejects_non_ascii_letters() -> None:
    """Unicode letters are not part of any ASCII class."""
    rules = ValidationRules(min_length=8, max_length=10, allowed_characters="letters")

    assert is_valid_code("ÄBCDEFGH", rules) is False


def test_is_valid_code_rejects_everything_for_unknown_class() -> None:
    """An unrecognized class should fail closed."""
    rules = ValidationRules(min_length=8, max_length=10, allowed_characters="hex")

    assert is_valid_code("ABCDEF12", rules) is False


def test_is_valid_code_does_not_fold_case() -> None:
    """Lowercase input must not be normalized into an uppercase match."""
    rules = ValidationRules(min_length=8, max_length=10, allowed_characters="uppercase")

    assert is_valid_code("abcdefgh", rules) is False
