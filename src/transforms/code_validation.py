"""Structural coupon code validation.

This module decides whether a candidate code satisfies length and
character-class rules. It performs no normalization or case folding.
"""

from __future__ import annotations

from core.types import ValidationRules

_UPPERCASE = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
_LOWERCASE = frozenset("abcdefghijklmnopqrstuvwxyz")
_DIGITS = frozenset("0123456789")
_LETTERS = _UPPERCASE | _LOWERCASE

_CHARACTER_CLASSES: dict[str, frozenset[str]] = {
    "alphanumeric": _LETTERS | _DIGITS,
    "digits": _DIGITS,
    "letters": _LETTERS,
    "uppercase": _UPPERCASE,
    "lowercase": _LOWERCASE,
}


def is_valid_code(code: str, rules: ValidationRules) -> bool:
    """Return whether a code passes length and character-class checks.

    Args:
        code: Candidate code, already trimmed.
        rules: Length bounds and allowed character class.

    Returns:
        True when every rule passes. Unknown character classes reject
        every code.
    """
    if not rules.min_length <= len(code) <= rules.max_length:
        return False
    allowed = _CHARACTER_CLASSES.get(rules.allowed_characters)
    if allowed is None:
        return False
    return all(char in allowed for char in code)

