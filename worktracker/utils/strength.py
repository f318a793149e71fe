"""Coarse password strength rating, computed when a password is written."""

import re
from enum import Enum

_CHECKS = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"[0-9]"),
    re.compile(r"[^A-Za-z0-9]"),
)


class Strength(str, Enum):
    WEAK = "Weak"
    MEDIUM = "Medium"
    STRONG = "Strong"
    VERY_STRONG = "Very Strong"


def strength_score(password: str) -> int:
    """One point each for length >= 8, lowercase, uppercase, digit and symbol."""
    score = 1 if len(password) >= 8 else 0
    score += sum(1 for check in _CHECKS if check.search(password))
    return score


def classify_strength(password: str) -> Strength:
    score = strength_score(password)
    if score <= 2:
        return Strength.WEAK
    if score == 3:
        return Strength.MEDIUM
    if score == 4:
        return Strength.STRONG
    return Strength.VERY_STRONG
