"""Input validation helpers shared by the API and the registry."""

from __future__ import annotations

import re
from collections.abc import Iterable

from brick_deals.rounding import round_half_up

# Valid formats: "75192", "75192-1", "10294-1"
_SET_NUMBER_RE = re.compile(r"^\d{4,6}(-\d)?$")
_EXPO_TOKEN_RE = re.compile(r"^ExponentPushToken\[[a-zA-Z0-9_-]+\]$")


def is_valid_set_number(set_number: object) -> bool:
    if not set_number or not isinstance(set_number, str):
        return False
    return bool(_SET_NUMBER_RE.match(set_number))


def sanitize_set_number(set_number: str) -> str:
    """Strip the variant suffix and anything that is not a digit.

    Returns an empty string for malformed set numbers so they never end up
    inside a URL.
    """
    if not is_valid_set_number(set_number):
        return ""
    return re.sub(r"[^\d]", "", re.sub(r"-\d$", "", set_number))


def is_valid_push_token(token: object) -> bool:
    if not token or not isinstance(token, str):
        return False
    return bool(_EXPO_TOKEN_RE.match(token))


def clamp_threshold(value: float) -> int:
    return round_half_up(min(max(value, 0), 100))


def filter_set_numbers(values: Iterable[str], limit: int) -> list[str]:
    return [value for value in values if is_valid_set_number(value)][:limit]
