from __future__ import annotations

"""Syntactic patterns shared by the validators."""

import re
from types import MappingProxyType
from typing import Mapping

MAX_NAME_LENGTH = 255
MAX_TYPE_LENGTH = 255
MAX_EDGE_LABEL_LENGTH = 255
MAX_USERNAME_LENGTH = 255

MIN_TOKEN_LENGTH = 3

# ids are stored in 32-bit INTEGER columns
MAX_ID = 2**31 - 1


def _alnum(max_length: int) -> re.Pattern[str]:
    return re.compile(rf"^[A-Za-z0-9]{{{MIN_TOKEN_LENGTH},{max_length}}}$")


NOT_BLANK = re.compile(r"\S+")
NAME_LIKE = _alnum(MAX_NAME_LENGTH)
TYPE_LIKE = _alnum(MAX_TYPE_LENGTH)
EDGE_LABEL_LIKE = _alnum(MAX_EDGE_LABEL_LENGTH)
USERNAME_LIKE = _alnum(MAX_USERNAME_LENGTH)

# Read-only lookup used by the field validators: pattern name -> compiled regex.
PATTERNS: Mapping[str, re.Pattern[str]] = MappingProxyType(
    {
        "not_blank": NOT_BLANK,
        "name": NAME_LIKE,
        "type": TYPE_LIKE,
        "edge_label": EDGE_LABEL_LIKE,
        "username": USERNAME_LIKE,
    }
)

__all__ = [
    "MAX_NAME_LENGTH",
    "MAX_TYPE_LENGTH",
    "MAX_EDGE_LABEL_LENGTH",
    "MAX_USERNAME_LENGTH",
    "MAX_ID",
    "NOT_BLANK",
    "NAME_LIKE",
    "TYPE_LIKE",
    "EDGE_LABEL_LIKE",
    "USERNAME_LIKE",
    "PATTERNS",
]
