from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..directory.model import Employee


class MatchStep(str, Enum):
    """Which step of the resolver settled the match (kept for auditing)."""

    LAST_NAME = "last_name"
    FIRST_INITIAL = "first_initial"
    FIRST_TWO_LETTERS = "first_two_letters"
    FIRST_NAME_PREFIX = "first_name_prefix"
    SHIFT_AFFINITY = "shift_affinity"


class UnresolvedReason(str, Enum):
    EMPTY_TOKEN = "empty_token"
    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Resolved:
    token: str
    employee: Employee
    matched_by: MatchStep


@dataclass(frozen=True)
class Unresolved:
    token: str
    reason: UnresolvedReason
    detail: str = ""


IdentityResult = Union[Resolved, Unresolved]
