"""Parent Policy Value Object.

Decides which container adopts a spatial group listed by several containers.
"""
from __future__ import annotations

from enum import Enum


class ParentPolicy(str, Enum):
    """Rule for attaching a spatial node that has several candidate parents.

    FIRST_MATCH: the first candidate in classification order wins.
    INNERMOST: the candidate with the smallest member set wins, so a space
        listed by both its building and its storey lands under the storey.
    """

    FIRST_MATCH = "first"
    INNERMOST = "innermost"

    @classmethod
    def from_string(cls, value: str | ParentPolicy | None) -> ParentPolicy:
        """Parse a policy name, defaulting to FIRST_MATCH.

        Args:
            value: Policy name ("first", "innermost") or enum member

        Returns:
            Matching ParentPolicy
        """
        if isinstance(value, ParentPolicy):
            return value
        if not value:
            return cls.FIRST_MATCH
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown parent policy: '{value}'. "
                f"Expected one of {[p.value for p in cls]}"
            ) from None
