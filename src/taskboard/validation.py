from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

TITLE_REQUIRED = "Title is required"
TITLE_TOO_SHORT = f"Title must be at least {TITLE_MIN_LENGTH} characters long"
TITLE_TOO_LONG = f"Title must be less than {TITLE_MAX_LENGTH} characters"
DESCRIPTION_TOO_LONG = f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating task input; `errors` keeps the rule order."""

    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


# PUBLIC_INTERFACE
def validate_title(title: Optional[str]) -> List[str]:
    """
    Check a title against the length rules.

    An empty title only reports "Title is required"; the length rules apply
    to the trimmed value otherwise.
    """
    s = (title or "").strip()
    if not s:
        return [TITLE_REQUIRED]
    errors: List[str] = []
    if len(s) < TITLE_MIN_LENGTH:
        errors.append(TITLE_TOO_SHORT)
    if len(s) > TITLE_MAX_LENGTH:
        errors.append(TITLE_TOO_LONG)
    return errors


# PUBLIC_INTERFACE
def validate_description(description: Optional[str]) -> List[str]:
    """Check an optional description against its length limit."""
    if description and len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        return [DESCRIPTION_TOO_LONG]
    return []


# PUBLIC_INTERFACE
def validate_task_fields(title: Optional[str], description: Optional[str] = None) -> ValidationResult:
    """Collect every failing rule for a task's title and description."""
    return ValidationResult(errors=validate_title(title) + validate_description(description))


def normalize_description(description: Optional[str]) -> Optional[str]:
    """Trim a description; blank values are stored as None."""
    if description is None:
        return None
    s = description.strip()
    return s or None
