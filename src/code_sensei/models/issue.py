"""Issue models shared by every finding producer."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50
UNKNOWN_FILE = "unknown"
PLACEHOLDER_MESSAGE = "Issue detected"


class Severity(Enum):
    """Severity levels for issues, most severe first.

    - CRITICAL: Must fix before merge; always blocks the check-run.
    - HIGH: Serious problem; blocks only when the category is security.
    - MEDIUM: Should fix.
    - LOW: Minor improvement.
    - INFO: Informational, never penalised.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank (critical=0 ... info=4)."""
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Coerce a raw value to a severity, defaulting to MEDIUM."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


_SEVERITY_RANK = {severity: index for index, severity in enumerate(Severity)}


class Category(Enum):
    """Categories for issues."""

    SECURITY = "security"
    PERFORMANCE = "performance"
    MAINTAINABILITY = "maintainability"
    STYLE = "style"
    BUG = "bug"
    BEST_PRACTICE = "best-practice"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Coerce a raw value to a category, defaulting to MAINTAINABILITY."""
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MAINTAINABILITY


@dataclass(frozen=True)
class Location:
    """Where an issue was found. Lines are 1-based; None for file-level issues."""

    file: str
    line: int | None = None
    end_line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        return f"{self.file}:{self.line}" if self.line is not None else self.file


@dataclass(frozen=True)
class Issue:
    """A single reviewable finding."""

    severity: Severity
    category: Category
    message: str
    location: Location
    suggestion: str | None = None
    auto_fixable: bool = False
    code: str | None = None

    @property
    def file(self) -> str:
        return self.location.file

    @property
    def line(self) -> int | None:
        return self.location.line

    @property
    def dedup_key(self) -> tuple:
        """Key under which two issues count as duplicates."""
        if self.location.line is None:
            return (self.location.file, self.message)
        return (self.location.file, self.location.line, self.message)

    @property
    def is_security(self) -> bool:
        return self.category == Category.SECURITY

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "Issue":
        """Build an issue from loosely-typed producer output.

        Every field is validated once here so that nothing downstream has to
        second-guess the shape. Bad values are replaced by safe defaults
        instead of raising.

        Args:
            raw: Mapping as produced by an LLM response or a plugin

        Returns:
            Canonical Issue
        """
        message = raw.get("message")
        if not isinstance(message, str) or not message.strip():
            message = PLACEHOLDER_MESSAGE

        file = raw.get("file") or raw.get("file_path")
        if not isinstance(file, str) or not file.strip():
            file = UNKNOWN_FILE

        suggestion = raw.get("suggestion")
        code = raw.get("code") or raw.get("rule")

        return cls(
            severity=Severity.parse(raw.get("severity")),
            category=Category.parse(raw.get("category")),
            message=message.strip(),
            location=Location(
                file=file,
                line=_positive_int(raw.get("line")),
                end_line=_positive_int(raw.get("endLine", raw.get("end_line"))),
                column=_positive_int(raw.get("column")),
            ),
            suggestion=suggestion if isinstance(suggestion, str) and suggestion else None,
            auto_fixable=raw.get("autoFixable", raw.get("auto_fixable")) is True,
            code=code if isinstance(code, str) and code else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape used for persistence and transport."""
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "file": self.location.file,
            "line": self.location.line,
            "endLine": self.location.end_line,
            "column": self.location.column,
            "suggestion": self.suggestion,
            "autoFixable": self.auto_fixable,
            "code": self.code,
        }


def _positive_int(value: Any) -> int | None:
    # bool is an int subclass; a JSON true is not a line number
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 1 else None


def normalize_score(value: Any, default: int = DEFAULT_SCORE) -> int:
    """Clamp a score to [0, 100]; non-numeric input becomes ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            return default
    if number != number:  # NaN
        return default
    return int(max(0, min(100, number)))
