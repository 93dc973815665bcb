"""Review result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from code_sensei.models.issue import Category, Issue, Severity, normalize_score

FALLBACK_SUMMARY = "Review completed with parsing issues. Please check manually."
FALLBACK_SCORE = 50
FALLBACK_RECOMMENDATION = "Manual review recommended due to parsing error"


@dataclass(frozen=True)
class ComplexityMetrics:
    """Size and complexity metrics for one file."""

    lines_of_code: int
    cyclomatic_complexity: int
    cognitive_complexity: int
    maintainability_index: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "linesOfCode": self.lines_of_code,
            "cyclomaticComplexity": self.cyclomatic_complexity,
            "cognitiveComplexity": self.cognitive_complexity,
            "maintainabilityIndex": round(self.maintainability_index, 2),
        }


@dataclass
class AIReviewResult:
    """Holistic review returned by the AI reviewer."""

    summary: str
    overall_score: int
    positive_findings: list[str] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    security_score: int | None = None
    maintainability_score: int | None = None
    complexity_score: int | None = None

    # Set when this result is the substitute for a failed AI call
    failed: bool = False

    def __post_init__(self) -> None:
        self.overall_score = normalize_score(self.overall_score)

    @classmethod
    def fallback(cls) -> "AIReviewResult":
        """Result used when the AI reviewer fails, times out or is unparseable."""
        return cls(
            summary=FALLBACK_SUMMARY,
            overall_score=FALLBACK_SCORE,
            recommendations=[FALLBACK_RECOMMENDATION],
            failed=True,
        )


@dataclass(frozen=True)
class AggregatedReview:
    """Final merged review for one pull request. Read-only once produced."""

    issues: tuple[Issue, ...]
    overall_score: int
    summary: str = ""
    positive_findings: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    @property
    def total_count(self) -> int:
        return len(self.issues)

    @property
    def findings_by_severity(self) -> dict[Severity, int]:
        """Count issues by severity level."""
        counts: dict[Severity, int] = dict.fromkeys(Severity, 0)
        for issue in self.issues:
            counts[issue.severity] += 1
        return counts

    @property
    def critical_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.CRITICAL)

    @property
    def security_count(self) -> int:
        return sum(1 for i in self.issues if i.category == Category.SECURITY)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON snapshot consumed by persistence collaborators."""
        return {
            "summary": self.summary,
            "overallScore": self.overall_score,
            "positiveFindings": list(self.positive_findings),
            "recommendations": list(self.recommendations),
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class Actionability:
    """Partition of a review's issues.

    Every issue is in exactly one of ``blocking``/``advisory``; independently
    it may also be in ``auto_fixable``.
    """

    auto_fixable: tuple[Issue, ...]
    blocking: tuple[Issue, ...]
    advisory: tuple[Issue, ...]


class Conclusion(Enum):
    """Check-run conclusions produced by the policy."""

    SUCCESS = "success"
    NEUTRAL = "neutral"
    FAILURE = "failure"


@dataclass(frozen=True)
class CheckRunDecision:
    """Check-run conclusion with a human-readable description."""

    conclusion: Conclusion
    description: str


@dataclass(frozen=True)
class MergeDecision:
    """Auto-merge verdict with the list of unmet conditions."""

    allowed: bool
    reasons: tuple[str, ...] = ()
