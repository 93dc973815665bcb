"""Data models for Code Sensei."""

from code_sensei.models.context import CodeFile, ReviewContext
from code_sensei.models.issue import Category, Issue, Location, Severity, normalize_score
from code_sensei.models.review import (
    Actionability,
    AggregatedReview,
    AIReviewResult,
    CheckRunDecision,
    ComplexityMetrics,
    Conclusion,
    MergeDecision,
)

__all__ = [
    "Actionability",
    "AggregatedReview",
    "AIReviewResult",
    "Category",
    "CheckRunDecision",
    "CodeFile",
    "ComplexityMetrics",
    "Conclusion",
    "Issue",
    "Location",
    "MergeDecision",
    "ReviewContext",
    "Severity",
    "normalize_score",
]
