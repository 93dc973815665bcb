"""Actionability classification of aggregated issues."""

from code_sensei.config import BlockingPolicy
from code_sensei.models.issue import Issue
from code_sensei.models.review import Actionability, AggregatedReview

# Rule codes the auto-fixer knows how to rewrite
FIXABLE_RULES = frozenset(
    {
        "no-var",
        "no-console",
        "no-debugger",
        "missing-semicolon",
        "trailing-whitespace",
        "double-quotes",
    }
)


def is_whitelisted(issue: Issue) -> bool:
    """Whether the auto-fixer has a rewrite for this issue's rule."""
    return issue.code in FIXABLE_RULES


def is_blocking(issue: Issue, policy: BlockingPolicy | None = None) -> bool:
    """Critical issues block, and so do high-severity security issues."""
    policy = policy or BlockingPolicy()
    if issue.severity in policy.always_blocking:
        return True
    return (
        issue.severity in policy.category_blocking
        and issue.category in policy.blocking_categories
    )


def classify(review: AggregatedReview, policy: BlockingPolicy | None = None) -> Actionability:
    """Partition the review's issues.

    Every issue is either blocking or advisory. Issues flagged auto-fixable
    are also listed separately, whether or not their rule is whitelisted.

    Args:
        review: Aggregated review
        policy: Blocking rule

    Returns:
        Actionability partition preserving the review's issue order
    """
    policy = policy or BlockingPolicy()
    blocking = []
    advisory = []
    for issue in review.issues:
        (blocking if is_blocking(issue, policy) else advisory).append(issue)

    return Actionability(
        auto_fixable=tuple(i for i in review.issues if i.auto_fixable),
        blocking=tuple(blocking),
        advisory=tuple(advisory),
    )
