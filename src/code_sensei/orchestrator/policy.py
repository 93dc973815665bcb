"""Check-run conclusion and auto-merge gating."""

import logging
from collections.abc import Iterable

from code_sensei.config import AutoMergePolicy, CheckRunPolicy
from code_sensei.models.review import (
    AggregatedReview,
    CheckRunDecision,
    Conclusion,
    MergeDecision,
)

logger = logging.getLogger(__name__)


def decide_conclusion(
    review: AggregatedReview,
    blocking_count: int,
    security_count: int,
    policy: CheckRunPolicy | None = None,
) -> CheckRunDecision:
    """Decide the check-run conclusion.

    Args:
        review: Aggregated review
        blocking_count: Number of blocking issues
        security_count: Number of security issues
        policy: Conclusion thresholds

    Returns:
        Conclusion with a one-line description
    """
    policy = policy or CheckRunPolicy()

    if blocking_count > 0:
        conclusion = Conclusion.FAILURE
    elif review.total_count > policy.neutral_issue_threshold:
        conclusion = Conclusion.NEUTRAL
    else:
        conclusion = Conclusion.SUCCESS

    description = (
        f"Score: {review.overall_score}/100 | "
        f"{blocking_count} blocking, {security_count} security, "
        f"{review.total_count} total issues"
    )
    return CheckRunDecision(conclusion=conclusion, description=description)


def is_merge_eligible(
    decision: CheckRunDecision,
    overall_score: int,
    labels: Iterable[str],
    approval_count: int,
    policy: AutoMergePolicy | None = None,
) -> MergeDecision:
    """Check every auto-merge condition; all of them must hold.

    Args:
        decision: Check-run decision for the review
        overall_score: Aggregated score
        labels: Labels on the pull request
        approval_count: Number of approving reviews
        policy: Auto-merge thresholds

    Returns:
        MergeDecision listing the unmet conditions
    """
    policy = policy or AutoMergePolicy()
    reasons = []

    if decision.conclusion != Conclusion.SUCCESS:
        reasons.append(f"check-run conclusion is {decision.conclusion.value}")
    if overall_score < policy.min_score:
        reasons.append(f"score {overall_score} is below {policy.min_score}")
    if policy.label not in set(labels):
        reasons.append(f"missing '{policy.label}' label")
    if approval_count < policy.required_approvals:
        reasons.append(
            f"{approval_count} approvals, {policy.required_approvals} required"
        )

    if reasons:
        logger.debug(f"Auto-merge denied: {'; '.join(reasons)}")
    return MergeDecision(allowed=not reasons, reasons=tuple(reasons))
