"""Review aggregator for combining producer findings."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from code_sensei.config import DEFAULT_PENALTIES, ScoringPolicy
from code_sensei.models.issue import Issue, Severity, normalize_score
from code_sensei.models.review import AggregatedReview, AIReviewResult

logger = logging.getLogger(__name__)


def deduplicate(issues: Iterable[Issue]) -> list[Issue]:
    """Drop issues whose dedup key was already seen, keeping the first."""
    seen: set[tuple] = set()
    unique = []
    for issue in issues:
        key = issue.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(issue)
    return unique


def sort_by_severity(issues: Iterable[Issue]) -> list[Issue]:
    """Stable sort, most severe first."""
    return sorted(issues, key=lambda issue: issue.severity.rank)


def compute_score(
    base_score: Any,
    issues: Iterable[Issue],
    penalties: Mapping[Severity, int] | None = None,
) -> int:
    """Subtract per-severity penalties from the base score.

    Args:
        base_score: Starting score; non-numeric values count as 50
        issues: Surviving (deduplicated) issues
        penalties: Penalty per severity level

    Returns:
        Score clamped to [0, 100]
    """
    penalties = DEFAULT_PENALTIES if penalties is None else penalties
    score = normalize_score(base_score)
    for issue in issues:
        score -= penalties.get(issue.severity, 0)
    return max(0, min(100, score))


def aggregate(
    producer_results: Sequence[Sequence[Issue]],
    base_score: Any,
    ai_result: AIReviewResult | None = None,
    policy: ScoringPolicy | None = None,
) -> AggregatedReview:
    """Merge producer issue lists into one review.

    Lists are concatenated in the order given, so the first producer wins
    when two report the same issue.

    Args:
        producer_results: One issue list per producer
        base_score: Score before penalties
        ai_result: AI review supplying summary and recommendations
        policy: Penalty table (defaults apply when None)

    Returns:
        Aggregated review
    """
    policy = policy or ScoringPolicy()

    merged = [issue for issues in producer_results for issue in issues]
    unique = sort_by_severity(deduplicate(merged))
    score = compute_score(base_score, unique, policy.penalties)

    if len(unique) != len(merged):
        logger.debug(f"Dropped {len(merged) - len(unique)} duplicate issues")

    return AggregatedReview(
        issues=tuple(unique),
        overall_score=score,
        summary=ai_result.summary if ai_result else "",
        positive_findings=tuple(ai_result.positive_findings) if ai_result else (),
        recommendations=tuple(ai_result.recommendations) if ai_result else (),
    )


class ReviewAggregator:
    """Combines producer results into an aggregated review."""

    def __init__(self, policy: ScoringPolicy | None = None) -> None:
        """Initialize the aggregator.

        Args:
            policy: Optional scoring policy
        """
        self.policy = policy or ScoringPolicy()

    def aggregate(
        self,
        producer_results: Sequence[Sequence[Issue]],
        ai_result: AIReviewResult | None = None,
    ) -> AggregatedReview:
        """Aggregate using the AI score as base, or the policy default without one.

        Args:
            producer_results: One issue list per producer, AI reviewer first
            ai_result: AI review (possibly the fallback)

        Returns:
            Aggregated review
        """
        base_score = ai_result.overall_score if ai_result else self.policy.default_base_score
        review = aggregate(producer_results, base_score, ai_result, self.policy)

        logger.info(
            f"Aggregated {sum(len(r) for r in producer_results)} issues from "
            f"{len(producer_results)} producers into {review.total_count} "
            f"(score {review.overall_score}/100)"
        )
        return review
