"""Tests for the review aggregator."""

import pytest


class TestDeduplicate:
    """Tests for dedup semantics."""

    def test_keeps_first_occurrence(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.orchestrator.aggregator import deduplicate

        first = make_issue(severity=Severity.HIGH, file="a.ts", line=10, message="SQL injection")
        second = make_issue(severity=Severity.LOW, file="a.ts", line=10, message="SQL injection")

        assert deduplicate([first, second]) == [first]

    def test_idempotent(self, make_issue):
        from code_sensei.orchestrator.aggregator import deduplicate

        issues = [
            make_issue(line=1),
            make_issue(line=1),
            make_issue(line=2),
            make_issue(line=None),
            make_issue(line=None),
        ]

        once = deduplicate(issues)
        assert deduplicate(once) == once
        assert len(once) == 3

    def test_different_line_is_not_duplicate(self, make_issue):
        from code_sensei.orchestrator.aggregator import deduplicate

        issues = [make_issue(line=1), make_issue(line=2), make_issue(file="b.ts", line=1)]
        assert len(deduplicate(issues)) == 3

    def test_fileless_line_issue_distinct_from_line_issue(self, make_issue):
        """An issue without a line never collides with one on a line."""
        from code_sensei.orchestrator.aggregator import deduplicate

        issues = [make_issue(line=None), make_issue(line=5)]
        assert len(deduplicate(issues)) == 2


class TestSortAndScore:
    """Tests for ordering and scoring."""

    def test_sort_is_stable(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.orchestrator.aggregator import sort_by_severity

        low_a = make_issue(severity=Severity.LOW, message="a")
        crit = make_issue(severity=Severity.CRITICAL, message="b")
        low_b = make_issue(severity=Severity.LOW, message="c")
        info = make_issue(severity=Severity.INFO, message="d")
        high = make_issue(severity=Severity.HIGH, message="e")

        result = sort_by_severity([low_a, crit, low_b, info, high])

        assert result == [crit, high, low_a, low_b, info]

    def test_penalties(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.orchestrator.aggregator import compute_score

        issues = [
            make_issue(severity=Severity.CRITICAL, line=1),
            make_issue(severity=Severity.HIGH, line=2),
            make_issue(severity=Severity.MEDIUM, line=3),
            make_issue(severity=Severity.LOW, line=4),
            make_issue(severity=Severity.INFO, line=5),
        ]

        assert compute_score(100, issues) == 100 - 10 - 5 - 2 - 1

    def test_score_clamped_at_zero(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.orchestrator.aggregator import compute_score

        issues = [make_issue(severity=Severity.CRITICAL, line=n) for n in range(1, 20)]
        assert compute_score(60, issues) == 0

    @pytest.mark.parametrize("base,expected", [(150, 100), (-20, 0), ("n/a", 50), (None, 50)])
    def test_base_score_normalized(self, base, expected):
        from code_sensei.orchestrator.aggregator import compute_score

        assert compute_score(base, []) == expected

    def test_adding_issues_never_raises_score(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.orchestrator.aggregator import compute_score

        issues = []
        previous = compute_score(90, issues)
        for n, severity in enumerate(Severity, start=1):
            issues.append(make_issue(severity=severity, line=n))
            score = compute_score(90, issues)
            assert score <= previous
            previous = score

    def test_custom_penalties(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.orchestrator.aggregator import compute_score

        penalties = {Severity.LOW: 7}
        assert compute_score(80, [make_issue(severity=Severity.LOW)], penalties) == 73


class TestAggregate:
    """Tests for the full aggregation step."""

    def test_scenario_duplicate_critical(self, make_issue):
        """Duplicate critical issue counts once against the score."""
        from code_sensei.models.issue import Category, Severity
        from code_sensei.orchestrator.aggregator import aggregate

        sql = make_issue(
            severity=Severity.CRITICAL, category=Category.SECURITY,
            file="a.ts", line=10, message="SQL injection",
        )
        sql_again = make_issue(
            severity=Severity.CRITICAL, category=Category.SECURITY,
            file="a.ts", line=10, message="SQL injection",
        )
        var_usage = make_issue(
            severity=Severity.LOW, category=Category.STYLE,
            file="b.ts", line=2, message="var usage",
        )

        review = aggregate([[sql], [var_usage], [sql_again]], base_score=85)

        assert review.total_count == 2
        assert review.overall_score == 74
        assert review.issues[0] is sql

    def test_scenario_no_issues(self):
        from code_sensei.orchestrator.aggregator import aggregate

        review = aggregate([], base_score=90)

        assert review.issues == ()
        assert review.overall_score == 90

    def test_first_producer_wins(self, make_issue):
        """Producer order decides which duplicate survives."""
        from code_sensei.orchestrator.aggregator import aggregate

        from_ai = make_issue(message="Unused variable", suggestion="from ai")
        from_static = make_issue(message="Unused variable", suggestion="from static")

        review = aggregate([[from_ai], [from_static]], base_score=80)
        assert review.issues[0].suggestion == "from ai"

    def test_carries_ai_text(self):
        from code_sensei.models.review import AIReviewResult
        from code_sensei.orchestrator.aggregator import aggregate

        ai = AIReviewResult(
            summary="Solid change",
            overall_score=88,
            positive_findings=["Good tests"],
            recommendations=["Add docs"],
        )

        review = aggregate([ai.issues], base_score=ai.overall_score, ai_result=ai)

        assert review.summary == "Solid change"
        assert review.positive_findings == ("Good tests",)
        assert review.recommendations == ("Add docs",)
        assert review.overall_score == 88


class TestReviewAggregator:
    """Tests for the policy-bound aggregator."""

    def test_uses_ai_score_as_base(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.models.review import AIReviewResult
        from code_sensei.orchestrator.aggregator import ReviewAggregator

        ai = AIReviewResult(summary="ok", overall_score=90)
        review = ReviewAggregator().aggregate([[], [make_issue(severity=Severity.HIGH)]], ai)

        assert review.overall_score == 85

    def test_default_base_without_ai(self):
        from code_sensei.config import ScoringPolicy
        from code_sensei.orchestrator.aggregator import ReviewAggregator

        review = ReviewAggregator(ScoringPolicy(default_base_score=64)).aggregate([[]])
        assert review.overall_score == 64
        assert review.summary == ""

    def test_fallback_result(self):
        from code_sensei.models.review import AIReviewResult
        from code_sensei.orchestrator.aggregator import ReviewAggregator

        review = ReviewAggregator().aggregate([[]], AIReviewResult.fallback())

        assert review.overall_score == 50
        assert review.summary == "Review completed with parsing issues. Please check manually."
        assert review.recommendations == ("Manual review recommended due to parsing error",)
