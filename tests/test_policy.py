"""Tests for check-run conclusions and auto-merge gating."""

import pytest


def _review(issues=(), score=90):
    from code_sensei.models.review import AggregatedReview

    return AggregatedReview(issues=tuple(issues), overall_score=score)


class TestDecideConclusion:
    """Tests for decide_conclusion."""

    def test_failure_when_blocking(self, make_issue):
        from code_sensei.models.issue import Category, Severity
        from code_sensei.models.review import Conclusion
        from code_sensei.orchestrator.aggregator import aggregate
        from code_sensei.orchestrator.classifier import classify
        from code_sensei.orchestrator.policy import decide_conclusion

        sql = make_issue(
            severity=Severity.CRITICAL, category=Category.SECURITY,
            file="a.ts", line=10, message="SQL injection",
        )
        var_usage = make_issue(
            severity=Severity.LOW, category=Category.STYLE,
            file="b.ts", line=2, message="var usage",
        )
        review = aggregate([[sql, sql], [var_usage]], base_score=85)
        actionability = classify(review)

        decision = decide_conclusion(review, len(actionability.blocking), review.security_count)

        assert actionability.blocking == (sql,)
        assert decision.conclusion == Conclusion.FAILURE
        assert "74/100" in decision.description
        assert "1 blocking" in decision.description
        assert "2 total" in decision.description

    def test_success_without_issues(self):
        from code_sensei.models.review import Conclusion
        from code_sensei.orchestrator.classifier import classify
        from code_sensei.orchestrator.policy import decide_conclusion

        review = _review(score=90)
        actionability = classify(review)
        decision = decide_conclusion(review, 0, 0)

        assert decision.conclusion == Conclusion.SUCCESS
        assert actionability.blocking == ()
        assert actionability.auto_fixable == ()

    def test_neutral_above_threshold(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.models.review import Conclusion
        from code_sensei.orchestrator.policy import decide_conclusion

        issues = [make_issue(severity=Severity.INFO, line=n) for n in range(1, 12)]
        decision = decide_conclusion(_review(issues), 0, 0)

        assert decision.conclusion == Conclusion.NEUTRAL

    def test_exactly_threshold_is_success(self, make_issue):
        from code_sensei.models.issue import Severity
        from code_sensei.models.review import Conclusion
        from code_sensei.orchestrator.policy import decide_conclusion

        issues = [make_issue(severity=Severity.INFO, line=n) for n in range(1, 11)]
        assert decide_conclusion(_review(issues), 0, 0).conclusion == Conclusion.SUCCESS

    def test_custom_threshold(self, make_issue):
        from code_sensei.config import CheckRunPolicy
        from code_sensei.models.review import Conclusion
        from code_sensei.orchestrator.policy import decide_conclusion

        issues = [make_issue(line=n) for n in range(1, 4)]
        decision = decide_conclusion(_review(issues), 0, 0, CheckRunPolicy(neutral_issue_threshold=2))

        assert decision.conclusion == Conclusion.NEUTRAL


class TestMergeEligibility:
    """Every auto-merge condition is required."""

    ELIGIBLE = {
        "conclusion": "success",
        "score": 85,
        "labels": ["auto-merge"],
        "approvals": 1,
    }

    @staticmethod
    def _check(conclusion, score, labels, approvals):
        from code_sensei.models.review import CheckRunDecision, Conclusion
        from code_sensei.orchestrator.policy import is_merge_eligible

        decision = CheckRunDecision(conclusion=Conclusion(conclusion), description="")
        return is_merge_eligible(decision, score, labels, approvals)

    def test_all_conditions_met(self):
        result = self._check(**self.ELIGIBLE)

        assert result.allowed is True
        assert result.reasons == ()

    @pytest.mark.parametrize(
        "override",
        [
            {"conclusion": "neutral"},
            {"conclusion": "failure"},
            {"score": 79},
            {"labels": []},
            {"labels": ["enhancement"]},
            {"approvals": 0},
        ],
    )
    def test_single_condition_false_denies(self, override):
        result = self._check(**{**self.ELIGIBLE, **override})

        assert result.allowed is False
        assert len(result.reasons) == 1

    def test_score_at_minimum_is_allowed(self):
        assert self._check(**{**self.ELIGIBLE, "score": 80}).allowed is True

    def test_reports_every_unmet_condition(self):
        result = self._check(conclusion="failure", score=10, labels=[], approvals=0)
        assert len(result.reasons) == 4

    def test_custom_policy(self):
        from code_sensei.config import AutoMergePolicy
        from code_sensei.models.review import CheckRunDecision, Conclusion
        from code_sensei.orchestrator.policy import is_merge_eligible

        policy = AutoMergePolicy(min_score=95, label="ship-it", required_approvals=2)
        decision = CheckRunDecision(conclusion=Conclusion.SUCCESS, description="")

        assert is_merge_eligible(decision, 96, ["ship-it"], 2, policy).allowed is True
        assert is_merge_eligible(decision, 96, ["ship-it"], 1, policy).allowed is False
