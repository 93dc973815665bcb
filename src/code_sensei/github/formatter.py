"""Renders review results into GitHub comments and check-run output."""

import re
from typing import Any

from code_sensei.autofix.fixer import FixResult
from code_sensei.models.issue import Issue, Severity
from code_sensei.models.review import (
    Actionability,
    AggregatedReview,
    CheckRunDecision,
    ComplexityMetrics,
)

# GitHub rejects review payloads with more comments than this
MAX_INLINE_COMMENTS = 30

_SCORE_PATTERN = re.compile(r"Overall Score:\*\* (\d+)/100")

SEVERITY_EMOJI = {
    Severity.CRITICAL: "🚨",
    Severity.HIGH: "⚠️",
    Severity.MEDIUM: "ℹ️",
    Severity.LOW: "💡",
    Severity.INFO: "📝",
}

# Severity sections of the summary comment and how many issues each lists
SUMMARY_SECTIONS = [
    (Severity.CRITICAL, "Critical", 5),
    (Severity.HIGH, "High", 5),
    (Severity.MEDIUM, "Medium", 3),
]


class GitHubFormatter:
    """Formats aggregated reviews for GitHub."""

    def __init__(self, bot_name: str = "Code Sensei") -> None:
        """Initialize the formatter.

        Args:
            bot_name: Name shown in headings and footers
        """
        self.bot_name = bot_name

    def format_summary_comment(
        self,
        review: AggregatedReview,
        actionability: Actionability | None = None,
        failed_producers: list[str] | None = None,
    ) -> str:
        """Format the PR summary comment.

        Args:
            review: Aggregated review
            actionability: Classification, used for the blocking count
            failed_producers: Producers that did not contribute findings

        Returns:
            Markdown comment body
        """
        lines = [
            f"# 🥋 {self.bot_name} Review",
            "",
            f"## **Overall Score:** {review.overall_score}/100",
            "",
            f"**Issues Found:** {review.total_count} total | "
            f"{review.critical_count} critical | {review.security_count} security",
        ]
        if actionability is not None:
            lines.append(
                f"**Blocking:** {len(actionability.blocking)} | "
                f"**Auto-fixable:** {len(actionability.auto_fixable)}"
            )
        lines.append("")

        if review.summary:
            lines.extend(["### Summary", review.summary, ""])

        if review.positive_findings:
            lines.append("### ✅ Positive Findings")
            lines.extend(f"- {finding}" for finding in review.positive_findings)
            lines.append("")

        if review.issues:
            lines.extend([f"### 🔍 Issues Found ({review.total_count})", ""])
            for severity, label, limit in SUMMARY_SECTIONS:
                group = [i for i in review.issues if i.severity == severity]
                if not group:
                    continue
                lines.append(f"#### {SEVERITY_EMOJI[severity]} {label} ({len(group)})")
                lines.extend(self._issue_line(issue) for issue in group[:limit])
                if len(group) > limit:
                    lines.append(f"- *...and {len(group) - limit} more*")
                lines.append("")

        if review.recommendations:
            lines.append("### 💡 Recommendations")
            lines.extend(f"- {rec}" for rec in review.recommendations)
            lines.append("")

        if failed_producers:
            lines.append(
                f"> ⚠️ Some checks did not complete: {', '.join(failed_producers)}"
            )
            lines.append("")

        lines.extend(["---", f"*Powered by {self.bot_name}*"])
        return "\n".join(lines)

    def format_check_run_output(
        self,
        review: AggregatedReview,
        decision: CheckRunDecision,
        metrics: dict[str, ComplexityMetrics] | None = None,
    ) -> dict[str, str]:
        """Format the check-run output block.

        Args:
            review: Aggregated review
            decision: Check-run decision
            metrics: Complexity metrics per file

        Returns:
            Dict with title, summary and text keys
        """
        summary = "\n".join(
            [
                f"## {self.bot_name} Review Summary",
                "",
                f"**Overall Score:** {review.overall_score}/100",
                "",
                "**Issues Found:**",
                f"- Total: {review.total_count}",
                f"- Critical: {review.critical_count}",
                f"- Security: {review.security_count}",
                "",
                decision.description,
            ]
        )

        text_parts = []
        if review.summary:
            text_parts.append(review.summary)
        if metrics:
            text_parts.append(self._metrics_table(metrics))
        text_parts.append("For the detailed review, see the PR comments.")

        return {
            "title": f"{self.bot_name} Review",
            "summary": summary,
            "text": "\n\n".join(text_parts),
        }

    def format_inline_comments(self, issues: tuple[Issue, ...] | list[Issue]) -> list[dict[str, Any]]:
        """Build review comment payloads for issues that have a line.

        Args:
            issues: Issues in severity order

        Returns:
            At most MAX_INLINE_COMMENTS payloads for ``create_review``
        """
        comments = []
        for issue in issues:
            if issue.line is None:
                continue
            body = f"{SEVERITY_EMOJI[issue.severity]} **{issue.severity.value.upper()}**: {issue.message}"
            if issue.suggestion:
                body += f"\n\n**Suggestion:** {issue.suggestion}"
            if issue.code:
                body += f"\n\n`{issue.code}`"
            comments.append({"path": issue.file, "line": issue.line, "side": "RIGHT", "body": body})
            if len(comments) == MAX_INLINE_COMMENTS:
                break
        return comments

    def format_autofix_notice(self, results: list[FixResult]) -> str:
        """Format the comment announcing an auto-fix commit."""
        applied = sum(len(r.applied) for r in results)
        lines = [
            f"🤖 Auto-fix applied: {len(results)} file(s) modified, {applied} issue(s) fixed.",
            "",
        ]
        lines.extend(f"- `{r.filename}` ({len(r.applied)} fixes)" for r in results)
        return "\n".join(lines)

    def format_check_run_error(self, error: Exception) -> dict[str, str]:
        """Check-run output for a review that failed part way."""
        return {
            "title": f"{self.bot_name} Review",
            "summary": f"## {self.bot_name} Review Summary\n\nThe review could not be completed.",
            "text": f"`{type(error).__name__}: {error}`",
        }

    def format_merge_notice(self) -> str:
        """Format the comment posted after an auto-merge."""
        return f"✅ Auto-merged by {self.bot_name} after passing all checks and reviews."

    def format_error_comment(self, error: Exception | None = None) -> str:
        """Format the comment posted when a review fails."""
        body = f"❌ {self.bot_name} encountered an error during review. Please check the logs."
        if error is not None:
            body += f"\n\n<details><summary>Error</summary>\n\n`{type(error).__name__}: {error}`\n</details>"
        return body

    def _issue_line(self, issue: Issue) -> str:
        return f"- **{issue.location}** - {issue.message}"

    def _metrics_table(self, metrics: dict[str, ComplexityMetrics]) -> str:
        rows = [
            "| File | LOC | Cyclomatic | Cognitive | Maintainability |",
            "|------|-----|------------|-----------|-----------------|",
        ]
        for filename, m in metrics.items():
            rows.append(
                f"| `{filename}` | {m.lines_of_code} | {m.cyclomatic_complexity} | "
                f"{m.cognitive_complexity} | {m.maintainability_index:.1f} |"
            )
        return "\n".join(rows)


def format_review_as_json(
    review: AggregatedReview,
    actionability: Actionability | None = None,
    decision: CheckRunDecision | None = None,
) -> dict[str, Any]:
    """Serialize a review, with its classification and decision when given."""
    data = review.to_dict()
    data["counts"] = {
        "total": review.total_count,
        "critical": review.critical_count,
        "security": review.security_count,
        "bySeverity": {s.value: n for s, n in review.findings_by_severity.items()},
    }
    if actionability is not None:
        data["actionability"] = {
            "autoFixable": len(actionability.auto_fixable),
            "blocking": len(actionability.blocking),
            "advisory": len(actionability.advisory),
        }
    if decision is not None:
        data["conclusion"] = decision.conclusion.value
        data["description"] = decision.description
    return data


def parse_check_run_score(summary: str | None) -> int | None:
    """Read the overall score back from a check-run summary."""
    match = _SCORE_PATTERN.search(summary or "")
    return int(match.group(1)) if match else None
