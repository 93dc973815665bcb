"""LLM-backed holistic reviewer."""

import logging
import time
from typing import Any

from code_sensei.agents.llm_client import LLMClient, parse_json_response
from code_sensei.analysis.complexity import estimate
from code_sensei.models.context import CodeFile, ReviewContext
from code_sensei.models.issue import Issue, normalize_score
from code_sensei.models.review import AIReviewResult

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Code review completed"


class AIReviewer:
    """Asks the LLM for a review of the whole change set."""

    NAME = "ai-reviewer"

    SYSTEM_PROMPT = """You are Code Sensei, an expert code reviewer with deep knowledge of \
software engineering best practices, security, and architecture patterns.

Review the pull request covering architecture and design, code quality, security \
(OWASP Top 10, hardcoded secrets, input validation), performance, testability and \
documentation. Focus on actionable feedback. Be thorough but constructive, and \
highlight what is done well as well as what needs improvement.

You MUST respond with valid JSON in this exact format:
{
    "summary": "Brief 2-3 sentence summary of the overall code quality",
    "overallScore": 85,
    "securityScore": 90,
    "maintainabilityScore": 80,
    "complexityScore": 75,
    "positiveFindings": ["What is done well"],
    "issues": [
        {
            "severity": "critical|high|medium|low|info",
            "category": "security|performance|maintainability|style|bug|best-practice",
            "message": "Clear description of the issue",
            "file": "path/to/file",
            "line": 42,
            "suggestion": "Specific suggestion for how to fix",
            "autoFixable": false,
            "code": "rule-identifier-if-applicable"
        }
    ],
    "recommendations": ["Higher-level recommendation"]
}

Rules:
- Only report issues you can clearly identify in the code
- Be specific about file paths and line numbers
- Only set autoFixable for trivial single-line rewrites
"""

    def __init__(self, client: LLMClient) -> None:
        """Initialize the reviewer.

        Args:
            client: LLM API client
        """
        self.client = client

    @property
    def name(self) -> str:
        return self.NAME

    async def review(self, files: list[CodeFile], context: ReviewContext) -> AIReviewResult:
        """Review the changed files.

        Transport errors propagate to the caller; a reply that cannot be
        parsed yields the fallback result.

        Args:
            files: Snapshot of changed files
            context: Pull request context

        Returns:
            AIReviewResult with summary, score and issues
        """
        start_time = time.monotonic()
        logger.info(
            f"Starting AI review of {len(files)} files "
            f"({sum(f.content.count(chr(10)) + 1 for f in files)} lines)"
        )

        response = await self.client.complete(
            user_prompt=self.build_prompt(files, context),
            system_prompt=self.SYSTEM_PROMPT,
        )
        result = self.parse_response(response)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"AI review finished in {elapsed_ms}ms: score {result.overall_score}, "
            f"{len(result.issues)} issues"
        )
        return result

    def build_prompt(self, files: list[CodeFile], context: ReviewContext) -> str:
        """Build the user prompt for the review request."""
        sections = []
        for file in files:
            metrics = estimate(file.content, file.language)
            section = f"""### File: {file.filename}
Language: {file.language}
Changes: +{file.additions} -{file.deletions}
Cyclomatic Complexity: {metrics.cyclomatic_complexity} | \
Cognitive Complexity: {metrics.cognitive_complexity} | \
Maintainability Index: {metrics.maintainability_index:.2f}

```{file.language}
{file.content}
```
"""
            if file.patch:
                section += f"\nDiff:\n```diff\n{file.patch}\n```\n"
            sections.append(section)

        files_str = "\n---\n".join(sections)
        return f"""{context.to_prompt_context()}
# Files to Review
{files_str}
"""

    def parse_response(self, response: str) -> AIReviewResult:
        """Parse the LLM reply into a normalized result."""
        try:
            parsed = parse_json_response(response)
        except ValueError as e:
            logger.error(f"Failed to parse AI response: {e}")
            return AIReviewResult.fallback()

        summary = parsed.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            summary = DEFAULT_SUMMARY

        return AIReviewResult(
            summary=summary.strip(),
            overall_score=normalize_score(parsed.get("overallScore")),
            security_score=_optional_score(parsed.get("securityScore")),
            maintainability_score=_optional_score(parsed.get("maintainabilityScore")),
            complexity_score=_optional_score(parsed.get("complexityScore")),
            positive_findings=_string_list(parsed.get("positiveFindings")),
            issues=self._parse_issues(parsed.get("issues")),
            recommendations=_string_list(parsed.get("recommendations")),
        )

    def _parse_issues(self, raw_issues: Any) -> list[Issue]:
        if not isinstance(raw_issues, list):
            return []
        issues = []
        for raw in raw_issues:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping non-object issue: {raw!r}")
                continue
            issues.append(Issue.from_raw(raw))
        return issues


def _optional_score(value: Any) -> int | None:
    return None if value is None else normalize_score(value)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]
