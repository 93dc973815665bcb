"""Base class for line-pattern finding producers."""

import logging
import re
from dataclasses import dataclass

from code_sensei.models.issue import Category, Issue, Location, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineRule:
    """A regex checked against every line of a file."""

    code: str
    pattern: re.Pattern
    severity: Severity
    category: Category
    message: str
    suggestion: str | None = None
    auto_fixable: bool = False
    skip_comments: bool = False

    def matches(self, line: str, comment_marker: str) -> bool:
        if self.skip_comments and line.lstrip().startswith(comment_marker):
            return False
        return bool(self.pattern.search(line))


class StaticAnalyzer:
    """Base class for all pattern-based producers.

    Subclasses declare ``LANGUAGES`` and ``RULES``; an empty ``LANGUAGES``
    means the analyzer applies to every file.
    """

    NAME: str = "base"
    LANGUAGES: frozenset[str] = frozenset()
    COMMENT_MARKER: str = "//"
    RULES: list[LineRule] = []

    @property
    def name(self) -> str:
        return self.NAME

    def supports(self, language: str) -> bool:
        return not self.LANGUAGES or language in self.LANGUAGES

    def analyze(self, content: str, filename: str, language: str) -> list[Issue]:
        """Scan a file and return the issues found.

        Args:
            content: Full file contents
            filename: Path of the file in the repository
            language: Language name as returned by detect_language

        Returns:
            Issues in line order
        """
        if not self.supports(language):
            return []

        lines = content.split("\n")
        issues: list[Issue] = []
        for index, line in enumerate(lines):
            for rule in self.RULES:
                if rule.matches(line, self.COMMENT_MARKER):
                    issues.append(self._issue(rule, filename, index + 1))
            issues.extend(self.check_line(line, index, lines, filename))

        if issues:
            logger.debug(f"{self.name}: {len(issues)} issues in {filename}")
        return issues

    def check_line(
        self, line: str, index: int, lines: list[str], filename: str
    ) -> list[Issue]:
        """Hook for checks that need surrounding lines."""
        return []

    def _issue(self, rule: LineRule, filename: str, line: int) -> Issue:
        return Issue(
            severity=rule.severity,
            category=rule.category,
            message=rule.message,
            location=Location(file=filename, line=line),
            suggestion=rule.suggestion,
            auto_fixable=rule.auto_fixable,
            code=rule.code,
        )
