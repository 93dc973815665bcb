"""Line-local rewrites for whitelisted rules."""

import difflib
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from code_sensei.models.issue import Issue
from code_sensei.orchestrator.classifier import is_whitelisted

logger = logging.getLogger(__name__)

_VAR_KEYWORD = re.compile(r"\bvar\b")


def _fix_no_var(line: str) -> str:
    return _VAR_KEYWORD.sub("const", line, count=1)


def _blank(line: str) -> str:
    return ""


def _add_semicolon(line: str) -> str:
    stripped = line.rstrip()
    if not stripped or stripped.endswith(";"):
        return line
    return stripped + ";"


def _strip_trailing(line: str) -> str:
    return line.rstrip()


def _single_quotes(line: str) -> str:
    return line.replace('"', "'")


REWRITES: dict[str, Callable[[str], str]] = {
    "no-var": _fix_no_var,
    "no-console": _blank,
    "no-debugger": _blank,
    "missing-semicolon": _add_semicolon,
    "trailing-whitespace": _strip_trailing,
    "double-quotes": _single_quotes,
}


@dataclass
class FixResult:
    """Outcome of fixing one file."""

    filename: str
    original: str
    fixed: str
    applied: list[Issue] = field(default_factory=list)
    skipped: list[Issue] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.fixed != self.original

    @property
    def diff(self) -> str:
        """Unified diff of the rewrite."""
        return "".join(
            difflib.unified_diff(
                self.original.splitlines(keepends=True),
                self.fixed.splitlines(keepends=True),
                fromfile=f"a/{self.filename}",
                tofile=f"b/{self.filename}",
            )
        )


class AutoFixer:
    """Applies whitelisted rewrites to file contents.

    Lines are rewritten in place and never removed, so line numbers of
    later issues stay valid.
    """

    def fix_content(self, filename: str, content: str, issues: Iterable[Issue]) -> FixResult:
        """Apply every applicable issue to one file.

        Args:
            filename: File the issues belong to
            content: Current file contents
            issues: Auto-fixable issues for this file

        Returns:
            FixResult with the rewritten content
        """
        lines = content.split("\n")
        result = FixResult(filename=filename, original=content, fixed=content)

        for issue in issues:
            if not is_whitelisted(issue):
                logger.info(f"No rewrite for rule {issue.code!r} at {issue.location}")
                result.skipped.append(issue)
                continue
            if issue.line is None or issue.line > len(lines):
                logger.info(f"Skipping {issue.code} fix with unusable line at {issue.location}")
                result.skipped.append(issue)
                continue

            index = issue.line - 1
            lines[index] = REWRITES[issue.code](lines[index])
            result.applied.append(issue)

        result.fixed = "\n".join(lines)
        return result

    def fix_files(
        self, contents: dict[str, str], issues: Iterable[Issue]
    ) -> list[FixResult]:
        """Fix all files that have auto-fixable issues.

        Args:
            contents: Mapping of filename to current contents
            issues: Auto-fixable issues across all files

        Returns:
            One FixResult per file whose content actually changed
        """
        by_file: dict[str, list[Issue]] = {}
        for issue in issues:
            by_file.setdefault(issue.file, []).append(issue)

        results = []
        for filename, file_issues in by_file.items():
            if filename not in contents:
                logger.info(f"Skipping fixes for {filename}: contents not available")
                continue
            result = self.fix_content(filename, contents[filename], file_issues)
            if result.changed:
                results.append(result)

        logger.info(f"Auto-fix rewrote {len(results)} files")
        return results
