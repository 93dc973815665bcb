"""Per-language static analyzers."""

import re

from code_sensei.analysis.base import LineRule, StaticAnalyzer
from code_sensei.models.issue import Category, Issue, Location, Severity


def _todo_rule(marker: str) -> LineRule:
    return LineRule(
        code="todo-comment",
        pattern=re.compile(rf"{re.escape(marker)}\s*(TODO|FIXME|HACK)\b", re.IGNORECASE),
        severity=Severity.INFO,
        category=Category.MAINTAINABILITY,
        message="TODO/FIXME comment found",
        suggestion="Address this technical debt item",
    )


class TypeScriptAnalyzer(StaticAnalyzer):
    """JavaScript and TypeScript heuristics."""

    NAME = "typescript"
    LANGUAGES = frozenset({"typescript", "javascript"})

    RULES = [
        _todo_rule("//"),
        LineRule(
            code="no-console",
            pattern=re.compile(r"console\.(log|debug|info)\b"),
            severity=Severity.LOW,
            category=Category.BEST_PRACTICE,
            message="Console statement detected",
            suggestion="Remove console statements or use a logging library",
            auto_fixable=True,
            skip_comments=True,
        ),
        LineRule(
            code="no-debugger",
            pattern=re.compile(r"\bdebugger\b"),
            severity=Severity.MEDIUM,
            category=Category.BUG,
            message="Debugger statement should be removed",
            suggestion="Remove debugger statement before committing",
            auto_fixable=True,
            skip_comments=True,
        ),
        LineRule(
            code="no-explicit-any",
            pattern=re.compile(r":\s*any\b"),
            severity=Severity.LOW,
            category=Category.BEST_PRACTICE,
            message='Using "any" type defeats TypeScript benefits',
            suggestion="Use a specific type instead of any",
            skip_comments=True,
        ),
        LineRule(
            code="eqeqeq",
            pattern=re.compile(r"[^=!]==[^=]|[^!]!=[^=]"),
            severity=Severity.MEDIUM,
            category=Category.BUG,
            message="Use === or !== instead of == or !=",
            suggestion="Use strict equality operators",
            skip_comments=True,
        ),
        LineRule(
            code="no-var",
            pattern=re.compile(r"\bvar\s+"),
            severity=Severity.MEDIUM,
            category=Category.BEST_PRACTICE,
            message="Use const or let instead of var",
            suggestion="Replace var with const or let",
            auto_fixable=True,
            skip_comments=True,
        ),
        LineRule(
            code="no-empty-catch",
            pattern=re.compile(r"\bcatch\s*(\([^)]*\))?\s*\{\s*\}"),
            severity=Severity.HIGH,
            category=Category.BUG,
            message="Empty catch block, handle errors properly",
            suggestion="Log or rethrow the caught error",
        ),
    ]

    def check_line(
        self, line: str, index: int, lines: list[str], filename: str
    ) -> list[Issue]:
        # catch block opened here and closed on the next line
        if re.search(r"\bcatch\b.*\{\s*$", line) and index + 1 < len(lines):
            if lines[index + 1].strip() == "}":
                return [
                    Issue(
                        severity=Severity.HIGH,
                        category=Category.BUG,
                        message="Empty catch block, handle errors properly",
                        location=Location(file=filename, line=index + 1),
                        suggestion="Log or rethrow the caught error",
                        code="no-empty-catch",
                    )
                ]
        return []


class PythonAnalyzer(StaticAnalyzer):
    """Python heuristics."""

    NAME = "python"
    LANGUAGES = frozenset({"python"})
    COMMENT_MARKER = "#"

    RULES = [
        _todo_rule("#"),
        LineRule(
            code="prefer-logging",
            pattern=re.compile(r"^\s*print\s*\("),
            severity=Severity.LOW,
            category=Category.BEST_PRACTICE,
            message="Print statement detected",
            suggestion="Use the logging module instead of print",
        ),
        LineRule(
            code="bare-except",
            pattern=re.compile(r"^\s*except\s*:"),
            severity=Severity.MEDIUM,
            category=Category.BUG,
            message="Bare except clause catches all exceptions, be more specific",
            suggestion="Catch the specific exception types you expect",
        ),
        LineRule(
            code="no-silent-except",
            pattern=re.compile(r"except.*:\s*pass\s*$"),
            severity=Severity.HIGH,
            category=Category.BUG,
            message="Empty except block with pass",
            suggestion="Handle exceptions properly or at least log them",
            skip_comments=True,
        ),
        LineRule(
            code="no-wildcard-import",
            pattern=re.compile(r"^\s*from\s+\S+\s+import\s+\*"),
            severity=Severity.LOW,
            category=Category.STYLE,
            message="Avoid wildcard imports, be explicit about what you import",
        ),
        LineRule(
            code="no-eval",
            pattern=re.compile(r"\b(eval|exec)\s*\("),
            severity=Severity.CRITICAL,
            category=Category.SECURITY,
            message="Avoid using eval() or exec() as they pose security risks",
            suggestion="Use ast.literal_eval or explicit parsing instead",
            skip_comments=True,
        ),
    ]


class GoAnalyzer(StaticAnalyzer):
    """Go heuristics."""

    NAME = "go"
    LANGUAGES = frozenset({"go"})

    RULES = [
        _todo_rule("//"),
        LineRule(
            code="no-naked-return",
            pattern=re.compile(r"^\s*return\s*$"),
            severity=Severity.LOW,
            category=Category.STYLE,
            message="Avoid naked returns for better readability",
        ),
        LineRule(
            code="no-panic",
            pattern=re.compile(r"\bpanic\("),
            severity=Severity.MEDIUM,
            category=Category.BUG,
            message="Avoid using panic(), return errors instead",
            skip_comments=True,
        ),
    ]

    def check_line(
        self, line: str, index: int, lines: list[str], filename: str
    ) -> list[Issue]:
        if not re.search(r"\berr\s*:=", line):
            return []
        window = lines[index : index + 5]
        if any("if err" in candidate for candidate in window):
            return []
        return [
            Issue(
                severity=Severity.HIGH,
                category=Category.BUG,
                message="Error not checked, always handle errors in Go",
                location=Location(file=filename, line=index + 1),
                suggestion="Check err immediately after the call",
                code="error-check",
            )
        ]


class RustAnalyzer(StaticAnalyzer):
    """Rust heuristics."""

    NAME = "rust"
    LANGUAGES = frozenset({"rust"})

    RULES = [
        _todo_rule("//"),
        LineRule(
            code="no-unwrap",
            pattern=re.compile(r"\.unwrap\(\)"),
            severity=Severity.HIGH,
            category=Category.BUG,
            message="Avoid using unwrap(), use proper error handling with match or ?",
            skip_comments=True,
        ),
        LineRule(
            code="prefer-error-handling",
            pattern=re.compile(r"\.expect\("),
            severity=Severity.MEDIUM,
            category=Category.BUG,
            message="Consider using proper error handling instead of expect()",
            skip_comments=True,
        ),
        LineRule(
            code="unsafe-usage",
            pattern=re.compile(r"\bunsafe\b"),
            severity=Severity.HIGH,
            category=Category.MAINTAINABILITY,
            message="Unsafe block detected, ensure it's necessary and well-documented",
            skip_comments=True,
        ),
        LineRule(
            code="prefer-logging",
            pattern=re.compile(r"\bprintln!"),
            severity=Severity.LOW,
            category=Category.BEST_PRACTICE,
            message="Consider using proper logging instead of println!",
            skip_comments=True,
        ),
    ]


class WhitespaceAnalyzer(StaticAnalyzer):
    """Checks that apply to every text file."""

    NAME = "whitespace"

    RULES = [
        LineRule(
            code="trailing-whitespace",
            pattern=re.compile(r"[ \t]+$"),
            severity=Severity.LOW,
            category=Category.STYLE,
            message="Trailing whitespace",
            suggestion="Remove trailing whitespace",
            auto_fixable=True,
        ),
    ]


def default_analyzers() -> list[StaticAnalyzer]:
    """Static analyzers in their declared producer order."""
    return [
        TypeScriptAnalyzer(),
        PythonAnalyzer(),
        GoAnalyzer(),
        RustAnalyzer(),
        WhitespaceAnalyzer(),
    ]
