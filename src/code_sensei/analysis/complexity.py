"""Line-based complexity estimation.

These are heuristics over raw source text, not an AST walk. The numbers are
only meant to be comparable between files of the same language.
"""

import logging
import math
import re

from code_sensei.models.review import ComplexityMetrics

logger = logging.getLogger(__name__)

HASH_COMMENT_LANGUAGES = {"python", "ruby", "shell", "bash", "yaml", "perl", "r"}

# Each pattern is counted independently, so "else if" also counts as "if".
DECISION_PATTERNS = [
    re.compile(r"\bif\b"),
    re.compile(r"\belse\s+if\b"),
    re.compile(r"\bwhile\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bcase\b"),
    re.compile(r"\bcatch\b"),
    re.compile(r"\band\b"),
    re.compile(r"\bor\b"),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    # ternary; skips optional chaining (?.) and nullish coalescing (??)
    re.compile(r"(?<![?.])\?(?![?.])"),
]

CONTROL_KEYWORD = re.compile(r"\b(if|while|for|case)\b")
LOGICAL_OPERATOR = re.compile(r"&&|\|\|")


def comment_marker(language: str) -> str:
    """Line-comment marker for a language."""
    return "#" if language.lower() in HASH_COMMENT_LANGUAGES else "//"


def count_lines_of_code(source: str, language: str) -> int:
    """Count non-blank lines that are not line comments."""
    marker = comment_marker(language)
    count = 0
    for line in source.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(marker):
            count += 1
    return count


def cyclomatic_complexity(source: str) -> int:
    """Base path plus one per decision point."""
    return 1 + sum(len(pattern.findall(source)) for pattern in DECISION_PATTERNS)


def cognitive_complexity(source: str) -> int:
    """Nesting-weighted count of control structures and logical operators."""
    complexity = 0
    nesting = 0

    for line in source.splitlines():
        for char in line:
            if char == "{":
                nesting += 1
            elif char == "}":
                nesting = max(0, nesting - 1)

        if CONTROL_KEYWORD.search(line):
            complexity += 1 + nesting

        complexity += len(LOGICAL_OPERATOR.findall(line))

    return complexity


def maintainability_index(lines_of_code: int, cyclomatic: int) -> float:
    """Maintainability index on a 0-100 scale using a synthetic Halstead volume."""
    volume = 5 * math.log(lines_of_code) if lines_of_code > 0 else 0.0
    mi = (
        171
        - 5.2 * math.log(volume + 1)
        - 0.23 * cyclomatic
        - 16.2 * math.log(lines_of_code + 1)
    )
    return min(100.0, max(0.0, mi))


def estimate(source: str, language: str) -> ComplexityMetrics:
    """Compute complexity metrics for a file.

    Never raises; empty input yields loc=0, cyclomatic=1, cognitive=0.

    Args:
        source: Full file contents
        language: Language name as returned by detect_language

    Returns:
        ComplexityMetrics for the file
    """
    loc = count_lines_of_code(source, language)
    cyclomatic = cyclomatic_complexity(source)
    metrics = ComplexityMetrics(
        lines_of_code=loc,
        cyclomatic_complexity=cyclomatic,
        cognitive_complexity=cognitive_complexity(source),
        maintainability_index=maintainability_index(loc, cyclomatic),
    )
    logger.debug(f"Complexity ({language}): {metrics}")
    return metrics
