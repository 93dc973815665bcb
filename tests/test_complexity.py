"""Tests for complexity estimation."""

import pytest

NESTED_JS = """\
function check(a, b) {
  if (a && b) {
    return 1;
  }
  return 0;
}
"""


class TestEstimate:
    """Tests for estimate()."""

    def test_empty_file(self):
        from code_sensei.analysis.complexity import estimate

        metrics = estimate("", "python")

        assert metrics.lines_of_code == 0
        assert metrics.cyclomatic_complexity == 1
        assert metrics.cognitive_complexity == 0
        assert metrics.maintainability_index == 100.0

    def test_nested_javascript(self):
        from code_sensei.analysis.complexity import estimate

        metrics = estimate(NESTED_JS, "javascript")

        assert metrics.lines_of_code == 6
        # base + if + &&
        assert metrics.cyclomatic_complexity == 3
        # if at nesting 2 plus one logical operator
        assert metrics.cognitive_complexity == 4
        assert metrics.maintainability_index == 100.0

    def test_comments_and_blank_lines_not_counted(self):
        from code_sensei.analysis.complexity import count_lines_of_code

        source = "# header\n\nx = 1\n   # indented comment\ny = 2\n"
        assert count_lines_of_code(source, "python") == 2
        assert count_lines_of_code("// note\nlet a = 1;\n", "typescript") == 1

    def test_large_file_maintainability(self):
        from code_sensei.analysis.complexity import estimate

        metrics = estimate("x = 1\n" * 1000, "python")

        assert metrics.lines_of_code == 1000
        assert metrics.maintainability_index == pytest.approx(40.28, abs=0.05)

    def test_maintainability_clamped_to_zero(self):
        from code_sensei.analysis.complexity import maintainability_index

        assert maintainability_index(10**6, 5000) == 0.0

    def test_ternary_not_confused_with_optional_chaining(self):
        from code_sensei.analysis.complexity import cyclomatic_complexity

        assert cyclomatic_complexity("const v = ok ? a : b;") == 2
        assert cyclomatic_complexity("const v = obj?.field ?? fallback;") == 1

    def test_keywords_match_whole_words(self):
        from code_sensei.analysis.complexity import cyclomatic_complexity

        assert cyclomatic_complexity("format(origin, android)") == 1
        assert cyclomatic_complexity("} else if (x) {") == 3

    def test_nesting_never_negative(self):
        from code_sensei.analysis.complexity import cognitive_complexity

        # stray closing braces do not drive nesting below zero
        assert cognitive_complexity("}}}\nif (x) {\n}") == 2
