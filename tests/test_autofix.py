"""Tests for the auto-fixer."""


class TestAutoFixer:
    """Tests for AutoFixer."""

    def test_applies_whitelisted_rewrites(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        content = 'var total = 0;\nconsole.log("x");\nlet a = 1   \nconst b = "y"\ndebugger;'
        issues = [
            make_issue(file="a.js", line=1, code="no-var"),
            make_issue(file="a.js", line=2, code="no-console"),
            make_issue(file="a.js", line=3, code="trailing-whitespace"),
            make_issue(file="a.js", line=4, code="double-quotes"),
            make_issue(file="a.js", line=4, code="missing-semicolon"),
            make_issue(file="a.js", line=5, code="no-debugger"),
        ]

        result = AutoFixer().fix_content("a.js", content, issues)

        assert result.fixed == "const total = 0;\n\nlet a = 1\nconst b = 'y';\n"
        assert len(result.applied) == 6
        assert result.skipped == []
        assert result.changed

    def test_unknown_rule_is_noop(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        issue = make_issue(file="a.js", line=1, code="prefer-const", auto_fixable=True)
        result = AutoFixer().fix_content("a.js", "let x = 1;", [issue])

        assert result.fixed == "let x = 1;"
        assert result.skipped == [issue]
        assert not result.changed

    def test_missing_or_out_of_range_line_is_noop(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        issues = [
            make_issue(file="a.js", line=None, code="no-var"),
            make_issue(file="a.js", line=40, code="no-var"),
        ]
        result = AutoFixer().fix_content("a.js", "var x = 1;", issues)

        assert result.fixed == "var x = 1;"
        assert len(result.skipped) == 2

    def test_lines_are_not_shifted(self, make_issue):
        """Blanking a line keeps later line numbers valid."""
        from code_sensei.autofix.fixer import AutoFixer

        issues = [
            make_issue(file="a.js", line=1, code="no-console"),
            make_issue(file="a.js", line=2, code="no-var"),
        ]
        result = AutoFixer().fix_content("a.js", "console.log(1);\nvar y = 2;", issues)

        assert result.fixed == "\nconst y = 2;"

    def test_semicolon_not_doubled(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        issue = make_issue(file="a.js", line=1, code="missing-semicolon")
        assert AutoFixer().fix_content("a.js", "run();", [issue]).fixed == "run();"

    def test_only_var_keyword_replaced(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        issue = make_issue(file="a.js", line=1, code="no-var")
        result = AutoFixer().fix_content("a.js", "var variance = vars;", [issue])

        assert result.fixed == "const variance = vars;"

    def test_fix_files_groups_by_file(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        contents = {"a.js": "var a = 1;", "b.js": "let b = 2;  ", "c.js": "ok"}
        issues = [
            make_issue(file="a.js", line=1, code="no-var"),
            make_issue(file="b.js", line=1, code="trailing-whitespace"),
            make_issue(file="c.js", line=1, code="eqeqeq"),
            make_issue(file="missing.js", line=1, code="no-var"),
        ]

        results = AutoFixer().fix_files(contents, issues)

        assert [r.filename for r in results] == ["a.js", "b.js"]
        assert results[1].fixed == "let b = 2;"

    def test_diff(self, make_issue):
        from code_sensei.autofix.fixer import AutoFixer

        issue = make_issue(file="a.js", line=1, code="no-var")
        diff = AutoFixer().fix_content("a.js", "var a = 1;\n", [issue]).diff

        assert "--- a/a.js" in diff
        assert "+++ b/a.js" in diff
        assert "-var a = 1;" in diff
        assert "+const a = 1;" in diff
