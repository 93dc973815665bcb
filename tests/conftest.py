"""Pytest configuration and shared fixtures."""

import pytest

SAMPLE_TYPESCRIPT = """\
var count = 0;
function check(a: any, b) {
  if (a == b) {
    console.log("equal");
  }
  debugger;
  return count;
}
"""

SAMPLE_PYTHON = """\
import os
from helpers import *

def run(cmd):
    print("running", cmd)
    try:
        return eval(cmd)
    except:
        pass
"""

SAMPLE_VULNERABLE_PYTHON = """\
import hashlib

API_KEY = "abcdefghijklmnopqrstuvwxyz123456"

def get_user(cursor, username):
    cursor.execute(f"SELECT * FROM users WHERE name = '{username}'")
    return hashlib.md5(username.encode()).hexdigest()
"""


@pytest.fixture
def make_issue():
    """Factory for issues with sensible defaults."""
    from code_sensei.models.issue import Category, Issue, Location, Severity

    def _make(
        severity: Severity = Severity.MEDIUM,
        category: Category = Category.MAINTAINABILITY,
        message: str = "Something to look at",
        file: str = "src/app.ts",
        line: int | None = 1,
        auto_fixable: bool = False,
        code: str | None = None,
        suggestion: str | None = None,
    ) -> Issue:
        return Issue(
            severity=severity,
            category=category,
            message=message,
            location=Location(file=file, line=line),
            suggestion=suggestion,
            auto_fixable=auto_fixable,
            code=code,
        )

    return _make


@pytest.fixture
def review_context():
    """Review context for a PR that carries the auto-merge label."""
    from code_sensei.models.context import ReviewContext

    return ReviewContext(
        repo_name="test-org/test-repo",
        pr_number=42,
        pr_title="Add user lookup",
        pr_description="Adds a user lookup helper.",
        base_branch="main",
        head_branch="feature/lookup",
        head_sha="abc1234def",
        author="testuser",
        labels=["auto-merge"],
        approval_count=1,
    )


@pytest.fixture
def config():
    """Configuration with credentials set and default policies."""
    from code_sensei.config import AIConfig, Config, GitHubConfig

    return Config(
        ai=AIConfig(api_key="test-key", timeout_seconds=5),
        github=GitHubConfig(token="test-token"),
    )


@pytest.fixture
def sample_files():
    """Changed file snapshot with findings in several languages."""
    from code_sensei.models.context import CodeFile

    return [
        CodeFile(filename="src/check.ts", content=SAMPLE_TYPESCRIPT, language="typescript"),
        CodeFile(filename="tools/run.py", content=SAMPLE_PYTHON, language="python"),
    ]


@pytest.fixture
def vulnerable_file():
    """Python file with secret, SQL injection and weak hash."""
    from code_sensei.models.context import CodeFile

    return CodeFile(filename="app/users.py", content=SAMPLE_VULNERABLE_PYTHON, language="python")
