"""Review context models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CodeFile:
    """A changed file snapshot handed to every producer."""

    filename: str
    content: str
    language: str
    patch: str | None = None
    additions: int = 0
    deletions: int = 0
    changes: int = 0


@dataclass
class ReviewContext:
    """Pull request information needed by the pipeline and the AI reviewer."""

    repo_name: str
    pr_number: int
    pr_title: str
    pr_description: str
    base_branch: str
    head_branch: str = ""
    head_sha: str = ""
    author: str = ""
    labels: list[str] = field(default_factory=list)
    approval_count: int = 0

    def to_prompt_context(self) -> str:
        """Format context for inclusion in the review prompt."""
        return f"""# Pull Request Context
**Title:** {self.pr_title}
**Description:** {self.pr_description or 'No description provided'}
**Base Branch:** {self.base_branch}
"""
