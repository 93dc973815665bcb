"""GitHub integration for Code Sensei."""

from code_sensei.github.client import GitHubClient
from code_sensei.github.formatter import GitHubFormatter, format_review_as_json
from code_sensei.github.webhook import PREvent, create_webhook_app

__all__ = [
    "GitHubClient",
    "GitHubFormatter",
    "PREvent",
    "create_webhook_app",
    "format_review_as_json",
]
