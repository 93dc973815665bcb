"""Code Sensei - pull request review bot with static analysis and AI review."""

__version__ = "0.1.0"
