"""AI review producer for Code Sensei."""

from code_sensei.agents.llm_client import LLMClient, LLMConfig
from code_sensei.agents.reviewer import AIReviewer

__all__ = [
    "AIReviewer",
    "LLMClient",
    "LLMConfig",
]
