"""Anthropic Messages API client used by the AI reviewer."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

ANTHROPIC_API_BASE = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


@dataclass
class LLMConfig:
    """Configuration for the LLM client."""

    api_key: str
    model: str = "claude-opus-4-20250514"
    base_url: str = ANTHROPIC_API_BASE
    max_tokens: int = 4096
    timeout: int = 120


class LLMClient:
    """Thin async client for the Messages endpoint."""

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the client.

        Args:
            config: Configuration for the client
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "x-api-key": config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "LLMClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def complete(
        self,
        user_prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.3,
    ) -> str:
        """Send a single-turn request and return the text of the reply.

        Args:
            user_prompt: The user message
            system_prompt: Optional system prompt
            max_tokens: Override for the configured token limit
            temperature: Sampling temperature

        Returns:
            Concatenated text blocks of the response
        """
        body: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            body["system"] = system_prompt

        logger.debug(f"Requesting completion from {self.config.model}")
        response = await self._client.post("/v1/messages", json=body)
        response.raise_for_status()

        data = response.json()
        return "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )


def parse_json_response(content: str) -> dict[str, Any]:
    """Parse JSON from a response, handling markdown code blocks.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    content = content.strip()

    if "```json" in content:
        match = re.search(r"```json\s*([\s\S]*?)```", content)
        if match:
            content = match.group(1).strip()
    elif "```" in content:
        match = re.search(r"```\s*([\s\S]*?)```", content)
        if match:
            content = match.group(1).strip()

    json_match = re.search(r"\{[\s\S]*\}", content)
    if not json_match:
        raise ValueError("No JSON object found in response")

    parsed = json.loads(json_match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
