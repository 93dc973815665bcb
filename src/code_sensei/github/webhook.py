"""GitHub webhook server for automatic PR reviews."""

import asyncio
import hashlib
import hmac
import json
import logging
import os
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import jwt
import requests
from fastapi import FastAPI, HTTPException, Request

from code_sensei import __version__
from code_sensei.config import Config, load_config
from code_sensei.github.client import GitHubClient

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

# PR actions that trigger a review
TRIGGER_ACTIONS = frozenset({"opened", "synchronize", "reopened"})

# (event, action) pairs after which merge eligibility may have changed
MERGE_CHECK_ACTIONS = frozenset(
    {("pull_request", "labeled"), ("pull_request_review", "submitted")}
)


@dataclass
class PREvent:
    """Represents a PR webhook event."""

    repo: str
    pr_number: int
    action: str
    sender: str = ""
    installation_id: int | None = None
    event_type: str = "pull_request"
    # State of the submitted review, for pull_request_review events
    review_state: str | None = None


ReviewHandler = Callable[..., Awaitable[None]]

# Review trigger - set by the CLI or lazily from the environment
_review_handler: ReviewHandler | None = None

# Auto-merge re-check, run on approvals and labels
_merge_check_handler: ReviewHandler | None = None

# Keeps fire-and-forget review tasks referenced until they finish
_background_tasks: set[asyncio.Task] = set()


def set_review_handler(handler: ReviewHandler | None) -> None:
    """Set the review handler function."""
    global _review_handler
    _review_handler = handler


def set_merge_check_handler(handler: ReviewHandler | None) -> None:
    """Set the auto-merge re-check handler."""
    global _merge_check_handler
    _merge_check_handler = handler


def get_github_app_token(
    app_id: str,
    private_key: str,
    installation_id: int | None = None,
    repo: str | None = None,
) -> str | None:
    """Generate an installation access token for a GitHub App.

    Args:
        app_id: GitHub App ID
        private_key: GitHub App private key (PEM format)
        installation_id: Installation from the webhook payload, if known
        repo: Repository in "owner/name" format, used to look up the installation

    Returns:
        Installation access token or None on failure
    """
    now = int(time.time())
    payload = {
        "iat": now - 60,  # clock drift
        "exp": now + 600,
        "iss": app_id,
    }
    try:
        app_jwt = jwt.encode(payload, private_key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError) as e:
        logger.error(f"Could not sign GitHub App JWT: {e}")
        return None

    headers = {
        "Authorization": f"Bearer {app_jwt}",
        "Accept": "application/vnd.github+json",
    }

    try:
        if installation_id is None:
            if not repo:
                logger.error("Need an installation id or a repository to get an app token")
                return None
            response = requests.get(
                f"{GITHUB_API_URL}/repos/{repo}/installation", headers=headers, timeout=10
            )
            if response.status_code != 200:
                logger.error(f"Failed to get installation: {response.status_code} {response.text}")
                return None
            installation_id = response.json()["id"]

        response = requests.post(
            f"{GITHUB_API_URL}/app/installations/{installation_id}/access_tokens",
            headers=headers,
            timeout=10,
        )
        if response.status_code != 201:
            logger.error(f"Failed to get access token: {response.status_code} {response.text}")
            return None
        return response.json()["token"]
    except requests.RequestException as e:
        logger.error(f"GitHub App token request failed: {e}")
        return None


def build_github_client(
    config: Config, repo: str, installation_id: int | None = None
) -> GitHubClient | None:
    """Build a GitHub client for a repository.

    GitHub App credentials, when configured, take precedence over the
    token; the installation is looked up from the repository if the
    webhook did not carry one.

    Args:
        config: Application configuration
        repo: Repository in "owner/name" format
        installation_id: Installation from the webhook payload, if known

    Returns:
        GitHubClient, or None if no credentials could be resolved
    """
    token = config.github.token
    private_key = os.environ.get("GITHUB_APP_PRIVATE_KEY")
    if not private_key and config.github.private_key_path:
        private_key = Path(config.github.private_key_path).read_text()

    if config.github.app_id and private_key:
        logger.info(f"Using GitHub App authentication for {repo}")
        token = get_github_app_token(
            config.github.app_id, private_key, installation_id=installation_id, repo=repo
        )
        if not token:
            logger.error("Failed to get GitHub App installation token")
            return None

    if not token:
        logger.error(f"No GitHub token or App credentials for {repo}")
        return None

    return GitHubClient(token, base_url=config.github.base_url)


def install_default_handlers(config: Config | None = None) -> None:
    """Install the review and auto-merge handlers.

    Args:
        config: Configuration to use; when None, code-sensei.yaml and the
            environment are read again for every event
    """
    # review imports the github package, which imports this module
    from code_sensei.review import check_auto_merge, review_pull_request

    async def default_review_handler(
        repo: str, pr_number: int, installation_id: int | None = None
    ) -> None:
        current = config or load_config()
        client = build_github_client(current, repo, installation_id)
        if client is not None:
            await review_pull_request(repo, pr_number, current, client=client)

    async def default_merge_check_handler(
        repo: str, pr_number: int, installation_id: int | None = None
    ) -> None:
        current = config or load_config()
        client = build_github_client(current, repo, installation_id)
        if client is not None:
            await check_auto_merge(repo, pr_number, current, client=client)

    set_review_handler(default_review_handler)
    set_merge_check_handler(default_merge_check_handler)


def _is_merge_check(event: PREvent) -> bool:
    if (event.event_type, event.action) not in MERGE_CHECK_ACTIONS:
        return False
    return event.event_type != "pull_request_review" or event.review_state == "approved"


async def handle_pr_event(event: PREvent) -> None:
    """Dispatch a PR event to the review or auto-merge handler.

    Opened, reopened and pushed-to PRs are reviewed. New labels and
    approvals only re-check merge eligibility. Anything else is ignored.

    Args:
        event: PR event data
    """
    if event.event_type == "pull_request" and event.action in TRIGGER_ACTIONS:
        handler, purpose = _review_handler, "review"
    elif _is_merge_check(event):
        handler, purpose = _merge_check_handler, "auto-merge check"
    else:
        logger.debug(f"Ignoring {event.event_type} action: {event.action}")
        return

    logger.info(f"Triggering {purpose} for {event.repo} PR #{event.pr_number}")

    if handler is None:
        logger.warning(f"No {purpose} handler configured")
        return

    try:
        await handler(
            repo=event.repo,
            pr_number=event.pr_number,
            installation_id=event.installation_id,
        )
    except Exception as e:
        logger.exception(f"Error in {purpose} for {event.repo} PR #{event.pr_number}: {e}")


def create_webhook_app(webhook_secret: str | None = None) -> FastAPI:
    """Create the FastAPI webhook application.

    Args:
        webhook_secret: Optional GitHub webhook secret for signature verification.
                       If not provided, reads from GITHUB_WEBHOOK_SECRET env var.

    Returns:
        FastAPI application
    """
    if webhook_secret is None:
        webhook_secret = os.environ.get("GITHUB_WEBHOOK_SECRET")

    if _review_handler is None and _merge_check_handler is None:
        install_default_handlers()

    app = FastAPI(
        title="Code Sensei Webhook",
        description="Webhook server for automated pull request reviews",
        version=__version__,
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "code-sensei"}

    @app.post("/webhook")
    async def github_webhook(request: Request):
        """Handle GitHub webhook events."""
        body = await request.body()

        if webhook_secret:
            signature = request.headers.get("X-Hub-Signature-256", "")
            if not verify_signature(body, signature, webhook_secret):
                raise HTTPException(status_code=401, detail="Invalid signature")

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {e}") from e

        event_type = request.headers.get("X-GitHub-Event", "")

        if event_type in ("pull_request", "pull_request_review"):
            try:
                pr_event = PREvent(
                    repo=payload["repository"]["full_name"],
                    pr_number=payload["pull_request"]["number"],
                    action=payload["action"],
                    sender=payload.get("sender", {}).get("login", ""),
                    installation_id=payload.get("installation", {}).get("id"),
                    event_type=event_type,
                    review_state=(payload.get("review") or {}).get("state"),
                )
            except (KeyError, TypeError, AttributeError) as e:
                raise HTTPException(status_code=400, detail=f"Malformed payload: {e}") from e

            # Respond quickly; the handler runs in the background
            task = asyncio.create_task(handle_pr_event(pr_event))
            _background_tasks.add(task)
            task.add_done_callback(_background_tasks.discard)

        elif event_type == "ping":
            logger.info("Received ping from GitHub")
            return {"status": "pong"}

        else:
            logger.debug(f"Ignoring event type: {event_type}")

        return {"status": "ok"}

    @app.get("/")
    async def root():
        """Root endpoint with service info."""
        return {
            "service": "Code Sensei",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "webhook": "/webhook",
            },
        }

    return app


def verify_signature(payload: bytes, signature: str, secret: str) -> bool:
    """Verify GitHub webhook signature.

    Args:
        payload: Raw request body
        signature: X-Hub-Signature-256 header value
        secret: Webhook secret

    Returns:
        True if signature is valid
    """
    if not signature.startswith("sha256="):
        return False

    expected = "sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)
