"""Configuration loading and validation for Code Sensei."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from code_sensei.models.issue import Category, Severity

DEFAULT_PENALTIES = {
    Severity.CRITICAL: 10,
    Severity.HIGH: 5,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}


@dataclass
class AIConfig:
    """LLM API configuration."""

    api_key: str
    model: str = "claude-opus-4-20250514"
    base_url: str = "https://api.anthropic.com"
    max_tokens: int = 4096
    timeout_seconds: int = 120


@dataclass
class GitHubConfig:
    """GitHub integration configuration."""

    token: str
    webhook_secret: str | None = None
    app_id: str | None = None
    private_key_path: str | None = None
    base_url: str | None = None  # For GitHub Enterprise


@dataclass
class AnalysisSettings:
    """Which producers run and on how much of the PR."""

    security_scan: bool = True
    max_files: int = 20
    max_file_changes: int = 1000


@dataclass
class ScoringPolicy:
    """Score derivation: default base score and per-severity penalties."""

    default_base_score: int = 70
    penalties: dict[Severity, int] = field(default_factory=lambda: dict(DEFAULT_PENALTIES))

    def penalty_for(self, severity: Severity) -> int:
        return self.penalties.get(severity, 0)


@dataclass
class BlockingPolicy:
    """Which issues fail the check-run and deny auto-merge."""

    always_blocking: frozenset[Severity] = frozenset({Severity.CRITICAL})
    # Severity levels that block only for the categories listed below
    category_blocking: frozenset[Severity] = frozenset({Severity.HIGH})
    blocking_categories: frozenset[Category] = frozenset({Category.SECURITY})


@dataclass
class CheckRunPolicy:
    """Check-run naming and conclusion thresholds."""

    name: str = "Code Sensei Review"
    neutral_issue_threshold: int = 10
    blocking: BlockingPolicy = field(default_factory=BlockingPolicy)


@dataclass
class AutoFixSettings:
    """Auto-fix configuration."""

    enabled: bool = False
    commit_message: str = "Auto-fix: Applied automated code fixes\n\nFixed by Code Sensei"


@dataclass
class AutoMergePolicy:
    """Auto-merge gating."""

    enabled: bool = False
    min_score: int = 80
    label: str = "auto-merge"
    required_approvals: int = 1
    merge_method: str = "squash"


@dataclass
class ServerSettings:
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class Config:
    """Complete application configuration."""

    ai: AIConfig
    github: GitHubConfig
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)
    check_run: CheckRunPolicy = field(default_factory=CheckRunPolicy)
    auto_fix: AutoFixSettings = field(default_factory=AutoFixSettings)
    auto_merge: AutoMergePolicy = field(default_factory=AutoMergePolicy)
    server: ServerSettings = field(default_factory=ServerSettings)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file (default: code-sensei.yaml)

    Returns:
        Loaded configuration
    """
    if config_path is None:
        config_path = Path("code-sensei.yaml")

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw_config = yaml.safe_load(f) or {}

    raw_config = _expand_env_vars(raw_config)

    return _parse_config(raw_config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in config."""
    if isinstance(obj, str):
        if obj.startswith("${") and obj.endswith("}"):
            env_var = obj[2:-1]
            return os.environ.get(env_var, "")
        return obj
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.lower() == "true"


def _parse_penalties(raw: dict[str, Any]) -> dict[Severity, int]:
    penalties = dict(DEFAULT_PENALTIES)
    for key, value in raw.items():
        try:
            penalties[Severity(str(key).lower())] = int(value)
        except ValueError as e:
            raise ValueError(f"Invalid penalty entry {key}={value!r}") from e
    return penalties


def _parse_blocking(raw: dict[str, Any]) -> BlockingPolicy:
    defaults = BlockingPolicy()
    try:
        return BlockingPolicy(
            always_blocking=frozenset(
                Severity(s) for s in raw.get("always", [s.value for s in defaults.always_blocking])
            ),
            category_blocking=frozenset(
                Severity(s)
                for s in raw.get("by_category", [s.value for s in defaults.category_blocking])
            ),
            blocking_categories=frozenset(
                Category(c)
                for c in raw.get("categories", [c.value for c in defaults.blocking_categories])
            ),
        )
    except ValueError as e:
        raise ValueError(f"Invalid blocking policy: {e}") from e


def _parse_config(raw: dict[str, Any]) -> Config:
    """Parse raw config dict into Config object."""
    ai_raw = raw.get("ai", {})
    ai = AIConfig(
        api_key=ai_raw.get("api_key") or os.environ.get("ANTHROPIC_API_KEY", ""),
        model=ai_raw.get("model") or os.environ.get("CLAUDE_MODEL", "claude-opus-4-20250514"),
        base_url=ai_raw.get("base_url", "https://api.anthropic.com"),
        max_tokens=int(ai_raw.get("max_tokens", os.environ.get("CLAUDE_MAX_TOKENS", 4096))),
        timeout_seconds=ai_raw.get("timeout_seconds", 120),
    )

    github_raw = raw.get("github", {})
    github = GitHubConfig(
        token=github_raw.get("token") or os.environ.get("GITHUB_TOKEN", ""),
        webhook_secret=github_raw.get("webhook_secret") or os.environ.get("GITHUB_WEBHOOK_SECRET"),
        app_id=github_raw.get("app_id") or os.environ.get("GITHUB_APP_ID"),
        private_key_path=github_raw.get("private_key_path"),
        base_url=github_raw.get("base_url"),
    )

    analysis_raw = raw.get("analysis", {})
    env_scan = _env_flag("ENABLE_SECURITY_SCAN")
    analysis = AnalysisSettings(
        security_scan=analysis_raw.get(
            "security_scan", env_scan if env_scan is not None else True
        ),
        max_files=analysis_raw.get("max_files", 20),
        max_file_changes=analysis_raw.get("max_file_changes", 1000),
    )

    scoring_raw = raw.get("scoring", {})
    scoring = ScoringPolicy(
        default_base_score=scoring_raw.get("default_base_score", 70),
        penalties=_parse_penalties(scoring_raw.get("penalties", {})),
    )

    check_raw = raw.get("check_run", {})
    check_run = CheckRunPolicy(
        name=check_raw.get("name", "Code Sensei Review"),
        neutral_issue_threshold=check_raw.get("neutral_issue_threshold", 10),
        blocking=_parse_blocking(check_raw.get("blocking", {})),
    )

    fix_raw = raw.get("auto_fix", {})
    env_fix = _env_flag("ENABLE_AUTO_FIX")
    auto_fix = AutoFixSettings(
        enabled=fix_raw.get("enabled", env_fix if env_fix is not None else False),
    )
    if "commit_message" in fix_raw:
        auto_fix.commit_message = fix_raw["commit_message"]

    merge_raw = raw.get("auto_merge", {})
    env_merge = _env_flag("ENABLE_AUTO_MERGE")
    auto_merge = AutoMergePolicy(
        enabled=merge_raw.get("enabled", env_merge if env_merge is not None else False),
        min_score=int(
            merge_raw.get("min_score", os.environ.get("AUTO_MERGE_MIN_SCORE", 80))
        ),
        label=merge_raw.get("label", "auto-merge"),
        required_approvals=merge_raw.get("required_approvals", 1),
        merge_method=merge_raw.get("merge_method", "squash"),
    )

    server_raw = raw.get("server", {})
    server = ServerSettings(
        host=server_raw.get("host", "0.0.0.0"),
        port=server_raw.get("port", 8080),
    )

    return Config(
        ai=ai,
        github=github,
        analysis=analysis,
        scoring=scoring,
        check_run=check_run,
        auto_fix=auto_fix,
        auto_merge=auto_merge,
        server=server,
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of errors.

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not config.ai.api_key:
        errors.append("Missing Anthropic API key (set ANTHROPIC_API_KEY or ai.api_key)")

    has_app_key = bool(config.github.private_key_path or os.environ.get("GITHUB_APP_PRIVATE_KEY"))
    if not config.github.token and not (config.github.app_id and has_app_key):
        errors.append(
            "Missing GitHub token or GitHub App credentials "
            "(set GITHUB_TOKEN, or GITHUB_APP_ID with a private key)"
        )

    if not 0 <= config.scoring.default_base_score <= 100:
        errors.append(
            f"scoring.default_base_score must be within 0-100, "
            f"got {config.scoring.default_base_score}"
        )

    if any(p < 0 for p in config.scoring.penalties.values()):
        errors.append("scoring.penalties must not be negative")

    if config.check_run.neutral_issue_threshold < 0:
        errors.append("check_run.neutral_issue_threshold must not be negative")

    if not 0 <= config.auto_merge.min_score <= 100:
        errors.append(
            f"auto_merge.min_score must be within 0-100, got {config.auto_merge.min_score}"
        )

    if config.auto_merge.required_approvals < 1:
        errors.append("auto_merge.required_approvals must be at least 1")

    if config.auto_merge.merge_method not in {"merge", "squash", "rebase"}:
        errors.append(f"Unknown auto_merge.merge_method: {config.auto_merge.merge_method}")

    return errors
