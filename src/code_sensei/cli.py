"""Command-line interface for Code Sensei."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import uvicorn
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from code_sensei import __version__
from code_sensei.analysis.languages import detect_language, is_binary_file
from code_sensei.config import Config, load_config, validate_config
from code_sensei.github.formatter import GitHubFormatter, format_review_as_json
from code_sensei.github.webhook import (
    build_github_client,
    create_webhook_app,
    install_default_handlers,
)
from code_sensei.models.context import CodeFile, ReviewContext
from code_sensei.models.review import Conclusion
from code_sensei.review import ReviewOutcome, ReviewPipeline, review_pull_request

console = Console()

CONCLUSION_STYLE = {
    Conclusion.SUCCESS: "green",
    Conclusion.NEUTRAL: "yellow",
    Conclusion.FAILURE: "red",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_valid_config(config_path: str | None) -> Config:
    config = load_config(Path(config_path) if config_path else None)
    errors = validate_config(config)
    if errors:
        for error in errors:
            console.print(f"[red]Config error:[/red] {error}")
        sys.exit(1)
    return config


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """Code Sensei - automated pull request reviews."""
    setup_logging(verbose)


@cli.command("review-pr")
@click.argument("repo")
@click.argument("pr_number", type=int)
@click.option("--output", type=click.Choice(["github", "json", "markdown"]), default="github")
@click.option("--dry-run", is_flag=True, help="Don't post to GitHub")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def review_pr(
    repo: str,
    pr_number: int,
    output: str,
    dry_run: bool,
    config_path: str | None,
) -> None:
    """Review a GitHub pull request."""
    asyncio.run(
        review_pr_async(
            repo=repo,
            pr_number=pr_number,
            output=output,
            dry_run=dry_run,
            config_path=Path(config_path) if config_path else None,
        )
    )


async def review_pr_async(
    repo: str,
    pr_number: int,
    output: str = "github",
    dry_run: bool = False,
    config_path: Path | None = None,
) -> None:
    """Async implementation of the review-pr command."""
    config = _load_valid_config(str(config_path) if config_path else None)

    console.print(f"🔍 Reviewing PR #{pr_number} in [bold]{repo}[/bold]...")

    client = build_github_client(config, repo)
    if client is None:
        console.print("[red]❌ Could not authenticate with GitHub[/red]")
        sys.exit(1)

    # json and markdown print the result instead of posting it
    outcome = await review_pull_request(
        repo, pr_number, config, client=client, dry_run=dry_run or output != "github"
    )
    if outcome is None:
        console.print("[red]❌ Review failed, see the log for details[/red]")
        sys.exit(1)

    if output == "json":
        print(
            json.dumps(
                format_review_as_json(outcome.review, outcome.actionability, outcome.decision),
                indent=2,
            )
        )
        return
    if output == "markdown" or dry_run:
        if dry_run:
            console.print("\n[yellow]Dry run - not posting to GitHub[/yellow]")
        print(
            GitHubFormatter().format_summary_comment(
                outcome.review, outcome.actionability, outcome.failed_producers
            )
        )
        return

    _print_outcome(outcome)


def _print_outcome(outcome: ReviewOutcome) -> None:
    style = CONCLUSION_STYLE[outcome.decision.conclusion]
    console.print(
        f"✅ Review complete: [{style}]{outcome.decision.conclusion.value}[/{style}] "
        f"| {outcome.decision.description}"
    )
    if outcome.failed_producers:
        console.print(
            f"[yellow]⚠️  Producers failed: {', '.join(outcome.failed_producers)}[/yellow]"
        )
    if outcome.merge.allowed:
        console.print("[green]Eligible for auto-merge[/green]")


def _collect_files(paths: tuple[str, ...]) -> list[CodeFile]:
    files = []
    for raw_path in paths:
        path = Path(raw_path)
        candidates = sorted(p for p in path.rglob("*") if p.is_file()) if path.is_dir() else [path]
        for candidate in candidates:
            if is_binary_file(candidate.name):
                continue
            try:
                content = candidate.read_text(encoding="utf-8")
            except (UnicodeDecodeError, OSError) as e:
                logging.getLogger(__name__).debug(f"Skipping {candidate}: {e}")
                continue
            files.append(
                CodeFile(
                    filename=str(candidate),
                    content=content,
                    language=detect_language(candidate.name),
                )
            )
    return files


@cli.command("analyze")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--output", type=click.Choice(["table", "json"]), default="table")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def analyze(paths: tuple[str, ...], output: str, config_path: str | None) -> None:
    """Run the static analyzers on local files (no network access)."""
    config = load_config(Path(config_path) if config_path else None)
    files = _collect_files(paths)
    if not files:
        console.print("[yellow]No analyzable files found[/yellow]")
        return

    context = ReviewContext(
        repo_name="local",
        pr_number=0,
        pr_title="Local analysis",
        pr_description="",
        base_branch="",
    )
    outcome = asyncio.run(ReviewPipeline(config).run(files, context))

    if output == "json":
        data = format_review_as_json(outcome.review, outcome.actionability, outcome.decision)
        data["metrics"] = {name: m.to_dict() for name, m in outcome.metrics.items()}
        print(json.dumps(data, indent=2))
        return

    table = Table(title=f"Issues ({outcome.review.total_count})")
    table.add_column("Severity")
    table.add_column("Location")
    table.add_column("Rule")
    table.add_column("Message")
    for issue in outcome.review.issues:
        table.add_row(issue.severity.value, str(issue.location), issue.code or "", issue.message)
    console.print(table)

    metrics_table = Table(title="Complexity")
    metrics_table.add_column("File")
    metrics_table.add_column("LOC", justify="right")
    metrics_table.add_column("Cyclomatic", justify="right")
    metrics_table.add_column("Cognitive", justify="right")
    metrics_table.add_column("Maintainability", justify="right")
    for name, m in outcome.metrics.items():
        metrics_table.add_row(
            name,
            str(m.lines_of_code),
            str(m.cyclomatic_complexity),
            str(m.cognitive_complexity),
            f"{m.maintainability_index:.1f}",
        )
    console.print(metrics_table)

    style = CONCLUSION_STYLE[outcome.decision.conclusion]
    console.print(
        f"\n[bold]Conclusion:[/bold] [{style}]{outcome.decision.conclusion.value}[/{style}] "
        f"| {outcome.decision.description}"
    )


@cli.group("config")
def config_group() -> None:
    """Configuration commands."""
    pass


@config_group.command("validate")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_validate(config_path: str | None) -> None:
    """Validate configuration file."""
    try:
        config = load_config(Path(config_path) if config_path else None)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        console.print("[red]Configuration is invalid:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        sys.exit(1)
    console.print("[green]✓ Configuration is valid[/green]")


@config_group.command("show")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_show(config_path: str | None) -> None:
    """Show current configuration."""
    config = load_config(Path(config_path) if config_path else None)

    console.print("\n[bold]Current Configuration[/bold]\n")

    table = Table(title="Severity Penalties")
    table.add_column("Severity")
    table.add_column("Penalty", justify="right")
    for severity, penalty in config.scoring.penalties.items():
        table.add_row(severity.value, str(penalty))
    console.print(table)

    console.print(f"\n[bold]Model:[/bold] {config.ai.model} ({config.ai.base_url})")
    console.print(f"[bold]Timeout:[/bold] {config.ai.timeout_seconds}s")
    console.print(f"[bold]Default base score:[/bold] {config.scoring.default_base_score}")
    console.print(f"[bold]Neutral above:[/bold] {config.check_run.neutral_issue_threshold} issues")
    console.print(f"[bold]Security scan:[/bold] {config.analysis.security_scan}")
    console.print(f"[bold]Auto-fix:[/bold] {config.auto_fix.enabled}")
    console.print(
        f"[bold]Auto-merge:[/bold] {config.auto_merge.enabled} "
        f"(label '{config.auto_merge.label}', min score {config.auto_merge.min_score})"
    )


@cli.command("serve")
@click.option("--port", type=int, default=None, help="Port to listen on")
@click.option("--host", default=None, help="Host to bind to")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def serve(port: int | None, host: str | None, config_path: str | None) -> None:
    """Start the webhook server."""
    config = _load_valid_config(config_path)

    install_default_handlers(config)
    app = create_webhook_app(config.github.webhook_secret)

    host = host or config.server.host
    port = port or config.server.port
    console.print(f"🚀 Starting webhook server on {host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
