"""Review pipeline: producers, aggregation, classification and GitHub delivery.

The pure part (``ReviewPipeline.run``) takes a file snapshot and a PR context
and returns every decision the bot needs. ``review_pull_request`` wraps it
with the GitHub I/O: check-run, comments, auto-fix commits and auto-merge.
``check_auto_merge`` repeats only the merge decision when approvals or labels
arrive after the review.
"""

import logging
from dataclasses import dataclass, field

from github.GithubException import GithubException
from github.PullRequest import PullRequest

from code_sensei.agents.llm_client import LLMClient, LLMConfig
from code_sensei.agents.reviewer import AIReviewer
from code_sensei.analysis.analyzers import default_analyzers
from code_sensei.analysis.base import StaticAnalyzer
from code_sensei.analysis.complexity import estimate
from code_sensei.analysis.security import SecurityScanner
from code_sensei.autofix.fixer import AutoFixer
from code_sensei.config import Config
from code_sensei.github.client import GitHubClient
from code_sensei.github.formatter import GitHubFormatter, parse_check_run_score
from code_sensei.models.context import CodeFile, ReviewContext
from code_sensei.models.review import (
    Actionability,
    AggregatedReview,
    AIReviewResult,
    CheckRunDecision,
    ComplexityMetrics,
    Conclusion,
    MergeDecision,
)
from code_sensei.orchestrator.aggregator import ReviewAggregator
from code_sensei.orchestrator.classifier import classify
from code_sensei.orchestrator.orchestrator import ProducerOrchestrator
from code_sensei.orchestrator.policy import decide_conclusion, is_merge_eligible

logger = logging.getLogger(__name__)

# Conclusions a completed review check-run can carry
_CONCLUSIONS = {c.value for c in Conclusion}


@dataclass
class ReviewOutcome:
    """Everything decided for one review."""

    review: AggregatedReview
    actionability: Actionability
    decision: CheckRunDecision
    merge: MergeDecision
    metrics: dict[str, ComplexityMetrics] = field(default_factory=dict)
    failed_producers: list[str] = field(default_factory=list)
    ai_result: AIReviewResult | None = None


class ReviewPipeline:
    """Runs producers over a file snapshot and derives the review decisions."""

    def __init__(
        self,
        config: Config,
        reviewer: AIReviewer | None = None,
        analyzers: list[StaticAnalyzer] | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Application configuration
            reviewer: AI reviewer; None runs static analysis only
            analyzers: Static analyzers (defaults to every built-in analyzer)
        """
        self.config = config
        self.reviewer = reviewer
        self.analyzers = analyzers if analyzers is not None else default_analyzers()

    async def run(self, files: list[CodeFile], context: ReviewContext) -> ReviewOutcome:
        """Review a file snapshot.

        Args:
            files: Changed files
            context: Pull request context

        Returns:
            ReviewOutcome with the aggregated review and all decisions
        """
        orchestrator = ProducerOrchestrator(
            analyzers=self.analyzers,
            reviewer=self.reviewer,
            security_scanner=SecurityScanner() if self.config.analysis.security_scan else None,
            timeout_seconds=self.config.ai.timeout_seconds,
        )
        results = await orchestrator.run(files, context)

        metrics = {f.filename: estimate(f.content, f.language) for f in files}

        review = ReviewAggregator(self.config.scoring).aggregate(
            results.ordered_issue_lists(), results.ai_result
        )
        actionability = classify(review, self.config.check_run.blocking)
        decision = decide_conclusion(
            review,
            blocking_count=len(actionability.blocking),
            security_count=review.security_count,
            policy=self.config.check_run,
        )
        merge = is_merge_eligible(
            decision,
            review.overall_score,
            context.labels,
            context.approval_count,
            self.config.auto_merge,
        )

        logger.info(
            f"Review of {context.repo_name} PR #{context.pr_number}: "
            f"{decision.conclusion.value} ({decision.description})"
        )

        return ReviewOutcome(
            review=review,
            actionability=actionability,
            decision=decision,
            merge=merge,
            metrics=metrics,
            failed_producers=results.failed_producers,
            ai_result=results.ai_result,
        )


async def review_pull_request(
    repo: str,
    pr_number: int,
    config: Config,
    client: GitHubClient | None = None,
    dry_run: bool = False,
) -> ReviewOutcome | None:
    """Review a PR end to end and publish the results on GitHub.

    The check-run is completed as soon as the outcome is known. A failure
    before that completes it as neutral, so no run is left in progress.
    Failures are logged and reported with a best-effort error comment;
    nothing is retried.

    Args:
        repo: Repository in "owner/name" format
        pr_number: Pull request number
        config: Application configuration
        client: GitHub client (built from the config when None)
        dry_run: Compute the outcome without writing to GitHub

    Returns:
        ReviewOutcome, or None if the review failed
    """
    client = client or GitHubClient(config.github.token, base_url=config.github.base_url)
    formatter = GitHubFormatter()
    pr = None
    pending_check_run = None

    try:
        repo_obj = client.get_repo(repo)
        pr = repo_obj.get_pull(pr_number)
        context = client.build_review_context(pr, repo_obj)
        logger.info(f"Reviewing PR #{pr_number}: {context.pr_title}")

        if not dry_run:
            pending_check_run = client.create_check_run(
                repo_obj, context.head_sha, config.check_run.name
            )

        files = client.get_changed_files(
            pr,
            max_files=config.analysis.max_files,
            max_changes=config.analysis.max_file_changes,
        )
        logger.info(f"Fetched {len(files)} reviewable files")

        llm_config = LLMConfig(
            api_key=config.ai.api_key,
            model=config.ai.model,
            base_url=config.ai.base_url,
            max_tokens=config.ai.max_tokens,
            timeout=config.ai.timeout_seconds,
        )
        async with LLMClient(llm_config) as llm:
            pipeline = ReviewPipeline(config, reviewer=AIReviewer(llm))
            outcome = await pipeline.run(files, context)

        if dry_run:
            return outcome

        client.complete_check_run(
            pending_check_run,
            outcome.decision,
            formatter.format_check_run_output(outcome.review, outcome.decision, outcome.metrics),
        )
        pending_check_run = None

        client.post_summary_comment(
            pr,
            formatter.format_summary_comment(
                outcome.review, outcome.actionability, outcome.failed_producers
            ),
        )
        posted = client.post_inline_comments(
            pr, formatter.format_inline_comments(outcome.review.issues)
        )
        logger.info(f"Posted {posted} inline comments")

        committed = 0
        if config.auto_fix.enabled and outcome.actionability.auto_fixable:
            fixes = AutoFixer().fix_files(
                {f.filename: f.content for f in files}, outcome.actionability.auto_fixable
            )
            committed = client.commit_fixes(
                repo_obj,
                context.head_branch,
                fixes,
                config.auto_fix.commit_message,
                context.head_sha,
            )
            if committed:
                client.post_summary_comment(pr, formatter.format_autofix_notice(fixes))

        if config.auto_merge.enabled:
            if committed:
                # The fix commit triggers a fresh review of the new head
                logger.info("Skipping auto-merge: fixes were just committed")
            elif outcome.merge.allowed:
                _merge_and_announce(client, formatter, pr, config)
            else:
                logger.info(f"Auto-merge not allowed: {'; '.join(outcome.merge.reasons)}")

        return outcome

    except Exception as e:
        logger.exception(f"Error reviewing {repo} PR #{pr_number}: {e}")
        if not dry_run:
            if pending_check_run is not None:
                client.abort_check_run(pending_check_run, formatter.format_check_run_error(e))
            if pr is not None:
                client.post_error_comment(pr, formatter.format_error_comment(e))
        return None


async def check_auto_merge(
    repo: str,
    pr_number: int,
    config: Config,
    client: GitHubClient | None = None,
) -> MergeDecision | None:
    """Re-check merge eligibility of an already reviewed PR.

    Labels and approvals usually arrive after the review ran. The decision
    reuses the conclusion and score recorded on the latest completed review
    check-run of the PR head, so no new review is needed.

    Args:
        repo: Repository in "owner/name" format
        pr_number: Pull request number
        config: Application configuration
        client: GitHub client (built from the config when None)

    Returns:
        MergeDecision, or None when the head has no usable review
    """
    if not config.auto_merge.enabled:
        logger.debug("Auto-merge disabled, nothing to re-check")
        return None

    client = client or GitHubClient(config.github.token, base_url=config.github.base_url)
    formatter = GitHubFormatter()

    try:
        repo_obj = client.get_repo(repo)
        pr = repo_obj.get_pull(pr_number)
        if pr.state != "open":
            logger.info(f"PR #{pr_number} is {pr.state}, not merging")
            return None
        context = client.build_review_context(pr, repo_obj)

        check_run = client.find_review_check_run(
            repo_obj, context.head_sha, config.check_run.name
        )
        if check_run is None:
            logger.info(f"No completed review on {context.head_sha[:7]} of PR #{pr_number}")
            return None

        score = parse_check_run_score(check_run.output.summary)
        if score is None or check_run.conclusion not in _CONCLUSIONS:
            logger.info(
                f"Review check-run {check_run.id} has no usable result "
                f"({check_run.conclusion}), not merging"
            )
            return None

        decision = CheckRunDecision(Conclusion(check_run.conclusion), check_run.output.title or "")
        merge = is_merge_eligible(
            decision, score, context.labels, context.approval_count, config.auto_merge
        )
        if merge.allowed:
            _merge_and_announce(client, formatter, pr, config)
        else:
            logger.info(f"Auto-merge not allowed: {'; '.join(merge.reasons)}")
        return merge

    except GithubException as e:
        logger.error(f"Could not re-check auto-merge of {repo} PR #{pr_number}: {e}")
        return None


def _merge_and_announce(
    client: GitHubClient, formatter: GitHubFormatter, pr: PullRequest, config: Config
) -> bool:
    merged = client.merge(pr, config.auto_merge.merge_method)
    if not merged:
        return False
    try:
        client.post_summary_comment(pr, formatter.format_merge_notice())
    except GithubException as e:
        logger.warning(f"PR #{pr.number} merged but the notice was not posted: {e}")
    return True
