"""Producer orchestrator for parallel finding collection."""

import asyncio
import logging
from dataclasses import dataclass, field

from code_sensei.agents.reviewer import AIReviewer
from code_sensei.analysis.base import StaticAnalyzer
from code_sensei.models.context import CodeFile, ReviewContext
from code_sensei.models.issue import Issue
from code_sensei.models.review import AIReviewResult

logger = logging.getLogger(__name__)


@dataclass
class ProducerResults:
    """Everything the producers returned for one review, after the join."""

    ai_result: AIReviewResult | None = None
    static_issues: list[tuple[str, list[Issue]]] = field(default_factory=list)
    security_issues: list[Issue] = field(default_factory=list)
    failed_producers: list[str] = field(default_factory=list)

    def ordered_issue_lists(self) -> list[list[Issue]]:
        """Issue lists in aggregation order: AI, static analyzers, security."""
        lists: list[list[Issue]] = []
        if self.ai_result is not None:
            lists.append(list(self.ai_result.issues))
        lists.extend(issues for _, issues in self.static_issues)
        lists.append(self.security_issues)
        return lists


class ProducerOrchestrator:
    """Runs every finding producer over the same file snapshot."""

    def __init__(
        self,
        analyzers: list[StaticAnalyzer],
        reviewer: AIReviewer | None = None,
        security_scanner: StaticAnalyzer | None = None,
        timeout_seconds: float = 120,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            analyzers: Static analyzers, in aggregation order
            reviewer: AI reviewer; None skips the LLM call
            security_scanner: Security scanner; None disables the scan
            timeout_seconds: Maximum time to wait for the AI reviewer
        """
        self.analyzers = analyzers
        self.reviewer = reviewer
        self.security_scanner = security_scanner
        self.timeout_seconds = timeout_seconds

    async def run(self, files: list[CodeFile], context: ReviewContext) -> ProducerResults:
        """Execute all producers in parallel and wait for every one of them.

        A failing static producer contributes no issues; a failing or slow
        AI reviewer is replaced by the fallback result.

        Args:
            files: Changed files to review
            context: Pull request context

        Returns:
            Joined producer results
        """
        static_producers = list(self.analyzers)
        if self.security_scanner is not None:
            static_producers.append(self.security_scanner)

        logger.info(
            f"Starting review with {len(static_producers)} static producers"
            f"{' and the AI reviewer' if self.reviewer else ''}"
        )

        tasks = [
            asyncio.create_task(
                asyncio.to_thread(_run_static, producer, files),
                name=f"producer-{producer.name}",
            )
            for producer in static_producers
        ]
        if self.reviewer is not None:
            tasks.append(
                asyncio.create_task(
                    self._run_ai_with_timeout(files, context),
                    name=f"producer-{self.reviewer.name}",
                )
            )

        results = await asyncio.gather(*tasks, return_exceptions=True)

        joined = ProducerResults()
        for producer, result in zip(static_producers, results):
            if isinstance(result, BaseException):
                joined.failed_producers.append(producer.name)
                logger.error(f"Producer {producer.name} failed: {result}")
                issues: list[Issue] = []
            else:
                issues = result
                logger.info(f"Producer {producer.name} completed: {len(issues)} issues")

            if producer is self.security_scanner:
                joined.security_issues = issues
            else:
                joined.static_issues.append((producer.name, issues))

        if self.reviewer is not None:
            ai_result = results[-1]
            if isinstance(ai_result, asyncio.TimeoutError):
                joined.failed_producers.append(self.reviewer.name)
                logger.warning(f"AI reviewer timed out after {self.timeout_seconds}s")
                ai_result = AIReviewResult.fallback()
            elif isinstance(ai_result, BaseException):
                joined.failed_producers.append(self.reviewer.name)
                logger.error(f"AI reviewer failed: {type(ai_result).__name__}: {ai_result}")
                ai_result = AIReviewResult.fallback()
            joined.ai_result = ai_result

        logger.info(
            f"Producers complete: {len(tasks) - len(joined.failed_producers)} successful, "
            f"{len(joined.failed_producers)} failed"
        )
        return joined

    async def _run_ai_with_timeout(
        self, files: list[CodeFile], context: ReviewContext
    ) -> AIReviewResult:
        """Run the AI reviewer with timeout.

        Raises:
            asyncio.TimeoutError: If the reviewer exceeds the timeout
        """
        return await asyncio.wait_for(
            self.reviewer.review(files, context),
            timeout=self.timeout_seconds,
        )


def _run_static(producer: StaticAnalyzer, files: list[CodeFile]) -> list[Issue]:
    issues: list[Issue] = []
    for file in files:
        issues.extend(producer.analyze(file.content, file.filename, file.language))
    return issues
