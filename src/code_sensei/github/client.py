"""GitHub API client for PR operations."""

import logging

from github import Github
from github.CheckRun import CheckRun
from github.GithubException import GithubException
from github.PullRequest import PullRequest
from github.Repository import Repository

from code_sensei.analysis.languages import detect_language, is_binary_file
from code_sensei.autofix.fixer import FixResult
from code_sensei.models.context import CodeFile, ReviewContext
from code_sensei.models.review import CheckRunDecision

logger = logging.getLogger(__name__)


class GitHubClient:
    """Client for GitHub API operations."""

    def __init__(self, token: str, base_url: str | None = None) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token or app token
            base_url: Optional base URL for GitHub Enterprise
        """
        self._token = token
        self._base_url = base_url
        if base_url:
            self._gh = Github(token, base_url=base_url)
        else:
            self._gh = Github(token)

    def get_repo(self, repo_name: str) -> Repository:
        """Get a repository by name.

        Args:
            repo_name: Repository in "owner/name" format

        Returns:
            Repository object
        """
        return self._gh.get_repo(repo_name)

    def get_changed_files(
        self,
        pr: PullRequest,
        max_files: int = 20,
        max_changes: int = 1000,
    ) -> list[CodeFile]:
        """Fetch the reviewable changed files of a PR.

        Removed files, binary files and files with more than ``max_changes``
        changed lines are skipped.

        Args:
            pr: Pull request object
            max_files: Maximum number of files to return
            max_changes: Maximum changed lines per file

        Returns:
            File snapshots at the PR head
        """
        files: list[CodeFile] = []
        repo = pr.base.repo

        for file in pr.get_files():
            if len(files) >= max_files:
                logger.info(f"Reached the limit of {max_files} files, skipping the rest")
                break
            if file.status == "removed":
                continue
            if file.changes > max_changes:
                logger.info(f"Skipping {file.filename}: {file.changes} changes")
                continue
            if is_binary_file(file.filename):
                continue

            try:
                content = repo.get_contents(file.filename, ref=pr.head.sha)
                text = content.decoded_content.decode("utf-8")
            except (GithubException, UnicodeDecodeError, AttributeError) as e:
                logger.warning(f"Could not fetch {file.filename}: {e}")
                continue

            files.append(
                CodeFile(
                    filename=file.filename,
                    content=text,
                    language=detect_language(file.filename),
                    patch=file.patch,
                    additions=file.additions,
                    deletions=file.deletions,
                    changes=file.changes,
                )
            )

        return files

    def get_approval_count(self, pr: PullRequest) -> int:
        """Count reviewers whose latest review is an approval."""
        latest: dict[str, str] = {}
        for review in pr.get_reviews():
            if review.user is None or review.state in ("COMMENTED", "PENDING"):
                continue
            latest[review.user.login] = review.state
        return sum(1 for state in latest.values() if state == "APPROVED")

    def build_review_context(self, pr: PullRequest, repo: Repository) -> ReviewContext:
        """Build review context from a PR.

        Args:
            pr: Pull request object
            repo: Repository object

        Returns:
            ReviewContext with PR information
        """
        return ReviewContext(
            repo_name=repo.full_name,
            pr_number=pr.number,
            pr_title=pr.title,
            pr_description=pr.body or "",
            base_branch=pr.base.ref,
            head_branch=pr.head.ref,
            head_sha=pr.head.sha,
            author=pr.user.login,
            labels=[label.name for label in pr.get_labels()],
            approval_count=self.get_approval_count(pr),
        )

    def create_check_run(self, repo: Repository, head_sha: str, name: str) -> CheckRun:
        """Create an in-progress check-run on the PR head commit."""
        logger.info(f"Creating check-run '{name}' on {head_sha[:7]}")
        return repo.create_check_run(name=name, head_sha=head_sha, status="in_progress")

    def complete_check_run(
        self,
        check_run: CheckRun,
        decision: CheckRunDecision,
        output: dict[str, str],
    ) -> None:
        """Mark a check-run completed with the decided conclusion.

        Args:
            check_run: Check-run created for this review
            decision: Conclusion and description
            output: Title, summary and text for the check-run page
        """
        logger.info(f"Completing check-run {check_run.id}: {decision.conclusion.value}")
        check_run.edit(
            status="completed",
            conclusion=decision.conclusion.value,
            output=output,
        )

    def abort_check_run(self, check_run: CheckRun, output: dict[str, str]) -> bool:
        """Complete a check-run left in progress by a failed review.

        The conclusion is neutral so the failed run never blocks the PR.
        Failures are logged, never raised.

        Returns:
            True if the check-run was completed
        """
        try:
            check_run.edit(status="completed", conclusion="neutral", output=output)
            return True
        except GithubException as e:
            logger.error(f"Could not complete check-run {check_run.id}: {e}")
            return False

    def find_review_check_run(
        self, repo: Repository, head_sha: str, name: str
    ) -> CheckRun | None:
        """Latest completed check-run with this name on a commit, if any."""
        check_runs = repo.get_commit(head_sha).get_check_runs(
            check_name=name, status="completed"
        )
        return next(iter(check_runs), None)

    def post_summary_comment(self, pr: PullRequest, body: str) -> None:
        """Post the review summary as an issue comment."""
        pr.create_issue_comment(body)
        logger.info(f"Posted summary comment on PR #{pr.number}")

    def post_inline_comments(self, pr: PullRequest, comments: list[dict]) -> int:
        """Post inline comments as a single review.

        Args:
            pr: Pull request
            comments: Payloads with path, line, side and body

        Returns:
            Number of comments posted
        """
        if not comments:
            return 0

        head_commit = pr.get_commits().reversed[0]
        try:
            pr.create_review(commit=head_commit, event="COMMENT", comments=comments)
            return len(comments)
        except GithubException as e:
            # One comment on a line outside the diff rejects the whole review
            logger.warning(f"Batch review rejected ({e.status}), posting comments one by one")

        posted_count = 0
        for comment in comments:
            try:
                pr.create_review_comment(
                    body=comment["body"],
                    commit=head_commit,
                    path=comment["path"],
                    line=comment["line"],
                )
                posted_count += 1
            except GithubException as e:
                logger.warning(
                    f"Could not post inline comment on {comment['path']}:{comment['line']}: {e}"
                )
        return posted_count

    def post_error_comment(self, pr: PullRequest, body: str) -> bool:
        """Post an error comment; failures are logged, never raised.

        Returns:
            True if the comment was posted
        """
        try:
            pr.create_issue_comment(body)
            return True
        except GithubException as e:
            logger.error(f"Could not post error comment on PR #{pr.number}: {e}")
            return False

    def commit_fixes(
        self,
        repo: Repository,
        branch: str,
        results: list[FixResult],
        message: str,
        head_sha: str,
    ) -> int:
        """Commit each fixed file to the PR branch.

        The blob sha is taken at ``head_sha``, the commit the fixes were
        computed from, so GitHub rejects the write with 409 if the file
        changed on the branch since.

        Args:
            repo: Repository holding the branch
            branch: Head branch of the PR
            results: Changed files from the auto-fixer
            message: Commit message
            head_sha: Commit the reviewed file contents were read at

        Returns:
            Number of files committed
        """
        committed = 0
        for result in results:
            try:
                reviewed = repo.get_contents(result.filename, ref=head_sha)
                repo.update_file(
                    path=result.filename,
                    message=message,
                    content=result.fixed,
                    sha=reviewed.sha,
                    branch=branch,
                )
                committed += 1
                logger.info(f"Committed {len(result.applied)} fixes to {result.filename}")
            except GithubException as e:
                logger.error(f"Could not commit fixes to {result.filename}: {e}")
        return committed

    def merge(self, pr: PullRequest, merge_method: str = "squash") -> bool:
        """Merge a pull request.

        GitHub refusing the merge (conflicts, failing required checks) is
        logged, not raised.

        Returns:
            True if GitHub reports the PR merged
        """
        try:
            status = pr.merge(
                commit_title=f"Auto-merge: {pr.title}",
                commit_message="Automatically merged by Code Sensei after passing all checks and reviews.",
                merge_method=merge_method,
            )
        except GithubException as e:
            logger.error(f"Failed to auto-merge PR #{pr.number}: {e}")
            return False
        logger.info(f"Merge of PR #{pr.number}: {status.message}")
        return bool(status.merged)
