"""Core functionality for branch-health"""

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Set, Tuple, Union

from rich.console import Console

from branch_health.config import Config
from branch_health.constants import (
    DEFAULT_OUTPUT_DIR,
    JSON_REPORT_NAME,
    MARKDOWN_REPORT_NAME,
)
from branch_health.exceptions import GitHubAPIError
from branch_health.formatters import render_json, render_markdown
from branch_health.logging_config import get_logger
from branch_health.models.branch import BranchInfo
from branch_health.models.report import Report
from branch_health.services.action_executor import ActionExecutor
from branch_health.services.branch_status_service import BranchStatusService
from branch_health.services.display_service import DisplayService
from branch_health.services.git_service import GitService
from branch_health.services.github_service import GitHubContext, GitHubService
from branch_health.services.report_service import assemble_report, sort_branches
from branch_health.utils.threading import get_optimal_worker_count

console = Console()
logger = get_logger(__name__)


class BranchHealth:
    """Analyzes remote branches and reports on their health."""

    def __init__(
        self,
        repo_path: str,
        config: Config,
        dry_run: Optional[bool] = None,
        output_dir: Union[str, Path] = DEFAULT_OUTPUT_DIR,
        workers: Optional[int] = None,
        verbose: bool = False,
        github_service: Optional[GitHubService] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize BranchHealth.

        Args:
            repo_path: Path to git repository
            config: Effective configuration
            dry_run: Overrides config.dry_run when not None
            output_dir: Directory the report files are written to
            workers: Worker count for branch analysis (auto-detected when None)
            verbose: Print per-action progress
            github_service: Pre-built GitHub service; built from the environment otherwise
            environ: Environment to read GitHub settings from (defaults to os.environ)
        """
        self.repo_path = repo_path
        self.config = config
        self.dry_run = config.dry_run if dry_run is None else dry_run
        self.output_dir = Path(output_dir)
        self.workers = workers
        self.verbose = verbose
        self.environ = os.environ if environ is None else environ

        self.git_service = GitService(repo_path)
        self.status_service = BranchStatusService(config)
        self.display_service = DisplayService(console=console)

        if github_service is None:
            context = GitHubContext.from_environment(self.git_service.get_remote_url(), self.environ)
            if context is not None:
                github_service = GitHubService(context)
            else:
                logger.info(
                    "GitHub token or repository not found. Running in local-only mode: "
                    "PR and protection lookups are disabled"
                )
        self.github_service = github_service
        self.default_branch: Optional[str] = None

    def _fetch_hosting_data(self) -> Tuple[Dict[str, int], Set[str]]:
        """Fetch open PRs and protected branches concurrently.

        A lookup GitHub cannot answer is treated as empty so the analysis still runs.
        """
        if self.github_service is None:
            return {}, set()

        try:
            # Resolve the lazy repository handle here so the two lookups share it
            self.github_service.gh_repo
        except Exception as e:
            logger.warning(f"Could not open GitHub repository {self.github_service.repository}: {e}")
            return {}, set()

        with ThreadPoolExecutor(max_workers=2) as executor:
            prs_future = executor.submit(self.github_service.get_open_prs)
            protected_future = executor.submit(self.github_service.get_protected_branches)
            open_prs = prs_future.result()
            protected = protected_future.result()

        if open_prs is None:
            logger.warning("Could not list open pull requests; assuming none")
            open_prs = {}
        if protected is None:
            logger.warning("Could not list protected branches; assuming none")
            protected = set()
        return open_prs, protected

    def analyze(self) -> List[BranchInfo]:
        """Classify every remote branch except the default branch.

        Returns:
            Branches sorted by days since last commit, oldest first
        """
        self.git_service.fetch()
        default_branch = self.git_service.get_default_branch(self.config.default_branch)
        self.default_branch = default_branch
        logger.info(f"Default branch: {default_branch}")

        names = [name for name in self.git_service.list_remote_branches() if name != default_branch]
        logger.info(f"Found {len(names)} branches to analyze")

        open_prs, protected = self._fetch_hosting_data()

        def classify(branch_name: str) -> BranchInfo:
            facts = self.git_service.collect_facts(branch_name, default_branch, protected, open_prs)
            return self.status_service.classify_one(facts)

        max_workers = get_optimal_worker_count(self.workers)
        if max_workers == 1 or len(names) <= 1:
            branches = [classify(name) for name in names]
        else:
            logger.debug(f"Using {max_workers} workers for parallel processing")
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                # map keeps input order regardless of completion order
                branches = list(executor.map(classify, names))

        return sort_branches(branches)

    def write_reports(self, report: Report) -> List[Path]:
        """Write the enabled report files and return their paths."""
        reporting = self.config.reporting
        if not (reporting.json or reporting.markdown):
            return []

        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = []
        if reporting.json:
            json_path = self.output_dir / JSON_REPORT_NAME
            json_path.write_text(render_json(report), encoding="utf-8")
            written.append(json_path)
        if reporting.markdown:
            md_path = self.output_dir / MARKDOWN_REPORT_NAME
            md_path.write_text(render_markdown(report), encoding="utf-8")
            written.append(md_path)

        for path in written:
            console.print(f"Report saved: {path}")
        return written

    def post_report_comment(self, report: Report) -> bool:
        """Post the Markdown report to the configured issue, if any."""
        issue_number = self.config.reporting.issue_number
        if not issue_number:
            return False
        if self.github_service is None:
            logger.warning(f"Cannot post report to issue #{issue_number}: GitHub API unavailable")
            return False

        try:
            self.github_service.post_issue_comment(issue_number, render_markdown(report))
        except GitHubAPIError as e:
            logger.error(f"Failed to post report to issue #{issue_number}: {e}")
            return False

        console.print(f"Report posted to issue #{issue_number}")
        return True

    def write_ci_outputs(self, report: Report) -> None:
        """Append summary counts to the file named by GITHUB_OUTPUT."""
        output_path = self.environ.get("GITHUB_OUTPUT")
        if not output_path:
            return

        summary = report.summary
        with open(output_path, "a", encoding="utf-8") as f:
            f.write(f"total-branches={summary.total_branches}\n")
            f.write(f"stale-branches={summary.stale_branches}\n")
            f.write(f"merged-branches={summary.merged_branches}\n")
            f.write(f"ahead-branches={summary.ahead_branches}\n")

    def run(self) -> Report:
        """Analyze, act, and report. Returns the assembled report."""
        console.print(f"Mode: {'DRY-RUN' if self.dry_run else 'APPLY'}")
        try:
            branches = self.analyze()
            assert self.default_branch is not None

            if self.verbose:
                self.display_service.display_branch_table(branches)

            executor = ActionExecutor(
                self.github_service,
                self.default_branch,
                self.config,
                dry_run=self.dry_run,
                verbose=self.verbose,
            )
            actions = executor.execute(branches)

            report = assemble_report(
                branches,
                actions,
                self.config.staleness,
                self.default_branch,
                self.dry_run,
                repository=self.github_service.repository if self.github_service else None,
            )

            self.write_reports(report)
            self.post_report_comment(report)
            self.write_ci_outputs(report)
            self.display_service.display_summary(report)
            return report
        finally:
            if self.github_service is not None:
                self.github_service.close()
