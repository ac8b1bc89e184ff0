"""Integration tests for complete branch health runs"""
import json
import logging

import pytest

from branch_health.config import AutoDeletePolicy, Config, ReportingOptions
from branch_health.constants import JSON_REPORT_NAME, MARKDOWN_REPORT_NAME
from branch_health.core import BranchHealth
from branch_health.exceptions import GitHubAPIError
from branch_health.models.branch import MergeStatus, ProposedAction, StalenessLevel
from branch_health.services.github_service import GitHubService


@pytest.fixture
def scenario(git_repo, push_branch, commit_on_main):
    """A remote with a merged, an ignored and a diverged feature branch."""
    if git_repo.git.version_info < (2, 38):
        pytest.skip("git merge-tree --write-tree needs git 2.38+")
    push_branch("merged-old", files={})
    push_branch("release/1.0", files={"release.txt": "1.0\n"}, days_ago=100)
    push_branch("feature/fresh", files={"fresh.txt": "fresh\n"}, days_ago=2)
    commit_on_main("main.txt", "main\n", days_ago=1)
    return git_repo


def _health(repo, temp_dir, config=None, **kwargs):
    kwargs.setdefault("dry_run", True)
    kwargs.setdefault("workers", 1)
    kwargs.setdefault("environ", {})
    return BranchHealth(
        repo.working_dir,
        config or Config(),
        output_dir=temp_dir / "reports",
        **kwargs,
    )


class TestAnalyze:
    """Test analysis against a real repository."""

    def test_branches_are_classified(self, scenario, temp_dir):
        branches = {b.name: b for b in _health(scenario, temp_dir).analyze()}

        assert set(branches) == {"merged-old", "release/1.0", "feature/fresh"}

        merged = branches["merged-old"]
        assert merged.merge_status == MergeStatus.MERGED
        assert merged.staleness_level == StalenessLevel.CRITICAL
        assert merged.proposed_action == ProposedAction.REVIEW

        release = branches["release/1.0"]
        assert release.is_ignored is True
        assert release.proposed_action == ProposedAction.KEEP

        fresh = branches["feature/fresh"]
        assert (fresh.ahead_count, fresh.behind_count) == (1, 1)
        assert fresh.merge_status == MergeStatus.UNMERGED
        assert fresh.proposed_action == ProposedAction.OPEN_PR
        assert fresh.changed_files == ["fresh.txt"]

    def test_sorted_most_stale_first(self, scenario, temp_dir):
        names = [b.name for b in _health(scenario, temp_dir).analyze()]
        assert names == ["merged-old", "release/1.0", "feature/fresh"]

    def test_parallel_matches_sequential(self, scenario, temp_dir):
        sequential = _health(scenario, temp_dir, workers=1).analyze()
        parallel = _health(scenario, temp_dir, workers=4).analyze()
        assert [(b.name, b.proposed_action) for b in parallel] == [
            (b.name, b.proposed_action) for b in sequential
        ]

    def test_configured_default_branch(self, scenario, temp_dir):
        health = _health(scenario, temp_dir, config=Config(default_branch="feature/fresh"))
        names = {b.name for b in health.analyze()}
        assert health.default_branch == "feature/fresh"
        assert "feature/fresh" not in names
        assert "main" in names


class TestRun:
    """Test complete runs."""

    def test_dry_run_writes_reports(self, scenario, temp_dir):
        report = _health(scenario, temp_dir).run()

        assert report.mode == "dry-run"
        assert report.repository == "unknown"
        assert report.default_branch == "main"
        assert report.summary.total_branches == 3

        data = json.loads((temp_dir / "reports" / JSON_REPORT_NAME).read_text(encoding="utf-8"))
        assert data["summary"]["totalBranches"] == 3
        assert [b["name"] for b in data["branches"]] == ["merged-old", "release/1.0", "feature/fresh"]

        markdown = (temp_dir / "reports" / MARKDOWN_REPORT_NAME).read_text(encoding="utf-8")
        assert markdown.startswith("# Branch Health Report")

    def test_dry_run_records_would_be_actions(self, scenario, temp_dir):
        config = Config(auto_delete=AutoDeletePolicy(enabled=True))
        report = _health(scenario, temp_dir, config=config).run()

        actions = {a.branch: a for a in report.actions}
        assert actions["merged-old"].action == ProposedAction.DELETE
        assert actions["merged-old"].message == "[DRY-RUN] Would delete branch"
        assert actions["feature/fresh"].action == ProposedAction.OPEN_PR
        assert all(a.success for a in report.actions)

    def test_config_dry_run_used_when_not_overridden(self, scenario, temp_dir):
        health = _health(scenario, temp_dir, config=Config(dry_run=False), dry_run=None)
        assert health.dry_run is False

    def test_apply_without_github_records_failures(self, scenario, temp_dir):
        report = _health(scenario, temp_dir, dry_run=False).run()
        assert report.mode == "apply"
        assert report.actions
        assert not any(a.success for a in report.actions)

    def test_reporting_disabled(self, scenario, temp_dir):
        config = Config(reporting=ReportingOptions(json=False, markdown=False))
        _health(scenario, temp_dir, config=config).run()
        assert not (temp_dir / "reports").exists()

    def test_github_output(self, scenario, temp_dir):
        output = temp_dir / "github_output"
        _health(scenario, temp_dir, environ={"GITHUB_OUTPUT": str(output)}).run()
        assert output.read_text().splitlines() == [
            "total-branches=3",
            "stale-branches=2",
            "merged-branches=1",
            "ahead-branches=2",
        ]


class TestRunWithGitHub:
    """Test runs with a (mocked) GitHub API."""

    def test_apply_mode_calls_github(self, scenario, temp_dir, mock_github_service):
        config = Config(auto_delete=AutoDeletePolicy(enabled=True))
        report = _health(
            scenario, temp_dir, config=config, dry_run=False, github_service=mock_github_service
        ).run()

        mock_github_service.delete_branch.assert_called_once_with("merged-old")
        mock_github_service.create_pull_request.assert_called_once()
        assert report.repository == "test/repo"
        assert all(a.success for a in report.actions)
        mock_github_service.close.assert_called_once()

    def test_protected_and_open_pr_lookups(self, scenario, temp_dir, mock_github_service):
        mock_github_service.get_protected_branches.return_value = {"merged-old"}
        mock_github_service.get_open_prs.return_value = {"feature/fresh": 11}
        branches = {
            b.name: b
            for b in _health(scenario, temp_dir, github_service=mock_github_service).analyze()
        }

        assert branches["merged-old"].merge_status == MergeStatus.PROTECTED
        assert branches["merged-old"].proposed_action == ProposedAction.KEEP
        assert branches["feature/fresh"].open_pr_number == 11
        assert branches["feature/fresh"].proposed_action == ProposedAction.KEEP

    def test_lookup_failures_fail_open(self, scenario, temp_dir, mock_github_service, caplog):
        mock_github_service.get_protected_branches.return_value = None
        mock_github_service.get_open_prs.return_value = None
        with caplog.at_level(logging.WARNING):
            branches = _health(scenario, temp_dir, github_service=mock_github_service).analyze()

        assert not any(b.is_protected or b.has_open_pr for b in branches)
        assert "assuming none" in caplog.text

    def test_issue_comment(self, scenario, temp_dir, mock_github_service):
        config = Config(reporting=ReportingOptions(issue_number=7))
        _health(scenario, temp_dir, config=config, github_service=mock_github_service).run()

        mock_github_service.post_issue_comment.assert_called_once()
        number, body = mock_github_service.post_issue_comment.call_args[0]
        assert number == 7
        assert body.startswith("# Branch Health Report")

    def test_issue_comment_failure_does_not_abort(self, scenario, temp_dir, mock_github_service):
        mock_github_service.post_issue_comment.side_effect = GitHubAPIError("post_issue_comment", "404")
        config = Config(reporting=ReportingOptions(issue_number=7))
        report = _health(scenario, temp_dir, config=config, github_service=mock_github_service).run()
        assert (temp_dir / "reports" / JSON_REPORT_NAME).exists()
        assert report.summary.total_branches == 3


class TestHostingLookups:
    """Test the concurrent open-PR and protection lookups."""

    def test_repository_handle_fetched_once(self, git_repo, temp_dir, github_context, mock_github):
        service = GitHubService(github_context, github=mock_github)
        health = _health(git_repo, temp_dir, github_service=service)

        assert health._fetch_hosting_data() == ({}, set())
        mock_github.get_repo.assert_called_once_with("test/repo")
        mock_github.get_repo.return_value.get_pulls.assert_called_once_with(state="open")
        mock_github.get_repo.return_value.get_branches.assert_called_once()

    def test_unreachable_repository_fails_open(self, git_repo, temp_dir, github_context, mock_github, caplog):
        mock_github.get_repo.side_effect = RuntimeError("network down")
        service = GitHubService(github_context, github=mock_github)
        health = _health(git_repo, temp_dir, github_service=service)

        with caplog.at_level(logging.WARNING):
            assert health._fetch_hosting_data() == ({}, set())
        assert "network down" in caplog.text
