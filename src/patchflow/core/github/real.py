"""Production implementation of GitHub operations using the gh CLI."""

import json
from pathlib import Path

from patchflow.core.github.abc import GitHub
from patchflow.core.github.parsing import (
    parse_fork_chain,
    parse_issue_number,
    parse_open_prs,
    parse_pr_state,
    parse_workflow_runs,
)
from patchflow.core.github.types import (
    CreateIssueResult,
    ForkChain,
    OpenPullRequest,
    PRState,
    RepoRef,
    WorkflowRun,
)
from patchflow.core.subprocess import execute_gh_command


class RealGitHub(GitHub):
    """Production implementation using gh CLI.

    gh failures (not installed, not authenticated, API errors) surface as
    RuntimeError from execute_gh_command.
    """

    def get_fork_chain(self, repo_root: Path) -> ForkChain:
        # gh substitutes {owner}/{repo} from the repository in repo_root
        stdout = execute_gh_command(["gh", "api", "repos/{owner}/{repo}"], repo_root)
        return parse_fork_chain(json.loads(stdout))

    def create_issue(
        self, repo_root: Path, repo: RepoRef, title: str, body: str, labels: list[str]
    ) -> CreateIssueResult:
        cmd = [
            "gh",
            "issue",
            "create",
            "--repo",
            repo.full_name,
            "--title",
            title,
            "--body",
            body,
        ]
        for label in labels:
            cmd.extend(["--label", label])

        # gh issue create returns a URL like: https://github.com/owner/repo/issues/123
        url = execute_gh_command(cmd, repo_root).strip()
        return CreateIssueResult(number=parse_issue_number(url), url=url)

    def create_pr(
        self,
        repo_root: Path,
        *,
        repo: RepoRef,
        head: str,
        base: str,
        title: str,
        body: str,
        draft: bool = False,
    ) -> str:
        cmd = [
            "gh",
            "pr",
            "create",
            "--repo",
            repo.full_name,
            "--head",
            head,
            "--base",
            base,
            "--title",
            title,
            "--body",
            body,
        ]
        if draft:
            cmd.append("--draft")
        return execute_gh_command(cmd, repo_root)

    def get_pr_state(self, repo_root: Path, repo: RepoRef, pr_number: int) -> PRState:
        cmd = ["gh", "pr", "view", str(pr_number), "--repo", repo.full_name, "--json", "state"]
        stdout = execute_gh_command(cmd, repo_root)
        return parse_pr_state(json.loads(stdout))

    def merge_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, squash: bool) -> None:
        cmd = ["gh", "pr", "merge", str(pr_number), "--repo", repo.full_name]
        cmd.append("--squash" if squash else "--merge")
        execute_gh_command(cmd, repo_root)

    def list_workflow_runs(self, repo_root: Path, repo: RepoRef, *, ref: str) -> list[WorkflowRun]:
        cmd = [
            "gh",
            "run",
            "list",
            "--repo",
            repo.full_name,
            "--branch",
            ref,
            "--json",
            "databaseId,status,conclusion,headBranch,headSha,name",
        ]
        stdout = execute_gh_command(cmd, repo_root)
        return parse_workflow_runs(json.loads(stdout))

    def list_open_prs(self, repo_root: Path, repo: RepoRef, *, base: str) -> list[OpenPullRequest]:
        cmd = [
            "gh",
            "pr",
            "list",
            "--repo",
            repo.full_name,
            "--base",
            base,
            "--state",
            "open",
            "--json",
            "number,title,author,headRefName,baseRefName,files",
        ]
        stdout = execute_gh_command(cmd, repo_root)
        return parse_open_prs(json.loads(stdout))

    def close_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, comment: str) -> None:
        cmd = [
            "gh",
            "pr",
            "close",
            str(pr_number),
            "--repo",
            repo.full_name,
            "--comment",
            comment,
        ]
        execute_gh_command(cmd, repo_root)
