import logging
from typing import List, Optional

from rich.console import Console

from lumen._types.errors import GitEntityError
from lumen._types.git import CommitSummary, GitCommit, GitDiff

from .command import run_git_command
from .picker import select_commit

logger = logging.getLogger(__name__)

# Number of commits offered by the interactive picker
DEFAULT_LIST_LIMIT = 50

_FIELD_SEP = "\x00"


def resolve_commit_hash(ref: str) -> str:
    """
    Resolve a commit-ish (hash, branch, ``HEAD~2``...) to a full SHA-1.

    Raises:
        GitEntityError: if ``ref`` does not name a commit.
    """
    returncode, stdout, stderr = run_git_command(
        ["git", "rev-parse", "--verify", "--quiet", "--end-of-options", f"{ref}^{{commit}}"]
    )
    if returncode != 0 or not stdout:
        raise GitEntityError(f"commit '{ref}' not found{': ' + stderr if stderr else ''}")
    return stdout


def get_commit(ref: str) -> GitCommit:
    """Look up a commit and its patch."""
    full_hash = resolve_commit_hash(ref)

    fmt = _FIELD_SEP.join(["%H", "%an", "%ae", "%ad", "%B"])
    returncode, stdout, stderr = run_git_command(
        ["git", "show", "--no-patch", f"--format={fmt}", full_hash]
    )
    if returncode != 0:
        raise GitEntityError(f"failed to read commit {full_hash[:7]}: {stderr}")
    fields = stdout.split(_FIELD_SEP, 4)
    if len(fields) != 5:
        raise GitEntityError(f"unexpected output from git show for {full_hash[:7]}")
    commit_hash, author_name, author_email, date, message = fields

    # --root makes the first commit diff against the empty tree
    returncode, patch, stderr = run_git_command(
        ["git", "diff-tree", "--patch", "--root", "--no-color", "--no-commit-id", full_hash],
        strip=False,
    )
    if returncode != 0:
        raise GitEntityError(f"failed to read diff for {full_hash[:7]}: {stderr}")

    return GitCommit(
        hash=commit_hash,
        author_name=author_name,
        author_email=author_email,
        date=date,
        message=message.strip(),
        diff=patch,
    )


def get_diff(staged: bool = False) -> GitDiff:
    """
    Get the working tree diff, or the staged diff when ``staged`` is set.

    An empty diff is returned as-is; callers decide whether that is an error.
    """
    command = ["git", "diff", "--no-color"]
    if staged:
        command.append("--staged")

    returncode, stdout, stderr = run_git_command(command, strip=False)
    if returncode != 0:
        raise GitEntityError(f"failed to get {'staged ' if staged else ''}diff: {stderr}")
    return GitDiff(diff=stdout, staged=staged)


def get_recent_commits(limit: int = DEFAULT_LIST_LIMIT) -> List[CommitSummary]:
    """List the most recent commits on the current branch, newest first."""
    returncode, stdout, stderr = run_git_command(
        ["git", "log", f"-n{limit}", "--format=%H%x09%an%x09%ar%x09%s"]
    )
    if returncode != 0:
        raise GitEntityError(f"failed to list commits: {stderr}")

    commits = []
    for line in stdout.splitlines():
        parts = line.split("\t", 3)
        if len(parts) != 4:
            continue
        commit_hash, author_name, relative_date, subject = parts
        commits.append(
            CommitSummary(
                hash=commit_hash,
                author_name=author_name,
                relative_date=relative_date,
                subject=subject,
            )
        )
    return commits


class GitRepository:
    """The git operations lumen consumes, bundled so they can be swapped in tests."""

    def __init__(self, console: Optional[Console] = None, list_limit: int = DEFAULT_LIST_LIMIT):
        self.console = console or Console(stderr=True)
        self.list_limit = list_limit

    def commit(self, ref: str) -> GitCommit:
        return get_commit(ref)

    def diff(self, staged: bool = False) -> GitDiff:
        return get_diff(staged)

    def recent_commits(self) -> List[CommitSummary]:
        return get_recent_commits(self.list_limit)

    def pick_commit(self) -> Optional[str]:
        """Show recent commits and return the hash the user picks, or None."""
        commits = self.recent_commits()
        if not commits:
            raise GitEntityError("no commits found in this repository")
        logger.debug("offering %d commits", len(commits))
        return select_commit(commits, self.console)
