from .engine import GitRepository, get_commit, get_diff, get_recent_commits
