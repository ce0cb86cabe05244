"""AI-powered explanations and commit messages for git history."""

__version__ = "0.4.0"
