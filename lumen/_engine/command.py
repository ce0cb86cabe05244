"""
Command orchestration: resolve the git entity for a command, build the
conversation, stream the provider's answer to the terminal and return it.

Each invocation ends at the first completed answer or the first error.
Argument problems are detected before any network call.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from lumen._engine.aggregator import StreamAggregator
from lumen._engine.git import GitRepository
from lumen._engine.prompt import build_conversation
from lumen._engine.provider import ProviderClient
from lumen._types.errors import GitEntityError, InvalidArguments
from lumen._types.git import GitCommit
from lumen._types.model import CommandIntent, DraftIntent, ExplainIntent, ListIntent

logger = logging.getLogger(__name__)


class LumenCommand:
    def __init__(
        self,
        client: ProviderClient,
        git: GitRepository,
        console: Optional[Console] = None,
        status_console: Optional[Console] = None,
    ):
        self.client = client
        self.git = git
        self.console = console or Console()
        self.status_console = status_console
        self.aggregator = StreamAggregator(self._write, status_console)

    def explain(
        self,
        sha: Optional[str] = None,
        diff: bool = False,
        staged: bool = False,
        query: Optional[str] = None,
    ) -> str:
        """Explain a commit (``sha``) or the current diff (``diff``); exactly one is allowed."""
        if sha and diff:
            raise InvalidArguments("`explain` accepts a commit SHA or --diff, not both")
        if not sha and not diff:
            raise InvalidArguments("`explain` expects a commit SHA or --diff to be present")

        if diff:
            entity = self.git.diff(staged=staged)
            if not entity.patch.strip():
                raise GitEntityError(f"no {entity.describe()} to explain")
        else:
            entity = self.git.commit(sha)

        return self.execute(ExplainIntent(entity=entity, question=query))

    def list_commits(self) -> str:
        return self.execute(ListIntent())

    def draft(self, context: Optional[str] = None) -> str:
        return self.execute(DraftIntent(context=context))

    def execute(self, intent: CommandIntent) -> str:
        if isinstance(intent, ListIntent):
            sha = self.git.pick_commit()
            if not sha:
                raise InvalidArguments("no commit selected")
            return self.execute(ExplainIntent(entity=self.git.commit(sha)))

        if isinstance(intent, DraftIntent):
            entity = self.git.diff(staged=True)
            if not entity.patch.strip():
                raise InvalidArguments(
                    "no staged changes to draft a commit message for (use `git add` first)"
                )
        else:
            entity = intent.entity
            if isinstance(entity, GitCommit):
                self._print_commit_header(entity)

        logger.info("running %s on %s", type(intent).__name__, entity.describe())
        conversation = build_conversation(entity, intent)
        return self.aggregator.collect(self.client.send(conversation))

    def _write(self, text: str) -> None:
        self.console.out(text, end="", highlight=False)

    def _print_commit_header(self, commit: GitCommit) -> None:
        header = Text()
        header.append(f"commit {commit.hash}\n", style="yellow")
        header.append(f"Author: {commit.author_name} <{commit.author_email}>\n")
        header.append(f"Date:   {commit.date}\n\n")
        header.append(commit.message)
        self.console.print(Panel(header, border_style="green", expand=False))
