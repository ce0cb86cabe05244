"""
Turns a git entity and a command intent into the conversation sent to a
provider.

Patch text is embedded verbatim. Nothing here truncates: if a diff is too
large for a backend's context window, the backend reports it.
"""

from typing import Optional

from lumen._data.prompts import (
    COMMIT_TYPES,
    CONTEXT_TEMPLATE,
    DRAFT_SYSTEM_PROMPT,
    DRAFT_TEMPLATE,
    EXPLAIN_COMMIT_TEMPLATE,
    EXPLAIN_DIFF_TEMPLATE,
    EXPLAIN_SYSTEM_PROMPT,
    QUESTION_TEMPLATE,
)
from lumen._types.errors import InvalidArguments
from lumen._types.git import GitCommit, GitDiff, GitEntity
from lumen._types.model import (
    CommandIntent,
    Conversation,
    DraftIntent,
    ExplainIntent,
    Message,
)


def _conversation(system: str, user: str) -> Conversation:
    return Conversation(
        messages=(
            Message(role="system", text=system.strip()),
            Message(role="user", text=user),
        )
    )


def explain_conversation(
    entity: GitEntity, question: Optional[str] = None
) -> Conversation:
    """Build the explain conversation for a commit or a diff."""
    if isinstance(entity, GitCommit):
        user = EXPLAIN_COMMIT_TEMPLATE.format(
            message=entity.message, diff=entity.patch
        )
    else:
        user = EXPLAIN_DIFF_TEMPLATE.format(
            origin=entity.describe(), diff=entity.patch
        )

    if question:
        user += QUESTION_TEMPLATE.format(question=question)

    return _conversation(EXPLAIN_SYSTEM_PROMPT, user)


def draft_conversation(diff: GitDiff, context: Optional[str] = None) -> Conversation:
    """Build the commit-message conversation for a staged diff."""
    user = DRAFT_TEMPLATE.format(
        commit_types=COMMIT_TYPES,
        context=CONTEXT_TEMPLATE.format(context=context) if context else "",
        diff=diff.patch,
    )
    return _conversation(DRAFT_SYSTEM_PROMPT, user)


def build_conversation(entity: GitEntity, intent: CommandIntent) -> Conversation:
    """
    Select the template for ``intent`` and fill it with ``entity``.

    ``ListIntent`` has no template of its own: the picked commit is
    explained with an ``ExplainIntent``.
    """
    if isinstance(intent, ExplainIntent):
        return explain_conversation(entity, intent.question)
    if isinstance(intent, DraftIntent):
        if not isinstance(entity, GitDiff):
            raise InvalidArguments("draft needs a diff, not a commit")
        return draft_conversation(entity, intent.context)
    raise InvalidArguments("list must resolve to a commit before prompting")
