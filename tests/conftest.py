"""
Shared fixtures: canned conversations, provider configs and a fake
streaming HTTP response that stands in for ``requests``.
"""

import json
from typing import Iterable, List, Optional
from unittest.mock import Mock

import pytest
import requests

from lumen._types.git import GitCommit, GitDiff
from lumen._types.model import Conversation, Message, ProviderConfig
from lumen._types.provider import ProviderType


class FakeResponse:
    """Minimal stand-in for a streamed ``requests.Response``."""

    def __init__(self, chunks: Iterable[bytes] = (), status_code: int = 200, text: str = ""):
        self.chunks = list(chunks)
        self.status_code = status_code
        self.text = text
        self.url = "https://backend.test/stream"
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def iter_content(self, chunk_size=None):
        yield from self.chunks

    def close(self):
        self.closed = True


def make_session(response: FakeResponse) -> Mock:
    session = Mock(spec=requests.Session)
    session.post.return_value = response
    return session


def sse(payloads: List[dict], done: bool = True) -> bytes:
    lines = [f"data: {json.dumps(p, ensure_ascii=False)}\n\n" for p in payloads]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def openai_chunks(texts: List[str]) -> bytes:
    payloads = [{"choices": [{"delta": {"role": "assistant"}}]}]
    payloads += [{"choices": [{"delta": {"content": t}}]} for t in texts]
    return sse(payloads)


def claude_chunks(texts: List[str]) -> bytes:
    events = [("message_start", {"type": "message_start", "message": {"id": "msg_1"}})]
    events.append(("ping", {"type": "ping"}))
    for t in texts:
        events.append(
            (
                "content_block_delta",
                {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": t}},
            )
        )
    events.append(("message_stop", {"type": "message_stop"}))
    return "".join(f"event: {name}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n" for name, data in events).encode("utf-8")


def ollama_chunks(texts: List[str]) -> bytes:
    lines = [
        json.dumps({"model": "llama3.2", "message": {"role": "assistant", "content": t}, "done": False}, ensure_ascii=False)
        for t in texts
    ]
    lines.append(json.dumps({"model": "llama3.2", "message": {"role": "assistant", "content": ""}, "done": True}))
    return ("\n".join(lines) + "\n").encode("utf-8")


def stream_body(variant: ProviderType, texts: List[str]) -> bytes:
    if variant is ProviderType.CLAUDE:
        return claude_chunks(texts)
    if variant is ProviderType.OLLAMA:
        return ollama_chunks(texts)
    return openai_chunks(texts)


def provider_config(variant: ProviderType, model: Optional[str] = None) -> ProviderConfig:
    return ProviderConfig(variant=variant, api_key="test-key", model=model)


@pytest.fixture
def conversation():
    return Conversation(
        messages=(
            Message(role="system", text="You explain diffs."),
            Message(role="user", text="Explain:\n+foo\n-bar é☃"),
        )
    )


@pytest.fixture
def staged_diff():
    return GitDiff(diff="+foo\n-bar", staged=True)


@pytest.fixture
def sample_commit():
    return GitCommit(
        hash="3f2a9c1d8e7b6a5f4e3d2c1b0a9f8e7d6c5b4a3f",
        author_name="Ada Lovelace",
        author_email="ada@example.com",
        date="Mon Jan 1 12:00:00 2024 +0000",
        message="fix: handle empty input",
        diff="diff --git a/x.py b/x.py\n+return []",
    )
