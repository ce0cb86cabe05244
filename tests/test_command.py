import json
from io import StringIO
from unittest.mock import Mock

import pytest
import requests
from rich.console import Console

from lumen._engine.command import LumenCommand
from lumen._engine.git import GitRepository
from lumen._engine.provider import ProviderClient
from lumen._types.errors import GitEntityError, InvalidArguments, NetworkError, ProviderProtocolError
from lumen._types.git import GitDiff
from lumen._types.model import ProviderConfig
from lumen._types.provider import ProviderType

from .conftest import FakeResponse, make_session, ollama_chunks, openai_chunks


def make_command(session, git, variant=ProviderType.OPENAI):
    config = ProviderConfig(variant=variant, api_key="test-key")
    out = StringIO()
    command = LumenCommand(
        ProviderClient(config, session),
        git,
        console=Console(file=out, width=200),
    )
    return command, out


@pytest.fixture
def git(staged_diff, sample_commit):
    repo = Mock(spec=GitRepository)
    repo.diff.return_value = staged_diff
    repo.commit.return_value = sample_commit
    repo.pick_commit.return_value = sample_commit.hash
    return repo


def test_draft_end_to_end(git):
    session = make_session(FakeResponse([openai_chunks(["feat: ", "update foo"])]))
    command, out = make_command(session, git)

    answer = command.draft()

    assert answer == "feat: update foo"
    assert "feat: update foo" in out.getvalue()
    git.diff.assert_called_once_with(staged=True)

    sent = session.post.call_args.kwargs["json"]
    assert [m["role"] for m in sent["messages"]] == ["system", "user"]
    assert "+foo\n-bar" in sent["messages"][1]["content"]
    assert session.post.call_args.kwargs["stream"] is True


def test_draft_with_empty_staged_diff_makes_no_request(git):
    git.diff.return_value = GitDiff(diff="", staged=True)
    session = make_session(FakeResponse())
    command, _ = make_command(session, git)

    with pytest.raises(InvalidArguments):
        command.draft()
    session.post.assert_not_called()


def test_explain_rejects_both_sha_and_diff(git):
    session = make_session(FakeResponse())
    command, _ = make_command(session, git)

    with pytest.raises(InvalidArguments):
        command.explain(sha="abc123", diff=True)
    session.post.assert_not_called()
    git.commit.assert_not_called()
    git.diff.assert_not_called()


def test_explain_requires_sha_or_diff(git):
    session = make_session(FakeResponse())
    command, _ = make_command(session, git)

    with pytest.raises(InvalidArguments):
        command.explain()
    session.post.assert_not_called()


def test_explain_commit_prints_header_and_answer(git, sample_commit):
    session = make_session(FakeResponse([ollama_chunks(["It fixes ", "empty input."])]))
    command, out = make_command(session, git, variant=ProviderType.OLLAMA)

    answer = command.explain(sha="3f2a9c1", query="Is it safe?")

    assert answer == "It fixes empty input."
    git.commit.assert_called_once_with("3f2a9c1")
    printed = out.getvalue()
    assert sample_commit.hash in printed
    assert printed.index(sample_commit.hash) < printed.index("It fixes empty input.")
    assert "Is it safe?" in session.post.call_args.kwargs["json"]["messages"][1]["content"]


def test_explain_diff_uses_requested_origin(git):
    git.diff.return_value = GitDiff(diff="+x", staged=False)
    session = make_session(FakeResponse([openai_chunks(["ok"])]))
    command, _ = make_command(session, git)

    command.explain(diff=True)
    git.diff.assert_called_once_with(staged=False)


def test_explain_empty_diff_fails_before_request(git):
    git.diff.return_value = GitDiff(diff="  \n", staged=False)
    session = make_session(FakeResponse())
    command, _ = make_command(session, git)

    with pytest.raises(GitEntityError):
        command.explain(diff=True)
    session.post.assert_not_called()


def test_list_explains_the_picked_commit(git, sample_commit):
    session = make_session(FakeResponse([openai_chunks(["summary"])]))
    command, _ = make_command(session, git)

    assert command.list_commits() == "summary"
    git.commit.assert_called_once_with(sample_commit.hash)


def test_list_without_selection_makes_no_request(git):
    git.pick_commit.return_value = None
    session = make_session(FakeResponse())
    command, _ = make_command(session, git)

    with pytest.raises(InvalidArguments):
        command.list_commits()
    session.post.assert_not_called()


def test_http_429_surfaces_status_and_no_answer(git):
    body = json.dumps({"error": {"message": "Rate limit reached", "type": "rate_limit_exceeded"}})
    response = FakeResponse(status_code=429, text=body)
    command, out = make_command(make_session(response), git)

    with pytest.raises(ProviderProtocolError) as info:
        command.draft()

    assert info.value.status == 429
    assert "Rate limit reached" in str(info.value)
    assert out.getvalue() == ""
    assert response.closed


def test_connection_failure_is_a_network_error(git):
    session = Mock(spec=requests.Session)
    session.post.side_effect = requests.exceptions.ConnectionError("refused")
    command, _ = make_command(session, git)

    with pytest.raises(NetworkError):
        command.draft()


def test_mid_stream_error_keeps_partial_output(git):
    chunks = [
        b'data: {"choices": [{"delta": {"content": "feat: half"}}]}\n\n',
        b'data: {"error": {"message": "server overloaded"}}\n\n',
    ]
    command, out = make_command(make_session(FakeResponse(chunks)), git)

    with pytest.raises(ProviderProtocolError, match="server overloaded"):
        command.draft()
    assert "feat: half" in out.getvalue()


def test_empty_stream_is_an_empty_answer(git):
    command, out = make_command(make_session(FakeResponse([b"data: [DONE]\n\n"])), git)
    assert command.draft() == ""
    assert out.getvalue() == ""


class RecordingStatusConsole:
    """Console stand-in that records whether its spinner is showing."""

    def __init__(self):
        self.spinning = False

    def status(self, *args, **kwargs):
        console = self

        class _Status:
            def __enter__(self):
                console.spinning = True

            def __exit__(self, *exc):
                console.spinning = False

        return _Status()


def test_spinner_covers_the_request(git):
    status_console = RecordingStatusConsole()
    spinning_during_post = []

    def post(*args, **kwargs):
        spinning_during_post.append(status_console.spinning)
        return FakeResponse([openai_chunks(["feat: x"])])

    session = Mock(spec=requests.Session)
    session.post.side_effect = post
    command = LumenCommand(
        ProviderClient(ProviderConfig(variant=ProviderType.OPENAI, api_key="k"), session),
        git,
        console=Console(file=StringIO()),
        status_console=status_console,
    )

    assert command.draft() == "feat: x"
    assert spinning_during_post == [True]
    assert not status_console.spinning


def test_send_defers_the_request_until_iterated(conversation):
    session = make_session(FakeResponse([openai_chunks(["hi"])]))
    client = ProviderClient(ProviderConfig(variant=ProviderType.OPENAI, api_key="k"), session)

    fragments = client.send(conversation)
    session.post.assert_not_called()

    assert list(fragments) == ["hi"]
    session.post.assert_called_once()
