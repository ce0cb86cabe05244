"""
Per-backend request building, stream parsing and error extraction.

The set of backends is closed, so each operation is a table keyed by
``ProviderType`` rather than a class hierarchy. ``_check_exhaustive`` runs at
import time and refuses to load if a variant is missing from any table.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from lumen._data.providers import ANTHROPIC_VERSION, CLAUDE_MAX_TOKENS, SSE_DATA_PREFIX, SSE_DONE
from lumen._engine.provider.stream import LineParser, StreamDecoder
from lumen._types.errors import ProviderProtocolError
from lumen._types.model import Conversation, ProviderConfig, RequestSpec, StreamFragment
from lumen._types.provider import ProviderType

logger = logging.getLogger(__name__)


# --- Request builders ---


def _chat_messages(conversation: Conversation) -> List[Dict[str, str]]:
    return [{"role": m.role, "content": m.text} for m in conversation.messages]


def _openai_style_request(conversation: Conversation, config: ProviderConfig) -> RequestSpec:
    return RequestSpec(
        url=config.endpoint,
        headers={
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        },
        body={
            "model": config.effective_model,
            "messages": _chat_messages(conversation),
            "stream": True,
        },
    )


def _claude_request(conversation: Conversation, config: ProviderConfig) -> RequestSpec:
    # The messages API takes the system prompt as a top-level field.
    body: Dict[str, Any] = {
        "model": config.effective_model,
        "max_tokens": CLAUDE_MAX_TOKENS,
        "messages": [
            {"role": m.role, "content": m.text}
            for m in conversation.messages
            if m.role != "system"
        ],
        "stream": True,
    }
    if conversation.system_text:
        body["system"] = conversation.system_text

    return RequestSpec(
        url=config.endpoint,
        headers={
            "x-api-key": config.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        },
        body=body,
    )


def _ollama_request(conversation: Conversation, config: ProviderConfig) -> RequestSpec:
    return RequestSpec(
        url=config.endpoint,
        headers={"Content-Type": "application/json"},
        body={
            "model": config.effective_model,
            "messages": _chat_messages(conversation),
            "stream": True,
        },
    )


def _phind_request(conversation: Conversation, config: ProviderConfig) -> RequestSpec:
    return RequestSpec(
        url=config.endpoint,
        headers={
            "Content-Type": "application/json",
            "User-Agent": "",
            "Accept": "*/*",
            "Accept-Encoding": "Identity",
        },
        body={
            "additional_extension_context": "",
            "allow_magic_buttons": True,
            "is_vscode_extension": True,
            "message_history": [
                {"content": m.text, "metadata": {}, "role": m.role}
                for m in conversation.messages
            ],
            "requested_model": config.effective_model,
            "user_input": conversation.last_user_text,
        },
    )


# --- Stream line parsers ---


def _load_json(payload: str) -> Dict[str, Any]:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ProviderProtocolError(f"malformed stream payload: {e}: {payload[:80]!r}")
    if not isinstance(data, dict):
        raise ProviderProtocolError(f"unexpected stream payload: {payload[:80]!r}")
    return data


def _openai_error(data: Mapping[str, Any]) -> Optional[str]:
    """``{"error": {"message": ..., "type": ..., "code": ...}}``"""
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message") or error.get("code") or error.get("type")
        return str(message) if message else json.dumps(error)
    return str(error) if error else None


def _claude_error(data: Mapping[str, Any]) -> Optional[str]:
    """``{"type": "error", "error": {"type": "overloaded_error", "message": ...}}``"""
    error = data.get("error")
    if data.get("type") != "error" and not error:
        return None
    if not isinstance(error, dict):
        return str(error or data.get("message") or "unknown error")
    kind, message = error.get("type"), error.get("message")
    if kind and message:
        return f"{kind}: {message}"
    return str(message or kind or json.dumps(error))


def _ollama_error(data: Mapping[str, Any]) -> Optional[str]:
    """``{"error": "model 'x' not found"}``"""
    error = data.get("error")
    return str(error) if error else None


def _phind_error(data: Mapping[str, Any]) -> Optional[str]:
    # Phind answers plain HTTP failures with a ``detail`` field
    detail = data.get("detail")
    if detail:
        return detail if isinstance(detail, str) else json.dumps(detail)
    return _openai_error(data)


def _sse_data(line: str) -> Optional[str]:
    """Return the payload of an SSE ``data:`` line, or None for other fields."""
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    return line[len(SSE_DATA_PREFIX):].lstrip()


def _parse_openai_style_line(line: str) -> Optional[StreamFragment]:
    payload = _sse_data(line)
    if payload is None:
        return None
    if payload == SSE_DONE:
        return StreamFragment(done=True)

    data = _load_json(payload)
    message = _openai_error(data)
    if message:
        raise ProviderProtocolError(message)

    choices = data.get("choices") or []
    if not choices:
        return None
    text = (choices[0].get("delta") or {}).get("content")
    return StreamFragment(text=text) if text else None


def _parse_claude_line(line: str) -> Optional[StreamFragment]:
    payload = _sse_data(line)
    if payload is None:
        return None

    data = _load_json(payload)
    event = data.get("type")
    if event == "error":
        raise ProviderProtocolError(_claude_error(data) or payload)
    if event == "message_stop":
        return StreamFragment(done=True)
    if event == "content_block_delta":
        text = (data.get("delta") or {}).get("text")
        return StreamFragment(text=text) if text else None
    return None


def _parse_ollama_line(line: str) -> Optional[StreamFragment]:
    data = _load_json(line)
    message = _ollama_error(data)
    if message:
        raise ProviderProtocolError(message)

    text = (data.get("message") or {}).get("content") or ""
    if data.get("done"):
        return StreamFragment(text=text, done=True)
    return StreamFragment(text=text) if text else None


# --- Dispatch tables ---

_REQUEST_BUILDERS: Dict[ProviderType, Callable[[Conversation, ProviderConfig], RequestSpec]] = {
    ProviderType.OPENAI: _openai_style_request,
    ProviderType.GROQ: _openai_style_request,
    ProviderType.CLAUDE: _claude_request,
    ProviderType.OLLAMA: _ollama_request,
    ProviderType.PHIND: _phind_request,
}

_LINE_PARSERS: Dict[ProviderType, LineParser] = {
    ProviderType.OPENAI: _parse_openai_style_line,
    ProviderType.GROQ: _parse_openai_style_line,
    ProviderType.PHIND: _parse_openai_style_line,
    ProviderType.CLAUDE: _parse_claude_line,
    ProviderType.OLLAMA: _parse_ollama_line,
}

_ERROR_EXTRACTORS: Dict[ProviderType, Callable[[Mapping[str, Any]], Optional[str]]] = {
    ProviderType.OPENAI: _openai_error,
    ProviderType.GROQ: _openai_error,
    ProviderType.PHIND: _phind_error,
    ProviderType.CLAUDE: _claude_error,
    ProviderType.OLLAMA: _ollama_error,
}


def _check_exhaustive() -> None:
    for name, table in (
        ("request builder", _REQUEST_BUILDERS),
        ("line parser", _LINE_PARSERS),
        ("error extractor", _ERROR_EXTRACTORS),
    ):
        missing = set(ProviderType) - set(table)
        if missing:
            raise RuntimeError(f"no {name} for: {sorted(v.value for v in missing)}")


_check_exhaustive()


# --- Public operations ---


def build_request(conversation: Conversation, config: ProviderConfig) -> RequestSpec:
    """Translate ``conversation`` into the HTTP request for ``config.variant``."""
    request = _REQUEST_BUILDERS[config.variant](conversation, config)
    logger.debug(
        "built %s request for model %s (%d messages)",
        config.variant.value,
        config.effective_model,
        len(conversation.messages),
    )
    return request


def new_decoder(variant: ProviderType) -> StreamDecoder:
    """Return a fresh stream decoder for one response body."""
    return StreamDecoder(_LINE_PARSERS[variant])


def parse_stream_chunk(decoder: StreamDecoder, raw: bytes) -> List[StreamFragment]:
    """Feed one network chunk to ``decoder`` and return completed fragments."""
    return decoder.feed(raw)


def extract_error(variant: ProviderType, status: Optional[int], body: str) -> ProviderProtocolError:
    """Build the error for a failed response from its status and raw body."""
    message = None
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        data = None
    if isinstance(data, dict):
        message = _ERROR_EXTRACTORS[variant](data)

    if not message:
        message = body.strip() or "empty response body"
    return ProviderProtocolError(message, status=status)
