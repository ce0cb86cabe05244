import logging
from typing import Iterator

import requests

from lumen._engine.provider.backends import (
    build_request,
    extract_error,
    new_decoder,
    parse_stream_chunk,
)
from lumen._types.errors import NetworkError
from lumen._types.model import Conversation, ProviderConfig, RequestSpec

logger = logging.getLogger(__name__)


class ProviderClient:
    """
    Sends a conversation to the configured backend and yields the streamed
    answer text.

    The session is shared for the whole run so connections are pooled. No
    timeout is set: a backend that stops responding blocks the call.
    """

    def __init__(self, config: ProviderConfig, session: requests.Session):
        self.config = config
        self.session = session

    def send(self, conversation: Conversation) -> Iterator[str]:
        """
        Return a lazy sequence of text fragments for ``conversation``.

        The request is built immediately but only sent when the first
        fragment is requested, so a caller showing a spinner covers the
        connection wait too. Status and transport errors are raised before
        the first fragment; errors embedded in the stream when reached.
        Each call reissues the request.
        """
        return self._stream(build_request(conversation, self.config))

    def _stream(self, request: RequestSpec) -> Iterator[str]:
        logger.info("POST %s", request.url)

        try:
            response = self.session.post(
                request.url, headers=request.headers, json=request.body, stream=True
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"could not reach {request.url}: {e}") from e

        if not response.ok:
            body = response.text
            response.close()
            raise extract_error(self.config.variant, response.status_code, body)

        yield from self._fragments(response)

    def _fragments(self, response: requests.Response) -> Iterator[str]:
        decoder = new_decoder(self.config.variant)
        try:
            for chunk in response.iter_content(chunk_size=None):
                for fragment in parse_stream_chunk(decoder, chunk):
                    if fragment.text:
                        yield fragment.text
            for fragment in decoder.finish():
                if fragment.text:
                    yield fragment.text
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"connection to {response.url} failed mid-stream: {e}") from e
        finally:
            response.close()
        logger.info("stream finished (terminal signal seen: %s)", decoder.done)
