import logging
from typing import Callable, Iterable, List, Optional

from rich.console import Console

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]


class StreamAggregator:
    """
    Prints streamed fragments as they arrive and assembles the full answer.

    Fragments are consumed exactly once and in order. If the stream fails,
    whatever was already printed stays on screen, the partial line is closed
    and the error propagates without a partial answer.
    """

    def __init__(self, sink: Sink, status_console: Optional[Console] = None):
        self.sink = sink
        self.status_console = status_console

    def collect(self, fragments: Iterable[str], status: str = "Thinking...") -> str:
        parts: List[str] = []
        iterator = iter(fragments)

        try:
            if self.status_console is not None:
                # Spinner only while waiting for the first fragment.
                with self.status_console.status(f"[bold green]{status}", spinner="moon"):
                    first = next(iterator, None)
                if first is not None:
                    self._emit(first, parts)
            for fragment in iterator:
                self._emit(fragment, parts)
        except Exception:
            if parts:
                self.sink("\n")
            raise

        answer = "".join(parts)
        if answer and not answer.endswith("\n"):
            self.sink("\n")
        logger.debug("aggregated %d fragments, %d characters", len(parts), len(answer))
        return answer

    def _emit(self, fragment: str, parts: List[str]) -> None:
        self.sink(fragment)
        parts.append(fragment)
