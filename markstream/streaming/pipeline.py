from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Iterator, Optional, Protocol, TypeVar

from markstream.logger import get_logger
from markstream.models.settings import SanitizerSettings
from markstream.streaming.cleaner import StreamCleaner

log = get_logger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class ResilienceGate(Protocol):
    """Failure-counting gate wrapped around the transport call.

    Implemented by the caller's resilience layer; an OPEN gate raises from
    execute() instead of running the operation.
    """

    @property
    def state(self) -> CircuitState: ...

    def execute(self, operation: Callable[[], T]) -> T: ...


def new_cleaner(settings: Optional[SanitizerSettings] = None) -> StreamCleaner:
    """Create the cleaner for one streamed message. Never reuse it for another."""
    return StreamCleaner(settings or SanitizerSettings())


def sanitize_stream(chunks: Iterable[str], cleaner: Optional[StreamCleaner] = None) -> Iterator[str]:
    """Clean a stream of token chunks, yielding non-empty output as it becomes available."""
    cleaner = cleaner or new_cleaner()
    for chunk in chunks:
        out = cleaner.process_chunk(chunk)
        if out:
            yield out
    tail = cleaner.finish()
    if tail:
        yield tail
    if cleaner.markers_dropped or cleaner.reasoning.blocks_suppressed:
        log.debug(
            f"Stream cleaned: markers_dropped={cleaner.markers_dropped} "
            f"reasoning_blocks={cleaner.reasoning.blocks_suppressed}"
        )


def sanitize_text(text: str, chunk_size: Optional[int] = None, settings: Optional[SanitizerSettings] = None) -> str:
    """Clean a complete text, optionally fed in fixed-size chunks to mimic a stream."""
    if chunk_size is not None and chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    if chunk_size is None:
        chunks = [text]
    else:
        chunks = [text[k:k + chunk_size] for k in range(0, len(text), chunk_size)]
    return "".join(sanitize_stream(chunks, new_cleaner(settings)))


def stream_with_gate(
    gate: ResilienceGate,
    open_stream: Callable[[], Iterable[str]],
    cleaner: Optional[StreamCleaner] = None,
) -> Iterator[str]:
    """Open the transport through the resilience gate, then clean what it delivers."""
    if gate.state != CircuitState.CLOSED:
        log.info(f"[yellow]Transport gate is {gate.state.value}[/]")
    chunks = gate.execute(open_stream)
    return sanitize_stream(chunks, cleaner)
