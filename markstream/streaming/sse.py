"""Server-Sent Events (SSE) decoding for chat token streams."""

import json
from typing import Iterable, Iterator, Optional

from pydantic import ValidationError

from markstream.errors import StreamEventError
from markstream.logger import get_logger
from markstream.models.events import TokenEvent

log = get_logger(__name__)

DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"


def iter_lines(raw_chunks: Iterable[str]) -> Iterator[str]:
    """Reassemble complete lines from arbitrarily fragmented network reads."""
    buffer = ""
    for raw in raw_chunks:
        buffer += raw
        lines = buffer.split("\n")
        buffer = lines.pop()
        for line in lines:
            yield line.rstrip("\r")
    if buffer:
        yield buffer.rstrip("\r")


def parse_sse_line(line: str) -> Optional[TokenEvent]:
    """Decode a single `data:` line.

    Returns None for comments, keepalives, blank lines, the [DONE] marker and
    payloads that cannot be decoded.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload == DONE_MARKER:
        return None
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError as e:
        log.warning(f"[yellow]Failed to parse SSE data[/]: {e}")
        return None
    if not isinstance(raw, dict):
        log.warning(f"[yellow]Ignoring non-object SSE payload[/]: {payload[:40]!r}")
        return None
    try:
        return TokenEvent.model_validate(raw)
    except ValidationError as e:
        log.warning(f"[yellow]Invalid SSE event[/]: {e}")
        return None


def iter_events(lines: Iterable[str]) -> Iterator[TokenEvent]:
    """Yield decoded events until the stream's [DONE] marker."""
    for line in lines:
        if line == DATA_PREFIX + DONE_MARKER:
            return
        event = parse_sse_line(line)
        if event is not None:
            yield event


def iter_token_chunks(lines: Iterable[str]) -> Iterator[str]:
    """Yield the token text carried by each token event.

    Raises:
        StreamEventError: the backend sent an `error` event.
    """
    for event in iter_events(lines):
        if event.is_error():
            raise StreamEventError(event.message or "Streaming error occurred", code=event.code)
        if not event.is_token():
            log.debug(f"Skipping {event.type} event")
            continue
        text = event.text()
        if text:
            yield text
