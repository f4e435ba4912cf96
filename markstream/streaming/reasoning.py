import re
from typing import Iterable, List, Optional

from markstream.logger import get_logger

log = get_logger(__name__)


class ReasoningFilter:
    """Hide tagged reasoning regions (e.g. <think>...</think>) from a token stream.

    Tracks whether the stream is currently inside a reasoning block, so a region
    is suppressed however the transport fragments it. A chunk ending in what may
    be the start of a tag holds that short prefix back until the next feed.
    """

    def __init__(self, tags: Iterable[str] = ("think", "reasoning")) -> None:
        self.tags: List[str] = [t.lower() for t in tags]
        self.in_reasoning_block = False
        self.blocks_suppressed = 0
        self._open_tag: Optional[str] = None
        self._held = ""
        alternation = "|".join(re.escape(t) for t in self.tags)
        self._tag_re = re.compile(r"<(/?)(" + alternation + r")>", re.IGNORECASE)
        self._close_res = {t: re.compile(re.escape(f"</{t}>"), re.IGNORECASE) for t in self.tags}
        self._all_tags = [f"<{t}>" for t in self.tags] + [f"</{t}>" for t in self.tags]

    def feed(self, text: str) -> str:
        """Return the visible part of `text`."""
        text = self._held + text
        self._held = ""
        out: List[str] = []
        pos = 0
        while pos < len(text):
            if self.in_reasoning_block:
                close = self._close_res[self._open_tag].search(text, pos)
                if close is None:
                    self._held = self._partial_tag(text[pos:], [f"</{self._open_tag}>"])
                    break
                pos = close.end()
                self.in_reasoning_block = False
                self._open_tag = None
                self.blocks_suppressed += 1
                log.debug("Suppressed reasoning block")
                continue

            m = self._tag_re.search(text, pos)
            if m is None:
                tail = text[pos:]
                self._held = self._partial_tag(tail, self._all_tags)
                out.append(tail[: len(tail) - len(self._held)])
                break
            out.append(text[pos:m.start()])
            if not m.group(1):
                self.in_reasoning_block = True
                self._open_tag = m.group(2).lower()
            # a closing tag with no open block is dropped
            pos = m.end()
        return "".join(out)

    def flush(self) -> str:
        """Return held-back text at end of stream; reasoning content stays hidden."""
        held, self._held = self._held, ""
        if self.in_reasoning_block:
            return ""
        return held

    @staticmethod
    def _partial_tag(tail: str, candidates: List[str]) -> str:
        """Longest suffix of `tail` that is a proper prefix of a candidate tag."""
        longest = max(len(c) for c in candidates) - 1
        for k in range(min(len(tail), longest), 0, -1):
            suffix = tail[-k:].lower()
            if any(c.startswith(suffix) and c != suffix for c in candidates):
                return tail[-k:]
        return ""
