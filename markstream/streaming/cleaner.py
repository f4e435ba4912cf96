"""Incremental cleaner for streamed markdown tokens.

- Wraps LaTeX-looking phrases outside `$...$`/`$$...$$` in inline `$...$`.
- Prefixes a backslash to bare command words inside math.
- Drops `**` markers that enclose nothing before the line ends.
- Hides reasoning blocks (see ReasoningFilter).
- Never modifies anything inside fenced or inline code.

Only a handful of flags travel between chunks, plus a short pending tail when a
chunk ends on a token whose meaning depends on what comes next.
"""

import string
from typing import List, Optional

from markstream.errors import StreamClosedError
from markstream.latex_utils.math_heuristics import (
    could_become_command,
    looks_like_math,
    normalize_latex_commands,
)
from markstream.logger import get_logger
from markstream.models.settings import SanitizerSettings
from markstream.models.state import SanitizerState
from markstream.streaming.reasoning import ReasoningFilter

log = get_logger(__name__)

FENCE = "```"
BOLD = "**"
_ASCII_LETTERS = frozenset(string.ascii_letters)
# punctuation that ends a candidate math phrase
_PHRASE_STOP = frozenset(",:;.!?")
_OPENERS = "([{"
_CLOSERS = ")]}"


def _phrase_end(text: str, i: int) -> int:
    """End index of the candidate math phrase starting at `i`."""
    n = len(text)
    depth = 0
    j = i
    while j < n:
        c = text[j]
        if c.isspace() or c in "$`":
            break
        if c in _PHRASE_STOP:
            # keep decimals like 3.14 together
            if not (c == "." and j > i and text[j - 1].isdigit() and j + 1 < n and text[j + 1].isdigit()):
                break
        if text.startswith(BOLD, j):
            break
        if c in _OPENERS:
            depth += 1
        elif c in _CLOSERS:
            if depth == 0:
                break
            depth -= 1
        j += 1
    return j


class StreamCleaner:
    """Cleans one streamed assistant message, chunk by chunk.

    Create one instance per message (see pipeline.new_cleaner), call
    process_chunk for every delta and finish once the stream ends. Not safe to
    share between messages or threads.
    """

    def __init__(self, settings: Optional[SanitizerSettings] = None) -> None:
        self.settings = settings or SanitizerSettings()
        self.state = SanitizerState()
        self.reasoning = ReasoningFilter(self.settings.tag_names())
        self.markers_dropped = 0
        self._pending = ""
        self._closed = False

    @property
    def pending(self) -> str:
        """Text held back from the last chunk, not yet emitted."""
        return self._pending

    def process_chunk(self, text: str) -> str:
        if self._closed:
            raise StreamClosedError("process_chunk called after finish()")
        if not text:
            return ""
        visible = self.reasoning.feed(text)
        return self._scan(visible, final=False)

    def finish(self) -> str:
        """Flush whatever is still held back; the stream has ended."""
        if self._closed:
            raise StreamClosedError("finish() called twice")
        tail = self.reasoning.flush()
        out = self._scan(tail, final=True)
        self._closed = True
        return out

    def _hold(self, rest: str, final: bool) -> bool:
        if final or len(rest) > self.settings.max_pending_chars:
            return False
        self._pending = rest
        return True

    def _scan(self, text: str, final: bool) -> str:
        text = self._pending + text
        self._pending = ""
        s = self.state
        out: List[str] = []
        n = len(text)
        i = 0
        while i < n:
            ch = text[i]
            nxt = text[i + 1] if i + 1 < n else ""
            prev = text[i - 1] if i > 0 else s.last_char

            # fences and inline code
            if not s.in_math():
                if not s.in_inline_code and text.startswith(FENCE, i):
                    s.in_code_block = not s.in_code_block
                    out.append(FENCE)
                    i += 3
                    s.at_line_start = False
                    continue
                if ch == "`" and text[i:].strip("`") == "" and not s.in_inline_code:
                    # one or two backticks ending the chunk may be half a fence
                    if self._hold(text[i:], final):
                        break
                if not s.in_code_block and ch == "`":
                    s.in_inline_code = not s.in_inline_code
                    out.append(ch)
                    i += 1
                    s.at_line_start = False
                    continue

            if s.in_code():
                out.append(ch)
                self._track_newline(ch)
                i += 1
                continue

            if ch == "$":
                if not nxt and not s.in_inline_math and self._hold(text[i:], final):
                    # may be the first half of $$
                    break
                if s.in_inline_math:
                    s.in_inline_math = False
                    out.append("$")
                    i += 1
                elif s.in_block_math:
                    if nxt == "$":
                        s.in_block_math = False
                        out.append("$$")
                        i += 2
                    else:
                        out.append("$")
                        i += 1
                elif nxt == "$":
                    s.in_block_math = True
                    out.append("$$")
                    i += 2
                else:
                    s.in_inline_math = True
                    out.append("$")
                    i += 1
                s.at_line_start = False
                continue

            if s.in_math():
                if ch in _ASCII_LETTERS:
                    j = i + 1
                    while j < n and text[j] in _ASCII_LETTERS:
                        j += 1
                    word = text[i:j]
                    if j == n and could_become_command(word) and self._hold(word, final):
                        break
                    if self.settings.normalize_math_commands:
                        word = normalize_latex_commands(word, prev_char=prev)
                    out.append(word)
                    i = j
                    s.at_line_start = False
                    continue
                out.append(ch)
                self._track_newline(ch)
                i += 1
                continue

            if ch == "*" and self.settings.remove_stray_markers:
                if nxt == "*":
                    consumed = self._bold_marker(text, i, out, final)
                    if consumed is None:
                        break
                    i += consumed
                    continue
                if not nxt and s.at_line_start and self._hold(ch, final):
                    # may be the first half of a line-opening **
                    break

            if self.settings.wrap_math_phrases and not ch.isspace() and not (prev and prev.isalnum()):
                j = _phrase_end(text, i)
                phrase = text[i:j]
                if phrase and looks_like_math(phrase):
                    if self.settings.normalize_math_commands:
                        phrase = normalize_latex_commands(phrase, prev_char=prev)
                    out.append("$" + phrase + "$")
                    i = j
                    s.at_line_start = False
                    continue

            out.append(ch)
            self._track_newline(ch)
            i += 1

        if i > 0:
            s.last_char = text[i - 1]
        return "".join(out)

    def _bold_marker(self, text: str, i: int, out: List[str], final: bool) -> Optional[int]:
        """Handle a ** at text[i]; return characters consumed, or None when held back."""
        s = self.state
        if s.bold_open:
            # closes bold opened earlier on this line
            s.bold_open = False
            out.append(BOLD)
            s.at_line_start = False
            return 2

        j = i + 2
        while j < len(text) and text[j] != "\n" and text[j].isspace():
            j += 1
        if j < len(text) and text[j] != "\n":
            s.bold_open = True
            out.append(BOLD)
            s.at_line_start = False
            return 2

        if j == len(text) and not final:
            if self._hold(text[i:], final):
                return None
            # too much trailing whitespace to keep waiting; assume it opens bold
            s.bold_open = True
            out.append(BOLD)
            s.at_line_start = False
            return 2

        # only whitespace before the line (or the stream) ends: stray
        self.markers_dropped += 1
        log.debug("Dropped stray bold marker")
        return 2

    def _track_newline(self, ch: str) -> None:
        if ch == "\n":
            self.state.at_line_start = True
            self.state.bold_open = False
        else:
            self.state.at_line_start = False
