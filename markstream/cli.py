import argparse
import sys
from typing import Iterable, List, Optional

from dotenv import load_dotenv
from rich.markup import escape

from markstream.errors import MarkstreamError
from markstream.logger import configure_logging, get_logger
from markstream.models.settings import SanitizerSettings
from markstream.streaming.pipeline import new_cleaner, sanitize_stream
from markstream.streaming.sse import iter_lines, iter_token_chunks

log = get_logger(__name__)


def _fixed_chunks(text: str, chunk_size: int) -> Iterable[str]:
    for k in range(0, len(text), chunk_size):
        yield text[k:k + chunk_size]


def main(args: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Clean streamed assistant markdown the way the chat UI does.")
    parser.add_argument("input", nargs="?", default="-", help="Input file, or - for stdin (default)")
    parser.add_argument("--output", "-o", default=None, help="Write cleaned text here instead of stdout")
    parser.add_argument("--sse", action="store_true", help="Input is a raw server-sent event stream from the chat backend")
    parser.add_argument("--chunk-size", type=int, default=16, help="Characters per simulated chunk for plain input (default: 16)")
    parser.add_argument("--no-math", action="store_true", help="Do not wrap math-looking phrases")
    parser.add_argument("--log-level", default=None, help="Override MARKSTREAM_LOG_LEVEL")
    opts = parser.parse_args(args)

    configure_logging(opts.log_level)
    if opts.chunk_size < 1:
        log.error("[red]--chunk-size must be positive[/]")
        return 2

    if opts.input == "-":
        raw = sys.stdin.read()
    else:
        try:
            with open(opts.input, "r", encoding="utf-8") as f:
                raw = f.read()
        except (OSError, UnicodeDecodeError) as e:
            log.error(f"[red]Cannot read input[/]: {escape(str(e))}")
            return 1

    settings = SanitizerSettings()
    if opts.no_math:
        settings = settings.model_copy(update={"wrap_math_phrases": False})

    if opts.sse:
        chunks = iter_token_chunks(iter_lines(_fixed_chunks(raw, opts.chunk_size)))
    else:
        chunks = _fixed_chunks(raw, opts.chunk_size)

    try:
        cleaned = "".join(sanitize_stream(chunks, new_cleaner(settings)))
    except MarkstreamError as e:
        log.error(f"[red]Stream failed[/]: {escape(str(e))}")
        return 1

    if opts.output:
        try:
            with open(opts.output, "w", encoding="utf-8") as f:
                f.write(cleaned)
        except OSError as e:
            log.error(f"[red]Cannot write output[/]: {escape(str(e))}")
            return 1
        log.info(f"[green]Wrote[/] {len(cleaned)} chars to {opts.output}")
    else:
        sys.stdout.write(cleaned)
    return 0


if __name__ == "__main__":
    sys.exit(main())
