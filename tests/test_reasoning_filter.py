import pytest

from markstream.models.settings import SanitizerSettings
from markstream.streaming.cleaner import StreamCleaner
from markstream.streaming.reasoning import ReasoningFilter


def run(chunks, cleaner=None):
    cleaner = cleaner or StreamCleaner()
    parts = [cleaner.process_chunk(c) for c in chunks]
    parts.append(cleaner.finish())
    return "".join(parts)


SAMPLE = "before<reasoning>secret</reasoning>after"


def test_reasoning_block_in_one_chunk_is_removed():
    assert StreamCleaner().process_chunk(SAMPLE) == "beforeafter"


def test_think_tags_are_case_insensitive():
    assert StreamCleaner().process_chunk("a<THINK>x</Think>b") == "ab"


@pytest.mark.parametrize("split", range(1, len(SAMPLE)))
def test_reasoning_block_split_anywhere_is_removed(split):
    assert run([SAMPLE[:split], SAMPLE[split:]]) == "beforeafter"


def test_reasoning_block_spanning_many_chunks():
    chunks = ["Hello <reason", "ing>hidden plan", " more</reas", "oning>world"]
    assert run(chunks) == "Hello world"


def test_unterminated_block_stays_hidden():
    assert run(["x<think>abc", " still thinking"]) == "x"


def test_stray_closing_tag_is_dropped():
    assert StreamCleaner().process_chunk("a</think>b") == "ab"


def test_partial_tag_that_never_completes_is_released():
    cleaner = StreamCleaner()
    assert cleaner.process_chunk("a <") == "a "
    assert cleaner.process_chunk("b") == "<b"
    assert run(["a <"]) == "a <"


def test_filter_tracks_block_state():
    f = ReasoningFilter(["think"])
    assert f.feed("one<think>two") == "one"
    assert f.in_reasoning_block
    assert f.feed("three</think>four") == "four"
    assert not f.in_reasoning_block
    assert f.blocks_suppressed == 1


def test_flush_inside_block_returns_nothing():
    f = ReasoningFilter(["think"])
    f.feed("<think>abc</thi")
    assert f.flush() == ""


def test_nested_open_tag_is_part_of_the_block():
    f = ReasoningFilter(["think", "reasoning"])
    assert f.feed("<think>a<reasoning>b</think>c") == "c"


def test_custom_tags_from_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MARKSTREAM_REASONING_TAGS", "scratch")
    cleaner = StreamCleaner(SanitizerSettings())
    assert cleaner.process_chunk("<scratch>x</scratch>y <think>") == "y <think>"
