import json

import pytest

from markstream.errors import StreamEventError
from markstream.streaming.sse import iter_lines, iter_token_chunks, parse_sse_line


def sse(payload):
    return "data: " + json.dumps(payload)


def test_lines_are_reassembled_across_reads():
    reads = ['data: {"type":"tok', 'en","content":"hi"}\n\nda', "ta: [DONE]\r\n"]
    assert list(iter_lines(reads)) == ['data: {"type":"token","content":"hi"}', "", "data: [DONE]"]


def test_every_token_shape_is_understood():
    lines = [
        sse({"type": "token", "content": "a"}),
        sse({"type": "token", "data": {"content": "b"}}),
        sse({"type": "token", "token": "c"}),
        sse({"choices": [{"index": 0, "delta": {"content": "d"}, "finish_reason": None}]}),
    ]
    assert list(iter_token_chunks(lines)) == ["a", "b", "c", "d"]


def test_non_token_events_and_noise_are_skipped():
    lines = [
        ": keepalive",
        "",
        sse({"type": "routing"}),
        sse({"type": "model_selected", "model": "gpt"}),
        sse({"type": "metadata", "data": {"tokens": 5}}),
        "data: {not json",
        "data: [1, 2]",
        sse({"type": "token", "content": "ok"}),
    ]
    assert list(iter_token_chunks(lines)) == ["ok"]


def test_done_marker_ends_the_stream():
    lines = [sse({"content": "x"}), "data: [DONE]", sse({"content": "late"})]
    assert list(iter_token_chunks(lines)) == ["x"]


def test_error_event_raises():
    lines = [sse({"content": "x"}), sse({"type": "error", "message": "upstream failed", "code": "E502"})]
    chunks = iter_token_chunks(lines)
    assert next(chunks) == "x"
    with pytest.raises(StreamEventError) as exc:
        next(chunks)
    assert "upstream failed" in str(exc.value)
    assert exc.value.code == "E502"


def test_parse_ignores_non_data_lines():
    assert parse_sse_line("event: ping") is None
    assert parse_sse_line("data: [DONE]") is None
    assert parse_sse_line(sse({"type": "token", "content": "z"})).text() == "z"


@pytest.mark.parametrize("choices", [[{"delta": "hi"}], ["hi"], [{"delta": {"content": 5}}], "hi"])
def test_malformed_choices_are_rejected(choices):
    assert parse_sse_line(sse({"choices": choices})) is None


def test_malformed_choices_do_not_stop_the_stream():
    lines = [
        sse({"choices": [{"delta": "oops"}]}),
        sse({"choices": [{"index": 0, "delta": {}, "finish_reason": "stop"}]}),
        sse({"choices": [{"delta": {"content": "fine"}}]}),
    ]
    assert list(iter_token_chunks(lines)) == ["fine"]
