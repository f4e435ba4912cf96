from markstream.models.settings import SanitizerSettings
from markstream.streaming.cleaner import StreamCleaner


def run(chunks, cleaner=None):
    cleaner = cleaner or StreamCleaner()
    parts = [cleaner.process_chunk(c) for c in chunks]
    parts.append(cleaner.finish())
    return "".join(parts)


def test_empty_marker_line_is_dropped():
    assert StreamCleaner().process_chunk("**\n") == "\n"


def test_bold_text_is_kept():
    assert StreamCleaner().process_chunk("**bold**\n") == "**bold**\n"


def test_marker_followed_by_whitespace_only_is_dropped():
    assert StreamCleaner().process_chunk("**   \nNext") == "   \nNext"


def test_trailing_marker_before_newline_is_dropped():
    assert StreamCleaner().process_chunk("Done **\n") == "Done \n"


def test_horizontal_rule_is_kept():
    assert StreamCleaner().process_chunk("***\n") == "***\n"


def test_decision_waits_for_next_chunk():
    cleaner = StreamCleaner()
    assert cleaner.process_chunk("Intro\n**") == "Intro\n"
    assert cleaner.pending == "**"
    assert cleaner.process_chunk("\nBody") == "\nBody"
    assert cleaner.markers_dropped == 1


def test_deferred_marker_that_opens_bold_is_kept():
    assert run(["**", "bold** text\n"]) == "**bold** text\n"


def test_marker_split_between_chunks():
    assert run(["Title\n*", "*\n"]) == "Title\n\n"


def test_pending_marker_at_stream_end_is_dropped():
    assert run(["**  "]) == "  "


def test_pending_is_bounded():
    settings = SanitizerSettings().model_copy(update={"max_pending_chars": 4})
    text = "**" + " " * 10
    assert run([text, "\n"], StreamCleaner(settings)) == text + "\n"


def test_marker_removal_can_be_disabled():
    settings = SanitizerSettings().model_copy(update={"remove_stray_markers": False})
    assert StreamCleaner(settings).process_chunk("**\n") == "**\n"


def test_markers_inside_code_are_untouched():
    text = "```\n**\n```\n"
    assert StreamCleaner().process_chunk(text) == text
