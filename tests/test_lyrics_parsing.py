import pytest

from lyric_scroll.lrc.model import LyricLine, ParsedLyrics
from lyric_scroll.lrc.parse import format_timestamp, parse_lyrics, parse_lyrics_with_stats


def _pairs(parsed: ParsedLyrics) -> list[tuple[int, str]]:
    return [(ln.time_ms, ln.text) for ln in parsed.lines]


def test_parse_multiple_timestamps():
    parsed = parse_lyrics("[00:10.00][00:20.00]Hello\n")
    assert parsed.lines == (LyricLine(10000, "Hello"), LyricLine(20000, "Hello"))


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("[00:01.5]", 1500),
        ("[00:01.50]", 1500),
        ("[00:01.500]", 1500),
        ("[00:01]", 1000),
        ("[1:02.03]", 62030),
        ("[12:34.567]", 754567),
    ],
)
def test_fraction_scaling(tag, expected):
    parsed = parse_lyrics(f"{tag}x")
    assert [ln.time_ms for ln in parsed.lines] == [expected]


def test_duplicate_timestamp_later_text_wins():
    parsed = parse_lyrics("[00:05.00]A\n[00:07.00]mid\n[00:05.00]B\n")
    assert _pairs(parsed) == [(5000, "B"), (7000, "mid")]


def test_duplicate_timestamp_empty_text_does_not_erase():
    parsed = parse_lyrics("[00:05.00]A\n[00:05.00]\n")
    assert _pairs(parsed) == [(5000, "A")]


def test_duplicate_timestamp_empty_first_is_filled():
    parsed = parse_lyrics("[00:05.00]\n[00:05.000]A\n")
    assert _pairs(parsed) == [(5000, "A")]


def test_lines_sorted_and_unique():
    text = "[00:30.00]c\n[00:10.00]a\n[00:20.00][00:10.00]b\n[00:20.0]d\n"
    parsed = parse_lyrics(text)
    times = [ln.time_ms for ln in parsed.lines]
    assert times == sorted(times)
    assert len(times) == len(set(times))
    assert _pairs(parsed) == [(10000, "b"), (20000, "d"), (30000, "c")]


@pytest.mark.parametrize("directive, expected", [("[offset:250]", 250), ("[offset:+250]", 250), ("[OFFSET:-1500]", -1500)])
def test_offset_directive(directive, expected):
    parsed = parse_lyrics(f"[ti:Song]\n[00:01.00]x\n{directive}\n[00:02.00]y\n")
    assert parsed.offset_ms == expected
    # the offset is reported, never applied to line times
    assert [ln.time_ms for ln in parsed.lines] == [1000, 2000]


def test_offset_must_be_whole_line():
    parsed = parse_lyrics("[00:01.00]x [offset:300]\n")
    assert parsed.offset_ms == 0
    assert parsed.lines[0].text == "x [offset:300]"


def test_first_offset_directive_wins():
    parsed = parse_lyrics("[offset:100]\n[offset:200]\n[00:01.00]x\n")
    assert parsed.offset_ms == 100


def test_untagged_and_metadata_lines_are_dropped():
    parsed = parse_lyrics("[ar:Someone]\nplain text\n\n[00:01.00] kept \n[xx:yy]nope\n")
    assert _pairs(parsed) == [(1000, "kept")]


def test_malformed_tags_are_left_in_text():
    parsed = parse_lyrics("[00:01.00]a [1:2] b\n")
    assert _pairs(parsed) == [(1000, "a [1:2] b")]


def test_tags_anywhere_in_line_are_stripped():
    parsed = parse_lyrics("[00:01.00]one [00:03.00]two\n")
    assert _pairs(parsed) == [(1000, "one two"), (3000, "one two")]


def test_crlf_and_bom_free_input():
    parsed = parse_lyrics("[offset:-20]\r\n[00:01.00]a\r\n[00:02.00]b\r\n")
    assert parsed.offset_ms == -20
    assert _pairs(parsed) == [(1000, "a"), (2000, "b")]


@pytest.mark.parametrize("text", ["", "\n\n", "no tags at all", "[00:1.00]bad seconds", "[offset:abc]"])
def test_degraded_input_yields_empty(text):
    parsed = parse_lyrics(text)
    assert parsed == ParsedLyrics(lines=(), offset_ms=0)
    assert not parsed


def test_roundtrip_through_plain_reemission():
    text = "[00:01.5]a\n[00:02.25][00:04.125]b\n[00:03]\n[00:02.25]c\n"
    first = parse_lyrics(text)
    reemitted = "\n".join(f"[{format_timestamp(ln.time_ms)}]{ln.text}" for ln in first.lines)
    assert _pairs(parse_lyrics(reemitted)) == _pairs(first)


def test_stats():
    _parsed, stats = parse_lyrics_with_stats("[ti:x]\n\n[00:01.00][00:02.00]a\n[00:01.00]b\n")
    assert stats.lines_total == 4
    assert stats.lines_with_timestamps == 2
    assert stats.lines_ignored == 2
    assert stats.tags_total == 3
    assert stats.lines_out == 2
    assert stats.duplicates_merged == 1


def test_format_timestamp():
    assert format_timestamp(0) == "00:00.000"
    assert format_timestamp(83456) == "01:23.456"
    assert format_timestamp(-5) == "00:00.000"


def test_placeholder_for_empty_text():
    assert LyricLine(0, "").display_text == "…"
    assert LyricLine(0, "x").display_text == "x"


def test_only_newlines_split_lines():
    parsed = parse_lyrics("[00:01.00]a\u2028b\n[00:02.00]c\x0cd\r\n[00:03.00]e\x85f\x1eg\n")
    assert [ln.text for ln in parsed.lines] == ["a\u2028b", "c\x0cd", "e\x85f\x1eg"]


def test_non_ascii_digits_are_not_tags():
    parsed = parse_lyrics("[０１:００.５０]wide\n[offset:１００]\n[00:01.00]narrow\n")
    assert parsed.offset_ms == 0
    assert _pairs(parsed) == [(1000, "narrow")]


@pytest.mark.parametrize(
    "ms, expected",
    [
        (5_999_999, "99:59.999"),
        (6_000_000, "99:60.000"),
        (6_015_000, "99:75.000"),
        (6_039_999, "99:99.999"),  # latest time a tag can express
    ],
)
def test_format_timestamp_folds_minutes_past_99(ms, expected):
    assert format_timestamp(ms) == expected
    assert parse_lyrics(f"[{expected}]x").lines[0].time_ms == ms
