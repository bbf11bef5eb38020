from __future__ import annotations

from dataclasses import dataclass
import re

from .model import LyricLine, ParsedLyrics

_TS_RE = re.compile(r"\[(\d{1,2}):(\d{2})(?:\.(\d{1,3}))?\]", re.ASCII)  # [mm:ss] / [mm:ss.x] / [mm:ss.xx] / [mm:ss.xxx]
_OFFSET_RE = re.compile(r"\[offset:([+-]?\d+)\]", re.IGNORECASE | re.ASCII)
_NEWLINE_RE = re.compile(r"\r?\n")

# largest minutes value a tag can carry; seconds are not range-checked
_MAX_TAG_MINUTES = 99


@dataclass(frozen=True, slots=True)
class ParseStats:
    lines_total: int
    lines_with_timestamps: int
    lines_ignored: int
    tags_total: int
    lines_out: int
    duplicates_merged: int


def _frac_to_ms(frac: str | None) -> int:
    # "5" -> 500ms, "50" -> 500ms, "500" -> 500ms
    if not frac:
        return 0
    return int(frac) * 10 ** (3 - len(frac))


def _tag_to_ms(m: re.Match[str]) -> int:
    minutes = int(m.group(1))
    seconds = int(m.group(2))
    return (minutes * 60 + seconds) * 1000 + _frac_to_ms(m.group(3))


def format_timestamp(ms: int) -> str:
    """
    Inverse of tag parsing: 83456 -> "01:23.456".

    Past 99 minutes the overflow stays in the seconds field ("[99:75.000]"),
    which is how such times are written in a tag to begin with.
    """
    ms = max(ms, 0)
    m, rem = divmod(ms, 60_000)
    if m > _MAX_TAG_MINUTES:
        rem += (m - _MAX_TAG_MINUTES) * 60_000
        m = _MAX_TAG_MINUTES
    s, ms2 = divmod(rem, 1_000)
    return f"{m:02d}:{s:02d}.{ms2:03d}"


def _merge_equal_times(entries: list[LyricLine]) -> list[LyricLine]:
    """
    `entries` must already be sorted by time. Same-time entries collapse onto
    the first one; later non-empty text replaces earlier text.
    """
    merged: list[LyricLine] = []
    for e in entries:
        if merged and merged[-1].time_ms == e.time_ms:
            if e.text:
                merged[-1] = LyricLine(time_ms=e.time_ms, text=e.text)
            continue
        merged.append(e)
    return merged


def parse_lyrics_with_stats(text: str) -> tuple[ParsedLyrics, ParseStats]:
    offset_ms: int | None = None
    entries: list[LyricLine] = []

    total = 0
    lines_with_ts = 0
    ignored = 0
    tags_total = 0

    # only \n and \r\n end a line; form feeds, U+2028 etc. stay in the lyric text
    raw_lines = _NEWLINE_RE.split(text)
    if raw_lines and raw_lines[-1] == "":
        raw_lines.pop()

    for raw in raw_lines:
        total += 1
        line = raw.strip()
        if not line:
            ignored += 1
            continue

        if offset_ms is None:
            off = _OFFSET_RE.fullmatch(line)
            if off:
                offset_ms = int(off.group(1))
                continue

        ts = list(_TS_RE.finditer(line))
        if not ts:
            # metadata ([ar:], [ti:], ...), repeated offset lines, plain text
            ignored += 1
            continue

        lines_with_ts += 1
        tags_total += len(ts)
        payload = _TS_RE.sub("", line).strip()
        for m in ts:
            entries.append(LyricLine(time_ms=_tag_to_ms(m), text=payload))

    # list.sort is stable: equal times keep file order, so "later wins" below is well defined
    entries.sort(key=lambda e: e.time_ms)
    lines = _merge_equal_times(entries)

    parsed = ParsedLyrics(lines=tuple(lines), offset_ms=offset_ms or 0)
    stats = ParseStats(
        lines_total=total,
        lines_with_timestamps=lines_with_ts,
        lines_ignored=ignored,
        tags_total=tags_total,
        lines_out=len(lines),
        duplicates_merged=len(entries) - len(lines),
    )
    return parsed, stats


def parse_lyrics(text: str) -> ParsedLyrics:
    """
    Supported:
    - [mm:ss], [mm:ss.x], [mm:ss.xx], [mm:ss.xxx]
    - multiple timestamps per line (one entry per timestamp, same text)
    - a single [offset:+/-ms] line anywhere in the file

    Result is normalized:
    - lines sorted by time
    - one line per timestamp (later non-empty text wins)
    - the offset is reported, not applied

    Malformed input never raises; it just yields fewer lines.
    """
    parsed, _stats = parse_lyrics_with_stats(text)
    return parsed
