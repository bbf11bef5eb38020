from __future__ import annotations

import json

from .model import ParsedLyrics
from .parse import format_timestamp


def export_json(parsed: ParsedLyrics) -> str:
    return json.dumps(
        {
            "offset_ms": parsed.offset_ms,
            "lines": [{"time_ms": ln.time_ms, "text": ln.text} for ln in parsed.lines],
        },
        ensure_ascii=False,
        indent=2,
    )


def export_lrc(parsed: ParsedLyrics, include_offset: bool = True) -> str:
    # three fraction digits so that re-parsing gives back the same times
    out: list[str] = []
    if include_offset and parsed.offset_ms:
        out.append(f"[offset:{parsed.offset_ms:+d}]")

    for ln in parsed.lines:
        out.append(f"[{format_timestamp(ln.time_ms)}]{ln.text}")
    return "\n".join(out) + ("\n" if out else "")


def _fmt_srt_time(ms: int) -> str:
    # HH:MM:SS,mmm
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms2:03d}"


def export_srt(parsed: ParsedLyrics, last_line_duration_ms: int = 2000) -> str:
    """
    End time is next start time, last line ends at +last_line_duration_ms.

    The file offset is folded into the cue times (clamped at zero), since SRT
    has no offset directive of its own.
    """
    lines = parsed.lines
    if not lines:
        return ""
    shift = parsed.offset_ms
    out: list[str] = []
    for i, ln in enumerate(lines, start=1):
        start = max(ln.time_ms - shift, 0)
        if i < len(lines):
            end = max(lines[i].time_ms - shift, start + 1)
        else:
            end = start + last_line_duration_ms
        out.append(str(i))
        out.append(f"{_fmt_srt_time(start)} --> {_fmt_srt_time(end)}")
        out.append(ln.text)
        out.append("")
    return "\n".join(out)
