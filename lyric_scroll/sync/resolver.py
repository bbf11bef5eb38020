from __future__ import annotations

from bisect import bisect_right
import math
from typing import Sequence

from lyric_scroll.lrc.model import LyricLine


def find_active_index(lines: Sequence[LyricLine], time_ms: int) -> int:
    """
    Index of the last line with `time_ms <= query`, O(log n) via bisect.

    Queries before the first line clamp to 0, so -1 only ever means
    "there are no lines". Any query time is valid (seeks move backwards).
    """
    if not lines:
        return -1
    hi = bisect_right(lines, time_ms, key=lambda ln: ln.time_ms) - 1
    return max(0, min(len(lines) - 1, hi))


def stable_active_index(lines: Sequence[LyricLine], time_ms: float) -> int:
    # floor avoids wobbling between two lines on an exact boundary
    idx = find_active_index(lines, math.floor(time_ms))

    # parse_lyrics never produces equal times, other sources might:
    # land on the last of a same-time run so the highlight never steps back
    while 0 <= idx < len(lines) - 1 and lines[idx + 1].time_ms == lines[idx].time_ms:
        idx += 1
    return idx
