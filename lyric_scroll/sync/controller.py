from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
import math

from lyric_scroll.lrc.model import LyricLine, ParsedLyrics
from lyric_scroll.lrc.parse import parse_lyrics

from .resolver import stable_active_index

logger = logging.getLogger(__name__)

DEFAULT_OFFSET_LIMIT_MS = 5000


class SyncState(str, Enum):
    NO_LYRICS = "no_lyrics"
    TRACKING = "tracking"


@dataclass(frozen=True, slots=True)
class LyricsSnapshot:
    lyrics: ParsedLyrics
    user_offset_ms: int = 0

    @property
    def effective_offset_ms(self) -> int:
        return self.lyrics.offset_ms + self.user_offset_ms


class LyricsController:
    """
    Owns the current lyrics and offsets for one playback session.

    Everything the resolver needs lives in one frozen snapshot that is
    replaced with a single assignment, so a query always sees either the old
    or the new lyrics, never a mix. `tick` is meant to be called from a
    fixed-rate polling loop and reports only index changes.
    """

    def __init__(self, offset_limit_ms: int = DEFAULT_OFFSET_LIMIT_MS):
        self.offset_limit_ms = abs(offset_limit_ms)
        self._snapshot = LyricsSnapshot(ParsedLyrics())
        self._seeking = False
        self.active_idx = -1
        self._last_reported: int | None = None

    # -- lyrics ---------------------------------------------------------

    @property
    def snapshot(self) -> LyricsSnapshot:
        return self._snapshot

    @property
    def lines(self) -> tuple[LyricLine, ...]:
        return self._snapshot.lyrics.lines

    @property
    def state(self) -> SyncState:
        return SyncState.TRACKING if self._snapshot.lyrics.lines else SyncState.NO_LYRICS

    def load(self, parsed: ParsedLyrics) -> None:
        self._snapshot = replace(self._snapshot, lyrics=parsed)
        self._reset_index()
        logger.debug("Loaded %d lyric lines (file offset %d ms)", len(parsed.lines), parsed.offset_ms)

    def load_text(self, text: str) -> ParsedLyrics:
        parsed = parse_lyrics(text)
        self.load(parsed)
        return parsed

    def clear(self) -> None:
        self.load(ParsedLyrics())

    def _reset_index(self) -> None:
        self.active_idx = -1
        self._last_reported = None

    # -- offsets --------------------------------------------------------

    @property
    def user_offset_ms(self) -> int:
        return self._snapshot.user_offset_ms

    @property
    def effective_offset_ms(self) -> int:
        return self._snapshot.effective_offset_ms

    def set_user_offset(self, offset_ms: int) -> int:
        lim = self.offset_limit_ms
        clamped = max(-lim, min(lim, int(offset_ms)))
        if clamped != offset_ms:
            logger.debug("User offset %s clamped to %d ms", offset_ms, clamped)
        self._snapshot = replace(self._snapshot, user_offset_ms=clamped)
        return clamped

    def nudge_offset(self, direction: int, step: int = 1) -> int:
        # 1 ms per nudge; callers pass step=10 / step=100 for coarse moves
        sign = 1 if direction >= 0 else -1
        return self.set_user_offset(self.user_offset_ms + sign * abs(step))

    # -- time -> line -----------------------------------------------------

    def effective_time(self, playback_ms: float) -> int:
        return math.floor(playback_ms + self.effective_offset_ms)

    def resolve(self, playback_ms: float) -> int:
        snap = self._snapshot
        return stable_active_index(snap.lyrics.lines, playback_ms + snap.effective_offset_ms)

    def tick(self, playback_ms: float) -> int | None:
        """
        Returns the active index when it differs from the last reported one,
        otherwise None. Ignored while a seek is in progress.
        """
        if self._seeking or self.state is SyncState.NO_LYRICS:
            return None
        idx = self.resolve(playback_ms)
        self.active_idx = idx
        if idx != self._last_reported:
            self._last_reported = idx
            return idx
        return None

    @property
    def seeking(self) -> bool:
        return self._seeking

    def begin_seek(self) -> None:
        self._seeking = True

    def end_seek(self, playback_ms: float) -> int:
        """Commit exactly one index for the settled position (may move backwards)."""
        self._seeking = False
        idx = self.resolve(playback_ms)
        self.active_idx = idx
        self._last_reported = idx
        return idx

    def seek_target_ms(self, index: int) -> int:
        """Playback position at which line `index` becomes active."""
        line = self.lines[index]
        return max(0, line.time_ms - self.effective_offset_ms)
