from __future__ import annotations

import time
from typing import Callable, Protocol


class PlaybackClock(Protocol):
    def position_ms(self) -> int: ...


class FreeRunningClock:
    """
    Playback clock for following a lyric file without a player.

    Starts playing at `start_ms`; `seek`, `pause` and `play` behave like a
    player transport.
    """

    def __init__(self, start_ms: int = 0, *, playing: bool = True, now: Callable[[], float] = time.monotonic):
        self._now = now
        self._base_ms = max(0, int(start_ms))
        self._started_at: float | None = now() if playing else None

    @property
    def playing(self) -> bool:
        return self._started_at is not None

    def position_ms(self) -> int:
        if self._started_at is None:
            return self._base_ms
        return self._base_ms + int((self._now() - self._started_at) * 1000)

    def seek(self, position_ms: int) -> None:
        self._base_ms = max(0, int(position_ms))
        if self._started_at is not None:
            self._started_at = self._now()

    def pause(self) -> None:
        if self._started_at is None:
            return
        self._base_ms = self.position_ms()
        self._started_at = None

    def play(self) -> None:
        if self._started_at is None:
            self._started_at = self._now()
