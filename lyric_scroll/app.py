from __future__ import annotations

import logging
import signal
import time
from pathlib import Path

from lyric_scroll.clock import FreeRunningClock, PlaybackClock
from lyric_scroll.config import AppConfig
from lyric_scroll.mpris.client import MprisClient, TrackInfo
from lyric_scroll.mpris.errors import NoPlayersFound, PlayerUnavailable
from lyric_scroll.render.ansi import AnsiRenderer
from lyric_scroll.store.sqlite import OffsetStore
from lyric_scroll.sync.controller import LyricsController, SyncState
from lyric_scroll.tracks import LoadStatus, LyricsLoad, load_lyrics, lyrics_for_url, offset_key

logger = logging.getLogger(__name__)

APP_TITLE = "lyric-scroll"

# position jumps larger than this between two polls are treated as seeks
SEEK_JUMP_MS = 1500
# backward steps up to this are position jitter, not seeks
SEEK_BACK_TOLERANCE_MS = 250


class LyricsSession:
    """
    One iteration of the watch loop per `poll()`:
    clock -> (track, position) -> lyrics -> controller.tick -> render on change.

    With `lyrics_file` the lyrics are fixed and only the clock is followed;
    without it the lyric file is looked up next to whatever the player plays.
    """

    def __init__(
        self,
        cfg: AppConfig,
        renderer: AnsiRenderer,
        *,
        store: OffsetStore | None = None,
        preferred_player: str | None = None,
        lyrics_file: Path | None = None,
        clock: PlaybackClock | None = None,
        user_offset_ms: int | None = None,
    ):
        self.cfg = cfg
        self.renderer = renderer
        self.store = store
        self.preferred_player = preferred_player
        self.lyrics_file = lyrics_file
        self.clock = clock
        self.user_offset_ms = user_offset_ms
        self.controller = LyricsController(offset_limit_ms=cfg.offset_limit_ms)
        self.tick_s = 1.0 / max(cfg.refresh_hz, 1.0)

        self._client: MprisClient | None = None
        self._track_key: str | None = None
        self._title = lyrics_file.name if lyrics_file else APP_TITLE
        self._display_lines: list[str] = []
        self._last_pos_ms: int | None = None
        self._last_load: LyricsLoad | None = None

    # -- player -------------------------------------------------------

    def _player(self) -> MprisClient:
        if self._client is None:
            self._client = MprisClient.pick_player(preferred=self.preferred_player)
        return self._client

    def _drop_player(self) -> None:
        self._client = None

    # -- lyrics -------------------------------------------------------

    def _offset_key(self, ti: TrackInfo | None) -> str | None:
        # a fixed lyric file keeps its offset under its own path
        if self.lyrics_file is not None:
            return str(self.lyrics_file.resolve())
        if ti is None:
            return None
        return offset_key(ti.url, ti.track_key)

    def _apply(self, load: LyricsLoad, ti: TrackInfo | None) -> None:
        self._last_load = load
        self._last_pos_ms = None
        self.controller.load(load.parsed)
        self._display_lines = [ln.display_text for ln in self.controller.lines]

        offset = self.user_offset_ms
        if offset is None and self.store is not None:
            key = self._offset_key(ti)
            offset = self.store.get(key) if key else None
        self.controller.set_user_offset(offset or 0)

        if load.status is LoadStatus.LOADED:
            logger.info("%s (%d lines)", load.message, len(self.controller.lines))
            self.renderer.render(self._title, self._display_lines, current_idx=-1,
                                 context_lines=self.cfg.context_lines, footer=self._footer())
        else:
            logger.info("%s", load.message)
            self._status(load.message)

    def _on_track_change(self, ti: TrackInfo) -> None:
        self._track_key = ti.track_key
        self._title = f"{ti.artist} - {ti.title}" if ti.artist else (ti.title or APP_TITLE)
        self._apply(lyrics_for_url(ti.url), ti)

    # -- rendering ----------------------------------------------------

    def _footer(self) -> str | None:
        off = self.controller.effective_offset_ms
        return f"offset {off:+d} ms" if off else None

    def _status(self, message: str) -> None:
        self.renderer.render(self._title, [message], current_idx=-1, context_lines=self.cfg.context_lines)

    def _render(self, idx: int) -> None:
        self.renderer.render(self._title, self._display_lines, current_idx=idx,
                             context_lines=self.cfg.context_lines, footer=self._footer())

    # -- loop ---------------------------------------------------------

    def _is_seek(self, pos_ms: int) -> bool:
        last = self._last_pos_ms
        self._last_pos_ms = pos_ms
        if last is None:
            return False
        return last - pos_ms > SEEK_BACK_TOLERANCE_MS or pos_ms - last > SEEK_JUMP_MS + self.tick_s * 1000

    def poll(self) -> float:
        """Run one iteration; returns how long to sleep before the next."""
        ti: TrackInfo | None = None
        clock = self.clock
        if clock is None:
            try:
                client = self._player()
                ti = client.track_info()
            except NoPlayersFound:
                self._status("No active MPRIS players")
                return 1.0
            except PlayerUnavailable as e:
                self._drop_player()
                self._status(f"MPRIS unavailable: {e}")
                return 0.5
            clock = client

        if self.lyrics_file is not None:
            if self._last_load is None:
                self._apply(load_lyrics(self.lyrics_file), ti)
        elif ti is not None and ti.track_key != self._track_key:
            self._on_track_change(ti)

        if self.controller.state is SyncState.NO_LYRICS:
            return self.tick_s

        try:
            pos_ms = clock.position_ms()
        except PlayerUnavailable:
            # player briefly unavailable: keep last frame
            self._drop_player()
            return self.tick_s

        if self._is_seek(pos_ms):
            logger.debug("Seek detected at %d ms", pos_ms)
            self.controller.begin_seek()
            self._render(self.controller.end_seek(pos_ms))
            return self.tick_s

        changed = self.controller.tick(pos_ms)
        if changed is not None:
            self._render(changed)
        return self.tick_s


def watch(
    cfg: AppConfig,
    *,
    lyrics_file: Path | None = None,
    preferred_player: str | None = None,
    free_run: bool = False,
    user_offset_ms: int | None = None,
) -> int:
    renderer = AnsiRenderer(use_alt_screen=cfg.use_alt_screen)
    session = LyricsSession(
        cfg,
        renderer,
        store=OffsetStore(cfg.offsets_db_path),
        preferred_player=preferred_player,
        lyrics_file=lyrics_file,
        clock=FreeRunningClock() if free_run else None,
        user_offset_ms=user_offset_ms,
    )

    renderer.enter()

    # Handle SIGINT (Ctrl+C) gracefully
    def _on_sigint(signum, frame):
        renderer.exit()
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _on_sigint)

    try:
        while True:
            time.sleep(session.poll())
    except KeyboardInterrupt:
        return 0
    finally:
        renderer.exit()
