from lyric_scroll.lrc.model import LyricLine, ParsedLyrics
from lyric_scroll.sync.controller import LyricsController, SyncState

LRC = "[00:00.00]a\n[00:01.00]b\n[00:02.00]c\n"


def test_tracker_changed_only_on_change():
    ctl = LyricsController()
    ctl.load_text(LRC)
    assert ctl.tick(0) == 0
    assert ctl.tick(10) is None
    assert ctl.tick(999) is None
    assert ctl.tick(1000) == 1
    assert ctl.tick(1500) is None
    assert ctl.tick(2500) == 2


def test_state_transitions():
    ctl = LyricsController()
    assert ctl.state is SyncState.NO_LYRICS
    assert ctl.tick(1000) is None
    assert ctl.active_idx == -1

    ctl.load_text(LRC)
    assert ctl.state is SyncState.TRACKING
    assert ctl.tick(1200) == 1

    ctl.load_text("no timestamps here")
    assert ctl.state is SyncState.NO_LYRICS
    assert ctl.active_idx == -1


def test_reload_swaps_whole_snapshot():
    ctl = LyricsController()
    ctl.set_user_offset(40)
    first = ctl.load_text("[offset:100]\n[00:01.00]x\n")
    before = ctl.snapshot
    ctl.load(ParsedLyrics(lines=(LyricLine(0, "y"),)))

    assert ctl.snapshot is not before
    assert before.lyrics is first  # old snapshot untouched
    assert ctl.lines == (LyricLine(0, "y"),)
    assert ctl.user_offset_ms == 40
    # new lyrics get a fresh first report even for the same index
    assert ctl.tick(0) == 0


def test_effective_time_adds_file_and_user_offset():
    ctl = LyricsController()
    ctl.load_text("[offset:-300]\n[00:01.00]a\n[00:02.00]b\n")
    ctl.set_user_offset(100)
    assert ctl.effective_offset_ms == -200
    assert ctl.effective_time(2150.7) == 1950
    assert ctl.resolve(2150) == 0
    assert ctl.resolve(2200) == 1


def test_user_offset_is_clamped():
    ctl = LyricsController(offset_limit_ms=5000)
    assert ctl.set_user_offset(7000) == 5000
    assert ctl.set_user_offset(-9000) == -5000
    assert ctl.set_user_offset(12) == 12


def test_nudge_offset():
    ctl = LyricsController(offset_limit_ms=150)
    assert ctl.nudge_offset(1) == 1
    assert ctl.nudge_offset(1, step=10) == 11
    assert ctl.nudge_offset(-1, step=100) == -89
    assert ctl.nudge_offset(-1, step=100) == -150


def test_seek_blocks_ticks_then_commits_once():
    ctl = LyricsController()
    ctl.load_text(LRC)
    assert ctl.tick(2500) == 2

    ctl.begin_seek()
    assert ctl.seeking
    assert ctl.tick(100) is None
    assert ctl.active_idx == 2

    # backwards jump is allowed
    assert ctl.end_seek(1100) == 1
    assert not ctl.seeking
    assert ctl.tick(1200) is None
    assert ctl.tick(2000) == 2


def test_before_first_line_clamps_to_first():
    ctl = LyricsController()
    ctl.load_text("[00:05.00]late start\n[00:06.00]next\n")
    assert ctl.tick(0) == 0
    assert ctl.tick(4999) is None
    assert ctl.tick(6000) == 1


def test_seek_target_round_trips_to_same_line():
    ctl = LyricsController()
    ctl.load_text("[offset:250]\n[00:00.10]a\n[00:01.00]b\n[00:02.00]c\n")
    ctl.set_user_offset(-50)
    # effective offset +200: line "b" is active from playback 800 ms
    assert ctl.seek_target_ms(1) == 800
    for i in range(len(ctl.lines)):
        assert ctl.resolve(ctl.seek_target_ms(i)) == i
    # never negative
    assert ctl.seek_target_ms(0) == 0
