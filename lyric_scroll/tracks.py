"""
Locating and reading the lyric file that belongs to a track.

Lyrics live next to the audio: `Song.mp3` pairs with `Song.lrc`. Any failure
to read the file is handled here so the parser is only ever handed text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from lyric_scroll.lrc.model import ParsedLyrics
from lyric_scroll.lrc.parse import parse_lyrics

logger = logging.getLogger(__name__)

LRC_SUFFIX = ".lrc"


class LoadStatus(str, Enum):
    LOADED = "loaded"
    MISSING = "missing"
    UNREADABLE = "unreadable"
    NO_TIMED_LINES = "no_timed_lines"


_STATUS_MESSAGES = {
    LoadStatus.LOADED: "Loaded {name}",
    LoadStatus.MISSING: "No matching .lrc found ({name})",
    LoadStatus.UNREADABLE: "Could not read {name}",
    LoadStatus.NO_TIMED_LINES: "{name} has no timestamped lines",
}


@dataclass(frozen=True, slots=True)
class LyricsLoad:
    path: Path | None
    parsed: ParsedLyrics
    status: LoadStatus

    @property
    def message(self) -> str:
        name = self.path.name if self.path else "no file"
        return _STATUS_MESSAGES[self.status].format(name=name)


def path_from_url(url: str) -> Path | None:
    """file:///music/a%20b.mp3 -> /music/a b.mp3; other schemes -> None."""
    if not url:
        return None
    u = urlparse(url)
    if u.scheme != "file":
        return None
    return Path(unquote(u.path))


def lrc_candidate(audio_path: Path) -> Path:
    if audio_path.suffix.lower() == LRC_SUFFIX:
        return audio_path
    return audio_path.with_suffix(LRC_SUFFIX)


def load_lyrics(path: Path | None) -> LyricsLoad:
    if path is None:
        return LyricsLoad(path=None, parsed=ParsedLyrics(), status=LoadStatus.MISSING)
    try:
        # utf-8-sig: a BOM would otherwise stick to the first line
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        logger.debug("No lyric file at %s", path)
        return LyricsLoad(path=path, parsed=ParsedLyrics(), status=LoadStatus.MISSING)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Unable to read lyric file %s: %s", path, e)
        return LyricsLoad(path=path, parsed=ParsedLyrics(), status=LoadStatus.UNREADABLE)

    parsed = parse_lyrics(text)
    if not parsed.lines:
        return LyricsLoad(path=path, parsed=parsed, status=LoadStatus.NO_TIMED_LINES)
    return LyricsLoad(path=path, parsed=parsed, status=LoadStatus.LOADED)


def lyrics_for_url(url: str) -> LyricsLoad:
    audio = path_from_url(url)
    return load_lyrics(lrc_candidate(audio) if audio else None)


def offset_key(url: str, fallback: str = "") -> str | None:
    """Key under which a track's user offset is saved: the resolved audio path."""
    audio = path_from_url(url)
    if audio is not None:
        return str(audio.resolve())
    return fallback or None
