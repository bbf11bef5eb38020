from __future__ import annotations

from dataclasses import dataclass

PLACEHOLDER_TEXT = "…"


@dataclass(frozen=True, slots=True)
class LyricLine:
    time_ms: int
    text: str

    @property
    def display_text(self) -> str:
        return self.text or PLACEHOLDER_TEXT


@dataclass(frozen=True, slots=True)
class ParsedLyrics:
    """
    Time-ordered lyric lines plus the file-level `[offset:N]` shift.

    Never mutated: a new lyric file produces a new instance.
    """

    lines: tuple[LyricLine, ...] = ()
    offset_ms: int = 0

    def __len__(self) -> int:
        return len(self.lines)

    def __bool__(self) -> bool:
        return bool(self.lines)
