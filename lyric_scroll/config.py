from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path


def _data_dir() -> Path:
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "lyric-scroll"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default) not in ("0", "false", "False", "no")


@dataclass(frozen=True)
class AppConfig:
    # Storage
    data_dir: Path
    offsets_db_path: Path

    # MPRIS
    preferred_player: str | None

    # Sync
    offset_limit_ms: int

    # Rendering
    refresh_hz: float
    context_lines: int  # lines above/below current
    use_alt_screen: bool


def load_config() -> AppConfig:
    data_dir = _data_dir()

    return AppConfig(
        data_dir=data_dir,
        offsets_db_path=data_dir / "offsets.sqlite3",
        preferred_player=os.getenv("LYRIC_SCROLL_PLAYER") or None,
        offset_limit_ms=int(os.getenv("LYRIC_SCROLL_OFFSET_LIMIT_MS", "5000")),
        refresh_hz=float(os.getenv("LYRIC_SCROLL_REFRESH_HZ", "30.0")),
        context_lines=int(os.getenv("LYRIC_SCROLL_CONTEXT_LINES", "1")),
        use_alt_screen=_env_flag("LYRIC_SCROLL_ALT_SCREEN", "1"),
    )
