from __future__ import annotations

import shutil
import signal
import sys
from dataclasses import dataclass
from typing import Callable

from colorama import just_fix_windows_console

CSI = "\x1b["

# Windows has no SIGWINCH; there the frame is only redrawn on the next change
_SIGWINCH = getattr(signal, "SIGWINCH", None)


def _sgr(*codes: int) -> str:
    return CSI + ";".join(str(c) for c in codes) + "m"


@dataclass(frozen=True, slots=True)
class Theme:
    title: str = _sgr(36, 1)  # cyan bold
    current: str = _sgr(32, 1)  # green bold
    dim: str = _sgr(90)  # bright black
    warning: str = _sgr(33, 1)  # yellow bold
    reset: str = _sgr(0)


def visible_window(total: int, current_idx: int, body_rows: int, context_lines: int) -> tuple[int, int]:
    """
    [start, end) slice of lines to show: `context_lines` above the current
    line when possible, never past either end of the list.
    """
    start = 0 if current_idx < 0 else max(current_idx - context_lines, 0)
    end = min(start + body_rows, total)
    start = max(end - body_rows, 0)
    return start, end


class AnsiRenderer:
    def __init__(self, use_alt_screen: bool = True, theme: Theme | None = None):
        self.use_alt_screen = use_alt_screen
        self.theme = theme or Theme()
        self._entered = False
        self._resize_handler: Callable[..., None] | None = None
        self._last_render_args: tuple[str, list[str], int, int, str | None] | None = None

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit()

    def enter(self) -> None:
        if self._entered:
            return
        just_fix_windows_console()
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049h")  # alt screen
        sys.stdout.write(CSI + "?25l")  # hide cursor
        sys.stdout.write(CSI + "H" + CSI + "2J")  # home + clear
        sys.stdout.flush()
        self._entered = True

        def _on_resize(signum=None, frame=None):
            if self._last_render_args:
                self.render(*self._last_render_args)

        self._resize_handler = _on_resize
        if _SIGWINCH is not None:
            signal.signal(_SIGWINCH, _on_resize)

    def exit(self) -> None:
        if not self._entered:
            return
        if self._resize_handler and _SIGWINCH is not None:
            signal.signal(_SIGWINCH, signal.SIG_DFL)
        self._resize_handler = None
        sys.stdout.write(self.theme.reset)
        sys.stdout.write(CSI + "?25h")  # show cursor
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049l")  # normal screen
        sys.stdout.flush()
        self._entered = False
        self._last_render_args = None

    def render(
        self,
        title: str,
        lines: list[str],
        current_idx: int,
        context_lines: int = 1,
        footer: str | None = None,
    ) -> None:
        # Store args for SIGWINCH redraw
        self._last_render_args = (title, lines, current_idx, context_lines, footer)

        _cols, rows = shutil.get_terminal_size(fallback=(80, 24))
        # reserve 1 line for title (+1 for footer)
        body_rows = max(rows - 1 - (1 if footer else 0), 1)
        start, end = visible_window(len(lines), current_idx, body_rows, context_lines)

        out: list[str] = []
        out.append(f"{self.theme.title}♫ {title} ♫{self.theme.reset}")

        for i in range(start, end):
            style = self.theme.current if i == current_idx else self.theme.dim
            out.append(f"{style}{lines[i]}{self.theme.reset}")

        if footer:
            out.append(f"{self.theme.warning}{footer}{self.theme.reset}")

        # move home + clear, then print full frame
        sys.stdout.write(CSI + "H" + CSI + "2J")
        sys.stdout.write("\n".join(out))
        sys.stdout.write(self.theme.reset)
        sys.stdout.flush()
