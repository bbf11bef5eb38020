from __future__ import annotations

from pathlib import Path
import typer

from lyric_scroll.app import watch as watch_loop
from lyric_scroll.config import load_config
from lyric_scroll.logging_setup import setup_logging
from lyric_scroll.lrc.export import export_json, export_lrc, export_srt
from lyric_scroll.lrc.parse import format_timestamp, parse_lyrics_with_stats
from lyric_scroll.mpris.client import MprisClient
from lyric_scroll.mpris.errors import MprisError
from lyric_scroll.store.sqlite import OffsetStore
from lyric_scroll.sync.controller import LyricsController
from lyric_scroll.tracks import LoadStatus, lyrics_for_url, offset_key


app = typer.Typer(no_args_is_help=True, add_completion=False)


def _read_lrc(lrc_path: Path) -> str:
    try:
        return lrc_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise typer.BadParameter(f"cannot read {lrc_path}: {e}") from e


@app.command()
def watch(
    lrc_path: Path | None = typer.Argument(None, help="Lyric file to follow (default: next to the playing track)"),
    player: str | None = typer.Option(None, "--player", help="MPRIS service or short name (e.g. vlc)"),
    free_run: bool = typer.Option(False, "--free-run", help="Follow LRC_PATH with a local clock, no player"),
    offset: int | None = typer.Option(None, "--offset", help="User offset in ms (overrides saved offset)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    refresh_hz: float | None = typer.Option(None, "--refresh-hz", help="Polling frequency (Hz)"),
    no_alt_screen: bool = typer.Option(False, "--no-alt-screen", help="Do not use alternate screen buffer"),
    context_lines: int | None = typer.Option(None, "--context", help="Lines above current line"),
):
    """
    Follow synced lyrics in the terminal.
    """
    if free_run and lrc_path is None:
        raise typer.BadParameter("--free-run needs an LRC_PATH")

    cfg = load_config()
    if refresh_hz is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "refresh_hz": refresh_hz})
    if context_lines is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "context_lines": context_lines})
    if no_alt_screen:
        cfg = cfg.__class__(**{**cfg.__dict__, "use_alt_screen": False})

    setup_logging(debug)
    raise typer.Exit(
        code=watch_loop(
            cfg,
            lyrics_file=lrc_path,
            preferred_player=player or cfg.preferred_player,
            free_run=free_run,
            user_offset_ms=offset,
        )
    )


@app.command()
def players():
    """List available MPRIS players."""
    for p in MprisClient.list_players():
        typer.echo(p)


@app.command()
def parse(lrc_path: Path):
    """Parse LRC and print stats."""
    parsed, stats = parse_lyrics_with_stats(_read_lrc(lrc_path))
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
    typer.echo(f"lines_ignored={stats.lines_ignored}")
    typer.echo(f"tags_total={stats.tags_total}")
    typer.echo(f"duplicates_merged={stats.duplicates_merged}")
    typer.echo(f"lines_out={stats.lines_out}")
    typer.echo(f"offset_ms={parsed.offset_ms}")


@app.command()
def export(
    lrc_path: Path,
    fmt: str = typer.Option("srt", "--format", case_sensitive=False, help="lrc|srt|json"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Export LRC to SRT/JSON/LRC (normalized)."""
    parsed, _stats = parse_lyrics_with_stats(_read_lrc(lrc_path))
    fmt_l = fmt.lower()
    if fmt_l == "json":
        data = export_json(parsed)
    elif fmt_l == "lrc":
        data = export_lrc(parsed)
    elif fmt_l == "srt":
        data = export_srt(parsed)
    else:
        raise typer.BadParameter("format must be one of: lrc, srt, json")

    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data, nl=False)


@app.command()
def locate(
    lrc_path: Path,
    seconds: float = typer.Argument(..., help="Playback position in seconds"),
    offset: int = typer.Option(0, "--offset", help="User offset in ms"),
):
    """Print the line that is active at a playback position."""
    ctl = LyricsController()
    ctl.load_text(_read_lrc(lrc_path))
    ctl.set_user_offset(offset)
    idx = ctl.resolve(seconds * 1000)
    if idx < 0:
        typer.echo("no timed lines", err=True)
        raise typer.Exit(code=1)
    line = ctl.lines[idx]
    typer.echo(f"{idx}\t[{format_timestamp(line.time_ms)}]\t{line.display_text}")


@app.command()
def offset(
    track: str = typer.Argument(..., help="Track key, usually the audio file path"),
    set_ms: int | None = typer.Option(None, "--set", help="Save this user offset (ms)"),
    nudge: int | None = typer.Option(None, "--nudge", help="Add to the saved offset (ms)"),
    clear: bool = typer.Option(False, "--clear", help="Forget the saved offset"),
):
    """Show or change the saved user offset of a track."""
    cfg = load_config()
    store = OffsetStore(cfg.offsets_db_path)
    p = Path(track)
    key = str(p.resolve()) if p.exists() else track

    if clear:
        store.delete(key)
        typer.echo(f"Offset cleared: {key}")
        return

    ctl = LyricsController(offset_limit_ms=cfg.offset_limit_ms)
    ctl.set_user_offset(store.get(key) or 0)
    if set_ms is not None:
        ctl.set_user_offset(set_ms)
    if nudge:
        ctl.nudge_offset(1 if nudge > 0 else -1, step=abs(nudge))
    if set_ms is not None or nudge:
        store.set(key, ctl.user_offset_ms)
    typer.echo(f"{ctl.user_offset_ms:+d} ms")


@app.command()
def jump(
    index: int = typer.Argument(..., help="Lyric line index (0-based, negative counts from the end)"),
    player: str | None = typer.Option(None, "--player", help="MPRIS service or short name"),
):
    """Seek the player to the start of a lyric line."""
    cfg = load_config()
    try:
        client = MprisClient.pick_player(preferred=player or cfg.preferred_player)
        ti = client.track_info()
    except MprisError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    load = lyrics_for_url(ti.url)
    if load.status is not LoadStatus.LOADED:
        typer.echo(f"Error: {load.message}", err=True)
        raise typer.Exit(code=1)

    ctl = LyricsController(offset_limit_ms=cfg.offset_limit_ms)
    ctl.load(load.parsed)
    key = offset_key(ti.url, ti.track_key)
    ctl.set_user_offset((OffsetStore(cfg.offsets_db_path).get(key) if key else None) or 0)

    n = len(ctl.lines)
    if not -n <= index < n:
        raise typer.BadParameter(f"index must be in [{-n}, {n - 1}]")
    target = ctl.seek_target_ms(index % n)
    try:
        client.set_position_ms(ti.track_id, target)
    except MprisError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{format_timestamp(target)} {ctl.lines[index % n].display_text}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
