"""
Compatibility entrypoint.

Prefer running:
  - `lyric-scroll watch`
or:
  - `python -m lyric_scroll`
"""

from lyric_scroll.cli import main as cli_main


def cli() -> None:
    cli_main()


if __name__ == "__main__":
    cli()
