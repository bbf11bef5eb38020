from lyric_scroll.cli import main

main()
