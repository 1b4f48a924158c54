from ..board import BoardApp
from ..deps import Store
from ..theme import Theme


def register(subparsers) -> None:
    p = subparsers.add_parser("board", help="Open the weekly board (default)")
    p.set_defaults(handler=open_board)


def open_board(args, store: Store) -> int:
    theme = Theme(enabled=store.settings.color_enabled)
    BoardApp(store, theme, alt_screen=store.settings.alt_screen).run()
    return 0
