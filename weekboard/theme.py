"""Color & style helpers for the terminal board.

- Truecolor when COLORTERM advertises it, else the xterm 256-color cube.
- Disabled entirely when settings say so (NO_COLOR, not a TTY, color=never).
- Project colors come from the database as "#rrggbb".
"""
import os

RESET_CODE = "0"
BOLD_CODE = "1"
DIM_CODE = "2"

HEX_PRIMARY = "#476EAE"
STATUS_HEX = {
    "todo": "#3b82f6",
    "in-progress": "#eab308",
    "done": "#22c55e",
    "archived": "#9ca3af",
}


def _hex_to_rgb(hex_code: str) -> tuple[int, int, int]:
    h = hex_code.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _fg_truecolor(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"


def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    return f"\033[38;5;{16 + 36 * r6 + 6 * g6 + b6}m"


class Theme:
    def __init__(self, enabled: bool, truecolor: bool | None = None):
        self.enabled = enabled
        if truecolor is None:
            colorterm = os.environ.get("COLORTERM", "").lower()
            truecolor = any(tok in colorterm for tok in ("truecolor", "24bit"))
        self.truecolor = enabled and truecolor

    def code(self, part: str) -> str:
        return f"\033[{part}m" if self.enabled else ""

    def hex(self, hex_code: str) -> str:
        if not self.enabled:
            return ""
        try:
            rgb = _hex_to_rgb(hex_code)
        except ValueError:
            return ""
        return _fg_truecolor(*rgb) if self.truecolor else _fg_256(*rgb)

    def color(self, text: str, *styles: str) -> str:
        if not self.enabled:
            return text
        return "".join(styles) + text + self.code(RESET_CODE)

    @property
    def bold(self) -> str:
        return self.code(BOLD_CODE)

    @property
    def dim(self) -> str:
        return self.code(DIM_CODE)

    def status(self, text: str, status: str) -> str:
        return self.color(text, self.hex(STATUS_HEX.get(status, HEX_PRIMARY)))

    def project(self, text: str, hex_code: str) -> str:
        return self.color(text, self.hex(hex_code))

    def style(self, text: str, role: str) -> str:
        """Role-based styling used by the summary view."""
        if role.startswith("status:"):
            return self.status(text, role.split(":", 1)[1])
        if role == "header":
            return self.color(text, self.bold)
        if role == "day":
            return self.color(text, self.bold, self.hex("#06b6d4"))
        if role == "dim":
            return self.color(text, self.dim)
        return text
