"""
ESC/POS-style VFD pole display – escape code protocol

Applies to: 2x20 character vacuum-fluorescent customer displays
(serial variants, "CD5220 / EPSON" command set)

Notes:
- Binary control codes, no terminator
- Text follows the positioning codes as raw bytes
- 8N1, default baud 9600
"""

US = b"\x1f"

COLUMNS = 20
ROWS = 2


class VfdProtocol:
    # ---------------------------
    # Cursor movement
    # ---------------------------

    @staticmethod
    def horizontal_scroll_mode() -> bytes:
        """US 03: Horizontal scroll mode."""
        return US + b"\x03"

    @staticmethod
    def cursor_right() -> bytes:
        """HT: Move cursor one column right."""
        return b"\x09"

    @staticmethod
    def cursor_left() -> bytes:
        """BS: Move cursor one column left."""
        return b"\x08"

    @staticmethod
    def cursor_up() -> bytes:
        """US LF: Move cursor one row up."""
        return US + b"\x0a"

    @staticmethod
    def cursor_down() -> bytes:
        """LF: Move cursor one row down."""
        return b"\x0a"

    @staticmethod
    def cursor_rightmost() -> bytes:
        """US CR: Move cursor to the right-most column."""
        return US + b"\x0d"

    @staticmethod
    def cursor_leftmost() -> bytes:
        """CR: Move cursor to the left-most column."""
        return b"\x0d"

    @staticmethod
    def cursor_home() -> bytes:
        """HOM: Move cursor to the upper-left position."""
        return b"\x0b"

    @staticmethod
    def cursor_bottom() -> bytes:
        """US B: Move cursor to the lower-left position."""
        return US + b"\x42"

    @staticmethod
    def cursor_goto(x: int, y: int) -> bytes:
        """
        US $ x y:
        - x: column 1..20
        - y: row 1..2
        """
        if not isinstance(x, int) or not isinstance(y, int):
            raise TypeError("Cursor position must be int")
        if not (1 <= x <= COLUMNS):
            raise ValueError(f"Column must be in range 1–{COLUMNS}")
        if not (1 <= y <= ROWS):
            raise ValueError(f"Row must be in range 1–{ROWS}")
        return US + b"\x24" + bytes([x, y])

    @staticmethod
    def cursor_display(show: int) -> bytes:
        """US C n: n=0 hide cursor, n=1 show cursor."""
        if show not in (0, 1):
            raise ValueError("Cursor display must be 0 or 1")
        return US + b"\x43" + bytes([show])

    # ---------------------------
    # Screen
    # ---------------------------

    @staticmethod
    def clear_screen() -> bytes:
        """CLR: Clear the whole screen."""
        return b"\x0c"

    @staticmethod
    def clear_line() -> bytes:
        """CAN: Clear the cursor line."""
        return b"\x18"

    @staticmethod
    def brightness(n: int) -> bytes:
        """US X n: Brightness level 1..4."""
        if not isinstance(n, int):
            raise TypeError("Brightness must be int")
        if not (1 <= n <= 4):
            raise ValueError("Brightness must be in range 1–4")
        return US + b"\x58" + bytes([n])

    @staticmethod
    def blink(n: int) -> bytes:
        """
        US E n:
        - 0 < n < 255: n*50 ms on / n*50 ms off
        - n = 0: blink canceled
        - n = 255: display turned off
        """
        if not isinstance(n, int):
            raise TypeError("Blink interval must be int")
        if not (0 <= n <= 255):
            raise ValueError("Blink interval must be in range 0–255")
        return US + b"\x45" + bytes([n])

    # ---------------------------
    # Text
    # ---------------------------

    @staticmethod
    def text(value: str) -> bytes:
        return value.encode("utf-8")


P = VfdProtocol


def line_at_home(text: str) -> bytes:
    """Home, clear the upper line, then write text."""
    return P.cursor_home() + P.clear_line() + P.text(text)


def line_at_bottom(text: str) -> bytes:
    """Bottom, clear the lower line, then write text."""
    return P.cursor_bottom() + P.clear_line() + P.text(text)
