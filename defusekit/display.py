"""In-memory model of the 320x240 RGB565 TFT panel with a 5x7 bitmap font."""

from __future__ import annotations

from enum import IntEnum

TFT_WIDTH = 320
TFT_HEIGHT = 240

CHAR_WIDTH = 6
CHAR_HEIGHT = 8
_GLYPH_COLUMNS = 5
_GLYPH_ROWS = 7
_FIRST_CHAR = 0x20
_LAST_CHAR = 0x7E


class Color(IntEnum):
    """RGB565 colours used by the game screens."""

    BLACK = 0x0000
    WHITE = 0xFFFF
    GREEN = 0x07E0
    YELLOW = 0xFFE0
    LGRAY = 0xC618
    RED = 0xF800


def rgb565(r: int, g: int, b: int) -> int:
    """Pack 8-bit red, green and blue channels into one RGB565 value."""
    for channel in (r, g, b):
        if not 0 <= channel <= 0xFF:
            raise ValueError(f"colour channel out of range: {channel}")
    return ((r & 0xF8) << 8) | ((g & 0xFC) << 3) | (b >> 3)


# One entry per printable ASCII character from 0x20 to 0x7E. Each entry holds
# five column bytes; bit 0 of a column is the top row.
_FONT: tuple[bytes, ...] = tuple(
    bytes.fromhex(row)
    for row in (
        "0000000000", "00005f0000", "0007000700", "147f147f14",  # space ! " #
        "242a7f2a12", "2313086462", "3649552250", "0005030000",  # $ % & '
        "001c224100", "0041221c00", "082a1c2a08", "08083e0808",  # ( ) * +
        "0050300000", "0808080808", "0060600000", "2010080402",  # , - . /
        "3e5149453e", "00427f4000", "4261514946", "2141454b31",  # 0 1 2 3
        "1814127f10", "2745454539", "3c4a494930", "0171090503",  # 4 5 6 7
        "3649494936", "064949291e", "0036360000", "0056360000",  # 8 9 : ;
        "0008142241", "1414141414", "4122140800", "0201510906",  # < = > ?
        "324979413e", "7e1111117e", "7f49494936", "3e41414122",  # @ A B C
        "7f4141221c", "7f49494941", "7f09090101", "3e41415132",  # D E F G
        "7f0808087f", "00417f4100", "2040413f01", "7f08142241",  # H I J K
        "7f40404040", "7f0204027f", "7f0408107f", "3e4141413e",  # L M N O
        "7f09090906", "3e4151215e", "7f09192946", "4649494931",  # P Q R S
        "01017f0101", "3f4040403f", "1f2040201f", "3f4038403f",  # T U V W
        "6314081463", "0708700807", "6151494543", "00007f4141",  # X Y Z [
        "0204081020", "41417f0000", "0402010204", "4040404040",  # \ ] ^ _
        "0001020400", "2054545478", "7f48444438", "3844444420",  # ` a b c
        "384444487f", "3854545418", "087e090102", "081454543c",  # d e f g
        "7f08040478", "00447d4000", "2040443d00", "007f102844",  # h i j k
        "00417f4000", "7c04180478", "7c08040478", "3844444438",  # l m n o
        "7c14141408", "081414187c", "7c08040408", "4854545420",  # p q r s
        "043f444020", "3c4040207c", "1c2040201c", "3c4030403c",  # t u v w
        "4428102844", "0c5050503c", "4464544c44", "0008364100",  # x y z {
        "00007f0000", "0041360800", "0804081008",  # | } ~
    )
)


def glyph(c: str) -> bytes:
    """Return the five column bytes for ``c``; unprintable characters map to space."""
    if len(c) != 1:
        raise ValueError("glyph expects a single character")
    code = ord(c)
    if not _FIRST_CHAR <= code <= _LAST_CHAR:
        code = _FIRST_CHAR
    return _FONT[code - _FIRST_CHAR]


class Display:
    """A frame buffer with the drawing primitives of the TFT driver.

    Pixels outside the panel are clipped, as the controller ignores writes
    beyond its address window.
    """

    def __init__(self, width: int = TFT_WIDTH, height: int = TFT_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("display dimensions must be positive")
        self.width = width
        self.height = height
        self._pixels = [int(Color.BLACK)] * (width * height)

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x: int, y: int) -> int:
        """Return the RGB565 colour stored at ``(x, y)``."""
        if not self._inside(x, y):
            raise IndexError(f"pixel ({x}, {y}) is outside the display")
        return self._pixels[y * self.width + x]

    def draw_pixel(self, x: int, y: int, color: int) -> None:
        if self._inside(x, y):
            self._pixels[y * self.width + x] = int(color) & 0xFFFF

    def fill_rect(self, x: int, y: int, w: int, h: int, color: int) -> None:
        for row in range(y, y + h):
            for col in range(x, x + w):
                self.draw_pixel(col, row, color)

    def draw_vline(self, x: int, y0: int, y1: int, color: int) -> None:
        top, bottom = sorted((y0, y1))
        for row in range(top, bottom + 1):
            self.draw_pixel(x, row, color)

    def draw_char(self, x: int, y: int, c: str, color: int, bg: int) -> None:
        """Draw one 6x8 character cell: 5x7 glyph plus a spacing column and row."""
        columns = glyph(c)
        for row in range(CHAR_HEIGHT):
            for col in range(CHAR_WIDTH):
                lit = (
                    col < _GLYPH_COLUMNS
                    and row < _GLYPH_ROWS
                    and columns[col] & (1 << row)
                )
                self.draw_pixel(x + col, y + row, color if lit else bg)

    def draw_string(self, x: int, y: int, text: str, color: int, bg: int) -> None:
        for offset, c in enumerate(text):
            self.draw_char(x + offset * CHAR_WIDTH, y, c, color, bg)