import pytest

from defusekit.display import (
    CHAR_HEIGHT,
    CHAR_WIDTH,
    Color,
    Display,
    glyph,
    rgb565,
)


def test_rgb565_matches_named_colours():
    assert rgb565(255, 255, 255) == Color.WHITE
    assert rgb565(0, 255, 0) == Color.GREEN
    assert rgb565(255, 0, 0) == Color.RED
    assert rgb565(0, 0, 0) == Color.BLACK


def test_rgb565_rejects_out_of_range():
    with pytest.raises(ValueError):
        rgb565(256, 0, 0)


def test_glyph_from_font_table():
    assert glyph("A") == bytes([0x7E, 0x11, 0x11, 0x11, 0x7E])
    assert glyph(" ") == bytes(5)


def test_unprintable_glyph_is_space():
    assert glyph("\n") == glyph(" ")
    assert glyph("\x7f") == glyph(" ")


def test_glyph_requires_single_char():
    with pytest.raises(ValueError):
        glyph("AB")


def test_new_display_is_black():
    d = Display(10, 5)
    assert all(d.pixel(x, y) == Color.BLACK for x in range(10) for y in range(5))


def test_draw_pixel_and_read_back():
    d = Display(10, 10)
    d.draw_pixel(3, 4, Color.GREEN)
    assert d.pixel(3, 4) == Color.GREEN
    assert d.pixel(4, 3) == Color.BLACK


def test_draw_pixel_outside_is_clipped():
    d = Display(4, 4)
    d.draw_pixel(10, 10, Color.RED)
    assert all(d.pixel(x, y) == Color.BLACK for x in range(4) for y in range(4))


def test_pixel_outside_raises():
    with pytest.raises(IndexError):
        Display(4, 4).pixel(4, 0)


def test_fill_rect_covers_exact_region():
    d = Display(10, 10)
    d.fill_rect(2, 3, 4, 2, Color.YELLOW)
    for y in range(10):
        for x in range(10):
            inside = 2 <= x < 6 and 3 <= y < 5
            assert (d.pixel(x, y) == Color.YELLOW) == inside


def test_vline_order_does_not_matter():
    a, b = Display(5, 10), Display(5, 10)
    a.draw_vline(2, 1, 7, Color.WHITE)
    b.draw_vline(2, 7, 1, Color.WHITE)
    column_a = [a.pixel(2, y) for y in range(10)]
    assert column_a == [b.pixel(2, y) for y in range(10)]
    assert column_a.count(Color.WHITE) == 7


def test_draw_char_follows_glyph_bits():
    d = Display(20, 20)
    d.draw_char(1, 2, "A", Color.WHITE, Color.RED)
    columns = glyph("A")
    for row in range(CHAR_HEIGHT):
        for col in range(CHAR_WIDTH):
            lit = col < 5 and row < 7 and columns[col] >> row & 1
            expected = Color.WHITE if lit else Color.RED
            assert d.pixel(1 + col, 2 + row) == expected


def test_draw_string_matches_individual_chars():
    text = "Hi!"
    a, b = Display(40, 10), Display(40, 10)
    a.draw_string(0, 0, text, Color.GREEN, Color.BLACK)
    for i, c in enumerate(text):
        b.draw_char(i * CHAR_WIDTH, 0, c, Color.GREEN, Color.BLACK)
    assert all(a.pixel(x, y) == b.pixel(x, y) for x in range(40) for y in range(10))