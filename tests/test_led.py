import pytest

from defusekit.led import BRIGHTNESS, LED_OFF, RgbLed, scale_channel


def test_scale_channel_endpoints():
    assert scale_channel(0) == 0
    assert scale_channel(255) == BRIGHTNESS


def test_scale_channel_is_monotonic():
    values = [scale_channel(v) for v in range(256)]
    assert values == sorted(values)


def test_scale_channel_rejects_out_of_range():
    with pytest.raises(ValueError):
        scale_channel(256)
    with pytest.raises(ValueError):
        scale_channel(-1)


def test_new_led_is_off():
    assert RgbLed().levels == (LED_OFF, LED_OFF, LED_OFF)


def test_full_white_uses_brightness_cap():
    led = RgbLed()
    led.set_color(255, 255, 255)
    assert led.levels == (LED_OFF - BRIGHTNESS,) * 3
    assert led.color == (255, 255, 255)


def test_win_is_green_only():
    led = RgbLed()
    led.set_win()
    assert led.color == (0, 255, 0)
    assert led.levels[0] == LED_OFF and led.levels[2] == LED_OFF
    assert led.levels[1] < LED_OFF


def test_idle_is_blue_and_playing_is_off():
    led = RgbLed()
    led.set_idle()
    assert led.color == (0, 0, 255)
    led.set_playing()
    assert led.levels == (LED_OFF, LED_OFF, LED_OFF)


def test_locking_endpoints_and_clamp():
    led = RgbLed()
    led.set_locking(0.0)
    assert led.color == (255, 255, 0)
    led.set_locking(1.0)
    assert led.color == (0, 255, 0)
    led.set_locking(-3.0)
    assert led.color == (255, 255, 0)
    led.set_locking(7.0)
    assert led.color == (0, 255, 0)


def test_locking_red_decreases_with_progress():
    led = RgbLed()
    reds = []
    for step in range(11):
        led.set_locking(step / 10)
        reds.append(led.color[0])
    assert reds == sorted(reds, reverse=True)


def test_flash_white_ends_off():
    led = RgbLed()
    led.flash_white()
    assert led.history[-2:] == [(255, 255, 255), (0, 0, 0)]
    assert led.levels == (LED_OFF, LED_OFF, LED_OFF)


def test_set_color_rejects_bad_channel():
    with pytest.raises(ValueError):
        RgbLed().set_color(0, 300, 0)