import time

import pytest

from defconpanel.hardware import (
    Buzzer,
    LedStrip,
    ManualClock,
    SystemClock,
    color,
    color_hsv,
)


def test_manual_clock_advances():
    clock = ManualClock()
    assert clock.millis() == 0
    clock.advance(1500)
    clock.advance(500)
    assert clock.millis() == 2000


def test_manual_clock_rejects_backwards():
    clock = ManualClock(10)
    with pytest.raises(ValueError):
        clock.advance(-1)
    assert clock.millis() == 10


def test_system_clock_is_monotonic():
    clock = SystemClock()
    first = clock.millis()
    time.sleep(0.01)
    second = clock.millis()
    assert second >= first
    assert first >= 0


def test_color_packs_channels():
    assert color(255, 0, 0) == 0xFF0000
    assert color(0, 0, 255) == 255
    assert color(255, 255, 255) == 0xFFFFFF


@pytest.mark.parametrize("args", [(256, 0, 0), (0, -1, 0), (0, 0, 300)])
def test_color_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        color(*args)


@pytest.mark.parametrize("hue", [0, 22000, 32768, 40000, 65535])
def test_zero_saturation_full_value_is_white(hue):
    assert color_hsv(hue, 0, 255) == color(255, 255, 255)


@pytest.mark.parametrize("hue", [0, 22000, 40000])
@pytest.mark.parametrize("sat", [0, 150, 255])
def test_zero_value_is_black(hue, sat):
    assert color_hsv(hue, sat, 0) == 0


def test_pure_red_hue():
    assert color_hsv(0, 255, 255) == color(255, 0, 0)


def test_brightness_is_monotonic():
    previous = -1
    for val in range(0, 256, 15):
        red = color_hsv(0, 255, val) >> 16
        assert red >= previous
        previous = red


def test_color_hsv_rejects_bad_hue():
    with pytest.raises(ValueError):
        color_hsv(70000, 255, 255)


def test_strip_fill_and_show():
    strip = LedStrip(50)
    strip.begin()
    red = color(255, 0, 0)
    strip.fill(red, 20, 6)
    assert strip.pixels[20:26] == [red] * 6
    assert strip.pixels[19] == 0
    assert strip.pixels[26] == 0
    assert strip.displayed == (0,) * 50
    strip.show()
    assert strip.displayed == tuple(strip.pixels)
    assert strip.shows == 1
    assert strip.started


def test_strip_fill_zero_count_fills_to_end():
    strip = LedStrip(10)
    white = color(255, 255, 255)
    strip.fill(white, 4, 0)
    assert strip.pixels == [0] * 4 + [white] * 6


def test_strip_fill_clips_at_end():
    strip = LedStrip(10)
    strip.fill(color(0, 0, 255), 8, 5)
    assert strip.pixels[8:] == [color(0, 0, 255)] * 2
    assert len(strip.pixels) == 10


def test_strip_fill_past_end_does_nothing():
    strip = LedStrip(10)
    strip.fill(color(0, 255, 0), 10, 3)
    assert strip.pixels == [0] * 10


def test_strip_clear_resets_pixels():
    strip = LedStrip(5)
    strip.fill(color(1, 2, 3))
    strip.clear()
    assert strip.pixels == [0] * 5


def test_strip_brightness_latched_on_show():
    strip = LedStrip(3)
    strip.brightness = 1
    assert strip.displayed_brightness == 255
    strip.show()
    assert strip.displayed_brightness == 1


def test_strip_rejects_empty():
    with pytest.raises(ValueError):
        LedStrip(0)


def test_buzzer_records_tones_and_sleeps():
    clock = ManualClock()
    buzzer = Buzzer(clock.advance)
    buzzer.tone(1200, 50)
    buzzer.pause(100)
    buzzer.tone(1200, 100)
    assert buzzer.tones == [(1200, 50), (1200, 100)]
    assert clock.millis() == 100


def test_buzzer_rejects_bad_tone():
    buzzer = Buzzer(ManualClock().advance)
    with pytest.raises(ValueError):
        buzzer.tone(0, 100)
    with pytest.raises(ValueError):
        buzzer.tone(400, -1)
    assert buzzer.tones == []


def test_buzzer_rejects_negative_pause():
    clock = ManualClock()
    buzzer = Buzzer(clock.advance)
    with pytest.raises(ValueError):
        buzzer.pause(-5)
    assert clock.millis() == 0