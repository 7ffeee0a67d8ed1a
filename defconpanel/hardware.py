"""Clocks, colour helpers, an LED strip model and a buzzer."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


class ManualClock:
    """A millisecond clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("clock cannot start before zero")
        self._now = start

    def millis(self) -> int:
        return self._now

    def advance(self, ms: int) -> None:
        if ms < 0:
            raise ValueError("clock cannot go backwards")
        self._now += ms


class SystemClock:
    """Milliseconds elapsed since the clock was created."""

    def __init__(self) -> None:
        self._origin = time.monotonic()

    def millis(self) -> int:
        return int((time.monotonic() - self._origin) * 1000)


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in 0..255, got {value}")


def color(r: int, g: int, b: int) -> int:
    """Pack red, green and blue (0..255 each) into a 0xRRGGBB integer."""
    _check_byte("r", r)
    _check_byte("g", g)
    _check_byte("b", b)
    return (r << 16) | (g << 8) | b


def color_hsv(hue: int, sat: int, val: int) -> int:
    """Convert hue (0..65535), saturation and value (0..255) to 0xRRGGBB."""
    if not 0 <= hue <= 0xFFFF:
        raise ValueError(f"hue must be in 0..65535, got {hue}")
    _check_byte("sat", sat)
    _check_byte("val", val)

    h = (hue * 1530 + 32768) // 65536
    if h < 510:
        b = 0
        r, g = (255, h) if h < 255 else (510 - h, 255)
    elif h < 1020:
        r = 0
        g, b = (255, h - 510) if h < 765 else (1020 - h, 255)
    elif h < 1530:
        g = 0
        r, b = (h - 1020, 255) if h < 1275 else (255, 1530 - h)
    else:
        r, g, b = 255, 0, 0

    v1 = 1 + val
    s1 = 1 + sat
    s2 = 255 - sat

    def channel(c: int) -> int:
        return ((((c * s1) >> 8) + s2) * v1) >> 8

    return color(channel(r), channel(g), channel(b))


class LedStrip:
    """An addressable LED strip held in memory; `show` latches what is displayed."""

    def __init__(self, count: int) -> None:
        if count <= 0:
            raise ValueError("an LED strip needs at least one LED")
        self.count = count
        self.pixels: list[int] = [0] * count
        self.brightness = 255
        self.displayed: tuple[int, ...] = tuple(self.pixels)
        self.displayed_brightness = self.brightness
        self.shows = 0
        self.started = False

    def begin(self) -> None:
        self.started = True

    def clear(self) -> None:
        self.pixels = [0] * self.count

    def show(self) -> None:
        self.displayed = tuple(self.pixels)
        self.displayed_brightness = self.brightness
        self.shows += 1

    def fill(self, color: int, first: int = 0, count: int = 0) -> None:
        """Set `count` LEDs from `first` to `color`; a count of 0 fills to the end."""
        if not 0 <= color <= 0xFFFFFF:
            raise ValueError(f"colour out of range: {color:#x}")
        if first < 0 or count < 0:
            raise ValueError("first and count must not be negative")
        if first >= self.count:
            return
        end = self.count if count == 0 else min(first + count, self.count)
        self.pixels[first:end] = [color] * (end - first)


@dataclass
class Buzzer:
    """A piezo buzzer that records the tones it plays."""

    sleep: Callable[[int], None] | None = None
    tones: list[tuple[int, int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.sleep is None:
            self.sleep = lambda ms: time.sleep(ms / 1000)

    def tone(self, frequency: int, duration: int) -> None:
        """Start a tone of `frequency` Hz lasting `duration` ms; does not block."""
        if frequency <= 0:
            raise ValueError("frequency must be positive")
        if duration < 0:
            raise ValueError("duration must not be negative")
        self.tones.append((frequency, duration))

    def pause(self, ms: int) -> None:
        if ms < 0:
            raise ValueError("pause must not be negative")
        assert self.sleep is not None
        self.sleep(ms)