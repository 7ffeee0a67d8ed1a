"""The DEFCON panel: level changes, header status and audible warnings."""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timedelta, timezone
from enum import Enum, auto
from pathlib import Path
from typing import Any, Callable

from . import config
from .hardware import Buzzer, LedStrip, SystemClock, color, color_hsv

log = logging.getLogger(__name__)

HARDWARE_INFO = "Defcon-1.0b"

# Milliseconds without data before the header reports "no data".
DATA_TIMEOUT_MS = 100_000
# Flashing toggles every second and stops after a minute once all is well.
FLASH_PERIOD_MS = 1000
FLASH_MAX_MS = 60_000

WARNING_FREQUENCY = 1200


class HeaderState(Enum):
    """What the header LEDs are telling about connectivity."""

    NO_NETWORK = auto()
    AP_MODE = auto()
    NO_MQTT = auto()
    NO_DATA = auto()
    OK = auto()


class ChangeState(Enum):
    """Phases of a level change: beep, pause, fade out, pause, fade in."""

    IDLE = auto()
    WARNING = auto()
    PAUSE1 = auto()
    FADE_OFF = auto()
    PAUSE2 = auto()
    FADE_ON = auto()


_HEADER_COLORS = {
    HeaderState.NO_NETWORK: color(255, 0, 0),
    HeaderState.AP_MODE: color(0, 0, 255),
    HeaderState.NO_MQTT: color(255, 140, 0),
    HeaderState.NO_DATA: color(255, 0, 255),
    HeaderState.OK: color(255, 255, 255),
}

_PROBLEM_KEYS = ("DISASTER", "HIGH", "AVERAGE", "WARNING")


def level_from_problems(disaster: int, high: int, average: int, warning: int, current: int) -> int:
    """Work out the DEFCON level from the counts of open problems by severity."""
    level = current
    if disaster == 0 and high == 0 and average == 0 and warning == 0:
        level = 5
    if average > 0 or warning > 0:
        level = 4
    if high > 0 or average > 3 or warning > 8:
        level = 3
    if disaster > 0 or high > 3 or average > 6 or warning > 15:
        level = 2
    if disaster > 3 or high > 6 or average > 15 or warning > 25:
        level = 1
    return level


def _as_uint8(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value & 0xFF
    if isinstance(value, float):
        return int(value) & 0xFF if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip()) & 0xFF
        except ValueError:
            return 0
    return 0


def _local_time() -> str:
    now = datetime.now(timezone.utc) + timedelta(hours=config.LOCAL_HOUR_OFFSET)
    return now.strftime("%H:%M:%S")


class DefconPanel:
    """Drives the LED strip and buzzer of a DEFCON indicator."""

    def __init__(
        self,
        config_path: str | Path,
        clock: Any = None,
        strip: LedStrip | None = None,
        buzzer: Buzzer | None = None,
        time_source: Callable[[], str] | None = None,
        on_response: Callable[[str, str], None] | None = None,
    ) -> None:
        self.config_path = Path(config_path)
        self.clock = clock if clock is not None else SystemClock()
        self.strip = strip if strip is not None else LedStrip(config.LED_COUNT)
        self.buzzer = buzzer if buzzer is not None else Buzzer()
        self.time_source = time_source if time_source is not None else _local_time
        self.on_response = on_response

        self.hardware_info = HARDWARE_INFO
        self.comms_ok = False
        self.needs_save = False
        self._started_at = self.clock.millis()

        self.level = 5
        self.target_level = 5
        self.change_state = ChangeState.IDLE
        self.header = HeaderState.NO_NETWORK
        self.header_target = HeaderState.NO_NETWORK
        self.silenced = False
        self.problem_counts = [0, 0, 0, 0]
        self.last_data_ms = 0
        self.flashing = False

        self._delta_start = 0
        self._fade = 0
        self._flash_toggle_ms = 0
        self._flash_start_ms = 0

    # -- helpers -----------------------------------------------------------

    def _now(self) -> int:
        return self.clock.millis()

    def _delta_begin(self) -> None:
        self._delta_start = self._now()

    def _delta(self) -> int:
        return self._now() - self._delta_start

    def _respond(self, command: str, response: str) -> None:
        if self.on_response is not None:
            self.on_response(command, response)

    def _fill_level(self, level: int, value: int) -> None:
        blk = config.block(level)
        self.strip.fill(color_hsv(blk.hue, blk.saturation, value), blk.first, blk.count)

    def _fill_header(self, rgb: int) -> None:
        blk = config.block(0)
        self.strip.fill(rgb, blk.first, blk.count)

    def _send_config(self) -> None:
        self._respond("DEFCONLEVEL", str(self.level))

    def _flash(self, on: bool) -> None:
        if on:
            self.flashing = True
            self._flash_toggle_ms = self._now()
            self._flash_start_ms = self._now()
        else:
            self.flashing = False
            self.strip.brightness = 255
            self._fill_level(self.level, 255)
            self.strip.show()

    # -- public interface --------------------------------------------------

    def status_json(self, category: int) -> str:
        """Return a compact JSON document describing the panel's state."""
        if category == 1:
            now = self._now()
            status: dict[str, Any] = {
                "TIME": self.time_source(),
                "HI": self.hardware_info,
                "UPT": (now - self._started_at) // 1000,
                "DL": self.level,
                "DRT": (now - self.last_data_ms) // 1000,
            }
        elif category == 2:
            status = {"INFO2": "INFO2"}
        else:
            status = {"NOINFO": "NOINFO"}
        return json.dumps(status, separators=(",", ":"))

    def save_config(self) -> None:
        """Write the current status to the configuration file."""
        try:
            self.config_path.write_text(self.status_json(1), encoding="utf-8")
        except OSError:
            log.error("cannot open the project configuration file %s", self.config_path)
            raise

    def load_config(self) -> dict[str, Any] | None:
        """Read the configuration file; None if it is missing or not a JSON object."""
        if not self.config_path.exists():
            return None
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        log.info("project configuration read: %s", json.dumps(data, separators=(",", ":")))
        return data

    def start(self) -> None:
        """Light the strip in its initial state: level 5, red header."""
        self.strip.begin()
        self.strip.clear()
        self.strip.show()

        self.level = 5
        self.target_level = 5
        self.change_state = ChangeState.IDLE
        self.silenced = False

        self._fill_level(self.level, 255)
        self._fill_header(_HEADER_COLORS[HeaderState.NO_NETWORK])
        self.header = HeaderState.NO_NETWORK
        self.header_target = HeaderState.NO_NETWORK
        self.strip.brightness = 255
        self.strip.show()

        self.problem_counts = [0, 0, 0, 0]
        self.last_data_ms = 0
        self.flashing = False

    def run_fast(self) -> None:
        """Advance every state machine by one step; call as often as possible."""
        if self.needs_save:
            self.save_config()
            self.needs_save = False

        since_data = self._now() - self.last_data_ms
        if self.header is HeaderState.OK and since_data > DATA_TIMEOUT_MS:
            self.set_header(HeaderState.NO_DATA)
        elif self.header is HeaderState.NO_DATA and since_data <= DATA_TIMEOUT_MS:
            self.set_header(HeaderState.OK)

        self._run_level_change()
        self._run_header_change()
        self._run_flashing()

    def set_level(self, level: int) -> None:
        if level not in range(1, 6):
            raise ValueError(f"DEFCON level must be 1..5, got {level!r}")
        self.target_level = level

    def set_header(self, state: HeaderState) -> None:
        self.header_target = HeaderState(state)

    def problems(self, payload: str) -> None:
        """Take a JSON document of problem counts and pick the level from it."""
        self.last_data_ms = self._now()
        try:
            data = json.loads(payload)
        except ValueError:
            data = None
        if isinstance(data, dict):
            self.problem_counts = [_as_uint8(data.get(key, 0)) for key in _PROBLEM_KEYS]

        level = level_from_problems(*self.problem_counts, self.level)
        if level != self.level:
            self.target_level = level

    def warn_comms_down(self) -> None:
        self.buzzer.tone(WARNING_FREQUENCY, 50)
        self.buzzer.pause(100)
        self.buzzer.tone(WARNING_FREQUENCY, 50)
        self.buzzer.pause(100)
        self.buzzer.tone(WARNING_FREQUENCY, 100)

    def silence_comms_warning(self) -> None:
        self.silenced = True

    def alert(self, number: int) -> None:
        """Sound alert 1 (three long beeps) or 2 (eight beeps and a flashing header)."""
        if number == 1:
            for _ in range(3):
                self.buzzer.tone(WARNING_FREQUENCY, 300)
                self.buzzer.pause(600)
        elif number == 2:
            for _ in range(8):
                self.buzzer.tone(WARNING_FREQUENCY, 200)
                self.buzzer.pause(400)
            self._flash(True)

    def hardware_test(self, restart: Callable[[], None]) -> None:
        """Light each LED in turn, play three tones, then call `restart`."""
        self.strip.clear()
        self.strip.show()
        white = color(255, 255, 255)
        for index in range(self.strip.count):
            self.strip.fill(white, index, 1)
            self.strip.show()
            self.buzzer.pause(200)
            self.strip.clear()
            self.buzzer.pause(200)

        self.buzzer.tone(1000, 500)
        self.buzzer.pause(600)
        self.buzzer.tone(1200, 500)
        self.buzzer.pause(600)
        self.buzzer.tone(1400, 500)
        self.buzzer.pause(2000)
        restart()

    # -- state machines ----------------------------------------------------

    def _run_level_change(self) -> None:
        state = self.change_state
        if state is ChangeState.IDLE:
            if self.target_level != self.level:
                self._delta_begin()
                self.buzzer.tone(config.DEFCON_FREQUENCY, config.T_BUZZER)
                self.change_state = ChangeState.WARNING
                if self.flashing:
                    self._flash(False)
            elif (
                self.header is not HeaderState.OK
                and not self.silenced
                and self._delta() >= config.COMMS_WARNING_INTERVAL * 1000
            ):
                self.warn_comms_down()
                self._delta_begin()

        elif state is ChangeState.WARNING:
            if self._delta() >= config.T_BUZZER:
                self._delta_begin()
                self.change_state = ChangeState.PAUSE1

        elif state is ChangeState.PAUSE1:
            if self._delta() >= config.T_PAUSE1:
                self._delta_begin()
                self._fade = 255
                self.change_state = ChangeState.FADE_OFF

        elif state is ChangeState.FADE_OFF:
            if self._delta() >= config.T_FADE_OFF // 255:
                if self._fade > 0:
                    self._fade -= 1
                self._fill_level(self.level, self._fade)
                self.strip.show()
                self._delta_begin()
            if self._fade == 0:
                self.change_state = ChangeState.PAUSE2
                self._delta_begin()

        elif state is ChangeState.PAUSE2:
            if self._delta() >= config.T_PAUSE2:
                self._delta_begin()
                self._fade = 0
                self.change_state = ChangeState.FADE_ON

        elif state is ChangeState.FADE_ON:
            if self._delta() >= config.T_FADE_ON // 255:
                if self._fade < 255:
                    self._fade += 1
                self._fill_level(self.target_level, self._fade)
                self.strip.show()
                self._delta_begin()
            if self._fade == 255:
                self.change_state = ChangeState.IDLE
                self.level = self.target_level
                self._respond("DEFCONLEVEL", str(self.level))
                self._flash(True)

    def _run_header_change(self) -> None:
        target = self.header_target
        if target is self.header:
            return
        self._fill_header(_HEADER_COLORS[target])
        self.header = target
        self.strip.show()
        if target in (HeaderState.NO_DATA, HeaderState.OK):
            self._send_config()
        if target is HeaderState.OK:
            self.silenced = False
            self._flash(False)
        else:
            self._flash(True)

    def _run_flashing(self) -> None:
        if not self.flashing:
            return
        now = self._now()
        if now - self._flash_toggle_ms > FLASH_PERIOD_MS:
            if self.strip.brightness > 1:
                self.strip.brightness = 1
            else:
                self.strip.brightness = 255
                self._fill_level(self.level, 255)
            self.strip.show()
            self._flash_toggle_ms = now

        if self.header is HeaderState.OK and now - self._flash_start_ms > FLASH_MAX_MS:
            self._flash(False)