"""Panel configuration: identity, timings, and the layout and colours of the LED blocks."""

from __future__ import annotations

from dataclasses import dataclass

HOSTNAME = "DefconRDT"

# Local time offset from UTC, in hours.
LOCAL_HOUR_OFFSET = 2

COMMS_CONFIG_FILE = "/DefconCom.json"
PROJECT_CONFIG_FILE = "/DefconCfg.json"

LED_PIN = "D5"
BUZZER_PIN = "D6"

LED_COUNT = 50

# LEDs per block. Block 0 is the header ("DEFCON" sign); 1..5 are the levels.
LEDS_PER_BLOCK = {0: 20, 5: 6, 4: 6, 3: 6, 2: 6, 1: 6}

# Hue and saturation of each block (HSV, hue 0..65535, saturation 0..255).
BLOCK_HUE = {0: 0, 1: 0, 2: 0, 3: 32768, 4: 22000, 5: 40000}
BLOCK_SATURATION = {0: 0, 1: 0, 2: 255, 3: 150, 4: 200, 5: 0}

# Frequency in Hz of the tone played when the level changes.
DEFCON_FREQUENCY = 400

# Level-change timings in ms: buzzer | pause | fade off | pause | fade on.
T_BUZZER = 1500
T_PAUSE1 = 500
T_FADE_OFF = 255
T_PAUSE2 = 500
T_FADE_ON = 255

# Seconds between repeated "communications down" warnings.
COMMS_WARNING_INTERVAL = 120

# Physical order of the blocks along the strip, starting at LED 0.
BLOCK_ORDER = (0, 5, 4, 3, 2, 1)


@dataclass(frozen=True)
class Block:
    """A contiguous run of LEDs lit together, with its colour."""

    level: int
    hue: int
    saturation: int
    first: int
    last: int

    @property
    def count(self) -> int:
        return self.last - self.first + 1

    @property
    def indices(self) -> range:
        return range(self.first, self.last + 1)


def _build_blocks() -> dict[int, Block]:
    blocks: dict[int, Block] = {}
    start = 0
    for level in BLOCK_ORDER:
        size = LEDS_PER_BLOCK[level]
        blocks[level] = Block(
            level=level,
            hue=BLOCK_HUE[level],
            saturation=BLOCK_SATURATION[level],
            first=start,
            last=start + size - 1,
        )
        start += size
    return blocks


_BLOCKS = _build_blocks()


def block(level: int) -> Block:
    """Return the LED block for a level: 0 is the header, 1..5 the DEFCON levels."""
    try:
        return _BLOCKS[level]
    except (KeyError, TypeError):
        raise ValueError(f"no LED block for level {level!r}") from None