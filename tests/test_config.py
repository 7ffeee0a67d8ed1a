import pytest

from defconpanel import config
from defconpanel.config import Block, block


def test_header_block_starts_strip():
    header = block(0)
    assert header.first == 0
    assert header.count == config.LEDS_PER_BLOCK[0]


def test_blocks_are_contiguous_in_strip_order():
    ordered = [block(level) for level in config.BLOCK_ORDER]
    for previous, current in zip(ordered, ordered[1:]):
        assert current.first == previous.last + 1


def test_blocks_cover_whole_strip():
    total = sum(block(level).count for level in range(6))
    assert total == config.LED_COUNT
    assert block(1).last == config.LED_COUNT - 1


def test_level_five_follows_header():
    assert block(5).first == block(0).last + 1


@pytest.mark.parametrize("level", range(6))
def test_block_colours_match_tables(level):
    b = block(level)
    assert b.hue == config.BLOCK_HUE[level]
    assert b.saturation == config.BLOCK_SATURATION[level]
    assert b.level == level


def test_yellow_block_hue():
    assert block(3).hue == 32768
    assert block(3).saturation == 150


def test_indices_match_count():
    b = block(4)
    assert len(b.indices) == b.count
    assert b.indices[0] == b.first


@pytest.mark.parametrize("level", [-1, 6, 99, "3"])
def test_unknown_level_raises(level):
    with pytest.raises(ValueError):
        block(level)


def test_block_is_immutable():
    b = block(2)
    original_first = b.first
    with pytest.raises(AttributeError):
        b.first = 0  # type: ignore[misc]
    assert b.first == original_first
    assert block(2) == b


def test_block_equality():
    b = block(2)
    assert Block(b.level, b.hue, b.saturation, b.first, b.last) == b