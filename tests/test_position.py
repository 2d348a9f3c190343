import pytest

from wavecursorlib.position import (
    PlaybackCursor,
    PlaybackPositionMapper,
    frames_to_ms,
    ms_to_frames,
    round_frames,
    to_pixel,
    to_position,
)


def test_reference_scenario():
    assert to_pixel(500, 1000, 200) == 100


def test_zero_duration_maps_to_zero():
    for width in (1, 200, 4096):
        assert to_pixel(0, 0, width) == 0
        assert to_pixel(123, 0, width) == 0


def test_zero_width_maps_to_zero():
    assert to_pixel(500, 1000, 0) == 0
    assert to_position(5, 1000, 0) == 0


def test_clamped_to_last_column():
    assert to_pixel(1000, 1000, 200) == 199
    assert to_pixel(5000, 1000, 200) == 199


def test_negative_position_clamped():
    assert to_pixel(-50, 1000, 200) == 0


def test_rounds_half_up():
    # 5 frames/pixel: 2.5 frames is exactly half a pixel
    assert to_pixel(2, 1000, 200) == 0
    assert to_pixel(3, 1000, 200) == 1
    assert to_pixel(7, 10, 5) == 4  # 3.5 → 4


def test_to_position_inverse():
    assert to_position(100, 1000, 200) == 500
    assert to_position(0, 1000, 200) == 0
    assert to_position(500, 1000, 200) == 1000  # clamped to duration


def test_to_position_is_not_rounded():
    assert to_position(1, 2, 3) == pytest.approx(2 / 3)
    assert to_position(639, 1000, 640) == pytest.approx(998.4375)


@pytest.mark.parametrize("duration", [1, 2, 3, 7, 99, 1000])
@pytest.mark.parametrize("width", [1, 2, 3, 5, 640])
def test_round_trip_within_one_pixel(duration, width):
    for pos in range(duration + 1):
        back = to_position(to_pixel(pos, duration, width), duration, width)
        assert abs(back * width / duration - pos * width / duration) <= 1 + 1e-9


@pytest.mark.parametrize("pos,duration,width", [
    (1000, 1000, 640), (2, 2, 3), (3, 3, 5), (99, 99, 5),
])
def test_round_trip_at_end_of_buffer(pos, duration, width):
    back = to_position(to_pixel(pos, duration, width), duration, width)
    assert abs(back - pos) * width / duration <= 1 + 1e-9


def test_round_frames():
    assert round_frames(2.5) == 3
    assert round_frames(2.49) == 2
    assert round_frames(998.4375) == 998


def test_ms_conversions():
    assert ms_to_frames(1000, 48000) == 48000
    assert ms_to_frames(10.5, 1000) == 11
    assert frames_to_ms(22050, 44100) == 500
    assert frames_to_ms(100, 0) == 0
    assert ms_to_frames(100, 0) == 0


class TestPlaybackPositionMapper:
    def test_follows_duration_and_resize(self):
        mapper = PlaybackPositionMapper()
        assert mapper.to_pixel(500) == 0
        mapper.duration_changed(1000)
        mapper.resize(200)
        assert mapper.to_pixel(500) == 100
        mapper.resize(400)
        assert mapper.to_pixel(500) == 200
        assert mapper.to_position(200) == 500

    def test_negative_inputs_clamped(self):
        mapper = PlaybackPositionMapper(-10, -20)
        assert mapper.duration_frames == 0
        assert mapper.pixel_width == 0

    def test_clamp(self):
        mapper = PlaybackPositionMapper(1000, 100)
        assert mapper.clamp(-1) == 0
        assert mapper.clamp(2000) == 1000
        assert mapper.clamp(10) == 10


def test_cursor_pixel_is_derived():
    mapper = PlaybackPositionMapper(1000, 200)
    cursor = PlaybackCursor(500)
    assert cursor.pixel(mapper) == 100
    mapper.resize(100)
    assert cursor.pixel(mapper) == 50
