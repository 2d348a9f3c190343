import pytest

from wavecursorlib.envelope import build_envelope
from wavecursorlib.models import SampleBuffer
from wavecursorlib.render import (
    Band,
    CursorLine,
    Segment,
    channel_bands,
    describe,
    value_to_y,
)


def test_stereo_bands_split_height():
    bands = channel_bands(200, 2)
    assert bands == [Band(0, 0.0, 100.0), Band(1, 100.0, 100.0)]
    assert value_to_y(1.0, bands[1]) == 100.0
    assert value_to_y(-1.0, bands[1]) == 200.0
    assert value_to_y(0.0, bands[1]) == 150.0
    assert value_to_y(1.0, bands[0]) == 0.0


def test_no_channels_no_bands():
    assert channel_bands(200, 0) == []


def test_describe_order_and_geometry():
    buf = SampleBuffer([1.0, 0.0, -1.0, 0.5], 2, 8000)  # 2 frames, stereo
    env = build_envelope(buf, 2, 1)
    prims = describe(env, 1, 200, 2)

    assert isinstance(prims[-1], CursorLine)
    assert prims[-1] == CursorLine(x=1, top=0.0, bottom=200.0)

    assert prims[0] == Band(0, 0.0, 100.0)
    ch0 = [p for p in prims if isinstance(p, Segment) and p.channel == 0]
    # column 0: value 1.0 → a degenerate segment at the band's top edge
    assert ch0[0] == Segment(0, 0, 0.0, 0, 0.0)
    # column 1: value -1.0 → band bottom
    assert ch0[1] == Segment(0, 1, 100.0, 1, 100.0)

    band1_index = prims.index(Band(1, 100.0, 100.0))
    assert all(p.channel == 0 for p in prims[1:band1_index])
    ch1 = [p for p in prims if isinstance(p, Segment) and p.channel == 1]
    assert ch1[0] == Segment(1, 0, 150.0, 0, 150.0)
    assert ch1[1] == Segment(1, 1, 125.0, 1, 125.0)


def test_segment_runs_from_max_to_min():
    buf = SampleBuffer([0.5, -0.5], 1, 8000)
    env = build_envelope(buf, 1)
    seg = [p for p in describe(env, 0, 100, 1) if isinstance(p, Segment)][0]
    assert seg.y1 == pytest.approx(25.0)   # max 0.5
    assert seg.y2 == pytest.approx(75.0)   # min -0.5
    assert seg.y1 <= seg.y2


def test_no_data_columns_emit_nothing():
    buf = SampleBuffer([0.1, 0.2], 1, 8000)
    env = build_envelope(buf, 10, 1)
    segs = [p for p in describe(env, 0, 100, 1) if isinstance(p, Segment)]
    assert [s.x1 for s in segs] == [0, 1]


def test_empty_envelope_emits_bands_and_cursor_only():
    env = build_envelope(SampleBuffer.empty(2), 50, 1)
    prims = describe(env, 0, 100, 2)
    assert [type(p) for p in prims] == [Band, Band, CursorLine]


def test_without_envelope_cursor_is_still_last():
    prims = describe(None, 7, 80, 0)
    assert prims == [CursorLine(7, 0.0, 80.0)]


def test_layout_channels_beyond_envelope_get_bands_only():
    buf = SampleBuffer([0.5], 1, 8000)
    env = build_envelope(buf, 1)
    prims = describe(env, 0, 100, 2)
    assert [type(p) for p in prims] == [Band, Segment, Band, CursorLine]


def test_band_helpers():
    band = Band(1, 100.0, 50.0)
    assert band.bottom == 150.0
    assert band.center == 125.0
