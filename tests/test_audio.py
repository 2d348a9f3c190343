import math

import numpy as np
import pytest
import soundfile as sf

from wavecursorlib.audio import (
    decode_file,
    decode_raw_pcm,
    format_duration,
    is_audio_file,
    linear_to_db,
)
from wavecursorlib.models import InvalidFormat


def _write_raw(tmp_path, data: bytes, name="clip.raw"):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


class TestDecodeRawPcm:
    def test_int16_little_endian_peak_normalized(self, tmp_path):
        raw = np.array([16384, -32768, 0, 8192], dtype="<i2").tobytes()
        buf = decode_raw_pcm(_write_raw(tmp_path, raw))
        assert buf.channel_count == 1
        assert buf.sample_rate == 44100
        assert buf.channel(0).tolist() == [0.5, -1.0, 0.0, 0.25]

    def test_trailing_odd_byte_dropped(self, tmp_path):
        raw = np.array([100, -100], dtype="<i2").tobytes() + b"\x7f"
        buf = decode_raw_pcm(_write_raw(tmp_path, raw))
        assert buf.frame_count == 2

    def test_partial_frame_dropped(self, tmp_path):
        raw = np.array([1, 2, 3, 4, 5], dtype="<i2").tobytes()
        buf = decode_raw_pcm(_write_raw(tmp_path, raw), channel_count=2,
                             sample_rate=8000)
        assert buf.frame_count == 2
        assert buf.channel(1).tolist() == [0.5, 1.0]

    def test_unsigned_bytes_are_centered(self, tmp_path):
        buf = decode_raw_pcm(_write_raw(tmp_path, bytes([0, 128, 192])),
                             dtype="u1")
        assert buf.channel(0).tolist() == [-1.0, 0.0, 0.5]

    def test_big_endian(self, tmp_path):
        raw = np.array([-2, 1], dtype=">i2").tobytes()
        buf = decode_raw_pcm(_write_raw(tmp_path, raw), dtype=">i2")
        assert buf.channel(0).tolist() == [-1.0, 0.5]

    def test_empty_file(self, tmp_path):
        buf = decode_raw_pcm(_write_raw(tmp_path, b""))
        assert buf.is_empty

    @pytest.mark.parametrize("kwargs", [
        {"channel_count": 0},
        {"channel_count": -2},
        {"dtype": "not-a-dtype"},
    ])
    def test_bad_parameters(self, tmp_path, kwargs):
        with pytest.raises(InvalidFormat):
            decode_raw_pcm(_write_raw(tmp_path, b"\x00\x00"), **kwargs)


class TestDecodeFile:
    def test_pcm16_wav_is_peak_normalized(self, tmp_path):
        path = str(tmp_path / "stereo.wav")
        data = np.array([[16384, -8192], [-32768, 0]], dtype=np.int16)
        sf.write(path, data, 22050, subtype="PCM_16")
        buf = decode_file(path)
        assert buf.channel_count == 2
        assert buf.sample_rate == 22050
        assert buf.channel(0).tolist() == [0.5, -1.0]
        assert buf.channel(1).tolist() == [-0.25, 0.0]

    def test_float_wav_is_kept(self, tmp_path):
        path = str(tmp_path / "mono.wav")
        sf.write(path, np.array([0.5, -0.25, 0.0], dtype=np.float32), 8000,
                 subtype="FLOAT")
        buf = decode_file(path)
        assert buf.channel_count == 1
        assert buf.channel(0).tolist() == [0.5, -0.25, 0.0]

    def test_raw_extension_uses_raw_decoder(self, tmp_path):
        path = _write_raw(tmp_path, np.array([4, -8], dtype="<i2").tobytes(),
                          name="clip.pcm")
        buf = decode_file(path)
        assert buf.channel(0).tolist() == [0.5, -1.0]

    def test_unreadable_file_raises(self, tmp_path):
        path = tmp_path / "junk.wav"
        path.write_bytes(b"definitely not audio")
        with pytest.raises(sf.LibsndfileError):
            decode_file(str(path))


def test_format_duration():
    assert format_duration(44100 * 61 + 22050, 44100) == "01:01.500"
    assert format_duration(0, 48000) == "00:00.000"
    assert format_duration(100, 0) == "00:00.000"


def test_is_audio_file():
    assert is_audio_file("take.WAV")
    assert is_audio_file("/x/y/loop.flac")
    assert is_audio_file("dump.pcm")
    assert not is_audio_file("notes.txt")
    assert not is_audio_file("wav")


def test_linear_to_db():
    assert linear_to_db(1.0) == 0.0
    assert linear_to_db(0.5) == pytest.approx(-6.0206, abs=1e-3)
    assert math.isinf(linear_to_db(0.0))
