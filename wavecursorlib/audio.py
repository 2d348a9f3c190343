from __future__ import annotations

import os

import numpy as np
import soundfile as sf

from .models import InvalidFormat, SampleBuffer


AUDIO_EXTENSIONS = {".wav", ".wave", ".aif", ".aiff", ".flac", ".ogg",
                    ".mp3", ".raw", ".pcm"}

RAW_EXTENSIONS = {".raw", ".pcm"}


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

def linear_to_db(linear: float) -> float:
    if linear <= 0:
        return float(-np.inf)
    return float(20 * np.log10(linear))


def format_duration(frames: int, sample_rate: int) -> str:
    if sample_rate <= 0:
        return "00:00.000"
    seconds = frames / sample_rate
    m = int(seconds // 60)
    s = int(seconds % 60)
    ms = int((seconds % 1) * 1000)
    return f"{m:02d}:{s:02d}.{ms:03d}"


def is_audio_file(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in AUDIO_EXTENSIONS


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

# libsndfile subtype → integer dtype that keeps the fixed-point values.
# Anything not listed here is read as float64.
_INT_SUBTYPES = {
    "PCM_S8": "int16",
    "PCM_U8": "int16",
    "PCM_16": "int16",
    "PCM_24": "int32",
    "PCM_32": "int32",
}


def decode_file(path: str) -> SampleBuffer:
    """Decode an audio file with soundfile into a SampleBuffer.

    Fixed-point files are read as integers so that peak normalization
    applies; float files are read as float64.  Headerless ``.raw``/``.pcm``
    files go through :func:`decode_raw_pcm` with its defaults.
    """
    if os.path.splitext(path)[1].lower() in RAW_EXTENSIONS:
        return decode_raw_pcm(path)
    info = sf.info(path)
    dtype = _INT_SUBTYPES.get(info.subtype, "float64")
    data, samplerate = sf.read(path, dtype=dtype, always_2d=True)
    return SampleBuffer.from_array(data, samplerate)


def decode_raw_pcm(path: str, channel_count: int = 1,
                   sample_rate: int = 44100, dtype: str = "<i2") -> SampleBuffer:
    """Read headerless PCM samples from *path*.

    Trailing bytes that do not form a whole sample, and samples that do
    not form a whole frame, are dropped.  Unsigned formats such as ``u1``
    are offset binary; :class:`SampleBuffer` re-centres them.
    """
    if channel_count <= 0:
        raise InvalidFormat(f"channel_count must be positive, got {channel_count}")
    try:
        dt = np.dtype(dtype)
    except TypeError as e:
        raise InvalidFormat(f"Unknown sample format {dtype!r}: {e}")
    with open(path, "rb") as f:
        raw = f.read()
    usable = len(raw) - len(raw) % dt.itemsize
    samples = np.frombuffer(raw[:usable], dtype=dt)
    whole = samples.size - samples.size % channel_count
    return SampleBuffer(samples[:whole], channel_count, sample_rate)
