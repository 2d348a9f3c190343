from __future__ import annotations

import itertools
from dataclasses import dataclass, field

import numpy as np


class InvalidFormat(ValueError):
    """Raised when sample data and its channel/rate metadata do not agree."""
    pass


_TOKENS = itertools.count(1)


def normalize_samples(samples: np.ndarray) -> np.ndarray:
    """Return *samples* as float64 values in [-1.0, 1.0].

    Integer (fixed-point) input is peak-normalized: every value is divided
    by the largest magnitude actually present in the buffer, not by the
    format's theoretical maximum.  Quiet recordings therefore render at
    full scale.  An all-zero buffer stays all zeros.

    Unsigned input is offset binary and is re-centred on zero first.

    Float input is taken as already normalized and only clipped.
    """
    arr = np.asarray(samples)
    if arr.size == 0:
        return np.zeros(0, dtype=np.float64)
    if np.issubdtype(arr.dtype, np.integer) or arr.dtype == np.bool_:
        # float64: abs(int64.min) has no integer representation
        wide = arr.astype(np.float64)
        if arr.dtype.kind == "u":
            wide -= float(1 << (8 * arr.dtype.itemsize - 1))
        peak = float(np.max(np.abs(wide)))
        if peak == 0:
            return np.zeros(arr.shape, dtype=np.float64)
        return np.clip(wide / peak, -1.0, 1.0)
    if not np.issubdtype(arr.dtype, np.floating):
        raise InvalidFormat(f"Unsupported sample type: {arr.dtype}")
    out = arr.astype(np.float64)
    if not np.all(np.isfinite(out)):
        raise InvalidFormat("Sample data contains NaN or infinite values")
    return np.clip(out, -1.0, 1.0)


class SampleBuffer:
    """Decoded, normalized multi-channel audio.

    Samples are held as a read-only ``(frames, channels)`` float64 array.
    A buffer is never modified after construction; loading a new file
    creates a new buffer.

    Attributes:
        channel_count: Number of interleaved channels (>= 1).
        sample_rate:   Sample rate in Hz (>= 1).
        token:         Process-unique identity, used as a cache key.
    """

    def __init__(self, samples, channel_count: int, sample_rate: int):
        if not isinstance(channel_count, (int, np.integer)) or channel_count <= 0:
            raise InvalidFormat(
                f"channel_count must be a positive integer, got {channel_count!r}")
        if not isinstance(sample_rate, (int, np.integer)) or sample_rate <= 0:
            raise InvalidFormat(
                f"sample_rate must be a positive integer, got {sample_rate!r}")
        arr = np.asarray(samples)
        if arr.ndim != 1:
            raise InvalidFormat(
                f"Expected interleaved 1-D samples, got shape {arr.shape}")
        if arr.size % channel_count != 0:
            raise InvalidFormat(
                f"{arr.size} samples is not a multiple of "
                f"{channel_count} channels")
        normalized = normalize_samples(arr)
        data = normalized.reshape(-1, int(channel_count))
        data.setflags(write=False)
        self._data = data
        self._channel_count = int(channel_count)
        self._sample_rate = int(sample_rate)
        self._token = next(_TOKENS)

    @classmethod
    def from_array(cls, data, sample_rate: int) -> SampleBuffer:
        """Build from a ``(frames,)`` or ``(frames, channels)`` array."""
        arr = np.asarray(data)
        if arr.ndim == 1:
            return cls(arr, 1, sample_rate)
        if arr.ndim != 2:
            raise InvalidFormat(f"Expected 1-D or 2-D audio data, got shape {arr.shape}")
        if arr.shape[1] == 0:
            raise InvalidFormat("Audio data has no channels")
        return cls(np.ascontiguousarray(arr).reshape(-1), arr.shape[1], sample_rate)

    @classmethod
    def empty(cls, channel_count: int = 1, sample_rate: int = 44100) -> SampleBuffer:
        return cls(np.zeros(0, dtype=np.float64), channel_count, sample_rate)

    @property
    def channel_count(self) -> int:
        return self._channel_count

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def token(self) -> int:
        return self._token

    @property
    def data(self) -> np.ndarray:
        """Read-only ``(frames, channels)`` view of the samples."""
        return self._data

    @property
    def frames(self) -> np.ndarray:
        """Read-only interleaved view (one value per channel per frame)."""
        return self._data.reshape(-1)

    @property
    def frame_count(self) -> int:
        return self._data.shape[0]

    @property
    def duration_sec(self) -> float:
        return self.frame_count / self._sample_rate

    @property
    def is_empty(self) -> bool:
        return self.frame_count == 0

    def channel(self, index: int) -> np.ndarray:
        return self._data[:, index]

    def __len__(self) -> int:
        return self.frame_count

    def __repr__(self) -> str:
        return (f"SampleBuffer(frames={self.frame_count}, "
                f"channels={self._channel_count}, rate={self._sample_rate})")


@dataclass(frozen=True, eq=False)
class Envelope:
    """Per-channel (min, max) pairs, one per pixel column.

    ``mins`` and ``maxs`` have shape ``(channel_count, pixel_width)``.
    Columns with no contributing frames hold NaN in both arrays.

    Attributes:
        pixel_width:       Number of columns per channel.
        zoom_factor:       Zoom the envelope was built for.
        buffer_token:      ``SampleBuffer.token`` of the source buffer.
        samples_per_pixel: Frames aggregated into one column.
    """
    mins: np.ndarray
    maxs: np.ndarray
    pixel_width: int
    zoom_factor: float
    buffer_token: int
    samples_per_pixel: int = 0
    _valid: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        valid = ~np.isnan(self.mins)
        valid.setflags(write=False)
        object.__setattr__(self, "_valid", valid)

    @property
    def channel_count(self) -> int:
        return self.mins.shape[0]

    def has_data(self, channel: int, x: int) -> bool:
        return bool(self._valid[channel, x])

    def column(self, channel: int, x: int) -> tuple[float, float] | None:
        """Return ``(min, max)`` for one column, or None for "no data"."""
        if not self._valid[channel, x]:
            return None
        return float(self.mins[channel, x]), float(self.maxs[channel, x])

    def pairs(self, channel: int) -> list[tuple[float, float] | None]:
        return [self.column(channel, x) for x in range(self.pixel_width)]

    def valid_mask(self, channel: int) -> np.ndarray:
        return self._valid[channel]

    def same_key(self, pixel_width: int, zoom_factor: float,
                 buffer_token: int) -> bool:
        return (self.pixel_width == pixel_width
                and self.zoom_factor == zoom_factor
                and self.buffer_token == buffer_token)
