from ._version import __version__
from .models import (
    InvalidFormat,
    SampleBuffer,
    Envelope,
    normalize_samples,
)
from .envelope import EnvelopeBuilder, EnvelopeCache, build_envelope
from .position import (
    PlaybackCursor,
    PlaybackPositionMapper,
    to_pixel,
    to_position,
)
from .render import Band, Segment, CursorLine, describe
from .loading import LoadCoordinator, LoadResult, LoadTicket, StaleResult, run_load
from .view import WaveformView
from .config import (
    default_config,
    merge_configs,
    validate_config,
    validate_config_fields,
    load_preset,
    save_preset,
    ConfigError,
    ConfigFieldError,
    ParamSpec,
)
from .events import EventBus

__all__ = [
    "__version__",
    "InvalidFormat",
    "SampleBuffer",
    "Envelope",
    "normalize_samples",
    "EnvelopeBuilder",
    "EnvelopeCache",
    "build_envelope",
    "PlaybackCursor",
    "PlaybackPositionMapper",
    "to_pixel",
    "to_position",
    "Band",
    "Segment",
    "CursorLine",
    "describe",
    "LoadCoordinator",
    "LoadResult",
    "LoadTicket",
    "StaleResult",
    "run_load",
    "WaveformView",
    "default_config",
    "merge_configs",
    "validate_config",
    "validate_config_fields",
    "load_preset",
    "save_preset",
    "ConfigError",
    "ConfigFieldError",
    "ParamSpec",
    "EventBus",
]
