"""Representation layer - flat event encodings of a NoteSequence.

This layer turns quantized sequences into fixed-vocabulary streams:
- Melody (monophonic, one event per step)
- Performance (polyphonic NOTE_ON/NOTE_OFF/TIME_SHIFT/VELOCITY events)
- One-hot index encodings of both
"""

from .base import EventSequence, set_length
from .melody import Melody, MelodyConfig, MelodyExtractor, extract_melody
from .performance import (
    PerformanceEventType,
    PerformanceEvent,
    Performance,
    PerformanceConfig,
    encode_performance,
    decode_performance,
    velocity_to_bin,
    bin_to_velocity,
    NOTE_ON,
    NOTE_OFF,
    TIME_SHIFT,
    VELOCITY,
)
from .encoding import (
    OneHotEncoding,
    PerformanceOneHotEncoding,
    MelodyOneHotEncoding,
    encode_index,
    decode_index,
)

__all__ = [
    "EventSequence",
    "set_length",
    "Melody",
    "MelodyConfig",
    "MelodyExtractor",
    "extract_melody",
    "PerformanceEventType",
    "PerformanceEvent",
    "Performance",
    "PerformanceConfig",
    "encode_performance",
    "decode_performance",
    "velocity_to_bin",
    "bin_to_velocity",
    "NOTE_ON",
    "NOTE_OFF",
    "TIME_SHIFT",
    "VELOCITY",
    "OneHotEncoding",
    "PerformanceOneHotEncoding",
    "MelodyOneHotEncoding",
    "encode_index",
    "decode_index",
]
