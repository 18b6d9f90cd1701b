"""Core types and constants for noteseq."""

from .note import (
    SeqNote,
    Tempo,
    TimeSignature,
    KeySignature,
    PitchBend,
    ControlChange,
)
from .sequence import NoteSequence
from .constants import (
    PITCH_NAMES,
    MIN_MIDI_PITCH,
    MAX_MIDI_PITCH,
    MIN_MIDI_VELOCITY,
    MAX_MIDI_VELOCITY,
    DEFAULT_QPM,
    DEFAULT_TPQ,
    DEFAULT_STEPS_PER_SECOND,
    QUANTIZE_CUTOFF,
)
from .exceptions import (
    NoteSequenceError,
    ConstructionError,
    PreconditionError,
    QuantizationStatusError,
    MultipleTempoError,
    MissingTimeSignatureError,
    StructuralError,
    PolyphonicMelodyError,
    NoteOrderError,
    NegativeTimeError,
    UnknownEventError,
)

__all__ = [
    "SeqNote",
    "Tempo",
    "TimeSignature",
    "KeySignature",
    "PitchBend",
    "ControlChange",
    "NoteSequence",
    "PITCH_NAMES",
    "MIN_MIDI_PITCH",
    "MAX_MIDI_PITCH",
    "MIN_MIDI_VELOCITY",
    "MAX_MIDI_VELOCITY",
    "DEFAULT_QPM",
    "DEFAULT_TPQ",
    "DEFAULT_STEPS_PER_SECOND",
    "QUANTIZE_CUTOFF",
    "NoteSequenceError",
    "ConstructionError",
    "PreconditionError",
    "QuantizationStatusError",
    "MultipleTempoError",
    "MissingTimeSignatureError",
    "StructuralError",
    "PolyphonicMelodyError",
    "NoteOrderError",
    "NegativeTimeError",
    "UnknownEventError",
]
