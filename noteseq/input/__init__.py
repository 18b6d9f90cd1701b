"""Input layer - Raw MIDI events to NoteSequence.

This layer handles:
- Raw timestamped MIDI event types and time conversion
- Demultiplexing tracks into instruments
- Building a NoteSequence
- Reading MIDI files
"""

from .events import (
    NoteOnEvent,
    NoteOffEvent,
    ProgramChangeEvent,
    ControlChangeEvent,
    PitchBendEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    SetTempoEvent,
    to_absolute_time,
    to_relative_time,
    ms_per_tick,
    seconds_to_ticks,
)
from .instruments import Instrument, InstrumentExtractor, extract_instruments
from .builder import build_note_sequence
from .loader import MIDILoader

__all__ = [
    "NoteOnEvent",
    "NoteOffEvent",
    "ProgramChangeEvent",
    "ControlChangeEvent",
    "PitchBendEvent",
    "TimeSignatureEvent",
    "KeySignatureEvent",
    "SetTempoEvent",
    "to_absolute_time",
    "to_relative_time",
    "ms_per_tick",
    "seconds_to_ticks",
    "Instrument",
    "InstrumentExtractor",
    "extract_instruments",
    "build_note_sequence",
    "MIDILoader",
]
