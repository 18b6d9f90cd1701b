"""noteseq - Symbolic music representations for sequence modeling.

Architecture Layers:
    1. core/           - NoteSequence, note and event types, errors
    2. input/          - Raw MIDI events, instrument demultiplexing, MIDI loading
    3. processing/     - Sequence transforms (quantize, stretch, transpose, sustain)
    4. representation/ - Melody and Performance encodings, one-hot indices
    5. output/         - Export (raw tracks, MIDI, PrettyMIDI)
"""

__version__ = "0.1.0"

# Core types
from .core import NoteSequence, SeqNote, Tempo, TimeSignature, KeySignature

# Input layer
from .input import MIDILoader, extract_instruments, build_note_sequence

# Processing layer
from .processing import Quantizer, quantize, stretch, transpose, apply_sustain

# Representation layer
from .representation import (
    Melody,
    MelodyConfig,
    MelodyExtractor,
    extract_melody,
    Performance,
    PerformanceEvent,
    PerformanceConfig,
    encode_performance,
    decode_performance,
    set_length,
    MelodyOneHotEncoding,
    PerformanceOneHotEncoding,
    encode_index,
    decode_index,
)

# Output layer
from .output import MIDIExporter, note_sequence_to_tracks

__all__ = [
    # Core
    "NoteSequence",
    "SeqNote",
    "Tempo",
    "TimeSignature",
    "KeySignature",
    # Input
    "MIDILoader",
    "extract_instruments",
    "build_note_sequence",
    # Processing
    "Quantizer",
    "quantize",
    "stretch",
    "transpose",
    "apply_sustain",
    # Representation
    "Melody",
    "MelodyConfig",
    "MelodyExtractor",
    "extract_melody",
    "Performance",
    "PerformanceEvent",
    "PerformanceConfig",
    "encode_performance",
    "decode_performance",
    "set_length",
    "MelodyOneHotEncoding",
    "PerformanceOneHotEncoding",
    "encode_index",
    "decode_index",
    # Output
    "MIDIExporter",
    "note_sequence_to_tracks",
]
