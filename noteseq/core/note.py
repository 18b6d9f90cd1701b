"""Note and timestamped event dataclasses - the units a NoteSequence owns.

Times are integers: MIDI ticks for an unquantized sequence, quantized steps
once the sequence has been quantized.
"""

from dataclasses import dataclass

from .constants import (
    PITCH_NAMES,
    MIN_MIDI_PITCH,
    MAX_MIDI_PITCH,
    MIN_MIDI_VELOCITY,
    MAX_MIDI_VELOCITY,
    NOTES_PER_OCTAVE,
)
from .exceptions import ConstructionError


@dataclass
class SeqNote:
    """A note of a NoteSequence."""

    pitch: int  # MIDI pitch (0-127)
    velocity: int  # MIDI velocity (1-127)
    start_time: int
    end_time: int
    instrument: int = 0
    program: int = 0

    def __post_init__(self):
        if not MIN_MIDI_PITCH <= self.pitch <= MAX_MIDI_PITCH:
            raise ConstructionError(f"Invalid note pitch: {self.pitch}")
        if not MIN_MIDI_VELOCITY <= self.velocity <= MAX_MIDI_VELOCITY:
            raise ConstructionError(f"Invalid note velocity: {self.velocity}")
        if self.end_time <= self.start_time:
            raise ConstructionError(
                f"Note must end after it starts: start={self.start_time}, end={self.end_time}"
            )

    @property
    def duration(self) -> int:
        """Note duration in ticks or steps."""
        return self.end_time - self.start_time

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch // NOTES_PER_OCTAVE) - 1
        return f"{PITCH_NAMES[self.pitch % NOTES_PER_OCTAVE]}{octave}"

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return self.pitch % NOTES_PER_OCTAVE


@dataclass
class Tempo:
    """A tempo change, in quarter notes per minute."""

    time: int
    qpm: float

    def __post_init__(self):
        if self.qpm <= 0:
            raise ConstructionError(f"Tempo must be positive, got {self.qpm} qpm")


@dataclass
class TimeSignature:
    time: int
    numerator: int = 4
    denominator: int = 4


@dataclass
class KeySignature:
    time: int
    key: str = "C"  # Key name as written in MIDI files, e.g. 'C', 'F#m'


@dataclass
class PitchBend:
    time: int
    bend: int  # -8192 to 8191
    instrument: int = 0
    program: int = 0


@dataclass
class ControlChange:
    time: int
    controller: int
    value: int
    instrument: int = 0
    program: int = 0
