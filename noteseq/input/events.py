"""Raw timestamped MIDI events, as supplied by a MIDI file codec.

A track is an ordered list of these events. `time` is either absolute
(ticks since the start of the track) or relative (ticks since the previous
event); `to_absolute_time` and `to_relative_time` convert between the two.
"""

from dataclasses import dataclass, replace
from typing import List, Union


@dataclass
class NoteOnEvent:
    time: int
    channel: int
    pitch: int
    velocity: int


@dataclass
class NoteOffEvent:
    time: int
    channel: int
    pitch: int
    velocity: int = 0


@dataclass
class ProgramChangeEvent:
    time: int
    channel: int
    program: int


@dataclass
class ControlChangeEvent:
    time: int
    channel: int
    controller: int
    value: int


@dataclass
class PitchBendEvent:
    time: int
    channel: int
    value: int  # -8192 to 8191, 0 is centered


@dataclass
class TimeSignatureEvent:
    time: int
    numerator: int = 4
    denominator: int = 4


@dataclass
class KeySignatureEvent:
    time: int
    key: str = "C"


@dataclass
class SetTempoEvent:
    time: int
    tempo: int  # Microseconds per quarter note

    @property
    def qpm(self) -> float:
        return 60_000_000.0 / self.tempo


MIDIEvent = Union[
    NoteOnEvent,
    NoteOffEvent,
    ProgramChangeEvent,
    ControlChangeEvent,
    PitchBendEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    SetTempoEvent,
]
Track = List[MIDIEvent]


def to_absolute_time(track: Track) -> Track:
    """Return a copy of a relative-time track with absolute event times."""
    absolute = []
    time = 0
    for event in track:
        time += event.time
        absolute.append(replace(event, time=time))
    return absolute


def to_relative_time(track: Track) -> Track:
    """Return a copy of an absolute-time track with relative event times."""
    relative = []
    previous = 0
    for event in track:
        relative.append(replace(event, time=event.time - previous))
        previous = event.time
    return relative


def ms_per_tick(tpq: int, qpm: float) -> float:
    """Milliseconds per MIDI tick at the given resolution and tempo."""
    return 60_000.0 / (qpm * tpq)


def seconds_to_ticks(seconds: float, tpq: int, qpm: float) -> int:
    """Convert seconds to the nearest MIDI tick."""
    return int(round(seconds * 1e3 / ms_per_tick(tpq, qpm)))
