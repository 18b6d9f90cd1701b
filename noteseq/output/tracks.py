"""Serialize a NoteSequence back into raw MIDI event tracks."""

from collections import defaultdict
from typing import Dict, List, Tuple

from ..core import NoteSequence
from ..core.constants import DEFAULT_QPM, MIDI_CHANNELS
from ..input.events import (
    NoteOnEvent,
    NoteOffEvent,
    ProgramChangeEvent,
    ControlChangeEvent,
    PitchBendEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    SetTempoEvent,
    Track,
)

# Order of events sharing a time within a track.
_EVENT_ORDER = {
    SetTempoEvent: 0,
    TimeSignatureEvent: 0,
    KeySignatureEvent: 0,
    ProgramChangeEvent: 1,
    ControlChangeEvent: 2,
    PitchBendEvent: 2,
    NoteOffEvent: 3,
    NoteOnEvent: 4,
}


def _sorted(track: Track) -> Track:
    return sorted(track, key=lambda event: (event.time, _EVENT_ORDER[type(event)]))


def _time_scale(ns: NoteSequence) -> float:
    """Ticks per unit of note and control change time."""
    if not ns.is_quantized:
        return 1.0
    return ns.tpq * ns.qpm / 60.0 / ns.steps_per_second


def note_sequence_to_tracks(ns: NoteSequence) -> List[Track]:
    """
    Convert a NoteSequence into tracks of raw events in absolute ticks.

    The first track holds tempo, time signature and key signature events;
    a sequence without tempos gets the default 120 qpm. Each
    (instrument, program) pair then gets its own track on channel
    `index % 16`, starting with a program change. Note-offs precede
    note-ons at equal times so repeated pitches stay separate.

    Note and control change times of a quantized sequence are converted
    from steps to ticks at the sequence's tempo. Other events keep their
    tick times.

    Args:
        ns: Sequence to serialize

    Returns:
        List of tracks, meta track first
    """
    scale = _time_scale(ns)

    def ticks(time: float) -> int:
        return int(round(time * scale))

    meta: Track = []
    if ns.tempos:
        for tempo in ns.tempos:
            meta.append(SetTempoEvent(tempo.time, int(round(60_000_000 / tempo.qpm))))
    else:
        meta.append(SetTempoEvent(0, int(round(60_000_000 / DEFAULT_QPM))))
    for ts in ns.time_signatures:
        meta.append(TimeSignatureEvent(ts.time, ts.numerator, ts.denominator))
    for ks in ns.key_signatures:
        meta.append(KeySignatureEvent(ks.time, ks.key))

    keys = set()
    keys.update((note.instrument, note.program) for note in ns.notes)
    keys.update((cc.instrument, cc.program) for cc in ns.control_changes)
    keys.update((pb.instrument, pb.program) for pb in ns.pitch_bends)

    track_events: Dict[Tuple[int, int], Track] = defaultdict(list)
    channels = {key: index % MIDI_CHANNELS for index, key in enumerate(sorted(keys))}

    for key, channel in channels.items():
        track_events[key].append(ProgramChangeEvent(0, channel, key[1]))
    for cc in ns.control_changes:
        key = (cc.instrument, cc.program)
        track_events[key].append(
            ControlChangeEvent(ticks(cc.time), channels[key], cc.controller, cc.value)
        )
    for pb in ns.pitch_bends:
        key = (pb.instrument, pb.program)
        track_events[key].append(PitchBendEvent(pb.time, channels[key], pb.bend))
    for note in ns.notes:
        key = (note.instrument, note.program)
        channel = channels[key]
        track_events[key].append(
            NoteOnEvent(ticks(note.start_time), channel, note.pitch, note.velocity)
        )
        track_events[key].append(NoteOffEvent(ticks(note.end_time), channel, note.pitch))

    tracks = [_sorted(meta)]
    tracks.extend(_sorted(track_events[key]) for key in sorted(keys))
    return tracks
